"""Amplitude event taxonomy for activity and flow events.

Maps well-known event names to Amplitude groups and event names. Most names
are looked up in a literal table; outbound email lifecycle events are
matched by pattern and only forwarded for registered email templates.
Names that match neither are intentionally not sent to Amplitude.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses
import enum
import re
import types
import typing as typ

from flowmetrics.amplitude.identifiers import uid_from

if typ.TYPE_CHECKING:
    from flowmetrics.amplitude.models import RequestContext

Properties = dict[str, typ.Any]
PropertyExtractor = typ.Callable[
    ["RequestContext", cabc.Mapping[str, typ.Any], cabc.Mapping[str, typ.Any]],
    Properties,
]
GroupResolver = typ.Callable[
    ["RequestContext", cabc.Mapping[str, typ.Any], cabc.Mapping[str, typ.Any]],
    "Group | None",
]


class Group(enum.StrEnum):
    """Amplitude event groups, used as the ``event_type`` prefix."""

    ACTIVITY = "fxa_activity"
    EMAIL = "fxa_email"
    LOGIN = "fxa_login"
    REGISTRATION = "fxa_reg"
    SMS = "fxa_sms"


GROUPS: cabc.Mapping[str, Group] = types.MappingProxyType(
    {
        "activity": Group.ACTIVITY,
        "email": Group.EMAIL,
        "login": Group.LOGIN,
        "registration": Group.REGISTRATION,
        "sms": Group.SMS,
    }
)


@dataclasses.dataclass(frozen=True, slots=True)
class FixedGroup:
    """Group declared statically in the taxonomy."""

    group: Group


@dataclasses.dataclass(frozen=True, slots=True)
class DynamicGroup:
    """Group computed at call time from the request context."""

    resolver: GroupResolver


@dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class EventDescriptor:
    """Classification rule for one recognized event name.

    Attributes
    ----------
    group
        Fixed group, or a resolver that may decline to pick one.
    event
        Second half of the Amplitude ``event_type``.
    event_category
        Optional sub-kind passed through to property extraction, such as
        the email template behind an email event.

    """

    group: FixedGroup | DynamicGroup
    event: str
    event_category: str | None = None


def _group_from_flow_type(
    request: RequestContext,
    data: cabc.Mapping[str, typ.Any],
    metrics_context: cabc.Mapping[str, typ.Any],
) -> Group | None:
    del request, data
    flow_type = metrics_context.get("flowType")
    if not isinstance(flow_type, str):
        return None
    return GROUPS.get(flow_type)


def _fixed(group: Group, event: str) -> EventDescriptor:
    return EventDescriptor(group=FixedGroup(group), event=event)


EVENTS: cabc.Mapping[str, EventDescriptor] = types.MappingProxyType(
    {
        "account.confirmed": _fixed(Group.LOGIN, "email_confirmed"),
        "account.created": _fixed(Group.REGISTRATION, "created"),
        "account.login": _fixed(Group.LOGIN, "success"),
        "account.login.blocked": _fixed(Group.LOGIN, "blocked"),
        "account.login.confirmedUnblockCode": _fixed(Group.LOGIN, "unblock_success"),
        "account.reset": _fixed(Group.LOGIN, "forgot_complete"),
        "account.signed": _fixed(Group.ACTIVITY, "cert_signed"),
        "account.verified": _fixed(Group.REGISTRATION, "email_confirmed"),
        "flow.complete": EventDescriptor(
            group=DynamicGroup(_group_from_flow_type), event="complete"
        ),
        "sms.installFirefox.sent": _fixed(Group.SMS, "sent"),
    }
)

EMAIL_EVENTS = re.compile(r"^email\.(\w+)\.(bounced|sent)$")

EMAIL_TYPES: cabc.Mapping[str, str] = types.MappingProxyType(
    {
        "newDeviceLoginEmail": "login",
        "passwordChangedEmail": "change_password",
        "passwordResetEmail": "reset_password",
        "passwordResetRequiredEmail": "reset_password",
        "postRemoveSecondaryEmail": "secondary_email",
        "postVerifyEmail": "registration",
        "postVerifySecondaryEmail": "secondary_email",
        "recoveryEmail": "reset_password",
        "unblockCode": "unblock",
        "verificationReminderFirstEmail": "registration",
        "verificationReminderSecondEmail": "registration",
        "verificationReminderEmail": "registration",
        "verifyEmail": "registration",
        "verifyLoginEmail": "login",
        "verifySyncEmail": "registration",
        "verifySecondaryEmail": "secondary_email",
    }
)


def category_to_email_type(category: str | None) -> str | None:
    """Return the ``email_type`` label for an email template, if registered."""
    if category is None:
        return None
    return EMAIL_TYPES.get(category)


def find_descriptor(event_name: str) -> EventDescriptor | None:
    """Resolve an event name against the taxonomy.

    The literal table wins over the email pattern. Email events for
    templates missing from ``EMAIL_TYPES`` resolve to ``None``.

    Examples
    --------
    >>> find_descriptor("email.verifyEmail.sent").event
    'sent'
    >>> find_descriptor("email.someOtherTemplate.sent") is None
    True

    """
    descriptor = EVENTS.get(event_name)
    if descriptor is not None:
        return descriptor

    matched = EMAIL_EVENTS.match(event_name)
    if matched is None:
        return None

    category, verb = matched.group(1, 2)
    if category_to_email_type(category) is None:
        return None

    return EventDescriptor(
        group=FixedGroup(Group.EMAIL),
        event=verb,
        event_category=category,
    )


def resolve_group(
    descriptor: EventDescriptor,
    request: RequestContext,
    data: cabc.Mapping[str, typ.Any],
    metrics_context: cabc.Mapping[str, typ.Any],
) -> Group | None:
    """Return the concrete group for a descriptor, or ``None`` to drop."""
    match descriptor.group:
        case FixedGroup(group=group):
            return group
        case DynamicGroup(resolver=resolver):
            return resolver(request, data, metrics_context)


def _nop(
    request: RequestContext,
    data: cabc.Mapping[str, typ.Any],
    metrics_context: cabc.Mapping[str, typ.Any],
) -> Properties:
    del request, data, metrics_context
    return {}


def _map_email_type(
    request: RequestContext,
    data: cabc.Mapping[str, typ.Any],
    metrics_context: cabc.Mapping[str, typ.Any],
) -> Properties:
    del request, metrics_context
    email_type = category_to_email_type(data.get("eventCategory"))
    if email_type is None:
        return {}
    return {"email_type": email_type}


def _map_uid(
    request: RequestContext,
    data: cabc.Mapping[str, typ.Any],
    metrics_context: cabc.Mapping[str, typ.Any],
) -> Properties:
    del metrics_context
    return {"fxa_uid": uid_from(request, data)}


EVENT_PROPERTIES: cabc.Mapping[Group, PropertyExtractor] = types.MappingProxyType(
    {
        Group.ACTIVITY: _nop,
        Group.EMAIL: _map_email_type,
        Group.LOGIN: _nop,
        Group.REGISTRATION: _nop,
        Group.SMS: _nop,
    }
)

USER_PROPERTIES: cabc.Mapping[Group, PropertyExtractor] = types.MappingProxyType(
    {
        Group.ACTIVITY: _map_uid,
        Group.EMAIL: _map_uid,
        Group.LOGIN: _map_uid,
        Group.REGISTRATION: _map_uid,
        Group.SMS: _nop,
    }
)
