"""Typed request context and outbound Amplitude event structures."""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

import msgspec


class UserAgent(msgspec.Struct, kw_only=True, frozen=True):
    """Parsed user-agent fields attached to a request."""

    browser: str | None = None
    browser_version: str | None = msgspec.field(default=None, name="browserVersion")
    os: str | None = None


class AppContext(msgspec.Struct, kw_only=True, frozen=True):
    """Application-level request state resolved by the web layer.

    Attributes
    ----------
    locale
        Resolved request locale, if any.
    ua
        Parsed user agent; empty when the request carried none.

    """

    locale: str | None = None
    ua: UserAgent = msgspec.field(default_factory=UserAgent)


class RequestContext(msgspec.Struct, kw_only=True, frozen=True):
    """Read-only view of the request fields used for event mapping.

    Every field defaults to empty so partially populated requests, such as
    the synthetic requests built for outbound email events, never fail
    attribute access.

    Attributes
    ----------
    auth
        Authentication state; ``auth["credentials"]["uid"]`` is the
        authenticated user when present.
    query
        Parsed query string.
    payload
        Parsed request body; may carry a nested ``metricsContext``.
    app
        Locale and user-agent state.

    """

    auth: dict[str, typ.Any] = msgspec.field(default_factory=dict)
    query: dict[str, typ.Any] = msgspec.field(default_factory=dict)
    payload: dict[str, typ.Any] = msgspec.field(default_factory=dict)
    app: AppContext = msgspec.field(default_factory=AppContext)

    @property
    def credentials(self) -> cabc.Mapping[str, typ.Any]:
        """Return the authenticated credentials, or an empty mapping."""
        credentials = self.auth.get("credentials")
        if isinstance(credentials, cabc.Mapping):
            return credentials
        return {}

    @property
    def payload_metrics_context(self) -> cabc.Mapping[str, typ.Any]:
        """Return the ``metricsContext`` nested in the payload, or empty."""
        nested = self.payload.get("metricsContext")
        if isinstance(nested, cabc.Mapping):
            return nested
        return {}


def _without_nulls(mapping: cabc.Mapping[str, typ.Any]) -> dict[str, typ.Any]:
    return {key: value for key, value in mapping.items() if value is not None}


def coerce_request(
    request: RequestContext | cabc.Mapping[str, typ.Any],
) -> RequestContext:
    """Return ``request`` as a :class:`RequestContext`.

    Sections that are present but ``None``, such as the payload of a GET
    request, are treated as absent.

    Raises
    ------
    msgspec.ValidationError
        If a mapping does not fit the request shape.
    TypeError
        If ``request`` is neither a ``RequestContext`` nor a mapping.

    """
    if isinstance(request, RequestContext):
        return request
    if not isinstance(request, cabc.Mapping):
        msg = f"request must be a mapping, got {type(request).__name__}"
        raise TypeError(msg)
    fields = _without_nulls(request)
    app = fields.get("app")
    if isinstance(app, cabc.Mapping):
        fields["app"] = _without_nulls(app)
    return msgspec.convert(fields, type=RequestContext)


class AmplitudeEvent(msgspec.Struct, kw_only=True, frozen=True, omit_defaults=True):
    """Canonical Amplitude record handed to the metrics log.

    Attributes
    ----------
    time
        Event time in milliseconds since the epoch.
    event_type
        ``"<group> - <event>"``.
    user_id
        Account identifier, when known.
    device_id
        Device identifier from the metrics context, when known.
    session_id
        Flow begin time, used by Amplitude as the session key.
    event_properties
        Base event properties merged with group-specific extras.
    user_properties
        Flow and user-agent properties merged with group-specific extras.
    app_version
        Minor segment of the host service version.
    language
        Resolved request locale.

    """

    time: int
    event_type: str
    app_version: str
    user_id: str | None = None
    device_id: str | None = None
    session_id: typ.Any = None
    event_properties: dict[str, typ.Any] = msgspec.field(default_factory=dict)
    user_properties: dict[str, typ.Any] = msgspec.field(default_factory=dict)
    language: str | None = None

    def to_dict(self) -> dict[str, typ.Any]:
        """Convert to builtins for JSON logging, omitting unset fields."""
        return typ.cast("dict[str, typ.Any]", msgspec.to_builtins(self))
