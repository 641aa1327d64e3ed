"""Log outbound email lifecycle events from email message metadata.

Email messages carry their locale, template, flow and device identifiers in
headers. These helpers read them back and emit both an ``emailEvent`` log
line and the matching ``email.<template>.<type>`` Amplitude event.
"""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

from flowmetrics.common.time import now_ms

if typ.TYPE_CHECKING:
    from flowmetrics.amplitude.transformer import ReceiveEvent
    from flowmetrics.metrics_log import MetricsLog

Message = cabc.Mapping[str, typ.Any]

_OTHER_DOMAIN = "other"

POPULAR_EMAIL_DOMAINS = frozenset(
    {
        "aol.com",
        "comcast.net",
        "gmail.com",
        "gmx.de",
        "googlemail.com",
        "hotmail.com",
        "hotmail.co.uk",
        "hotmail.fr",
        "icloud.com",
        "live.com",
        "mail.ru",
        "me.com",
        "msn.com",
        "outlook.com",
        "qq.com",
        "web.de",
        "yahoo.co.uk",
        "yahoo.com",
        "yahoo.fr",
        "yandex.ru",
    }
)


def get_header_value(name: str, message: Message) -> str | None:
    """Return a message header value, matching the name case-insensitively.

    Headers are read from ``message["mail"]["headers"]`` when present (SES
    notifications), otherwise from ``message["headers"]``. Both a list of
    ``{"name": ..., "value": ...}`` entries and a plain mapping are accepted.

    Examples
    --------
    >>> get_header_value("Content-Language", {"headers": {"content-language": "ru"}})
    'ru'

    """
    mail = message.get("mail")
    if isinstance(mail, cabc.Mapping):
        headers = mail.get("headers")
    else:
        headers = message.get("headers")

    target = name.lower()
    if isinstance(headers, cabc.Mapping):
        for key, value in headers.items():
            if str(key).lower() == target:
                return value
        return None

    if isinstance(headers, cabc.Sequence) and not isinstance(headers, str):
        for header in headers:
            if (
                isinstance(header, cabc.Mapping)
                and str(header.get("name", "")).lower() == target
            ):
                return header.get("value")
    return None


def anonymize_email_domain(email: str) -> str:
    """Return the domain of ``email`` if it is a popular provider, else ``other``."""
    _, _, domain = email.rpartition("@")
    domain = domain.strip().lower()
    if domain in POPULAR_EMAIL_DOMAINS:
        return domain
    return _OTHER_DOMAIN


def _recipients(message: Message) -> list[str]:
    recipients = [message["email"]] if message.get("email") else []
    recipients.extend(message.get("ccEmails") or ())
    return recipients


def _log_amplitude_event(
    receive_event: ReceiveEvent,
    message: Message,
    template: str,
    event_type: str,
) -> None:
    receive_event(
        f"email.{template}.{event_type}",
        {
            "app": {
                "locale": get_header_value("Content-Language", message)
                or message.get("locale"),
                "ua": {},
            },
            "auth": {},
            "query": {},
            "payload": {},
        },
        {
            "device_id": get_header_value("X-Device-Id", message)
            or message.get("deviceId"),
            "service": get_header_value("X-Service-Id", message)
            or message.get("service"),
            "uid": get_header_value("X-Uid", message) or message.get("uid"),
        },
        {
            "flow_id": get_header_value("X-Flow-Id", message) or message.get("flowId"),
            "flowBeginTime": get_header_value("X-Flow-Begin-Time", message)
            or message.get("flowBeginTime"),
            "time": now_ms(),
        },
    )


def log_email_event_sent(
    log: MetricsLog,
    message: Message,
    *,
    receive_event: ReceiveEvent,
) -> None:
    """Log a sent email: one line per recipient and one Amplitude event.

    Parameters
    ----------
    log
        Metrics log receiving the ``emailEvent`` lines.
    message
        Outbound email metadata with ``email``, optional ``ccEmails``,
        ``template`` and headers.
    receive_event
        Amplitude receiver built once at start-up with
        :func:`flowmetrics.amplitude.create_amplitude_receiver`.

    """
    template = message.get("template")
    locale = message.get("acceptLanguage") or get_header_value(
        "Content-Language", message
    )
    flow_id = message.get("flowId") or get_header_value("X-Flow-Id", message)

    for recipient in _recipients(message):
        log.info(
            "emailEvent",
            domain=anonymize_email_domain(recipient),
            locale=locale,
            template=template,
            type="sent",
            flow_id=flow_id,
        )

    if template:
        _log_amplitude_event(receive_event, message, template, "sent")


def log_email_event_from_message(
    log: MetricsLog,
    message: Message,
    event_type: str,
    email_domain: str,
    *,
    receive_event: ReceiveEvent,
) -> None:
    """Log a delivery notification (bounce, complaint, delivery) for a message.

    Messages without an ``X-Template-Name`` header are ignored.
    """
    template = get_header_value("X-Template-Name", message)
    if not template:
        return

    fields: dict[str, typ.Any] = {
        "template": template,
        "type": event_type,
        "domain": email_domain,
    }
    flow_id = get_header_value("X-Flow-Id", message)
    if flow_id:
        fields["flow_id"] = flow_id
    locale = get_header_value("Content-Language", message)
    if locale:
        fields["locale"] = locale

    log.info("emailEvent", **fields)

    _log_amplitude_event(receive_event, message, template, event_type)
