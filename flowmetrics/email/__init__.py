"""Email lifecycle event logging.

Public API
----------
get_header_value
    Case-insensitive email header lookup.
anonymize_email_domain
    Reduce a recipient address to a popular domain or ``other``.
log_email_event_sent
    Log a sent email and its Amplitude event.
log_email_event_from_message
    Log a delivery notification and its Amplitude event.

"""

from __future__ import annotations

from flowmetrics.email.helpers import (
    anonymize_email_domain,
    get_header_value,
    log_email_event_from_message,
    log_email_event_sent,
)

__all__ = [
    "anonymize_email_domain",
    "get_header_value",
    "log_email_event_from_message",
    "log_email_event_sent",
]
