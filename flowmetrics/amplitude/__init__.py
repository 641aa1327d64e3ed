"""Amplitude event mapping for activity and flow events.

Public API
----------
AmplitudeTransformer
    Maps event names plus request context onto ``AmplitudeEvent`` records.
AmplitudeEvent
    Outbound record handed to the metrics log.
RequestContext
    Typed view of the request fields the mapping reads.
create_amplitude_receiver
    Bind a transformer to a metrics log and return ``receive_event``.
find_descriptor
    Resolve an event name against the taxonomy.
category_to_email_type
    Look up the ``email_type`` label of an email template.
parse_app_version
    Derive ``app_version`` from a service version.
AmplitudeError
    Base exception for mapping errors.
AppVersionError
    Raised for unusable service versions.

"""

from __future__ import annotations

from flowmetrics.amplitude.errors import AmplitudeError, AppVersionError
from flowmetrics.amplitude.factory import create_amplitude_receiver
from flowmetrics.amplitude.models import AmplitudeEvent, RequestContext
from flowmetrics.amplitude.taxonomy import (
    EMAIL_TYPES,
    EVENTS,
    GROUPS,
    Group,
    category_to_email_type,
    find_descriptor,
)
from flowmetrics.amplitude.transformer import (
    AmplitudeSink,
    AmplitudeTransformer,
    ReceiveEvent,
)
from flowmetrics.amplitude.version import parse_app_version

__all__ = [
    "EMAIL_TYPES",
    "EVENTS",
    "GROUPS",
    "AmplitudeError",
    "AmplitudeEvent",
    "AmplitudeSink",
    "AmplitudeTransformer",
    "AppVersionError",
    "Group",
    "ReceiveEvent",
    "RequestContext",
    "category_to_email_type",
    "create_amplitude_receiver",
    "find_descriptor",
    "parse_app_version",
]
