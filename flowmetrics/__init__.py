"""Normalize activity and flow events into Amplitude analytics records.

Public API
----------
AmplitudeTransformer
    Maps raw event names and request context onto Amplitude events.
create_amplitude_receiver
    Build a ``receive_event`` callable bound to a metrics log.
MetricsConfig
    Environment-driven configuration for the metrics log and transformer.
MetricsLog
    Structured logging sink with semantic metrics helpers.
create_metrics_log
    Configure femtologging and return a ``MetricsLog``.

Examples
--------
>>> from flowmetrics import create_amplitude_receiver, MetricsLog
>>> receive_event = create_amplitude_receiver(
...     MetricsLog(), service_version="1.96.0"
... )
>>> receive_event("account.created", {"auth": {}}, {"uid": "abc"})

"""

from __future__ import annotations

from flowmetrics.amplitude import AmplitudeTransformer, create_amplitude_receiver
from flowmetrics.config import MetricsConfig
from flowmetrics.metrics_log import MetricsLog, create_metrics_log

__all__ = [
    "AmplitudeTransformer",
    "MetricsConfig",
    "MetricsLog",
    "create_amplitude_receiver",
    "create_metrics_log",
]
