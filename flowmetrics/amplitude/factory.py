"""Factory for binding the Amplitude transformer to a metrics log."""

from __future__ import annotations

import typing as typ

from flowmetrics.amplitude.transformer import AmplitudeTransformer
from flowmetrics.amplitude.version import parse_app_version
from flowmetrics.config import MetricsConfig

if typ.TYPE_CHECKING:
    from flowmetrics.amplitude.transformer import AmplitudeSink, ReceiveEvent


def create_amplitude_receiver(
    log: AmplitudeSink,
    *,
    service_version: str | None = None,
    config: MetricsConfig | None = None,
) -> ReceiveEvent:
    """Return a ``receive_event`` callable bound to ``log``.

    The app version is derived once here. An explicit ``service_version``
    wins over ``config``; with neither, configuration is read from the
    environment.

    Raises
    ------
    AppVersionError
        If the service version has no minor segment.
    MetricsConfigError
        If the version must come from the environment and cannot be found.

    Examples
    --------
    >>> receive_event = create_amplitude_receiver(log, service_version="1.96.0")
    >>> receive_event("account.created", request, {"uid": "abc"})

    """
    if service_version is None:
        service_version = (config or MetricsConfig.from_env()).service_version

    transformer = AmplitudeTransformer(
        log, app_version=parse_app_version(service_version)
    )
    return transformer.receive_event
