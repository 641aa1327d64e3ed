"""Configuration for the metrics log and Amplitude transformer.

Usage
-----
Create a configuration explicitly:

>>> config = MetricsConfig(service_version="1.96.0")
>>> config.service_name
'fxa-auth-server'

Or load from environment variables:

>>> import os
>>> os.environ["FLOWMETRICS_SERVICE_VERSION"] = "1.97.2"
>>> MetricsConfig.from_env().service_version
'1.97.2'

"""

from __future__ import annotations

import dataclasses as dc
import os
from importlib import metadata

from flowmetrics.errors import MetricsConfigError

DISTRIBUTION_NAME = "flowmetrics"
DEFAULT_SERVICE_NAME = "fxa-auth-server"
DEFAULT_LOG_LEVEL = "INFO"


def _installed_version(distribution: str) -> str:
    try:
        return metadata.version(distribution)
    except metadata.PackageNotFoundError as exc:
        raise MetricsConfigError.missing_version(distribution) from exc


@dc.dataclass(frozen=True, slots=True)
class MetricsConfig:
    """Settings shared by the metrics log and the Amplitude transformer.

    Attributes
    ----------
    service_version
        Semantic version of the host service. Its minor segment becomes the
        ``app_version`` of every Amplitude event.
    service_name
        Logger name used for metrics output. Default is
        ``fxa-auth-server``.
    log_level
        Raw log level string; normalized when logging is configured.

    """

    service_version: str
    service_name: str = DEFAULT_SERVICE_NAME
    log_level: str = DEFAULT_LOG_LEVEL

    @staticmethod
    def _read(env_var: str, default: str | None = None) -> str | None:
        """Read a stripped env var, treating blank values as unset."""
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return default
        return raw.strip()

    @classmethod
    def from_env(cls) -> MetricsConfig:
        """Create configuration from environment variables.

        Reads the following environment variables:

        - ``FLOWMETRICS_SERVICE_VERSION``: Host service version. Defaults to
          the installed ``flowmetrics`` distribution version.
        - ``FLOWMETRICS_SERVICE_NAME``: Logger name for metrics output.
        - ``FLOWMETRICS_LOG_LEVEL``: Log level (default ``INFO``).

        Returns
        -------
        MetricsConfig
            Configuration instance with values from environment or defaults.

        Raises
        ------
        MetricsConfigError
            If no version is set and the distribution metadata is missing.

        """
        version = cls._read("FLOWMETRICS_SERVICE_VERSION")
        if version is None:
            version = _installed_version(DISTRIBUTION_NAME)

        return cls(
            service_version=version,
            service_name=cls._read("FLOWMETRICS_SERVICE_NAME", DEFAULT_SERVICE_NAME)
            or DEFAULT_SERVICE_NAME,
            log_level=cls._read("FLOWMETRICS_LOG_LEVEL", DEFAULT_LOG_LEVEL)
            or DEFAULT_LOG_LEVEL,
        )
