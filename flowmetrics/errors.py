"""Errors raised while configuring flowmetrics."""

from __future__ import annotations


class MetricsConfigError(Exception):
    """Raised when environment configuration is unusable."""

    @classmethod
    def missing_version(cls, distribution: str) -> MetricsConfigError:
        """Create error when no service version can be determined.

        Parameters
        ----------
        distribution
            Distribution name whose installed metadata was consulted.

        Returns
        -------
        MetricsConfigError
            Error pointing at ``FLOWMETRICS_SERVICE_VERSION``.

        """
        msg = (
            "FLOWMETRICS_SERVICE_VERSION is not set and distribution "
            f"{distribution!r} is not installed"
        )
        return cls(msg)
