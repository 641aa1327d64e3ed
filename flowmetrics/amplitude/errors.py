"""Custom exceptions for Amplitude event mapping."""

from __future__ import annotations


class AmplitudeError(Exception):
    """Base exception for Amplitude mapping errors.

    Bad event input never raises; these errors cover start-up problems
    such as an unusable service version.
    """


class AppVersionError(AmplitudeError, ValueError):
    """Raised when the service version cannot yield an ``app_version``."""

    @classmethod
    def invalid(cls, version: str) -> AppVersionError:
        """Create error for a version string without a minor segment.

        Parameters
        ----------
        version
            The rejected version string.

        Returns
        -------
        AppVersionError
            Error naming the expected ``MAJOR.MINOR.PATCH`` shape.

        """
        msg = f"Service version {version!r} does not match MAJOR.MINOR.PATCH"
        return cls(msg)
