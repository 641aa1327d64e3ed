"""Derive the Amplitude ``app_version`` from the service version."""

from __future__ import annotations

import re

from flowmetrics.amplitude.errors import AppVersionError

_VERSION_PATTERN = re.compile(r"^[0-9]+\.([0-9]+)\.")


def parse_app_version(version: str) -> str:
    """Return the minor segment of a ``MAJOR.MINOR.PATCH`` version string.

    Examples
    --------
    >>> parse_app_version("1.96.4")
    '96'

    Raises
    ------
    AppVersionError
        If the version does not start with ``MAJOR.MINOR.``.

    """
    match = _VERSION_PATTERN.match(version)
    if match is None:
        raise AppVersionError.invalid(version)
    return match.group(1)
