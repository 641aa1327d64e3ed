"""Shared fixtures for flowmetrics tests."""

from __future__ import annotations

import typing as typ

import pytest

from flowmetrics.amplitude import AmplitudeTransformer
from tests.helpers.sinks import RecordingSink

FIXED_NOW_MS = 1_700_000_000_000
APP_VERSION = "96"


@pytest.fixture
def sink() -> RecordingSink:
    """Return an empty recording sink."""
    return RecordingSink()


@pytest.fixture
def transformer(sink: RecordingSink) -> AmplitudeTransformer:
    """Return a transformer with a fixed clock bound to ``sink``."""
    return AmplitudeTransformer(
        sink, app_version=APP_VERSION, clock=lambda: FIXED_NOW_MS
    )


@pytest.fixture
def minimal_request() -> dict[str, typ.Any]:
    """Return the smallest request shape accepted by the transformer."""
    return {"auth": {}, "query": {}, "payload": {}, "app": {"ua": {}}}


@pytest.fixture
def full_request() -> dict[str, typ.Any]:
    """Return a request populated with credentials, payload and user agent."""
    return {
        "auth": {"credentials": {"uid": "credentials-uid"}},
        "query": {"service": "query-service"},
        "payload": {
            "service": "payload-service",
            "metricsContext": {
                "deviceId": "payload-device",
                "flowBeginTime": 1_600_000_000_000,
                "flowId": "payload-flow",
            },
        },
        "app": {
            "locale": "en-GB",
            "ua": {"browser": "Firefox", "browserVersion": "120", "os": "Linux"},
        },
    }
