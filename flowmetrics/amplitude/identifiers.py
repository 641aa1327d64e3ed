"""Identifier lookups shared by the transformer and property extractors.

Each identifier prefers a value supplied directly by the caller and falls
back to a copy nested in the request.
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from flowmetrics.amplitude.models import RequestContext


def first_of(primary: typ.Any, fallback: cabc.Callable[[], typ.Any]) -> typ.Any:  # noqa: ANN401
    """Return ``primary`` when truthy, otherwise the result of ``fallback``."""
    if primary:
        return primary
    return fallback()


def uid_from(
    request: RequestContext, data: cabc.Mapping[str, typ.Any]
) -> typ.Any:  # noqa: ANN401
    """Return ``data["uid"]``, else the uid of the authenticated credentials."""
    return first_of(data.get("uid"), lambda: request.credentials.get("uid"))


def from_metrics_context(
    metrics_context: cabc.Mapping[str, typ.Any],
    key: str,
    request: RequestContext,
    payload_key: str,
) -> typ.Any:  # noqa: ANN401
    """Return ``metrics_context[key]``, else the payload metrics context value."""
    return first_of(
        metrics_context.get(key),
        lambda: request.payload_metrics_context.get(payload_key),
    )


def device_id_from(
    request: RequestContext, metrics_context: cabc.Mapping[str, typ.Any]
) -> typ.Any:  # noqa: ANN401
    """Return the device id from the metrics context or request payload."""
    return from_metrics_context(metrics_context, "device_id", request, "deviceId")


def session_id_from(
    request: RequestContext, metrics_context: cabc.Mapping[str, typ.Any]
) -> typ.Any:  # noqa: ANN401
    """Return the flow begin time used as the Amplitude session id."""
    return from_metrics_context(
        metrics_context, "flowBeginTime", request, "flowBeginTime"
    )


def flow_id_from(
    request: RequestContext, metrics_context: cabc.Mapping[str, typ.Any]
) -> typ.Any:  # noqa: ANN401
    """Return the flow id from the metrics context or request payload."""
    return from_metrics_context(metrics_context, "flow_id", request, "flowId")
