"""Transform activity and flow events into Amplitude events.

``AmplitudeTransformer.receive_event`` is invoked for every activity or
flow event. The taxonomy decides which of them become Amplitude events;
everything else is dropped without logging. Bad arguments are reported
through the metrics log error channel and never raised to the caller.

Usage
-----
>>> transformer = AmplitudeTransformer(metrics_log, app_version="96")
>>> transformer.receive_event(
...     "account.login",
...     request,
...     {"service": "sync"},
...     {"flow_id": "abc", "flowBeginTime": 1500000000000},
... )

"""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

import msgspec

from flowmetrics.amplitude.identifiers import (
    device_id_from,
    first_of,
    flow_id_from,
    session_id_from,
    uid_from,
)
from flowmetrics.amplitude.models import AmplitudeEvent, RequestContext, coerce_request
from flowmetrics.amplitude.taxonomy import (
    EVENT_PROPERTIES,
    USER_PROPERTIES,
    find_descriptor,
    resolve_group,
)
from flowmetrics.common.time import now_ms

if typ.TYPE_CHECKING:
    from flowmetrics.amplitude.taxonomy import Group

_OP = "amplitudeMetrics"

RequestLike = RequestContext | cabc.Mapping[str, typ.Any]


class AmplitudeSink(typ.Protocol):
    """Metrics log capabilities used by the transformer."""

    def amplitude_event(self, event: AmplitudeEvent) -> None:
        """Validate and emit one Amplitude event."""
        ...

    def error(self, op: str, /, **fields: object) -> None:
        """Report a structured error."""
        ...


class ReceiveEvent(typ.Protocol):
    """Callable signature of :meth:`AmplitudeTransformer.receive_event`."""

    def __call__(
        self,
        event_name: str | None,
        request: RequestLike | None,
        data: cabc.Mapping[str, typ.Any] | None = None,
        metrics_context: cabc.Mapping[str, typ.Any] | None = None,
    ) -> None:
        """Map one event and forward it to the metrics log."""
        ...


class AmplitudeTransformer:
    """Map raw event names plus request context onto Amplitude events.

    Parameters
    ----------
    log
        Metrics log receiving mapped events and argument errors.
    app_version
        Minor segment of the host service version, computed once by the
        caller (see :func:`flowmetrics.amplitude.version.parse_app_version`).
    clock
        Source of the default event time in epoch milliseconds.

    """

    def __init__(
        self,
        log: AmplitudeSink,
        *,
        app_version: str,
        clock: cabc.Callable[[], int] = now_ms,
    ) -> None:
        """Bind the transformer to a metrics log and fixed app version."""
        self._log = log
        self._app_version = app_version
        self._clock = clock

    @property
    def app_version(self) -> str:
        """Return the ``app_version`` stamped on every event."""
        return self._app_version

    def receive_event(
        self,
        event_name: str | None,
        request: RequestLike | None,
        data: cabc.Mapping[str, typ.Any] | None = None,
        metrics_context: cabc.Mapping[str, typ.Any] | None = None,
    ) -> None:
        """Map one event and forward it to the metrics log.

        Parameters
        ----------
        event_name
            Activity or flow event name, e.g. ``account.created``.
        request
            Request the event belongs to, as a ``RequestContext`` or a
            mapping with the same shape.
        data
            Free-form event data. Never mutated.
        metrics_context
            Flow identifiers gathered earlier in request handling.

        """
        if not event_name or request is None:
            self._log.error(
                _OP,
                err="Bad argument",
                event=event_name,
                has_request=request is not None,
            )
            return

        try:
            context = coerce_request(request)
        except (msgspec.ValidationError, TypeError) as exc:
            self._log.error(
                _OP,
                err="Invalid request",
                event=event_name,
                detail=str(exc),
            )
            return

        descriptor = find_descriptor(event_name)
        if descriptor is None:
            return

        event_data = dict(data or {})
        metrics = metrics_context or {}
        group = resolve_group(descriptor, context, event_data, metrics)
        if group is None:
            return

        if descriptor.event_category is not None:
            event_data["eventCategory"] = descriptor.event_category

        self._log.amplitude_event(
            AmplitudeEvent(
                time=first_of(metrics.get("time"), self._clock),
                user_id=uid_from(context, event_data),
                device_id=device_id_from(context, metrics),
                event_type=f"{group} - {descriptor.event}",
                session_id=session_id_from(context, metrics),
                event_properties=_event_properties(group, context, event_data, metrics),
                user_properties=_user_properties(group, context, event_data, metrics),
                app_version=self._app_version,
                language=context.app.locale or None,
            )
        )


def _service_from(
    request: RequestContext, data: cabc.Mapping[str, typ.Any]
) -> typ.Any:  # noqa: ANN401
    return (
        data.get("service")
        or request.query.get("service")
        or request.payload.get("service")
    )


def _event_properties(
    group: Group,
    request: RequestContext,
    data: cabc.Mapping[str, typ.Any],
    metrics_context: cabc.Mapping[str, typ.Any],
) -> dict[str, typ.Any]:
    return {
        "device_id": device_id_from(request, metrics_context),
        "service": _service_from(request, data),
        **EVENT_PROPERTIES[group](request, data, metrics_context),
    }


def _user_properties(
    group: Group,
    request: RequestContext,
    data: cabc.Mapping[str, typ.Any],
    metrics_context: cabc.Mapping[str, typ.Any],
) -> dict[str, typ.Any]:
    ua = request.app.ua
    return {
        "flow_id": flow_id_from(request, metrics_context),
        "ua_browser": ua.browser,
        "ua_version": ua.browser_version,
        "ua_os": ua.os,
        **USER_PROPERTIES[group](request, data, metrics_context),
    }
