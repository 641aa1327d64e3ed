"""Structured metrics log with semantic helpers.

``MetricsLog`` takes an operation name plus arbitrary attributes and emits
one femtologging line per call, rendered as ``[op] {json}``. The semantic
helpers (activity, flow and Amplitude events, request summaries) validate
their records and report malformed ones on the error channel instead of
emitting them.

Usage
-----
>>> log = MetricsLog()
>>> log.info("emailEvent", template="verifyEmail", type="sent")
>>> log.amplitude_event(event)

"""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

import msgspec

from flowmetrics.amplitude.models import AmplitudeEvent
from flowmetrics.common.time import now_ms
from flowmetrics.config import DEFAULT_SERVICE_NAME, MetricsConfig
from flowmetrics.logging import (
    LogLevel,
    configure_logging,
    get_logger,
    log_at,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    from flowmetrics.logging import SupportsLog

_HTTP_SERVER_ERROR_THRESHOLD = 500
_ANONYMOUS_UID = "00"

_encoder = msgspec.json.Encoder(enc_hook=str, order="sorted")


def render_fields(op: str, fields: cabc.Mapping[str, typ.Any]) -> str:
    """Render an operation and its attributes as ``[op] {json}``."""
    return f"[{op}] {_encoder.encode(dict(fields)).decode()}"


def _as_dict(record: object) -> dict[str, typ.Any] | None:
    if isinstance(record, AmplitudeEvent):
        return record.to_dict()
    if isinstance(record, cabc.Mapping):
        return dict(record)
    return None


def _missing_any(record: cabc.Mapping[str, typ.Any], *keys: str) -> bool:
    return any(not record.get(key) for key in keys)


class MetricsLog:
    """Leveled structured logger for metrics and request telemetry.

    Parameters
    ----------
    name
        Logger name, typically the service name.
    logger
        femtologging-compatible logger. Defaults to ``get_logger(name)``.
    clock
        Source of epoch milliseconds for request summary durations.

    """

    def __init__(
        self,
        name: str = DEFAULT_SERVICE_NAME,
        *,
        logger: SupportsLog | None = None,
        clock: cabc.Callable[[], int] = now_ms,
    ) -> None:
        """Bind to the named femtologging logger."""
        self.name = name
        self._logger = logger if logger is not None else get_logger(name)
        self._clock = clock

    def _emit(self, level: str, op: str, fields: cabc.Mapping[str, typ.Any]) -> None:
        log_at(self._logger, level, render_fields(op, fields))

    def trace(self, op: str, /, **fields: object) -> None:
        """Log at debug level; used for chatty diagnostics."""
        self._emit(LogLevel.DEBUG, op, fields)

    def info(self, op: str, /, **fields: object) -> None:
        """Log at info level."""
        self._emit(LogLevel.INFO, op, fields)

    def warn(self, op: str, /, **fields: object) -> None:
        """Log at warning level."""
        self._emit(LogLevel.WARNING, op, fields)

    def error(self, op: str, /, **fields: object) -> None:
        """Log at error level.

        An ``email`` key inside an ``err`` mapping is lifted to the top level
        and cleared inside ``err`` so the PII scrubber can find it.
        """
        err = fields.get("err")
        if isinstance(err, cabc.Mapping) and err.get("email"):
            if not fields.get("email"):
                fields["email"] = err["email"]
            fields["err"] = {**err, "email": None}
        self._emit(LogLevel.ERROR, op, fields)

    def fatal(self, op: str, /, **fields: object) -> None:
        """Log at critical level."""
        self._emit(LogLevel.CRITICAL, op, fields)

    def begin(self, op: str) -> None:
        """Mark the start of an operation at debug level."""
        self._emit(LogLevel.DEBUG, op, {})

    def stat(self, **stats: object) -> None:
        """Log a statistics line at info level."""
        self._emit(LogLevel.INFO, "stat", stats)

    def activity_event(self, data: cabc.Mapping[str, typ.Any] | None) -> None:
        """Log an activity event: a key point of user interaction.

        Records need ``event`` and ``uid``; anything else is reported as an
        error and dropped.
        """
        if not data or _missing_any(data, "event", "uid"):
            self.error("log.activityEvent", data=data)
            return
        self._emit(LogLevel.INFO, "activityEvent", data)

    def flow_event(self, data: cabc.Mapping[str, typ.Any] | None) -> None:
        """Log a flow event describing a step of a sign-in or sign-up flow.

        Records need ``event``, ``flow_id``, ``flow_time`` and ``time``.
        """
        if not data or _missing_any(data, "event", "flow_id", "flow_time", "time"):
            self.error("log.flowEvent", data=data)
            return
        self._emit(LogLevel.INFO, "flowEvent", data)

    def amplitude_event(
        self, event: AmplitudeEvent | cabc.Mapping[str, typ.Any] | None
    ) -> None:
        """Log an Amplitude event.

        The record needs an ``event_type`` and at least one of ``device_id``
        or ``user_id``.
        """
        record = _as_dict(event)
        if (
            not record
            or not record.get("event_type")
            or not (record.get("device_id") or record.get("user_id"))
        ):
            self.error("log.amplitudeEvent", data=record)
            return
        self._emit(LogLevel.INFO, "amplitudeEvent", record)

    def summary(
        self,
        request: cabc.Mapping[str, typ.Any],
        response: cabc.Mapping[str, typ.Any],
    ) -> None:
        """Log one summary line for a completed request.

        ``OPTIONS`` requests are skipped. Responses with a status of 500 or
        more are logged at error level with trace and stack details.
        """
        if str(request.get("method", "")).lower() == "options":
            return

        payload = request.get("payload") or {}
        query = request.get("query") or {}
        app = request.get("app") or {}
        headers = request.get("headers") or {}
        info = request.get("info") or {}
        code = response.get("statusCode")

        line: dict[str, typ.Any] = {
            "code": code,
            "errno": response.get("errno") or 0,
            "rid": request.get("id"),
            "path": request.get("path"),
            "lang": app.get("acceptLanguage"),
            "agent": headers.get("user-agent"),
            "remoteAddressChain": app.get("remoteAddressChain"),
            "accountRecreated": app.get("accountRecreated"),
            "uid": _summary_uid(request, payload, query, response),
            "service": payload.get("service") or query.get("service"),
            "reason": payload.get("reason") or query.get("reason"),
            "redirectTo": payload.get("redirectTo") or query.get("redirectTo"),
            "keys": query.get("keys"),
            "email": payload.get("email") or query.get("email"),
        }
        received = info.get("received")
        if received is not None:
            line["t"] = self._clock() - received

        if isinstance(code, int) and code >= _HTTP_SERVER_ERROR_THRESHOLD:
            line["trace"] = app.get("traced")
            line["stack"] = response.get("stack")
            self.error("request.summary", **line)
        else:
            self.info("request.summary", **line)


def _summary_uid(
    request: cabc.Mapping[str, typ.Any],
    payload: cabc.Mapping[str, typ.Any],
    query: cabc.Mapping[str, typ.Any],
    response: cabc.Mapping[str, typ.Any],
) -> typ.Any:  # noqa: ANN401
    credentials = (request.get("auth") or {}).get("credentials")
    if isinstance(credentials, cabc.Mapping):
        return credentials.get("uid")
    source = response.get("source")
    source_uid = source.get("uid") if isinstance(source, cabc.Mapping) else None
    return (
        payload.get("uid")
        or query.get("uid")
        or response.get("uid")
        or source_uid
        or _ANONYMOUS_UID
    )


def create_metrics_log(config: MetricsConfig | None = None) -> MetricsLog:
    """Configure femtologging and return a ``MetricsLog``.

    An unrecognized log level falls back to ``INFO`` and is reported as a
    warning once logging is configured.
    """
    config = config or MetricsConfig.from_env()
    level, invalid = configure_logging(config.log_level)
    log = MetricsLog(config.service_name)
    logger = get_logger(__name__)
    if invalid:
        log_warning(
            logger,
            "Invalid log level %r; falling back to %s",
            config.log_level,
            level,
        )
    log_info(
        logger,
        "Metrics log configured service=%s level=%s",
        config.service_name,
        level,
    )
    return log
