"""Recording fakes for the metrics log and femtologging loggers."""

from __future__ import annotations

import dataclasses
import typing as typ

if typ.TYPE_CHECKING:
    from flowmetrics.amplitude import AmplitudeEvent


@dataclasses.dataclass(slots=True)
class RecordingSink:
    """Collects calls made by the Amplitude transformer."""

    events: list[AmplitudeEvent] = dataclasses.field(default_factory=list)
    errors: list[tuple[str, dict[str, object]]] = dataclasses.field(
        default_factory=list
    )

    def amplitude_event(self, event: AmplitudeEvent) -> None:
        """Record an emitted Amplitude event."""
        self.events.append(event)

    def error(self, op: str, /, **fields: object) -> None:
        """Record an error-channel call."""
        self.errors.append((op, fields))

    @property
    def call_count(self) -> int:
        """Return the total number of calls of any kind."""
        return len(self.events) + len(self.errors)


class FakeLogger:
    """Collects femtologging-style ``log`` calls for assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, object | None, bool]] = []

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str:
        self.calls.append((str(level), message, exc_info, stack_info))
        return message


@dataclasses.dataclass(slots=True)
class RecordingReceiver:
    """Captures ``receive_event`` invocations."""

    calls: list[tuple[typ.Any, ...]] = dataclasses.field(default_factory=list)

    def __call__(
        self,
        event_name: str | None,
        request: typ.Any,  # noqa: ANN401
        data: typ.Any = None,  # noqa: ANN401
        metrics_context: typ.Any = None,  # noqa: ANN401
    ) -> None:
        """Record the positional arguments of one call."""
        self.calls.append((event_name, request, data, metrics_context))
