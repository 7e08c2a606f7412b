"""Event sink implementations."""

from __future__ import annotations

import threading
from typing import TypeVar

import structlog

from amm_engine.models.events import EngineEvent

logger = structlog.get_logger()

E = TypeVar("E", bound=EngineEvent)


class LoggingEventSink:
    """Writes every event to the structured log under its kind."""

    def emit(self, event: EngineEvent) -> None:
        logger.info(event.kind, **event.model_dump(exclude={"kind"}))


class RecordingEventSink:
    """Keeps events in memory, in emission order.

    Usage:
        sink = RecordingEventSink()
        engine = AmmEngine(ledger, events=sink)
        ...
        created = sink.of_kind(PoolCreated)
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._events: list[EngineEvent] = []

    def emit(self, event: EngineEvent) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> list[EngineEvent]:
        with self._lock:
            return list(self._events)

    def of_kind(self, event_type: type[E]) -> list[E]:
        """All recorded events of one model type."""
        return [e for e in self.events if isinstance(e, event_type)]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
