from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Protocol, Union

logger = logging.getLogger("profile_registry.events")


@dataclass(frozen=True)
class UserRegistered:
    identity: str
    name: str
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "UserRegistered", **asdict(self)}


@dataclass(frozen=True)
class ProfileUpdated:
    identity: str
    name: str
    age: int
    email: str

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "ProfileUpdated", **asdict(self)}


RegistryEvent = Union[UserRegistered, ProfileUpdated]


class EventSink(Protocol):
    def emit(self, event: RegistryEvent) -> None: ...


class LoggingEventSink:
    def emit(self, event: RegistryEvent) -> None:
        logger.info("event %s", json.dumps(event.to_dict(), sort_keys=True))


class InMemoryEventLog:
    """Append-only list of emitted events (tests, smoke runs)."""

    def __init__(self):
        self._lock = threading.Lock()
        self._events: List[RegistryEvent] = []

    def emit(self, event: RegistryEvent) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> List[RegistryEvent]:
        with self._lock:
            return list(self._events)


class JsonlEventLog:
    """Ledger file: one JSON object per line, appended per event."""

    def __init__(self, path: str):
        self._path = path
        self._lock = threading.Lock()

    @property
    def path(self) -> str:
        return self._path

    def emit(self, event: RegistryEvent) -> None:
        line = json.dumps(event.to_dict(), sort_keys=True)
        with self._lock:
            directory = os.path.dirname(os.path.abspath(self._path))
            os.makedirs(directory, exist_ok=True)
            with open(self._path, "a", encoding="utf-8") as f:
                f.write(line + "\n")


class FanOutEventSink:
    def __init__(self, sinks: Iterable[EventSink]):
        self._sinks = list(sinks)

    def emit(self, event: RegistryEvent) -> None:
        for sink in self._sinks:
            publish(sink, event)


def publish(sink: EventSink, event: RegistryEvent) -> None:
    """Deliver ``event`` without letting a sink failure reach the caller.

    Events are emitted after the state change is committed; a broken sink is
    logged and otherwise ignored.
    """
    try:
        sink.emit(event)
    except Exception as e:
        logger.warning(
            "Event sink %s failed for %s (%s: %s)",
            type(sink).__name__,
            type(event).__name__,
            type(e).__name__,
            e,
            exc_info=True,
        )
