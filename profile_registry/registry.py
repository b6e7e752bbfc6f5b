from __future__ import annotations

import logging
import threading
import time
from dataclasses import replace
from typing import Callable, Optional

from profile_registry.events import EventSink, LoggingEventSink, ProfileUpdated, UserRegistered, publish
from profile_registry.profile_store import DEFAULT_RECORD, InMemoryProfileStore, ProfileRecord, ProfileStore

logger = logging.getLogger("profile_registry")


class RegistryError(Exception):
    def __init__(self, identity: str, message: str):
        super().__init__(message)
        self.identity = identity


class AlreadyRegisteredError(RegistryError):
    def __init__(self, identity: str):
        super().__init__(identity, f"Identity '{identity}' is already registered")


class NotRegisteredError(RegistryError):
    def __init__(self, identity: str):
        super().__init__(identity, f"Identity '{identity}' is not registered")


def system_clock() -> int:
    return int(time.time())


def _check_age(age: int) -> int:
    if isinstance(age, bool) or not isinstance(age, int):
        raise ValueError("age must be an integer")
    if age < 0:
        raise ValueError("age must be non-negative")
    return age


class ProfileRegistry:
    """Identity-keyed profile registry.

    Every identity starts out unregistered (an implicit default record) and
    moves to registered exactly once through :meth:`register`. After that only
    ``name``, ``age`` and ``email`` change, through :meth:`update_profile`.

    The caller identity is always an explicit argument, supplied by whatever
    authenticated the request. Read-check-write sequences run under one lock.
    Events are published right after the write commits, still under the lock,
    so sinks see them in commit order. A failing sink never undoes the write.
    """

    def __init__(
        self,
        *,
        store: Optional[ProfileStore] = None,
        events: Optional[EventSink] = None,
        clock: Callable[[], int] = system_clock,
    ):
        self._store: ProfileStore = store if store is not None else InMemoryProfileStore()
        self._events: EventSink = events if events is not None else LoggingEventSink()
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def store(self) -> ProfileStore:
        return self._store

    def _read(self, identity: str) -> ProfileRecord:
        return self._store.get(identity) or DEFAULT_RECORD

    def register(self, caller: str, name: str, age: int, email: str) -> None:
        age = _check_age(age)
        with self._lock:
            if self._read(caller).is_registered:
                logger.info("Rejected register for %s: already registered", caller)
                raise AlreadyRegisteredError(caller)
            now = int(self._clock())
            self._store.put(
                caller,
                ProfileRecord(name=name, age=age, email=email, registered_at=now, is_registered=True),
            )
            logger.info("Registered %s at %d", caller, now)
            # Published under the lock so the ledger follows commit order.
            publish(self._events, UserRegistered(identity=caller, name=name, timestamp=now))

    def update_profile(self, caller: str, name: str, age: int, email: str) -> None:
        age = _check_age(age)
        with self._lock:
            current = self._read(caller)
            if not current.is_registered:
                logger.info("Rejected profile update for %s: not registered", caller)
                raise NotRegisteredError(caller)
            self._store.put(caller, replace(current, name=name, age=age, email=email))
            logger.info("Updated profile for %s", caller)
            publish(self._events, ProfileUpdated(identity=caller, name=name, age=age, email=email))

    def get_profile(self, caller: str) -> ProfileRecord:
        """Return the caller's own record, or the default one if never registered."""
        with self._lock:
            return self._read(caller)

    def check_registration_status(self, identity: str) -> bool:
        with self._lock:
            return self._read(identity).is_registered

    def get_record(self, identity: str) -> ProfileRecord:
        # Public raw-record read: any identity, full record.
        with self._lock:
            return self._read(identity)
