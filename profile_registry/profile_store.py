from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from dataclasses import asdict, dataclass, fields
from typing import Dict, Iterator, Optional, Protocol

logger = logging.getLogger("profile_registry.store")


@dataclass(frozen=True)
class ProfileRecord:
    name: str = ""
    age: int = 0
    email: str = ""
    registered_at: int = 0
    is_registered: bool = False

    def as_tuple(self) -> tuple[str, int, str, int, bool]:
        return (self.name, self.age, self.email, self.registered_at, self.is_registered)

    def __iter__(self) -> Iterator:
        return iter(self.as_tuple())


DEFAULT_RECORD = ProfileRecord()


class ProfileStore(Protocol):
    def get(self, identity: str) -> Optional[ProfileRecord]: ...

    def put(self, identity: str, record: ProfileRecord) -> None: ...

    def __contains__(self, identity: object) -> bool: ...

    def __len__(self) -> int: ...


class InMemoryProfileStore:
    """Process-local record store.

    Cleared on restart and not shared across API instances. Reads never create
    entries; a missing identity is simply ``None``.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._records: Dict[str, ProfileRecord] = {}

    def get(self, identity: str) -> Optional[ProfileRecord]:
        with self._lock:
            return self._records.get(identity)

    def put(self, identity: str, record: ProfileRecord) -> None:
        with self._lock:
            self._records[identity] = record

    def __contains__(self, identity: object) -> bool:
        with self._lock:
            return identity in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class JsonFileProfileStore(InMemoryProfileStore):
    """Durable key-value backing kept as a single JSON document.

    The whole mapping is rewritten on every ``put`` through a temp file and
    ``os.replace`` so a crash never leaves a half-written file behind.
    """

    def __init__(self, path: str):
        super().__init__()
        self._path = path
        self._records.update(self._load())

    @property
    def path(self) -> str:
        return self._path

    def put(self, identity: str, record: ProfileRecord) -> None:
        with self._lock:
            snapshot = dict(self._records)
            snapshot[identity] = record
            self._write(snapshot)
            self._records = snapshot

    def _load(self) -> Dict[str, ProfileRecord]:
        if not os.path.exists(self._path):
            return {}
        with open(self._path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        if not isinstance(raw, dict):
            raise ValueError(f"Profile store file {self._path} must contain a JSON object")
        known = {f.name for f in fields(ProfileRecord)}
        out: Dict[str, ProfileRecord] = {}
        for identity, data in raw.items():
            if not isinstance(data, dict):
                raise ValueError(f"Profile store file {self._path} has a non-object entry for {identity!r}")
            out[str(identity)] = ProfileRecord(**{k: v for k, v in data.items() if k in known})
        logger.info("Loaded %d profile record(s) from %s", len(out), self._path)
        return out

    def _write(self, records: Dict[str, ProfileRecord]) -> None:
        directory = os.path.dirname(os.path.abspath(self._path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".profiles-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump({k: asdict(v) for k, v in records.items()}, f, indent=2, sort_keys=True)
            os.replace(tmp, self._path)
        except Exception:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise
