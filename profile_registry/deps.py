from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, Header, HTTPException

from profile_registry import firebase_auth
from profile_registry.auth import Caller, bearer_token, verify_token
from profile_registry.events import EventSink, FanOutEventSink, JsonlEventLog, LoggingEventSink
from profile_registry.profile_store import InMemoryProfileStore, JsonFileProfileStore, ProfileStore
from profile_registry.registry import ProfileRegistry
from profile_registry.settings import Settings, get_settings


def get_settings_dep() -> Settings:
    """FastAPI dependency for settings.

    Delegates to profile_registry.settings.get_settings (canonical constructor).
    """
    return get_settings()


# The registry owns state, so one instance is shared per storage configuration.
# Changing the env (tests do) yields a fresh instance.
@lru_cache(maxsize=8)
def _registry_for(backend: str, store_path: str, event_log_path: str) -> ProfileRegistry:
    store: ProfileStore
    if backend == "json":
        store = JsonFileProfileStore(store_path)
    else:
        store = InMemoryProfileStore()

    sinks: list[EventSink] = [LoggingEventSink()]
    if event_log_path:
        sinks.append(JsonlEventLog(event_log_path))

    return ProfileRegistry(store=store, events=FanOutEventSink(sinks))


def get_registry(settings: Settings = Depends(get_settings_dep)) -> ProfileRegistry:
    return _registry_for(
        settings.profile_store_backend,
        settings.profile_store_path,
        (settings.event_log_path or "").strip(),
    )


def get_caller(
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_settings_dep),
) -> Caller:
    """Resolve the bearer token to the calling identity.

    Signed tokens are tried first; Firebase ID tokens are accepted when Firebase
    Admin is configured.
    """
    token = bearer_token(authorization)
    if token is None:
        raise HTTPException(status_code=401, detail="Missing bearer token")

    caller = verify_token(token=token, secret=settings.auth_secret)
    if caller is None:
        caller = firebase_auth.verify_firebase_id_token(token)
    if caller is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return caller
