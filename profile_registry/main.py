from __future__ import annotations

import logging

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse

from profile_registry import deps, firebase_auth
from profile_registry.logging_config import configure_logging
from profile_registry.registry import ProfileRegistry
from profile_registry.routers.profile import router as profile_router
from profile_registry.settings import Settings, get_settings

configure_logging(get_settings().log_level)

logger = logging.getLogger("profile_registry")

APP_VERSION = "1.0.0"

app = FastAPI(title="Profile Registry", version=APP_VERSION)
app.include_router(profile_router)


@app.get("/healthz")
def healthz(registry: ProfileRegistry = Depends(deps.get_registry)):
    return JSONResponse(
        {
            "ok": True,
            "service": "profile-registry",
            "version": APP_VERSION,
            "records": len(registry.store),
        }
    )


@app.get("/configz")
def configz(settings: Settings = Depends(deps.get_settings_dep)):
    # Never return the secret itself.
    return JSONResponse(
        {
            "auth_secret_is_default": settings.auth_secret == Settings.model_fields["auth_secret"].default,
            "profile_store": {
                "backend": settings.profile_store_backend,
                "path": settings.profile_store_path if settings.profile_store_backend == "json" else None,
            },
            "event_log_path": settings.event_log_path or None,
            "firebase": {
                "credential_source": firebase_auth.cred_source(),
                "initialized": bool(firebase_auth.init_admin()),
            },
        }
    )
