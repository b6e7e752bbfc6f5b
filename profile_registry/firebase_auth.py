from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from typing import Optional

from profile_registry.auth import Caller

logger = logging.getLogger("profile_registry.firebase")

_DEFAULT_CRED_FILE = "firebase-service-account.json"


def _cred_path() -> Optional[str]:
    p = (os.getenv("FIREBASE_SERVICE_ACCOUNT_FILE") or "").strip()
    if p and os.path.exists(p):
        return p
    default_path = os.path.join(os.getcwd(), _DEFAULT_CRED_FILE)
    if os.path.exists(default_path):
        return default_path
    return None


def _raw_cred_json() -> Optional[str]:
    # Preferred: a single env var holding the entire JSON key.
    raw = (os.getenv("FIREBASE_SERVICE_ACCOUNT_JSON") or "").strip()
    if raw:
        return raw

    path = _cred_path()
    if path is None:
        return None
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def cred_source() -> str:
    """Human-friendly description of where creds come from (never the creds)."""
    if (os.getenv("FIREBASE_SERVICE_ACCOUNT_JSON") or "").strip():
        return "env:FIREBASE_SERVICE_ACCOUNT_JSON"
    path = _cred_path()
    if path is None:
        return "missing"
    if (os.getenv("FIREBASE_SERVICE_ACCOUNT_FILE") or "").strip():
        return f"env:FIREBASE_SERVICE_ACCOUNT_FILE({path})"
    return f"file:{path}"


def _looks_like_service_account(info: dict) -> bool:
    # Minimum keys we expect for firebase_admin.credentials.Certificate
    needed = {"type", "project_id", "private_key", "client_email"}
    return needed.issubset(set(info.keys()))


def _format_firebase_exception(e: Exception) -> str:
    code = getattr(e, "code", None)
    parts = [e.__class__.__name__]
    if code:
        parts.append(f"code={code}")
    parts.append(f"detail={e}")
    return " ".join(parts)


@lru_cache(maxsize=1)
def init_admin() -> bool:
    """Initialize firebase_admin if configured. Returns True if available."""
    raw = _raw_cred_json()
    if not raw:
        # Not configured is a normal local/dev state.
        logger.info("Firebase Admin not configured (no service account). Only signed tokens are accepted.")
        return False

    try:
        import firebase_admin
        from firebase_admin import credentials

        if firebase_admin._apps:  # type: ignore[attr-defined]
            return True

        info = json.loads(raw)
        if not isinstance(info, dict) or not _looks_like_service_account(info):
            logger.warning(
                "Firebase credentials don't look like a service account key (source=%s). Ignoring them.",
                cred_source(),
            )
            return False

        firebase_admin.initialize_app(credentials.Certificate(info))
        logger.info("Firebase Admin initialized (project_id=%s, source=%s)", info.get("project_id"), cred_source())
        return True
    except Exception as e:
        logger.warning(
            "Firebase Admin initialization failed (%s, source=%s).",
            _format_firebase_exception(e),
            cred_source(),
            exc_info=True,
        )
        return False


def verify_firebase_id_token(id_token: str) -> Optional[Caller]:
    """Verify a Firebase ID token and map its ``uid`` to a registry identity."""
    if not id_token or not init_admin():
        return None

    from firebase_admin import auth

    try:
        decoded = auth.verify_id_token(id_token)
    except Exception as e:
        logger.info("Firebase token verification failed (%s).", _format_firebase_exception(e))
        return None

    uid = str(decoded.get("uid") or "").strip()
    return Caller(identity=uid, source="firebase") if uid else None
