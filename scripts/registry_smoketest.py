from __future__ import annotations

import os
import sys
from pathlib import Path

# Allow running as: python scripts/registry_smoketest.py
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from fastapi.testclient import TestClient

from profile_registry.auth import issue_token
from profile_registry.main import app
from profile_registry.settings import get_settings


def main() -> int:
    # Keep the run self-contained: in-memory store, no ledger file.
    os.environ.setdefault("PROFILE_STORE_BACKEND", "memory")
    os.environ.setdefault("EVENT_LOG_PATH", "")

    settings = get_settings()

    def _bearer(identity: str) -> dict[str, str]:
        token = issue_token(identity=identity, secret=settings.auth_secret, ttl_seconds=settings.auth_token_ttl_seconds)
        return {"Authorization": f"Bearer {token}"}

    alice = _bearer("alice")
    bob = _bearer("bob")

    c = TestClient(app)

    steps = [
        ("register alice", c.post("/v1/profile/register", json={"name": "Alice", "age": 30, "email": "alice@x.com"}, headers=alice), 201),
        ("update alice", c.put("/v1/profile", json={"name": "Alice2", "age": 31, "email": "alice2@x.com"}, headers=alice), 200),
        ("read alice", c.get("/v1/profile", headers=alice), 200),
        ("register alice again", c.post("/v1/profile/register", json={"name": "Alice", "age": 30, "email": "alice@x.com"}, headers=alice), 409),
        ("update bob", c.put("/v1/profile", json={"name": "Bob", "age": 40, "email": "bob@x.com"}, headers=bob), 409),
        ("status bob", c.get("/v1/profile/status/bob"), 200),
    ]

    failed = 0
    for label, r, expected in steps:
        print(label, r.status_code, r.json())
        if r.status_code != expected:
            print(f"  expected HTTP {expected}")
            failed += 1

    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
