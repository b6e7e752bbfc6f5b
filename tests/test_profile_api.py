from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from profile_registry import deps
from profile_registry.auth import issue_token
from profile_registry.events import InMemoryEventLog, ProfileUpdated, UserRegistered
from profile_registry.main import app
from profile_registry.registry import ProfileRegistry
from profile_registry.settings import Settings

SECRET = "api-test-secret"
T0 = 1_700_000_000


@pytest.fixture
def events() -> InMemoryEventLog:
    return InMemoryEventLog()


@pytest.fixture
def client(events):
    registry = ProfileRegistry(events=events, clock=lambda: T0)
    app.dependency_overrides[deps.get_settings_dep] = lambda: Settings(auth_secret=SECRET)
    app.dependency_overrides[deps.get_registry] = lambda: registry
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _auth(identity: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_token(identity=identity, secret=SECRET)}"}


ALICE = {"name": "Alice", "age": 30, "email": "alice@x.com"}
ALICE2 = {"name": "Alice2", "age": 31, "email": "alice2@x.com"}


def test_get_profile_for_unregistered_caller_returns_defaults(client):
    r = client.get("/v1/profile", headers=_auth("A"))
    assert r.status_code == 200, r.text
    assert r.json() == {
        "identity": "A",
        "name": "",
        "age": 0,
        "email": "",
        "registered_at": 0,
        "is_registered": False,
    }


def test_register_update_and_read_back(client, events):
    r = client.post("/v1/profile/register", json=ALICE, headers=_auth("A"))
    assert r.status_code == 201, r.text
    assert r.json()["registered_at"] == T0
    assert r.json()["is_registered"] is True

    r = client.put("/v1/profile", json=ALICE2, headers=_auth("A"))
    assert r.status_code == 200, r.text

    r = client.get("/v1/profile", headers=_auth("A"))
    data = r.json()
    assert (data["name"], data["age"], data["email"], data["registered_at"], data["is_registered"]) == (
        "Alice2",
        31,
        "alice2@x.com",
        T0,
        True,
    )
    assert events.events == [
        UserRegistered(identity="A", name="Alice", timestamp=T0),
        ProfileUpdated(identity="A", name="Alice2", age=31, email="alice2@x.com"),
    ]


def test_second_registration_conflicts(client):
    assert client.post("/v1/profile/register", json=ALICE, headers=_auth("A")).status_code == 201

    r = client.post("/v1/profile/register", json=ALICE2, headers=_auth("A"))
    assert r.status_code == 409
    assert "already registered" in r.json()["detail"]
    assert client.get("/v1/profile", headers=_auth("A")).json()["name"] == "Alice"


def test_update_without_registration_conflicts(client):
    r = client.put("/v1/profile", json=ALICE, headers=_auth("B"))
    assert r.status_code == 409
    assert "not registered" in r.json()["detail"]
    assert client.get("/v1/profile/status/B").json() == {"identity": "B", "is_registered": False}


def test_status_and_public_records_are_readable_without_auth(client):
    client.post("/v1/profile/register", json=ALICE, headers=_auth("A"))

    assert client.get("/v1/profile/status/A").json() == {"identity": "A", "is_registered": True}

    r = client.get("/v1/records/A")
    assert r.status_code == 200
    assert r.json()["email"] == "alice@x.com"

    assert client.get("/v1/records/nobody").json()["is_registered"] is False


def test_profile_endpoint_only_serves_the_caller(client):
    client.post("/v1/profile/register", json=ALICE, headers=_auth("A"))

    r = client.get("/v1/profile", headers=_auth("B"))
    assert r.json()["identity"] == "B"
    assert r.json()["is_registered"] is False


@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Authorization": "Basic abc"},
        {"Authorization": "Bearer forged.token"},
    ],
)
def test_caller_scoped_endpoints_require_valid_token(client, headers):
    assert client.get("/v1/profile", headers=headers).status_code == 401
    assert client.post("/v1/profile/register", json=ALICE, headers=headers).status_code == 401


def test_token_signed_with_other_secret_is_rejected(client):
    token = issue_token(identity="A", secret="someone-else")
    r = client.get("/v1/profile", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


def test_negative_age_is_rejected_by_validation(client):
    r = client.post("/v1/profile/register", json={**ALICE, "age": -1}, headers=_auth("A"))
    assert r.status_code == 422
    assert client.get("/v1/profile/status/A").json()["is_registered"] is False


def test_healthz_reports_record_count(client):
    client.post("/v1/profile/register", json=ALICE, headers=_auth("A"))
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["ok"] is True
    assert r.json()["records"] == 1


def test_configz_never_leaks_secret(client):
    r = client.get("/configz")
    assert r.status_code == 200
    assert SECRET not in r.text
    assert r.json()["auth_secret_is_default"] is False
    assert r.json()["profile_store"]["backend"] == "memory"


def test_public_lookups_accept_identities_with_slashes(client):
    r = client.post("/v1/profile/register", json=ALICE, headers=_auth("team/alice"))
    assert r.status_code == 201, r.text

    r = client.get("/v1/profile/status/team%2Falice")
    assert r.status_code == 200, r.text
    assert r.json() == {"identity": "team/alice", "is_registered": True}

    r = client.get("/v1/records/team%2Falice")
    assert r.status_code == 200, r.text
    assert r.json()["identity"] == "team/alice"
    assert r.json()["email"] == "alice@x.com"
