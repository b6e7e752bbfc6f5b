from __future__ import annotations

import time

from profile_registry.auth import bearer_token, issue_token, verify_token

SECRET = "test-secret"


def test_issued_token_verifies_to_identity():
    token = issue_token(identity="alice", secret=SECRET)
    caller = verify_token(token=token, secret=SECRET)
    assert caller is not None
    assert caller.identity == "alice"
    assert caller.source == "token"


def test_identity_may_contain_separator():
    token = issue_token(identity="team|alice", secret=SECRET)
    caller = verify_token(token=token, secret=SECRET)
    assert caller is not None and caller.identity == "team|alice"


def test_wrong_secret_is_rejected():
    token = issue_token(identity="alice", secret=SECRET)
    assert verify_token(token=token, secret="other") is None


def test_expired_token_is_rejected(monkeypatch):
    token = issue_token(identity="alice", secret=SECRET, ttl_seconds=10)
    real_time = time.time
    monkeypatch.setattr(time, "time", lambda: real_time() + 60)
    assert verify_token(token=token, secret=SECRET) is None


def test_garbage_token_is_rejected():
    assert verify_token(token="not-a-token", secret=SECRET) is None
    assert verify_token(token="a.b", secret=SECRET) is None


def test_bearer_token_parsing():
    assert bearer_token("Bearer abc") == "abc"
    assert bearer_token("bearer   abc ") == "abc"
    assert bearer_token("Basic abc") is None
    assert bearer_token(None) is None
    assert bearer_token("Bearer ") is None
