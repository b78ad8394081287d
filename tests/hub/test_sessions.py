from __future__ import annotations

from bridge.hub.sessions import SessionStore, bearer_matches, constant_time_equals, credentials_match


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_session_is_refreshed_on_each_use() -> None:
    clock = FakeClock()
    sessions = SessionStore(idle_timeout=60, clock=clock)
    token = sessions.create()

    clock.now += 50
    assert sessions.touch(token) is True
    clock.now += 50
    assert sessions.touch(token) is True


def test_session_expires_after_idle_period() -> None:
    clock = FakeClock()
    sessions = SessionStore(idle_timeout=60, clock=clock)
    token = sessions.create()

    clock.now += 61

    assert sessions.touch(token) is False
    assert len(sessions) == 0


def test_unknown_and_revoked_tokens_are_rejected() -> None:
    sessions = SessionStore(clock=FakeClock())
    token = sessions.create()

    assert sessions.touch(None) is False
    assert sessions.touch("") is False
    assert sessions.touch("forged") is False
    sessions.revoke(token)
    assert sessions.touch(token) is False


def test_purge_removes_only_expired_sessions() -> None:
    clock = FakeClock()
    sessions = SessionStore(idle_timeout=60, clock=clock)
    stale = sessions.create()
    clock.now += 40
    fresh = sessions.create()
    clock.now += 30

    assert sessions.purge_expired() == 1
    assert sessions.touch(stale) is False
    assert sessions.touch(fresh) is True


def test_tokens_are_unique() -> None:
    sessions = SessionStore(clock=FakeClock())

    assert len({sessions.create() for _ in range(50)}) == 50


def test_credentials_require_both_halves() -> None:
    expected = {"expected_username": "admin", "expected_password": "hunter2"}

    assert credentials_match("admin", "hunter2", **expected) is True
    assert credentials_match("admin", "wrong", **expected) is False
    assert credentials_match("root", "hunter2", **expected) is False
    assert credentials_match("", "", **expected) is False


def test_bearer_mismatch_of_any_length_is_rejected() -> None:
    secret = "s3cret-token"

    assert bearer_matches("Bearer s3cret-token", secret) is True
    for presented in (None, "", "Bearer", "Bearer s3cret", "Bearer s3cret-token-extended", "s3cret-token", "Bearer " + "x" * 4096):
        assert bearer_matches(presented, secret) is False


def test_constant_time_equals_handles_unicode() -> None:
    assert constant_time_equals("pässwörd", "pässwörd") is True
    assert constant_time_equals("pässwörd", "passwort") is False
