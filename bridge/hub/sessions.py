from __future__ import annotations

import hashlib
import hmac
import secrets
import threading
import time
from typing import Callable, Optional


def constant_time_equals(presented: str, expected: str) -> bool:
    # Hash first so both sides have equal length whatever was presented.
    presented_digest = hashlib.sha256(presented.encode("utf-8")).digest()
    expected_digest = hashlib.sha256(expected.encode("utf-8")).digest()
    return hmac.compare_digest(presented_digest, expected_digest)


def credentials_match(
    username: str,
    password: str,
    *,
    expected_username: str,
    expected_password: str,
) -> bool:
    username_ok = constant_time_equals(username, expected_username)
    password_ok = constant_time_equals(password, expected_password)
    return username_ok and password_ok


def bearer_matches(authorization: Optional[str], secret: str) -> bool:
    return constant_time_equals(authorization or "", f"Bearer {secret}")


class SessionStore:
    """Browser sessions: token -> last activity, expiring after an idle period."""

    def __init__(
        self,
        idle_timeout: float = 24 * 3600.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._idle_timeout = idle_timeout
        self._clock = clock
        self._lock = threading.Lock()
        self._sessions: dict[str, float] = {}

    def create(self) -> str:
        token = secrets.token_urlsafe(32)
        now = self._clock()
        with self._lock:
            self._purge_locked(now)
            self._sessions[token] = now
        return token

    def touch(self, token: Optional[str]) -> bool:
        """Refresh a live session; expired or unknown tokens are rejected (and forgotten)."""
        if not token:
            return False
        now = self._clock()
        with self._lock:
            last_seen = self._sessions.get(token)
            if last_seen is None:
                return False
            if now - last_seen > self._idle_timeout:
                del self._sessions[token]
                return False
            self._sessions[token] = now
            return True

    def revoke(self, token: Optional[str]) -> None:
        if not token:
            return
        with self._lock:
            self._sessions.pop(token, None)

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            return self._purge_locked(now)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _purge_locked(self, now: float) -> int:
        expired = [token for token, seen in self._sessions.items() if now - seen > self._idle_timeout]
        for token in expired:
            del self._sessions[token]
        return len(expired)
