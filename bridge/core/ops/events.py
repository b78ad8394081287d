from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class HubLinkAttempt:
    url: str
    attempt: int
    delay: float
    timestamp: datetime

    @classmethod
    def now(cls, *, url: str, attempt: int, delay: float) -> "HubLinkAttempt":
        return cls(url=url, attempt=attempt, delay=delay, timestamp=_now())


@dataclass(frozen=True)
class HubLinkEstablished:
    url: str
    timestamp: datetime

    @classmethod
    def now(cls, *, url: str) -> "HubLinkEstablished":
        return cls(url=url, timestamp=_now())


@dataclass(frozen=True)
class HubLinkFailed:
    url: str
    attempt: int
    error_type: str
    message: str
    timestamp: datetime

    @classmethod
    def now(cls, *, url: str, attempt: int, error_type: str, message: str) -> "HubLinkFailed":
        return cls(
            url=url,
            attempt=attempt,
            error_type=error_type,
            message=message,
            timestamp=_now(),
        )


@dataclass(frozen=True)
class HubLinkClosed:
    url: str
    reason: str
    timestamp: datetime

    @classmethod
    def now(cls, *, url: str, reason: str) -> "HubLinkClosed":
        return cls(url=url, reason=reason, timestamp=_now())


@dataclass(frozen=True)
class MessageDropped:
    frame_type: Optional[str]
    reason: str
    timestamp: datetime

    @classmethod
    def now(cls, *, frame_type: Optional[str], reason: str) -> "MessageDropped":
        return cls(frame_type=frame_type, reason=reason, timestamp=_now())


@dataclass(frozen=True)
class CommandDropped:
    request_id: str
    kind: str
    target: str
    reason: str
    timestamp: datetime

    @classmethod
    def now(cls, *, request_id: str, kind: str, target: str, reason: str) -> "CommandDropped":
        return cls(
            request_id=request_id,
            kind=kind,
            target=target,
            reason=reason,
            timestamp=_now(),
        )


@dataclass(frozen=True)
class CommandExecuted:
    request_id: str
    kind: str
    success: bool
    timestamp: datetime
    path: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def now(
        cls,
        *,
        request_id: str,
        kind: str,
        success: bool,
        path: Optional[str] = None,
        error: Optional[str] = None,
    ) -> "CommandExecuted":
        return cls(
            request_id=request_id,
            kind=kind,
            success=success,
            timestamp=_now(),
            path=path,
            error=error,
        )


@dataclass(frozen=True)
class CommandAcknowledged:
    request_id: str
    connection_id: str
    success: bool
    timestamp: datetime
    error: Optional[str] = None

    @classmethod
    def now(
        cls,
        *,
        request_id: str,
        connection_id: str,
        success: bool,
        error: Optional[str] = None,
    ) -> "CommandAcknowledged":
        return cls(
            request_id=request_id,
            connection_id=connection_id,
            success=success,
            timestamp=_now(),
            error=error,
        )


@dataclass(frozen=True)
class AgentConnected:
    connection_id: str
    remote: Optional[str]
    timestamp: datetime

    @classmethod
    def now(cls, *, connection_id: str, remote: Optional[str] = None) -> "AgentConnected":
        return cls(connection_id=connection_id, remote=remote, timestamp=_now())


@dataclass(frozen=True)
class AgentDisconnected:
    connection_id: str
    reason: str
    timestamp: datetime

    @classmethod
    def now(cls, *, connection_id: str, reason: str) -> "AgentDisconnected":
        return cls(connection_id=connection_id, reason=reason, timestamp=_now())


@dataclass(frozen=True)
class SnapshotRejected:
    source: str
    reason: str
    timestamp: datetime

    @classmethod
    def now(cls, *, source: str, reason: str) -> "SnapshotRejected":
        return cls(source=source, reason=reason, timestamp=_now())


@dataclass(frozen=True)
class AuthRejected:
    channel: str
    remote: Optional[str]
    timestamp: datetime

    @classmethod
    def now(cls, *, channel: str, remote: Optional[str] = None) -> "AuthRejected":
        return cls(channel=channel, remote=remote, timestamp=_now())
