from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Mapping, Optional, Protocol

from loguru import logger
from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed

from bridge.core.link.reconnect import ReconnectStateMachine
from bridge.core.ops.events import (
    HubLinkAttempt,
    HubLinkClosed,
    HubLinkEstablished,
    HubLinkFailed,
    MessageDropped,
)

# A dropped socket can surface as either family depending on where it breaks.
_TRANSPORT_ERRORS = (ConnectionClosed, OSError)


class HubConnection(Protocol):
    async def send(self, message: str) -> None:
        raise NotImplementedError

    async def recv(self) -> str | bytes:
        raise NotImplementedError

    async def close(self) -> None:
        raise NotImplementedError


Dialer = Callable[[str, Mapping[str, str]], Awaitable[HubConnection]]
MessageHandler = Callable[[str], Awaitable[None]]
InitialSync = Callable[[], Optional[str]]


@dataclass(frozen=True)
class HubLinkConfig:
    url: str
    token: str
    open_timeout: float = 10.0


async def websocket_dialer(url: str, headers: Mapping[str, str], *, open_timeout: float = 10.0) -> HubConnection:
    return await connect(url, additional_headers=dict(headers), open_timeout=open_timeout)


class HubLink:
    """The agent's single outbound connection to the hub, kept alive for the process lifetime."""

    def __init__(
        self,
        config: HubLinkConfig,
        *,
        on_message: MessageHandler,
        initial_sync: InitialSync,
        dialer: Optional[Dialer] = None,
        machine: Optional[ReconnectStateMachine] = None,
        event_logger: Optional[Callable[[object], None]] = None,
    ) -> None:
        self._config = config
        self._on_message = on_message
        self._initial_sync = initial_sync
        self._dialer = dialer or self._default_dialer
        self._machine = machine or ReconnectStateMachine()
        self._event_logger = event_logger
        self._connection: Optional[HubConnection] = None

    @property
    def machine(self) -> ReconnectStateMachine:
        return self._machine

    @property
    def connected(self) -> bool:
        return self._connection is not None and self._machine.is_connected

    async def run_forever(self) -> None:
        while True:
            await self.run_once()

    async def run_once(self) -> bool:
        """
        Run one Connecting -> Connected -> Disconnected cycle.

        Returns True when the dial succeeded, False when it failed. Either
        way the failure has been recorded with the state machine by the time
        this returns, including its backoff guard.
        """
        await self._teardown("reconnect")
        delay = await self._machine.begin_attempt()
        self._log_event(
            HubLinkAttempt.now(url=self._config.url, attempt=self._machine.attempts, delay=delay)
        )
        try:
            connection = await self._dialer(self._config.url, self._auth_headers())
        except Exception as exc:
            self._log_event(
                HubLinkFailed.now(
                    url=self._config.url,
                    attempt=self._machine.attempts,
                    error_type=type(exc).__name__,
                    message=str(exc),
                )
            )
            await self._machine.record_failure()
            return False

        self._connection = connection
        self._machine.mark_connected()
        self._log_event(HubLinkEstablished.now(url=self._config.url))

        reader = asyncio.create_task(self._read_loop(connection), name="hub-link-reader")
        initial = self._initial_sync()
        if initial is not None:
            await self.send(initial, frame_type="snapshot")
        reason = await reader

        await self._teardown(reason)
        await self._machine.record_failure()
        return True

    async def send(self, message: str, *, frame_type: Optional[str] = None) -> bool:
        connection = self._connection
        if connection is None or not self._machine.is_connected:
            self._log_event(MessageDropped.now(frame_type=frame_type, reason="hub link not connected"))
            return False
        try:
            await connection.send(message)
        except _TRANSPORT_ERRORS as exc:
            logger.warning("Failed to send message to hub: {}", exc)
            self._machine.mark_disconnected()
            await _close_quietly(connection)
            return False
        return True

    def status(self) -> dict[str, object]:
        return {
            "url": self._config.url,
            "state": self._machine.state.value,
            "attempts": self._machine.attempts,
        }

    async def _read_loop(self, connection: HubConnection) -> str:
        while True:
            try:
                message = await connection.recv()
            except _TRANSPORT_ERRORS as exc:
                return f"read error: {type(exc).__name__}: {exc}"
            if isinstance(message, bytes):
                message = message.decode("utf-8", errors="replace")
            try:
                await self._on_message(message)
            except Exception:
                logger.exception("Hub message handler failed")

    async def _teardown(self, reason: str) -> None:
        connection = self._connection
        if connection is None:
            return
        self._connection = None
        self._machine.mark_disconnected()
        await _close_quietly(connection)
        self._log_event(HubLinkClosed.now(url=self._config.url, reason=reason))

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._config.token}"}

    async def _default_dialer(self, url: str, headers: Mapping[str, str]) -> HubConnection:
        return await websocket_dialer(url, headers, open_timeout=self._config.open_timeout)

    def _log_event(self, event: object) -> None:
        if self._event_logger:
            self._event_logger(event)


async def _close_quietly(connection: HubConnection) -> None:
    try:
        await connection.close()
    except Exception as exc:
        logger.debug("Ignoring error while closing hub connection: {}", exc)
