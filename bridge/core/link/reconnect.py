from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable

from loguru import logger

Sleep = Callable[[float], Awaitable[None]]


class LinkState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass(frozen=True)
class BackoffPolicy:
    step: float = 1.0
    max_delay: float = 60.0
    max_attempts: int = 10
    ceiling_pause: float = 300.0
    guard_delay: float = 1.0

    def delay_for(self, attempts: int) -> float:
        return min(max(attempts, 0) * self.step, self.max_delay)


class ReconnectStateMachine:
    """
    Disconnected -> Connecting -> Connected, with failures feeding back into
    Disconnected.

    All waiting goes through the injected ``sleep`` so tests can record the
    backoff schedule instead of living through it.
    """

    def __init__(self, policy: BackoffPolicy | None = None, *, sleep: Sleep = asyncio.sleep) -> None:
        self._policy = policy or BackoffPolicy()
        self._sleep = sleep
        self._state = LinkState.DISCONNECTED
        self._attempts = 0

    @property
    def state(self) -> LinkState:
        return self._state

    @property
    def attempts(self) -> int:
        return self._attempts

    @property
    def policy(self) -> BackoffPolicy:
        return self._policy

    @property
    def is_connected(self) -> bool:
        return self._state == LinkState.CONNECTED

    async def begin_attempt(self) -> float:
        """Enter Connecting and wait out the backoff for the current attempt count."""
        self._state = LinkState.CONNECTING
        delay = self._policy.delay_for(self._attempts)
        if self._attempts > 0:
            logger.info("Reconnect attempt {} after {:.0f}s", self._attempts, delay)
            await self._sleep(delay)
        return delay

    def mark_connected(self) -> None:
        self._attempts = 0
        self._state = LinkState.CONNECTED

    def mark_disconnected(self) -> None:
        self._state = LinkState.DISCONNECTED

    async def record_failure(self) -> None:
        self._state = LinkState.DISCONNECTED
        self._attempts += 1
        if self._attempts > self._policy.max_attempts:
            self._attempts = self._policy.max_attempts
            logger.warning(
                "Max reconnection attempts reached, waiting {:.0f}s",
                self._policy.ceiling_pause,
            )
            await self._sleep(self._policy.ceiling_pause)
        await self._sleep(self._policy.guard_delay)
