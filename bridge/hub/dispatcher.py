from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from loguru import logger

from bridge.core.commands.models import Command
from bridge.core.ops.events import CommandDropped
from bridge.hub.registry import AgentRegistry


@dataclass(frozen=True)
class DispatchResult:
    request_id: str
    delivered: tuple[str, ...]
    dropped: tuple[str, ...]


class CommandDispatcher:
    def __init__(
        self,
        registry: AgentRegistry,
        *,
        event_logger: Optional[Callable[[object], None]] = None,
    ) -> None:
        self._registry = registry
        self._event_logger = event_logger

    def submit(self, command: Command) -> DispatchResult:
        """Offer the command to every attached agent; never waits, never retries."""
        delivered: list[str] = []
        dropped: list[str] = []
        for connection in self._registry.connections():
            if connection.outbound.offer(command):
                delivered.append(connection.connection_id)
                continue
            dropped.append(connection.connection_id)
            self._log_event(
                CommandDropped.now(
                    request_id=command.request_id,
                    kind=command.kind.value,
                    target=connection.connection_id,
                    reason="command channel full",
                )
            )
        if not delivered and not dropped:
            logger.warning(
                "No agent connected; {} {} was not delivered",
                command.kind.value,
                command.request_id,
            )
        return DispatchResult(
            request_id=command.request_id,
            delivered=tuple(delivered),
            dropped=tuple(dropped),
        )

    def _log_event(self, event: object) -> None:
        if self._event_logger:
            self._event_logger(event)
