from __future__ import annotations

from typing import Awaitable, Callable, Optional

from loguru import logger

from bridge.core.commands.encoding import encode_command
from bridge.core.commands.models import Command, CommandAck
from bridge.core.commands.ports import CommandSink
from bridge.core.ops.events import CommandDropped, CommandExecuted
from bridge.core.queues import BoundedQueue

AckSender = Callable[[CommandAck], Awaitable[bool]]


class CommandExecutor:
    """Single worker that turns queued commands into file drops, one attempt each."""

    def __init__(
        self,
        sink: CommandSink,
        send_ack: AckSender,
        *,
        capacity: int = 100,
        event_logger: Optional[Callable[[object], None]] = None,
    ) -> None:
        self._sink = sink
        self._send_ack = send_ack
        self._queue: BoundedQueue[Command] = BoundedQueue(capacity)
        self._event_logger = event_logger

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def offer(self, command: Command) -> bool:
        if self._queue.offer(command):
            return True
        self._log_event(
            CommandDropped.now(
                request_id=command.request_id,
                kind=command.kind.value,
                target="execution-queue",
                reason="command queue full",
            )
        )
        return False

    async def run(self) -> None:
        while True:
            command = await self._queue.get()
            ack = await self.execute(command)
            await self._send_ack(ack)

    async def execute(self, command: Command) -> CommandAck:
        try:
            line = encode_command(command)
            path = await self._sink.write_line(line)
        except (OSError, ValueError) as exc:
            logger.error("Command execution failed: {}", exc)
            self._log_event(
                CommandExecuted.now(
                    request_id=command.request_id,
                    kind=command.kind.value,
                    success=False,
                    error=str(exc),
                )
            )
            return CommandAck.failed(command.request_id, str(exc))
        self._log_event(
            CommandExecuted.now(
                request_id=command.request_id,
                kind=command.kind.value,
                success=True,
                path=path,
            )
        )
        return CommandAck.ok(command.request_id)

    def _log_event(self, event: object) -> None:
        if self._event_logger:
            self._event_logger(event)
