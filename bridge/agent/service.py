from __future__ import annotations

import asyncio
from typing import Callable, Optional

from loguru import logger

from bridge.adapters.hub_link.ws_link import Dialer, HubLink, HubLinkConfig
from bridge.agent.executor import CommandExecutor
from bridge.core.commands.models import CommandAck, CommandValidationError, command_from_wire
from bridge.core.commands.ports import CommandSink
from bridge.core.link.reconnect import ReconnectStateMachine
from bridge.core.ops.events import SnapshotRejected
from bridge.core.protocol.frames import Frame, FrameError, FrameType, decode_frame, encode_frame
from bridge.core.snapshots.models import (
    Snapshot,
    SnapshotValidationError,
    parse_snapshot,
    parse_snapshot_table,
)
from bridge.core.snapshots.store import SnapshotStore


class AgentService:
    """
    Local side of the bridge.

    Owns the authoritative snapshot table, relays every update to the hub,
    and executes commands arriving from the hub through the file-drop sink.
    """

    def __init__(
        self,
        link_config: HubLinkConfig,
        sink: CommandSink,
        *,
        store: Optional[SnapshotStore] = None,
        dialer: Optional[Dialer] = None,
        machine: Optional[ReconnectStateMachine] = None,
        execution_capacity: int = 100,
        event_logger: Optional[Callable[[object], None]] = None,
    ) -> None:
        self._store = store or SnapshotStore()
        self._event_logger = event_logger
        self._link = HubLink(
            link_config,
            on_message=self.handle_message,
            initial_sync=self.initial_sync_frame,
            dialer=dialer,
            machine=machine,
            event_logger=event_logger,
        )
        self._executor = CommandExecutor(
            sink,
            self.send_ack,
            capacity=execution_capacity,
            event_logger=event_logger,
        )
        self._tasks: list[asyncio.Task] = []

    @property
    def store(self) -> SnapshotStore:
        return self._store

    @property
    def link(self) -> HubLink:
        return self._link

    @property
    def executor(self) -> CommandExecutor:
        return self._executor

    def start(self) -> None:
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._link.run_forever(), name="hub-link"),
            asyncio.create_task(self._executor.run(), name="command-executor"),
        ]

    async def stop(self) -> None:
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def ingest(self, payload: object) -> Snapshot:
        """Accept one snapshot from the trading application and relay the whole table."""
        try:
            snapshot = parse_snapshot(payload)
        except SnapshotValidationError as exc:
            self._log_event(SnapshotRejected.now(source="webhook", reason=str(exc)))
            raise
        table = self._store.apply(snapshot)
        await self._link.send(encode_frame(FrameType.SNAPSHOT, table), frame_type=FrameType.SNAPSHOT.value)
        return snapshot

    def initial_sync_frame(self) -> Optional[str]:
        table = self._store.to_wire()
        if not table:
            return None
        return encode_frame(FrameType.SNAPSHOT, table)

    async def handle_message(self, message: str) -> None:
        try:
            frame = decode_frame(message)
        except FrameError as exc:
            logger.warning("Invalid frame received from hub: {}", exc)
            return
        await self.handle_frame(frame)

    async def handle_frame(self, frame: Frame) -> None:
        if frame.type == FrameType.COMMAND:
            await self._handle_command(frame)
        elif frame.type == FrameType.SNAPSHOT:
            self._handle_snapshot(frame)
        else:
            logger.info("Ignoring {} frame from hub (id={})", frame.type.value, frame.id)

    async def send_ack(self, ack: CommandAck) -> bool:
        message = encode_frame(FrameType.COMMAND_ACK, ack.to_wire(), frame_id=ack.request_id)
        return await self._link.send(message, frame_type=FrameType.COMMAND_ACK.value)

    def status(self) -> dict[str, object]:
        return {
            "link": self._link.status(),
            "accounts": self._store.accounts(),
            "pending_commands": self._executor.pending,
        }

    async def _handle_command(self, frame: Frame) -> None:
        try:
            command = command_from_wire(frame.data, frame.id)
        except CommandValidationError as exc:
            logger.warning("Invalid command received: {}", exc)
            if frame.id:
                await self.send_ack(CommandAck.failed(frame.id, str(exc)))
            return
        self._executor.offer(command)

    def _handle_snapshot(self, frame: Frame) -> None:
        try:
            table = parse_snapshot_table(frame.data)
            self._store.merge(table)
        except SnapshotValidationError as exc:
            self._log_event(SnapshotRejected.now(source="hub", reason=str(exc)))

    def _log_event(self, event: object) -> None:
        if self._event_logger:
            self._event_logger(event)
