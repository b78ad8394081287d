from __future__ import annotations

from typing import Callable, Optional

from loguru import logger

from bridge.core.commands.models import Command, CommandValidationError, ack_from_wire
from bridge.core.ops.events import CommandAcknowledged, SnapshotRejected
from bridge.core.protocol.frames import Frame, FrameError, FrameType, decode_frame, dump_json, encode_frame
from bridge.core.snapshots.models import SnapshotValidationError, parse_snapshot_table
from bridge.core.snapshots.store import SnapshotStore
from bridge.hub.dispatcher import CommandDispatcher, DispatchResult
from bridge.hub.fanout import SubscriberHub
from bridge.hub.registry import AgentConnection, AgentRegistry


class HubService:
    """Remote side of the bridge: mirrored table, browser fan-out and command relay."""

    def __init__(
        self,
        *,
        store: Optional[SnapshotStore] = None,
        registry: Optional[AgentRegistry] = None,
        subscribers: Optional[SubscriberHub] = None,
        event_logger: Optional[Callable[[object], None]] = None,
    ) -> None:
        self._store = store or SnapshotStore()
        self._registry = registry or AgentRegistry()
        self._subscribers = subscribers or SubscriberHub()
        self._dispatcher = CommandDispatcher(self._registry, event_logger=event_logger)
        self._event_logger = event_logger

    @property
    def store(self) -> SnapshotStore:
        return self._store

    @property
    def registry(self) -> AgentRegistry:
        return self._registry

    @property
    def subscribers(self) -> SubscriberHub:
        return self._subscribers

    def submit(self, command: Command) -> DispatchResult:
        return self._dispatcher.submit(command)

    def table_json(self) -> str:
        return dump_json(self._store.to_wire())

    def initial_sync_frame(self) -> Optional[str]:
        table = self._store.to_wire()
        if not table:
            return None
        return encode_frame(FrameType.SNAPSHOT, table)

    def ingest_agent_snapshot(self, data: object, *, source: str = "agent") -> bool:
        """Mirror an agent's table and push the result to every browser; all or nothing."""
        try:
            table = parse_snapshot_table(data)
        except SnapshotValidationError as exc:
            self._log_event(SnapshotRejected.now(source=source, reason=str(exc)))
            return False
        wire = self._store.merge(table)
        self._subscribers.broadcast(dump_json(wire))
        return True

    def handle_agent_message(self, connection: AgentConnection, message: str) -> None:
        try:
            frame = decode_frame(message)
        except FrameError as exc:
            logger.warning("Invalid message from {}: {}", connection.connection_id, exc)
            return
        self.handle_agent_frame(connection, frame)

    def handle_agent_frame(self, connection: AgentConnection, frame: Frame) -> None:
        if frame.type == FrameType.SNAPSHOT:
            self.ingest_agent_snapshot(frame.data, source=connection.connection_id)
        elif frame.type == FrameType.COMMAND_ACK:
            try:
                ack = ack_from_wire(frame.data, frame.id)
            except CommandValidationError as exc:
                logger.warning("Invalid acknowledgment from {}: {}", connection.connection_id, exc)
                return
            self._log_event(
                CommandAcknowledged.now(
                    request_id=ack.request_id,
                    connection_id=connection.connection_id,
                    success=ack.success,
                    error=ack.error,
                )
            )
        else:
            logger.warning("Unexpected {} frame from {}", frame.type.value, connection.connection_id)

    def status(self) -> dict[str, object]:
        return {
            "agents": [
                {
                    "id": connection.connection_id,
                    "connected_at": connection.connected_at.isoformat(),
                    "pending_commands": connection.outbound.qsize(),
                }
                for connection in self._registry.connections()
            ],
            "accounts": self._store.accounts(),
            "subscribers": len(self._subscribers),
        }

    def _log_event(self, event: object) -> None:
        if self._event_logger:
            self._event_logger(event)
