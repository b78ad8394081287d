from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from bridge.core.commands.models import Command
from bridge.core.queues import BoundedQueue


@dataclass(frozen=True, eq=False)
class AgentConnection:
    connection_id: str
    outbound: BoundedQueue[Command]
    connected_at: datetime
    remote: Optional[str] = None

    @classmethod
    def open(cls, *, queue_size: int = 10, remote: Optional[str] = None) -> "AgentConnection":
        return cls(
            connection_id=f"conn_{uuid.uuid4().hex[:12]}",
            outbound=BoundedQueue(queue_size),
            connected_at=datetime.now(timezone.utc),
            remote=remote,
        )


class AgentRegistry:
    """Currently attached agent connections, keyed by connection id."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._connections: dict[str, AgentConnection] = {}

    def register(self, connection: AgentConnection) -> None:
        with self._lock:
            self._connections[connection.connection_id] = connection

    def unregister(self, connection_id: str) -> bool:
        with self._lock:
            return self._connections.pop(connection_id, None) is not None

    def get(self, connection_id: str) -> Optional[AgentConnection]:
        with self._lock:
            return self._connections.get(connection_id)

    def connections(self) -> list[AgentConnection]:
        with self._lock:
            return list(self._connections.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)
