from __future__ import annotations

import asyncio
import json

from bridge.core.commands.models import Command, CommandKind
from bridge.core.ops.events import CommandAcknowledged, SnapshotRejected
from bridge.core.protocol.frames import FrameType, encode_frame
from bridge.hub.registry import AgentConnection
from bridge.hub.service import HubService


def _table(*accounts: str) -> dict:
    return {account: {"account": account, "balance": 1.0} for account in accounts}


def test_agent_snapshot_updates_table_and_reaches_subscribers() -> None:
    service = HubService()
    subscription = service.subscribers.subscribe()
    connection = AgentConnection.open()

    service.handle_agent_message(connection, encode_frame(FrameType.SNAPSHOT, _table("Sim101", "Sim102")))

    assert service.store.accounts() == ["Sim101", "Sim102"]
    pushed = json.loads(subscription.queue.get_nowait())
    assert sorted(pushed) == ["Sim101", "Sim102"]
    assert json.loads(service.table_json()) == pushed


def test_malformed_snapshot_frame_is_rejected_whole() -> None:
    events: list[object] = []
    service = HubService(event_logger=events.append)
    subscription = service.subscribers.subscribe()
    table = _table("Sim101")
    table["Sim102"] = {"account": "Sim102", "balance": "lots"}

    accepted = service.ingest_agent_snapshot(table, source="conn_1")

    assert accepted is False
    assert len(service.store) == 0
    assert subscription.queue.qsize() == 0
    assert isinstance(events[-1], SnapshotRejected)


def test_acknowledgments_are_recorded() -> None:
    events: list[object] = []
    service = HubService(event_logger=events.append)
    connection = AgentConnection.open()

    service.handle_agent_message(
        connection,
        encode_frame(FrameType.COMMAND_ACK, {"success": False, "error": "disk full"}, frame_id="cmd_5"),
    )

    ack = events[-1]
    assert isinstance(ack, CommandAcknowledged)
    assert ack.request_id == "cmd_5"
    assert ack.connection_id == connection.connection_id
    assert ack.success is False
    assert ack.error == "disk full"


def test_garbage_and_unexpected_frames_are_ignored() -> None:
    service = HubService()
    connection = AgentConnection.open()

    service.handle_agent_message(connection, "{oops")
    service.handle_agent_message(connection, encode_frame(FrameType.COMMAND, {"kind": "flatten_all"}, frame_id="x"))

    assert len(service.store) == 0


def test_initial_sync_frame_only_when_table_has_accounts() -> None:
    service = HubService()
    assert service.initial_sync_frame() is None

    service.ingest_agent_snapshot(_table("Sim101"))

    frame = json.loads(service.initial_sync_frame())
    assert frame["type"] == "snapshot"
    assert list(frame["data"]) == ["Sim101"]


def test_status_lists_agents_accounts_and_subscribers() -> None:
    service = HubService()
    connection = AgentConnection.open()
    service.registry.register(connection)
    service.subscribers.subscribe()
    service.submit(Command.create(CommandKind.FLATTEN_ALL))

    status = service.status()

    assert status["agents"][0]["id"] == connection.connection_id
    assert status["agents"][0]["pending_commands"] == 1
    assert status["accounts"] == []
    assert status["subscribers"] == 1


def test_late_subscriber_gets_current_table_not_history() -> None:
    service = HubService()
    for balance in (1.0, 2.0, 3.0):
        service.ingest_agent_snapshot({"Sim101": {"account": "Sim101", "balance": balance}})

    async def first_frame() -> str:
        stream = service.subscribers.stream(service.table_json, heartbeat_interval=5)
        frame = await stream.__anext__()
        await stream.aclose()
        return frame

    frame = asyncio.run(first_frame())

    assert frame.startswith("data: ")
    table = json.loads(frame[len("data: "):])
    assert table["Sim101"]["balance"] == 3.0


def test_non_finite_snapshot_values_never_reach_subscribers() -> None:
    events: list[object] = []
    service = HubService(event_logger=events.append)
    subscription = service.subscribers.subscribe()
    connection = AgentConnection.open()
    raw = '{"type": "snapshot", "data": {"Sim101": {"account": "Sim101", "balance": NaN}}}'

    service.handle_agent_message(connection, raw)
    accepted = service.ingest_agent_snapshot({"Sim101": {"account": "Sim101", "balance": float("inf")}})

    assert accepted is False
    assert len(service.store) == 0
    assert subscription.queue.qsize() == 0
    assert isinstance(events[-1], SnapshotRejected)
    assert json.loads(service.table_json(), parse_constant=_fail_on_constant) == {}


def _fail_on_constant(name: str) -> None:
    raise AssertionError(f"non-standard JSON constant {name} on the wire")
