from __future__ import annotations

import asyncio
import json
from typing import Mapping, Optional

import pytest

from bridge.adapters.hub_link.ws_link import HubLinkConfig
from bridge.agent.service import AgentService
from bridge.core.commands.models import CommandAck
from bridge.core.link.reconnect import ReconnectStateMachine
from bridge.core.ops.events import MessageDropped, SnapshotRejected
from bridge.core.protocol.frames import FrameType, encode_frame
from bridge.core.snapshots.models import SnapshotValidationError


class FakeConnection:
    def __init__(self) -> None:
        self.sent: list[str] = []
        self.closed = False
        self.inbox: asyncio.Queue[Optional[str]] = asyncio.Queue()

    async def send(self, message: str) -> None:
        if self.closed:
            raise ConnectionError("connection closed")
        self.sent.append(message)

    async def recv(self) -> str:
        if self.closed:
            raise ConnectionError("connection closed")
        item = await self.inbox.get()
        if item is None:
            raise ConnectionError("connection closed")
        return item

    async def close(self) -> None:
        if not self.closed:
            self.closed = True
            self.inbox.put_nowait(None)


class RecordingSink:
    def __init__(self) -> None:
        self.lines: list[str] = []

    async def write_line(self, line: str) -> str:
        self.lines.append(line)
        return "/incoming/oif.txt"


async def _no_sleep(delay: float) -> None:
    return None


def _service(connection: Optional[FakeConnection] = None, events: Optional[list] = None) -> AgentService:
    async def dialer(url: str, headers: Mapping[str, str]) -> FakeConnection:
        if connection is None:
            raise ConnectionRefusedError("hub unreachable")
        return connection

    return AgentService(
        HubLinkConfig(url="ws://hub.test/ws", token="s3cret"),
        RecordingSink(),
        dialer=dialer,
        machine=ReconnectStateMachine(sleep=_no_sleep),
        event_logger=events.append if events is not None else None,
    )


async def _wait_for(predicate, attempts: int = 200) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never became true")


def test_ingest_relays_whole_table_to_hub() -> None:
    async def run():
        connection = FakeConnection()
        service = _service(connection)
        cycle = asyncio.create_task(service.link.run_once())
        await _wait_for(lambda: service.link.connected)
        await service.ingest({"account": "Sim101", "balance": 10.0})
        await service.ingest({"account": "Sim102", "balance": 20.0})
        await connection.close()
        await cycle
        return connection.sent

    sent = asyncio.run(run())

    frames = [json.loads(message) for message in sent]
    assert [frame["type"] for frame in frames] == ["snapshot", "snapshot"]
    assert sorted(frames[-1]["data"]) == ["Sim101", "Sim102"]
    assert frames[-1]["data"]["Sim102"]["balance"] == 20.0


def test_reconnect_sends_current_table_first() -> None:
    async def run():
        connection = FakeConnection()
        service = _service(connection)
        await service.ingest({"account": "Sim101", "balance": 10.0})
        cycle = asyncio.create_task(service.link.run_once())
        await _wait_for(lambda: len(connection.sent) == 1)
        await connection.close()
        await cycle
        return connection.sent

    sent = asyncio.run(run())

    frame = json.loads(sent[0])
    assert frame["type"] == "snapshot"
    assert list(frame["data"]) == ["Sim101"]


def test_ingest_while_disconnected_keeps_table_and_drops_relay() -> None:
    events: list[object] = []
    service = _service(events=events)

    snapshot = asyncio.run(service.ingest({"account": "Sim101"}))

    assert snapshot.account == "Sim101"
    assert service.store.accounts() == ["Sim101"]
    assert any(isinstance(event, MessageDropped) for event in events)


def test_ingest_rejects_invalid_snapshot_without_touching_table() -> None:
    events: list[object] = []
    service = _service(events=events)

    with pytest.raises(SnapshotValidationError):
        asyncio.run(service.ingest({"account": ""}))

    assert len(service.store) == 0
    assert isinstance(events[-1], SnapshotRejected)


def test_command_frames_reach_the_executor() -> None:
    service = _service()
    frame = encode_frame(
        FrameType.COMMAND,
        {"kind": "close_position", "payload": {"account": "Sim101", "instrument": "ES 03-25"}},
        frame_id="cmd_42",
    )

    asyncio.run(service.handle_message(frame))

    assert service.executor.pending == 1


def test_invalid_command_frame_is_acknowledged_as_failure() -> None:
    service = _service()
    acks: list[CommandAck] = []

    async def send_ack(ack: CommandAck) -> bool:
        acks.append(ack)
        return True

    service.send_ack = send_ack  # type: ignore[method-assign]
    frame = encode_frame(FrameType.COMMAND, {"kind": "place_order", "payload": {}}, frame_id="cmd_43")

    asyncio.run(service.handle_message(frame))

    assert service.executor.pending == 0
    assert len(acks) == 1
    assert acks[0].request_id == "cmd_43"
    assert acks[0].success is False
    assert "unknown command type" in acks[0].error


def test_snapshot_frames_from_hub_merge_into_table() -> None:
    service = _service()
    asyncio.run(service.ingest({"account": "Sim101", "balance": 1.0}))
    frame = encode_frame(FrameType.SNAPSHOT, {"Sim102": {"account": "Sim102", "balance": 2.0}})

    asyncio.run(service.handle_message(frame))

    assert service.store.accounts() == ["Sim101", "Sim102"]


def test_unparseable_frames_are_ignored() -> None:
    service = _service()

    asyncio.run(service.handle_message("{not json"))
    asyncio.run(service.handle_message(encode_frame(FrameType.COMMAND_ACK, {"success": True}, frame_id="x")))

    assert service.executor.pending == 0
    assert len(service.store) == 0
