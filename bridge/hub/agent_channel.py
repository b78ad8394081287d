from __future__ import annotations

import asyncio
from typing import Callable, Optional

from fastapi import WebSocket, WebSocketDisconnect
from loguru import logger

from bridge.core.protocol.frames import FrameType, encode_frame
from bridge.core.ops.events import AgentConnected, AgentDisconnected
from bridge.hub.registry import AgentConnection
from bridge.hub.service import HubService

_SEND_ERRORS = (WebSocketDisconnect, RuntimeError, OSError)


async def serve_agent(
    websocket: WebSocket,
    service: HubService,
    *,
    queue_size: int = 10,
    event_logger: Optional[Callable[[object], None]] = None,
) -> None:
    """
    Drive one authenticated agent connection until either direction fails.

    The connection is registered before the upgrade completes so commands
    submitted meanwhile wait in its queue. One task reads frames and one
    drains the outbound queue; whichever stops first ends the connection.
    """
    remote = websocket.client.host if websocket.client else None
    connection = AgentConnection.open(queue_size=queue_size, remote=remote)
    service.registry.register(connection)
    reason = "closed"
    tasks: list[asyncio.Task] = []
    try:
        await websocket.accept()
        _log_event(event_logger, AgentConnected.now(connection_id=connection.connection_id, remote=remote))

        initial = service.initial_sync_frame()
        if initial is not None:
            await websocket.send_text(initial)

        reader = asyncio.create_task(_read_frames(websocket, service, connection), name="agent-reader")
        sender = asyncio.create_task(_send_commands(websocket, connection), name="agent-sender")
        tasks = [reader, sender]
        done, _pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        reason = done.pop().result()
        if sender.done():
            await _close_quietly(websocket)
    except _SEND_ERRORS as exc:
        reason = f"write error: {type(exc).__name__}: {exc}"
    finally:
        service.registry.unregister(connection.connection_id)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        _log_event(
            event_logger,
            AgentDisconnected.now(connection_id=connection.connection_id, reason=reason),
        )


async def _read_frames(websocket: WebSocket, service: HubService, connection: AgentConnection) -> str:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return f"disconnected ({message.get('code')})"
        text = message.get("text")
        if text is None:
            raw = message.get("bytes") or b""
            text = raw.decode("utf-8", errors="replace")
        service.handle_agent_message(connection, text)


async def _send_commands(websocket: WebSocket, connection: AgentConnection) -> str:
    while True:
        command = await connection.outbound.get()
        frame = encode_frame(FrameType.COMMAND, command.to_wire(), frame_id=command.request_id)
        try:
            await websocket.send_text(frame)
        except _SEND_ERRORS as exc:
            logger.warning(
                "Failed to send command {} to {}: {}",
                command.request_id,
                connection.connection_id,
                exc,
            )
            return f"write error: {type(exc).__name__}"


async def _close_quietly(websocket: WebSocket) -> None:
    try:
        await websocket.close()
    except _SEND_ERRORS as exc:
        logger.debug("Ignoring error while closing agent socket: {}", exc)


def _log_event(event_logger: Optional[Callable[[object], None]], event: object) -> None:
    if event_logger:
        event_logger(event)
