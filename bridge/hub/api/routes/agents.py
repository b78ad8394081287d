from fastapi import APIRouter, WebSocket
from fastapi.responses import PlainTextResponse

from bridge.core.ops.events import AuthRejected
from bridge.hub.agent_channel import serve_agent
from bridge.hub.config import HubConfig
from bridge.hub.service import HubService
from bridge.hub.sessions import bearer_matches

router = APIRouter(tags=["agents"])


@router.websocket("/ws")
async def agent_socket(websocket: WebSocket) -> None:
    state = websocket.app.state
    config: HubConfig = state.config
    service: HubService = state.hub

    if not bearer_matches(websocket.headers.get("authorization"), config.api_secret_token):
        if state.event_logger:
            remote = websocket.client.host if websocket.client else None
            state.event_logger(AuthRejected.now(channel="agent", remote=remote))
        await _reject(websocket)
        return

    await serve_agent(
        websocket,
        service,
        queue_size=config.agent_queue_size,
        event_logger=state.event_logger,
    )


async def _reject(websocket: WebSocket) -> None:
    # Servers that support the denial extension answer with a plain 401.
    if "websocket.http.response" in (websocket.scope.get("extensions") or {}):
        await websocket.send_denial_response(PlainTextResponse("Unauthorized", status_code=401))
    else:
        await websocket.close(code=1008)
