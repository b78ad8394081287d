from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from bridge.hub.api.deps import get_config, get_hub_service, require_session
from bridge.hub.config import HubConfig
from bridge.hub.service import HubService

router = APIRouter(tags=["events"])

_STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.get("/events", dependencies=[Depends(require_session)])
async def events(
    service: HubService = Depends(get_hub_service),
    config: HubConfig = Depends(get_config),
) -> StreamingResponse:
    """Server-sent events: the current table first, then every update."""
    stream = service.subscribers.stream(service.table_json, heartbeat_interval=config.heartbeat_interval)
    return StreamingResponse(stream, media_type="text/event-stream", headers=_STREAM_HEADERS)
