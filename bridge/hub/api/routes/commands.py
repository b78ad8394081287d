from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request

from bridge.core.commands.models import Command, CommandKind, CommandValidationError
from bridge.core.protocol.frames import load_json
from bridge.hub.api.deps import get_hub_service, require_session
from bridge.hub.dispatcher import DispatchResult
from bridge.hub.service import HubService

router = APIRouter(prefix="/api", tags=["commands"], dependencies=[Depends(require_session)])


@router.post("/flatten")
async def flatten_all(service: HubService = Depends(get_hub_service)) -> dict[str, Any]:
    """Flatten every account on every attached agent; the body is ignored."""
    return _accepted(service.submit(Command.create(CommandKind.FLATTEN_ALL)))


@router.post("/flatten_account")
async def flatten_account(request: Request, service: HubService = Depends(get_hub_service)) -> dict[str, Any]:
    body = await _json_object(request)
    return _submit(service, CommandKind.FLATTEN_ACCOUNT, body)


@router.post("/close_position")
async def close_position(request: Request, service: HubService = Depends(get_hub_service)) -> dict[str, Any]:
    body = await _json_object(request)
    return _submit(service, CommandKind.CLOSE_POSITION, body)


@router.post("/cancel_order")
async def cancel_order(request: Request, service: HubService = Depends(get_hub_service)) -> dict[str, Any]:
    body = await _json_object(request)
    return _submit(service, CommandKind.CANCEL_ORDER, body)


@router.get("/status")
def hub_status(service: HubService = Depends(get_hub_service)) -> dict[str, object]:
    return service.status()


async def _json_object(request: Request) -> dict[str, Any]:
    raw = await request.body()
    try:
        body = load_json(raw)
    except (ValueError, RecursionError):
        raise HTTPException(status_code=400, detail="malformed JSON body")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="body must be a JSON object")
    return body


def _submit(service: HubService, kind: CommandKind, body: dict[str, Any]) -> dict[str, Any]:
    try:
        command = Command.create(
            kind,
            account=body.get("account"),
            instrument=body.get("instrument"),
            order_id=body.get("orderId"),
        )
    except CommandValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _accepted(service.submit(command))


def _accepted(result: DispatchResult) -> dict[str, Any]:
    return {
        "status": "accepted",
        "id": result.request_id,
        "delivered": list(result.delivered),
        "dropped": list(result.dropped),
    }
