
from fastapi import FastAPI, HTTPException, Request

from bridge.agent.service import AgentService
from bridge.core.protocol.frames import load_json
from bridge.core.snapshots.models import SnapshotValidationError


def create_app(service: AgentService, *, run_background: bool = True) -> FastAPI:
    app = FastAPI(title="trade-bridge agent")
    app.state.agent = service

    @app.on_event("startup")
    async def _startup() -> None:
        # The hub link and the command worker live as long as the server.
        if run_background:
            service.start()

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await service.stop()

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/status", tags=["health"])
    def status() -> dict[str, object]:
        return service.status()

    @app.post("/webhook", tags=["snapshots"])
    async def webhook(request: Request) -> dict[str, str]:
        body = await request.body()
        try:
            payload = load_json(body)
        except (ValueError, RecursionError):
            raise HTTPException(status_code=400, detail="bad payload")
        try:
            snapshot = await service.ingest(payload)
        except SnapshotValidationError as exc:
            raise HTTPException(status_code=400, detail=f"bad payload: {exc}")
        return {"status": "ok", "account": snapshot.account}

    return app
