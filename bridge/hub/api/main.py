from typing import Callable, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from bridge.core.snapshots.store import SnapshotStore
from bridge.hub.api.deps import LoginRequired, require_session
from bridge.hub.api.routes import agents, auth, commands, events
from bridge.hub.config import HubConfig
from bridge.hub.fanout import SubscriberHub
from bridge.hub.pages import render_dashboard
from bridge.hub.service import HubService
from bridge.hub.sessions import SessionStore


def create_app(
    config: HubConfig,
    *,
    service: Optional[HubService] = None,
    sessions: Optional[SessionStore] = None,
    event_logger: Optional[Callable[[object], None]] = None,
) -> FastAPI:
    app = FastAPI(title="trade-bridge hub")

    if service is None:
        service = HubService(
            store=SnapshotStore(),
            subscribers=SubscriberHub(
                queue_size=config.subscriber_queue_size,
                heartbeat_interval=config.heartbeat_interval,
            ),
            event_logger=event_logger,
        )
    app.state.config = config
    app.state.hub = service
    app.state.sessions = sessions or SessionStore(config.session_idle_timeout)
    app.state.event_logger = event_logger

    @app.exception_handler(LoginRequired)
    async def _login_required(request: Request, exc: LoginRequired) -> RedirectResponse:
        return RedirectResponse("/login", status_code=303)

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/", response_class=HTMLResponse, dependencies=[Depends(require_session)])
    def dashboard() -> str:
        return render_dashboard()

    # Register route groups
    app.include_router(auth.router)
    app.include_router(commands.router)
    app.include_router(events.router)
    app.include_router(agents.router)

    return app
