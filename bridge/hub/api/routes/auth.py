from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from bridge.core.ops.events import AuthRejected
from bridge.hub.api.deps import SESSION_COOKIE, get_config, get_sessions
from bridge.hub.config import HubConfig
from bridge.hub.pages import render_login
from bridge.hub.sessions import SessionStore, credentials_match

router = APIRouter(tags=["auth"])


@router.get("/login", response_class=HTMLResponse)
def login_page() -> str:
    return render_login()


@router.post("/login")
def login(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    config: HubConfig = Depends(get_config),
    sessions: SessionStore = Depends(get_sessions),
):
    if not credentials_match(
        username,
        password,
        expected_username=config.dashboard_user,
        expected_password=config.dashboard_pass,
    ):
        event_logger = request.app.state.event_logger
        if event_logger:
            remote = request.client.host if request.client else None
            event_logger(AuthRejected.now(channel="login", remote=remote))
        return HTMLResponse(render_login("Invalid credentials"))

    token = sessions.create()
    response = RedirectResponse("/", status_code=303)
    response.set_cookie(
        SESSION_COOKIE,
        token,
        path="/",
        httponly=True,
        samesite="lax",
        secure=_is_https(request),
    )
    return response


@router.get("/logout")
def logout(request: Request, sessions: SessionStore = Depends(get_sessions)) -> RedirectResponse:
    sessions.revoke(request.cookies.get(SESSION_COOKIE))
    response = RedirectResponse("/login", status_code=303)
    response.delete_cookie(SESSION_COOKIE, path="/")
    return response


def _is_https(request: Request) -> bool:
    # Behind a TLS-terminating proxy the scheme arrives in a header.
    forwarded = request.headers.get("x-forwarded-proto", "")
    return request.url.scheme == "https" or forwarded.lower().startswith("https")
