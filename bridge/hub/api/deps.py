from fastapi import Request

from bridge.hub.config import HubConfig
from bridge.hub.service import HubService
from bridge.hub.sessions import SessionStore

SESSION_COOKIE = "session"


class LoginRequired(Exception):
    """Raised by protected routes when the browser has no live session."""


def get_hub_service(request: Request) -> HubService:
    return request.app.state.hub


def get_sessions(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_config(request: Request) -> HubConfig:
    return request.app.state.config


def require_session(request: Request) -> str:
    sessions: SessionStore = request.app.state.sessions
    token = request.cookies.get(SESSION_COOKIE)
    if not sessions.touch(token):
        raise LoginRequired()
    return token
