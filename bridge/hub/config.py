from __future__ import annotations

import os
import secrets
from dataclasses import dataclass
from typing import Optional

DEFAULT_DASHBOARD_USER = "admin"
DEFAULT_DASHBOARD_PASS = "ninja123"


@dataclass(frozen=True)
class HubConfig:
    host: str
    port: int
    dashboard_user: str
    dashboard_pass: str
    api_secret_token: str
    agent_queue_size: int = 10
    subscriber_queue_size: int = 10
    heartbeat_interval: float = 20.0
    session_idle_timeout: float = 24 * 3600.0
    log_level: str = "INFO"
    journal_path: Optional[str] = None
    token_generated: bool = False

    @classmethod
    def from_env(cls) -> "HubConfig":
        token = os.getenv("API_SECRET_TOKEN", "")
        generated = not token
        if generated:
            token = generate_secret()
        return cls(
            host=os.getenv("HUB_HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8081")),
            dashboard_user=os.getenv("DASHBOARD_USER") or DEFAULT_DASHBOARD_USER,
            dashboard_pass=os.getenv("DASHBOARD_PASS") or DEFAULT_DASHBOARD_PASS,
            api_secret_token=token,
            agent_queue_size=int(os.getenv("HUB_AGENT_QUEUE", "10")),
            subscriber_queue_size=int(os.getenv("HUB_SUBSCRIBER_QUEUE", "10")),
            heartbeat_interval=float(os.getenv("HUB_HEARTBEAT_SECS", "20")),
            session_idle_timeout=float(os.getenv("SESSION_IDLE_HOURS", "24")) * 3600.0,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            journal_path=os.getenv("BRIDGE_JOURNAL_PATH") or None,
            token_generated=generated,
        )

    @property
    def uses_default_password(self) -> bool:
        return self.dashboard_pass == DEFAULT_DASHBOARD_PASS


def generate_secret() -> str:
    return secrets.token_urlsafe(32)
