from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from bridge.adapters.filedrop.oif_sink import default_incoming_dir
from bridge.adapters.hub_link.ws_link import HubLinkConfig


class ConfigError(RuntimeError):
    """Raised when the process cannot start with the configured environment."""


@dataclass(frozen=True)
class AgentConfig:
    hub_url: str
    api_secret_token: str
    incoming_dir: str
    host: str
    port: int
    execution_queue_size: int
    log_level: str
    journal_path: Optional[str] = None

    @classmethod
    def from_env(cls) -> "AgentConfig":
        token = os.getenv("API_SECRET_TOKEN", "")
        if not token:
            raise ConfigError("API_SECRET_TOKEN environment variable is required")
        return cls(
            hub_url=os.getenv("CLOUD_URL") or "ws://localhost:8081/ws",
            api_secret_token=token,
            incoming_dir=os.getenv("NT_INCOMING") or default_incoming_dir(),
            host=os.getenv("AGENT_HOST", "127.0.0.1"),
            port=int(os.getenv("AGENT_PORT", "8080")),
            execution_queue_size=int(os.getenv("AGENT_EXECUTION_QUEUE", "100")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            journal_path=os.getenv("BRIDGE_JOURNAL_PATH") or None,
        )

    def link_config(self) -> HubLinkConfig:
        return HubLinkConfig(url=self.hub_url, token=self.api_secret_token)
