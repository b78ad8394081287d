from __future__ import annotations

import pytest

from bridge.agent.config import AgentConfig, ConfigError


def test_from_env_requires_secret(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("API_SECRET_TOKEN", raising=False)

    with pytest.raises(ConfigError):
        AgentConfig.from_env()


def test_from_env_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("CLOUD_URL", "NT_INCOMING", "AGENT_HOST", "AGENT_PORT", "AGENT_EXECUTION_QUEUE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("API_SECRET_TOKEN", "s3cret")

    config = AgentConfig.from_env()

    assert config.hub_url == "ws://localhost:8081/ws"
    assert config.incoming_dir.endswith("incoming")
    assert config.host == "127.0.0.1"
    assert config.port == 8080
    assert config.execution_queue_size == 100
    assert config.link_config().token == "s3cret"


def test_from_env_reads_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("API_SECRET_TOKEN", "s3cret")
    monkeypatch.setenv("CLOUD_URL", "wss://hub.example.com/ws")
    monkeypatch.setenv("NT_INCOMING", "/tmp/incoming")
    monkeypatch.setenv("AGENT_PORT", "9090")

    config = AgentConfig.from_env()

    assert config.link_config().url == "wss://hub.example.com/ws"
    assert config.incoming_dir == "/tmp/incoming"
    assert config.port == 9090
