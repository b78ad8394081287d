from __future__ import annotations

from fastapi.testclient import TestClient

from bridge.adapters.hub_link.ws_link import HubLinkConfig
from bridge.agent.api import create_app
from bridge.agent.service import AgentService


class RecordingSink:
    async def write_line(self, line: str) -> str:
        return "/incoming/oif.txt"


def _client() -> tuple[TestClient, AgentService]:
    service = AgentService(HubLinkConfig(url="ws://hub.test/ws", token="s3cret"), RecordingSink())
    return TestClient(create_app(service, run_background=False)), service


def test_webhook_accepts_snapshot() -> None:
    client, service = _client()
    with client:
        response = client.post(
            "/webhook",
            json={"account": "Sim101", "balance": 50000.0, "positions": [], "workingOrders": []},
        )

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "account": "Sim101"}
    assert service.store.get("Sim101").balance == 50000.0


def test_webhook_rejects_malformed_body_without_touching_table() -> None:
    client, service = _client()
    with client:
        bad_json = client.post("/webhook", content=b"{not json", headers={"Content-Type": "application/json"})
        bad_field = client.post("/webhook", json={"account": "Sim101", "balance": "lots"})
        no_account = client.post("/webhook", json={"balance": 1.0})

    assert bad_json.status_code == 400
    assert bad_field.status_code == 400
    assert no_account.status_code == 400
    assert len(service.store) == 0


def test_status_reports_link_state_and_accounts() -> None:
    client, _ = _client()
    with client:
        client.post("/webhook", json={"account": "Sim101"})
        status = client.get("/status").json()
        health = client.get("/health").json()

    assert health == {"status": "ok"}
    assert status["accounts"] == ["Sim101"]
    assert status["link"]["state"] == "disconnected"
    assert status["pending_commands"] == 0


def test_webhook_rejects_non_finite_numbers() -> None:
    client, service = _client()
    with client:
        responses = [
            client.post(
                "/webhook",
                content=f'{{"account": "Sim101", "balance": {literal}}}'.encode(),
                headers={"Content-Type": "application/json"},
            )
            for literal in ("NaN", "Infinity", "-Infinity", "1e999")
        ]

    assert [response.status_code for response in responses] == [400, 400, 400, 400]
    assert len(service.store) == 0


def test_webhook_rejects_deeply_nested_body() -> None:
    client, service = _client()
    with client:
        response = client.post(
            "/webhook",
            content=b"[" * 100000 + b"]" * 100000,
            headers={"Content-Type": "application/json"},
        )

    assert response.status_code == 400
    assert len(service.store) == 0
