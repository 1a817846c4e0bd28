"""Tests for the FastAPI ingestion endpoint."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from lilybear.agent.base import Agent
from lilybear.bridge.relay import RelayBridge
from lilybear.bridge.server import create_app
from lilybear.bus.events import BROADCAST
from lilybear.bus.whisper import WhisperBus
from lilybear.commands.dispatcher import CommandDispatcher
from lilybear.config.schema import RelayConfig


class Recorder:
    def __init__(self):
        self.calls: list[tuple[str, str]] = []

    def __call__(self, agent, sender, body):
        self.calls.append((sender, body))


@pytest.fixture
def bus():
    return WhisperBus()


@pytest.fixture
def client(bus):
    return TestClient(create_app(bus))


def test_broadcast_post_reaches_every_agent(bus, client):
    recs = {name: Recorder() for name in ("Lilybear", "Serafina", "ShadowFlowers")}
    for name, rec in recs.items():
        Agent(name, bus, reaction=rec).activate()

    response = client.post("/osc", json={"from": "x", "to": BROADCAST, "message": "hi"})

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "delivered": 3}
    assert all(rec.calls == [("x", "hi")] for rec in recs.values())


def test_direct_post_reaches_only_addressee(bus, client):
    lily, other = Recorder(), Recorder()
    Agent("lily", bus, reaction=lily).activate()
    Agent("other", bus, reaction=other).activate()

    response = client.post("/osc", json={"from": "quinn", "to": "lily", "message": "hello"})

    assert response.status_code == 200
    assert lily.calls == [("quinn", "hello")]
    assert other.calls == []


def test_missing_to_is_bad_request_and_not_published(bus, client):
    tap = MagicMock()
    bus.subscribe(BROADCAST, tap)

    response = client.post("/osc", json={"from": "x", "message": "hi"})

    assert response.status_code == 400
    assert "to" in response.json()["detail"]
    tap.assert_not_called()


@pytest.mark.parametrize(
    "payload",
    [
        {"to": "*", "message": "hi"},
        {"from": "x", "to": "*"},
        {"from": "", "to": "*", "message": "hi"},
        {"from": "x", "to": "   ", "message": "hi"},
        {"from": "x", "to": "*", "message": 42},
        {},
    ],
)
def test_incomplete_payloads_are_rejected(bus, client, payload):
    tap = MagicMock()
    bus.subscribe(BROADCAST, tap)

    response = client.post("/osc", json=payload)

    assert response.status_code == 400
    tap.assert_not_called()


def test_malformed_body_is_bad_request(client):
    response = client.post(
        "/osc", content=b"not json", headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400


def test_non_object_body_is_bad_request(client):
    response = client.post("/osc", json=["from", "to", "message"])
    assert response.status_code == 400


def test_faulting_agent_still_returns_ok(bus, client):
    def boom(agent, sender, body):
        raise RuntimeError("crash")

    Agent("lily", bus, reaction=boom).activate()

    response = client.post("/osc", json={"from": "x", "to": "lily", "message": "hi"})

    assert response.status_code == 200


def test_health_lists_subscribers(bus, client):
    Agent("Serafina", bus).activate()
    Agent("Lilybear", bus).activate()

    data = client.get("/health").json()

    assert data["status"] == "healthy"
    assert data["subscribers"] == ["Lilybear", "Serafina"]


def test_root_lists_endpoints(client):
    data = client.get("/").json()
    assert data["endpoints"]["whisper"] == "POST /osc"


# ── /commands ─────────────────────────────────────────────────────────────────


@pytest.fixture
def command_client(bus):
    dispatcher = CommandDispatcher(RelayBridge(RelayConfig(), bus=bus), job_runner=AsyncMock())
    with TestClient(create_app(bus, dispatcher=dispatcher)) as c:
        yield c


def test_report_command_is_acknowledged(command_client):
    response = command_client.post("/commands", json={"command": "/council report now"})
    assert response.status_code == 202
    assert response.json() == {"status": "accepted", "message": "Summoning council report…"}


def test_unknown_command_is_not_found(command_client):
    response = command_client.post("/commands", json={"command": "council dance"})
    assert response.status_code == 404


def test_whisper_command_with_empty_body_is_bad_request(command_client):
    response = command_client.post(
        "/commands", json={"command": "council whisper", "from": "quinn", "text": "lily"}
    )
    assert response.status_code == 400


def test_commands_without_dispatcher_is_not_found(client):
    response = client.post("/commands", json={"command": "council report now"})
    assert response.status_code == 404
