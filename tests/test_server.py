"""HTTP and websocket surface of the FastAPI app."""
from __future__ import annotations

from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient

from arena import config
from arena.match import Match
from arena.rooms import GameRoom
from arena.server import app


@pytest.fixture()
def client() -> TestClient:
    app.state.room = GameRoom(Match(dev_mode=True))
    with TestClient(app) as test_client:
        yield test_client


def receive_until(websocket, event: str, limit: int = 200) -> Dict[str, Any]:
    for _ in range(limit):
        frame = websocket.receive_json()
        if frame["type"] == event:
            return frame["data"]
    raise AssertionError(f"{event} never arrived")


def test_health_reports_room_state(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "players": 0, "state": "WAITING"}


def test_config_endpoint_exposes_constants(client: TestClient) -> None:
    payload = client.get("/api/game/config").json()
    assert payload["mapWidth"] == config.MAP_WIDTH
    assert payload["maxPlayers"] == config.MAX_PLAYERS
    assert payload["enemyStats"]["VAMPIRE"]["hp"] == 5


def test_websocket_join_and_start(client: TestClient) -> None:
    with client.websocket_connect("/ws") as websocket:
        lobby = receive_until(websocket, "lobbyState")
        assert lobby["devMode"] is True
        websocket.send_json({"type": "join", "data": {"username": "ann"}})
        joined = receive_until(websocket, "joined")
        assert joined["username"] == "ann"
        assert joined["isLeadPlayer"] is True

        websocket.send_json({"type": "startGame"})
        started = receive_until(websocket, "gameStarted")
        assert started == {}
        assert client.get("/health").json()["state"] == "COUNTDOWN"


def test_websocket_ping(client: TestClient) -> None:
    with client.websocket_connect("/ws") as websocket:
        websocket.send_json({"type": "ping"})
        assert receive_until(websocket, "pong") == {}
