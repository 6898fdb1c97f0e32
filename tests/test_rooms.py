"""Routing and delivery through the websocket room, using in-memory sockets."""
from __future__ import annotations

import asyncio
import random
from typing import Any, Dict, List

import pytest
from conftest import FakeClock

from arena import config
from arena.match import Match
from arena.models import MatchState
from arena.rooms import GameRoom, RoomError


class FakeWebSocket:
    def __init__(self) -> None:
        self.sent: List[Dict[str, Any]] = []
        self.fail = False

    async def send_json(self, data: Dict[str, Any]) -> None:
        if self.fail:
            raise ConnectionError("socket closed")
        self.sent.append(data)

    def events(self, name: str) -> List[Dict[str, Any]]:
        return [frame["data"] for frame in self.sent if frame["type"] == name]


def make_room(clock: FakeClock, dev_mode: bool = True) -> GameRoom:
    return GameRoom(Match(dev_mode=dev_mode, clock=clock, rng=random.Random(7)))


async def connect(room: GameRoom, username: str = "") -> tuple:
    socket = FakeWebSocket()
    connection_id = await room.connect(socket)
    if username:
        await room.dispatch(connection_id, {"type": "join", "data": {"username": username}})
    return connection_id, socket


def test_connect_sends_lobby_then_join_acknowledges(clock: FakeClock) -> None:
    async def scenario() -> None:
        room = make_room(clock)
        cid, socket = await connect(room)
        assert socket.sent[0]["type"] == "lobbyState"
        await room.dispatch(cid, {"type": "join", "data": {"username": "ann"}})
        joined = socket.events("joined")
        assert joined == [{"id": cid, "username": "ann", "isLeadPlayer": True}]
        assert socket.events("playerJoined")
        assert socket.events("lobbyState")[-1]["players"][0]["username"] == "ann"

    asyncio.run(scenario())


def test_join_error_goes_only_to_sender(clock: FakeClock) -> None:
    async def scenario() -> None:
        room = make_room(clock)
        _, first = await connect(room, "ann")
        _, second = await connect(room, "ANN")
        assert second.events("joinError")[0]["code"] == "NAME_TAKEN"
        assert not first.events("joinError")
        assert room.match.player_count == 1

    asyncio.run(scenario())


def test_rejected_command_replies_with_error(clock: FakeClock) -> None:
    async def scenario() -> None:
        room = make_room(clock)
        await connect(room, "ann")
        bob_id, bob = await connect(room, "bob")
        await room.dispatch(bob_id, {"type": "startGame"})
        error = bob.events("error")[0]
        assert error["code"] == "NOT_LEAD_PLAYER"
        assert error["message"]
        assert room.match.state is MatchState.WAITING

    asyncio.run(scenario())


def test_ping_gets_pong(clock: FakeClock) -> None:
    async def scenario() -> None:
        room = make_room(clock)
        cid, socket = await connect(room)
        await room.dispatch(cid, {"type": "ping"})
        assert socket.sent[-1] == {"type": "pong", "data": {}}

    asyncio.run(scenario())


def test_unknown_connection_raises(clock: FakeClock) -> None:
    async def scenario() -> None:
        room = make_room(clock)
        with pytest.raises(RoomError):
            await room.dispatch("nobody", {"type": "ping"})

    asyncio.run(scenario())


def test_malformed_frames_are_ignored(clock: FakeClock) -> None:
    async def scenario() -> None:
        room = make_room(clock)
        cid, socket = await connect(room)
        before = len(socket.sent)
        await room.dispatch(cid, ["join"])
        await room.dispatch(cid, {"type": "join", "data": "ann"})
        await room.dispatch(cid, {"type": "launchRockets"})
        assert len(socket.sent) == before
        assert room.match.player_count == 0

    asyncio.run(scenario())


def test_tick_broadcasts_state_to_spectators(clock: FakeClock) -> None:
    async def scenario() -> None:
        room = make_room(clock)
        _, player = await connect(room, "ann")
        _, spectator = await connect(room)
        await room.tick()
        assert spectator.events("gameState")[-1]["matchState"] == "WAITING"
        assert "ann" in [entity["username"] for entity in player.events("gameState")[-1]["entities"].values()]

    asyncio.run(scenario())


def test_input_drives_player_once_playing(clock: FakeClock) -> None:
    async def scenario() -> None:
        room = make_room(clock)
        cid, socket = await connect(room, "ann")
        await room.dispatch(cid, {"type": "startGame"})
        assert socket.events("gameStarted")
        clock.advance(config.COUNTDOWN_DURATION)
        await room.tick()
        assert room.match.state is MatchState.PLAYING

        player = room.match.players[cid]
        player.x = 400.0
        await room.dispatch(cid, {"type": "input", "data": {"keys": {"KeyD": True}}})
        clock.advance(16)
        await room.tick()
        assert player.x == 400.0 + config.PLAYER_SPEED

    asyncio.run(scenario())


def test_failed_send_drops_connection_as_leave(clock: FakeClock) -> None:
    async def scenario() -> None:
        room = make_room(clock)
        ann_id, ann = await connect(room, "ann")
        bob_id, bob = await connect(room, "bob")
        bob.fail = True
        await room.tick()
        assert bob_id not in room.connections
        assert bob_id not in room.match.players
        assert ann.events("playerLeft") == [{"id": bob_id, "username": "bob"}]
        assert room.match.lead_player_id == ann_id

    asyncio.run(scenario())


def test_disconnect_removes_player(clock: FakeClock) -> None:
    async def scenario() -> None:
        room = make_room(clock)
        ann_id, _ = await connect(room, "ann")
        _, bob = await connect(room, "bob")
        await room.disconnect(ann_id)
        assert ann_id not in room.connections
        assert bob.events("playerLeft")[0]["username"] == "ann"
        assert room.match.lead_player_id != ann_id

    asyncio.run(scenario())


def test_loop_ticks_until_stopped(clock: FakeClock) -> None:
    async def scenario() -> None:
        room = make_room(clock)
        _, socket = await connect(room)
        room.start()
        assert room.loop_task is not None
        await asyncio.sleep(0.1)
        await room.stop()
        assert room.loop_task is None
        assert socket.events("gameState")

    asyncio.run(scenario())
