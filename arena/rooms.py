"""Connection management and the fixed-rate tick scheduler."""
from __future__ import annotations

import asyncio
import contextlib
import logging
import uuid
from typing import Any, Callable, Dict, List, Optional

from fastapi import WebSocket

from . import config
from .errors import JOIN_ERRORS, TransitionResult, describe
from .match import Match
from .models import OutboundMessage

logger = logging.getLogger(__name__)


class RoomError(RuntimeError):
    """Raised when a command arrives from a socket the room does not know."""


class GameRoom:
    """Holds the match simulation and active websocket connections.

    The match is only touched while ``lock`` is held, so request handlers and
    ticks never interleave. Sends happen after the lock is released.
    """

    def __init__(self, match: Optional[Match] = None) -> None:
        self.match = match or Match()
        self.connections: Dict[str, WebSocket] = {}
        self.lock = asyncio.Lock()
        self.loop_task: Optional[asyncio.Task] = None
        self.tick_interval = 1.0 / config.TICK_RATE
        self._handlers: Dict[str, Callable[[str, Dict[str, Any]], TransitionResult]] = {
            "startGame": lambda cid, _data: self.match.start(cid),
            "pauseGame": lambda cid, _data: self.match.pause(cid),
            "resumeGame": lambda cid, _data: self.match.resume(cid),
            "quitGame": lambda cid, _data: self.match.quit(cid),
        }

    # ------------------------------------------------------------------
    # Lifecycle management
    # ------------------------------------------------------------------
    def start(self) -> None:
        if not self.loop_task or self.loop_task.done():
            self.loop_task = asyncio.create_task(self._run_loop())

    async def stop(self) -> None:
        if self.loop_task:
            self.loop_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self.loop_task
            self.loop_task = None

    async def connect(self, websocket: WebSocket) -> str:
        """Track an accepted websocket; it receives broadcasts before joining."""
        connection_id = uuid.uuid4().hex
        async with self.lock:
            self.connections[connection_id] = websocket
            lobby = self.match.lobby_state()
        logger.info("A user connected: %s", connection_id)
        await self._send(connection_id, "lobbyState", lobby)
        return connection_id

    async def disconnect(self, connection_id: str) -> None:
        async with self.lock:
            self.connections.pop(connection_id, None)
            self.match.leave(connection_id)
            messages = self.match.drain_outbox()
        logger.info("User disconnected: %s", connection_id)
        await self._deliver(messages)

    # ------------------------------------------------------------------
    # Inbound events
    # ------------------------------------------------------------------
    async def dispatch(self, connection_id: str, message: Any) -> None:
        """Route one decoded client frame to the matching match operation."""
        if connection_id not in self.connections:
            raise RoomError("connection not registered")
        if not isinstance(message, dict):
            logger.warning("Ignoring non-object frame from %s", connection_id)
            return
        event = message.get("type")
        data = message.get("data") or {}
        if not isinstance(data, dict):
            logger.warning("Ignoring %s from %s: data is not an object", event, connection_id)
            return

        if event == "ping":
            await self._send(connection_id, "pong", {})
            return

        async with self.lock:
            if event == "input":
                self.match.handle_input(connection_id, data.get("keys"))
                return
            if event == "join":
                result = self.match.join(connection_id, data.get("username"))
            elif event in self._handlers:
                result = self._handlers[event](connection_id, data)
            else:
                logger.warning("Unknown event %r from %s", event, connection_id)
                return
            messages = self.match.drain_outbox()
            dev_mode = self.match.dev_mode

        if not result.ok:
            reply = "joinError" if result.error in JOIN_ERRORS else "error"
            await self._send(
                connection_id,
                reply,
                {"code": result.error.value, "message": describe(result.error, dev_mode)},
            )
        await self._deliver(messages)

    # ------------------------------------------------------------------
    # Tick loop
    # ------------------------------------------------------------------
    async def _run_loop(self) -> None:
        while True:
            await asyncio.sleep(self.tick_interval)
            try:
                await self.tick()
            except Exception:
                logger.exception("Tick failed")

    async def tick(self) -> None:
        async with self.lock:
            self.match.update()
            messages = self.match.drain_outbox()
            snapshot = self.match.snapshot().serialise()
        await self._deliver(messages)
        await self.broadcast("gameState", snapshot)

    # ------------------------------------------------------------------
    # Outbound events
    # ------------------------------------------------------------------
    async def _deliver(self, messages: List[OutboundMessage]) -> None:
        for message in messages:
            if message.to is None:
                await self.broadcast(message.event, message.payload)
            else:
                await self._send(message.to, message.event, message.payload)

    async def broadcast(self, event: str, payload: Dict[str, Any]) -> None:
        """Send a named event to every connected socket."""
        for connection_id in list(self.connections):
            await self._send(connection_id, event, payload)

    async def _send(self, connection_id: str, event: str, payload: Dict[str, Any]) -> None:
        websocket = self.connections.get(connection_id)
        if websocket is None:
            return
        try:
            await websocket.send_json({"type": event, "data": payload})
        except Exception:
            logger.warning("Dropping connection %s after failed send", connection_id)
            await self._drop(connection_id)

    async def _drop(self, connection_id: str) -> None:
        async with self.lock:
            if self.connections.pop(connection_id, None) is None:
                return
            self.match.leave(connection_id)
            messages = self.match.drain_outbox()
        await self._deliver(messages)


__all__ = ["GameRoom", "RoomError"]
