"""FastAPI application that exposes the arena match over WebSockets."""
from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import Depends, FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from starlette.websockets import WebSocketState

from . import config
from .rooms import GameRoom, RoomError

logger = logging.getLogger(__name__)

app = FastAPI(title="Dungeon Arena", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


async def get_room() -> GameRoom:
    if not hasattr(app.state, "room"):
        app.state.room = GameRoom()
    return app.state.room


@app.on_event("startup")
async def startup() -> None:
    room = await get_room()
    room.start()


@app.on_event("shutdown")
async def shutdown() -> None:
    room = getattr(app.state, "room", None)
    if room is not None:
        await room.stop()


@app.get("/health")
async def healthcheck(room: GameRoom = Depends(get_room)) -> Dict[str, Any]:
    """Simple readiness probe."""
    return {
        "status": "ok",
        "players": room.match.player_count,
        "state": room.match.state.value,
    }


@app.get("/api/game/config")
async def game_config() -> Dict[str, object]:
    """Fixed gameplay constants so clients can size the map and sprites."""
    return config.get_game_config()


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, room: GameRoom = Depends(get_room)) -> None:
    await websocket.accept()
    connection_id = await room.connect(websocket)
    try:
        while True:
            message = await websocket.receive_json()
            await room.dispatch(connection_id, message)
    except WebSocketDisconnect:
        pass
    except RoomError:
        logger.info("Connection %s was dropped by the room", connection_id)
    except ValueError:
        logger.warning("Closing %s after an undecodable frame", connection_id)
        if websocket.application_state == WebSocketState.CONNECTED:
            await websocket.close(code=1003)
    finally:
        await room.disconnect(connection_id)


def main() -> None:
    import uvicorn

    logging.basicConfig(
        level=config.log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Server running on http://%s:%s", config.server_host(), config.server_port())
    uvicorn.run(app, host=config.server_host(), port=config.server_port())


__all__ = ["app", "main"]
