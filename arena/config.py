"""Configuration constants for the arena shooter server.

Gameplay values are fixed for every match and are not negotiated with clients.
Distances are in pixels, speeds in pixels per tick and durations in
milliseconds unless stated otherwise.
"""
from __future__ import annotations

import os
from typing import Dict

TICK_RATE = 60  # Simulation ticks per second.

# Map geometry. The walls form a band around the playable floor.
MAP_WIDTH = 1280
MAP_HEIGHT = 720
WALL_SIDE_WIDTH = 32
WALL_TOP_BOT_HEIGHT = 48

# Player tuning.
PLAYER_SIZE = 32
PLAYER_SPEED = 4.0
PLAYER_MAX_HP = 100
STARTING_LIVES = 3
MAX_LIVES = 3

# Bullets.
BULLET_SIZE = 8
BULLET_SPEED = 10.0
BULLET_RANGE = 500.0
FIRE_RATE = 250  # Minimum gap between two shots.

# Enemies.
ENEMY_SIZE = 48
ENEMY_SPEED = 1.5
ENEMY_SPAWN_RATE = 2000
ENEMY_CONTACT_DAMAGE = 10
DAMAGE_COOLDOWN = 1000
SEPARATION_RADIUS = ENEMY_SIZE * 1.5
SEPARATION_WEIGHT = 0.6
SEEK_WEIGHT = 0.4

# Size and hit points keyed by enemy subtype. Skeletons are one and a half
# times the player, vampires twice.
ENEMY_STATS = {
    "SKELETON1": {"size": 48, "hp": 1},
    "SKELETON2": {"size": 48, "hp": 2},
    "VAMPIRE": {"size": 64, "hp": 5},
}

# Item economy. The flask is only rolled when the heart roll misses.
ITEM_SIZE = 24
HEART_DROP_RATE = 0.05
FLASK_DROP_RATE = 0.2
POINTS_PER_KILL = 1

# Lobby and match flow.
MIN_PLAYERS = 2
MAX_PLAYERS = 4
DEV_MIN_PLAYERS = 1
GAME_DURATION = 120_000
COUNTDOWN_DURATION = 3_000
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 20

# Server runtime.
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000


def dev_mode_enabled() -> bool:
    """Single operator mode, switched on with ``DEV_MODE=true``."""

    return os.environ.get("DEV_MODE", "").strip().lower() == "true"


def min_players(dev_mode: bool) -> int:
    return DEV_MIN_PLAYERS if dev_mode else MIN_PLAYERS


def server_host() -> str:
    return os.environ.get("HOST", DEFAULT_HOST)


def server_port() -> int:
    return int(os.environ.get("PORT", DEFAULT_PORT))


def log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO").upper()


def get_game_config() -> Dict[str, object]:
    """Get the gameplay constants clients need to lay out the arena."""
    return {
        "tickRate": TICK_RATE,
        "mapWidth": MAP_WIDTH,
        "mapHeight": MAP_HEIGHT,
        "wallSideWidth": WALL_SIDE_WIDTH,
        "wallTopBotHeight": WALL_TOP_BOT_HEIGHT,
        "playerSize": PLAYER_SIZE,
        "playerSpeed": PLAYER_SPEED,
        "playerMaxHp": PLAYER_MAX_HP,
        "maxLives": MAX_LIVES,
        "bulletSize": BULLET_SIZE,
        "bulletSpeed": BULLET_SPEED,
        "bulletRange": BULLET_RANGE,
        "fireRate": FIRE_RATE,
        "enemySize": ENEMY_SIZE,
        "enemySpeed": ENEMY_SPEED,
        "enemyStats": ENEMY_STATS,
        "itemSize": ITEM_SIZE,
        "minPlayers": MIN_PLAYERS,
        "maxPlayers": MAX_PLAYERS,
        "gameDuration": GAME_DURATION,
        "countdownDuration": COUNTDOWN_DURATION,
    }
