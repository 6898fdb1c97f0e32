"""Geometry helpers shared by the simulation systems."""
from __future__ import annotations

import math
import random
from typing import Tuple

from . import config

# The bottom wall is drawn one player height above the map edge, so the lowest
# row a player can stand on sits a further player height above that.
BOTTOM_WALL_START_Y = config.MAP_HEIGHT - config.WALL_TOP_BOT_HEIGHT - config.PLAYER_SIZE
PLAYER_MIN_X = float(config.WALL_SIDE_WIDTH)
PLAYER_MAX_X = float(config.MAP_WIDTH - config.WALL_SIDE_WIDTH - config.PLAYER_SIZE)
PLAYER_MIN_Y = float(config.WALL_TOP_BOT_HEIGHT)
PLAYER_MAX_Y = float(BOTTOM_WALL_START_Y - config.PLAYER_SIZE)


def distance(x1: float, y1: float, x2: float, y2: float) -> float:
    """Calculate distance between two points."""
    return math.hypot(x2 - x1, y2 - y1)


def circles_overlap(
    x1: float, y1: float, size1: float, x2: float, y2: float, size2: float
) -> bool:
    """Check if two entities collide, each treated as a circle of radius ``size / 2``."""
    return distance(x1, y1, x2, y2) < (size1 / 2 + size2 / 2)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def clamp_player_position(x: float, y: float) -> Tuple[float, float]:
    """Keep a player's top-left corner on the floor between the walls."""
    return (
        clamp(x, PLAYER_MIN_X, PLAYER_MAX_X),
        clamp(y, PLAYER_MIN_Y, PLAYER_MAX_Y),
    )


def projectile_in_bounds(x: float, y: float) -> bool:
    return (
        config.WALL_SIDE_WIDTH <= x <= config.MAP_WIDTH - config.WALL_SIDE_WIDTH
        and config.WALL_TOP_BOT_HEIGHT <= y <= config.MAP_HEIGHT - config.WALL_TOP_BOT_HEIGHT
    )


def random_player_position(rng: random.Random) -> Tuple[float, float]:
    """Uniform point on the floor where a player fits without touching a wall."""
    return (
        PLAYER_MIN_X + rng.random() * (PLAYER_MAX_X - PLAYER_MIN_X),
        PLAYER_MIN_Y + rng.random() * (PLAYER_MAX_Y - PLAYER_MIN_Y),
    )


def random_edge_position(rng: random.Random, size: float) -> Tuple[float, float]:
    """Pick a point along one of the four inner wall edges.

    The returned top-left corner is inset so an entity of ``size`` lies fully
    on the floor.
    """
    min_x = float(config.WALL_SIDE_WIDTH)
    max_x = float(config.MAP_WIDTH - config.WALL_SIDE_WIDTH - size)
    min_y = float(config.WALL_TOP_BOT_HEIGHT)
    max_y = float(config.MAP_HEIGHT - config.WALL_TOP_BOT_HEIGHT - size)
    edge = rng.randrange(4)
    if edge == 0:  # top
        x, y = min_x + rng.random() * (max_x - min_x), min_y
    elif edge == 1:  # bottom
        x, y = min_x + rng.random() * (max_x - min_x), max_y
    elif edge == 2:  # left
        x, y = min_x, min_y + rng.random() * (max_y - min_y)
    else:  # right
        x, y = max_x, min_y + rng.random() * (max_y - min_y)
    return clamp(x, min_x, max_x), clamp(y, min_y, max_y)


__all__ = [
    "BOTTOM_WALL_START_Y",
    "circles_overlap",
    "clamp",
    "clamp_player_position",
    "distance",
    "projectile_in_bounds",
    "random_edge_position",
    "random_player_position",
]
