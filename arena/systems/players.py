"""Player movement and shooting."""
from __future__ import annotations

import math
from typing import TYPE_CHECKING

from arena import config, physics
from arena.models import Player, Projectile

if TYPE_CHECKING:  # pragma: no cover - imported for type checkers only
    from arena.match import Match

UP_KEYS = ("ArrowUp", "KeyW")
DOWN_KEYS = ("ArrowDown", "KeyS")
LEFT_KEYS = ("ArrowLeft", "KeyA")
RIGHT_KEYS = ("ArrowRight", "KeyD")
FIRE_KEY = "Space"


class PlayerSystem:
    """Applies held keys to every living player each tick."""

    def __init__(self, match: "Match") -> None:
        self._match = match

    def update(self, now: float) -> None:
        for player in self._match.living_players():
            self.move(player)
            self.fire(player, now)

    def move(self, player: Player) -> None:
        # Axes are independent, so a diagonal covers more ground than a
        # straight line.
        dx = int(player.is_pressed(*RIGHT_KEYS)) - int(player.is_pressed(*LEFT_KEYS))
        dy = int(player.is_pressed(*DOWN_KEYS)) - int(player.is_pressed(*UP_KEYS))
        player.x, player.y = physics.clamp_player_position(
            player.x + dx * config.PLAYER_SPEED,
            player.y + dy * config.PLAYER_SPEED,
        )
        if dx or dy:
            player.last_direction = math.atan2(dy, dx)

    def fire(self, player: Player, now: float) -> None:
        if not player.is_pressed(FIRE_KEY):
            player.fire_held = False
            return
        if player.fire_held or now - player.last_fired <= config.FIRE_RATE:
            return

        player.fire_held = True
        player.last_fired = now
        center_x = player.x + config.PLAYER_SIZE / 2
        center_y = player.y + config.PLAYER_SIZE / 2
        angle = player.last_direction
        projectile = Projectile(
            id=self._match.generate_id(),
            owner_id=player.id,
            x=center_x,
            y=center_y,
            vx=math.cos(angle) * config.BULLET_SPEED,
            vy=math.sin(angle) * config.BULLET_SPEED,
            start_x=center_x,
            start_y=center_y,
        )
        self._match.projectiles[projectile.id] = projectile
