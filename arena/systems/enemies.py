"""Enemy contact damage and steering."""
from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Optional, Tuple

from arena import config, physics
from arena.models import Enemy, MatchState, Player

if TYPE_CHECKING:  # pragma: no cover - imported for type checkers only
    from arena.match import Match

logger = logging.getLogger(__name__)


class EnemySystem:
    """Chases the nearest living player while keeping clear of other enemies."""

    def __init__(self, match: "Match") -> None:
        self._match = match

    def update(self, now: float) -> None:
        match = self._match
        for enemy in list(match.enemies.values()):
            target = self._engage(enemy, now)
            if match.state is not MatchState.PLAYING:
                return
            if target is not None:
                self.steer(enemy, target)

    def _engage(self, enemy: Enemy, now: float) -> Optional[Player]:
        """Damage every player in contact and return the nearest one still alive."""
        target: Optional[Player] = None
        min_dist = math.inf
        for player in list(self._match.players.values()):
            if player.is_dead:
                continue
            dist = physics.distance(enemy.x, enemy.y, player.x, player.y)
            if dist < min_dist:
                min_dist = dist
                target = player
            if physics.circles_overlap(player.x, player.y, player.size, enemy.x, enemy.y, enemy.size):
                self.damage(player, now)
        return target

    def damage(self, player: Player, now: float) -> None:
        if player.last_damage_time is not None and now - player.last_damage_time <= config.DAMAGE_COOLDOWN:
            return
        player.hp = max(0, player.hp - config.ENEMY_CONTACT_DAMAGE)
        player.last_damage_time = now
        if player.hp > 0:
            return

        player.lives -= 1
        if player.lives > 0:
            player.hp = player.max_hp
            player.x, player.y = physics.random_player_position(self._match.random)
            return
        player.lives = 0
        player.hp = 0
        player.is_dead = True
        logger.info("%s has been eliminated", player.username)
        self._match.check_all_dead()

    def steer(self, enemy: Enemy, target: Player) -> None:
        angle = math.atan2(target.y - enemy.y, target.x - enemy.x)
        move_x = math.cos(angle) * config.ENEMY_SPEED
        move_y = math.sin(angle) * config.ENEMY_SPEED

        sep_x, sep_y, crowded = self.separation(enemy)
        if crowded:
            sep_len = math.hypot(sep_x, sep_y)
            if sep_len > 0:
                sep_x = sep_x / sep_len * config.ENEMY_SPEED
                sep_y = sep_y / sep_len * config.ENEMY_SPEED
            move_x = move_x * config.SEEK_WEIGHT + sep_x * config.SEPARATION_WEIGHT
            move_y = move_y * config.SEEK_WEIGHT + sep_y * config.SEPARATION_WEIGHT

        enemy.x += move_x
        enemy.y += move_y

    def separation(self, enemy: Enemy) -> Tuple[float, float, bool]:
        """Sum of unit vectors pointing away from close neighbours, nearer ones weighing more."""
        sep_x = 0.0
        sep_y = 0.0
        crowded = False
        for other in self._match.enemies.values():
            if other.id == enemy.id:
                continue
            dist_x = enemy.x - other.x
            dist_y = enemy.y - other.y
            dist = math.hypot(dist_x, dist_y)
            if dist >= config.SEPARATION_RADIUS:
                continue
            crowded = True
            if dist == 0:
                # Stacked enemies split along the x axis, ordered by id.
                sep_x += 1.0 if enemy.id < other.id else -1.0
                continue
            weight = 1.0 / dist
            sep_x += (dist_x / dist) * weight
            sep_y += (dist_y / dist) * weight
        return sep_x, sep_y, crowded
