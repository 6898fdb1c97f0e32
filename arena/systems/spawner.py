"""Periodic enemy spawning along the arena walls."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from arena import config, physics
from arena.models import Enemy, EnemyType

if TYPE_CHECKING:  # pragma: no cover - imported for type checkers only
    from arena.match import Match

logger = logging.getLogger(__name__)


class SpawnSystem:
    """Drops one enemy on a random edge every ``ENEMY_SPAWN_RATE`` ms."""

    def __init__(self, match: "Match") -> None:
        self._match = match

    def update(self, now: float) -> None:
        if now - self._match.last_enemy_spawn > config.ENEMY_SPAWN_RATE:
            self.spawn_enemy()
            self._match.last_enemy_spawn = now

    def spawn_enemy(self) -> Enemy:
        match = self._match
        subtype = match.random.choice(list(EnemyType))
        x, y = physics.random_edge_position(match.random, subtype.size)
        enemy = Enemy.spawn(match.generate_id(), subtype, x, y)
        match.enemies[enemy.id] = enemy
        logger.debug("Spawned %s %s at (%.0f, %.0f)", subtype.value, enemy.id, x, y)
        return enemy
