"""Bullet flight, hits and kill rewards."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from arena import config, physics
from arena.models import Enemy, Item, ItemKind, Projectile

if TYPE_CHECKING:  # pragma: no cover - imported for type checkers only
    from arena.match import Match

logger = logging.getLogger(__name__)


class ProjectileSystem:
    """Moves bullets and resolves their collisions with enemies."""

    def __init__(self, match: "Match") -> None:
        self._match = match

    def update(self, now: float) -> None:
        match = self._match
        for projectile in list(match.projectiles.values()):
            projectile.x += projectile.vx
            projectile.y += projectile.vy

            if not physics.projectile_in_bounds(projectile.x, projectile.y):
                match.projectiles.pop(projectile.id, None)
                continue
            if projectile.travelled() > config.BULLET_RANGE:
                match.projectiles.pop(projectile.id, None)
                continue

            enemy = self._first_hit(projectile)
            if enemy is None:
                continue
            # A bullet is spent on any hit, lethal or not.
            match.projectiles.pop(projectile.id, None)
            enemy.hp -= 1
            if enemy.hp <= 0:
                self._kill(enemy, projectile.owner_id)

    def _first_hit(self, projectile: Projectile) -> Optional[Enemy]:
        for enemy in self._match.enemies.values():
            if physics.circles_overlap(
                projectile.x, projectile.y, projectile.size, enemy.x, enemy.y, enemy.size
            ):
                return enemy
        return None

    def _kill(self, enemy: Enemy, owner_id: str) -> None:
        match = self._match
        match.enemies.pop(enemy.id, None)
        owner = match.get_player(owner_id)
        if owner is not None:
            owner.score += config.POINTS_PER_KILL
        logger.debug("Enemy %s killed by %s", enemy.id, owner_id)

        # Heart is rolled first; the flask only gets a roll when it misses.
        if match.random.random() < config.HEART_DROP_RATE:
            self.drop_item(enemy.x, enemy.y, ItemKind.HEART)
        elif match.random.random() < config.FLASK_DROP_RATE:
            self.drop_item(enemy.x, enemy.y, ItemKind.HP_FLASK)

    def drop_item(self, x: float, y: float, kind: ItemKind) -> Item:
        item = Item(id=self._match.generate_id(), kind=kind, x=x, y=y)
        self._match.items[item.id] = item
        return item
