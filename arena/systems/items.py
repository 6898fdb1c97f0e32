"""Item pickups."""
from __future__ import annotations

from typing import TYPE_CHECKING

from arena import config, physics
from arena.models import Item, ItemKind, Player

if TYPE_CHECKING:  # pragma: no cover - imported for type checkers only
    from arena.match import Match


class ItemSystem:
    """Hands dropped items to the first living player that touches and needs them."""

    def __init__(self, match: "Match") -> None:
        self._match = match

    def update(self, now: float) -> None:
        match = self._match
        for item in list(match.items.values()):
            for player in match.living_players():
                if not physics.circles_overlap(player.x, player.y, player.size, item.x, item.y, item.size):
                    continue
                if self.consume(player, item):
                    match.items.pop(item.id, None)
                    break

    @staticmethod
    def consume(player: Player, item: Item) -> bool:
        if item.kind is ItemKind.HP_FLASK:
            if player.hp < player.max_hp:
                player.hp = player.max_hp
                return True
        elif item.kind is ItemKind.HEART:
            if player.lives < config.MAX_LIVES:
                player.lives += 1
                return True
        return False
