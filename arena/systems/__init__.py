"""Per-tick simulation systems run by ``Match.update`` while the match is live."""

from .enemies import EnemySystem
from .items import ItemSystem
from .players import PlayerSystem
from .projectiles import ProjectileSystem
from .spawner import SpawnSystem

__all__ = ["EnemySystem", "ItemSystem", "PlayerSystem", "ProjectileSystem", "SpawnSystem"]
