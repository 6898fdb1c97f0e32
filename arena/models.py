"""Data models for the arena shooter simulation.

Every record the server simulates lives here as a dataclass. ``serialise``
produces the JSON-ready dict sent to clients inside ``gameState``; the ``type``
key is the discriminant clients use to pick a renderer. Server-only fields such
as held keys and cooldown timestamps never leave the process.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from . import config


class MatchState(str, Enum):
    """Phases of the single match hosted by the server."""

    WAITING = "WAITING"
    COUNTDOWN = "COUNTDOWN"
    PLAYING = "PLAYING"
    GAME_OVER = "GAME_OVER"


class EnemyType(str, Enum):
    SKELETON1 = "SKELETON1"
    SKELETON2 = "SKELETON2"
    VAMPIRE = "VAMPIRE"

    @property
    def size(self) -> int:
        return config.ENEMY_STATS[self.value]["size"]

    @property
    def hp(self) -> int:
        return config.ENEMY_STATS[self.value]["hp"]


class ItemKind(str, Enum):
    HP_FLASK = "HP_FLASK"
    HEART = "HEART"


@dataclass(frozen=True, slots=True)
class PlayerRef:
    """Identity snapshot kept after the player it names may be gone."""

    id: str
    username: str

    def serialise(self) -> Dict[str, str]:
        return {"id": self.id, "username": self.username}


SYSTEM_REF = PlayerRef(id="system", username="System")


@dataclass(slots=True)
class Player:
    """A connected, joined participant."""

    id: str
    username: str
    x: float
    y: float
    rotation: float = 0.0
    last_direction: float = 0.0  # radians, 0 faces right
    keys: Dict[str, bool] = field(default_factory=dict)
    last_fired: float = 0.0
    hp: int = config.PLAYER_MAX_HP
    max_hp: int = config.PLAYER_MAX_HP
    lives: int = config.STARTING_LIVES
    is_dead: bool = False
    score: int = 0
    survival_time: float = 0.0  # ms
    last_damage_time: Optional[float] = None
    fire_held: bool = False

    @property
    def size(self) -> int:
        return config.PLAYER_SIZE

    def ref(self) -> PlayerRef:
        return PlayerRef(id=self.id, username=self.username)

    def is_pressed(self, *codes: str) -> bool:
        return any(self.keys.get(code) for code in codes)

    def reset_for_match(self, x: float, y: float) -> None:
        self.x = x
        self.y = y
        self.score = 0
        self.hp = self.max_hp
        self.lives = config.STARTING_LIVES
        self.is_dead = False
        self.survival_time = 0.0
        self.last_damage_time = None
        self.fire_held = False
        self.keys = {}

    def serialise(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "type": "player",
            "username": self.username,
            "x": self.x,
            "y": self.y,
            "width": self.size,
            "height": self.size,
            "rotation": self.rotation,
            "lastDirection": self.last_direction,
            "hp": self.hp,
            "maxHp": self.max_hp,
            "lives": self.lives,
            "isDead": self.is_dead,
            "score": self.score,
            "survivalTime": self.survival_time,
        }


@dataclass(slots=True)
class Projectile:
    """A bullet. ``owner_id`` may outlive the player who fired it."""

    id: str
    owner_id: str
    x: float
    y: float
    vx: float
    vy: float
    start_x: float
    start_y: float

    @property
    def size(self) -> int:
        return config.BULLET_SIZE

    def travelled(self) -> float:
        return ((self.x - self.start_x) ** 2 + (self.y - self.start_y) ** 2) ** 0.5

    def serialise(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "type": "bullet",
            "ownerId": self.owner_id,
            "x": self.x,
            "y": self.y,
            "vx": self.vx,
            "vy": self.vy,
        }


@dataclass(slots=True)
class Enemy:
    id: str
    subtype: EnemyType
    x: float
    y: float
    size: int
    hp: int
    max_hp: int

    @classmethod
    def spawn(cls, entity_id: str, subtype: EnemyType, x: float, y: float) -> "Enemy":
        return cls(
            id=entity_id,
            subtype=subtype,
            x=x,
            y=y,
            size=subtype.size,
            hp=subtype.hp,
            max_hp=subtype.hp,
        )

    def serialise(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "type": "enemy",
            "subtype": self.subtype.value,
            "x": self.x,
            "y": self.y,
            "width": self.size,
            "height": self.size,
            "hp": self.hp,
            "maxHp": self.max_hp,
        }


@dataclass(slots=True)
class Item:
    id: str
    kind: ItemKind
    x: float
    y: float
    size: int = config.ITEM_SIZE

    def serialise(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "type": "item",
            "itemType": self.kind.value,
            "x": self.x,
            "y": self.y,
            "width": self.size,
            "height": self.size,
        }


@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
    id: str
    username: str
    score: int
    survival_ms: float

    def serialise(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "username": self.username,
            "score": self.score,
            "survivalTime": int(self.survival_ms // 1000),
        }


@dataclass(slots=True)
class OutboundMessage:
    """An event queued by the match; ``to`` is a connection id or ``None`` for everyone."""

    event: str
    payload: Dict[str, object]
    to: Optional[str] = None


@dataclass(slots=True)
class GameSnapshot:
    """Serializable representation of the world state sent every tick."""

    entities: Dict[str, Dict[str, object]]
    timer: int
    countdown: int
    scores: Dict[str, int]
    is_paused: bool
    paused_by: Optional[PlayerRef]
    match_state: MatchState

    def serialise(self) -> Dict[str, object]:
        return {
            "entities": self.entities,
            "timer": self.timer,
            "countdown": self.countdown,
            "scores": self.scores,
            "isPaused": self.is_paused,
            "pausedBy": self.paused_by.serialise() if self.paused_by else None,
            "matchState": self.match_state.value,
        }


def rank_leaderboard(players: List[Player]) -> List[LeaderboardEntry]:
    """Order by kills, breaking ties with the longer survival time."""
    entries = [
        LeaderboardEntry(
            id=player.id,
            username=player.username,
            score=player.score,
            survival_ms=player.survival_time,
        )
        for player in players
    ]
    entries.sort(key=lambda entry: (entry.score, entry.survival_ms), reverse=True)
    return entries
