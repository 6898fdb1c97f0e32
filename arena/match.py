"""Server-authoritative match: lobby, phase machine, timers and entity store."""
from __future__ import annotations

import logging
import math
import random
import time
from collections import deque
from typing import Callable, Deque, Dict, List, Mapping, Optional

from . import config, physics
from .errors import ErrorCode, TransitionResult
from .models import (
    SYSTEM_REF,
    Enemy,
    GameSnapshot,
    Item,
    MatchState,
    OutboundMessage,
    Player,
    PlayerRef,
    Projectile,
    rank_leaderboard,
)
from .systems import EnemySystem, ItemSystem, PlayerSystem, ProjectileSystem, SpawnSystem

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def wall_clock_ms() -> float:
    return time.time() * 1000.0


class Match:
    """Encapsulates the state of the one match a server hosts.

    All mutation happens through the request methods (``join``, ``start``,
    ``pause`` ...) and ``update``; callers must serialise those calls. Events
    destined for clients are queued in ``outbox`` and drained by the room.
    """

    def __init__(
        self,
        dev_mode: Optional[bool] = None,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.dev_mode = config.dev_mode_enabled() if dev_mode is None else dev_mode
        self.clock: Clock = clock or wall_clock_ms
        self.random = rng or random.Random()

        self.players: Dict[str, Player] = {}
        self.projectiles: Dict[str, Projectile] = {}
        self.enemies: Dict[str, Enemy] = {}
        self.items: Dict[str, Item] = {}

        self.state = MatchState.WAITING
        self.lead_player_id: Optional[str] = None

        self.is_paused = False
        self.paused_by: Optional[PlayerRef] = None
        self.pause_start_time: Optional[float] = None
        self.paused_time_accumulator = 0.0

        self.countdown_start_time: Optional[float] = None
        self.game_start_time: Optional[float] = None
        self.game_end_time: Optional[float] = None
        self.last_enemy_spawn = 0.0
        self.last_update_time: Optional[float] = None

        self.outbox: Deque[OutboundMessage] = deque()
        self._entity_counter = 0

        self.spawner = SpawnSystem(self)
        self.player_system = PlayerSystem(self)
        self.projectile_system = ProjectileSystem(self)
        self.enemy_system = EnemySystem(self)
        self.item_system = ItemSystem(self)

        if self.dev_mode:
            logger.info("DEV MODE ENABLED: single player allowed")

    # ------------------------------------------------------------------
    # Entity store
    # ------------------------------------------------------------------
    def generate_id(self) -> str:
        entity_id = f"e_{self._entity_counter}"
        self._entity_counter += 1
        return entity_id

    def get_player(self, player_id: Optional[str]) -> Optional[Player]:
        if player_id is None:
            return None
        return self.players.get(player_id)

    def living_players(self) -> List[Player]:
        return [player for player in self.players.values() if not player.is_dead]

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def min_players(self) -> int:
        return config.min_players(self.dev_mode)

    # ------------------------------------------------------------------
    # Outbound events
    # ------------------------------------------------------------------
    def emit(self, event: str, payload: Optional[Dict[str, object]] = None, to: Optional[str] = None) -> None:
        self.outbox.append(OutboundMessage(event=event, payload=payload or {}, to=to))

    def drain_outbox(self) -> List[OutboundMessage]:
        messages = list(self.outbox)
        self.outbox.clear()
        return messages

    def lobby_state(self) -> Dict[str, object]:
        return {
            "state": self.state.value,
            "players": [
                {
                    "id": player.id,
                    "username": player.username,
                    "isLeadPlayer": player.id == self.lead_player_id,
                }
                for player in self.players.values()
            ],
            "devMode": self.dev_mode,
        }

    def broadcast_lobby_state(self) -> None:
        self.emit("lobbyState", self.lobby_state())

    def _set_state(self, new_state: MatchState) -> None:
        if self.state is new_state:
            return
        logger.info("Game state changed: %s -> %s", self.state.value, new_state.value)
        self.state = new_state
        if new_state not in (MatchState.COUNTDOWN, MatchState.PLAYING):
            self._clear_pause()
        self.broadcast_lobby_state()

    # ------------------------------------------------------------------
    # Lobby
    # ------------------------------------------------------------------
    def validate_username(self, username: object) -> TransitionResult:
        if not isinstance(username, str):
            return TransitionResult.rejected(ErrorCode.INVALID_NAME)
        name = username.strip()
        if not config.USERNAME_MIN_LENGTH <= len(name) <= config.USERNAME_MAX_LENGTH:
            return TransitionResult.rejected(ErrorCode.INVALID_NAME)
        taken = {player.username.lower() for player in self.players.values()}
        if name.lower() in taken:
            return TransitionResult.rejected(ErrorCode.NAME_TAKEN)
        return TransitionResult.accepted()

    def join(self, player_id: str, username: object) -> TransitionResult:
        """Register a connection as a player, first joiner leads."""
        result = self.validate_username(username)
        if not result.ok:
            return result
        if self.state is MatchState.PLAYING:
            return TransitionResult.rejected(ErrorCode.GAME_IN_PROGRESS)
        if self.player_count >= config.MAX_PLAYERS:
            return TransitionResult.rejected(ErrorCode.GAME_FULL)
        if player_id in self.players:
            return TransitionResult.rejected(ErrorCode.NAME_TAKEN)

        if self.state is MatchState.GAME_OVER and self.player_count == 0:
            self._set_state(MatchState.WAITING)
        if self.get_player(self.lead_player_id) is None:
            self.lead_player_id = player_id

        name = str(username).strip()
        x, y = physics.random_player_position(self.random)
        self.players[player_id] = Player(id=player_id, username=name, x=x, y=y)
        logger.info("%s joined as %s", player_id, name)

        self.emit(
            "joined",
            {"id": player_id, "username": name, "isLeadPlayer": player_id == self.lead_player_id},
            to=player_id,
        )
        self.emit("playerJoined", {"id": player_id, "username": name})
        self.broadcast_lobby_state()
        return TransitionResult.accepted()

    def leave(self, player_id: str) -> Optional[Player]:
        """Drop a player, keeping pause, lead and phase consistent."""
        player = self.players.pop(player_id, None)
        if player is None:
            return None

        if self.is_paused and self.paused_by is not None and self.paused_by.id == player_id:
            self._resume(SYSTEM_REF)

        if player_id == self.lead_player_id:
            self.lead_player_id = next(iter(self.players), None)

        if self.player_count == 0:
            self.lead_player_id = None
            if self.state is not MatchState.WAITING:
                self._set_state(MatchState.WAITING)
                self.countdown_start_time = None
                self.game_start_time = None
                self.game_end_time = None
        elif self.player_count < self.min_players:
            if self.state is MatchState.COUNTDOWN:
                self._set_state(MatchState.WAITING)
                self.countdown_start_time = None
            elif self.state is MatchState.PLAYING:
                self.end_game()

        self.emit("playerLeft", {"id": player.id, "username": player.username})
        self.broadcast_lobby_state()
        return player

    def quit(self, player_id: str) -> TransitionResult:
        player = self.get_player(player_id)
        if player is None:
            return TransitionResult.rejected(ErrorCode.PLAYER_NOT_FOUND)
        quit_by = player.ref()
        self.leave(player_id)
        self.emit("playerQuit", {"quitBy": quit_by.serialise()})
        logger.info("Player %s (%s) quit the game", quit_by.username, quit_by.id)
        return TransitionResult.accepted()

    def handle_input(self, player_id: str, keys: object) -> None:
        player = self.get_player(player_id)
        if player is None:
            return
        player.keys = dict(keys) if isinstance(keys, Mapping) else {}

    # ------------------------------------------------------------------
    # Phase transitions
    # ------------------------------------------------------------------
    def start(self, player_id: str) -> TransitionResult:
        """Lead player request: WAITING or GAME_OVER -> COUNTDOWN."""
        if player_id != self.lead_player_id:
            return TransitionResult.rejected(ErrorCode.NOT_LEAD_PLAYER)
        if not self.min_players <= self.player_count <= config.MAX_PLAYERS:
            return TransitionResult.rejected(ErrorCode.INVALID_PLAYER_COUNT)
        if self.state not in (MatchState.WAITING, MatchState.GAME_OVER):
            return TransitionResult.rejected(ErrorCode.GAME_NOT_READY)

        self._set_state(MatchState.COUNTDOWN)
        self.countdown_start_time = self.clock()
        self.game_start_time = None
        self.game_end_time = None
        self.last_enemy_spawn = 0.0
        self._clear_pause()
        self.paused_time_accumulator = 0.0

        for player in self.players.values():
            player.reset_for_match(*physics.random_player_position(self.random))
        self.projectiles.clear()
        self.enemies.clear()
        self.items.clear()

        self.emit("gameStarted", {})
        return TransitionResult.accepted()

    def _begin_playing(self, now: float) -> None:
        self._set_state(MatchState.PLAYING)
        self.game_start_time = now
        self.game_end_time = now + config.GAME_DURATION

    def end_game(self) -> None:
        """PLAYING -> GAME_OVER, publishing the ranked leaderboard."""
        if self.state is not MatchState.PLAYING:
            return
        self._set_state(MatchState.GAME_OVER)
        leaderboard = [entry.serialise() for entry in rank_leaderboard(list(self.players.values()))]
        self.emit(
            "gameEnded",
            {"winner": leaderboard[0] if leaderboard else None, "leaderboard": leaderboard},
        )

    # ------------------------------------------------------------------
    # Pause overlay
    # ------------------------------------------------------------------
    def pause(self, player_id: str) -> TransitionResult:
        player = self.get_player(player_id)
        if player is None:
            return TransitionResult.rejected(ErrorCode.PLAYER_NOT_FOUND)
        if self.state not in (MatchState.COUNTDOWN, MatchState.PLAYING):
            return TransitionResult.rejected(ErrorCode.GAME_NOT_PLAYING)
        if self.is_paused:
            return TransitionResult.rejected(ErrorCode.ALREADY_PAUSED)

        self.is_paused = True
        self.paused_by = player.ref()
        self.pause_start_time = self.clock()
        self.emit("gamePaused", {"pausedBy": self.paused_by.serialise()})
        logger.info("Game paused by %s (%s)", player.username, player_id)
        return TransitionResult.accepted()

    def resume(self, player_id: str) -> TransitionResult:
        player = self.get_player(player_id)
        if player is None:
            return TransitionResult.rejected(ErrorCode.PLAYER_NOT_FOUND)
        if not self.is_paused:
            return TransitionResult.rejected(ErrorCode.GAME_NOT_PAUSED)
        self._resume(player.ref())
        logger.info("Game resumed by %s (%s)", player.username, player_id)
        return TransitionResult.accepted()

    def _resume(self, resumed_by: PlayerRef) -> None:
        now = self.clock()
        paused_duration = now - self.pause_start_time if self.pause_start_time is not None else 0.0
        self.paused_time_accumulator += paused_duration
        if self.game_end_time is not None:
            self.game_end_time += paused_duration
        self._clear_pause()
        self.emit("gameResumed", {"resumedBy": resumed_by.serialise()})

    def _clear_pause(self) -> None:
        self.is_paused = False
        self.paused_by = None
        self.pause_start_time = None

    # ------------------------------------------------------------------
    # Update loop
    # ------------------------------------------------------------------
    def update(self) -> None:
        """Advance the match by one fixed tick."""
        now = self.clock()
        delta = now - (self.last_update_time if self.last_update_time is not None else now)
        self.last_update_time = now

        if self.state is MatchState.PLAYING and not self.is_paused:
            for player in self.living_players():
                player.survival_time += delta

        if self.state is MatchState.COUNTDOWN:
            for player in self.players.values():
                player.keys = {}
            if not self.is_paused and self.countdown_remaining(now) <= 0:
                self._begin_playing(now)
            return

        if self.state is not MatchState.PLAYING or self.is_paused:
            return

        if self.game_end_time is not None and now >= self.game_end_time:
            self.end_game()
            return

        self.spawner.update(now)
        self.player_system.update(now)
        self.projectile_system.update(now)
        self.enemy_system.update(now)
        if self.state is not MatchState.PLAYING:
            return
        self.item_system.update(now)

    def check_all_dead(self) -> None:
        if self.players and all(player.is_dead for player in self.players.values()):
            logger.info("All players eliminated")
            self.end_game()

    # ------------------------------------------------------------------
    # Timers and snapshotting
    # ------------------------------------------------------------------
    def countdown_remaining(self, now: float) -> float:
        """Milliseconds left on the pre-match countdown, pauses excluded."""
        if self.countdown_start_time is None:
            return 0.0
        elapsed = now - self.countdown_start_time - self.paused_time_accumulator
        if self.is_paused and self.pause_start_time is not None:
            elapsed -= now - self.pause_start_time
        return config.COUNTDOWN_DURATION - elapsed

    def match_remaining(self, now: float) -> float:
        if self.game_end_time is None:
            return 0.0
        reference = self.pause_start_time if self.is_paused and self.pause_start_time is not None else now
        return self.game_end_time - reference

    def snapshot(self) -> GameSnapshot:
        now = self.clock()
        countdown = 0
        timer = 0
        if self.state is MatchState.COUNTDOWN:
            countdown = max(0, math.ceil(self.countdown_remaining(now) / 1000))
        elif self.game_end_time is not None:
            timer = max(0, math.floor(self.match_remaining(now) / 1000))

        entities: Dict[str, Dict[str, object]] = {}
        for collection in (self.players, self.projectiles, self.enemies, self.items):
            for entity_id, entity in collection.items():
                entities[entity_id] = entity.serialise()

        return GameSnapshot(
            entities=entities,
            timer=timer,
            countdown=countdown,
            scores={player_id: player.score for player_id, player in self.players.items()},
            is_paused=self.is_paused,
            paused_by=self.paused_by,
            match_state=self.state,
        )


__all__ = ["Match", "wall_clock_ms"]
