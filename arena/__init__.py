"""Authoritative server for a real-time multiplayer top-down arena shooter."""

from .errors import ErrorCode, TransitionResult
from .match import Match
from .models import MatchState
from .rooms import GameRoom, RoomError

__all__ = ["ErrorCode", "GameRoom", "Match", "MatchState", "RoomError", "TransitionResult"]
