"""Rejection codes returned by the match request handlers."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from . import config


class ErrorCode(str, Enum):
    INVALID_NAME = "INVALID_NAME"
    NAME_TAKEN = "NAME_TAKEN"
    GAME_IN_PROGRESS = "GAME_IN_PROGRESS"
    GAME_FULL = "GAME_FULL"
    NOT_LEAD_PLAYER = "NOT_LEAD_PLAYER"
    INVALID_PLAYER_COUNT = "INVALID_PLAYER_COUNT"
    GAME_NOT_READY = "GAME_NOT_READY"
    PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
    GAME_NOT_PLAYING = "GAME_NOT_PLAYING"
    ALREADY_PAUSED = "ALREADY_PAUSED"
    GAME_NOT_PAUSED = "GAME_NOT_PAUSED"


_MESSAGES = {
    ErrorCode.INVALID_NAME: (
        f"Name must be between {config.USERNAME_MIN_LENGTH} and "
        f"{config.USERNAME_MAX_LENGTH} characters."
    ),
    ErrorCode.NAME_TAKEN: "Name is already taken! Please choose another name.",
    ErrorCode.GAME_IN_PROGRESS: "Game is currently in progress. Please wait for the game to end.",
    ErrorCode.GAME_FULL: f"Game is full! (Max {config.MAX_PLAYERS} players)",
    ErrorCode.NOT_LEAD_PLAYER: "Only the lead player can start the game",
    ErrorCode.GAME_NOT_READY: "Game is not ready to start",
    ErrorCode.PLAYER_NOT_FOUND: "Player not found",
    ErrorCode.GAME_NOT_PLAYING: "Game is not currently playing",
    ErrorCode.ALREADY_PAUSED: "Game is already paused",
    ErrorCode.GAME_NOT_PAUSED: "Game is not paused",
}

JOIN_ERRORS = frozenset(
    {
        ErrorCode.INVALID_NAME,
        ErrorCode.NAME_TAKEN,
        ErrorCode.GAME_IN_PROGRESS,
        ErrorCode.GAME_FULL,
    }
)


def describe(code: ErrorCode, dev_mode: bool = False) -> str:
    """Human readable text for ``code`` shown by the client."""
    if code is ErrorCode.INVALID_PLAYER_COUNT:
        minimum = config.min_players(dev_mode)
        if dev_mode:
            return (
                f"Need {minimum}-{config.MAX_PLAYERS} players to start the game "
                f"(DEV MODE: {minimum} minimum)"
            )
        return f"Need {minimum}-{config.MAX_PLAYERS} players to start the game"
    return _MESSAGES.get(code, "Unknown error")


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a guarded match transition: accepted, or rejected with a code."""

    error: Optional[ErrorCode] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def accepted(cls) -> "TransitionResult":
        return cls()

    @classmethod
    def rejected(cls, code: ErrorCode) -> "TransitionResult":
        return cls(error=code)


__all__ = ["ErrorCode", "JOIN_ERRORS", "TransitionResult", "describe"]
