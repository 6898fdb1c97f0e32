"""Shared fixtures: a controllable clock and seeded matches."""
from __future__ import annotations

import random
from typing import Iterable, List

import pytest

from arena import config
from arena.match import Match
from arena.models import MatchState


class FakeClock:
    """Millisecond clock that only moves when a test advances it."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class ScriptedRandom(random.Random):
    """Returns queued values from ``random()``; everything else stays seeded."""

    def __init__(self, values: Iterable[float]) -> None:
        super().__init__(0)
        self.values: List[float] = list(values)

    def random(self) -> float:
        return self.values.pop(0)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def match(clock: FakeClock) -> Match:
    return Match(dev_mode=False, clock=clock, rng=random.Random(1234))


@pytest.fixture()
def dev_match(clock: FakeClock) -> Match:
    return Match(dev_mode=True, clock=clock, rng=random.Random(1234))


def join_all(match: Match, *names: str) -> None:
    for name in names:
        assert match.join(name, name).ok


def start_playing(match: Match, clock: FakeClock, *names: str) -> None:
    """Join ``names``, run the countdown out and land in PLAYING."""
    join_all(match, *names)
    assert match.start(names[0]).ok
    clock.advance(config.COUNTDOWN_DURATION)
    match.update()
    assert match.state is MatchState.PLAYING
    match.drain_outbox()


def events(match: Match, name: str) -> list:
    return [message for message in match.outbox if message.event == name]
