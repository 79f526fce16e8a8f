"""Shared fixtures: a bare engine + store rig for driving single panels."""
from __future__ import annotations

import random
from typing import Callable, TypeVar

import pytest

from tick_alignment.bus import SignalBus, make_signal_system
from tick_alignment.config import GameConfig
from tick_alignment.engine import Engine
from tick_alignment.panel import Panel
from tick_alignment.schedule import Scheduler, make_schedule_system
from tick_alignment.store import GameStore
from tick_alignment.types import GameState

P = TypeVar("P", bound=Panel)


class FixedRandom(random.Random):
    """Random whose ``random()`` always returns ``value``; ``choice`` stays seeded."""

    def __init__(self, value: float, seed: int = 0) -> None:
        super().__init__(seed)
        self.value = value

    def random(self) -> float:
        return self.value


class Rig:
    """Engine at 100 tps with schedule and signal systems, no Game wiring."""

    def __init__(self, state: GameState | None = None, rng: random.Random | None = None) -> None:
        self.config = GameConfig(seed=0)
        self.engine = Engine(tps=self.config.tps, seed=0)
        self.scheduler = Scheduler()
        self.bus = SignalBus()
        self.store = GameStore(self.scheduler, self.bus, 3, state)
        self.rng = rng if rng is not None else self.engine.random
        self.engine.add_system(make_schedule_system(self.scheduler))
        self.engine.add_system(make_signal_system(self.bus))

    def panel(self, cls: type[P]) -> P:
        return cls(self.store, self.scheduler, self.engine.clock, self.rng, self.config)

    def run_ms(self, ms: float) -> None:
        self.engine.run(self.engine.clock.ticks_for(ms))

    @property
    def state(self) -> GameState:
        return self.store.state


@pytest.fixture
def make_rig() -> Callable[..., Rig]:
    return Rig


@pytest.fixture
def fixed_rng() -> Callable[..., FixedRandom]:
    return FixedRandom
