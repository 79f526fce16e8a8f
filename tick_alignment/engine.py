"""Fixed-timestep loop driving one game session."""
from __future__ import annotations

import logging
import os
import random
import time
from typing import Callable

from tick_alignment.clock import Clock
from tick_alignment.types import TickContext

logger = logging.getLogger(__name__)

System = Callable[[TickContext], None]


class Engine:
    """Runs its systems in registration order once per tick.

    A session registers commands, schedule and signals, in that order. The
    engine's ``random`` is the only randomness source, so a seed fixes
    every roll of a session.
    """

    def __init__(self, tps: int = 100, seed: int | None = None) -> None:
        self._clock = Clock(tps)
        self._systems: list[System] = []
        self._halt = False
        self._seed = int.from_bytes(os.urandom(8)) if seed is None else seed
        self._rng = random.Random(self._seed)

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def random(self) -> random.Random:
        return self._rng

    def add_system(self, system: System) -> None:
        self._systems.append(system)

    def context(self) -> TickContext:
        """Context for work done between ticks (player commands)."""
        return self._clock.context(self._stop, self._rng)

    def _stop(self) -> None:
        self._halt = True

    def _tick(self) -> bool:
        self._clock.advance()
        ctx = self.context()
        for system in self._systems:
            system(ctx)
            if self._halt:
                break
        return not self._halt

    def step(self) -> None:
        self._halt = False
        self._tick()

    def run(self, n: int) -> None:
        self._halt = False
        for _ in range(n):
            if not self._tick():
                break

    def run_forever(self) -> None:
        """Tick at wall-clock pace until a system requests a stop."""
        self._halt = False
        logger.debug("pacing at %d tps", self._clock.tps)
        deadline = time.monotonic()
        while self._tick():
            deadline += self._clock.dt
            delay = deadline - time.monotonic()
            if delay > 0:
                time.sleep(delay)
        logger.debug("stopped at tick %d", self._clock.tick_number)
