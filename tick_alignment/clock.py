"""Game time: fixed ticks, configured in milliseconds."""
from __future__ import annotations

import random
from typing import Callable

from tick_alignment.types import TickContext


class Clock:
    """Counts ticks at a fixed rate.

    Every delay in the game is configured in milliseconds. ``ticks_for``
    turns one into the whole number of ticks the scheduler waits, so a
    30 ms debounce is 3 ticks at the default 100 tps.
    """

    def __init__(self, tps: int) -> None:
        if tps <= 0:
            raise ValueError(f"tps must be positive, got {tps}")
        self._tps = tps
        self._ticks = 0

    def __repr__(self) -> str:
        return f"Clock(tps={self._tps}, tick={self._ticks})"

    @property
    def tps(self) -> int:
        return self._tps

    @property
    def dt(self) -> float:
        return 1.0 / self._tps

    @property
    def tick_number(self) -> int:
        return self._ticks

    @property
    def elapsed_ms(self) -> float:
        return self._ticks * 1000 / self._tps

    def advance(self) -> int:
        self._ticks += 1
        return self._ticks

    def ticks_for(self, ms: float) -> int:
        """Whole ticks covering *ms* milliseconds (never less than one)."""
        if ms <= 0:
            raise ValueError(f"ms must be positive, got {ms}")
        return max(1, round(ms * self._tps / 1000))

    def context(self, stop_fn: Callable[[], None], rng: random.Random) -> TickContext:
        return TickContext(
            tick_number=self._ticks,
            dt=self.dt,
            elapsed=self.elapsed_ms / 1000,
            request_stop=stop_fn,
            random=rng,
        )
