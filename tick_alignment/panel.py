"""Panel - phase-gated feature component that owns its timers."""
from __future__ import annotations

import logging
import random
from typing import Any, Mapping

from tick_alignment.clock import Clock
from tick_alignment.config import GameConfig
from tick_alignment.schedule import Scheduler, TaskFn
from tick_alignment.store import GameStore
from tick_alignment.types import GameState

logger = logging.getLogger(__name__)


class Countdowns:
    """Catalog id -> remaining ticker pulses for a panel's timed activities."""

    def __init__(self) -> None:
        self._remaining: dict[str, int] = {}

    def start(self, entry_id: str, pulses: int) -> None:
        if pulses < 1:
            raise ValueError(f"pulses must be >= 1, got {pulses}")
        self._remaining[entry_id] = pulses

    def remaining(self, entry_id: str) -> int | None:
        return self._remaining.get(entry_id)

    def active(self) -> dict[str, int]:
        return dict(self._remaining)

    def tick(self) -> list[str]:
        """Advance one pulse. Returns the ids that finished (now removed)."""
        finished = []
        for entry_id, left in list(self._remaining.items()):
            if left > 1:
                self._remaining[entry_id] = left - 1
            else:
                del self._remaining[entry_id]
                finished.append(entry_id)
        return finished

    def clear(self) -> None:
        self._remaining.clear()

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._remaining

    def __len__(self) -> int:
        return len(self._remaining)


class Panel:
    """Base class for the feature panels.

    A panel is mounted while ``state.phase >= min_phase``. Every task a panel
    registers is named ``"<panel name>.<suffix>"`` and is cancelled on
    unmount, so a panel never leaves a timer behind.

    Subclasses override :meth:`on_mount`, :meth:`on_unmount` and
    :meth:`on_state` as needed.
    """

    name = "panel"
    min_phase = 0

    def __init__(
        self,
        store: GameStore,
        scheduler: Scheduler,
        clock: Clock,
        rng: random.Random,
        config: GameConfig | None = None,
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        self._clock = clock
        self._rng = rng
        self._config = config if config is not None else GameConfig()
        self._mounted = False

    @property
    def mounted(self) -> bool:
        return self._mounted

    @property
    def state(self) -> GameState:
        return self._store.state

    def sync(self, phase: int) -> None:
        """Mount or unmount to match *phase*."""
        if phase >= self.min_phase and not self._mounted:
            self.mount()
        elif phase < self.min_phase and self._mounted:
            self.unmount()

    def mount(self) -> None:
        if self._mounted:
            return
        self._mounted = True
        logger.debug("mount %s", self.name)
        self.on_mount()

    def unmount(self) -> None:
        """Release every task this panel registered."""
        if not self._mounted:
            return
        self._mounted = False
        released = self._scheduler.cancel_prefix(self.name + ".")
        logger.debug("unmount %s (released %d tasks)", self.name, released)
        self.on_unmount()

    def on_mount(self) -> None:
        pass

    def on_unmount(self) -> None:
        pass

    def on_state(self, changed: frozenset[str], state: GameState) -> None:
        """Called for each applied transition while mounted."""

    # --- helpers for subclasses ---

    def task_name(self, suffix: str) -> str:
        return f"{self.name}.{suffix}"

    def every_ms(self, suffix: str, ms: int, fn: TaskFn) -> None:
        self._scheduler.every(self.task_name(suffix), self._clock.ticks_for(ms), fn)

    def after_ms(self, suffix: str, ms: int, fn: TaskFn) -> None:
        self._scheduler.after(self.task_name(suffix), self._clock.ticks_for(ms), fn)

    def submit(self, partial: Mapping[str, Any]) -> None:
        if partial:
            self._store.submit_update(partial)
