"""GameStore - single owner of GameState with a debounced update buffer."""
from __future__ import annotations

import dataclasses
import logging
from typing import Any, Mapping

from tick_alignment.bus import SignalBus
from tick_alignment.schedule import Scheduler
from tick_alignment.types import STATE_KEYS, GameState, TickContext, Update

logger = logging.getLogger(__name__)

FLUSH_TASK = "store.flush"
STATE_APPLIED = "state_applied"


class GameStore:
    """Holds the canonical GameState and serializes every change to it.

    ``submit_update`` merges a partial update into a pending buffer, one
    top-level key at a time (the later value for a key replaces the earlier
    one, nested objects are not merged). The buffer is applied as a single
    transition once ``debounce_ticks`` ticks pass without another submit.
    Callers must put the whole current sub-object into each partial.

    Each applied transition that changes something publishes
    ``state_applied`` with ``changed`` (frozenset of keys) and ``state``.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        bus: SignalBus,
        debounce_ticks: int,
        state: GameState | None = None,
    ) -> None:
        if debounce_ticks < 1:
            raise ValueError(f"debounce_ticks must be >= 1, got {debounce_ticks}")
        self._scheduler = scheduler
        self._bus = bus
        self._debounce_ticks = debounce_ticks
        self._state = state if state is not None else GameState()
        self._pending: Update | None = None
        self._transitions = 0

    @property
    def state(self) -> GameState:
        """Last applied state. Pending updates are not visible here."""
        return self._state

    @property
    def pending(self) -> Update | None:
        return dict(self._pending) if self._pending is not None else None

    @property
    def transitions(self) -> int:
        """Number of applied transitions that changed the state."""
        return self._transitions

    def submit_update(self, partial: Mapping[str, Any]) -> None:
        _check_partial(partial)
        if self._pending is None:
            self._pending = dict(partial)
        else:
            self._pending.update(partial)
        self._scheduler.after(FLUSH_TASK, self._debounce_ticks, self._on_flush)

    def flush(self) -> bool:
        """Apply the pending buffer now. Returns True if anything changed."""
        self._scheduler.cancel(FLUSH_TASK)
        if self._pending is None:
            return False
        pending, self._pending = self._pending, None
        logger.debug("flushing coalesced update: %s", sorted(pending))
        return self.apply(pending)

    def discard_pending(self) -> None:
        self._scheduler.cancel(FLUSH_TASK)
        self._pending = None

    def apply(self, partial: Mapping[str, Any]) -> bool:
        """Apply *partial* immediately as one transition, bypassing the buffer."""
        _check_partial(partial)
        changed = frozenset(
            key for key, value in partial.items()
            if getattr(self._state, key) != value
        )
        if not changed:
            return False
        self._state = dataclasses.replace(
            self._state, **{key: partial[key] for key in changed}
        )
        self._transitions += 1
        self._bus.publish(STATE_APPLIED, changed=changed, state=self._state)
        return True

    def _on_flush(self, ctx: TickContext) -> None:
        self.flush()


def _check_partial(partial: Mapping[str, Any]) -> None:
    unknown = set(partial) - STATE_KEYS
    if unknown:
        raise KeyError(f"Unknown GameState field(s): {', '.join(sorted(unknown))}")
