"""Passive regeneration applied on a fixed wall-clock interval."""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass

from tick_alignment.types import GameState, Update


@dataclass(frozen=True)
class RegenRate:
    """Per-field regeneration rule.

    Attributes:
        cap: Values at or above this are left alone.
        rate: Amount added while below cap (result clamped to cap).
        negative_rate: Amount added instead while the value is negative.
    """

    cap: float
    rate: float
    negative_rate: float | None = None

    def apply(self, value: float) -> float:
        if value >= self.cap:
            return value
        if value < 0 and self.negative_rate is not None:
            return min(self.cap, value + self.negative_rate)
        return min(self.cap, value + self.rate)


# Phase -> resource name -> rule. Phases past the last key use the last table.
REGEN_TABLE: dict[int, dict[str, RegenRate]] = {
    0: {
        "energy": RegenRate(cap=100, rate=0.5),
    },
    1: {
        "energy": RegenRate(cap=100, rate=0.4),
        "knowledge": RegenRate(cap=100, rate=0.3),
        "human_capital": RegenRate(cap=100, rate=0.2, negative_rate=0.5),
    },
    2: {
        "energy": RegenRate(cap=200, rate=0.6),
        "knowledge": RegenRate(cap=150, rate=0.4),
        "human_capital": RegenRate(cap=120, rate=0.3, negative_rate=0.7),
    },
}


def rates_for(phase: int) -> dict[str, RegenRate]:
    return REGEN_TABLE[min(phase, max(REGEN_TABLE))]


def regenerate(state: GameState) -> Update:
    """Partial update for one regeneration pulse (empty if nothing moves)."""
    rules = rates_for(state.phase)
    resources = state.resources
    new_values = {
        name: rule.apply(getattr(resources, name)) for name, rule in rules.items()
    }
    updated = dataclasses.replace(resources, **new_values)
    if updated == resources:
        return {}
    return {"resources": updated}
