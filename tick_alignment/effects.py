"""Affordability gate, cost debit and effect application.

All functions are pure: they take a GameState and return a new one (or a
partial update) without touching the store.
"""
from __future__ import annotations

import dataclasses
import math
from typing import Iterable, Mapping, TypeVar

from tick_alignment.types import (
    CAPABILITY_NAMES,
    RESOURCE_NAMES,
    CapabilityDelta,
    Effect,
    GameState,
    ReputationDelta,
    ResourceDelta,
    Update,
)

T = TypeVar("T")

Cost = Mapping[str, float]


def format_number(num: float, decimals: int = 2) -> float:
    """Round half up to *decimals* places (not banker's rounding)."""
    factor = 10 ** decimals
    return math.floor(num * factor + 0.5) / factor


def add(obj: T, deltas: Mapping[str, float]) -> T:
    """Return a copy of the frozen dataclass *obj* with *deltas* added field-wise."""
    if not deltas:
        return obj
    return dataclasses.replace(
        obj, **{name: getattr(obj, name) + amount for name, amount in deltas.items()}
    )


def lookup(state: GameState, name: str) -> float:
    """Current value of a resource or capability by name (0 if neither)."""
    if name in RESOURCE_NAMES:
        return getattr(state.resources, name)
    if name in CAPABILITY_NAMES:
        return getattr(state.capabilities, name)
    return 0


def can_afford(state: GameState, cost: Cost) -> bool:
    """Check every cost entry is currently met."""
    for name, needed in cost.items():
        if lookup(state, name) < needed:
            return False
    return True


def debit(state: GameState, cost: Cost) -> GameState:
    """Subtract *cost* without checking affordability."""
    resource_part = {n: -v for n, v in cost.items() if n in RESOURCE_NAMES}
    capability_part = {n: -v for n, v in cost.items() if n in CAPABILITY_NAMES}
    return dataclasses.replace(
        state,
        resources=add(state.resources, resource_part),
        capabilities=add(state.capabilities, capability_part),
    )


def credit(state: GameState, gains: Mapping[str, float]) -> GameState:
    """Add untyped gains, routing each name to resources or capabilities.

    Names that are neither are ignored.
    """
    resource_part = {n: v for n, v in gains.items() if n in RESOURCE_NAMES}
    capability_part = {n: v for n, v in gains.items() if n in CAPABILITY_NAMES}
    return dataclasses.replace(
        state,
        resources=add(state.resources, resource_part),
        capabilities=add(state.capabilities, capability_part),
    )


def apply_effects(state: GameState, effects: Iterable[Effect]) -> GameState:
    for effect in effects:
        if isinstance(effect, ResourceDelta):
            state = dataclasses.replace(state, resources=add(state.resources, effect.values))
        elif isinstance(effect, CapabilityDelta):
            state = dataclasses.replace(
                state, capabilities=add(state.capabilities, effect.values)
            )
        elif isinstance(effect, ReputationDelta):
            state = dataclasses.replace(state, reputation=add(state.reputation, effect.values))
        else:
            raise TypeError(f"Unsupported effect {effect!r}")
    return state


def changes(before: GameState, after: GameState) -> Update:
    """Partial update holding every top-level field that differs.

    Sub-objects are carried whole, so the update is safe to coalesce with
    updates touching other keys.
    """
    update: Update = {}
    for f in dataclasses.fields(GameState):
        value = getattr(after, f.name)
        if getattr(before, f.name) != value:
            update[f.name] = value
    return update


def effects_of(
    resources: Mapping[str, float] | None = None,
    capabilities: Mapping[str, float] | None = None,
    reputation: Mapping[str, float] | None = None,
) -> tuple[Effect, ...]:
    """Shorthand for building catalog effect tuples."""
    result: list[Effect] = []
    if resources:
        result.append(ResourceDelta(dict(resources)))
    if capabilities:
        result.append(CapabilityDelta(dict(capabilities)))
    if reputation:
        result.append(ReputationDelta(dict(reputation)))
    return tuple(result)
