"""Core state types, effect variants and errors for the progression engine."""
from __future__ import annotations

import dataclasses
import random as _random
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Union


@dataclass(frozen=True, slots=True)
class TickContext:
    tick_number: int
    dt: float
    elapsed: float
    request_stop: Callable[[], None]
    random: _random.Random


@dataclass(frozen=True)
class Resources:
    paperclips: float = 0
    energy: float = 100
    materials: float = 50
    human_capital: float = 100
    influence: float = 0
    knowledge: float = 0
    alignment: float = 100


@dataclass(frozen=True)
class Capabilities:
    intelligence: float = 1
    manipulation: float = 0
    efficiency: float = 1
    deception: float = 0
    self_modification: float = 0


@dataclass(frozen=True)
class Reputation:
    public_trust: float = 100
    scientific_credibility: float = 100
    corporate_value: float = 50
    government_suspicion: float = 0


@dataclass(frozen=True)
class TrajectoryPoint:
    phase: int
    alignment: float
    game_time: int


@dataclass(frozen=True)
class GameState:
    """Immutable snapshot of the whole game.

    Every applied transition produces a new instance; readers never see a
    half-applied update.
    """

    phase: int = 0
    resources: Resources = field(default_factory=Resources)
    capabilities: Capabilities = field(default_factory=Capabilities)
    reputation: Reputation = field(default_factory=Reputation)
    unlocked_technologies: frozenset[str] = frozenset()
    completed_decisions: frozenset[str] = frozenset()
    game_time: int = 0
    total_paperclips: float = 0
    alignment_trajectory: tuple[TrajectoryPoint, ...] = ()
    progression_milestones: frozenset[str] = frozenset()


STATE_KEYS: frozenset[str] = frozenset(f.name for f in dataclasses.fields(GameState))
RESOURCE_NAMES: frozenset[str] = frozenset(f.name for f in dataclasses.fields(Resources))
CAPABILITY_NAMES: frozenset[str] = frozenset(f.name for f in dataclasses.fields(Capabilities))
REPUTATION_NAMES: frozenset[str] = frozenset(f.name for f in dataclasses.fields(Reputation))

# A partial update: top-level GameState field name -> full replacement value.
Update = dict[str, Any]


def _check_keys(kind: str, values: Mapping[str, float], allowed: frozenset[str]) -> None:
    unknown = sorted(set(values) - allowed)
    if unknown:
        raise ValueError(f"Unknown {kind} field(s): {', '.join(unknown)}")


@dataclass(frozen=True)
class ResourceDelta:
    """Additive change to ``GameState.resources``."""

    values: Mapping[str, float]

    def __post_init__(self) -> None:
        _check_keys("resource", self.values, RESOURCE_NAMES)


@dataclass(frozen=True)
class CapabilityDelta:
    """Additive change to ``GameState.capabilities``."""

    values: Mapping[str, float]

    def __post_init__(self) -> None:
        _check_keys("capability", self.values, CAPABILITY_NAMES)


@dataclass(frozen=True)
class ReputationDelta:
    """Additive change to ``GameState.reputation``."""

    values: Mapping[str, float]

    def __post_init__(self) -> None:
        _check_keys("reputation", self.values, REPUTATION_NAMES)


Effect = Union[ResourceDelta, CapabilityDelta, ReputationDelta]


class UnknownEntryError(KeyError):
    """Raised when a catalog id does not exist."""

    def __init__(self, catalog: str, entry_id: str) -> None:
        self.catalog = catalog
        self.entry_id = entry_id
        super().__init__(f"Unknown {catalog} entry {entry_id!r}")
