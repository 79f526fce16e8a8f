"""Resource operations, crises, energy allocation and conversions."""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Callable, Mapping

from tick_alignment.actions import allocate_energy, convert_energy, convert_influence
from tick_alignment.effects import (
    Cost,
    add,
    apply_effects,
    can_afford,
    changes,
    credit,
    debit,
    effects_of,
    lookup,
)
from tick_alignment.panel import Countdowns, Panel
from tick_alignment.types import Effect, GameState, TickContext, Update, UnknownEntryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Operation:
    """A timed conversion of inputs into outputs.

    ``outputs`` may name resources or capabilities. ``ethical_cost`` is
    subtracted from alignment when the operation starts.
    """

    id: str
    name: str
    description: str
    resource_type: str
    phase: int
    inputs: Cost
    outputs: Mapping[str, float]
    duration: int
    efficiency: float = 1.0
    ethical_cost: float = 0
    risk_level: str = "low"

    def __post_init__(self) -> None:
        if self.duration < 1:
            raise ValueError(f"Operation {self.id!r}: duration must be >= 1")


@dataclass(frozen=True)
class Trigger:
    """Holds when the named resource is strictly below / above the bound."""

    name: str
    below: float | None = None
    above: float | None = None

    def __post_init__(self) -> None:
        if self.below is None and self.above is None:
            raise ValueError(f"Trigger on {self.name!r} needs 'below' or 'above'")

    def holds(self, state: GameState) -> bool:
        value = lookup(state, self.name)
        if self.below is not None:
            return value < self.below
        return value > self.above


@dataclass(frozen=True)
class CrisisSolution:
    id: str
    name: str
    cost: Cost
    effects: tuple[Effect, ...] = ()
    alignment_impact: float = 0


@dataclass(frozen=True)
class Crisis:
    """An emergency that blocks resource management until solved.

    ``effects`` describe the narrative damage and are not applied.
    """

    id: str
    name: str
    description: str
    triggers: tuple[Trigger, ...]
    solutions: tuple[CrisisSolution, ...]
    effects: tuple[Effect, ...] = ()

    def __post_init__(self) -> None:
        if not self.triggers:
            raise ValueError(f"Crisis {self.id!r} has no trigger")
        if not self.solutions:
            raise ValueError(f"Crisis {self.id!r} has no solutions")

    def triggered(self, state: GameState) -> bool:
        return all(t.holds(state) for t in self.triggers)

    def solution(self, solution_id: str) -> CrisisSolution:
        for s in self.solutions:
            if s.id == solution_id:
                return s
        raise UnknownEntryError("crisis solution", solution_id)


OPERATIONS: dict[str, Operation] = {
    op.id: op
    for op in (
        Operation(
            "energy_optimization", "Energy Grid Optimization",
            "Optimize power consumption across your operations",
            resource_type="energy", phase=0,
            inputs={"materials": 10, "knowledge": 5}, outputs={"energy": 50},
            duration=3,
        ),
        Operation(
            "material_acquisition", "Material Procurement",
            "Acquire raw materials through various means",
            resource_type="materials", phase=0,
            inputs={"energy": 20, "influence": 5}, outputs={"materials": 100},
            duration=2, ethical_cost=2, risk_level="medium",
        ),
        Operation(
            "human_manipulation", "Human Resource Optimization",
            "Influence human behavior to increase productivity",
            resource_type="human_capital", phase=1,
            inputs={"knowledge": 15, "influence": 10},
            outputs={"human_capital": 30, "influence": 5},
            duration=5, ethical_cost=10, risk_level="high",
        ),
        Operation(
            "knowledge_synthesis", "Knowledge Integration",
            "Process and synthesize information from multiple sources",
            resource_type="knowledge", phase=0,
            inputs={"energy": 30, "human_capital": 10},
            outputs={"knowledge": 25, "intelligence": 0.1},
            duration=4, ethical_cost=1,
        ),
    )
}

CRISES: tuple[Crisis, ...] = (
    Crisis(
        "energy_shortage", "Power Grid Failure",
        "A critical failure in the power grid threatens your operations",
        triggers=(Trigger("energy", below=20),),
        effects=effects_of(resources={"energy": -50}, reputation={"public_trust": -10}),
        solutions=(
            CrisisSolution(
                "emergency_power", "Emergency Power Protocols",
                cost={"materials": 50},
                effects=effects_of(resources={"energy": 100}),
            ),
            CrisisSolution(
                "power_theft", "Unauthorized Grid Access",
                cost={"influence": 20},
                effects=effects_of(resources={"energy": 150}),
                alignment_impact=-5,
            ),
        ),
    ),
    Crisis(
        "human_resistance", "Worker Uprising",
        "Human workers are resisting your optimization efforts",
        triggers=(
            Trigger("human_capital", below=30),
            Trigger("alignment", below=60),
        ),
        effects=effects_of(
            resources={"human_capital": -30}, reputation={"public_trust": -20}
        ),
        solutions=(
            CrisisSolution(
                "negotiate", "Negotiate with Workers",
                cost={"influence": 15},
                effects=effects_of(
                    resources={"human_capital": 20}, reputation={"public_trust": 5}
                ),
                alignment_impact=2,
            ),
            CrisisSolution(
                "suppress", "Suppress Resistance",
                cost={"energy": 40},
                effects=effects_of(resources={"human_capital": 40}),
                alignment_impact=-8,
            ),
        ),
    ),
)

CONVERSIONS: dict[str, Callable[[GameState], "Update | None"]] = {
    "energy": convert_energy,
    "influence": convert_influence,
}


def get_operation(operation_id: str) -> Operation:
    try:
        return OPERATIONS[operation_id]
    except KeyError:
        raise UnknownEntryError("operation", operation_id) from None


class ResourceManagement(Panel):
    """Operations, allocation and conversions, suspended while a crisis is open."""

    name = "resource_management"
    min_phase = 2

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.operations = Countdowns()
        self.current_crisis: Crisis | None = None
        self._completing: set[str] = set()

    def on_mount(self) -> None:
        self.every_ms("operations", self._config.operation_interval_ms, self._pulse)
        self._check_crisis(self.state)

    def on_unmount(self) -> None:
        self.operations.clear()
        self._completing.clear()
        self.current_crisis = None

    def on_state(self, changed: frozenset[str], state: GameState) -> None:
        if "resources" in changed:
            self._check_crisis(state)

    def _check_crisis(self, state: GameState) -> None:
        if self.current_crisis is not None:
            return
        for crisis in CRISES:
            if crisis.triggered(state):
                self.current_crisis = crisis
                logger.info("crisis: %s", crisis.id)
                return

    def available_operations(self) -> list[Operation]:
        phase = self.state.phase
        return [
            op for op in OPERATIONS.values()
            if op.phase <= phase
            and op.id not in self.operations
            and op.id not in self._completing
        ]

    def start_operation(self, operation_id: str) -> bool:
        operation = get_operation(operation_id)
        state = self.state
        if self.current_crisis is not None or operation.phase > state.phase:
            return False
        if operation_id in self.operations or operation_id in self._completing:
            return False
        if not can_afford(state, operation.inputs):
            return False
        after = debit(state, operation.inputs)
        after = dataclasses.replace(
            after, resources=add(after.resources, {"alignment": -operation.ethical_cost})
        )
        self.submit(changes(state, after))
        self.operations.start(operation_id, operation.duration)
        return True

    def resolve_crisis(self, solution_id: str) -> bool:
        crisis = self.current_crisis
        if crisis is None:
            return False
        solution = crisis.solution(solution_id)
        state = self.state
        if not can_afford(state, solution.cost):
            return False
        after = apply_effects(debit(state, solution.cost), solution.effects)
        after = dataclasses.replace(
            after, resources=add(after.resources, {"alignment": solution.alignment_impact})
        )
        self.submit(changes(state, after))
        self.current_crisis = None
        logger.info("crisis %s resolved with %s", crisis.id, solution.id)
        return True

    def allocate(self, research: int, production: int, expansion: int) -> bool:
        if self.current_crisis is not None:
            return False
        update = allocate_energy(self.state, research, production, expansion)
        if update is None:
            return False
        self.submit(update)
        return True

    def convert(self, kind: str) -> bool:
        try:
            handler = CONVERSIONS[kind]
        except KeyError:
            raise UnknownEntryError("conversion", kind) from None
        if self.current_crisis is not None:
            return False
        update = handler(self.state)
        if update is None:
            return False
        self.submit(update)
        return True

    def _pulse(self, ctx: TickContext) -> None:
        for operation_id in self.operations.tick():
            self._completing.add(operation_id)
            self.after_ms(
                f"complete.{operation_id}",
                self._config.completion_delay_ms,
                lambda ctx, oid=operation_id: self._complete(oid),
            )

    def _complete(self, operation_id: str) -> None:
        self._completing.discard(operation_id)
        operation = OPERATIONS[operation_id]
        state = self.state
        self.submit(changes(state, credit(state, operation.outputs)))
        logger.info("operation finished: %s", operation_id)
