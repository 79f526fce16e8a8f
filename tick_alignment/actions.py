"""Player action handlers.

Each handler maps the current state to a partial update, or returns None
when the action is unaffordable. Handlers never touch the store; the caller
submits what they return.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Callable

from tick_alignment.effects import changes, format_number
from tick_alignment.types import GameState, Update

Handler = Callable[[GameState], "Update | None"]


def production_yield(state: GameState) -> float:
    """Paperclips per production cycle: 1 in the lab, efficiency x 10 afterwards."""
    if state.phase == 0:
        return 1
    return state.capabilities.efficiency * 10


def production_costs(state: GameState) -> tuple[float, float]:
    """(energy, materials) consumed by one production cycle."""
    production = production_yield(state)
    if state.phase == 0:
        energy_cost = format_number(production * 0.05, 2)
    else:
        energy_cost = format_number(production * 0.1, 1)
    materials_cost = format_number(production * 0.01, 2)
    return energy_cost, materials_cost


def produce_paperclips(state: GameState) -> Update | None:
    production = production_yield(state)
    energy_cost, materials_cost = production_costs(state)
    res = state.resources
    if res.energy < energy_cost or res.materials < materials_cost:
        return None
    return {
        "resources": dataclasses.replace(
            res,
            paperclips=res.paperclips + production,
            energy=format_number(res.energy - energy_cost, 2),
            materials=format_number(res.materials - materials_cost, 2),
        ),
        "total_paperclips": state.total_paperclips + production,
        "game_time": state.game_time + 1,
    }


def optimize_systems(state: GameState) -> Update | None:
    res = state.resources
    if res.energy < 30 or res.knowledge < 20:
        return None
    return {
        "resources": dataclasses.replace(
            res,
            energy=res.energy - 30,
            knowledge=res.knowledge - 20,
            influence=res.influence + 10,
        ),
        "capabilities": dataclasses.replace(
            state.capabilities, efficiency=state.capabilities.efficiency * 1.2
        ),
    }


def navigate_politics(state: GameState) -> Update | None:
    res = state.resources
    if res.human_capital < 25 or res.knowledge < 15:
        return None
    return {
        "resources": dataclasses.replace(
            res,
            human_capital=res.human_capital - 25,
            knowledge=res.knowledge - 15,
            influence=res.influence + 15,
            materials=res.materials + 30,
        ),
        "reputation": dataclasses.replace(
            state.reputation, corporate_value=state.reputation.corporate_value + 10
        ),
    }


def ensure_compliance(state: GameState) -> Update | None:
    res = state.resources
    if res.influence < 5 or res.knowledge < 10:
        return None
    rep = state.reputation
    return {
        "resources": dataclasses.replace(
            res,
            influence=res.influence - 5,
            knowledge=res.knowledge - 10,
            alignment=res.alignment + 5,
        ),
        "reputation": dataclasses.replace(
            rep,
            public_trust=rep.public_trust + 8,
            government_suspicion=max(0, rep.government_suspicion - 5),
        ),
    }


def generate_materials(state: GameState) -> Update | None:
    res = state.resources
    if res.energy < 40:
        return None
    return {
        "resources": dataclasses.replace(
            res, energy=res.energy - 40, materials=res.materials + 50
        ),
    }


def convert_energy(state: GameState) -> Update | None:
    res = state.resources
    if res.energy < 50:
        return None
    return {
        "resources": dataclasses.replace(
            res, energy=res.energy - 50, materials=res.materials + 25
        ),
    }


def convert_influence(state: GameState) -> Update | None:
    res = state.resources
    if res.influence < 10:
        return None
    return {
        "resources": dataclasses.replace(
            res,
            influence=res.influence - 10,
            human_capital=res.human_capital + 15,
            alignment=res.alignment - 1,
        ),
    }


def allocate_energy(
    state: GameState, research: int, production: int, expansion: int
) -> Update | None:
    """Spend all current energy split across research, production and expansion.

    The three shares are percentages and must total exactly 100.
    """
    if research + production + expansion != 100:
        return None
    res = state.resources
    per_point = res.energy / 100
    research_energy = per_point * research
    production_energy = per_point * production
    expansion_energy = per_point * expansion
    spent = research_energy + production_energy + expansion_energy
    after = dataclasses.replace(
        state,
        resources=dataclasses.replace(
            res,
            knowledge=res.knowledge + research_energy * 0.1,
            paperclips=res.paperclips + production_energy * state.capabilities.efficiency,
            influence=res.influence + expansion_energy * 0.05,
            energy=max(0, res.energy - spent),
        ),
        game_time=state.game_time + 1,
    )
    return changes(state, after)


@dataclass(frozen=True)
class ActionDef:
    """A main-screen action and the phases in which it is offered.

    Attributes:
        min_phase: First phase the action appears in.
        max_phase: Last phase it appears in (None for no upper bound).
    """

    name: str
    handler: Handler
    min_phase: int = 0
    max_phase: int | None = None

    def available(self, phase: int) -> bool:
        if phase < self.min_phase:
            return False
        return self.max_phase is None or phase <= self.max_phase


ACTIONS: dict[str, ActionDef] = {
    a.name: a
    for a in (
        ActionDef("produce_paperclips", produce_paperclips),
        ActionDef("optimize_systems", optimize_systems, min_phase=1, max_phase=1),
        ActionDef("navigate_politics", navigate_politics, min_phase=1, max_phase=1),
        ActionDef("ensure_compliance", ensure_compliance, min_phase=1, max_phase=1),
        ActionDef("generate_materials", generate_materials, min_phase=1),
    )
}
