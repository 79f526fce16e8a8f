"""Tests for passive regeneration."""
from __future__ import annotations

import dataclasses

import pytest

from tick_alignment.regen import RegenRate, rates_for, regenerate
from tick_alignment.types import GameState, Resources


def test_energy_clamped_to_cap() -> None:
    s = GameState(resources=Resources(energy=99.8))
    assert regenerate(s)["resources"].energy == 100


def test_at_cap_is_no_op() -> None:
    assert regenerate(GameState()) == {}


def test_above_cap_left_unchanged() -> None:
    s = GameState(resources=Resources(energy=150))
    assert regenerate(s) == {}


def test_phase_one_rates() -> None:
    s = GameState(phase=1, resources=Resources(energy=50, knowledge=0, human_capital=-2))
    res = regenerate(s)["resources"]
    assert res.energy == pytest.approx(50.4)
    assert res.knowledge == pytest.approx(0.3)
    assert res.human_capital == pytest.approx(-1.5)


def test_later_phases_use_last_table() -> None:
    assert rates_for(5) is rates_for(2)
    s = GameState(phase=4, resources=Resources(energy=199.9))
    assert regenerate(s)["resources"].energy == 200


def test_repeated_pulses_never_exceed_cap() -> None:
    s = GameState(phase=2, resources=Resources(energy=0, knowledge=0, human_capital=0))
    for _ in range(1000):
        update = regenerate(s)
        if not update:
            break
        s = dataclasses.replace(s, **update)
    assert s.resources.energy == 200
    assert s.resources.knowledge == 150
    assert s.resources.human_capital == 120


def test_rate_without_negative_rule() -> None:
    assert RegenRate(cap=10, rate=1).apply(-3) == -2
