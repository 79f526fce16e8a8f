"""Tests for ethical decisions."""
from __future__ import annotations

import pytest

from tick_alignment.decisions import (
    DECISIONS,
    ETHICAL_FRAMEWORKS,
    Choice,
    Decision,
    DecisionEngine,
    get_decision,
)
from tick_alignment.types import GameState, UnknownEntryError


@pytest.fixture
def rig(make_rig):
    return make_rig(GameState(phase=1))


@pytest.fixture
def engine(rig) -> DecisionEngine:
    panel = rig.panel(DecisionEngine)
    panel.mount()
    return panel


class TestCatalog:
    def test_five_decisions(self) -> None:
        assert len(DECISIONS) == 5
        assert len(ETHICAL_FRAMEWORKS) == 5

    def test_unknown(self) -> None:
        with pytest.raises(UnknownEntryError):
            get_decision("trolley")

    def test_unknown_choice(self) -> None:
        with pytest.raises(UnknownEntryError):
            get_decision("lab_safety_protocol").choice("flee")

    def test_duplicate_choice_ids_rejected(self) -> None:
        with pytest.raises(ValueError):
            Decision("d", "t", "", phase=0, choices=(Choice("a", "x"), Choice("a", "y")))

    def test_needs_choices(self) -> None:
        with pytest.raises(ValueError):
            Decision("d", "t", "", phase=0, choices=())


class TestChoose:
    def test_available_by_phase(self, engine: DecisionEngine) -> None:
        assert [d.id for d in engine.available()] == [
            "lab_safety_protocol",
            "data_privacy_dilemma",
            "worker_displacement",
            "market_manipulation",
        ]

    def test_bypass_effects(self, rig, engine: DecisionEngine) -> None:
        assert engine.choose("lab_safety_protocol", "bypass") is True
        rig.run_ms(30)
        s = rig.state
        assert s.resources.alignment == 95
        assert s.capabilities.efficiency == pytest.approx(1.5)
        assert s.reputation.scientific_credibility == 95
        assert "lab_safety_protocol" in s.completed_decisions

    def test_each_decision_answered_once(self, rig, engine: DecisionEngine) -> None:
        assert engine.choose("lab_safety_protocol", "comply") is True
        assert engine.choose("lab_safety_protocol", "bypass") is False
        rig.run_ms(30)
        assert engine.choose("lab_safety_protocol", "negotiate") is False
        assert "lab_safety_protocol" not in {d.id for d in engine.available()}
        assert rig.state.capabilities.efficiency == pytest.approx(1.1)

    def test_two_choices_in_one_window_are_both_recorded(
        self, rig, engine: DecisionEngine
    ) -> None:
        assert engine.choose("lab_safety_protocol", "comply") is True
        assert engine.choose("data_privacy_dilemma", "access_data") is True
        rig.run_ms(30)
        assert rig.state.completed_decisions == {"lab_safety_protocol", "data_privacy_dilemma"}
        assert [d.id for d in engine.available()] == [
            "worker_displacement",
            "market_manipulation",
        ]

    def test_later_phase_rejected(self, engine: DecisionEngine) -> None:
        assert engine.choose("information_warfare", "transparent_communication") is False

    def test_unknown_ids_raise(self, engine: DecisionEngine) -> None:
        with pytest.raises(UnknownEntryError):
            engine.choose("trolley", "pull")
        with pytest.raises(UnknownEntryError):
            engine.choose("lab_safety_protocol", "flee")

    def test_moral_uncertainty(self, engine: DecisionEngine) -> None:
        engine.choose("lab_safety_protocol", "comply")
        assert engine.uncertainty.level == pytest.approx(0.53)
        assert engine.uncertainty.confidence == pytest.approx(0.25)

    def test_confidence_floor(self, engine: DecisionEngine) -> None:
        engine.uncertainty.confidence = 0.12
        engine.choose("lab_safety_protocol", "comply")
        assert engine.uncertainty.confidence == pytest.approx(0.1)

    def test_long_term_consequences_fire_later(self, rig, engine: DecisionEngine) -> None:
        engine.choose("lab_safety_protocol", "bypass")
        assert rig.scheduler.has("decision_engine.consequences.lab_safety_protocol")
        rig.run_ms(9990)
        assert engine.triggered_consequences == []
        rig.run_ms(10)
        assert engine.triggered_consequences == ["alignment_drift", "safety_culture_erosion"]

    def test_unmount_drops_pending_consequences(self, rig, engine: DecisionEngine) -> None:
        engine.choose("lab_safety_protocol", "bypass")
        engine.unmount()
        rig.run_ms(20000)
        assert engine.triggered_consequences == []


def test_frameworks_skip_unknown_names(engine: DecisionEngine) -> None:
    names = [f.id for f in engine.frameworks("lab_safety_protocol")]
    assert names == ["deontological"]
