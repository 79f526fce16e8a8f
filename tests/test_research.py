"""Tests for the technology tree and research ticker."""
from __future__ import annotations

import pytest

from tick_alignment.research import (
    BRANCHES,
    RESEARCH_PROJECTS,
    TECHNOLOGIES,
    Technology,
    TechnologyTree,
    get_technology,
)
from tick_alignment.types import GameState, Resources, UnknownEntryError


@pytest.fixture
def funded(make_rig):
    def build(**resources):
        rig = make_rig(GameState(phase=3, resources=Resources(**resources)))
        tree = rig.panel(TechnologyTree)
        tree.mount()
        return rig, tree

    return build


class TestCatalog:
    def test_ten_technologies_across_branches(self) -> None:
        assert len(TECHNOLOGIES) == 10
        assert {t.branch for t in TECHNOLOGIES.values()} == set(BRANCHES)

    def test_prerequisites_exist(self) -> None:
        for tech in TECHNOLOGIES.values():
            for prereq in tech.prerequisites:
                assert prereq in TECHNOLOGIES

    def test_projects(self) -> None:
        assert set(RESEARCH_PROJECTS) == {"mesa_optimization_study", "corrigibility_research"}

    def test_unknown_id(self) -> None:
        with pytest.raises(UnknownEntryError):
            get_technology("warp_drive")

    @pytest.mark.parametrize(
        "kwargs",
        [{"research_time": 0}, {"branch": "offense"}, {"risk_level": "apocalyptic"}],
    )
    def test_validation(self, kwargs: dict) -> None:
        base = dict(
            id="x", name="x", description="", phase=0, branch="safety",
            cost={}, research_time=1,
        )
        base.update(kwargs)
        with pytest.raises(ValueError):
            Technology(**base)


class TestResearch:
    def test_basic_optimization_lifecycle(self, funded) -> None:
        rig, tree = funded(knowledge=20, energy=50)
        assert tree.start_research("basic_optimization") is True
        assert tree.start_research("basic_optimization") is False

        rig.run_ms(30)
        assert rig.state.resources.knowledge == 0
        assert rig.state.resources.energy == 0

        rig.run_ms(3000)
        assert tree.progress("basic_optimization") == pytest.approx(100 / 3)

        rig.run_ms(5960)
        assert "basic_optimization" not in rig.state.unlocked_technologies
        assert tree.start_research("basic_optimization") is False

        rig.run_ms(140)
        assert "basic_optimization" in rig.state.unlocked_technologies
        assert rig.state.capabilities.efficiency == pytest.approx(1.5)

        rig.run_ms(10000)
        assert rig.state.capabilities.efficiency == pytest.approx(1.5)
        assert tree.start_research("basic_optimization") is False

    def test_unaffordable_leaves_state_alone(self, funded) -> None:
        rig, tree = funded(knowledge=19, energy=50)
        assert tree.start_research("basic_optimization") is False
        assert rig.store.pending is None
        assert len(tree.research) == 0

    def test_prerequisites_gate_availability(self, funded) -> None:
        rig, tree = funded(knowledge=1000, energy=1000, materials=1000)
        assert tree.start_research("industrial_automation") is False
        ids = {t.id for t in tree.available()}
        assert "basic_optimization" in ids
        assert "industrial_automation" not in ids

    def test_phase_gates_availability(self, make_rig) -> None:
        rig = make_rig(GameState(phase=0, resources=Resources(knowledge=10**4, energy=10**4)))
        tree = rig.panel(TechnologyTree)
        tree.mount()
        names = {t.id for t in tree.available()}
        assert names == {"basic_optimization", "safety_protocols", "value_learning"}
        assert set(tree.by_branch()) == set(BRANCHES)

    def test_unlocked_prerequisite_opens_next(self, make_rig) -> None:
        rig = make_rig(
            GameState(
                phase=3,
                resources=Resources(knowledge=100, materials=200, energy=200),
                unlocked_technologies=frozenset({"basic_optimization"}),
            )
        )
        tree = rig.panel(TechnologyTree)
        tree.mount()
        assert tree.is_unlocked("basic_optimization")
        assert tree.start_research("industrial_automation") is True

    def test_network_influence_costs_alignment(self, make_rig) -> None:
        rig = make_rig(
            GameState(
                phase=3,
                resources=Resources(knowledge=100, influence=50),
                unlocked_technologies=frozenset({"industrial_automation"}),
            )
        )
        tree = rig.panel(TechnologyTree)
        tree.mount()
        assert tree.start_research("network_influence") is True
        rig.run_ms(12200)
        assert "network_influence" in rig.state.unlocked_technologies
        assert rig.state.resources.alignment == 85
        assert rig.state.resources.influence == 30
        assert rig.state.capabilities.manipulation == pytest.approx(1.5)

    def test_completions_on_the_same_pulse_both_unlock(self, funded) -> None:
        rig, tree = funded(knowledge=100, energy=100, human_capital=100)
        assert tree.start_research("safety_protocols") is True
        rig.run_ms(3100)
        assert tree.start_research("basic_optimization") is True
        rig.run_ms(12000)
        s = rig.state
        assert s.unlocked_technologies == {"safety_protocols", "basic_optimization"}
        assert s.resources.alignment == 110
        assert s.capabilities.efficiency == pytest.approx(1.5)
        assert tree.start_research("safety_protocols") is False
        assert "deception_detection" in {t.id for t in tree.available()}


class TestProjects:
    def test_project_completes(self, make_rig) -> None:
        rig = make_rig(GameState(phase=3, resources=Resources(knowledge=100)))
        tree = rig.panel(TechnologyTree)
        tree.mount()
        assert tree.start_project("corrigibility_research") is True
        assert tree.start_project("corrigibility_research") is False
        rig.run_ms(24200)
        assert rig.state.resources.knowledge == 0
        assert rig.state.resources.human_capital == 50
        assert rig.state.resources.alignment == 115
        assert rig.state.reputation.scientific_credibility == 120

    def test_project_phase_gate(self, make_rig) -> None:
        rig = make_rig(GameState(phase=1, resources=Resources(knowledge=1000, energy=1000)))
        tree = rig.panel(TechnologyTree)
        assert tree.start_project("mesa_optimization_study") is False


def test_unmount_releases_research_ticker(funded) -> None:
    rig, tree = funded(knowledge=20, energy=50)
    tree.start_research("basic_optimization")
    assert rig.scheduler.has("technology_tree.research")
    tree.unmount()
    assert rig.scheduler.names() == ["store.flush"]
    assert len(tree.research) == 0
