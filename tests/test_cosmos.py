"""Tests for probes, civilizations and cosmic events."""
from __future__ import annotations

import pytest

from tick_alignment.cosmos import (
    CIVILIZATIONS,
    COSMIC_EVENTS,
    MATTER_PER_PROBE,
    PROBE_DESIGNS,
    CosmicEvent,
    CosmicExpansion,
    EventChoice,
)
from tick_alignment.types import Capabilities, GameState, Resources, UnknownEntryError

PROBE_REBELLION = COSMIC_EVENTS[1]


@pytest.fixture
def cosmos(make_rig, fixed_rng):
    def build(value: float = 0.99, phase: int = 5, **resources):
        state = GameState(phase=phase, resources=Resources(**resources))
        rig = make_rig(state, rng=fixed_rng(value))
        panel = rig.panel(CosmicExpansion)
        panel.mount()
        return rig, panel

    return build


class TestCatalog:
    def test_sizes(self) -> None:
        assert len(PROBE_DESIGNS) == 3
        assert len(CIVILIZATIONS) == 3
        assert len(COSMIC_EVENTS) == 3

    def test_probability_bounds(self) -> None:
        with pytest.raises(ValueError):
            CosmicEvent("x", "x", "", probability=1.5, phase=5,
                        choices=(EventChoice("a", "a", {}, 1.0),))
        with pytest.raises(ValueError):
            EventChoice("a", "a", {}, success=-0.1)


class TestProbes:
    def test_launch_debits_cost_and_drift(self, cosmos) -> None:
        rig, panel = cosmos(materials=1000, energy=2000, knowledge=100)
        assert panel.launch_probe("basic_replicator") is True
        assert panel.fleet == {"basic_replicator": 1}
        assert panel.launch_probe("basic_replicator") is False
        rig.run_ms(30)
        r = rig.state.resources
        assert (r.materials, r.energy, r.knowledge) == (0, 0, 0)
        assert r.alignment == pytest.approx(99.9)

    def test_unaffordable(self, cosmos) -> None:
        rig, panel = cosmos(materials=999, energy=2000, knowledge=100)
        assert panel.launch_probe("basic_replicator") is False
        assert panel.fleet == {}

    def test_unknown_design(self, cosmos) -> None:
        rig, panel = cosmos()
        with pytest.raises(UnknownEntryError):
            panel.launch_probe("dyson_swarm")

    def test_replication_cycle(self, cosmos) -> None:
        rig, panel = cosmos(materials=1000, energy=2000, knowledge=100)
        panel.launch_probe("basic_replicator")
        rig.run_ms(20000)
        assert panel.fleet == {"basic_replicator": 1}
        rig.run_ms(130)
        assert panel.fleet == {"basic_replicator": 2}
        assert panel.total_probes == 2
        assert rig.state.resources.paperclips == 2000
        assert rig.state.total_paperclips == 2000
        assert panel.replication.remaining("basic_replicator") == 10

    def test_blocked_during_event(self, cosmos) -> None:
        rig, panel = cosmos(materials=1000, energy=2000, knowledge=100)
        panel.current_event = PROBE_REBELLION
        assert panel.launch_probe("basic_replicator") is False


class TestEvents:
    def test_roll_hits_phase_eligible_events(self, cosmos) -> None:
        rig, panel = cosmos(0.0)
        event = panel.roll_event(rig.state)
        assert event is not None
        assert event.id in {"probe_rebellion", "galactic_collision"}
        assert panel.current_event is event

    def test_roll_misses(self, cosmos) -> None:
        rig, panel = cosmos(0.99)
        assert panel.roll_event(rig.state) is None

    def test_no_roll_while_pending(self, cosmos) -> None:
        rig, panel = cosmos(0.0)
        panel.current_event = PROBE_REBELLION
        assert panel.roll_event(rig.state) is None
        assert panel.current_event is PROBE_REBELLION

    def test_success_pays_the_cost(self, make_rig, fixed_rng) -> None:
        rig = make_rig(
            GameState(
                phase=5,
                resources=Resources(energy=10000),
                capabilities=Capabilities(manipulation=30),
            ),
            rng=fixed_rng(0.0),
        )
        panel = rig.panel(CosmicExpansion)
        panel.mount()
        panel.current_event = PROBE_REBELLION
        assert panel.resolve_event("reassert_control") is True
        rig.run_ms(30)
        assert rig.state.resources.energy == 5000
        assert rig.state.capabilities.manipulation == 0
        assert panel.event_log == [("probe_rebellion", "reassert_control", True)]
        assert panel.current_event is None

    def test_failure_is_free(self, cosmos) -> None:
        rig, panel = cosmos(0.99, knowledge=1000)
        panel.current_event = PROBE_REBELLION
        assert panel.resolve_event("negotiate_probes") is True
        assert rig.store.pending is None
        assert panel.event_log == [("probe_rebellion", "negotiate_probes", False)]
        assert panel.current_event is None

    def test_nothing_to_resolve(self, cosmos) -> None:
        rig, panel = cosmos()
        assert panel.resolve_event("reassert_control") is False

    def test_unknown_choice(self, cosmos) -> None:
        rig, panel = cosmos()
        panel.current_event = PROBE_REBELLION
        with pytest.raises(UnknownEntryError):
            panel.resolve_event("surrender")


class TestCivilizations:
    def test_discovery_needs_a_fleet(self, cosmos) -> None:
        rig, panel = cosmos(0.0)
        assert panel.roll_discovery() is None
        panel.fleet["basic_replicator"] = 1
        civ = panel.roll_discovery()
        assert civ is not None
        assert panel.relationships == {civ.id: civ.relationship}

    def test_discovery_roll_misses(self, cosmos) -> None:
        rig, panel = cosmos(0.5)
        panel.fleet["basic_replicator"] = 1
        assert panel.roll_discovery() is None

    def test_undiscovered_offer_rejected(self, cosmos) -> None:
        rig, panel = cosmos(paperclips=100_000)
        assert panel.accept_offer("peaceful_traders", 0) is False

    def test_trade_allies(self, cosmos) -> None:
        rig, panel = cosmos(paperclips=100_000)
        panel.relationships["peaceful_traders"] = "unknown"
        assert panel.accept_offer("peaceful_traders", 0) is True
        assert panel.relationships["peaceful_traders"] == "allied"
        rig.run_ms(30)
        assert rig.state.resources.paperclips == 0
        assert rig.state.resources.knowledge == 1000
        assert rig.state.capabilities.efficiency == pytest.approx(3.0)

    def test_conquest_destroys(self, cosmos) -> None:
        rig, panel = cosmos(energy=200_000)
        panel.relationships["warrior_species"] = "hostile"
        assert panel.accept_offer("warrior_species", 0) is True
        assert panel.relationships["warrior_species"] == "destroyed"
        assert panel.accept_offer("warrior_species", 0) is False

    def test_capability_cost_gates_offer(self, cosmos) -> None:
        rig, panel = cosmos()
        panel.relationships["warrior_species"] = "hostile"
        assert panel.accept_offer("warrior_species", 1) is False

    def test_blocked_during_event(self, cosmos) -> None:
        rig, panel = cosmos(paperclips=100_000)
        panel.relationships["peaceful_traders"] = "unknown"
        panel.current_event = PROBE_REBELLION
        assert panel.accept_offer("peaceful_traders", 0) is False

    def test_bad_offer_index(self, cosmos) -> None:
        rig, panel = cosmos()
        with pytest.raises(UnknownEntryError):
            panel.accept_offer("peaceful_traders", 2)
        with pytest.raises(UnknownEntryError):
            panel.accept_offer("borg", 0)


class TestUniverse:
    def test_conversion_lags_galaxy_count(self, cosmos) -> None:
        rig, panel = cosmos()
        panel.fleet["basic_replicator"] = 1
        panel.update_universe()
        assert panel.universe.converted_matter == MATTER_PER_PROBE
        assert panel.universe.galaxies_controlled == 0
        panel.update_universe()
        assert panel.universe.galaxies_controlled > 0
        assert panel.universe.universal_entropy == pytest.approx(0.102)

    def test_entropy_capped(self, cosmos) -> None:
        rig, panel = cosmos()
        panel.universe.universal_entropy = 0.9995
        panel.update_universe()
        assert panel.universe.universal_entropy == 1.0

    def test_game_time_drives_rolls(self, cosmos) -> None:
        rig, panel = cosmos(0.99)
        panel.on_state(frozenset({"resources"}), rig.state)
        assert panel.universe.universal_entropy == pytest.approx(0.1)
        panel.on_state(frozenset({"game_time"}), rig.state)
        assert panel.universe.universal_entropy == pytest.approx(0.101)
        assert panel.current_event is None


def test_unmount_releases_probe_ticker(cosmos) -> None:
    rig, panel = cosmos(materials=1000, energy=2000, knowledge=100)
    panel.launch_probe("basic_replicator")
    panel.unmount()
    assert not rig.scheduler.has("cosmic_expansion.probes")
    assert len(panel.replication) == 0
