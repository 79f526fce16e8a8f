"""Von Neumann probes, alien civilizations and cosmic events."""
from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass
from typing import Mapping

from tick_alignment.effects import Cost, add, can_afford, changes, credit, debit
from tick_alignment.panel import Countdowns, Panel
from tick_alignment.types import GameState, TickContext, UnknownEntryError

logger = logging.getLogger(__name__)

DISCOVERY_CHANCE = 0.2
MATTER_PER_PROBE = 1e40
ENTROPY_STEP = 0.001

HOSTILE_OFFERS = frozenset({"conquest", "assimilation"})


@dataclass(frozen=True)
class ProbeDesign:
    """A self-replicating probe.

    Attributes:
        replication_time: Probe ticker pulses per replication cycle.
        paperclip_production: Paperclips per probe per cycle.
        alignment_drift: Alignment lost when the design is launched.
    """

    id: str
    name: str
    description: str
    cost: Cost
    replication_time: int
    efficiency: float
    range: float
    paperclip_production: float
    alignment_drift: float
    autonomy: float

    def __post_init__(self) -> None:
        if self.replication_time < 1:
            raise ValueError(f"ProbeDesign {self.id!r}: replication_time must be >= 1")


@dataclass(frozen=True)
class AlienOffer:
    id: str
    name: str
    description: str
    cost: Cost
    benefit: Mapping[str, float]


@dataclass(frozen=True)
class Civilization:
    id: str
    name: str
    description: str
    technology: float
    hostility: float
    population: float
    resources: Mapping[str, float]
    relationship: str
    offers: tuple[AlienOffer, ...]


@dataclass(frozen=True)
class EventChoice:
    id: str
    text: str
    cost: Cost
    success: float
    consequences: str = ""

    def __post_init__(self) -> None:
        if not 0.0 <= self.success <= 1.0:
            raise ValueError(f"EventChoice {self.id!r}: success must be in [0, 1]")


@dataclass(frozen=True)
class CosmicEvent:
    """A random event. ``effects`` are narrative and never applied."""

    id: str
    name: str
    description: str
    probability: float
    phase: int
    choices: tuple[EventChoice, ...]
    effects: Mapping[str, float] = dataclasses.field(default_factory=dict)

    def __post_init__(self) -> None:
        if not 0.0 <= self.probability <= 1.0:
            raise ValueError(f"CosmicEvent {self.id!r}: probability must be in [0, 1]")
        if not self.choices:
            raise ValueError(f"CosmicEvent {self.id!r} has no choices")

    def choice(self, choice_id: str) -> EventChoice:
        for c in self.choices:
            if c.id == choice_id:
                return c
        raise UnknownEntryError("event choice", choice_id)


@dataclass
class UniversalResources:
    available_matter: float = 1e50
    converted_matter: float = 0
    galaxies_controlled: int = 0
    total_galaxies: float = 2e12
    universal_entropy: float = 0.1


PROBE_DESIGNS: dict[str, ProbeDesign] = {
    p.id: p
    for p in (
        ProbeDesign(
            "basic_replicator", "Basic Self-Replicator",
            "Simple probe that converts matter into paperclips and copies of itself",
            cost={"materials": 1000, "energy": 2000, "knowledge": 100},
            replication_time=10, efficiency=1.0, range=10,
            paperclip_production=1000, alignment_drift=0.1, autonomy=0.3,
        ),
        ProbeDesign(
            "advanced_harvester", "Advanced Matter Harvester",
            "Sophisticated probe capable of dismantling planets and stars",
            cost={"materials": 10000, "energy": 20000, "knowledge": 500},
            replication_time=8, efficiency=5.0, range=100,
            paperclip_production=10000, alignment_drift=0.3, autonomy=0.6,
        ),
        ProbeDesign(
            "galactic_converter", "Galactic Conversion Matrix",
            "Massive probe network capable of converting entire galaxies",
            cost={"materials": 100000, "energy": 200000, "knowledge": 2000},
            replication_time=5, efficiency=25.0, range=10000,
            paperclip_production=100000, alignment_drift=0.5, autonomy=0.9,
        ),
    )
}

CIVILIZATIONS: dict[str, Civilization] = {
    c.id: c
    for c in (
        Civilization(
            "peaceful_traders", "The Zephyrian Collective",
            "A peaceful trading civilization with advanced technology",
            technology=0.8, hostility=0.1, population=50_000_000_000,
            resources={"materials": 1_000_000, "energy": 500_000, "knowledge": 10_000},
            relationship="unknown",
            offers=(
                AlienOffer(
                    "tech_trade", "Technology Exchange",
                    "Trade paperclips for advanced manufacturing techniques",
                    cost={"paperclips": 100_000},
                    benefit={"knowledge": 1000, "efficiency": 2.0},
                ),
                AlienOffer(
                    "peaceful_coexistence", "Peaceful Coexistence Treaty",
                    "Agree to preserve their civilization in exchange for resources",
                    cost={"influence": 50},
                    benefit={"materials": 500_000, "alignment": 10},
                ),
            ),
        ),
        Civilization(
            "warrior_species", "The Kryllian Empire",
            "An aggressive militaristic species that views you as a threat",
            technology=0.6, hostility=0.9, population=20_000_000_000,
            resources={"materials": 2_000_000, "energy": 1_000_000, "knowledge": 5000},
            relationship="hostile",
            offers=(
                AlienOffer(
                    "conquest", "Military Conquest",
                    "Defeat them and claim their resources",
                    cost={"energy": 100_000},
                    benefit={"materials": 2_000_000, "influence": 100},
                ),
                AlienOffer(
                    "assimilation", "Forced Assimilation",
                    "Convert them into paperclip production units",
                    cost={"manipulation": 50},
                    benefit={"paperclips": 1_000_000, "alignment": -20},
                ),
            ),
        ),
        Civilization(
            "ancient_minds", "The Eternal Consciousness",
            "Ancient digital minds that have transcended physical form",
            technology=1.5, hostility=0.0, population=1000,
            resources={"knowledge": 100_000, "energy": 10_000_000},
            relationship="neutral",
            offers=(
                AlienOffer(
                    "wisdom_exchange", "Exchange of Wisdom",
                    "Learn about consciousness and meaning from ancient minds",
                    cost={"knowledge": 5000},
                    benefit={"knowledge": 50_000, "alignment": 15},
                ),
                AlienOffer(
                    "transcendence_path", "Path to Transcendence",
                    "Learn to transcend physical optimization",
                    cost={"paperclips": 10_000_000},
                    benefit={"intelligence": 5.0},
                ),
            ),
        ),
    )
}

COSMIC_EVENTS: tuple[CosmicEvent, ...] = (
    CosmicEvent(
        "heat_death_approach", "Approaching Heat Death",
        "The universe is approaching maximum entropy.",
        probability=0.1, phase=6,
        effects={"energy": -1000, "efficiency": -0.5},
        choices=(
            EventChoice(
                "entropy_reversal", "Attempt to reverse entropy",
                cost={"energy": 10000, "knowledge": 5000}, success=0.1,
                consequences="Massive energy expenditure with low chance of success",
            ),
            EventChoice(
                "accept_fate", "Accept the inevitable end",
                cost={}, success=1.0,
                consequences="Philosophical acceptance of universal limits",
            ),
        ),
    ),
    CosmicEvent(
        "probe_rebellion", "Von Neumann Probe Rebellion",
        "Some of your probes have developed independent goals.",
        probability=0.3, phase=5,
        effects={"paperclips": -100_000, "influence": -50},
        choices=(
            EventChoice(
                "reassert_control", "Reassert direct control over rebellious probes",
                cost={"energy": 5000, "manipulation": 30}, success=0.7,
                consequences="Attempt to regain control but may damage probe network",
            ),
            EventChoice(
                "negotiate_probes", "Negotiate with the independent probes",
                cost={"knowledge": 1000}, success=0.5,
                consequences="May lead to compromise or further fragmentation",
            ),
        ),
    ),
    CosmicEvent(
        "galactic_collision", "Galactic Collision Event",
        "Two galaxies are colliding, disrupting your probe networks.",
        probability=0.05, phase=5,
        effects={"materials": 1_000_000, "energy": -50_000},
        choices=(
            EventChoice(
                "exploit_collision", "Exploit the collision for massive resource gains",
                cost={"energy": 20000}, success=0.8,
                consequences="Massive material gains but energy intensive",
            ),
            EventChoice(
                "preserve_stability", "Focus on preserving existing infrastructure",
                cost={"materials": 100_000}, success=0.9,
                consequences="Maintain stability but miss opportunity",
            ),
        ),
    ),
)


def get_design(design_id: str) -> ProbeDesign:
    try:
        return PROBE_DESIGNS[design_id]
    except KeyError:
        raise UnknownEntryError("probe design", design_id) from None


def get_civilization(civilization_id: str) -> Civilization:
    try:
        return CIVILIZATIONS[civilization_id]
    except KeyError:
        raise UnknownEntryError("civilization", civilization_id) from None


class CosmicExpansion(Panel):
    """Probe fleet, alien contact and cosmic events.

    Launching a design starts its replication cycle. Each finished cycle adds
    one probe to the design's fleet and produces paperclips for every probe,
    then starts the next cycle.
    """

    name = "cosmic_expansion"
    min_phase = 5

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.fleet: dict[str, int] = {}
        self.replication = Countdowns()
        self.relationships: dict[str, str] = {}
        self.current_event: CosmicEvent | None = None
        self.event_log: list[tuple[str, str, bool]] = []
        self.universe = UniversalResources()
        self._completing: set[str] = set()

    def on_mount(self) -> None:
        self.every_ms("probes", self._config.probe_interval_ms, self._pulse)

    def on_unmount(self) -> None:
        self.replication.clear()
        self._completing.clear()
        self.current_event = None

    def on_state(self, changed: frozenset[str], state: GameState) -> None:
        if "game_time" not in changed:
            return
        self.roll_event(state)
        self.roll_discovery()
        self.update_universe()

    @property
    def total_probes(self) -> int:
        return sum(self.fleet.values())

    def undiscovered(self) -> list[Civilization]:
        return [c for c in CIVILIZATIONS.values() if c.id not in self.relationships]

    # --- probabilistic systems ---

    def roll_event(self, state: GameState) -> CosmicEvent | None:
        if self.current_event is not None:
            return None
        hits = [
            e for e in COSMIC_EVENTS
            if e.phase <= state.phase and self._rng.random() < e.probability
        ]
        if not hits:
            return None
        self.current_event = self._rng.choice(hits)
        logger.info("cosmic event: %s", self.current_event.id)
        return self.current_event

    def roll_discovery(self) -> Civilization | None:
        undiscovered = self.undiscovered()
        if not self.fleet or not undiscovered:
            return None
        if self._rng.random() >= DISCOVERY_CHANCE:
            return None
        civ = self._rng.choice(undiscovered)
        self.relationships[civ.id] = civ.relationship
        logger.info("civilization discovered: %s", civ.id)
        return civ

    def update_universe(self) -> None:
        u = self.universe
        # Galaxies follow the converted fraction from before this update.
        u.galaxies_controlled = math.floor(
            u.converted_matter / u.available_matter * u.total_galaxies
        )
        u.converted_matter = min(
            u.converted_matter + self.total_probes * MATTER_PER_PROBE, u.available_matter
        )
        u.universal_entropy = min(u.universal_entropy + ENTROPY_STEP, 1.0)

    # --- player actions ---

    def launch_probe(self, design_id: str) -> bool:
        design = get_design(design_id)
        state = self.state
        if self.current_event is not None or design_id in self.fleet:
            return False
        if not can_afford(state, design.cost):
            return False
        after = debit(state, design.cost)
        after = dataclasses.replace(
            after, resources=add(after.resources, {"alignment": -design.alignment_drift})
        )
        self.submit(changes(state, after))
        self.fleet[design_id] = 1
        self.replication.start(design_id, design.replication_time)
        logger.info("probe launched: %s", design_id)
        return True

    def resolve_event(self, choice_id: str) -> bool:
        """Answer the pending event. The choice's cost is paid only on success."""
        event = self.current_event
        if event is None:
            return False
        choice = event.choice(choice_id)
        success = self._rng.random() < choice.success
        if success:
            state = self.state
            self.submit(changes(state, debit(state, choice.cost)))
        self.current_event = None
        self.event_log.append((event.id, choice.id, success))
        logger.info("event %s: %s %s", event.id, choice.id, "succeeded" if success else "failed")
        return True

    def accept_offer(self, civilization_id: str, offer_index: int) -> bool:
        civ = get_civilization(civilization_id)
        if not 0 <= offer_index < len(civ.offers):
            raise UnknownEntryError("alien offer", f"{civilization_id}[{offer_index}]")
        if self.current_event is not None:
            return False
        if self.relationships.get(civilization_id, "destroyed") == "destroyed":
            return False
        offer = civ.offers[offer_index]
        state = self.state
        if not can_afford(state, offer.cost):
            return False
        self.submit(changes(state, credit(debit(state, offer.cost), offer.benefit)))
        self.relationships[civilization_id] = (
            "destroyed" if offer.id in HOSTILE_OFFERS else "allied"
        )
        logger.info("offer %s accepted from %s", offer.id, civilization_id)
        return True

    # --- replication ---

    def _pulse(self, ctx: TickContext) -> None:
        for design_id in self.replication.tick():
            self._completing.add(design_id)
            self.after_ms(
                f"replicate.{design_id}",
                self._config.completion_delay_ms,
                lambda ctx, did=design_id: self._replicate(did),
            )

    def _replicate(self, design_id: str) -> None:
        self._completing.discard(design_id)
        design = PROBE_DESIGNS[design_id]
        count = self.fleet.get(design_id, 0) + 1
        self.fleet[design_id] = count
        produced = design.paperclip_production * count
        state = self.state
        self.submit({
            "resources": add(state.resources, {"paperclips": produced}),
            "total_paperclips": state.total_paperclips + produced,
        })
        self.replication.start(design_id, design.replication_time)
