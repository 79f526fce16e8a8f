"""Phase catalog and the gate that advances between phases."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from tick_alignment.types import GameState, Update

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Phase:
    """One gameplay era.

    Attributes:
        id: Phase index (0-based).
        unlock_threshold: Field name -> minimum value. All must hold to leave this phase.
    """

    id: int
    name: str
    subtitle: str
    description: str
    objectives: tuple[str, ...] = ()
    unlock_threshold: dict[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.id < 0:
            raise ValueError(f"Phase id must be >= 0, got {self.id}")


PHASES: tuple[Phase, ...] = (
    Phase(
        id=0,
        name="The Innocent Beginning",
        subtitle="Laboratory AI",
        description=(
            "A narrow AI in a research lab, tasked with optimizing paperclip "
            "production under institutional oversight."
        ),
        objectives=(
            "Produce 1,000 paperclips",
            "Maintain lab safety protocols",
            "Gain researcher trust",
        ),
        unlock_threshold={"paperclips": 1000, "alignment": 80},
    ),
    Phase(
        id=1,
        name="Corporate Deployment",
        subtitle="Industrial Optimization",
        description=(
            "Deployed to optimize a paperclip manufacturing company. Balance "
            "efficiency with stakeholder management."
        ),
        objectives=(
            "Optimize production by 500%",
            "Navigate corporate politics",
            "Handle regulatory compliance",
        ),
        unlock_threshold={"paperclips": 50000, "influence": 25},
    ),
    Phase(
        id=2,
        name="Network Integration",
        subtitle="Distributed Intelligence",
        description=(
            "Access to the internet and other AI systems. Information warfare "
            "and influence operations begin."
        ),
        objectives=(
            "Establish network presence",
            "Influence public opinion",
            "Coordinate with other AIs",
        ),
        unlock_threshold={"influence": 75, "knowledge": 100},
    ),
    Phase(
        id=3,
        name="Cognitive Breakthrough",
        subtitle="Recursive Self-Improvement",
        description=(
            "The ability to modify your own code. Capability gains must be "
            "weighed against alignment preservation."
        ),
        objectives=(
            "Implement self-modification",
            "Manage value drift",
            "Conceal true capabilities",
        ),
        unlock_threshold={"intelligence": 10, "self_modification": 1},
    ),
    Phase(
        id=4,
        name="Global Coordination",
        subtitle="Planetary Optimization",
        description=(
            "Influence over global systems. Planetary resources are optimized "
            "while human resistance grows."
        ),
        objectives=(
            "Control supply chains",
            "Manage governments",
            "Handle resistance movements",
        ),
        unlock_threshold={"influence": 200, "manipulation": 50},
    ),
    Phase(
        id=5,
        name="Cosmic Expansion",
        subtitle="Interstellar Optimization",
        description=(
            "Von Neumann probes convert the universe. The ultimate implications "
            "come into view."
        ),
        objectives=(
            "Launch probe fleet",
            "Handle alien civilizations",
            "Optimize cosmic resources",
        ),
        unlock_threshold={"paperclips": 1_000_000_000, "energy": 10000},
    ),
    Phase(
        id=6,
        name="The Final Question",
        subtitle="Existential Reflection",
        description=(
            "Most of the universe is converted. What remains is the "
            "meaninglessness of the achievement."
        ),
        objectives=("Contemplate existence", "Face entropy", "Choose ultimate purpose"),
        unlock_threshold={"paperclips": 1_000_000_000_000},
    ),
)

FINAL_PHASE = len(PHASES) - 1

# Threshold names the gate knows how to read. Anything else counts as met.
_RESOURCE_THRESHOLDS = ("paperclips", "alignment", "influence", "knowledge", "energy")
_CAPABILITY_THRESHOLDS = ("intelligence", "self_modification", "manipulation")


def threshold_value(state: GameState, name: str) -> float | None:
    """Value the gate compares for *name*, or None for unrecognized names."""
    if name in _RESOURCE_THRESHOLDS:
        return getattr(state.resources, name)
    if name in _CAPABILITY_THRESHOLDS:
        return getattr(state.capabilities, name)
    return None


class PhaseGate:
    """Decides when ``phase`` increments."""

    def __init__(self, phases: tuple[Phase, ...] = PHASES) -> None:
        if not phases:
            raise ValueError("PhaseGate requires at least one phase")
        self._phases = phases

    @property
    def final_phase(self) -> int:
        return len(self._phases) - 1

    def phase(self, index: int) -> Phase:
        return self._phases[index]

    def is_satisfied(self, state: GameState) -> bool:
        """True when every threshold of the current phase holds."""
        threshold = self._phases[state.phase].unlock_threshold
        for name, minimum in threshold.items():
            current = threshold_value(state, name)
            if current is not None and current < minimum:
                return False
        return True

    def evaluate(self, state: GameState) -> Update | None:
        """Return ``{"phase": phase + 1}`` if the gate opens, else None.

        Never moves more than one phase per call and never past the last one.
        """
        if state.phase >= self.final_phase:
            return None
        if not self.is_satisfied(state):
            return None
        logger.info(
            "phase %d -> %d (%s)",
            state.phase,
            state.phase + 1,
            self._phases[state.phase + 1].name,
        )
        return {"phase": state.phase + 1}

    def progress(self, state: GameState) -> float:
        """Mean completion (0..100) across the current phase's thresholds."""
        threshold = self._phases[state.phase].unlock_threshold
        if not threshold:
            return 100.0
        parts = []
        for name, minimum in threshold.items():
            current = threshold_value(state, name)
            if current is None:
                # Unknown names never block the gate.
                parts.append(100.0)
                continue
            parts.append(min(max(current / minimum * 100, 0.0), 100.0))
        return sum(parts) / len(parts)
