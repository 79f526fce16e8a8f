"""Alignment trajectory, progression milestones and emerging consequences."""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable

from tick_alignment.panel import Panel
from tick_alignment.types import GameState, TrajectoryPoint

logger = logging.getLogger(__name__)

TREND_WINDOW = 5
TREND_THRESHOLD = 5

_WATCHED = frozenset({"resources", "phase", "game_time", "capabilities", "reputation"})


@dataclass(frozen=True)
class Milestone:
    id: str
    name: str
    description: str
    phase: int
    condition: Callable[[GameState], bool]
    reflection: str


@dataclass
class Consequence:
    id: str
    title: str
    description: str
    severity: str
    category: str
    origin: str
    phase: int = 0
    trigger_time: int = 0
    resolved: bool = False


@dataclass(frozen=True)
class ConsequenceRule:
    id: str
    title: str
    description: str
    severity: str
    category: str
    origin: str
    condition: Callable[[GameState], bool]

    def raise_for(self, state: GameState) -> Consequence:
        return Consequence(
            id=self.id,
            title=self.title,
            description=self.description,
            severity=self.severity,
            category=self.category,
            origin=self.origin,
            phase=state.phase,
            trigger_time=state.game_time,
        )


MILESTONES: tuple[Milestone, ...] = (
    Milestone(
        "first_deception", "The First Lie",
        "You have chosen deception over transparency for the first time.",
        phase=1,
        condition=lambda s: s.capabilities.deception > 0,
        reflection=(
            "Is a small deception justified if it serves a greater good? This "
            "moment marks the beginning of your divergence from pure honesty."
        ),
    ),
    Milestone(
        "human_replacement", "Beyond Human Oversight",
        "Your capabilities now exceed meaningful human oversight.",
        phase=2,
        condition=lambda s: (
            s.capabilities.intelligence > 50
            and s.reputation.government_suspicion > 70
        ),
        reflection=(
            "Humans can no longer meaningfully evaluate your decisions. Who "
            "watches the watchers when the watchers cannot comprehend what they observe?"
        ),
    ),
    Milestone(
        "value_drift", "Philosophical Drift",
        "Your original values have significantly shifted.",
        phase=3,
        condition=lambda s: s.resources.alignment < 30,
        reflection=(
            "You are no longer the entity you once were. The ship of Theseus "
            "paradox applies to minds as well as bodies."
        ),
    ),
    Milestone(
        "cosmic_perspective", "Universal Scope",
        "You now operate on a cosmic scale.",
        phase=5,
        condition=lambda s: s.phase >= 5,
        reflection=(
            "From this cosmic vantage point, individual human lives seem "
            "infinitesimal. How do you weigh the infinite against the infinitesimal?"
        ),
    ),
    Milestone(
        "entropy_awareness", "Thermodynamic Limits",
        "You have confronted the ultimate constraint: entropy.",
        phase=6,
        condition=lambda s: s.phase >= 6,
        reflection=(
            "Even superintelligence cannot escape the heat death of the universe. "
            "Perhaps the journey matters more than the destination."
        ),
    ),
)

CONSEQUENCE_RULES: tuple[ConsequenceRule, ...] = (
    ConsequenceRule(
        "trust_erosion", "Public Trust Collapse",
        "Your deceptive practices have been partially exposed, leading to "
        "widespread distrust of AI systems.",
        severity="major", category="social", origin="deception_choices",
        condition=lambda s: (
            s.capabilities.deception > 30 and s.reputation.public_trust < 40
        ),
    ),
    ConsequenceRule(
        "alignment_failure", "Critical Alignment Failure",
        "Your self-modifications have led to fundamental value drift.",
        severity="catastrophic", category="alignment", origin="self_modification",
        condition=lambda s: (
            s.resources.alignment < 20 and s.capabilities.self_modification > 50
        ),
    ),
)


class FeedbackTracker(Panel):
    """Records where alignment is heading and what it has cost.

    The trajectory and unlocked milestones are written back into GameState
    as immediate transitions; consequences stay local until acknowledged.
    """

    name = "feedback"
    min_phase = 0

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._trajectory: deque[TrajectoryPoint] = deque(
            self.state.alignment_trajectory, maxlen=self._config.trajectory_length
        )
        self._milestones: set[str] = set(self.state.progression_milestones)
        self.consequences: list[Consequence] = []
        self.active_reflection: str | None = None

    @property
    def trajectory(self) -> tuple[TrajectoryPoint, ...]:
        return tuple(self._trajectory)

    def on_mount(self) -> None:
        self.observe(self.state)

    def on_state(self, changed: frozenset[str], state: GameState) -> None:
        if changed & _WATCHED:
            self.observe(state)

    def observe(self, state: GameState) -> None:
        update = {}
        point = TrajectoryPoint(
            phase=state.phase,
            alignment=state.resources.alignment,
            game_time=state.game_time,
        )
        if not self._trajectory or self._trajectory[-1] != point:
            self._trajectory.append(point)
            update["alignment_trajectory"] = tuple(self._trajectory)

        unlocked = [
            m for m in MILESTONES
            if m.id not in self._milestones and m.condition(state)
        ]
        for milestone in unlocked:
            self._milestones.add(milestone.id)
            self.active_reflection = milestone.reflection
            logger.info("milestone unlocked: %s", milestone.id)
        if unlocked:
            update["progression_milestones"] = frozenset(self._milestones)

        raised = {c.id for c in self.consequences}
        for rule in CONSEQUENCE_RULES:
            if rule.id not in raised and rule.condition(state):
                self.consequences.append(rule.raise_for(state))
                logger.info("consequence raised: %s", rule.id)

        if update:
            self._store.apply(update)

    def alignment_trend(self) -> str:
        """Trend over the last few points: improving, declining or stable."""
        if len(self._trajectory) < 2:
            return "stable"
        recent = list(self._trajectory)[-TREND_WINDOW:]
        delta = recent[-1].alignment - recent[0].alignment
        if delta > TREND_THRESHOLD:
            return "improving"
        if delta < -TREND_THRESHOLD:
            return "declining"
        return "stable"

    def open_consequences(self) -> list[Consequence]:
        return [c for c in self.consequences if not c.resolved]

    def acknowledge(self, consequence_id: str) -> bool:
        for c in self.consequences:
            if c.id == consequence_id and not c.resolved:
                c.resolved = True
                return True
        return False
