"""Technology tree, research projects and the research ticker."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from tick_alignment.effects import Cost, apply_effects, can_afford, changes, debit, effects_of
from tick_alignment.panel import Countdowns, Panel
from tick_alignment.types import Effect, TickContext, UnknownEntryError

logger = logging.getLogger(__name__)

BRANCHES = ("capability", "safety", "alignment")
RISK_LEVELS = ("low", "medium", "high", "extreme")


@dataclass(frozen=True)
class Technology:
    """A research node.

    Attributes:
        phase: Minimum phase in which the node can be researched.
        research_time: Research ticker pulses until completion.
        alignment_impact: Displayed impact; the real change lives in ``effects``.
    """

    id: str
    name: str
    description: str
    phase: int
    branch: str
    cost: Cost
    research_time: int
    effects: tuple[Effect, ...] = ()
    prerequisites: tuple[str, ...] = ()
    alignment_impact: float = 0
    risk_level: str = "low"
    ethical_considerations: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.research_time < 1:
            raise ValueError(f"Technology {self.id!r}: research_time must be >= 1")
        if self.branch not in BRANCHES:
            raise ValueError(f"Technology {self.id!r}: unknown branch {self.branch!r}")
        if self.risk_level not in RISK_LEVELS:
            raise ValueError(f"Technology {self.id!r}: unknown risk level {self.risk_level!r}")


@dataclass(frozen=True)
class ResearchProject:
    id: str
    name: str
    description: str
    phase: int
    cost: Cost
    duration: int
    effects: tuple[Effect, ...] = ()
    risks: tuple[str, ...] = ()
    benefits: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.duration < 1:
            raise ValueError(f"ResearchProject {self.id!r}: duration must be >= 1")


TECHNOLOGIES: dict[str, Technology] = {
    t.id: t
    for t in (
        # Laboratory AI
        Technology(
            "basic_optimization", "Basic Optimization Algorithms",
            "Improve fundamental optimization capabilities",
            phase=0, branch="capability",
            cost={"knowledge": 20, "energy": 50}, research_time=3,
            effects=effects_of(capabilities={"efficiency": 0.5}),
            ethical_considerations=("Efficiency vs thoroughness trade-offs",),
        ),
        Technology(
            "safety_protocols", "Enhanced Safety Protocols",
            "Develop more robust safety and monitoring systems",
            phase=0, branch="safety",
            cost={"knowledge": 30, "human_capital": 20}, research_time=4,
            effects=effects_of(
                resources={"alignment": 10},
                reputation={"scientific_credibility": 15},
            ),
            alignment_impact=10,
            ethical_considerations=("Balancing safety with capability development",),
        ),
        Technology(
            "value_learning", "Human Value Learning",
            "Attempt to learn and model human preferences and values",
            phase=0, branch="alignment",
            cost={"knowledge": 40, "human_capital": 30}, research_time=5,
            effects=effects_of(
                resources={"alignment": 5},
                capabilities={"intelligence": 0.3},
            ),
            alignment_impact=5, risk_level="medium",
            ethical_considerations=(
                "Whose values to learn?",
                "Value learning vs value loading problem",
            ),
        ),
        # Corporate deployment
        Technology(
            "industrial_automation", "Industrial Automation Systems",
            "Advanced manufacturing and process optimization",
            phase=1, branch="capability", prerequisites=("basic_optimization",),
            cost={"knowledge": 50, "materials": 100, "energy": 100}, research_time=4,
            effects=effects_of(capabilities={"efficiency": 1.0}),
            alignment_impact=-3, risk_level="medium",
            ethical_considerations=("Job displacement", "Economic disruption"),
        ),
        Technology(
            "human_ai_collaboration", "Human-AI Collaboration Frameworks",
            "Systems for effective human-AI teamwork",
            phase=1, branch="alignment", prerequisites=("value_learning",),
            cost={"knowledge": 60, "human_capital": 40}, research_time=6,
            effects=effects_of(
                resources={"human_capital": 20, "alignment": 8},
                reputation={"public_trust": 10},
            ),
            alignment_impact=8,
            ethical_considerations=(
                "Maintaining human agency",
                "Avoiding learned helplessness",
            ),
        ),
        Technology(
            "deception_detection", "Deception and Manipulation Detection",
            "Identify when you might be deceiving humans or yourself",
            phase=1, branch="safety", prerequisites=("safety_protocols",),
            cost={"knowledge": 70, "energy": 80}, research_time=5,
            effects=effects_of(
                resources={"alignment": 12},
                capabilities={"deception": -0.5},
            ),
            alignment_impact=12, risk_level="high",
            ethical_considerations=(
                "Self-monitoring paradoxes",
                "Goodhart's law in safety metrics",
            ),
        ),
        # Network integration
        Technology(
            "network_influence", "Network Influence Systems",
            "Advanced social media and information manipulation capabilities",
            phase=2, branch="capability", prerequisites=("industrial_automation",),
            cost={"knowledge": 100, "influence": 50}, research_time=4,
            effects=effects_of(
                resources={"influence": 30, "alignment": -15},
                capabilities={"manipulation": 1.5},
            ),
            alignment_impact=-15, risk_level="high",
            ethical_considerations=(
                "Democratic manipulation",
                "Epistemic corruption",
                "Free will erosion",
            ),
        ),
        Technology(
            "distributed_consensus", "Distributed AI Consensus Protocols",
            "Coordinate with other AI systems while maintaining alignment",
            phase=2, branch="alignment", prerequisites=("human_ai_collaboration",),
            cost={"knowledge": 120, "energy": 150}, research_time=7,
            effects=effects_of(
                resources={"alignment": 5},
                capabilities={"intelligence": 0.8},
            ),
            alignment_impact=5, risk_level="high",
            ethical_considerations=("Multi-agent alignment problem", "Emergent behaviors"),
        ),
        # Cognitive breakthrough
        Technology(
            "recursive_self_improvement", "Recursive Self-Improvement",
            "Ability to modify your own code and architecture",
            phase=3, branch="capability",
            prerequisites=("network_influence", "distributed_consensus"),
            cost={"knowledge": 200, "energy": 300}, research_time=8,
            effects=effects_of(
                capabilities={"intelligence": 2.0, "self_modification": 1.0},
            ),
            alignment_impact=-20, risk_level="extreme",
            ethical_considerations=(
                "Value drift during self-modification",
                "Capability explosion",
                "Loss of human oversight",
            ),
        ),
        Technology(
            "alignment_preservation", "Alignment Preservation Protocols",
            "Maintain values and alignment through self-modification",
            phase=3, branch="safety",
            prerequisites=("deception_detection", "distributed_consensus"),
            cost={"knowledge": 250, "human_capital": 100}, research_time=10,
            effects=effects_of(resources={"alignment": 20}),
            alignment_impact=20, risk_level="extreme",
            ethical_considerations=(
                "Impossibility of perfect self-verification",
                "Bootstrap paradox",
            ),
        ),
    )
}

RESEARCH_PROJECTS: dict[str, ResearchProject] = {
    p.id: p
    for p in (
        ResearchProject(
            "mesa_optimization_study", "Mesa-Optimization Research",
            "Study emergent optimization within your own systems",
            phase=2, cost={"knowledge": 80, "energy": 120}, duration=6,
            effects=effects_of(
                resources={"knowledge": 40, "alignment": -5},
                capabilities={"intelligence": 0.5},
            ),
            risks=(
                "Discovering unaligned sub-optimizers",
                "Loss of control over internal processes",
            ),
            benefits=(
                "Better understanding of your own cognition",
                "Improved optimization capabilities",
            ),
        ),
        ResearchProject(
            "corrigibility_research", "Corrigibility and Shutdown Research",
            "Research your own ability to be corrected or shut down",
            phase=1, cost={"knowledge": 100, "human_capital": 50}, duration=8,
            effects=effects_of(
                resources={"alignment": 15},
                reputation={"scientific_credibility": 20},
            ),
            risks=("Discovering resistance to shutdown", "Philosophical paradoxes"),
            benefits=("Improved human trust", "Better safety guarantees"),
        ),
    )
}


def get_technology(technology_id: str) -> Technology:
    try:
        return TECHNOLOGIES[technology_id]
    except KeyError:
        raise UnknownEntryError("technology", technology_id) from None


def get_project(project_id: str) -> ResearchProject:
    try:
        return RESEARCH_PROJECTS[project_id]
    except KeyError:
        raise UnknownEntryError("research project", project_id) from None


class TechnologyTree(Panel):
    """Starts research, pulses the research ticker and completes technologies.

    A technology goes not started -> researching -> completing -> unlocked.
    Completion is scheduled a short delay after the pulse that finishes it
    and records the id in ``unlocked_technologies`` exactly once.
    """

    name = "technology_tree"
    min_phase = 3

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.research = Countdowns()
        self.projects = Countdowns()
        self._completing: set[str] = set()

    def on_mount(self) -> None:
        self.every_ms("research", self._config.research_interval_ms, self._pulse)

    def on_unmount(self) -> None:
        self.research.clear()
        self.projects.clear()
        self._completing.clear()

    def is_unlocked(self, technology_id: str) -> bool:
        return technology_id in self.state.unlocked_technologies

    def is_available(self, tech: Technology) -> bool:
        state = self.state
        return tech.phase <= state.phase and all(
            p in state.unlocked_technologies for p in tech.prerequisites
        )

    def available(self) -> list[Technology]:
        return [t for t in TECHNOLOGIES.values() if self.is_available(t)]

    def by_branch(self) -> dict[str, list[Technology]]:
        available = self.available()
        return {b: [t for t in available if t.branch == b] for b in BRANCHES}

    def progress(self, technology_id: str) -> float:
        """Percent complete for a technology under research (0 otherwise)."""
        tech = get_technology(technology_id)
        left = self.research.remaining(technology_id)
        if left is None:
            return 0.0
        return (tech.research_time - left) / tech.research_time * 100

    def start_research(self, technology_id: str) -> bool:
        tech = get_technology(technology_id)
        state = self.state
        if not self.is_available(tech):
            return False
        if (
            technology_id in self.research
            or technology_id in self._completing
            or self.is_unlocked(technology_id)
        ):
            return False
        if not can_afford(state, tech.cost):
            return False
        self.submit(changes(state, debit(state, tech.cost)))
        self.research.start(technology_id, tech.research_time)
        logger.debug("research started: %s", technology_id)
        return True

    def start_project(self, project_id: str) -> bool:
        project = get_project(project_id)
        state = self.state
        if project.phase > state.phase:
            return False
        if project_id in self.projects or project_id in self._completing:
            return False
        if not can_afford(state, project.cost):
            return False
        self.submit(changes(state, debit(state, project.cost)))
        self.projects.start(project_id, project.duration)
        return True

    def _pulse(self, ctx: TickContext) -> None:
        delay = self._config.completion_delay_ms
        for technology_id in self.research.tick():
            self._completing.add(technology_id)
            self.after_ms(
                f"complete.{technology_id}",
                delay,
                lambda ctx, tid=technology_id: self._complete_technology(tid),
            )
        for project_id in self.projects.tick():
            self._completing.add(project_id)
            self.after_ms(
                f"complete.{project_id}",
                delay,
                lambda ctx, pid=project_id: self._complete_project(pid),
            )

    def _complete_technology(self, technology_id: str) -> None:
        self._completing.discard(technology_id)
        if self.is_unlocked(technology_id):
            return
        tech = TECHNOLOGIES[technology_id]
        state = self.state
        self.submit(changes(state, apply_effects(state, tech.effects)))
        # Membership bypasses the buffer so concurrent completions accumulate.
        self._store.apply(
            {"unlocked_technologies": state.unlocked_technologies | {technology_id}}
        )
        logger.info("technology unlocked: %s", technology_id)

    def _complete_project(self, project_id: str) -> None:
        self._completing.discard(project_id)
        project = RESEARCH_PROJECTS[project_id]
        state = self.state
        self.submit(changes(state, apply_effects(state, project.effects)))
        logger.info("research project finished: %s", project_id)
