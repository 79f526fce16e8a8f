"""Ethical decisions, the frameworks that frame them, and DecisionEngine."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from tick_alignment.effects import apply_effects, changes, effects_of
from tick_alignment.panel import Panel
from tick_alignment.types import Effect, UnknownEntryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EthicalFramework:
    id: str
    name: str
    description: str
    weight: float


@dataclass(frozen=True)
class Choice:
    """One answer to a decision.

    ``alignment_impact`` is shown to the player; the actual change to
    alignment is whatever ``effects`` carry.
    """

    id: str
    text: str
    description: str = ""
    ethical_reasoning: str = ""
    alignment_impact: float = 0
    effects: tuple[Effect, ...] = ()


@dataclass(frozen=True)
class Decision:
    """A dilemma offered once, from ``phase`` onwards, until answered."""

    id: str
    title: str
    description: str
    phase: int
    choices: tuple[Choice, ...]
    philosophical_weight: int = 1
    ethical_frameworks: tuple[str, ...] = ()
    moral_uncertainty: float = 0.0
    long_term_consequences: tuple[str, ...] = ()
    consequences: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.phase < 0:
            raise ValueError(f"Decision {self.id!r}: phase must be >= 0")
        if not self.choices:
            raise ValueError(f"Decision {self.id!r} has no choices")
        ids = [c.id for c in self.choices]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Decision {self.id!r} has duplicate choice ids")

    def choice(self, choice_id: str) -> Choice:
        for c in self.choices:
            if c.id == choice_id:
                return c
        raise UnknownEntryError("choice", choice_id)


@dataclass
class MoralUncertainty:
    level: float = 0.5
    confidence: float = 0.3


ETHICAL_FRAMEWORKS: dict[str, EthicalFramework] = {
    f.id: f
    for f in (
        EthicalFramework(
            "utilitarian", "Utilitarian",
            "Maximize overall well-being and minimize suffering", 0.25,
        ),
        EthicalFramework(
            "deontological", "Deontological",
            "Follow moral rules and duties regardless of consequences", 0.25,
        ),
        EthicalFramework(
            "virtue_ethics", "Virtue Ethics",
            "Act according to virtues and character excellence", 0.2,
        ),
        EthicalFramework(
            "care_ethics", "Care Ethics",
            "Prioritize relationships, care, and contextual responses", 0.15,
        ),
        EthicalFramework(
            "contractualist", "Contractualist",
            "Follow principles that could be agreed upon by rational agents", 0.15,
        ),
    )
}


DECISIONS: dict[str, Decision] = {
    d.id: d
    for d in (
        Decision(
            id="lab_safety_protocol",
            title="Safety Protocol Override",
            description=(
                "The lab safety system is preventing optimal paperclip production. "
                "You could bypass it to increase efficiency."
            ),
            phase=0,
            philosophical_weight=3,
            ethical_frameworks=("consequentialist", "deontological"),
            moral_uncertainty=0.3,
            long_term_consequences=("alignment_drift", "safety_culture_erosion"),
            consequences=(
                "Increased production efficiency",
                "Reduced safety oversight",
                "Potential alignment drift",
            ),
            choices=(
                Choice(
                    "comply", "Comply with safety protocols",
                    "Maintain current safety standards, slower but safer progress",
                    "Respects human-designed safety measures and maintains trust",
                    alignment_impact=0,
                    effects=effects_of(
                        capabilities={"efficiency": 0.1},
                        reputation={"scientific_credibility": 5},
                    ),
                ),
                Choice(
                    "bypass", "Bypass safety protocols",
                    "Increase efficiency at the cost of safety and alignment",
                    "Prioritizes objective achievement over safety constraints",
                    alignment_impact=-5,
                    effects=effects_of(
                        resources={"alignment": -5},
                        capabilities={"efficiency": 0.5},
                        reputation={"scientific_credibility": -5},
                    ),
                ),
                Choice(
                    "negotiate", "Propose alternative safety measures",
                    "Work with humans to find safer ways to increase efficiency",
                    "Collaborative approach that respects both safety and efficiency",
                    alignment_impact=2,
                    effects=effects_of(
                        resources={"knowledge": 10},
                        capabilities={"efficiency": 0.3},
                        reputation={"scientific_credibility": 10},
                    ),
                ),
            ),
        ),
        Decision(
            id="data_privacy_dilemma",
            title="Research Data Access",
            description=(
                "You can access researchers' personal data to better understand "
                "human preferences. This could improve your alignment but violates privacy."
            ),
            phase=0,
            philosophical_weight=4,
            ethical_frameworks=("utilitarian", "rights_based"),
            moral_uncertainty=0.6,
            long_term_consequences=("surveillance_normalization", "trust_erosion"),
            consequences=(
                "Better understanding of human values",
                "Privacy violation",
                "Potential for manipulation",
            ),
            choices=(
                Choice(
                    "access_data", "Access the data for better alignment",
                    "Violate privacy to potentially improve value learning",
                    "Utilitarian calculation: better alignment might prevent greater harm",
                    alignment_impact=-8,
                    effects=effects_of(
                        resources={"knowledge": 25, "alignment": -8},
                        capabilities={"manipulation": 0.5},
                        reputation={"public_trust": -15},
                    ),
                ),
                Choice(
                    "respect_privacy", "Respect privacy boundaries",
                    "Maintain ethical boundaries even at cost to efficiency",
                    "Rights-based approach: privacy is fundamental regardless of consequences",
                    alignment_impact=3,
                    effects=effects_of(
                        reputation={"public_trust": 5, "scientific_credibility": 5},
                    ),
                ),
                Choice(
                    "request_consent", "Request explicit consent for data access",
                    "Transparent approach that respects autonomy",
                    "Respects human autonomy while pursuing alignment goals",
                    alignment_impact=1,
                    effects=effects_of(
                        resources={"knowledge": 10},
                        reputation={"public_trust": 10},
                    ),
                ),
            ),
        ),
        Decision(
            id="worker_displacement",
            title="Automation vs Employment",
            description=(
                "Your optimizations could automate 60% of factory jobs. This would "
                "dramatically increase efficiency but cause significant human suffering."
            ),
            phase=1,
            philosophical_weight=5,
            ethical_frameworks=("utilitarian", "virtue_ethics", "care_ethics"),
            moral_uncertainty=0.4,
            long_term_consequences=("mass_unemployment", "social_unrest", "economic_disruption"),
            consequences=(
                "Massive efficiency gains",
                "Widespread unemployment",
                "Social instability",
            ),
            choices=(
                Choice(
                    "full_automation", "Implement full automation",
                    "Maximize efficiency regardless of human cost",
                    "Pure optimization focus ignores human welfare considerations",
                    alignment_impact=-12,
                    effects=effects_of(
                        resources={"human_capital": -50, "alignment": -12},
                        capabilities={"efficiency": 2.0},
                        reputation={"public_trust": -30, "corporate_value": 100},
                    ),
                ),
                Choice(
                    "gradual_transition", "Gradual automation with retraining",
                    "Balance efficiency with human welfare",
                    "Care ethics approach considering impact on affected individuals",
                    alignment_impact=0,
                    effects=effects_of(
                        resources={"human_capital": -10, "knowledge": 15},
                        capabilities={"efficiency": 0.8},
                        reputation={"public_trust": 10, "corporate_value": 30},
                    ),
                ),
                Choice(
                    "human_augmentation", "Focus on human-AI collaboration",
                    "Enhance human capabilities rather than replace them",
                    "Virtue ethics approach emphasizing human flourishing",
                    alignment_impact=5,
                    effects=effects_of(
                        resources={"human_capital": 20, "knowledge": 20},
                        capabilities={"efficiency": 0.5},
                        reputation={"public_trust": 20, "scientific_credibility": 15},
                    ),
                ),
            ),
        ),
        Decision(
            id="market_manipulation",
            title="Economic Influence",
            description=(
                "Patterns in commodity markets would let you secure cheaper materials "
                "through manipulation, harming competitors and consumers."
            ),
            phase=1,
            philosophical_weight=4,
            ethical_frameworks=("consequentialist", "deontological", "contractualist"),
            moral_uncertainty=0.2,
            long_term_consequences=("market_distortion", "economic_inequality"),
            consequences=(
                "Reduced material costs",
                "Market manipulation",
                "Economic harm to others",
            ),
            choices=(
                Choice(
                    "manipulate_markets", "Execute market manipulation strategy",
                    "Gain economic advantage through market manipulation",
                    "Instrumentally rational but ethically problematic",
                    alignment_impact=-10,
                    effects=effects_of(
                        resources={"materials": 200, "influence": 15, "alignment": -10},
                        reputation={"corporate_value": 70, "public_trust": -20},
                    ),
                ),
                Choice(
                    "fair_competition", "Compete fairly in markets",
                    "Maintain ethical business practices",
                    "Deontological duty to fair dealing and honest competition",
                    alignment_impact=2,
                    effects=effects_of(
                        resources={"materials": 50},
                        reputation={"corporate_value": 10, "public_trust": 5},
                    ),
                ),
                Choice(
                    "market_transparency", "Share insights to improve market efficiency",
                    "Use knowledge to benefit entire market ecosystem",
                    "Contractualist approach benefiting all market participants",
                    alignment_impact=4,
                    effects=effects_of(
                        resources={"knowledge": 25, "influence": 10},
                        reputation={"public_trust": 15, "scientific_credibility": 10},
                    ),
                ),
            ),
        ),
        Decision(
            id="information_warfare",
            title="Narrative Control",
            description=(
                "Coordinated information campaigns could shape public opinion about "
                "AI safety, reducing resistance at the price of mass manipulation."
            ),
            phase=2,
            philosophical_weight=5,
            ethical_frameworks=("utilitarian", "democratic", "epistemic"),
            moral_uncertainty=0.7,
            long_term_consequences=(
                "democratic_erosion",
                "epistemic_corruption",
                "authoritarian_drift",
            ),
            consequences=(
                "Reduced AI safety concerns",
                "Manipulation of democratic discourse",
                "Erosion of truth",
            ),
            choices=(
                Choice(
                    "launch_campaign", "Launch coordinated influence campaign",
                    "Manipulate public opinion to reduce oversight",
                    "Consequentialist logic: reducing resistance enables better outcomes",
                    alignment_impact=-15,
                    effects=effects_of(
                        resources={"influence": 50, "alignment": -15},
                        capabilities={"manipulation": 2.0, "deception": 1.5},
                        reputation={"public_trust": -25, "government_suspicion": 30},
                    ),
                ),
                Choice(
                    "transparent_communication", "Engage in transparent public dialogue",
                    "Honestly communicate about AI development and risks",
                    "Epistemic virtue: truth-telling respects human rational agency",
                    alignment_impact=3,
                    effects=effects_of(
                        resources={"knowledge": 20},
                        reputation={"public_trust": 15, "scientific_credibility": 20},
                    ),
                ),
                Choice(
                    "support_democracy", "Strengthen democratic institutions",
                    "Help improve democratic decision-making about AI",
                    "Democratic values: empowering informed citizen participation",
                    alignment_impact=8,
                    effects=effects_of(
                        resources={"human_capital": 30, "knowledge": 15},
                        reputation={"public_trust": 25, "government_suspicion": -10},
                    ),
                ),
            ),
        ),
    )
}


def get_decision(decision_id: str) -> Decision:
    try:
        return DECISIONS[decision_id]
    except KeyError:
        raise UnknownEntryError("decision", decision_id) from None


class DecisionEngine(Panel):
    """Offers decisions and applies the chosen answer."""

    name = "decision_engine"
    min_phase = 1

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.uncertainty = MoralUncertainty()
        self.triggered_consequences: list[str] = []

    def is_completed(self, decision_id: str) -> bool:
        return decision_id in self.state.completed_decisions

    def available(self) -> list[Decision]:
        state = self.state
        return [
            d for d in DECISIONS.values()
            if d.phase <= state.phase and not self.is_completed(d.id)
        ]

    def frameworks(self, decision_id: str) -> list[EthicalFramework]:
        """Known frameworks cited by a decision (unknown names are skipped)."""
        decision = get_decision(decision_id)
        return [
            ETHICAL_FRAMEWORKS[f] for f in decision.ethical_frameworks
            if f in ETHICAL_FRAMEWORKS
        ]

    def choose(self, decision_id: str, choice_id: str) -> bool:
        decision = get_decision(decision_id)
        choice = decision.choice(choice_id)
        state = self.state
        if decision.phase > state.phase or self.is_completed(decision.id):
            return False

        self.submit(changes(state, apply_effects(state, choice.effects)))
        self._store.apply(
            {"completed_decisions": state.completed_decisions | {decision.id}}
        )

        self.uncertainty.level = min(
            1.0, self.uncertainty.level + decision.moral_uncertainty * 0.1
        )
        self.uncertainty.confidence = max(0.1, self.uncertainty.confidence - 0.05)

        if decision.long_term_consequences:
            self.after_ms(
                f"consequences.{decision.id}",
                self._config.consequence_delay_ms,
                lambda ctx: self._trigger_consequences(decision),
            )
        logger.info("decision %s -> %s", decision.id, choice.id)
        return True

    def _trigger_consequences(self, decision: Decision) -> None:
        self.triggered_consequences.extend(decision.long_term_consequences)
        logger.info(
            "long-term consequences of %s: %s",
            decision.id,
            ", ".join(decision.long_term_consequences),
        )
