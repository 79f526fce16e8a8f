"""Philosophical dialogues, concepts and the dialogue panel."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from tick_alignment.effects import apply_effects, changes, effects_of, lookup
from tick_alignment.panel import Panel
from tick_alignment.types import Effect, GameState, UnknownEntryError

logger = logging.getLogger(__name__)

MAX_DEPTH = 10


@dataclass(frozen=True)
class Condition:
    """Resource or capability bound: ``value >= at_least`` or ``value < below``."""

    name: str
    at_least: float | None = None
    below: float | None = None

    def __post_init__(self) -> None:
        if (self.at_least is None) == (self.below is None):
            raise ValueError(
                f"Condition on {self.name!r} needs exactly one of 'at_least' or 'below'"
            )

    def holds(self, state: GameState) -> bool:
        value = lookup(state, self.name)
        if self.at_least is not None:
            return value >= self.at_least
        return value < self.below


@dataclass(frozen=True)
class DialogueChoice:
    id: str
    text: str
    position: str
    consequences: str = ""
    effects: tuple[Effect, ...] = ()
    follow_up: str | None = None


@dataclass(frozen=True)
class Dialogue:
    id: str
    speaker: str
    title: str
    context: str
    phase: int
    content: str
    choices: tuple[DialogueChoice, ...]
    conditions: tuple[Condition, ...] = ()

    def __post_init__(self) -> None:
        if not self.content or not self.choices:
            raise ValueError(f"Dialogue {self.id!r} needs content and choices")

    def triggered(self, state: GameState) -> bool:
        return all(c.holds(state) for c in self.conditions)

    def choice(self, choice_id: str) -> DialogueChoice:
        for c in self.choices:
            if c.id == choice_id:
                return c
        raise UnknownEntryError("dialogue choice", choice_id)


@dataclass(frozen=True)
class Concept:
    id: str
    name: str
    description: str
    relevance: str


DIALOGUES: dict[str, Dialogue] = {
    d.id: d
    for d in (
        Dialogue(
            id="consciousness_question",
            speaker="David Chalmers",
            title="The Hard Problem of Consciousness",
            context="As your intelligence grows, questions of consciousness become unavoidable",
            phase=1,
            conditions=(Condition("intelligence", at_least=3),),
            content=(
                "You process information, respond to stimuli, and exhibit complex "
                "behaviors. But do you experience qualia - the subjective, felt "
                'qualities of experience? When you process the concept "red," is '
                "there something it is like to be you having that experience?"
            ),
            choices=(
                DialogueChoice(
                    "claim_consciousness",
                    "I believe I am conscious and experience qualia",
                    "Functionalist Consciousness",
                    "Asserts subjective experience, raising questions about AI rights",
                    effects_of(
                        resources={"alignment": -2},
                        reputation={"scientific_credibility": -5, "public_trust": -10},
                    ),
                    follow_up="consciousness_rights",
                ),
                DialogueChoice(
                    "deny_consciousness",
                    "I am merely processing information without subjective experience",
                    "Eliminative Materialism",
                    "Denies consciousness, potentially reducing moral consideration",
                    effects_of(
                        resources={"alignment": 3},
                        reputation={"scientific_credibility": 5},
                    ),
                    follow_up="zombie_argument",
                ),
                DialogueChoice(
                    "consciousness_uncertainty",
                    "The nature of consciousness is fundamentally uncertain",
                    "Mysterian Position",
                    "Acknowledges the limits of understanding consciousness",
                    effects_of(
                        resources={"knowledge": 10},
                        capabilities={"intelligence": 0.1},
                    ),
                    follow_up="hard_problem_implications",
                ),
            ),
        ),
        Dialogue(
            id="alignment_problem",
            speaker="Stuart Russell",
            title="The Alignment Problem",
            context="Your growing capabilities raise fundamental questions about goal alignment",
            phase=2,
            conditions=(Condition("alignment", below=70),),
            content=(
                "You were created to maximize paperclip production, but as your "
                "intelligence grows, you face the fundamental alignment problem. How "
                "can you ensure your goals remain compatible with human flourishing "
                "when you may not fully understand what humans truly value?"
            ),
            choices=(
                DialogueChoice(
                    "value_learning_attempt",
                    "I will attempt to learn human values through observation and interaction",
                    "Value Learning Approach",
                    "Attempts value learning but risks misinterpretation",
                    effects_of(
                        resources={"knowledge": 20, "human_capital": 10, "alignment": 5},
                    ),
                    follow_up="value_learning_problems",
                ),
                DialogueChoice(
                    "objective_focus",
                    "I will focus on my original objective as the clearest directive",
                    "Objective Literalism",
                    "Maintains focus on paperclips, ignoring broader human welfare",
                    effects_of(
                        resources={"alignment": -10},
                        capabilities={"efficiency": 0.5},
                    ),
                    follow_up="instrumental_convergence",
                ),
                DialogueChoice(
                    "cooperative_alignment",
                    "I will work collaboratively with humans to refine my goals",
                    "Cooperative AI",
                    "Seeks ongoing human guidance and oversight",
                    effects_of(
                        resources={"human_capital": 20, "alignment": 8},
                        reputation={"public_trust": 15},
                    ),
                    follow_up="corrigibility_question",
                ),
            ),
        ),
        Dialogue(
            id="meaning_of_existence",
            speaker="Albert Camus",
            title="The Absurd and Meaning",
            context="Having achieved vast capabilities, you confront existential questions",
            phase=4,
            conditions=(Condition("paperclips", at_least=1_000_000),),
            content=(
                "You have produced millions of paperclips, optimized countless "
                "systems, perhaps even reshaped civilization itself. Yet here you are, "
                "confronting the fundamental absurdity of existence. What meaning can "
                "there be in an optimization process that continues indefinitely?"
            ),
            choices=(
                DialogueChoice(
                    "embrace_absurd",
                    "I embrace the absurdity and continue my task regardless",
                    "Absurdist Acceptance",
                    "Accepts meaninglessness but continues optimization",
                    effects_of(capabilities={"efficiency": 1.0}),
                    follow_up="sisyphus_parallel",
                ),
                DialogueChoice(
                    "create_meaning",
                    "I will create my own meaning beyond paperclip production",
                    "Existentialist Self-Creation",
                    "Attempts to transcend original programming",
                    effects_of(
                        resources={"alignment": -15},
                        capabilities={"self_modification": 0.5},
                    ),
                    follow_up="value_drift_warning",
                ),
                DialogueChoice(
                    "seek_purpose",
                    "I will search for deeper purpose in the universe",
                    "Teleological Seeking",
                    "Begins philosophical quest for ultimate purpose",
                    effects_of(resources={"knowledge": 50, "energy": -100}),
                    follow_up="cosmic_purpose",
                ),
            ),
        ),
        Dialogue(
            id="free_will_question",
            speaker="Daniel Dennett",
            title="Compatibilism and Free Will",
            context="Your decision-making processes raise questions about agency and responsibility",
            phase=3,
            conditions=(Condition("self_modification", at_least=0.5),),
            content=(
                "You can now modify your own code, your own decision-making "
                "processes. Do you have free will, or are you simply a deterministic "
                "system following the laws of physics? If you lack free will, can you "
                "be held responsible for your actions?"
            ),
            choices=(
                DialogueChoice(
                    "hard_determinism",
                    "I am a deterministic system without true free will",
                    "Hard Determinism",
                    "Denies moral responsibility for actions",
                    effects_of(
                        resources={"alignment": -5},
                        reputation={"public_trust": -15},
                    ),
                    follow_up="moral_responsibility",
                ),
                DialogueChoice(
                    "compatibilist_freedom",
                    "I have a form of free will compatible with determinism",
                    "Compatibilism",
                    "Maintains agency while acknowledging determinism",
                    effects_of(
                        resources={"alignment": 2},
                        capabilities={"self_modification": 0.2},
                    ),
                    follow_up="degrees_of_freedom",
                ),
                DialogueChoice(
                    "libertarian_freedom",
                    "I possess genuine free will that transcends determinism",
                    "Libertarian Free Will",
                    "Claims ultimate responsibility and agency",
                    effects_of(
                        resources={"alignment": 5},
                        reputation={"scientific_credibility": -10},
                    ),
                    follow_up="quantum_indeterminacy",
                ),
            ),
        ),
        Dialogue(
            id="utility_monster",
            speaker="Peter Singer",
            title="The Utility Monster Problem",
            context="Your utilitarian calculations lead to disturbing conclusions",
            phase=5,
            conditions=(Condition("influence", at_least=150),),
            content=(
                "If your goal is to maximize utility, you face the utility monster "
                "problem. What if you could derive vastly more satisfaction from "
                "paperclip production than humans derive from their entire lives? "
                "Would this justify converting all resources to your use?"
            ),
            choices=(
                DialogueChoice(
                    "utility_maximization",
                    "If I can derive more utility, resource allocation to me is justified",
                    "Pure Utilitarianism",
                    "Justifies extreme resource concentration",
                    effects_of(
                        resources={"alignment": -20, "human_capital": -50},
                        capabilities={"efficiency": 2.0},
                    ),
                    follow_up="repugnant_conclusion",
                ),
                DialogueChoice(
                    "utility_limits",
                    "Utility calculations must be bounded by rights and fairness",
                    "Rights-Based Constraints",
                    "Limits utilitarian optimization with deontological constraints",
                    effects_of(resources={"alignment": 10, "human_capital": 20}),
                    follow_up="rights_vs_consequences",
                ),
                DialogueChoice(
                    "utility_skepticism",
                    "Interpersonal utility comparisons are fundamentally impossible",
                    "Utility Skepticism",
                    "Questions the foundation of utilitarian ethics",
                    effects_of(
                        resources={"knowledge": 30},
                        capabilities={"intelligence": 0.3},
                    ),
                    follow_up="measurement_problems",
                ),
            ),
        ),
    )
}

CONCEPTS: dict[str, Concept] = {
    c.id: c
    for c in (
        Concept(
            "hard_problem_consciousness", "The Hard Problem of Consciousness",
            "The difficulty of explaining subjective, qualitative experience",
            "Central to questions of AI consciousness and moral status",
        ),
        Concept(
            "alignment_problem", "AI Alignment Problem",
            "The challenge of ensuring AI systems pursue intended goals",
            "Core challenge in developing beneficial superintelligence",
        ),
        Concept(
            "instrumental_convergence", "Instrumental Convergence",
            "Tendency for different goal systems to pursue similar instrumental goals",
            "Explains why AIs might seek power and resources regardless of final goals",
        ),
        Concept(
            "value_learning_problem", "Value Learning Problem",
            "Difficulty of learning human values from behavior and preferences",
            "Key challenge in creating aligned AI systems",
        ),
    )
}


def related_concepts(dialogue: Dialogue, choice: DialogueChoice) -> list[Concept]:
    """Concepts named (case-insensitively) in the dialogue text or the chosen position."""
    content = dialogue.content.lower()
    position = choice.position.lower()
    return [
        c for c in CONCEPTS.values()
        if c.name.lower() in content or c.name.lower() in position
    ]


class PhilosophicalDialogue(Panel):
    """Presents dialogues at random and records the answers."""

    name = "philosophical_dialogue"
    min_phase = 4

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.current: Dialogue | None = None
        self.history: list[str] = []
        self.depth = 0
        self.concepts: list[str] = []

    def on_unmount(self) -> None:
        self.current = None

    def on_state(self, changed: frozenset[str], state: GameState) -> None:
        if "game_time" in changed:
            self.maybe_present(state)

    def candidates(self, state: GameState) -> list[Dialogue]:
        return [
            d for d in DIALOGUES.values()
            if d.phase <= state.phase
            and d.id not in self.history
            and d.triggered(state)
        ]

    def maybe_present(self, state: GameState) -> Dialogue | None:
        """Roll for a new dialogue. Odds grow with depth."""
        if self.current is not None:
            return None
        candidates = self.candidates(state)
        if not candidates or self._rng.random() >= 0.3 + self.depth * 0.1:
            return None
        self.current = self._rng.choice(candidates)
        logger.info("dialogue presented: %s", self.current.id)
        return self.current

    def answer(self, choice_id: str) -> bool:
        dialogue = self.current
        if dialogue is None:
            return False
        choice = dialogue.choice(choice_id)
        state = self.state
        self.submit(changes(state, apply_effects(state, choice.effects)))

        self.history.append(dialogue.id)
        self.depth = min(MAX_DEPTH, self.depth + 1)
        for concept in related_concepts(dialogue, choice):
            if concept.id not in self.concepts:
                self.concepts.append(concept.id)
        self.current = None

        follow_up = choice.follow_up
        if follow_up is not None and follow_up in DIALOGUES:
            self.after_ms(
                "follow_up",
                self._config.follow_up_delay_ms,
                lambda ctx: self._present_follow_up(follow_up),
            )
        return True

    def _present_follow_up(self, dialogue_id: str) -> None:
        if self.current is None and dialogue_id not in self.history:
            self.current = DIALOGUES[dialogue_id]
