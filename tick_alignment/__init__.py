"""tick-alignment: paperclip-alignment progression engine on a fixed-timestep loop."""
from tick_alignment.actions import ACTIONS, ActionDef
from tick_alignment.bus import SignalBus, make_signal_system
from tick_alignment.clock import Clock
from tick_alignment.commands import (
    AcceptAlienOffer,
    AcknowledgeConsequence,
    AllocateEnergy,
    AnswerDialogue,
    ChooseDecision,
    CommandQueue,
    ConvertResources,
    LaunchProbe,
    PerformAction,
    ResolveCosmicEvent,
    ResolveCrisis,
    StartOperation,
    StartProject,
    StartResearch,
    make_command_system,
)
from tick_alignment.config import GameConfig
from tick_alignment.cosmos import CosmicExpansion
from tick_alignment.decisions import DecisionEngine
from tick_alignment.dialogue import PhilosophicalDialogue
from tick_alignment.engine import Engine
from tick_alignment.feedback import FeedbackTracker
from tick_alignment.game import Game
from tick_alignment.operations import ResourceManagement
from tick_alignment.panel import Panel
from tick_alignment.phases import FINAL_PHASE, PHASES, Phase, PhaseGate
from tick_alignment.schedule import Scheduler, make_schedule_system
from tick_alignment.store import STATE_APPLIED, GameStore
from tick_alignment.types import (
    Capabilities,
    CapabilityDelta,
    GameState,
    Reputation,
    ReputationDelta,
    ResourceDelta,
    Resources,
    TickContext,
    TrajectoryPoint,
    UnknownEntryError,
)

__all__ = [
    "ACTIONS",
    "AcceptAlienOffer",
    "AcknowledgeConsequence",
    "ActionDef",
    "AllocateEnergy",
    "AnswerDialogue",
    "Capabilities",
    "CapabilityDelta",
    "ChooseDecision",
    "Clock",
    "CommandQueue",
    "ConvertResources",
    "CosmicExpansion",
    "DecisionEngine",
    "Engine",
    "FINAL_PHASE",
    "FeedbackTracker",
    "Game",
    "GameConfig",
    "GameState",
    "GameStore",
    "LaunchProbe",
    "PHASES",
    "Panel",
    "PerformAction",
    "Phase",
    "PhaseGate",
    "PhilosophicalDialogue",
    "Reputation",
    "ReputationDelta",
    "ResolveCosmicEvent",
    "ResolveCrisis",
    "ResourceDelta",
    "ResourceManagement",
    "Resources",
    "STATE_APPLIED",
    "Scheduler",
    "SignalBus",
    "StartOperation",
    "StartProject",
    "StartResearch",
    "TickContext",
    "TrajectoryPoint",
    "UnknownEntryError",
    "make_command_system",
    "make_schedule_system",
    "make_signal_system",
]
