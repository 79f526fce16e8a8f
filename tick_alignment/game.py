"""Game - wires the engine, store, phase gate, regeneration and panels."""
from __future__ import annotations

import logging
from typing import Any

from tick_alignment import commands as cmds
from tick_alignment.actions import ACTIONS
from tick_alignment.bus import SignalBus, make_signal_system
from tick_alignment.commands import CommandQueue, make_command_system
from tick_alignment.config import GameConfig
from tick_alignment.cosmos import CosmicExpansion
from tick_alignment.decisions import DecisionEngine
from tick_alignment.dialogue import PhilosophicalDialogue
from tick_alignment.engine import Engine
from tick_alignment.feedback import FeedbackTracker
from tick_alignment.operations import ResourceManagement
from tick_alignment.panel import Panel
from tick_alignment.phases import PhaseGate
from tick_alignment.regen import regenerate
from tick_alignment.research import TechnologyTree
from tick_alignment.schedule import Scheduler, make_schedule_system
from tick_alignment.store import STATE_APPLIED, GameStore
from tick_alignment.types import GameState, TickContext, UnknownEntryError

logger = logging.getLogger(__name__)

REGEN_TASK = "game.regen"

_GATE_KEYS = frozenset({"resources", "capabilities"})


class Game:
    """One play session.

    Nothing runs until :meth:`start`; :meth:`teardown` releases every timer
    and subscription. Use as a context manager to pair the two::

        with Game(GameConfig(seed=1)) as game:
            game.dispatch(PerformAction("produce_paperclips"))
            game.advance_ms(100)

    Per tick the engine drains queued commands, advances scheduled tasks and
    then flushes signals.
    """

    def __init__(
        self, config: GameConfig | None = None, state: GameState | None = None
    ) -> None:
        self.config = config if config is not None else GameConfig()
        self.engine = Engine(tps=self.config.tps, seed=self.config.seed)
        clock = self.engine.clock
        self.scheduler = Scheduler()
        self.bus = SignalBus()
        self.commands = CommandQueue()
        self.store = GameStore(
            self.scheduler, self.bus, clock.ticks_for(self.config.debounce_ms), state
        )
        self.gate = PhaseGate()

        panel_args = (self.store, self.scheduler, clock, self.engine.random, self.config)
        self.feedback = FeedbackTracker(*panel_args)
        self.decisions = DecisionEngine(*panel_args)
        self.resource_management = ResourceManagement(*panel_args)
        self.technology = TechnologyTree(*panel_args)
        self.dialogue = PhilosophicalDialogue(*panel_args)
        self.cosmos = CosmicExpansion(*panel_args)
        self.panels: tuple[Panel, ...] = (
            self.feedback,
            self.decisions,
            self.resource_management,
            self.technology,
            self.dialogue,
            self.cosmos,
        )

        self.engine.add_system(make_command_system(self.commands))
        self.engine.add_system(make_schedule_system(self.scheduler))
        self.engine.add_system(make_signal_system(self.bus))
        self._register_handlers()
        self._playing = False

    # --- lifecycle ---

    @property
    def playing(self) -> bool:
        return self._playing

    @property
    def state(self) -> GameState:
        return self.store.state

    def start(self) -> None:
        if self._playing:
            return
        self._playing = True
        self.bus.subscribe(STATE_APPLIED, self._on_state_applied)
        self.scheduler.every(
            REGEN_TASK,
            self.engine.clock.ticks_for(self.config.regen_interval_ms),
            self._regenerate,
        )
        self._sync_panels(self.store.state.phase)
        logger.info("session started (seed=%d)", self.engine.seed)

    def teardown(self) -> None:
        if not self._playing:
            return
        self._playing = False
        for panel in self.panels:
            panel.unmount()
        self.scheduler.cancel(REGEN_TASK)
        self.store.discard_pending()
        self.bus.unsubscribe(STATE_APPLIED, self._on_state_applied)
        self.bus.clear()
        logger.info("session ended at phase %d", self.store.state.phase)

    def __enter__(self) -> Game:
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.teardown()

    # --- driving ---

    def enqueue(self, command: Any) -> None:
        """Queue a command for the next tick."""
        self.commands.enqueue(command)

    def dispatch(self, command: Any) -> bool:
        """Run a command now. Returns False if the game rejected it."""
        return self.commands.execute(command, self.engine.context())

    def step(self) -> None:
        self.engine.step()

    def advance_ms(self, ms: float) -> None:
        """Run the engine for *ms* milliseconds of game time."""
        self.engine.run(self.engine.clock.ticks_for(ms))

    # --- internals ---

    def _sync_panels(self, phase: int) -> None:
        for panel in self.panels:
            panel.sync(phase)

    def _on_state_applied(self, signal_name: str, data: dict[str, Any]) -> None:
        if not self._playing:
            return
        changed: frozenset[str] = data["changed"]
        state: GameState = data["state"]
        if changed & _GATE_KEYS and state.phase == self.store.state.phase:
            update = self.gate.evaluate(state)
            if update is not None:
                self.store.apply(update)
        self._sync_panels(self.store.state.phase)
        for panel in self.panels:
            if panel.mounted:
                panel.on_state(changed, state)

    def _regenerate(self, ctx: TickContext) -> None:
        update = regenerate(self.store.state)
        if update:
            self.store.apply(update)

    def _register_handlers(self) -> None:
        q = self.commands
        q.handle(cmds.PerformAction, self._perform_action)
        q.handle(
            cmds.StartResearch,
            self._on(self.technology, lambda c: self.technology.start_research(c.technology_id)),
        )
        q.handle(
            cmds.StartProject,
            self._on(self.technology, lambda c: self.technology.start_project(c.project_id)),
        )
        q.handle(
            cmds.StartOperation,
            self._on(
                self.resource_management,
                lambda c: self.resource_management.start_operation(c.operation_id),
            ),
        )
        q.handle(
            cmds.ConvertResources,
            self._on(self.resource_management, lambda c: self.resource_management.convert(c.kind)),
        )
        q.handle(
            cmds.AllocateEnergy,
            self._on(
                self.resource_management,
                lambda c: self.resource_management.allocate(c.research, c.production, c.expansion),
            ),
        )
        q.handle(
            cmds.ResolveCrisis,
            self._on(
                self.resource_management,
                lambda c: self.resource_management.resolve_crisis(c.solution_id),
            ),
        )
        q.handle(
            cmds.ChooseDecision,
            self._on(self.decisions, lambda c: self.decisions.choose(c.decision_id, c.choice_id)),
        )
        q.handle(
            cmds.AnswerDialogue,
            self._on(self.dialogue, lambda c: self.dialogue.answer(c.choice_id)),
        )
        q.handle(
            cmds.LaunchProbe,
            self._on(self.cosmos, lambda c: self.cosmos.launch_probe(c.design_id)),
        )
        q.handle(
            cmds.ResolveCosmicEvent,
            self._on(self.cosmos, lambda c: self.cosmos.resolve_event(c.choice_id)),
        )
        q.handle(
            cmds.AcceptAlienOffer,
            self._on(
                self.cosmos,
                lambda c: self.cosmos.accept_offer(c.civilization_id, c.offer_index),
            ),
        )
        q.handle(
            cmds.AcknowledgeConsequence,
            self._on(self.feedback, lambda c: self.feedback.acknowledge(c.consequence_id)),
        )

    def _on(self, panel: Panel, fn):
        """Handler that rejects the command unless *panel* is mounted."""

        def handler(cmd: Any, ctx: TickContext) -> bool:
            if not self._playing or not panel.mounted:
                return False
            return fn(cmd)

        return handler

    def _perform_action(self, cmd: cmds.PerformAction, ctx: TickContext) -> bool:
        try:
            action = ACTIONS[cmd.name]
        except KeyError:
            raise UnknownEntryError("action", cmd.name) from None
        state = self.store.state
        if not self._playing or not action.available(state.phase):
            return False
        update = action.handler(state)
        if update is None:
            return False
        self.store.submit_update(update)
        return True
