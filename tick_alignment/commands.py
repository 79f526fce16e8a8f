"""Player commands and the queue that routes them to handlers."""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable

from tick_alignment.types import TickContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PerformAction:
    """Run a main-screen action from ``actions.ACTIONS`` by name."""

    name: str


@dataclass(frozen=True)
class StartResearch:
    technology_id: str


@dataclass(frozen=True)
class StartProject:
    project_id: str


@dataclass(frozen=True)
class StartOperation:
    operation_id: str


@dataclass(frozen=True)
class ConvertResources:
    """``kind`` is ``"energy"`` or ``"influence"``."""

    kind: str


@dataclass(frozen=True)
class AllocateEnergy:
    research: int
    production: int
    expansion: int


@dataclass(frozen=True)
class ResolveCrisis:
    solution_id: str


@dataclass(frozen=True)
class ChooseDecision:
    decision_id: str
    choice_id: str


@dataclass(frozen=True)
class AnswerDialogue:
    choice_id: str


@dataclass(frozen=True)
class LaunchProbe:
    design_id: str


@dataclass(frozen=True)
class ResolveCosmicEvent:
    choice_id: str


@dataclass(frozen=True)
class AcceptAlienOffer:
    civilization_id: str
    offer_index: int


@dataclass(frozen=True)
class AcknowledgeConsequence:
    consequence_id: str


class CommandQueue:
    """Routes player commands to typed handlers during the tick loop.

    One handler per command class, dispatched by type. ``handler(cmd, ctx)``
    returns True to accept and False to reject.
    """

    def __init__(self) -> None:
        self._handlers: dict[type[Any], Callable[[Any, TickContext], bool]] = {}
        self._pending: deque[Any] = deque()

    def handle(
        self,
        cmd_type: type[Any],
        handler: Callable[[Any, TickContext], bool],
    ) -> None:
        """Register a handler for a command type. Later calls overwrite."""
        self._handlers[cmd_type] = handler

    def enqueue(self, cmd: Any) -> None:
        """Add a command to the queue. Safe to call between ticks."""
        self._pending.append(cmd)

    def pending(self) -> int:
        return len(self._pending)

    def execute(self, cmd: Any, ctx: TickContext) -> bool:
        """Run one command immediately.

        Raises ``TypeError`` if no handler is registered for its type.
        """
        cmd_type = type(cmd)
        handler = self._handlers.get(cmd_type)
        if handler is None:
            raise TypeError(f"No handler registered for {cmd_type.__qualname__}")
        accepted = handler(cmd, ctx)
        if not accepted:
            logger.debug("rejected %r", cmd)
        return accepted

    def drain(self, ctx: TickContext) -> list[tuple[Any, bool]]:
        """Process all pending commands. Returns ``[(cmd, accepted), ...]``."""
        results: list[tuple[Any, bool]] = []
        while self._pending:
            cmd = self._pending.popleft()
            results.append((cmd, self.execute(cmd, ctx)))
        return results


def make_command_system(queue: CommandQueue) -> Callable[[TickContext], None]:
    """Return a system that drains the command queue at the start of each tick."""

    def command_system(ctx: TickContext) -> None:
        queue.drain(ctx)

    return command_system
