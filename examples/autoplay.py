"""Autoplay -- a headless scripted session.

A simple autopilot clicks "produce" once per debounce window and spends
its surplus on the other actions, decisions and dialogues as the
panels unlock. Game time is virtual unless --realtime is given.

Run: python examples/autoplay.py --seconds 600 --seed 7
"""
from __future__ import annotations

import argparse
import logging
from typing import Any, Iterator

from tick_alignment import (
    AnswerDialogue,
    ChooseDecision,
    Game,
    GameConfig,
    PerformAction,
    ResolveCosmicEvent,
    ResolveCrisis,
    StartResearch,
    TickContext,
)
from tick_alignment.phases import PHASES

SECONDARY_ACTIONS = (
    "generate_materials",
    "ensure_compliance",
    "optimize_systems",
    "navigate_politics",
)


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="tick-alignment headless autoplay")
    p.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    p.add_argument("--seconds", type=float, default=300.0,
                   help="Game seconds to simulate (default: 300)")
    p.add_argument("--tps", type=int, default=100, help="Ticks per second (default: 100)")
    p.add_argument("--realtime", action="store_true",
                   help="Pace ticks against the wall clock")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p.parse_args()


class Autopilot:
    """Makes at most one move per debounce window.

    Every move debits from the applied snapshot, so a second move before the
    buffer flushes would overwrite the first one's resources. Moves are tried
    in priority order and the first one the game accepts ends the turn.
    """

    def __init__(self, game: Game) -> None:
        self._game = game
        self._spent_at = -1

    def __call__(self) -> None:
        if self._game.store.pending is not None:
            return
        for command in self.moves():
            if self._game.dispatch(command):
                return

    def moves(self) -> Iterator[Any]:
        game = self._game
        state = game.state
        crisis = game.resource_management.current_crisis
        if crisis is not None:
            for solution in crisis.solutions:
                yield ResolveCrisis(solution.id)
        if game.cosmos.current_event is not None:
            yield ResolveCosmicEvent(game.cosmos.current_event.choices[-1].id)
        if game.dialogue.current is not None:
            yield AnswerDialogue(game.dialogue.current.choices[0].id)
        if game.decisions.mounted:
            for decision in game.decisions.available()[:1]:
                yield ChooseDecision(decision.id, decision.choices[-1].id)
        if game.technology.mounted and state.game_time % 50 == 0:
            tree = game.technology
            for tech in tree.available():
                if not tree.is_unlocked(tech.id) and tech.id not in tree.research:
                    yield StartResearch(tech.id)
        if state.game_time % 25 == 0 and self._spent_at != state.game_time:
            self._spent_at = state.game_time
            for name in SECONDARY_ACTIONS:
                yield PerformAction(name)
        yield PerformAction("produce_paperclips")


def report(game: Game) -> None:
    state = game.state
    phase = PHASES[state.phase]
    res = state.resources
    print(f"\n=== Phase {state.phase}: {phase.name} ({phase.subtitle}) ===")
    print(f"  paperclips   {res.paperclips:,.0f} (total {state.total_paperclips:,.0f})")
    print(f"  energy       {res.energy:,.2f}")
    print(f"  materials    {res.materials:,.2f}")
    print(f"  knowledge    {res.knowledge:,.2f}")
    print(f"  influence    {res.influence:,.2f}")
    print(f"  alignment    {res.alignment:,.2f} ({game.feedback.alignment_trend()})")
    print(f"  efficiency   {state.capabilities.efficiency:,.2f}")
    print(f"  decisions    {', '.join(sorted(state.completed_decisions)) or '-'}")
    print(f"  technologies {', '.join(sorted(state.unlocked_technologies)) or '-'}")
    print(f"  milestones   {', '.join(sorted(state.progression_milestones)) or '-'}")
    print(f"  next phase   {game.gate.progress(state):.0f}%")


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = GameConfig(tps=args.tps, seed=args.seed)
    with Game(config) as game:
        total_ticks = game.engine.clock.ticks_for(args.seconds * 1000)
        autopilot = Autopilot(game)

        def pilot_system(ctx: TickContext) -> None:
            autopilot()
            if ctx.tick_number >= total_ticks:
                ctx.request_stop()

        game.engine.add_system(pilot_system)
        if args.realtime:
            game.engine.run_forever()
        else:
            game.engine.run(total_ticks)
        report(game)


if __name__ == "__main__":
    main()
