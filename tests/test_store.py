"""Tests for GameStore debounced updates."""
from __future__ import annotations

import dataclasses
import random

import pytest

from tick_alignment.bus import SignalBus
from tick_alignment.clock import Clock
from tick_alignment.schedule import Scheduler
from tick_alignment.store import FLUSH_TASK, STATE_APPLIED, GameStore
from tick_alignment.types import GameState, Resources


class _Env:
    def __init__(self) -> None:
        self.scheduler = Scheduler()
        self.bus = SignalBus()
        self.store = GameStore(self.scheduler, self.bus, 3)
        self.ctx = Clock(100).context(lambda: None, random.Random(0))

    def advance(self, n: int) -> None:
        for _ in range(n):
            self.scheduler.advance(self.ctx)


@pytest.fixture
def env() -> _Env:
    return _Env()


class TestSubmit:
    def test_not_visible_until_window_passes(self, env: _Env) -> None:
        env.store.submit_update({"game_time": 5})
        assert env.store.state.game_time == 0
        assert env.store.pending == {"game_time": 5}
        env.advance(2)
        assert env.store.state.game_time == 0
        env.advance(1)
        assert env.store.state.game_time == 5
        assert env.store.pending is None

    def test_different_keys_both_survive(self, env: _Env) -> None:
        res = dataclasses.replace(env.store.state.resources, energy=42)
        env.store.submit_update({"resources": res})
        env.store.submit_update({"game_time": 9})
        env.advance(3)
        assert env.store.state.resources.energy == 42
        assert env.store.state.game_time == 9
        assert env.store.transitions == 1

    def test_same_key_later_wins(self, env: _Env) -> None:
        env.store.submit_update({"resources": Resources(energy=10)})
        env.store.submit_update({"resources": Resources(energy=20)})
        env.advance(3)
        assert env.store.state.resources.energy == 20

    def test_submit_restarts_window(self, env: _Env) -> None:
        env.store.submit_update({"game_time": 1})
        env.advance(2)
        env.store.submit_update({"total_paperclips": 3})
        env.advance(2)
        assert env.store.state.game_time == 0
        env.advance(1)
        assert env.store.state.game_time == 1
        assert env.store.state.total_paperclips == 3

    def test_unknown_key_rejected(self, env: _Env) -> None:
        with pytest.raises(KeyError):
            env.store.submit_update({"paperclips": 1})

    def test_discard_pending(self, env: _Env) -> None:
        env.store.submit_update({"game_time": 1})
        env.store.discard_pending()
        assert not env.scheduler.has(FLUSH_TASK)
        env.advance(5)
        assert env.store.state.game_time == 0

    def test_flush_now(self, env: _Env) -> None:
        env.store.submit_update({"game_time": 2})
        assert env.store.flush() is True
        assert env.store.state.game_time == 2
        assert not env.scheduler.has(FLUSH_TASK)
        assert env.store.flush() is False


class TestApply:
    def test_publishes_changed_keys(self, env: _Env) -> None:
        seen: list[frozenset[str]] = []
        env.bus.subscribe(STATE_APPLIED, lambda name, data: seen.append(data["changed"]))
        assert env.store.apply({"phase": 1, "game_time": 0}) is True
        env.bus.flush()
        assert seen == [frozenset({"phase"})]

    def test_no_change_no_signal(self, env: _Env) -> None:
        assert env.store.apply({"phase": 0}) is False
        assert env.bus.pending() == 0
        assert env.store.transitions == 0

    def test_signal_carries_new_state(self, env: _Env) -> None:
        states: list[GameState] = []
        env.bus.subscribe(STATE_APPLIED, lambda name, data: states.append(data["state"]))
        env.store.apply({"game_time": 7})
        env.bus.flush()
        assert states[0].game_time == 7
        assert states[0] is env.store.state


def test_initial_state_argument() -> None:
    store = GameStore(Scheduler(), SignalBus(), 3, GameState(phase=2))
    assert store.state.phase == 2


def test_debounce_ticks_positive() -> None:
    with pytest.raises(ValueError):
        GameStore(Scheduler(), SignalBus(), 0)
