"""Tests for Clock."""
import random

import pytest

from tick_alignment.clock import Clock


def test_dt() -> None:
    assert Clock(100).dt == pytest.approx(0.01)


def test_rejects_zero_tps() -> None:
    with pytest.raises(ValueError):
        Clock(0)


def test_advance_and_elapsed() -> None:
    c = Clock(100)
    c.advance()
    c.advance()
    assert c.tick_number == 2
    assert c.elapsed_ms == pytest.approx(20)


class TestTicksFor:
    def test_debounce_window(self) -> None:
        assert Clock(100).ticks_for(30) == 3

    def test_intervals(self) -> None:
        c = Clock(100)
        assert c.ticks_for(2000) == 200
        assert c.ticks_for(3000) == 300
        assert c.ticks_for(100) == 10

    def test_never_below_one(self) -> None:
        assert Clock(10).ticks_for(1) == 1

    def test_rejects_non_positive(self) -> None:
        with pytest.raises(ValueError):
            Clock(100).ticks_for(0)


def test_context() -> None:
    c = Clock(50)
    c.advance()
    rng = random.Random(1)
    ctx = c.context(lambda: None, rng)
    assert ctx.tick_number == 1
    assert ctx.dt == pytest.approx(0.02)
    assert ctx.elapsed == pytest.approx(0.02)
    assert ctx.random is rng
