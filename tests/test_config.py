"""Tests for GameConfig validation."""
from __future__ import annotations

import pytest

from tick_alignment.config import GameConfig


def test_defaults() -> None:
    c = GameConfig()
    assert c.tps == 100
    assert c.debounce_ms == 30
    assert c.regen_interval_ms == 2000
    assert c.research_interval_ms == 3000
    assert c.operation_interval_ms == 2000
    assert c.completion_delay_ms == 100
    assert c.follow_up_delay_ms == 5000
    assert c.consequence_delay_ms == 10000
    assert c.trajectory_length == 21
    assert c.seed is None


@pytest.mark.parametrize(
    "field", ["debounce_ms", "regen_interval_ms", "research_interval_ms", "completion_delay_ms"]
)
def test_non_positive_durations_rejected(field: str) -> None:
    with pytest.raises(ValueError, match=field):
        GameConfig(**{field: 0})


def test_tps_must_be_positive() -> None:
    with pytest.raises(ValueError):
        GameConfig(tps=0)


def test_trajectory_length_must_be_positive() -> None:
    with pytest.raises(ValueError):
        GameConfig(trajectory_length=0)
