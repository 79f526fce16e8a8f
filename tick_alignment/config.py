"""Game configuration dataclass."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GameConfig:
    """Immutable timing and session configuration.

    All durations are wall-clock milliseconds; the engine converts them to
    whole ticks at ``tps``.

    Attributes:
        tps: Engine ticks per second.
        debounce_ms: Quiet period before coalesced updates are applied.
        regen_interval_ms: Passive regeneration period.
        research_interval_ms: Research ticker period.
        operation_interval_ms: Resource operation ticker period.
        probe_interval_ms: Probe replication ticker period.
        completion_delay_ms: Delay between a timer reaching zero and its effects.
        follow_up_delay_ms: Delay before a follow-up dialogue is presented.
        consequence_delay_ms: Delay before long-term decision consequences fire.
        trajectory_length: Alignment trajectory points kept.
        seed: RNG seed, or None for a random one.
    """

    tps: int = 100
    debounce_ms: int = 30
    regen_interval_ms: int = 2000
    research_interval_ms: int = 3000
    operation_interval_ms: int = 2000
    probe_interval_ms: int = 2000
    completion_delay_ms: int = 100
    follow_up_delay_ms: int = 5000
    consequence_delay_ms: int = 10000
    trajectory_length: int = 21
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.tps <= 0:
            raise ValueError("tps must be positive")
        for name in (
            "debounce_ms",
            "regen_interval_ms",
            "research_interval_ms",
            "operation_interval_ms",
            "probe_interval_ms",
            "completion_delay_ms",
            "follow_up_delay_ms",
            "consequence_delay_ms",
        ):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        if self.trajectory_length < 1:
            raise ValueError(
                f"trajectory_length must be >= 1, got {self.trajectory_length}"
            )
