"""Staged concurrency schedule for load runs.

The schedule is pure data. Locust executes it through ``StagedShape`` in
``shortbench.runtime``; tests drive ``RampSchedule.tick`` directly with elapsed times.

Canonical shape::

    target
      ▲          ┌╮ VUS_MAX
      │    ┌─────┘ ╲
      │   ╱  VUS    ╲
      │  ╱           ╲
      └─┴──┴─────┴──┴──┴──▶ t
        10s   30s  10s 10s
"""

import math
from dataclasses import dataclass

__all__ = ["RAMP_UP_SECONDS", "HOLD_SECONDS", "PEAK_SECONDS", "RAMP_DOWN_SECONDS", "RampSchedule", "Stage", "canonical_stages"]

RAMP_UP_SECONDS = 10
HOLD_SECONDS = 30
PEAK_SECONDS = 10
RAMP_DOWN_SECONDS = 10


@dataclass(frozen=True)
class Stage:
    """Move linearly from the previous target to ``target`` over ``duration_s``."""

    duration_s: float
    target: int

    def __post_init__(self) -> None:
        if self.duration_s <= 0:
            raise ValueError(f"Stage duration must be positive, got {self.duration_s}")
        if self.target < 0:
            raise ValueError(f"Stage target must be non-negative, got {self.target}")


def canonical_stages(vus: int, vus_max: int | None = None) -> tuple[Stage, ...]:
    """Ramp to base, hold, ramp to peak, ramp down to zero."""

    peak = vus_max if vus_max is not None else vus * 2
    return (
        Stage(RAMP_UP_SECONDS, vus),
        Stage(HOLD_SECONDS, vus),
        Stage(PEAK_SECONDS, peak),
        Stage(RAMP_DOWN_SECONDS, 0),
    )


class RampSchedule:
    """Time-indexed view over an ordered stage list."""

    def __init__(self, stages: tuple[Stage, ...] | list[Stage], initial_target: int = 0):
        if not stages:
            raise ValueError("RampSchedule needs at least one stage")
        self.stages = tuple(stages)
        self.initial_target = initial_target

    @property
    def total_duration(self) -> float:
        return sum(stage.duration_s for stage in self.stages)

    @property
    def peak(self) -> int:
        return max(stage.target for stage in self.stages)

    def _locate(self, elapsed: float) -> tuple[int, Stage, int, float] | None:
        """Return (index, stage, previous target, seconds into stage) or None when done."""

        if elapsed < 0:
            elapsed = 0.0
        start = 0.0
        previous = self.initial_target
        for index, stage in enumerate(self.stages):
            if elapsed < start + stage.duration_s:
                return index, stage, previous, elapsed - start
            start += stage.duration_s
            previous = stage.target
        return None

    def target_at(self, elapsed: float) -> int | None:
        """Linearly interpolated worker target at ``elapsed`` seconds."""

        located = self._locate(elapsed)
        if located is None:
            return None
        _, stage, previous, offset = located
        progress = offset / stage.duration_s
        return round(previous + (stage.target - previous) * progress)

    def tick(self, elapsed: float) -> tuple[int, float] | None:
        """(user_count, spawn_rate) for the stage active at ``elapsed``.

        The spawn rate makes the runtime cover the stage's target delta over the
        stage's duration, so the realized ramp is linear. Locust needs a rate of
        at least one user per second, so a stage whose delta is smaller than its
        duration reaches its target early (2 -> 4 users over 10s is done after 2s)
        and holds it for the rest of the stage.
        """

        located = self._locate(elapsed)
        if located is None:
            return None
        _, stage, previous, _ = located
        delta = abs(stage.target - previous)
        spawn_rate = max(delta / stage.duration_s, 1.0)
        return stage.target, spawn_rate

    def stage_index(self, elapsed: float) -> int | None:
        located = self._locate(elapsed)
        return None if located is None else located[0]

    def describe(self) -> list[str]:
        lines = []
        previous = self.initial_target
        for stage in self.stages:
            lines.append(f"{stage.duration_s:g}s: {previous} -> {stage.target} users")
            previous = stage.target
        lines.append(f"total {math.ceil(self.total_duration)}s, peak {self.peak} users")
        return lines
