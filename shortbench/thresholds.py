"""Pass/fail rules for load runs.

The rules only hold limits. Locust aggregates the run and computes the
percentiles; ``ThresholdProfile.violations`` reads those values off a stats
entry and reports which limits were crossed.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

from shortbench.enums import BenchType, ThresholdMetric

__all__ = [
    "CREATE_THRESHOLDS",
    "MIXED_THRESHOLDS",
    "REDIRECT_THRESHOLDS",
    "StatsSource",
    "Threshold",
    "ThresholdProfile",
    "install_thresholds",
    "profile_for",
]

logger = logging.getLogger(__name__)


class StatsSource(Protocol):
    """The slice of ``locust.stats.StatsEntry`` the rules are evaluated against."""

    num_requests: int

    @property
    def fail_ratio(self) -> float: ...

    def get_response_time_percentile(self, percent: float) -> float: ...


@dataclass(frozen=True)
class Threshold:
    """``metric < limit``; latency limits are milliseconds, error rate is a ratio."""

    metric: ThresholdMetric
    limit: float

    def observed(self, stats: StatsSource) -> float:
        if self.metric is ThresholdMetric.ERROR_RATE:
            return stats.fail_ratio
        return stats.get_response_time_percentile(self.metric.percentile)

    def passes(self, stats: StatsSource) -> bool:
        return self.observed(stats) < self.limit

    def __str__(self) -> str:
        unit = "" if self.metric is ThresholdMetric.ERROR_RATE else "ms"
        return f"{self.metric}<{self.limit:g}{unit}"


@dataclass(frozen=True)
class ThresholdProfile:
    name: str
    rules: tuple[Threshold, ...]

    def violations(self, stats: StatsSource) -> list[str]:
        if stats.num_requests == 0:
            return [f"{self.name}: no requests were recorded"]
        failed = []
        for rule in self.rules:
            if not rule.passes(stats):
                failed.append(f"{self.name}: {rule} violated (observed {rule.observed(stats):g})")
        return failed


def _rules(*pairs: tuple[ThresholdMetric, float]) -> tuple[Threshold, ...]:
    return tuple(Threshold(metric, limit) for metric, limit in pairs)


# Redirects are a cache lookup; creates go through the write path.
REDIRECT_THRESHOLDS = ThresholdProfile(
    "redirect",
    _rules(
        (ThresholdMetric.P50, 10),
        (ThresholdMetric.P95, 50),
        (ThresholdMetric.P99, 100),
        (ThresholdMetric.ERROR_RATE, 0.001),
    ),
)

CREATE_THRESHOLDS = ThresholdProfile(
    "create",
    _rules(
        (ThresholdMetric.P50, 50),
        (ThresholdMetric.P95, 200),
        (ThresholdMetric.P99, 500),
        (ThresholdMetric.ERROR_RATE, 0.001),
    ),
)

MIXED_THRESHOLDS = ThresholdProfile(
    "mixed",
    _rules(
        (ThresholdMetric.P95, 500),
        (ThresholdMetric.ERROR_RATE, 0.01),
    ),
)

_PROFILES = {
    BenchType.CREATE: CREATE_THRESHOLDS,
    BenchType.REDIRECT: REDIRECT_THRESHOLDS,
    BenchType.MIXED: MIXED_THRESHOLDS,
}


def profile_for(bench_type: BenchType) -> ThresholdProfile:
    return _PROFILES[bench_type]


def install_thresholds(profile: ThresholdProfile, event_hooks):
    """Register a quit listener that fails the run (exit code 1) when ``profile`` is violated.

    ``event_hooks`` is ``locust.events`` in a real run; the listener reads the
    aggregated ``environment.stats.total`` entry.
    """

    def check_thresholds(environment, **kwargs) -> None:
        violations = profile.violations(environment.stats.total)
        if violations:
            for violation in violations:
                logger.error("Threshold failed: %s", violation)
            environment.process_exit_code = 1
        else:
            logger.info("All %s thresholds passed", profile.name)

    event_hooks.quitting.add_listener(check_thresholds)
    return check_thresholds
