"""Shared enums for the load harness.

Using enums instead of string literals keeps scenario tags, run profiles and
seeding strategies consistent between the CLI, the locustfiles and the tests.
"""

from enum import StrEnum

__all__ = ["BenchType", "ScenarioTag", "SeedStrategy", "ThresholdMetric"]


class ScenarioTag(StrEnum):
    """Label attached to every request and check of a load iteration."""

    CREATE = "create"
    REDIRECT = "redirect"


class BenchType(StrEnum):
    """Run profiles: pure create, pure redirect, or a weighted mix."""

    CREATE = "create"
    REDIRECT = "redirect"
    MIXED = "mixed"

    @property
    def needs_corpus(self) -> bool:
        return self is not BenchType.CREATE


class SeedStrategy(StrEnum):
    """How the seeding pipeline talks to the service."""

    BATCH = "batch"
    INDIVIDUAL = "individual"


class ThresholdMetric(StrEnum):
    """Aggregated metrics a threshold can be declared against."""

    P50 = "p50"
    P95 = "p95"
    P99 = "p99"
    ERROR_RATE = "error_rate"

    @property
    def percentile(self) -> float | None:
        if self is ThresholdMetric.ERROR_RATE:
            return None
        return int(self.value[1:]) / 100
