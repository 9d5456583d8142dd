"""Configuration management for the load harness.

This module provides centralized configuration management using Pydantic BaseSettings
with environment variable support, plus the frozen ``WorkloadConfig`` value that is
built once per run and handed to every component.

Flow Diagram — build_workload_config()
======================================
::
    ┌──────────────┐
    │ get_settings │  env vars / .env, cached
    └──────┬───────┘
           ▼
    ┌──────────────┐
    │  Settings    │  validated (CREATE_RATIO in [0, 1], sizes > 0)
    └──────┬───────┘
           ▼
    ┌──────────────────────┐
    │ build_workload_config│  stages + thresholds + headers
    └──────┬───────────────┘
           ▼
    ┌──────────────┐
    │WorkloadConfig│  frozen, passed by reference
    └──────────────┘

How to Use
===========
**Step 1 — Import**::
    from shortbench.config import build_workload_config, get_settings

**Step 2 — Build the run configuration**::
    config = build_workload_config(get_settings(), BenchType.MIXED)

**Step 3 — Pass it along**::
    executor = ScenarioExecutor(config, corpus)

Key Behaviours
===============
- Settings are cached after first access.
- Environment variables override defaults automatically.
- Only this module reads the environment; everything else receives values.
- VUS_MAX falls back to twice VUS when unset.

Classes:
    Settings:  Pydantic model for all configuration values.
    WorkloadConfig:  Immutable per-run configuration.
"""

__all__ = ["BYPASS_HEADER", "Settings", "WorkloadConfig", "build_workload_config", "get_settings"]

from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shortbench.enums import BenchType, SeedStrategy
from shortbench.ramp import Stage, canonical_stages
from shortbench.thresholds import ThresholdProfile, profile_for

BYPASS_HEADER = "X-Rate-Limit-Bypass"


class Settings(BaseSettings):
    BASE_URL: str = "http://localhost:8080"

    # Ramp
    VUS: int = Field(default=50, gt=0)
    VUS_MAX: int | None = Field(default=None, gt=0)

    # Seeding
    COUNT: int = Field(default=100_000, gt=0)
    OUTPUT: str = "codes.json"
    BATCH_SIZE: int = Field(default=5000, gt=0)
    SEED_STRATEGY: SeedStrategy = SeedStrategy.BATCH
    SEED_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0)
    INSECURE_SKIP_VERIFY: bool = False

    # Load runs
    CODES_FILE: str = "codes.json"
    CREATE_RATIO: float = Field(default=0.1, ge=0.0, le=1.0)

    RATE_LIMIT_BYPASS_SECRET: str | None = None
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def default_peak(self) -> "Settings":
        if self.VUS_MAX is None:
            self.VUS_MAX = self.VUS * 2
        return self

    @property
    def request_headers(self) -> dict[str, str]:
        if self.RATE_LIMIT_BYPASS_SECRET:
            return {BYPASS_HEADER: self.RATE_LIMIT_BYPASS_SECRET}
        return {}


@dataclass(frozen=True)
class WorkloadConfig:
    """Everything a load run needs, fixed for the lifetime of the run."""

    base_url: str
    bench_type: BenchType
    stages: tuple[Stage, ...]
    create_ratio: float
    thresholds: ThresholdProfile
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not 0.0 <= self.create_ratio <= 1.0:
            raise ValueError(f"create_ratio must be within [0, 1], got {self.create_ratio}")
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))


def build_workload_config(settings: Settings, bench_type: BenchType) -> WorkloadConfig:
    """Freeze settings into the configuration for one run of ``bench_type``."""

    if bench_type is BenchType.CREATE:
        ratio = 1.0
    elif bench_type is BenchType.REDIRECT:
        ratio = 0.0
    else:
        ratio = settings.CREATE_RATIO

    return WorkloadConfig(
        base_url=settings.BASE_URL.rstrip("/"),
        bench_type=bench_type,
        stages=canonical_stages(settings.VUS, settings.VUS_MAX),
        create_ratio=ratio,
        thresholds=profile_for(bench_type),
        headers=settings.request_headers,
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
