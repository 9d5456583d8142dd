"""Locust wiring for load runs.

Locust owns scheduling and metric aggregation. This module hands it:

- ``StagedShape``: the ramp schedule as a ``LoadTestShape``.
- ``ScenarioUser``: a ``FastHttpUser`` whose single task is one executor iteration.
- the threshold quit hook from ``shortbench.thresholds``.

``setup_run`` builds everything from settings in one go and raises on a bad corpus,
so a locustfile that calls it at import time aborts before any user spawns.
"""

import logging

from locust import FastHttpUser, LoadTestShape, constant, events, task

from shortbench.config import Settings, build_workload_config
from shortbench.corpus import load_corpus
from shortbench.enums import BenchType
from shortbench.ramp import RampSchedule
from shortbench.scenarios import ScenarioExecutor
from shortbench.thresholds import install_thresholds

__all__ = ["ScenarioUser", "StagedShape", "setup_run"]

logger = logging.getLogger(__name__)


class StagedShape(LoadTestShape):
    """Runs ``schedule`` stage by stage, then stops the test."""

    abstract = True
    schedule: RampSchedule | None = None
    current_stage: int | None = None

    def tick(self):
        if self.schedule is None:
            return None
        run_time = self.get_run_time()
        stage = self.schedule.stage_index(run_time)
        if stage is not None and stage != self.current_stage:
            self.current_stage = stage
            logger.info(
                "Stage %d/%d: %d users, heading to %d",
                stage + 1,
                len(self.schedule.stages),
                self.schedule.target_at(run_time),
                self.schedule.stages[stage].target,
            )
        return self.schedule.tick(run_time)


class ScenarioUser(FastHttpUser):
    """Virtual user running one scenario iteration per task."""

    abstract = True
    wait_time = constant(0)
    executor: ScenarioExecutor | None = None

    @task
    def iterate(self) -> None:
        self.executor.run_once(self.client)


def setup_run(settings: Settings, bench_type: BenchType, event_hooks=events) -> tuple[type[ScenarioUser], type[StagedShape]]:
    """Build the user and shape classes for a run; raises ``CorpusError`` on a bad corpus."""

    config = build_workload_config(settings, bench_type)
    corpus = load_corpus(settings.CODES_FILE) if bench_type.needs_corpus else None
    executor = ScenarioExecutor(config, corpus)
    schedule = RampSchedule(config.stages)

    logger.info("Starting %s run against %s", bench_type, config.base_url)
    for line in schedule.describe():
        logger.info("  %s", line)

    name = bench_type.capitalize()
    user = type(f"{name}User", (ScenarioUser,), {"host": config.base_url, "executor": executor, "abstract": False})
    shape = type(f"{name}Shape", (StagedShape,), {"schedule": schedule, "abstract": False})
    install_thresholds(config.thresholds, event_hooks)
    return user, shape
