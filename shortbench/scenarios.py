"""Per-iteration scenarios for load runs.

One call to ``ScenarioExecutor.run_once`` is one unit of traffic: pick a scenario
from the probability table, issue its request through a Locust-style client and
record a labeled check on the response. Failures are recorded on the response
(``catch_response``), never raised, so an iteration always completes.
"""

import logging
import random
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from shortbench.config import WorkloadConfig
from shortbench.corpus import Corpus, CorpusError
from shortbench.enums import ScenarioTag

__all__ = ["CREATE_PATH", "CheckResult", "ScenarioExecutor", "ScenarioTable"]

logger = logging.getLogger(__name__)

CREATE_PATH = "/api/v1/urls"


class ScenarioTable:
    """Discrete probability table mapping a scenario tag to its selection weight."""

    def __init__(self, weights: Mapping[ScenarioTag, float], rng: random.Random | None = None):
        entries = []
        total = 0.0
        for tag, weight in weights.items():
            if weight < 0:
                raise ValueError(f"Weight for {tag} must be non-negative, got {weight}")
            if weight == 0:
                continue
            total += weight
            entries.append((tag, weight))
        if not entries:
            raise ValueError("ScenarioTable needs at least one positive weight")

        cumulative = 0.0
        self._bounds: list[tuple[float, ScenarioTag]] = []
        for tag, weight in entries:
            cumulative += weight / total
            self._bounds.append((cumulative, tag))
        self.rng = rng or random.Random()

    @classmethod
    def for_ratio(cls, create_ratio: float, rng: random.Random | None = None) -> "ScenarioTable":
        # create first: a draw u picks create iff u < create_ratio
        return cls({ScenarioTag.CREATE: create_ratio, ScenarioTag.REDIRECT: 1.0 - create_ratio}, rng)

    @property
    def tags(self) -> tuple[ScenarioTag, ...]:
        return tuple(tag for _, tag in self._bounds)

    def probability(self, tag: ScenarioTag) -> float:
        previous = 0.0
        for bound, candidate in self._bounds:
            if candidate == tag:
                return bound - previous
            previous = bound
        return 0.0

    def choose(self) -> ScenarioTag:
        draw = self.rng.random()
        for bound, tag in self._bounds:
            if draw < bound:
                return tag
        # float rounding can leave the last bound a hair under 1.0
        return self._bounds[-1][1]


@dataclass(frozen=True)
class CheckResult:
    tag: ScenarioTag
    passed: bool
    reason: str = ""


def _create_failure(response) -> str:
    if response.status_code != 201:
        return f"expected status 201, got {response.status_code}"
    try:
        body = response.json()
    except (TypeError, ValueError):
        return "response body is not JSON"
    if not isinstance(body, dict) or not body.get("short_code"):
        return "response has no short_code"
    return ""


def _redirect_failure(response) -> str:
    if response.status_code != 302:
        return f"expected status 302, got {response.status_code}"
    if not response.headers.get("Location"):
        return "response has no Location header"
    return ""


class ScenarioExecutor:
    """Runs create and redirect iterations for one run configuration.

    ``client`` is anything shaped like a Locust HTTP session: ``post``/``get``
    accepting ``name`` and ``catch_response`` and returning a context manager
    whose response exposes ``success()`` and ``failure(reason)``.
    """

    def __init__(
        self,
        config: WorkloadConfig,
        corpus: Corpus | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], int] = time.time_ns,
    ):
        if config.create_ratio < 1.0 and not corpus:
            raise CorpusError(f"A {config.bench_type} run needs a non-empty short-code corpus")
        self.config = config
        self.corpus = corpus
        self.rng = rng or random.Random()
        self.clock = clock
        self.table = ScenarioTable.for_ratio(config.create_ratio, self.rng)
        self._headers = dict(config.headers)

    def run_once(self, client) -> CheckResult:
        tag = self.table.choose()
        if tag is ScenarioTag.CREATE:
            return self.create(client)
        return self.redirect(client)

    def unique_url(self) -> str:
        return f"https://example.com/path/{self.clock()}/{self.rng.random()}"

    def pick_code(self) -> str:
        size = len(self.corpus)
        index = min(int(self.rng.random() * size), size - 1)
        return self.corpus[index]

    def create(self, client) -> CheckResult:
        with client.post(
            CREATE_PATH,
            json={"url": self.unique_url()},
            headers=self._headers,
            name=str(ScenarioTag.CREATE),
            catch_response=True,
        ) as response:
            return self._record(ScenarioTag.CREATE, response, _create_failure(response))

    def redirect(self, client) -> CheckResult:
        code = self.pick_code()
        with client.get(
            f"/{code}",
            headers=self._headers,
            allow_redirects=False,
            name=str(ScenarioTag.REDIRECT),
            catch_response=True,
        ) as response:
            return self._record(ScenarioTag.REDIRECT, response, _redirect_failure(response))

    @staticmethod
    def _record(tag: ScenarioTag, response, reason: str) -> CheckResult:
        if reason:
            response.failure(f"{tag}: {reason}")
            logger.debug("%s check failed: %s", tag, reason)
            return CheckResult(tag, False, reason)
        response.success()
        return CheckResult(tag, True)
