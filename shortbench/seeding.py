"""Seeding pipeline: bulk-create URLs and persist the confirmed short codes.

Flow Diagram — Seeder.run()
===========================
::
    plan_chunks(N, B) ──▶ ⌈N/B⌉ × (start, size)
           │
           ▼  one chunk at a time
    ┌──────────────────────────────┐
    │ batch:      1 × POST /batch   │
    │ individual: size × POST /urls │  (TaskGroup, joined per chunk)
    └──────────────┬───────────────┘
                   ▼
        accumulator += confirmed codes      log "Progress: x/N"
                   │
                   ▼
        write_corpus(output)  (atomic replace)

Key Behaviours
===============
- Only codes from 201 responses reach the accumulator.
- A failed chunk (batch) or URL (individual) is logged and dropped; no retry.
- Exactly ⌈N/B⌉ chunks are issued whatever fails.
- No timeout beyond the HTTP client's per-request timeout.
"""

import asyncio
import logging
import math
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

import httpx
from pydantic import ValidationError

from shortbench.config import BYPASS_HEADER, Settings
from shortbench.corpus import write_corpus
from shortbench.enums import SeedStrategy
from shortbench.schemas import BatchCreateRequest, BatchCreateResponse, CreateURLRequest, SeedRecord

__all__ = ["BATCH_PATH", "CREATE_PATH", "Chunk", "SeedReport", "Seeder", "plan_chunks", "seed_url"]

logger = logging.getLogger(__name__)

CREATE_PATH = "/api/v1/urls"
BATCH_PATH = "/api/v1/urls/batch"


@dataclass(frozen=True)
class Chunk:
    start: int
    size: int

    @property
    def urls(self) -> list[str]:
        return [seed_url(index) for index in range(self.start, self.start + self.size)]


@dataclass
class SeedReport:
    requested: int
    chunks: int = 0
    failed_chunks: int = 0
    failed_urls: int = 0
    saved: int = 0
    output: Path | None = None

    @property
    def complete(self) -> bool:
        return self.saved == self.requested

    def summary(self) -> str:
        return f"Saved {self.saved}/{self.requested} codes to {self.output}"


def seed_url(index: int) -> str:
    return f"https://example.com/seed/{index}"


def plan_chunks(count: int, batch_size: int) -> Iterator[Chunk]:
    """Contiguous chunks of at most ``batch_size`` covering ``range(count)``."""

    if count <= 0:
        raise ValueError(f"count must be positive, got {count}")
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    for start in range(0, count, batch_size):
        yield Chunk(start, min(batch_size, count - start))


class Seeder:
    """Creates ``count`` URLs against the service and writes the corpus file.

    Parameters:
        base_url:  Service origin.
        count:  Total URLs to request.
        batch_size:  Chunk size; also the concurrency cap for the individual strategy.
        output:  Corpus path, replaced atomically on completion.
        strategy:  ``SeedStrategy.BATCH`` or ``SeedStrategy.INDIVIDUAL``.
        client:  Optional pre-built ``httpx.AsyncClient`` (tests inject a mock transport).
    """

    def __init__(
        self,
        base_url: str,
        count: int,
        batch_size: int,
        output: str | Path,
        strategy: SeedStrategy = SeedStrategy.BATCH,
        timeout_seconds: float = 30.0,
        bypass_secret: str | None = None,
        verify: bool = True,
        client: httpx.AsyncClient | None = None,
    ):
        if count <= 0:
            raise ValueError(f"count must be positive, got {count}")
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.base_url = base_url.rstrip("/")
        self.count = count
        self.batch_size = batch_size
        self.output = Path(output)
        self.strategy = SeedStrategy(strategy)
        self.timeout_seconds = timeout_seconds
        self.verify = verify
        self.headers = {"Content-Type": "application/json"}
        if bypass_secret:
            self.headers[BYPASS_HEADER] = bypass_secret
        self.client = client
        self._owns_client = client is None

    @classmethod
    def from_settings(cls, settings: Settings, **overrides) -> "Seeder":
        params = {
            "base_url": settings.BASE_URL,
            "count": settings.COUNT,
            "batch_size": settings.BATCH_SIZE,
            "output": settings.OUTPUT,
            "strategy": settings.SEED_STRATEGY,
            "timeout_seconds": settings.SEED_TIMEOUT_SECONDS,
            "bypass_secret": settings.RATE_LIMIT_BYPASS_SECRET,
            "verify": not settings.INSECURE_SKIP_VERIFY,
        }
        params.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**params)

    @property
    def num_chunks(self) -> int:
        return math.ceil(self.count / self.batch_size)

    async def __aenter__(self) -> "Seeder":
        if self.client is None:
            self.client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout_seconds),
                limits=httpx.Limits(
                    max_keepalive_connections=self.batch_size,
                    max_connections=self.batch_size,
                ),
                verify=self.verify,
            )
            self._owns_client = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.client is not None and self._owns_client:
            await self.client.aclose()
            self.client = None

    async def run(self) -> SeedReport:
        if self.client is None:
            raise RuntimeError("Seeder.run() must be called inside 'async with Seeder(...)'")
        logger.info(
            "Seeding %d URLs to %s (strategy: %s, batch size: %d, chunks: %d)...",
            self.count,
            self.base_url,
            self.strategy,
            self.batch_size,
            self.num_chunks,
        )
        report = SeedReport(requested=self.count)
        codes: list[str] = []

        for chunk in plan_chunks(self.count, self.batch_size):
            if self.strategy is SeedStrategy.BATCH:
                collected = await self.create_batch(chunk)
                if collected is None:
                    report.failed_chunks += 1
                    collected = []
            else:
                collected = await self.create_individually(chunk)
                report.failed_urls += chunk.size - len(collected)
            report.chunks += 1
            codes.extend(collected)
            logger.info("Progress: %d/%d", len(codes), self.count)

        report.output = write_corpus(self.output, codes)
        report.saved = len(codes)
        logger.info(report.summary())
        return report

    async def create_batch(self, chunk: Chunk) -> list[str] | None:
        """Submit one chunk to the batch endpoint; ``None`` when the chunk failed."""

        payload = BatchCreateRequest(urls=chunk.urls).model_dump()
        try:
            response = await self.client.post(BATCH_PATH, json=payload, headers=self.headers)
        except httpx.HTTPError as exc:
            logger.warning("Failed to create batch at %d: %s", chunk.start, exc)
            return None

        if response.status_code != 201:
            logger.warning("Failed to create batch at %d: status %d", chunk.start, response.status_code)
            return None

        try:
            body = BatchCreateResponse.model_validate_json(response.content)
        except ValidationError as exc:
            logger.warning("Failed to create batch at %d: malformed response (%s)", chunk.start, exc)
            return None

        if len(body.urls) < chunk.size:
            logger.warning(
                "Batch at %d confirmed %d of %d URLs", chunk.start, len(body.urls), chunk.size
            )
        return [record.short_code for record in body.urls]

    async def create_individually(self, chunk: Chunk) -> list[str]:
        """Create every URL of ``chunk`` concurrently and wait for all of them."""

        collected: list[str] = []

        async def create_one(index: int) -> None:
            record = await self.create_one(index)
            if record is not None:
                collected.append(record.short_code)

        async with asyncio.TaskGroup() as group:
            for index in range(chunk.start, chunk.start + chunk.size):
                group.create_task(create_one(index))
        return collected

    async def create_one(self, index: int) -> SeedRecord | None:
        payload = CreateURLRequest(url=seed_url(index)).model_dump()
        try:
            response = await self.client.post(CREATE_PATH, json=payload, headers=self.headers)
        except httpx.HTTPError as exc:
            logger.warning("Failed to create URL %d: %s", index, exc)
            return None

        if response.status_code != 201:
            logger.warning("Failed to create URL %d: status %d", index, response.status_code)
            return None

        try:
            return SeedRecord.model_validate_json(response.content)
        except ValidationError as exc:
            logger.warning("Failed to create URL %d: malformed response (%s)", index, exc)
            return None
