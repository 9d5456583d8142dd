"""Shared pytest fixtures: settings, corpus files, and a fake Locust HTTP session."""

import json
import random
from contextlib import contextmanager
from pathlib import Path
from typing import Callable

import pytest

from shortbench.config import Settings, WorkloadConfig, build_workload_config
from shortbench.corpus import Corpus
from shortbench.enums import BenchType


class FakeResponse:
    """Stand-in for Locust's catch_response response object."""

    def __init__(self, status_code: int = 200, body=None, headers: dict | None = None):
        self.status_code = status_code
        self._body = body
        self.headers = headers or {}
        self.outcome: str | None = None
        self.failure_reason: str | None = None

    def json(self):
        if self._body is None:
            raise ValueError("no JSON body")
        return self._body

    def success(self) -> None:
        self.outcome = "success"

    def failure(self, reason: str) -> None:
        self.outcome = "failure"
        self.failure_reason = reason


def created(short_code: str = "abc123") -> FakeResponse:
    return FakeResponse(201, {"short_code": short_code, "short_url": f"http://test/{short_code}"})


def redirected(location: str = "https://example.com/target") -> FakeResponse:
    return FakeResponse(302, headers={"Location": location})


class FakeSession:
    """Records every request and answers with the configured response factories."""

    def __init__(
        self,
        on_create: Callable[[], FakeResponse] = created,
        on_redirect: Callable[[], FakeResponse] = redirected,
    ):
        self.on_create = on_create
        self.on_redirect = on_redirect
        self.requests: list[tuple[str, str, dict]] = []
        self.responses: list[FakeResponse] = []

    @contextmanager
    def post(self, path: str, **kwargs):
        self.requests.append(("POST", path, kwargs))
        response = self.on_create()
        self.responses.append(response)
        yield response

    @contextmanager
    def get(self, path: str, **kwargs):
        self.requests.append(("GET", path, kwargs))
        response = self.on_redirect()
        self.responses.append(response)
        yield response


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        BASE_URL="http://test",
        CODES_FILE=str(tmp_path / "codes.json"),
        OUTPUT=str(tmp_path / "codes.json"),
    )


@pytest.fixture
def corpus_file(tmp_path: Path) -> Path:
    path = tmp_path / "codes.json"
    path.write_text(json.dumps(["abc123", "def456"]), encoding="utf-8")
    return path


@pytest.fixture
def corpus() -> Corpus:
    return Corpus(["abc123", "def456"], source="memory")


@pytest.fixture
def rng() -> random.Random:
    return random.Random(20240601)


@pytest.fixture
def mixed_config(settings: Settings) -> WorkloadConfig:
    return build_workload_config(settings, BenchType.MIXED)


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def session_factory() -> Callable[..., FakeSession]:
    """Build a session that answers every request with the same status, body and headers."""

    def build(status_code: int, body=None, headers: dict | None = None) -> FakeSession:
        def respond() -> FakeResponse:
            return FakeResponse(status_code, body, headers)

        return FakeSession(on_create=respond, on_redirect=respond)

    return build
