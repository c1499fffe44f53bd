"""
tests/conftest.py
──────────────────────────────────────────────────────────────────────────────
Shared pytest fixtures and mock adapter implementations.

Mock adapters implement the Port Protocols via structural subtyping — they do
NOT inherit from any base class.  pytest uses them to test service logic
without any real training service, archive directory or cache file.

Fixture hierarchy:
  mock_service   → implements TrainingServicePort (scripted statuses)
  mock_samples   → implements SampleSourcePort (in-memory archives)
  memory_store   → implements ResultStorePort (in-memory list)
  fake_sleep     → awaitable sleep that records delays instead of waiting
  submitter      → JobSubmitter wired with mock_service + mock_samples
  poller         → CompletionPoller wired with mock_service + fake_sleep
  orchestrator   → TrainingOrchestrator wired with submitter + poller
  gateway        → CacheGateway wired with all of the above
"""
from __future__ import annotations

import io
import threading
from pathlib import Path
from typing import BinaryIO, Mapping

import pytest

from bundle_trainer.config.settings import Settings
from bundle_trainer.domain.exceptions import ClassifierNotFoundError
from bundle_trainer.domain.models import (
    ClassifierDetails,
    SampleCategory,
    TrainingOutcome,
)
from bundle_trainer.services.cache_gateway import CacheGateway
from bundle_trainer.services.orchestrator import TrainingOrchestrator
from bundle_trainer.services.poller import CompletionPoller
from bundle_trainer.services.submitter import JobSubmitter


# ── Settings fixture ───────────────────────────────────────────────────────

def make_settings(**overrides) -> Settings:
    """Settings with deterministic test defaults; override any field."""
    values = dict(
        api_key="test-key",
        service_url="https://vr.test/api",
        api_version="v3",
        version_date="2015-05-19",
        request_timeout=5,
        polling_delay=2.0,
        cooldown_delay=5.0,
        concurrency=1,
        max_polls=0,
        failure_policy="record",
        min_tags=3,
        negative_pattern=r"negative|non-fruit",
        bundles_dir=Path("/nonexistent/bundles"),
        cache_file=Path("/nonexistent/classifiers.json"),
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture(scope="session")
def settings() -> Settings:
    """Return a Settings instance with sane test defaults."""
    return make_settings()


# ── Mock adapters ──────────────────────────────────────────────────────────

NOT_FOUND = "not-found"


class MockTrainingService:
    """Scripted fake training service.

    ``script`` maps a classifier name to the statuses returned by successive
    get_classifier calls.  An entry may be a status string, the NOT_FOUND
    marker (raises ClassifierNotFoundError) or an exception instance to
    raise.  Once a script is exhausted the last entry repeats; unscripted
    classifiers are ready on the first poll.

    ``fail_create`` maps a classifier name to an exception raised by
    create_classifier.

    Every call is appended to ``events`` as ("create" | "get", name).
    """

    def __init__(self) -> None:
        self.script: dict[str, list] = {}
        self.fail_create: dict[str, Exception] = {}
        self.explanations: dict[str, str] = {}
        self.events: list[tuple[str, str]] = []
        self.uploads: dict[str, dict[str, bytes]] = {}
        self._polls: dict[str, int] = {}
        self._lock = threading.Lock()

    @staticmethod
    def id_for(name: str) -> str:
        return f"{name}_1234"

    def create_classifier(
        self,
        name: str,
        examples: Mapping[str, BinaryIO],
    ) -> ClassifierDetails:
        with self._lock:
            self.events.append(("create", name))
            self.uploads[name] = {k: v.read() for k, v in examples.items()}
        if name in self.fail_create:
            raise self.fail_create[name]
        return ClassifierDetails(
            classifier_id=self.id_for(name),
            name=name,
            status="training",
            created="2016-05-20T14:03:11.000Z",
        )

    def get_classifier(self, classifier_id: str) -> ClassifierDetails:
        name = classifier_id.rsplit("_", 1)[0]
        with self._lock:
            self.events.append(("get", name))
            n = self._polls.get(name, 0)
            self._polls[name] = n + 1
        steps = self.script.get(name, ["ready"])
        step = steps[min(n, len(steps) - 1)]
        if step == NOT_FOUND:
            raise ClassifierNotFoundError(classifier_id)
        if isinstance(step, Exception):
            raise step
        return ClassifierDetails(
            classifier_id=classifier_id,
            name=name,
            status=step,
            created="2016-05-20T14:03:11.000Z",
            explanation=self.explanations.get(name) if step == "failed" else None,
        )

    def polls(self, name: str) -> int:
        return self._polls.get(name, 0)


class MockSampleSource:
    """In-memory archive store; remembers every stream it hands out."""

    def __init__(self, categories: dict[str, list[str]] | None = None) -> None:
        self.categories = categories or {
            "fruit": ["apple", "banana", "non-fruit", "orange"],
            "pets": ["cat", "dog"],
        }
        self.opened: list[io.BytesIO] = []

    def list_categories(self) -> list[SampleCategory]:
        return [
            SampleCategory(name=name, labels=tuple(labels))
            for name, labels in self.categories.items()
        ]

    def open_archive(self, category: str, label: str) -> BinaryIO:
        if label not in self.categories.get(category, []):
            raise FileNotFoundError(f"{category}/{label}.zip")
        stream = io.BytesIO(f"{category}/{label}".encode())
        self.opened.append(stream)
        return stream


class MemoryResultStore:
    """In-memory result cache."""

    location = "memory://classifiers.json"

    def __init__(self, results: list[TrainingOutcome] | None = None) -> None:
        self.results = results
        self.saves = 0

    def exists(self) -> bool:
        return self.results is not None

    def load(self) -> list[TrainingOutcome]:
        return list(self.results or [])

    def save(self, results: list[TrainingOutcome]) -> None:
        self.saves += 1
        self.results = list(results)


class FakeSleep:
    """Awaitable stand-in for asyncio.sleep that records each delay."""

    def __init__(self, events: list | None = None) -> None:
        self.delays: list[float] = []
        self._events = events

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if self._events is not None:
            self._events.append(("sleep", delay))


# ── pytest fixtures ────────────────────────────────────────────────────────

@pytest.fixture
def mock_service():
    return MockTrainingService()


@pytest.fixture
def mock_samples():
    return MockSampleSource()


@pytest.fixture
def memory_store():
    return MemoryResultStore()


@pytest.fixture
def fake_sleep(mock_service):
    """Sleeps are logged into the service's event stream for ordering checks."""
    return FakeSleep(events=mock_service.events)


@pytest.fixture
def submitter(mock_service, mock_samples, settings):
    return JobSubmitter(service=mock_service, samples=mock_samples, settings=settings)


@pytest.fixture
def poller(mock_service, settings, fake_sleep):
    return CompletionPoller(service=mock_service, settings=settings, sleep=fake_sleep)


@pytest.fixture
def orchestrator(submitter, poller, settings, fake_sleep):
    return TrainingOrchestrator(
        submitter=submitter,
        poller=poller,
        settings=settings,
        sleep=fake_sleep,
    )


@pytest.fixture
def gateway(memory_store, mock_samples, orchestrator, settings):
    return CacheGateway(
        store=memory_store,
        samples=mock_samples,
        orchestrator=orchestrator,
        settings=settings,
    )
