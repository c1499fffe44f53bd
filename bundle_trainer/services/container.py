"""
services/container.py
──────────────────────────────────────────────────────────────────────────────
Dependency Injection container.

THIS IS THE ONLY FILE THAT NAMES CONCRETE ADAPTER CLASSES.

Object graph (one training-service client shared by submitter and poller):

  VisualRecognitionAdapter ─┬─▶ JobSubmitter ◀── ArchiveDirectorySource
                            └─▶ CompletionPoller
  JobSubmitter + CompletionPoller ─▶ TrainingOrchestrator
  TrainingOrchestrator + JsonFileResultStore ─▶ CacheGateway

Replace the training service:
  - from bundle_trainer.adapters.visual_recognition import VisualRecognitionAdapter
  + from bundle_trainer.adapters.other_service import OtherServiceAdapter

Thread safety:
  @lru_cache(maxsize=1) makes get_gateway() return the same instance across
  calls.  Use build_gateway(settings) to wire a one-off graph (CLI overrides,
  tests).
"""
from __future__ import annotations

import logging
from functools import lru_cache

from bundle_trainer.adapters.json_store import JsonFileResultStore
from bundle_trainer.adapters.sample_archives import ArchiveDirectorySource
from bundle_trainer.adapters.visual_recognition import VisualRecognitionAdapter
from bundle_trainer.config.settings import Settings, get_settings
from bundle_trainer.domain.exceptions import ConfigurationError
from bundle_trainer.services.cache_gateway import CacheGateway
from bundle_trainer.services.orchestrator import TrainingOrchestrator
from bundle_trainer.services.poller import CompletionPoller
from bundle_trainer.services.submitter import JobSubmitter

logger = logging.getLogger(__name__)


def _validate(settings: Settings) -> None:
    if settings.min_tags < 1:
        raise ConfigurationError(f"MIN_TAGS must be >= 1, got {settings.min_tags}")
    if settings.concurrency < 1:
        raise ConfigurationError(f"CONCURRENCY must be >= 1, got {settings.concurrency}")
    if settings.polling_delay < 0 or settings.cooldown_delay < 0:
        raise ConfigurationError("POLLING_DELAY and COOLDOWN_DELAY must be >= 0")
    if settings.max_polls < 0:
        raise ConfigurationError(f"MAX_POLLS must be >= 0, got {settings.max_polls}")


def build_gateway(settings: Settings) -> CacheGateway:
    """Wire a CacheGateway from explicit settings.

    Raises:
        ConfigurationError:  On invalid numeric settings or failure policy.
        AuthenticationError: If API_KEY is empty.
    """
    _validate(settings)
    logger.info(
        "Building CacheGateway | bundles_dir=%s cache_file=%s",
        settings.bundles_dir,
        settings.cache_file,
    )

    # ── Infrastructure adapters ────────────────────────────────────────────
    service = VisualRecognitionAdapter(settings)             # TrainingServicePort
    samples = ArchiveDirectorySource(settings.bundles_dir)   # SampleSourcePort
    store = JsonFileResultStore(settings.cache_file)         # ResultStorePort

    # ── Services (receive only Port interfaces, not concrete types) ────────
    submitter = JobSubmitter(service=service, samples=samples, settings=settings)
    poller = CompletionPoller(service=service, settings=settings)
    orchestrator = TrainingOrchestrator(
        submitter=submitter,
        poller=poller,
        settings=settings,
    )
    return CacheGateway(
        store=store,
        samples=samples,
        orchestrator=orchestrator,
        settings=settings,
    )


@lru_cache(maxsize=1)
def get_gateway() -> CacheGateway:
    """Build and return the fully wired CacheGateway singleton."""
    return build_gateway(get_settings())
