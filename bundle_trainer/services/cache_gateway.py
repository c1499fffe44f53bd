"""
services/cache_gateway.py
──────────────────────────────────────────────────────────────────────────────
Front door of the system: return cached classifiers or create them.

get_or_create():
  cache present → load and return it; the orchestrator is never touched
  cache absent  → scan archives, generate combinations, train, persist

create_and_persist():
  always train and overwrite the cache (what the CLI does by default)

The presence of the cache is the only freshness signal — delete the file to
force a rebuild.
"""
from __future__ import annotations

import logging

from bundle_trainer.config.settings import Settings
from bundle_trainer.domain.models import Combination, TrainingOutcome
from bundle_trainer.ports.result_store_port import ResultStorePort
from bundle_trainer.ports.sample_source_port import SampleSourcePort
from bundle_trainer.services.combinations import generate_combinations
from bundle_trainer.services.orchestrator import TrainingOrchestrator

logger = logging.getLogger(__name__)


class CacheGateway:
    """Cached access to the trained classifier set.

    Inject via services/container.py.

    Args:
        store:        Any object satisfying ResultStorePort.
        samples:      Any object satisfying SampleSourcePort.
        orchestrator: TrainingOrchestrator used on a cache miss.
        settings:     Shared application settings.
    """

    def __init__(
        self,
        store: ResultStorePort,
        samples: SampleSourcePort,
        orchestrator: TrainingOrchestrator,
        settings: Settings,
    ) -> None:
        self._store = store
        self._samples = samples
        self._orchestrator = orchestrator
        self._min_tags = settings.min_tags

    @property
    def store(self) -> ResultStorePort:
        return self._store

    @property
    def orchestrator(self) -> TrainingOrchestrator:
        return self._orchestrator

    # ── Public API ─────────────────────────────────────────────────────────

    def list_combinations(self) -> list[Combination]:
        """Every combination the archive store currently yields."""
        return generate_combinations(self._samples.list_categories(), self._min_tags)

    def get_or_create(self) -> list[TrainingOutcome]:
        """Return the cached result set, training it first on a miss."""
        if self._store.exists():
            logger.info("Cache hit: %s", self._store.location)
            return self._store.load()
        logger.info("Cache miss: %s — creating classifiers", self._store.location)
        return self.create_and_persist()

    def create_and_persist(self) -> list[TrainingOutcome]:
        """Train every combination and overwrite the cache.

        Nothing is written unless the whole run succeeds.
        """
        combinations = self.list_combinations()
        results = self._orchestrator.run_sync(combinations)
        self._store.save(results)
        return results
