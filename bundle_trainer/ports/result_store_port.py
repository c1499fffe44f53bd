"""
ports/result_store_port.py
──────────────────────────────────────────────────────────────────────────────
Abstract interface for persisting a finished result set.

Current implementation: JsonFileResultStore (pretty-printed JSON file).
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from bundle_trainer.domain.models import TrainingOutcome


@runtime_checkable
class ResultStorePort(Protocol):
    """Contract for a write-once result cache."""

    @property
    def location(self) -> str:
        """Human-readable location of the cache (for log messages)."""
        ...

    def exists(self) -> bool:
        """True if a result set has been persisted."""
        ...

    def load(self) -> list[TrainingOutcome]:
        """Read the persisted result set.

        Raises:
            CacheError: If the stored data is unreadable or malformed.
        """
        ...

    def save(self, results: list[TrainingOutcome]) -> None:
        """Persist a result set, replacing anything stored before.

        Raises:
            CacheError: If the data cannot be written.
        """
        ...
