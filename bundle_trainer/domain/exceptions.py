"""
domain/exceptions.py
──────────────────────────────────────────────────────────────────────────────
Custom exception hierarchy.

All exceptions are rooted at BundleTrainerError so callers can catch broadly
(except BundleTrainerError) or narrowly (except TrainingServiceError).

Failure taxonomy:
  ClassifierNotFoundError → transient; swallowed by the poller, never surfaced
  JobFailedError          → one job failed; only raised under the abort policy
  everything else         → fatal; aborts the run and reaches the CLI
"""
from __future__ import annotations

from typing import Any


class BundleTrainerError(Exception):
    """Base exception for all application errors."""


class ConfigurationError(BundleTrainerError):
    """Raised when required configuration is missing or invalid."""


class AuthenticationError(BundleTrainerError):
    """Raised when the training service rejects the API key."""


class TrainingServiceError(BundleTrainerError):
    """Raised when a training service call fails.

    Attributes:
        status_code: HTTP status returned by the service, or None for
                     transport-level failures (DNS, timeout, reset…).
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ClassifierNotFoundError(TrainingServiceError):
    """Raised when a status query returns 404.

    The service briefly reports freshly created classifiers as missing
    until its state propagates.
    """

    def __init__(self, classifier_id: str) -> None:
        super().__init__(f"Classifier {classifier_id!r} not found", status_code=404)
        self.classifier_id = classifier_id


class SampleSourceError(BundleTrainerError):
    """Raised when the sample archive directory cannot be read."""


class InvalidCombinationError(BundleTrainerError):
    """Raised when a combination cannot be turned into a training request."""


class JobFailedError(BundleTrainerError):
    """Raised when a training job ends in the failed state.

    Only raised under FailurePolicy.ABORT; the default policy records the
    failure in the result set instead.
    """

    def __init__(self, outcome: Any) -> None:
        super().__init__(
            f"Classifier {outcome.name!r} ({outcome.classifier_id}) failed: "
            f"{outcome.explanation or 'no explanation given'}"
        )
        self.outcome = outcome


class PollingTimeoutError(BundleTrainerError):
    """Raised when a job is still training after the poll limit."""


class CacheError(BundleTrainerError):
    """Raised when the result cache cannot be read or written."""


class RunCancelledError(BundleTrainerError):
    """Raised when a run was stopped before every combination finished."""

    def __init__(self, completed: list[Any]) -> None:
        super().__init__(f"Run cancelled after {len(completed)} classifiers")
        self.completed = completed
