"""
services/orchestrator.py
──────────────────────────────────────────────────────────────────────────────
Runs submit → poll → cooldown for every combination under a worker limit.

Scheduling:
  • CONCURRENCY worker coroutines share one iterator of combinations, so at
    most CONCURRENCY jobs are in flight and each combination is taken once.
  • After a job finishes its worker waits COOLDOWN_DELAY before taking the
    next combination.  Creating many classifiers back to back produces
    classifiers that do not work properly, hence the default of 1 worker.
  • Results are stored by combination index, so the result set is in
    combination order whatever order the jobs finish in.

Failures:
  • A failed job is recorded as FailedClassifier (FailurePolicy.RECORD) or
    raised as JobFailedError (FailurePolicy.ABORT).
  • Every combination is turned into a TrainingRequest before the first
    submission, so an InvalidCombinationError never follows remote work.
  • Anything else raised by a worker cancels the other workers, starts no
    new combination and propagates unchanged.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Iterator, Sequence

from bundle_trainer.config.settings import Settings
from bundle_trainer.domain.exceptions import (
    ConfigurationError,
    JobFailedError,
    RunCancelledError,
)
from bundle_trainer.domain.models import (
    Combination,
    FailedClassifier,
    FailurePolicy,
    TrainingOutcome,
)
from bundle_trainer.services.poller import CompletionPoller, SleepFn
from bundle_trainer.services.submitter import JobSubmitter

logger = logging.getLogger(__name__)


class TrainingOrchestrator:
    """Bounded-concurrency driver for classifier training jobs.

    Args:
        submitter: JobSubmitter used to create each job.
        poller:    CompletionPoller used to wait for each job.
        settings:  Shared application settings.
        sleep:     Awaitable delay used for the cooldown.
    """

    def __init__(
        self,
        submitter: JobSubmitter,
        poller: CompletionPoller,
        settings: Settings,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._submitter = submitter
        self._poller = poller
        self._sleep = sleep
        self._cooldown = settings.cooldown_delay
        self._concurrency = settings.concurrency
        try:
            self._policy = FailurePolicy(settings.failure_policy.lower())
        except ValueError as exc:
            raise ConfigurationError(
                f"Unknown FAILURE_POLICY '{settings.failure_policy}'. "
                "Valid values: 'record', 'abort'."
            ) from exc
        self._stop_requested = False

    @property
    def policy(self) -> FailurePolicy:
        return self._policy

    # ── Public API ─────────────────────────────────────────────────────────

    def stop(self) -> None:
        """Schedule no further combinations; in-flight jobs still finish."""
        logger.warning("Stop requested — no new classifiers will be submitted")
        self._stop_requested = True

    async def run(
        self,
        combinations: Sequence[Combination],
        concurrency: int | None = None,
    ) -> list[TrainingOutcome]:
        """Train one classifier per combination.

        Args:
            combinations: Combinations in the order results should appear.
            concurrency:  Worker limit; defaults to the CONCURRENCY setting.

        Returns:
            One TrainingOutcome per combination, in input order.

        Raises:
            JobFailedError:    Under FailurePolicy.ABORT when a job fails.
            RunCancelledError: If stop() was called before all jobs ran.
            InvalidCombinationError: If any combination has two negative labels;
                               raised before anything is submitted.
            BundleTrainerError / OSError: Fatal submission or polling errors.
        """
        limit = self._concurrency if concurrency is None else concurrency
        if limit < 1:
            raise ConfigurationError(f"concurrency must be >= 1, got {limit}")

        items = list(combinations)
        # Every combination must map onto a valid request before the first
        # classifier is created remotely.
        for combination in items:
            self._submitter.build_request(combination)

        results: list[TrainingOutcome | None] = [None] * len(items)
        queue = iter(enumerate(items))
        self._stop_requested = False

        logger.info(
            "Training %d classifiers | concurrency=%d policy=%s",
            len(items), limit, self._policy.value,
        )

        workers = [
            asyncio.create_task(self._worker(queue, results, len(items)))
            for _ in range(min(limit, len(items)))
        ]
        try:
            await asyncio.gather(*workers)
        except BaseException:
            for worker in workers:
                worker.cancel()
            await asyncio.gather(*workers, return_exceptions=True)
            raise

        if any(r is None for r in results):
            raise RunCancelledError([r for r in results if r is not None])
        return results  # type: ignore[return-value]

    def run_sync(
        self,
        combinations: Sequence[Combination],
        concurrency: int | None = None,
    ) -> list[TrainingOutcome]:
        """Blocking wrapper around run() for synchronous callers."""
        return asyncio.run(self.run(combinations, concurrency))

    # ── Private helpers ────────────────────────────────────────────────────

    async def _worker(
        self,
        queue: Iterator[tuple[int, Combination]],
        results: list[TrainingOutcome | None],
        total: int,
    ) -> None:
        while not self._stop_requested:
            item = next(queue, None)
            if item is None:
                return
            index, combination = item
            results[index] = await self._process(index, combination, total)

    async def _process(
        self,
        index: int,
        combination: Combination,
        total: int,
    ) -> TrainingOutcome:
        logger.info("[%d/%d] Creating classifier %s", index + 1, total, combination.name)
        handle = await asyncio.to_thread(self._submitter.submit, combination)
        outcome = await self._poller.wait(combination, handle)

        if isinstance(outcome, FailedClassifier):
            logger.warning(
                "Classifier %s failed: %s",
                outcome.name, outcome.explanation or "no explanation given",
            )
            if self._policy is FailurePolicy.ABORT:
                raise JobFailedError(outcome)

        await self._sleep(self._cooldown)
        return outcome
