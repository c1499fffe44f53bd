"""
services/poller.py
──────────────────────────────────────────────────────────────────────────────
Completion polling: wait for a submitted job to reach ready or failed.

State machine (one instance per job):

    SUBMITTED ──query──▶ PENDING ──delay──▶ query ─┬─▶ READY   (done)
                            ▲                      ├─▶ FAILED  (done)
                            │                      ├─▶ PENDING (training)
                            └── TRANSIENT_ERROR ◀──┘  (404 from the service)

The first query is made immediately; every later one waits POLLING_DELAY.
A 404 right after creation is a known service lag: the handle is given the
``unavailable`` status and retried like any other non-terminal answer,
indefinitely.  Any other error propagates.

Implemented as a loop around an awaitable sleep rather than a self
re-scheduling callback, so the stack never grows with the number of polls.
"""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable

from bundle_trainer.config.settings import Settings
from bundle_trainer.domain.exceptions import ClassifierNotFoundError, PollingTimeoutError
from bundle_trainer.domain.models import (
    ClassifierDetails,
    ClassifierStatus,
    Combination,
    TrainingOutcome,
    outcome_from_details,
)
from bundle_trainer.ports.training_service_port import TrainingServicePort

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


class PollState(str, Enum):
    SUBMITTED       = "submitted"
    PENDING         = "pending"
    TRANSIENT_ERROR = "transient_error"
    READY           = "ready"
    FAILED          = "failed"


class CompletionPoller:
    """Polls the training service until a job is terminal.

    Args:
        service:  Any object satisfying TrainingServicePort.
        settings: Shared application settings (polling_delay, max_polls).
        sleep:    Awaitable delay; replaced by a recorder in tests.
    """

    def __init__(
        self,
        service: TrainingServicePort,
        settings: Settings,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._service = service
        self._delay = settings.polling_delay
        self._max_polls = settings.max_polls
        self._sleep = sleep

    @property
    def delay(self) -> float:
        return self._delay

    async def wait(
        self,
        combination: Combination,
        handle: ClassifierDetails,
    ) -> TrainingOutcome:
        """Poll until the classifier is ready or failed.

        Args:
            combination: The combination the job was created from.
            handle:      Job handle returned by the create call.

        Returns:
            ReadyClassifier or FailedClassifier.

        Raises:
            PollingTimeoutError:  If MAX_POLLS > 0 and is exceeded.
            TrainingServiceError: On any non-transient service failure.
        """
        classifier_id = handle.classifier_id
        state = PollState.SUBMITTED
        polls = 0

        while True:
            if self._max_polls and polls >= self._max_polls:
                raise PollingTimeoutError(
                    f"Classifier {classifier_id} still not trained after {polls} polls"
                )
            if state is not PollState.SUBMITTED:
                await self._sleep(self._delay)
            polls += 1

            try:
                details = await asyncio.to_thread(
                    self._service.get_classifier, classifier_id
                )
            except ClassifierNotFoundError:
                details = handle.model_copy(
                    update={"status": ClassifierStatus.UNAVAILABLE}
                )

            state = _next_state(details.status)
            if state is PollState.TRANSIENT_ERROR:
                logger.info(
                    "404 error for %s, retrying in %.1fs", classifier_id, self._delay
                )
                continue
            if state is PollState.PENDING:
                logger.debug(
                    "Classifier %s is %s (poll %d)",
                    classifier_id, details.status.value, polls,
                )
                continue

            logger.info(
                "Classifier %s finished: %s after %d polls",
                classifier_id, details.status.value, polls,
            )
            return outcome_from_details(combination, details)


def _next_state(status: ClassifierStatus) -> PollState:
    if status is ClassifierStatus.READY:
        return PollState.READY
    if status is ClassifierStatus.FAILED:
        return PollState.FAILED
    if status is ClassifierStatus.UNAVAILABLE:
        return PollState.TRANSIENT_ERROR
    return PollState.PENDING
