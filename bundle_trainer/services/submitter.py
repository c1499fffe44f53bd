"""
services/submitter.py
──────────────────────────────────────────────────────────────────────────────
Job submission: Combination → TrainingRequest → classifier creation call.

Label routing:
  • a label matching NEGATIVE_PATTERN (default ``negative|non-fruit``)
    becomes the single ``negative_examples`` upload
  • every other label becomes its own ``<label>_positive_examples`` upload

Submission is never retried here.  Any error from the archive store or the
training service propagates to the orchestrator, which treats it as fatal.
"""
from __future__ import annotations

import logging
import re
from contextlib import ExitStack

from bundle_trainer.config.settings import Settings
from bundle_trainer.domain.exceptions import ConfigurationError, InvalidCombinationError
from bundle_trainer.domain.models import (
    ArchiveRef,
    ClassifierDetails,
    Combination,
    TrainingRequest,
)
from bundle_trainer.ports.sample_source_port import SampleSourcePort
from bundle_trainer.ports.training_service_port import TrainingServicePort

logger = logging.getLogger(__name__)

NEGATIVE_FIELD = "negative_examples"
POSITIVE_FIELD_SUFFIX = "_positive_examples"


class JobSubmitter:
    """Builds and submits one training job per combination.

    Args:
        service:  Any object satisfying TrainingServicePort.
        samples:  Any object satisfying SampleSourcePort.
        settings: Shared application settings.
    """

    def __init__(
        self,
        service: TrainingServicePort,
        samples: SampleSourcePort,
        settings: Settings,
    ) -> None:
        self._service = service
        self._samples = samples
        try:
            self._negative_re = re.compile(settings.negative_pattern)
        except re.error as exc:
            raise ConfigurationError(
                f"Invalid NEGATIVE_PATTERN {settings.negative_pattern!r}: {exc}"
            ) from exc

    # ── Public API ─────────────────────────────────────────────────────────

    def is_negative(self, label: str) -> bool:
        return self._negative_re.search(label) is not None

    def build_request(self, combination: Combination) -> TrainingRequest:
        """Map a combination's labels onto upload slots.

        Raises:
            InvalidCombinationError: If more than one label is negative.
        """
        positives: list[ArchiveRef] = []
        negative: ArchiveRef | None = None

        for label in combination.labels:
            if self.is_negative(label):
                if negative is not None:
                    raise InvalidCombinationError(
                        f"{combination.name}: labels {negative.label!r} and "
                        f"{label!r} both match the negative pattern"
                    )
                negative = ArchiveRef(
                    category=combination.category,
                    label=label,
                    field_name=NEGATIVE_FIELD,
                )
            else:
                positives.append(ArchiveRef(
                    category=combination.category,
                    label=label,
                    field_name=f"{label}{POSITIVE_FIELD_SUFFIX}",
                ))

        return TrainingRequest(
            name=combination.name,
            positive_examples=positives,
            negative_examples=negative,
        )

    def submit(self, combination: Combination) -> ClassifierDetails:
        """Open the archives and create the classifier.

        Blocking; the orchestrator runs it in a worker thread.  Every
        archive stream is closed before returning, on success or failure.

        Returns:
            The job handle returned by the service.
        """
        request = self.build_request(combination)
        with ExitStack() as stack:
            examples = {
                ref.field_name: stack.enter_context(
                    self._samples.open_archive(ref.category, ref.label)
                )
                for ref in request.archives
            }
            handle = self._service.create_classifier(request.name, examples)

        logger.info(
            "Submitted %s → %s (status=%s)",
            request.name, handle.classifier_id, handle.status.value,
        )
        return handle
