"""
ports/training_service_port.py
──────────────────────────────────────────────────────────────────────────────
Abstract interface for the remote classifier training service.

Current implementation: VisualRecognitionAdapter (Visual Recognition v3 REST)
To swap: write a new adapter implementing this Protocol and change ONE line
in services/container.py.

Both methods are blocking.  The async services call them through
asyncio.to_thread so a slow upload never stalls other in-flight jobs.
"""
from __future__ import annotations

from typing import BinaryIO, Mapping, Protocol, runtime_checkable

from bundle_trainer.domain.models import ClassifierDetails


@runtime_checkable
class TrainingServicePort(Protocol):
    """Contract for a classifier training backend."""

    def create_classifier(
        self,
        name: str,
        examples: Mapping[str, BinaryIO],
    ) -> ClassifierDetails:
        """Upload sample archives and start training a classifier.

        Args:
            name:     Human-readable classifier name.
            examples: Upload field name → open binary stream.  Field names
                      are ``<label>_positive_examples`` or
                      ``negative_examples``.

        Returns:
            Initial ClassifierDetails (usually status ``training``).

        Raises:
            AuthenticationError:  On a rejected API key.
            TrainingServiceError: On any other API or transport failure.
        """
        ...

    def get_classifier(self, classifier_id: str) -> ClassifierDetails:
        """Fetch the current state of a classifier.

        Raises:
            ClassifierNotFoundError: When the service answers 404.
            AuthenticationError:     On a rejected API key.
            TrainingServiceError:    On any other API or transport failure.
        """
        ...
