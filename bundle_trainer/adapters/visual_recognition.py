"""
adapters/visual_recognition.py
──────────────────────────────────────────────────────────────────────────────
Implements TrainingServicePort using the Visual Recognition v3 REST API.

Key behaviour:
  - Uses /{version}/classifiers via raw requests (no vendor SDK dependency)
  - Authenticates with the ``api_key`` query parameter plus the pinned
    ``version`` date on every call
  - create_classifier uploads each archive as a multipart file field
    (``<label>_positive_examples`` / ``negative_examples``)
  - Never retries: retry and polling policy belong to the services layer
  - 404 on a status query → ClassifierNotFoundError, which the poller treats
    as "still training" (the service lags behind its own create call)

Required env vars:
  API_KEY        — service credentials
  SERVICE_URL    — default: the public gateway URL
  VERSION_DATE   — default: 2015-05-19
"""
from __future__ import annotations

import logging
from typing import BinaryIO, Mapping

import requests
from pydantic import ValidationError

from bundle_trainer.config.settings import Settings
from bundle_trainer.domain.exceptions import (
    AuthenticationError,
    ClassifierNotFoundError,
    TrainingServiceError,
)
from bundle_trainer.domain.models import ClassifierDetails

logger = logging.getLogger(__name__)


class VisualRecognitionAdapter:
    """Visual Recognition classifier training adapter.

    Injected into JobSubmitter and CompletionPoller via
    services/container.py.  A single instance is shared by both so the
    credentials are read once per process.
    """

    def __init__(self, settings: Settings) -> None:
        if not settings.api_key:
            raise AuthenticationError(
                "API_KEY is not set. "
                "Add it to your .env file or environment."
            )
        self._settings = settings
        self._classifiers_url = (
            f"{settings.service_url.rstrip('/')}/{settings.api_version}/classifiers"
        )
        self._params = {
            "api_key": settings.api_key,
            "version": settings.version_date,
        }
        logger.debug(
            "VisualRecognitionAdapter ready | url=%s version=%s",
            self._classifiers_url,
            settings.version_date,
        )

    # ── TrainingServicePort implementation ─────────────────────────────────

    def create_classifier(
        self,
        name: str,
        examples: Mapping[str, BinaryIO],
    ) -> ClassifierDetails:
        """Upload the sample archives and start training.

        Args:
            name:     Classifier name.
            examples: Upload field name → open binary stream.

        Returns:
            ClassifierDetails as returned by the create call.

        Raises:
            AuthenticationError:  401 / 403 from the service.
            TrainingServiceError: Any other failure.
        """
        files = {
            field_name: (f"{field_name}.zip", stream, "application/zip")
            for field_name, stream in examples.items()
        }
        logger.info("Creating classifier %s (%d archives)", name, len(files))
        try:
            resp = requests.post(
                self._classifiers_url,
                params=self._params,
                data={"name": name},
                files=files,
                timeout=self._settings.request_timeout,
            )
        except requests.RequestException as exc:
            raise TrainingServiceError(
                f"Create classifier {name!r} request failed: {exc}"
            ) from exc

        self._raise_for_status(resp, f"create classifier {name!r}")
        return self._to_details(resp)

    def get_classifier(self, classifier_id: str) -> ClassifierDetails:
        """Fetch the current training state of a classifier.

        Raises:
            ClassifierNotFoundError: 404 from the service.
            AuthenticationError:     401 / 403 from the service.
            TrainingServiceError:    Any other failure.
        """
        try:
            resp = requests.get(
                f"{self._classifiers_url}/{classifier_id}",
                params=self._params,
                timeout=self._settings.request_timeout,
            )
        except requests.RequestException as exc:
            raise TrainingServiceError(
                f"Get classifier {classifier_id} request failed: {exc}"
            ) from exc

        if resp.status_code == 404:
            raise ClassifierNotFoundError(classifier_id)
        self._raise_for_status(resp, f"get classifier {classifier_id}")
        return self._to_details(resp)

    # ── Private helpers ────────────────────────────────────────────────────

    @staticmethod
    def _raise_for_status(resp: requests.Response, action: str) -> None:
        if resp.status_code in (401, 403):
            raise AuthenticationError(
                f"Training service returned {resp.status_code} on {action}. "
                "Check that API_KEY is valid."
            )
        if not resp.ok:
            raise TrainingServiceError(
                f"Training service HTTP {resp.status_code} on {action}: "
                f"{resp.text[:300]}",
                status_code=resp.status_code,
            )

    @staticmethod
    def _to_details(resp: requests.Response) -> ClassifierDetails:
        """Map the service's classifier JSON onto ClassifierDetails."""
        try:
            data = resp.json()
            classes = [
                c.get("class", "") if isinstance(c, dict) else str(c)
                for c in data.get("classes", [])
            ]
            return ClassifierDetails(
                classifier_id=data["classifier_id"],
                name=data.get("name", ""),
                status=data.get("status"),
                created=data.get("created"),
                explanation=data.get("explanation"),
                classes=classes,
            )
        except (ValueError, KeyError, TypeError, AttributeError, ValidationError) as exc:
            raise TrainingServiceError(
                f"Unexpected classifier response shape: {resp.text[:300]}",
                status_code=resp.status_code,
            ) from exc
