"""
adapters/json_store.py
──────────────────────────────────────────────────────────────────────────────
Implements ResultStorePort as a single pretty-printed JSON file.

The file is a JSON array of classifier objects, e.g.

  [
    {
      "name": "fruit_apple_banana_non-fruit",
      "classifier_id": "fruit_apple_banana_non-fruit_123456",
      "category": "fruit",
      "classes": ["apple", "banana", "non-fruit"],
      "created": "2016-05-20T14:03:11.000Z",
      "status": "ready"
    }
  ]

Only name, classifier_id and status are required on load; any other keys
are kept and written back.  Written wholesale after a successful run through
a temp file in the same directory, so a failed write never leaves a
truncated cache behind; read wholesale on a cache hit.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from bundle_trainer.domain.exceptions import CacheError
from bundle_trainer.domain.models import ResultSetAdapter, TrainingOutcome

logger = logging.getLogger(__name__)


class JsonFileResultStore:
    """Result cache backed by one JSON file."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def location(self) -> str:
        return str(self._path)

    def exists(self) -> bool:
        return self._path.is_file()

    def load(self) -> list[TrainingOutcome]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise CacheError(f"Failed to read cache file {self._path}: {exc}") from exc
        try:
            results = ResultSetAdapter.validate_json(raw)
        except ValidationError as exc:
            raise CacheError(f"Malformed cache file {self._path}: {exc}") from exc
        logger.info("Loaded %d classifiers from %s", len(results), self._path)
        return results

    def save(self, results: list[TrainingOutcome]) -> None:
        payload = ResultSetAdapter.dump_python(results, mode="json", exclude_none=True)
        text = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
        tmp_name = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp_file:
                tmp_name = tmp_file.name
                tmp_file.write(text)
            os.replace(tmp_name, self._path)
        except OSError as exc:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise CacheError(f"Failed to write cache file {self._path}: {exc}") from exc
        logger.info("Wrote %d classifiers to %s", len(results), self._path)
