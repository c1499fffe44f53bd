"""
adapters/sample_archives.py
──────────────────────────────────────────────────────────────────────────────
Implements SampleSourcePort over a directory tree of zip archives.

Layout:
  <bundles_dir>/
    fruit/
      apple.zip
      banana.zip
      non-fruit.zip      ← label "non-fruit"
    dogs/
      ...

Only directories directly under the base are categories; only ``.zip``
files directly inside a category are labels.  Names are sorted so the
combination order (and therefore the cache file) is reproducible.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO

from bundle_trainer.domain.exceptions import SampleSourceError
from bundle_trainer.domain.models import SampleCategory

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIX = ".zip"


class ArchiveDirectorySource:
    """Reads categories and labels from ``<base>/<category>/<label>.zip``."""

    def __init__(self, base_dir: Path) -> None:
        self._base_dir = Path(base_dir)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def list_categories(self) -> list[SampleCategory]:
        if not self._base_dir.is_dir():
            raise SampleSourceError(
                f"Sample directory not found: {self._base_dir}. "
                "Set the BUNDLES_DIR environment variable."
            )
        try:
            categories = [
                SampleCategory(name=entry.name, labels=self._labels(entry))
                for entry in sorted(self._base_dir.iterdir())
                if entry.is_dir()
            ]
        except OSError as exc:
            raise SampleSourceError(
                f"Failed to scan sample directory {self._base_dir}: {exc}"
            ) from exc

        logger.info(
            "Found %d categories (%d archives) under %s",
            len(categories),
            sum(len(c.labels) for c in categories),
            self._base_dir,
        )
        return categories

    def open_archive(self, category: str, label: str) -> BinaryIO:
        return self.archive_path(category, label).open("rb")

    def archive_path(self, category: str, label: str) -> Path:
        return self._base_dir / category / f"{label}{ARCHIVE_SUFFIX}"

    @staticmethod
    def _labels(category_dir: Path) -> tuple[str, ...]:
        return tuple(
            f.stem
            for f in sorted(category_dir.iterdir())
            if f.is_file() and f.suffix == ARCHIVE_SUFFIX
        )
