"""
ports/sample_source_port.py
──────────────────────────────────────────────────────────────────────────────
Abstract interface for the store of labelled sample archives.

Current implementation: ArchiveDirectorySource (one sub-directory per
category, one ``<label>.zip`` per label).
"""
from __future__ import annotations

from typing import BinaryIO, Protocol, runtime_checkable

from bundle_trainer.domain.models import SampleCategory


@runtime_checkable
class SampleSourcePort(Protocol):
    """Contract for listing and opening sample archives."""

    def list_categories(self) -> list[SampleCategory]:
        """Return every category with its labels, in discovery order.

        Raises:
            SampleSourceError: If the store cannot be listed.
        """
        ...

    def open_archive(self, category: str, label: str) -> BinaryIO:
        """Open one archive for reading.  The caller closes the stream.

        Raises:
            OSError: If the archive cannot be opened.
        """
        ...
