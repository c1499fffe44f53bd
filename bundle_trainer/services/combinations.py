"""
services/combinations.py
──────────────────────────────────────────────────────────────────────────────
Combination generation: every ``min_size`` subset of each category's labels.

Pure Python, no I/O — the category listing is passed in as data so this can
be tested without touching the filesystem.

For a category with n labels this yields C(n, k) combinations, in
category-discovery order and then in the order of the category's labels
(itertools.combinations order).  Categories with fewer than k labels
contribute nothing.
"""
from __future__ import annotations

import itertools
import logging
from typing import Iterable

from bundle_trainer.domain.models import Combination, SampleCategory

logger = logging.getLogger(__name__)


def generate_combinations(
    categories: Iterable[SampleCategory],
    min_size: int,
) -> list[Combination]:
    """Return one Combination per ``min_size``-label subset per category.

    Args:
        categories: Categories in discovery order.
        min_size:   Number of labels trained together (minimum tags).

    Returns:
        List of Combination objects; empty if no category is large enough.

    Raises:
        ValueError: If ``min_size`` is less than 1.
    """
    if min_size < 1:
        raise ValueError(f"min_size must be >= 1, got {min_size}")

    combinations: list[Combination] = []
    for category in categories:
        if len(category.labels) < min_size:
            logger.debug(
                "Skipping category %s: %d labels < %d",
                category.name, len(category.labels), min_size,
            )
            continue
        combinations.extend(
            Combination(category=category.name, labels=labels)
            for labels in itertools.combinations(category.labels, min_size)
        )

    logger.info("Generated %d combinations of %d labels", len(combinations), min_size)
    return combinations
