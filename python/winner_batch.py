#!/usr/bin/env python3
"""Multi-winner draws around the wheel's primary winner."""

from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)

MAX_BATCH_SIZE = 100


def sample_without_replacement(pool: Sequence[str], count: int, rng: Optional[random.Random] = None) -> List[str]:
    """Pick ``count`` items with a Fisher-Yates shuffle stopped after ``count`` swaps."""
    rng = rng or random
    items = list(pool)
    count = max(0, min(count, len(items)))
    for i in range(count):
        j = rng.randrange(i, len(items))
        items[i], items[j] = items[j], items[i]
    return items[:count]


def select_batch(
    primary: str,
    batch_size: int,
    names: Sequence[str],
    rng: Optional[random.Random] = None,
) -> List[str]:
    """Return ``[primary, *extras]`` with extras drawn from the other active names.

    The batch is clamped to what the pool holds; it never repeats a name.
    """
    batch_size = max(1, int(batch_size))
    if batch_size == 1:
        return [primary]
    pool = list(dict.fromkeys(name for name in names if name != primary))
    extras = sample_without_replacement(pool, batch_size - 1, rng)
    if len(extras) < batch_size - 1:
        logger.info("Batch of %d clamped to %d: pool exhausted", batch_size, len(extras) + 1)
    return [primary, *extras]


__all__ = ["MAX_BATCH_SIZE", "sample_without_replacement", "select_batch"]
