#!/usr/bin/env python3
"""Removal of winning lines from the raw entry text."""

from __future__ import annotations

import logging
from typing import Iterable

from entry_pool import parse_entry_line

logger = logging.getLogger(__name__)


def remove_winners(raw_text: str, winner_names: Iterable[str]) -> str:
    """Drop every line whose name is a winner and keep all other lines verbatim.

    Lines are split on ``\\n`` only, so a trailing ``\\r`` stays inside its
    line and CRLF text is reproduced byte for byte. Blank lines are kept.
    """
    winners = set(winner_names)
    if not winners:
        return raw_text
    kept = []
    removed = 0
    for line in raw_text.split("\n"):
        entry = parse_entry_line(line)
        if entry is not None and entry.name in winners:
            removed += 1
            continue
        kept.append(line)
    logger.info("Removed %d line(s) for %d winner(s)", removed, len(winners))
    return "\n".join(kept)


__all__ = ["remove_winners"]
