#!/usr/bin/env python3
"""Append-only winner history and its CSV export."""

from __future__ import annotations

import csv
import io
import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Mapping, Optional

from entry_pool import DEFAULT_GROUP

logger = logging.getLogger(__name__)

CSV_HEADER = ["Name", "Category", "Time"]
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class Winner:
    id: str
    name: str
    category: str
    group: str
    timestamp: datetime


def local_now() -> datetime:
    return datetime.now(timezone.utc).astimezone()


def export_filename(today: Optional[date] = None, index: int = 0) -> str:
    if today is None:
        today = datetime.now(timezone.utc).date()
    suffix = f"_{index}" if index else ""
    return f"spin_winners_{today.isoformat()}{suffix}.csv"


def next_export_path(output_dir: Path, today: Optional[date] = None) -> Path:
    """First free export path for the day; earlier exports are never overwritten."""
    if today is None:
        today = datetime.now(timezone.utc).date()
    index = 0
    path = output_dir / export_filename(today)
    while path.exists():
        index += 1
        path = output_dir / export_filename(today, index)
    return path


class HistoryLedger:
    """Winners in arrival order. Grouping by category is only a view."""

    def __init__(self, clock: Callable[[], datetime] = local_now) -> None:
        self.clock = clock
        self._winners: List[Winner] = []

    def __len__(self) -> int:
        return len(self._winners)

    def __iter__(self) -> Iterator[Winner]:
        return iter(list(self._winners))

    def append(self, names: Iterable[str], category: str, groups: Mapping[str, str]) -> List[Winner]:
        category = category.strip() or DEFAULT_GROUP
        timestamp = self.clock()
        added = [
            Winner(
                id=uuid.uuid4().hex,
                name=name,
                category=category,
                group=groups.get(name) or DEFAULT_GROUP,
                timestamp=timestamp,
            )
            for name in names
        ]
        self._winners.extend(added)
        logger.info("Recorded %d winner(s) under %r", len(added), category)
        return added

    def categories(self) -> List[str]:
        return list(dict.fromkeys(winner.category for winner in self._winners))

    def group_by(self, category: str) -> List[Winner]:
        return [winner for winner in self._winners if winner.category == category]

    def grouped(self) -> Dict[str, List[Winner]]:
        groups: Dict[str, List[Winner]] = {}
        for winner in self._winners:
            groups.setdefault(winner.category, []).append(winner)
        return groups

    def clear(self) -> None:
        self._winners.clear()
        logger.info("History cleared")

    def export(self) -> bytes:
        """CSV bytes: BOM-prefixed UTF-8, bare header, every data field quoted."""
        handle = io.StringIO()
        csv.writer(handle, lineterminator="\n").writerow(CSV_HEADER)
        writer = csv.writer(handle, quoting=csv.QUOTE_ALL, lineterminator="\n")
        for winner in self._winners:
            writer.writerow([winner.name, winner.category, winner.timestamp.strftime(TIME_FORMAT)])
        return handle.getvalue().encode("utf-8-sig")

    def write_export(self, output_dir: Path, today: Optional[date] = None) -> Optional[Path]:
        if not self._winners:
            return None
        output_dir.mkdir(parents=True, exist_ok=True)
        path = next_export_path(output_dir, today)
        # Exclusive create: an existing export is never replaced.
        with path.open("xb") as handle:
            handle.write(self.export())
        logger.info("Exported %d winner(s) to %s", len(self._winners), path)
        return path


__all__ = [
    "CSV_HEADER",
    "HistoryLedger",
    "TIME_FORMAT",
    "Winner",
    "export_filename",
    "local_now",
    "next_export_path",
]
