#!/usr/bin/env python3
"""Entry text parsing and group filtering for the wheel."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List

DEFAULT_GROUP = "General"
ALL_GROUPS = "All Groups"
DELIMITER = "|"


@dataclass(frozen=True)
class Entry:
    name: str
    group: str
    source_line: str


def parse_entry_line(line: str) -> Entry | None:
    """Parse a single ``Name`` or ``Name | Group`` line.

    Returns ``None`` for blank lines. Malformed lines never fail: an empty
    group falls back to the default group and an empty name keeps the whole
    line as the name.
    """
    text = line.strip()
    if not text:
        return None
    parts = text.split(DELIMITER)
    name = parts[0].strip()
    group = parts[1].strip() if len(parts) > 1 else ""
    if not name:
        name = text
    return Entry(name=name, group=group or DEFAULT_GROUP, source_line=text)


def parse_entries(raw_text: str) -> List[Entry]:
    entries = []
    for line in raw_text.split("\n"):
        entry = parse_entry_line(line)
        if entry is not None:
            entries.append(entry)
    return entries


def serialize_entries(entries: Iterable[Entry]) -> str:
    return "\n".join(entry.source_line for entry in entries)


def distinct_groups(entries: Iterable[Entry]) -> List[str]:
    """Sorted distinct groups, always led by the "all groups" sentinel."""
    return [ALL_GROUPS, *sorted({entry.group for entry in entries})]


def filter_entries(entries: List[Entry], selected_group: str) -> List[Entry]:
    if selected_group == ALL_GROUPS:
        return list(entries)
    return [entry for entry in entries if entry.group == selected_group]


def resolve_group_selection(selected_group: str, groups: Iterable[str]) -> str:
    # A group can disappear when its last entry is removed or edited away.
    if selected_group != ALL_GROUPS and selected_group not in set(groups):
        return ALL_GROUPS
    return selected_group


def active_names(entries: Iterable[Entry]) -> List[str]:
    return [entry.name for entry in entries]


def group_lookup(entries: Iterable[Entry]) -> Dict[str, str]:
    lookup: Dict[str, str] = {}
    for entry in entries:
        lookup.setdefault(entry.name, entry.group)
    return lookup


__all__ = [
    "ALL_GROUPS",
    "DEFAULT_GROUP",
    "Entry",
    "active_names",
    "distinct_groups",
    "filter_entries",
    "group_lookup",
    "parse_entries",
    "parse_entry_line",
    "resolve_group_selection",
    "serialize_entries",
]
