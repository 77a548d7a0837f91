#!/usr/bin/env python3
"""Prize wheel runner: config, the spin controller and a headless CLI.

Usage examples:
  python python/lottery.py groups
  python python/lottery.py spin
  python python/lottery.py spin --group HR --count 3 --category "Grand Prize"
  python python/lottery.py --seed 7 spin --strategy friction_decay --remove --export
"""

from __future__ import annotations

import argparse
import json
import logging
import random
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from entry_pool import (
    ALL_GROUPS,
    Entry,
    active_names,
    distinct_groups,
    filter_entries,
    group_lookup,
    parse_entries,
    resolve_group_selection,
)
from history_ledger import HistoryLedger, Winner
from pool_mutator import remove_winners
from spin_engine import SpinEngine, SpinStrategy, make_strategy, monotonic_ms, run_until_resolved
from winner_batch import MAX_BATCH_SIZE, select_batch

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"

DEFAULT_CONFIG: Dict[str, Any] = {
    "entries_file": "data/entries.txt",
    "output_dir": "output",
    "strategy": "timed_ease",
    "spin_duration_ms": 5000,
    "friction_factor": 0.975,
    "min_velocity": 0.0005,
    "tick_interval_ms": 16,
    "category": "Round 1",
    "batch_size": 1,
    "remove_winner": False,
    "background_color": "#0f172a",
    "background_image": "",
    "win_sound": "",
}

SAMPLE_ENTRIES = """Ali | HR
Beatriz | Accounting
Charles | Engineering
Diya | HR
Eric | Marketing
Fatima | Accounting
Gabriel | Engineering
Hana | Executive
Ivan | Marketing
Jasmine | HR
Kai | Engineering
Liam | Accounting
Mia | HR
Noah | Operations
Olivia | Marketing
Priya | Engineering
Quinn | Operations
Rohan | Executive
Sofia | HR
Thomas | Accounting
Uma | Marketing
Victor | Operations
Wei | Engineering
Xara | Executive
Yara | HR
Zack | Operations"""


def read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def write_json(path: Path, payload: Any) -> None:
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, ensure_ascii=False, indent=2)


def resolve_path(base_dir: Path, raw_path: str) -> Path:
    candidate = Path(raw_path)
    if candidate.is_absolute():
        return candidate
    return base_dir / raw_path


def read_entries_text(path: Path) -> str:
    if not path.exists():
        return ""
    # newline="" keeps CRLF files intact for byte-exact removal.
    with path.open("r", encoding="utf-8", newline="") as handle:
        return handle.read()


def write_entries_text(path: Path, raw_text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as handle:
        handle.write(raw_text)


def ensure_default_files(config_path: Path) -> None:
    """Create a default config and sample entry list next to ``config_path``.

    Raises ``ValueError`` when an existing config is not a JSON object.
    """
    base_dir = config_path.parent
    base_dir.mkdir(parents=True, exist_ok=True)
    if not config_path.exists():
        write_json(config_path, DEFAULT_CONFIG)
        logger.info("Wrote default config to %s", config_path)
    config = read_json(config_path)
    if not isinstance(config, dict):
        raise ValueError("Config must be a JSON object.")
    entries_path = resolve_path(base_dir, config.get("entries_file", DEFAULT_CONFIG["entries_file"]))
    if not entries_path.exists():
        write_entries_text(entries_path, SAMPLE_ENTRIES)
        logger.info("Wrote sample entries to %s", entries_path)


def validate_config(config: Dict[str, Any]) -> Dict[str, Any]:
    for key in ("spin_duration_ms", "friction_factor", "min_velocity", "tick_interval_ms"):
        try:
            config[key] = float(config[key])
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Config value '{key}' must be a number: {config[key]!r}") from exc
    try:
        config["batch_size"] = clamp_batch_size(int(config["batch_size"]))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Config value 'batch_size' must be an integer: {config['batch_size']!r}") from exc
    config["remove_winner"] = bool(config["remove_winner"])
    config["category"] = str(config["category"])
    # Fails early with the list of known strategies.
    build_strategy(config)
    return config


def load_config(config_path: Path) -> Dict[str, Any]:
    config = read_json(config_path)
    if not isinstance(config, dict):
        raise ValueError("Config must be a JSON object.")
    for key, value in DEFAULT_CONFIG.items():
        config.setdefault(key, value)
    return validate_config(config)


def build_strategy(
    config: Dict[str, Any],
    name: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> SpinStrategy:
    name = name or config["strategy"]
    if name == "timed_ease":
        return make_strategy(name, duration_ms=config["spin_duration_ms"], rng=rng)
    if name == "friction_decay":
        return make_strategy(
            name,
            friction_factor=config["friction_factor"],
            min_velocity=config["min_velocity"],
            rng=rng,
        )
    return make_strategy(name)


def clamp_batch_size(value: int) -> int:
    return max(1, min(MAX_BATCH_SIZE, value))


class WheelLottery:
    """Ties the entry pool, the spin engine, batch draws, history and removal together."""

    def __init__(
        self,
        raw_text: str,
        strategy: SpinStrategy,
        category: str = "Round 1",
        batch_size: int = 1,
        remove_winner: bool = False,
        celebrate: Optional[Callable[[List[str]], None]] = None,
        clock: Callable[[], float] = monotonic_ms,
        rng: Optional[random.Random] = None,
        ledger: Optional[HistoryLedger] = None,
    ) -> None:
        self.category = category
        self.batch_size = clamp_batch_size(batch_size)
        self.remove_winner = remove_winner
        self.celebrate = celebrate
        self.rng = rng or random.Random()
        self.ledger = ledger or HistoryLedger()
        self.current_winners: List[str] = []
        self.last_recorded: List[Winner] = []
        self._selected_group = ALL_GROUPS
        self._spin_entries: List[Entry] = []
        self.engine = SpinEngine(strategy, on_finished=self._handle_finished, clock=clock)
        self.raw_text = raw_text

    @property
    def raw_text(self) -> str:
        return self._raw_text

    @raw_text.setter
    def raw_text(self, value: str) -> None:
        self._raw_text = value
        self.entries = parse_entries(value)
        self.groups = distinct_groups(self.entries)
        self._selected_group = resolve_group_selection(self._selected_group, self.groups)
        self._sync_engine()

    @property
    def selected_group(self) -> str:
        return self._selected_group

    @selected_group.setter
    def selected_group(self, value: str) -> None:
        self._selected_group = resolve_group_selection(value, self.groups)
        self._sync_engine()

    @property
    def active_entries(self) -> List[Entry]:
        return filter_entries(self.entries, self._selected_group)

    @property
    def active_names(self) -> List[str]:
        return active_names(self.active_entries)

    @property
    def is_spinning(self) -> bool:
        return self.engine.is_spinning

    def _sync_engine(self) -> None:
        self.engine.set_items(self.active_names)

    def set_strategy(self, strategy: SpinStrategy) -> bool:
        return self.engine.set_strategy(strategy)

    def spin(self) -> bool:
        if not self.engine.spin():
            return False
        self._spin_entries = self.active_entries
        self.current_winners = []
        self.last_recorded = []
        return True

    def tick(self, now: Optional[float] = None) -> Optional[int]:
        return self.engine.tick(now)

    def cancel(self) -> bool:
        return self.engine.cancel()

    def _handle_finished(self, primary: str) -> None:
        pool = active_names(self._spin_entries)
        batch = select_batch(primary, self.batch_size, pool, self.rng)
        self.current_winners = batch
        self.last_recorded = self.ledger.append(batch, self.category, group_lookup(self._spin_entries))
        logger.info("Winners: %s", ", ".join(batch))
        if self.celebrate:
            self.celebrate(list(batch))

    def acknowledge(self) -> List[str]:
        """Close the current result; in remove mode the winners leave the pool.

        Returns the names that were removed.
        """
        removed: List[str] = []
        if self.remove_winner and self.current_winners:
            removed = list(self.current_winners)
            self.raw_text = remove_winners(self.raw_text, removed)
        self.current_winners = []
        return removed


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Prize wheel runner (headless).")
    parser.add_argument(
        "--config",
        default="python/config.json",
        help="Path to config.json (default: python/config.json)",
    )
    parser.add_argument("--seed", type=int, help="Random seed for reproducible spins")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("groups", help="List the groups in the entry file")

    spin_parser = subparsers.add_parser("spin", help="Spin the wheel once")
    spin_parser.add_argument("--group", default=ALL_GROUPS, help="Only spin entries of this group")
    spin_parser.add_argument("--count", type=int, help="Winners to draw in this spin")
    spin_parser.add_argument("--category", help="Category recorded with the winners")
    spin_parser.add_argument("--strategy", help="timed_ease or friction_decay")
    spin_parser.add_argument(
        "--remove",
        action=argparse.BooleanOptionalAction,
        help="Remove winners from the entry file (default: the config's remove_winner)",
    )
    spin_parser.add_argument("--export", action="store_true", help="Export the winners to CSV")

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format=LOG_FORMAT)
    rng = random.Random(args.seed)

    config_path = Path(args.config)
    try:
        ensure_default_files(config_path)
        config = load_config(config_path)
        strategy = build_strategy(config, getattr(args, "strategy", None), rng=rng)
    except ValueError as exc:
        raise SystemExit(f"Config error: {exc}")

    base_dir = config_path.parent
    entries_path = resolve_path(base_dir, config["entries_file"])
    output_dir = resolve_path(base_dir, config["output_dir"])
    raw_text = read_entries_text(entries_path)

    if args.command == "groups":
        entries = parse_entries(raw_text)
        for group in distinct_groups(entries)[1:]:
            count = sum(1 for entry in entries if entry.group == group)
            print(f"{group} ({count})")
        return

    lottery = WheelLottery(
        raw_text,
        strategy,
        category=args.category if args.category is not None else config["category"],
        batch_size=args.count if args.count is not None else config["batch_size"],
        remove_winner=args.remove if args.remove is not None else config["remove_winner"],
        rng=rng,
    )
    if args.group != ALL_GROUPS and args.group not in lottery.groups:
        raise SystemExit(f"Group not found: {args.group}")
    lottery.selected_group = args.group

    if not lottery.spin():
        print("No entries to spin.")
        return
    run_until_resolved(lottery.engine)

    print(f"Winners ({lottery.category}):")
    for winner in lottery.last_recorded:
        print(f"- {winner.name} | {winner.group}")

    removed = lottery.acknowledge()
    if removed:
        write_entries_text(entries_path, lottery.raw_text)
        print(f"Removed {len(removed)} winner(s) from {entries_path}")
    if args.export:
        path = lottery.ledger.write_export(output_dir)
        if path:
            print(f"Exported: {path}")


if __name__ == "__main__":
    main()
