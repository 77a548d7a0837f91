#!/usr/bin/env python3
"""Wheel window: entry editor, spinning wheel and winners history."""

from __future__ import annotations

import logging
import random
import tkinter as tk
from pathlib import Path
from tkinter import messagebox, ttk
from typing import Any, Callable

from lottery import WheelLottery, build_strategy, clamp_batch_size, read_entries_text, resolve_path
from spin_engine import STRATEGIES
from wheel_window_particles import WheelWindowParticles
from wheel_window_render import WheelWindowRender
from winner_batch import MAX_BATCH_SIZE

logger = logging.getLogger(__name__)


class WheelLotteryWindow(WheelWindowRender, WheelWindowParticles, tk.Frame):
    """Main window content. The engine advances one tick per ``after`` callback."""

    def __init__(
        self,
        root: tk.Tk,
        config: dict[str, Any],
        base_dir: Path,
        on_close: Callable[[], None] | None = None,
    ) -> None:
        super().__init__(root)
        self.root = root
        self.settings = config
        self.base_dir = base_dir
        self.on_close = on_close
        self.entries_path = resolve_path(base_dir, config["entries_file"])
        self.output_dir = resolve_path(base_dir, config["output_dir"])
        self.tick_interval_ms = max(1, int(config["tick_interval_ms"]))
        self.rng = random.Random()

        self.group_var = tk.StringVar()
        self.category_var = tk.StringVar(value=config["category"])
        self.count_var = tk.IntVar(value=config["batch_size"])
        self.remove_var = tk.BooleanVar(value=config["remove_winner"])
        self.strategy_var = tk.StringVar(value=config["strategy"])
        self.result_var = tk.StringVar(value="Ready")
        self.summary_var = tk.StringVar()

        self.tick_after_id: str | None = None
        self.particle_after_id: str | None = None
        self.particles: list[dict[str, Any]] = []
        self.background_original = None
        self.background_image = None
        self.background_id = None
        self.result_popup: tk.Toplevel | None = None
        self.win_sound = None

        self.lottery = WheelLottery(
            read_entries_text(self.entries_path),
            build_strategy(config, rng=self.rng),
            category=config["category"],
            batch_size=config["batch_size"],
            remove_winner=config["remove_winner"],
            celebrate=self._celebrate,
            rng=self.rng,
        )

        self._build_ui()
        self._init_audio()
        self._load_entries_text()
        self._refresh_groups()
        self._refresh_history()
        self.root.protocol("WM_DELETE_WINDOW", self._handle_close)

    def _build_ui(self) -> None:
        """Canvas on the left, controls and history on the right."""
        self.pack(fill=tk.BOTH, expand=True)

        self.canvas = tk.Canvas(self, bg=self.settings["background_color"], highlightthickness=0)
        self.canvas.pack(side=tk.LEFT, fill=tk.BOTH, expand=True, padx=10, pady=10)
        self.canvas.bind("<Configure>", self._handle_resize)

        control = ttk.Frame(self, width=360, padding=10)
        control.pack(side=tk.RIGHT, fill=tk.Y)
        ttk.Label(control, text="Prize Wheel", font=("Helvetica", 16, "bold")).pack(anchor=tk.W)
        ttk.Label(control, textvariable=self.summary_var, foreground="#888").pack(anchor=tk.W, pady=(0, 8))

        settings = ttk.Frame(control)
        settings.pack(fill=tk.X)
        ttk.Label(settings, text="Group:").grid(row=0, column=0, sticky=tk.W, pady=2)
        self.group_combo = ttk.Combobox(settings, textvariable=self.group_var, state="readonly", width=22)
        self.group_combo.grid(row=0, column=1, sticky=tk.W, pady=2)
        self.group_combo.bind("<<ComboboxSelected>>", self._handle_group_change)

        ttk.Label(settings, text="Prize / category:").grid(row=1, column=0, sticky=tk.W, pady=2)
        self.category_entry = ttk.Entry(settings, textvariable=self.category_var, width=24)
        self.category_entry.grid(row=1, column=1, sticky=tk.W, pady=2)

        ttk.Label(settings, text="Winners per spin:").grid(row=2, column=0, sticky=tk.W, pady=2)
        self.count_spin = ttk.Spinbox(settings, from_=1, to=MAX_BATCH_SIZE, textvariable=self.count_var, width=6)
        self.count_spin.grid(row=2, column=1, sticky=tk.W, pady=2)

        ttk.Label(settings, text="Physics:").grid(row=3, column=0, sticky=tk.W, pady=2)
        self.strategy_combo = ttk.Combobox(
            settings, textvariable=self.strategy_var, values=sorted(STRATEGIES), state="readonly", width=22
        )
        self.strategy_combo.grid(row=3, column=1, sticky=tk.W, pady=2)

        self.remove_check = ttk.Checkbutton(settings, text="Remove winners from list", variable=self.remove_var)
        self.remove_check.grid(row=4, column=0, columnspan=2, sticky=tk.W, pady=(6, 0))

        self.spin_button = ttk.Button(control, text="SPIN", command=self._start_spin)
        self.spin_button.pack(fill=tk.X, pady=8)
        ttk.Label(control, textvariable=self.result_var, font=("Helvetica", 12, "bold")).pack(anchor=tk.W)

        ttk.Label(control, text="Entries (Name | Group)").pack(anchor=tk.W, pady=(10, 2))
        self.entries_text = tk.Text(control, height=12, width=40, wrap=tk.NONE, undo=True)
        self.entries_text.pack(fill=tk.X)
        self.entries_text.bind("<<Modified>>", self._handle_text_modified)

        history_header = ttk.Frame(control)
        history_header.pack(fill=tk.X, pady=(10, 2))
        ttk.Label(history_header, text="Winners History").pack(side=tk.LEFT)
        ttk.Button(history_header, text="Clear All", command=self._clear_history).pack(side=tk.RIGHT)
        ttk.Button(history_header, text="Export CSV", command=self._export_history).pack(side=tk.RIGHT, padx=4)
        self.history_listbox = tk.Listbox(control, height=12, activestyle="none")
        self.history_listbox.pack(fill=tk.BOTH, expand=True)

    # ---------------- entries ----------------
    def _load_entries_text(self) -> None:
        self.entries_text.delete("1.0", tk.END)
        self.entries_text.insert("1.0", self.lottery.raw_text)
        self.entries_text.edit_modified(False)

    def _handle_text_modified(self, event: tk.Event) -> None:
        if not self.entries_text.edit_modified():
            return
        self.entries_text.edit_modified(False)
        if self.lottery.is_spinning:
            return
        self.lottery.raw_text = self.entries_text.get("1.0", "end-1c")
        self._refresh_groups()
        self._render_wheel()

    def _handle_group_change(self, event: tk.Event) -> None:
        self.lottery.selected_group = self.group_var.get()
        self._refresh_groups()
        self._render_wheel()

    def _refresh_groups(self) -> None:
        self.group_combo["values"] = self.lottery.groups
        self.group_var.set(self.lottery.selected_group)
        self.summary_var.set(
            f"{len(self.lottery.active_names)} active entries (of {len(self.lottery.entries)})"
        )

    # ---------------- spin loop ----------------
    def _apply_settings(self) -> None:
        try:
            batch_size = int(self.count_var.get())
        except (tk.TclError, ValueError):
            batch_size = 1
        self.lottery.batch_size = clamp_batch_size(batch_size)
        self.count_var.set(self.lottery.batch_size)
        self.lottery.category = self.category_var.get()
        self.lottery.remove_winner = bool(self.remove_var.get())
        if self.strategy_var.get() != self.lottery.engine.strategy.name:
            self.lottery.set_strategy(build_strategy(self.settings, self.strategy_var.get(), rng=self.rng))

    def _set_controls_state(self, spinning: bool) -> None:
        state = tk.DISABLED if spinning else tk.NORMAL
        self.spin_button.configure(state=state)
        self.entries_text.configure(state=state)
        self.category_entry.configure(state=state)
        self.count_spin.configure(state=state)
        self.remove_check.configure(state=state)
        self.group_combo.configure(state=tk.DISABLED if spinning else "readonly")
        self.strategy_combo.configure(state=tk.DISABLED if spinning else "readonly")

    def _start_spin(self) -> None:
        if self.result_popup is not None:
            return
        self._apply_settings()
        if not self.lottery.spin():
            if not self.lottery.active_names:
                self.result_var.set("No entries to spin")
            return
        self._set_controls_state(spinning=True)
        self.result_var.set("Spinning...")
        self.tick_after_id = self.after(self.tick_interval_ms, self._tick)

    def _tick(self) -> None:
        self.tick_after_id = None
        if self.canvas.winfo_width() <= 1 or self.canvas.winfo_height() <= 1:
            self._cancel_spin()
            return
        index = self.lottery.tick()
        self._render_wheel()
        if index is None:
            if self.lottery.is_spinning:
                self.tick_after_id = self.after(self.tick_interval_ms, self._tick)
            return
        self._set_controls_state(spinning=False)
        self.result_var.set("Winner: " + ", ".join(self.lottery.current_winners))
        self._refresh_history()
        self._show_result_popup(self.lottery.current_winners)

    def _cancel_spin(self) -> None:
        if self.tick_after_id:
            self.after_cancel(self.tick_after_id)
            self.tick_after_id = None
        if self.lottery.cancel():
            self._set_controls_state(spinning=False)
            self.result_var.set("Spin cancelled")

    def _handle_resize(self, event: tk.Event) -> None:
        if (event.width <= 1 or event.height <= 1) and self.lottery.is_spinning:
            self._cancel_spin()
        self._load_background()
        self._render_wheel()

    # ---------------- result ----------------
    def _show_result_popup(self, winners: list[str]) -> None:
        popup = tk.Toplevel(self)
        popup.title("Winner" if len(winners) == 1 else f"{len(winners)} Winners")
        popup.transient(self.root)
        popup.protocol("WM_DELETE_WINDOW", self._close_result_popup)
        frame = ttk.Frame(popup, padding=20)
        frame.pack(fill=tk.BOTH, expand=True)
        category = self.lottery.last_recorded[0].category if self.lottery.last_recorded else self.lottery.category
        ttk.Label(frame, text=category, font=("Helvetica", 12)).pack()
        for name in winners:
            ttk.Label(frame, text=name, font=("Helvetica", 20, "bold")).pack(pady=2)
        ttk.Button(frame, text="Close", command=self._close_result_popup).pack(pady=(12, 0))
        self.result_popup = popup

    def _close_result_popup(self) -> None:
        if self.result_popup is not None:
            self.result_popup.destroy()
            self.result_popup = None
        removed = self.lottery.acknowledge()
        if removed:
            self._load_entries_text()
            self._refresh_groups()
            self.result_var.set(f"Removed {len(removed)} winner(s) from the list")
        self._render_wheel()

    # ---------------- history ----------------
    def _refresh_history(self) -> None:
        self.history_listbox.delete(0, tk.END)
        for category, winners in self.lottery.ledger.grouped().items():
            self.history_listbox.insert(tk.END, f"{category} (Total: {len(winners)})")
            for winner in reversed(winners):
                self.history_listbox.insert(tk.END, f"    {winner.name}  {winner.timestamp:%H:%M}")

    def _export_history(self) -> None:
        path = self.lottery.ledger.write_export(self.output_dir)
        if path is None:
            messagebox.showinfo("Export", "No winners to export yet.")
            return
        messagebox.showinfo("Export", f"Exported to {path}")

    def _clear_history(self) -> None:
        self.lottery.ledger.clear()
        self._refresh_history()

    def _handle_close(self) -> None:
        self._cancel_spin()
        if self.particle_after_id:
            self.after_cancel(self.particle_after_id)
            self.particle_after_id = None
        self.root.destroy()
        if self.on_close:
            self.on_close()
