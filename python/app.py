#!/usr/bin/env python3
"""Tkinter UI for the prize wheel."""

from __future__ import annotations

import logging
import sys
import tkinter as tk
from pathlib import Path
from tkinter import messagebox

from lottery import LOG_FORMAT, ensure_default_files, load_config
from wheel_window import WheelLotteryWindow

logger = logging.getLogger(__name__)


class LotteryApp:
    def __init__(self, root: tk.Tk, config_path: Path) -> None:
        self.root = root
        self.root.title("Prize Wheel")
        self.root.geometry("1280x800")
        self.config_path = config_path
        self.base_dir = config_path.parent

        self.config = self._load_config()
        self.window = WheelLotteryWindow(self.root, self.config, self.base_dir, on_close=self._on_closed)
        self.root.bind("<space>", self._handle_space)

    def _load_config(self) -> dict:
        try:
            ensure_default_files(self.config_path)
            return load_config(self.config_path)
        except ValueError as exc:
            messagebox.showerror("Config error", str(exc))
            raise SystemExit(1)

    def _handle_space(self, event: tk.Event) -> None:
        # Typing in the entry list must not trigger a spin.
        if isinstance(event.widget, (tk.Text, tk.Entry)):
            return
        self.window._start_spin()

    def _on_closed(self) -> None:
        logger.info("Window closed")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    config_path = Path("python/config.json")
    if len(sys.argv) > 1:
        config_path = Path(sys.argv[1])
    root = tk.Tk()
    LotteryApp(root, config_path)
    root.mainloop()


if __name__ == "__main__":
    main()
