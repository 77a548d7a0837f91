#!/usr/bin/env python3
"""Rendering helpers for the wheel window."""

from __future__ import annotations

import math
import tkinter as tk

from PIL import Image, ImageTk

from lottery import resolve_path

SEGMENT_COLORS = [
    "#b91c1c",
    "#15803d",
    "#b45309",
    "#991b1b",
    "#166534",
    "#a16207",
    "#7f1d1d",
    "#14532d",
]

MAX_LABELLED_SEGMENTS = 200
MAX_OUTLINED_SEGMENTS = 500
LABEL_LIMIT = 20


def segment_color(index: int) -> str:
    return SEGMENT_COLORS[index % len(SEGMENT_COLORS)]


def display_label(name: str) -> str:
    if len(name) > LABEL_LIMIT:
        return name[:LABEL_LIMIT] + "..."
    return name


def label_font_size(count: int) -> int:
    return int(max(10, min(24, 400 / max(1, count))))


class WheelWindowRender:
    # ---------------- background ----------------
    def _load_background(self) -> None:
        self.canvas.configure(bg=self.settings["background_color"])
        if not self.settings.get("background_image"):
            return
        path = resolve_path(self.base_dir, self.settings["background_image"])
        if not path.exists():
            return
        if self.background_original is None:
            self.background_original = Image.open(path)
        width = self.canvas.winfo_width()
        height = self.canvas.winfo_height()
        if width <= 1 or height <= 1:
            return
        resized = self.background_original.resize((width, height), Image.Resampling.LANCZOS)
        self.background_image = ImageTk.PhotoImage(resized)
        if self.background_id is None:
            self.background_id = self.canvas.create_image(0, 0, image=self.background_image, anchor=tk.NW)
        else:
            self.canvas.itemconfigure(self.background_id, image=self.background_image)
        self.canvas.tag_lower(self.background_id)

    # ---------------- wheel ----------------
    def _render_wheel(self) -> None:
        """Redraw the wheel at the engine's current angle. Reads state only."""
        width = self.canvas.winfo_width()
        height = self.canvas.winfo_height()
        if width <= 1 or height <= 1:
            return
        self.canvas.delete("wheel", "text", "overlay")

        items = self.lottery.engine.spin_items if self.lottery.is_spinning else self.lottery.active_names
        size = min(width, height)
        cx = width / 2
        cy = height / 2
        radius = size / 2 - 14

        if not items:
            self.canvas.create_text(
                cx, cy, text="No entries", fill="#94a3b8",
                font=("Helvetica", 20), tags="text",
            )
            return

        count = len(items)
        arc_size = 2 * math.pi / count
        angle = self.lottery.engine.angle
        draw_labels = count <= MAX_LABELLED_SEGMENTS
        outline_width = 0 if count > MAX_OUTLINED_SEGMENTS else 1
        font = ("Helvetica", label_font_size(count), "bold")

        for index, name in enumerate(items):
            # Canvas y grows downward, so a positive wheel angle turns clockwise
            # while Tk arcs are measured counter-clockwise.
            seg_start = angle + index * arc_size
            color = segment_color(index)
            if count == 1:
                self.canvas.create_oval(
                    cx - radius, cy - radius, cx + radius, cy + radius,
                    fill=color, outline="", tags="wheel",
                )
            else:
                self.canvas.create_arc(
                    cx - radius, cy - radius, cx + radius, cy + radius,
                    start=-math.degrees(seg_start + arc_size),
                    extent=math.degrees(arc_size),
                    fill=color,
                    outline="#e2e8f0" if outline_width else color,
                    width=outline_width,
                    tags="wheel",
                )
            if draw_labels:
                mid = seg_start + arc_size / 2
                text_radius = radius * 0.62
                self.canvas.create_text(
                    cx + text_radius * math.cos(mid),
                    cy + text_radius * math.sin(mid),
                    text=display_label(name),
                    fill="white",
                    font=font,
                    angle=-math.degrees(mid) % 360,
                    tags="text",
                )

        # Hub and rim.
        hub = radius * 0.15
        self.canvas.create_oval(cx - hub, cy - hub, cx + hub, cy + hub, fill="#f8fafc", outline="#cbd5e1", width=2, tags="overlay")
        self.canvas.create_oval(cx - radius, cy - radius, cx + radius, cy + radius, outline="#fbbf24", width=8, tags="overlay")

        # The pointer sits at angle 0, on the right edge.
        tip_x = cx + radius - 10
        self.canvas.create_polygon(
            tip_x, cy,
            tip_x + 40, cy - 25,
            tip_x + 40, cy + 25,
            fill="#facc15", outline="", tags="overlay",
        )
        self.canvas.tag_raise("fx_particles")
