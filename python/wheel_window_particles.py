#!/usr/bin/env python3
"""Celebration effects for the wheel window: confetti and the win sound."""

from __future__ import annotations

import logging
import math
import random

import pygame

from lottery import resolve_path
from wheel_window_render import SEGMENT_COLORS

logger = logging.getLogger(__name__)

CONFETTI_COLORS = ["#b91c1c", "#15803d", "#fbbf24", "#ffffff"]


class WheelWindowParticles:
    def _init_audio(self) -> None:
        self.win_sound = None
        if not self.settings.get("win_sound"):
            return
        path = resolve_path(self.base_dir, self.settings["win_sound"])
        if not path.exists():
            logger.warning("Win sound not found: %s", path)
            return
        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init()
            self.win_sound = pygame.mixer.Sound(str(path))
        except pygame.error as exc:
            logger.warning("Audio unavailable: %s", exc)
            self.win_sound = None

    def _celebrate(self, winners: list[str]) -> None:
        """Celebration hook handed to the lottery; only observes the batch."""
        self._spawn_confetti(min(240, 80 + 20 * len(winners)))
        if self.win_sound:
            try:
                self.win_sound.play()
            except pygame.error as exc:
                logger.warning("Win sound failed: %s", exc)
        if not self.particle_after_id:
            self._animate_particles()

    def _spawn_confetti(self, count: int) -> None:
        width = self.canvas.winfo_width()
        height = self.canvas.winfo_height()
        if width <= 1 or height <= 1:
            return
        colors = CONFETTI_COLORS + SEGMENT_COLORS[:2]
        for origin_x in (width * random.uniform(0.1, 0.3), width * random.uniform(0.7, 0.9)):
            for _ in range(count // 2):
                angle = random.uniform(-math.pi, 0)
                speed = random.uniform(4.0, 11.0)
                self.particles.append(
                    {
                        "x": origin_x,
                        "y": height * random.uniform(0.2, 0.5),
                        "vx": math.cos(angle) * speed,
                        "vy": math.sin(angle) * speed,
                        "life": random.randint(40, 80),
                        "size": random.randint(3, 6),
                        "color": random.choice(colors),
                    }
                )

    def _animate_particles(self) -> None:
        self.particle_after_id = None
        for particle in list(self.particles):
            particle["x"] += particle["vx"]
            particle["y"] += particle["vy"]
            particle["vx"] *= 0.98
            particle["vy"] += 0.25
            particle["life"] -= 1
            if particle["life"] <= 0:
                self.particles.remove(particle)
        self._render_particles()
        if self.particles:
            self.particle_after_id = self.after(30, self._animate_particles)

    def _render_particles(self) -> None:
        self.canvas.delete("fx_particles")
        for particle in self.particles:
            x = particle["x"]
            y = particle["y"]
            size = particle["size"]
            self.canvas.create_rectangle(
                x - size,
                y - size / 2,
                x + size,
                y + size / 2,
                fill=particle["color"],
                outline="",
                tags="fx_particles",
            )
