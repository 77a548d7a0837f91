#!/usr/bin/env python3
"""Spin physics and winner resolution for the prize wheel.

The wheel rotates clockwise by ``angle`` radians while the pointer stays fixed
at angle 0 (pointing right). Two interchangeable strategies drive the angle:

* ``TimedEaseStrategy`` interpolates from the start angle to a sampled target
  with a quartic ease-out over a fixed duration.
* ``FrictionDecayStrategy`` adds a sampled velocity every tick and multiplies
  it by a friction factor until it drops under a threshold.

Both finish through the same ``resolve_winner_index``.
"""

from __future__ import annotations

import logging
import math
import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

TAU = 2 * math.pi

IDLE = "idle"
SPINNING = "spinning"
RESOLVED = "resolved"


def ease_out_quart(t: float) -> float:
    """Quartic ease-out: fast start, slow settle. ``t`` is clamped to [0, 1]."""
    t = min(1.0, max(0.0, t))
    return 1 - (1 - t) ** 4


def resolve_winner_index(angle: float, count: int) -> int:
    """Map the accumulated wheel rotation to the segment under the pointer.

    Segment ``i`` covers ``[i * arc, (i + 1) * arc)`` in the unrotated frame.
    The wheel turned by ``angle`` while the pointer did not, so the segment
    under the pointer is the one found a full turn minus the rotation along.
    """
    if count < 1:
        raise ValueError("count must be at least 1")
    arc_size = TAU / count
    normalized = angle % TAU
    rotation_offset = TAU - normalized
    return (math.floor(rotation_offset / arc_size) % count + count) % count


@dataclass
class TimedEaseSession:
    start_angle: float
    target_angle: float
    start_time: float
    duration: float


@dataclass
class FrictionSession:
    angle: float
    velocity: float


class SpinStrategy:
    """Contract shared by the physics strategies."""

    name = ""

    def start(self, angle: float, now: float) -> Any:
        raise NotImplementedError

    def advance(self, session: Any, now: float) -> Tuple[float, bool]:
        """Move ``session`` to ``now`` and return ``(angle, done)``.

        Sessions are owned by the engine and may be updated in place: a
        friction session carries its angle and velocity from tick to tick,
        while a timed session is fixed at start and only read.
        """
        raise NotImplementedError


class TimedEaseStrategy(SpinStrategy):
    name = "timed_ease"

    def __init__(
        self,
        duration_ms: float = 5000.0,
        min_rotations: float = 5.0,
        max_rotations: float = 10.0,
        rng: Optional[random.Random] = None,
    ) -> None:
        if duration_ms <= 0:
            raise ValueError("duration_ms must be positive")
        if max_rotations < min_rotations:
            raise ValueError("max_rotations must not be below min_rotations")
        self.duration_ms = float(duration_ms)
        self.min_rotations = float(min_rotations)
        self.max_rotations = float(max_rotations)
        self.rng = rng or random.Random()

    def start(
        self,
        angle: float,
        now: float,
        rotations: Optional[float] = None,
        extra_angle: Optional[float] = None,
    ) -> TimedEaseSession:
        if rotations is None:
            rotations = self.min_rotations + self.rng.random() * (self.max_rotations - self.min_rotations)
        if extra_angle is None:
            extra_angle = self.rng.random() * TAU
        return TimedEaseSession(
            start_angle=angle,
            target_angle=angle + rotations * TAU + extra_angle,
            start_time=now,
            duration=self.duration_ms,
        )

    def advance(self, session: TimedEaseSession, now: float) -> Tuple[float, bool]:
        elapsed = now - session.start_time
        if elapsed >= session.duration:
            return session.target_angle, True
        progress = ease_out_quart(elapsed / session.duration)
        return session.start_angle + (session.target_angle - session.start_angle) * progress, False


class FrictionDecayStrategy(SpinStrategy):
    name = "friction_decay"

    def __init__(
        self,
        friction_factor: float = 0.975,
        min_velocity: float = 0.0005,
        velocity_range: Tuple[float, float] = (0.25, 0.65),
        rng: Optional[random.Random] = None,
    ) -> None:
        if not 0 < friction_factor < 1:
            raise ValueError("friction_factor must be between 0 and 1")
        if min_velocity <= 0:
            raise ValueError("min_velocity must be positive")
        low, high = velocity_range
        if not 0 < low <= high:
            raise ValueError("velocity_range must be positive and ordered")
        self.friction_factor = float(friction_factor)
        self.min_velocity = float(min_velocity)
        self.velocity_range = (float(low), float(high))
        self.rng = rng or random.Random()

    def start(self, angle: float, now: float, velocity: Optional[float] = None) -> FrictionSession:
        if velocity is None:
            low, high = self.velocity_range
            velocity = low + self.rng.random() * (high - low)
        return FrictionSession(angle=angle, velocity=velocity)

    def advance(self, session: FrictionSession, now: float) -> Tuple[float, bool]:
        # Ticks are frames; wall time does not enter the decay.
        session.angle += session.velocity
        session.velocity *= self.friction_factor
        if session.velocity < self.min_velocity:
            session.velocity = 0.0
            return session.angle, True
        return session.angle, False


STRATEGIES: Dict[str, Callable[..., SpinStrategy]] = {
    TimedEaseStrategy.name: TimedEaseStrategy,
    FrictionDecayStrategy.name: FrictionDecayStrategy,
}


def make_strategy(name: str, **options: Any) -> SpinStrategy:
    try:
        factory = STRATEGIES[name]
    except KeyError as exc:
        known = ", ".join(sorted(STRATEGIES))
        raise ValueError(f"Unknown spin strategy '{name}' (expected one of: {known})") from exc
    return factory(**options)


def advance_spin(strategy: SpinStrategy, session: Any, now: float, count: int) -> Tuple[float, Optional[int]]:
    """One scheduler step: the new angle, plus the winning index once the spin is over."""
    angle, done = strategy.advance(session, now)
    if not done:
        return angle, None
    return angle, resolve_winner_index(angle, count)


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class SpinEngine:
    """Owns the wheel angle and at most one running spin.

    ``spin()`` is a latch, not a lock: while a spin runs, or when there is
    nothing on the wheel, it returns ``False`` and changes nothing. The host
    calls ``tick()`` once per frame until it returns an index.
    """

    def __init__(
        self,
        strategy: SpinStrategy,
        items: Sequence[str] = (),
        on_finished: Optional[Callable[[str], None]] = None,
        clock: Callable[[], float] = monotonic_ms,
        angle: float = 0.0,
    ) -> None:
        self.strategy = strategy
        self.items: List[str] = list(items)
        self.on_finished = on_finished
        self.clock = clock
        self.angle = angle
        self.phase = IDLE
        self.session: Any = None
        self.spin_items: List[str] = []
        self.winner_index: Optional[int] = None

    @property
    def is_spinning(self) -> bool:
        return self.phase == SPINNING

    def set_items(self, items: Sequence[str]) -> None:
        # A running spin keeps resolving against the snapshot taken at its start.
        self.items = list(items)

    def set_strategy(self, strategy: SpinStrategy) -> bool:
        if self.is_spinning:
            return False
        self.strategy = strategy
        return True

    def spin(self) -> bool:
        if self.is_spinning:
            logger.debug("Spin rejected: a spin is already in progress")
            return False
        if not self.items:
            logger.debug("Spin rejected: no active entries")
            return False
        self.spin_items = list(self.items)
        self.session = self.strategy.start(self.angle, self.clock())
        self.winner_index = None
        self.phase = SPINNING
        logger.info("Spin started (%s, %d segments)", self.strategy.name, len(self.spin_items))
        return True

    def tick(self, now: Optional[float] = None) -> Optional[int]:
        if not self.is_spinning:
            return None
        if now is None:
            now = self.clock()
        self.angle, index = advance_spin(self.strategy, self.session, now, len(self.spin_items))
        if index is None:
            return None
        self.session = None
        self.winner_index = index
        self.phase = RESOLVED
        winner = self.spin_items[index]
        logger.info("Spin resolved on index %d (%s)", index, winner)
        if self.on_finished:
            self.on_finished(winner)
        return index

    def cancel(self) -> bool:
        """Abort a running spin without reporting a winner."""
        if not self.is_spinning:
            return False
        self.session = None
        self.spin_items = []
        self.phase = IDLE
        logger.info("Spin cancelled at angle %.3f", self.angle)
        return True


def run_until_resolved(
    engine: SpinEngine,
    frame_ms: float = 1000.0 / 60.0,
    max_ticks: int = 100_000,
    start: Optional[float] = None,
) -> Optional[int]:
    """Drive a started spin on a simulated frame clock.

    Returns the winning index, or ``None`` when no spin is running. Raises
    ``RuntimeError`` if the spin has not stopped after ``max_ticks`` frames.
    """
    if not engine.is_spinning:
        return None
    now = engine.session.start_time if isinstance(engine.session, TimedEaseSession) else (start or 0.0)
    for _ in range(max_ticks):
        now += frame_ms
        index = engine.tick(now)
        if index is not None:
            return index
    engine.cancel()
    raise RuntimeError(f"Spin did not stop within {max_ticks} ticks")


__all__ = [
    "FrictionDecayStrategy",
    "FrictionSession",
    "IDLE",
    "RESOLVED",
    "SPINNING",
    "STRATEGIES",
    "SpinEngine",
    "SpinStrategy",
    "TAU",
    "TimedEaseSession",
    "TimedEaseStrategy",
    "advance_spin",
    "ease_out_quart",
    "make_strategy",
    "monotonic_ms",
    "resolve_winner_index",
    "run_until_resolved",
]
