from __future__ import annotations

import math
import random
import unittest

from spin_engine import (
    IDLE,
    RESOLVED,
    SPINNING,
    TAU,
    FrictionDecayStrategy,
    FrictionSession,
    SpinEngine,
    TimedEaseStrategy,
    advance_spin,
    ease_out_quart,
    make_strategy,
    resolve_winner_index,
    run_until_resolved,
)


class SequenceRandom:
    """Stand-in RNG that replays fixed draws in order."""

    def __init__(self, *values: float) -> None:
        self.values = list(values)

    def random(self) -> float:
        return self.values.pop(0)


class EaseTests(unittest.TestCase):
    def test_endpoints(self) -> None:
        self.assertEqual(ease_out_quart(0.0), 0.0)
        self.assertEqual(ease_out_quart(1.0), 1.0)
        self.assertAlmostEqual(ease_out_quart(0.5), 0.9375)

    def test_monotonic(self) -> None:
        values = [ease_out_quart(step / 200) for step in range(201)]
        for previous, current in zip(values, values[1:]):
            self.assertGreater(current, previous)


class ResolveWinnerIndexTests(unittest.TestCase):
    def test_index_always_in_range(self) -> None:
        rng = random.Random(11)
        for count in (1, 2, 3, 7, 26, 100, 1000):
            for _ in range(300):
                angle = rng.uniform(-50 * TAU, 50 * TAU)
                index = resolve_winner_index(angle, count)
                self.assertTrue(0 <= index < count)

    def test_single_segment(self) -> None:
        for angle in (0.0, 1.0, -3.0, 12345.678, TAU):
            self.assertEqual(resolve_winner_index(angle, 1), 0)

    def test_pointer_reads_rotated_segment(self) -> None:
        # Rotating clockwise by 45 degrees brings the last quarter under the pointer.
        self.assertEqual(resolve_winner_index(math.pi / 4, 4), 3)
        self.assertEqual(resolve_winner_index(3 * math.pi / 2 + 0.1, 4), 0)
        self.assertEqual(resolve_winner_index(math.pi / 2, 2), 1)
        self.assertEqual(resolve_winner_index(10 * math.pi + math.pi / 4, 4), 3)

    def test_empty_wheel_rejected(self) -> None:
        with self.assertRaises(ValueError):
            resolve_winner_index(1.0, 0)


class TimedEaseStrategyTests(unittest.TestCase):
    def test_interpolates_then_snaps_to_target(self) -> None:
        strategy = TimedEaseStrategy()
        session = strategy.start(1.0, 0.0, rotations=5, extra_angle=0.5)
        target = 1.0 + 5 * TAU + 0.5
        self.assertAlmostEqual(session.target_angle, target)
        self.assertEqual(session.duration, 5000.0)

        self.assertEqual(strategy.advance(session, 0.0), (1.0, False))
        angle, done = strategy.advance(session, 2500.0)
        self.assertFalse(done)
        self.assertAlmostEqual(angle, 1.0 + (target - 1.0) * 0.9375)
        self.assertEqual(strategy.advance(session, 5000.0), (target, True))
        self.assertEqual(strategy.advance(session, 9000.0), (target, True))

    def test_sampled_target_range(self) -> None:
        strategy = TimedEaseStrategy(rng=random.Random(5))
        for _ in range(200):
            session = strategy.start(2.0, 0.0)
            travel = session.target_angle - session.start_angle
            self.assertGreaterEqual(travel, 5 * TAU)
            self.assertLess(travel, 11 * TAU)

    def test_injected_draws_are_reproducible(self) -> None:
        strategy = TimedEaseStrategy(rng=SequenceRandom(0.0, 0.125))
        session = strategy.start(0.0, 100.0)
        self.assertAlmostEqual(session.target_angle, 10 * math.pi + math.pi / 4)
        self.assertEqual(advance_spin(strategy, session, 5100.0, 4)[1], 3)

    def test_invalid_duration(self) -> None:
        with self.assertRaises(ValueError):
            TimedEaseStrategy(duration_ms=0)


class FrictionDecayStrategyTests(unittest.TestCase):
    def _run(self, velocity: float) -> list[float]:
        strategy = FrictionDecayStrategy()
        session = strategy.start(0.0, 0.0, velocity=velocity)
        velocities = [session.velocity]
        for _ in range(10_000):
            _, done = strategy.advance(session, 0.0)
            velocities.append(session.velocity)
            if done:
                return velocities
        self.fail("friction spin did not stop")

    def test_velocity_strictly_decreases_and_stops(self) -> None:
        for velocity in (0.25, 0.4, 0.6499):
            velocities = self._run(velocity)
            self.assertEqual(velocities[-1], 0.0)
            moving = velocities[:-1]
            for previous, current in zip(moving, moving[1:]):
                self.assertLess(current, previous)
            self.assertLess(len(velocities), 400)

    def test_angle_accumulates_velocity(self) -> None:
        strategy = FrictionDecayStrategy(friction_factor=0.5, min_velocity=0.1)
        session = FrictionSession(angle=1.0, velocity=0.4)
        angle, done = strategy.advance(session, 0.0)
        self.assertAlmostEqual(angle, 1.4)
        self.assertFalse(done)
        self.assertAlmostEqual(session.velocity, 0.2)
        angle, done = strategy.advance(session, 0.0)
        self.assertAlmostEqual(angle, 1.6)
        self.assertFalse(done)
        angle, done = strategy.advance(session, 0.0)
        self.assertAlmostEqual(angle, 1.7)
        self.assertTrue(done)
        self.assertEqual(session.velocity, 0.0)

    def test_session_contract_per_strategy(self) -> None:
        friction = FrictionDecayStrategy(friction_factor=0.5, min_velocity=0.1)
        friction_session = friction.start(2.0, 0.0, velocity=0.4)
        friction.advance(friction_session, 0.0)
        self.assertAlmostEqual(friction_session.angle, 2.4)
        self.assertAlmostEqual(friction_session.velocity, 0.2)

        timed = TimedEaseStrategy()
        timed_session = timed.start(1.0, 0.0, rotations=5, extra_angle=0.5)
        before = (timed_session.start_angle, timed_session.target_angle, timed_session.start_time)
        timed.advance(timed_session, 2500.0)
        timed.advance(timed_session, 5000.0)
        self.assertEqual((timed_session.start_angle, timed_session.target_angle, timed_session.start_time), before)

    def test_sampled_velocity_range(self) -> None:
        strategy = FrictionDecayStrategy(rng=random.Random(3))
        for _ in range(200):
            velocity = strategy.start(0.0, 0.0).velocity
            self.assertGreaterEqual(velocity, 0.25)
            self.assertLess(velocity, 0.65)

    def test_invalid_factor(self) -> None:
        with self.assertRaises(ValueError):
            FrictionDecayStrategy(friction_factor=1.5)


class MakeStrategyTests(unittest.TestCase):
    def test_known_names(self) -> None:
        self.assertIsInstance(make_strategy("timed_ease"), TimedEaseStrategy)
        strategy = make_strategy("friction_decay", friction_factor=0.9)
        self.assertIsInstance(strategy, FrictionDecayStrategy)
        self.assertEqual(strategy.friction_factor, 0.9)

    def test_unknown_name(self) -> None:
        with self.assertRaises(ValueError):
            make_strategy("gravity")


class SpinEngineTests(unittest.TestCase):
    def setUp(self) -> None:
        self.finished: list[str] = []
        self.engine = SpinEngine(
            TimedEaseStrategy(rng=SequenceRandom(0.0, 0.125, 0.0, 0.125)),
            items=["A", "B", "C", "D"],
            on_finished=self.finished.append,
            clock=lambda: 0.0,
        )

    def test_spin_requires_entries(self) -> None:
        engine = SpinEngine(TimedEaseStrategy(), on_finished=self.finished.append)
        self.assertFalse(engine.spin())
        self.assertEqual(engine.phase, IDLE)
        self.assertIsNone(engine.session)
        self.assertIsNone(engine.tick(10_000.0))
        self.assertEqual(self.finished, [])

    def test_second_spin_rejected_while_spinning(self) -> None:
        self.assertTrue(self.engine.spin())
        session = self.engine.session
        self.assertFalse(self.engine.spin())
        self.assertIs(self.engine.session, session)
        self.assertEqual(self.engine.phase, SPINNING)

    def test_resolves_once_with_callback_after_transition(self) -> None:
        phases: list[str] = []
        self.engine.on_finished = lambda name: (phases.append(self.engine.phase), self.finished.append(name))
        self.engine.spin()
        self.assertIsNone(self.engine.tick(2500.0))
        self.assertEqual(self.engine.tick(5000.0), 3)
        self.assertEqual(self.finished, ["D"])
        self.assertEqual(phases, [RESOLVED])
        self.assertEqual(self.engine.phase, RESOLVED)
        self.assertIsNone(self.engine.session)
        self.assertIsNone(self.engine.tick(6000.0))
        self.assertEqual(self.finished, ["D"])

    def test_new_spin_from_resolved_starts_at_final_angle(self) -> None:
        self.engine.spin()
        self.engine.tick(5000.0)
        final_angle = self.engine.angle
        self.assertTrue(self.engine.spin())
        self.assertEqual(self.engine.session.start_angle, final_angle)

    def test_cancel_fires_nothing(self) -> None:
        self.engine.spin()
        self.engine.tick(1000.0)
        angle = self.engine.angle
        self.assertTrue(self.engine.cancel())
        self.assertEqual(self.engine.phase, IDLE)
        self.assertIsNone(self.engine.tick(5000.0))
        self.assertEqual(self.finished, [])
        self.assertEqual(self.engine.angle, angle)
        self.assertFalse(self.engine.cancel())

    def test_items_snapshot_taken_at_spin_start(self) -> None:
        self.engine.spin()
        self.engine.set_items(["Z"])
        self.engine.tick(5000.0)
        self.assertEqual(self.finished, ["D"])

    def test_strategy_locked_while_spinning(self) -> None:
        self.engine.spin()
        self.assertFalse(self.engine.set_strategy(FrictionDecayStrategy()))
        self.engine.cancel()
        self.assertTrue(self.engine.set_strategy(FrictionDecayStrategy()))


class RunUntilResolvedTests(unittest.TestCase):
    def test_friction_spin_resolves(self) -> None:
        finished: list[str] = []
        engine = SpinEngine(
            FrictionDecayStrategy(rng=random.Random(8)),
            items=["A", "B", "C"],
            on_finished=finished.append,
        )
        engine.spin()
        index = run_until_resolved(engine)
        self.assertIn(index, (0, 1, 2))
        self.assertEqual(finished, [["A", "B", "C"][index]])

    def test_timed_spin_resolves(self) -> None:
        engine = SpinEngine(TimedEaseStrategy(rng=random.Random(1)), items=["A", "B"])
        engine.spin()
        self.assertIn(run_until_resolved(engine), (0, 1))
        self.assertEqual(engine.phase, RESOLVED)

    def test_idle_engine(self) -> None:
        engine = SpinEngine(TimedEaseStrategy(), items=["A"])
        self.assertIsNone(run_until_resolved(engine))

    def test_tick_limit(self) -> None:
        engine = SpinEngine(FrictionDecayStrategy(rng=random.Random(2)), items=["A", "B"])
        engine.spin()
        with self.assertRaises(RuntimeError):
            run_until_resolved(engine, max_ticks=3)
        self.assertEqual(engine.phase, IDLE)


if __name__ == "__main__":
    unittest.main()
