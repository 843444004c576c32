import random
import unittest

from matchclock.models import ClockState, Paused, PeriodConfig, Running, Stopped, TimerState
from matchclock.services import clock_controller
from matchclock.services.clock_controller import AdvanceOutcome
from matchclock.services.exceptions import InvalidTransition, ValidationError


class ClockControllerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = ClockState.scheduled(1)

    def test_scheduled_clock_defaults(self) -> None:
        self.assertEqual(self.clock.state, TimerState.STOPPED)
        self.assertEqual(self.clock.current_period, 1)
        self.assertEqual(self.clock.config.number_of_periods, 4)
        self.assertEqual(self.clock.config.period_duration, 600)
        self.assertEqual(clock_controller.derive_remaining(self.clock, 12345), 600)

    def test_running_clock_is_derived_from_start_time(self) -> None:
        running = clock_controller.start(self.clock, 1000)
        self.assertEqual(running.phase, Running(started_at=1000, remaining_baseline=600))
        self.assertEqual(clock_controller.derive_remaining(running, 1000), 600)
        self.assertEqual(clock_controller.derive_remaining(running, 1100.9), 500)
        self.assertEqual(clock_controller.derive_remaining(running, 5000), 0)
        # A wall clock behind the start time never adds time.
        self.assertEqual(clock_controller.derive_remaining(running, 900), 600)

    def test_start_while_running_is_noop(self) -> None:
        running = clock_controller.start(self.clock, 1000)
        self.assertIs(clock_controller.start(running, 1200), running)

    def test_start_wait_pause_round_trip(self) -> None:
        running = clock_controller.start(self.clock, 1000)
        paused = clock_controller.pause(running, 1045)
        self.assertEqual(paused.phase, Paused(remaining_baseline=555, paused_at=1045))
        self.assertEqual(clock_controller.derive_remaining(paused, 9999), 555)

    def test_pause_twice_equals_pause_once(self) -> None:
        running = clock_controller.start(self.clock, 1000)
        once = clock_controller.pause(running, 1100)
        twice = clock_controller.pause(once, 1300)
        self.assertEqual(once, twice)

    def test_pause_stopped_clock_is_invalid(self) -> None:
        with self.assertRaises(InvalidTransition) as ctx:
            clock_controller.pause(self.clock, 1000)
        self.assertEqual(ctx.exception.current_state, "stopped")

    def test_resume_keeps_remaining_baseline(self) -> None:
        paused = clock_controller.pause(clock_controller.start(self.clock, 1000), 1100)
        resumed = clock_controller.start(paused, 2000)
        self.assertEqual(resumed.phase, Running(started_at=2000, remaining_baseline=500))
        self.assertEqual(clock_controller.derive_remaining(resumed, 2100), 400)

    def test_stop_freezes_derived_time(self) -> None:
        running = clock_controller.start(self.clock, 1000)
        stopped = clock_controller.stop(running, 1100)
        self.assertEqual(stopped.phase, Stopped(remaining_baseline=500))

        restarted = clock_controller.start(stopped, 3000)
        self.assertEqual(clock_controller.derive_remaining(restarted, 3050), 450)

    def test_advance_requires_time_zero_or_force(self) -> None:
        running = clock_controller.start(self.clock, 1000)
        with self.assertRaises(InvalidTransition):
            clock_controller.advance_period(running, 1200)

        forced = clock_controller.advance_period(running, 1200, force=True)
        self.assertEqual(forced.outcome, AdvanceOutcome.NEXT_PERIOD)
        self.assertEqual(forced.clock.current_period, 2)
        self.assertEqual(forced.clock.phase, Stopped(remaining_baseline=600))

        expired = clock_controller.advance_period(running, 1600)
        self.assertEqual(expired.clock.current_period, 2)

    def test_regulation_end_without_overtime_completes_match(self) -> None:
        clock = clock_controller.set_period(self.clock, 4)
        result = clock_controller.advance_period(clock, 0, force=True, scores_level=True)
        self.assertTrue(result.match_completed)
        self.assertEqual(result.clock.current_period, 4)
        self.assertFalse(result.clock.is_overtime)
        self.assertEqual(clock_controller.derive_remaining(result.clock, 0), 0)

    def test_overtime_is_tracked_separately_from_periods(self) -> None:
        config = PeriodConfig(overtime_enabled=True, overtime_period_duration=300, max_overtime_periods=2)
        clock = clock_controller.set_period(ClockState.scheduled(1, config), 4)

        first = clock_controller.advance_period(clock, 0, force=True, scores_level=True)
        self.assertEqual(first.outcome, AdvanceOutcome.OVERTIME)
        self.assertTrue(first.clock.is_overtime)
        self.assertEqual(first.clock.overtime_period_number, 1)
        self.assertEqual(first.clock.current_period, 4)
        self.assertEqual(first.clock.phase, Stopped(remaining_baseline=300))
        self.assertFalse(first.golden_goal)

        second = clock_controller.advance_period(first.clock, 0, force=True, scores_level=True)
        self.assertEqual(second.clock.overtime_period_number, 2)

        third = clock_controller.advance_period(second.clock, 0, force=True, scores_level=True)
        self.assertTrue(third.match_completed)
        self.assertEqual(third.clock.overtime_period_number, 2)

    def test_no_overtime_when_scores_differ(self) -> None:
        config = PeriodConfig(overtime_enabled=True)
        clock = clock_controller.set_period(ClockState.scheduled(1, config), 4)
        result = clock_controller.advance_period(clock, 0, force=True, scores_level=False)
        self.assertTrue(result.match_completed)
        self.assertFalse(result.clock.is_overtime)

    def test_golden_goal_is_reported_on_overtime(self) -> None:
        config = PeriodConfig(overtime_enabled=True, golden_goal=True)
        clock = clock_controller.set_period(ClockState.scheduled(1, config), 4)
        result = clock_controller.advance_period(clock, 0, force=True, scores_level=True)
        self.assertTrue(result.golden_goal)
        self.assertEqual(result.to_dict()["outcome"], "overtime")

    def test_set_period_validates_range(self) -> None:
        with self.assertRaises(ValidationError):
            clock_controller.set_period(self.clock, 5)
        with self.assertRaises(ValidationError):
            clock_controller.set_period(self.clock, 0)

    def test_configure_only_when_stopped(self) -> None:
        running = clock_controller.start(self.clock, 1000)
        with self.assertRaises(InvalidTransition):
            clock_controller.configure(running, PeriodConfig(period_duration=480))

        configured = clock_controller.configure(self.clock, PeriodConfig(period_duration=480))
        self.assertEqual(configured.phase, Stopped(remaining_baseline=480))

        partly_played = clock_controller.stop(running, 1500)
        clamped = clock_controller.configure(partly_played, PeriodConfig(period_duration=60))
        self.assertEqual(clamped.phase, Stopped(remaining_baseline=60))

    def test_configure_during_overtime_keeps_overtime_reachable(self) -> None:
        config = PeriodConfig(number_of_periods=1, overtime_enabled=True, max_overtime_periods=3)
        clock = ClockState.scheduled(1, config)
        for _ in range(3):
            clock = clock_controller.advance_period(clock, 0, force=True, scores_level=True).clock
        self.assertEqual(clock.overtime_period_number, 3)

        with self.assertRaises(ValidationError):
            clock_controller.configure(
                clock, PeriodConfig(number_of_periods=1, overtime_enabled=False, max_overtime_periods=3)
            )
        with self.assertRaises(ValidationError):
            clock_controller.configure(
                clock, PeriodConfig(number_of_periods=1, overtime_enabled=True, max_overtime_periods=1)
            )

        longer = clock_controller.configure(
            clock, PeriodConfig(number_of_periods=1, overtime_enabled=True, max_overtime_periods=4)
        )
        self.assertEqual(longer.overtime_period_number, 3)
        self.assertEqual(longer.config.max_overtime_periods, 4)

    def test_reset_keeps_version_and_config(self) -> None:
        config = PeriodConfig(number_of_periods=2, period_duration=900)
        clock = ClockState(
            game_id=3,
            phase=Running(started_at=10, remaining_baseline=100),
            config=config,
            current_period=2,
            version=7,
        )
        fresh = clock_controller.reset(clock)
        self.assertEqual(fresh.version, 7)
        self.assertEqual(fresh.current_period, 1)
        self.assertEqual(fresh.phase, Stopped(remaining_baseline=900))

    def test_remaining_stays_within_period_bounds(self) -> None:
        rng = random.Random(42)
        config = PeriodConfig(overtime_enabled=True, overtime_period_duration=120)
        clock = ClockState.scheduled(1, config)
        now = 0.0
        for _ in range(500):
            now += rng.uniform(0, 400)
            op = rng.choice(["start", "pause", "stop", "advance"])
            try:
                if op == "start":
                    clock = clock_controller.start(clock, now)
                elif op == "pause":
                    clock = clock_controller.pause(clock, now)
                elif op == "stop":
                    clock = clock_controller.stop(clock, now)
                else:
                    result = clock_controller.advance_period(
                        clock, now, force=rng.random() < 0.5, scores_level=rng.random() < 0.5
                    )
                    clock = result.clock
                    if result.match_completed:
                        clock = clock_controller.reset(clock)
            except InvalidTransition:
                pass
            remaining = clock_controller.derive_remaining(clock, now + rng.uniform(0, 900))
            self.assertGreaterEqual(remaining, 0)
            self.assertLessEqual(remaining, clock.active_period_duration)


class ClockStateSerializationTests(unittest.TestCase):
    def test_running_clock_survives_restart(self) -> None:
        config = PeriodConfig(overtime_enabled=True, golden_goal=True)
        clock = clock_controller.start(ClockState.scheduled(9, config), 1000)

        row = clock.to_json()
        self.assertEqual(row["state"], "running")
        self.assertEqual(row["started_at"], 1000)
        self.assertIsNone(row["paused_at"])

        restored = ClockState.from_json(row)
        self.assertEqual(restored, clock)
        self.assertEqual(clock_controller.derive_remaining(restored, 1060), 540)

    def test_running_row_without_start_is_rejected(self) -> None:
        row = ClockState.scheduled(1).to_json()
        row["state"] = "running"
        with self.assertRaises(ValueError):
            ClockState.from_json(row)

    def test_period_config_bounds(self) -> None:
        with self.assertRaises(ValueError):
            PeriodConfig(number_of_periods=11)
        with self.assertRaises(ValueError):
            PeriodConfig(period_duration=30)
        with self.assertRaises(ValueError):
            PeriodConfig(max_overtime_periods=0)


if __name__ == "__main__":
    unittest.main()
