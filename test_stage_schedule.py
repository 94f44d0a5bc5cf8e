"""
EasySwap Reward Pool - Тестирование расписания стадий
Автор: EasySwap Reward Pool Team
Версия: 1.0.0
"""

import unittest

from core.errors import InvertedRangeError, NotAdjacentError, ScheduleError, UnknownStageError
from core.stage_schedule import RewardStage, StageSchedule
from utils.validators import ValidationError


class TestStageSchedule(unittest.TestCase):
    """Проверка добавления стадий и расчета эмиссии."""

    def setUp(self):
        self.schedule = StageSchedule()
        self.schedule.add_stage(100, 199, 10, 5)
        self.schedule.add_stage(200, 299, 9, 4)
        self.schedule.add_stage(300, 399, 8, 3)
        self.schedule.add_stage(400, 499, 7, 2)
        self.schedule.add_stage(500, 599, 0, 0)

    def test_stages_are_stored_in_order(self):
        self.assertEqual(len(self.schedule), 5)
        self.assertEqual(self.schedule.stage(0), RewardStage(100, 199, 10, 5))
        self.assertEqual(self.schedule.stage(3), RewardStage(400, 499, 7, 2))
        self.assertEqual(self.schedule.stage(4).rate_a, 0)
        self.assertEqual(self.schedule.first_start, 100)
        self.assertEqual(self.schedule.last_end, 599)

    def test_unknown_stage_index(self):
        with self.assertRaises(UnknownStageError):
            self.schedule.stage(5)
        with self.assertRaises(UnknownStageError):
            self.schedule.stage(-1)

    def test_total_rewards_table(self):
        cases = {
            (0, 100000): (3400, 1400),
            (0, 99): (0, 0),
            (99, 100): (10, 5),
            (100, 100): (10, 5),
            (100, 101): (20, 10),
            (100, 199): (1000, 500),
            (199, 199): (10, 5),
            (200, 200): (9, 4),
            (199, 200): (19, 9),
            (499, 499): (7, 2),
            (499, 500): (7, 2),
            (500, 500): (0, 0),
        }
        for (from_block, to_block), expected in cases.items():
            with self.subTest(from_block=from_block, to_block=to_block):
                self.assertEqual(self.schedule.total_rewards(from_block, to_block), expected)

    def test_inverted_range_returns_zero(self):
        self.assertEqual(self.schedule.total_rewards(150, 120), (0, 0))

    def test_stage_must_be_adjacent(self):
        with self.assertRaises(NotAdjacentError):
            self.schedule.add_stage(601, 700, 1, 1)
        with self.assertRaises(NotAdjacentError):
            self.schedule.add_stage(599, 700, 1, 1)
        self.assertEqual(len(self.schedule), 5)

    def test_end_before_start_rejected(self):
        with self.assertRaises(InvertedRangeError):
            self.schedule.add_stage(600, 599, 1, 1)
        self.assertTrue(issubclass(InvertedRangeError, ScheduleError))

    def test_single_block_stage(self):
        schedule = StageSchedule()
        schedule.add_stage(100, 100, 1000, 2000)
        self.assertEqual(schedule.total_rewards(100, 100), (1000, 2000))
        self.assertEqual(schedule.total_rewards(101, 101), (0, 0))

    def test_first_stage_has_no_adjacency_constraint(self):
        schedule = StageSchedule()
        schedule.add_stage(123, 99999, 60, 60)
        self.assertEqual(schedule.first_start, 123)
        self.assertEqual(schedule.total_rewards(124, 124), (60, 60))

    def test_negative_values_rejected(self):
        schedule = StageSchedule()
        with self.assertRaises(ValidationError):
            schedule.add_stage(-1, 10, 1, 1)
        with self.assertRaises(ValidationError):
            schedule.add_stage(1, 10, -5, 1)

    def test_snapshot_restore(self):
        snapshot = self.schedule.snapshot()
        self.schedule.add_stage(600, 699, 1, 1)
        self.schedule.restore(snapshot)
        self.assertEqual(len(self.schedule), 5)
        self.assertEqual(self.schedule.last_end, 599)


if __name__ == "__main__":
    unittest.main()
