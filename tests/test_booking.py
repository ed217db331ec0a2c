import unittest
from datetime import datetime

from booking_bot import TimeSlot, find_conflict, has_time_overlap


class TestTimeOverlap(unittest.TestCase):
    def setUp(self) -> None:
        self.exist_start = datetime(2026, 2, 19, 10, 0)
        self.exist_end = datetime(2026, 2, 19, 11, 0)

    def test_non_overlapping_before_passes(self) -> None:
        self.assertFalse(
            has_time_overlap(
                datetime(2026, 2, 19, 9, 0),
                datetime(2026, 2, 19, 9, 59),
                self.exist_start,
                self.exist_end,
            )
        )

    def test_exactly_touching_boundary_passes(self) -> None:
        self.assertFalse(
            has_time_overlap(
                datetime(2026, 2, 19, 11, 0),
                datetime(2026, 2, 19, 12, 0),
                self.exist_start,
                self.exist_end,
            )
        )
        self.assertFalse(
            has_time_overlap(
                datetime(2026, 2, 19, 9, 0),
                datetime(2026, 2, 19, 10, 0),
                self.exist_start,
                self.exist_end,
            )
        )

    def test_partially_overlapping_fails(self) -> None:
        self.assertTrue(
            has_time_overlap(
                datetime(2026, 2, 19, 10, 30),
                datetime(2026, 2, 19, 11, 30),
                self.exist_start,
                self.exist_end,
            )
        )

    def test_fully_containing_fails(self) -> None:
        self.assertTrue(
            has_time_overlap(
                datetime(2026, 2, 19, 9, 0),
                datetime(2026, 2, 19, 12, 0),
                self.exist_start,
                self.exist_end,
            )
        )

    def test_rejects_empty_interval(self) -> None:
        with self.assertRaises(ValueError):
            has_time_overlap(self.exist_end, self.exist_start, self.exist_start, self.exist_end)


class TestFindConflict(unittest.TestCase):
    def setUp(self) -> None:
        self.existing = [
            TimeSlot(datetime(2026, 2, 19, 9, 0), datetime(2026, 2, 19, 10, 0)),
            TimeSlot(datetime(2026, 2, 19, 10, 30), datetime(2026, 2, 19, 11, 30)),
        ]

    def test_returns_first_overlapping_slot(self) -> None:
        candidate = TimeSlot(datetime(2026, 2, 19, 11, 0), datetime(2026, 2, 19, 12, 0))
        self.assertEqual(find_conflict(candidate, self.existing), self.existing[1])

    def test_returns_none_when_free(self) -> None:
        candidate = TimeSlot(datetime(2026, 2, 19, 11, 30), datetime(2026, 2, 19, 12, 30))
        self.assertIsNone(find_conflict(candidate, self.existing))

    def test_time_slot_requires_positive_length(self) -> None:
        with self.assertRaises(ValueError):
            TimeSlot(datetime(2026, 2, 19, 10, 0), datetime(2026, 2, 19, 10, 0))

    def test_duration_minutes(self) -> None:
        self.assertEqual(self.existing[0].duration_minutes, 60)


if __name__ == "__main__":
    unittest.main()
