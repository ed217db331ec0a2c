import unittest
from datetime import datetime

from booking_bot import (
    EndBeforeStart,
    InvalidDay,
    InvalidHour,
    InvalidMinute,
    InvalidMonth,
    MalformedArguments,
    MalformedBookingText,
    parse_booking_args,
    parse_booking_text,
)


class TestParseBookingText(unittest.TestCase):
    def setUp(self) -> None:
        self.now = datetime(2026, 2, 18, 9, 0)

    def test_parse_canonical_text(self) -> None:
        parsed = parse_booking_text("19/2 13:00-14:00", reference_datetime=self.now)

        self.assertEqual(parsed.start, datetime(2026, 2, 19, 13, 0))
        self.assertEqual(parsed.end, datetime(2026, 2, 19, 14, 0))
        self.assertEqual(parsed.day_name, "Thursday")
        self.assertEqual(parsed.date_display, "19/2")
        self.assertEqual(parsed.time_range_display, "13:00-14:00")
        self.assertEqual(parsed.original, "19/2 13:00-14:00")

    def test_date_display_is_never_zero_padded(self) -> None:
        parsed = parse_booking_text("05-03 9:30-10:00", reference_datetime=self.now)

        self.assertEqual(parsed.date_display, "5/3")
        self.assertEqual(parsed.start, datetime(2026, 3, 5, 9, 30))
        self.assertEqual(parsed.day_name, "Thursday")

    def test_year_follows_reference_clock(self) -> None:
        parsed = parse_booking_text("19/2 13:00-14:00", reference_datetime=datetime(2027, 1, 1, 0, 0))
        self.assertEqual(parsed.start.year, 2027)

    def test_parse_is_deterministic_for_fixed_clock(self) -> None:
        first = parse_booking_text("1/6 8:00-9:00", reference_datetime=self.now)
        second = parse_booking_text("1/6 8:00-9:00", reference_datetime=self.now)
        self.assertEqual(first, second)

    def test_day_past_month_end_rolls_forward(self) -> None:
        parsed = parse_booking_text("31/4 10:00-11:00", reference_datetime=self.now)

        self.assertEqual(parsed.start, datetime(2026, 5, 1, 10, 0))
        self.assertEqual(parsed.day_name, "Friday")
        self.assertEqual(parsed.date_display, "31/4")

    def test_sunday_is_first_day_name(self) -> None:
        parsed = parse_booking_text("22/2 10:00-11:00", reference_datetime=self.now)
        self.assertEqual(parsed.day_name, "Sunday")

    def test_malformed_text_raises(self) -> None:
        for text in ["", "19/2", "19/2 13:00", "2026-02-19 13:00-14:00", "19/2 13:00-14:00 extra", "19/13 10:00-11:00"]:
            with self.subTest(text=text):
                with self.assertRaises(MalformedBookingText):
                    parse_booking_text(text, reference_datetime=self.now)


class TestParseBookingArgs(unittest.TestCase):
    def test_normalizes_separator_and_padding(self) -> None:
        args = parse_booking_args(" 05-03   9:00-10:30 ")

        self.assertEqual(args.to_booking_text(), "5/3 09:00-10:30")
        self.assertEqual(args.duration_minutes, 90)

    def test_grammar_mismatch_includes_usage(self) -> None:
        for raw in ["", "tomorrow 10:00-11:00", "19/2 10-11", "19/2/2026 10:00-11:00"]:
            with self.subTest(raw=raw):
                with self.assertRaises(MalformedArguments) as context:
                    parse_booking_args(raw)
                self.assertIn("Usage: /book DD/MM HH:MM-HH:MM", str(context.exception))

    def test_range_checks_in_order(self) -> None:
        cases = [
            ("31/13 10:00-11:00", InvalidMonth),
            ("0/12 10:00-11:00", InvalidDay),
            ("32/1 10:00-11:00", InvalidDay),
            ("1/1 24:00-25:00", InvalidHour),
            ("1/1 10:00-11:60", InvalidMinute),
            ("1/1 11:00-10:00", EndBeforeStart),
            ("1/1 10:00-10:00", EndBeforeStart),
        ]
        for raw, error_type in cases:
            with self.subTest(raw=raw):
                with self.assertRaises(error_type):
                    parse_booking_args(raw)

    def test_invalid_month_message_names_the_month(self) -> None:
        with self.assertRaises(InvalidMonth) as context:
            parse_booking_args("31/13 10:00-11:00")
        self.assertIn("Invalid month: 13", str(context.exception))


if __name__ == "__main__":
    unittest.main()
