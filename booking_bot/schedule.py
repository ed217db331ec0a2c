from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta

from .booking import TimeSlot
from .errors import (
    EndBeforeStart,
    InvalidDay,
    InvalidHour,
    InvalidMinute,
    InvalidMonth,
    MalformedArguments,
    MalformedBookingText,
)

BOOK_USAGE = "/book DD/MM HH:MM-HH:MM"
BOOK_EXAMPLE = "/book 19/2 13:00-14:00"

# Sunday-first, matching the zero-indexed day numbering used in listings.
DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

_BOOKING_TEXT_RE = re.compile(
    r"^(?P<day>\d{1,2})[-/](?P<month>\d{1,2}) "
    r"(?P<start>(?P<start_hour>\d{1,2}):(?P<start_minute>\d{2}))-"
    r"(?P<end>(?P<end_hour>\d{1,2}):(?P<end_minute>\d{2}))$"
)
_BOOKING_ARGS_RE = re.compile(
    r"^(?P<day>\d{1,2})[-/](?P<month>\d{1,2})\s+"
    r"(?P<start_hour>\d{1,2}):(?P<start_minute>\d{2})-(?P<end_hour>\d{1,2}):(?P<end_minute>\d{2})$"
)


@dataclass(frozen=True)
class ParsedBooking(TimeSlot):
    original: str
    day_name: str
    date_display: str
    time_range_display: str


@dataclass(frozen=True)
class BookingArgs:
    day: int
    month: int
    start_hour: int
    start_minute: int
    end_hour: int
    end_minute: int

    @property
    def start_of_day_minutes(self) -> int:
        return self.start_hour * 60 + self.start_minute

    @property
    def end_of_day_minutes(self) -> int:
        return self.end_hour * 60 + self.end_minute

    @property
    def duration_minutes(self) -> int:
        return self.end_of_day_minutes - self.start_of_day_minutes

    def to_booking_text(self) -> str:
        return (
            f"{self.day}/{self.month} "
            f"{self.start_hour:02d}:{self.start_minute:02d}-{self.end_hour:02d}:{self.end_minute:02d}"
        )


def _build_instant(year: int, month: int, day: int, hour: int, minute: int) -> datetime:
    # Days past the end of the month roll into the next one (31/4 -> 1/5).
    return datetime(year, month, 1, hour, minute) + timedelta(days=day - 1)


def day_name_for(value: datetime) -> str:
    return DAY_NAMES[value.isoweekday() % 7]


def parse_booking_text(booking_text: str, reference_datetime: datetime | None = None) -> ParsedBooking:
    """Derive the structured interval and display fields from a stored booking text.

    The year is not part of the text; it is taken from ``reference_datetime``
    (the current clock by default), so a booking's derived year follows the
    calendar year the text is read in.
    """
    match = _BOOKING_TEXT_RE.match(booking_text or "")
    if not match:
        raise MalformedBookingText(booking_text)

    day = int(match.group("day"))
    month = int(match.group("month"))
    start_hour, start_minute = int(match.group("start_hour")), int(match.group("start_minute"))
    end_hour, end_minute = int(match.group("end_hour")), int(match.group("end_minute"))
    if not (1 <= month <= 12 and 1 <= day <= 31):
        raise MalformedBookingText(booking_text)
    if start_hour > 23 or end_hour > 23 or start_minute > 59 or end_minute > 59:
        raise MalformedBookingText(booking_text)

    year = (reference_datetime or datetime.now()).year
    start = _build_instant(year, month, day, start_hour, start_minute)
    end = _build_instant(year, month, day, end_hour, end_minute)
    if start >= end:
        raise MalformedBookingText(booking_text)

    return ParsedBooking(
        start=start,
        end=end,
        original=booking_text,
        day_name=day_name_for(start),
        date_display=f"{day}/{month}",
        time_range_display=f"{match.group('start')}-{match.group('end')}",
    )


def parse_booking_args(raw_args: str) -> BookingArgs:
    """Match and range-check the arguments of a ``/book`` command.

    Checks run in a fixed order: grammar, month, day, hour, minute, then
    start/end ordering. Duration and calendar checks belong to the engine.
    """
    match = _BOOKING_ARGS_RE.match((raw_args or "").strip())
    if not match:
        raise MalformedArguments(BOOK_USAGE, example=BOOK_EXAMPLE)

    args = BookingArgs(**{name: int(value) for name, value in match.groupdict().items()})

    if not 1 <= args.month <= 12:
        raise InvalidMonth(args.month)
    if not 1 <= args.day <= 31:
        raise InvalidDay(args.day)
    for hour in (args.start_hour, args.end_hour):
        if not 0 <= hour <= 23:
            raise InvalidHour(hour)
    for minute in (args.start_minute, args.end_minute):
        if not 0 <= minute <= 59:
            raise InvalidMinute(minute)
    if args.end_of_day_minutes <= args.start_of_day_minutes:
        raise EndBeforeStart(args.to_booking_text().split(" ", 1)[1])

    return args
