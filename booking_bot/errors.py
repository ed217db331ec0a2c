from __future__ import annotations


class BookingError(ValueError):
    """A rule violation that is reported back to the sender as-is."""


class MalformedArguments(BookingError):
    def __init__(self, usage: str, example: str | None = None, hint: str | None = None) -> None:
        self.usage = usage
        lines = [f"Usage: {usage}"]
        if example:
            lines.append(f"Example: {example}")
        if hint:
            lines.append(hint)
        super().__init__("\n".join(lines))


class InvalidMonth(BookingError):
    def __init__(self, month: int) -> None:
        self.month = month
        super().__init__(f"Invalid month: {month}. Month must be between 1 and 12.")


class InvalidDay(BookingError):
    def __init__(self, day: int) -> None:
        self.day = day
        super().__init__(f"Invalid day: {day}. Day must be between 1 and 31.")


class InvalidHour(BookingError):
    def __init__(self, hour: int) -> None:
        self.hour = hour
        super().__init__(f"Invalid hour: {hour}. Hours must be between 0 and 23.")


class InvalidMinute(BookingError):
    def __init__(self, minute: int) -> None:
        self.minute = minute
        super().__init__(f"Invalid minute: {minute}. Minutes must be between 0 and 59.")


class EndBeforeStart(BookingError):
    def __init__(self, time_range: str) -> None:
        self.time_range = time_range
        super().__init__(f"Invalid time range: {time_range}. End time must be after start time.")


class DurationTooLong(BookingError):
    def __init__(self, duration_minutes: int, max_minutes: int) -> None:
        self.duration_minutes = duration_minutes
        self.max_minutes = max_minutes
        super().__init__(
            f"Booking is too long ({duration_minutes} minutes). "
            f"Maximum duration is {max_minutes // 60} hours ({max_minutes} minutes)."
        )


class PastBooking(BookingError):
    def __init__(self, booking_text: str) -> None:
        self.booking_text = booking_text
        super().__init__(f"Cannot book a slot in the past: {booking_text}")


class SlotConflict(BookingError):
    def __init__(self, booking_text: str, conflicting_text: str) -> None:
        self.booking_text = booking_text
        self.conflicting_text = conflicting_text
        super().__init__(f"Slot {booking_text} overlaps with an existing booking: {conflicting_text}")


class BookingNotFound(BookingError):
    def __init__(self, display_index: int) -> None:
        self.display_index = display_index
        super().__init__(f"Booking ID #{display_index} not found. Check IDs with /list.")


class NotOwner(BookingError):
    def __init__(self, display_index: int) -> None:
        self.display_index = display_index
        super().__init__(f"Booking ID #{display_index} belongs to someone else. You can only cancel your own bookings.")


class MalformedBookingText(ValueError):
    def __init__(self, booking_text: str) -> None:
        self.booking_text = booking_text
        super().__init__(f"Malformed booking text: {booking_text!r}")


class InternalFailure(RuntimeError):
    pass
