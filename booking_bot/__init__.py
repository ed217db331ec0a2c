from .booking import TimeSlot, find_conflict, has_time_overlap
from .commands import Command, CommandDispatcher, Reply, build_command_table
from .engine import MAX_BOOKING_MINUTES, BookingEngine, BookingListing, UpcomingBooking
from .errors import (
	BookingError,
	BookingNotFound,
	DurationTooLong,
	EndBeforeStart,
	InternalFailure,
	InvalidDay,
	InvalidHour,
	InvalidMinute,
	InvalidMonth,
	MalformedArguments,
	MalformedBookingText,
	NotOwner,
	PastBooking,
	SlotConflict,
)
from .schedule import BookingArgs, ParsedBooking, parse_booking_args, parse_booking_text
from .yaml_store import BookingRecord, BookingStorageError, BookingYamlStore

__all__ = [
	"TimeSlot",
	"has_time_overlap",
	"find_conflict",
	"BookingArgs",
	"ParsedBooking",
	"parse_booking_args",
	"parse_booking_text",
	"BookingRecord",
	"BookingStorageError",
	"BookingYamlStore",
	"MAX_BOOKING_MINUTES",
	"BookingEngine",
	"BookingListing",
	"UpcomingBooking",
	"Command",
	"CommandDispatcher",
	"Reply",
	"build_command_table",
	"BookingError",
	"MalformedArguments",
	"InvalidMonth",
	"InvalidDay",
	"InvalidHour",
	"InvalidMinute",
	"EndBeforeStart",
	"DurationTooLong",
	"PastBooking",
	"SlotConflict",
	"BookingNotFound",
	"NotOwner",
	"MalformedBookingText",
	"InternalFailure",
]
