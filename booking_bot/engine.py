from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .booking import find_conflict
from .errors import (
    BookingNotFound,
    DurationTooLong,
    NotOwner,
    PastBooking,
    SlotConflict,
)
from .schedule import ParsedBooking, parse_booking_args, parse_booking_text
from .yaml_store import BookingRecord, BookingYamlStore, normalize_participant_id

MAX_BOOKING_MINUTES = 180
NO_UPCOMING_BOOKINGS = "No upcoming bookings found."


@dataclass(frozen=True)
class UpcomingBooking:
    display_index: int
    record: BookingRecord
    parsed: ParsedBooking

    @property
    def booker_local_part(self) -> str:
        return self.record.booker_id.split("@")[0]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.display_index,
            "booking_text": self.record.booking_text,
            "booker_id": self.record.booker_id,
            "day_name": self.parsed.day_name,
            "date": self.parsed.date_display,
            "time_range": self.parsed.time_range_display,
            "start": self.parsed.start.isoformat(timespec="minutes"),
            "end": self.parsed.end.isoformat(timespec="minutes"),
        }


@dataclass(frozen=True)
class BookingListing:
    text: str
    mentioned_ids: tuple[str, ...] = ()
    bookings: tuple[UpcomingBooking, ...] = ()


class BookingEngine:
    """Validation, listing and cancellation over a conversation's bookings.

    Nothing is cached between calls: every operation re-reads the store and
    re-derives intervals from the stored booking text.
    """

    def __init__(self, store: BookingYamlStore, max_booking_minutes: int = MAX_BOOKING_MINUTES) -> None:
        self.store = store
        self.max_booking_minutes = max_booking_minutes

    def validate_new_booking(
        self,
        conversation_id: str,
        raw_args: str,
        requester_id: str,
        now: datetime | None = None,
    ) -> str:
        """Check a ``/book`` request against the booking rules and store it.

        Returns the canonical booking text on success; raises a
        ``BookingError`` subclass naming the first rule that failed.
        """
        requester_id = normalize_participant_id(requester_id)
        effective_now = now or datetime.now()

        args = parse_booking_args(raw_args)
        if args.duration_minutes > self.max_booking_minutes:
            raise DurationTooLong(args.duration_minutes, self.max_booking_minutes)

        booking_text = args.to_booking_text()
        candidate = parse_booking_text(booking_text, reference_datetime=effective_now)
        if candidate.start < effective_now:
            raise PastBooking(booking_text)

        with self.store.conversation_lock(conversation_id):
            existing = self._parse_records(self.store.read_all(conversation_id), effective_now)
            upcoming = [parsed for _, parsed in existing if parsed.end > effective_now]
            conflict = find_conflict(candidate, upcoming)
            if conflict is not None:
                raise SlotConflict(booking_text, conflict.original)

            self.store.append(
                conversation_id,
                BookingRecord(
                    booking_text=booking_text,
                    booker_id=requester_id,
                    created_at=effective_now.replace(microsecond=0),
                ),
            )
        return booking_text

    def render_list(self, conversation_id: str, now: datetime | None = None) -> BookingListing:
        effective_now = now or datetime.now()
        with self.store.conversation_lock(conversation_id):
            upcoming = self._upcoming_bookings(conversation_id, effective_now)

        if not upcoming:
            return BookingListing(text=NO_UPCOMING_BOOKINGS)

        grouped: dict[tuple[str, str], list[UpcomingBooking]] = {}
        for booking in upcoming:
            grouped.setdefault((booking.parsed.day_name, booking.parsed.date_display), []).append(booking)

        sections: list[str] = []
        mentioned_ids: list[str] = []
        for (day_name, date_display), items in grouped.items():
            lines = [f"{day_name} {date_display}"]
            for item in items:
                lines.append(f"{item.parsed.time_range_display} @{item.booker_local_part} (id: {item.display_index})")
                if item.record.booker_id not in mentioned_ids:
                    mentioned_ids.append(item.record.booker_id)
            sections.append("\n".join(lines))

        return BookingListing(
            text="\n\n".join(sections),
            mentioned_ids=tuple(mentioned_ids),
            bookings=tuple(upcoming),
        )

    def cancel_booking(
        self,
        conversation_id: str,
        display_index: int,
        requester_id: str,
        now: datetime | None = None,
    ) -> str:
        """Remove the booking shown at ``display_index`` by the latest listing.

        Only the participant who created a booking may cancel it.
        """
        requester_id = normalize_participant_id(requester_id)
        effective_now = now or datetime.now()
        with self.store.conversation_lock(conversation_id):
            upcoming = self._upcoming_bookings(conversation_id, effective_now)
            if not 1 <= display_index <= len(upcoming):
                raise BookingNotFound(display_index)

            target = upcoming[display_index - 1].record
            if target.booker_id != requester_id:
                raise NotOwner(display_index)

            records = self.store.read_all(conversation_id)
            try:
                records.remove(target)
            except ValueError as error:
                raise BookingNotFound(display_index) from error

            self.store.replace_all(
                conversation_id,
                records,
                event_type="BOOKING_CANCELED",
                event_payload={"booking_text": target.booking_text, "booker_id": target.booker_id},
                now=effective_now,
            )
        return target.booking_text

    def _upcoming_bookings(self, conversation_id: str, now: datetime) -> list[UpcomingBooking]:
        parsed_records = self._parse_records(self.store.read_all(conversation_id), now)

        upcoming = [(record, parsed) for record, parsed in parsed_records if parsed.end > now]
        if len(upcoming) < len(parsed_records):
            expired = [record.booking_text for record, parsed in parsed_records if parsed.end <= now]
            self.store.replace_all(
                conversation_id,
                [record for record, _ in upcoming],
                event_type="BOOKINGS_PRUNED",
                event_payload={"pruned": expired},
                now=now,
            )

        upcoming.sort(key=lambda pair: pair[1].start)
        return [
            UpcomingBooking(display_index=index, record=record, parsed=parsed)
            for index, (record, parsed) in enumerate(upcoming, start=1)
        ]

    @staticmethod
    def _parse_records(
        records: list[BookingRecord],
        now: datetime,
    ) -> list[tuple[BookingRecord, ParsedBooking]]:
        # Stored rows were checked by BookingRecord.from_dict on load.
        return [(record, parse_booking_text(record.booking_text, reference_datetime=now)) for record in records]
