from __future__ import annotations

import os
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from booking_bot import BookingEngine, BookingYamlStore, CommandDispatcher

mcp = FastMCP(
    "Booking Bot MCP Server",
    instructions="Book, list and cancel time slots on a shared room through the booking_bot engine.",
    json_response=True,
)

DATA_DIR = Path(os.environ.get("BOOKING_BOT_DATA_DIR", Path(__file__).parent / "data"))
ENGINE = BookingEngine(BookingYamlStore(DATA_DIR))
DISPATCHER = CommandDispatcher(ENGINE)


@mcp.tool()
def send_command(conversation_id: str, sender_id: str, text: str) -> dict[str, object]:
    """Run a chat command such as '/book 19/2 13:00-14:00' and return the bot reply."""
    reply = DISPATCHER.handle_command(conversation_id, sender_id, text)
    return {"reply": reply.to_dict() if reply is not None else None}


@mcp.tool()
def list_bookings(conversation_id: str) -> dict[str, object]:
    """Return upcoming bookings for a conversation with their current display IDs."""
    listing = ENGINE.render_list(conversation_id)
    return {
        "text": listing.text,
        "mentioned_ids": list(listing.mentioned_ids),
        "bookings": [booking.to_dict() for booking in listing.bookings],
    }


@mcp.tool()
def book_slot(conversation_id: str, requester_id: str, schedule: str) -> dict[str, object]:
    """Book a slot given as 'DD/MM HH:MM-HH:MM'."""
    try:
        booking_text = ENGINE.validate_new_booking(conversation_id, schedule, requester_id)
    except ValueError as error:
        return {"ok": False, "message": str(error)}
    return {"ok": True, "booking_text": booking_text}


@mcp.tool()
def cancel_booking(conversation_id: str, requester_id: str, booking_id: int) -> dict[str, object]:
    """Cancel one of the requester's bookings by the ID shown in list_bookings."""
    try:
        booking_text = ENGINE.cancel_booking(conversation_id, booking_id, requester_id)
    except ValueError as error:
        return {"ok": False, "message": str(error)}
    return {"ok": True, "booking_text": booking_text}


def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
