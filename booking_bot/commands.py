from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Any, Callable, Mapping

from .engine import BookingEngine
from .errors import BookingError, MalformedArguments
from .schedule import BOOK_EXAMPLE, BOOK_USAGE

logger = logging.getLogger(__name__)

BOT_TITLE = "Booking Bot"
GENERIC_FAILURE = "An error occurred while processing your command."
CANCEL_USAGE = "/cancel <id>"

_POSITIVE_INT_RE = re.compile(r"^\d+$")


@dataclass(frozen=True)
class Reply:
    text: str
    mentioned_ids: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "mentioned_ids": list(self.mentioned_ids)}


@dataclass(frozen=True)
class CommandContext:
    conversation_id: str
    sender_id: str
    args: str
    now: datetime
    commands: Mapping[str, "Command"]


@dataclass(frozen=True)
class Command:
    description: str
    usage: str
    handler: Callable[[BookingEngine, CommandContext], Reply]


def _ping(engine: BookingEngine, context: CommandContext) -> Reply:
    return Reply("Pong.")


def _book(engine: BookingEngine, context: CommandContext) -> Reply:
    booking_text = engine.validate_new_booking(
        context.conversation_id,
        context.args,
        context.sender_id,
        now=context.now,
    )
    return Reply(f"Booking confirmed: {booking_text}")


def _list(engine: BookingEngine, context: CommandContext) -> Reply:
    listing = engine.render_list(context.conversation_id, now=context.now)
    return Reply(listing.text, listing.mentioned_ids)


def _cancel(engine: BookingEngine, context: CommandContext) -> Reply:
    raw_index = context.args.strip()
    if not _POSITIVE_INT_RE.match(raw_index) or int(raw_index) < 1:
        raise MalformedArguments(CANCEL_USAGE, hint="Check IDs with /list.")

    booking_text = engine.cancel_booking(
        context.conversation_id,
        int(raw_index),
        context.sender_id,
        now=context.now,
    )
    return Reply(f"Booking removed: {booking_text}")


def _help(engine: BookingEngine, context: CommandContext) -> Reply:
    sections = [BOT_TITLE]
    for name, command in context.commands.items():
        sections.append(f"[{name.capitalize()}]\n{command.description}\nUsage: {command.usage}")
    return Reply("\n\n".join(sections))


def build_command_table() -> Mapping[str, Command]:
    """Build the read-only keyword -> command mapping used by the dispatcher."""
    return MappingProxyType(
        {
            "ping": Command("Check bot connectivity", "/ping", _ping),
            "book": Command(f"Add a new booking (example: {BOOK_EXAMPLE})", BOOK_USAGE, _book),
            "list": Command("List upcoming bookings", "/list", _list),
            "cancel": Command("Cancel one of your bookings by ID", CANCEL_USAGE, _cancel),
            "help": Command("Show this help message", "/help", _help),
        }
    )


class CommandDispatcher:
    def __init__(
        self,
        engine: BookingEngine,
        commands: Mapping[str, Command] | None = None,
        now_provider: Callable[[], datetime] | None = None,
    ) -> None:
        self.engine = engine
        self.commands = commands if commands is not None else build_command_table()
        self.clock: Callable[[], datetime] = now_provider or datetime.now

    def handle_command(self, conversation_id: str, sender_id: str, raw_text: str) -> Reply | None:
        """Run one chat message through the command table.

        Returns None for messages without a sender, messages that are not
        commands, and commands naming an unknown keyword. Rule violations
        become a reply describing the rule; any other failure is logged and
        answered with a generic message.
        """
        sender_id = (sender_id or "").strip()
        if not sender_id or not raw_text or not raw_text.startswith("/"):
            return None

        keyword, *arg_parts = re.split(r"\s+", raw_text[1:].rstrip())
        command = self.commands.get(keyword.lower())
        if command is None:
            return None

        context = CommandContext(
            conversation_id=conversation_id,
            sender_id=sender_id,
            args=" ".join(arg_parts),
            now=self.clock(),
            commands=self.commands,
        )
        try:
            return command.handler(self.engine, context)
        except BookingError as error:
            return Reply(str(error))
        except Exception:
            logger.exception("Command /%s failed in conversation %s", keyword.lower(), conversation_id)
            return Reply(GENERIC_FAILURE)
