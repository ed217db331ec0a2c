from __future__ import annotations

import shutil
import threading
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

import yaml

from .errors import InternalFailure
from .schedule import parse_booking_text

_RECORD_KEYS = ("booking_text", "booker_id", "created_at")


def normalize_participant_id(participant_id: str | None) -> str:
    if participant_id is None:
        raise ValueError("participant id must not be None")

    normalized = participant_id.strip()
    if not normalized:
        raise ValueError("participant id must not be empty")
    return normalized


@dataclass(frozen=True)
class BookingRecord:
    booking_text: str
    booker_id: str
    created_at: datetime

    def to_dict(self) -> dict[str, str]:
        return {
            "booking_text": self.booking_text,
            "booker_id": self.booker_id,
            "created_at": self.created_at.isoformat(timespec="seconds"),
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "BookingRecord":
        missing = [key for key in _RECORD_KEYS if key not in data]
        if missing:
            raise ValueError(f"missing keys: {', '.join(missing)}")
        for key in ("booking_text", "booker_id"):
            if not isinstance(data[key], str):
                raise ValueError(f"{key} must be a string")
        if not isinstance(data["created_at"], (str, datetime)):
            raise ValueError("created_at must be an ISO-8601 timestamp")

        booking_text = str(data["booking_text"])
        booker_id = normalize_participant_id(data["booker_id"])
        # Rejects text that would not derive a valid interval on read.
        parse_booking_text(booking_text)

        created_at = data["created_at"]
        if not isinstance(created_at, datetime):
            created_at = datetime.fromisoformat(created_at)

        return BookingRecord(booking_text=booking_text, booker_id=booker_id, created_at=created_at)


class BookingStorageError(InternalFailure):
    pass


class BookingYamlStore:
    """Conversation-scoped booking lists kept in one keyed YAML document.

    Every document read or write goes through a single re-entrant lock.
    Callers that read, decide and write back hold ``conversation_lock`` for
    the whole sequence so that two commands for the same conversation
    cannot interleave. One lock is kept per conversation id ever seen and
    none are released, which is fine for a handful of group chats.
    """

    def __init__(self, base_dir: str | Path = "data") -> None:
        self.base_dir = Path(base_dir)
        self.bookings_file = self.base_dir / "bookings.yaml"
        self.log_file = self.base_dir / "booking_events.yaml"
        self._document_lock = threading.RLock()
        self._conversation_locks: dict[str, threading.Lock] = {}
        self._conversation_locks_guard = threading.Lock()
        self._ensure_files()

    def _ensure_files(self) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)
        if not self.bookings_file.exists():
            self.bookings_file.write_text("{}\n", encoding="utf-8")
        if not self.log_file.exists():
            self.log_file.write_text("[]\n", encoding="utf-8")

    def conversation_lock(self, conversation_id: str) -> threading.Lock:
        with self._conversation_locks_guard:
            if conversation_id not in self._conversation_locks:
                self._conversation_locks[conversation_id] = threading.Lock()
            return self._conversation_locks[conversation_id]

    def _load_yaml(self, path: Path, empty: Any) -> Any:
        try:
            payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            path.write_text(yaml.safe_dump(empty), encoding="utf-8")
            return empty
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as error:
            self._recover_corrupted_yaml(path, empty, error)
            return empty

        if payload is None:
            return empty
        if not isinstance(payload, type(empty)):
            self._recover_corrupted_yaml(path, empty, ValueError(f"top-level YAML is not a {type(empty).__name__}"))
            return empty
        return payload

    def _read_document(self) -> dict[str, list[dict[str, Any]]]:
        payload = self._load_yaml(self.bookings_file, {})

        document: dict[str, list[dict[str, Any]]] = {}
        skipped = False
        for conversation_id, rows in payload.items():
            if not isinstance(rows, list):
                skipped = True
                self._log_event(
                    "YAML_ROW_SKIPPED",
                    {"conversation_id": str(conversation_id), "reason": "booking list is not a sequence"},
                )
                continue

            sanitized: list[dict[str, Any]] = []
            for index, row in enumerate(rows):
                try:
                    if not isinstance(row, dict):
                        raise ValueError("row is not a mapping")
                    sanitized.append(BookingRecord.from_dict(row).to_dict())
                except ValueError as error:
                    skipped = True
                    self._log_event(
                        "YAML_ROW_SKIPPED",
                        {"conversation_id": str(conversation_id), "index": index, "reason": str(error)},
                    )
            if sanitized:
                document[str(conversation_id)] = sanitized

        # Persist the cleaned document so each bad row is reported only once.
        if skipped:
            self._write_yaml(self.bookings_file, document)
        return document

    def _write_yaml(self, path: Path, payload: Any) -> None:
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            temp_path.write_text(yaml.safe_dump(payload, allow_unicode=True, sort_keys=False), encoding="utf-8")
            temp_path.replace(path)
        except OSError as error:
            raise BookingStorageError(f"Failed to write YAML file: {path}") from error
        finally:
            if temp_path.is_file():
                temp_path.unlink(missing_ok=True)

    def _recover_corrupted_yaml(self, path: Path, empty: Any, error: Exception) -> None:
        timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
        backup_path = path.with_name(f"{path.stem}.corrupt.{timestamp}{path.suffix}")
        try:
            if path.exists():
                shutil.copy2(path, backup_path)
        except OSError:
            pass

        path.write_text(yaml.safe_dump(empty), encoding="utf-8")
        if path != self.log_file:
            self._log_event(
                "YAML_RECOVERED",
                {
                    "file": str(path.name),
                    "backup": str(backup_path.name),
                    "reason": str(error),
                },
            )

    def _log_event(self, event_type: str, payload: dict[str, Any], event_time: datetime | None = None) -> None:
        timestamp = (event_time or datetime.now()).isoformat(timespec="seconds")
        with self._document_lock:
            events = self._load_yaml(self.log_file, [])
            events.append({"event_time": timestamp, "event_type": event_type, "payload": payload})
            self._write_yaml(self.log_file, events)

    def read_events(self) -> list[dict[str, Any]]:
        with self._document_lock:
            return list(self._load_yaml(self.log_file, []))

    def read_all(self, conversation_id: str) -> list[BookingRecord]:
        with self._document_lock:
            rows = self._read_document().get(conversation_id, [])
            return [BookingRecord.from_dict(row) for row in rows]

    def append(self, conversation_id: str, record: BookingRecord) -> None:
        with self._document_lock:
            document = self._read_document()
            document.setdefault(conversation_id, []).append(record.to_dict())
            self._write_yaml(self.bookings_file, document)

            self._log_event(
                "BOOKING_CREATED",
                {
                    "conversation_id": conversation_id,
                    "booking_text": record.booking_text,
                    "booker_id": record.booker_id,
                },
                record.created_at,
            )

    def replace_all(
        self,
        conversation_id: str,
        records: Iterable[BookingRecord],
        event_type: str = "BOOKINGS_REPLACED",
        event_payload: dict[str, Any] | None = None,
        now: datetime | None = None,
    ) -> None:
        rows = [record.to_dict() for record in records]
        with self._document_lock:
            document = self._read_document()
            if rows:
                document[conversation_id] = rows
            else:
                document.pop(conversation_id, None)
            self._write_yaml(self.bookings_file, document)

            self._log_event(
                event_type,
                {"conversation_id": conversation_id, "count": len(rows), **(event_payload or {})},
                now,
            )

    def remove_at(self, conversation_id: str, index: int, now: datetime | None = None) -> BookingRecord | None:
        """Remove the record at a zero-based storage position, if there is one."""
        with self.conversation_lock(conversation_id), self._document_lock:
            records = self.read_all(conversation_id)
            if not 0 <= index < len(records):
                return None

            removed = records.pop(index)
            self.replace_all(
                conversation_id,
                records,
                event_type="BOOKING_CANCELED",
                event_payload={"booking_text": removed.booking_text, "booker_id": removed.booker_id},
                now=now,
            )
            return removed
