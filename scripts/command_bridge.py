"""Bridge for an external chat transport.

Reads ``{"conversation_id", "sender_id", "text"}`` as JSON from stdin, runs it
through the booking bot and prints ``{"status", "json"}`` on stdout.
"""
from __future__ import annotations

import json
import os
from pathlib import Path
import sys
from urllib.parse import quote


def _read_payload() -> dict:
    raw = sys.stdin.read().strip()
    if not raw:
        return {}
    try:
        data = json.loads(raw)
        if isinstance(data, dict):
            return data
        return {}
    except json.JSONDecodeError:
        return {}


def _emit(status_code: int, payload: dict) -> None:
    print(json.dumps({"status": status_code, "json": payload}))


def main() -> int:
    action = sys.argv[1] if len(sys.argv) > 1 else "command"
    payload = _read_payload()

    workspace_root = Path(__file__).resolve().parent.parent
    if str(workspace_root) not in sys.path:
        sys.path.insert(0, str(workspace_root))

    from booking_bot.web_app import create_app

    app = create_app(os.environ.get("BOOKING_BOT_DATA_DIR", "data"))
    client = app.test_client()

    if action == "command":
        response = client.post(
            "/api/commands",
            json={
                "conversation_id": str(payload.get("conversation_id", "")),
                "sender_id": str(payload.get("sender_id", "")),
                "text": str(payload.get("text", "")),
            },
        )
        _emit(response.status_code, response.get_json() or {})
        return 0

    if action == "list":
        conversation_id = str(payload.get("conversation_id", ""))
        if not conversation_id:
            print("missing conversation_id", file=sys.stderr)
            return 2
        response = client.get(f"/api/conversations/{quote(conversation_id)}/bookings")
        _emit(response.status_code, response.get_json() or {})
        return 0

    print(f"unsupported action: {action}", file=sys.stderr)
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
