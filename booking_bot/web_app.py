from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from flask import Flask, jsonify, request

from .commands import CommandDispatcher
from .engine import BookingEngine
from .yaml_store import BookingYamlStore


def create_app(
    data_dir: str | Path = "data",
    now_provider: Callable[[], datetime] | None = None,
) -> Flask:
    app = Flask(__name__)
    store = BookingYamlStore(data_dir)
    engine = BookingEngine(store)
    clock: Callable[[], datetime] = now_provider or datetime.now
    dispatcher = CommandDispatcher(engine, now_provider=clock)

    @app.after_request
    def add_cors_headers(response: Any) -> Any:
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Methods"] = "GET,POST,OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return response

    @app.post("/api/commands")
    def post_command() -> Any:
        payload = request.get_json(silent=True) or {}
        conversation_id = str(payload.get("conversation_id", "")).strip()
        sender_id = str(payload.get("sender_id", "")).strip()
        text = str(payload.get("text", ""))
        if not conversation_id or not sender_id:
            return jsonify({"ok": False, "message": "conversation_id and sender_id are required."}), 400

        reply = dispatcher.handle_command(conversation_id, sender_id, text)
        return jsonify({"ok": True, "reply": reply.to_dict() if reply is not None else None})

    @app.get("/api/conversations/<conversation_id>/bookings")
    def get_bookings(conversation_id: str) -> Any:
        listing = engine.render_list(conversation_id, now=clock())
        return jsonify(
            {
                "ok": True,
                "text": listing.text,
                "mentioned_ids": list(listing.mentioned_ids),
                "bookings": [booking.to_dict() for booking in listing.bookings],
            }
        )

    return app
