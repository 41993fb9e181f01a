from __future__ import annotations

from datetime import datetime
from typing import Optional

from flask import Flask, jsonify, request

from ..container import Container
from ..core.exceptions import ValidationError
from .model import CheckInEvaluation, EventOccurrence
from .service import is_past_event_category


def _parse_now(value) -> Optional[datetime]:
    if value in (None, ""):
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValidationError(f"Invalid timestamp: {value!r}") from exc


def evaluation_json(evaluation: CheckInEvaluation) -> dict:
    window = evaluation.window
    return {
        "state": evaluation.state.value,
        "canCheckIn": evaluation.can_check_in,
        "displayStatus": evaluation.display_status.value if evaluation.display_status else None,
        "windowStart": window.window_start.isoformat() if window else None,
        "windowEnd": window.window_end.isoformat() if window else None,
        "error": evaluation.error,
    }


def register(app: Flask, container: Container) -> None:
    evaluator = container.checkin_evaluator

    @app.route("/api/events/check-in-window", methods=["POST"], endpoint="check_in_window")
    def check_in_window():
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")

        event_payload = payload["event"] if payload.get("event") is not None else payload
        if not isinstance(event_payload, dict):
            raise ValidationError("'event' must be a JSON object")

        event = EventOccurrence.from_dict(event_payload)
        now = _parse_now(payload.get("now"))
        body = evaluation_json(evaluator.evaluate(event, now))
        body["pastEventCategory"] = is_past_event_category(event.category)
        return jsonify(body)

    @app.route("/api/events/check-in-order", methods=["POST"], endpoint="check_in_order")
    def check_in_order():
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict) or not isinstance(payload.get("events"), list):
            raise ValidationError("Request body must contain an 'events' list")

        now = _parse_now(payload.get("now"))
        events = [EventOccurrence.from_dict(e) for e in payload["events"] if isinstance(e, dict)]
        ordered = evaluator.sort_for_check_in(events, now)
        return jsonify(
            {
                "events": [
                    {"id": e.event_id, "title": e.title, **evaluation_json(evaluator.evaluate(e, now))}
                    for e in ordered
                ]
            }
        )
