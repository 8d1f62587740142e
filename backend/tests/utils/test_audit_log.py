import json
from typing import Any, List

import pytest
from booking_engine.models import BookingStatus
from booking_engine.utils import audit_log
from booking_engine.utils.request_id import set_request_id


def test_emit_audit_log_outputs_json(monkeypatch: pytest.MonkeyPatch) -> None:
    messages: List[str] = []

    class DummyLogger:
        def info(self, message: str) -> None:
            messages.append(message)

    monkeypatch.setattr(audit_log, "_audit_logger", DummyLogger())

    set_request_id("req-123")
    audit_log.emit_audit_log(
        action="booking.created",
        initiator="guest",
        booking_id=1,
        unit_id="bistro",
        actor_id=None,
        actor_name="guest",
        status_from=None,
        status_to=BookingStatus.PENDING,
        summary="New booking: Anna (4 guests, 19:00)",
    )
    set_request_id(None)

    assert len(messages) == 1
    payload = json.loads(messages[0])
    assert payload["action"] == "booking.created"
    assert payload["initiator"] == "guest"
    assert payload["request_id"] == "req-123"
    assert payload["status_to"] == "pending"
    assert "status_from" not in payload
    assert "actor_id" not in payload
    assert "timestamp" in payload


def test_emit_audit_log_raises_on_logger_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    class DummyLogger:
        def info(self, _: Any) -> None:
            raise ValueError("fail")

    monkeypatch.setattr(audit_log, "_audit_logger", DummyLogger())

    with pytest.raises(RuntimeError):
        audit_log.emit_audit_log(
            action="booking.cancelled",
            initiator="staff",
            booking_id=1,
            unit_id="bistro",
            actor_id=7,
            actor_name="Floor Manager",
            status_from=BookingStatus.CONFIRMED,
            status_to=BookingStatus.CANCELLED,
            summary="Booking cancelled: Anna",
        )
