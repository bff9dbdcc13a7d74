import logging
from typing import Any

import pytest

from helpdesk.core import events


def test_emit_delivers_payload_to_receivers() -> None:
    received: list[tuple[Any, dict[str, Any]]] = []

    def receiver(sender: Any, **payload: Any) -> None:
        received.append((sender, payload))

    events.on(events.TICKET_DELETED, receiver)
    try:
        events.emit(events.TICKET_DELETED, "service", ticket_id="abc")
    finally:
        events.off(events.TICKET_DELETED, receiver)

    assert received == [("service", {"ticket_id": "abc"})]


def test_off_stops_delivery() -> None:
    received: list[dict[str, Any]] = []

    def receiver(sender: Any, **payload: Any) -> None:
        received.append(payload)

    events.on(events.TICKET_UPDATED, receiver)
    events.off(events.TICKET_UPDATED, receiver)
    events.emit(events.TICKET_UPDATED, ticket=None)

    assert received == []


def test_failing_receiver_does_not_block_others(caplog: pytest.LogCaptureFixture) -> None:
    received: list[str] = []

    def broken(sender: Any, **payload: Any) -> None:
        raise RuntimeError("socket closed")

    def healthy(sender: Any, **payload: Any) -> None:
        received.append(payload["ticket_id"])

    events.on(events.TICKET_DELETED, broken)
    events.on(events.TICKET_DELETED, healthy)
    try:
        with caplog.at_level(logging.ERROR, logger="helpdesk.core.events"):
            events.emit(events.TICKET_DELETED, ticket_id="t-1")
    finally:
        events.off(events.TICKET_DELETED, broken)
        events.off(events.TICKET_DELETED, healthy)

    assert received == ["t-1"]
    assert "ticket:deleted" in caplog.text


def test_register_event_logging_is_idempotent() -> None:
    events.register_event_logging()
    before = {
        event: len(events.ticket_signals.signal(event).receivers) for event in events.TICKET_EVENTS
    }

    events.register_event_logging()

    after = {
        event: len(events.ticket_signals.signal(event).receivers) for event in events.TICKET_EVENTS
    }
    assert before == after
