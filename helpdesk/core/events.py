"""Process-wide ticket lifecycle signals.

Receivers are connected with ``on(event)`` and called synchronously by
``emit``. Delivery is fire-and-forget: a receiver that raises is logged and
the remaining receivers still run.
"""

import logging
from collections.abc import Callable
from typing import Any

from blinker import Namespace

logger = logging.getLogger(__name__)

TICKET_CREATED = "ticket:created"
TICKET_UPDATED = "ticket:updated"
TICKET_DELETED = "ticket:deleted"
TICKET_COMMENT_ADDED = "ticket:comment:added"
TICKET_SUBSCRIBERS_UPDATE = "ticket:subscribers:update"

TICKET_EVENTS = (
    TICKET_CREATED,
    TICKET_UPDATED,
    TICKET_DELETED,
    TICKET_COMMENT_ADDED,
    TICKET_SUBSCRIBERS_UPDATE,
)

ticket_signals = Namespace()

Receiver = Callable[..., Any]


def on(event: str, receiver: Receiver, *, weak: bool = False) -> Receiver:
    return ticket_signals.signal(event).connect(receiver, weak=weak)


def off(event: str, receiver: Receiver) -> None:
    ticket_signals.signal(event).disconnect(receiver)


def emit(event: str, sender: Any = None, **payload: Any) -> None:
    signal = ticket_signals.signal(event)
    for receiver in signal.receivers_for(sender):
        try:
            receiver(sender, **payload)
        except Exception:
            logger.exception("Receiver %r failed for event %s", receiver, event)


_event_loggers: dict[str, Receiver] = {}


def register_event_logging() -> None:
    for event in TICKET_EVENTS:
        if event in _event_loggers:
            continue
        _event_loggers[event] = on(event, _event_logger(event))


def _event_logger(event: str) -> Receiver:
    def log_event(sender: Any, **payload: Any) -> None:
        logger.debug("event=%s sender=%s keys=%s", event, sender, sorted(payload))

    return log_event
