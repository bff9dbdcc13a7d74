from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from helpdesk.client.action_types import (
    CREATE_TICKET,
    DELETE_TICKET,
    FETCH_ACCOUNTS,
    FETCH_TICKET,
    FETCH_TICKETS,
    POST_COMMENT,
    SAVE_EDIT_ACCOUNT,
    SUBSCRIBE_TICKET,
    UNLOAD_ACCOUNTS,
    UPDATE_TICKET,
)


@dataclass(frozen=True, slots=True)
class Action:
    type: str
    payload: Any = None
    meta: Mapping[str, Any] | None = None
    error: bool = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type}
        if self.payload is not None:
            data["payload"] = self.payload
        if self.meta is not None:
            data["meta"] = dict(self.meta)
        if self.error:
            data["error"] = True
        return data


def _identity(payload: Any = None) -> Any:
    return payload


def _thunk(*_: Any) -> dict[str, Any]:
    return {"thunk": True}


def create_action(
    action_type: str,
    payload_creator: Callable[..., Any] | None = None,
    meta_creator: Callable[..., Mapping[str, Any]] | None = None,
) -> Callable[..., Action]:
    """Build an action creator.

    The payload defaults to the first argument. An exception payload marks
    the action as an error.
    """
    make_payload = payload_creator or _identity

    def action_creator(*args: Any) -> Action:
        payload = make_payload(*args)
        meta = meta_creator(*args) if meta_creator is not None else None
        return Action(
            type=action_type,
            payload=payload,
            meta=meta,
            error=isinstance(payload, Exception),
        )

    return action_creator


fetch_accounts = create_action(FETCH_ACCOUNTS.ACTION, _identity, _thunk)
save_edit_account = create_action(SAVE_EDIT_ACCOUNT.ACTION)
unload_accounts = create_action(UNLOAD_ACCOUNTS.ACTION, _identity, _thunk)

fetch_tickets = create_action(FETCH_TICKETS.ACTION, _identity, _thunk)
fetch_ticket = create_action(FETCH_TICKET.ACTION, _identity, _thunk)
create_ticket = create_action(CREATE_TICKET.ACTION, _identity, _thunk)
update_ticket = create_action(UPDATE_TICKET.ACTION, _identity, _thunk)
delete_ticket = create_action(DELETE_TICKET.ACTION, _identity, _thunk)
post_comment = create_action(POST_COMMENT.ACTION, _identity, _thunk)
subscribe_ticket = create_action(SUBSCRIBE_TICKET.ACTION, _identity, _thunk)
