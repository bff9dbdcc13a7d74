import json

import httpx
import pytest

from helpdesk.client import actions
from helpdesk.client.action_types import (
    FETCH_ACCOUNTS,
    FETCH_TICKETS,
    SAVE_EDIT_ACCOUNT,
    UNLOAD_ACCOUNTS,
    UPDATE_TICKET,
)
from helpdesk.client.actions import Action, create_action
from helpdesk.client.api import HelpdeskClient


def test_action_type_family() -> None:
    assert FETCH_TICKETS.ACTION == "FETCH_TICKETS"
    assert FETCH_TICKETS.PENDING == "FETCH_TICKETS_PENDING"
    assert FETCH_TICKETS.SUCCESS == "FETCH_TICKETS_SUCCESS"
    assert FETCH_TICKETS.ERROR == "FETCH_TICKETS_ERROR"


def test_create_action_defaults_payload_to_first_argument() -> None:
    make = create_action("SOMETHING")

    assert make({"a": 1}).to_dict() == {"type": "SOMETHING", "payload": {"a": 1}}
    assert make().to_dict() == {"type": "SOMETHING"}


def test_create_action_marks_exception_payload_as_error() -> None:
    error = ValueError("boom")

    action = create_action("SOMETHING")(error)

    assert action.error is True
    assert action.payload is error


def test_thunk_actions_carry_meta() -> None:
    assert actions.fetch_accounts({"limit": 5}).to_dict() == {
        "type": "FETCH_ACCOUNTS",
        "payload": {"limit": 5},
        "meta": {"thunk": True},
    }
    assert actions.save_edit_account({"username": "a"}).meta is None
    assert actions.unload_accounts().to_dict() == {
        "type": "UNLOAD_ACCOUNTS",
        "meta": {"thunk": True},
    }


def _client(handler) -> HelpdeskClient:
    return HelpdeskClient(
        "http://helpdesk.test/api/v1",
        "token-agent",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_dispatch_resolves_success_action() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True, "accounts": [], "page": 0, "limit": 5})

    async with _client(handler) as client:
        result = await client.dispatch(actions.fetch_accounts({"limit": 5, "page": None}))

    assert result.type == FETCH_ACCOUNTS.SUCCESS
    assert result.error is False
    assert result.payload["limit"] == 5
    assert result.meta == {"thunk": True}
    assert seen[0].method == "GET"
    assert seen[0].url.path == "/api/v1/accounts"
    assert dict(seen[0].url.params) == {"limit": "5"}
    assert seen[0].headers["accesstoken"] == "token-agent"


@pytest.mark.asyncio
async def test_dispatch_moves_path_fields_out_of_body() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True, "ticket": {"id": "t-1"}})

    async with _client(handler) as client:
        result = await client.dispatch(actions.update_ticket({"id": "t-1", "status": 1}))

    assert result.type == UPDATE_TICKET.SUCCESS
    assert seen[0].method == "PUT"
    assert seen[0].url.path == "/api/v1/tickets/t-1"
    assert json.loads(seen[0].content) == {"status": 1}


@pytest.mark.asyncio
async def test_dispatch_resolves_error_action_from_error_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            401,
            json={"success": False, "error": {"code": "INVALID_PERMISSIONS", "message": "no"}},
        )

    async with _client(handler) as client:
        result = await client.dispatch(
            actions.save_edit_account({"username": "admin", "fullname": "x"})
        )

    assert result.type == SAVE_EDIT_ACCOUNT.ERROR
    assert result.error is True
    assert result.payload["code"] == "INVALID_PERMISSIONS"


@pytest.mark.asyncio
async def test_dispatch_treats_soft_failure_as_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"success": False, "error": {"code": "INVALID_TICKET", "message": "Invalid"}},
        )

    async with _client(handler) as client:
        result = await client.dispatch(actions.fetch_ticket({"uid": "9999"}))

    assert result.type == "FETCH_TICKET_ERROR"
    assert result.payload["code"] == "INVALID_TICKET"


@pytest.mark.asyncio
async def test_dispatch_reports_network_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        result = await client.dispatch(actions.fetch_tickets({}))

    assert result.type == FETCH_TICKETS.ERROR
    assert result.payload["code"] == "NETWORK_ERROR"
    assert result.meta == {"thunk": True}


@pytest.mark.asyncio
async def test_dispatch_passes_local_actions_through() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    action = actions.unload_accounts()
    async with _client(handler) as client:
        result = await client.dispatch(action)

    assert result is action
    assert isinstance(result, Action)
    assert result.type == UNLOAD_ACCOUNTS.ACTION
