import logging
from collections.abc import Callable
from dataclasses import dataclass
from types import TracebackType
from typing import Any

import httpx

from helpdesk.client.action_types import (
    CREATE_TICKET,
    DELETE_TICKET,
    FETCH_ACCOUNTS,
    FETCH_TICKET,
    FETCH_TICKETS,
    POST_COMMENT,
    SAVE_EDIT_ACCOUNT,
    SUBSCRIBE_TICKET,
    UPDATE_TICKET,
    ActionType,
)
from helpdesk.client.actions import Action

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ApiRequest:
    method: str
    path: str
    params: dict[str, Any] | None = None
    json: dict[str, Any] | None = None


def _without(payload: dict[str, Any], *keys: str) -> dict[str, Any]:
    return {key: value for key, value in payload.items() if key not in keys}


def _query(payload: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


def _decode_body(response: httpx.Response) -> dict[str, Any]:
    if not response.content:
        return {}
    try:
        body = response.json()
    except ValueError:
        return {"message": response.text}
    return body if isinstance(body, dict) else {"data": body}


ROUTES: dict[str, tuple[ActionType, Callable[[dict[str, Any]], ApiRequest]]] = {
    FETCH_ACCOUNTS.ACTION: (
        FETCH_ACCOUNTS,
        lambda p: ApiRequest("GET", "/accounts", params=_query(p)),
    ),
    SAVE_EDIT_ACCOUNT.ACTION: (
        SAVE_EDIT_ACCOUNT,
        lambda p: ApiRequest("PUT", f"/accounts/{p['username']}", json=_without(p, "username")),
    ),
    FETCH_TICKETS.ACTION: (
        FETCH_TICKETS,
        lambda p: ApiRequest("GET", "/tickets", params=_query(p)),
    ),
    FETCH_TICKET.ACTION: (
        FETCH_TICKET,
        lambda p: ApiRequest("GET", f"/tickets/{p['uid']}"),
    ),
    CREATE_TICKET.ACTION: (
        CREATE_TICKET,
        lambda p: ApiRequest("POST", "/tickets/create", json=p),
    ),
    UPDATE_TICKET.ACTION: (
        UPDATE_TICKET,
        lambda p: ApiRequest("PUT", f"/tickets/{p['id']}", json=_without(p, "id")),
    ),
    DELETE_TICKET.ACTION: (
        DELETE_TICKET,
        lambda p: ApiRequest("DELETE", f"/tickets/{p['id']}"),
    ),
    POST_COMMENT.ACTION: (
        POST_COMMENT,
        lambda p: ApiRequest("POST", f"/tickets/{p['id']}/comment", json=_without(p, "id")),
    ),
    SUBSCRIBE_TICKET.ACTION: (
        SUBSCRIBE_TICKET,
        lambda p: ApiRequest("POST", f"/tickets/{p['id']}/subscribe", json=_without(p, "id")),
    ),
}


class HelpdeskClient:
    """Resolves dispatched actions into API calls.

    ``dispatch`` returns the matching SUCCESS action carrying the response
    body, or the ERROR action carrying the error body. Actions without a
    route (e.g. ``UNLOAD_ACCOUNTS``) are returned unchanged for the local
    store to handle.
    """

    def __init__(
        self,
        base_url: str,
        access_token: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"accesstoken": access_token},
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "HelpdeskClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def dispatch(self, action: Action) -> Action:
        route = ROUTES.get(action.type)
        if route is None:
            return action

        action_type, build_request = route
        request = build_request(dict(action.payload or {}))
        logger.debug("%s -> %s %s", action.type, request.method, request.path)

        try:
            response = await self._client.request(
                request.method,
                request.path,
                params=request.params,
                json=request.json,
            )
        except httpx.HTTPError as exc:
            logger.warning("%s failed: %s", action.type, exc)
            return Action(
                type=action_type.ERROR,
                payload={"code": "NETWORK_ERROR", "message": str(exc)},
                meta=action.meta,
                error=True,
            )

        body = _decode_body(response)
        if response.is_error or body.get("success") is False:
            return Action(
                type=action_type.ERROR,
                payload=body.get("error", body),
                meta=action.meta,
                error=True,
            )
        return Action(type=action_type.SUCCESS, payload=body, meta=action.meta)
