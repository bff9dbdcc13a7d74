from datetime import UTC, datetime
from uuid import uuid4

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from helpdesk.api.deps import get_user_repository
from helpdesk.api.routes.tickets import get_report_service, get_ticket_service
from helpdesk.core.config import Settings
from helpdesk.main import app
from helpdesk.models.schemas.report import (
    MonthDataResponse,
    MonthSeries,
    TopGroupItem,
    TopGroupsResponse,
    YearCountsResponse,
)
from helpdesk.services.attachment_storage import AttachmentStorage
from helpdesk.services.ticket_service import TicketService
from tests.fakes import (
    FakeGroupRepository,
    FakeTicketRepository,
    FakeTicketTypeRepository,
    FakeUserRepository,
    fake_connection,
)

AGENT_HEADERS = {"accesstoken": "token-agent"}
CUSTOMER_HEADERS = {"accesstoken": "token-customer"}


class _FakeReportService:
    def get_month_data(self) -> MonthDataResponse:
        start = int(datetime(2026, 1, 1, tzinfo=UTC).timestamp() * 1000)
        return MonthDataResponse(
            series=[
                MonthSeries(label="New", data=[(start, 4)]),
                MonthSeries(label="Closed", data=[(start, 1)]),
            ]
        )

    def get_year_data(self, year: int) -> YearCountsResponse:
        return YearCountsResponse(total_count=year % 100, closed_count=1)

    def get_top_groups(self, top: int) -> TopGroupsResponse:
        return TopGroupsResponse(items=[TopGroupItem(name="Support", count=top)])


@pytest.fixture
def ticket_client(client: TestClient, monkeypatch: pytest.MonkeyPatch, tmp_path) -> TestClient:
    monkeypatch.setattr("helpdesk.services.ticket_service.get_connection", fake_connection)
    users = FakeUserRepository()
    service = TicketService(
        ticket_repository=FakeTicketRepository(),
        user_repository=users,
        group_repository=FakeGroupRepository(),
        ticket_type_repository=FakeTicketTypeRepository(),
        attachment_storage=AttachmentStorage(tmp_path),
        settings=Settings(attachments_dir=tmp_path),
    )
    app.dependency_overrides[get_user_repository] = lambda: users
    app.dependency_overrides[get_ticket_service] = lambda: service
    app.dependency_overrides[get_report_service] = _FakeReportService
    return client


def _create_ticket(client: TestClient, **fields) -> dict:
    response = client.post(
        "/api/v1/tickets/create",
        json={"subject": "VPN drops every hour", **fields},
        headers=CUSTOMER_HEADERS,
    )
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()["ticket"]


def test_requests_without_access_token_are_rejected(ticket_client: TestClient) -> None:
    response = ticket_client.get("/api/v1/tickets")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    payload = response.json()
    assert payload["success"] is False
    assert payload["error"]["code"] == "INVALID_ACCESS_TOKEN"


def test_unknown_access_token_is_rejected(ticket_client: TestClient) -> None:
    response = ticket_client.get("/api/v1/tickets", headers={"accesstoken": "nope"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error"]["message"] == "Unknown User"


def test_ticket_api_routes(ticket_client: TestClient) -> None:
    ticket = _create_ticket(ticket_client, tags="network, vpn", issue="It *drops*.")
    assert ticket["tags"] == ["network", "vpn"]
    assert ticket["closedDate"] is None
    assert ticket["owner"]["username"] == "customer"
    assert ticket["group"]["name"] == "Support"
    assert ticket["status"] == 0
    assert ticket["priority"] == 1
    assert ticket["version"] == 1

    get_response = ticket_client.get(f"/api/v1/tickets/{ticket['uid']}", headers=AGENT_HEADERS)
    assert get_response.status_code == status.HTTP_200_OK
    assert get_response.json()["success"] is True
    assert get_response.json()["ticket"]["id"] == ticket["id"]

    update_response = ticket_client.put(
        f"/api/v1/tickets/{ticket['id']}",
        json={"status": 1, "assignee": 2, "version": 1},
        headers=AGENT_HEADERS,
    )
    assert update_response.status_code == status.HTTP_200_OK
    updated = update_response.json()["ticket"]
    assert updated["status"] == 1
    assert updated["assignee"]["username"] == "agent"
    assert updated["version"] == 2

    comment_response = ticket_client.post(
        f"/api/v1/tickets/{ticket['id']}/comment",
        json={"comment": "Looking into it"},
        headers=AGENT_HEADERS,
    )
    assert comment_response.status_code == status.HTTP_200_OK
    assert len(comment_response.json()["ticket"]["comments"]) == 1

    subscribe_response = ticket_client.post(
        f"/api/v1/tickets/{ticket['id']}/subscribe",
        json={"user": 2, "subscribe": True},
        headers=AGENT_HEADERS,
    )
    assert subscribe_response.status_code == status.HTTP_200_OK
    assert subscribe_response.json() == {"success": True}

    delete_response = ticket_client.delete(
        f"/api/v1/tickets/{ticket['id']}", headers=AGENT_HEADERS
    )
    assert delete_response.status_code == status.HTTP_200_OK
    assert delete_response.json() == {"success": True}

    deleted = ticket_client.get(f"/api/v1/tickets/{ticket['uid']}", headers=AGENT_HEADERS)
    assert deleted.json()["ticket"]["deleted"] is True

    restore_response = ticket_client.post(
        f"/api/v1/tickets/{ticket['id']}/restore", headers=AGENT_HEADERS
    )
    assert restore_response.status_code == status.HTTP_200_OK
    assert restore_response.json()["ticket"]["deleted"] is False


def test_ticket_list_filters(ticket_client: TestClient) -> None:
    first = _create_ticket(ticket_client, subject="first")
    second = _create_ticket(ticket_client, subject="second")
    ticket_client.put(
        f"/api/v1/tickets/{second['id']}",
        json={"status": 2, "assignee": 3},
        headers=AGENT_HEADERS,
    )

    everything = ticket_client.get("/api/v1/tickets", headers=CUSTOMER_HEADERS)
    assert everything.status_code == status.HTTP_200_OK
    payload = everything.json()
    assert payload["success"] is True
    assert payload["total"] == 2
    assert payload["limit"] == 10
    assert [item["uid"] for item in payload["tickets"]] == [second["uid"], first["uid"]]

    by_status = ticket_client.get(
        "/api/v1/tickets?status=0&status=1", headers=CUSTOMER_HEADERS
    )
    assert [item["uid"] for item in by_status.json()["tickets"]] == [first["uid"]]

    assigned = ticket_client.get("/api/v1/tickets?assignedself=true", headers=CUSTOMER_HEADERS)
    assert [item["uid"] for item in assigned.json()["tickets"]] == [second["uid"]]


def test_ticket_list_limit_is_validated(ticket_client: TestClient) -> None:
    response = ticket_client.get("/api/v1/tickets?limit=101", headers=CUSTOMER_HEADERS)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    payload = response.json()
    assert payload["error"]["code"] == "VALIDATION_ERROR"
    assert payload["error"]["message"] == "Invalid Post Data"
    assert isinstance(payload["error"]["details"]["issues"], list)


def test_missing_subject_is_a_validation_error(ticket_client: TestClient) -> None:
    response = ticket_client.post(
        "/api/v1/tickets/create", json={"issue": "no subject"}, headers=CUSTOMER_HEADERS
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["success"] is False


def test_unknown_ticket_uid_is_a_soft_error(ticket_client: TestClient) -> None:
    response = ticket_client.get("/api/v1/tickets/424242", headers=AGENT_HEADERS)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "success": False,
        "error": {"code": "INVALID_TICKET", "message": "Invalid Ticket", "details": {}},
    }


def test_unknown_ticket_id_is_rejected(ticket_client: TestClient) -> None:
    response = ticket_client.post(
        f"/api/v1/tickets/{uuid4()}/comment",
        json={"comment": "hello"},
        headers=AGENT_HEADERS,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"]["code"] == "INVALID_TICKET_ID"


def test_stale_update_returns_conflict(ticket_client: TestClient) -> None:
    ticket = _create_ticket(ticket_client)
    ticket_client.put(
        f"/api/v1/tickets/{ticket['id']}", json={"status": 1}, headers=AGENT_HEADERS
    )

    response = ticket_client.put(
        f"/api/v1/tickets/{ticket['id']}",
        json={"status": 3, "version": 1},
        headers=AGENT_HEADERS,
    )

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["error"]["code"] == "TICKET_VERSION_CONFLICT"


def test_attachment_upload_and_removal(ticket_client: TestClient, tmp_path) -> None:
    ticket = _create_ticket(ticket_client)

    upload = ticket_client.post(
        f"/api/v1/tickets/{ticket['id']}/attachments",
        files={"file": ("trace.log", b"stack trace", "text/plain")},
        headers=CUSTOMER_HEADERS,
    )
    assert upload.status_code == status.HTTP_200_OK
    attachment = upload.json()["ticket"]["attachments"][0]
    assert attachment["name"] == "trace.log"
    assert attachment["type"] == "text/plain"
    assert (tmp_path / attachment["path"]).read_bytes() == b"stack trace"

    forbidden = ticket_client.delete(
        f"/api/v1/tickets/{ticket['id']}/attachments/{attachment['id']}",
        headers=CUSTOMER_HEADERS,
    )
    assert forbidden.status_code == status.HTTP_401_UNAUTHORIZED

    removed = ticket_client.delete(
        f"/api/v1/tickets/{ticket['id']}/attachments/{attachment['id']}",
        headers=AGENT_HEADERS,
    )
    assert removed.status_code == status.HTTP_200_OK
    assert removed.json()["ticket"]["attachments"] == []


def test_ticket_types(ticket_client: TestClient) -> None:
    response = ticket_client.get("/api/v1/tickets/types", headers=CUSTOMER_HEADERS)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "success": True,
        "types": [{"id": 1, "name": "Issue"}, {"id": 2, "name": "Task"}],
    }


def test_report_routes(ticket_client: TestClient) -> None:
    month = ticket_client.get("/api/v1/tickets/stats/month", headers=AGENT_HEADERS)
    assert month.status_code == status.HTTP_200_OK
    assert [series["label"] for series in month.json()["series"]] == ["New", "Closed"]
    assert month.json()["series"][0]["data"][0][1] == 4

    year = ticket_client.get("/api/v1/tickets/stats/year/2026", headers=AGENT_HEADERS)
    assert year.json() == {"success": True, "totalCount": 26, "closedCount": 1}

    top = ticket_client.get("/api/v1/tickets/count/topgroups/5", headers=AGENT_HEADERS)
    assert top.json()["items"] == [{"name": "Support", "count": 5}]


@pytest.mark.parametrize("top", ["0", "1001", "99999999999999999999"])
def test_top_groups_count_is_bounded(ticket_client: TestClient, top: str) -> None:
    response = ticket_client.get(f"/api/v1/tickets/count/topgroups/{top}", headers=AGENT_HEADERS)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.parametrize("uid", ["%C2%B2", "99999999999999999999"])
def test_unparseable_ticket_uid_is_a_soft_error(ticket_client: TestClient, uid: str) -> None:
    response = ticket_client.get(f"/api/v1/tickets/{uid}", headers=AGENT_HEADERS)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["error"]["code"] == "INVALID_TICKET"
