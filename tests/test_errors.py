from fastapi import status
from fastapi.testclient import TestClient

from helpdesk.core.errors import AppError, error_body


def test_error_body_shape() -> None:
    assert error_body("INVALID_TICKET", "Invalid Ticket") == {
        "success": False,
        "error": {"code": "INVALID_TICKET", "message": "Invalid Ticket", "details": {}},
    }


def test_app_error_keeps_details() -> None:
    error = AppError(status.HTTP_400_BAD_REQUEST, "INVALID_REQUEST", "Invalid Request", {"a": 1})

    assert str(error) == "Invalid Request"
    assert error.details == {"a": 1}


def test_unknown_route_uses_error_envelope(client: TestClient) -> None:
    response = client.get("/api/v1/nothing-here")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["success"] is False
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_wrong_method_uses_error_envelope(client: TestClient) -> None:
    response = client.patch("/api/v1/tickets/types")

    assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
    assert response.json()["error"]["code"] == "METHOD_NOT_ALLOWED"
