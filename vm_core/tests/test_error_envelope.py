import pytest
from rest_framework.exceptions import NotFound
from rest_framework.test import APIRequestFactory

from vm_core.common.api.exceptions import ConflictError, RetryLater, api_exception_handler


def _handle(exc):
    request = APIRequestFactory().get("/api/v1/codes/")
    return api_exception_handler(exc, {"request": request, "view": None})


def test_conflict_carries_custom_code():
    resp = _handle(ConflictError("Cannot cancel used code.", code="code_not_cancellable"))

    assert resp.status_code == 409
    err = resp.data["error"]
    assert err["code"] == "code_not_cancellable"
    assert err["message"] == "Cannot cancel used code."
    assert err["details"] is None
    assert err["request_id"]


def test_retry_later_is_503():
    resp = _handle(RetryLater())

    assert resp.status_code == 503
    assert resp.data["error"]["code"] == "retry_later"


def test_not_found_envelope():
    resp = _handle(NotFound("Access code not found."))

    assert resp.status_code == 404
    assert resp.data["error"]["message"] == "Access code not found."


def test_unhandled_error_becomes_500_envelope():
    resp = _handle(RuntimeError("db went away"))

    assert resp.status_code == 500
    assert resp.data["error"]["code"] == "server_error"
    assert "db went away" not in resp.data["error"]["message"]


@pytest.mark.django_db
def test_api_validation_error_envelope(resident_client):
    r = resident_client.post("/api/v1/codes/", {}, format="json")

    assert r.status_code == 400
    body = r.json()
    assert body["error"]["code"] == "validation_error"
    assert body["error"]["message"] == "Request failed."
    assert "visit_date" in body["error"]["details"]
    assert "request_id" in body["error"]
