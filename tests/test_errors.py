import asyncio
import json

import pytest
from bson import ObjectId
from pymongo.errors import (
    AutoReconnect,
    DuplicateKeyError,
    NetworkTimeout,
    OperationFailure,
    ServerSelectionTimeoutError,
)

from chatbot_backend.repositories.base import parse_object_id
from chatbot_backend.repositories.users import UserRepository
from chatbot_backend.services.device_service import DeviceInfo
from chatbot_backend.utils.errors import (
    DuplicateKey,
    InternalError,
    NotFound,
    StorageUnavailable,
    ValidationFailed,
    error_response,
    storage_error,
)
from conftest import make_client, make_settings


@pytest.mark.parametrize("exc,expected", [
    (DuplicateKeyError("E11000 duplicate key"), DuplicateKey),
    (ServerSelectionTimeoutError("no servers"), StorageUnavailable),
    (NetworkTimeout("timed out"), StorageUnavailable),
    (AutoReconnect("connection reset"), StorageUnavailable),
    (OperationFailure("bad query"), InternalError),
])
def test_storage_error_mapping(exc, expected):
    assert isinstance(storage_error(exc), expected)


@pytest.mark.parametrize("error,status", [
    (ValidationFailed(), 400),
    (NotFound(), 404),
    (DuplicateKey(), 400),
    (StorageUnavailable(), 503),
    (InternalError(), 500),
])
def test_error_status_codes(error, status):
    assert error_response(error).status_code == status


def test_error_response_body():
    response = error_response(ValidationFailed("Invalid chatbot ID", details={"value": "x"}))

    assert json.loads(response.body) == {"error": "Invalid chatbot ID", "details": {"value": "x"}}


def test_stack_trace_only_in_debug():
    try:
        raise NotFound("Chatbot not found")
    except NotFound as exc:
        quiet = json.loads(error_response(exc).body)
        verbose = json.loads(error_response(exc, debug=True).body)

    assert "stack" not in quiet
    assert "NotFound" in verbose["stack"]


def test_parse_object_id():
    oid = ObjectId()

    assert parse_object_id(str(oid)) == oid
    with pytest.raises(ValidationFailed):
        parse_object_id("abc")


class RacingCollection:
    """Loses the insert race once, then behaves like an existing record"""

    def __init__(self):
        self.calls = []

    async def find_one_and_update(self, query, update, **kwargs):
        self.calls.append((update, kwargs))
        if kwargs.get("upsert"):
            raise DuplicateKeyError("E11000 duplicate key error")
        return {"_id": ObjectId(), **query, "messageCount": 2, "browser": "Chrome", "os": "Windows"}


def test_record_visit_falls_back_to_update_after_duplicate_key():
    collection = RacingCollection()
    repo = UserRepository({"users": collection})

    user = asyncio.run(repo.record_visit(
        device_id="device-a",
        chatbot_id=ObjectId(),
        ip_address="203.0.113.7",
        device=DeviceInfo("Chrome", "Windows"),
        user_agent="Mozilla/5.0",
    ))

    assert user["messageCount"] == 2
    assert len(collection.calls) == 2
    retry_update, retry_kwargs = collection.calls[1]
    assert "upsert" not in retry_kwargs
    assert "$setOnInsert" not in retry_update
    assert retry_update["$inc"] == {"messageCount": 1}
    assert retry_update["$set"]["ipAddress"] == "203.0.113.7"


def make_failing_client(tmp_path, exc, debug=False):
    """An app with one extra route that raises exc"""
    client = make_client(make_settings(tmp_path, debug=debug))

    @client.app.get("/api/failing")
    async def failing():
        raise exc

    return client


def test_unmapped_duplicate_key_is_a_client_error(tmp_path):
    with make_failing_client(tmp_path, DuplicateKeyError("E11000 duplicate key")) as client:
        response = client.get("/api/failing")

    assert response.status_code == 400
    assert response.json() == {"error": "A record with the same unique key already exists"}


def test_unmapped_connection_loss_asks_for_retry(tmp_path):
    with make_failing_client(tmp_path, AutoReconnect("connection reset")) as client:
        response = client.get("/api/failing")

    assert response.status_code == 503
    assert response.headers["retry-after"] == "5"


def test_unmapped_driver_error_is_internal(tmp_path):
    with make_failing_client(tmp_path, OperationFailure("bad query")) as client:
        response = client.get("/api/failing")

    assert response.status_code == 500
    assert response.json()["error"] == "bad query"


def test_unexpected_exception_becomes_500_without_stack(tmp_path):
    with make_failing_client(tmp_path, RuntimeError("kaboom")) as client:
        response = client.get("/api/failing")

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Internal server error"
    assert "kaboom" not in body["detail"]
    assert "stack" not in body


def test_unexpected_exception_shows_stack_in_debug(tmp_path):
    with make_failing_client(tmp_path, RuntimeError("kaboom"), debug=True) as client:
        response = client.get("/api/failing")

    assert response.status_code == 500
    body = response.json()
    assert body["detail"] == "kaboom"
    assert "RuntimeError: kaboom" in body["stack"]


def test_api_errors_show_stack_only_in_debug(tmp_path):
    with make_client(make_settings(tmp_path)) as client:
        quiet = client.get("/api/chatbots/not-an-id").json()
    with make_client(make_settings(tmp_path, debug=True)) as client:
        verbose = client.get("/api/chatbots/not-an-id").json()

    assert "stack" not in quiet
    assert "ValidationFailed" in verbose["stack"]
