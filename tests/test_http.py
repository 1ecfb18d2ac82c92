from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from macos_calendar_mcp.core.applescript import RECORD_SEPARATOR
from macos_calendar_mcp.domain import ErrorKind, Failure, Success
from macos_calendar_mcp.services.http import app


@pytest.fixture
def client(patched_api_state):
    return TestClient(app)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_lists_all_tools(client):
    response = client.get("/api/functions")
    assert response.status_code == 200
    names = {function["name"] for function in response.json()["functions"]}
    assert names == {
        "list-calendars",
        "create-event",
        "create-batch-events",
        "delete-events-by-keyword",
        "list-today-events",
        "list-week-events",
        "search-events",
        "fix-event-times",
    }
    create = next(f for f in response.json()["functions"] if f["name"] == "create-event")
    assert create["parameters"]["required"] == ["title", "start_date", "end_date"]
    assert create["parameters"]["properties"]["calendar"] == {"type": "string"}


def test_invoke_list_calendars(client, fake_runner):
    fake_runner.handler = lambda spec: Success(RECORD_SEPARATOR.join(["Personal", "Work"]))
    response = client.post("/api/functions/list-calendars", json={"arguments": {}})
    assert response.status_code == 200
    assert response.json() == {"name": "list-calendars", "result": {"calendars": ["Personal", "Work"], "count": 2}}


def test_unknown_tool_is_404(client):
    response = client.post("/api/functions/rename-calendar", json={"arguments": {}})
    assert response.status_code == 404


@pytest.mark.parametrize(
    ("message", "status", "flag"),
    [
        ("Not authorized to send Apple events", 403, "permissionDenied"),
        ('Can\'t get calendar "Wrok"', 404, "targetNotFound"),
        ("syntax error", 502, "unknown"),
    ],
)
def test_failures_map_to_status(client, fake_runner, message, status, flag):
    fake_runner.handler = lambda spec: Failure(ErrorKind.UNKNOWN, message)
    response = client.post("/api/functions/list-today-events", json={"arguments": {"calendar": "Wrok"}})
    assert response.status_code == status
    assert response.json()["detail"][flag] is True


def test_timeout_maps_to_504(client, fake_runner):
    fake_runner.handler = lambda spec: Failure(ErrorKind.TIMEOUT, "Script 'list-today-events' timed out after 5s")
    response = client.post("/api/functions/list-today-events", json={"arguments": {}})
    assert response.status_code == 504
    assert response.json()["detail"]["timeout"] is True


def test_validation_error_is_422(client, fake_runner):
    response = client.post(
        "/api/functions/create-event",
        json={"arguments": {"title": "x", "start_date": "soon", "end_date": "2025-01-15 10:00"}},
    )
    assert response.status_code == 422
    assert response.json()["detail"]["validationError"] is True
    assert "soon" in response.json()["detail"]["error"]
    assert fake_runner.calls == []


def test_missing_argument_is_422(client):
    response = client.post("/api/functions/create-event", json={"arguments": {"title": "x"}})
    assert response.status_code == 422


def test_batch_partial_failure_is_200(client, fake_runner):
    fake_runner.handler = lambda spec: Success("uid")
    response = client.post(
        "/api/functions/create-batch-events",
        json={
            "arguments": {
                "events": [
                    {"title": "A", "startDate": "2025-01-15 10:00", "endDate": "2025-01-15 11:00"},
                    {"title": "B", "startDate": "bad", "endDate": "2025-01-15 11:00"},
                ]
            }
        },
    )
    assert response.status_code == 200
    result = response.json()["result"]
    assert (result["successCount"], result["failCount"]) == (1, 1)
    assert result["results"][1]["validationError"] is True


def test_fix_event_times_non_object_correction_is_an_item_failure(client, fake_runner):
    fake_runner.handler = lambda spec: Success("2\n")
    response = client.post(
        "/api/functions/fix-event-times",
        json={
            "arguments": {
                "date_pattern": "2025-01-15",
                "corrections": ["oops", {"keyword": "Sync", "newStartTime": "14:00", "newEndTime": "15:00"}],
            }
        },
    )
    assert response.status_code == 200
    result = response.json()["result"]
    assert (result["successCount"], result["failCount"], result["fixedEvents"]) == (1, 1, 2)
    assert result["results"][0]["validationError"] is True
    assert "keyword" not in result["results"][0]


def test_delete_without_confirm_asks_first(client, fake_runner):
    response = client.post("/api/functions/delete-events-by-keyword", json={"arguments": {"keyword": "Standup"}})
    assert response.status_code == 200
    assert response.json()["result"]["requiresConfirmation"] is True
    assert fake_runner.calls == []
