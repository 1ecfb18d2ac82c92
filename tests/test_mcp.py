from __future__ import annotations

import orjson
import pytest
from fastmcp import Client
from fastmcp.exceptions import ToolError

from macos_calendar_mcp.core.applescript import RECORD_SEPARATOR
from macos_calendar_mcp.domain import ErrorKind, Failure, Success
from macos_calendar_mcp.services.mcp import build_mcp_server


@pytest.fixture
def server(patched_api_state):
    return build_mcp_server()


async def test_all_tools_are_listed(server):
    async with Client(server) as client:
        tools = await client.list_tools()
    by_name = {tool.name: tool for tool in tools}
    assert set(by_name) == {
        "list-calendars",
        "create-event",
        "create-batch-events",
        "delete-events-by-keyword",
        "list-today-events",
        "list-week-events",
        "search-events",
        "fix-event-times",
    }
    schema = by_name["create-event"].inputSchema
    assert set(schema["required"]) == {"title", "start_date", "end_date"}


async def test_call_tool_returns_json_payload(server, fake_runner):
    fake_runner.handler = lambda spec: Success(RECORD_SEPARATOR.join(["Personal", "Work"]))
    async with Client(server) as client:
        result = await client.call_tool("list-calendars", {})
    payload = orjson.loads(result.content[0].text)
    assert payload == {"calendars": ["Personal", "Work"], "count": 2}


async def test_tool_failure_carries_error_envelope(server, fake_runner):
    fake_runner.handler = lambda spec: Failure(ErrorKind.UNKNOWN, "Not authorized to send Apple events (-1743)")
    async with Client(server) as client:
        with pytest.raises(ToolError) as excinfo:
            await client.call_tool("list-today-events", {"calendar": "Work"})
    envelope = orjson.loads(str(excinfo.value))
    assert envelope["permissionDenied"] is True
    assert envelope["suggestion"]


async def test_batch_tool_reports_per_item(server, fake_runner):
    fake_runner.handler = lambda spec: Success("uid")
    async with Client(server) as client:
        result = await client.call_tool(
            "create-batch-events",
            {
                "events": [
                    {"title": "A", "startDate": "2025-01-15 10:00", "endDate": "2025-01-15 11:00"},
                    {"title": "B", "startDate": "2025-13-15", "endDate": "2025-01-15 11:00"},
                ],
                "calendar": "Work",
            },
        )
    payload = orjson.loads(result.content[0].text)
    assert payload["successCount"] == 1
    assert payload["failCount"] == 1
