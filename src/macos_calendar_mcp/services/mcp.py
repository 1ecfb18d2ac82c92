from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable, Dict, Optional

import orjson
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from starlette.requests import Request
from starlette.responses import JSONResponse

from ..api import ApiFunction, api_state, get_api_functions
from ..api.serializers import serialize_error
from ..config import get_settings
from ..core import CalendarError

logger = logging.getLogger(__name__)

SERVER_NAME = "macos-calendar-mcp"
INSTRUCTIONS = (
    "Tools for the macOS Calendar app. Dates use 'YYYY-MM-DD HH:MM' (24-hour). "
    "Run list-calendars first when unsure of a calendar name; names are case-sensitive. "
    "Batch tools report failures per item instead of failing the whole call."
)


def _tool_for(api_function: ApiFunction) -> Callable[..., Any]:
    """Wrap a registered function so calendar failures surface as MCP tool errors."""

    async def _tool_wrapper(**kwargs: Any) -> Dict[str, Any]:
        try:
            return await api_function.invoke(**kwargs)
        except CalendarError as exc:
            logger.info("Tool %s failed (%s): %s", api_function.name, exc.kind.value, exc.message)
            raise ToolError(orjson.dumps(serialize_error(exc)).decode()) from exc

    _tool_wrapper.__name__ = api_function.func.__name__
    _tool_wrapper.__doc__ = api_function.description
    _tool_wrapper.__signature__ = api_function.signature.replace(  # type: ignore[attr-defined]
        parameters=[
            param.replace(annotation=api_function.annotations.get(param.name, inspect.Parameter.empty))
            for param in api_function.signature.parameters.values()
        ],
        return_annotation=Dict[str, Any],
    )
    _tool_wrapper.__annotations__ = {**api_function.annotations, "return": Dict[str, Any]}
    return _tool_wrapper


def build_mcp_server() -> FastMCP:
    server = FastMCP(name=SERVER_NAME, instructions=INSTRUCTIONS)

    for api_function in get_api_functions():
        logger.debug("Registering MCP tool: %s", api_function.name)
        server.tool(
            _tool_for(api_function),
            name=api_function.name,
            description=api_function.description,
            tags=set(api_function.tags),
        )

    @server.custom_route("/health", methods=["GET"])
    async def health(request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok"})

    return server


async def _serve(server: FastMCP, transport: str, host: str, port: int) -> None:
    try:
        if transport == "http":
            logger.info("MCP server listening on http://%s:%s/mcp", host, port)
            await server.run_streamable_http_async(host=host, port=port)
        else:
            logger.info("MCP server running on stdio")
            await server.run_stdio_async()
    finally:
        await api_state.context.runner.drain()


def run_mcp_server(
    transport: Optional[str] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
) -> None:
    settings = get_settings().server
    server = build_mcp_server()
    asyncio.run(
        _serve(
            server,
            transport or settings.transport,
            host or settings.host,
            port or settings.port,
        )
    )
