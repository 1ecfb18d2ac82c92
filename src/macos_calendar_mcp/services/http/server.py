from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ...api import ApiFunction, api_state, call_api, get_api_functions
from ...api.serializers import serialize_error
from ...config import get_settings
from ...core import CalendarError, ValidationError
from ...domain import ErrorKind

logger = logging.getLogger(__name__)

STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_ERROR: 422,
    ErrorKind.PERMISSION_DENIED: 403,
    ErrorKind.TARGET_NOT_FOUND: 404,
    ErrorKind.TIMEOUT: 504,
    ErrorKind.UNKNOWN: 502,
}

app = FastAPI(title="macOS Calendar API", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ApiCallRequest(BaseModel):
    arguments: Dict[str, Any] = Field(default_factory=dict)


def _serialize_api_function(api_function: ApiFunction) -> dict:
    return {
        "name": api_function.name,
        "description": api_function.description,
        "category": api_function.category,
        "tags": list(api_function.tags),
        "parameters": api_function.parameter_schema,
    }


@app.get("/health")
async def health() -> JSONResponse:
    return JSONResponse({"status": "ok"})


@app.get("/api/functions")
async def list_api_functions() -> JSONResponse:
    functions = [_serialize_api_function(func) for func in get_api_functions()]
    return JSONResponse({"functions": functions})


@app.post("/api/functions/{function_name}")
async def invoke_api_function(function_name: str, request: ApiCallRequest) -> JSONResponse:
    try:
        result = await call_api(function_name, **request.arguments)
    except KeyError as exc:
        logger.warning("API function not found: %s", function_name)
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except TypeError as exc:
        # Missing or unexpected keyword arguments for the tool function.
        error = ValidationError(str(exc))
        raise HTTPException(status_code=422, detail=serialize_error(error)) from exc
    except CalendarError as exc:
        status = STATUS_BY_KIND.get(exc.kind, 502)
        logger.info("API function %s failed (%s): %s", function_name, exc.kind.value, exc.message)
        raise HTTPException(status_code=status, detail=serialize_error(exc)) from exc
    logger.debug("API function %s executed successfully", function_name)
    return JSONResponse({"name": function_name, "result": result})


async def _serve(host: str, port: int) -> None:
    from hypercorn.asyncio import serve
    from hypercorn.config import Config

    config = Config()
    config.bind = [f"{host}:{port}"]
    try:
        await serve(app, config)
    finally:
        await api_state.context.runner.drain()


def run_local_server(host: Optional[str] = None, port: Optional[int] = None) -> None:
    settings = get_settings().server
    bind_host = host or settings.host
    bind_port = port or settings.port
    logger.info("HTTP API listening on http://%s:%s", bind_host, bind_port)
    asyncio.run(_serve(bind_host, bind_port))
