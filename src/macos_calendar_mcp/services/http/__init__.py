"""Local HTTP API for the calendar tools."""

from .server import STATUS_BY_KIND, app, invoke_api_function, list_api_functions, run_local_server

__all__ = [
    "STATUS_BY_KIND",
    "app",
    "invoke_api_function",
    "list_api_functions",
    "run_local_server",
]
