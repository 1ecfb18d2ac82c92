from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from .bootstrap import configure_logging
from .config import get_settings
from .i18n import set_language


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="macOS Calendar tools over MCP and HTTP.")
    subparsers = parser.add_subparsers(dest="command")

    mcp_parser = subparsers.add_parser("mcp", help="Start the MCP server (default command).")
    mcp_parser.add_argument("--transport", choices=("stdio", "http"), default=None)
    mcp_parser.add_argument("--host", default=None)
    mcp_parser.add_argument("--port", type=int, default=None)

    api_parser = subparsers.add_parser("api", help="Start the FastAPI server exposing the same tools.")
    api_parser.add_argument("--host", default=None)
    api_parser.add_argument("--port", type=int, default=None)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    configure_logging()
    settings = get_settings()
    set_language(settings.language)
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.getLogger(__name__).info("macos-calendar-mcp starting (%s)", args.command or "mcp")

    if args.command == "api":
        from .services.http import run_local_server

        run_local_server(host=args.host, port=args.port)
    else:
        from .services.mcp import run_mcp_server

        run_mcp_server(
            transport=getattr(args, "transport", None),
            host=getattr(args, "host", None),
            port=getattr(args, "port", None),
        )


if __name__ == "__main__":
    main()
