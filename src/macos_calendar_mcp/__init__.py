"""macOS Calendar operations exposed as MCP tools."""

from __future__ import annotations

__version__ = "1.0.0"


def main() -> None:
    from .cli import main as cli_main

    cli_main()


__all__ = ["__version__", "main"]
