from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from ..config import get_settings

_INITIALIZED = False


def configure_logging(*, level: Optional[str] = None, log_dir: Optional[Path] = None) -> None:
    """Configure application-wide logging: stderr plus a rotating log file.

    stdout is reserved for the MCP stdio transport, so console output goes to
    stderr. Calling this more than once is a no-op.
    """

    global _INITIALIZED
    if _INITIALIZED:
        return

    settings = get_settings().logging
    resolved_level = getattr(logging, (level or settings.level).upper(), logging.INFO)

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root = logging.getLogger()
    root.setLevel(resolved_level)
    root.addHandler(console_handler)
    _INITIALIZED = True

    logger = logging.getLogger(__name__)
    directory = log_dir or settings.directory
    log_file = directory / "macos-calendar-mcp.log"
    try:
        directory.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            str(log_file),
            maxBytes=1_000_000,
            backupCount=settings.backups,
            encoding="utf-8",
        )
    except OSError as exc:
        logger.warning("File logging disabled; cannot open %s: %s", log_file, exc)
        return
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)
    logger.debug("Logging configured. Output file: %s", log_file)
