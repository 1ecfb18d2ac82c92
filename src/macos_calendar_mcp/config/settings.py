from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv
from platformdirs import user_log_dir

load_dotenv()

APP_NAME = "macos-calendar-mcp"
SUPPORTED_LANGUAGES = ("en", "zh", "de")
TRANSPORTS = ("stdio", "http")


@dataclass(frozen=True)
class RunnerSettings:
    interpreter: str
    timeout_seconds: float
    grace_period: float
    max_output_bytes: int

    @property
    def command(self) -> Tuple[str, ...]:
        return (self.interpreter, "-e")


@dataclass(frozen=True)
class CalendarSettings:
    default_calendar: str
    work_calendar: str
    batch_concurrency: int
    fanout_concurrency: int
    search_result_cap: int
    report_skipped: bool


@dataclass(frozen=True)
class ServerSettings:
    transport: str
    host: str
    port: int


@dataclass(frozen=True)
class LoggingSettings:
    level: str
    directory: Path
    backups: int


@dataclass(frozen=True)
class AppSettings:
    runner: RunnerSettings
    calendar: CalendarSettings
    server: ServerSettings
    logging: LoggingSettings
    language: str


def _int_from_env(name: str, default: int, *, minimum: Optional[int] = None) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if minimum is not None and value < minimum:
        return default
    return value


def _float_from_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _bool_from_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _language_from_env() -> str:
    raw = os.getenv("CALENDAR_MCP_LANGUAGE") or os.getenv("LANGUAGE") or "en"
    # LANGUAGE may carry a locale list such as "de_DE:en".
    code = raw.split(":")[0].split("_")[0].split(".")[0].lower()
    return code if code in SUPPORTED_LANGUAGES else "en"


def _transport_from_env() -> str:
    raw = os.getenv("MCP_TRANSPORT", "stdio").strip().lower()
    return raw if raw in TRANSPORTS else "stdio"


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    runner = RunnerSettings(
        interpreter=os.getenv("CALENDAR_OSASCRIPT_BINARY", "osascript"),
        timeout_seconds=_float_from_env("CALENDAR_SCRIPT_TIMEOUT_SECONDS", 30.0),
        grace_period=_float_from_env("CALENDAR_KILL_GRACE_SECONDS", 1.0),
        max_output_bytes=_int_from_env("CALENDAR_MAX_OUTPUT_BYTES", 10 * 1024 * 1024, minimum=1),
    )

    calendar = CalendarSettings(
        default_calendar=os.getenv("CALENDAR_DEFAULT_CALENDAR", "Personal"),
        work_calendar=os.getenv("CALENDAR_WORK_CALENDAR", "Work"),
        batch_concurrency=_int_from_env("CALENDAR_BATCH_CONCURRENCY", 1, minimum=1),
        fanout_concurrency=_int_from_env("CALENDAR_FANOUT_CONCURRENCY", 4, minimum=1),
        search_result_cap=_int_from_env("CALENDAR_SEARCH_RESULT_CAP", 50, minimum=1),
        report_skipped=_bool_from_env("CALENDAR_SEARCH_REPORT_SKIPPED", False),
    )

    server = ServerSettings(
        transport=_transport_from_env(),
        host=os.getenv("MCP_HTTP_HOST", "0.0.0.0"),
        port=_int_from_env("MCP_HTTP_PORT", 3000, minimum=1),
    )

    logging = LoggingSettings(
        level=os.getenv("CALENDAR_MCP_LOG_LEVEL", "INFO").upper(),
        directory=Path(os.getenv("CALENDAR_MCP_LOG_DIR") or user_log_dir(APP_NAME, appauthor=False)),
        backups=_int_from_env("CALENDAR_MCP_LOG_BACKUPS", 5, minimum=0),
    )

    return AppSettings(
        runner=runner,
        calendar=calendar,
        server=server,
        logging=logging,
        language=_language_from_env(),
    )
