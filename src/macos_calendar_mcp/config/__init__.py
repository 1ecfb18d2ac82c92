"""Configuration models and helpers."""

from __future__ import annotations

from .settings import (
    APP_NAME,
    AppSettings,
    CalendarSettings,
    LoggingSettings,
    RunnerSettings,
    ServerSettings,
    get_settings,
)

__all__ = [
    "APP_NAME",
    "AppSettings",
    "CalendarSettings",
    "LoggingSettings",
    "RunnerSettings",
    "ServerSettings",
    "get_settings",
]
