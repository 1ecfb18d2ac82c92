"""Message catalogs for user-facing suggestions and confirmations."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from .domain import ErrorKind

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en"

CATALOGS: Dict[str, Dict[str, str]] = {
    "en": {
        "suggestion.permission_denied": (
            "Grant Calendar access in System Settings > Privacy & Security > Calendars "
            "(and Automation) for the app running this server."
        ),
        "suggestion.target_not_found": (
            "Calendar '{calendar}' was not found. Run list-calendars to see the available names; "
            "names are case-sensitive."
        ),
        "suggestion.timeout": (
            "The Calendar script did not finish in time. Raise CALENDAR_SCRIPT_TIMEOUT_SECONDS "
            "or narrow the request (a specific calendar, fewer events)."
        ),
        "suggestion.no_matching_events": (
            "No event on that date has a title containing the keyword. Check the keyword, the date "
            "and the calendar with list-week-events or search-events."
        ),
        "delete.confirm": (
            "This will delete every event in calendar '{calendar}' whose title contains '{keyword}'. "
            "Call again with confirm=true to proceed."
        ),
    },
    "zh": {
        "suggestion.permission_denied": (
            "请在 系统设置 > 隐私与安全性 > 日历（以及自动化）中为运行此服务器的应用授予日历访问权限。"
        ),
        "suggestion.target_not_found": (
            "未找到日历 '{calendar}'。请先运行 list-calendars 查看可用名称；名称区分大小写。"
        ),
        "suggestion.timeout": (
            "日历脚本未能按时完成。请调大 CALENDAR_SCRIPT_TIMEOUT_SECONDS，或缩小请求范围（指定日历、减少事件数量）。"
        ),
        "suggestion.no_matching_events": (
            "该日期没有标题包含此关键词的事件。请用 list-week-events 或 search-events 核对关键词、日期和日历。"
        ),
        "delete.confirm": (
            "此操作将删除日历 '{calendar}' 中标题包含 '{keyword}' 的所有事件。请设置 confirm=true 后再次调用以继续。"
        ),
    },
    "de": {
        "suggestion.permission_denied": (
            "Erteilen Sie der App, die diesen Server ausführt, Zugriff auf Kalender unter "
            "Systemeinstellungen > Datenschutz & Sicherheit > Kalender (und Automation)."
        ),
        "suggestion.target_not_found": (
            "Kalender '{calendar}' wurde nicht gefunden. Führen Sie list-calendars aus, um die "
            "verfügbaren Namen zu sehen; Groß- und Kleinschreibung wird beachtet."
        ),
        "suggestion.timeout": (
            "Das Kalender-Skript wurde nicht rechtzeitig fertig. Erhöhen Sie "
            "CALENDAR_SCRIPT_TIMEOUT_SECONDS oder grenzen Sie die Anfrage ein "
            "(bestimmter Kalender, weniger Termine)."
        ),
        "suggestion.no_matching_events": (
            "An diesem Datum gibt es keinen Termin, dessen Titel das Stichwort enthält. Prüfen Sie "
            "Stichwort, Datum und Kalender mit list-week-events oder search-events."
        ),
        "delete.confirm": (
            "Dadurch werden alle Termine im Kalender '{calendar}' gelöscht, deren Titel '{keyword}' "
            "enthält. Rufen Sie die Funktion erneut mit confirm=true auf, um fortzufahren."
        ),
    },
}

_language = DEFAULT_LANGUAGE


def set_language(language: str) -> None:
    global _language
    if language not in CATALOGS:
        logger.warning("Unsupported language %r; falling back to %s", language, DEFAULT_LANGUAGE)
        language = DEFAULT_LANGUAGE
    _language = language


def get_language() -> str:
    return _language


def translate(key: str, *, language: Optional[str] = None, **kwargs: object) -> str:
    """Look up ``key`` in the active catalog, falling back to English, then the key itself."""

    catalog = CATALOGS.get(language or _language, CATALOGS[DEFAULT_LANGUAGE])
    template = catalog.get(key) or CATALOGS[DEFAULT_LANGUAGE].get(key)
    if template is None:
        return key
    try:
        return template.format(**kwargs)
    except (KeyError, IndexError):
        logger.debug("Missing placeholder for %s; returning template unformatted", key)
        return template


def suggestion_for(kind: ErrorKind, *, calendar: Optional[str] = None) -> Optional[str]:
    """Return a remediation hint for ``kind``; validation and unknown errors have none."""

    if kind is ErrorKind.PERMISSION_DENIED:
        return translate("suggestion.permission_denied")
    if kind is ErrorKind.TARGET_NOT_FOUND:
        return translate("suggestion.target_not_found", calendar=calendar or "")
    if kind is ErrorKind.TIMEOUT:
        return translate("suggestion.timeout")
    return None
