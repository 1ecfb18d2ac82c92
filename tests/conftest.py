"""Shared fixtures: explicit settings and a scripted stand-in for the process runner."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional

import pytest

from macos_calendar_mcp import i18n
from macos_calendar_mcp.config import AppSettings, CalendarSettings, LoggingSettings, RunnerSettings, ServerSettings
from macos_calendar_mcp.domain import ExecutionOutcome, ScriptSpec, Success
from macos_calendar_mcp.services import CalendarService, ServiceContext

Handler = Callable[[ScriptSpec], ExecutionOutcome]


class FakeRunner:
    """Records every script and answers with ``handler(spec)`` instead of spawning osascript."""

    def __init__(self, handler: Optional[Handler] = None) -> None:
        self.handler = handler or (lambda spec: Success(""))
        self.calls: List[ScriptSpec] = []
        self.deadlines: List[float] = []
        self.drained = False

    async def run(self, spec: ScriptSpec, deadline: float) -> ExecutionOutcome:
        self.calls.append(spec)
        self.deadlines.append(deadline)
        return self.handler(spec)

    async def drain(self) -> None:
        self.drained = True

    @property
    def sources(self) -> List[str]:
        return [spec.source for spec in self.calls]


def make_settings(log_dir: Path, **calendar_overrides) -> AppSettings:
    calendar = dict(
        default_calendar="Personal",
        work_calendar="Work",
        batch_concurrency=1,
        fanout_concurrency=4,
        search_result_cap=50,
        report_skipped=False,
    )
    calendar.update(calendar_overrides)
    return AppSettings(
        runner=RunnerSettings(
            interpreter="osascript",
            timeout_seconds=5.0,
            grace_period=0.2,
            max_output_bytes=1024 * 1024,
        ),
        calendar=CalendarSettings(**calendar),
        server=ServerSettings(transport="stdio", host="127.0.0.1", port=3000),
        logging=LoggingSettings(level="DEBUG", directory=log_dir, backups=1),
        language="en",
    )


@pytest.fixture(autouse=True)
def _english_messages():
    i18n.set_language("en")
    yield
    i18n.set_language("en")


@pytest.fixture
def settings(tmp_path: Path) -> AppSettings:
    return make_settings(tmp_path)


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def context(settings: AppSettings, fake_runner: FakeRunner) -> ServiceContext:
    ctx = ServiceContext(settings=settings)
    ctx.runner = fake_runner
    return ctx


@pytest.fixture
def service(context: ServiceContext) -> CalendarService:
    return CalendarService(context)


@pytest.fixture
def patched_api_state(monkeypatch: pytest.MonkeyPatch, context: ServiceContext, service: CalendarService):
    """Point the registered tools at the fake-runner service."""

    from macos_calendar_mcp.api import api_state

    monkeypatch.setattr(api_state, "context", context)
    monkeypatch.setattr(api_state, "calendar", service)
    return api_state
