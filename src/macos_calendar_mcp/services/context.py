from __future__ import annotations

from dataclasses import dataclass, field

from ..config import AppSettings, get_settings
from ..core import ProcessRunner


@dataclass(slots=True)
class ServiceContext:
    """Aggregate root for services to share settings and the process runner."""

    settings: AppSettings = field(default_factory=get_settings)
    runner: ProcessRunner = field(init=False)

    def __post_init__(self) -> None:
        self.runner = ProcessRunner(
            self.settings.runner.command,
            grace_period=self.settings.runner.grace_period,
            max_output_bytes=self.settings.runner.max_output_bytes,
        )

    @property
    def timeout(self) -> float:
        return self.settings.runner.timeout_seconds
