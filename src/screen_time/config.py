"""Configuration models and helpers for the activity logger."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path

from .paths import get_data_dir

IGNORED_APPS: tuple[str, ...] = ("Desktop", "unity-panel", "wingpanel")


@dataclass(slots=True)
class LoggerSettings:
    """Runtime configuration for the activity logger."""

    sample_interval: timedelta = timedelta(seconds=10)
    tolerance_factor: int = 5
    retention: timedelta = timedelta(days=14)
    data_dir: Path = field(default_factory=get_data_dir)
    ignored_apps: tuple[str, ...] = IGNORED_APPS

    @property
    def interval_seconds(self) -> float:
        return self.sample_interval.total_seconds()

    @property
    def tolerance(self) -> int:
        """Largest gap in seconds between samples that still counts as continuous."""
        return int(self.sample_interval.total_seconds() * self.tolerance_factor)

    @property
    def retention_days(self) -> int:
        return self.retention.days
