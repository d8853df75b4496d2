from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Optional, Union

import pytest

from screen_time.config import LoggerSettings
from screen_time.daemon import ScreenTimeDaemon
from screen_time.errors import SamplerError
from screen_time.sampler import Sampler

DAY = date(2026, 10, 18)


class ScriptedSampler(Sampler):
    """Returns queued identifiers; queued exceptions are raised instead."""

    def __init__(self, launchers: Optional[dict[str, str]] = None) -> None:
        self.queue: list[Union[str, SamplerError]] = []
        self.launchers = dict(launchers or {})
        self.launcher_queries: list[str] = []

    def push(self, *samples: Union[str, SamplerError]) -> None:
        self.queue.extend(samples)

    def get_focused_application(self) -> str:
        sample = self.queue.pop(0)
        if isinstance(sample, SamplerError):
            raise sample
        return sample

    def get_launcher_path(self, name: str) -> Optional[str]:
        self.launcher_queries.append(name)
        return self.launchers.get(name)


class Harness:
    """Drives a daemon through samples at chosen times and dates."""

    def __init__(self, daemon: ScreenTimeDaemon, sampler: ScriptedSampler) -> None:
        self.daemon = daemon
        self.sampler = sampler
        self.now = 0
        self.day = DAY

    def sample(self, name: Union[str, SamplerError], at: int, day: Optional[date] = None):
        self.now = at
        if day is not None:
            self.day = day
        self.sampler.push(name)
        return self.daemon.run_cycle()

    def run(self, samples: Iterable[tuple[str, int]]):
        return [self.sample(name, at) for name, at in samples]


@pytest.fixture
def settings(tmp_path) -> LoggerSettings:
    return LoggerSettings(sample_interval=timedelta(seconds=3), data_dir=tmp_path / "data")


@pytest.fixture
def sampler() -> ScriptedSampler:
    return ScriptedSampler()


@pytest.fixture
def harness(settings, sampler):
    holder: dict[str, Harness] = {}
    daemon = ScreenTimeDaemon(
        settings,
        sampler,
        clock=lambda: holder["h"].now,
        today=lambda: holder["h"].day,
        sleep=lambda seconds: None,
    )
    holder["h"] = Harness(daemon, sampler)
    daemon.start()
    yield holder["h"]
    daemon.close()
