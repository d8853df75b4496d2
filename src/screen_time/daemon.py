"""Poll the focused application and keep the day log up to date."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from .app_info import AppInfoTable
from .config import LoggerSettings
from .errors import LogDesyncError, LogWriteError, SamplerError, StartupError
from .frames import Operation, Prepare, UpdatePrevious, WriteNew, decide, should_ignore_app
from .logfile import FrameLog
from .models import Frame
from .paths import app_info_path, day_log_path
from .retention import clean_up_old_logs
from .sampler import Sampler

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CurrentState:
    """Everything the loop knows about the open day log."""

    last_date: date
    log: FrameLog
    last_frame: Optional[Frame] = None

    @property
    def last_write_length(self) -> int:
        return self.log.last_write_length


class ScreenTimeDaemon:
    """Samples the focused application at a fixed interval and logs frames."""

    def __init__(
        self,
        settings: LoggerSettings,
        sampler: Sampler,
        *,
        clock: Callable[[], float] = time.time,
        today: Callable[[], date] = date.today,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings
        self._sampler = sampler
        self._clock = clock
        self._today = today
        self._sleep = sleep
        self._state: Optional[CurrentState] = None
        self._app_info: Optional[AppInfoTable] = None

    @property
    def state(self) -> CurrentState:
        if self._state is None:
            raise RuntimeError("Daemon has not been started")
        return self._state

    def start(self) -> None:
        """Prepare the storage directory, side table and today's log."""
        data_dir = self.settings.data_dir
        try:
            data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StartupError(f"Couldn't create storage directory {data_dir}: {exc}") from exc

        today = self._today()
        self._clean_up(today)
        try:
            self._app_info = AppInfoTable.load(app_info_path(data_dir))
        except OSError as exc:
            raise StartupError(f"Cannot open or create app info log: {exc}") from exc
        self._state = self._open_state(today)
        logger.info("Starting activity logger; writing to %s", self._state.log.path)

    def run_forever(self) -> None:
        self.start()
        interval = self.settings.interval_seconds
        first_cycle = True
        try:
            while True:
                # The first cycle samples immediately.
                if not first_cycle:
                    self._sleep(interval)
                first_cycle = False
                self.run_cycle()
        except KeyboardInterrupt:
            logger.info("Activity logger interrupted.")
        finally:
            self.close()

    def run_cycle(self) -> Optional[Operation]:
        """Sample once and persist the result; returns the applied operation, if any."""
        state = self.state
        today = self._today()
        if today != state.last_date:
            state = self._roll_over(today)

        try:
            name = self._sampler.get_focused_application()
        except SamplerError as exc:
            logger.warning("Error reading active application: %s", exc)
            state.last_frame = None
            return None

        if should_ignore_app(name, self.settings.ignored_apps):
            logger.debug("Ignoring system app %r", name)
            state.last_frame = None
            return None

        now = int(self._clock())
        logger.debug("Active app: %s", name)
        self._learn_launcher(name)

        operation = decide(state.last_frame, name, now, self.settings.tolerance)
        try:
            state.last_frame = self._apply(state, operation)
        except (LogWriteError, LogDesyncError) as exc:
            logger.error("Activity log not updated, starting a new frame: %s", exc)
            state.last_frame = None
            return None
        return operation

    def close(self) -> None:
        if self._state is not None:
            self._state.log.close()
            logger.info("Activity logger stopped.")

    @staticmethod
    def _apply(state: CurrentState, operation: Operation) -> Frame:
        if isinstance(operation, Prepare):
            return operation.frame
        if isinstance(operation, WriteNew):
            state.log.write_new(operation.frame)
            return operation.frame
        if isinstance(operation, UpdatePrevious):
            if state.last_frame is None:
                raise LogDesyncError("No frame to extend")
            frame = operation.apply(state.last_frame)
            state.log.update_previous(operation.end)
            return frame
        raise TypeError(f"Unknown frame operation {operation!r}")

    def _open_state(self, day: date) -> CurrentState:
        path = day_log_path(self.settings.data_dir, day)
        try:
            log = FrameLog.open(path)
        except OSError as exc:
            raise StartupError(f"Cannot open or create screen time log {path}: {exc}") from exc
        return CurrentState(last_date=day, log=log)

    def _roll_over(self, day: date) -> CurrentState:
        logger.info("New day! Switching to new file")
        self.state.log.close()
        self._state = self._open_state(day)
        self._clean_up(day)
        return self._state

    def _clean_up(self, day: date) -> None:
        try:
            clean_up_old_logs(self.settings.data_dir, day, self.settings.retention_days)
        except OSError as exc:
            logger.warning("Cleanup of old logs failed: %s", exc)

    def _learn_launcher(self, name: str) -> None:
        if self._app_info is None or name in self._app_info:
            return
        launcher = self._sampler.get_launcher_path(name)
        if not launcher:
            return
        try:
            self._app_info.learn(name, launcher)
        except OSError as exc:
            logger.warning("Couldn't save app info file: %s", exc)
