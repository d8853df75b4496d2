"""Helpers for locating application directories and files."""

from __future__ import annotations

from datetime import date
from pathlib import Path

from platformdirs import PlatformDirs


APP_NAME = "ScreenTime"
APP_AUTHOR = "ScreenTime"

DATA_DIR_NAME = ".screen-time"
DATE_FORMAT = "%b-%d-%Y"
LOG_SUFFIX = ".csv"
APP_INFO_FILENAME = "app-names.csv"


def get_data_dir() -> Path:
    """Return the directory holding day logs and the app-info table."""
    return Path.home() / DATA_DIR_NAME


def get_log_path() -> Path:
    """Return the diagnostic log file, creating its directory."""
    dirs = PlatformDirs(appname=APP_NAME, appauthor=APP_AUTHOR)
    path = Path(dirs.user_log_path)
    path.mkdir(parents=True, exist_ok=True)
    return path / "screen-time.log"


def day_log_name(day: date) -> str:
    return f"{day.strftime(DATE_FORMAT)}{LOG_SUFFIX}"


def day_log_path(data_dir: Path, day: date) -> Path:
    return Path(data_dir) / day_log_name(day)


def app_info_path(data_dir: Path) -> Path:
    return Path(data_dir) / APP_INFO_FILENAME
