"""Removal of day logs older than the retention window."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from pathlib import Path

from .paths import DATE_FORMAT, LOG_SUFFIX

logger = logging.getLogger(__name__)

DEFAULT_KEEP_DAYS = 14


def parse_log_date(filename: str) -> date:
    """Return the date encoded in a day-log filename; ``ValueError`` if it is not one."""
    return datetime.strptime(filename, f"{DATE_FORMAT}{LOG_SUFFIX}").date()


def clean_up_old_logs(
    directory: Path, today: date, keep_days: int = DEFAULT_KEEP_DAYS
) -> list[Path]:
    """Delete day logs dated before ``today - keep_days`` and return their paths.

    Files that are not day logs are left alone. Failures on individual files
    are logged and skipped.
    """
    last_allowed = today - timedelta(days=keep_days)
    removed: list[Path] = []
    for entry in sorted(Path(directory).iterdir()):
        if not entry.is_file():
            continue
        try:
            file_date = parse_log_date(entry.name)
        except ValueError as exc:
            logger.debug("Cleanup: not removing %s, it is not a log file (%s)", entry.name, exc)
            continue
        if file_date >= last_allowed:
            continue
        try:
            entry.unlink()
        except OSError as exc:
            logger.warning("Cleanup: error removing %s: %s", entry, exc)
            continue
        logger.info("Removed old log %s", entry)
        removed.append(entry)
    return removed
