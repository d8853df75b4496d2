"""Error taxonomy for the activity logger.

Sampler and log errors are recovered inside the daemon loop; a
``StartupError`` is fatal and ends the process.
"""

from __future__ import annotations

from typing import Optional


class ScreenTimeError(Exception):
    """Base class for all errors raised by this package."""


class SamplerError(ScreenTimeError):
    """The focused application could not be determined for this cycle."""

    WINDOW_ID = "window-id"
    CLASS = "class"
    DESKTOP_PATH = "desktop-path"
    DECODE = "decode"
    EXEC = "exec"

    def __init__(self, kind: str, detail: Optional[str] = None) -> None:
        self.kind = kind
        self.detail = detail
        message = kind if detail is None else f"{kind}: {detail}"
        super().__init__(message)


class LogWriteError(ScreenTimeError):
    """Writing, flushing or truncating the day log failed."""


class LogDesyncError(ScreenTimeError):
    """The day log no longer matches what the writer last wrote."""


class StartupError(ScreenTimeError):
    """Storage or log files could not be prepared; the logger cannot run."""
