"""Platform probes that report the currently focused application."""

from __future__ import annotations

import ctypes
import logging
import shutil
import subprocess
import sys
from abc import ABC, abstractmethod
from typing import Optional

import psutil

from .errors import SamplerError, StartupError

logger = logging.getLogger(__name__)

XPROP = "xprop"
NO_WINDOW_ID = "0x0"


class Sampler(ABC):
    """Reports a stable identifier for the application that has focus."""

    @abstractmethod
    def get_focused_application(self) -> str:
        """Return the focused application's identifier or raise ``SamplerError``."""

    def get_launcher_path(self, name: str) -> Optional[str]:
        """Return the launcher (.desktop) path for the last sampled window, if known."""
        return None


class XpropSampler(Sampler):
    """Queries X11 window properties through the ``xprop`` utility.

    The identifier is the instance part of ``WM_CLASS``, e.g.
    ``chromium-browser`` for ``WM_CLASS(STRING) = "chromium-browser",
    "Chromium-browser"``.
    """

    def __init__(self, executable: str = XPROP, timeout: float = 5.0) -> None:
        resolved = shutil.which(executable)
        if resolved is None:
            raise StartupError(f"Failed to find {executable}. Do you have xprop installed?")
        self._executable = resolved
        self._timeout = timeout
        self._last_window: Optional[tuple[str, str]] = None

    def get_focused_application(self) -> str:
        self._last_window = None
        window_id = parse_active_window_id(
            self._query(SamplerError.WINDOW_ID, "-root", "_NET_ACTIVE_WINDOW")
        )
        name = parse_wm_class(self._query(SamplerError.CLASS, "-id", window_id, "WM_CLASS"))
        self._last_window = (name, window_id)
        return name

    def get_launcher_path(self, name: str) -> Optional[str]:
        if self._last_window is None or self._last_window[0] != name:
            return None
        window_id = self._last_window[1]
        try:
            output = self._query(SamplerError.DESKTOP_PATH, "-id", window_id, "_BAMF_DESKTOP_FILE")
            return parse_desktop_file(output)
        except SamplerError as exc:
            logger.debug("No launcher path for %s: %s", name, exc)
            return None

    def _query(self, kind: str, *args: str) -> str:
        try:
            completed = subprocess.run(
                [self._executable, *args],
                capture_output=True,
                check=True,
                timeout=self._timeout,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            raise SamplerError(SamplerError.EXEC, f"{kind}: {exc}") from exc
        try:
            return completed.stdout.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SamplerError(SamplerError.DECODE, f"{kind}: {exc}") from exc


def parse_active_window_id(output: str) -> str:
    """Extract the window id from ``_NET_ACTIVE_WINDOW(WINDOW): window id # 0x3a00007``."""
    words = output.split()
    if "#" not in words or words[-1] == "#":
        raise SamplerError(SamplerError.WINDOW_ID, output.strip() or "empty output")
    window_id = words[words.index("#") + 1].rstrip(",")
    if window_id == NO_WINDOW_ID:
        raise SamplerError(SamplerError.WINDOW_ID, "no focused window")
    return window_id


def parse_wm_class(output: str) -> str:
    """Return the first quoted value of a ``WM_CLASS`` line."""
    _, sep, values = output.partition("=")
    parts = values.split('"')
    if not sep or len(parts) < 3:
        raise SamplerError(SamplerError.CLASS, output.strip() or "empty output")
    return parts[1]


def parse_desktop_file(output: str) -> str:
    """Return the path of a ``_BAMF_DESKTOP_FILE(STRING) = "/path"`` line."""
    _, sep, value = output.partition("=")
    path = value.strip().strip('"')
    if not sep or not path:
        raise SamplerError(SamplerError.DESKTOP_PATH, output.strip() or "empty output")
    return path


class WindowsSampler(Sampler):
    """Uses the foreground window's process name as the identifier."""

    def __init__(self) -> None:
        self._user32 = ctypes.windll.user32  # type: ignore[attr-defined]

    def get_focused_application(self) -> str:
        from ctypes import wintypes

        hwnd = self._user32.GetForegroundWindow()
        if not hwnd:
            raise SamplerError(SamplerError.WINDOW_ID, "no foreground window")

        pid = wintypes.DWORD()
        self._user32.GetWindowThreadProcessId(hwnd, ctypes.byref(pid))
        if not pid.value:
            raise SamplerError(SamplerError.CLASS, "foreground window has no process")
        try:
            return psutil.Process(pid.value).name()
        except (psutil.Error, ProcessLookupError) as exc:
            raise SamplerError(SamplerError.CLASS, str(exc)) from exc

    def get_launcher_path(self, name: str) -> Optional[str]:
        for process in psutil.process_iter(["name", "exe"]):
            if process.info.get("name") == name and process.info.get("exe"):
                return process.info["exe"]
        return None


def make_sampler() -> Sampler:
    """Return the sampler for the running platform."""
    if sys.platform.startswith("win"):
        return WindowsSampler()
    return XpropSampler()
