"""Per-day frame log: append records and correct the last end timestamp in place.

Each record is one line, ``name;start;end``. While a frame keeps being
extended only its trailing ``end`` field is rewritten. The writer remembers
the absolute offset and exact bytes of that field and checks them against the
file before every rewrite, so a file changed behind its back is reported
instead of silently corrupted.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import BinaryIO, Optional

from .errors import LogDesyncError, LogWriteError
from .models import Frame

logger = logging.getLogger(__name__)

DELIM = ";"
ENCODING = "utf-8"
_FORBIDDEN_IN_NAME = (DELIM, "\n", "\r")


def format_suffix(end: int) -> bytes:
    return f"{end}\n".encode(ENCODING)


class FrameLog:
    """Append-only record store with in-place correction of the last end field."""

    def __init__(self, path: Path, handle: BinaryIO) -> None:
        self.path = Path(path)
        self._handle = handle
        self._suffix_offset: Optional[int] = None
        self._suffix: bytes = b""

    @classmethod
    def open(cls, path: Path) -> "FrameLog":
        """Open (creating if needed) a day log positioned after its last record.

        Raises ``OSError`` when the file cannot be opened.
        """
        path = Path(path)
        path.touch(exist_ok=True)
        handle = open(path, "r+b")
        try:
            _drop_incomplete_tail(handle, path)
            handle.seek(0, os.SEEK_END)
        except OSError:
            handle.close()
            raise
        return cls(path, handle)

    @property
    def last_write_length(self) -> int:
        """Byte length of the end suffix most recently written, 0 if none."""
        return len(self._suffix)

    @property
    def has_open_record(self) -> bool:
        return self._suffix_offset is not None

    def write_new(self, frame: Frame) -> int:
        """Append ``frame`` as a full record and return the length of its end suffix."""
        if any(token in frame.name for token in _FORBIDDEN_IN_NAME):
            raise LogWriteError(f"Application name {frame.name!r} cannot be stored in the log")

        head = f"{frame.name}{DELIM}{frame.start}{DELIM}".encode(ENCODING)
        suffix = format_suffix(frame.end)
        self._forget_suffix()
        try:
            size_before = self._handle.seek(0, os.SEEK_END)
        except OSError as exc:
            raise LogWriteError(f"Couldn't seek in {self.path}: {exc}") from exc

        try:
            self._handle.write(head + suffix)
            self._sync()
        except OSError as exc:
            self._restore(size_before, b"")
            raise LogWriteError(f"Couldn't write activity log {self.path}: {exc}") from exc

        self._suffix_offset = size_before + len(head)
        self._suffix = suffix
        return len(suffix)

    def update_previous(self, new_end: int) -> int:
        """Replace the end field of the last record and return the new suffix length."""
        if self._suffix_offset is None:
            raise LogDesyncError(f"No record to update in {self.path}")

        offset = self._suffix_offset
        old_suffix = self._suffix
        self._check_suffix(offset, old_suffix)

        suffix = format_suffix(new_end)
        try:
            self._handle.seek(offset)
            self._handle.write(suffix)
            self._handle.truncate()
            self._sync()
        except OSError as exc:
            self._forget_suffix()
            self._restore(offset, old_suffix)
            raise LogWriteError(f"Couldn't update activity log {self.path}: {exc}") from exc

        self._suffix = suffix
        return len(suffix)

    def close(self) -> None:
        self._forget_suffix()
        self._handle.close()

    def __enter__(self) -> "FrameLog":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _check_suffix(self, offset: int, expected: bytes) -> None:
        try:
            size = self._handle.seek(0, os.SEEK_END)
            if size != offset + len(expected):
                self._forget_suffix()
                raise LogDesyncError(
                    f"{self.path} is {size} bytes, expected {offset + len(expected)}"
                )
            self._handle.seek(offset)
            on_disk = self._handle.read(len(expected))
        except OSError as exc:
            self._forget_suffix()
            raise LogWriteError(f"Couldn't read back {self.path}: {exc}") from exc
        if on_disk != expected:
            self._forget_suffix()
            raise LogDesyncError(
                f"Last end field of {self.path} is {on_disk!r}, expected {expected!r}"
            )

    def _sync(self) -> None:
        self._handle.flush()
        os.fsync(self._handle.fileno())

    def _restore(self, offset: int, data: bytes) -> None:
        try:
            self._handle.seek(offset)
            self._handle.truncate()
            if data:
                self._handle.write(data)
            self._sync()
        except OSError:
            logger.exception("Failed to restore %s after a write error.", self.path)

    def _forget_suffix(self) -> None:
        self._suffix_offset = None
        self._suffix = b""


def _drop_incomplete_tail(handle: BinaryIO, path: Path) -> None:
    size = handle.seek(0, os.SEEK_END)
    if size == 0:
        return
    handle.seek(size - 1)
    if handle.read(1) == b"\n":
        return
    handle.seek(0)
    keep = handle.read().rfind(b"\n") + 1
    handle.seek(keep)
    handle.truncate()
    handle.flush()
    logger.warning("Dropped %d bytes of an incomplete record from %s", size - keep, path)


def parse_record(line: str) -> Frame:
    """Parse one ``name;start;end`` line (without its newline)."""
    parts = line.split(DELIM)
    if len(parts) != 3:
        raise ValueError(f"Expected 3 fields, got {len(parts)}: {line!r}")
    name, start, end = parts
    return Frame(name=name, start=int(start), end=int(end))


def read_records(path: Path) -> list[Frame]:
    """Read every record of a day log."""
    text = Path(path).read_text(encoding=ENCODING)
    if text and not text.endswith("\n"):
        raise ValueError(f"{path} ends with an incomplete record")
    return [parse_record(line) for line in text.splitlines()]
