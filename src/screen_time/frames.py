"""Decide how each sample affects the frame currently being tracked."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from .config import IGNORED_APPS
from .models import Frame

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Prepare:
    """Start tracking a single-sample frame without touching the log."""

    frame: Frame


@dataclass(slots=True, frozen=True)
class WriteNew:
    """Append the just-confirmed frame to the log as a full record."""

    frame: Frame


@dataclass(slots=True, frozen=True)
class UpdatePrevious:
    """Move the end of the last written record to ``end``."""

    end: int

    def apply(self, frame: Frame) -> Frame:
        return frame.extended(self.end)


Operation = Union[Prepare, WriteNew, UpdatePrevious]


def decide(
    last_frame: Optional[Frame],
    name: str,
    now: int,
    tolerance: int,
) -> Operation:
    """Return the operation that records ``name`` observed at ``now``.

    A frame reaches the log only once its application is seen a second
    time, and afterwards each matching sample extends it. Both only happen
    while the gap since the previous sample stays below ``tolerance``
    seconds; a longer gap means the machine was suspended or idle, and
    tracking starts over.
    """
    if last_frame is not None and last_frame.name == name:
        elapsed = now - last_frame.end
        if 0 <= elapsed < tolerance:
            if not last_frame.is_confirmed:
                return WriteNew(Frame(name=name, start=last_frame.start, end=now))
            return UpdatePrevious(now)

        if elapsed < 0:
            logger.warning(
                "Clock moved back %d seconds since %s was last logged; "
                "creating a new record.",
                -elapsed,
                name,
            )
            return Prepare(Frame(name=name, start=now, end=now))

        logger.info(
            "Too much time passed since %s was last logged (%d seconds); "
            "creating a new record.",
            name,
            elapsed,
        )

    return Prepare(Frame(name=name, start=now, end=now))


def should_ignore_app(name: str, ignored: Iterable[str] = IGNORED_APPS) -> bool:
    """Return True for desktop-shell surfaces that are not real applications."""
    if len(name) <= 1:
        return True
    return name in tuple(ignored)
