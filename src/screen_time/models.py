"""Domain models for recorded activity."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class Frame:
    """A contiguous period during which one application held focus.

    ``start`` and ``end`` are Unix timestamps in whole seconds. A frame whose
    ``end`` equals its ``start`` has been observed only once and has not been
    written to the log yet.
    """

    name: str
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"Frame end {self.end} precedes start {self.start}")

    @property
    def is_confirmed(self) -> bool:
        return self.end != self.start

    def extended(self, end: int) -> "Frame":
        return Frame(name=self.name, start=self.start, end=end)
