"""Side table mapping application identifiers to their launcher paths."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from .logfile import DELIM, ENCODING

logger = logging.getLogger(__name__)


class AppInfoTable:
    """In-memory copy of ``app-names.csv``, written back in full on every change."""

    def __init__(self, path: Path, entries: Optional[dict[str, str]] = None) -> None:
        self.path = Path(path)
        self._entries: dict[str, str] = dict(entries or {})

    @classmethod
    def load(cls, path: Path) -> "AppInfoTable":
        """Read the table, creating an empty file when it does not exist yet.

        Raises ``OSError`` when the file cannot be created or read.
        """
        path = Path(path)
        path.touch(exist_ok=True)
        entries: dict[str, str] = {}
        for number, raw in enumerate(path.read_bytes().splitlines(), 1):
            try:
                line = raw.decode(ENCODING)
            except UnicodeDecodeError:
                logger.warning("Skipping undecodable line %d of %s", number, path)
                continue
            fields = line.split(DELIM)
            if len(fields) != 2:
                logger.warning("Skipping line %d of %s", number, path)
                continue
            entries[fields[0]] = fields[1]
        return cls(path, entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, name: str) -> Optional[str]:
        return self._entries.get(name)

    def learn(self, name: str, launcher_path: str) -> bool:
        """Record a mapping; returns True when the file had to be rewritten."""
        if any(token in value for value in (name, launcher_path) for token in (DELIM, "\n")):
            logger.warning("Not storing launcher path for %r: contains a separator", name)
            return False
        if self._entries.get(name) == launcher_path:
            return False
        self._entries[name] = launcher_path
        self.save()
        return True

    def save(self) -> None:
        text = "".join(f"{name}{DELIM}{path}\n" for name, path in self._entries.items())
        with open(self.path, "w", encoding=ENCODING) as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
