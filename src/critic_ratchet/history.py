# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Persisted per-file violation history.

The history is a snapshot of the last session: a mapping from file path to
the violations recorded for it together with the fingerprint of the content
they were recorded against. It is read once when a session starts and
written once, as a whole, when the session ends.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import HistoryCorruptionError, HistoryWriteError

HISTORY_FORMAT_VERSION: Final[int] = 1


class HistoryEntry(BaseModel):
    """Violations recorded for a single file and the content they describe."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    violations: tuple[str, ...] = ()
    fingerprint: str = ""

    @property
    def count(self) -> int:
        """Return the number of recorded violations."""

        return len(self.violations)


class HistoryStore(BaseModel):
    """Mapping of file paths to their most recent :class:`HistoryEntry`."""

    model_config = ConfigDict(extra="forbid")

    version: int = HISTORY_FORMAT_VERSION
    files: dict[str, HistoryEntry] = Field(default_factory=dict)

    @field_validator("version")
    @classmethod
    def _check_version(cls, value: int) -> int:
        if value != HISTORY_FORMAT_VERSION:
            raise ValueError(f"unsupported history format version {value}")
        return value

    def lookup(self, path: str) -> HistoryEntry | None:
        """Return the entry stored for ``path`` or ``None`` when unknown.

        Args:
            path: History key of the file.

        Returns:
            HistoryEntry | None: Recorded entry when present.
        """

        return self.files.get(path)

    def record(self, path: str, entry: HistoryEntry) -> None:
        """Store ``entry`` for ``path`` replacing any previous value."""

        self.files[path] = entry

    def paths(self) -> tuple[str, ...]:
        """Return the recorded paths in insertion order."""

        return tuple(self.files)

    def __len__(self) -> int:
        return len(self.files)

    def __contains__(self, path: object) -> bool:
        return path in self.files


def load_history(location: Path) -> HistoryStore | None:
    """Load the history stored at ``location``.

    Args:
        location: Path of the persisted history file.

    Returns:
        HistoryStore | None: Deserialized history, or ``None`` when nothing has
        been persisted yet (the first run).

    Raises:
        HistoryCorruptionError: If ``location`` exists but cannot be read or
            does not contain a valid history document.
    """

    if not location.exists():
        return None
    try:
        raw = location.read_bytes()
    except OSError as exc:
        raise HistoryCorruptionError(location, exc.strerror or str(exc)) from exc
    try:
        return HistoryStore.model_validate_json(raw)
    except ValidationError as exc:
        first = exc.errors()[0]
        where = ".".join(str(part) for part in first.get("loc", ())) or "<document>"
        raise HistoryCorruptionError(location, f"{where}: {first['msg']}") from exc


def persist_history(store: HistoryStore, location: Path) -> None:
    """Overwrite ``location`` with the serialized ``store``.

    The document is written to a temporary sibling first and moved into place,
    so readers observe either the previous history or the complete new one.

    Args:
        store: History snapshot to persist.
        location: Destination path of the history file.

    Raises:
        HistoryWriteError: If the history cannot be written.
    """

    payload = store.model_dump_json(indent=2) + "\n"
    directory = location.parent
    temp_path: Path | None = None
    try:
        directory.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=directory,
            prefix=f".{location.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            temp_path = Path(handle.name)
            handle.write(payload)
        os.replace(temp_path, location)
    except OSError as exc:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise HistoryWriteError(location, exc.strerror or str(exc)) from exc


__all__ = [
    "HISTORY_FORMAT_VERSION",
    "HistoryEntry",
    "HistoryStore",
    "load_history",
    "persist_history",
]
