# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Exceptions raised by the incremental perlcritic gate."""

from __future__ import annotations

from pathlib import Path


class RatchetError(RuntimeError):
    """Base class for errors raised by :mod:`critic_ratchet`."""


class ConfigError(RatchetError):
    """Raised when configuration input is invalid."""


class HistoryCorruptionError(RatchetError):
    """Raised when a history file exists but cannot be deserialized."""

    def __init__(self, location: Path, detail: str) -> None:
        """Create the error for ``location`` with a short ``detail``.

        Args:
            location: History file that failed to load.
            detail: Description of the decoding or validation failure.
        """

        super().__init__(f"History file {location} is corrupt: {detail}")
        self.location = location
        self.detail = detail


class HistoryWriteError(RatchetError, OSError):
    """Raised when the history file cannot be written at session teardown."""

    def __init__(self, location: Path, detail: str) -> None:
        super().__init__(f"Can't write to {location}: {detail}")
        self.location = location


class LintEngineError(RatchetError):
    """Raised when the lint engine fails to analyse a file."""

    def __init__(self, path: Path, detail: str) -> None:
        super().__init__(f"{path}: {detail}")
        self.path = path
        self.detail = detail


__all__ = [
    "ConfigError",
    "HistoryCorruptionError",
    "HistoryWriteError",
    "LintEngineError",
    "RatchetError",
]
