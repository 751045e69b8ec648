# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Decide whether a file improved, regressed, or is clean."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Final

from .history import HistoryEntry

FIRST_RUN_REASON: Final[str] = "No history file"


class VerdictKind(StrEnum):
    """Classification of a file's current violations against its history."""

    CLEAN = "clean"
    REGRESSED = "regressed"
    IMPROVED = "improved"


@dataclass(frozen=True, slots=True)
class Verdict:
    """Outcome of comparing current violations with the recorded baseline.

    Attributes:
        kind: Verdict classification.
        delta: Prior count minus current count; negative means more violations.
        violations: Violations reported for the file in this session.
        expected_failure: ``True`` when the failure is reported as TODO.
        reason: TODO reason attached to expected failures.
    """

    kind: VerdictKind
    delta: int
    violations: tuple[str, ...]
    expected_failure: bool = False
    reason: str | None = None

    @property
    def ok(self) -> bool:
        """Return whether the verdict introduces no unexpected regression."""

        return self.kind is VerdictKind.CLEAN or self.expected_failure

    @property
    def hard_failure(self) -> bool:
        """Return whether the verdict must be reported as a real failure."""

        return not self.ok


def prior_count_for(entry: HistoryEntry | None) -> int:
    """Return the baseline violation count for ``entry``.

    A file without history has a baseline of zero, so any violation found in
    it counts as a regression unless the whole session is a first run.
    """

    return 0 if entry is None else entry.count


def evaluate(current: Sequence[str], prior_count: int, *, first_run: bool) -> Verdict:
    """Classify ``current`` violations against ``prior_count``.

    Only the number of violations is compared. A file whose count did not
    grow is not a regression even when individual violations changed.

    Args:
        current: Violations reported for the file in this session.
        prior_count: Violation count of the baseline.
        first_run: ``True`` when no history existed when the session started.

    Returns:
        Verdict: Classification of the file.
    """

    violations = tuple(current)
    if not violations:
        return Verdict(kind=VerdictKind.CLEAN, delta=prior_count, violations=violations)

    delta = prior_count - len(violations)
    if delta < 0:
        return Verdict(
            kind=VerdictKind.REGRESSED,
            delta=delta,
            violations=violations,
            expected_failure=first_run,
            reason=FIRST_RUN_REASON if first_run else None,
        )
    return Verdict(
        kind=VerdictKind.IMPROVED,
        delta=delta,
        violations=violations,
        expected_failure=True,
        reason=FIRST_RUN_REASON if first_run else f"fixed {delta} violations!",
    )


__all__ = [
    "FIRST_RUN_REASON",
    "Verdict",
    "VerdictKind",
    "evaluate",
    "prior_count_for",
]
