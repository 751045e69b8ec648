# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Test reporting sinks receiving per-file pass/fail signals."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import IO, Protocol, runtime_checkable

import click
from rich.console import Console
from rich.text import Text

from .logging import emoji


@runtime_checkable
class Reporter(Protocol):
    """Protocol implemented by test reporting sinks."""

    @property
    def is_passing(self) -> bool:
        """Return ``False`` once a hard failure has been reported."""
        ...

    def plan(self, count: int) -> None:
        """Announce the number of results that will follow."""
        ...

    def passed(self, name: str) -> None:
        """Report a passing test."""
        ...

    def failed(self, name: str, diagnostics: Sequence[str] = ()) -> None:
        """Report a hard failure."""
        ...

    def expected_failure(self, name: str, diagnostics: Sequence[str], reason: str) -> None:
        """Report a failure that is anticipated and must not block."""
        ...

    def diag(self, message: str) -> None:
        """Emit a free-form diagnostic message."""
        ...


class BaseReporter(ABC):
    """Keep result tallies shared by every concrete reporter."""

    def __init__(self) -> None:
        self.planned: int | None = None
        self.current = 0
        self.passes = 0
        self.failures = 0
        self.expected_failures = 0

    @property
    def is_passing(self) -> bool:
        """Return ``False`` once a hard failure has been reported."""

        return self.failures == 0

    def plan(self, count: int) -> None:
        """Record and emit the announced number of results."""

        if self.planned is not None:
            raise ValueError(f"plan already announced ({self.planned} tests)")
        self.planned = count
        self._emit_plan(count)

    def passed(self, name: str) -> None:
        """Record and emit a passing result."""

        self.current += 1
        self.passes += 1
        self._emit_result(self.current, name, success=True)

    def failed(self, name: str, diagnostics: Sequence[str] = ()) -> None:
        """Record and emit a hard failure."""

        self.current += 1
        self.failures += 1
        self._emit_result(self.current, name, success=False)
        self._emit_diagnostics(diagnostics, todo=False)

    def expected_failure(self, name: str, diagnostics: Sequence[str], reason: str) -> None:
        """Record and emit a failure marked as TODO."""

        self.current += 1
        self.expected_failures += 1
        self._emit_result(self.current, name, success=False, todo=reason)
        self._emit_diagnostics(diagnostics, todo=True)

    def diag(self, message: str) -> None:
        """Emit a free-form diagnostic message."""

        self._emit_diagnostics((message,), todo=False)

    def finish(self) -> None:
        """Close the report; the default implementation has nothing to flush."""

    @abstractmethod
    def _emit_plan(self, count: int) -> None: ...

    @abstractmethod
    def _emit_result(self, number: int, name: str, *, success: bool, todo: str | None = None) -> None: ...

    @abstractmethod
    def _emit_diagnostics(self, lines: Sequence[str], *, todo: bool) -> None: ...


class TapReporter(BaseReporter):
    """Write results using the Test Anything Protocol.

    Results go to ``stream``; diagnostics of hard failures go to
    ``error_stream`` the way ``Test::Builder`` separates them. Streams default
    to the process stdout and stderr at write time.
    """

    def __init__(self, stream: IO[str] | None = None, *, error_stream: IO[str] | None = None) -> None:
        super().__init__()
        self._stream = stream
        self._error_stream = error_stream if error_stream is not None else stream
        self._errors_to_stderr = error_stream is None and stream is None

    def finish(self) -> None:
        """Emit a trailing plan when none was announced up front."""

        if self.planned is None:
            self._write(f"1..{self.current}")

    def _write(self, line: str, *, error: bool = False) -> None:
        if error:
            click.echo(line, file=self._error_stream, err=self._errors_to_stderr)
        else:
            click.echo(line, file=self._stream)

    def _emit_plan(self, count: int) -> None:
        self._write(f"1..{count}")

    def _emit_result(self, number: int, name: str, *, success: bool, todo: str | None = None) -> None:
        status = "ok" if success else "not ok"
        line = f"{status} {number} - {_escape_tap(name)}"
        if todo is not None:
            line = f"{line} # TODO {todo}"
        self._write(line)

    def _emit_diagnostics(self, lines: Sequence[str], *, todo: bool) -> None:
        for entry in lines:
            for line in entry.splitlines() or [""]:
                self._write(f"# {line}".rstrip(), error=not todo)


def _escape_tap(name: str) -> str:
    return name.replace("\\", "\\\\").replace("#", "\\#")


class ConsoleReporter(BaseReporter):
    """Render results as human-readable Rich output."""

    def __init__(self, console: Console | None = None, *, use_emoji: bool = True) -> None:
        super().__init__()
        self._console = console or Console(highlight=False, soft_wrap=True)
        self._use_emoji = use_emoji

    def finish(self) -> None:
        """Print a one-line summary of the tallies."""

        summary = Text(
            f"{self.passes} passed, {self.failures} failed, {self.expected_failures} expected failures",
        )
        summary.stylize("bold green" if self.is_passing else "bold red")
        self._console.print(summary)

    def _emit_plan(self, count: int) -> None:
        self._console.print(Text(f"Checking {count} file(s)", style="cyan"))

    def _emit_result(self, number: int, name: str, *, success: bool, todo: str | None = None) -> None:
        if success:
            prefix, style = emoji("✅ ", self._use_emoji) or "PASS ", "green"
        elif todo is not None:
            prefix, style = emoji("⚠️ ", self._use_emoji) or "TODO ", "yellow"
        else:
            prefix, style = emoji("❌ ", self._use_emoji) or "FAIL ", "red"
        line = Text(f"{prefix}{name}", style=style)
        if todo is not None:
            line.append(f" ({todo})", style="dim")
        self._console.print(line)

    def _emit_diagnostics(self, lines: Sequence[str], *, todo: bool) -> None:
        style = "dim" if todo else "red"
        for entry in lines:
            self._console.print(Text(f"    {entry}", style=style))


class EventKind(StrEnum):
    """Kinds of events captured by :class:`CollectingReporter`."""

    PLAN = "plan"
    PASS = "pass"
    FAIL = "fail"
    EXPECTED_FAIL = "expected_fail"
    DIAG = "diag"


@dataclass(frozen=True, slots=True)
class ReportEvent:
    """Single reporting call captured in memory."""

    kind: EventKind
    name: str = ""
    diagnostics: tuple[str, ...] = ()
    reason: str | None = None
    count: int | None = None


@dataclass(slots=True)
class CollectingReporter:
    """Reporter that stores every call for later inspection."""

    events: list[ReportEvent] = field(default_factory=list)

    @property
    def is_passing(self) -> bool:
        """Return ``False`` once a hard failure has been recorded."""

        return not any(event.kind is EventKind.FAIL for event in self.events)

    def plan(self, count: int) -> None:
        self.events.append(ReportEvent(EventKind.PLAN, count=count))

    def passed(self, name: str) -> None:
        self.events.append(ReportEvent(EventKind.PASS, name=name))

    def failed(self, name: str, diagnostics: Sequence[str] = ()) -> None:
        self.events.append(ReportEvent(EventKind.FAIL, name=name, diagnostics=tuple(diagnostics)))

    def expected_failure(self, name: str, diagnostics: Sequence[str], reason: str) -> None:
        self.events.append(
            ReportEvent(EventKind.EXPECTED_FAIL, name=name, diagnostics=tuple(diagnostics), reason=reason),
        )

    def diag(self, message: str) -> None:
        self.events.append(ReportEvent(EventKind.DIAG, diagnostics=(message,)))

    def results(self) -> list[ReportEvent]:
        """Return the per-file result events, skipping plans and diagnostics."""

        return [event for event in self.events if event.kind not in (EventKind.PLAN, EventKind.DIAG)]

    def by_name(self) -> dict[str, ReportEvent]:
        """Return result events keyed by test name."""

        return {event.name: event for event in self.results()}


__all__ = [
    "BaseReporter",
    "CollectingReporter",
    "ConsoleReporter",
    "EventKind",
    "ReportEvent",
    "Reporter",
    "TapReporter",
]
