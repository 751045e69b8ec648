# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Session controller driving the incremental perlcritic gate.

A session loads the persisted history once, processes files one at a time
against it, and writes the accumulated results back exactly once when it
finishes. Persistence is skipped when the session became unhealthy, so a
crashed or externally failed run never replaces good history with partial
data.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from types import TracebackType
from typing import Self

from .config import RatchetConfig
from .discovery import default_roots, discover_perl_files
from .engine import LintEngine, PerlCriticEngine
from .errors import HistoryWriteError, LintEngineError
from .evaluator import Verdict, VerdictKind, evaluate, prior_count_for
from .fingerprint import compute_fingerprint
from .history import HistoryEntry, HistoryStore, load_history, persist_history
from .logging import RatchetLogger, build_logger
from .reporting import CollectingReporter, Reporter

HealthCheck = Callable[[], bool]


class FileStage(StrEnum):
    """Processing stages a single file moves through."""

    NOT_STARTED = "not_started"
    FINGERPRINTED = "fingerprinted"
    EVALUATED = "evaluated"
    RECORDED = "recorded"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class FileOutcome:
    """Result of processing one file.

    ``stage`` is either :attr:`FileStage.RECORDED`, in which case ``verdict``
    and ``entry`` are set, or :attr:`FileStage.FAILED`, in which case
    ``error`` describes the infrastructure problem and ``failed_stage`` the
    last stage that completed.
    """

    path: str
    stage: FileStage
    verdict: Verdict | None = None
    entry: HistoryEntry | None = None
    reused: bool = False
    error: str | None = None
    failed_stage: FileStage | None = None

    @property
    def ok(self) -> bool:
        """Return whether the file introduced no unexpected regression."""

        return self.stage is FileStage.RECORDED and self.verdict is not None and self.verdict.ok


class CriticSession:
    """Own the history and results of one run of the gate."""

    def __init__(
        self,
        config: RatchetConfig | None = None,
        *,
        engine: LintEngine | None = None,
        reporter: Reporter | None = None,
        root: Path | None = None,
        logger: RatchetLogger | None = None,
        health_check: HealthCheck | None = None,
    ) -> None:
        """Create a session; history is loaded by :meth:`open`.

        Args:
            config: Gate configuration, defaults when omitted.
            engine: Lint engine, a :class:`PerlCriticEngine` when omitted.
            reporter: Sink for per-file results.
            root: Directory that anchors history keys and relative paths.
            logger: Logger for user-facing messages.
            health_check: Callable consulted at teardown; returning ``False``
                means the run failed for reasons outside this session.
        """

        self.config = config or RatchetConfig()
        self.root = (root or Path.cwd()).resolve()
        self.engine = engine or PerlCriticEngine(self.config.critic_options, cwd=self.root)
        self.reporter: Reporter = reporter or CollectingReporter()
        self.logger = logger or build_logger()
        self.history_location = self.config.history_location(self.root)
        self.prior_history: HistoryStore | None = None
        self.results = HistoryStore()
        self.healthy = True
        self.unhealthy_reason: str | None = None
        self._health_check = health_check
        self._opened = False
        self._finalized = False
        self._held_by_regression = False

    @property
    def is_first_run(self) -> bool:
        """Return ``True`` when no history existed when the session opened."""

        return self.prior_history is None

    def open(self) -> Self:
        """Load the persisted history.

        Raises:
            HistoryCorruptionError: If the history file exists but is invalid.
        """

        if self._opened:
            return self
        self.prior_history = load_history(self.history_location)
        self._opened = True
        if self.prior_history is None:
            self.logger.debug(f"No history at {self.history_location}; treating this as the first run")
        else:
            self.logger.debug(f"Loaded history for {len(self.prior_history)} file(s) from {self.history_location}")
        return self

    def __enter__(self) -> Self:
        return self.open()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        if exc is not None:
            self.mark_unhealthy(f"session aborted by {exc_type.__name__ if exc_type else 'error'}")
        self.finalize()

    def mark_unhealthy(self, reason: str) -> None:
        """Prevent persistence at teardown because of ``reason``."""

        if self.healthy:
            self.healthy = False
            self.unhealthy_reason = reason

    def history_key(self, path: Path) -> str:
        """Return the history key for ``path``.

        Files under the session root are keyed by their POSIX path relative to
        it; anything else by its absolute path.
        """

        absolute = self._resolve(path)
        for candidate in (absolute, absolute.resolve()):
            try:
                return candidate.relative_to(self.root).as_posix()
            except ValueError:
                continue
        return absolute.as_posix()

    def _resolve(self, path: Path) -> Path:
        return path if path.is_absolute() else self.root / path

    def process(self, path: Path) -> FileOutcome:
        """Analyse ``path`` and record the result without reporting it.

        Infrastructure problems are returned as a failed outcome; nothing is
        recorded for such files.
        """

        self.open()
        key = self.history_key(path)
        target = self._resolve(path)
        try:
            if not target.is_file():
                raise FileNotFoundError(f"{path} does not exist")
            fingerprint = compute_fingerprint(target)
        except OSError as exc:
            return FileOutcome(path=key, stage=FileStage.FAILED, error=str(exc), failed_stage=FileStage.NOT_STARTED)

        prior = self.prior_history.lookup(key) if self.prior_history is not None else None
        reused = self.config.use_checksum and prior is not None and prior.fingerprint == fingerprint
        if reused and prior is not None:
            violations: Sequence[str] = prior.violations
            self.logger.debug(f"{key}: content unchanged, reusing {prior.count} recorded violation(s)")
        else:
            try:
                violations = self.engine.critique(target)
            except LintEngineError as exc:
                return self._failed(key, str(exc))
            except Exception as exc:  # engine failures are confined to the file being checked
                return self._failed(key, f"{type(exc).__name__}: {exc}")
        verdict = evaluate(violations, prior_count_for(prior), first_run=self.is_first_run)

        entry = HistoryEntry(violations=verdict.violations, fingerprint=fingerprint)
        self.results.record(key, entry)
        return FileOutcome(path=key, stage=FileStage.RECORDED, verdict=verdict, entry=entry, reused=reused)

    def _failed(self, key: str, error: str) -> FileOutcome:
        self.logger.debug(f"{key}: {error}")
        return FileOutcome(path=key, stage=FileStage.FAILED, error=error, failed_stage=FileStage.FINGERPRINTED)

    def run_file(self, path: Path, test_name: str | None = None) -> bool:
        """Process ``path`` and report its outcome.

        Args:
            path: File to check.
            test_name: Name of the reported test; derived from ``path`` when
                omitted.

        Returns:
            bool: ``True`` when the file introduced no unexpected regression.
        """

        outcome = self.process(path)
        self._report(outcome, test_name or f"perlcritic test for {path}")
        return outcome.ok

    def _report(self, outcome: FileOutcome, name: str) -> None:
        if outcome.stage is FileStage.FAILED or outcome.verdict is None:
            self.reporter.failed(f"perlcritic can't process {outcome.path}: {outcome.error}")
            return
        verdict = outcome.verdict
        if verdict.kind is VerdictKind.CLEAN:
            self.reporter.passed(name)
            return
        diagnostics = ["\t" + "\t".join(verdict.violations)]
        if verdict.expected_failure:
            self.reporter.expected_failure(name, diagnostics, verdict.reason or "")
            return
        self._held_by_regression = True
        self.reporter.failed(name, diagnostics)

    def run_all(self, paths: Sequence[Path]) -> bool:
        """Announce a plan and check every path in the given order.

        Returns:
            bool: ``True`` when no file introduced an unexpected regression.
        """

        self.open()
        self.reporter.plan(len(paths))
        results = [self.run_file(path) for path in paths]
        return all(results)

    def discover(self, roots: Sequence[Path] = ()) -> list[Path]:
        """Return the Perl files beneath ``roots`` after applying exclusions."""

        resolved = [root if root.is_absolute() else self.root / root for root in roots] or default_roots(self.root)
        return discover_perl_files(resolved, skip_pattern=self.config.skip_pattern(), relative_to=self.root)

    def check_all(self, roots: Sequence[Path] = ()) -> bool:
        """Discover Perl files beneath ``roots`` and check all of them."""

        return self.run_all(self.discover(roots))

    def should_persist(self) -> bool:
        """Return whether the accumulated results may replace the history."""

        if not self.healthy:
            return False
        if self._health_check is not None and not self._health_check():
            return False
        if self.config.hold_baseline_on_regression and self._held_by_regression:
            return False
        return len(self.results) > 0

    def finalize(self) -> bool:
        """Persist the results once, when the session allows it.

        Returns:
            bool: ``True`` when the history file was written by this call.
        """

        if self._finalized:
            return False
        self._finalized = True
        if not self.should_persist():
            reason = self.unhealthy_reason or "no results to record or baseline held"
            self.logger.debug(f"Keeping existing history at {self.history_location}: {reason}")
            return False
        try:
            persist_history(self.results, self.history_location)
        except HistoryWriteError as exc:
            self.reporter.diag(str(exc))
            self.logger.fail(str(exc))
            return False
        self.logger.debug(f"Recorded history for {len(self.results)} file(s) in {self.history_location}")
        return True


def critic_ok(
    path: Path,
    test_name: str | None = None,
    *,
    config: RatchetConfig | None = None,
    engine: LintEngine | None = None,
    reporter: Reporter | None = None,
    root: Path | None = None,
) -> bool:
    """Check a single file in its own session and persist its history."""

    with CriticSession(config, engine=engine, reporter=reporter, root=root) as session:
        return session.run_file(path, test_name)


def all_critic_ok(
    *roots: Path,
    config: RatchetConfig | None = None,
    engine: LintEngine | None = None,
    reporter: Reporter | None = None,
    root: Path | None = None,
) -> bool:
    """Check every Perl file beneath ``roots`` in one session."""

    with CriticSession(config, engine=engine, reporter=reporter, root=root) as session:
        return session.check_all(roots)


__all__ = [
    "CriticSession",
    "FileOutcome",
    "FileStage",
    "HealthCheck",
    "all_critic_ok",
    "critic_ok",
]
