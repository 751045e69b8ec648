# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import stat
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

import pytest

from critic_ratchet.config import RatchetConfig
from critic_ratchet.history import HistoryEntry, HistoryStore, persist_history
from critic_ratchet.reporting import CollectingReporter
from critic_ratchet.session import CriticSession


class StubEngine:
    """Lint engine returning canned violations keyed by file name."""

    def __init__(self, results: Mapping[str, Sequence[str] | Exception] | None = None) -> None:
        self.results: dict[str, Sequence[str] | Exception] = dict(results or {})
        self.calls: list[Path] = []

    def critique(self, path: Path) -> list[str]:
        self.calls.append(path)
        result = self.results.get(path.name, ())
        if isinstance(result, Exception):
            raise result
        return list(result)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Return a project root holding ``lib/a.pm`` and ``lib/b.pm``."""

    lib = tmp_path / "lib"
    lib.mkdir()
    (lib / "a.pm").write_text("package A;\n1;\n", encoding="utf-8")
    (lib / "b.pm").write_text("package B;\n1;\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def make_engine() -> type[StubEngine]:
    """Return the stub engine class for building canned engines."""

    return StubEngine


@pytest.fixture
def reporter() -> CollectingReporter:
    return CollectingReporter()


@pytest.fixture
def write_history(project: Path) -> Callable[[Mapping[str, HistoryEntry]], Path]:
    """Persist the given entries as the project's history file."""

    def _write(entries: Mapping[str, HistoryEntry]) -> Path:
        location = project / ".perlcritic-history"
        persist_history(HistoryStore(files=dict(entries)), location)
        return location

    return _write


@pytest.fixture
def make_session(
    project: Path,
    reporter: CollectingReporter,
) -> Callable[..., CriticSession]:
    """Build sessions rooted at the project with a collecting reporter."""

    def _make(engine: StubEngine, **config: object) -> CriticSession:
        return CriticSession(RatchetConfig(**config), engine=engine, reporter=reporter, root=project)

    return _make


@pytest.fixture
def fake_perlcritic(tmp_path: Path) -> Callable[[str], Path]:
    """Write an executable shell script standing in for perlcritic."""

    def _write(body: str) -> Path:
        script = tmp_path / "bin" / "perlcritic"
        script.parent.mkdir(exist_ok=True)
        script.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _write
