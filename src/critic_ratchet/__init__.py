# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Incremental perlcritic gate.

Run perlcritic over a code base, compare each file's violation count with
the previous run, and fail only when a file got worse. Files that improved
or stayed the same are reported as expected failures until they are clean.
"""

from __future__ import annotations

from .config import RatchetConfig, config_from_options, load_config
from .engine import LintEngine, PerlCriticEngine
from .errors import (
    ConfigError,
    HistoryCorruptionError,
    HistoryWriteError,
    LintEngineError,
    RatchetError,
)
from .evaluator import Verdict, VerdictKind, evaluate
from .history import HistoryEntry, HistoryStore, load_history, persist_history
from .reporting import CollectingReporter, ConsoleReporter, Reporter, TapReporter
from .session import CriticSession, FileOutcome, FileStage, all_critic_ok, critic_ok

__all__ = [
    "CollectingReporter",
    "ConfigError",
    "ConsoleReporter",
    "CriticSession",
    "FileOutcome",
    "FileStage",
    "HistoryCorruptionError",
    "HistoryEntry",
    "HistoryStore",
    "HistoryWriteError",
    "LintEngine",
    "LintEngineError",
    "PerlCriticEngine",
    "RatchetConfig",
    "RatchetError",
    "Reporter",
    "TapReporter",
    "Verdict",
    "VerdictKind",
    "all_critic_ok",
    "config_from_options",
    "critic_ok",
    "evaluate",
    "load_config",
    "load_history",
    "persist_history",
]
