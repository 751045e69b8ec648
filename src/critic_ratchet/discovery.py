# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Locate Perl source files beneath a set of roots."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path
from typing import Final

PERL_SUFFIXES: Final[frozenset[str]] = frozenset({".PL", ".pl", ".pm", ".t"})
SKIPPED_DIRECTORIES: Final[frozenset[str]] = frozenset({".git", ".svn", "CVS", "RCS", "_darcs"})
BACKUP_SUFFIXES: Final[tuple[str, ...]] = ("~", ".bak", ".swp", ".swo")
SHEBANG_PATTERN: Final[re.Pattern[bytes]] = re.compile(rb"\A#!.*\bperl")
DEFAULT_ROOT_CANDIDATES: Final[tuple[str, ...]] = ("blib", "lib")
_SHEBANG_PROBE_BYTES: Final[int] = 256


def is_perl_file(path: Path) -> bool:
    """Return whether ``path`` looks like a Perl source file.

    A file qualifies by suffix or by a first-line shebang that mentions
    ``perl``. Unreadable files are not Perl files.
    """

    if path.name.endswith(BACKUP_SUFFIXES):
        return False
    if path.suffix in PERL_SUFFIXES:
        return True
    try:
        with path.open("rb") as handle:
            first_line = handle.readline(_SHEBANG_PROBE_BYTES)
    except OSError:
        return False
    return SHEBANG_PATTERN.match(first_line) is not None


def default_roots(root: Path) -> list[Path]:
    """Return the directories searched when no roots are given.

    ``blib`` wins when a build tree exists, otherwise ``lib`` is used.
    """

    for name in DEFAULT_ROOT_CANDIDATES:
        candidate = root / name
        if candidate.is_dir():
            return [candidate]
    return [root / DEFAULT_ROOT_CANDIDATES[-1]]


def _walk(base: Path) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(base):
        current = Path(dirpath)
        dirnames[:] = sorted(name for name in dirnames if name not in SKIPPED_DIRECTORIES)
        for filename in sorted(filenames):
            candidate = current / filename
            if is_perl_file(candidate):
                yield candidate


def discover_perl_files(
    roots: Sequence[Path],
    *,
    skip_pattern: re.Pattern[str] | None = None,
    relative_to: Path | None = None,
) -> list[Path]:
    """Return the Perl files beneath ``roots`` in discovery order.

    Args:
        roots: Files or directories to search. Files are kept as given.
        skip_pattern: Optional expression; paths it matches are dropped.
        relative_to: Base directory; files beneath it are returned relative
            to it and matched against ``skip_pattern`` in that form.

    Returns:
        list[Path]: Unique candidate files, relative when ``roots`` are.
    """

    results: list[Path] = []
    seen: set[Path] = set()
    for candidate in _iter_candidates(roots):
        path = _relative(candidate, relative_to)
        if path in seen:
            continue
        seen.add(path)
        if skip_pattern is not None and skip_pattern.search(path.as_posix()):
            continue
        results.append(path)
    return results


def _relative(path: Path, base: Path | None) -> Path:
    if base is None:
        return path
    try:
        return path.relative_to(base)
    except ValueError:
        return path


def _iter_candidates(roots: Iterable[Path]) -> Iterator[Path]:
    for root in roots:
        if root.is_file():
            yield root
        elif root.is_dir():
            yield from _walk(root)


__all__ = [
    "PERL_SUFFIXES",
    "default_roots",
    "discover_perl_files",
    "is_perl_file",
]
