# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for content fingerprints."""

from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from critic_ratchet.fingerprint import compute_fingerprint


def test_fingerprint_depends_only_on_content(tmp_path: Path) -> None:
    first = tmp_path / "first.pm"
    second = tmp_path / "nested" / "second.pm"
    second.parent.mkdir()
    first.write_bytes(b"package Foo;\n1;\n")
    second.write_bytes(b"package Foo;\n1;\n")

    assert compute_fingerprint(first) == compute_fingerprint(second)
    assert compute_fingerprint(first) == hashlib.sha256(b"package Foo;\n1;\n").hexdigest()


def test_fingerprint_changes_with_content(tmp_path: Path) -> None:
    source = tmp_path / "Foo.pm"
    source.write_bytes(b"package Foo;\n")
    before = compute_fingerprint(source)
    source.write_bytes(b"package Foo;\nuse strict;\n")

    assert compute_fingerprint(source) != before


def test_fingerprint_covers_files_larger_than_one_chunk(tmp_path: Path) -> None:
    payload = b"x" * (200 * 1024) + b"tail"
    source = tmp_path / "big.pl"
    source.write_bytes(payload)

    assert compute_fingerprint(source) == hashlib.sha256(payload).hexdigest()


def test_fingerprint_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        compute_fingerprint(tmp_path / "missing.pm")
