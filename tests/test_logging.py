# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the stderr logging helpers."""

from __future__ import annotations

import pytest

from critic_ratchet.logging import build_logger, emoji


def test_emoji_respects_preference() -> None:
    assert emoji("✅", True) == "✅"
    assert emoji("✅", False) == ""


def test_logger_writes_to_stderr_only(capsys: pytest.CaptureFixture[str]) -> None:
    logger = build_logger(color=False)

    logger.info("loaded history")
    logger.warn("no history yet")
    logger.fail("cannot write")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.splitlines() == ["loaded history", "no history yet", "cannot write"]


def test_debug_messages_need_debug_enabled(capsys: pytest.CaptureFixture[str]) -> None:
    build_logger(color=False).debug("hidden")
    assert capsys.readouterr().err == ""

    build_logger(color=False, debug=True).debug("shown")
    assert capsys.readouterr().err.strip() == "DEBUG shown"
