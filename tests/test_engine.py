# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the perlcritic engine adapter."""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from critic_ratchet.engine import (
    DEFAULT_VERBOSE_TEMPLATE,
    LintEngine,
    PerlCriticEngine,
    build_option_flags,
    split_violations,
)
from critic_ratchet.errors import LintEngineError

needs_sh = pytest.mark.skipif(shutil.which("sh") is None, reason="requires a POSIX shell")


def test_perlcritic_command_build(tmp_path: Path) -> None:
    engine = PerlCriticEngine({"-severity": 3, "profile": tmp_path / ".perlcriticrc", "force": True})

    cmd = engine.build_command(Path("lib/Module.pm"))

    assert cmd[:5] == ["perlcritic", "--quiet", "--nocolor", "--verbose", DEFAULT_VERBOSE_TEMPLATE]
    assert cmd[5:] == [
        "--severity",
        "3",
        "--profile",
        str(tmp_path / ".perlcriticrc"),
        "--force",
        "--",
        "lib/Module.pm",
    ]


def test_verbose_option_overrides_template() -> None:
    engine = PerlCriticEngine({"-verbose": 8})

    cmd = engine.build_command(Path("Foo.pm"))

    assert cmd[3:5] == ["--verbose", "8"]
    assert cmd.count("--verbose") == 1


def test_build_option_flags_translates_values() -> None:
    flags = build_option_flags(
        {
            "profile_strictness": "quiet",
            "color": True,
            "only": False,
            "include": ["ProhibitMagicNumbers", "RequireUseStrict"],
            "theme": None,
        },
    )

    assert flags == [
        "--profile-strictness",
        "quiet",
        "--noonly",
        "--include",
        "ProhibitMagicNumbers",
        "--include",
        "RequireUseStrict",
    ]


def test_split_violations_drops_blank_lines() -> None:
    output = "a.pm:1:1:Code before strictures (RequireUseStrict)\n\n  \nb.pm:2:1:Magic (ProhibitMagicNumbers)\n"

    assert split_violations(output) == [
        "a.pm:1:1:Code before strictures (RequireUseStrict)",
        "b.pm:2:1:Magic (ProhibitMagicNumbers)",
    ]


def test_engine_satisfies_protocol() -> None:
    assert isinstance(PerlCriticEngine(), LintEngine)


@needs_sh
def test_critique_collects_output_lines(tmp_path: Path, fake_perlcritic) -> None:
    script = fake_perlcritic(
        'for last; do :; done\n'
        'echo "$last:1:1:Code before strictures are enabled (RequireUseStrict)"\n'
        'echo "$last:1:1:Code before warnings are enabled (RequireUseWarnings)"\n'
        "exit 2",
    )
    source = tmp_path / "Foo.pm"
    source.write_text("package Foo;\n", encoding="utf-8")

    violations = PerlCriticEngine(executable=str(script)).critique(source)

    assert violations == [
        f"{source}:1:1:Code before strictures are enabled (RequireUseStrict)",
        f"{source}:1:1:Code before warnings are enabled (RequireUseWarnings)",
    ]


@needs_sh
def test_critique_clean_file_returns_no_violations(tmp_path: Path, fake_perlcritic) -> None:
    script = fake_perlcritic("exit 0")

    assert PerlCriticEngine(executable=str(script)).critique(tmp_path / "Foo.pm") == []


@needs_sh
def test_critique_error_status_raises(tmp_path: Path, fake_perlcritic) -> None:
    script = fake_perlcritic('echo "Can\'t parse code" >&2\nexit 1')

    with pytest.raises(LintEngineError) as excinfo:
        PerlCriticEngine(executable=str(script)).critique(tmp_path / "Foo.pm")
    assert "Can't parse code" in str(excinfo.value)


def test_missing_executable_raises_engine_error(tmp_path: Path) -> None:
    engine = PerlCriticEngine(executable="definitely-not-perlcritic-xyz")

    with pytest.raises(LintEngineError):
        engine.critique(tmp_path / "Foo.pm")


@needs_sh
def test_critique_replaces_undecodable_output_bytes(tmp_path: Path, fake_perlcritic) -> None:
    script = fake_perlcritic("printf 'lib/a.pm:1:1:bad \\377 name (P)\\n'\nexit 2")

    violations = PerlCriticEngine(executable=str(script)).critique(tmp_path / "a.pm")

    assert violations == ["lib/a.pm:1:1:bad \ufffd name (P)"]


@needs_sh
def test_critique_timeout_raises_engine_error(tmp_path: Path, fake_perlcritic) -> None:
    script = fake_perlcritic("exec sleep 5")

    with pytest.raises(LintEngineError) as excinfo:
        PerlCriticEngine(executable=str(script), timeout=0.2).critique(tmp_path / "Foo.pm")
    assert "timed out" in str(excinfo.value)
