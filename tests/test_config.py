# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests covering configuration helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from critic_ratchet.config import DEFAULT_HISTORY_FILE, RatchetConfig, config_from_options, load_config
from critic_ratchet.errors import ConfigError


def test_defaults() -> None:
    config = RatchetConfig()

    assert config.history_file == Path(DEFAULT_HISTORY_FILE)
    assert not config.use_checksum
    assert config.skip_pattern() is None
    assert config.history_location(Path("/project")) == Path("/project/.perlcritic-history")


def test_config_from_options_splits_gate_and_critic_options() -> None:
    config = config_from_options(
        **{
            "-skip_files_like": r"\.pl$",
            "-use_checksum": True,
            "-history_file": "state/history",
            "-severity": 3,
            "-theme": "core",
        },
    )

    assert config.skip_files_like == r"\.pl$"
    assert config.use_checksum is True
    assert config.history_file == Path("state/history")
    assert config.critic_options == {"-severity": 3, "-theme": "core"}
    pattern = config.skip_pattern()
    assert pattern is not None and pattern.search("bin/tool.pl")


def test_invalid_skip_pattern_is_config_error() -> None:
    with pytest.raises(ConfigError):
        RatchetConfig(skip_files_like="(unclosed").skip_pattern()


def test_invalid_option_value_is_config_error() -> None:
    with pytest.raises(ConfigError):
        config_from_options(use_checksum="not-a-bool")


def test_load_config_reads_pyproject_section(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        "\n".join(
            [
                "[tool.critic-ratchet]",
                "use-checksum = true",
                'history-file = ".ratchet/history.json"',
                'skip-files-like = "^lib/Generated/"',
                "",
                "[tool.critic-ratchet.critic]",
                "severity = 4",
                'profile = "perlcriticrc"',
            ],
        ),
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.use_checksum
    assert config.history_location(tmp_path) == tmp_path / ".ratchet" / "history.json"
    assert config.skip_files_like == "^lib/Generated/"
    assert config.critic_options == {"severity": 4, "profile": "perlcriticrc"}


def test_load_config_without_section_returns_defaults(tmp_path: Path) -> None:
    assert load_config(tmp_path) == RatchetConfig()
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "demo"\n', encoding="utf-8")
    assert load_config(tmp_path) == RatchetConfig()


@pytest.mark.parametrize(
    "document",
    [
        "[tool.critic-ratchet\n",
        '[tool.critic-ratchet]\nunknown-setting = 1\n',
        '[tool]\ncritic-ratchet = "nope"\n',
    ],
)
def test_load_config_rejects_invalid_documents(tmp_path: Path, document: str) -> None:
    (tmp_path / "pyproject.toml").write_text(document, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_merged_applies_overrides_and_keeps_critic_options() -> None:
    base = RatchetConfig(use_checksum=True, critic_options={"severity": 3})

    merged = base.merged(use_checksum=None, history_file=Path("h"), critic_options={"theme": "core"})

    assert merged.use_checksum
    assert merged.history_file == Path("h")
    assert merged.critic_options == {"severity": 3, "theme": "core"}
