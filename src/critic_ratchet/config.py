# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration model and loaders for the incremental perlcritic gate."""

from __future__ import annotations

import re
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError

DEFAULT_HISTORY_FILE: Final[str] = ".perlcritic-history"
PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "critic-ratchet"
CRITIC_TABLE_KEY: Final[str] = "critic"

# Option names handled by the gate itself; everything else belongs to perlcritic.
GATE_OPTIONS: Final[frozenset[str]] = frozenset(
    {"skip_files_like", "use_checksum", "history_file", "hold_baseline_on_regression"},
)


class RatchetConfig(BaseModel):
    """Settings that control discovery, re-analysis and history storage."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    skip_files_like: str | None = None
    use_checksum: bool = False
    history_file: Path = Field(default_factory=lambda: Path(DEFAULT_HISTORY_FILE))
    hold_baseline_on_regression: bool = False
    critic_options: dict[str, Any] = Field(default_factory=dict)

    def skip_pattern(self) -> re.Pattern[str] | None:
        """Return the compiled exclusion pattern, if one is configured.

        Raises:
            ConfigError: If ``skip_files_like`` is not a valid expression.
        """

        if not self.skip_files_like:
            return None
        try:
            return re.compile(self.skip_files_like)
        except re.error as exc:
            raise ConfigError(f"Invalid skip_files_like pattern {self.skip_files_like!r}: {exc}") from exc

    def history_location(self, root: Path) -> Path:
        """Return the history file resolved against ``root``."""

        return self.history_file if self.history_file.is_absolute() else root / self.history_file

    def merged(self, **overrides: Any) -> RatchetConfig:
        """Return a copy with ``overrides`` applied, ignoring ``None`` values."""

        updates = {key: value for key, value in overrides.items() if value is not None}
        if "critic_options" in updates:
            updates["critic_options"] = {**self.critic_options, **updates["critic_options"]}
        return _validate({**self.model_dump(), **updates})


def _normalise_key(name: str) -> str:
    return name.lstrip("-").replace("-", "_")


def _validate(payload: Mapping[str, Any]) -> RatchetConfig:
    try:
        return RatchetConfig.model_validate(dict(payload))
    except ValidationError as exc:
        first = exc.errors()[0]
        where = ".".join(str(part) for part in first.get("loc", ()))
        raise ConfigError(f"Invalid configuration for {where}: {first['msg']}") from exc


def config_from_options(**options: Any) -> RatchetConfig:
    """Build a configuration from a flat option mapping.

    Gate options may be spelled with leading dashes (``-use_checksum``).
    Unrecognised options are forwarded to perlcritic untouched.

    Raises:
        ConfigError: If a gate option has an invalid value.
    """

    payload: dict[str, Any] = {}
    critic_options: dict[str, Any] = {}
    for name, value in options.items():
        key = _normalise_key(name)
        if key in GATE_OPTIONS:
            if value is not None:
                payload[key] = value
        else:
            critic_options[name] = value
    payload["critic_options"] = critic_options
    return _validate(payload)


def load_config(root: Path) -> RatchetConfig:
    """Load ``[tool.critic-ratchet]`` from ``root/pyproject.toml``.

    A missing file or section yields the defaults. Keys inside the nested
    ``critic`` table are forwarded to perlcritic.

    Raises:
        ConfigError: If the document cannot be parsed or holds invalid values.
    """

    pyproject = root / PYPROJECT_FILENAME
    if not pyproject.is_file():
        return RatchetConfig()
    try:
        with pyproject.open("rb") as handle:
            data = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Unable to read {pyproject}: {exc}") from exc

    tool_section = data.get(PYPROJECT_TOOL_KEY)
    if not isinstance(tool_section, Mapping):
        return RatchetConfig()
    section = tool_section.get(PYPROJECT_SECTION_KEY)
    if section is None:
        return RatchetConfig()
    if not isinstance(section, Mapping):
        raise ConfigError(f"[{PYPROJECT_TOOL_KEY}.{PYPROJECT_SECTION_KEY}] in {pyproject} must be a table")

    payload: dict[str, Any] = {_normalise_key(key): value for key, value in section.items() if key != CRITIC_TABLE_KEY}
    critic_table = section.get(CRITIC_TABLE_KEY, {})
    if not isinstance(critic_table, Mapping):
        raise ConfigError(f"'{CRITIC_TABLE_KEY}' in {pyproject} must be a table")
    payload["critic_options"] = dict(critic_table)
    return _validate(payload)


__all__ = [
    "DEFAULT_HISTORY_FILE",
    "RatchetConfig",
    "config_from_options",
    "load_config",
]
