# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Lint engine adapters producing violation records for a single file."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Final, Protocol, runtime_checkable

from .errors import LintEngineError
from .process_utils import run_command

PERLCRITIC_EXECUTABLE: Final[str] = "perlcritic"
DEFAULT_VERBOSE_TEMPLATE: Final[str] = "%f:%l:%c:%m (%p)\\n"
# perlcritic exits with 2 when it found violations, 1 on internal errors.
SUCCESS_RETURNCODES: Final[frozenset[int]] = frozenset({0, 2})
_RESERVED_OPTIONS: Final[frozenset[str]] = frozenset({"verbose", "quiet", "color", "colour", "nocolor", "nocolour"})


@runtime_checkable
class LintEngine(Protocol):
    """Protocol implemented by engines that critique one file at a time."""

    def critique(self, path: Path) -> Sequence[str]:
        """Return the violations found in ``path`` as opaque strings.

        Raises:
            LintEngineError: If the file could not be analysed.
        """
        ...


def normalise_option_name(name: str) -> str:
    """Return ``name`` spelled as a long command-line flag without dashes.

    ``-profile_strictness`` and ``profile-strictness`` both become
    ``profile-strictness``.
    """

    return name.lstrip("-").replace("_", "-")


def build_option_flags(options: Mapping[str, Any]) -> list[str]:
    """Translate engine options into perlcritic command-line flags.

    Args:
        options: Option names mapped to their values. ``True`` enables a flag,
            ``False`` negates it, sequences repeat it and ``None`` drops it.

    Returns:
        list[str]: Command-line arguments in option order.
    """

    flags: list[str] = []
    for raw_name, value in options.items():
        name = normalise_option_name(raw_name)
        if not name or name in _RESERVED_OPTIONS or value is None:
            continue
        if isinstance(value, bool):
            flags.append(f"--{name}" if value else f"--no{name}")
        elif isinstance(value, (list, tuple)):
            for item in value:
                flags.extend((f"--{name}", str(item)))
        else:
            flags.extend((f"--{name}", str(value)))
    return flags


def split_violations(output: str) -> list[str]:
    """Return one violation record per non-blank line of ``output``."""

    return [line.rstrip() for line in output.splitlines() if line.strip()]


class PerlCriticEngine:
    """Run the ``perlcritic`` executable against individual files."""

    def __init__(
        self,
        options: Mapping[str, Any] | None = None,
        *,
        executable: str = PERLCRITIC_EXECUTABLE,
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> None:
        """Create an engine forwarding ``options`` to perlcritic.

        Args:
            options: perlcritic options such as ``severity`` or ``profile``.
                ``verbose`` overrides the output template.
            executable: Name or absolute path of the perlcritic executable.
            cwd: Working directory used when invoking perlcritic.
            timeout: Seconds allowed per file before the run is abandoned.
        """

        self._options = dict(options or {})
        self._executable = executable
        self._cwd = cwd
        self._timeout = timeout

    @property
    def verbose(self) -> str:
        """Return the verbosity level or template passed to perlcritic."""

        for name, value in self._options.items():
            if normalise_option_name(name) == "verbose" and value is not None:
                return str(value)
        return DEFAULT_VERBOSE_TEMPLATE

    def build_command(self, path: Path) -> list[str]:
        """Return the command line used to critique ``path``."""

        return [
            self._executable,
            "--quiet",
            "--nocolor",
            "--verbose",
            self.verbose,
            *build_option_flags(self._options),
            "--",
            str(path),
        ]

    def critique(self, path: Path) -> list[str]:
        """Return perlcritic's violations for ``path``.

        Raises:
            LintEngineError: If perlcritic is missing, times out, or exits with
                an error status.
        """

        try:
            result = run_command(self.build_command(path), cwd=self._cwd, timeout=self._timeout)
        except (FileNotFoundError, PermissionError) as exc:
            raise LintEngineError(path, str(exc)) from exc
        if result.timed_out:
            raise LintEngineError(path, f"perlcritic timed out after {self._timeout}s")
        if result.returncode not in SUCCESS_RETURNCODES:
            detail = result.stderr.strip() or result.stdout.strip() or f"exit status {result.returncode}"
            raise LintEngineError(path, detail)
        return split_violations(result.stdout)


__all__ = [
    "DEFAULT_VERBOSE_TEMPLATE",
    "LintEngine",
    "PERLCRITIC_EXECUTABLE",
    "PerlCriticEngine",
    "build_option_flags",
    "normalise_option_name",
    "split_violations",
]
