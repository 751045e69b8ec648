# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Safe wrapper around ``subprocess`` for running the lint engine."""

from __future__ import annotations

import shutil

# Bandit: subprocess usage is intentional; commands are argument lists built
# from configuration and never pass through a shell.
import subprocess  # nosec B404
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

TIMEOUT_RETURNCODE: Final[int] = 124


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured output of a finished command."""

    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False


def resolve_executable(args: Sequence[str]) -> list[str]:
    """Return ``args`` with the executable resolved against ``PATH``.

    Raises:
        ValueError: If ``args`` is empty.
        FileNotFoundError: If the executable cannot be located.
    """

    if not args:
        msg = "subprocess command requires at least one argument"
        raise ValueError(msg)

    head, *rest = args
    head_path = Path(head)
    if head_path.is_absolute():
        return [str(head_path), *rest]

    resolved = shutil.which(head)
    if resolved is None:
        msg = f"Executable '{head}' was not found on PATH"
        raise FileNotFoundError(msg)
    return [resolved, *rest]


def _as_text(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def run_command(
    args: Sequence[str],
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    timeout: float | None = None,
) -> CommandResult:
    """Execute ``args`` capturing output without raising on exit status.

    Output is decoded as UTF-8; undecodable bytes become U+FFFD.

    Args:
        args: Command line; the first element names the executable.
        cwd: Working directory for the child process.
        env: Environment for the child process, inherited when ``None``.
        timeout: Seconds after which the child is killed.

    Returns:
        CommandResult: Exit status and captured streams. A timeout is reported
        with return code ``124``.

    Raises:
        FileNotFoundError: If the executable cannot be located.
    """

    normalized = resolve_executable(args)
    try:
        # Bandit: argument list only, no shell expansion.
        completed = subprocess.run(  # nosec B603
            normalized,
            cwd=str(cwd) if cwd is not None else None,
            env=dict(env) if env is not None else None,
            check=False,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            stdin=subprocess.DEVNULL,
        )
    except subprocess.TimeoutExpired as exc:
        stderr = _as_text(exc.stderr)
        timeout_msg = f"Command timed out after {timeout:.1f}s" if timeout is not None else "Command timed out"
        return CommandResult(
            args=tuple(normalized),
            returncode=TIMEOUT_RETURNCODE,
            stdout=_as_text(exc.stdout),
            stderr=f"{stderr}\n{timeout_msg}" if stderr else timeout_msg,
            timed_out=True,
        )
    return CommandResult(
        args=tuple(normalized),
        returncode=completed.returncode,
        stdout=_as_text(completed.stdout),
        stderr=_as_text(completed.stderr),
    )


__all__ = ["CommandResult", "TIMEOUT_RETURNCODE", "resolve_executable", "run_command"]
