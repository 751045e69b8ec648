# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command-line entry point for the incremental perlcritic gate."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Annotated, Any, Final

import typer
from rich.console import Console
from rich.table import Table

from .config import RatchetConfig, load_config
from .errors import ConfigError, HistoryCorruptionError
from .history import load_history
from .logging import build_logger
from .reporting import BaseReporter, ConsoleReporter, TapReporter
from .session import CriticSession

EXIT_OK: Final[int] = 0
EXIT_FAILED: Final[int] = 1
EXIT_USAGE: Final[int] = 2


class OutputFormat(StrEnum):
    """Result formats supported by the check command."""

    TAP = "tap"
    PRETTY = "pretty"


app = typer.Typer(
    name="critic-ratchet",
    help="Run perlcritic incrementally against a recorded violation history.",
    add_completion=False,
    no_args_is_help=True,
)


def parse_critic_options(entries: list[str]) -> dict[str, Any]:
    """Return ``KEY=VALUE`` entries as a perlcritic option mapping.

    A bare ``KEY`` enables the flag; repeated keys collect into a list.

    Raises:
        ConfigError: If an entry has an empty key.
    """

    options: dict[str, Any] = {}
    for entry in entries:
        key, sep, value = entry.partition("=")
        key = key.strip()
        if not key:
            raise ConfigError(f"Invalid perlcritic option {entry!r}; expected KEY=VALUE")
        parsed: Any = value if sep else True
        if key in options:
            existing = options[key]
            options[key] = [*existing, parsed] if isinstance(existing, list) else [existing, parsed]
        else:
            options[key] = parsed
    return options


def _build_reporter(output_format: OutputFormat, *, use_emoji: bool, use_color: bool) -> BaseReporter:
    if output_format is OutputFormat.PRETTY:
        console = Console(highlight=False, soft_wrap=True, no_color=not use_color)
        return ConsoleReporter(console, use_emoji=use_emoji)
    return TapReporter()


@app.command("check")
def check(
    paths: Annotated[
        list[Path] | None,
        typer.Argument(help="Files or directories to check (defaults to blib/ or lib/)."),
    ] = None,
    root: Annotated[Path, typer.Option("--root", help="Project root anchoring history keys.")] = Path(),
    use_checksum: Annotated[
        bool | None,
        typer.Option("--use-checksum/--no-use-checksum", help="Skip files whose content is unchanged."),
    ] = None,
    history_file: Annotated[
        Path | None,
        typer.Option("--history-file", help="Location of the violation history."),
    ] = None,
    skip_files_like: Annotated[
        str | None,
        typer.Option("--skip-files-like", help="Regular expression of paths to leave out."),
    ] = None,
    critic_option: Annotated[
        list[str] | None,
        typer.Option("--critic-option", "-o", help="perlcritic option as KEY=VALUE (repeatable)."),
    ] = None,
    hold_baseline_on_regression: Annotated[
        bool | None,
        typer.Option(
            "--hold-baseline-on-regression/--no-hold-baseline-on-regression",
            help=(
                "Keep the previous history when a file regressed. Without it a regressed"
                " count becomes the new baseline and is reported as TODO on the next run."
            ),
        ),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", help="Result format."),
    ] = OutputFormat.TAP,
    no_emoji: Annotated[bool, typer.Option("--no-emoji", help="Disable emoji output.")] = False,
    no_color: Annotated[bool, typer.Option("--no-color", help="Disable colour output.")] = False,
    debug: Annotated[bool, typer.Option("--debug", help="Show debug messages.")] = False,
) -> None:
    """Check Perl files and compare their violations with the last run."""

    logger = build_logger(emoji=not no_emoji, color=False if no_color else None, debug=debug)
    project_root = root.resolve()
    try:
        config = _resolve_config(
            project_root,
            use_checksum=use_checksum,
            history_file=history_file,
            skip_files_like=skip_files_like,
            critic_options=parse_critic_options(critic_option or []),
            hold_baseline_on_regression=hold_baseline_on_regression,
        )
        # Compile early so an invalid pattern fails before any history is loaded.
        config.skip_pattern()
    except ConfigError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=EXIT_USAGE) from exc

    reporter = _build_reporter(output_format, use_emoji=not no_emoji, use_color=not no_color)
    try:
        with CriticSession(config, reporter=reporter, root=project_root, logger=logger) as session:
            if session.is_first_run:
                logger.info(f"No history at {session.history_location}; failures are recorded as TODO")
            passed = session.check_all(paths or [])
    except HistoryCorruptionError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=EXIT_USAGE) from exc
    reporter.finish()
    raise typer.Exit(code=EXIT_OK if passed else EXIT_FAILED)


def _resolve_config(root: Path, **overrides: Any) -> RatchetConfig:
    return load_config(root).merged(**overrides)


@app.command("show-history")
def show_history(
    root: Annotated[Path, typer.Option("--root", help="Project root anchoring history keys.")] = Path(),
    history_file: Annotated[
        Path | None,
        typer.Option("--history-file", help="Location of the violation history."),
    ] = None,
    no_emoji: Annotated[bool, typer.Option("--no-emoji", help="Disable emoji output.")] = False,
) -> None:
    """Print the violation counts recorded in the history file."""

    logger = build_logger(emoji=not no_emoji)
    project_root = root.resolve()
    try:
        config = _resolve_config(project_root, history_file=history_file)
        store = load_history(config.history_location(project_root))
    except (ConfigError, HistoryCorruptionError) as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=EXIT_USAGE) from exc
    if store is None:
        logger.warn(f"No history at {config.history_location(project_root)}")
        raise typer.Exit(code=EXIT_OK)

    table = Table(title=str(config.history_location(project_root)))
    table.add_column("File")
    table.add_column("Violations", justify="right")
    table.add_column("Fingerprint")
    for path in sorted(store.paths()):
        entry = store.files[path]
        table.add_row(path, str(entry.count), entry.fingerprint[:12])
    Console(soft_wrap=True).print(table)
    raise typer.Exit(code=EXIT_OK)


__all__ = ["app", "parse_critic_options"]
