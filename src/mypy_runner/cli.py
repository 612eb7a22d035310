# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command-line entry point for mypy-runner."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated, Final

import typer
from rich.console import Console

from .config_loader import load_config
from .errors import MypyRunnerError, ScanCancelled
from .notifications import ConsoleNotifier
from .reporting import OutputMode, fail, ok, render_issues
from .runner import ProcessRunner
from .scanner import MypyScanner

LOGGER = logging.getLogger("mypy_runner")

EXIT_ISSUES: Final[int] = 1
EXIT_ERROR: Final[int] = 2
EXIT_CANCELLED: Final[int] = 130

app = typer.Typer(
    help="Run mypy across pipenv environments and report structured issues.",
    add_completion=False,
    no_args_is_help=True,
)


def configure_logging(verbose: bool) -> None:
    """Stream package log records to stderr when ``verbose`` is set."""

    if not verbose or getattr(LOGGER, "_mypy_runner_configured", False):
        return
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    LOGGER.addHandler(handler)
    LOGGER.setLevel(logging.DEBUG)
    LOGGER.propagate = False
    setattr(LOGGER, "_mypy_runner_configured", True)


@app.command("scan")
def scan_command(
    files: Annotated[list[Path], typer.Argument(help="Source files to type-check.")],
    root: Annotated[Path, typer.Option("--root", help="Project root used as mypy's working directory.")] = Path(),
    mypy_path: Annotated[str | None, typer.Option("--mypy-path", help="Project-wide mypy executable.")] = None,
    config_file: Annotated[str | None, typer.Option("--config-file", help="Project-wide mypy config file.")] = None,
    args: Annotated[str | None, typer.Option("--args", help="Extra arguments passed to mypy.")] = None,
    autodetect: Annotated[
        bool | None,
        typer.Option("--autodetect/--no-autodetect", help="Route files through their pipenv environments."),
    ] = None,
    jobs: Annotated[int | None, typer.Option("--jobs", "-j", min=1, help="Buckets checked concurrently.")] = None,
    timeout: Annotated[float | None, typer.Option("--timeout", help="Seconds allowed per mypy run.")] = None,
    output: Annotated[OutputMode, typer.Option("--output", help="Issue rendering style.")] = OutputMode.CONCISE,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log resolution details to stderr.")] = False,
) -> None:
    """Type-check FILES and print the issues mypy reports."""

    configure_logging(verbose)
    console = Console()
    err_console = Console(stderr=True)
    overrides = {
        "executable_path": mypy_path,
        "config_file_path": config_file,
        "extra_arguments": args,
        "autodetect_isolated_environments": autodetect,
        "jobs": jobs,
        "timeout": timeout,
    }
    try:
        config = load_config(root, overrides)
        scanner = MypyScanner(config, notifier=ConsoleNotifier(err_console))
        issues = scanner.scan([str(path.resolve()) for path in files])
    except ScanCancelled as exc:
        fail(err_console, f"Scan cancelled: {exc}")
        raise typer.Exit(EXIT_CANCELLED) from exc
    except MypyRunnerError as exc:
        fail(err_console, str(exc))
        raise typer.Exit(EXIT_ERROR) from exc

    render_issues(issues, console=console, mode=output)
    raise typer.Exit(EXIT_ISSUES if issues else 0)


@app.command("check-path")
def check_path_command(
    executable: Annotated[str, typer.Argument(help="mypy executable to validate.")],
    root: Annotated[Path, typer.Option("--root", help="Base for relative executable paths.")] = Path(),
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Check that EXECUTABLE is a working mypy."""

    configure_logging(verbose)
    console = Console()
    try:
        config = load_config(root)
    except MypyRunnerError as exc:
        fail(console, str(exc))
        raise typer.Exit(EXIT_ERROR) from exc
    if ProcessRunner(config).validate(executable):
        ok(console, f"{executable} is a valid mypy executable")
        return
    fail(console, f"{executable} is not a valid mypy executable")
    raise typer.Exit(1)


def main() -> None:
    """Console-script entry point."""

    app()


__all__ = ["app", "configure_logging", "main"]
