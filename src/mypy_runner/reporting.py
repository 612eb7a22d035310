# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Render issues and status lines on a rich console."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from enum import StrEnum

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .models import Issue
from .severity import SeverityLevel, severity_style


class OutputMode(StrEnum):
    """Supported issue rendering styles."""

    CONCISE = "concise"
    TABLE = "table"


def format_issue(issue: Issue) -> str:
    """Return ``issue`` in mypy's own ``path:line:column: severity: message`` shape."""

    return f"{issue.path}:{issue.line}:{issue.column + 1}: {issue.severity.value}: {issue.message}"


def render_issues(issues: Sequence[Issue], *, console: Console, mode: OutputMode = OutputMode.CONCISE) -> None:
    """Print ``issues`` followed by a one-line summary."""

    if mode is OutputMode.TABLE and issues:
        table = Table(box=box.SIMPLE, expand=True)
        table.add_column("Location", style="bold", overflow="fold")
        table.add_column("Severity")
        table.add_column("Message", overflow="fold")
        for issue in issues:
            style = severity_style(issue.severity)
            table.add_row(
                f"{issue.path}:{issue.line}:{issue.column + 1}",
                f"[{style}]{issue.severity.value}[/]",
                issue.message,
            )
        console.print(table)
    else:
        for issue in issues:
            console.print(Text(format_issue(issue), style=severity_style(issue.severity)), highlight=False)
    console.print(summarize(issues), highlight=False)


def summarize(issues: Sequence[Issue]) -> str:
    """Return a short count of ``issues`` grouped by severity."""

    if not issues:
        return "Success: no issues found"
    counts = Counter(issue.severity for issue in issues)
    parts = [
        f"{counts[level]} {level.value}{'s' if counts[level] != 1 else ''}"
        for level in SeverityLevel
        if counts[level]
    ]
    files = len({issue.path for issue in issues})
    return f"Found {', '.join(parts)} in {files} file{'s' if files != 1 else ''}"


def ok(console: Console, message: str, *, use_emoji: bool = True) -> None:
    """Emit a success message."""

    console.print(Text(f"{'✅ ' if use_emoji else ''}{message}", style="green"))


def fail(console: Console, message: str, *, use_emoji: bool = True) -> None:
    """Emit an error message."""

    console.print(Text(f"{'❌ ' if use_emoji else ''}{message}", style="red"))


__all__ = ["OutputMode", "fail", "format_issue", "ok", "render_issues", "summarize"]
