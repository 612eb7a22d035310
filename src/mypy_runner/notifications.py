# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing notifications raised when mypy cannot run."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from rich.console import Console
from rich.text import Text


@runtime_checkable
class Notifier(Protocol):
    """Receive actionable notifications about the checker's availability."""

    def no_interpreter(self) -> None:
        """Report that no Python interpreter is configured for the project."""

    def install_checker(self) -> None:
        """Report that mypy is not installed for the configured interpreter."""

    def abnormal_exit(self, detail: str) -> None:
        """Report that mypy exited abnormally with ``detail`` on stderr."""


class ConsoleNotifier:
    """Render notifications on a rich console, each kind at most once."""

    def __init__(self, console: Console | None = None, *, use_emoji: bool = True) -> None:
        """Create a notifier.

        Args:
            console: Console receiving notifications; defaults to stderr.
            use_emoji: Whether to prefix messages with status emoji.
        """

        self._console = console or Console(stderr=True)
        self._use_emoji = use_emoji
        self._shown: set[str] = set()

    def no_interpreter(self) -> None:
        """Ask the user to configure an interpreter, once per notifier."""

        self._once(
            "no-interpreter",
            "⚠️ ",
            "No Python interpreter configured; set interpreter_path or provide a mypy executable.",
        )

    def install_checker(self) -> None:
        """Ask the user to install mypy, once per notifier."""

        self._once(
            "install",
            "⚠️ ",
            "mypy is not installed for the configured interpreter; install it with 'pip install mypy'.",
        )

    def abnormal_exit(self, detail: str) -> None:
        """Report an abnormal mypy exit every time it happens.

        Args:
            detail: Captured stderr of the failed run, shown dimmed when present.
        """

        text = Text(f"{'❌ ' if self._use_emoji else ''}mypy exited abnormally", style="red")
        if detail.strip():
            text.append(f"\n{detail.strip()}", style="dim")
        self._console.print(text)

    def _once(self, key: str, symbol: str, message: str) -> None:
        if key in self._shown:
            return
        self._shown.add(key)
        prefix = symbol if self._use_emoji else ""
        self._console.print(Text(f"{prefix}{message}", style="yellow"))


__all__ = ["ConsoleNotifier", "Notifier"]
