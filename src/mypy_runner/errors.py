# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy raised by the mypy runner."""

from __future__ import annotations


class MypyRunnerError(Exception):
    """Base class for every error surfaced by :mod:`mypy_runner`."""


class ConfigurationError(MypyRunnerError):
    """Raised when a required path or configuration value is missing or invalid."""


class InvalidSourceFile(ConfigurationError):
    """Raised when a requested source path does not exist or is a directory."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Error while checking source file path {path}: not exists or not a file path")
        self.path = path


class ToolExecutionError(MypyRunnerError):
    """Raised when mypy exits abnormally without reporting any diagnostics."""

    def __init__(self, returncode: int, stderr: str = "", *, command: tuple[str, ...] = ()) -> None:
        """Initialise the error with the captured process metadata.

        Args:
            returncode: Exit status reported by the checker.
            stderr: Captured standard error stream.
            command: Command line that was executed.
        """

        detail = stderr.strip()
        message = f"mypy failed with code {returncode}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr
        self.command = command


class ParseError(MypyRunnerError):
    """Raised when a diagnostic line cannot be converted into an issue."""

    def __init__(self, message: str, *, line: str | None = None) -> None:
        super().__init__(message if line is None else f"{message}: {line!r}")
        self.line = line


class ScanCancelled(MypyRunnerError):
    """Raised when a caller interrupts an in-flight scan."""


__all__ = [
    "ConfigurationError",
    "InvalidSourceFile",
    "MypyRunnerError",
    "ParseError",
    "ScanCancelled",
    "ToolExecutionError",
]
