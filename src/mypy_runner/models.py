# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the mypy_runner package."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from .severity import SeverityLevel


class Issue(BaseModel):
    """Structured diagnostic extracted from mypy output.

    ``line`` is 1-based while ``column`` is 0-based, matching what editors
    expect when placing annotations.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    line: int = Field(ge=1)
    column: int = Field(ge=0)
    severity: SeverityLevel
    message: str


@dataclass(frozen=True, slots=True)
class Toolchain:
    """Executable and configuration file selected for one directory."""

    executable: str
    config_file: str = ""


@dataclass(frozen=True, slots=True)
class ProbeResult:
    """Outcome of asking the sandbox manager about a directory."""

    environment_root: Path | None = None
    project_root: Path | None = None


@dataclass(slots=True)
class ExecutionBucket:
    """Source files sharing one mypy executable and configuration file.

    The configuration path is fixed when the bucket is created; later
    insertions never change it.
    """

    executable_path: str
    config_file_path: str = ""
    _files: dict[str, None] = field(default_factory=dict, repr=False)

    def add(self, path: str) -> None:
        """Insert ``path`` keeping first-seen order."""

        self._files.setdefault(path, None)

    @property
    def source_files(self) -> tuple[str, ...]:
        """Return the bucket's files in insertion order."""

        return tuple(self._files)

    def __len__(self) -> int:
        return len(self._files)


@dataclass(frozen=True, slots=True)
class ProcessOutput:
    """Captured result of a finished subprocess."""

    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        """Return ``True`` when the process exited with status 0."""

        return self.returncode == 0


__all__ = ["ExecutionBucket", "Issue", "ProbeResult", "ProcessOutput", "Toolchain"]
