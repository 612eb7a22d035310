# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration model describing how mypy should be located and invoked."""

from __future__ import annotations

import shlex
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from .environment import DEFAULT_SANDBOX_DEPTH, SANDBOX_COMMAND
from .errors import ConfigurationError


class ToolchainConfig(BaseModel):
    """Project-wide toolchain settings, read-only for the duration of a scan."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    project_root: Path = Field(default_factory=Path.cwd)
    executable_path: str = ""
    config_file_path: str = ""
    extra_arguments: str = ""
    autodetect_isolated_environments: bool = False
    interpreter_path: str = ""
    sandbox_command: str = SANDBOX_COMMAND
    sandbox_max_depth: int = Field(default=DEFAULT_SANDBOX_DEPTH, ge=1)
    timeout: float | None = Field(default=None, gt=0)
    probe_timeout: float | None = Field(default=None, gt=0)
    jobs: int = Field(default=1, ge=1)

    def resolve_path(self, value: str) -> Path:
        """Return ``value`` as an absolute path anchored at :attr:`project_root`."""

        path = Path(value).expanduser()
        return path if path.is_absolute() else self.project_root / path

    def split_arguments(self) -> list[str]:
        """Return :attr:`extra_arguments` split with shell quoting rules.

        Raises:
            ConfigurationError: If the argument string has unbalanced quotes.
        """

        try:
            return shlex.split(self.extra_arguments)
        except ValueError as exc:
            raise ConfigurationError(f"invalid mypy arguments {self.extra_arguments!r}: {exc}") from exc

    def project_config_file(self) -> str:
        """Return the absolute project config path, or ``""`` when unset.

        Raises:
            ConfigurationError: If a config file is configured but missing.
        """

        if not self.config_file_path:
            return ""
        path = self.resolve_path(self.config_file_path)
        if not path.is_file():
            raise ConfigurationError(
                f"mypy config file is not valid. File does not exist or can't be read: {path}"
            )
        return str(path)


__all__ = ["ToolchainConfig"]
