# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Load :class:`ToolchainConfig` from ``pyproject.toml`` and explicit overrides."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import ValidationError

from .config import ToolchainConfig
from .errors import ConfigurationError

PYPROJECT_NAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "mypy-runner"


def _normalise_keys(section: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``section`` with kebab-case keys rewritten to snake_case."""

    return {str(key).replace("-", "_"): value for key, value in section.items()}


def read_pyproject_section(project_root: Path) -> dict[str, Any]:
    """Return the ``[tool.mypy-runner]`` table found under ``project_root``.

    Missing files or tables yield an empty mapping.

    Raises:
        ConfigurationError: If the file is not valid TOML or the section is not a table.
    """

    path = project_root / PYPROJECT_NAME
    if not path.is_file():
        return {}
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Failed to parse {path}: {exc}") from exc
    tool_section = data.get(PYPROJECT_TOOL_KEY)
    if not isinstance(tool_section, Mapping):
        return {}
    section = tool_section.get(PYPROJECT_SECTION_KEY)
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise ConfigurationError(f"[tool.{PYPROJECT_SECTION_KEY}] in {path} must be a table")
    return _normalise_keys(section)


def load_config(
    project_root: Path,
    overrides: Mapping[str, Any] | None = None,
) -> ToolchainConfig:
    """Build a :class:`ToolchainConfig` for ``project_root``.

    Values from ``pyproject.toml`` are applied first, then every override
    that is not ``None``.

    Raises:
        ConfigurationError: If the merged values fail validation.
    """

    root = project_root.resolve()
    payload = read_pyproject_section(root)
    payload.update({key: value for key, value in (overrides or {}).items() if value is not None})
    payload["project_root"] = root
    try:
        return ToolchainConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid mypy-runner configuration: {exc}") from exc


__all__ = ["PYPROJECT_SECTION_KEY", "load_config", "read_pyproject_section"]
