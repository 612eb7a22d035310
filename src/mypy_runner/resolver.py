# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Per-directory selection of the mypy executable and configuration file."""

from __future__ import annotations

import logging
from pathlib import Path

from .environment import CHECKER_CONFIG_NAME, EnvironmentProbe, checker_in_environment
from .models import Toolchain

LOGGER = logging.getLogger(__name__)


class DirectoryResolutionCache:
    """Directory to :class:`Toolchain` memo owned by a single scan."""

    def __init__(self) -> None:
        self._entries: dict[Path, Toolchain] = {}

    def get(self, directory: Path) -> Toolchain | None:
        """Return the toolchain stored for ``directory``.

        Args:
            directory: Directory exactly as it was passed to :meth:`put`.

        Returns:
            Toolchain | None: The stored toolchain, or ``None`` when unknown.
        """

        return self._entries.get(directory)

    def put(self, directory: Path, toolchain: Toolchain) -> None:
        """Remember ``toolchain`` as the resolution for ``directory``.

        Args:
            directory: Directory the toolchain was resolved for.
            toolchain: Executable and config file chosen for it.
        """

        self._entries[directory] = toolchain

    def __contains__(self, directory: object) -> bool:
        return directory in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class ToolchainResolver:
    """Choose the toolchain for a directory, preferring environment-local artifacts."""

    def __init__(self, probe: EnvironmentProbe, *, autodetect: bool = True) -> None:
        self._probe = probe
        self._autodetect = autodetect

    @property
    def autodetect(self) -> bool:
        """Return whether directories are probed for isolated environments."""

        return self._autodetect

    def resolve(
        self,
        directory: Path,
        project_executable: str,
        project_config: str,
        *,
        cache: DirectoryResolutionCache | None = None,
    ) -> Toolchain:
        """Return the executable and config file that apply to ``directory``.

        Args:
            directory: Parent directory of the source file being routed.
            project_executable: Project-wide mypy executable used as fallback.
            project_config: Project-wide config file (possibly empty) used as fallback.
            cache: Scan-scoped cache consulted before probing and updated afterwards.

        Returns:
            Toolchain: The executable and config file for ``directory``.
        """

        fallback = Toolchain(project_executable, project_config)
        if not self._autodetect:
            return fallback
        if cache is not None:
            cached = cache.get(directory)
            if cached is not None:
                return cached

        probed = self._probe.probe(directory)
        executable = project_executable
        config_file = project_config

        if probed.environment_root is not None:
            candidate = checker_in_environment(probed.environment_root)
            if candidate.is_file():
                executable = str(candidate)
            else:
                LOGGER.info("No mypy in environment %s; using %s", probed.environment_root, project_executable)

        if probed.project_root is not None:
            candidate = probed.project_root / CHECKER_CONFIG_NAME
            if candidate.is_file():
                config_file = str(candidate)

        toolchain = Toolchain(executable, config_file)
        if cache is not None:
            cache.put(directory, toolchain)
        return toolchain


__all__ = ["DirectoryResolutionCache", "ToolchainResolver"]
