# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Locate the project-wide mypy executable and decide whether a scan can run."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from .config import ToolchainConfig
from .environment import CHECKER_NAME, executable_name, virtualenv_root_for
from .notifications import Notifier
from .runner import ProcessRunner

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Availability:
    """Outcome of the pre-flight check performed before each scan."""

    executable: str
    available: bool


def _interpreter(config: ToolchainConfig) -> Path | None:
    if not config.interpreter_path:
        return None
    path = config.resolve_path(config.interpreter_path)
    return path if path.is_file() else None


def detect_system_executable() -> str:
    """Return the mypy executable found on ``PATH`` or ``""``."""

    found = shutil.which(CHECKER_NAME)
    if found is None:
        LOGGER.info("No %s executable found on PATH", CHECKER_NAME)
        return ""
    LOGGER.info("Detected mypy path: %s", found)
    return found


def project_executable(config: ToolchainConfig) -> str:
    """Return the project-wide mypy executable, or ``""`` when none is known.

    An explicitly configured path wins. Otherwise a virtualenv interpreter
    contributes the mypy installed beside it, and any other setup falls back
    to the first ``mypy`` on ``PATH``.

    Args:
        config: Project settings naming the executable or interpreter.

    Returns:
        str: Executable path as configured or discovered.
    """

    if config.executable_path:
        return config.executable_path
    interpreter = _interpreter(config)
    if interpreter is not None and virtualenv_root_for(interpreter) is not None:
        candidate = interpreter.parent / executable_name()
        return str(candidate) if candidate.is_file() else ""
    return detect_system_executable()


def check_available(
    config: ToolchainConfig,
    runner: ProcessRunner,
    notifier: Notifier | None = None,
) -> Availability:
    """Return whether mypy can run, notifying ``notifier`` when it cannot.

    Args:
        config: Project settings used to discover the executable.
        runner: Runner performing the version query.
        notifier: Told to configure an interpreter or install mypy.

    Returns:
        Availability: The discovered executable and whether it validated.

    Raises:
        ScanCancelled: If the runner's token is cancelled during validation.
    """

    executable = project_executable(config)
    if executable and runner.validate(executable):
        return Availability(executable=executable, available=True)

    if notifier is not None:
        if _interpreter(config) is None:
            notifier.no_interpreter()
        else:
            notifier.install_checker()
    return Availability(executable=executable, available=False)


__all__ = ["Availability", "check_available", "detect_system_executable", "project_executable"]
