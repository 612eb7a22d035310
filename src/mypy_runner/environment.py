# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Environment helpers for locating virtualenvs and probing pipenv sandboxes."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, MutableMapping
from pathlib import Path
from typing import Final

from .models import ProbeResult
from .process import CancelToken, CommandOptions, format_command, run_command

LOGGER = logging.getLogger(__name__)

WINDOWS_OS_NAME: Final[str] = "nt"
CHECKER_NAME: Final[str] = "mypy"
CHECKER_CONFIG_NAME: Final[str] = "mypy.ini"
SANDBOX_COMMAND: Final[str] = "pipenv"
SANDBOX_DEPTH_ENV: Final[str] = "PIPENV_MAX_DEPTH"
DEFAULT_SANDBOX_DEPTH: Final[int] = 100
ENV_KEY_VIRTUAL_ENV: Final[str] = "VIRTUAL_ENV"
ENV_KEY_PATH: Final[str] = "PATH"
ENV_KEY_PYTHONHOME: Final[str] = "PYTHONHOME"


def is_windows() -> bool:
    """Return ``True`` when running on Windows."""

    return os.name == WINDOWS_OS_NAME


def bin_dir_name() -> str:
    """Return the name of a virtualenv's executable directory."""

    return "Scripts" if is_windows() else "bin"


def executable_name(name: str = CHECKER_NAME) -> str:
    """Return the platform specific file name for executable ``name``."""

    return f"{name}.exe" if is_windows() else name


def activate_script_name() -> str:
    """Return the activation script that marks a virtualenv bin directory."""

    return "activate.bat" if is_windows() else "activate"


def virtualenv_root_for(executable: Path) -> Path | None:
    """Return the virtualenv owning ``executable`` or ``None``.

    An executable belongs to a virtualenv when its directory also holds the
    environment's activation script.
    """

    bin_dir = executable.parent
    if (bin_dir / activate_script_name()).is_file():
        return bin_dir.parent
    return None


def checker_in_environment(environment_root: Path) -> Path:
    """Return where the environment rooted at ``environment_root`` keeps mypy."""

    return environment_root / bin_dir_name() / executable_name()


def isolated_environment(
    executable: Path,
    base: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Return a subprocess environment suited to running ``executable``.

    When the executable lives in a virtualenv, ``VIRTUAL_ENV`` points to it,
    its bin directory leads ``PATH`` and any inherited ``PYTHONHOME`` is
    removed.
    """

    env: MutableMapping[str, str] = dict(os.environ if base is None else base)
    venv_root = virtualenv_root_for(executable)
    if venv_root is None:
        return dict(env)
    env[ENV_KEY_VIRTUAL_ENV] = str(venv_root)
    venv_bin = str(venv_root / bin_dir_name())
    path = env.get(ENV_KEY_PATH, "")
    env[ENV_KEY_PATH] = venv_bin + (os.pathsep + path if path else "")
    env.pop(ENV_KEY_PYTHONHOME, None)
    return dict(env)


def _existing_directory(output: str) -> Path | None:
    """Return the directory reported on the first line of ``output`` if it exists."""

    lines = [line.strip() for line in output.splitlines() if line.strip()]
    if not lines:
        return None
    candidate = Path(lines[0]).expanduser()
    return candidate if candidate.is_dir() else None


class EnvironmentProbe:
    """Ask the sandbox manager which environment and project govern a directory.

    Results are memoized per directory for the lifetime of the probe. Any
    failure (missing tool, non-zero exit, timeout, bogus path) degrades to an
    empty :class:`ProbeResult` field so callers fall back to project settings.
    """

    def __init__(
        self,
        *,
        command: str = SANDBOX_COMMAND,
        max_depth: int = DEFAULT_SANDBOX_DEPTH,
        timeout: float | None = None,
        cancel: CancelToken | None = None,
    ) -> None:
        self._command = command
        self._max_depth = max_depth
        self._timeout = timeout
        self._cancel = cancel
        self._results: dict[Path, ProbeResult] = {}

    def probe(self, directory: Path) -> ProbeResult:
        """Return the environment root and project root governing ``directory``."""

        key = directory.resolve()
        cached = self._results.get(key)
        if cached is not None:
            return cached
        result = ProbeResult(
            environment_root=self._locate(key, "--venv", "virtualenv"),
            project_root=self._locate(key, "--where", "Pipfile directory"),
        )
        self._results[key] = result
        return result

    def _locate(self, directory: Path, flag: str, label: str) -> Path | None:
        args = [self._command, flag]
        env = dict(os.environ)
        env[SANDBOX_DEPTH_ENV] = str(self._max_depth)
        options = CommandOptions(cwd=directory, env=env, timeout=self._timeout)
        try:
            completed = run_command(args, options=options, cancel=self._cancel)
        except FileNotFoundError as exc:
            LOGGER.debug("Skipping %s lookup: %s", label, exc)
            return None
        except OSError as exc:
            LOGGER.warning("Error while locating %s in %s: %s", label, directory, exc)
            return None

        if completed.stderr.strip():
            LOGGER.info("%s-locating cmd: %s in %s", label, format_command(completed.args), directory)
            LOGGER.info("Error while locating %s: %s", label, completed.stderr.strip())
        if completed.returncode != 0:
            LOGGER.info("%s lookup exited with %s; using project defaults", label, completed.returncode)
            return None
        located = _existing_directory(completed.stdout)
        if located is None:
            LOGGER.info("%s lookup reported no usable path: %r", label, completed.stdout.strip())
            return None
        LOGGER.debug("%s for %s: %s", label, directory, located)
        return located


__all__ = [
    "CHECKER_CONFIG_NAME",
    "CHECKER_NAME",
    "DEFAULT_SANDBOX_DEPTH",
    "ENV_KEY_PATH",
    "ENV_KEY_PYTHONHOME",
    "ENV_KEY_VIRTUAL_ENV",
    "EnvironmentProbe",
    "SANDBOX_COMMAND",
    "SANDBOX_DEPTH_ENV",
    "activate_script_name",
    "checker_in_environment",
    "bin_dir_name",
    "executable_name",
    "is_windows",
    "isolated_environment",
    "virtualenv_root_for",
]
