# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Safe, cancellable wrappers around ``subprocess`` execution."""

from __future__ import annotations

import logging
import shlex
import shutil

# Bandit: subprocess usage is intentional; we provide a controlled wrapper around
# external tool execution, normalising arguments and disabling ``shell=True``.
import subprocess  # nosec B404
import threading
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .errors import ScanCancelled
from .models import ProcessOutput

LOGGER = logging.getLogger(__name__)

POLL_INTERVAL: Final[float] = 0.1
TIMEOUT_RETURNCODE: Final[int] = 124


class CancelToken:
    """Cooperative cancellation flag shared between a caller and a scan.

    A token created with ``parent`` also reports cancellation once the parent
    is cancelled, while cancelling the child leaves the parent untouched.
    """

    def __init__(self, parent: CancelToken | None = None) -> None:
        self._event = threading.Event()
        self._parent = parent

    def cancel(self) -> None:
        """Request cancellation of every wait observing this token."""

        self._event.set()

    @property
    def cancelled(self) -> bool:
        """Return ``True`` once this token or its parent has been cancelled."""

        if self._event.is_set():
            return True
        return self._parent is not None and self._parent.cancelled

    def child(self) -> CancelToken:
        """Return a token cancelled with this one that can also be cancelled alone."""

        return CancelToken(self)

    def raise_if_cancelled(self) -> None:
        """Raise :class:`ScanCancelled` when cancellation was requested."""

        if self.cancelled:
            raise ScanCancelled("scan cancelled by caller")


@dataclass(frozen=True, slots=True)
class CommandOptions:
    """Immutable command execution options."""

    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    timeout: float | None = None
    discard_stdin: bool = True


def _normalize_args(args: Sequence[str]) -> list[str]:
    """Normalise the subprocess argument sequence.

    Args:
        args: Raw command arguments supplied by the caller.

    Returns:
        list[str]: Validated argument list suitable for subprocess execution.

    Raises:
        ValueError: If no arguments are provided.
        FileNotFoundError: If a bare executable name cannot be found on ``PATH``.
    """

    if not args:
        msg = "subprocess command requires at least one argument"
        raise ValueError(msg)

    head, *rest = args
    head_path = Path(head)
    if head_path.is_absolute():
        return [str(head_path), *rest]

    resolved = shutil.which(head)
    if resolved is None:
        msg = f"Executable '{head}' was not found on PATH"
        raise FileNotFoundError(msg)
    return [resolved, *rest]


def format_command(args: Sequence[str]) -> str:
    """Return ``args`` rendered as a shell-style command line for logging."""

    return shlex.join(str(arg) for arg in args)


def _terminate(process: subprocess.Popen[str]) -> tuple[str, str]:
    """Kill ``process`` and drain whatever output it produced."""

    process.kill()
    stdout, stderr = process.communicate()
    return stdout or "", stderr or ""


def run_command(
    args: Sequence[str],
    *,
    options: CommandOptions | None = None,
    cancel: CancelToken | None = None,
) -> ProcessOutput:
    """Execute ``args`` and wait for completion while honouring cancellation.

    The wait polls so that a cancelled ``cancel`` token, or a
    ``KeyboardInterrupt``, kills the child right away. Timeouts are reported
    as exit status ``124`` with a note appended to stderr.

    Args:
        args: Command and argument sequence to execute.
        options: Working directory, environment and timeout settings.
        cancel: Optional token observed while waiting for the process.

    Returns:
        ProcessOutput: Exit status together with decoded stdout and stderr.

    Raises:
        FileNotFoundError: If the executable cannot be resolved on ``PATH``.
        ScanCancelled: When the wait is interrupted by the caller.
    """

    normalized = _normalize_args(args)
    resolved = options or CommandOptions()
    if cancel is not None:
        cancel.raise_if_cancelled()

    # Bandit: commands originate from resolved tool paths; we pass argument
    # lists directly without shell expansion.
    process = subprocess.Popen(  # nosec B603
        normalized,
        cwd=str(resolved.cwd) if resolved.cwd is not None else None,
        env=dict(resolved.env) if resolved.env is not None else None,
        stdin=subprocess.DEVNULL if resolved.discard_stdin else None,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        encoding="utf-8",
        errors="replace",
    )
    deadline = None if resolved.timeout is None else time.monotonic() + resolved.timeout
    try:
        while True:
            if cancel is not None and cancel.cancelled:
                _terminate(process)
                raise ScanCancelled(f"cancelled while running {normalized[0]}")
            wait = POLL_INTERVAL
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    stdout, stderr = _terminate(process)
                    timeout_msg = f"Command timed out after {resolved.timeout:.1f}s"
                    LOGGER.warning("%s: %s", timeout_msg, format_command(normalized))
                    combined = f"{stderr}\n{timeout_msg}" if stderr else timeout_msg
                    return ProcessOutput(tuple(normalized), TIMEOUT_RETURNCODE, stdout, combined)
                wait = min(wait, remaining)
            try:
                stdout, stderr = process.communicate(timeout=wait)
            except subprocess.TimeoutExpired:
                continue
            return ProcessOutput(tuple(normalized), process.returncode, stdout or "", stderr or "")
    except KeyboardInterrupt as exc:
        _terminate(process)
        raise ScanCancelled(f"interrupted while running {normalized[0]}") from exc


__all__ = [
    "CancelToken",
    "CommandOptions",
    "POLL_INTERVAL",
    "TIMEOUT_RETURNCODE",
    "format_command",
    "run_command",
]
