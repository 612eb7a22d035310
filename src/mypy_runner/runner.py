# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Invoke mypy for one execution bucket and interpret its exit status."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import Final

from .config import ToolchainConfig
from .environment import executable_name, isolated_environment
from .errors import ToolExecutionError
from .models import ExecutionBucket, Issue, ProcessOutput
from .notifications import Notifier
from .parser import parse_output
from .process import CancelToken, CommandOptions, format_command, run_command

LOGGER = logging.getLogger(__name__)

# mypy exits 1 when it found issues; 2 is also seen alongside valid syntax
# error diagnostics, so other codes only fail when nothing was parsed.
NORMAL_EXIT_CODES: Final[frozenset[int]] = frozenset({0, 1})
LAUNCH_FAILURE_CODE: Final[int] = 127
VERSION_FLAG: Final[str] = "-V"
BASE_ARGUMENTS: Final[tuple[str, ...]] = ("--show-column-numbers", "--follow-imports", "silent")
CONFIG_FILE_FLAG: Final[str] = "--config-file"


class ProcessRunner:
    """Validate mypy executables and run them against execution buckets."""

    def __init__(
        self,
        config: ToolchainConfig,
        *,
        notifier: Notifier | None = None,
        cancel: CancelToken | None = None,
    ) -> None:
        """Create a runner.

        Args:
            config: Project settings supplying the root, arguments and timeout.
            notifier: Receives abnormal exit reports when set.
            cancel: Token observed by every process wait.
        """

        self._config = config
        self._notifier = notifier
        self._cancel = cancel

    def with_cancel(self, cancel: CancelToken) -> ProcessRunner:
        """Return a runner sharing this configuration but observing ``cancel``.

        Args:
            cancel: Token consulted by every process wait of the new runner.

        Returns:
            ProcessRunner: Runner with the same config and notifier.
        """

        return ProcessRunner(self._config, notifier=self._notifier, cancel=cancel)

    def launcher(self, executable: str) -> list[str]:
        """Return the command prefix used to validate ``executable``.

        Script entry points next to a ``python`` interpreter are started
        through that interpreter; native executables are started directly.
        Full scans always start the executable itself, see :meth:`build_command`.

        Args:
            executable: mypy executable, absolute or relative to the project root.

        Returns:
            list[str]: Interpreter and script, or the executable alone.
        """

        path = self._config.resolve_path(executable)
        if path.suffix.lower() == ".exe":
            return [str(path)]
        interpreter = path.parent / executable_name("python")
        if interpreter.is_file() and interpreter != path:
            return [str(interpreter), str(path)]
        return [str(path)]

    def validate(self, executable: str) -> bool:
        """Return ``True`` when ``executable`` answers a version query with status 0.

        Args:
            executable: mypy executable, absolute or relative to the project root.

        Returns:
            bool: ``False`` when the path is missing, is a directory, cannot be
            started or exits with a non-zero status.

        Raises:
            ScanCancelled: If the caller cancels while the version query runs.
        """

        if not executable:
            return False
        path = self._config.resolve_path(executable)
        if not path.exists() or path.is_dir():
            LOGGER.warning("Error while checking mypy path %s: not exists or not a file path", path)
            return False

        args = [*self.launcher(executable), VERSION_FLAG]
        options = CommandOptions(cwd=self._config.project_root, env=isolated_environment(path))
        try:
            completed = run_command(args, options=options, cancel=self._cancel)
        except OSError as exc:
            LOGGER.info("Command Line string: %s", format_command(args))
            LOGGER.warning("Error while checking mypy path: %s", exc)
            return False

        if completed.stderr.strip():
            LOGGER.info("Command Line string: %s", format_command(completed.args))
            LOGGER.warning("Error while checking mypy path: %s", completed.stderr.strip())
        if completed.stdout.strip():
            LOGGER.debug("mypy path check output: %s", completed.stdout.strip())
        if completed.returncode != 0:
            LOGGER.warning("mypy path check exited with %s", completed.returncode)
            return False
        return True

    def build_command(self, bucket: ExecutionBucket, extra_arguments: Sequence[str] = ()) -> list[str]:
        """Return the full mypy command line for ``bucket``.

        Args:
            bucket: Files sharing one executable and config file.
            extra_arguments: User supplied arguments placed before the files.

        Returns:
            list[str]: ``<executable> --show-column-numbers --follow-imports silent
            [--config-file <path>] <extra...> <files...>``.
        """

        command = [str(self._config.resolve_path(bucket.executable_path)), *BASE_ARGUMENTS]
        if bucket.config_file_path:
            command.extend([CONFIG_FILE_FLAG, bucket.config_file_path])
        command.extend(extra_arguments)
        command.extend(bucket.source_files)
        return command

    def build_environment(self, executable: str) -> dict[str, str]:
        """Return the subprocess environment for running ``executable``.

        Args:
            executable: mypy executable, absolute or relative to the project root.

        Returns:
            dict[str, str]: Inherited environment adjusted for the executable's
            virtualenv, if it has one.
        """

        return isolated_environment(self._config.resolve_path(executable))

    def run(self, bucket: ExecutionBucket) -> ProcessOutput:
        """Run mypy for ``bucket`` from the project root and capture its output.

        Raises:
            ToolExecutionError: If the process cannot be started.
            ScanCancelled: If the caller cancels while mypy is running.
        """

        args = self.build_command(bucket, self._config.split_arguments())
        options = CommandOptions(
            cwd=self._config.project_root,
            env=self.build_environment(bucket.executable_path),
            timeout=self._config.timeout,
        )
        LOGGER.info("Running command: %s", format_command(args))
        try:
            return run_command(args, options=options, cancel=self._cancel)
        except OSError as exc:
            LOGGER.info("Command Line string: %s", format_command(args))
            raise ToolExecutionError(LAUNCH_FAILURE_CODE, str(exc), command=tuple(args)) from exc

    def execute(self, bucket: ExecutionBucket) -> list[Issue]:
        """Run mypy for ``bucket`` and return the issues it reported.

        Raises:
            ToolExecutionError: If mypy exited abnormally without any diagnostics.
            ParseError: If the output contains a malformed diagnostic.
            ScanCancelled: If the caller cancels while mypy is running.
        """

        started = time.perf_counter()
        completed = self.run(bucket)
        issues = parse_output(completed.stdout)
        elapsed_ms = (time.perf_counter() - started) * 1000
        LOGGER.info(
            "%s took %dms to run on %d files and found %d issues",
            bucket.executable_path,
            elapsed_ms,
            len(bucket),
            len(issues),
        )

        if completed.returncode not in NORMAL_EXIT_CODES:
            if not issues:
                if self._notifier is not None:
                    self._notifier.abnormal_exit(completed.stderr)
                raise ToolExecutionError(completed.returncode, completed.stderr, command=completed.args)
            LOGGER.info("mypy returned %s, but also reported issues", completed.returncode)
        return issues


__all__ = ["BASE_ARGUMENTS", "NORMAL_EXIT_CODES", "ProcessRunner"]
