# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Top-level orchestration of a mypy scan across isolated environments."""

from __future__ import annotations

import logging
import time
from collections.abc import Collection, Sequence
from concurrent.futures import ALL_COMPLETED, FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait

from .availability import check_available
from .config import ToolchainConfig
from .environment import EnvironmentProbe
from .errors import ConfigurationError, ScanCancelled
from .models import ExecutionBucket, Issue
from .notifications import Notifier
from .partition import partition
from .process import CancelToken
from .resolver import DirectoryResolutionCache, ToolchainResolver
from .runner import ProcessRunner

LOGGER = logging.getLogger(__name__)


class MypyScanner:
    """Run mypy over a set of files, routing each to the toolchain governing it.

    Every call to :meth:`scan` works on its own probe, resolution cache and
    buckets, so concurrent scans never share mutable state. The
    configuration is captured when the scanner is built and never re-read
    mid-scan.
    """

    def __init__(self, config: ToolchainConfig, *, notifier: Notifier | None = None) -> None:
        """Create a scanner.

        Args:
            config: Settings captured for every scan run by this scanner.
            notifier: Receives availability and abnormal exit notifications.
        """

        self._config = config
        self._notifier = notifier

    @property
    def config(self) -> ToolchainConfig:
        """Return the settings this scanner was built with."""

        return self._config

    def is_available(self, *, cancel: CancelToken | None = None) -> bool:
        """Return ``True`` when a project mypy executable passes validation.

        Args:
            cancel: Optional token observed during the version query.

        Returns:
            bool: Whether the discovered mypy answered ``-V`` successfully.
        """

        runner = ProcessRunner(self._config, notifier=self._notifier, cancel=cancel)
        return check_available(self._config, runner).available

    def scan(self, files: Collection[str], *, cancel: CancelToken | None = None) -> list[Issue]:
        """Return the issues mypy reports for ``files``.

        Issues keep bucket order, then the order mypy printed them.

        Args:
            files: Paths of the source files to check.
            cancel: Optional token that stops the scan when cancelled.

        Returns:
            list[Issue]: Every reported issue, or ``[]`` when mypy is unavailable.

        Raises:
            ConfigurationError: If ``files`` is empty, a source file is invalid
                or the configured mypy config file is missing.
            ToolExecutionError: If mypy exits abnormally without diagnostics.
            ParseError: If mypy prints a malformed diagnostic.
            ScanCancelled: If ``cancel`` fires or the scan is interrupted.
        """

        if not files:
            raise ConfigurationError("Illegal state: no files to scan")
        config = self._config
        token = cancel or CancelToken()
        runner = ProcessRunner(config, notifier=self._notifier, cancel=token)

        availability = check_available(config, runner, self._notifier)
        if not availability.available:
            LOGGER.info("mypy is not available; skipping scan of %d files", len(files))
            return []

        project_config = config.project_config_file()
        probe = EnvironmentProbe(
            command=config.sandbox_command,
            max_depth=config.sandbox_max_depth,
            timeout=config.probe_timeout,
            cancel=token,
        )
        resolver = ToolchainResolver(probe, autodetect=config.autodetect_isolated_environments)
        buckets = partition(
            files,
            resolver,
            project_executable=availability.executable,
            project_config=project_config,
            cache=DirectoryResolutionCache(),
        )

        started = time.perf_counter()
        issues = self._execute(runner, list(buckets.values()), token)
        elapsed_ms = (time.perf_counter() - started) * 1000
        LOGGER.info(
            "Running mypy%s took %dms on %d files and found %d issues",
            " (w/ environments)" if config.autodetect_isolated_environments else "",
            elapsed_ms,
            len(files),
            len(issues),
        )
        return issues

    def _execute(
        self,
        runner: ProcessRunner,
        buckets: Sequence[ExecutionBucket],
        token: CancelToken,
    ) -> list[Issue]:
        jobs = min(self._config.jobs, len(buckets))
        if jobs <= 1:
            issues: list[Issue] = []
            for bucket in buckets:
                token.raise_if_cancelled()
                issues.extend(runner.execute(bucket))
            return issues
        return _execute_concurrently(runner, buckets, token, jobs)


def _execute_concurrently(
    runner: ProcessRunner,
    buckets: Sequence[ExecutionBucket],
    token: CancelToken,
    jobs: int,
) -> list[Issue]:
    """Run buckets on a thread pool and merge results in bucket order.

    The first failing bucket stops its running siblings through a child of
    ``token``, so the caller's token stays untouched and a genuine caller
    cancellation can still be told apart from a sibling abort.

    Args:
        runner: Runner whose configuration and notifier each bucket uses.
        buckets: Buckets in the order their issues are merged.
        token: Cancellation token owned by the caller.
        jobs: Maximum number of concurrent mypy processes.

    Returns:
        list[Issue]: Issues of every bucket, in bucket order.

    Raises:
        ScanCancelled: If the caller cancelled or the scan was interrupted.
        MypyRunnerError: The first bucket failure in bucket order.
    """

    siblings = token.child()
    bucket_runner = runner.with_cancel(siblings)
    with ThreadPoolExecutor(max_workers=jobs, thread_name_prefix="mypy-runner") as executor:
        futures: list[Future[list[Issue]]] = [executor.submit(bucket_runner.execute, bucket) for bucket in buckets]
        _wait_or_cancel(futures, token, FIRST_EXCEPTION)
        if not any(future.done() and future.exception() is not None for future in futures):
            return [issue for future in futures for issue in future.result()]

        siblings.cancel()
        for future in futures:
            future.cancel()
        _wait_or_cancel(futures, token, ALL_COMPLETED)

    token.raise_if_cancelled()
    errors = [future.exception() for future in futures if not future.cancelled()]
    failures = [error for error in errors if error is not None]
    for error in failures:
        if not isinstance(error, ScanCancelled):
            raise error
    raise failures[0]


def _wait_or_cancel(futures: Sequence[Future[list[Issue]]], token: CancelToken, return_when: str) -> None:
    try:
        wait(futures, return_when=return_when)
    except KeyboardInterrupt as exc:
        token.cancel()
        raise ScanCancelled("scan interrupted") from exc


__all__ = ["MypyScanner"]
