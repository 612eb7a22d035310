# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Group source files into execution buckets keyed by mypy executable."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from pathlib import Path

from .errors import InvalidSourceFile
from .models import ExecutionBucket
from .resolver import DirectoryResolutionCache, ToolchainResolver

LOGGER = logging.getLogger(__name__)


def partition(
    files: Iterable[str],
    resolver: ToolchainResolver,
    *,
    project_executable: str,
    project_config: str,
    cache: DirectoryResolutionCache | None = None,
) -> dict[str, ExecutionBucket]:
    """Return buckets mapping each resolved executable to its source files.

    Every file lands in exactly one bucket. A bucket keeps the config file it
    was created with even if a later directory resolves the same executable
    with a different config.

    Raises:
        InvalidSourceFile: If a path does not exist or is a directory.
    """

    started = time.perf_counter()
    cache = cache if cache is not None else DirectoryResolutionCache()
    buckets: dict[str, ExecutionBucket] = {}
    count = 0
    for source in files:
        path = Path(source)
        if not path.exists() or path.is_dir():
            raise InvalidSourceFile(source)
        toolchain = resolver.resolve(
            path.parent,
            project_executable,
            project_config,
            cache=cache,
        )
        bucket = buckets.get(toolchain.executable)
        if bucket is None:
            bucket = ExecutionBucket(toolchain.executable, toolchain.config_file)
            buckets[toolchain.executable] = bucket
        bucket.add(source)
        count += 1

    if resolver.autodetect:
        elapsed_ms = (time.perf_counter() - started) * 1000
        LOGGER.info("Mapping src files to environments took %dms for %d files", elapsed_ms, count)
    return buckets


__all__ = ["partition"]
