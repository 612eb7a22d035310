# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Environment-aware mypy orchestration producing structured issues."""

from __future__ import annotations

from .config import ToolchainConfig
from .config_loader import load_config
from .errors import (
    ConfigurationError,
    InvalidSourceFile,
    MypyRunnerError,
    ParseError,
    ScanCancelled,
    ToolExecutionError,
)
from .models import ExecutionBucket, Issue, ProbeResult, Toolchain
from .parser import iter_issues, parse_output
from .process import CancelToken
from .scanner import MypyScanner
from .severity import SeverityLevel

__all__ = [
    "CancelToken",
    "ConfigurationError",
    "ExecutionBucket",
    "InvalidSourceFile",
    "Issue",
    "MypyRunnerError",
    "MypyScanner",
    "ParseError",
    "ProbeResult",
    "ScanCancelled",
    "SeverityLevel",
    "Toolchain",
    "ToolchainConfig",
    "ToolExecutionError",
    "iter_issues",
    "load_config",
    "parse_output",
]
