# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the cancellable subprocess wrapper."""

from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest

from mypy_runner.errors import ScanCancelled
from mypy_runner.process import TIMEOUT_RETURNCODE, CancelToken, CommandOptions, run_command


def test_run_command_captures_output(tmp_path: Path) -> None:
    completed = run_command(
        ["sh", "-c", "pwd; echo oops >&2; exit 3"],
        options=CommandOptions(cwd=tmp_path),
    )

    assert completed.returncode == 3
    assert completed.stdout.strip() == str(tmp_path.resolve())
    assert completed.stderr.strip() == "oops"
    assert completed.args[0].endswith("sh")


def test_run_command_passes_environment() -> None:
    completed = run_command(["sh", "-c", "echo $MARKER"], options=CommandOptions(env={"MARKER": "set"}))

    assert completed.stdout.strip() == "set"


def test_run_command_unknown_executable() -> None:
    with pytest.raises(FileNotFoundError):
        run_command(["definitely-not-a-real-tool"])


def test_run_command_timeout_reports_124() -> None:
    completed = run_command(["sh", "-c", "exec sleep 5"], options=CommandOptions(timeout=0.2))

    assert completed.returncode == TIMEOUT_RETURNCODE
    assert "timed out" in completed.stderr


def test_cancel_interrupts_running_process() -> None:
    token = CancelToken()
    timer = threading.Timer(0.2, token.cancel)
    timer.start()
    started = time.monotonic()
    try:
        with pytest.raises(ScanCancelled):
            run_command(["sh", "-c", "exec sleep 10"], cancel=token)
    finally:
        timer.cancel()

    assert time.monotonic() - started < 5


def test_cancelled_token_prevents_spawn(monkeypatch: pytest.MonkeyPatch) -> None:
    token = CancelToken()
    token.cancel()

    def boom(*args, **kwargs):  # noqa: ANN002, ANN003
        raise AssertionError("process should not start")

    monkeypatch.setattr("mypy_runner.process.subprocess.Popen", boom)

    with pytest.raises(ScanCancelled):
        run_command(["sh", "-c", "true"], cancel=token)


def test_child_token_follows_parent_but_not_the_reverse() -> None:
    parent = CancelToken()
    child = parent.child()

    child.cancel()
    assert child.cancelled
    assert not parent.cancelled

    other = parent.child()
    parent.cancel()
    assert other.cancelled
    with pytest.raises(ScanCancelled):
        other.raise_if_cancelled()
