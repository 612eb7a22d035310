# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for pipenv probing and virtualenv environment helpers."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pytest

from mypy_runner.environment import (
    ENV_KEY_PYTHONHOME,
    ENV_KEY_VIRTUAL_ENV,
    SANDBOX_DEPTH_ENV,
    EnvironmentProbe,
    isolated_environment,
    virtualenv_root_for,
)
from mypy_runner.models import ProcessOutput
from mypy_runner.process import CommandOptions


def test_probe_reads_environment_and_project_roots(tmp_path: Path, fake_pipenv: Path) -> None:
    venv = tmp_path / "venv"
    venv.mkdir()
    work = tmp_path / "work"
    work.mkdir()
    (work / ".venvroot").write_text(f"{venv}\n")
    (work / ".projectroot").write_text(f"{work}\n")

    result = EnvironmentProbe().probe(work)

    assert result.environment_root == venv
    assert result.project_root == work
    assert fake_pipenv.read_text().splitlines() == ["--venv 100", "--where 100"]


def test_probe_failure_is_not_fatal(tmp_path: Path, fake_pipenv: Path) -> None:
    result = EnvironmentProbe(max_depth=7).probe(tmp_path)

    assert result.environment_root is None
    assert result.project_root is None
    assert fake_pipenv.read_text().splitlines() == ["--venv 7", "--where 7"]


def test_probe_ignores_reported_paths_that_do_not_exist(tmp_path: Path, fake_pipenv: Path) -> None:
    (tmp_path / ".venvroot").write_text(str(tmp_path / "gone"))

    assert EnvironmentProbe().probe(tmp_path).environment_root is None


def test_probe_is_memoized_per_directory(tmp_path: Path, fake_pipenv: Path) -> None:
    probe = EnvironmentProbe()

    probe.probe(tmp_path)
    probe.probe(tmp_path)

    assert len(fake_pipenv.read_text().splitlines()) == 2


def test_probe_without_sandbox_tool(tmp_path: Path) -> None:
    result = EnvironmentProbe(command="definitely-not-a-real-pipenv").probe(tmp_path)

    assert result.environment_root is None
    assert result.project_root is None


def test_probe_runs_in_directory_with_depth_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[tuple[Sequence[str], CommandOptions]] = []

    def fake_run(args: Sequence[str], *, options: CommandOptions | None = None, cancel=None) -> ProcessOutput:
        assert options is not None
        seen.append((tuple(args), options))
        return ProcessOutput(tuple(args), 1, "", "not found")

    monkeypatch.setattr("mypy_runner.environment.run_command", fake_run)

    EnvironmentProbe(command="pipenv", max_depth=42, timeout=3.0).probe(tmp_path)

    assert [args for args, _ in seen] == [("pipenv", "--venv"), ("pipenv", "--where")]
    for _, options in seen:
        assert options.cwd == tmp_path.resolve()
        assert options.env is not None and options.env[SANDBOX_DEPTH_ENV] == "42"
        assert options.timeout == 3.0


def test_isolated_environment_for_virtualenv(tmp_path: Path) -> None:
    bin_dir = tmp_path / "venv" / "bin"
    bin_dir.mkdir(parents=True)
    (bin_dir / "activate").write_text("")
    executable = bin_dir / "mypy"
    executable.write_text("")

    env = isolated_environment(executable, {"PATH": "/usr/bin", ENV_KEY_PYTHONHOME: "/opt/python"})

    assert virtualenv_root_for(executable) == tmp_path / "venv"
    assert env[ENV_KEY_VIRTUAL_ENV] == str(tmp_path / "venv")
    assert env["PATH"].startswith(str(bin_dir))
    assert ENV_KEY_PYTHONHOME not in env


def test_isolated_environment_outside_virtualenv(tmp_path: Path) -> None:
    executable = tmp_path / "mypy"
    executable.write_text("")
    base = {"PATH": "/usr/bin", ENV_KEY_PYTHONHOME: "/opt/python"}

    assert isolated_environment(executable, base) == base
