# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

import pytest

ScriptWriter = Callable[[Path, str], Path]

FAKE_MYPY_BODY = """\
if [ "$1" = "-V" ]; then
  echo "mypy 1.10.0 (compiled: yes)"
  exit 0
fi
for arg in "$@"; do
  case "$arg" in
    *.py) echo "$arg:3:5: error: checked by {label}" ;;
  esac
done
echo "Found some errors"
exit 1
"""


def _write_script(path: Path, body: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(0o755)
    return path


@pytest.fixture
def write_script() -> ScriptWriter:
    """Return a helper that writes an executable shell script."""

    return _write_script


@pytest.fixture
def fake_mypy(tmp_path: Path) -> Callable[..., Path]:
    """Return a factory producing fake mypy executables tagged with ``label``."""

    def factory(directory: Path | None = None, *, label: str = "project", body: str | None = None) -> Path:
        target = (directory or tmp_path / "tools") / "mypy"
        return _write_script(target, body if body is not None else FAKE_MYPY_BODY.format(label=label))

    return factory


@pytest.fixture
def fake_pipenv(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Install a fake ``pipenv`` on PATH driven by marker files.

    ``--venv`` prints the contents of ``.venvroot`` in the working directory,
    ``--where`` prints the contents of ``.projectroot``. Every call is logged
    to the returned file.
    """

    log = tmp_path / "pipenv-calls.log"
    body = f"""\
echo "$1 $PIPENV_MAX_DEPTH" >> "{log}"
case "$1" in
  --venv) marker=.venvroot ;;
  --where) marker=.projectroot ;;
  *) exit 2 ;;
esac
if [ -f "$marker" ]; then
  cat "$marker"
  exit 0
fi
echo "No virtualenv has been created for this project yet!" >&2
exit 1
"""
    bin_dir = tmp_path / "fake-bin"
    _write_script(bin_dir / "pipenv", body)
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    return log


@pytest.fixture
def source_file(tmp_path: Path) -> Callable[[str], Path]:
    """Return a helper creating an empty Python source file under ``tmp_path``."""

    def factory(relative: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("x = 1\n")
        return path

    return factory
