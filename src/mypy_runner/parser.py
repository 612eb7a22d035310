# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parse mypy's textual output into :class:`Issue` records.

mypy reports one diagnostic per line in the form::

    <path>:<line>:<column>: <severity>: <message>

where ``<line>`` and ``<column>`` are optional. Parsing happens in two
stages: a line first has to *qualify* (colon-free path, optional position
groups, a severity word surrounded by colons), then its captured groups are
converted. Lines that do not qualify (banners, summaries, blank lines) are
skipped.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from typing import Final

from pydantic import ValidationError

from .errors import ParseError
from .models import Issue
from .severity import SeverityLevel, severity_from_token

ISSUE_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?P<path>[^\s:]+):"
    r"(?:(?P<line>\d+):)?"
    r"(?:(?P<column>\d+):)?"
    r" (?P<severity>[A-Za-z]+):"
    r"(?P<message>.*)$"
)
KNOWN_TOKENS: Final[frozenset[str]] = frozenset(level.value for level in SeverityLevel)
DEFAULT_LINE: Final[int] = 1
# mypy columns are 1-based; a missing column keeps the historical default of 1.
DEFAULT_COLUMN: Final[int] = 1


def _qualifies(match: re.Match[str]) -> bool:
    """Return ``True`` when ``match`` looks like a mypy diagnostic.

    A known severity word always qualifies. An unknown word only does when
    a line number precedes it, which keeps prose such as ``Note: ...``
    banners out while still flagging a changed severity vocabulary.
    """

    if match.group("severity").lower() in KNOWN_TOKENS:
        return True
    return match.group("line") is not None


def parse_line(raw_line: str) -> Issue | None:
    """Return the :class:`Issue` described by ``raw_line`` or ``None``.

    Raises:
        ParseError: If the line qualifies but carries an unknown severity or
            an out-of-range position.
    """

    line = raw_line.rstrip("\r\n")
    match = ISSUE_PATTERN.match(line)
    if match is None or not _qualifies(match):
        return None

    severity = _severity(match, line)
    line_number = int(match.group("line")) if match.group("line") else DEFAULT_LINE
    column = int(match.group("column")) - 1 if match.group("column") else DEFAULT_COLUMN
    try:
        return Issue(
            path=match.group("path").strip(),
            line=line_number,
            column=column,
            severity=severity,
            message=match.group("message").strip(),
        )
    except ValidationError as exc:
        raise ParseError("invalid diagnostic position", line=line) from exc


def _severity(match: re.Match[str], line: str) -> SeverityLevel:
    try:
        return severity_from_token(match.group("severity"))
    except ParseError as exc:
        raise ParseError(str(exc), line=line) from exc


def iter_issues(lines: Iterable[str]) -> Iterator[Issue]:
    """Lazily yield issues from ``lines``, consuming the iterable once.

    Parsing stops at the first :class:`ParseError`; later lines are not read.
    """

    for raw_line in lines:
        issue = parse_line(raw_line)
        if issue is not None:
            yield issue


def parse_output(stdout: str) -> list[Issue]:
    """Return every issue contained in the captured ``stdout`` text."""

    return list(iter_issues(stdout.splitlines()))


__all__ = ["DEFAULT_COLUMN", "DEFAULT_LINE", "ISSUE_PATTERN", "iter_issues", "parse_line", "parse_output"]
