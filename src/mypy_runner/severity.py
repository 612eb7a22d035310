# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from enum import Enum
from typing import Final

from .errors import ParseError


class SeverityLevel(str, Enum):
    """Severity levels emitted by mypy."""

    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


_SEVERITY_STYLES: Final[dict[SeverityLevel, str]] = {
    SeverityLevel.ERROR: "red",
    SeverityLevel.WARNING: "yellow",
    SeverityLevel.NOTE: "cyan",
}


def severity_from_token(token: str) -> SeverityLevel:
    """Return the :class:`SeverityLevel` named by ``token``.

    The token is matched case-insensitively against the enumeration member
    names.

    Raises:
        ParseError: If ``token`` does not name a known severity.
    """

    try:
        return SeverityLevel[token.strip().upper()]
    except KeyError as exc:
        raise ParseError(f"unrecognized severity {token.strip()!r}") from exc


def severity_style(severity: SeverityLevel) -> str:
    """Map ``severity`` to the rich style used when rendering it."""

    return _SEVERITY_STYLES.get(severity, "white")


__all__ = ["SeverityLevel", "severity_from_token", "severity_style"]
