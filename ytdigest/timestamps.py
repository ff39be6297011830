"""Timestamp algebra — ``M:SS`` / ``H:MM:SS`` strings and integer seconds.

Every timestamp the digest carries is a string; every comparison is done on
the integer seconds it parses to.
"""

from __future__ import annotations

import re

from .errors import MalformedTimestamp

_ISO_DURATION_RE = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")


def parse_timestamp(value: str) -> int:
    """Convert ``M:SS`` or ``H:MM:SS`` to seconds.

    Raises MalformedTimestamp for anything else; an unparsable timestamp is
    never treated as zero.
    """
    if not isinstance(value, str):
        raise MalformedTimestamp(str(value))
    parts = value.strip().split(":")
    if len(parts) not in (2, 3) or not all(p.isascii() and p.isdigit() for p in parts):
        raise MalformedTimestamp(value)
    numbers = [int(p) for p in parts]
    if len(numbers) == 2:
        minutes, seconds = numbers
        return minutes * 60 + seconds
    hours, minutes, seconds = numbers
    return hours * 3600 + minutes * 60 + seconds


def format_timestamp(seconds: float) -> str:
    """Format seconds as ``M:SS``.

    Minutes are not folded into hours, so 1h05m30s renders as ``65:30``.
    parse_timestamp reads that back exactly.
    """
    total = int(seconds)
    if total < 0:
        raise ValueError(f"negative timestamp: {seconds}")
    return f"{total // 60}:{total % 60:02d}"


def parse_iso_duration(iso: str) -> int:
    """Parse an ISO-8601 duration like ``PT1H2M30S``. Returns 0 when absent."""
    match = _ISO_DURATION_RE.search(iso or "")
    if not match:
        return 0
    hours, minutes, seconds = (int(g or 0) for g in match.groups())
    return hours * 3600 + minutes * 60 + seconds


def format_duration(iso: str) -> str:
    """Human-readable duration: ``PT1H23M45S`` → ``1h 23m 45s``."""
    match = _ISO_DURATION_RE.search(iso or "")
    if not match:
        return iso
    hours, minutes, seconds = (int(g or 0) for g in match.groups())
    parts: list[str] = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if seconds or not parts:
        parts.append(f"{seconds}s")
    return " ".join(parts)


def contains(start: int, end: int, point: int) -> bool:
    """Half-open containment: ``start <= point < end``."""
    return start <= point < end


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """True when the half-open intervals ``[a_start, a_end)`` and ``[b_start, b_end)`` share time."""
    return a_start < b_end and b_start < a_end
