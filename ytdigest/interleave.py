"""Interleave key points with span-level tangents by timestamp.

Older digests stored tangents as separate spans with their own title and
summary; newer ones flag individual key points. upgrade_tangents() moves
the old spans into flagged key points where the section can hold them, so
the rest of the code mostly deals with one representation.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Union

from .schemas import (
    ContentSection,
    KeyPoint,
    LegacyPoints,
    StructuredDigest,
    Tangent,
    TimestampedPoints,
)
from .timestamps import contains, parse_timestamp

logger = logging.getLogger(__name__)

ContentItem = Union[KeyPoint, Tangent, str]


def section_window(
    section: ContentSection,
    next_section: Optional[ContentSection] = None,
) -> tuple[int, int]:
    """``[start, end)`` in seconds; the end is the next section's start when there is one."""
    start = parse_timestamp(section.timestamp_start)
    end_ts = next_section.timestamp_start if next_section is not None else section.timestamp_end
    return start, parse_timestamp(end_ts)


def select_tangents(
    tangents: Sequence[Tangent],
    start: int,
    end: int,
) -> list[Tangent]:
    """Tangents whose start falls inside ``[start, end)``, in input order."""
    return [t for t in tangents if contains(start, end, parse_timestamp(t.timestamp_start))]


def _sort_key(item: ContentItem) -> int:
    if isinstance(item, Tangent):
        return parse_timestamp(item.timestamp_start)
    return parse_timestamp(item.timestamp)  # type: ignore[union-attr]


def interleave(
    section: ContentSection,
    tangents: Sequence[Tangent] = (),
    next_section: Optional[ContentSection] = None,
) -> list[ContentItem]:
    """Build one ordered content list for a section.

    Timestamped sections get key points and tangents merged by timestamp
    (a tangent sorts by its start). Legacy sections list their strings in
    stored order, followed by the tangents.
    """
    selected = select_tangents(tangents, *section_window(section, next_section)) if tangents else []
    points = section.key_points
    if isinstance(points, LegacyPoints):
        return [*points.items, *selected]
    return sorted([*points.items, *selected], key=_sort_key)


def interleave_digest(digest: StructuredDigest) -> list[list[ContentItem]]:
    """Interleaved content for every section of a digest, in section order."""
    tangents = digest.tangents or []
    sections = digest.sections
    return [
        interleave(section, tangents, sections[i + 1] if i + 1 < len(sections) else None)
        for i, section in enumerate(sections)
    ]


def tangent_to_key_point(tangent: Tangent) -> KeyPoint:
    text = f"{tangent.title}: {tangent.summary}" if tangent.summary else tangent.title
    return KeyPoint(text=text, timestamp=tangent.timestamp_start, is_tangent=True)


def upgrade_tangents(digest: StructuredDigest) -> StructuredDigest:
    """Convert span-level tangents into tangent-flagged key points.

    Each tangent lands in the timestamped section whose window holds its
    start, positioned by timestamp. Tangents that fall in a legacy section
    or outside every section stay in ``digest.tangents``.
    """
    if not digest.tangents:
        return digest

    sections = list(digest.sections)
    remaining: list[Tangent] = []
    placed: dict[int, list[Tangent]] = {}
    for tangent in digest.tangents:
        at = parse_timestamp(tangent.timestamp_start)
        for i, section in enumerate(sections):
            nxt = sections[i + 1] if i + 1 < len(sections) else None
            if contains(*section_window(section, nxt), at):
                if isinstance(section.key_points, TimestampedPoints):
                    placed.setdefault(i, []).append(tangent)
                else:
                    remaining.append(tangent)
                break
        else:
            remaining.append(tangent)

    for i, moved in placed.items():
        items = [*sections[i].key_points.items, *(tangent_to_key_point(t) for t in moved)]
        items.sort(key=lambda kp: parse_timestamp(kp.timestamp))
        sections[i] = sections[i].model_copy(update={"key_points": TimestampedPoints(items=items)})

    logger.debug(
        "Upgraded %d legacy tangent(s), %d left span-level",
        len(digest.tangents) - len(remaining), len(remaining),
    )
    return digest.model_copy(update={"sections": sections, "tangents": remaining or None})
