"""Digest reconciler — clean up raw model output into a consistent digest.

The model is good at content and bad at bookkeeping. Three passes run in a
fixed order, each consuming the previous pass's output:

  1. drop sections whose title repeats an earlier one
  2. fold tangent-only sections into a neighbouring section (AI chapters only)
  3. sort sections, and the key points inside them, by timestamp

Running reconcile() on its own output changes nothing. Regeneration relies
on that, since every fresh model response goes through the whole pipeline.
"""

from __future__ import annotations

import logging
from typing import Sequence, Union

from .schemas import (
    ContentSection,
    LegacyPoints,
    StructuredDigest,
    TimestampedPoints,
)
from .timestamps import parse_timestamp

logger = logging.getLogger(__name__)

Points = Union[LegacyPoints, TimestampedPoints]


def _normalize_title(title: str) -> str:
    return title.strip().lower()


def remove_duplicate_sections(sections: Sequence[ContentSection]) -> list[ContentSection]:
    """Keep the first section per normalized title.

    Later duplicates are dropped together with their key points; a repeated
    title is a model error, not extra content.
    """
    seen: set[str] = set()
    kept: list[ContentSection] = []
    for section in sections:
        key = _normalize_title(section.title)
        if key in seen:
            logger.debug("Dropping duplicate section %r", section.title)
            continue
        seen.add(key)
        kept.append(section)
    return kept


def is_tangent_only(section: ContentSection) -> bool:
    """True when every key point is tangent-flagged.

    Empty sections and legacy string points count as substantive.
    """
    points = section.key_points
    if isinstance(points, LegacyPoints) or not points.items:
        return False
    return all(kp.is_tangent for kp in points.items)


def _concat(first: Points, second: Points) -> Points:
    if isinstance(first, TimestampedPoints) and isinstance(second, TimestampedPoints):
        return TimestampedPoints(items=[*first.items, *second.items])
    # mixed schemas inside one digest: legacy strings can't carry timestamps
    return LegacyPoints(items=[_text(p) for p in (*first.items, *second.items)])


def _text(point: object) -> str:
    return point if isinstance(point, str) else point.text  # type: ignore[attr-defined]


def _has_substance(section: ContentSection) -> bool:
    """True when a section holds at least one point that is not a tangent."""
    points = section.key_points
    if isinstance(points, LegacyPoints):
        return bool(points.items)
    return any(not kp.is_tangent for kp in points.items)


def _last_substantive(sections: Sequence[ContentSection]) -> int:
    for i in range(len(sections) - 1, -1, -1):
        if _has_substance(sections[i]):
            return i
    return -1


def merge_tangent_only_sections(
    sections: Sequence[ContentSection],
    has_creator_chapters: bool = False,
) -> list[ContentSection]:
    """Absorb sections made purely of tangents into a substantive neighbour.

    A tangent-only section after a substantive one is appended to the last
    such section and extends its end. Tangent-only sections before the first
    substantive one are prepended to it and pull its start back to the
    earliest of theirs. Empty sections are kept but never absorb anything.
    Creator chapters are authoritative and pass through untouched. If nothing
    is substantive the sections are returned as they are.
    """
    if has_creator_chapters:
        return list(sections)

    merged: list[ContentSection] = []
    leading: list[ContentSection] = []

    for section in sections:
        if is_tangent_only(section):
            target = _last_substantive(merged)
            if target >= 0:
                prev = merged[target]
                merged[target] = prev.model_copy(update={
                    "key_points": _concat(prev.key_points, section.key_points),
                    "timestamp_end": section.timestamp_end,
                })
                logger.debug("Merged tangent-only section %r into %r", section.title, prev.title)
            else:
                leading.append(section)
            continue

        if leading and _has_substance(section):
            points: Points = leading[0].key_points
            for extra in leading[1:]:
                points = _concat(points, extra.key_points)
            earliest = min(leading, key=lambda s: parse_timestamp(s.timestamp_start))
            section = section.model_copy(update={
                "key_points": _concat(points, section.key_points),
                "timestamp_start": earliest.timestamp_start,
            })
            logger.debug("Merged %d leading tangent-only section(s) into %r", len(leading), section.title)
            leading = []

        merged.append(section)

    if leading:
        # nothing substantive anywhere, so no section was changed
        logger.warning("Every non-empty section is tangent-only; keeping them unmerged")
        return list(sections)
    return merged


def _sort_points(section: ContentSection) -> ContentSection:
    points = section.key_points
    if isinstance(points, LegacyPoints):
        return section
    ordered = sorted(points.items, key=lambda kp: parse_timestamp(kp.timestamp))
    if ordered == points.items:
        return section
    return section.model_copy(update={"key_points": TimestampedPoints(items=ordered)})


def sort_chronologically(sections: Sequence[ContentSection]) -> list[ContentSection]:
    """Sort sections by start time, and timestamped key points within each.

    Both sorts are stable; legacy string points keep their order.
    """
    ordered = sorted(sections, key=lambda s: parse_timestamp(s.timestamp_start))
    return [_sort_points(s) for s in ordered]


def reconcile(digest: StructuredDigest, has_creator_chapters: bool = False) -> StructuredDigest:
    """Run the cleanup passes over a raw model digest.

    MalformedTimestamp from any pass propagates; no partial digest is
    returned.
    """
    sections = remove_duplicate_sections(digest.sections)
    deduped = len(digest.sections) - len(sections)
    before_merge = len(sections)
    sections = merge_tangent_only_sections(sections, has_creator_chapters)
    sections = sort_chronologically(sections)

    if deduped or before_merge != len(sections):
        logger.info(
            "Reconciled digest: %d duplicate(s) dropped, %d tangent-only section(s) merged",
            deduped, before_merge - len(sections),
        )
    return digest.model_copy(update={"sections": sections})
