"""Creator chapters — parse timestamp lists out of a video description.

YouTube only honours description chapters when there are at least three of
them and the first starts at 0:00; anything else means the model has to
infer chapters on its own.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, TypedDict

from .schemas import Chapter
from .timestamps import format_timestamp, parse_iso_duration

logger = logging.getLogger(__name__)

MIN_CHAPTERS = 3
PROXIMITY_SECONDS = 2

_TOKEN_RE = re.compile(r"[(\[]?\b(?:(\d{1,2}):)?(\d{1,2}):(\d{2})\b[)\]]?")
_LEADING = " \t-–—:|•*.)]>"
_TRAILING = " \t-–—:|•*"


class RawChapter(TypedDict):
    start: int
    title: str


def parse_description_timestamps(description: str) -> list[RawChapter]:
    """Find ``timestamp title`` lines in free text, in source order.

    The first timestamp on a line is the chapter start; the rest of the line,
    minus separators, is the title. Lines with nothing but a timestamp are
    skipped.
    """
    found: list[RawChapter] = []
    for line in (description or "").splitlines():
        match = _TOKEN_RE.search(line)
        if not match:
            continue
        hours, minutes, seconds = match.groups()
        if int(seconds) > 59:
            continue
        start = int(hours or 0) * 3600 + int(minutes) * 60 + int(seconds)
        before = line[: match.start()].strip(_TRAILING)
        after = line[match.end():].lstrip(_LEADING).rstrip()
        title = " ".join(part for part in (before, after) if part).strip()
        if not title:
            continue
        found.append({"start": start, "title": title})
    return found


def _dedupe_exact(candidates: list[RawChapter]) -> list[RawChapter]:
    seen: set[int] = set()
    kept: list[RawChapter] = []
    for chapter in candidates:
        if chapter["start"] in seen:
            continue
        seen.add(chapter["start"])
        kept.append(chapter)
    return kept


def _dedupe_proximity(candidates: list[RawChapter]) -> list[RawChapter]:
    """Greedy, order-dependent collapse of near-identical starts.

    Descriptions often repeat the chapter list (table of contents plus
    detailed notes) with jittered times like 2:30 / 2:31. A candidate is
    accepted only if no accepted chapter starts within PROXIMITY_SECONDS.
    """
    accepted: list[RawChapter] = []
    for chapter in candidates:
        if any(abs(prev["start"] - chapter["start"]) <= PROXIMITY_SECONDS for prev in accepted):
            continue
        accepted.append(chapter)
    return accepted


def extract_chapters(description: str, duration_iso: str) -> Optional[list[Chapter]]:
    """Extract creator chapters with computed end times.

    Returns None when the description holds no usable chapter list (fewer
    than three after de-duplication, or the first isn't at 0:00), or when
    the duration is unknown.
    """
    duration = parse_iso_duration(duration_iso)
    if duration == 0:
        return None

    candidates = _dedupe_proximity(_dedupe_exact(parse_description_timestamps(description)))

    if len(candidates) < MIN_CHAPTERS or candidates[0]["start"] != 0:
        logger.debug("No valid creator chapters (%d candidates)", len(candidates))
        return None

    chapters: list[Chapter] = []
    for i, raw in enumerate(candidates):
        start = raw["start"]
        end = candidates[i + 1]["start"] if i < len(candidates) - 1 else duration
        chapters.append(Chapter(
            title=raw["title"],
            start_seconds=start,
            end_seconds=end,
            timestamp_start=format_timestamp(start),
            timestamp_end=format_timestamp(end),
        ))

    logger.info("Found %d creator chapters", len(chapters))
    return chapters
