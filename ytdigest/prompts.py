"""Prompt builder — system prompt, sizing guidance and user prompts.

Without guidance the model writes too few chapters for long videos and too
many for short ones, so the chapter count is steered by duration. With
creator chapters the structure is fixed and only key points are requested.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from .schemas import Chapter, TranscriptEntry, VideoMetadata
from .timestamps import format_timestamp

CREATOR_POINTS_RANGE = (2, 4)

# (upper bound in minutes, min chapters, max chapters, min points, max points)
_SIZING_TABLE = (
    (15, 3, 5, 2, 3),
    (30, 4, 6, 2, 4),
    (60, 5, 8, 2, 4),
    (120, 8, 12, 3, 5),
)


@dataclass(frozen=True)
class ChapterGuidance:
    min_chapters: int
    max_chapters: int
    min_points: int
    max_points: int

    @property
    def key_points_range(self) -> tuple[int, int]:
        return self.min_points, self.max_points


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def chapter_guidance(duration_minutes: float) -> ChapterGuidance:
    """Target chapter count and key points per chapter for a video length."""
    for limit, lo, hi, pts_lo, pts_hi in _SIZING_TABLE:
        if duration_minutes <= limit:
            return ChapterGuidance(lo, hi, pts_lo, pts_hi)

    target = _round_half_up(duration_minutes / 12)
    return ChapterGuidance(
        min_chapters=max(10, _round_half_up(target * 0.8)),
        max_chapters=min(25, _round_half_up(target * 1.2)),
        min_points=3,
        max_points=5,
    )


SYSTEM_PROMPT = """You are a content summarizer specializing in video transcripts. Your task is to create a structured digest with a short overview, chronological chapters, and categorized links.

## Summary
Write a brief 2-3 sentence summary that captures the essence of the video, so a reader understands what it is about without watching it.

## Chapters
Organize the video into broad, chronological chapters. Consolidate related ideas rather than creating many granular chapters.

**All video time must be accounted for.** Chapter timestamps must be continuous: each chapter's end time equals the next chapter's start time. Every chapter title must be unique.

For each chapter:
- A descriptive title that captures the topic
- Start and end timestamps (M:SS format)
- Key points that synthesize the takeaways, each with an approximate timestamp (M:SS) of when it is discussed

Each key point should consolidate related remarks into one meaningful insight. Think "what would someone need to know?" rather than "what was said?". Skip filler.

## Tangents
If the speaker goes off-topic for 30 seconds or more (personal stories, rants, extended sponsor reads), keep that material inside the chapter where it happens as a key point with "isTangent": true. Never create a chapter that consists only of tangents.

## Link Categorization
You will be given URLs found in the video description and comments. Categorize them:

**relatedLinks** - directly relevant to the content: documentation, tools or libraries discussed, referenced videos, repositories.

**otherLinks** - everything else: social media, sponsors and affiliate links, gear lists, personal or business pages, donation links.

Give each link a short title (2-5 words) and a description of what it is and, for related links, why it matters.

## Output
Respond with a single JSON object and nothing else:
{"summary": "...", "sections": [{"title": "...", "timestampStart": "0:00", "timestampEnd": "5:30", "keyPoints": [{"text": "...", "timestamp": "1:15", "isTangent": false}]}], "relatedLinks": [{"url": "...", "title": "...", "description": "..."}], "otherLinks": [{"url": "...", "title": "...", "description": "..."}]}"""


def format_transcript(entries: Sequence[TranscriptEntry]) -> str:
    """Render transcript entries as ``[M:SS] text`` lines, in the order given."""
    return "\n".join(f"[{format_timestamp(e.offset)}] {e.text}" for e in entries)


def _urls_block(urls: Sequence[str]) -> str:
    if not urls:
        return ""
    return "URLs found in description/comments:\n" + "\n".join(urls)


def _header(metadata: VideoMetadata) -> str:
    return f"Video Title: {metadata.title}\nChannel: {metadata.channel_title}"


def build_user_prompt(
    metadata: VideoMetadata,
    transcript: str,
    urls: Sequence[str],
    duration_seconds: int,
) -> str:
    """User prompt for videos without creator chapters."""
    guidance = chapter_guidance(duration_seconds / 60)
    minutes = max(1, _round_half_up(duration_seconds / 60))
    parts = [
        _header(metadata),
        f"Duration: about {minutes} minutes",
        "",
        f"Create between {guidance.min_chapters} and {guidance.max_chapters} chapters, "
        f"with {guidance.min_points}-{guidance.max_points} key points per chapter.",
        "",
        "Transcript:",
        transcript,
    ]
    urls_text = _urls_block(urls)
    if urls_text:
        parts += ["", urls_text]
    parts += ["", "Please create the structured digest as JSON."]
    return "\n".join(parts)


def build_chapter_user_prompt(
    metadata: VideoMetadata,
    transcript: str,
    urls: Sequence[str],
    chapters: Sequence[Chapter],
) -> str:
    """User prompt when the creator already defined chapters.

    The chapter list is a hard constraint: same titles, same boundaries,
    same order.
    """
    lo, hi = CREATOR_POINTS_RANGE
    chapter_lines = [
        f"- {c.timestamp_start} - {c.timestamp_end}: {c.title}" for c in chapters
    ]
    parts = [
        _header(metadata),
        "",
        "The creator defined these chapters. Use exactly these chapters, with the same "
        "titles, timestamps and order. Do not add, merge, split or rename chapters:",
        *chapter_lines,
        "",
        f"For each chapter write {lo}-{hi} key points.",
        "",
        "Transcript:",
        transcript,
    ]
    urls_text = _urls_block(urls)
    if urls_text:
        parts += ["", urls_text]
    parts += ["", "Please create the structured digest as JSON."]
    return "\n".join(parts)


def build_prompts(
    metadata: VideoMetadata,
    transcript: Sequence[TranscriptEntry],
    urls: Sequence[str],
    duration_seconds: int,
    chapters: Optional[Sequence[Chapter]] = None,
) -> tuple[str, str]:
    """Return ``(system, user)`` for one digest generation."""
    text = format_transcript(transcript)
    if chapters:
        return SYSTEM_PROMPT, build_chapter_user_prompt(metadata, text, urls, chapters)
    return SYSTEM_PROMPT, build_user_prompt(metadata, text, urls, duration_seconds)
