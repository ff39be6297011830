"""Digest renderer — turns a reconciled digest into a Markdown document.

Layout:
  # Title               metadata block
  ## At a Glance        summary
  ## <section>          one per chapter, key points interleaved with tangents
  ## Related Links
  ## Other Links
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from .interleave import ContentItem, interleave_digest
from .schemas import KeyPoint, Link, StructuredDigest, Tangent, VideoMetadata
from .timestamps import format_duration

logger = logging.getLogger(__name__)

_TANGENT_TAG = "*[tangent]*"


def create_slug(text: str, max_length: int = 60) -> str:
    """URL- and filename-safe slug: lowercase, hyphen separated, length capped."""
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug[:max_length].rstrip("-")


def _format_date(iso: str) -> str:
    try:
        return datetime.fromisoformat(iso.replace("Z", "+00:00")).strftime("%B %d, %Y")
    except ValueError:
        return iso


def _format_item(item: ContentItem) -> str:
    if isinstance(item, Tangent):
        detail = f": {item.summary}" if item.summary else ""
        return f"- {_TANGENT_TAG} **{item.title}** ({item.timestamp_start} - {item.timestamp_end}){detail}"
    if isinstance(item, KeyPoint):
        tag = f"{_TANGENT_TAG} " if item.is_tangent else ""
        return f"- `{item.timestamp}` {tag}{item.text}"
    return f"- {item}"


def _format_links(heading: str, links: list[Link]) -> list[str]:
    if not links:
        return []
    lines = ["---", "", f"## {heading}", ""]
    for link in links:
        title = link.title or link.url
        desc = f" - {link.description}" if link.description else ""
        lines.append(f"- **[{title}]({link.url})**{desc}")
    lines.append("")
    return lines


def format_markdown(
    metadata: VideoMetadata,
    digest: StructuredDigest,
    has_creator_chapters: Optional[bool] = None,
) -> str:
    lines: list[str] = [
        f"# {metadata.title}",
        "",
        f"**Channel**: {metadata.channel_title}  ",
        f"**Duration**: {format_duration(metadata.duration)}  ",
    ]
    if metadata.published_at:
        lines.append(f"**Published**: {_format_date(metadata.published_at)}  ")
    lines.append(f"**Video**: https://youtube.com/watch?v={metadata.video_id}  ")
    if has_creator_chapters is not None:
        source = "creator supplied" if has_creator_chapters else "AI-generated"
        lines.append(f"**Chapters**: {source}  ")
    lines += ["", "---", ""]

    if digest.summary:
        lines += ["## At a Glance", "", digest.summary, ""]

    for section, content in zip(digest.sections, interleave_digest(digest)):
        lines += [
            f"## {section.title}",
            f"**{section.timestamp_start} - {section.timestamp_end}**",
            "",
        ]
        lines += [_format_item(item) for item in content]
        lines.append("")

    lines += _format_links("Related Links", digest.related_links)
    lines += _format_links("Other Links", digest.other_links)
    return "\n".join(lines).rstrip() + "\n"


def save_digest_to_file(content: str, metadata: VideoMetadata, output_dir: Path) -> Path:
    """Write ``{output_dir}/{channel-slug}/{title-slug}.md`` and return its path."""
    channel_dir = Path(output_dir) / (create_slug(metadata.channel_title) or "channel")
    channel_dir.mkdir(parents=True, exist_ok=True)
    path = channel_dir / f"{create_slug(metadata.title) or metadata.video_id}.md"
    path.write_text(content, encoding="utf-8")
    logger.info("Saved digest: %s", path)
    return path
