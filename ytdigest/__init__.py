"""
ytdigest — structured digests of YouTube videos.

Usage:
    from ytdigest import create_digest, reconcile, extract_chapters

    # Digest one video (needs YOUTUBE_API_KEY and an LLM key)
    result = create_digest("https://www.youtube.com/watch?v=VIDEO_ID")
    print(result.digest.summary)

    # Pure core, no I/O
    chapters = extract_chapters(description, "PT15M")
    clean = reconcile(raw_digest, has_creator_chapters=chapters is not None)
"""

from .chapters import extract_chapters
from .errors import (
    DigestError,
    InvalidVideoUrl,
    MalformedTimestamp,
    MetadataError,
    TranscriptUnavailable,
    UpstreamModelFailure,
)
from .interleave import interleave, upgrade_tangents
from .reconcile import reconcile
from .schemas import (
    Chapter,
    ContentSection,
    DigestResult,
    KeyPoint,
    Link,
    StructuredDigest,
    Tangent,
)
from .service import create_digest, digest_batch
from .timestamps import format_timestamp, parse_iso_duration, parse_timestamp

__all__ = [
    "Chapter",
    "ContentSection",
    "DigestError",
    "DigestResult",
    "InvalidVideoUrl",
    "KeyPoint",
    "Link",
    "MalformedTimestamp",
    "MetadataError",
    "StructuredDigest",
    "Tangent",
    "TranscriptUnavailable",
    "UpstreamModelFailure",
    "create_digest",
    "digest_batch",
    "extract_chapters",
    "format_timestamp",
    "interleave",
    "parse_iso_duration",
    "parse_timestamp",
    "reconcile",
    "upgrade_tangents",
]
