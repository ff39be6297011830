"""Input helpers — video ids from URLs, and URLs from free text."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlparse

_VIDEO_ID_PATTERNS = (
    re.compile(r"(?:youtube\.com/watch\?(?:[^#\s]*&)?v=)([^&\n?#]+)"),
    re.compile(r"(?:youtu\.be/)([^&\n?#/]+)"),
    re.compile(r"(?:youtube\.com/embed/)([^&\n?#/]+)"),
    re.compile(r"(?:youtube\.com/shorts/)([^&\n?#/]+)"),
)

_TRAILING_PUNCT = re.compile(r"[,;.!?)\]}>]+$")


def extract_video_id(url: str) -> Optional[str]:
    """Return the video id for the usual YouTube URL shapes, or None."""
    for pattern in _VIDEO_ID_PATTERNS:
        match = pattern.search(url or "")
        if match and match.group(1):
            return match.group(1)
    return None


def _as_http_url(token: str) -> Optional[str]:
    parsed = urlparse(token)
    if parsed.scheme in ("http", "https") and parsed.netloc:
        return token
    return None


def extract_urls(text: Optional[str]) -> list[str]:
    """Unique http(s) URLs in whitespace-separated text, first-seen order.

    Each token is also retried with trailing punctuation removed, so
    ``(see https://x.dev).`` yields ``https://x.dev``.
    """
    if not text:
        return []
    urls: dict[str, None] = {}
    for token in text.split():
        url = _as_http_url(token)
        if url:
            urls.setdefault(url)
        cleaned = _TRAILING_PUNCT.sub("", token)
        if cleaned != token:
            url = _as_http_url(cleaned)
            if url:
                urls.setdefault(url)
    return list(urls)


def combine_urls(*sources: Optional[str]) -> list[str]:
    """Unique URLs across several texts (description, pinned comment, ...)."""
    combined: dict[str, None] = {}
    for source in sources:
        for url in extract_urls(source):
            combined.setdefault(url)
    return list(combined)
