"""Metadata fetcher — YouTube Data API v3 over httpx."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from ..errors import MetadataError
from ..schemas import VideoMetadata

logger = logging.getLogger(__name__)

API_BASE = "https://www.googleapis.com/youtube/v3"


def _fetch_pinned_comment(client: httpx.Client, video_id: str, api_key: str) -> Optional[str]:
    """First top-level comment by relevance; the API has no explicit "pinned" flag."""
    try:
        resp = client.get(f"{API_BASE}/commentThreads", params={
            "videoId": video_id,
            "part": "snippet",
            "maxResults": 20,
            "order": "relevance",
            "key": api_key,
        })
        resp.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning("Pinned comment lookup failed for %s: %s", video_id, exc)
        return None

    for thread in resp.json().get("items", []):
        text = thread.get("snippet", {}).get("topLevelComment", {}).get("snippet", {}).get("textOriginal")
        if text:
            return text
    return None


def _raise_for_api_error(resp: httpx.Response) -> None:
    if resp.status_code == 400:
        raise MetadataError("Invalid video ID format")
    if resp.status_code == 403:
        if "quota" in resp.text.lower():
            raise MetadataError(
                "YouTube API quota exceeded. Try again tomorrow or use a different API key."
            )
        raise MetadataError(
            "Invalid YouTube API key or insufficient permissions. "
            "Get a key at: https://console.cloud.google.com/"
        )
    if resp.status_code == 404:
        raise MetadataError("Video not found")
    if resp.is_error:
        raise MetadataError(f"Failed to fetch video metadata: HTTP {resp.status_code}")


def fetch_video_metadata(
    video_id: str,
    api_key: str,
    client: Optional[httpx.Client] = None,
) -> VideoMetadata:
    """Fetch title, channel, duration, description and pinned comment."""
    owns_client = client is None
    client = client or httpx.Client(timeout=15)
    try:
        try:
            resp = client.get(f"{API_BASE}/videos", params={
                "id": video_id,
                "part": "snippet,contentDetails",
                "key": api_key,
            })
        except httpx.HTTPError as exc:
            raise MetadataError(f"Failed to fetch video metadata: {exc}") from exc
        _raise_for_api_error(resp)

        items: list[dict[str, Any]] = resp.json().get("items") or []
        if not items:
            raise MetadataError("Video not found or unavailable (may be private or deleted)")
        snippet = items[0].get("snippet")
        details = items[0].get("contentDetails")
        if not snippet or not details:
            raise MetadataError("Incomplete video data received from YouTube API")

        pinned = _fetch_pinned_comment(client, video_id, api_key)
    finally:
        if owns_client:
            client.close()

    metadata = VideoMetadata(
        video_id=video_id,
        title=snippet.get("title") or "Untitled",
        channel_title=snippet.get("channelTitle") or "Unknown Channel",
        channel_id=snippet.get("channelId") or "",
        duration=details.get("duration") or "PT0S",
        published_at=snippet.get("publishedAt") or datetime.now(timezone.utc).isoformat(),
        description=snippet.get("description") or "",
        pinned_comment=pinned,
    )
    logger.info("Metadata: %s (%s)", metadata.title[:60], metadata.duration)
    return metadata
