"""Digest service — the entry point.

create_digest(url) fetches metadata and captions, runs the digest core and
renders the result. The core holds no state, so independent calls can run
in parallel.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from .config import Settings, load_settings
from .errors import InvalidVideoUrl, MetadataError
from .extractors import extract_video_id
from .extractors.metadata import fetch_video_metadata
from .extractors.transcript import fetch_transcript
from .renderer import format_markdown, save_digest_to_file
from .schemas import DigestResult
from .summarizer import DigestGenerator, generate_digest

logger = logging.getLogger(__name__)


def create_digest(
    url: str,
    settings: Optional[Settings] = None,
    save: bool = True,
    generator: Optional[DigestGenerator] = None,
) -> DigestResult:
    """Build a digest for one YouTube URL.

    Flow:
    1. Parse the video id
    2. Fetch metadata and transcript in parallel
    3. Extract creator chapters, prompt the model, reconcile its output
    4. Render Markdown and (optionally) save it
    """
    settings = settings or load_settings()

    video_id = extract_video_id(url)
    if not video_id:
        raise InvalidVideoUrl(
            "Invalid YouTube URL format. Supported formats:\n"
            "  - https://www.youtube.com/watch?v=VIDEO_ID\n"
            "  - https://youtu.be/VIDEO_ID\n"
            "  - https://m.youtube.com/watch?v=VIDEO_ID"
        )
    if not settings.youtube_api_key:
        raise MetadataError("YOUTUBE_API_KEY is not configured")

    generator = generator or DigestGenerator.from_settings(settings)

    logger.info("Fetching metadata and transcript for %s", video_id)
    with ThreadPoolExecutor(max_workers=2) as executor:
        metadata_future = executor.submit(fetch_video_metadata, video_id, settings.youtube_api_key)
        transcript_future = executor.submit(fetch_transcript, video_id)
        metadata = metadata_future.result()
        transcript = transcript_future.result()

    result = generate_digest(transcript, metadata, generator)

    if save:
        markdown = format_markdown(result.metadata, result.digest, result.has_creator_chapters)
        path = save_digest_to_file(markdown, result.metadata, settings.output_dir)
        result = result.model_copy(update={"output_path": str(path)})
    return result


def digest_batch(
    urls: list[str],
    settings: Optional[Settings] = None,
    save: bool = True,
) -> list[DigestResult | str]:
    """Digest several URLs in parallel. Failures come back as ``"error: ..."``."""
    if not urls:
        return []
    settings = settings or load_settings()
    results: list[DigestResult | str] = []
    with ThreadPoolExecutor(max_workers=min(4, len(urls))) as executor:
        futures = [executor.submit(create_digest, url, settings, save) for url in urls]
        for url, future in zip(urls, futures):
            try:
                results.append(future.result())
            except Exception as exc:
                logger.warning("Digest failed for %s: %s", url, exc)
                results.append(f"error: {exc}")
    return results
