"""Exceptions raised by ytdigest.

Only the service and CLI layers turn these into user-facing messages;
everything below them lets them propagate.
"""

from __future__ import annotations


class DigestError(Exception):
    """Base class for all ytdigest failures."""


class MalformedTimestamp(DigestError, ValueError):
    """A timestamp string is not ``M:SS`` or ``H:MM:SS``."""

    def __init__(self, value: str) -> None:
        super().__init__(f"malformed timestamp: {value!r}")
        self.value = value


class UpstreamModelFailure(DigestError):
    """The model call failed or returned something that isn't a digest."""


class TranscriptUnavailable(DigestError):
    """No captions could be fetched for the video."""


class MetadataError(DigestError):
    """The video metadata lookup failed."""


class InvalidVideoUrl(DigestError):
    """The input is not a recognised YouTube URL."""
