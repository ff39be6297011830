"""Digest schema — the shapes passed between fetchers, the model and the renderer.

Python attributes are snake_case; the stored/model JSON is camelCase.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VideoMetadata(_Model):
    video_id: str
    title: str
    channel_title: str
    channel_id: str = ""
    duration: str = "PT0S"  # ISO 8601
    published_at: str = ""
    description: str = ""
    pinned_comment: Optional[str] = None


class TranscriptEntry(_Model):
    text: str
    offset: float  # seconds
    duration: float = 0.0
    lang: Optional[str] = None


class Chapter(_Model):
    """A creator-authored chapter parsed from the video description."""

    model_config = ConfigDict(frozen=True)

    title: str
    start_seconds: int
    end_seconds: int
    timestamp_start: str
    timestamp_end: str


class KeyPoint(_Model):
    text: str
    timestamp: str
    is_tangent: bool = False


class Tangent(_Model):
    """Span-level tangent from older digests (newer ones flag KeyPoints instead)."""

    title: str
    timestamp_start: str
    timestamp_end: str
    summary: str = ""


class LegacyPoints(BaseModel):
    kind: Literal["legacy"] = "legacy"
    items: list[str] = Field(default_factory=list)


class TimestampedPoints(BaseModel):
    kind: Literal["timestamped"] = "timestamped"
    items: list[KeyPoint] = Field(default_factory=list)


KeyPoints = Annotated[Union[LegacyPoints, TimestampedPoints], Field(discriminator="kind")]


def tag_key_points(raw: Any) -> Any:
    """Wrap a bare key-point list in its variant.

    A list whose first element is a string is the legacy form; everything
    else, including an empty list, is the timestamped form.
    """
    if isinstance(raw, (LegacyPoints, TimestampedPoints, dict)):
        return raw
    if isinstance(raw, (list, tuple)):
        items = list(raw)
        if items and isinstance(items[0], str):
            return {"kind": "legacy", "items": items}
        return {"kind": "timestamped", "items": items}
    return raw


class ContentSection(_Model):
    title: str
    timestamp_start: str
    timestamp_end: str
    key_points: KeyPoints = Field(default_factory=TimestampedPoints)

    @field_validator("key_points", mode="before")
    @classmethod
    def _tag(cls, value: Any) -> Any:
        return tag_key_points(value)

    @field_serializer("key_points")
    def _untag(self, value: Union[LegacyPoints, TimestampedPoints]) -> list[Any]:
        if isinstance(value, LegacyPoints):
            return list(value.items)
        return [kp.model_dump(by_alias=True) for kp in value.items]

    @property
    def is_legacy(self) -> bool:
        return isinstance(self.key_points, LegacyPoints)


class Link(_Model):
    url: str
    title: str = ""
    description: str = ""

    @field_validator("url")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("link url must not be empty")
        return value


class StructuredDigest(_Model):
    summary: str = ""
    sections: list[ContentSection] = Field(default_factory=list)
    related_links: list[Link] = Field(default_factory=list)
    other_links: list[Link] = Field(default_factory=list)
    tangents: Optional[list[Tangent]] = None  # legacy span-level tangents only

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class DigestResult(_Model):
    metadata: VideoMetadata
    digest: StructuredDigest
    has_creator_chapters: bool = False
    output_path: Optional[str] = None
