"""Tests for the digest schema and its wire format."""

import pytest
from pydantic import ValidationError

from ytdigest.schemas import (
    ContentSection,
    DigestResult,
    Link,
    LegacyPoints,
    StructuredDigest,
    TimestampedPoints,
)


def test_timestamped_points_from_wire() -> None:
    section = ContentSection.model_validate({
        "title": "Intro",
        "timestampStart": "0:00",
        "timestampEnd": "1:00",
        "keyPoints": [
            {"text": "a", "timestamp": "0:10", "isTangent": True},
            {"text": "b", "timestamp": "0:20"},
        ],
    })
    assert isinstance(section.key_points, TimestampedPoints)
    assert section.key_points.items[0].is_tangent
    assert not section.key_points.items[1].is_tangent
    assert section.model_dump(by_alias=True)["keyPoints"] == [
        {"text": "a", "timestamp": "0:10", "isTangent": True},
        {"text": "b", "timestamp": "0:20", "isTangent": False},
    ]


def test_legacy_string_points_from_wire() -> None:
    section = ContentSection.model_validate({
        "title": "Intro", "timestampStart": "0:00", "timestampEnd": "1:00",
        "keyPoints": ["first", "second"],
    })
    assert isinstance(section.key_points, LegacyPoints)
    assert section.is_legacy
    assert section.model_dump(by_alias=True)["keyPoints"] == ["first", "second"]


def test_empty_or_missing_points_are_timestamped() -> None:
    empty = ContentSection(title="x", timestamp_start="0:00", timestamp_end="1:00", key_points=[])
    missing = ContentSection(title="x", timestamp_start="0:00", timestamp_end="1:00")
    assert isinstance(empty.key_points, TimestampedPoints)
    assert isinstance(missing.key_points, TimestampedPoints)
    assert missing.model_dump(by_alias=True)["keyPoints"] == []


def test_link_requires_url() -> None:
    with pytest.raises(ValidationError):
        Link(url="   ", title="Nothing")


def test_digest_wire_round_trip() -> None:
    wire = {
        "summary": "s",
        "sections": [{"title": "A", "timestampStart": "0:00", "timestampEnd": "1:00",
                      "keyPoints": [{"text": "a", "timestamp": "0:10", "isTangent": False}]}],
        "relatedLinks": [{"url": "https://example.com", "title": "Ex", "description": "d"}],
        "otherLinks": [],
    }
    digest = StructuredDigest.model_validate(wire)
    assert digest.to_wire() == wire


def test_saved_result_accepts_legacy_tangents() -> None:
    result = DigestResult.model_validate({
        "metadata": {"videoId": "abc", "title": "T", "channelTitle": "C", "duration": "PT5M"},
        "digest": {
            "summary": "s",
            "sections": [{"title": "A", "timestampStart": "0:00", "timestampEnd": "5:00",
                          "keyPoints": ["old point"]}],
            "tangents": [{"title": "Aside", "timestampStart": "1:00", "timestampEnd": "1:30",
                          "summary": "off topic"}],
        },
        "hasCreatorChapters": False,
    })
    assert result.metadata.video_id == "abc"
    assert result.digest.tangents[0].title == "Aside"
