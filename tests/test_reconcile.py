"""Tests for the digest reconciler passes."""

import pytest

from ytdigest.errors import MalformedTimestamp
from ytdigest.reconcile import (
    is_tangent_only,
    merge_tangent_only_sections,
    reconcile,
    remove_duplicate_sections,
    sort_chronologically,
)
from ytdigest.schemas import (
    ContentSection,
    KeyPoint,
    LegacyPoints,
    Link,
    StructuredDigest,
    TimestampedPoints,
)


def kp(text: str, ts: str, tangent: bool = False) -> KeyPoint:
    return KeyPoint(text=text, timestamp=ts, is_tangent=tangent)


def section(title: str, start: str, end: str, points) -> ContentSection:
    return ContentSection(title=title, timestamp_start=start, timestamp_end=end, key_points=points)


def texts(s: ContentSection) -> list[str]:
    return [p if isinstance(p, str) else p.text for p in s.key_points.items]


def test_duplicate_titles_keep_first_and_drop_points() -> None:
    sections = [
        section("Setup", "0:00", "2:00", [kp("install", "0:30")]),
        section("Usage", "2:00", "4:00", [kp("run it", "2:30")]),
        section("  setup ", "4:00", "6:00", [kp("configure", "4:30")]),
    ]
    kept = remove_duplicate_sections(sections)
    assert [s.title for s in kept] == ["Setup", "Usage"]
    assert texts(kept[0]) == ["install"]


def test_tangent_only_section_is_absorbed_by_previous() -> None:
    sections = [
        section("Intro", "0:00", "2:00", [kp("a1", "0:30")]),
        section("Side story", "2:00", "3:00", [
            kp("t1", "2:10", True), kp("t2", "2:20", True), kp("t3", "2:40", True),
        ]),
        section("Main", "3:00", "5:00", [kp("b1", "3:30")]),
    ]
    merged = merge_tangent_only_sections(sections)
    assert [s.title for s in merged] == ["Intro", "Main"]
    assert texts(merged[0]) == ["a1", "t1", "t2", "t3"]
    assert merged[0].timestamp_end == "3:00"
    assert merged[0].timestamp_start == "0:00"


def test_leading_tangent_sections_prepend_to_first_substantive() -> None:
    sections = [
        section("Cold open", "0:00", "1:00", [kp("t1", "0:20", True)]),
        section("Banter", "1:00", "2:00", [kp("t2", "1:30", True)]),
        section("Topic", "2:00", "4:00", [kp("a", "2:30")]),
        section("Wrap up", "4:00", "5:00", [kp("b", "4:30")]),
    ]
    merged = merge_tangent_only_sections(sections)
    assert [s.title for s in merged] == ["Topic", "Wrap up"]
    assert merged[0].timestamp_start == "0:00"
    assert merged[0].timestamp_end == "4:00"
    assert texts(merged[0]) == ["t1", "t2", "a"]


def test_creator_chapters_are_never_merged() -> None:
    sections = [
        section("Intro", "0:00", "2:00", [kp("a1", "0:30")]),
        section("Sponsor", "2:00", "3:00", [kp("ad", "2:10", True)]),
        section("Main", "3:00", "5:00", [kp("b1", "3:30")]),
    ]
    assert merge_tangent_only_sections(sections, has_creator_chapters=True) == sections
    digest = StructuredDigest(summary="s", sections=sections)
    assert reconcile(digest, has_creator_chapters=True).sections == sections


def test_all_tangent_only_sections_are_kept() -> None:
    sections = [
        section("Rant", "0:00", "1:00", [kp("t1", "0:10", True)]),
        section("Another rant", "1:00", "2:00", [kp("t2", "1:10", True)]),
    ]
    assert merge_tangent_only_sections(sections) == sections


def test_empty_and_legacy_sections_are_substantive() -> None:
    assert not is_tangent_only(section("Empty", "0:00", "1:00", []))
    assert not is_tangent_only(section("Old", "0:00", "1:00", ["a plain string"]))
    assert not is_tangent_only(section("Mixed", "0:00", "1:00", [kp("a", "0:10", True), kp("b", "0:20")]))
    assert is_tangent_only(section("Off", "0:00", "1:00", [kp("a", "0:10", True)]))


def test_empty_section_never_absorbs_tangents() -> None:
    sections = [
        section("Intro", "0:00", "1:00", [kp("a", "0:30")]),
        section("Empty", "1:00", "2:00", []),
        section("Aside", "2:00", "3:00", [kp("t1", "2:10", True)]),
    ]
    merged = merge_tangent_only_sections(sections)
    assert [s.title for s in merged] == ["Intro", "Empty"]
    assert texts(merged[0]) == ["a", "t1"]
    assert merged[0].timestamp_end == "3:00"
    assert texts(merged[1]) == []

    leading = merge_tangent_only_sections([
        section("Empty", "0:00", "1:00", []),
        section("Aside", "1:00", "2:00", [kp("t", "1:10", True)]),
        section("Main", "2:00", "4:00", [kp("b", "2:30")]),
    ])
    assert [s.title for s in leading] == ["Empty", "Main"]
    assert leading[1].timestamp_start == "1:00"
    assert texts(leading[1]) == ["t", "b"]

    only_empty = [section("Empty", "0:00", "1:00", []), section("Aside", "1:00", "2:00", [kp("t", "1:10", True)])]
    assert merge_tangent_only_sections(only_empty) == only_empty


def test_tangent_merged_into_legacy_section_becomes_text() -> None:
    sections = [
        section("Old", "0:00", "2:00", ["legacy point"]),
        section("Off", "2:00", "3:00", [kp("aside", "2:30", True)]),
    ]
    merged = merge_tangent_only_sections(sections)
    assert len(merged) == 1
    assert isinstance(merged[0].key_points, LegacyPoints)
    assert texts(merged[0]) == ["legacy point", "aside"]


def test_sort_sections_and_points() -> None:
    sections = [
        section("C", "5:00", "7:00", [kp("c2", "6:30"), kp("c1", "5:10")]),
        section("A", "0:00", "2:00", [kp("a1", "0:30")]),
        section("B", "2:00", "5:00", ["second", "first"]),
    ]
    ordered = sort_chronologically(sections)
    assert [s.timestamp_start for s in ordered] == ["0:00", "2:00", "5:00"]
    assert texts(ordered[2]) == ["c1", "c2"]
    assert texts(ordered[1]) == ["second", "first"]


def test_sort_handles_hour_timestamps() -> None:
    sections = [
        section("Late", "1:05:00", "1:10:00", []),
        section("Early", "59:00", "1:05:00", []),
    ]
    assert [s.title for s in sort_chronologically(sections)] == ["Early", "Late"]


def _messy_digest() -> StructuredDigest:
    return StructuredDigest(
        summary="A video about parsers.",
        sections=[
            section("Parsing", "4:00", "8:00", [kp("p2", "6:00"), kp("p1", "4:30")]),
            section("Intro", "0:00", "2:00", [kp("i1", "0:30")]),
            section("Tangent", "2:00", "4:00", [kp("dog story", "2:15", True)]),
            section("intro ", "8:00", "9:00", [kp("dup", "8:10")]),
            section("Outro", "9:00", "10:00", ["legacy thanks"]),
        ],
        related_links=[Link(url="https://example.com/parser", title="Parser docs")],
        other_links=[Link(url="https://twitter.com/someone", title="Twitter")],
    )


def test_reconcile_pipeline_order() -> None:
    result = reconcile(_messy_digest())
    assert [s.title for s in result.sections] == ["Intro", "Parsing", "Outro"]
    intro = result.sections[0]
    assert texts(intro) == ["i1", "dog story"]
    assert intro.timestamp_end == "4:00"
    assert texts(result.sections[1]) == ["p1", "p2"]
    assert result.summary == "A video about parsers."
    assert result.related_links[0].url == "https://example.com/parser"
    assert result.other_links[0].title == "Twitter"


def test_reconcile_is_idempotent() -> None:
    once = reconcile(_messy_digest())
    assert reconcile(once) == once
    degenerate = StructuredDigest(sections=[
        section("Rant", "3:00", "4:00", [kp("t2", "3:10", True)]),
        section("Rant 2", "0:00", "1:00", [kp("t1", "0:10", True)]),
    ])
    once = reconcile(degenerate)
    assert reconcile(once) == once
    empty_first = StructuredDigest(sections=[
        section("Empty", "0:00", "1:00", []),
        section("Aside", "1:00", "2:00", [kp("t", "1:10", True)]),
        section("Main", "2:00", "4:00", [kp("b", "2:30")]),
    ])
    once = reconcile(empty_first)
    assert reconcile(once) == once


def test_reconcile_does_not_mutate_input() -> None:
    digest = _messy_digest()
    snapshot = digest.model_dump()
    reconcile(digest)
    assert digest.model_dump() == snapshot


def test_malformed_timestamp_aborts_reconcile() -> None:
    digest = StructuredDigest(sections=[
        section("A", "0:00", "1:00", [kp("a", "0:10")]),
        section("B", "about two minutes", "3:00", [kp("b", "2:10")]),
    ])
    with pytest.raises(MalformedTimestamp):
        reconcile(digest)


def test_timestamped_points_stay_tagged_after_reconcile() -> None:
    result = reconcile(_messy_digest())
    assert isinstance(result.sections[0].key_points, TimestampedPoints)
    assert isinstance(result.sections[2].key_points, LegacyPoints)
