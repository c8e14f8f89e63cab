"""Tests for chapter title resolution."""

from typing import Optional

import pytest

from epub2audiobook.markup import (
    get_title_from_section_tag,
    get_title_from_title_tag,
    html_to_text,
)
from epub2audiobook.models import ChapterRecord, TitleSource, TocEntry
from epub2audiobook.titles import (
    TitleResolver,
    all_strings_the_same,
    find_toc_title,
)


def _html(
    title: Optional[str] = None, section: Optional[str] = None, body: str = "Text"
) -> str:
    head = f"<head><title>{title}</title></head>" if title is not None else ""
    if section is None:
        content = f"<p>{body}</p>"
    else:
        content = f'<section title="{section}"><p>{body}</p></section>'
    return f"<html>{head}<body>{content}</body></html>"


def _chapter(ordinal: int, path: str, html: str, item_id: str = "") -> ChapterRecord:
    return ChapterRecord(
        id=item_id or f"id{ordinal}", ordinal=ordinal, path=path, html=html
    )


def test_title_tag_extraction() -> None:
    assert get_title_from_title_tag(_html(title="Chapter One")) == "Chapter One"
    assert get_title_from_title_tag(_html()) == ""


def test_section_tag_extraction() -> None:
    assert get_title_from_section_tag(_html(section="Part 1")) == "Part 1"
    assert get_title_from_section_tag(_html()) == ""
    assert get_title_from_section_tag("<body><section><p>x</p></section></body>") == ""


def test_only_first_section_counts() -> None:
    html = '<body><section>a</section><section title="Second">b</section></body>'
    assert get_title_from_section_tag(html) == ""


def test_html_to_text_uses_body() -> None:
    html = "<html><head><title>Skip</title></head><body><h1>Hi</h1><p>there</p></body></html>"
    assert html_to_text(html) == "Hithere"


def test_html_to_text_without_body() -> None:
    assert html_to_text("<p>loose</p> text") == "loose text"


@pytest.mark.parametrize(
    ("strings", "expected"),
    [
        ([], True),
        (["", ""], True),
        (["Book", "Book", "Book"], True),
        (["Book", "Other"], False),
        (["Book", ""], False),
    ],
)
def test_all_strings_the_same(strings: list[str], expected: bool) -> None:
    assert all_strings_the_same(strings) is expected


TOC = [
    TocEntry("Part One", "Text/part1.xhtml"),
    TocEntry("Chapter 1", "Text/part1.xhtml#ch1"),
    TocEntry("Chapter 2", "Text/chapter2.xhtml"),
]


def test_find_toc_title_substring_match() -> None:
    assert find_toc_title("Text/chapter2.xhtml", TOC) == "Chapter 2"
    assert find_toc_title("chapter2.xhtml", TOC) == "Chapter 2"


def test_find_toc_title_no_match() -> None:
    assert find_toc_title("Text/appendix.xhtml", TOC) == ""
    assert find_toc_title("", TOC) == ""


@pytest.mark.parametrize(
    ("strategy", "expected"),
    [("last", "Chapter 1"), ("first", "Part One"), ("exact", "Chapter 1")],
)
def test_find_toc_title_tie_break(strategy: str, expected: str) -> None:
    assert find_toc_title("Text/part1.xhtml", TOC, strategy) == expected


def test_find_toc_title_exact_takes_last_equal_href() -> None:
    toc = [TocEntry("A", "x/ch1.xhtml#a"), TocEntry("B", "x/ch1.xhtml#b")]
    assert find_toc_title("x/ch1.xhtml", toc, "exact") == "B"


def test_find_toc_title_exact_prefers_equal_href_over_later_match() -> None:
    toc = [
        TocEntry("Whole", "Text/ch1.xhtml"),
        TocEntry("Notes", "notes/Text/ch1.xhtml"),
    ]
    assert find_toc_title("Text/ch1.xhtml", toc, "exact") == "Whole"
    assert find_toc_title("Text/ch1.xhtml", toc, "last") == "Notes"


def test_find_toc_title_exact_falls_back_to_last() -> None:
    """Without an equal href the last substring match wins."""
    toc = [TocEntry("A", "x/ch1.xhtml#a"), TocEntry("B", "x/ch1.xhtml#b")]
    assert find_toc_title("ch1.xhtml", toc, "exact") == "B"
    assert find_toc_title("ch1.xhtml", toc, "first") == "A"


def test_find_toc_title_url_encoded_href() -> None:
    toc = [TocEntry("Spaced", "Text/chapter%20one.xhtml")]
    assert find_toc_title("Text/chapter one.xhtml", toc) == "Spaced"


def test_unknown_strategy_rejected() -> None:
    with pytest.raises(ValueError):
        find_toc_title("a", TOC, "best")
    with pytest.raises(ValueError):
        TitleResolver(TOC, toc_match="best")


def test_collect_discards_cover_title_tag() -> None:
    chapters = [
        _chapter(1, "cover.xhtml", _html(title="Cover")),
        _chapter(2, "ch1.xhtml", _html(title="Book")),
        _chapter(3, "ch2.xhtml", _html(title="Book")),
    ]
    candidates = TitleResolver([]).collect(chapters)

    assert chapters[0].title_tag_title == ""
    assert candidates.title_tag_titles == ["Book", "Book"]
    assert candidates.title_tags_uniform is True


def test_uniformity_signals() -> None:
    chapters = [
        _chapter(1, "a.xhtml", _html(title="Alpha", section="S")),
        _chapter(2, "b.xhtml", _html(title="Beta", section="S")),
    ]
    candidates = TitleResolver([]).collect(chapters)

    assert candidates.title_tags_uniform is False
    assert candidates.section_tags_uniform is True
    assert candidates.section_tag_titles == ["S", "S"]


def test_resolve_prefers_toc_title() -> None:
    toc = [TocEntry("The Real Title", "Text/a.xhtml")]
    chapters = [_chapter(1, "Text/a.xhtml", _html(title="Other", section="Another"))]

    TitleResolver(toc).resolve(chapters)

    assert chapters[0].resolved_title == "The Real Title"
    assert chapters[0].title_source is TitleSource.TOC
    assert chapters[0].display_title == "The Real Title"


def test_resolve_ignores_other_sources_without_toc() -> None:
    """Title and section tags are advisory only."""
    chapters = [_chapter(1, "a.xhtml", _html(title="Distinct", section="Named"))]

    TitleResolver([]).resolve(chapters)

    assert chapters[0].resolved_title == ""
    assert chapters[0].title_source is TitleSource.IDENTIFIER
    assert chapters[0].display_title == "id1"


@pytest.mark.parametrize(
    ("label", "resolved"),
    [("", ""), ("I", ""), ("II", ""), ("III", "III"), ("Chapter", "Chapter")],
)
def test_short_titles_fall_back_to_identifier(label: str, resolved: str) -> None:
    toc = [TocEntry(label, "a.xhtml")]
    chapters = [_chapter(1, "a.xhtml", _html(), item_id="item7")]

    TitleResolver(toc).resolve(chapters)

    assert chapters[0].resolved_title == resolved
    assert chapters[0].display_title == (resolved or "item7")


def test_custom_placeholder_and_threshold() -> None:
    toc = [TocEntry("Four", "a.xhtml")]
    chapters = [_chapter(1, "a.xhtml", _html(title="Title Page"))]

    resolver = TitleResolver(toc, placeholder_title="Title Page", min_title_length=4)
    candidates = resolver.resolve(chapters)

    assert candidates.title_tag_titles == []
    assert chapters[0].resolved_title == ""


def test_choose_title_hook_can_be_overridden() -> None:
    """Subclasses can act on the uniformity signals."""

    class TitleTagFallback(TitleResolver):
        def choose_title(self, chapter, candidates):
            if not chapter.toc_title and not candidates.title_tags_uniform:
                return chapter.title_tag_title, TitleSource.TITLE_TAG
            return super().choose_title(chapter, candidates)

    chapters = [
        _chapter(1, "a.xhtml", _html(title="Opening")),
        _chapter(2, "b.xhtml", _html(title="Closing")),
    ]
    TitleTagFallback([TocEntry("Named in TOC", "b.xhtml")]).resolve(chapters)

    assert chapters[0].resolved_title == "Opening"
    assert chapters[0].title_source is TitleSource.TITLE_TAG
    assert chapters[1].resolved_title == "Named in TOC"
    assert chapters[1].title_source is TitleSource.TOC
