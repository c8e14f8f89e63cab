"""Shared fixtures."""

from pathlib import Path

import pytest
from ebooklib import epub  # type: ignore[import-untyped]

BOOK_TITLE = "Alice's Adventures in Wonderland"
CHAPTER_LABELS = [
    "CHAPTER I. Down the Rabbit-Hole",
    "CHAPTER II. The Pool of Tears",
    "CHAPTER III. A Caucus-Race and a Long Tale",
]


def _create_epub(epub_path: Path) -> None:
    book = epub.EpubBook()
    book.set_identifier("alice-test")
    book.set_title(BOOK_TITLE)
    book.set_language("en")
    book.add_author("Lewis Carroll")

    chapters = []
    for n, label in enumerate(CHAPTER_LABELS, 1):
        chapter = epub.EpubHtml(
            uid=f"chap{n}",
            title=BOOK_TITLE,
            file_name=f"text/ch{n:02}.xhtml",
            lang="en",
        )
        chapter.content = (
            f"<h2>{label}</h2>"
            f"<p>The rabbit ran at 20 mph and the hat cost $1 million.</p>"
        )
        book.add_item(chapter)
        chapters.append(chapter)

    book.toc = [
        epub.Link(f"text/ch{n:02}.xhtml", label, f"chap{n}")
        for n, label in enumerate(CHAPTER_LABELS, 1)
    ]
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = chapters

    epub.write_epub(str(epub_path), book)


@pytest.fixture
def alice_epub(tmp_path: Path) -> Path:
    """A small EPUB whose <title> is the book title on every page."""
    epub_path = tmp_path / "alice.epub"
    _create_epub(epub_path)
    return epub_path
