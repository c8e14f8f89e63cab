"""
Convert an EPUB into per-chapter text files for audiobook synthesis.

Titles are resolved for the whole book first; chapters are then written one
at a time in spine order.
"""

import logging
import re
import shlex
from pathlib import Path
from typing import Any, Optional, Union

from .cleaner import TextCleaner, normalize_text
from .custom_rules import DEFAULT_RULES_FILE, load_rules
from .markup import html_to_text
from .models import ChapterRecord, Metadata, RuleSet
from .parser import EPUBParser
from .titles import TitleResolver

logger = logging.getLogger(__name__)

HTML_DIR = "html"
ORIGINAL_DIR = "original"
BOOK_SCRIPT = "book.sh"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9_.\-/]")
_COVER_EXTENSIONS = {"image/jpeg": ".jpg", "image/png": ".png"}


def sanitize_filename(name: str) -> str:
    """Replace every character outside ``[a-zA-Z0-9_.-/]`` with ``_``."""
    return _UNSAFE_FILENAME_CHARS.sub("_", name)


def chapter_basename(chapter: ChapterRecord) -> str:
    """Output file stem, e.g. ``0003_CHAPTER_III._A_Caucus-Race``."""
    name = sanitize_filename(f"{chapter.ordinal:04}_{chapter.display_title}")
    # Keep every chapter directly in the output directory
    return name.replace("/", "_")


class BookConverter:
    """
    Write the per-chapter output of one EPUB.

    Layout under ``output_dir``: ``NNNN_name.txt`` and ``NNNN_name.title``
    at the root, raw documents in ``html/``, text before normalization in
    ``original/``, plus ``book.sh`` and the cover image.
    """

    def __init__(
        self,
        output_dir: Union[str, Path],
        cleaner: Optional[TextCleaner] = None,
        custom_rules: Optional[RuleSet] = None,
        toc_match: str = "last",
    ):
        self.output_dir = Path(output_dir)
        self.cleaner = cleaner or TextCleaner()
        self.custom_rules = custom_rules
        self.toc_match = toc_match

    @property
    def html_dir(self) -> Path:
        return self.output_dir / HTML_DIR

    @property
    def original_dir(self) -> Path:
        return self.output_dir / ORIGINAL_DIR

    def _prepare_directories(self) -> None:
        for directory in (self.output_dir, self.html_dir, self.original_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def save_cover(self, cover: Optional[tuple[bytes, str]]) -> Optional[str]:
        """
        Write the cover image as ``Cover.jpg`` or ``Cover.png``.

        Returns:
            The file name written, or None if there is no cover
        """
        if cover is None:
            return None
        data, media_type = cover
        filename = "Cover" + _COVER_EXTENSIONS.get(media_type, ".png")
        (self.output_dir / filename).write_bytes(data)
        logger.info(f"Saved cover to {filename}")
        return filename

    def write_book_script(self, metadata: Metadata, cover_name: Optional[str]) -> Path:
        """Write ``book.sh`` exporting the book title, author and cover."""
        lines = [
            "#!/bin/bash",
            f"export BOOK_TITLE={shlex.quote(metadata.title or '')}",
            f"export BOOK_AUTHOR={shlex.quote(metadata.author or '')}",
            f"export BOOK_COVER={shlex.quote(cover_name or '')}",
        ]
        path = self.output_dir / BOOK_SCRIPT
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    def convert(self, parser: Any) -> list[ChapterRecord]:
        """
        Convert every spine document of a parsed book.

        Args:
            parser: An EPUBParser (or anything with the same accessors)

        Returns:
            The chapter records, with titles and output names filled in
        """
        self._prepare_directories()

        metadata = parser.get_metadata()
        cover_name = self.save_cover(parser.get_cover())
        self.write_book_script(metadata, cover_name)

        chapters = parser.get_chapter_records()
        toc = parser.get_toc()
        logger.info(f"Title: {metadata.title}")
        logger.info(f"Author: {metadata.author}")
        logger.info(f"Number of Sections: {len(chapters)}")
        logger.info(f"Number of Items in TOC: {len(toc)}")

        TitleResolver(toc, toc_match=self.toc_match).resolve(chapters)

        for chapter in chapters:
            self.convert_chapter(chapter, len(chapters))
        return chapters

    def convert_chapter(self, chapter: ChapterRecord, total: int) -> Path:
        """
        Write all output files for one chapter whose title is resolved.

        Returns:
            Path of the normalized text file
        """
        chapter.output_basename = chapter_basename(chapter)
        base = chapter.output_basename
        logger.info(
            f"Converting Chapter {chapter.ordinal:>3}/{total}: {chapter.id:<21} "
            f"Title Source: {chapter.title_source.value:<6} Filename: {base}"
        )

        text = html_to_text(chapter.html)
        (self.original_dir / f"{base}.txt").write_text(text, encoding="utf-8")

        text = normalize_text(text, self.custom_rules, cleaner=self.cleaner)
        text_path = self.output_dir / f"{base}.txt"
        text_path.write_text(text, encoding="utf-8")
        (self.output_dir / f"{base}.title").write_text(
            chapter.display_title, encoding="utf-8"
        )
        (self.html_dir / f"{base}.html").write_text(chapter.html, encoding="utf-8")
        return text_path


def convert_epub(
    filepath: Union[str, Path],
    output_dir: Union[str, Path],
    rules_file: Optional[Union[str, Path]] = DEFAULT_RULES_FILE,
    toc_match: str = "last",
    cleaner: Optional[TextCleaner] = None,
) -> list[ChapterRecord]:
    """
    Convert an EPUB file into per-chapter text files.

    Args:
        filepath: Path to the EPUB file
        output_dir: Directory to write into (created if missing)
        rules_file: Custom replacement file; None disables custom rules.
            A file that cannot be opened means no custom rules.
        toc_match: TOC tie-break strategy (last, first or exact)
        cleaner: Built-in cleaner to use (default: all rules)

    Returns:
        The converted chapter records

    Raises:
        FileNotFoundError: If the EPUB doesn't exist
        ValueError: If the EPUB cannot be read or a custom pattern is invalid
    """
    custom_rules = load_rules(rules_file) if rules_file is not None else None
    parser = EPUBParser(str(filepath))
    converter = BookConverter(
        output_dir, cleaner=cleaner, custom_rules=custom_rules, toc_match=toc_match
    )
    return converter.convert(parser)
