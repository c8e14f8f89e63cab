"""
EPUB access for the converter: spine documents, TOC, metadata and cover.
"""

import logging
from pathlib import Path
from typing import Any, Optional

import ebooklib  # type: ignore[import-untyped]
from ebooklib import epub

from .models import ChapterRecord, Metadata, TocEntry

logger = logging.getLogger(__name__)


def _raw_content(item: Any) -> bytes:
    """Raw document bytes; ``EpubHtml.get_content()`` re-renders the head."""
    content = getattr(item, "content", None)
    if isinstance(content, bytes):
        return content
    if isinstance(content, str):
        return content.encode("utf-8")
    data: bytes = item.get_content()
    return data


def flatten_toc(nodes: Any) -> list[TocEntry]:
    """
    Flatten an ebooklib TOC tree in depth-first order.

    Nodes are ``epub.Link``, ``epub.Section`` or ``(Section, children)``
    tuples.
    """
    entries: list[TocEntry] = []
    for node in nodes:
        if isinstance(node, (tuple, list)) and len(node) == 2:
            section, children = node
            if getattr(section, "href", ""):
                entries.append(TocEntry(label=section.title, href=section.href))
            entries.extend(flatten_toc(children))
        elif hasattr(node, "href") and hasattr(node, "title"):
            if node.href:
                entries.append(TocEntry(label=node.title, href=node.href))
        else:
            logger.warning(f"Skipping unknown TOC node: {node!r}")
    return entries


class EPUBParser:
    """Read the parts of an EPUB the chapter converter needs."""

    def __init__(self, filepath: str):
        """
        Initialize parser with EPUB file.

        Args:
            filepath: Path to the EPUB file

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file is not a valid EPUB
        """
        self.filepath = Path(filepath)
        if not self.filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")

        self.book: Any = None
        self._metadata: Optional[Metadata] = None
        self._load_epub()

    def _load_epub(self) -> None:
        """Load and parse the EPUB file."""
        try:
            self.book = epub.read_epub(str(self.filepath))
            logger.info(f"Loaded EPUB: {self.filepath.name}")
        except Exception as e:
            raise ValueError(f"Failed to read EPUB file: {e}") from e

    def _get_single_metadata(self, field: str) -> Optional[str]:
        """Extract a single metadata value from Dublin Core field."""
        try:
            items = self.book.get_metadata("DC", field)
            if items and len(items) > 0:
                value: str = items[0][0]
                return value
        except Exception as e:
            logger.warning(f"Error extracting {field}: {e}")
        return None

    def _get_list_metadata(self, field: str) -> list[str]:
        """Extract a list of metadata values from Dublin Core field."""
        try:
            items = self.book.get_metadata("DC", field)
            if items:
                return [item[0] for item in items if len(item) > 0]
        except Exception as e:
            logger.warning(f"Error extracting {field}: {e}")
        return []

    def get_metadata(self) -> Metadata:
        """
        Extract metadata from EPUB.

        Returns:
            Metadata object with title, authors, etc.
        """
        if self._metadata is not None:
            return self._metadata

        self._metadata = Metadata(
            title=self._get_single_metadata("title"),
            authors=self._get_list_metadata("creator"),
            language=self._get_single_metadata("language"),
            identifier=self._get_single_metadata("identifier"),
        )
        return self._metadata

    def get_toc(self) -> list[TocEntry]:
        """Table of contents as a flat list in traversal order."""
        return flatten_toc(self.book.toc or [])

    def get_chapter_records(self) -> list[ChapterRecord]:
        """
        Build one record per spine document, in reading order.

        Spine entries that reference unknown items are skipped; ordinals stay
        sequential over the records that remain.
        """
        records: list[ChapterRecord] = []
        for spine_item in self.book.spine:
            item_id = spine_item[0] if isinstance(spine_item, (tuple, list)) else spine_item
            item = self.book.get_item_with_id(item_id)
            if item is None:
                logger.warning(f"Spine item with id '{item_id}' not found")
                continue

            html = _raw_content(item).decode("utf-8", errors="ignore")
            records.append(
                ChapterRecord(
                    id=item_id,
                    ordinal=len(records) + 1,
                    path=item.get_name(),
                    html=html,
                )
            )
        return records

    def get_cover(self) -> Optional[tuple[bytes, str]]:
        """
        Find the embedded cover image.

        Returns:
            ``(image bytes, media type)``, or None if the book has no cover
        """
        for item in self.book.get_items_of_type(ebooklib.ITEM_COVER):
            return _raw_content(item), item.media_type

        try:
            cover_meta = self.book.get_metadata("OPF", "cover")
        except Exception as e:
            logger.warning(f"Error extracting cover metadata: {e}")
            cover_meta = []
        for _, attrs in cover_meta or []:
            cover_id = (attrs or {}).get("content")
            item = self.book.get_item_with_id(cover_id) if cover_id else None
            if item is not None:
                return _raw_content(item), item.media_type

        logger.info("No embedded cover found")
        return None
