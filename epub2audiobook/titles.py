"""
Chapter title resolution.

Every chapter has three possible title sources: its table-of-contents entry,
the document ``<title>`` and the ``title`` attribute of its first
``<section>``. The resolver collects all three for the whole book before
choosing, because telling a useful source from a boilerplate one needs the
book-wide picture.
"""

import logging
import urllib.parse
from collections.abc import Sequence

from .markup import get_title_from_section_tag, get_title_from_title_tag
from .models import ChapterRecord, TitleCandidateSet, TitleSource, TocEntry

logger = logging.getLogger(__name__)

# Title-tag value used by some generators as a placeholder on every page.
PLACEHOLDER_TITLE = "Cover"
# Titles this short or shorter fall back to the spine identifier.
MIN_TITLE_LENGTH = 2

TOC_MATCH_STRATEGIES = ("last", "first", "exact")


def all_strings_the_same(strings: Sequence[str]) -> bool:
    """Return True if every string equals the first (or the list is empty)."""
    if not strings:
        return True
    first = strings[0]
    return all(s == first for s in strings)


def find_toc_title(path: str, toc: Sequence[TocEntry], strategy: str = "last") -> str:
    """
    Find the TOC label for a chapter resource.

    An entry matches when its href contains ``path``. When several match:

    * ``last``: the last match in TOC order wins
    * ``first``: the first match wins
    * ``exact``: the last entry whose href (without fragment) equals ``path``,
      otherwise the last match

    Args:
        path: Resource path of the chapter document
        toc: Flattened TOC entries in traversal order
        strategy: Tie-break strategy

    Returns:
        The label, or an empty string if nothing matches
    """
    if strategy not in TOC_MATCH_STRATEGIES:
        raise ValueError(f"Unknown TOC match strategy: {strategy}")
    if not path:
        return ""

    matches = [
        entry
        for entry in toc
        if path in entry.href or path in urllib.parse.unquote(entry.href)
    ]
    if not matches:
        return ""

    if strategy == "first":
        return matches[0].label
    if strategy == "exact":
        for entry in reversed(matches):
            base_href = urllib.parse.unquote(entry.href.split("#", 1)[0])
            if base_href == path:
                return entry.label
    return matches[-1].label


class TitleResolver:
    """
    Choose one title per chapter from the competing sources.

    The TOC label always wins. Uniformity of the title-tag and section-tag
    sources is computed and logged; ``choose_title`` is the place to act on
    it.
    """

    def __init__(
        self,
        toc: Sequence[TocEntry],
        toc_match: str = "last",
        placeholder_title: str = PLACEHOLDER_TITLE,
        min_title_length: int = MIN_TITLE_LENGTH,
    ):
        if toc_match not in TOC_MATCH_STRATEGIES:
            raise ValueError(f"Unknown TOC match strategy: {toc_match}")
        self.toc = list(toc)
        self.toc_match = toc_match
        self.placeholder_title = placeholder_title
        self.min_title_length = min_title_length

    def is_usable(self, title: str) -> bool:
        return len(title) > self.min_title_length

    def collect(self, chapters: Sequence[ChapterRecord]) -> TitleCandidateSet:
        """Fill in each chapter's title candidates and the book-wide signals."""
        candidates = TitleCandidateSet()
        total = len(chapters)
        for chapter in chapters:
            logger.info(
                f"Processing chapter {chapter.ordinal}/{total}: "
                f"Section Name: {chapter.id} Path: {chapter.path}"
            )

            chapter.toc_title = find_toc_title(chapter.path, self.toc, self.toc_match)
            candidates.toc_titles.append(chapter.toc_title)
            logger.info(f"  - Title from TOC Tag: <{chapter.toc_title}>")

            title_tag_title = get_title_from_title_tag(chapter.html)
            if title_tag_title != self.placeholder_title:
                chapter.title_tag_title = title_tag_title
                candidates.title_tag_titles.append(title_tag_title)
                logger.info(f"  - Title from Title Tag: <{title_tag_title}>")
            else:
                chapter.title_tag_title = ""
                logger.info(f"  - Title from Title Tag: <{title_tag_title}> - ignoring")

            chapter.section_title = get_title_from_section_tag(chapter.html)
            candidates.section_tag_titles.append(chapter.section_title)
            logger.info(f"  - Title from Section Tag: <{chapter.section_title}>")

        candidates.title_tags_uniform = all_strings_the_same(candidates.title_tag_titles)
        candidates.section_tags_uniform = all_strings_the_same(
            candidates.section_tag_titles
        )
        return candidates

    def choose_title(
        self, chapter: ChapterRecord, candidates: TitleCandidateSet
    ) -> tuple[str, TitleSource]:
        """Pick a candidate title for one chapter."""
        return chapter.toc_title, TitleSource.TOC

    def resolve(self, chapters: Sequence[ChapterRecord]) -> TitleCandidateSet:
        """
        Resolve the title of every chapter in place.

        After this, each chapter's ``resolved_title`` is either empty or
        longer than ``min_title_length``.

        Returns:
            The collected candidates, for reporting
        """
        candidates = self.collect(chapters)

        if candidates.title_tags_uniform:
            logger.info("Title Tags all the same or all empty, don't use")
        if candidates.section_tags_uniform:
            logger.info("Section Tags all the same or all empty, don't use")
        logger.info("Using TOC titles")

        for chapter in chapters:
            title, source = self.choose_title(chapter, candidates)
            if self.is_usable(title):
                chapter.resolved_title = title
                chapter.title_source = source
            else:
                chapter.resolved_title = ""
                chapter.title_source = TitleSource.IDENTIFIER
        return candidates
