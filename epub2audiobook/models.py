"""Data models for chapters, titles and replacement rules."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class ReplacementRule:
    """A single regex pass: every match of ``pattern`` becomes ``replacement``.

    The replacement is a template that may reference captured groups as
    ``$1``, ``$name`` or ``${name}``; ``$$`` is a literal dollar sign.
    """

    pattern: str
    replacement: str


# Rules are applied strictly in list order, duplicates allowed.
RuleSet = list[ReplacementRule]


@dataclass
class TocEntry:
    """A flattened table-of-contents entry."""

    label: str
    href: str


@dataclass
class Metadata:
    """Book-level metadata taken from the OPF Dublin Core fields."""

    title: Optional[str] = None
    authors: list[str] = field(default_factory=list)
    language: Optional[str] = None
    identifier: Optional[str] = None

    @property
    def author(self) -> Optional[str]:
        return self.authors[0] if self.authors else None


class TitleSource(Enum):
    """Where a chapter's resolved title came from."""

    TOC = "TOC"
    TITLE_TAG = "Title Tag"
    SECTION_TAG = "Section Tag"
    IDENTIFIER = "ID"


@dataclass
class ChapterRecord:
    """One spine entry and everything derived from it during a run."""

    id: str
    ordinal: int
    path: str
    html: str
    toc_title: str = ""
    title_tag_title: str = ""
    section_title: str = ""
    resolved_title: str = ""
    title_source: TitleSource = TitleSource.IDENTIFIER
    output_basename: str = ""

    @property
    def display_title(self) -> str:
        """Resolved title, or the spine identifier when there is none."""
        return self.resolved_title or self.id


@dataclass
class TitleCandidateSet:
    """Title candidates for a whole book plus the uniformity signals.

    ``title_tag_titles`` omits placeholder values, so it can be shorter than
    the other two lists.
    """

    toc_titles: list[str] = field(default_factory=list)
    title_tag_titles: list[str] = field(default_factory=list)
    section_tag_titles: list[str] = field(default_factory=list)
    title_tags_uniform: bool = True
    section_tags_uniform: bool = True
