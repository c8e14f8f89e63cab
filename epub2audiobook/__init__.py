"""
epub2audiobook - Split an EPUB into per-chapter text for speech synthesis.

Resolves a usable title for every spine document, normalizes the chapter
text for reading aloud (paragraph markers, blank lines, currency, speeds)
and applies user-maintained replacement rules.
"""

from .cleaner import TextCleaner, clean_text, normalize_text
from .converter import BookConverter, convert_epub, sanitize_filename
from .custom_rules import load_rules, parse_rules
from .models import ChapterRecord, Metadata, ReplacementRule, TocEntry
from .parser import EPUBParser
from .replacer import RulePatternError, apply_rules
from .titles import TitleResolver

__all__ = [
    "BookConverter",
    "ChapterRecord",
    "EPUBParser",
    "Metadata",
    "ReplacementRule",
    "RulePatternError",
    "TextCleaner",
    "TitleResolver",
    "TocEntry",
    "apply_rules",
    "clean_text",
    "convert_epub",
    "load_rules",
    "normalize_text",
    "parse_rules",
    "sanitize_filename",
]

try:
    from ._version import version as __version__
except ImportError:
    __version__ = "0.0.0+unknown"
