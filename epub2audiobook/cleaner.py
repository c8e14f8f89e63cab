"""
Built-in text normalization for speech synthesis.

The cleanup steps are plain rule tables run by the replacement engine, so
their order is data and can be inspected or tested on its own.
"""

import logging
import re
from typing import Optional

from .models import ReplacementRule, RuleSet
from .replacer import apply_rules

logger = logging.getLogger(__name__)

PARAGRAPH_MARKER = "¶"

STRUCTURAL_RULES: RuleSet = [
    ReplacementRule(re.escape(PARAGRAPH_MARKER), "."),
    ReplacementRule(r"[^\S\n]+\n", "\n"),
    ReplacementRule(r"\n+", "\n"),
    ReplacementRule(r"\A\n+", ""),
]

# Singular and scaled amounts must run before the catch-all.
CURRENCY_RULES: RuleSet = [
    ReplacementRule(r"\$1\Z", "one dollar"),
    ReplacementRule(
        r"\$([0-9][,0-9]*(?:\.[0-9]+)?\s(million|billion|trillion))", "$1 dollars"
    ),
    ReplacementRule(r"\$(?<amount>[,0-9]+)", "$amount dollars"),
]


def _speed_rules(letter: str, phrase: str) -> RuleSet:
    acronym = f"{letter}ph"
    dotted = re.escape(f"{letter}.p.h.")
    return [
        ReplacementRule(rf"(?<![A-Za-z]){acronym}(?![A-Za-z])", phrase),
        ReplacementRule(rf"{dotted}\n", f"{phrase}.\n"),
        ReplacementRule(rf"{dotted}(\s+)([A-Z])", f"{phrase}.$1$2"),
        ReplacementRule(dotted, phrase),
    ]


SPEED_RULES: RuleSet = _speed_rules("k", "kilometers per hour") + _speed_rules(
    "m", "miles per hour"
)


class TextCleaner:
    """
    Normalize extracted chapter text before it is read aloud.

    Structural cleanup always runs; currency and speed expansion can be
    switched off.
    """

    def __init__(self, expand_currency: bool = True, expand_speed: bool = True):
        self.expand_currency = expand_currency
        self.expand_speed = expand_speed

    @property
    def rules(self) -> RuleSet:
        """The ordered rule list this cleaner applies."""
        rules = list(STRUCTURAL_RULES)
        if self.expand_currency:
            rules.extend(CURRENCY_RULES)
        if self.expand_speed:
            rules.extend(SPEED_RULES)
        return rules

    def clean(self, text: str) -> str:
        return apply_rules(text, self.rules)


def clean_text(text: str) -> str:
    """Apply all built-in normalization rules."""
    return TextCleaner().clean(text)


def normalize_text(
    text: str,
    custom_rules: Optional[RuleSet] = None,
    cleaner: Optional[TextCleaner] = None,
) -> str:
    """
    Run the built-in cleaner, then the custom rules if there are any.

    Args:
        text: Plain chapter text
        custom_rules: User rules loaded from a replacement file, or None
        cleaner: Cleaner to use (default: all built-in rules)

    Returns:
        Normalized text
    """
    text = (cleaner or TextCleaner()).clean(text)
    if custom_rules:
        logger.debug(f"Applying {len(custom_rules)} custom rule(s)")
        text = apply_rules(text, custom_rules)
    return text
