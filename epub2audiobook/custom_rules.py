"""
Loader for user-maintained replacement rule files.

One rule per line, ``PATTERN==REPLACEMENT``. Empty lines and lines starting
with ``#`` are ignored; lines without ``==`` are reported and skipped.
"""

import logging
import re
from pathlib import Path
from typing import Optional, Union

from .models import ReplacementRule, RuleSet
from .replacer import RulePatternError, compile_pattern

logger = logging.getLogger(__name__)

DEFAULT_RULES_FILE = "custom-replacements.conf"
RULE_DELIMITER = "=="


def parse_rule_line(line: str, lineno: Optional[int] = None) -> Optional[ReplacementRule]:
    """
    Parse a single rule line.

    Args:
        line: Line without its trailing newline
        lineno: 1-based line number, used in diagnostics

    Returns:
        The rule, or None for blank, comment and malformed lines
    """
    if not line or line.startswith("#"):
        return None

    where = f"line {lineno}" if lineno is not None else "line"
    pattern, sep, replacement = line.partition(RULE_DELIMITER)
    if not sep:
        logger.warning(f"Ignoring {where}, no '{RULE_DELIMITER}' found: {line}")
        return None
    if not pattern:
        logger.warning(f"Ignoring {where}, empty pattern: {line}")
        return None
    return ReplacementRule(pattern, replacement)


def parse_rules(source_text: str) -> RuleSet:
    """
    Parse rule file contents into an ordered rule set.

    Raises:
        RulePatternError: If a rule's pattern is not a valid regex
    """
    rules: RuleSet = []
    for lineno, line in enumerate(re.split(r"\r?\n", source_text), 1):
        rule = parse_rule_line(line, lineno)
        if rule is None:
            continue
        try:
            compile_pattern(rule.pattern)
        except RulePatternError as e:
            raise RulePatternError(f"Line {lineno}: {e}") from e
        rules.append(rule)
    return rules


def load_rules(path: Union[str, Path] = DEFAULT_RULES_FILE) -> Optional[RuleSet]:
    """
    Load custom rules from a file.

    Args:
        path: Rule file location (default: custom-replacements.conf in the
            working directory)

    Returns:
        The rule set, or None if the file cannot be opened

    Raises:
        RulePatternError: If a rule's pattern is not a valid regex
    """
    path = Path(path)
    try:
        source_text = path.read_text(encoding="utf-8")
    except OSError as e:
        logger.info(f"No custom replacements loaded from {path}: {e.strerror}")
        return None

    rules = parse_rules(source_text)
    logger.info(f"Loaded {len(rules)} custom replacement(s) from {path}")
    return rules
