"""
Regex replacement engine shared by the built-in cleaner and custom rules.

Every rule is a full find-all-and-replace pass over the text; the output of
one rule is the input of the next.
"""

import logging
import re
from collections.abc import Iterable
from functools import lru_cache
from typing import Union

from .models import ReplacementRule

logger = logging.getLogger(__name__)

# (?<name>...) is not understood by ``re``; rewrite it to (?P<name>...).
_NAMED_GROUP_PATTERN = re.compile(r"(?<!\\)\(\?<([A-Za-z_][A-Za-z0-9_]*)>")
_TEMPLATE_REF_PATTERN = re.compile(r"\$(?:(\$)|\{([^}]+)\}|([_0-9A-Za-z]+))")

TemplatePart = tuple[bool, Union[str, int]]


class RulePatternError(ValueError):
    """Raised when a replacement rule's pattern is not a valid regex."""


@lru_cache(maxsize=None)
def compile_pattern(pattern: str) -> "re.Pattern[str]":
    """
    Compile a rule pattern once per process.

    Raises:
        RulePatternError: If the pattern is not a valid regular expression
    """
    translated = _NAMED_GROUP_PATTERN.sub(r"(?P<\1>", pattern)
    try:
        return re.compile(translated)
    except re.error as e:
        raise RulePatternError(f"Invalid pattern {pattern!r}: {e}") from e


@lru_cache(maxsize=None)
def parse_template(replacement: str) -> tuple[TemplatePart, ...]:
    """
    Split a replacement template into literal text and group references.

    Each part is ``(is_reference, value)``. References are ints for numbered
    groups and strings for named ones. A ``$`` that does not start a valid
    reference is kept as literal text.
    """
    parts: list[TemplatePart] = []
    literal = ""
    pos = 0
    for match in _TEMPLATE_REF_PATTERN.finditer(replacement):
        literal += replacement[pos : match.start()]
        pos = match.end()
        escaped, braced, bare = match.groups()
        if escaped:
            literal += "$"
            continue
        name = braced if braced is not None else bare
        if literal:
            parts.append((False, literal))
            literal = ""
        parts.append((True, int(name) if name.isdigit() else name))
    literal += replacement[pos:]
    if literal:
        parts.append((False, literal))
    return tuple(parts)


def _expand(match: "re.Match[str]", parts: tuple[TemplatePart, ...]) -> str:
    out = []
    for is_reference, value in parts:
        if not is_reference:
            out.append(value)
            continue
        try:
            group = match.group(value)
        except IndexError:
            # Unknown group expands to nothing
            group = None
        out.append(group or "")
    return "".join(out)


def apply_rule(text: str, rule: ReplacementRule) -> str:
    """Replace all non-overlapping matches of one rule."""
    regex = compile_pattern(rule.pattern)
    parts = parse_template(rule.replacement)
    result, count = regex.subn(lambda m: _expand(m, parts), text)
    if count:
        logger.debug(f"Rule {rule.pattern!r} -> {rule.replacement!r}: {count} match(es)")
    return result


def apply_rules(text: str, rules: Iterable[ReplacementRule]) -> str:
    """
    Apply rules in order, each one to the output of the previous.

    Args:
        text: Input text
        rules: Ordered replacement rules

    Returns:
        The rewritten text. Rules without matches leave it unchanged.

    Raises:
        RulePatternError: If any rule's pattern fails to compile
    """
    for rule in rules:
        text = apply_rule(text, rule)
    return text
