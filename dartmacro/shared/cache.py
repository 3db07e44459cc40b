"""Compiled-pattern cache for user supplied regular expressions.

Uses cachetools.LRUCache so each pattern source is compiled at most once per
process while it stays hot. Patterns are validated and compiled when a rule
is saved, so the per-line path is a cache hit. A pattern that failed to compile is cached as
``None`` and is treated as "never matches" by callers.

User regexes are untrusted input: ``check_pattern_safety`` rejects sources
that are known to backtrack catastrophically (quantified groups that contain
a quantifier, e.g. ``(a+)+`` or ``(\\w*)*``) and over-long sources.
"""

from __future__ import annotations

import logging
import re

from cachetools import LRUCache  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

MAX_PATTERN_LENGTH = 512

_pattern_cache: LRUCache = LRUCache(maxsize=512)

_QUANTIFIERS = frozenset("*+{")


def check_pattern_safety(source: str) -> str | None:
    """Return a reason string when *source* is unsafe to run, else ``None``."""
    if len(source) > MAX_PATTERN_LENGTH:
        return f"pattern is longer than {MAX_PATTERN_LENGTH} characters"

    # Each open group records whether a quantifier appeared inside it.
    stack: list[bool] = []
    in_class = False
    i = 0
    while i < len(source):
        ch = source[i]
        if ch == "\\":
            i += 2
            continue
        if in_class:
            if ch == "]":
                in_class = False
            i += 1
            continue
        if ch == "[":
            in_class = True
        elif ch == "(":
            stack.append(False)
        elif ch == ")":
            inner_quantified = stack.pop() if stack else False
            following = source[i + 1] if i + 1 < len(source) else ""
            if inner_quantified and following in _QUANTIFIERS:
                return "nested quantifiers can backtrack catastrophically"
            if stack and (inner_quantified or following in _QUANTIFIERS):
                stack[-1] = True
        elif ch in _QUANTIFIERS and stack:
            stack[-1] = True
        i += 1
    return None


def compile_pattern(source: str) -> re.Pattern[str] | None:
    """Compile *source* case-insensitively, returning ``None`` on failure."""
    try:
        return _pattern_cache[source]
    except KeyError:
        pass

    compiled: re.Pattern[str] | None
    reason = check_pattern_safety(source)
    if reason is not None:
        logger.warning(f"Refusing unsafe pattern {source!r}: {reason}")
        compiled = None
    else:
        try:
            compiled = re.compile(source, re.IGNORECASE)
        except re.error as e:
            logger.warning(f"Invalid regex pattern {source!r}: {e}")
            compiled = None

    _pattern_cache[source] = compiled
    return compiled


def clear_pattern_cache() -> None:
    _pattern_cache.clear()
