"""Edit-boundary validation for aliases, triggers, timers and variables.

Everything here runs when a record is created or updated, never per line.
"""

from __future__ import annotations

import math
import re

from .cache import check_pattern_safety, compile_pattern
from .errors import MacroValidationError
from .models.base import SCOPES, Scope

VARIABLE_NAME_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# Names the resolver claims for itself; a variable with one of these names
# could never be read back.
RESERVED_VARIABLE_NAMES = frozenset({"me", "line"})


def validate_scope(scope: str) -> Scope:
    if scope not in SCOPES:
        raise MacroValidationError(f"Invalid scope: {scope}")
    return scope  # type: ignore[return-value]


def validate_match_mode(match_mode: str, allowed: tuple[str, ...]) -> str:
    if match_mode not in allowed:
        raise MacroValidationError(
            f"Invalid match mode: {match_mode} (expected one of {', '.join(allowed)})"
        )
    return match_mode


def validate_pattern(pattern: str, match_mode: str) -> str:
    """Reject empty patterns and regexes that fail to compile or are unsafe."""
    if not pattern or not pattern.strip():
        raise MacroValidationError("Pattern must not be empty")
    if match_mode != "regex":
        return pattern

    reason = check_pattern_safety(pattern)
    if reason is not None:
        raise MacroValidationError(f"Unsafe regex: {reason}")
    try:
        re.compile(pattern)
    except re.error as e:
        raise MacroValidationError(f"Invalid regex: {e}") from e
    # Warm the matcher's cache so the first matching line pays nothing.
    compile_pattern(pattern)
    return pattern


def validate_variable_name(name: str) -> str:
    name = (name or "").strip()
    if not VARIABLE_NAME_PATTERN.fullmatch(name):
        raise MacroValidationError(
            f"Invalid variable name: {name!r} (use letters, digits and underscore)"
        )
    if name.lower() in RESERVED_VARIABLE_NAMES or re.match(r"opposite[1-9]", name.lower()):
        raise MacroValidationError(f"Variable name is reserved: {name}")
    return name


def clamp_non_negative(value: float | int | None) -> int:
    """Clamp a count or duration to a non-negative int; NaN and None become 0."""
    if value is None:
        return 0
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        return 0
    return max(0, int(value))
