"""Movement directions used by speedwalk and ``$oppositeN``."""

from __future__ import annotations

_PAIRS = (
    ("n", "s"),
    ("e", "w"),
    ("ne", "sw"),
    ("nw", "se"),
    ("u", "d"),
    ("in", "out"),
    ("north", "south"),
    ("east", "west"),
    ("northeast", "southwest"),
    ("northwest", "southeast"),
    ("up", "down"),
    ("enter", "leave"),
)

OPPOSITE_DIRECTIONS: dict[str, str] = {}
for _a, _b in _PAIRS:
    OPPOSITE_DIRECTIONS[_a] = _b
    OPPOSITE_DIRECTIONS[_b] = _a

# Longest first so regex alternation prefers "ne" over "n" and "out" over "u".
DIRECTIONS: tuple[str, ...] = tuple(sorted(OPPOSITE_DIRECTIONS, key=lambda d: (-len(d), d)))


def opposite_direction(token: str) -> str:
    """Antonym of *token*, or an empty string when it is not a direction."""
    return OPPOSITE_DIRECTIONS.get(token.lower(), "")
