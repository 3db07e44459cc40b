"""Placeholder substitution.

Supported placeholders (longest token wins, so ``$opposite1`` is never read
as ``$o...`` and ``$10`` is ``$1`` followed by a literal ``0``):

    $opposite1..9   antonym of the direction in argument N
    $0              matched text (triggers)
    $1..$9          positional arguments / capture groups
    $*              all arguments, space-joined
    $-              all arguments but the last
    $!              the last argument
    $me / $Me       active character, lowercase / Capitalized
    $line           full ANSI-stripped line (triggers)
    $name           user variable (character scope first, then global)

Anything that cannot be resolved becomes an empty string. Resolution is a
single pass: substituted values are never scanned again.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from .directions import opposite_direction

_PLACEHOLDER = re.compile(
    r"\$(?:opposite([1-9])|([0-9])|([*\-!])|([A-Za-z_][A-Za-z0-9_]*))"
)


def _no_variables(name: str) -> str | None:
    return None


@dataclass
class SubstitutionContext:
    args: Sequence[str] = ()
    matched_text: str = ""
    line: str = ""
    active_character: str | None = None
    lookup_variable: Callable[[str], str | None] = field(default=_no_variables)

    def arg(self, position: int) -> str:
        if 1 <= position <= len(self.args):
            return self.args[position - 1]
        return ""


def _character_name(context: SubstitutionContext, capitalized: bool) -> str:
    name = (context.active_character or "").lower()
    if capitalized and name:
        return name[0].upper() + name[1:]
    return name


def resolve(text: str, context: SubstitutionContext) -> str:
    """Replace every placeholder in *text* in a single left-to-right pass."""
    if "$" not in text:
        return text

    def _replace(match: re.Match[str]) -> str:
        opposite, digit, symbol, name = match.groups()
        if opposite:
            return opposite_direction(context.arg(int(opposite)))
        if digit:
            if digit == "0":
                return context.matched_text
            return context.arg(int(digit))
        if symbol == "*":
            return " ".join(context.args)
        if symbol == "-":
            return " ".join(context.args[:-1])
        if symbol == "!":
            return context.args[-1] if context.args else ""
        if name == "me":
            return _character_name(context, capitalized=False)
        if name == "Me":
            return _character_name(context, capitalized=True)
        if name == "line":
            return context.line
        return context.lookup_variable(name) or ""

    return _PLACEHOLDER.sub(_replace, text)
