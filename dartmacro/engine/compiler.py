"""Body compiler: macro source text -> list of command segments.

Syntax:
    cmd1;cmd2            ``;`` (or a newline) separates commands
    a\\;b                 literal semicolon, sent as ``a;b``
    /delay <ms>          pause the sequence
    /echo <text>         print locally, never sent
    /spam <N> <cmd>      repeat <cmd> N times (1..1000)
    /var <name> <value>  set a character variable (-g: global, -d <name>: delete,
                         bare /var: list)
    /convert <amount>    currency conversion, echoed locally

Every directive may also be spelled with ``#`` (``#echo``, ``#delay`` ...).
Malformed directives are not errors: the raw text becomes a plain send.
Compilation is pure; nothing is resolved or executed here.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

SPAM_LIMIT = 1000


@dataclass(frozen=True)
class SendSegment:
    text: str
    type: str = "send"


@dataclass(frozen=True)
class DelaySegment:
    ms: int
    type: str = "delay"


@dataclass(frozen=True)
class EchoSegment:
    text: str
    type: str = "echo"


@dataclass(frozen=True)
class SpamSegment:
    count: int
    text: str  # inner command source, compiled again on every repetition
    type: str = "spam"


@dataclass(frozen=True)
class VarSetSegment:
    name: str
    text: str
    scope: str = "character"  # 'character' | 'global'
    delete: bool = False
    type: str = "varset"


@dataclass(frozen=True)
class VarListSegment:
    type: str = "varlist"


@dataclass(frozen=True)
class ConvertSegment:
    amount_expr: str
    type: str = "convert"


Segment = (
    SendSegment
    | DelaySegment
    | EchoSegment
    | SpamSegment
    | VarSetSegment
    | VarListSegment
    | ConvertSegment
)

_DIRECTIVE_PATTERN = re.compile(r"[/#](delay|echo|spam|var|convert)(?:\s+(.*))?", re.I | re.S)
# Inside a /spam command the local-only directives may drop their prefix:
# "/spam 3 echo x" echoes three times.
_BARE_DIRECTIVE_PATTERN = re.compile(r"[/#]?(delay|echo)\s+(.*)", re.I | re.S)
_DELAY_ARGS = re.compile(r"\d+")
_SPAM_ARGS = re.compile(r"(\d+)\s+(\S.*)", re.S)
_VAR_SET_ARGS = re.compile(r"(?:(-g)\s+)?([A-Za-z_]\w*)\s+(.*)", re.S)
_VAR_DELETE_ARGS = re.compile(r"-d\s+([A-Za-z_]\w*)")


def split_commands(body: str) -> list[str]:
    """Split on unescaped ``;`` and newlines, unescaping ``\\;``.

    Empty pieces are kept; callers skip them after trimming.
    """
    parts: list[str] = []
    current: list[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and body[i + 1 : i + 2] == ";":
            current.append(";")
            i += 2
            continue
        if ch == ";" or ch == "\n":
            parts.append("".join(current))
            current = []
        elif ch != "\r":
            current.append(ch)
        i += 1
    parts.append("".join(current))
    return parts


def split_first(text: str) -> tuple[str, str | None]:
    """Cut *text* at its first unescaped separator.

    The head is unescaped like ``split_commands`` does; the tail is returned
    untouched (``None`` when there is no separator) so it can be matched again.
    """
    i = 0
    while i < len(text):
        if text[i] == "\\" and text[i + 1 : i + 2] == ";":
            i += 2
            continue
        if text[i] in ";\n":
            return split_commands(text[:i])[0], text[i + 1 :]
        i += 1
    return split_commands(text)[0], None


def parse_segment(
    text: str, spam_limit: int = SPAM_LIMIT, *, bare_directives: bool = False
) -> Segment:
    """Classify one already-split, trimmed command."""
    match = _DIRECTIVE_PATTERN.fullmatch(text)
    if match is None and bare_directives:
        match = _BARE_DIRECTIVE_PATTERN.fullmatch(text)
    if not match:
        return SendSegment(text)

    directive = match.group(1).lower()
    args = (match.group(2) or "").strip()

    if directive == "delay":
        if _DELAY_ARGS.fullmatch(args):
            return DelaySegment(int(args))
    elif directive == "echo":
        if args:
            return EchoSegment(args)
    elif directive == "spam":
        spam = _SPAM_ARGS.fullmatch(args)
        if spam and int(spam.group(1)) > 0:
            return SpamSegment(min(int(spam.group(1)), spam_limit), spam.group(2).strip())
    elif directive == "var":
        if not args:
            return VarListSegment()
        delete = _VAR_DELETE_ARGS.fullmatch(args)
        if delete:
            return VarSetSegment(delete.group(1), "", delete=True)
        setter = _VAR_SET_ARGS.fullmatch(args)
        if setter:
            scope = "global" if setter.group(1) else "character"
            return VarSetSegment(setter.group(2), setter.group(3).strip(), scope=scope)
    elif directive == "convert":
        if args:
            return ConvertSegment(args)

    return SendSegment(text)


def compile_body(
    body: str, spam_limit: int = SPAM_LIMIT, *, bare_directives: bool = False
) -> list[Segment]:
    """Compile a macro body into its ordered list of segments."""
    segments: list[Segment] = []
    for piece in split_commands(body):
        trimmed = piece.strip()
        if trimmed:
            segments.append(parse_segment(trimmed, spam_limit, bare_directives=bare_directives))
    return segments
