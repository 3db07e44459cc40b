"""Pattern matcher for aliases (typed input) and triggers (game output).

Rules are visited in the order given, which callers build as character scope
first, then global, insertion order inside each scope.

Aliases are exclusive: the first matching alias wins and at most one alias
applies to a command. Triggers are not: every enabled trigger that matches
and is not cooling down fires.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..shared.cache import compile_pattern
from ..shared.models.alias import Alias
from ..shared.models.trigger import Trigger
from .guards import CooldownTracker, FireRateLimiter

logger = logging.getLogger(__name__)

POSITIONAL_LIMIT = 9

_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]|\x1b[@-Z\\-_]")


def strip_ansi(line: str) -> str:
    """Drop ANSI escape sequences and trailing CR/LF from a game output line."""
    return _ANSI_ESCAPE.sub("", line).rstrip("\r\n")


@dataclass
class AliasMatch:
    rule: Alias
    captured_text: str
    args: list[str] = field(default_factory=list)  # every positional argument
    raw_line: str = ""
    clean_line: str = ""

    @property
    def captures(self) -> list[str]:
        """``$1..$9``; arguments past the ninth are only reachable via ``$*``."""
        return self.args[:POSITIONAL_LIMIT]


@dataclass
class TriggerMatch:
    rule: Trigger
    captured_text: str
    captures: list[str] = field(default_factory=list)
    raw_line: str = ""
    clean_line: str = ""


def _groups(match: Any) -> list[str]:
    return [group if group is not None else "" for group in match.groups()]


def match_alias(line: str, alias: Alias) -> AliasMatch | None:
    """Match one alias against one command.

    ``exact`` compares the command byte for byte. ``prefix`` compares the
    leading token case-insensitively and splits the rest on whitespace.
    ``regex`` must cover the whole (trimmed) command.
    """
    if alias.match_mode == "exact":
        if line == alias.pattern:
            return AliasMatch(alias, line, [], line, line)
        return None

    candidate = line.strip()
    if not candidate:
        return None

    if alias.match_mode == "prefix":
        pattern = alias.pattern.lower()
        lowered = candidate.lower()
        if lowered == pattern:
            return AliasMatch(alias, candidate, [], line, candidate)
        if lowered.startswith(pattern) and candidate[len(pattern) : len(pattern) + 1] == " ":
            rest = candidate[len(pattern) :].split()
            return AliasMatch(alias, candidate, rest, line, candidate)
        return None

    if alias.match_mode == "regex":
        compiled = compile_pattern(alias.pattern)
        if compiled is None:
            return None
        found = compiled.fullmatch(candidate)
        if found is None:
            return None
        args = _groups(found) if compiled.groups else candidate.split()[1:]
        return AliasMatch(alias, found.group(0), args, line, candidate)

    logger.debug(f"Alias {alias.id} has unknown match mode {alias.match_mode!r}")
    return None


def match_aliases(line: str, rules: Sequence[Alias]) -> list[AliasMatch]:
    """Return the first matching enabled alias as a one-element list, or ``[]``."""
    for alias in rules:
        if not alias.enabled:
            continue
        found = match_alias(line, alias)
        if found is not None:
            return [found]
    return []


def match_trigger(stripped_line: str, raw_line: str, trigger: Trigger) -> TriggerMatch | None:
    if trigger.match_mode == "exact":
        if stripped_line == trigger.pattern:
            return TriggerMatch(trigger, stripped_line, [], raw_line, stripped_line)
        return None

    if trigger.match_mode == "substring":
        if not trigger.pattern:
            return None
        index = stripped_line.lower().find(trigger.pattern.lower())
        if index < 0:
            return None
        matched = stripped_line[index : index + len(trigger.pattern)]
        return TriggerMatch(trigger, matched, [], raw_line, stripped_line)

    if trigger.match_mode == "regex":
        compiled = compile_pattern(trigger.pattern)
        if compiled is None:
            return None
        found = compiled.search(stripped_line)
        if found is None:
            return None
        return TriggerMatch(trigger, found.group(0), _groups(found), raw_line, stripped_line)

    logger.debug(f"Trigger {trigger.id} has unknown match mode {trigger.match_mode!r}")
    return None


def cooldown_key(trigger: Trigger) -> tuple[str, Any]:
    # Ids may repeat across scopes; creation time tells the two records apart.
    return (trigger.id, trigger.created_at)


class TriggerMatcher:
    """Stateful trigger matcher: owns cooldown and rate-limit state."""

    PRUNE_EVERY = 100

    def __init__(
        self,
        cooldowns: CooldownTracker | None = None,
        rate_limiter: FireRateLimiter | None = None,
    ) -> None:
        self.cooldowns = cooldowns or CooldownTracker()
        self.rate_limiter = rate_limiter or FireRateLimiter()
        self._calls = 0

    def match_triggers(
        self, stripped_line: str, raw_line: str, rules: Iterable[Trigger]
    ) -> list[TriggerMatch]:
        rules = list(rules)
        now = self.cooldowns.now()

        self._calls += 1
        if self._calls >= self.PRUNE_EVERY:
            self._calls = 0
            self.cooldowns.prune(cooldown_key(rule) for rule in rules)

        matches: list[TriggerMatch] = []
        for trigger in rules:
            if not trigger.enabled:
                continue
            key = cooldown_key(trigger)
            if self.cooldowns.is_on_cooldown(key, trigger.cooldown_ms, now):
                continue
            found = match_trigger(stripped_line, raw_line, trigger)
            if found is None:
                continue
            if not self.rate_limiter.allow(now):
                break
            matches.append(found)
            self.cooldowns.record(key, now)
            self.rate_limiter.record(now)
            logger.debug(f"Trigger {trigger.pattern!r} matched: {stripped_line!r}")
        return matches

    def reset(self) -> None:
        """Forget cooldowns and recent fires (called on disconnect)."""
        self.cooldowns.reset()
        self.rate_limiter.reset()
