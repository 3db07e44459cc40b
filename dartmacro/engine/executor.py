"""Expansion executor: turns typed commands, trigger fires and timer fires
into a flat, ordered list of executable steps.

The walk is eager: bodies are compiled, each segment is resolved right
before it is executed, ``/var`` writes land in the Variable Store as they
are reached (so later placeholders in the same body see them) and plain
sends are fed back through alias matching one level deeper.

Every top-level expansion carries one budget: a nesting depth, a number of
emitted steps and a number of executed segments. Running out of depth
echoes a notice and sends the command unexpanded; running out of steps or
work stops the expansion and appends a local error echo.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from ..shared.errors import MacroValidationError
from ..shared.models.alias import Alias
from ..shared.models.base import Scope
from ..shared.models.timer import Timer
from ..shared.validation import validate_variable_name
from .compiler import (
    SPAM_LIMIT,
    ConvertSegment,
    DelaySegment,
    EchoSegment,
    Segment,
    SendSegment,
    SpamSegment,
    VarListSegment,
    VarSetSegment,
    compile_body,
    parse_segment,
    split_first,
)
from .currency import convert_to_lines
from .directions import DIRECTIONS
from .matcher import AliasMatch, TriggerMatch, match_alias, match_aliases
from .resolver import SubstitutionContext, resolve

LOGGER = logging.getLogger("ExpansionExecutor")

MAX_EXPANSION_DEPTH = 10
MAX_EXPANSION_STEPS = 2000
RECURSION_MESSAGE = "[Alias recursion limit reached]"


@dataclass(frozen=True)
class SendStep:
    text: str
    type: str = "send"


@dataclass(frozen=True)
class DelayStep:
    ms: int
    type: str = "delay"


@dataclass(frozen=True)
class EchoStep:
    text: str
    type: str = "echo"


Step = SendStep | DelayStep | EchoStep


# --- speedwalk ---

_DIRECTION_ALTERNATION = "|".join(re.escape(d) for d in DIRECTIONS)
SPEEDWALK_LINE = re.compile(rf"(?:\d+(?:{_DIRECTION_ALTERNATION}))+", re.I)
_SPEEDWALK_GROUP = re.compile(rf"(\d+)({_DIRECTION_ALTERNATION})", re.I)


def is_speedwalk(text: str) -> bool:
    return SPEEDWALK_LINE.fullmatch(text.strip()) is not None


def expand_speedwalk(text: str) -> list[str]:
    """``3n2e`` -> ``['n', 'n', 'n', 'e', 'e']``. Non-speedwalk text gives ``[]``."""
    text = text.strip()
    if not is_speedwalk(text):
        return []
    directions: list[str] = []
    for count, direction in _SPEEDWALK_GROUP.findall(text):
        directions.extend([direction.lower()] * int(count))
    return directions


# --- variable access ---


class VariableStore(Protocol):
    def lookup(self, name: str) -> str | None: ...

    def set_value(self, name: str, value: str, scope: Scope = "character") -> object: ...

    def delete_by_name(self, name: str) -> bool: ...

    def visible(self) -> list[tuple[str, str]]: ...


class VariableOverlay:
    """Copy-on-write view over a store; writes never reach the store below.

    Used for previews so a dry run of ``/var`` cannot change real state.
    """

    def __init__(self, base: VariableStore) -> None:
        self.base = base
        self._values: dict[str, tuple[str, str]] = {}  # lowered -> (name, value)
        self._deleted: set[str] = set()

    def lookup(self, name: str) -> str | None:
        key = name.lower()
        if key in self._values:
            return self._values[key][1]
        if key in self._deleted:
            return None
        return self.base.lookup(name)

    def set_value(self, name: str, value: str, scope: Scope = "character") -> None:
        name = validate_variable_name(name)
        self._values[name.lower()] = (name, value)
        self._deleted.discard(name.lower())

    def delete_by_name(self, name: str) -> bool:
        key = name.lower()
        existed = self.lookup(name) is not None
        self._values.pop(key, None)
        self._deleted.add(key)
        return existed

    def visible(self) -> list[tuple[str, str]]:
        pairs = [pair for pair in self.base.visible() if pair[0].lower() not in self._deleted]
        shadowed = set(self._values)
        pairs = [pair for pair in pairs if pair[0].lower() not in shadowed]
        return [*self._values.values(), *pairs]


# --- budget ---


class ExpansionLimitExceeded(Exception):
    """Raised inside a walk when the step or work budget is spent."""


@dataclass
class _Expansion:
    variables: VariableStore
    speedwalk: bool
    max_steps: int
    max_work: int
    steps: list[Step] = field(default_factory=list)
    work: int = 0

    def emit(self, step: Step) -> None:
        if len(self.steps) >= self.max_steps:
            raise ExpansionLimitExceeded(f"more than {self.max_steps} steps")
        self.steps.append(step)

    def tick(self) -> None:
        self.work += 1
        if self.work > self.max_work:
            raise ExpansionLimitExceeded(f"more than {self.max_work} commands evaluated")


class ExpansionExecutor:
    """Expands input lines, trigger matches and timer bodies into steps.

    aliases: callable returning the merged, priority-ordered alias list
    variables: the Variable Store (``lookup``/``set_value``/``delete_by_name``)
    active_character: callable returning the active character or ``None``
    speedwalk_enabled: callable returning the current speedwalk toggle
    """

    def __init__(
        self,
        aliases: Callable[[], Sequence[Alias]],
        variables: VariableStore,
        active_character: Callable[[], str | None] = lambda: None,
        speedwalk_enabled: Callable[[], bool] = lambda: True,
        *,
        max_depth: int = MAX_EXPANSION_DEPTH,
        max_steps: int = MAX_EXPANSION_STEPS,
        spam_limit: int = SPAM_LIMIT,
    ) -> None:
        self.aliases = aliases
        self.variables = variables
        self.active_character = active_character
        self.speedwalk_enabled = speedwalk_enabled
        self.max_depth = max_depth
        self.max_steps = max_steps
        self.spam_limit = spam_limit

    # --- entry points ---

    def expand_input(self, line: str) -> list[Step]:
        """Expand one typed line. A line nothing intercepts is sent verbatim."""
        if not line.strip():
            return [SendStep(line)]
        expansion = self._start(self.variables, speedwalk=self.speedwalk_enabled())
        self._guarded(expansion, lambda: self._expand_typed(line, expansion))
        return expansion.steps

    def expand_trigger(self, match: TriggerMatch) -> list[Step]:
        context = self._context(match.captures, match.captured_text, match.clean_line)
        expansion = self._start(self.variables, speedwalk=False)
        self._guarded(expansion, lambda: self._run_body(match.rule.body, context, 1, expansion))
        return expansion.steps

    def expand_timer(self, timer: Timer) -> list[Step]:
        context = self._context([], "", "")
        expansion = self._start(self.variables, speedwalk=False)
        self._guarded(expansion, lambda: self._run_body(timer.body, context, 1, expansion))
        return expansion.steps

    def preview_expand(
        self,
        body: str,
        sample_input: str = "",
        pattern: str | None = None,
        match_mode: str = "prefix",
    ) -> list[Step]:
        """Dry-run *body* as if an alias had matched *sample_input*.

        With a *pattern* the sample is matched like a real alias would be
        (no match gives no steps); without one the sample's words are the
        arguments. Variable writes go to an overlay and are discarded.
        """
        if pattern:
            probe = Alias(id="preview", pattern=pattern, match_mode=match_mode, body=body)
            found = match_alias(sample_input, probe)
            if found is None:
                return []
            context = self._context(found.args, found.captured_text, found.clean_line)
        else:
            context = self._context(sample_input.split(), sample_input.strip(), sample_input)

        expansion = self._start(VariableOverlay(self.variables), speedwalk=self.speedwalk_enabled())
        self._guarded(expansion, lambda: self._run_body(body, context, 1, expansion))
        return expansion.steps

    # --- walk ---

    def _start(self, variables: VariableStore, *, speedwalk: bool) -> _Expansion:
        return _Expansion(
            variables=variables,
            speedwalk=speedwalk,
            max_steps=self.max_steps,
            max_work=self.max_steps * 10,
        )

    def _guarded(self, expansion: _Expansion, walk: Callable[[], None]) -> None:
        try:
            walk()
        except ExpansionLimitExceeded as e:
            LOGGER.warning(f"Expansion stopped: {e}")
            expansion.steps.append(EchoStep(f"[Expansion stopped: {e}]"))

    def _context(
        self, args: Sequence[str], matched_text: str, line: str
    ) -> SubstitutionContext:
        return SubstitutionContext(
            args=list(args),
            matched_text=matched_text,
            line=line,
            active_character=self.active_character(),
        )

    def _expand_typed(self, line: str, expansion: _Expansion) -> None:
        """Walk a typed line command by command.

        A prefix alias that matches the rest of the line with arguments
        consumes all of it, separators included, so ``$*`` can carry ``;``.
        """
        remaining: str | None = line
        whole_line = True
        while remaining is not None and remaining.strip():
            rules = self.aliases()
            found = match_aliases(remaining.strip(), rules)
            if found and found[0].rule.match_mode == "prefix" and found[0].args:
                self._run_alias(found[0], 0, expansion)
                return

            command, remaining = split_first(remaining)
            if whole_line and remaining is None:
                # a lone command keeps its surrounding whitespace for exact aliases
                self._expand_command(command, 0, expansion, typed=True)
                return
            whole_line = False
            if command.strip():
                self._expand_command(command.strip(), 0, expansion, typed=True)

    def _expand_command(
        self, command: str, depth: int, expansion: _Expansion, *, typed: bool = False
    ) -> None:
        """One command that may be a speedwalk or hit an alias."""
        expansion.tick()
        trimmed = command.strip()
        if depth >= self.max_depth:
            LOGGER.warning(f"Alias recursion limit reached at {trimmed!r}")
            expansion.emit(EchoStep(RECURSION_MESSAGE))
            expansion.emit(SendStep(trimmed))
            return

        if expansion.speedwalk and trimmed:
            directions = expand_speedwalk(trimmed)
            if directions:
                for direction in directions:
                    self._expand_command(direction, depth + 1, expansion)
                return

        found = match_aliases(command, self.aliases())
        if found:
            self._run_alias(found[0], depth, expansion)
            return

        if typed:
            segment = parse_segment(trimmed, self.spam_limit)
            if not isinstance(segment, SendSegment):
                context = self._context([], "", trimmed)
                context.lookup_variable = expansion.variables.lookup
                self._execute(segment, context, depth, expansion)
                return
        expansion.emit(SendStep(command))

    def _run_alias(self, match: AliasMatch, depth: int, expansion: _Expansion) -> None:
        LOGGER.debug(f"Alias {match.rule.pattern!r} matched {match.clean_line!r}")
        context = self._context(match.args, match.captured_text, match.clean_line)
        self._run_body(match.rule.body, context, depth + 1, expansion)

    def _run_body(
        self,
        body: str,
        context: SubstitutionContext,
        depth: int,
        expansion: _Expansion,
        *,
        bare_directives: bool = False,
    ) -> None:
        context.lookup_variable = expansion.variables.lookup
        for segment in compile_body(body, self.spam_limit, bare_directives=bare_directives):
            self._execute(segment, context, depth, expansion)

    def _execute(
        self, segment: Segment, context: SubstitutionContext, depth: int, expansion: _Expansion
    ) -> None:
        expansion.tick()

        if isinstance(segment, SendSegment):
            text = resolve(segment.text, context)
            if text.strip():
                self._expand_command(text, depth, expansion)
        elif isinstance(segment, DelaySegment):
            expansion.emit(DelayStep(segment.ms))
        elif isinstance(segment, EchoSegment):
            expansion.emit(EchoStep(resolve(segment.text, context)))
        elif isinstance(segment, SpamSegment):
            for _ in range(segment.count):
                self._run_body(segment.text, context, depth, expansion, bare_directives=True)
        elif isinstance(segment, VarSetSegment):
            self._execute_var(segment, context, expansion)
        elif isinstance(segment, VarListSegment):
            pairs = expansion.variables.visible()
            if not pairs:
                expansion.emit(EchoStep("[var] no variables defined"))
            for name, value in pairs:
                expansion.emit(EchoStep(f"[var] {name} = {value}"))
        elif isinstance(segment, ConvertSegment):
            for text in convert_to_lines(resolve(segment.amount_expr, context)):
                expansion.emit(EchoStep(text))

    def _execute_var(
        self, segment: VarSetSegment, context: SubstitutionContext, expansion: _Expansion
    ) -> None:
        if segment.delete:
            if not expansion.variables.delete_by_name(segment.name):
                expansion.emit(EchoStep(f"[var] no variable named {segment.name}"))
            return
        value = resolve(segment.text, context)
        try:
            expansion.variables.set_value(segment.name, value, segment.scope)  # type: ignore[arg-type]
        except MacroValidationError as e:
            expansion.emit(EchoStep(f"[var] {e}"))
