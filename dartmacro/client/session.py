"""Macro session: wires the engine to one connection and one display.

The host hands the session every typed line (``handle_input``) and every
line of game output (``handle_output``) and reports connection state. The
session owns the repositories, the executor, the scheduler, trigger guard
state and the timer manager for the active character.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

from ..engine.executor import ExpansionExecutor, Step
from ..engine.guards import Clock, CooldownTracker, FireRateLimiter, monotonic_ms
from ..engine.matcher import TriggerMatch, TriggerMatcher, strip_ansi
from ..engine.scheduler import Scheduler, Sleep
from ..shared.datastore import JsonDataStore
from ..shared.repositories import (
    AliasRepository,
    ScopedRepository,
    TimerRepository,
    TriggerRepository,
    VariableRepository,
)
from .components.timer_manager import TimerManager
from .core.config import ClientSettings, get_settings

LOGGER = logging.getLogger("MacroSession")

SETTINGS_FILE = "settings.json"
SPEEDWALK_KEY = "enableSpeedwalk"
SOUND_CHANNEL = "trigger"


class Display(Protocol):
    def echo(self, text: str) -> Any: ...

    def apply_gag(self, line_id: Any) -> Any: ...

    def apply_highlight(self, line_id: Any, code: str) -> Any: ...

    def play_sound(self, channel: str) -> Any: ...


@dataclass
class OutputResult:
    """What the display should do with one output line."""

    matches: list[TriggerMatch] = field(default_factory=list)
    gag: bool = False
    highlight: str | None = None
    sound: bool = False


class MacroSession:
    def __init__(
        self,
        send: Callable[[str], Any],
        display: Display | None = None,
        settings: ClientSettings | None = None,
        store: JsonDataStore | None = None,
        *,
        sleep: Sleep = asyncio.sleep,
        clock: Clock = monotonic_ms,
    ) -> None:
        self.settings = settings or get_settings()
        self.store = store if store is not None else JsonDataStore(self.settings.data_dir)
        self._send = send
        self.display = display

        self.aliases = AliasRepository(self.store)
        self.triggers = TriggerRepository(self.store)
        self.timers = TimerRepository(self.store)
        self.variables = VariableRepository(self.store)

        self.enable_speedwalk = self.settings.enable_speedwalk
        self._connected = False
        self.logged_in = False

        self.executor = ExpansionExecutor(
            self.aliases.list_enabled,
            self.variables,
            lambda: self.character,
            lambda: self.enable_speedwalk,
            max_depth=self.settings.max_expansion_depth,
            max_steps=self.settings.max_expansion_steps,
            spam_limit=self.settings.spam_limit,
        )
        self.scheduler = Scheduler(self, sleep)
        self.trigger_matcher = TriggerMatcher(
            CooldownTracker(clock),
            FireRateLimiter(self.settings.trigger_fires_per_second, clock),
        )
        self.timer_manager = TimerManager(
            self.timers.merged,
            self.executor,
            self.scheduler,
            self.settings,
            sleep,
            on_fired=self.save_variables,
        )
        self._saves: set[asyncio.Task] = set()

    @property
    def repositories(self) -> dict[str, ScopedRepository]:
        return {
            "aliases": self.aliases,
            "triggers": self.triggers,
            "timers": self.timers,
            "variables": self.variables,
        }

    @property
    def character(self) -> str | None:
        return self.aliases.character

    # --- CommandIO ---

    @property
    def connected(self) -> bool:
        return self._connected

    def send(self, text: str) -> Any:
        return self._send(text)

    def echo(self, text: str) -> Any:
        if self.display is None:
            LOGGER.info(f"[echo] {text}")
            return None
        return self.display.echo(text)

    # --- persistence ---

    async def load(self) -> None:
        """Load global records and saved settings."""
        for repo in self.repositories.values():
            await repo.load_global()
        saved = await self.store.get(SETTINGS_FILE, SPEEDWALK_KEY)
        if saved is not None:
            self.enable_speedwalk = bool(saved)
        LOGGER.info(
            f"Loaded {len(self.aliases.merged())} aliases, {len(self.triggers.merged())} triggers, "
            f"{len(self.timers.merged())} timers, {len(self.variables.merged())} variables"
        )

    async def flush(self) -> None:
        if self._saves:
            await asyncio.gather(*self._saves, return_exceptions=True)
        for repo in self.repositories.values():
            await repo.flush()

    def save_variables(self) -> asyncio.Task | None:
        """Persist /var writes from the last expansion in the background."""
        if not self.variables.dirty:
            return None
        task = asyncio.get_running_loop().create_task(self.variables.flush())
        self._saves.add(task)
        task.add_done_callback(self._save_done)
        return task

    def _save_done(self, task: asyncio.Task) -> None:
        self._saves.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            LOGGER.error(f"Failed to save variables: {type(error).__name__}: {error}")

    async def set_speedwalk(self, enabled: bool) -> None:
        self.enable_speedwalk = enabled
        await self.store.set(SETTINGS_FILE, SPEEDWALK_KEY, enabled)
        await self.store.save(SETTINGS_FILE)

    # --- lines ---

    def handle_input(self, line: str) -> asyncio.Task | None:
        """Expand a typed line and schedule it. Needs a running event loop."""
        steps = self.executor.expand_input(line)
        self.save_variables()
        return self.scheduler.spawn(steps)

    def handle_output(self, raw_line: str, line_id: Any = None) -> OutputResult:
        """Run triggers against one output line and report display effects."""
        clean = strip_ansi(raw_line)
        matches = self.trigger_matcher.match_triggers(clean, raw_line, self.triggers.list_enabled())
        result = OutputResult(matches=matches)
        for match in matches:
            trigger = match.rule
            result.gag = result.gag or trigger.gag
            result.sound = result.sound or trigger.sound_alert
            if result.highlight is None and trigger.highlight:
                result.highlight = trigger.highlight
            self.scheduler.spawn(self.executor.expand_trigger(match))
        if matches:
            self.save_variables()

        if self.display is not None and line_id is not None:
            if result.gag:
                self.display.apply_gag(line_id)
            elif result.highlight:
                self.display.apply_highlight(line_id, result.highlight)
        if self.display is not None and result.sound:
            self.display.play_sound(SOUND_CHANNEL)
        return result

    def preview(self, body: str, sample_input: str = "", **kwargs: Any) -> list[Step]:
        return self.executor.preview_expand(body, sample_input, **kwargs)

    # --- connection lifecycle ---

    def on_connected(self) -> None:
        self._connected = True
        LOGGER.info("Connected")

    def on_logged_in(self) -> None:
        """Timers only run while connected and logged in."""
        self.logged_in = True
        if self._connected:
            self.timer_manager.start()

    def on_disconnected(self) -> None:
        self._connected = False
        self.logged_in = False
        self.scheduler.cancel_all()
        self.timer_manager.stop()
        self.trigger_matcher.reset()
        LOGGER.info("Disconnected, pending sequences and timers cleared")

    async def switch_character(self, character: str | None) -> None:
        """Tear down in-flight work, then swap every character-scope map."""
        self.scheduler.cancel_all()
        self.timer_manager.stop()
        for repo in self.repositories.values():
            await repo.switch_character(character)
        LOGGER.info(f"Active character: {character or '(none)'}")
        if self._connected and self.logged_in:
            self.timer_manager.start()
