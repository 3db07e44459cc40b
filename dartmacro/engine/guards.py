"""Trigger guards: per-rule cooldown tracking and a global fire-rate limit."""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Callable, Hashable, Iterable

LOGGER = logging.getLogger("TriggerGuard")

Clock = Callable[[], float]


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class CooldownTracker:
    """In-memory last-fired timestamps (reset on disconnect).

    key: any hashable rule key
    """

    def __init__(self, clock: Clock = monotonic_ms) -> None:
        self._clock = clock
        self._last_fired: dict[Hashable, float] = {}

    def now(self) -> float:
        return self._clock()

    def is_on_cooldown(self, key: Hashable, cooldown_ms: int, now: float | None = None) -> bool:
        if cooldown_ms <= 0:
            return False
        last = self._last_fired.get(key)
        if last is None:
            return False
        current = self.now() if now is None else now
        return current - last < cooldown_ms

    def record(self, key: Hashable, now: float | None = None) -> None:
        """Record a fire. Only called once a match has actually been emitted."""
        self._last_fired[key] = self.now() if now is None else now

    def prune(self, active_keys: Iterable[Hashable]) -> None:
        """Forget keys of rules that no longer exist."""
        keep = set(active_keys)
        for key in list(self._last_fired):
            if key not in keep:
                del self._last_fired[key]

    def reset(self) -> None:
        self._last_fired.clear()

    def __len__(self) -> int:
        return len(self._last_fired)


class FireRateLimiter:
    """Caps trigger fires per rolling second across all triggers."""

    def __init__(self, max_per_second: int = 20, clock: Clock = monotonic_ms) -> None:
        self.max_per_second = max_per_second
        self._clock = clock
        self._recent: deque[float] = deque()
        self._warned = False

    def _prune(self, now: float) -> None:
        while self._recent and now - self._recent[0] >= 1000.0:
            self._recent.popleft()

    def allow(self, now: float | None = None) -> bool:
        current = self._clock() if now is None else now
        self._prune(current)
        if self.max_per_second > 0 and len(self._recent) >= self.max_per_second:
            if not self._warned:
                LOGGER.warning(
                    f"Trigger rate limit reached ({self.max_per_second}/s), skipping further fires"
                )
                self._warned = True
            return False
        self._warned = False
        return True

    def record(self, now: float | None = None) -> None:
        self._recent.append(self._clock() if now is None else now)

    def reset(self) -> None:
        self._recent.clear()
        self._warned = False
