from __future__ import annotations

from datetime import UTC, datetime

import pytest

from dartmacro.engine.executor import ExpansionExecutor
from dartmacro.shared.cache import clear_pattern_cache
from dartmacro.shared.models import Alias, Trigger
from dartmacro.shared.repositories import VariableRepository

_EPOCH = datetime(2024, 1, 1, tzinfo=UTC)


class FakeClock:
    """Millisecond clock the tests move by hand."""

    def __init__(self, start: float = 10_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


def make_alias(pattern: str, body: str, match_mode: str = "prefix", **kwargs) -> Alias:
    return Alias(
        id=kwargs.pop("id", f"a-{pattern}"),
        pattern=pattern,
        match_mode=match_mode,
        body=body,
        created_at=_EPOCH,
        updated_at=_EPOCH,
        **kwargs,
    )


def make_trigger(pattern: str, body: str = "", match_mode: str = "substring", **kwargs) -> Trigger:
    return Trigger(
        id=kwargs.pop("id", f"t-{pattern}"),
        pattern=pattern,
        match_mode=match_mode,
        body=body,
        created_at=_EPOCH,
        updated_at=_EPOCH,
        **kwargs,
    )


@pytest.fixture(autouse=True)
def _fresh_pattern_cache():
    clear_pattern_cache()
    yield
    clear_pattern_cache()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def variables() -> VariableRepository:
    return VariableRepository()


@pytest.fixture
def aliases() -> list[Alias]:
    return []


@pytest.fixture
def executor(aliases, variables) -> ExpansionExecutor:
    return ExpansionExecutor(lambda: aliases, variables, lambda: "Gandalf", lambda: True)
