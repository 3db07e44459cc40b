"""Scope-partitioned repositories for every macro record kind."""

from .alias import AliasRepository
from .base import ScopedRepository
from .timer import TimerRepository
from .trigger import TriggerRepository
from .variable import VariableRepository

__all__ = [
    "AliasRepository",
    "ScopedRepository",
    "TimerRepository",
    "TriggerRepository",
    "VariableRepository",
]
