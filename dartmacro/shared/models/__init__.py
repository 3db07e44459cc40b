"""Shared data models for the macro engine."""

from .alias import ALIAS_MATCH_MODES, Alias
from .base import DEFAULT_GROUP, GLOBAL_KEY, SCOPES, Scope
from .timer import Timer
from .trigger import TRIGGER_MATCH_MODES, Trigger
from .variable import Variable

__all__ = [
    "ALIAS_MATCH_MODES",
    "Alias",
    "DEFAULT_GROUP",
    "GLOBAL_KEY",
    "SCOPES",
    "Scope",
    "TRIGGER_MATCH_MODES",
    "Timer",
    "Trigger",
    "Variable",
]
