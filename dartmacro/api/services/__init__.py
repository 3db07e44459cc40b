from .alias_service import AliasService
from .base import MacroService
from .timer_service import TimerService
from .trigger_service import TriggerService
from .variable_service import VariableService

SERVICES: dict[str, type[MacroService]] = {
    "aliases": AliasService,
    "triggers": TriggerService,
    "timers": TimerService,
    "variables": VariableService,
}

__all__ = [
    "SERVICES",
    "AliasService",
    "MacroService",
    "TimerService",
    "TriggerService",
    "VariableService",
]
