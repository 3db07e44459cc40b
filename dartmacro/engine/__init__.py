"""Command Macro Engine: matcher, compiler, resolver, executor and scheduler."""

from .compiler import compile_body, split_commands
from .executor import DelayStep, EchoStep, ExpansionExecutor, SendStep, Step
from .matcher import TriggerMatcher, match_aliases, strip_ansi
from .resolver import SubstitutionContext, resolve
from .scheduler import Scheduler

__all__ = [
    "DelayStep",
    "EchoStep",
    "ExpansionExecutor",
    "Scheduler",
    "SendStep",
    "Step",
    "SubstitutionContext",
    "TriggerMatcher",
    "compile_body",
    "match_aliases",
    "resolve",
    "split_commands",
    "strip_ansi",
]
