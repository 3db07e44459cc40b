"""Dependency injection utilities for FastAPI"""

from fastapi import Request

from ..client.session import MacroSession
from .services import AliasService, TimerService, TriggerService, VariableService


def get_session(request: Request) -> MacroSession:
    """The session the app was created with (stored on ``app.state``)."""
    return request.app.state.session


# ============================================
# Service Dependencies
# ============================================


def get_alias_service(request: Request) -> AliasService:
    return AliasService(get_session(request))


def get_trigger_service(request: Request) -> TriggerService:
    return TriggerService(get_session(request))


def get_timer_service(request: Request) -> TimerService:
    return TimerService(get_session(request))


def get_variable_service(request: Request) -> VariableService:
    return VariableService(get_session(request))
