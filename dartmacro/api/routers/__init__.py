from . import aliases_router, session_router, timers_router, triggers_router, variables_router

__all__ = [
    "aliases_router",
    "session_router",
    "timers_router",
    "triggers_router",
    "variables_router",
]
