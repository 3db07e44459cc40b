"""Preview, settings and session API routes."""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ...client.session import MacroSession
from ...shared.models.alias import ALIAS_MATCH_MODES
from ...shared.validation import validate_match_mode, validate_pattern
from ..dependencies import get_session
from .errors import http_errors

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["session"])


# ============================================
# Request / Response Models
# ============================================


class PreviewRequest(BaseModel):
    body: str
    sample_input: str = ""
    pattern: str | None = None
    match_mode: str = "prefix"


class PreviewStep(BaseModel):
    type: str
    text: str | None = None
    ms: int | None = None


class PreviewResponse(BaseModel):
    steps: list[PreviewStep]


class SpeedwalkSetting(BaseModel):
    enabled: bool


class CharacterRequest(BaseModel):
    character: str | None = None


class SessionStatus(BaseModel):
    status: str
    connected: bool
    logged_in: bool
    character: str | None = None
    running_timers: int
    pending_sequences: int


def _status(session: MacroSession) -> SessionStatus:
    return SessionStatus(
        status="healthy",
        connected=session.connected,
        logged_in=session.logged_in,
        character=session.character,
        running_timers=session.timer_manager.running,
        pending_sequences=session.scheduler.pending,
    )


# ============================================
# Endpoints
# ============================================


@router.post("/preview", response_model=PreviewResponse)
async def preview_expand(
    body: PreviewRequest, session: MacroSession = Depends(get_session)
) -> PreviewResponse:
    """Dry-run a body; variables written by ``/var`` are discarded."""
    with http_errors():
        if body.pattern:
            validate_match_mode(body.match_mode, ALIAS_MATCH_MODES)
            validate_pattern(body.pattern, body.match_mode)
        steps = session.preview(
            body.body, body.sample_input, pattern=body.pattern, match_mode=body.match_mode
        )
    return PreviewResponse(steps=[PreviewStep(**asdict(step)) for step in steps])


@router.get("/settings/speedwalk", response_model=SpeedwalkSetting)
async def get_speedwalk(session: MacroSession = Depends(get_session)) -> SpeedwalkSetting:
    return SpeedwalkSetting(enabled=session.enable_speedwalk)


@router.put("/settings/speedwalk", response_model=SpeedwalkSetting)
async def set_speedwalk(
    body: SpeedwalkSetting, session: MacroSession = Depends(get_session)
) -> SpeedwalkSetting:
    await session.set_speedwalk(body.enabled)
    logger.info(f"Speedwalk {'enabled' if body.enabled else 'disabled'}")
    return SpeedwalkSetting(enabled=session.enable_speedwalk)


@router.put("/session/character", response_model=SessionStatus)
async def switch_character(
    body: CharacterRequest, session: MacroSession = Depends(get_session)
) -> SessionStatus:
    """Swap the character scope (empty name clears it)."""
    await session.switch_character((body.character or "").strip() or None)
    return _status(session)


@router.get("/health", response_model=SessionStatus)
async def health(session: MacroSession = Depends(get_session)) -> SessionStatus:
    return _status(session)
