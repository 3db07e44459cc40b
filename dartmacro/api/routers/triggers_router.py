"""Trigger API routes."""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ...shared.models.trigger import Trigger
from ..dependencies import get_trigger_service
from ..services import TriggerService
from .errors import http_errors

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/triggers", tags=["triggers"])


# ============================================
# Request / Response Models
# ============================================


class TriggerResponse(BaseModel):
    id: str
    scope: str
    pattern: str
    match_mode: str
    body: str
    enabled: bool
    group: str
    cooldown_ms: int
    gag: bool
    highlight: str | None = None
    sound_alert: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TriggerCreate(BaseModel):
    scope: str = "global"
    pattern: str
    match_mode: str = "substring"
    body: str = ""
    enabled: bool = True
    group: str | None = None
    cooldown_ms: int = 0
    gag: bool = False
    highlight: str | None = None
    sound_alert: bool = False


class TriggerUpdate(BaseModel):
    scope: str | None = None
    pattern: str | None = None
    match_mode: str | None = None
    body: str | None = None
    enabled: bool | None = None
    group: str | None = None
    cooldown_ms: int | None = None
    gag: bool | None = None
    highlight: str | None = None
    sound_alert: bool | None = None


def _response(scope: str, trigger: Trigger) -> TriggerResponse:
    return TriggerResponse(scope=scope, **asdict(trigger))


# ============================================
# Endpoints
# ============================================


@router.get("", response_model=list[TriggerResponse])
async def list_triggers(service: TriggerService = Depends(get_trigger_service)) -> list[TriggerResponse]:
    """All triggers in matching order (character scope first)."""
    return [_response(scope, trigger) for scope, trigger in service.list_records()]


@router.post("", response_model=TriggerResponse, status_code=201)
async def create_trigger(
    body: TriggerCreate, service: TriggerService = Depends(get_trigger_service)
) -> TriggerResponse:
    fields = body.model_dump(exclude={"scope"}, exclude_none=True)
    with http_errors():
        scope, trigger = await service.create(body.scope, fields)
    return _response(scope, trigger)


@router.put("/{scope}/{trigger_id}", response_model=TriggerResponse)
async def update_trigger(
    scope: str,
    trigger_id: str,
    body: TriggerUpdate,
    service: TriggerService = Depends(get_trigger_service),
) -> TriggerResponse:
    with http_errors():
        scope, trigger = await service.update(scope, trigger_id, body.model_dump(exclude_none=True))
    return _response(scope, trigger)


@router.patch("/{scope}/{trigger_id}/toggle", response_model=TriggerResponse)
async def toggle_trigger(
    scope: str, trigger_id: str, service: TriggerService = Depends(get_trigger_service)
) -> TriggerResponse:
    with http_errors():
        scope, trigger = await service.toggle(scope, trigger_id)
    return _response(scope, trigger)


@router.post("/{scope}/{trigger_id}/duplicate", response_model=TriggerResponse, status_code=201)
async def duplicate_trigger(
    scope: str, trigger_id: str, service: TriggerService = Depends(get_trigger_service)
) -> TriggerResponse:
    with http_errors():
        scope, trigger = await service.duplicate(scope, trigger_id)
    return _response(scope, trigger)


@router.delete("/{scope}/{trigger_id}", status_code=204)
async def delete_trigger(
    scope: str, trigger_id: str, service: TriggerService = Depends(get_trigger_service)
) -> None:
    with http_errors():
        await service.delete(scope, trigger_id)
