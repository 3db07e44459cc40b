"""Timer API routes."""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ...client.components.timer_manager import timer_key
from ...shared.models.timer import Timer
from ..dependencies import get_timer_service
from ..services import TimerService
from .errors import http_errors

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/timers", tags=["timers"])


# ============================================
# Request / Response Models
# ============================================


class TimerResponse(BaseModel):
    id: str
    scope: str
    name: str
    body: str
    interval_seconds: int
    enabled: bool
    group: str
    next_fire_seconds: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TimerCreate(BaseModel):
    scope: str = "global"
    name: str
    body: str = ""
    interval_seconds: int
    enabled: bool = True
    group: str | None = None


class TimerUpdate(BaseModel):
    scope: str | None = None
    name: str | None = None
    body: str | None = None
    interval_seconds: int | None = None
    enabled: bool | None = None
    group: str | None = None


def _response(scope: str, timer: Timer, service: TimerService) -> TimerResponse:
    next_fire = service.session.timer_manager.next_fires().get(timer_key(timer))
    return TimerResponse(scope=scope, next_fire_seconds=next_fire, **asdict(timer))


# ============================================
# Endpoints
# ============================================


@router.get("", response_model=list[TimerResponse])
async def list_timers(service: TimerService = Depends(get_timer_service)) -> list[TimerResponse]:
    """All timers, with the seconds until each running timer fires next."""
    return [_response(scope, timer, service) for scope, timer in service.list_records()]


@router.post("", response_model=TimerResponse, status_code=201)
async def create_timer(
    body: TimerCreate, service: TimerService = Depends(get_timer_service)
) -> TimerResponse:
    fields = body.model_dump(exclude={"scope"}, exclude_none=True)
    with http_errors():
        scope, timer = await service.create(body.scope, fields)
    return _response(scope, timer, service)


@router.put("/{scope}/{timer_id}", response_model=TimerResponse)
async def update_timer(
    scope: str,
    timer_id: str,
    body: TimerUpdate,
    service: TimerService = Depends(get_timer_service),
) -> TimerResponse:
    with http_errors():
        scope, timer = await service.update(scope, timer_id, body.model_dump(exclude_none=True))
    return _response(scope, timer, service)


@router.patch("/{scope}/{timer_id}/toggle", response_model=TimerResponse)
async def toggle_timer(
    scope: str, timer_id: str, service: TimerService = Depends(get_timer_service)
) -> TimerResponse:
    with http_errors():
        scope, timer = await service.toggle(scope, timer_id)
    return _response(scope, timer, service)


@router.post("/{scope}/{timer_id}/duplicate", response_model=TimerResponse, status_code=201)
async def duplicate_timer(
    scope: str, timer_id: str, service: TimerService = Depends(get_timer_service)
) -> TimerResponse:
    with http_errors():
        scope, timer = await service.duplicate(scope, timer_id)
    return _response(scope, timer, service)


@router.delete("/{scope}/{timer_id}", status_code=204)
async def delete_timer(
    scope: str, timer_id: str, service: TimerService = Depends(get_timer_service)
) -> None:
    with http_errors():
        await service.delete(scope, timer_id)
