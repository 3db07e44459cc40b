"""Alias API routes."""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ...shared.models.alias import Alias
from ..dependencies import get_alias_service
from ..services import AliasService
from .errors import http_errors

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/aliases", tags=["aliases"])


# ============================================
# Request / Response Models
# ============================================


class AliasResponse(BaseModel):
    id: str
    scope: str
    pattern: str
    match_mode: str
    body: str
    enabled: bool
    group: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AliasCreate(BaseModel):
    scope: str = "global"
    pattern: str
    match_mode: str = "prefix"
    body: str = ""
    enabled: bool = True
    group: str | None = None


class AliasUpdate(BaseModel):
    scope: str | None = None
    pattern: str | None = None
    match_mode: str | None = None
    body: str | None = None
    enabled: bool | None = None
    group: str | None = None


def _response(scope: str, alias: Alias) -> AliasResponse:
    return AliasResponse(scope=scope, **asdict(alias))


# ============================================
# Endpoints
# ============================================


@router.get("", response_model=list[AliasResponse])
async def list_aliases(service: AliasService = Depends(get_alias_service)) -> list[AliasResponse]:
    """All aliases in matching order (character scope first)."""
    return [_response(scope, alias) for scope, alias in service.list_records()]


@router.post("", response_model=AliasResponse, status_code=201)
async def create_alias(
    body: AliasCreate, service: AliasService = Depends(get_alias_service)
) -> AliasResponse:
    fields = body.model_dump(exclude={"scope"}, exclude_none=True)
    with http_errors():
        scope, alias = await service.create(body.scope, fields)
    return _response(scope, alias)


@router.put("/{scope}/{alias_id}", response_model=AliasResponse)
async def update_alias(
    scope: str,
    alias_id: str,
    body: AliasUpdate,
    service: AliasService = Depends(get_alias_service),
) -> AliasResponse:
    with http_errors():
        scope, alias = await service.update(scope, alias_id, body.model_dump(exclude_none=True))
    return _response(scope, alias)


@router.patch("/{scope}/{alias_id}/toggle", response_model=AliasResponse)
async def toggle_alias(
    scope: str, alias_id: str, service: AliasService = Depends(get_alias_service)
) -> AliasResponse:
    with http_errors():
        scope, alias = await service.toggle(scope, alias_id)
    return _response(scope, alias)


@router.post("/{scope}/{alias_id}/duplicate", response_model=AliasResponse, status_code=201)
async def duplicate_alias(
    scope: str, alias_id: str, service: AliasService = Depends(get_alias_service)
) -> AliasResponse:
    with http_errors():
        scope, alias = await service.duplicate(scope, alias_id)
    return _response(scope, alias)


@router.delete("/{scope}/{alias_id}", status_code=204)
async def delete_alias(
    scope: str, alias_id: str, service: AliasService = Depends(get_alias_service)
) -> None:
    with http_errors():
        await service.delete(scope, alias_id)
