"""Variable API routes."""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ...shared.models.variable import Variable
from ..dependencies import get_variable_service
from ..services import VariableService
from .errors import http_errors

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/variables", tags=["variables"])


class VariableResponse(BaseModel):
    id: str
    scope: str
    name: str
    value: str
    enabled: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class VariableCreate(BaseModel):
    scope: str = "global"
    name: str
    value: str = ""
    enabled: bool = True


class VariableUpdate(BaseModel):
    scope: str | None = None
    name: str | None = None
    value: str | None = None
    enabled: bool | None = None


def _response(scope: str, variable: Variable) -> VariableResponse:
    return VariableResponse(scope=scope, **asdict(variable))


@router.get("", response_model=list[VariableResponse])
async def list_variables(
    service: VariableService = Depends(get_variable_service),
) -> list[VariableResponse]:
    return [_response(scope, variable) for scope, variable in service.list_records()]


@router.post("", response_model=VariableResponse, status_code=201)
async def create_variable(
    body: VariableCreate, service: VariableService = Depends(get_variable_service)
) -> VariableResponse:
    fields = body.model_dump(exclude={"scope"}, exclude_none=True)
    with http_errors():
        scope, variable = await service.create(body.scope, fields)
    return _response(scope, variable)


@router.put("/{scope}/{variable_id}", response_model=VariableResponse)
async def update_variable(
    scope: str,
    variable_id: str,
    body: VariableUpdate,
    service: VariableService = Depends(get_variable_service),
) -> VariableResponse:
    with http_errors():
        scope, variable = await service.update(
            scope, variable_id, body.model_dump(exclude_none=True)
        )
    return _response(scope, variable)


@router.patch("/{scope}/{variable_id}/toggle", response_model=VariableResponse)
async def toggle_variable(
    scope: str, variable_id: str, service: VariableService = Depends(get_variable_service)
) -> VariableResponse:
    with http_errors():
        scope, variable = await service.toggle(scope, variable_id)
    return _response(scope, variable)


@router.post("/{scope}/{variable_id}/duplicate", response_model=VariableResponse, status_code=201)
async def duplicate_variable(
    scope: str, variable_id: str, service: VariableService = Depends(get_variable_service)
) -> VariableResponse:
    with http_errors():
        scope, variable = await service.duplicate(scope, variable_id)
    return _response(scope, variable)


@router.delete("/{scope}/{variable_id}", status_code=204)
async def delete_variable(
    scope: str, variable_id: str, service: VariableService = Depends(get_variable_service)
) -> None:
    with http_errors():
        await service.delete(scope, variable_id)
