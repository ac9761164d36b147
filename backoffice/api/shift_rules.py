"""
Shift rule API endpoints: recurring shifts, archive/restore, confirmed delete
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import async_sessionmaker
from typing import Optional

from backoffice.database import get_session_factory
from backoffice.schemas.rota import (
    ShiftRuleCreate,
    ShiftRuleListResponse,
    ShiftRuleResponse,
    ShiftRuleUpdate,
)
from backoffice.services.shift_rules import (
    ALL_DAYS,
    ShiftRuleService,
    active_shifts,
    archived_shifts,
)

router = APIRouter()


def get_shift_rule_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> ShiftRuleService:
    return ShiftRuleService(session_factory)


@router.get("/", response_model=ShiftRuleListResponse)
async def list_shift_rules(
    location_id: int,
    day: Optional[str] = ALL_DAYS,
    service: ShiftRuleService = Depends(get_shift_rule_service),
):
    rules = await service.list_rules(location_id)
    return ShiftRuleListResponse(
        active=active_shifts(rules, day),
        archived=archived_shifts(rules, day),
    )


@router.get("/{rule_id}", response_model=ShiftRuleResponse)
async def get_shift_rule(
    rule_id: int,
    service: ShiftRuleService = Depends(get_shift_rule_service),
):
    return await service.get_rule(rule_id)


@router.post("/", response_model=ShiftRuleResponse)
async def create_shift_rule(
    data: ShiftRuleCreate,
    service: ShiftRuleService = Depends(get_shift_rule_service),
):
    troughs = [t.model_dump() for t in data.troughs]
    return await service.create_rule(data.model_dump(exclude={"troughs"}), troughs)


@router.put("/{rule_id}", response_model=ShiftRuleResponse)
async def update_shift_rule(
    rule_id: int,
    data: ShiftRuleUpdate,
    service: ShiftRuleService = Depends(get_shift_rule_service),
):
    patch = data.model_dump(exclude_unset=True, exclude={"troughs"})
    troughs = None if data.troughs is None else [t.model_dump() for t in data.troughs]
    return await service.update_rule(rule_id, patch, troughs)


@router.post("/{rule_id}/archive", response_model=ShiftRuleResponse)
async def archive_shift_rule(
    rule_id: int,
    service: ShiftRuleService = Depends(get_shift_rule_service),
):
    return await service.archive(rule_id)


@router.post("/{rule_id}/restore", response_model=ShiftRuleResponse)
async def restore_shift_rule(
    rule_id: int,
    service: ShiftRuleService = Depends(get_shift_rule_service),
):
    return await service.restore(rule_id)


@router.delete("/{rule_id}")
async def delete_shift_rule(
    rule_id: int,
    confirm: bool = False,
    service: ShiftRuleService = Depends(get_shift_rule_service),
):
    """First call without confirm answers 409 and marks the rule; repeat to delete"""
    await service.delete(rule_id, confirm=confirm)
    return {"message": "Shift rule deleted"}
