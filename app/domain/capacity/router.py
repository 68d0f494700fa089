"""Capacity router - FastAPI endpoints for sides, defaults and schedules"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_actor_id
from ...database import get_db
from .schedule_rules import SchedulePattern
from .schemas import (
    DefaultSaveRequest,
    DefaultSaveResponse,
    GridCellResponse,
    ScheduleDeleteRequest,
    ScheduleDeleteResponse,
    ScheduleResponse,
    ScheduleSaveRequest,
    SideResponse,
)
from .service import DefaultService, ScheduleService, SideService, serialize_default

logger = logging.getLogger(__name__)

sides_router = APIRouter(prefix="/sides", tags=["Capacity"])
router = APIRouter(prefix="/capacity", tags=["Capacity"])


def get_side_service(db: Session = Depends(get_db)) -> SideService:
    return SideService(db)


def get_default_service(db: Session = Depends(get_db)) -> DefaultService:
    """Dependency injection for DefaultService"""
    return DefaultService(db)


def get_schedule_service(db: Session = Depends(get_db)) -> ScheduleService:
    """Dependency injection for ScheduleService"""
    return ScheduleService(db)


@sides_router.get("", response_model=list[SideResponse])
async def get_sides(service: SideService = Depends(get_side_service)):
    return service.list_sides()


@router.get("/defaults")
async def get_defaults(service: DefaultService = Depends(get_default_service)):
    """Get all period type defaults keyed "<periodType>_<sideId|null>" """
    return service.list_defaults()


@router.put("/defaults", response_model=DefaultSaveResponse)
async def save_default(
    data: DefaultSaveRequest,
    actor_id: Optional[str] = Depends(get_actor_id),
    service: DefaultService = Depends(get_default_service),
):
    """
    Save a period type default for one side.
    Schedules still carrying the previous default move to the new one.
    """
    result = service.save_default(data.periodType, data.sideKey, data.capacity, data.platforms, actor_id)
    return DefaultSaveResponse(
        default=serialize_default(result.default),
        migratedScheduleIds=result.migrated_schedule_ids,
        reconciliationError=result.reconciliation_error,
    )


@router.get("/schedules", response_model=list[ScheduleResponse])
async def get_schedules(
    side_id: int = Query(..., description="Side to list schedules for"),
    service: ScheduleService = Depends(get_schedule_service),
):
    return service.list_schedules(side_id)


@router.get("/grid", response_model=list[GridCellResponse])
async def get_capacity_grid(
    side_id: int = Query(..., description="Side to resolve capacity for"),
    week_start: date = Query(..., description="Any date in the week; the grid starts on its Monday"),
    service: ScheduleService = Depends(get_schedule_service),
):
    """Capacity per hourly slot of one week, after schedules and overrides"""
    return service.get_week_grid(side_id, week_start)


@router.post("/schedules", response_model=list[ScheduleResponse])
async def save_schedule(
    data: ScheduleSaveRequest,
    service: ScheduleService = Depends(get_schedule_service),
):
    """Create schedule rows for a recurrence, or edit an existing series"""
    return service.save_schedule(data)


@router.post("/schedules/delete", response_model=ScheduleDeleteResponse)
async def delete_schedule(
    data: ScheduleDeleteRequest,
    service: ScheduleService = Depends(get_schedule_service),
):
    """Delete one occurrence, this and future occurrences, or a whole series"""
    pattern = SchedulePattern(
        recurrence_type=data.recurrenceType,
        start_time=data.startTime,
        end_time=data.endTime,
        period_type=data.periodType,
    )
    plan, mode = service.delete_schedule(data.sideId, pattern, data.selectedDate, data.mode)
    return ScheduleDeleteResponse(
        deletedIds=plan.delete_ids,
        endedIds=list(plan.end_date_updates),
        excludedIds=list(plan.exclusions),
        mode=mode.value,
    )
