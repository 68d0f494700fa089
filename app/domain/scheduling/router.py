"""Scheduling router - scope resolution for recurring series"""

from fastapi import APIRouter

from .schemas import ScopeResolveRequest, ScopeResolveResponse
from .scope import SeriesInfo, available_modes, resolve_scope

router = APIRouter(prefix="/scope", tags=["Scheduling"])


@router.post("/resolve", response_model=ScopeResolveResponse)
async def resolve(data: ScopeResolveRequest):
    """Resolve the effective scope for an occurrence; unavailable scopes fall back to single"""
    series = SeriesInfo(recurrence_type=data.recurrenceType, occurrence_date=data.occurrenceDate)
    selection = resolve_scope(series, data.requestedScope)
    return ScopeResolveResponse(
        scope=selection.mode.value,
        availableScopes=[mode.value for mode in available_modes(series)],
        occurrenceDate=data.occurrenceDate,
    )
