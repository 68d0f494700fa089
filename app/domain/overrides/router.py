"""Override router - FastAPI endpoints for date-specific capacity overrides"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import OverrideCreate, OverrideResponse, OverrideUpdate
from .service import OverrideService

router = APIRouter(prefix="/capacity/overrides", tags=["Overrides"])


def get_override_service(db: Session = Depends(get_db)) -> OverrideService:
    """Dependency injection for OverrideService"""
    return OverrideService(db)


@router.get("", response_model=list[OverrideResponse])
async def get_overrides(service: OverrideService = Depends(get_override_service)):
    """Get recent and upcoming overrides"""
    return service.list_overrides()


@router.post("", response_model=OverrideResponse)
async def create_override(
    data: OverrideCreate,
    service: OverrideService = Depends(get_override_service),
):
    return service.create_override(data)


@router.patch("/{override_id}", response_model=OverrideResponse)
async def update_override(
    override_id: int,
    data: OverrideUpdate,
    service: OverrideService = Depends(get_override_service),
):
    """Update an override's capacity and notes"""
    return service.update_override(override_id, data)


@router.delete("/{override_id}")
async def delete_override(
    override_id: int,
    service: OverrideService = Depends(get_override_service),
):
    """Delete an override. The linked booking is not deleted."""
    return service.delete_override(override_id)
