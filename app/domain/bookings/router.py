"""Booking router - FastAPI endpoints for booking lookup and deletion"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_actor_id
from ...database import get_db
from .schemas import (
    BookingDeleteResponse,
    BookingInfoResponse,
    BookingInstanceResponse,
    DeleteInstancesRequest,
    DeleteSeriesRequest,
)
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


@router.get("/{booking_id}", response_model=BookingInfoResponse)
async def get_booking(
    booking_id: int,
    service: BookingService = Depends(get_booking_service),
):
    """Get booking info for an override's linked booking"""
    return service.get_booking_info(booking_id)


@router.get("/{booking_id}/instances", response_model=list[BookingInstanceResponse])
async def get_booking_instances(
    booking_id: int,
    service: BookingService = Depends(get_booking_service),
):
    """Get all sessions of a booking"""
    return service.get_instances(booking_id)


@router.post("/{booking_id}/instances/delete", response_model=BookingDeleteResponse)
async def delete_selected_instances(
    booking_id: int,
    data: DeleteInstancesRequest,
    actor_id: Optional[str] = Depends(get_actor_id),
    service: BookingService = Depends(get_booking_service),
):
    """Delete selected sessions. The booking is removed once it has no sessions left."""
    return service.delete_instances(booking_id, data.instanceIds, actor_id)


@router.post("/{booking_id}/delete-series", response_model=BookingDeleteResponse)
async def delete_series(
    booking_id: int,
    data: DeleteSeriesRequest,
    actor_id: Optional[str] = Depends(get_actor_id),
    service: BookingService = Depends(get_booking_service),
):
    """Delete the whole booking series, or the sessions a scope selects"""
    return service.delete_series(booking_id, data.scope, data.occurrenceDate, actor_id)
