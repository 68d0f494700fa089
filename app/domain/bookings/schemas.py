"""Booking domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel


class BookingInstanceResponse(BaseModel):
    id: int
    booking_id: int
    side_id: Optional[int] = None
    start: datetime
    end: datetime
    racks: list[int] = []
    areas: list[str] = []

    class Config:
        from_attributes = True


class BookingInfoResponse(BaseModel):
    id: int
    title: str
    sideId: Optional[int] = None
    recurrenceType: str
    color: Optional[str] = None
    isLocked: bool = False
    createdBy: Optional[str] = None
    instanceCount: int


class DeleteInstancesRequest(BaseModel):
    """Schema for deleting selected sessions of a booking"""

    instanceIds: list[int]


class DeleteSeriesRequest(BaseModel):
    """
    Schema for deleting a booking series.
    Without a scope the whole series goes; "single"/"future" need the occurrence date.
    """

    scope: Optional[str] = None
    occurrenceDate: Optional[date] = None


class BookingDeleteResponse(BaseModel):
    bookingId: int
    deletedInstanceCount: int
    bookingDeleted: bool
    message: str
