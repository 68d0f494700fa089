"""Override domain schemas - Pydantic models for validation"""

import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_capacity, validate_period_type


class OverrideCreate(BaseModel):
    """Schema for creating a date override"""

    date: datetime.date
    periodType: str
    capacity: int
    notes: Optional[str] = None
    bookingId: Optional[int] = None

    @field_validator("periodType")
    @classmethod
    def validate_period(cls, v):
        return validate_period_type(v)

    @field_validator("capacity")
    @classmethod
    def validate_capacity_value(cls, v):
        return validate_capacity(v)


class OverrideUpdate(BaseModel):
    """Schema for editing an override; only capacity and notes change"""

    capacity: int
    notes: Optional[str] = None

    @field_validator("capacity")
    @classmethod
    def validate_capacity_value(cls, v):
        return validate_capacity(v)


class OverrideResponse(BaseModel):
    id: int
    date: datetime.date
    period_type: str
    capacity: int
    notes: Optional[str] = None
    booking_id: Optional[int] = None

    class Config:
        from_attributes = True
