"""Capacity domain schemas - Pydantic models for validation"""

import datetime
from datetime import date
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from ...shared.validators import (
    normalize_time,
    time_to_minutes,
    validate_capacity,
    validate_period_type,
    validate_platforms,
    validate_recurrence_type,
)


class SideResponse(BaseModel):
    id: int
    key: str
    name: str

    class Config:
        from_attributes = True


class DefaultResponse(BaseModel):
    id: int
    periodType: str
    sideId: Optional[int] = None
    defaultCapacity: int
    platforms: list[int] = []


class DefaultSaveRequest(BaseModel):
    """Schema for saving a period type default for one side"""

    periodType: str
    sideKey: str
    capacity: int
    platforms: list[int] = []

    @field_validator("periodType")
    @classmethod
    def validate_period(cls, v):
        return validate_period_type(v)

    @field_validator("capacity")
    @classmethod
    def validate_capacity_value(cls, v):
        return validate_capacity(v)

    @field_validator("platforms")
    @classmethod
    def validate_platform_list(cls, v):
        return validate_platforms(v)


class DefaultSaveResponse(BaseModel):
    default: DefaultResponse
    migratedScheduleIds: list[int]
    # Set when the default saved but matching schedules could not be updated
    reconciliationError: Optional[str] = None


class ScheduleResponse(BaseModel):
    id: int
    side_id: int
    day_of_week: int
    start_time: str
    end_time: str
    capacity: int
    period_type: str
    recurrence_type: str
    start_date: date
    end_date: Optional[date] = None
    excluded_dates: Optional[list[str]] = None
    platforms: Optional[list[int]] = None

    class Config:
        from_attributes = True


class _ScheduleWindow(BaseModel):
    startTime: str
    endTime: str

    @field_validator("startTime", "endTime")
    @classmethod
    def validate_time(cls, v):
        return normalize_time(v)

    @model_validator(mode="after")
    def validate_window(self):
        if time_to_minutes(self.endTime) <= time_to_minutes(self.startTime):
            raise ValueError("End time must be after start time")
        return self


class ScheduleSaveRequest(_ScheduleWindow):
    """
    Schema for creating or editing a capacity schedule.
    scheduleId + editMode edit an existing series from selectedDate on.
    """

    sideId: int
    selectedDate: date
    capacity: int
    periodType: str
    recurrenceType: str
    platforms: Optional[list[int]] = None
    scheduleId: Optional[int] = None
    editMode: Optional[str] = None

    @field_validator("periodType")
    @classmethod
    def validate_period(cls, v):
        return validate_period_type(v)

    @field_validator("recurrenceType")
    @classmethod
    def validate_recurrence(cls, v):
        return validate_recurrence_type(v)

    @field_validator("capacity")
    @classmethod
    def validate_capacity_value(cls, v):
        return validate_capacity(v)

    @field_validator("platforms")
    @classmethod
    def validate_platform_list(cls, v):
        return validate_platforms(v)


class ScheduleDeleteRequest(_ScheduleWindow):
    """Schema for deleting a schedule occurrence, its future or its whole series"""

    sideId: int
    selectedDate: date
    periodType: str
    recurrenceType: str
    mode: str = "single"

    @field_validator("recurrenceType")
    @classmethod
    def validate_recurrence(cls, v):
        return validate_recurrence_type(v)


class ScheduleDeleteResponse(BaseModel):
    deletedIds: list[int]
    endedIds: list[int]
    excludedIds: list[int]
    mode: str


class GridCellResponse(BaseModel):
    """Resolved capacity of one hourly slot"""

    date: datetime.date
    time: str
    capacity: int
    periodType: str
    scheduleId: int
    startTime: str
    endTime: str
    recurrenceType: str
    platforms: list[int] = []
    overridden: bool = False
