"""Scheduling domain schemas - Pydantic models for validation"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_recurrence_type


class ScopeResolveRequest(BaseModel):
    """Schema for resolving the scope of an edit/delete action"""

    recurrenceType: str
    occurrenceDate: date
    requestedScope: Optional[str] = None

    @field_validator("recurrenceType")
    @classmethod
    def validate_recurrence(cls, v):
        return validate_recurrence_type(v)


class ScopeResolveResponse(BaseModel):
    scope: str
    availableScopes: list[str]
    occurrenceDate: date
