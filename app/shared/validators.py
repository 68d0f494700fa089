"""Shared validation utilities"""

import re
from datetime import date
from typing import Optional

from ..models import PERIOD_TYPES, RECURRENCE_TYPES

TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")


def validate_period_type(period_type: str) -> str:
    """
    Validate a period type name.

    Raises:
        ValueError: If the period type is unknown
    """
    if period_type not in PERIOD_TYPES:
        raise ValueError(f"Unknown period type: {period_type}. Expected one of {', '.join(PERIOD_TYPES)}")
    return period_type


def validate_recurrence_type(recurrence_type: str) -> str:
    """Validate a schedule recurrence type"""
    if recurrence_type not in RECURRENCE_TYPES:
        raise ValueError(f"Unknown recurrence type: {recurrence_type}")
    return recurrence_type


def normalize_time(value: Optional[str]) -> Optional[str]:
    """
    Normalize a time string to HH:MM.

    Accepts "9:00", "09:00" and "09:00:00".

    Raises:
        ValueError: If the value is not a valid time of day
    """
    if value is None:
        return value

    match = TIME_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Invalid time format: {value}. Use HH:MM")

    hours, minutes = int(match.group(1)), int(match.group(2))
    # 24:00 is allowed as an end-of-day boundary
    if hours > 24 or minutes > 59 or (hours == 24 and minutes != 0):
        raise ValueError(f"Invalid time of day: {value}")

    return f"{hours:02d}:{minutes:02d}"


def time_to_minutes(value: str) -> int:
    """Minutes since midnight for an HH:MM string"""
    hours, minutes = normalize_time(value).split(":")
    return int(hours) * 60 + int(minutes)


def validate_capacity(capacity: int) -> int:
    if capacity < 0:
        raise ValueError("Capacity must be 0 or greater")
    return capacity


def validate_platforms(platforms: Optional[list[int]]) -> Optional[list[int]]:
    """Platform ids must be positive rack numbers without duplicates"""
    if platforms is None:
        return platforms
    if any(p <= 0 for p in platforms):
        raise ValueError("Platform numbers must be positive")
    if len(set(platforms)) != len(platforms):
        raise ValueError("Platform numbers must be unique")
    return platforms


def day_of_week(value: date) -> int:
    """Day index with Sunday = 0, matching the schedule table"""
    return (value.weekday() + 1) % 7
