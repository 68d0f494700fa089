"""
Capacity Domain

Facility sides, period type defaults with schedule reconciliation, and
recurring capacity schedules.
"""
from .router import router, sides_router

__all__ = ["router", "sides_router"]
