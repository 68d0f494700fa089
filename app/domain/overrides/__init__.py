"""
Overrides Domain

Date-specific capacity exceptions, optionally linked to a booking.
"""
from .router import router

__all__ = ["router"]
