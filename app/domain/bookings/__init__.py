"""
Bookings Domain

Booking lookup and deletion of selected sessions or whole series.
"""
from .router import router

__all__ = ["router"]
