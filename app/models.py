import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

PERIOD_TYPES = ("High Hybrid", "Low Hybrid", "Performance", "General User", "Closed")
RECURRENCE_TYPES = ("single", "weekday", "weekend", "weekly", "all_future")


def generate_activity_id():
    """Generate a unique id for an activity log entry"""
    return str(uuid.uuid4())


class Side(Base):
    __tablename__ = "sides"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(50), unique=True, nullable=False)  # Power | Base
    name = Column(String(255), nullable=False)


class PeriodTypeDefault(Base):
    __tablename__ = "period_type_capacity_defaults"
    __table_args__ = (
        UniqueConstraint("period_type", "side_id", name="period_type_capacity_defaults_period_type_side_id_key"),
    )

    id = Column(Integer, primary_key=True, index=True)
    period_type = Column(String(50), nullable=False, index=True)
    side_id = Column(Integer, ForeignKey("sides.id", ondelete="CASCADE"), nullable=True)  # null = global default
    default_capacity = Column(Integer, nullable=False, default=0)
    platforms = Column(JSON, nullable=True)  # rack/platform numbers usable in this period
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    side = relationship("Side")


class CapacitySchedule(Base):
    __tablename__ = "capacity_schedules"

    id = Column(Integer, primary_key=True, index=True)
    side_id = Column(Integer, ForeignKey("sides.id", ondelete="CASCADE"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday ... 6 = Saturday
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)  # HH:MM, exclusive
    capacity = Column(Integer, nullable=False, default=0)
    period_type = Column(String(50), nullable=False, index=True)
    recurrence_type = Column(String(20), nullable=False)  # single, weekday, weekend, weekly, all_future
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    excluded_dates = Column(JSON, nullable=True)  # ISO date strings skipped by a recurring schedule
    platforms = Column(JSON, nullable=True)


class PeriodTypeOverride(Base):
    __tablename__ = "period_type_capacity_overrides"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, index=True)
    period_type = Column(String(50), nullable=False)
    capacity = Column(Integer, nullable=False, default=0)
    notes = Column(Text, nullable=True)
    # Lookup only: deleting the override never deletes the booking
    booking_id = Column(Integer, nullable=True)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    side_id = Column(Integer, ForeignKey("sides.id", ondelete="CASCADE"), nullable=True)
    recurrence = Column(JSON, nullable=True)  # {"type": "weekly", ...}
    color = Column(String(20), nullable=True)
    is_locked = Column(Boolean, default=False, nullable=False)
    created_by = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    instances = relationship("BookingInstance", back_populates="booking", passive_deletes=True)

    @property
    def recurrence_type(self) -> str:
        if isinstance(self.recurrence, dict) and self.recurrence.get("type"):
            return self.recurrence["type"]
        return "single"


class BookingInstance(Base):
    __tablename__ = "booking_instances"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    side_id = Column(Integer, ForeignKey("sides.id", ondelete="CASCADE"), nullable=True)
    start = Column(DateTime(timezone=True), nullable=False)
    end = Column(DateTime(timezone=True), nullable=False)
    racks = Column(JSON, default=list, nullable=False)
    areas = Column(JSON, default=list, nullable=False)

    booking = relationship("Booking", back_populates="instances")


class ActivityLog(Base):
    __tablename__ = "activity_log"

    id = Column(String(36), primary_key=True, default=generate_activity_id)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    event_type = Column(String(100), nullable=False)  # e.g. booking.deleted
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(String(64), nullable=True)
    actor_user_id = Column(String(255), nullable=True)
    old_value = Column(JSON, nullable=True)
    new_value = Column(JSON, nullable=True)
    # "metadata" is reserved on declarative classes
    event_metadata = Column("metadata", JSON, default=dict, nullable=False)
