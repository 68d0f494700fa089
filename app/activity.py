"""
Activity logging for operational events (bookings deleted, defaults changed).

Fail-open: recording an activity entry never breaks the calling operation.
Entries are written in their own session so a logging failure cannot roll
back or poison the caller's transaction.
"""
import logging
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .models import ActivityLog

logger = logging.getLogger(__name__)


def log_activity(
    db: Session,
    event_type: str,
    entity_type: str,
    entity_id: Optional[Any] = None,
    actor_user_id: Optional[str] = None,
    old_value: Optional[dict] = None,
    new_value: Optional[dict] = None,
    metadata: Optional[dict] = None,
) -> Optional[str]:
    """Record an activity event. Returns the entry id, or None if logging failed."""
    if not event_type:
        logger.warning("[activity] Empty event type, skipping activity log")
        return None

    session = sessionmaker(bind=db.get_bind(), autoflush=False)()
    try:
        entry = ActivityLog(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            actor_user_id=actor_user_id,
            old_value=old_value,
            new_value=new_value,
            event_metadata=metadata or {},
        )
        session.add(entry)
        session.commit()
        logger.info(f"📝 Activity logged: {event_type} {entity_type}:{entity_id}")
        return entry.id
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"[activity] Failed to log activity event {event_type}: {e}")
        return None
    finally:
        session.close()


class BookingActivity:
    """Helpers for booking-related activity events"""

    @staticmethod
    def deleted(db: Session, booking_id: int, actor_user_id: Optional[str], title: Optional[str], reason: str):
        return log_activity(
            db,
            "booking.deleted",
            "booking",
            entity_id=booking_id,
            actor_user_id=actor_user_id,
            metadata={"title": title, "reason": reason},
        )

    @staticmethod
    def instances_deleted(
        db: Session, booking_id: int, actor_user_id: Optional[str], title: Optional[str], count: int
    ):
        return log_activity(
            db,
            "booking.updated",
            "booking",
            entity_id=booking_id,
            actor_user_id=actor_user_id,
            metadata={"title": title, "action": "instances_deleted", "instances_deleted": count},
        )


class CapacityActivity:
    """Helpers for capacity configuration events"""

    @staticmethod
    def default_saved(
        db: Session,
        default_id: int,
        actor_user_id: Optional[str],
        old_value: Optional[dict],
        new_value: dict,
        migrated_count: int,
    ):
        return log_activity(
            db,
            "capacity_default.updated" if old_value else "capacity_default.created",
            "period_type_default",
            entity_id=default_id,
            actor_user_id=actor_user_id,
            old_value=old_value,
            new_value=new_value,
            metadata={"schedules_migrated": migrated_count},
        )
