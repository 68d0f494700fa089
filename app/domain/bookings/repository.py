"""Booking repository - Database operations for bookings and their instances"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Booking, BookingInstance


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def get_booking(db: Session, booking_id: int) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.id == booking_id).first()

    @staticmethod
    def get_instances(db: Session, booking_id: int) -> list[BookingInstance]:
        """All instances of a booking, oldest first"""
        return (
            db.query(BookingInstance)
            .filter(BookingInstance.booking_id == booking_id)
            .order_by(BookingInstance.start.asc())
            .all()
        )

    @staticmethod
    def count_instances(db: Session, booking_id: int) -> int:
        return db.query(BookingInstance).filter(BookingInstance.booking_id == booking_id).count()

    @staticmethod
    def delete_instances(db: Session, booking_id: int, instance_ids: Optional[tuple[int, ...]]) -> int:
        """
        Delete instances of a booking in one statement.
        instance_ids=None deletes every instance. Returns the deleted row count.
        """
        query = db.query(BookingInstance).filter(BookingInstance.booking_id == booking_id)
        if instance_ids is not None:
            query = query.filter(BookingInstance.id.in_(instance_ids))
        deleted = query.delete(synchronize_session=False)
        db.commit()
        return deleted

    @staticmethod
    def delete_booking(db: Session, booking_id: int) -> int:
        deleted = db.query(Booking).filter(Booking.id == booking_id).delete(synchronize_session=False)
        db.commit()
        return deleted
