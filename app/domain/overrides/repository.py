"""Override repository - Database operations for date-specific capacity overrides"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import PeriodTypeOverride


class OverrideRepository:
    """Repository for period type capacity overrides"""

    @staticmethod
    def get_overrides_since(db: Session, since: date) -> list[PeriodTypeOverride]:
        """Overrides dated on or after `since`, newest first"""
        return (
            db.query(PeriodTypeOverride)
            .filter(PeriodTypeOverride.date >= since)
            .order_by(PeriodTypeOverride.date.desc())
            .all()
        )

    @staticmethod
    def get_overrides_between(db: Session, start: date, end: date) -> list[PeriodTypeOverride]:
        return (
            db.query(PeriodTypeOverride)
            .filter(PeriodTypeOverride.date >= start, PeriodTypeOverride.date <= end)
            .all()
        )

    @staticmethod
    def get_override(db: Session, override_id: int) -> Optional[PeriodTypeOverride]:
        return db.query(PeriodTypeOverride).filter(PeriodTypeOverride.id == override_id).first()

    @staticmethod
    def get_override_for_date(db: Session, on: date, period_type: str) -> Optional[PeriodTypeOverride]:
        return (
            db.query(PeriodTypeOverride)
            .filter(PeriodTypeOverride.date == on, PeriodTypeOverride.period_type == period_type)
            .first()
        )

    @staticmethod
    def create_override(db: Session, **override_data) -> PeriodTypeOverride:
        override = PeriodTypeOverride(**override_data)
        db.add(override)
        db.commit()
        db.refresh(override)
        return override

    @staticmethod
    def update_override(db: Session, override: PeriodTypeOverride, **updates) -> PeriodTypeOverride:
        for key, value in updates.items():
            setattr(override, key, value)
        db.commit()
        db.refresh(override)
        return override

    @staticmethod
    def delete_override(db: Session, override: PeriodTypeOverride) -> None:
        """Delete an override. The linked booking, if any, is left alone."""
        db.delete(override)
        db.commit()

    @staticmethod
    def delete_overrides_for_date(db: Session, on: date, period_type: str) -> int:
        deleted = (
            db.query(PeriodTypeOverride)
            .filter(PeriodTypeOverride.date == on, PeriodTypeOverride.period_type == period_type)
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted

    @staticmethod
    def upsert_override_for_date(db: Session, on: date, period_type: str, capacity: int) -> PeriodTypeOverride:
        """Set the capacity override for a date, creating it if missing"""
        existing = OverrideRepository.get_override_for_date(db, on, period_type)
        if existing:
            return OverrideRepository.update_override(db, existing, capacity=capacity)
        return OverrideRepository.create_override(
            db, date=on, period_type=period_type, capacity=capacity, notes=None, booking_id=None
        )
