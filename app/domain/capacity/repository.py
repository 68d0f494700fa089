"""Capacity repository - Database operations for sides, defaults and schedules"""

from datetime import date
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import CapacitySchedule, PeriodTypeDefault, Side


class SideRepository:
    """Repository for facility sides"""

    @staticmethod
    def get_sides(db: Session) -> list[Side]:
        return db.query(Side).order_by(Side.id.asc()).all()

    @staticmethod
    def get_side_by_key(db: Session, key: str) -> Optional[Side]:
        return db.query(Side).filter(Side.key == key).first()


class DefaultRepository:
    """Repository for period type capacity defaults"""

    @staticmethod
    def get_defaults(db: Session) -> list[PeriodTypeDefault]:
        return db.query(PeriodTypeDefault).order_by(PeriodTypeDefault.period_type.asc()).all()

    @staticmethod
    def get_default(db: Session, period_type: str, side_id: Optional[int]) -> Optional[PeriodTypeDefault]:
        query = db.query(PeriodTypeDefault).filter(PeriodTypeDefault.period_type == period_type)
        if side_id is None:
            query = query.filter(PeriodTypeDefault.side_id.is_(None))
        else:
            query = query.filter(PeriodTypeDefault.side_id == side_id)
        return query.first()

    @staticmethod
    def create_default(db: Session, **default_data) -> PeriodTypeDefault:
        default = PeriodTypeDefault(**default_data)
        db.add(default)
        db.commit()
        db.refresh(default)
        return default

    @staticmethod
    def update_default(db: Session, default: PeriodTypeDefault, **updates) -> PeriodTypeDefault:
        for key, value in updates.items():
            setattr(default, key, value)
        db.commit()
        db.refresh(default)
        return default


class ScheduleRepository:
    """Repository for capacity schedule rows"""

    @staticmethod
    def get_schedules_for_side(db: Session, side_id: int) -> list[CapacitySchedule]:
        return (
            db.query(CapacitySchedule)
            .filter(CapacitySchedule.side_id == side_id)
            .order_by(CapacitySchedule.day_of_week.asc(), CapacitySchedule.start_time.asc())
            .all()
        )

    @staticmethod
    def get_schedules_active_between(db: Session, side_id: int, start: date, end: date) -> list[CapacitySchedule]:
        """Rows of a side whose date range touches [start, end]"""
        return (
            db.query(CapacitySchedule)
            .filter(
                CapacitySchedule.side_id == side_id,
                CapacitySchedule.start_date <= end,
                or_(CapacitySchedule.end_date.is_(None), CapacitySchedule.end_date >= start),
            )
            .order_by(CapacitySchedule.id.asc())
            .all()
        )

    @staticmethod
    def get_schedules_for_period(db: Session, period_type: str, side_id: int) -> list[CapacitySchedule]:
        return (
            db.query(CapacitySchedule)
            .filter(CapacitySchedule.period_type == period_type, CapacitySchedule.side_id == side_id)
            .all()
        )

    @staticmethod
    def update_schedules(db: Session, schedule_ids: list[int], values: dict) -> int:
        """Apply the same column values to every listed schedule in one statement"""
        updated = (
            db.query(CapacitySchedule)
            .filter(CapacitySchedule.id.in_(schedule_ids))
            .update(values, synchronize_session=False)
        )
        db.commit()
        return updated

    @staticmethod
    def set_end_date(db: Session, schedule_id: int, end_date: date) -> None:
        db.query(CapacitySchedule).filter(CapacitySchedule.id == schedule_id).update(
            {"end_date": end_date}, synchronize_session=False
        )
        db.commit()

    @staticmethod
    def set_excluded_dates(db: Session, schedule_id: int, excluded_dates: list[str]) -> None:
        db.query(CapacitySchedule).filter(CapacitySchedule.id == schedule_id).update(
            {"excluded_dates": excluded_dates}, synchronize_session=False
        )
        db.commit()

    @staticmethod
    def delete_schedules(db: Session, schedule_ids: list[int]) -> int:
        deleted = (
            db.query(CapacitySchedule)
            .filter(CapacitySchedule.id.in_(schedule_ids))
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted

    @staticmethod
    def delete_slot(db: Session, side_id: int, day_of_week: int, start_time: str, recurrence_type: str) -> int:
        """Delete rows occupying the same weekly slot of the same recurrence type"""
        deleted = (
            db.query(CapacitySchedule)
            .filter(
                CapacitySchedule.side_id == side_id,
                CapacitySchedule.day_of_week == day_of_week,
                CapacitySchedule.start_time == start_time,
                CapacitySchedule.recurrence_type == recurrence_type,
            )
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted

    @staticmethod
    def create_schedules(db: Session, rows: list[dict]) -> list[CapacitySchedule]:
        schedules = [CapacitySchedule(**row) for row in rows]
        db.add_all(schedules)
        db.commit()
        for schedule in schedules:
            db.refresh(schedule)
        return schedules
