"""Capacity service - Business logic for defaults, reconciliation and schedules"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...activity import CapacityActivity
from ...cache import (
    CAPACITY_SCHEDULE,
    DEFAULT_PLATFORMS_PREFIX,
    PERIOD_TYPE_DEFAULT,
    PERIOD_TYPE_OVERRIDE,
    cache,
    capacity_schedules_key,
    publish_change,
    snapshot_key,
)
from ...errors import SecondaryStoreError, StoreError, ValidationError
from ...models import CapacitySchedule, PeriodTypeDefault, Side
from ...shared.platforms import normalize_platforms, platforms_for_storage
from ..overrides.repository import OverrideRepository
from ..scheduling.scope import EDIT_MODES, ScopeMode, ScopeSelection, SeriesInfo, resolve_scope
from .grid import build_week_grid, week_start_for
from .reconciliation import DefaultValues, ReconciliationPatch, ScheduleCandidate, reconcile_default
from .repository import DefaultRepository, ScheduleRepository, SideRepository
from .schedule_rules import (
    SchedulePattern,
    ScheduleDeletionPlan,
    build_schedules,
    find_overlaps,
    format_conflicts,
    plan_schedule_deletion,
)
from .schemas import DefaultResponse, ScheduleResponse, ScheduleSaveRequest, SideResponse

logger = logging.getLogger(__name__)


def default_key(period_type: str, side_id: Optional[int]) -> str:
    return f"{period_type}_{side_id if side_id else 'null'}"


def serialize_default(default: PeriodTypeDefault) -> dict:
    return DefaultResponse(
        id=default.id,
        periodType=default.period_type,
        sideId=default.side_id,
        defaultCapacity=default.default_capacity,
        platforms=default.platforms if isinstance(default.platforms, list) else [],
    ).model_dump()


@dataclass
class DefaultSaveResult:
    default: PeriodTypeDefault
    migrated_schedule_ids: list[int] = field(default_factory=list)
    reconciliation_error: Optional[str] = None


class SideService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = SideRepository()

    def list_sides(self) -> list[dict]:
        return [SideResponse.model_validate(s).model_dump() for s in self.repo.get_sides(self.db)]

    def resolve_side(self, side_key: str) -> Side:
        side = self.repo.get_side_by_key(self.db, side_key)
        if not side:
            raise ValidationError(f"Side ID not found for {side_key}")
        return side


class DefaultService:
    """Service layer for period type defaults"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = DefaultRepository()
        self.schedule_repo = ScheduleRepository()
        self.sides = SideService(db)

    def list_defaults(self) -> dict[str, dict]:
        """Defaults keyed "<period type>_<side id or null>", platforms never null"""

        def load():
            return {
                default_key(d.period_type, d.side_id): serialize_default(d)
                for d in self.repo.get_defaults(self.db)
            }

        return cache.get_or_load(f"{DEFAULT_PLATFORMS_PREFIX}all", load)

    def save_default(
        self,
        period_type: str,
        side_key: str,
        capacity: int,
        platforms: list[int],
        actor_user_id: Optional[str] = None,
    ) -> DefaultSaveResult:
        """
        Save the default for (period type, side) and move the schedules that
        were carrying the previous default over to the new one.

        The default save is the primary operation. Schedule reconciliation is
        best effort: its failure is reported on the result and logged, and
        the saved default stays.
        """
        # Fail fast before any write
        side = self.sides.resolve_side(side_key)

        existing = self.repo.get_default(self.db, period_type, side.id)
        old_default = None
        old_value = None
        if existing:
            old_default = DefaultValues(capacity=existing.default_capacity, platforms=existing.platforms)
            old_value = {
                "default_capacity": existing.default_capacity,
                "platforms": normalize_platforms(existing.platforms),
            }
        new_default = DefaultValues(capacity=capacity, platforms=list(platforms))

        try:
            if existing:
                saved = self.repo.update_default(
                    self.db, existing, default_capacity=capacity, platforms=list(platforms)
                )
            else:
                saved = self.repo.create_default(
                    self.db,
                    period_type=period_type,
                    side_id=side.id,
                    default_capacity=capacity,
                    platforms=list(platforms),
                )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error saving default for {period_type}/{side_key}: {e}")
            raise StoreError(f"Failed to save default capacity: {e}") from e

        logger.info(f"✅ Saved default {period_type}/{side_key}: capacity={capacity}, platforms={platforms}")
        publish_change(PERIOD_TYPE_DEFAULT, saved.id)

        result = DefaultSaveResult(default=saved)
        try:
            result.migrated_schedule_ids = self._reconcile_schedules(
                period_type, side.id, old_default, new_default
            )
        except SecondaryStoreError as e:
            logger.error(f"⚠️ Default saved but schedules not updated: {e.message}")
            result.reconciliation_error = e.message

        CapacityActivity.default_saved(
            self.db,
            saved.id,
            actor_user_id,
            old_value,
            {"default_capacity": capacity, "platforms": normalize_platforms(platforms)},
            len(result.migrated_schedule_ids),
        )
        return result

    def _reconcile_schedules(
        self,
        period_type: str,
        side_id: int,
        old_default: Optional[DefaultValues],
        new_default: DefaultValues,
    ) -> list[int]:
        if old_default is None:
            return []

        try:
            schedules = self.schedule_repo.get_schedules_for_period(self.db, period_type, side_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise SecondaryStoreError(f"Error fetching schedules to update: {e}") from e

        candidates = [ScheduleCandidate(id=s.id, capacity=s.capacity, platforms=s.platforms) for s in schedules]
        schedule_ids = sorted(reconcile_default(old_default, new_default, candidates))
        if not schedule_ids:
            return []

        patch = ReconciliationPatch.from_default(new_default)
        try:
            self.schedule_repo.update_schedules(self.db, schedule_ids, patch.as_update())
        except SQLAlchemyError as e:
            self.db.rollback()
            raise SecondaryStoreError(f"Error updating schedules: {e}") from e

        logger.info(f"🔁 Moved {len(schedule_ids)} schedule(s) of {period_type}/{side_id} to the new default")
        publish_change(CAPACITY_SCHEDULE)
        return schedule_ids


class ScheduleService:
    """Service layer for capacity schedules"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ScheduleRepository()
        self.override_repo = OverrideRepository()

    def list_schedules(self, side_id: int) -> list[dict]:
        def load():
            return [
                ScheduleResponse.model_validate(s).model_dump(mode="json")
                for s in self.repo.get_schedules_for_side(self.db, side_id)
            ]

        return cache.get_or_load(capacity_schedules_key(side_id), load)

    def get_week_grid(self, side_id: int, day: date) -> list[dict]:
        """Resolved capacity per hourly slot for the Monday-based week containing day"""
        week_start = week_start_for(day)
        week_end = week_start + timedelta(days=6)

        def load():
            try:
                schedules = self.repo.get_schedules_active_between(self.db, side_id, week_start, week_end)
                overrides = self.override_repo.get_overrides_between(self.db, week_start, week_end)
            except SQLAlchemyError as e:
                self.db.rollback()
                raise StoreError(f"Failed to load capacity grid: {e}") from e
            return [cell.as_dict() for cell in build_week_grid(schedules, overrides, week_start)]

        return cache.get_or_load(snapshot_key(side_id, week_start), load)

    def _fetch_schedules(self, side_id: int) -> list[CapacitySchedule]:
        try:
            return self.repo.get_schedules_for_side(self.db, side_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Failed to fetch schedules: {e}") from e

    def save_schedule(self, data: ScheduleSaveRequest) -> list[CapacitySchedule]:
        """
        Create schedule rows for a recurrence, or edit an existing series.

        Editing with editMode "single" takes the selected date out of the
        series and gives it its own single-date row; "future" ends the series
        the day before and starts the edited one on the selected date.
        """
        existing = self._fetch_schedules(data.sideId)
        edited = None
        if data.scheduleId is not None:
            edited = next((s for s in existing if s.id == data.scheduleId), None)
            if edited is None:
                raise ValidationError(f"Schedule {data.scheduleId} not found")

        recurrence_type = data.recurrenceType
        deletion_plan = ScheduleDeletionPlan()
        replaced_ids: set[int] = set()

        if edited is not None:
            pattern = SchedulePattern(edited.recurrence_type, edited.start_time, edited.end_time, edited.period_type)
            selection = resolve_scope(SeriesInfo(edited.recurrence_type, data.selectedDate), data.editMode)
            if selection.mode not in EDIT_MODES:
                selection = ScopeSelection(series=selection.series, mode=ScopeMode.SINGLE)

            if not selection.series.is_recurring:
                replaced_ids.add(edited.id)
                deletion_plan.delete_ids.append(edited.id)
            else:
                deletion_plan = plan_schedule_deletion(existing, pattern, selection)
                replaced_ids.update(s.id for s in existing if pattern.matches(s))
                if selection.mode is ScopeMode.SINGLE:
                    recurrence_type = "single"

        new_rows = build_schedules(
            data.sideId,
            recurrence_type,
            data.selectedDate,
            data.startTime,
            data.endTime,
            data.capacity,
            data.periodType,
            platforms_for_storage(data.platforms),
        )

        # A plain save overwrites whatever occupies the same slots
        replaces_slots = edited is None
        if replaces_slots:
            for row in new_rows:
                replaced_ids.update(
                    s.id
                    for s in existing
                    if s.day_of_week == row.day_of_week
                    and s.start_time == row.start_time
                    and s.recurrence_type == row.recurrence_type
                )
        conflicts = find_overlaps(new_rows, [s for s in existing if s.id not in replaced_ids])
        if conflicts:
            raise ValidationError(format_conflicts(conflicts))

        try:
            self._apply_deletion_plan(deletion_plan)
            if replaces_slots:
                for row in new_rows:
                    self.repo.delete_slot(
                        self.db, row.side_id, row.day_of_week, row.start_time, row.recurrence_type
                    )
            created = self.repo.create_schedules(self.db, [row.as_row() for row in new_rows])
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error saving schedule on side {data.sideId}: {e}")
            raise StoreError(f"Failed to save schedule: {e}") from e
        finally:
            publish_change(CAPACITY_SCHEDULE)

        logger.info(f"📅 Saved {len(created)} {recurrence_type} schedule row(s) on side {data.sideId}")

        # Single-date schedules mirror into the override table
        if recurrence_type == "single":
            try:
                self.override_repo.upsert_override_for_date(
                    self.db, data.selectedDate, data.periodType, data.capacity
                )
                publish_change(PERIOD_TYPE_OVERRIDE)
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"⚠️ Schedule saved but override for {data.selectedDate} not updated: {e}")

        return created

    def delete_schedule(
        self,
        side_id: int,
        pattern: SchedulePattern,
        selected_date: date,
        mode: str,
    ) -> tuple[ScheduleDeletionPlan, ScopeMode]:
        """Delete one occurrence, this and future occurrences, or the whole series"""
        existing = self._fetch_schedules(side_id)
        selection = resolve_scope(SeriesInfo(pattern.recurrence_type, selected_date), mode)
        plan = plan_schedule_deletion(existing, pattern, selection)
        if plan.is_empty:
            # e.g. the occurrence was already excluded
            logger.info(f"Nothing to delete for {pattern.describe()} on {selected_date}")
            return plan, selection.mode

        try:
            self._apply_deletion_plan(plan)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error deleting schedule on side {side_id}: {e}")
            raise StoreError(f"Failed to delete schedule: {e}") from e
        finally:
            publish_change(CAPACITY_SCHEDULE)

        logger.info(
            f"🗑️ Schedule delete ({selection.mode.value}) on side {side_id}: "
            f"deleted={plan.delete_ids}, ended={list(plan.end_date_updates)}, excluded={list(plan.exclusions)}"
        )
        return plan, selection.mode

    def _apply_deletion_plan(self, plan: ScheduleDeletionPlan) -> None:
        # Order: end past series, record exclusions, then delete
        for schedule_id, end_date in plan.end_date_updates.items():
            self.repo.set_end_date(self.db, schedule_id, end_date)
        for schedule_id, excluded in plan.exclusions.items():
            self.repo.set_excluded_dates(self.db, schedule_id, excluded)
        if plan.delete_ids:
            self.repo.delete_schedules(self.db, plan.delete_ids)
        if plan.override_to_delete:
            on, period_type = plan.override_to_delete
            self.override_repo.delete_overrides_for_date(self.db, on, period_type)
            publish_change(PERIOD_TYPE_OVERRIDE)
