"""Booking service - Business logic for booking lookup and deletion"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...activity import BookingActivity
from ...cache import BOOKING, booking_info_key, booking_instances_key, cache, publish_change
from ...errors import NotFoundError, StoreError, ValidationError
from ...models import Booking
from ..scheduling.scope import ScopeMode, SeriesInfo, resolve_scope
from .deletion import BookingDeletePlan, ParentDeletion, resolve_delete_targets, should_delete_parent
from .repository import BookingRepository
from .schemas import BookingInfoResponse, BookingInstanceResponse

logger = logging.getLogger(__name__)


class BookingService:
    """Service layer for booking business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BookingRepository()

    def _get_booking(self, booking_id: int) -> Booking:
        booking = self.repo.get_booking(self.db, booking_id)
        if not booking:
            raise NotFoundError(f"Booking {booking_id} not found")
        return booking

    def get_booking_info(self, booking_id: int) -> dict:
        """Booking summary, cached under booking-info:<id>"""

        def load():
            booking = self._get_booking(booking_id)
            return BookingInfoResponse(
                id=booking.id,
                title=booking.title,
                sideId=booking.side_id,
                recurrenceType=booking.recurrence_type,
                color=booking.color,
                isLocked=booking.is_locked,
                createdBy=booking.created_by,
                instanceCount=self.repo.count_instances(self.db, booking.id),
            ).model_dump()

        return cache.get_or_load(booking_info_key(booking_id), load)

    def get_instances(self, booking_id: int) -> list[dict]:
        """Booking instances, cached under booking-instances:<id>"""

        def load():
            self._get_booking(booking_id)
            return [
                BookingInstanceResponse.model_validate(instance).model_dump(mode="json")
                for instance in self.repo.get_instances(self.db, booking_id)
            ]

        return cache.get_or_load(booking_instances_key(booking_id), load)

    def delete_instances(
        self, booking_id: int, instance_ids: list[int], actor_user_id: Optional[str] = None
    ) -> dict:
        """Delete selected sessions; the booking goes too once none remain"""
        # Validate before touching the store
        plan = resolve_delete_targets(booking_id, selected_instance_ids=instance_ids)
        booking = self._get_booking(booking_id)
        return self._execute(plan, booking, actor_user_id, "Failed to delete bookings")

    def delete_series(
        self,
        booking_id: int,
        scope: Optional[str] = None,
        occurrence_date: Optional[date] = None,
        actor_user_id: Optional[str] = None,
    ) -> dict:
        """Delete a whole series, or the part of it a scope selects"""
        booking = self._get_booking(booking_id)

        selection = None
        if scope is not None and scope != ScopeMode.ALL.value:
            if occurrence_date is None:
                raise ValidationError("occurrenceDate is required for a single or future scope")
            series = SeriesInfo(recurrence_type=booking.recurrence_type, occurrence_date=occurrence_date)
            selection = resolve_scope(series, scope)

        instances = []
        if selection is not None:
            instances = [(i.id, i.start) for i in self.repo.get_instances(self.db, booking_id)]

        plan = resolve_delete_targets(booking_id, scope=selection, instances=instances)
        return self._execute(plan, booking, actor_user_id, "Failed to delete booking series")

    def _execute(
        self, plan: BookingDeletePlan, booking: Booking, actor_user_id: Optional[str], error_prefix: str
    ) -> dict:
        """
        Run a delete plan: instances first, then the parent booking if the plan
        calls for it. There is no rollback across the two steps; a failure in
        the second leaves the first committed.
        """
        booking_id = booking.id
        title = booking.title

        try:
            deleted_count = self.repo.delete_instances(self.db, booking_id, plan.instance_ids)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to delete instances of booking {booking_id}: {e}")
            raise StoreError(f"{error_prefix}: {e}") from e

        logger.info(f"🗑️ Deleted {deleted_count} instance(s) of booking {booking_id}")

        try:
            booking_deleted = self._delete_parent_if_needed(plan, error_prefix)
        finally:
            # Instances are gone either way
            publish_change(BOOKING, booking_id)

        if booking_deleted:
            reason = "series_deleted" if plan.parent_deletion is ParentDeletion.ALWAYS else "all_instances_deleted"
            BookingActivity.deleted(self.db, booking_id, actor_user_id, title, reason)
            message = f"Deleted booking '{title}' and {deleted_count} session(s)"
        else:
            BookingActivity.instances_deleted(self.db, booking_id, actor_user_id, title, deleted_count)
            message = f"Deleted {deleted_count} session(s)"

        return {
            "bookingId": booking_id,
            "deletedInstanceCount": deleted_count,
            "bookingDeleted": booking_deleted,
            "message": message,
        }

    def _delete_parent_if_needed(self, plan: BookingDeletePlan, error_prefix: str) -> bool:
        booking_id = plan.booking_id
        remaining = 0
        if plan.parent_deletion is ParentDeletion.IF_EMPTY:
            try:
                remaining = self.repo.count_instances(self.db, booking_id)
            except SQLAlchemyError as e:
                self.db.rollback()
                # Unknown remainder: keep the booking rather than risk deleting a live one
                logger.warning(f"⚠️ Error checking remaining instances for booking {booking_id}: {e}")
                return False

        if not should_delete_parent(plan, remaining):
            return False

        try:
            self.repo.delete_booking(self.db, booking_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to delete booking {booking_id}: {e}")
            raise StoreError(f"{error_prefix}: {e}") from e

        logger.info(f"🗑️ Deleted booking {booking_id}")
        return True
