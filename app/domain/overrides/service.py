"""Override service - Business logic for date-specific capacity overrides"""

import logging
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...cache import OVERRIDES_PREFIX, PERIOD_TYPE_OVERRIDE, cache, publish_change
from ...config import OVERRIDE_LOOKBACK_DAYS
from ...errors import NotFoundError, StoreError
from ...models import PeriodTypeOverride
from .repository import OverrideRepository
from .schemas import OverrideCreate, OverrideResponse, OverrideUpdate

logger = logging.getLogger(__name__)


class OverrideService:
    """Service layer for override business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = OverrideRepository()

    def list_overrides(self, today: Optional[date] = None) -> list[dict]:
        """Overrides from the lookback window onwards, newest first"""
        since = (today or date.today()) - timedelta(days=OVERRIDE_LOOKBACK_DAYS)

        def load():
            return [
                OverrideResponse.model_validate(o).model_dump(mode="json")
                for o in self.repo.get_overrides_since(self.db, since)
            ]

        return cache.get_or_load(f"{OVERRIDES_PREFIX}{since.isoformat()}", load)

    def get_override(self, override_id: int) -> PeriodTypeOverride:
        override = self.repo.get_override(self.db, override_id)
        if not override:
            raise NotFoundError(f"Override {override_id} not found")
        return override

    def create_override(self, data: OverrideCreate) -> PeriodTypeOverride:
        try:
            override = self.repo.create_override(
                self.db,
                date=data.date,
                period_type=data.periodType,
                capacity=data.capacity,
                notes=data.notes or None,
                booking_id=data.bookingId,
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error saving override: {e}")
            raise StoreError(f"Failed to save override: {e}") from e

        logger.info(f"📅 Created override {override.id} for {data.date} ({data.periodType})")
        publish_change(PERIOD_TYPE_OVERRIDE, override.id)
        return override

    def update_override(self, override_id: int, data: OverrideUpdate) -> PeriodTypeOverride:
        override = self.get_override(override_id)
        try:
            override = self.repo.update_override(
                self.db, override, capacity=data.capacity, notes=data.notes or None
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error saving override {override_id}: {e}")
            raise StoreError(f"Failed to save override: {e}") from e

        publish_change(PERIOD_TYPE_OVERRIDE, override.id)
        return override

    def delete_override(self, override_id: int) -> dict:
        """Delete an override; a linked booking is kept"""
        override = self.get_override(override_id)
        booking_id = override.booking_id
        try:
            self.repo.delete_override(self.db, override)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error deleting override {override_id}: {e}")
            raise StoreError(f"Failed to delete override: {e}") from e

        publish_change(PERIOD_TYPE_OVERRIDE, override_id)
        return {"message": "Override deleted", "bookingId": booking_id}
