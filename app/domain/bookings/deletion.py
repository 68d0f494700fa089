"""
Booking delete targets

Decides which booking instances a delete removes and whether the parent
booking goes with them. A booking left with no instances is an orphan and
is deleted as well.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Iterable, Optional, Union

from ...errors import ValidationError
from ..scheduling.scope import ScopeMode, ScopeSelection, select_occurrences


class ParentDeletion(str, Enum):
    IF_EMPTY = "if_empty"  # delete the booking only when no instance remains
    ALWAYS = "always"


@dataclass(frozen=True)
class BookingDeletePlan:
    booking_id: int
    # None means every instance of the booking
    instance_ids: Optional[tuple[int, ...]]
    parent_deletion: ParentDeletion

    @property
    def is_series(self) -> bool:
        return self.instance_ids is None


def resolve_delete_targets(
    booking_id: int,
    selected_instance_ids: Optional[Iterable[int]] = None,
    scope: Optional[ScopeSelection] = None,
    instances: Iterable[tuple[int, Union[date, datetime]]] = (),
) -> BookingDeletePlan:
    """
    Build the delete plan for a booking.

    Either an explicit instance selection or a series scope is given. An
    explicit selection must not be empty. For "single"/"future" scopes the
    targeted ids are picked from `instances`, the booking's (id, start) pairs.
    """
    if selected_instance_ids is not None:
        ids = tuple(dict.fromkeys(selected_instance_ids))
        if not ids:
            raise ValidationError("Select at least one session to delete")
        return BookingDeletePlan(booking_id, ids, ParentDeletion.IF_EMPTY)

    if scope is None or scope.mode is ScopeMode.ALL:
        return BookingDeletePlan(booking_id, None, ParentDeletion.ALWAYS)

    ids = tuple(select_occurrences(instances, scope))
    if not ids:
        when = scope.series.occurrence_date.isoformat()
        if scope.mode is ScopeMode.FUTURE:
            raise ValidationError(f"No sessions found on or after {when}")
        raise ValidationError(f"No session found on {when}")
    return BookingDeletePlan(booking_id, ids, ParentDeletion.IF_EMPTY)


def should_delete_parent(plan: BookingDeletePlan, remaining_count: int) -> bool:
    if plan.parent_deletion is ParentDeletion.ALWAYS:
        return True
    return remaining_count == 0
