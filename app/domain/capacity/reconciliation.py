"""
Default reconciliation

When a period-type default changes, schedules that were still carrying the
old default (same capacity, same platform set) follow it to the new values.
Schedules an admin customized keep their values.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from ...shared.platforms import platforms_for_storage, platforms_match


@dataclass(frozen=True)
class DefaultValues:
    capacity: int
    platforms: Optional[list[int]] = None


@dataclass(frozen=True)
class ScheduleCandidate:
    id: int
    capacity: int
    platforms: Optional[list[int]] = None


@dataclass(frozen=True)
class ReconciliationPatch:
    """Column values written to every migrated schedule in one batch"""

    capacity: int
    platforms: Optional[list[int]]

    @classmethod
    def from_default(cls, new_default: DefaultValues) -> "ReconciliationPatch":
        return cls(capacity=new_default.capacity, platforms=platforms_for_storage(new_default.platforms))

    def as_update(self) -> dict:
        return {"capacity": self.capacity, "platforms": self.platforms}


def is_inheriting(candidate: ScheduleCandidate, old_default: DefaultValues) -> bool:
    """True if the schedule still carries the old default's values"""
    return candidate.capacity == old_default.capacity and platforms_match(
        candidate.platforms, old_default.platforms
    )


def reconcile_default(
    old_default: Optional[DefaultValues],
    new_default: DefaultValues,
    candidates: Iterable[ScheduleCandidate],
) -> set[int]:
    """
    Ids of the schedules to migrate to `new_default`.

    With no previous default nothing was inheriting, so the set is empty.
    `new_default` does not affect which schedules match; it is the target
    the caller writes with ReconciliationPatch.from_default.
    """
    if old_default is None:
        return set()

    return {candidate.id for candidate in candidates if is_inheriting(candidate, old_default)}
