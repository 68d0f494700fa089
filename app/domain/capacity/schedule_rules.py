"""
Capacity schedule rules

Pure helpers over schedule rows: which days a recurrence covers, whether a
schedule applies to a slot, overlap detection, and the deletion plan for a
scoped delete. Rows are anything with the capacity_schedules attributes
(ORM objects or NewSchedule).
"""

import json
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Iterable, Optional

from ...errors import ValidationError
from ...shared.validators import day_of_week, normalize_time, time_to_minutes
from ..scheduling.scope import ScopeMode, ScopeSelection

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
WEEKDAYS = (1, 2, 3, 4, 5)
WEEKEND = (6, 0)


@dataclass
class NewSchedule:
    side_id: int
    day_of_week: int
    start_time: str
    end_time: str
    capacity: int
    period_type: str
    recurrence_type: str
    start_date: date
    end_date: Optional[date] = None
    platforms: Optional[list[int]] = None
    excluded_dates: Optional[list[str]] = None
    id: Optional[int] = None

    def as_row(self) -> dict:
        return {
            "side_id": self.side_id,
            "day_of_week": self.day_of_week,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "capacity": self.capacity,
            "period_type": self.period_type,
            "recurrence_type": self.recurrence_type,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "platforms": self.platforms,
            "excluded_dates": self.excluded_dates,
        }


@dataclass(frozen=True)
class SchedulePattern:
    """What identifies one series in the schedule grid"""

    recurrence_type: str
    start_time: str
    end_time: str
    period_type: str

    def matches(self, schedule: Any) -> bool:
        return (
            schedule.recurrence_type == self.recurrence_type
            and normalize_time(schedule.start_time) == normalize_time(self.start_time)
            and normalize_time(schedule.end_time) == normalize_time(self.end_time)
            and schedule.period_type == self.period_type
        )

    def describe(self) -> str:
        return f"{self.recurrence_type}, {self.start_time}-{self.end_time}, {self.period_type}"


def parse_excluded_dates(excluded_dates: Any) -> list[str]:
    """Excluded dates as a list of ISO strings; tolerates JSON-encoded text"""
    if isinstance(excluded_dates, list):
        return [str(d) for d in excluded_dates]
    if isinstance(excluded_dates, str):
        try:
            parsed = json.loads(excluded_dates)
        except ValueError:
            return []
        return [str(d) for d in parsed] if isinstance(parsed, list) else []
    return []


def expand_recurrence(recurrence_type: str, selected_date: date) -> list[int]:
    """Days of week that get a schedule row for a recurrence type"""
    if recurrence_type == "weekday":
        return list(WEEKDAYS)
    if recurrence_type == "weekend":
        return list(WEEKEND)
    return [day_of_week(selected_date)]


def build_schedules(
    side_id: int,
    recurrence_type: str,
    selected_date: date,
    start_time: str,
    end_time: str,
    capacity: int,
    period_type: str,
    platforms: Optional[list[int]] = None,
) -> list[NewSchedule]:
    return [
        NewSchedule(
            side_id=side_id,
            day_of_week=dow,
            start_time=normalize_time(start_time),
            end_time=normalize_time(end_time),
            capacity=capacity,
            period_type=period_type,
            recurrence_type=recurrence_type,
            start_date=selected_date,
            platforms=platforms,
        )
        for dow in expand_recurrence(recurrence_type, selected_date)
    ]


def active_range(schedule: Any) -> tuple[date, Optional[date]]:
    """Dates a row can apply to; an open end is None"""
    if schedule.recurrence_type == "single":
        return schedule.start_date, schedule.start_date
    return schedule.start_date, schedule.end_date


def covers_date(schedule: Any, day: date) -> bool:
    """True if the row sits on day's weekday and its active range contains day"""
    start, end = active_range(schedule)
    return schedule.day_of_week == day_of_week(day) and start <= day and (end is None or day <= end)


def schedule_applies(schedule: Any, day: date, time_str: str) -> bool:
    """True if the schedule covers the slot starting at time_str on day.

    The time window is half-open: a schedule ending at 09:00 does not cover 09:00.
    """
    minutes = time_to_minutes(time_str)
    if not (time_to_minutes(schedule.start_time) <= minutes < time_to_minutes(schedule.end_time)):
        return False

    if day.isoformat() in parse_excluded_dates(schedule.excluded_dates):
        return False

    if not covers_date(schedule, day):
        return False

    dow = day_of_week(day)
    if schedule.recurrence_type == "weekday":
        return dow in WEEKDAYS
    if schedule.recurrence_type == "weekend":
        return dow in WEEKEND
    return True


def _ranges_intersect(a: tuple[date, Optional[date]], b: tuple[date, Optional[date]]) -> bool:
    a_start, a_end = a
    b_start, b_end = b
    return (a_end is None or b_start <= a_end) and (b_end is None or a_start <= b_end)


def _recurrence_label(schedule: Any) -> str:
    if schedule.recurrence_type == "single":
        return schedule.start_date.strftime("%b %d, %Y")
    return {
        "weekday": "Weekdays",
        "weekend": "Weekends",
        "weekly": "Weekly",
    }.get(schedule.recurrence_type, "All future")


def find_overlaps(new_schedules: Iterable[Any], existing: Iterable[Any]) -> list[str]:
    """Conflict descriptions for new rows that collide with existing ones"""
    existing = list(existing)
    conflicts = []
    for new in new_schedules:
        for other in existing:
            if new.day_of_week != other.day_of_week:
                continue
            if not _ranges_intersect(active_range(new), active_range(other)):
                continue
            overlaps = time_to_minutes(new.start_time) < time_to_minutes(other.end_time) and time_to_minutes(
                new.end_time
            ) > time_to_minutes(other.start_time)
            if overlaps:
                conflicts.append(
                    f"{DAY_NAMES[new.day_of_week]} ({_recurrence_label(new)}) "
                    f"{new.start_time} - {new.end_time}: Already booked as \"{other.period_type}\""
                )
    return conflicts


def format_conflicts(conflicts: list[str]) -> str:
    lines = "\n".join(f"  • {c}" for c in conflicts)
    return (
        f"Schedule conflicts detected:\n{lines}\n\n"
        "Please select a different time or remove the existing schedule first."
    )


@dataclass
class ScheduleDeletionPlan:
    delete_ids: list[int] = field(default_factory=list)
    # schedule id -> new end_date, for series that keep their past occurrences
    end_date_updates: dict[int, date] = field(default_factory=dict)
    # schedule id -> full excluded_dates list to write
    exclusions: dict[int, list[str]] = field(default_factory=dict)
    # (date, period_type) of a single-date override to drop alongside
    override_to_delete: Optional[tuple[date, str]] = None

    @property
    def is_empty(self) -> bool:
        return not (self.delete_ids or self.end_date_updates or self.exclusions)


def plan_schedule_deletion(
    schedules: Iterable[Any], pattern: SchedulePattern, selection: ScopeSelection
) -> ScheduleDeletionPlan:
    """
    Work out what a scoped delete does to the schedule rows of one side.

    single: a single-date row is deleted (with its override); a recurring
            series gets the date excluded.
    future: rows starting on/after the date are deleted, earlier rows are
            ended the day before so past occurrences stay.
    all:    every row of the series is deleted.
    """
    selected = selection.series.occurrence_date
    selected_str = selected.isoformat()
    matching = [s for s in schedules if pattern.matches(s)]
    plan = ScheduleDeletionPlan()

    if selection.mode is ScopeMode.SINGLE:
        # A future edit leaves an ended row and a live row with the same pattern
        target = next((s for s in matching if covers_date(s, selected)), None)
        if target is None:
            raise ValidationError("No matching schedule found to delete")

        if target.recurrence_type == "single":
            plan.delete_ids.append(target.id)
            plan.override_to_delete = (selected, target.period_type)
        else:
            excluded = parse_excluded_dates(target.excluded_dates)
            if selected_str not in excluded:
                plan.exclusions[target.id] = excluded + [selected_str]
        return plan

    if not matching:
        raise ValidationError(f"No schedules found matching the pattern. Looking for: {pattern.describe()}")

    if selection.mode is ScopeMode.ALL:
        plan.delete_ids.extend(s.id for s in matching)
        return plan

    day_before = selected - timedelta(days=1)
    for schedule in matching:
        if schedule.start_date >= selected:
            plan.delete_ids.append(schedule.id)
        elif schedule.end_date is None or schedule.end_date >= selected:
            plan.end_date_updates[schedule.id] = day_before
    return plan
