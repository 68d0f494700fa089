"""
Weekly capacity grid

Resolves the capacity of every hourly slot of a Monday-based week from the
schedule rows of a side and the date overrides. A slot takes the first
applicable schedule, single-date rows first; an override for that date and
period type replaces the schedule's capacity.
"""

from dataclasses import asdict, dataclass
from datetime import date, timedelta
from typing import Any, Iterable, Optional

from ...shared.platforms import normalize_platforms
from .schedule_rules import schedule_applies

SLOT_TIMES = [f"{hour:02d}:00" for hour in range(24)]


def week_start_for(day: date) -> date:
    """Monday of the week containing day"""
    return day - timedelta(days=day.weekday())


@dataclass
class GridCell:
    date: date
    time: str
    capacity: int
    periodType: str
    scheduleId: int
    startTime: str
    endTime: str
    recurrenceType: str
    platforms: list[int]
    overridden: bool = False

    def as_dict(self) -> dict:
        data = asdict(self)
        data["date"] = self.date.isoformat()
        return data


def _applicable_schedule(schedules: list[Any], day: date, time_str: str) -> Optional[Any]:
    return next((s for s in schedules if schedule_applies(s, day, time_str)), None)


def build_week_grid(schedules: Iterable[Any], overrides: Iterable[Any], week_start: date) -> list[GridCell]:
    # single rows are the most specific and win over a recurring series
    ordered = sorted(schedules, key=lambda s: s.recurrence_type != "single")
    override_capacity = {(o.date, o.period_type): o.capacity for o in overrides}

    cells = []
    for offset in range(7):
        day = week_start + timedelta(days=offset)
        for time_str in SLOT_TIMES:
            schedule = _applicable_schedule(ordered, day, time_str)
            if schedule is None:
                continue
            override = override_capacity.get((day, schedule.period_type))
            cells.append(
                GridCell(
                    date=day,
                    time=time_str,
                    capacity=schedule.capacity if override is None else override,
                    periodType=schedule.period_type,
                    scheduleId=schedule.id,
                    startTime=schedule.start_time,
                    endTime=schedule.end_time,
                    recurrenceType=schedule.recurrence_type,
                    platforms=normalize_platforms(schedule.platforms),
                    overridden=override is not None,
                )
            )
    return cells
