"""Tests for the pure capacity schedule helpers"""

from datetime import date

import pytest

from app.domain.capacity.schedule_rules import (
    NewSchedule,
    SchedulePattern,
    build_schedules,
    expand_recurrence,
    find_overlaps,
    format_conflicts,
    parse_excluded_dates,
    plan_schedule_deletion,
    schedule_applies,
)
from app.domain.scheduling.scope import SeriesInfo, resolve_scope
from app.errors import ValidationError

MONDAY = date(2024, 6, 10)
PATTERN = SchedulePattern("weekly", "09:00", "10:00", "Performance")


def row(id=None, day_of_week=1, start_time="09:00", end_time="10:00", recurrence_type="weekly",
        start_date=date(2024, 6, 3), end_date=None, excluded_dates=None, period_type="Performance"):
    return NewSchedule(
        id=id,
        side_id=1,
        day_of_week=day_of_week,
        start_time=start_time,
        end_time=end_time,
        capacity=10,
        period_type=period_type,
        recurrence_type=recurrence_type,
        start_date=start_date,
        end_date=end_date,
        excluded_dates=excluded_dates,
    )


def selection(mode, on=MONDAY, recurrence_type="weekly"):
    return resolve_scope(SeriesInfo(recurrence_type, on), mode)


class TestExpandRecurrence:
    def test_weekday_covers_monday_to_friday(self):
        assert expand_recurrence("weekday", MONDAY) == [1, 2, 3, 4, 5]

    def test_weekend_covers_saturday_and_sunday(self):
        assert expand_recurrence("weekend", MONDAY) == [6, 0]

    def test_other_types_use_the_selected_weekday(self):
        assert expand_recurrence("weekly", MONDAY) == [1]
        assert expand_recurrence("single", date(2024, 6, 9)) == [0]

    def test_build_schedules_normalizes_times(self):
        rows = build_schedules(1, "weekend", MONDAY, "9:00", "10:30:00", 12, "High Hybrid", [1])
        assert [(r.day_of_week, r.start_time, r.end_time) for r in rows] == [(6, "09:00", "10:30"), (0, "09:00", "10:30")]
        assert all(r.start_date == MONDAY and r.platforms == [1] for r in rows)


class TestScheduleApplies:
    def test_time_window_is_half_open(self):
        schedule = row()
        assert schedule_applies(schedule, MONDAY, "09:00")
        assert schedule_applies(schedule, MONDAY, "09:59")
        assert not schedule_applies(schedule, MONDAY, "10:00")
        assert not schedule_applies(schedule, MONDAY, "08:59")

    def test_excluded_date_is_skipped(self):
        schedule = row(excluded_dates=["2024-06-10"])
        assert not schedule_applies(schedule, MONDAY, "09:30")
        assert schedule_applies(schedule, date(2024, 6, 17), "09:30")

    def test_active_date_range(self):
        schedule = row(start_date=date(2024, 6, 10), end_date=date(2024, 6, 17))
        assert not schedule_applies(schedule, date(2024, 6, 3), "09:30")
        assert schedule_applies(schedule, date(2024, 6, 17), "09:30")
        assert not schedule_applies(schedule, date(2024, 6, 24), "09:30")

    def test_other_weekday_does_not_apply(self):
        assert not schedule_applies(row(), date(2024, 6, 11), "09:30")

    def test_single_schedule_applies_on_its_date_only(self):
        schedule = row(recurrence_type="single", start_date=MONDAY)
        assert schedule_applies(schedule, MONDAY, "09:30")
        assert not schedule_applies(schedule, date(2024, 6, 17), "09:30")

    def test_excluded_dates_stored_as_json_text(self):
        assert parse_excluded_dates('["2024-06-10"]') == ["2024-06-10"]
        assert parse_excluded_dates("not json") == []
        assert parse_excluded_dates(None) == []


class TestFindOverlaps:
    def test_overlapping_window_is_reported(self):
        new = row(start_time="09:30", end_time="10:30", period_type="High Hybrid")

        conflicts = find_overlaps([new], [row()])

        assert conflicts == ['Monday (Weekly) 09:30 - 10:30: Already booked as "Performance"']

    def test_adjacent_windows_do_not_overlap(self):
        assert find_overlaps([row(start_time="10:00", end_time="11:00")], [row()]) == []

    def test_other_day_does_not_overlap(self):
        assert find_overlaps([row(day_of_week=2)], [row()]) == []

    def test_ended_series_does_not_overlap_later_schedule(self):
        ended = row(end_date=date(2024, 6, 9))
        later = row(recurrence_type="single", start_date=MONDAY)
        assert find_overlaps([later], [ended]) == []

    def test_format_lists_every_conflict(self):
        message = format_conflicts(["a", "b"])
        assert message.startswith("Schedule conflicts detected:")
        assert "  • a\n  • b" in message


class TestPlanScheduleDeletion:
    def test_single_on_recurring_series_excludes_the_date(self):
        plan = plan_schedule_deletion([row(id=1, excluded_dates=["2024-06-03"])], PATTERN, selection("single"))

        assert plan.delete_ids == []
        assert plan.exclusions == {1: ["2024-06-03", "2024-06-10"]}

    def test_single_on_single_schedule_deletes_it_with_its_override(self):
        pattern = SchedulePattern("single", "09:00", "10:00", "Performance")
        schedules = [row(id=4, recurrence_type="single", start_date=MONDAY)]

        plan = plan_schedule_deletion(schedules, pattern, selection("single", recurrence_type="single"))

        assert plan.delete_ids == [4]
        assert plan.override_to_delete == (MONDAY, "Performance")

    def test_future_truncates_earlier_rows_and_deletes_later_ones(self):
        schedules = [
            row(id=1, start_date=date(2024, 6, 3)),
            row(id=2, start_date=date(2024, 6, 17)),
            row(id=3, start_date=date(2024, 5, 6), end_date=date(2024, 5, 27)),
        ]

        plan = plan_schedule_deletion(schedules, PATTERN, selection("future"))

        assert plan.delete_ids == [2]
        assert plan.end_date_updates == {1: date(2024, 6, 9)}

    def test_all_deletes_every_matching_row(self):
        schedules = [row(id=1), row(id=2, day_of_week=3), row(id=3, start_time="11:00", end_time="12:00")]

        plan = plan_schedule_deletion(schedules, PATTERN, selection("all"))

        assert plan.delete_ids == [1, 2]

    def test_no_match_for_single_is_rejected(self):
        with pytest.raises(ValidationError, match="No matching schedule found to delete"):
            plan_schedule_deletion([row(id=1, day_of_week=2)], PATTERN, selection("single"))

    def test_single_picks_the_row_active_on_the_date(self):
        schedules = [
            row(id=1, start_date=date(2024, 6, 3), end_date=date(2024, 6, 9)),
            row(id=2, start_date=MONDAY),
        ]

        plan = plan_schedule_deletion(schedules, PATTERN, selection("single", on=date(2024, 6, 17)))

        assert plan.exclusions == {2: ["2024-06-17"]}

    def test_single_before_series_start_is_rejected(self):
        with pytest.raises(ValidationError, match="No matching schedule found to delete"):
            plan_schedule_deletion([row(id=1, start_date=MONDAY)], PATTERN, selection("single", on=date(2024, 6, 3)))

    def test_no_match_for_series_is_rejected(self):
        with pytest.raises(ValidationError, match="No schedules found matching the pattern"):
            plan_schedule_deletion([], PATTERN, selection("all"))

    def test_pattern_matches_unpadded_times(self):
        assert SchedulePattern("weekly", "9:00", "10:00", "Performance").matches(row())
