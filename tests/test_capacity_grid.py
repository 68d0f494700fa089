"""Tests for the weekly capacity grid"""

from datetime import date
from types import SimpleNamespace

from app.domain.capacity.grid import build_week_grid, week_start_for
from app.domain.capacity.schedule_rules import NewSchedule

MONDAY = date(2024, 6, 10)


def row(id, **overrides):
    values = dict(
        id=id,
        side_id=1,
        day_of_week=1,
        start_time="09:00",
        end_time="11:00",
        capacity=10,
        period_type="Performance",
        recurrence_type="weekly",
        start_date=date(2024, 6, 3),
    )
    values.update(overrides)
    return NewSchedule(**values)


def override(on, capacity, period_type="Performance"):
    return SimpleNamespace(date=on, period_type=period_type, capacity=capacity)


def test_week_starts_on_monday():
    assert week_start_for(date(2024, 6, 13)) == MONDAY
    assert week_start_for(date(2024, 6, 16)) == MONDAY
    assert week_start_for(MONDAY) == MONDAY


def test_schedule_fills_each_hour_it_covers():
    cells = build_week_grid([row(1)], [], MONDAY)

    assert [(c.date, c.time, c.capacity) for c in cells] == [(MONDAY, "09:00", 10), (MONDAY, "10:00", 10)]
    assert cells[0].platforms == []


def test_single_row_wins_over_series_on_its_date():
    schedules = [row(1), row(2, recurrence_type="single", start_date=MONDAY, capacity=3)]

    cells = build_week_grid(schedules, [], MONDAY)

    assert {c.scheduleId for c in cells} == {2}


def test_override_replaces_capacity_for_its_period_type():
    cells = build_week_grid([row(1)], [override(MONDAY, 4), override(MONDAY, 1, "Closed")], MONDAY)

    assert all(c.capacity == 4 and c.overridden for c in cells)


def test_excluded_and_ended_rows_leave_slots_empty():
    schedules = [row(1, excluded_dates=["2024-06-10"]), row(2, day_of_week=2, end_date=date(2024, 6, 9))]
    assert build_week_grid(schedules, [], MONDAY) == []


def test_grid_endpoint_is_cached_as_snapshot(client, sides, make_schedule, fake_redis):
    side_id = sides["Power"]
    make_schedule(side_id)

    response = client.get("/capacity/grid", params={"side_id": side_id, "week_start": "2024-06-12"})

    assert response.status_code == 200
    assert response.json() == [
        {
            "date": "2024-06-10",
            "time": "09:00",
            "capacity": 10,
            "periodType": "Performance",
            "scheduleId": 1,
            "startTime": "09:00",
            "endTime": "10:00",
            "recurrenceType": "weekly",
            "platforms": [],
            "overridden": False,
        }
    ]
    assert f"snapshot:{side_id}:2024-06-10" in fake_redis.store


def test_override_change_refreshes_the_grid(client, sides, make_schedule, fake_redis):
    side_id = sides["Power"]
    make_schedule(side_id)
    params = {"side_id": side_id, "week_start": "2024-06-10"}
    client.get("/capacity/grid", params=params)

    client.post("/capacity/overrides", json={"date": "2024-06-10", "periodType": "Performance", "capacity": 2})

    assert f"snapshot:{side_id}:2024-06-10" not in fake_redis.store
    assert client.get("/capacity/grid", params=params).json()[0]["capacity"] == 2
