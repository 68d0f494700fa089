"""API tests for capacity schedules"""

from datetime import date

from app.models import CapacitySchedule, PeriodTypeOverride


def schedule_payload(side_id, **overrides):
    payload = {
        "sideId": side_id,
        "selectedDate": "2024-06-10",
        "startTime": "09:00",
        "endTime": "10:00",
        "capacity": 10,
        "periodType": "Performance",
        "recurrenceType": "weekly",
        "platforms": [1, 2],
    }
    payload.update(overrides)
    return payload


def delete_payload(side_id, mode, **overrides):
    payload = {
        "sideId": side_id,
        "selectedDate": "2024-06-17",
        "startTime": "09:00",
        "endTime": "10:00",
        "periodType": "Performance",
        "recurrenceType": "weekly",
        "mode": mode,
    }
    payload.update(overrides)
    return payload


def all_schedules(db_session):
    db_session.expire_all()
    return db_session.query(CapacitySchedule).order_by(CapacitySchedule.id).all()


def test_weekday_schedule_creates_a_row_per_weekday(client, sides):
    response = client.post("/capacity/schedules", json=schedule_payload(sides["Power"], recurrenceType="weekday"))

    assert response.status_code == 200
    rows = response.json()
    assert sorted(r["day_of_week"] for r in rows) == [1, 2, 3, 4, 5]
    assert all(r["start_date"] == "2024-06-10" and r["platforms"] == [1, 2] for r in rows)


def test_saving_same_slot_replaces_it(client, sides, db_session):
    client.post("/capacity/schedules", json=schedule_payload(sides["Power"], capacity=5))
    response = client.post("/capacity/schedules", json=schedule_payload(sides["Power"], capacity=7))

    assert response.status_code == 200
    assert [s.capacity for s in all_schedules(db_session)] == [7]


def test_overlapping_schedule_is_rejected(client, sides, make_schedule):
    make_schedule(sides["Power"], start_time="09:30", end_time="10:30", recurrence_type="weekday")

    response = client.post("/capacity/schedules", json=schedule_payload(sides["Power"], periodType="High Hybrid"))

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail.startswith("Schedule conflicts detected:")
    assert 'Monday (Weekly) 09:00 - 10:00: Already booked as "Performance"' in detail


def test_end_before_start_is_rejected(client, sides):
    response = client.post("/capacity/schedules", json=schedule_payload(sides["Power"], endTime="08:00"))
    assert response.status_code == 422


def test_single_schedule_sets_date_override(client, sides, db_session):
    response = client.post(
        "/capacity/schedules",
        json=schedule_payload(sides["Power"], recurrenceType="single", selectedDate="2024-06-12", capacity=3),
    )

    assert response.status_code == 200
    override = db_session.query(PeriodTypeOverride).one()
    assert (override.date, override.period_type, override.capacity) == (date(2024, 6, 12), "Performance", 3)


def test_empty_platforms_stored_as_null(client, sides, db_session):
    client.post("/capacity/schedules", json=schedule_payload(sides["Power"], platforms=[]))
    assert all_schedules(db_session)[0].platforms is None


def test_listing_is_cached_and_refreshed_after_save(client, sides, fake_redis):
    side_id = sides["Power"]
    assert client.get("/capacity/schedules", params={"side_id": side_id}).json() == []
    assert f"capacity-schedules:{side_id}" in fake_redis.store

    client.post("/capacity/schedules", json=schedule_payload(side_id))

    assert f"capacity-schedules:{side_id}" not in fake_redis.store
    assert len(client.get("/capacity/schedules", params={"side_id": side_id}).json()) == 1


def test_delete_single_occurrence_excludes_the_date(client, sides, db_session, make_schedule):
    schedule_id = make_schedule(sides["Power"]).id

    response = client.post("/capacity/schedules/delete", json=delete_payload(sides["Power"], "single"))

    assert response.status_code == 200
    assert response.json() == {"deletedIds": [], "endedIds": [], "excludedIds": [schedule_id], "mode": "single"}
    assert all_schedules(db_session)[0].excluded_dates == ["2024-06-17"]


def test_delete_future_ends_series_the_day_before(client, sides, db_session, make_schedule):
    schedule_id = make_schedule(sides["Power"]).id

    response = client.post("/capacity/schedules/delete", json=delete_payload(sides["Power"], "future"))

    assert response.json()["endedIds"] == [schedule_id]
    assert all_schedules(db_session)[0].end_date == date(2024, 6, 16)


def test_delete_all_removes_every_row_of_the_series(client, sides, db_session, make_schedule):
    for day in range(1, 6):
        make_schedule(sides["Power"], day_of_week=day, recurrence_type="weekday")
    kept = make_schedule(sides["Power"], day_of_week=6, start_time="11:00", end_time="12:00").id

    response = client.post(
        "/capacity/schedules/delete",
        json=delete_payload(sides["Power"], "all", recurrenceType="weekday"),
    )

    assert len(response.json()["deletedIds"]) == 5
    assert [s.id for s in all_schedules(db_session)] == [kept]


def test_delete_single_schedule_drops_its_override(client, sides, db_session):
    client.post(
        "/capacity/schedules",
        json=schedule_payload(sides["Power"], recurrenceType="single", selectedDate="2024-06-12"),
    )

    response = client.post(
        "/capacity/schedules/delete",
        json=delete_payload(sides["Power"], "future", recurrenceType="single", selectedDate="2024-06-12"),
    )

    # future is not available for a single schedule
    assert response.json()["mode"] == "single"
    assert all_schedules(db_session) == []
    assert db_session.query(PeriodTypeOverride).count() == 0


def test_delete_without_match_is_rejected(client, sides):
    response = client.post("/capacity/schedules/delete", json=delete_payload(sides["Power"], "single"))

    assert response.status_code == 400
    assert response.json()["detail"] == "No matching schedule found to delete"


def test_edit_future_splits_the_series(client, sides, db_session, make_schedule):
    schedule_id = make_schedule(sides["Power"], capacity=5).id

    response = client.post(
        "/capacity/schedules",
        json=schedule_payload(
            sides["Power"], selectedDate="2024-06-17", capacity=8, scheduleId=schedule_id, editMode="future"
        ),
    )

    assert response.status_code == 200
    original, edited = all_schedules(db_session)
    assert (original.id, original.capacity, original.end_date) == (schedule_id, 5, date(2024, 6, 16))
    assert (edited.capacity, edited.start_date, edited.end_date) == (8, date(2024, 6, 17), None)


def test_edit_single_occurrence_of_series(client, sides, db_session, make_schedule):
    schedule_id = make_schedule(sides["Power"], capacity=5).id

    response = client.post(
        "/capacity/schedules",
        json=schedule_payload(
            sides["Power"], selectedDate="2024-06-17", capacity=3, scheduleId=schedule_id, editMode="single"
        ),
    )

    assert response.status_code == 200
    original, edited = all_schedules(db_session)
    assert original.excluded_dates == ["2024-06-17"]
    assert original.capacity == 5
    assert (edited.recurrence_type, edited.start_date, edited.capacity) == ("single", date(2024, 6, 17), 3)
    assert db_session.query(PeriodTypeOverride).one().capacity == 3


def test_edit_unknown_schedule_is_rejected(client, sides):
    response = client.post("/capacity/schedules", json=schedule_payload(sides["Power"], scheduleId=999))
    assert response.status_code == 400


def test_deleting_an_already_excluded_occurrence_changes_nothing(client, sides, db_session, make_schedule):
    make_schedule(sides["Power"], excluded_dates=["2024-06-17"])

    response = client.post("/capacity/schedules/delete", json=delete_payload(sides["Power"], "single"))

    assert response.status_code == 200
    assert response.json()["excludedIds"] == []
    assert all_schedules(db_session)[0].excluded_dates == ["2024-06-17"]


def test_single_delete_after_future_edit_targets_the_live_row(client, sides, db_session, make_schedule):
    schedule_id = make_schedule(sides["Power"]).id
    client.post(
        "/capacity/schedules",
        json=schedule_payload(
            sides["Power"], selectedDate="2024-06-17", capacity=12, scheduleId=schedule_id, editMode="future"
        ),
    )
    _, live = all_schedules(db_session)

    response = client.post(
        "/capacity/schedules/delete", json=delete_payload(sides["Power"], "single", selectedDate="2024-06-24")
    )

    assert response.status_code == 200
    assert response.json()["excludedIds"] == [live.id]
    ended, live = all_schedules(db_session)
    assert ended.excluded_dates is None
    assert live.excluded_dates == ["2024-06-24"]


def test_single_delete_outside_every_active_range_is_rejected(client, sides, make_schedule):
    make_schedule(sides["Power"], end_date=date(2024, 6, 16))

    response = client.post("/capacity/schedules/delete", json=delete_payload(sides["Power"], "single"))

    assert response.status_code == 400
    assert response.json()["detail"] == "No matching schedule found to delete"
