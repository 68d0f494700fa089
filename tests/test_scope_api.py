def test_single_series_resolves_to_single(client):
    response = client.post(
        "/scope/resolve",
        json={"recurrenceType": "single", "occurrenceDate": "2024-06-10", "requestedScope": "all"},
    )

    assert response.status_code == 200
    assert response.json() == {"scope": "single", "availableScopes": ["single"], "occurrenceDate": "2024-06-10"}


def test_recurring_series_keeps_requested_scope(client):
    response = client.post(
        "/scope/resolve",
        json={"recurrenceType": "weekly", "occurrenceDate": "2024-06-10", "requestedScope": "future"},
    )

    assert response.json()["scope"] == "future"
    assert response.json()["availableScopes"] == ["single", "future", "all"]


def test_unknown_recurrence_type_is_rejected(client):
    response = client.post("/scope/resolve", json={"recurrenceType": "hourly", "occurrenceDate": "2024-06-10"})
    assert response.status_code == 422
