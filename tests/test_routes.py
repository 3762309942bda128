"""
Tests for the HTTP API.
"""
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from plan91 import __version__, main
from plan91.core.config import settings
from plan91.main import app
from plan91.services.scheduler import start_scheduler, stop_scheduler


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def routine_id(client):
    response = client.post("/routines", json={
        "recurrence": {"kind": "DAILY"},
        "start_date": "2026-01-01",
        "practitioner_id": "p-1",
    })
    assert response.status_code == 200
    return response.json()["data"]["id"]


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["version"] == __version__
    assert body["scheduler_running"] is False


def test_health_reports_running_scheduler(client):
    start_scheduler()
    try:
        assert client.get("/health").json()["scheduler_running"] is True
    finally:
        stop_scheduler()


def test_start_routine(client):
    response = client.post("/routines", json={
        "recurrence": {"kind": "NTH_DAY_OF_MONTH", "nth_day": "MONDAY", "nth_week": 1},
        "start_date": "2026-01-05",
        "target_completions": 3,
    })

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["expected_end_date"] == "2026-04-05"
    assert data["schedule"] == "1st Monday of the month"
    assert data["target_completions"] == 3


def test_start_routine_with_unknown_kind(client):
    response = client.post("/routines", json={"recurrence": {"kind": "HOURLY"}, "start_date": "2026-01-01"})
    assert response.status_code == 422


def test_start_routine_with_mismatched_fields(client):
    response = client.post("/routines", json={
        "recurrence": {"kind": "DAILY", "nth_week": 2},
        "start_date": "2026-01-01",
    })
    assert response.status_code == 400


def test_get_routine(client, routine_id):
    response = client.get(f"/routines/{routine_id}", params={"as_of": "2026-01-01"})

    assert response.status_code == 200
    body = response.json()
    assert body["data"]["id"] == routine_id
    assert body["compliance_rate"] == 0.0


def test_get_missing_routine(client):
    assert client.get(f"/routines/{uuid4()}").status_code == 404


def test_malformed_routine_id(client):
    assert client.get("/routines/not-a-uuid").status_code == 422


def test_list_routines(client, routine_id):
    response = client.get("/routines", params={"status": "ACTIVE", "practitioner_id": "p-1"})

    assert response.status_code == 200
    assert response.json()["count"] == 1
    assert client.get("/routines", params={"status": "PAUSED"}).json()["count"] == 0


def test_routines_for_date(client, routine_id):
    response = client.get("/routines/date/2026-01-02", params={"practitioner_id": "p-1"})

    assert response.status_code == 200
    body = response.json()
    assert body["date"] == "2026-01-02"
    assert [r["id"] for r in body["routines"]] == [routine_id]

    assert client.get("/routines/date/2025-12-31").json()["count"] == 0
    assert client.get("/routines/date/not-a-date").status_code == 422


def test_complete_entry(client, routine_id):
    response = client.post(f"/routines/{routine_id}/entries", json={"date": "2026-01-01", "value": 20})

    assert response.status_code == 200
    body = response.json()
    assert body["entry"]["value"] == 20
    assert body["data"]["streak"]["current_streak"] == 1


def test_duplicate_entry_is_rejected(client, routine_id):
    client.post(f"/routines/{routine_id}/entries", json={"date": "2026-01-01"})
    response = client.post(f"/routines/{routine_id}/entries", json={"date": "2026-01-01"})

    assert response.status_code == 400


def test_entry_before_start_is_rejected(client, routine_id):
    response = client.post(f"/routines/{routine_id}/entries", json={"date": "2025-12-31"})
    assert response.status_code == 400


def test_entry_on_paused_routine_conflicts(client, routine_id):
    assert client.post(f"/routines/{routine_id}/pause").status_code == 200

    response = client.post(f"/routines/{routine_id}/entries", json={"date": "2026-01-01"})
    assert response.status_code == 409

    assert client.post(f"/routines/{routine_id}/resume").json()["data"]["status"] == "ACTIVE"


def test_record_misses(client, routine_id):
    first = client.post(f"/routines/{routine_id}/misses", json={"date": "2026-01-01"})
    second = client.post(f"/routines/{routine_id}/misses", json={"date": "2026-01-02"})

    assert first.json()["outcome"] == "STRIKE_USED"
    assert second.json()["outcome"] == "ABANDONED"
    assert second.json()["data"]["status"] == "ABANDONED"


def test_abandon_and_archive(client, routine_id):
    assert client.post(f"/routines/{routine_id}/abandon").json()["data"]["status"] == "ABANDONED"
    assert client.post(f"/routines/{routine_id}/archive").json()["data"]["status"] == "ARCHIVED"
    assert client.post(f"/routines/{routine_id}/archive").status_code == 409


def test_analytics(client, routine_id):
    client.post(f"/routines/{routine_id}/entries", json={"date": "2026-01-01"})

    response = client.get(f"/routines/{routine_id}/analytics", params={"as_of": "2026-01-02"})

    assert response.status_code == 200
    report = response.json()["data"]
    assert report["compliance_rate"] == 50.0
    assert report["missed_days"] == ["2026-01-02"]
    assert report["schedule"] == "Every day"


def test_calendar(client, routine_id):
    client.post(f"/routines/{routine_id}/entries", json={"date": "2026-01-01", "notes": "first"})

    response = client.get(f"/routines/{routine_id}/calendar", params={"year": 2026, "month": 1})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["stats"]["total_days"] == 31
    assert data["entries"] == [{"date": "2026-01-01", "completed": True, "value": None, "notes": "first"}]


def test_calendar_rejects_bad_month(client, routine_id):
    response = client.get(f"/routines/{routine_id}/calendar", params={"year": 2026, "month": 13})
    assert response.status_code == 422


def test_delete_routine(client, routine_id):
    assert client.delete(f"/routines/{routine_id}").status_code == 200
    assert client.get(f"/routines/{routine_id}").status_code == 404


def test_run_serves_app_with_uvicorn(monkeypatch):
    calls = []
    monkeypatch.setattr(main.uvicorn, "run", lambda served, **kwargs: calls.append((served, kwargs)))

    main.run()

    assert len(calls) == 1
    served, kwargs = calls[0]
    assert served is app
    assert kwargs["host"] == settings.API_HOST
    assert kwargs["port"] == settings.API_PORT
