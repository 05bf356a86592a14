import pytest
from fastapi.testclient import TestClient

from studyplanner import main
from studyplanner.core.config import get_settings
from studyplanner.core.security import create_access_token
from studyplanner.main import create_app


@pytest.fixture()
def client(session_factory):
    app = create_app(session_factory=session_factory)
    with TestClient(app) as test_client:
        yield test_client


def _auth(owner_id: str = "student-1") -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(owner_id)}"}


def test_requests_need_a_token(client):
    assert client.get("/subjects/").status_code == 401
    response = client.get("/subjects/", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Could not validate credentials"


def test_subject_crud(client):
    created = client.post(
        "/subjects/",
        json={
            "name": "Cálculo",
            "important_dates": [{"type": "examen", "date": "2024-05-10", "description": "Parcial"}],
        },
        headers=_auth(),
    )
    assert created.status_code == 201
    subject = created.json()
    assert subject["color"] == "#6366F1"
    assert subject["important_dates"][0]["date"] == "2024-05-10"

    updated = client.put(f"/subjects/{subject['id']}", json={"professor": "Dr. Ruiz"}, headers=_auth())
    assert updated.status_code == 200
    assert updated.json()["professor"] == "Dr. Ruiz"

    listed = client.get("/subjects/", headers=_auth())
    assert [item["id"] for item in listed.json()] == [subject["id"]]


def test_validation_errors_map_to_400(client):
    response = client.post("/subjects/", json={"name": ""}, headers=_auth())
    assert response.status_code == 400
    assert response.json()["detail"] == "Subject name is required"


def test_missing_records_map_to_404(client):
    response = client.delete("/sessions/12345", headers=_auth())
    assert response.status_code == 404
    assert response.json()["detail"] == "Session not found"


def test_session_duration_from_clock_times(client):
    response = client.post(
        "/sessions/",
        json={"date": "2024-05-10T23:30:00", "start_time": "23:30", "end_time": "00:15"},
        headers=_auth(),
    )
    assert response.status_code == 201
    assert response.json()["duration"] == 45
    assert response.json()["type"] == "study"


def test_deleting_subject_removes_its_sessions(client):
    subject = client.post("/subjects/", json={"name": "Física"}, headers=_auth()).json()
    for day in ("2024-05-08", "2024-05-09"):
        client.post(
            "/sessions/",
            json={"subject_id": subject["id"], "date": day, "duration": 30},
            headers=_auth(),
        )
    assert len(client.get(f"/sessions/?subject_id={subject['id']}", headers=_auth()).json()) == 2

    assert client.delete(f"/subjects/{subject['id']}", headers=_auth()).status_code == 204
    assert client.get("/sessions/", headers=_auth()).json() == []


def test_users_are_isolated(client):
    client.post("/subjects/", json={"name": "Privada"}, headers=_auth("ana"))
    assert client.get("/subjects/", headers=_auth("luis")).json() == []


def test_daily_calendar(client):
    subject = client.post(
        "/subjects/",
        json={
            "name": "Cálculo",
            "important_dates": [{"type": "examen", "date": "2024-05-10"}],
        },
        headers=_auth(),
    ).json()
    client.post(
        "/sessions/",
        json={"subject_id": subject["id"], "date": "2024-05-10T14:00:00", "duration": 60},
        headers=_auth(),
    )

    response = client.get("/calendar/daily?date=2024-05-10", headers=_auth())

    assert response.status_code == 200
    grid = response.json()
    assert grid["previous"] == "2024-05-09"
    (cell,) = grid["cells"]
    assert [item["duration"] for item in cell["sessions"]] == [60]
    assert [item["type"] for item in cell["events"]] == ["examen"]
    assert cell["events"][0]["id"] == f"{subject['id']}-2024-05-10-examen-"


def test_monthly_calendar_navigation(client):
    response = client.get("/calendar/monthly?date=2024-08-31&offset=1", headers=_auth())
    grid = response.json()

    assert grid["reference"] == "2024-09-01"
    assert grid["title"] == "Septiembre 2024"
    assert len(grid["cells"]) == 36
    assert [cell["date"] for cell in grid["cells"][:6]] == [None] * 6


def test_calendar_rejects_bad_dates(client):
    assert client.get("/calendar/weekly?date=10-05-2024", headers=_auth()).status_code == 400
    assert client.get("/calendar/yearly", headers=_auth()).status_code == 422


def test_timeline(client):
    client.post(
        "/subjects/",
        json={"name": "Arte", "important_dates": [{"type": "entrega", "date": "2024-06-01"}]},
        headers=_auth(),
    )
    client.post("/sessions/", json={"date": "2024-05-01", "duration": 25}, headers=_auth())

    activities = client.get("/calendar/timeline", headers=_auth()).json()

    assert sorted(item["kind"] for item in activities) == ["event", "session"]


def test_analytics(client):
    subject = client.post("/subjects/", json={"name": "Cálculo"}, headers=_auth()).json()
    client.post(
        "/sessions/",
        json={"subject_id": subject["id"], "date": "2024-05-01", "duration": 60},
        headers=_auth(),
    )
    client.post(
        "/sessions/",
        json={"subject_id": subject["id"], "date": "2024-05-03", "duration": 30, "type": "exam"},
        headers=_auth(),
    )

    totals = client.get("/analytics/subjects", headers=_auth()).json()
    assert totals[0]["total_minutes"] == 90
    assert totals[0]["breakdown"] == {"Estudio": 60, "Exam": 30}

    rows = client.get(
        "/analytics/cumulative?start_date=2024-05-01&end_date=2024-05-04", headers=_auth()
    ).json()
    assert [row["total"] for row in rows] == [60, 60, 90, 90]

    bad = client.get("/analytics/cumulative?start_date=yesterday&end_date=2024-05-04", headers=_auth())
    assert bad.status_code == 400

    summary = client.get("/analytics/summary", headers=_auth()).json()
    assert summary["session_count"] == 2


def test_todos(client):
    todo = client.post("/todos/", json={"text": "Repasar"}, headers=_auth()).json()
    patched = client.patch(f"/todos/{todo['id']}", json={"completed": True}, headers=_auth())
    assert patched.json()["completed"] is True
    assert client.delete(f"/todos/{todo['id']}", headers=_auth()).status_code == 204
    assert client.get("/todos/", headers=_auth()).json() == []


def test_pomodoro_controls(client):
    state = client.get("/pomodoro/", headers=_auth()).json()
    assert state["display"] == "25:00"
    assert state["phase"] == "work"

    started = client.post("/pomodoro/start", headers=_auth()).json()
    assert started["running"] is True

    busy = client.put("/pomodoro/config", json={"work_minutes": 30}, headers=_auth())
    assert busy.status_code == 409

    paused = client.post("/pomodoro/pause", headers=_auth()).json()
    assert paused["running"] is False

    configured = client.put("/pomodoro/config", json={"work_minutes": 30}, headers=_auth())
    assert configured.status_code == 200
    assert configured.json()["display"] == "30:00"

    invalid = client.put("/pomodoro/config", json={"work_minutes": 0}, headers=_auth())
    assert invalid.status_code == 422

    reset = client.post("/pomodoro/reset", headers=_auth()).json()
    assert reset["completed_intervals"] == 0
    assert reset["running"] is False


def test_calendar_at_the_end_of_the_supported_range(client):
    monthly = client.get("/calendar/monthly?date=9999-12-01", headers=_auth())
    assert monthly.status_code == 200
    assert monthly.json()["next"] is None
    assert monthly.json()["previous"] == "9999-11-01"

    daily = client.get("/calendar/daily?date=9999-12-31", headers=_auth())
    assert daily.status_code == 200
    assert daily.json()["next"] is None

    past_the_end = client.get("/calendar/daily?date=9999-12-31&offset=1", headers=_auth())
    assert past_the_end.status_code == 400


def test_cumulative_series_range_checks(client):
    last_days = client.get(
        "/analytics/cumulative?start_date=9999-12-30&end_date=9999-12-31", headers=_auth()
    )
    assert last_days.status_code == 200
    assert [row["date"] for row in last_days.json()] == ["9999-12-30", "9999-12-31"]

    too_long = client.get(
        "/analytics/cumulative?start_date=0001-01-01&end_date=9999-12-30", headers=_auth()
    )
    assert too_long.status_code == 400
    assert too_long.json()["detail"] == "Date range is limited to 3660 days"

    default_start_before_year_one = client.get(
        "/analytics/cumulative?end_date=0001-01-05", headers=_auth()
    )
    assert default_start_before_year_one.status_code == 400


def test_run_serves_the_app_with_uvicorn(monkeypatch):
    calls = []
    monkeypatch.setattr(main.uvicorn, "run", lambda target, **options: calls.append((target, options)))
    settings = get_settings()

    main.run()

    assert calls == [("studyplanner.main:app", {"host": settings.host, "port": settings.port})]
