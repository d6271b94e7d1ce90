from datetime import datetime

import pytest

from attendmate.main import create_app

USER = {"X-User-Id": "u1"}


@pytest.fixture
def clock(fixed_now):
    return {"now": fixed_now}


@pytest.fixture
def client(monkeypatch, container, clock):
    monkeypatch.setenv("APP_ENV", "testing")
    monkeypatch.setattr("attendmate.attendance.controller.now_local", lambda: clock["now"])
    app = create_app(container=container)
    return app.test_client()


def create_subject(client, name="Maths"):
    resp = client.post("/api/subjects", json={"name": name}, headers=USER)
    assert resp.status_code == 201
    return resp.get_json()["data"]["subject_id"]


def mark(client, subject_id, /, **overrides):
    body = {"subject_id": subject_id, "date": "2024-03-01", "start_time": "09:00", "end_time": "10:00", "status": "PRESENT"}
    body.update(overrides)
    return client.post("/api/attendance", json=body, headers=USER)


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"success": True, "data": {"status": "ok"}}


def test_identity_header_required(client):
    resp = client.get("/api/subjects")
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "AuthenticationError"


def test_unknown_route_is_json(client):
    resp = client.get("/api/nothing-here", headers=USER)
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


def test_mark_then_duplicate_conflicts(client):
    subject_id = create_subject(client)

    first = mark(client, subject_id)
    second = mark(client, subject_id, status="ABSENT")

    assert first.status_code == 201
    assert first.get_json()["data"]["record_id"] == "2024-03-01_0900_1000"
    assert second.status_code == 409
    assert second.get_json()["error"] == "AlreadyMarked"

    subjects = client.get("/api/subjects", headers=USER).get_json()["data"]
    assert subjects[0]["total"] == 1 and subjects[0]["present"] == 1


@pytest.mark.parametrize(
    "overrides, status, error",
    [
        ({"end_time": "09:00"}, 400, "InvalidTimeRange"),
        ({"status": "LATE"}, 400, "ValidationError"),
        ({"subject_id": "nope"}, 404, "SubjectNotFound"),
        ({"date": ""}, 400, "ValidationError"),
    ],
)
def test_mark_errors(client, overrides, status, error):
    subject_id = create_subject(client)

    resp = mark(client, subject_id, **overrides)

    assert resp.status_code == status
    assert resp.get_json()["error"] == error


def test_transaction_conflict_is_503(client, container):
    subject_id = create_subject(client)
    container.attendance_repo.conflicts = 1

    resp = mark(client, subject_id)

    assert resp.status_code == 503
    assert resp.get_json()["error"] == "TransactionConflict"


def test_edit_get_and_delete_record(client):
    subject_id = create_subject(client)
    record_id = mark(client, subject_id).get_json()["data"]["record_id"]
    url = f"/api/attendance/{subject_id}/{record_id}"

    edited = client.put(
        url, json={"date": "2024-03-01", "start_time": "09:00", "end_time": "10:00", "status": "ABSENT"}, headers=USER
    )
    assert edited.status_code == 200
    assert client.get(url, headers=USER).get_json()["data"]["status"] == "ABSENT"

    listing = client.get("/api/attendance", headers=USER).get_json()["data"]
    assert listing["stats"] == {"total": 1, "present": 0, "absent": 1, "percentage": 0.0}

    assert client.delete(url, headers=USER).get_json()["data"] == {"deleted": True}
    assert client.delete(url, headers=USER).get_json()["data"] == {"deleted": False}
    assert client.get(url, headers=USER).status_code == 404


def test_timetable_and_active_lecture(client):
    subject_id = create_subject(client)

    added = client.post(
        "/api/timetable/friday/slots",
        json={"subject_id": subject_id, "start_time": "09:00", "duration_hours": 1},
        headers=USER,
    )
    assert added.status_code == 201

    overlap = client.post(
        "/api/timetable/FRIDAY/slots",
        json={"subject_id": subject_id, "start_time": "09:30", "duration_hours": 1},
        headers=USER,
    )
    assert overlap.status_code == 409

    week = client.get("/api/timetable", headers=USER).get_json()["data"]
    assert [s["start_time"] for s in week["FRIDAY"]] == ["09:00"]

    dashboard = client.get("/api/dashboard", headers=USER).get_json()["data"]
    prompt = dashboard["active_lecture"]
    assert prompt["lecture_id"] == "2024-03-01_0900_1000"

    answered = client.post("/api/dashboard/active-lecture", json=dict(prompt, status="PRESENT"), headers=USER)
    assert answered.get_json()["data"]["marked"] is True

    dashboard = client.get("/api/dashboard", headers=USER).get_json()["data"]
    assert dashboard["active_lecture"] is None
    assert [r["subject_name"] for r in dashboard["today"]] == ["Maths"]
    assert dashboard["overall"]["percentage"] == 100.0


def test_replace_week_and_copy(client):
    subject_id = create_subject(client)

    resp = client.put(
        "/api/timetable",
        json={"MONDAY": [{"subject_id": subject_id, "start_time": "10:00", "duration_hours": 2}]},
        headers=USER,
    )
    assert resp.status_code == 200

    copied = client.post("/api/timetable/tuesday/copy-previous", headers=USER)
    assert [s["end_time"] for s in copied.get_json()["data"]] == ["12:00"]

    assert client.post("/api/timetable/monday/copy-previous", headers=USER).status_code == 400


def test_analytics_and_what_if(client):
    subject_id = create_subject(client)
    mark(client, subject_id)
    mark(client, subject_id, date="2024-03-02", status="ABSENT")

    report = client.get("/api/analytics", headers=USER).get_json()["data"]
    assert report["overall"]["percentage"] == 50.0
    assert [d["outcome"] for d in report["days"]] == ["ALL_PRESENT", "ALL_ABSENT"]

    what_if = client.get("/api/analytics/what-if?skip=2", headers=USER).get_json()["data"]
    assert what_if["percentage_after_skipping"] == 25.0
    assert what_if["lectures_needed_to_reach_75"] == 8

    assert client.get("/api/analytics/what-if?skip=x", headers=USER).status_code == 400


def test_delete_subject(client):
    subject_id = create_subject(client)

    assert client.delete(f"/api/subjects/{subject_id}", headers=USER).status_code == 200
    assert client.delete(f"/api/subjects/{subject_id}", headers=USER).status_code == 404


def test_answer_is_recorded_for_the_prompted_lecture(client, clock):
    maths = create_subject(client, "Maths")
    physics = create_subject(client, "Physics")
    for subject_id, start in [(maths, "09:00"), (physics, "10:00")]:
        resp = client.post(
            "/api/timetable/friday/slots",
            json={"subject_id": subject_id, "start_time": start, "duration_hours": 1},
            headers=USER,
        )
        assert resp.status_code == 201

    clock["now"] = datetime(2024, 3, 1, 9, 59)
    prompt = client.get("/api/dashboard", headers=USER).get_json()["data"]["active_lecture"]
    assert prompt["subject_id"] == maths

    # answered after Physics has started
    clock["now"] = datetime(2024, 3, 1, 10, 1)
    answered = client.post("/api/dashboard/active-lecture", json=dict(prompt, status="ABSENT"), headers=USER)

    data = answered.get_json()["data"]
    assert data["marked"] is True
    assert data["record"]["subject_id"] == maths
    assert data["record"]["record_id"] == "2024-03-01_0900_1000"

    subjects = {s["subject_id"]: s for s in client.get("/api/subjects", headers=USER).get_json()["data"]}
    assert (subjects[maths]["total"], subjects[maths]["present"]) == (1, 0)
    assert subjects[physics]["total"] == 0

    # Physics is still waiting for its own answer
    pending = client.get("/api/dashboard", headers=USER).get_json()["data"]["active_lecture"]
    assert pending["subject_id"] == physics


def test_answer_for_unscheduled_lecture_is_rejected(client):
    subject_id = create_subject(client)

    resp = client.post(
        "/api/dashboard/active-lecture",
        json={"subject_id": subject_id, "date": "2024-03-01", "start_time": "09:00", "end_time": "10:00", "status": "PRESENT"},
        headers=USER,
    )
    assert resp.status_code == 400

    missing = client.post("/api/dashboard/active-lecture", json={"status": "PRESENT"}, headers=USER)
    assert missing.status_code == 400


def test_list_stats_cover_records_beyond_limit(client):
    subject_id = create_subject(client)
    mark(client, subject_id, date="2024-03-01")
    mark(client, subject_id, date="2024-03-02", status="ABSENT")
    mark(client, subject_id, date="2024-03-04")

    data = client.get("/api/attendance?limit=1", headers=USER).get_json()["data"]

    assert [r["date"] for r in data["records"]] == ["2024-03-04"]
    assert data["stats"] == {"total": 3, "present": 2, "absent": 1, "percentage": 66.67}
