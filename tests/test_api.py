from uuid import uuid4

import pytest

from app.core.daily_secret import get_utc_date_key
from app.models.academic import EnrollmentStatus
from app.models.user import UserRole, UserStatus

API = "/api/v1"


@pytest.fixture
def today_session(client, csc101, teacher, auth_headers):
    response = client.get(f"{API}/classes/{csc101.id}/session/today", headers=auth_headers(teacher))
    assert response.status_code == 200
    return response.json()


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_login_returns_usable_token(client, teacher, csc101):
    response = client.post(f"{API}/auth/login", json={"email": teacher.email, "password": "password"})
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["is_first_login"] is True

    headers = {"Authorization": f"Bearer {body['access_token']}"}
    assert client.get(f"{API}/classes/{csc101.id}/session/today", headers=headers).status_code == 200


def test_login_rejects_bad_password(client, teacher):
    response = client.post(f"{API}/auth/login", json={"email": teacher.email, "password": "nope"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


def test_today_session_is_created_once(client, csc101, teacher, auth_headers, today_session):
    assert today_session["class_name"] == "CSC101"
    assert today_session["class_id"] == str(csc101.id)
    assert today_session["date"] == get_utc_date_key()
    assert len(today_session["pin"]) == 6 and today_session["pin"].isdigit()
    assert "T23:59:59" in today_session["expires_at"]

    again = client.get(f"{API}/classes/{csc101.id}/session/today", headers=auth_headers(teacher)).json()
    assert again["pin"] == today_session["pin"]
    assert again["barcode"] == today_session["barcode"]


def test_pin_and_barcode_endpoints(client, csc101, teacher, auth_headers, today_session):
    pin = client.get(f"{API}/classes/{csc101.id}/session/pin", headers=auth_headers(teacher)).json()
    barcode = client.get(f"{API}/classes/{csc101.id}/session/barcode", headers=auth_headers(teacher)).json()

    assert pin["pin"] == today_session["pin"]
    assert barcode["barcode"] == today_session["barcode"]
    assert pin["generated_by"]["name"] == "Ada Lovelace"


def test_session_requires_authentication(client, csc101):
    response = client.get(f"{API}/classes/{csc101.id}/session/today")
    assert response.status_code == 401
    assert response.json() == {
        "success": False,
        "error": {"code": "UNAUTHORIZED", "message": "Not authenticated"},
    }


def test_invalid_token_is_unauthorized(client, csc101):
    response = client.get(
        f"{API}/classes/{csc101.id}/session/today", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert response.status_code == 401


def test_students_cannot_open_sessions(client, csc101, student, auth_headers):
    response = client.get(f"{API}/classes/{csc101.id}/session/today", headers=auth_headers(student))
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


def test_inactive_user_is_rejected(client, db, csc101, teacher, auth_headers):
    teacher.status = UserStatus.SUSPENDED
    db.commit()
    response = client.get(f"{API}/classes/{csc101.id}/session/today", headers=auth_headers(teacher))
    assert response.status_code == 401


def test_unknown_class_is_not_found(client, admin, auth_headers):
    response = client.get(f"{API}/classes/{uuid4()}/session/today", headers=auth_headers(admin))
    assert response.status_code == 404


def test_malformed_class_id_is_bad_request(client, admin, auth_headers):
    response = client.get(f"{API}/classes/CSC101/session/today", headers=auth_headers(admin))
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


# =======================================================
# CHECK-IN SCENARIOS
# =======================================================

def test_check_in_then_duplicate(client, csc101, student, enroll, auth_headers, today_session):
    enroll(student, csc101)
    url = f"{API}/classes/{csc101.id}/attendance/check-in"
    payload = {"code": today_session["pin"], "method": "pin"}

    first = client.post(url, json=payload, headers=auth_headers(student))
    assert first.status_code == 201
    assert first.json()["status"] == "present"
    assert first.json()["student_id"] == str(student.id)

    second = client.post(url, json=payload, headers=auth_headers(student))
    assert second.status_code == 409
    assert second.json()["error"] == {"code": "ALREADY_RECORDED", "message": "already recorded"}


def test_wrong_pin_is_conflict(client, csc101, student, enroll, auth_headers, today_session):
    enroll(student, csc101)
    wrong = "000000" if today_session["pin"] != "000000" else "999999"

    response = client.post(
        f"{API}/classes/{csc101.id}/attendance/check-in",
        json={"code": wrong, "method": "pin"},
        headers=auth_headers(student),
    )

    assert response.status_code == 409
    assert response.json()["error"] == {"code": "CODE_MISMATCH", "message": "code mismatch"}


def test_check_in_without_session(client, csc101, student, enroll, auth_headers):
    enroll(student, csc101)
    response = client.post(
        f"{API}/classes/{csc101.id}/attendance/check-in",
        json={"code": "123456", "method": "pin"},
        headers=auth_headers(student),
    )
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NO_ACTIVE_SESSION"


def test_paused_student_is_forbidden(client, csc101, student, enroll, auth_headers, today_session):
    enroll(student, csc101, status=EnrollmentStatus.PAUSED)
    response = client.post(
        f"{API}/classes/{csc101.id}/attendance/check-in",
        json={"code": today_session["barcode"], "method": "barcode"},
        headers=auth_headers(student),
    )
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "ENROLLMENT_INACTIVE"


def test_student_cannot_check_in_someone_else(client, csc101, student, make_user, auth_headers, today_session):
    other = make_user()
    response = client.post(
        f"{API}/classes/{csc101.id}/attendance/check-in",
        json={"code": today_session["pin"], "method": "pin", "student_id": str(other.id)},
        headers=auth_headers(student),
    )
    assert response.status_code == 403


def test_teacher_can_check_in_on_behalf(client, csc101, teacher, student, enroll, auth_headers, today_session):
    enroll(student, csc101)
    response = client.post(
        f"{API}/classes/{csc101.id}/attendance/check-in",
        json={"code": today_session["pin"], "method": "pin", "student_id": str(student.id)},
        headers=auth_headers(teacher),
    )
    assert response.status_code == 201
    assert response.json()["recorded_by"] == str(teacher.id)


@pytest.mark.parametrize("payload", [
    {"method": "pin"},
    {"code": "123456", "method": "sms"},
    {"code": "12ab", "method": "pin"},
])
def test_malformed_check_in_is_bad_request(client, csc101, student, enroll, auth_headers, today_session, payload):
    enroll(student, csc101)
    response = client.post(
        f"{API}/classes/{csc101.id}/attendance/check-in", json=payload, headers=auth_headers(student)
    )
    assert response.status_code == 400
    assert response.json()["success"] is False


# =======================================================
# HISTORY AND CORRECTIONS
# =======================================================

def test_roster_and_history(client, csc101, teacher, student, enroll, auth_headers, today_session):
    enroll(student, csc101)
    client.post(
        f"{API}/classes/{csc101.id}/attendance/check-in",
        json={"code": today_session["pin"], "method": "pin"},
        headers=auth_headers(student),
    )

    roster = client.get(
        f"{API}/classes/{csc101.id}/attendance",
        params={"date": today_session["date"]},
        headers=auth_headers(teacher),
    )
    assert roster.status_code == 200
    assert roster.json()[0]["student"]["id"] == str(student.id)
    assert roster.json()[0]["attendance"]["method"] == "pin"

    history = client.get(f"{API}/students/{student.id}/attendance", headers=auth_headers(student))
    assert [r["date_key"] for r in history.json()] == [today_session["date"]]

    filtered = client.get(
        f"{API}/students/{student.id}/attendance",
        params={"class_id": str(uuid4())},
        headers=auth_headers(student),
    )
    assert filtered.json() == []


def test_roster_rejects_bad_date(client, csc101, teacher, auth_headers):
    response = client.get(
        f"{API}/classes/{csc101.id}/attendance", params={"date": "10/03/2026"}, headers=auth_headers(teacher)
    )
    assert response.status_code == 400


def test_manual_marking_and_amendment(client, csc101, teacher, student, enroll, auth_headers):
    enroll(student, csc101)
    marked = client.put(
        f"{API}/classes/{csc101.id}/attendance",
        json={"attendance_date": "2026-03-10", "items": [{"student_id": str(student.id), "status": "absent"}]},
        headers=auth_headers(teacher),
    )
    assert marked.status_code == 200
    record = marked.json()[0]
    assert record["method"] == "manual"
    assert record["date_key"] == "2026-03-10"

    amended = client.patch(
        f"{API}/attendance/{record['id']}",
        json={"status": "excused", "notes": "Medical"},
        headers=auth_headers(teacher),
    )
    assert amended.status_code == 200
    assert amended.json()["status"] == "excused"

    in_range = client.get(
        f"{API}/classes/{csc101.id}/attendance/range",
        params={"start_date": "2026-03-01", "end_date": "2026-03-31"},
        headers=auth_headers(teacher),
    )
    assert [r["id"] for r in in_range.json()] == [record["id"]]


def test_batch_with_repeated_student_is_bad_request(client, csc101, teacher, student, enroll, auth_headers):
    enroll(student, csc101)
    items = [
        {"student_id": str(student.id), "status": "present"},
        {"student_id": str(student.id), "status": "absent"},
    ]
    response = client.put(
        f"{API}/classes/{csc101.id}/attendance", json={"items": items}, headers=auth_headers(teacher)
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_marking_unenrolled_student_is_forbidden(client, csc101, teacher, make_user, auth_headers):
    stranger = make_user()
    response = client.put(
        f"{API}/classes/{csc101.id}/attendance",
        json={"items": [{"student_id": str(stranger.id), "status": "present"}]},
        headers=auth_headers(teacher),
    )

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "NOT_ENROLLED"


@pytest.mark.parametrize("field", ["status", "method", "late_minutes"])
def test_amendment_with_null_is_bad_request(client, csc101, teacher, student, enroll, auth_headers, field):
    enroll(student, csc101)
    marked = client.put(
        f"{API}/classes/{csc101.id}/attendance",
        json={"items": [{"student_id": str(student.id), "status": "absent"}]},
        headers=auth_headers(teacher),
    )
    record_id = marked.json()[0]["id"]

    response = client.patch(f"{API}/attendance/{record_id}", json={field: None}, headers=auth_headers(teacher))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_students_cannot_amend(client, student, auth_headers):
    response = client.patch(f"{API}/attendance/{uuid4()}", json={"status": "present"}, headers=auth_headers(student))
    assert response.status_code == 403


def test_monitoring_endpoint(client, csc101, teacher, student, enroll, auth_headers):
    enroll(student, csc101)
    for day in ("2026-03-09", "2026-03-10"):
        client.put(
            f"{API}/classes/{csc101.id}/attendance",
            json={"attendance_date": day, "items": [{"student_id": str(student.id), "status": "absent"}]},
            headers=auth_headers(teacher),
        )

    response = client.get(f"{API}/attendance/monitoring", headers=auth_headers(teacher))

    assert response.status_code == 200
    assert response.json()[0]["consecutive_absences"] == 2
    assert response.json()[0]["last_attendance_date"] is None


def test_unexpected_errors_are_generic(client, csc101, admin, auth_headers, mocker):
    mocker.patch(
        "app.routers.class_session.class_session_service.get_today_session",
        side_effect=RuntimeError("db password is hunter2"),
    )
    response = client.get(f"{API}/classes/{csc101.id}/session/today", headers=auth_headers(admin))

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": {"code": "INTERNAL_ERROR", "message": "Internal server error"},
    }
