"""
Tests for the attendance endpoints
"""
from attendance_engine.models import Department
from attendance_engine.models.office_location import OfficeLocation
from attendance_engine.tests.helpers import auth_headers


def test_requires_identity_token(client):
    response = client.get("/api/v1/attendance/today")
    assert response.status_code in (401, 403)


def test_rejects_invalid_token(client):
    response = client.get("/api/v1/attendance/today", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_inactive_employee_is_refused(client, make_employee):
    user = make_employee(active=False)
    response = client.get("/api/v1/attendance/today", headers=auth_headers(user))
    assert response.status_code == 403


def test_check_in_and_out_flow(client, make_employee):
    user = make_employee()
    headers = auth_headers(user)

    assert client.get("/api/v1/attendance/today", headers=headers).json() is None

    response = client.post(
        "/api/v1/attendance/check-in",
        json={"work_location": "office", "late_reason": "Traffic"},
        headers=headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "checked_in"
    assert data["work_location"] == "office"
    assert data["department"] == "Technical"
    assert data["required_check_in_time"] == "09:00"
    assert data["check_in_at"].endswith("+05:30")

    today = client.get("/api/v1/attendance/today", headers=headers).json()
    assert today["id"] == data["id"]

    response = client.post(
        "/api/v1/attendance/check-out",
        json={"late_reason": "Client call", "overtime_reason": "Commissioning"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["status"] == "checked_out"

    records = client.get("/api/v1/attendance/my", headers=headers).json()
    assert records["total"] == 1


def test_second_check_in_conflicts(client, make_employee):
    headers = auth_headers(make_employee())
    body = {"work_location": "office", "late_reason": "Traffic"}
    client.post("/api/v1/attendance/check-in", json=body, headers=headers)

    response = client.post("/api/v1/attendance/check-in", json=body, headers=headers)
    assert response.status_code == 409
    data = response.json()
    assert data["error"] is True
    assert data["code"] == "AlreadyCheckedIn"
    assert data["path"] == "/api/v1/attendance/check-in"


def test_check_out_without_check_in(client, make_employee):
    response = client.post("/api/v1/attendance/check-out", headers=auth_headers(make_employee()))
    assert response.status_code == 400
    assert response.json()["code"] == "NotCheckedIn"


def test_off_site_not_permitted(client, make_employee):
    response = client.post(
        "/api/v1/attendance/check-in",
        json={"work_location": "off-site", "location_details": "Site", "off_site_reason": "Install", "late_reason": "x"},
        headers=auth_headers(make_employee(department=Department.ACCOUNTS)),
    )
    assert response.status_code == 403
    assert response.json()["code"] == "OffSiteNotPermitted"


def test_sales_off_site_requires_details(client, make_employee):
    response = client.post(
        "/api/v1/attendance/check-in",
        json={"work_location": "off-site", "location_details": "Site", "late_reason": "x"},
        headers=auth_headers(make_employee(department=Department.SALES)),
    )
    assert response.status_code == 400
    assert response.json()["code"] == "MissingRequiredFields"


def test_unknown_work_location_is_a_validation_error(client, make_employee):
    response = client.post(
        "/api/v1/attendance/check-in",
        json={"work_location": "home"},
        headers=auth_headers(make_employee()),
    )
    assert response.status_code == 422
    assert response.json()["code"] == "ValidationError"


def test_monthly_stats(client, make_employee):
    response = client.get("/api/v1/attendance/stats?year=2026&month=2", headers=auth_headers(make_employee()))
    assert response.status_code == 200
    data = response.json()
    assert data["total_days"] == 28
    assert data["present_days"] == 0


def test_geofence_check(client, db, make_employee):
    db.add(OfficeLocation(name="Head Office", latitude=13.0827, longitude=80.2707, radius_meters=200))
    db.commit()
    headers = auth_headers(make_employee())

    inside = client.post("/api/v1/attendance/geofence-check", json={"latitude": 13.0827, "longitude": 80.2707}, headers=headers)
    assert inside.json()["within_office"] is True
    assert inside.json()["suggested_work_location"] == "office"

    outside = client.post("/api/v1/attendance/geofence-check", json={"latitude": 13.2, "longitude": 80.2707}, headers=headers)
    assert outside.json()["within_office"] is False
    assert outside.json()["nearest_office"] == "Head Office"
    assert outside.json()["suggested_work_location"] == "off-site"
