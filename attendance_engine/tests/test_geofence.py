"""
Tests for office geofences: distance, position checks, claim enforcement and office management
"""
import pytest
from fastapi import HTTPException
from sqlalchemy.orm import Session

from attendance_engine.core.config import settings
from attendance_engine.core.errors import Forbidden, LocationNotVerified
from attendance_engine.models import AuditLog
from attendance_engine.models.attendance import WorkLocation
from attendance_engine.models.office_location import OfficeLocation
from attendance_engine.services import geofence_service
from attendance_engine.services.geofence_service import (
    check_position,
    evaluate_claim,
    haversine_distance_m,
)

OFFICE_LAT, OFFICE_LNG = 13.0827, 80.2707


@pytest.fixture
def head_office(db: Session):
    office = OfficeLocation(name="Head Office", latitude=OFFICE_LAT, longitude=OFFICE_LNG, radius_meters=200)
    db.add(office)
    db.commit()
    db.refresh(office)
    return office


def test_haversine_one_degree_of_longitude_at_equator():
    assert haversine_distance_m(0, 0, 0, 1) == pytest.approx(111_195, rel=1e-4)


def test_haversine_same_point_is_zero():
    assert haversine_distance_m(OFFICE_LAT, OFFICE_LNG, OFFICE_LAT, OFFICE_LNG) == 0


def test_no_offices_configured_is_never_within(db):
    result = check_position(db, OFFICE_LAT, OFFICE_LNG)
    assert result.within_office is False
    assert result.nearest_office is None
    assert result.distance_meters is None


def test_position_inside_radius(db, head_office):
    # ~111 m north of the office
    result = check_position(db, OFFICE_LAT + 0.001, OFFICE_LNG)
    assert result.within_office is True
    assert result.nearest_office == "Head Office"
    assert result.distance_meters == pytest.approx(111.2, abs=0.5)


def test_position_outside_radius_reports_nearest(db, head_office):
    result = check_position(db, OFFICE_LAT + 0.01, OFFICE_LNG)
    assert result.within_office is False
    assert result.nearest_office == "Head Office"
    assert result.distance_meters > 1000


def test_inactive_office_is_ignored(db, head_office):
    head_office.active = False
    db.commit()
    assert check_position(db, OFFICE_LAT, OFFICE_LNG).within_office is False


def test_any_office_within_its_own_radius(db, head_office):
    db.add(OfficeLocation(name="Warehouse", latitude=12.9716, longitude=77.5946, radius_meters=50))
    db.commit()
    assert check_position(db, 12.9716, 77.5946).within_office is True


def test_off_mode_only_records(db, head_office):
    verdict = evaluate_claim(db, WorkLocation.OFFICE, OFFICE_LAT + 0.05, OFFICE_LNG, mode="off")
    assert verdict.within_office is False
    assert verdict.corroborated is False
    assert verdict.needs_review is False


def test_missing_coordinates_are_uncorroborated(db, head_office):
    verdict = evaluate_claim(db, WorkLocation.OFFICE, None, None, mode="flag")
    assert verdict.within_office is None
    assert verdict.needs_review is True


def test_flag_mode_marks_off_site_claim_made_from_office(db, head_office):
    verdict = evaluate_claim(db, WorkLocation.OFF_SITE, OFFICE_LAT, OFFICE_LNG, mode="flag")
    assert verdict.within_office is True
    assert verdict.needs_review is True


def test_reject_mode_raises_for_uncorroborated_office_claim(db, head_office):
    with pytest.raises(LocationNotVerified):
        evaluate_claim(db, WorkLocation.OFFICE, OFFICE_LAT + 0.05, OFFICE_LNG, mode="reject")


def test_reject_mode_accepts_corroborated_claims(db, head_office):
    office = evaluate_claim(db, WorkLocation.OFFICE, OFFICE_LAT, OFFICE_LNG, mode="reject")
    off_site = evaluate_claim(db, WorkLocation.OFF_SITE, OFFICE_LAT + 0.05, OFFICE_LNG, mode="reject")
    assert office.corroborated and not office.needs_review
    assert off_site.corroborated and not off_site.needs_review


def test_mode_defaults_to_setting(db, head_office, monkeypatch):
    monkeypatch.setattr(settings, "GEOFENCE_ENFORCEMENT", "reject")
    with pytest.raises(LocationNotVerified):
        evaluate_claim(db, WorkLocation.OFFICE, None, None)


def test_office_management_requires_master_admin(db, make_employee):
    employee = make_employee()
    with pytest.raises(Forbidden):
        geofence_service.create_office_location(db, employee, "Branch", 10.0, 76.0)


def test_office_create_update_delete(db, master_admin):
    office = geofence_service.create_office_location(db, master_admin, "Branch", 10.0, 76.0, radius_meters=150)
    assert office.id is not None
    assert office.active is True

    updated = geofence_service.update_office_location(db, master_admin, office.id, radius_meters=300, name=None)
    assert updated.radius_meters == 300
    assert updated.name == "Branch"

    geofence_service.delete_office_location(db, master_admin, office.id)
    assert geofence_service.list_office_locations(db) == []


def test_office_changes_are_audited_with_the_row(db, master_admin):
    office = geofence_service.create_office_location(db, master_admin, "Branch", 10.0, 76.0)
    geofence_service.update_office_location(db, master_admin, office.id, radius_meters=250)

    entries = db.query(AuditLog).filter(AuditLog.entity_type == "office_location").order_by(AuditLog.id).all()
    assert [e.action for e in entries] == ["OFFICE_LOCATION_CREATE", "OFFICE_LOCATION_UPDATE"]
    assert {e.entity_id for e in entries} == {office.id}


def test_duplicate_office_name_conflicts_without_audit(db, master_admin):
    geofence_service.create_office_location(db, master_admin, "Branch", 10.0, 76.0)
    warehouse = geofence_service.create_office_location(db, master_admin, "Warehouse", 11.0, 77.0)

    with pytest.raises(HTTPException) as exc:
        geofence_service.create_office_location(db, master_admin, "Branch", 12.0, 78.0)
    assert exc.value.status_code == 409

    with pytest.raises(HTTPException) as exc:
        geofence_service.update_office_location(db, master_admin, warehouse.id, name="Branch")
    assert exc.value.status_code == 409

    assert db.query(AuditLog).filter(AuditLog.action == "OFFICE_LOCATION_CREATE").count() == 2
    assert db.query(AuditLog).filter(AuditLog.action == "OFFICE_LOCATION_UPDATE").count() == 0
    assert [o.name for o in geofence_service.list_office_locations(db)] == ["Branch", "Warehouse"]
