"""
Geofence service: office locations and great-circle position checks.

Office locations are stored rows, managed by master administrators. Whether a device
position decides anything at check-in depends on GEOFENCE_ENFORCEMENT:
- off: the result is recorded only (the client's work location claim is trusted)
- flag: an uncorroborated claim is stored with needs_review=True
- reject: an uncorroborated claim fails with LocationNotVerified
"""
import logging
import math
from dataclasses import dataclass
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from fastapi import HTTPException, status

from attendance_engine.core.config import settings
from attendance_engine.core.errors import Forbidden, LocationNotVerified
from attendance_engine.models.attendance import WorkLocation
from attendance_engine.models.employee import AccessLevel, Employee
from attendance_engine.models.office_location import OfficeLocation
from attendance_engine.services.audit_service import log_audit
from attendance_engine.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)

EARTH_RADIUS_M = 6_371_000


@dataclass(frozen=True)
class GeofenceResult:
    within_office: bool
    nearest_office: Optional[str] = None
    distance_meters: Optional[float] = None


@dataclass(frozen=True)
class LocationVerdict:
    """Outcome of comparing a claimed work location with the device position."""
    within_office: Optional[bool]
    corroborated: bool
    needs_review: bool


def haversine_distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two coordinates."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def list_office_locations(db: Session, active_only: bool = False) -> List[OfficeLocation]:
    query = db.query(OfficeLocation)
    if active_only:
        query = query.filter(OfficeLocation.active == True)  # noqa: E712
    return query.order_by(OfficeLocation.name).all()


def check_position(db: Session, latitude: float, longitude: float) -> GeofenceResult:
    """
    Classify a coordinate against the active office locations

    Inside means the distance to an office is at most that office's radius. With no
    offices configured the position is never within an office.
    """
    nearest: Optional[OfficeLocation] = None
    nearest_distance: Optional[float] = None
    within = False

    for office in list_office_locations(db, active_only=True):
        distance = haversine_distance_m(latitude, longitude, office.latitude, office.longitude)
        if distance <= office.radius_meters:
            within = True
        if nearest_distance is None or distance < nearest_distance:
            nearest, nearest_distance = office, distance

    return GeofenceResult(
        within_office=within,
        nearest_office=nearest.name if nearest else None,
        distance_meters=round(nearest_distance, 1) if nearest_distance is not None else None,
    )


def evaluate_claim(
    db: Session,
    work_location: WorkLocation,
    latitude: Optional[float],
    longitude: Optional[float],
    mode: Optional[str] = None
) -> LocationVerdict:
    """
    Compare the claimed work location with the device position under the enforcement mode

    Raises:
        LocationNotVerified: In reject mode, when the claim is not corroborated
    """
    mode = mode or settings.GEOFENCE_ENFORCEMENT

    if latitude is None or longitude is None:
        within = None
        corroborated = False
    else:
        within = check_position(db, latitude, longitude).within_office
        corroborated = within if work_location == WorkLocation.OFFICE else not within

    if corroborated or mode == "off":
        return LocationVerdict(within_office=within, corroborated=corroborated, needs_review=False)

    if mode == "reject":
        logger.info("Rejected uncorroborated %s claim (within_office=%s)", work_location.value, within)
        raise LocationNotVerified()

    logger.info("Flagged uncorroborated %s claim for review (within_office=%s)", work_location.value, within)
    return LocationVerdict(within_office=within, corroborated=False, needs_review=True)


def _require_master_admin(actor: Employee) -> None:
    if actor.access_level != AccessLevel.MASTER_ADMIN:
        raise Forbidden("Only a master administrator can manage office locations")


def _get_office_or_404(db: Session, office_id: int) -> OfficeLocation:
    office = db.query(OfficeLocation).filter(OfficeLocation.id == office_id).first()
    if not office:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Office location {office_id} not found"
        )
    return office


def _flush_or_conflict(db: Session, name: str) -> None:
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Office location '{name}' already exists"
        )


def create_office_location(
    db: Session,
    actor: Employee,
    name: str,
    latitude: float,
    longitude: float,
    radius_meters: float = 100,
    active: bool = True
) -> OfficeLocation:
    _require_master_admin(actor)
    now = now_utc()
    office = OfficeLocation(
        name=name,
        latitude=latitude,
        longitude=longitude,
        radius_meters=radius_meters,
        active=active,
        created_by_id=actor.id,
        created_at=now,
        updated_at=now,
    )
    db.add(office)
    _flush_or_conflict(db, name)

    log_audit(
        db=db,
        actor_id=actor.id,
        action="OFFICE_LOCATION_CREATE",
        entity_type="office_location",
        entity_id=office.id,
        meta={"name": name, "latitude": latitude, "longitude": longitude, "radius_meters": radius_meters},
    )
    db.commit()
    db.refresh(office)
    logger.info("Office location %s created by employee %s", name, actor.id)
    return office


def update_office_location(db: Session, actor: Employee, office_id: int, **changes) -> OfficeLocation:
    """Apply the supplied (non-None) fields to an office location."""
    _require_master_admin(actor)
    office = _get_office_or_404(db, office_id)

    applied = {k: v for k, v in changes.items() if v is not None}
    for field, value in applied.items():
        setattr(office, field, value)
    office.updated_at = now_utc()
    _flush_or_conflict(db, applied.get("name", office.name))

    log_audit(
        db=db,
        actor_id=actor.id,
        action="OFFICE_LOCATION_UPDATE",
        entity_type="office_location",
        entity_id=office.id,
        meta=applied,
    )
    db.commit()
    db.refresh(office)
    return office


def delete_office_location(db: Session, actor: Employee, office_id: int) -> None:
    _require_master_admin(actor)
    office = _get_office_or_404(db, office_id)
    name = office.name
    db.delete(office)
    log_audit(
        db=db,
        actor_id=actor.id,
        action="OFFICE_LOCATION_DELETE",
        entity_type="office_location",
        entity_id=office_id,
        meta={"name": name},
    )
    db.commit()
    logger.info("Office location %s deleted by employee %s", name, actor.id)
