"""
Office location (geofence) endpoints; writes are master-admin only
"""
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from attendance_engine.core.deps import get_db, get_current_user
from attendance_engine.models.employee import Employee
from attendance_engine.schemas.office_location import (
    OfficeLocationCreate,
    OfficeLocationOut,
    OfficeLocationUpdate,
)
from attendance_engine.services import geofence_service

router = APIRouter()


@router.get("", response_model=List[OfficeLocationOut])
async def list_office_locations_endpoint(
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    return [OfficeLocationOut.model_validate(o) for o in geofence_service.list_office_locations(db)]


@router.post("", response_model=OfficeLocationOut, status_code=status.HTTP_201_CREATED)
async def create_office_location_endpoint(
    payload: OfficeLocationCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    office = geofence_service.create_office_location(db, current_user, **payload.model_dump())
    return OfficeLocationOut.model_validate(office)


@router.patch("/{office_id}", response_model=OfficeLocationOut)
async def update_office_location_endpoint(
    office_id: int,
    payload: OfficeLocationUpdate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    office = geofence_service.update_office_location(
        db, current_user, office_id, **payload.model_dump(exclude_unset=True)
    )
    return OfficeLocationOut.model_validate(office)


@router.delete("/{office_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_office_location_endpoint(
    office_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    geofence_service.delete_office_location(db, current_user, office_id)
