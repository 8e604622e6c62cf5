"""
Office location (geofence) schemas
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class OfficeLocationCreate(BaseModel):
    name: str = Field(..., min_length=1)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    radius_meters: float = Field(100, gt=0, description="Geofence radius in meters")
    active: bool = True


class OfficeLocationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    radius_meters: Optional[float] = Field(None, gt=0)
    active: Optional[bool] = None


class OfficeLocationOut(BaseModel):
    id: int
    name: str
    latitude: float
    longitude: float
    radius_meters: float
    active: bool

    model_config = ConfigDict(from_attributes=True)
