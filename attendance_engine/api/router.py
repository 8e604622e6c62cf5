"""
Main API router
"""
from fastapi import APIRouter

from attendance_engine.api.v1 import (
    health,
    attendance,
    leaves,
    policies,
    holidays,
    office_locations,
    escalation_paths,
    reports,
)
from attendance_engine.api.v1.admin import admin_router

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(attendance.router, prefix="/attendance", tags=["attendance"])
api_router.include_router(leaves.router, prefix="/leaves", tags=["leaves"])
api_router.include_router(policies.router, prefix="/policies", tags=["policies"])
api_router.include_router(holidays.router, prefix="/holidays", tags=["holidays"])
api_router.include_router(office_locations.router, prefix="/office-locations", tags=["office-locations"])
api_router.include_router(escalation_paths.router, prefix="/escalation-paths", tags=["escalation-paths"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
api_router.include_router(admin_router)
