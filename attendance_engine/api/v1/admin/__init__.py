"""Admin API (ADMIN and MASTER_ADMIN access levels)."""
from fastapi import APIRouter
from attendance_engine.api.v1.admin import attendance as admin_attendance

admin_router = APIRouter(prefix="/admin", tags=["admin"])
admin_router.include_router(admin_attendance.router, prefix="/attendance", tags=["admin-attendance"])
