"""
Shared test helpers
"""
from datetime import datetime
from zoneinfo import ZoneInfo

from attendance_engine.core.security import create_access_token

IST = ZoneInfo("Asia/Kolkata")


def ist(year, month, day, hour=0, minute=0):
    """Aware datetime on the office wall clock (Asia/Kolkata)."""
    return datetime(year, month, day, hour, minute, tzinfo=IST)


def auth_headers(employee) -> dict:
    """Bearer header carrying an identity token for the employee"""
    return {"Authorization": f"Bearer {create_access_token(employee.id)}"}
