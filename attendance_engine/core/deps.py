"""
Dependencies and guards for FastAPI endpoints
"""
from typing import Generator
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from attendance_engine.db.session import SessionLocal
from attendance_engine.core.security import decode_token
from attendance_engine.models.employee import AccessLevel, Employee


security = HTTPBearer()


def get_db() -> Generator:
    """Dependency for getting database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> Employee:
    """
    Resolve the calling employee from the identity token

    The token is issued by the identity provider; only its signature and subject are checked.
    """
    token = credentials.credentials

    try:
        payload = decode_token(token)
        sub_value = payload.get("sub")
        if sub_value is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication credentials",
                headers={"WWW-Authenticate": "Bearer"},
            )
        employee_id: int = int(sub_value)
    except (ValueError, TypeError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    employee = db.query(Employee).filter(Employee.id == employee_id).first()
    if employee is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not employee.active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user"
        )

    return employee


def require_access(*allowed_levels: AccessLevel):
    """
    Dependency factory for access-level checks

    Master administrators pass every check.

    Usage:
        @router.get("/admin-only")
        async def admin_endpoint(user: Employee = Depends(require_access(AccessLevel.ADMIN))):
            ...
    """
    def access_checker(current_user: Employee = Depends(get_current_user)) -> Employee:
        if current_user.access_level == AccessLevel.MASTER_ADMIN:
            return current_user
        if current_user.access_level not in allowed_levels:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required access: {[level.value for level in allowed_levels]}"
            )
        return current_user
    return access_checker
