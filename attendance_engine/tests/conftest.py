"""
Pytest configuration and fixtures
"""
import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("APP_ENV", "local")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from attendance_engine.main import app  # noqa: E402
from attendance_engine.db.base import Base  # noqa: E402
from attendance_engine.core.deps import get_db  # noqa: E402

# Import all models to ensure they're registered with Base.metadata
from attendance_engine.models import (  # noqa: E402
    AccessLevel,
    Department,
    DepartmentPolicy,
    Employee,
    OrgRole,
)

# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# Enable foreign keys for SQLite
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Test client fixture with database override"""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_employee(db: Session):
    """Factory for directory entries"""
    def _make(
        name="Employee",
        department=Department.TECHNICAL,
        role=OrgRole.EMPLOYEE,
        access_level=AccessLevel.EMPLOYEE,
        reporting_manager=None,
        active=True,
    ) -> Employee:
        employee = Employee(
            name=name,
            department=department,
            role=role,
            access_level=access_level,
            reporting_manager_id=reporting_manager.id if reporting_manager else None,
            active=active,
        )
        db.add(employee)
        db.commit()
        db.refresh(employee)
        return employee
    return _make


@pytest.fixture
def make_policy(db: Session):
    """Factory for stored department policies"""
    def _make(department=Department.TECHNICAL, **values) -> DepartmentPolicy:
        policy = DepartmentPolicy(department=department, **values)
        db.add(policy)
        db.commit()
        db.refresh(policy)
        return policy
    return _make


@pytest.fixture
def master_admin(make_employee) -> Employee:
    return make_employee(
        name="Master Admin",
        department=Department.HR,
        role=OrgRole.MANAGING_DIRECTOR,
        access_level=AccessLevel.MASTER_ADMIN,
    )
