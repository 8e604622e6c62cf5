"""
Database session management
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from attendance_engine.core.config import settings
from attendance_engine.db.base import Base

_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=_connect_args,
    echo=False
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_sqlite_schema() -> None:
    """Create all tables on SQLite (local runs); other databases go through Alembic."""
    if "sqlite" in settings.DATABASE_URL:
        import attendance_engine.models  # noqa: F401  (registers models on Base.metadata)
        Base.metadata.create_all(bind=engine)
