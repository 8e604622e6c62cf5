"""
Declarative base shared by all models
"""
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def enum_column_type(enum_cls):
    """Enum column that stores member values ("off-site", "checked_in") rather than member names."""
    return SQLEnum(
        enum_cls,
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        validate_strings=True,
        length=32,
    )
