# app/db/base_class.py
# Contains ONLY the SQLAlchemy declarative Base and shared column helpers.
# All model files import from here to avoid circular imports.
# app/db/base.py (the Alembic registry) imports from here + all models.

from datetime import datetime, timezone

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """
    Single declarative base for all TutorHub ORM models.
    """
    pass
