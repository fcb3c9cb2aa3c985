# app/db/session.py
# Database session management
#
# Connection modes:
#   PostgreSQL → pooled engine (DATABASE_URL in .env)
#   SQLite     → local dev and the test suite; one file, shared across threads
#
# FastAPI endpoints get a session via: Depends(get_db)

from typing import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings


def _engine_kwargs(database_url: str) -> dict:
    """
    Pool settings per backend.
    SQLite connections are handed between the TestClient worker threads,
    so the same-thread check is disabled there.
    """
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,   # test connection before each use
        "pool_size": 5,
        "max_overflow": 10,
        "pool_recycle": 1800,    # Recycle connections every 30 min
    }


# ── Engine ────────────────────────────────────────────────────────────────────
engine = create_engine(
    settings.database_url,
    echo=settings.sql_echo,
    **_engine_kwargs(settings.database_url),
)

# ── Session Factory ───────────────────────────────────────────────────────────
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,  # Prevents lazy load errors after commit
)


# ── FastAPI Dependency ────────────────────────────────────────────────────────
def get_db() -> Generator[Session, None, None]:
    """
    Dependency injected into every FastAPI endpoint that needs DB access.

    Usage:
        @router.get("/example")
        def example(db: Session = Depends(get_db)):
            ...

    Commits on success, rolls back on any exception. Services that have an
    irreversible commit point (booking payment, instructor assignment) commit
    explicitly before raising, so the rollback here never undoes them.
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


# ── Health Check Helper ───────────────────────────────────────────────────────
def check_db_connection() -> bool:
    """
    Used by /health endpoint to verify DB connectivity.
    Returns True if connected, False otherwise.
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
