# app/main.py
# TutorHub FastAPI application entry point
#
# Startup:  logging, optional migrations / create_all, DB connection check
# Shutdown: Clean connection pool disposal
# Routes:   /health, /api/v1/* (all endpoints via master router)

from contextlib import asynccontextmanager

from alembic import command
from alembic.config import Config
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import app.db.base  # noqa: F401 -- registers all models so relationships resolve
from app.api.v1.router import api_router
from app.core.config import settings
from app.core.exceptions import TutorHubError, tutorhub_error_handler
from app.core.logging import setup_logging
from app.db.base_class import Base
from app.db.session import check_db_connection, engine

logger = setup_logging()


def run_startup_migrations() -> bool:
    """Run `alembic upgrade head` using the project alembic.ini."""
    try:
        alembic_cfg = Config("alembic.ini")
        command.upgrade(alembic_cfg, "head")
        logger.info("Database migrations: OK")
        return True
    except Exception as exc:
        logger.warning(f"Database migrations failed -- {exc}")
        return False


# ── Lifespan ──────────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup and shutdown logic.
    FastAPI's modern replacement for @app.on_event("startup").
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version} [{settings.app_env}]")

    if settings.auto_migrate_on_startup:
        run_startup_migrations()
    elif settings.auto_create_tables:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables: created if missing")

    # Verify DB connection
    if check_db_connection():
        logger.info("Database connection: OK")
    else:
        logger.warning("Database connection failed -- check DATABASE_URL")

    yield  # App runs here

    # Shutdown
    logger.info("Shutting down -- disposing DB connection pool")
    engine.dispose()


# ── App Instance ──────────────────────────────────────────────────────────────

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description=(
        "TutorHub -- tutoring marketplace: course catalog, booking lifecycle, "
        "tutor-course matching and graded quiz assignments."
    ),
    docs_url="/api/docs",       # Swagger UI
    redoc_url="/api/redoc",     # ReDoc
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
    debug=settings.debug,
)


# ── CORS ──────────────────────────────────────────────────────────────────────

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Errors ────────────────────────────────────────────────────────────────────

app.add_exception_handler(TutorHubError, tutorhub_error_handler)

# ── Routes ────────────────────────────────────────────────────────────────────

# All API routes under /api/v1
app.include_router(api_router, prefix="/api/v1")


# ── Health Check ──────────────────────────────────────────────────────────────

@app.get("/health", tags=["Health"], include_in_schema=False)
def health_check():
    """
    Health check endpoint for Cloud Run and load balancers.
    Returns 200 OK if the app is running; DB status included for observability.
    """
    db_ok = check_db_connection()

    return JSONResponse(
        status_code=200,
        content={
            "status": "ok",
            "app": settings.app_name,
            "version": settings.app_version,
            "environment": settings.app_env,
            "services": {
                "database": "ok" if db_ok else "unavailable",
            },
        },
    )


# ── Root Redirect ─────────────────────────────────────────────────────────────

@app.get("/", include_in_schema=False)
def root():
    return JSONResponse(
        content={
            "message": f"{settings.app_name} API",
            "docs": "/api/docs",
            "health": "/health",
        }
    )
