"""
Sales Triage Platform - FastAPI Application Entry Point

Serves the sales-eligibility checklist that handlers complete before
filing a store consultation, and the consultation records that carry
the triage result.

Serverless deployment:
  - No threading (synchronous DB init on cold start)
  - Expired triage drafts are purged at startup
"""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from database import init_db, SessionLocal

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger("sales_triage")

# Track DB readiness
_db_ready = False


def _purge_stale_drafts():
    """Drop triage drafts nobody came back to."""
    from services.triage_session_service import purge_expired_sessions

    db = SessionLocal()
    try:
        purge_expired_sessions(db)
    except Exception as e:
        logger.error(f"Draft purge error: {e}")
        db.rollback()
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    global _db_ready

    logger.info("=" * 60)
    logger.info(f"  {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"  Database: {'PostgreSQL' if settings.is_postgres else 'SQLite'}")
    logger.info("=" * 60)

    try:
        init_db()
        _purge_stale_drafts()
        _db_ready = True
        logger.info("DB init complete.")
    except Exception as e:
        logger.error(f"DB init failed: {e}")
        _db_ready = False

    yield

    logger.info("Shutting down...")


# ---------------------------------------------------------------------------
# Create FastAPI application
# ---------------------------------------------------------------------------
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "REST API for the sales-eligibility triage checklist and the "
        "consultations it feeds."
    ),
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# CORS Middleware
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Include all route routers under /api/v1
# ---------------------------------------------------------------------------
from routes import (
    triage_router,
    consultations_router,
)

API_PREFIX = "/api/v1"

all_routers = [
    triage_router,
    consultations_router,
]

# Mount under /api/v1
for r in all_routers:
    app.include_router(r, prefix=API_PREFIX)

# Also mount at root (backward compatibility)
for r in all_routers:
    app.include_router(r)


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------
@app.get("/", tags=["Health"])
def root():
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health", tags=["Health"])
def health_check():
    result = {
        "status": "healthy",
        "database": "ready" if _db_ready else "initializing",
        "database_backend": "postgresql" if settings.is_postgres else "sqlite",
        "version": settings.APP_VERSION,
        "triage_required": settings.REQUIRE_TRIAGE_FOR_CONSULTATION,
    }

    if _db_ready:
        try:
            from models import Consultation
            db = SessionLocal()
            result["consultation_count"] = db.query(Consultation).count()
            db.close()
        except Exception as e:
            result["consultation_count"] = 0
            result["database"] = f"error: {str(e)}"

    return result
