"""Health check endpoint — database connectivity and configuration flags."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text

from projecthub.config import settings

router = APIRouter()

VERSION = "0.1.0"


class HealthStatus(BaseModel):
    status: str  # "healthy" | "unhealthy"
    version: str
    checks: dict[str, dict]
    timestamp: datetime


@router.get("/health", response_model=HealthStatus)
async def health_check() -> HealthStatus:
    """Check the database and report the access policy mode."""
    checks: dict[str, dict] = {}
    healthy = True

    try:
        from projecthub.db.database import engine

        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        checks["database"] = {"status": "ok", "detail": engine.url.get_backend_name()}
    except Exception as e:
        checks["database"] = {"status": "error", "detail": str(e)[:200]}
        healthy = False

    checks["auth_gate"] = {
        "status": "ok" if settings.projecthub_api_key else "disabled",
        "detail": "shared API key" + ("" if settings.projecthub_api_key else " — set PROJECTHUB_API_KEY to enable"),
    }
    checks["access_policy"] = {
        "status": "ok",
        "detail": "membership enforced" if settings.enforce_membership else "permissive (ENFORCE_MEMBERSHIP=false)",
    }

    return HealthStatus(
        status="healthy" if healthy else "unhealthy",
        version=VERSION,
        checks=checks,
        timestamp=datetime.now(timezone.utc),
    )
