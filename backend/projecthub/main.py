"""ProjectHub FastAPI application.

Entry point for the backend server.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from projecthub.api.errors import register_exception_handlers
from projecthub.api.health import VERSION
from projecthub.api.health import router as health_router
from projecthub.api.v1.projects import router as projects_router
from projecthub.api.v1.tasks import router as tasks_router
from projecthub.api.v1.users import router as users_router
from projecthub.config import settings
from projecthub.db.database import create_db_and_tables
from projecthub.middleware.auth import APIKeyAuthMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    create_db_and_tables()
    logger.info(
        "ProjectHub started (membership enforcement %s)",
        "on" if settings.enforce_membership else "off",
    )
    yield


app = FastAPI(
    title="ProjectHub",
    description="Project and task collaboration service",
    version=VERSION,
    lifespan=lifespan,
)

# Middleware (order matters: first added = innermost)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-User-ID"],
)
app.add_middleware(APIKeyAuthMiddleware)

register_exception_handlers(app)


# Global exception handler: internal details never reach the client
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    if isinstance(exc, HTTPException):
        raise exc
    logger.error("Unhandled exception on %s %s: %s", request.method, request.url.path, exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error."},
    )


# Routes
app.include_router(health_router)
app.include_router(users_router)
app.include_router(projects_router)
app.include_router(tasks_router)


@app.get("/")
async def root():
    return {"name": "ProjectHub", "version": VERSION, "status": "running"}
