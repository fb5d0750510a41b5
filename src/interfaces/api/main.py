"""
FastAPI application for the daily rewards engine.

Thin adapter over the use cases: request validation and error-to-status mapping only.
"""

import logging

from fastapi import FastAPI

from src.interfaces.api.routers import admin, progress, submissions, users

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Daily Rewards API",
    description="Daily task submissions, progress and reward settlement",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

# Include routers
app.include_router(submissions.router)
app.include_router(progress.router)
app.include_router(users.router)
app.include_router(admin.router)


@app.get("/api/health")
async def api_health():
    """API health check endpoint."""
    return {"status": "ok", "service": "daily-rewards-api"}
