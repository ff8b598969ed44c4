"""
Audit Stash FastAPI application.

This is the entry point for the HTTP side of the service.
All routers are registered here.
"""

from fastapi import FastAPI

from audit_stash.config import get_settings
from audit_stash.api.health import router as health_router
from audit_stash.api.audits import router as audits_router

settings = get_settings()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Audit logging with request metadata and Elasticsearch backfill",
)

# Register routers
app.include_router(health_router)
app.include_router(audits_router)
