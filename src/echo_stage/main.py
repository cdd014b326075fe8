# src/echo_stage/main.py
"""Main entry point for the Echo application."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from echo_stage.api.v1 import (
    bookmarks_router,
    notifications_router,
    posts_router,
    pulse_router,
    users_router,
    worker_router,
)
from echo_stage.api.v1.errors import register_exception_handlers
from echo_stage.core.logging import configure_logging
from echo_stage.core.settings import settings

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Echo API",
    description="Short audio posts, threaded responses and bookmarks",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

register_exception_handlers(app)

# Include API routers
app.include_router(posts_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(bookmarks_router, prefix="/api/v1")
app.include_router(notifications_router, prefix="/api/v1")
app.include_router(pulse_router, prefix="/api/v1")
app.include_router(worker_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging()
    logger.info("%s %s starting", settings.app_name, settings.app_version)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("echo_stage.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
