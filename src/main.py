"""Mumtaz API — FastAPI application entry point.

Run locally:
    uvicorn src.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config import get_settings
from src.insights.config_loader import get_insights_config
from src.middleware.clerk_auth import ClerkAuthMiddleware
from src.routers import checkins, health, insights
from src.services.supabase import close_pool, init_pool

# ---------- Logging ----------

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger("mumtaz")


# ---------- Lifespan ----------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup / shutdown hooks."""
    settings = get_settings()
    logger.info(
        "Starting Mumtaz API v%s [%s]",
        settings.app_version,
        settings.environment,
    )
    # Fail fast on a broken insights_config.yaml rather than on the first request
    get_insights_config()
    await init_pool(settings)
    yield
    await close_pool()
    logger.info("Mumtaz API shut down")


# ---------- App factory ----------

def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Mumtaz API",
        description="Wellness companion backend — feeling check-ins and check-in pattern insights.",
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ---------- Middleware (last added runs first) ----------

    app.add_middleware(ClerkAuthMiddleware, settings=settings)

    # CORS wraps auth so preflight requests are answered before token checks
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------- Health check (outside v1 prefix, always at /health) ----------
    app.include_router(health.router)

    # ---------- API v1 routes ----------
    v1_prefix = "/api/v1"

    app.include_router(checkins.router, prefix=v1_prefix)
    app.include_router(insights.router, prefix=v1_prefix)

    return app


app = create_app()
