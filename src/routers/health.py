"""Liveness endpoint — public, no auth required."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from src.config import get_settings
from src.insights.config_loader import get_insights_config
from src.services.supabase import get_pool

router = APIRouter(tags=["system"])
logger = logging.getLogger("mumtaz.health")


async def _database_reachable() -> bool:
    try:
        async with get_pool().acquire() as conn:
            await conn.fetchval("SELECT 1")
    except Exception as exc:
        logger.warning("Health check DB probe failed: %s", exc)
        return False
    return True


@router.get("/health")
async def health_check() -> dict:
    """Returns 200 while the process is up; ``status`` degrades without a DB.

    Insight reports need the database, so an unreachable pool means reports
    will come back 503 until it recovers.
    """
    settings = get_settings()
    db_ok = await _database_reachable()

    return {
        "status": "healthy" if db_ok else "degraded",
        "version": settings.app_version,
        "environment": settings.environment,
        "database": "connected" if db_ok else "unreachable",
        "insights_config": get_insights_config().version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
