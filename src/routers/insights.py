"""Check-in insight report endpoint."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import asyncpg
from fastapi import APIRouter, HTTPException, Query

from src.dependencies import AppSettings, CurrentUser, EventStoreDep, InsightsConfigDep
from src.insights.report import InsightService
from src.models.insights import InsightReportRead

router = APIRouter(prefix="/insights", tags=["insights"])
logger = logging.getLogger("mumtaz.insights.api")


def resolve_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise HTTPException(status_code=422, detail=f"Unknown timezone: {name}") from exc


@router.get("/feelings", response_model=InsightReportRead)
async def feeling_insights(
    user: CurrentUser,
    store: EventStoreDep,
    config: InsightsConfigDep,
    settings: AppSettings,
    tz: str | None = Query(default=None, description="IANA timezone for calendar days"),
    now: datetime | None = Query(default=None, description="Report anchor; defaults to server time"),
) -> Any:
    """Most common feelings, weekly chart, phase correlations and trends."""
    zone = resolve_timezone(tz or settings.default_timezone)
    anchor = now or datetime.now(timezone.utc)

    service = InsightService(store, config)
    try:
        report = await service.build_insight_report(user.subject_id, anchor, zone)
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, RuntimeError) as exc:
        logger.error("Insight report failed for %s: %s", user.subject_id, exc)
        raise HTTPException(status_code=503, detail="Insights unavailable") from exc

    return InsightReportRead.model_validate(report)
