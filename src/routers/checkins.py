"""Endpoints for recording and browsing feeling check-ins."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import APIRouter, HTTPException, Query

from src.dependencies import CurrentUser, EventStoreDep, InsightsConfigDep
from src.models.checkins import FeelingCheckInCreate, FeelingCheckInRead, FeelingOption

router = APIRouter(prefix="/checkins", tags=["check-ins"])


@router.get("/feelings", response_model=list[FeelingOption])
async def list_feelings(config: InsightsConfigDep) -> Any:
    """The fixed check-in vocabulary, in display order."""
    return [
        FeelingOption(category_id=category_id, label=label)
        for category_id, label in config.feelings.items()
    ]


@router.get("", response_model=list[FeelingCheckInRead])
async def list_checkins(
    user: CurrentUser,
    store: EventStoreDep,
    start: datetime | None = Query(default=None),
    end: datetime | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=500),
) -> Any:
    if start is None and end is None:
        start = datetime.now(timezone.utc) - timedelta(days=30)
    checkins = await store.list_recent_checkins(
        user.subject_id, range_start=start, range_end=end, limit=limit
    )
    return [FeelingCheckInRead.model_validate(c) for c in checkins]


@router.post("", response_model=FeelingCheckInRead, status_code=201)
async def create_checkin(
    user: CurrentUser,
    body: FeelingCheckInCreate,
    store: EventStoreDep,
    config: InsightsConfigDep,
) -> Any:
    label = config.feeling_label(body.category_id)
    if label is None:
        raise HTTPException(
            status_code=422, detail=f"Unknown feeling: {body.category_id}"
        )
    checkin = await store.insert_feeling_checkin(
        user.subject_id,
        body.category_id,
        label,
        body.occurred_at or datetime.now(timezone.utc),
    )
    return FeelingCheckInRead.model_validate(checkin)


@router.delete("/{checkin_id}", status_code=204)
async def delete_checkin(checkin_id: str, user: CurrentUser, store: EventStoreDep) -> None:
    deleted = await store.delete_feeling_checkin(user.subject_id, checkin_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Check-in not found")
