"""Daily check-in counts for the weekly chart."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, tzinfo

from src.insights.records import DailyBucket, FeelingCheckIn
from src.insights.window import local_date


def bucket_by_day(
    checkins: Iterable[FeelingCheckIn],
    days: Sequence[date],
    tz: tzinfo,
) -> list[DailyBucket]:
    """Count check-ins per calendar day.

    Every day in ``days`` gets a bucket, zero when nothing was logged, so the
    chart always has a fixed number of bars.  Check-ins falling on a day
    outside ``days`` are ignored.

    Args:
        checkins: Check-ins to bucket.
        days:     Calendar days, oldest first.
        tz:       Subject timezone used to resolve each check-in's day.

    Returns:
        One DailyBucket per entry of ``days``, in the same order.
    """
    counts = {day: 0 for day in days}
    for checkin in checkins:
        day = local_date(checkin.occurred_at, tz)
        if day in counts:
            counts[day] += 1
    return [DailyBucket(date=day, count=counts[day]) for day in days]
