"""Feeling frequency tables.

Counts check-ins per category within one period and ranks them by the
canonical order (count descending, then category id ascending).
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from src.insights.records import FeelingCheckIn, FeelingFrequency, ranking_key


def count_feelings(checkins: Iterable[FeelingCheckIn]) -> list[FeelingFrequency]:
    """Build the full ranked frequency table for a set of check-ins.

    The label shown for a category is the one stored on its earliest
    check-in (ties on time broken by event id), so the result does not
    depend on input order.

    Args:
        checkins: Check-ins already restricted to a single period.

    Returns:
        One FeelingFrequency per category, ranked.  Empty input → empty list.
    """
    counts: dict[str, int] = {}
    first_seen: dict[str, tuple[datetime, str, str]] = {}

    for checkin in checkins:
        category = checkin.category_id
        counts[category] = counts.get(category, 0) + 1

        candidate = (checkin.occurred_at, checkin.id, checkin.label)
        current = first_seen.get(category)
        if current is None or candidate[:2] < current[:2]:
            first_seen[category] = candidate

    table = [
        FeelingFrequency(
            category_id=category,
            label=first_seen[category][2],
            count=count,
        )
        for category, count in counts.items()
    ]
    table.sort(key=ranking_key)
    return table
