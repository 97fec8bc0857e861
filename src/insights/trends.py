"""Period-over-period feeling trends.

Compares how often each feeling was logged in the current period against the
previous one and reports the biggest movers.  Categories that never reach the
noise floor in either period are dropped: going from 0 to 1 check-in is a
"100% increase" that means nothing at this scale.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from src.insights.records import FeelingFrequency, TrendDirection, TrendEntry

logger = logging.getLogger("mumtaz.insights.trends")


def percent_change(current: int, previous: int) -> int:
    """Whole-number percentage change from ``previous`` to ``current``.

    Rounded half up.  A category that is new this period counts as 100%.
    """
    if previous > 0:
        diff = abs(current - previous)
        return (diff * 200 + previous) // (2 * previous)
    if current > 0:
        return 100
    return 0


def direction_of(current: int, previous: int) -> TrendDirection:
    if current > previous:
        return TrendDirection.up
    if current < previous:
        return TrendDirection.down
    return TrendDirection.same


def analyze_trends(
    current: Iterable[FeelingFrequency],
    previous: Iterable[FeelingFrequency],
    noise_floor: int = 2,
    limit: int = 5,
) -> list[TrendEntry]:
    """Compute trend entries from two full frequency tables.

    Args:
        current:      Untruncated frequency table of the current period.
        previous:     Untruncated frequency table of the previous period.
        noise_floor:  A category must reach this count in at least one period.
        limit:        Maximum number of entries returned.

    Returns:
        Entries ranked by percent change descending, then category id.
    """
    current_by_id = {f.category_id: f for f in current}
    previous_by_id = {f.category_id: f for f in previous}

    entries: list[TrendEntry] = []
    for category in current_by_id.keys() | previous_by_id.keys():
        now_freq = current_by_id.get(category)
        before_freq = previous_by_id.get(category)
        current_count = now_freq.count if now_freq else 0
        previous_count = before_freq.count if before_freq else 0

        if current_count < noise_floor and previous_count < noise_floor:
            continue

        # Prefer the label as it reads in the most recent period.
        label = (now_freq or before_freq).label  # type: ignore[union-attr]

        entries.append(
            TrendEntry(
                category_id=category,
                label=label,
                current_count=current_count,
                previous_count=previous_count,
                direction=direction_of(current_count, previous_count),
                percent_change=percent_change(current_count, previous_count),
            )
        )

    entries.sort(key=lambda e: (-e.percent_change, e.category_id))
    logger.debug("%d trend(s) above noise floor %d", len(entries), noise_floor)
    return entries[:limit]
