"""Time windows for check-in analytics.

A request is anchored on a single ``now``.  From it we derive the current
period ``(now - 30d, now]``, the previous period ``(now - 60d, now - 30d]``
and the seven calendar days of the weekly chart.  Every membership test goes
through ``is_within`` so a timestamp sitting exactly on a boundary lands in
the same period everywhere.

Calendar days are the subject's local days: aware timestamps are converted
into the subject's timezone, naive timestamps are taken as already local.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo

from src.insights.records import FeelingCheckIn

UTC = ZoneInfo("UTC")


def to_local(ts: datetime, tz: tzinfo) -> datetime:
    """Return ``ts`` as an aware datetime in ``tz``."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=tz)
    return ts.astimezone(tz)


def local_date(ts: datetime, tz: tzinfo) -> date:
    """Calendar day of ``ts`` in the subject's timezone."""
    return to_local(ts, tz).date()


def is_within(ts: datetime, start: datetime, end: datetime) -> bool:
    """True if ``start < ts <= end``.

    All three arguments must be aware (see ``to_local``).
    """
    return start < ts <= end


@dataclass(frozen=True)
class TimeRange:
    start: datetime
    end: datetime

    def contains(self, ts: datetime) -> bool:
        return is_within(ts, self.start, self.end)


@dataclass(frozen=True)
class AnalysisWindows:
    """All windows derived from one ``now``.

    Attributes:
        now:              Anchor instant, aware, in the subject's timezone.
        tz:               Subject timezone used for calendar days.
        current_period:   The most recent period.
        previous_period:  The period immediately before it.
        week_days:        Calendar days of the weekly chart, oldest first.
    """

    now: datetime
    tz: tzinfo
    current_period: TimeRange
    previous_period: TimeRange
    week_days: tuple[date, ...]

    @property
    def fetch_range(self) -> TimeRange:
        """Span covering both periods, for a single store query."""
        return TimeRange(self.previous_period.start, self.current_period.end)

    @property
    def current_dates(self) -> tuple[date, date]:
        """First and last calendar day touched by the current period."""
        return (
            self.current_period.start.date(),
            self.current_period.end.date(),
        )

    def localize(self, ts: datetime) -> datetime:
        return to_local(ts, self.tz)


def partition_windows(
    now: datetime,
    tz: tzinfo = UTC,
    period_days: int = 30,
    week_days: int = 7,
) -> AnalysisWindows:
    """Derive the analysis windows for ``now``.

    Args:
        now:          Anchor instant; never read from the clock here.
        tz:           Subject timezone.
        period_days:  Length of each comparison period.
        week_days:    Number of daily buckets ending on ``now``'s local day.

    Returns:
        AnalysisWindows for the request.
    """
    anchor = to_local(now, tz)
    period = timedelta(days=period_days)

    # Elapsed time, not wall-clock time: a period spanning a DST change is
    # still exactly period_days * 24 hours long.
    anchor_utc = anchor.astimezone(UTC)
    current_start = (anchor_utc - period).astimezone(tz)
    previous_start = (anchor_utc - 2 * period).astimezone(tz)

    current = TimeRange(current_start, anchor)
    previous = TimeRange(previous_start, current_start)

    today = anchor.date()
    days = tuple(today - timedelta(days=offset) for offset in range(week_days - 1, -1, -1))

    return AnalysisWindows(
        now=anchor,
        tz=tz,
        current_period=current,
        previous_period=previous,
        week_days=days,
    )


def split_by_period(
    checkins: Iterable[FeelingCheckIn], windows: AnalysisWindows
) -> tuple[list[FeelingCheckIn], list[FeelingCheckIn]]:
    """Split check-ins into (current, previous) period lists.

    Check-ins outside both periods are dropped.
    """
    current: list[FeelingCheckIn] = []
    previous: list[FeelingCheckIn] = []
    for checkin in checkins:
        ts = windows.localize(checkin.occurred_at)
        if windows.current_period.contains(ts):
            current.append(checkin)
        elif windows.previous_period.contains(ts):
            previous.append(checkin)
    return current, previous
