"""Insight report assembly.

``assemble_report`` is a pure function of the two event streams, ``now`` and
the subject timezone.  ``InsightService`` wraps it with the single store
fetch per stream that a request needs.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import datetime, tzinfo

from src.insights.config_loader import InsightsConfig, get_insights_config
from src.insights.daily import bucket_by_day
from src.insights.frequency import count_feelings
from src.insights.phase_correlator import PhaseCorrelator
from src.insights.records import (
    DailyBucket,
    FeelingCheckIn,
    FeelingFrequency,
    PhaseCorrelation,
    PhaseTag,
    TrendEntry,
)
from src.insights.store import EventStore
from src.insights.trends import analyze_trends
from src.insights.window import UTC, AnalysisWindows, partition_windows, split_by_period

logger = logging.getLogger("mumtaz.insights.report")


@dataclass(frozen=True)
class InsightReport:
    """Read-only check-in insights for one subject.

    Attributes:
        generated_at:        The ``now`` the report was computed for.
        timezone:            Timezone used for calendar days.
        total_check_ins:     Check-ins in the current period.
        top_feelings:        Most common feelings in the current period.
        weekly:              One bucket per day of the last week, oldest first.
        phase_correlations:  Feelings ranked per cycle phase.
        trends:              Biggest changes versus the previous period.
    """

    generated_at: datetime
    timezone: str
    total_check_ins: int
    top_feelings: tuple[FeelingFrequency, ...]
    weekly: tuple[DailyBucket, ...]
    phase_correlations: tuple[PhaseCorrelation, ...]
    trends: tuple[TrendEntry, ...]


def _tz_name(tz: tzinfo) -> str:
    return getattr(tz, "key", None) or str(tz)


def _tags_in_current_period(
    tags: Iterable[PhaseTag], windows: AnalysisWindows
) -> list[PhaseTag]:
    first, last = windows.current_dates
    return [t for t in tags if first <= t.date <= last]


def assemble_report(
    checkins: Iterable[FeelingCheckIn],
    phase_tags: Iterable[PhaseTag],
    now: datetime,
    tz: tzinfo = UTC,
    config: InsightsConfig | None = None,
) -> InsightReport:
    """Compute the full insight report from already-fetched events.

    Args:
        checkins:    Check-ins covering at least the previous and current period.
        phase_tags:  Phase tags covering at least the current period.
        now:         Anchor instant for every window.
        tz:          Subject timezone.
        config:      Analytics constants. Defaults to the global config.

    Returns:
        InsightReport; lists are empty, never missing, when there is no data.
    """
    cfg = config or get_insights_config()
    windows = partition_windows(
        now, tz, period_days=cfg.period_days, week_days=cfg.week_days
    )

    # Work on local-time copies so every timestamp is aware and comparable.
    local_checkins = [
        replace(c, occurred_at=windows.localize(c.occurred_at)) for c in checkins
    ]
    current, previous = split_by_period(local_checkins, windows)

    current_table = count_feelings(current)
    previous_table = count_feelings(previous)

    correlator = PhaseCorrelator(tz=tz, top_n=cfg.top_per_phase)
    correlations = correlator.correlate(
        current, _tags_in_current_period(phase_tags, windows)
    )

    trends = analyze_trends(
        current_table,
        previous_table,
        noise_floor=cfg.noise_floor,
        limit=cfg.top_trends,
    )

    return InsightReport(
        generated_at=windows.now,
        timezone=_tz_name(tz),
        total_check_ins=len(current),
        top_feelings=tuple(current_table[: cfg.top_feelings]),
        weekly=tuple(bucket_by_day(current, windows.week_days, tz)),
        phase_correlations=tuple(correlations),
        trends=tuple(trends),
    )


class InsightService:
    """Fetch a subject's events once and build their insight report.

    Usage::

        service = InsightService(PostgresEventStore())
        report = await service.build_insight_report(subject_id, now, tz)
    """

    def __init__(
        self, store: EventStore, config: InsightsConfig | None = None
    ) -> None:
        self._store = store
        self._config = config

    async def build_insight_report(
        self, subject_id: str, now: datetime, tz: tzinfo = UTC
    ) -> InsightReport:
        """Build the report for ``subject_id`` as of ``now``.

        Store errors propagate unchanged; nothing is computed from a partial
        fetch.
        """
        cfg = self._config or get_insights_config()
        windows = partition_windows(
            now, tz, period_days=cfg.period_days, week_days=cfg.week_days
        )
        fetch_range = windows.fetch_range
        first_day, last_day = windows.current_dates

        checkins = await self._store.list_feeling_checkins(
            subject_id, fetch_range.start, fetch_range.end
        )
        tags = await self._store.list_phase_tags(subject_id, first_day, last_day)

        report = assemble_report(checkins, tags, now, tz, cfg)
        logger.info(
            "Built insight report for %s: %d check-ins, %d phase(s), %d trend(s)",
            subject_id,
            report.total_check_ins,
            len(report.phase_correlations),
            len(report.trends),
        )
        return report
