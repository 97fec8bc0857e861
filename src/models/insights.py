"""Response models for the check-in insight report.

Built straight from the engine's dataclasses via ``from_attributes``.
"""

from __future__ import annotations

import datetime as dt

from src.insights.records import TrendDirection
from src.models.base import MumtazBase


class FeelingFrequencyRead(MumtazBase):
    category_id: str
    label: str
    count: int


class DailyBucketRead(MumtazBase):
    date: dt.date
    weekday: str
    count: int


class PhaseCorrelationRead(MumtazBase):
    phase: str
    top_feelings: list[FeelingFrequencyRead]
    total_events_in_phase: int


class TrendEntryRead(MumtazBase):
    category_id: str
    label: str
    current_count: int
    previous_count: int
    direction: TrendDirection
    percent_change: int


class InsightReportRead(MumtazBase):
    generated_at: dt.datetime
    timezone: str
    total_check_ins: int
    top_feelings: list[FeelingFrequencyRead]
    weekly: list[DailyBucketRead]
    phase_correlations: list[PhaseCorrelationRead]
    trends: list[TrendEntryRead]
