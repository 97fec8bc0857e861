"""Check-in pattern analytics for Mumtaz.

Turns a subject's timestamped feeling check-ins into read-only insights.
Nothing here writes to the store; every report is recomputed per request.

Modules:
    records          — Closed event records and derived aggregates
    window           — Current/previous period and weekly day windows
    frequency        — Ranked feeling frequency tables
    daily            — Zero-filled daily buckets for the weekly chart
    phase_correlator — Feeling ranking per cycle phase
    trends           — Period-over-period trend analysis
    report           — Insight report assembly and service
    store            — Event store adapter (Supabase Postgres)
    config_loader    — Load/validate/hot-reload insights_config.yaml
"""

from src.insights.config_loader import InsightsConfig, get_insights_config
from src.insights.records import (
    DailyBucket,
    FeelingCheckIn,
    FeelingFrequency,
    PhaseCorrelation,
    PhaseTag,
    TrendDirection,
    TrendEntry,
)
from src.insights.report import InsightReport, InsightService, assemble_report

__all__ = [
    "FeelingCheckIn",
    "PhaseTag",
    "FeelingFrequency",
    "DailyBucket",
    "PhaseCorrelation",
    "TrendEntry",
    "TrendDirection",
    "InsightReport",
    "InsightService",
    "assemble_report",
    "InsightsConfig",
    "get_insights_config",
]
