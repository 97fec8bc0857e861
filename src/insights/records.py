"""Event records consumed by the insights engine and the aggregates it derives.

Input records are closed, required-field, immutable dataclasses.  Rows coming
back from the store are converted with ``checkin_from_row`` /
``phase_tag_from_row``, which return ``None`` for malformed rows so a single
bad record never blocks insights for every valid one.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

logger = logging.getLogger("mumtaz.insights.records")

# Fixed English names; strftime("%a") would follow the host locale.
_WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


class TrendDirection(str, Enum):
    up = "up"
    down = "down"
    same = "same"


# ---------------------------------------------------------------------------
# Input events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FeelingCheckIn:
    """A single timestamped self-report of a feeling.

    Attributes:
        id:           Event identifier.
        subject_id:   Stable identifier of the person checking in.
        category_id:  Vocabulary id (e.g. 'tired').
        label:        Display label stored on the event at write time.
        occurred_at:  When the check-in happened.  Naive values are local time.
    """

    id: str
    subject_id: str
    category_id: str
    label: str
    occurred_at: datetime


@dataclass(frozen=True)
class PhaseTag:
    """Cycle phase recorded for one calendar day."""

    subject_id: str
    date: date
    phase: str


# ---------------------------------------------------------------------------
# Derived aggregates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FeelingFrequency:
    category_id: str
    label: str
    count: int


@dataclass(frozen=True)
class DailyBucket:
    """Check-in count for one calendar day of the weekly chart."""

    date: date
    count: int

    @property
    def weekday(self) -> str:
        """Short day name ('Mon' … 'Sun') for chart axis labels."""
        return _WEEKDAY_NAMES[self.date.weekday()]


@dataclass(frozen=True)
class PhaseCorrelation:
    """Most frequent feelings on days tagged with one cycle phase.

    Attributes:
        phase:                  Phase identifier (e.g. 'luteal').
        top_feelings:           Highest-ranked feelings for the phase.
        total_events_in_phase:  Every check-in attributed to the phase,
                                including categories outside ``top_feelings``.
    """

    phase: str
    top_feelings: tuple[FeelingFrequency, ...]
    total_events_in_phase: int


@dataclass(frozen=True)
class TrendEntry:
    """Period-over-period change for one feeling category."""

    category_id: str
    label: str
    current_count: int
    previous_count: int
    direction: TrendDirection
    percent_change: int


def ranking_key(frequency: FeelingFrequency) -> tuple[int, str]:
    """Sort key for the canonical ranking: count descending, then id ascending."""
    return (-frequency.count, frequency.category_id)


# ---------------------------------------------------------------------------
# Row → record conversion
# ---------------------------------------------------------------------------


def _text(row: Mapping[str, Any], key: str) -> str | None:
    value = row.get(key)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def checkin_from_row(row: Mapping[str, Any]) -> FeelingCheckIn | None:
    """Build a FeelingCheckIn from a store row.

    Expects the keys ``id``, ``subject_id``, ``category_id``, ``label`` and
    ``occurred_at``.  ISO-8601 strings are accepted for ``occurred_at``.

    Returns:
        The record, or None if any required field is missing or unparseable.
    """
    event_id = _text(row, "id")
    subject_id = _text(row, "subject_id")
    category_id = _text(row, "category_id")
    label = _text(row, "label")
    occurred_at = row.get("occurred_at")

    if isinstance(occurred_at, str):
        try:
            occurred_at = datetime.fromisoformat(occurred_at)
        except ValueError:
            occurred_at = None

    if not (event_id and subject_id and category_id and label) or not isinstance(
        occurred_at, datetime
    ):
        return None

    return FeelingCheckIn(
        id=event_id,
        subject_id=subject_id,
        category_id=category_id,
        label=label,
        occurred_at=occurred_at,
    )


def phase_tag_from_row(row: Mapping[str, Any]) -> PhaseTag | None:
    """Build a PhaseTag from a store row (``subject_id``, ``date``, ``phase``).

    Returns:
        The record, or None if the row has no usable date or phase.
    """
    subject_id = _text(row, "subject_id")
    phase = _text(row, "phase")
    tag_date = row.get("date")

    if isinstance(tag_date, datetime):
        tag_date = tag_date.date()
    elif isinstance(tag_date, str):
        try:
            tag_date = date.fromisoformat(tag_date)
        except ValueError:
            tag_date = None

    if not (subject_id and phase) or not isinstance(tag_date, date):
        return None

    return PhaseTag(subject_id=subject_id, date=tag_date, phase=phase.lower())


def parse_checkins(rows: Iterable[Mapping[str, Any]]) -> list[FeelingCheckIn]:
    """Convert store rows, skipping (and logging) malformed ones."""
    checkins: list[FeelingCheckIn] = []
    skipped = 0
    for row in rows:
        checkin = checkin_from_row(row)
        if checkin is None:
            skipped += 1
            logger.warning("Skipping malformed check-in row id=%s", row.get("id"))
            continue
        checkins.append(checkin)
    if skipped:
        logger.warning("Skipped %d malformed check-in row(s)", skipped)
    return checkins


def parse_phase_tags(rows: Iterable[Mapping[str, Any]]) -> list[PhaseTag]:
    """Convert store rows, skipping (and logging) malformed ones."""
    tags: list[PhaseTag] = []
    for row in rows:
        tag = phase_tag_from_row(row)
        if tag is None:
            logger.warning("Skipping malformed phase tag row date=%s", row.get("date"))
            continue
        tags.append(tag)
    return tags
