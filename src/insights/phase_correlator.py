"""Feeling ↔ cycle phase correlation.

Joins check-ins to the phase tagged on the same calendar day and surfaces
which feelings dominate each phase, e.g.:
- "On luteal days you most often felt bloated, tired and emotional"
- "Most of your check-ins (14) happened during the menstrual phase"

Check-ins on untagged days are left out of this view only; they still count
toward every other aggregate.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, tzinfo

from src.insights.records import (
    FeelingCheckIn,
    FeelingFrequency,
    PhaseCorrelation,
    PhaseTag,
    ranking_key,
)
from src.insights.window import UTC, local_date

logger = logging.getLogger("mumtaz.insights.phase_correlator")


def build_phase_lookup(tags: Iterable[PhaseTag]) -> dict[tuple[str, date], str]:
    """Map each (subject, calendar day) to its phase.

    At most one tag per subject per day is expected.  When a day carries
    several, the alphabetically first phase is kept so the result is
    order-independent.
    """
    lookup: dict[tuple[str, date], str] = {}
    for tag in tags:
        key = (tag.subject_id, tag.date)
        existing = lookup.get(key)
        if existing is None:
            lookup[key] = tag.phase
        elif existing != tag.phase:
            logger.debug(
                "Conflicting phase tags on %s: %s / %s", tag.date, existing, tag.phase
            )
            lookup[key] = min(existing, tag.phase)
    return lookup


class PhaseCorrelator:
    """Rank feelings within each cycle phase.

    Usage::

        correlator = PhaseCorrelator(tz=ZoneInfo("Europe/London"))
        for item in correlator.correlate(checkins, phase_tags):
            print(item.phase, [f.label for f in item.top_feelings])
    """

    def __init__(self, tz: tzinfo = UTC, top_n: int = 3) -> None:
        self._tz = tz
        self._top_n = top_n

    def correlate(
        self,
        checkins: Iterable[FeelingCheckIn],
        tags: Iterable[PhaseTag],
    ) -> list[PhaseCorrelation]:
        """Correlate check-ins with the phase tagged on their day.

        Args:
            checkins: Check-ins restricted to the current period.
            tags:     Phase tags covering (at least) the same days.

        Returns:
            One PhaseCorrelation per phase with at least one check-in, sorted
            by total check-ins descending, then phase name ascending.
        """
        lookup = build_phase_lookup(tags)
        if not lookup:
            return []

        per_phase = self._accumulate(checkins, lookup)

        correlations = [
            self._summarize(phase, counts) for phase, counts in per_phase.items()
        ]
        correlations.sort(key=lambda c: (-c.total_events_in_phase, c.phase))
        return correlations

    def _accumulate(
        self,
        checkins: Iterable[FeelingCheckIn],
        lookup: dict[tuple[str, date], str],
    ) -> dict[str, dict[str, list]]:
        """Build phase → category → [label, count, earliest occurrence]."""
        per_phase: dict[str, dict[str, list]] = {}
        unmatched = 0

        for checkin in checkins:
            day = local_date(checkin.occurred_at, self._tz)
            phase = lookup.get((checkin.subject_id, day))
            if phase is None:
                unmatched += 1
                continue

            categories = per_phase.setdefault(phase, {})
            entry = categories.get(checkin.category_id)
            order = (checkin.occurred_at, checkin.id)
            if entry is None:
                categories[checkin.category_id] = [checkin.label, 1, order]
            else:
                entry[1] += 1
                if order < entry[2]:
                    entry[0], entry[2] = checkin.label, order

        if unmatched:
            logger.debug("%d check-in(s) had no phase tag for their day", unmatched)
        return per_phase

    def _summarize(self, phase: str, counts: dict[str, list]) -> PhaseCorrelation:
        table = sorted(
            (
                FeelingFrequency(category_id=category, label=label, count=count)
                for category, (label, count, _) in counts.items()
            ),
            key=ranking_key,
        )
        return PhaseCorrelation(
            phase=phase,
            top_feelings=tuple(table[: self._top_n]),
            total_events_in_phase=sum(f.count for f in table),
        )
