"""Event store adapter for check-in analytics.

The engine only ever reads two streams for one subject and time range:
feeling check-ins (``quick_checkin_logs``) and daily cycle phase tags
(``wellness_entries.cycle_phase``).  Rows are converted to closed records
here; malformed rows are skipped with a warning instead of failing the
whole read.

Database errors are not caught: a failed fetch must surface as "insights
unavailable", never as an empty report.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Protocol

from src.insights.records import (
    FeelingCheckIn,
    PhaseTag,
    checkin_from_row,
    parse_checkins,
    parse_phase_tags,
)
from src.services import supabase

logger = logging.getLogger("mumtaz.insights.store")


class EventStore(Protocol):
    """Read/insert interface the insights service depends on."""

    async def list_feeling_checkins(
        self, subject_id: str, range_start: datetime, range_end: datetime
    ) -> list[FeelingCheckIn]: ...

    async def list_phase_tags(
        self, subject_id: str, range_start: date, range_end: date
    ) -> list[PhaseTag]: ...

    async def insert_feeling_checkin(
        self, subject_id: str, category_id: str, label: str, occurred_at: datetime
    ) -> FeelingCheckIn: ...


_CHECKIN_COLUMNS = """
    id::text AS id,
    user_id::text AS subject_id,
    feeling_id AS category_id,
    feeling_label AS label,
    created_at AS occurred_at
"""


class PostgresEventStore:
    """EventStore backed by the Supabase Postgres database."""

    async def list_feeling_checkins(
        self, subject_id: str, range_start: datetime, range_end: datetime
    ) -> list[FeelingCheckIn]:
        """Check-ins with ``range_start < occurred_at <= range_end``, oldest first."""
        rows = await supabase.fetch(
            f"""
            SELECT {_CHECKIN_COLUMNS}
            FROM quick_checkin_logs
            WHERE user_id = $1 AND created_at > $2 AND created_at <= $3
            ORDER BY created_at ASC
            """,
            subject_id, range_start, range_end,
            user_id=subject_id,
        )
        checkins = parse_checkins(dict(r) for r in rows)
        logger.debug(
            "Fetched %d check-in(s) for %s in (%s, %s]",
            len(checkins), subject_id, range_start, range_end,
        )
        return checkins

    async def list_phase_tags(
        self, subject_id: str, range_start: date, range_end: date
    ) -> list[PhaseTag]:
        """Phase tags for calendar days ``range_start`` … ``range_end`` inclusive."""
        rows = await supabase.fetch(
            """
            SELECT user_id::text AS subject_id, entry_date AS date, cycle_phase AS phase
            FROM wellness_entries
            WHERE user_id = $1 AND entry_date >= $2 AND entry_date <= $3
              AND cycle_phase IS NOT NULL
            ORDER BY entry_date ASC
            """,
            subject_id, range_start, range_end,
            user_id=subject_id,
        )
        return parse_phase_tags(dict(r) for r in rows)

    async def insert_feeling_checkin(
        self, subject_id: str, category_id: str, label: str, occurred_at: datetime
    ) -> FeelingCheckIn:
        row = await supabase.fetchrow(
            f"""
            INSERT INTO quick_checkin_logs (user_id, feeling_id, feeling_label, created_at)
            VALUES ($1, $2, $3, $4)
            RETURNING {_CHECKIN_COLUMNS}
            """,
            subject_id, category_id, label, occurred_at,
            user_id=subject_id,
        )
        checkin = checkin_from_row(dict(row)) if row else None
        if checkin is None:
            raise RuntimeError("Check-in insert returned no usable row")
        return checkin

    async def list_recent_checkins(
        self,
        subject_id: str,
        range_start: datetime | None = None,
        range_end: datetime | None = None,
        limit: int = 50,
    ) -> list[FeelingCheckIn]:
        """Check-ins newest first, for the check-in history view."""
        conditions = ["user_id = $1"]
        params: list[object] = [subject_id]
        idx = 2

        if range_start:
            conditions.append(f"created_at >= ${idx}")
            params.append(range_start)
            idx += 1
        if range_end:
            conditions.append(f"created_at <= ${idx}")
            params.append(range_end)
            idx += 1

        where = " AND ".join(conditions)
        rows = await supabase.fetch(
            f"SELECT {_CHECKIN_COLUMNS} FROM quick_checkin_logs "
            f"WHERE {where} ORDER BY created_at DESC LIMIT ${idx}",
            *params, limit,
            user_id=subject_id,
        )
        return parse_checkins(dict(r) for r in rows)

    async def delete_feeling_checkin(self, subject_id: str, checkin_id: str) -> bool:
        """Delete one of the subject's check-ins. Returns False if none matched."""
        result = await supabase.execute(
            "DELETE FROM quick_checkin_logs WHERE id::text = $1 AND user_id = $2",
            checkin_id, subject_id,
            user_id=subject_id,
        )
        return result != "DELETE 0"
