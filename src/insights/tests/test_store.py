"""Tests for row parsing and the Postgres event store adapter."""

from __future__ import annotations

from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest

from src.insights.records import (
    checkin_from_row,
    parse_checkins,
    parse_phase_tags,
    phase_tag_from_row,
)
from src.insights.store import PostgresEventStore
from src.insights.tests.conftest import NOW, TEST_SUBJECT_ID


def checkin_row(**overrides: object) -> dict:
    row = {
        "id": "7b6f2c1e-0000-4000-8000-000000000001",
        "subject_id": TEST_SUBJECT_ID,
        "category_id": "tired",
        "label": "Tired",
        "occurred_at": NOW,
    }
    row.update(overrides)
    return row


class TestCheckinFromRow:
    def test_valid_row(self) -> None:
        checkin = checkin_from_row(checkin_row())
        assert checkin is not None
        assert checkin.category_id == "tired"
        assert checkin.occurred_at == NOW

    def test_iso_timestamp_string(self) -> None:
        checkin = checkin_from_row(checkin_row(occurred_at="2026-02-20T08:15:00+00:00"))
        assert checkin is not None
        assert checkin.occurred_at == datetime(2026, 2, 20, 8, 15, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"category_id": None},
            {"category_id": "  "},
            {"label": None},
            {"occurred_at": None},
            {"occurred_at": "not-a-date"},
            {"id": None},
        ],
    )
    def test_malformed_rows_rejected(self, overrides: dict) -> None:
        assert checkin_from_row(checkin_row(**overrides)) is None

    def test_parse_skips_bad_rows_and_keeps_good_ones(self, caplog: pytest.LogCaptureFixture) -> None:
        rows = [checkin_row(), checkin_row(label=None), checkin_row(id="second")]
        with caplog.at_level("WARNING"):
            checkins = parse_checkins(rows)
        assert [c.id for c in checkins] == [
            "7b6f2c1e-0000-4000-8000-000000000001",
            "second",
        ]
        assert "malformed" in caplog.text


class TestPhaseTagFromRow:
    def test_valid_row(self) -> None:
        tag = phase_tag_from_row(
            {"subject_id": TEST_SUBJECT_ID, "date": date(2026, 2, 20), "phase": "Luteal"}
        )
        assert tag is not None
        assert tag.phase == "luteal"

    def test_datetime_and_string_dates(self) -> None:
        from_dt = phase_tag_from_row(
            {"subject_id": "s", "date": datetime(2026, 2, 20, 7, 0), "phase": "luteal"}
        )
        from_str = phase_tag_from_row({"subject_id": "s", "date": "2026-02-20", "phase": "luteal"})
        assert from_dt is not None and from_dt.date == date(2026, 2, 20)
        assert from_str is not None and from_str.date == date(2026, 2, 20)

    def test_missing_phase_skipped(self) -> None:
        rows = [
            {"subject_id": "s", "date": date(2026, 2, 20), "phase": None},
            {"subject_id": "s", "date": None, "phase": "luteal"},
            {"subject_id": "s", "date": date(2026, 2, 21), "phase": "luteal"},
        ]
        assert [t.date for t in parse_phase_tags(rows)] == [date(2026, 2, 21)]


class TestPostgresEventStore:
    @pytest.mark.asyncio
    async def test_list_feeling_checkins_queries_range(self) -> None:
        start = datetime(2025, 12, 25, tzinfo=timezone.utc)
        with patch("src.insights.store.supabase.fetch", new_callable=AsyncMock) as mock_fetch:
            mock_fetch.return_value = [checkin_row(), checkin_row(category_id=None)]
            checkins = await PostgresEventStore().list_feeling_checkins(TEST_SUBJECT_ID, start, NOW)

        assert len(checkins) == 1
        args, kwargs = mock_fetch.call_args
        assert "created_at > $2 AND created_at <= $3" in args[0]
        assert args[1:] == (TEST_SUBJECT_ID, start, NOW)
        assert kwargs == {"user_id": TEST_SUBJECT_ID}

    @pytest.mark.asyncio
    async def test_list_phase_tags(self) -> None:
        with patch("src.insights.store.supabase.fetch", new_callable=AsyncMock) as mock_fetch:
            mock_fetch.return_value = [
                {"subject_id": TEST_SUBJECT_ID, "date": date(2026, 2, 20), "phase": "luteal"}
            ]
            tags = await PostgresEventStore().list_phase_tags(
                TEST_SUBJECT_ID, date(2026, 1, 24), date(2026, 2, 23)
            )
        assert tags[0].phase == "luteal"
        assert "cycle_phase IS NOT NULL" in mock_fetch.call_args.args[0]

    @pytest.mark.asyncio
    async def test_fetch_error_propagates(self) -> None:
        with patch("src.insights.store.supabase.fetch", new_callable=AsyncMock) as mock_fetch:
            mock_fetch.side_effect = OSError("connection refused")
            with pytest.raises(OSError):
                await PostgresEventStore().list_feeling_checkins(TEST_SUBJECT_ID, NOW, NOW)

    @pytest.mark.asyncio
    async def test_insert_returns_record(self) -> None:
        with patch("src.insights.store.supabase.fetchrow", new_callable=AsyncMock) as mock_fetchrow:
            mock_fetchrow.return_value = checkin_row(category_id="pain", label="In pain")
            checkin = await PostgresEventStore().insert_feeling_checkin(
                TEST_SUBJECT_ID, "pain", "In pain", NOW
            )
        assert checkin.label == "In pain"
        assert "INSERT INTO quick_checkin_logs" in mock_fetchrow.call_args.args[0]

    @pytest.mark.asyncio
    async def test_delete_reports_missing(self) -> None:
        with patch("src.insights.store.supabase.execute", new_callable=AsyncMock) as mock_exec:
            mock_exec.return_value = "DELETE 0"
            assert not await PostgresEventStore().delete_feeling_checkin(TEST_SUBJECT_ID, "x")
