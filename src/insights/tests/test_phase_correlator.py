"""Tests for feeling ↔ cycle phase correlation."""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from src.insights.phase_correlator import PhaseCorrelator, build_phase_lookup
from src.insights.records import FeelingFrequency
from src.insights.tests.conftest import TEST_SUBJECT_ID, TODAY, make_checkin, make_tag


def _at(day_offset: int, hour: int = 9) -> datetime:
    d = TODAY - timedelta(days=day_offset)
    return datetime(d.year, d.month, d.day, hour, tzinfo=timezone.utc)


class TestBuildPhaseLookup:
    def test_one_entry_per_day(self) -> None:
        tags = [make_tag(TODAY, "luteal"), make_tag(TODAY - timedelta(days=1), "luteal")]
        lookup = build_phase_lookup(tags)
        assert lookup == {
            (TEST_SUBJECT_ID, TODAY): "luteal",
            (TEST_SUBJECT_ID, TODAY - timedelta(days=1)): "luteal",
        }

    def test_conflicting_tags_resolve_deterministically(self) -> None:
        a = [make_tag(TODAY, "ovulatory"), make_tag(TODAY, "luteal")]
        assert build_phase_lookup(a)[(TEST_SUBJECT_ID, TODAY)] == "luteal"
        assert build_phase_lookup(reversed(a))[(TEST_SUBJECT_ID, TODAY)] == "luteal"


class TestPhaseCorrelator:
    def test_no_tags_no_correlations(self) -> None:
        checkins = [make_checkin("tired", at=_at(1))]
        assert PhaseCorrelator().correlate(checkins, []) == []

    def test_luteal_scenario(self) -> None:
        tagged_day = 3
        checkins = [
            make_checkin("bloated", at=_at(tagged_day, 8)),
            make_checkin("bloated", at=_at(tagged_day, 20)),
            make_checkin("tired", at=_at(5)),
        ]
        tags = [make_tag(TODAY - timedelta(days=tagged_day), "luteal")]

        result = PhaseCorrelator().correlate(checkins, tags)

        assert len(result) == 1
        luteal = result[0]
        assert luteal.phase == "luteal"
        assert luteal.top_feelings == (
            FeelingFrequency(category_id="bloated", label="Bloated", count=2),
        )
        assert luteal.total_events_in_phase == 2
        assert all(f.category_id != "tired" for f in luteal.top_feelings)

    def test_tags_only_apply_to_their_own_subject(self) -> None:
        day = TODAY - timedelta(days=2)
        checkins = [
            make_checkin("tired", at=_at(2)),
            make_checkin("pain", at=_at(2), subject_id="user_other"),
        ]
        tags = [make_tag(day, "menstrual", subject_id="user_other")]

        result = PhaseCorrelator().correlate(checkins, tags)

        assert len(result) == 1
        assert result[0].top_feelings == (
            FeelingFrequency(category_id="pain", label="In pain", count=1),
        )
        assert result[0].total_events_in_phase == 1

    def test_total_counts_categories_outside_top_three(self) -> None:
        day = TODAY - timedelta(days=2)
        checkins = []
        for category, n in [("tired", 4), ("pain", 3), ("bloated", 2), ("restless", 1), ("emotional", 1)]:
            checkins += [make_checkin(category, at=_at(2, 6 + i)) for i in range(n)]

        result = PhaseCorrelator().correlate(checkins, [make_tag(day, "menstrual")])

        menstrual = result[0]
        assert [f.category_id for f in menstrual.top_feelings] == ["tired", "pain", "bloated"]
        assert menstrual.total_events_in_phase == 11
        assert menstrual.total_events_in_phase > sum(f.count for f in menstrual.top_feelings)

    def test_phases_sorted_by_total_then_name(self) -> None:
        tags = [
            make_tag(TODAY - timedelta(days=1), "luteal"),
            make_tag(TODAY - timedelta(days=2), "follicular"),
            make_tag(TODAY - timedelta(days=3), "menstrual"),
        ]
        checkins = (
            [make_checkin("tired", at=_at(1, h)) for h in (8, 9)]
            + [make_checkin("pain", at=_at(2, h)) for h in (8, 9)]
            + [make_checkin("pain", at=_at(3, h)) for h in (8, 9, 10)]
        )
        result = PhaseCorrelator().correlate(checkins, tags)
        assert [(c.phase, c.total_events_in_phase) for c in result] == [
            ("menstrual", 3),
            ("follicular", 2),
            ("luteal", 2),
        ]

    def test_join_uses_subject_local_day(self) -> None:
        tz = ZoneInfo("Asia/Tokyo")
        # 20:00 UTC is 05:00 the next day in Tokyo
        ts = datetime(2026, 2, 20, 20, 0, tzinfo=timezone.utc)
        checkin = make_checkin("tired", at=ts)
        tags = [make_tag(ts.date(), "follicular"), make_tag(ts.date() + timedelta(days=1), "ovulatory")]

        result = PhaseCorrelator(tz=tz).correlate([checkin], tags)
        assert [c.phase for c in result] == ["ovulatory"]

    def test_order_independent(self) -> None:
        tags = [make_tag(TODAY - timedelta(days=d), "luteal") for d in range(1, 5)]
        checkins = [
            make_checkin(category, at=_at(d, h))
            for d in range(1, 5)
            for h, category in enumerate(["tired", "pain", "bloated", "tired"], start=7)
        ]
        shuffled = list(checkins)
        random.Random(3).shuffle(shuffled)
        correlator = PhaseCorrelator()
        assert correlator.correlate(shuffled, reversed(tags)) == correlator.correlate(checkins, tags)

    def test_top_n_configurable(self) -> None:
        day = TODAY - timedelta(days=1)
        checkins = [make_checkin(c, at=_at(1, 8 + i)) for i, c in enumerate(["tired", "pain", "bloated"])]
        result = PhaseCorrelator(top_n=1).correlate(checkins, [make_tag(day, "luteal")])
        assert len(result[0].top_feelings) == 1
        assert result[0].total_events_in_phase == 3
