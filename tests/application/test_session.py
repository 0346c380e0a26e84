"""Tests for session selection, new-card limits and pool ordering."""

from datetime import datetime, timedelta, timezone

import pytest

from cadence.application.session import (
    order_session_pool,
    pick_daily_new_limit,
    select_session_cards,
)
from cadence.domain.models import SessionCard


class TestSelectSessionCards:
    def test_empty_pool(self):
        assert select_session_cards([], 20) == []
        assert select_session_cards([], 0) == []

    def test_zero_or_negative_cap(self, sample_cards):
        assert select_session_cards(sample_cards, 0) == []
        assert select_session_cards(sample_cards, -3) == []

    def test_cap_above_length_returns_everything(self, sample_cards):
        selected = select_session_cards(sample_cards, 50)
        assert selected == sample_cards
        assert selected is not sample_cards

    def test_prefix_preserves_order(self, sample_cards):
        selected = select_session_cards(sample_cards, 3)
        assert [c.card_id for c in selected] == ["k1", "l1", "r1"]

    def test_works_on_any_sequence(self):
        assert select_session_cards(("a", "b", "c"), 2) == ["a", "b"]
        assert select_session_cards(range(10), 4) == [0, 1, 2, 3]


class TestPickDailyNewLimit:
    @pytest.mark.parametrize(
        "total_new, cap, expected",
        [(5, 3, 3), (2, 10, 2), (0, 10, 0), (7, 7, 7), (-1, 5, 0), (5, -2, 0)],
    )
    def test_clamp(self, total_new, cap, expected):
        assert pick_daily_new_limit(total_new, cap) == expected

    def test_monotonic_in_cap(self):
        for total_new in (0, 1, 7, 30):
            results = [pick_daily_new_limit(total_new, cap) for cap in range(-2, 40)]
            assert results == sorted(results)
            assert all(0 <= r <= max(total_new, 0) for r in results)

    def test_idempotent(self):
        once = pick_daily_new_limit(12, 8)
        assert pick_daily_new_limit(once, 8) == once


class TestOrderSessionPool:
    def test_buckets_then_due(self, sample_cards):
        ordered = order_session_pool(sample_cards)
        # learn (due asc, undated last), recognize (due asc), know
        assert [c.card_id for c in ordered] == ["l3", "l2", "l1", "r2", "r1", "k1"]

    def test_undated_keep_input_order(self):
        cards = [SessionCard("b"), SessionCard("a"), SessionCard("c")]
        assert [c.card_id for c in order_session_pool(cards)] == ["b", "a", "c"]

    def test_mixed_timezones_compare_in_utc(self):
        base = datetime(2024, 1, 1, 12, tzinfo=timezone.utc)
        later_local = SessionCard(
            "later", due_at=datetime(2024, 1, 1, 14, 30, tzinfo=timezone(timedelta(hours=2)))
        )
        earlier_naive = SessionCard("earlier", due_at=datetime(2024, 1, 1, 12))
        sooner = SessionCard("sooner", due_at=base - timedelta(hours=1))

        ordered = order_session_pool([later_local, earlier_naive, sooner])
        assert [c.card_id for c in ordered] == ["sooner", "earlier", "later"]

    def test_unknown_stage_goes_last(self):
        cards = [SessionCard("odd", stage="mastered"), SessionCard("k", stage="know")]
        cards.append(SessionCard("l", stage="learn"))
        assert [c.card_id for c in order_session_pool(cards)] == ["l", "odd", "k"]

    def test_order_then_cap(self, sample_cards):
        session = select_session_cards(order_session_pool(sample_cards), 4)
        assert [c.card_id for c in session] == ["l3", "l2", "l1", "r2"]
