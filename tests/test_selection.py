"""Tests for dedup, priority ordering and the session cap."""

from insight_kernel.insights.selection import apply_session_cap, dedupe_insights, sort_by_priority
from insight_kernel.models.insight import Insight, InsightId, InsightKind


def _make_insight(insight_id: InsightId, priority: int, title: str = "t") -> Insight:
    return Insight(id=insight_id, kind=InsightKind.INFO, title=title, body="b", priority=priority)


class TestDedupe:
    def test_keeps_lowest_priority(self):
        result = dedupe_insights([
            _make_insight(InsightId.REFUNDS, 3, "weak"),
            _make_insight(InsightId.REFUNDS, 1, "strong"),
        ])
        assert len(result) == 1
        assert result[0].title == "strong"

    def test_tie_keeps_first_seen(self):
        result = dedupe_insights([
            _make_insight(InsightId.REFUNDS, 2, "first"),
            _make_insight(InsightId.REFUNDS, 2, "second"),
        ])
        assert [i.title for i in result] == ["first"]

    def test_idempotent(self):
        batch = [
            _make_insight(InsightId.REFUNDS, 3),
            _make_insight(InsightId.ZERO_REVENUE, 6),
            _make_insight(InsightId.REFUNDS, 1),
        ]
        once = dedupe_insights(batch)
        assert dedupe_insights(once) == once


class TestOrderingAndCap:
    def test_sort_is_stable(self):
        batch = [
            _make_insight(InsightId.ZERO_REVENUE, 6),
            _make_insight(InsightId.REFUNDS, 3, "a"),
            _make_insight(InsightId.STRONG_PERFORMANCE, 3, "b"),
            _make_insight(InsightId.FAILED_PAYMENTS, 1),
        ]
        ordered = sort_by_priority(batch)
        assert [i.priority for i in ordered] == [1, 3, 3, 6]
        assert [i.title for i in ordered if i.priority == 3] == ["a", "b"]

    def test_cap_truncates_without_reordering(self):
        batch = [_make_insight(InsightId.ZERO_REVENUE, 6), _make_insight(InsightId.REFUNDS, 1)]
        assert apply_session_cap(batch, 1) == batch[:1]

    def test_cap_default_is_three(self):
        batch = [_make_insight(i, n) for n, i in enumerate(InsightId)]
        assert len(apply_session_cap(batch)) == 3

    def test_non_positive_cap_is_empty(self):
        batch = [_make_insight(InsightId.REFUNDS, 1)]
        assert apply_session_cap(batch, 0) == []
        assert apply_session_cap(batch, -2) == []
        assert apply_session_cap([], 3) == []
