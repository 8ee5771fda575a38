"""Tests for the explainability generator."""

from datetime import datetime, timedelta, timezone

from insight_kernel.insights.explain import EXPLAIN_CONTEXT_BY_ID, explain
from insight_kernel.insights.rules import failed_payments_rule, no_best_seller_rule
from insight_kernel.models.cooldown import InsightStateRecord, InsightStatus
from insight_kernel.models.explain import Comparison, ExplainStatus, TriggerContext, WhyNowReason
from insight_kernel.models.insight import InsightId, MetricsSnapshot

NOW = datetime(2025, 3, 10, 12, 0, 0)

METRICS = MetricsSnapshot(
    today_revenue=0,
    total_revenue=500,
    best_selling_product=None,
    failed_payments_7d=4,
    refunded_amount_7d=0,
)


def _make_state(**overrides) -> InsightStateRecord:
    values = {
        "user_id": "user_1",
        "insight_id": InsightId.FAILED_PAYMENTS,
        "first_seen_at": NOW - timedelta(days=5),
        "last_seen_at": NOW - timedelta(days=1),
    }
    values.update(overrides)
    return InsightStateRecord(**values)


class TestExplain:
    def setup_method(self):
        self.insight = failed_payments_rule(METRICS)

    def test_first_time_without_state(self):
        explanation = explain(self.insight, METRICS, None, None, NOW)
        assert explanation.why_now.reason == WhyNowReason.FIRST_TIME
        assert explanation.state.status == ExplainStatus.NEW
        assert explanation.trigger.metric_key == "failed_payments_7d"
        assert explanation.trigger.metric_value == 4
        assert explanation.trigger.threshold == 3
        assert explanation.trigger.comparison == Comparison.GTE
        assert explanation.meta.engine_version == "v1"
        assert explanation.meta.generated_at == NOW

    def test_cooldown_expired(self):
        state = _make_state(
            status=InsightStatus.DISMISSED,
            dismissed_at=NOW - timedelta(days=2),
            cooldown_until=NOW - timedelta(days=1),
        )
        explanation = explain(self.insight, METRICS, state, None, NOW)
        assert explanation.why_now.reason == WhyNowReason.COOLDOWN_EXPIRED
        assert explanation.state.status == ExplainStatus.DISMISSED
        assert explanation.state.dismissed_at == NOW - timedelta(days=2)

    def test_cooldown_expired_with_aware_now(self):
        state = _make_state(
            status=InsightStatus.DISMISSED,
            dismissed_at=NOW - timedelta(days=2),
            cooldown_until=NOW - timedelta(days=1),
        )
        explanation = explain(self.insight, METRICS, state, None, NOW.replace(tzinfo=timezone.utc))
        assert explanation.why_now.reason == WhyNowReason.COOLDOWN_EXPIRED

    def test_rule_still_true(self):
        explanation = explain(self.insight, METRICS, _make_state(), None, NOW)
        assert explanation.why_now.reason == WhyNowReason.RULE_STILL_TRUE
        assert explanation.state.status == ExplainStatus.ACTIVE
        assert explanation.state.dismissed_at is None

    def test_missing_metric_reads_not_available(self):
        insight = no_best_seller_rule(METRICS)
        explanation = explain(insight, METRICS, None, None, NOW)
        assert explanation.trigger.metric_value == "N/A"

    def test_explicit_context_and_recommendation(self):
        context = TriggerContext(
            metric_key="failed_payments_7d",
            threshold=5,
            comparison=Comparison.GT,
            recommendation="Check your payment provider dashboard.",
        )
        explanation = explain(self.insight, METRICS, None, context, NOW)
        assert explanation.trigger.threshold == 5
        assert explanation.recommendation == "Check your payment provider dashboard."

    def test_idempotent(self):
        state = _make_state()
        assert explain(self.insight, METRICS, state, None, NOW) == explain(
            self.insight, METRICS, state, None, NOW
        )

    def test_every_id_has_context(self):
        assert set(EXPLAIN_CONTEXT_BY_ID) == set(InsightId)
