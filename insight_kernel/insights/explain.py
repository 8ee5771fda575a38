"""
Explainability Generator — "why am I seeing this?" for one insight.

Pure formatter over already-computed data. Never touches persistence and
returns the same explanation for the same inputs.
"""

from datetime import datetime
from typing import Dict, Optional, Union

from insight_kernel.boundary import decision_path
from insight_kernel.insights.cooldown import as_utc
from insight_kernel.models.cooldown import InsightStateRecord, InsightStatus
from insight_kernel.models.explain import (
    Comparison,
    ExplainedInsight,
    ExplainMeta,
    ExplainState,
    ExplainStatus,
    ExplainTrigger,
    InsightExplanation,
    TriggerContext,
    WhyNow,
    WhyNowReason,
)
from insight_kernel.models.insight import Insight, InsightId, MetricsSnapshot

ENGINE_VERSION = "v1"

EXPLAIN_CONTEXT_BY_ID: Dict[InsightId, TriggerContext] = {
    InsightId.FAILED_PAYMENTS: TriggerContext(
        metric_key="failed_payments_7d", threshold=3, comparison=Comparison.GTE
    ),
    InsightId.REFUNDS: TriggerContext(
        metric_key="refunded_amount_7d", threshold=0, comparison=Comparison.GT
    ),
    InsightId.ZERO_REVENUE: TriggerContext(
        metric_key="total_revenue", threshold=0, comparison=Comparison.EQ
    ),
    InsightId.HIGH_REFUND_RATE: TriggerContext(
        metric_key="refunded_amount_7d", threshold=0.2, comparison=Comparison.GTE
    ),
    InsightId.STRONG_PERFORMANCE: TriggerContext(
        metric_key="today_revenue", threshold=0.1, comparison=Comparison.GTE
    ),
    InsightId.NO_BEST_SELLER: TriggerContext(
        metric_key="best_selling_product", threshold=0, comparison=Comparison.EQ
    ),
    InsightId.REVENUE_TODAY: TriggerContext(
        metric_key="today_revenue", threshold=0, comparison=Comparison.GT
    ),
}

_WHY_NOW_TEXT: Dict[WhyNowReason, str] = {
    WhyNowReason.FIRST_TIME: "This insight is being shown for the first time.",
    WhyNowReason.COOLDOWN_EXPIRED: "This insight reappeared because its cooldown period has ended.",
    WhyNowReason.RULE_STILL_TRUE: "The condition that triggered this insight is still satisfied.",
}


def explain_context_for(insight_id: InsightId) -> TriggerContext:
    return EXPLAIN_CONTEXT_BY_ID[InsightId(insight_id)]


def _why_now(state: Optional[InsightStateRecord], now: datetime) -> WhyNow:
    if state is None:
        reason = WhyNowReason.FIRST_TIME
    elif state.cooldown_until is not None and as_utc(state.cooldown_until) <= as_utc(now):
        reason = WhyNowReason.COOLDOWN_EXPIRED
    else:
        reason = WhyNowReason.RULE_STILL_TRUE
    return WhyNow(reason=reason, explanation=_WHY_NOW_TEXT[reason])


def _explain_state(state: Optional[InsightStateRecord]) -> ExplainState:
    if state is None:
        return ExplainState(status=ExplainStatus.NEW)
    return ExplainState(
        status=ExplainStatus(state.status.value),
        first_seen_at=state.first_seen_at,
        last_seen_at=state.last_seen_at,
        dismissed_at=state.dismissed_at if state.status == InsightStatus.DISMISSED else None,
        cooldown_until=state.cooldown_until,
    )


def _metric_value(metrics: MetricsSnapshot, metric_key: str) -> Union[float, str]:
    value = getattr(metrics, metric_key, None)
    if value is None:
        return "N/A"
    if isinstance(value, str):
        return value
    return float(value)


@decision_path("explain")
def explain(
    insight: Insight,
    metrics: MetricsSnapshot,
    persisted_state: Optional[InsightStateRecord],
    trigger_context: Optional[TriggerContext],
    now: datetime,
) -> InsightExplanation:
    """
    Build the explanation for `insight`. Without an explicit trigger context
    the registered context for the insight id is used.
    """
    context = trigger_context or explain_context_for(insight.id)

    return InsightExplanation(
        insight=ExplainedInsight(id=insight.id, kind=insight.kind, title=insight.title),
        trigger=ExplainTrigger(
            rule_id=insight.id,
            metric_key=context.metric_key,
            metric_value=_metric_value(metrics, context.metric_key),
            threshold=context.threshold,
            comparison=context.comparison,
        ),
        state=_explain_state(persisted_state),
        why_now=_why_now(persisted_state, now),
        recommendation=context.recommendation,
        meta=ExplainMeta(generated_at=now, engine_version=ENGINE_VERSION),
    )
