"""
Auto-Resolve Rules — has the condition behind an active insight cleared?

Only consulted for insights whose persisted status is active. A resolved
insight is terminal and never renders again under the same id.
"""

from typing import Callable, Dict

from insight_kernel.models.cooldown import ResolveDecision
from insight_kernel.models.insight import InsightId, MetricsSnapshot

RECOVERED_REFUND_RATE = 0.1

_NOT_RESOLVED = ResolveDecision(should_resolve=False)


def _failed_payments_normalized(metrics: MetricsSnapshot) -> ResolveDecision:
    if metrics.failed_payments_7d <= 1:
        return ResolveDecision(should_resolve=True, reason="failed_payments_normalized")
    return _NOT_RESOLVED


def _refund_rate_recovered(metrics: MetricsSnapshot) -> ResolveDecision:
    if metrics.total_revenue <= 0:
        return _NOT_RESOLVED
    if metrics.refunded_amount_7d / metrics.total_revenue < RECOVERED_REFUND_RATE:
        return ResolveDecision(should_resolve=True, reason="refund_rate_recovered")
    return _NOT_RESOLVED


def _first_sale_made(metrics: MetricsSnapshot) -> ResolveDecision:
    if metrics.total_revenue > 0:
        return ResolveDecision(should_resolve=True, reason="first_sale_made")
    return _NOT_RESOLVED


def _best_seller_identified(metrics: MetricsSnapshot) -> ResolveDecision:
    if metrics.best_selling_product:
        return ResolveDecision(should_resolve=True, reason="best_seller_identified")
    return _NOT_RESOLVED


RESOLVE_RULES: Dict[InsightId, Callable[[MetricsSnapshot], ResolveDecision]] = {
    InsightId.FAILED_PAYMENTS: _failed_payments_normalized,
    InsightId.HIGH_REFUND_RATE: _refund_rate_recovered,
    InsightId.ZERO_REVENUE: _first_sale_made,
    InsightId.NO_BEST_SELLER: _best_seller_identified,
}


def resolve_insight(insight_id: InsightId, metrics: MetricsSnapshot) -> ResolveDecision:
    """Ids without a resolve rule never auto-resolve."""
    rule = RESOLVE_RULES.get(InsightId(insight_id))
    if rule is None:
        return _NOT_RESOLVED
    return rule(metrics)
