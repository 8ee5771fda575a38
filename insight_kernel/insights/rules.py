"""
Rule Set — metrics in, candidate insights out.

Each rule is a total function MetricsSnapshot -> Optional[Insight]: independent
of every other rule and free of side effects.

Behavioral Contract:
- Rules run in fixed registration order
- A rule that raises is logged and contributes nothing; the batch continues
- An IsolationViolation raised inside a rule is never caught here
- Metrics are validated by the caller before any rule runs
"""

import logging
from typing import Callable, List, Optional

from insight_kernel.boundary import IsolationViolation, decision_path
from insight_kernel.models.insight import (
    Insight,
    InsightId,
    InsightKind,
    MetricsSnapshot,
)

logger = logging.getLogger(__name__)

Rule = Callable[[MetricsSnapshot], Optional[Insight]]

HIGH_REFUND_RATE_THRESHOLD = 0.2
STRONG_PERFORMANCE_SHARE = 0.1
FAILED_PAYMENTS_THRESHOLD = 3


def failed_payments_rule(metrics: MetricsSnapshot) -> Optional[Insight]:
    if metrics.failed_payments_7d < FAILED_PAYMENTS_THRESHOLD:
        return None
    return Insight(
        id=InsightId.FAILED_PAYMENTS,
        kind=InsightKind.WARNING,
        title="Customers are facing payment issues",
        body=(
            "Multiple customers failed to complete payments recently. "
            "This may be causing lost sales and needs attention."
        ),
        priority=1,
        meta={"rule_name": "FAILED_PAYMENTS_7D", "metric_key": "failed_payments_7d"},
    )


def high_refund_rate_rule(metrics: MetricsSnapshot) -> Optional[Insight]:
    if metrics.total_revenue <= 0 or metrics.refunded_amount_7d <= 0:
        return None
    refund_rate = metrics.refunded_amount_7d / metrics.total_revenue
    if refund_rate < HIGH_REFUND_RATE_THRESHOLD:
        return None
    return Insight(
        id=InsightId.HIGH_REFUND_RATE,
        kind=InsightKind.WARNING,
        title="Refunds are unusually high",
        body=(
            "A large share of recent revenue was refunded. "
            "Review product quality or customer expectations."
        ),
        priority=2,
        meta={"rule_name": "HIGH_REFUND_RATE", "metric_key": "refunded_amount_7d"},
    )


def refunds_rule(metrics: MetricsSnapshot) -> Optional[Insight]:
    if metrics.refunded_amount_7d <= 0:
        return None
    return Insight(
        id=InsightId.REFUNDS,
        kind=InsightKind.INFO,
        title="Refunds issued recently",
        body="Some payments were refunded in the last 7 days.",
        priority=3,
        meta={"rule_name": "REFUNDS_7D", "metric_key": "refunded_amount_7d"},
    )


def strong_performance_rule(metrics: MetricsSnapshot) -> Optional[Insight]:
    if metrics.total_revenue <= 0 or metrics.today_revenue <= 0:
        return None
    if metrics.today_revenue / metrics.total_revenue < STRONG_PERFORMANCE_SHARE:
        return None
    return Insight(
        id=InsightId.STRONG_PERFORMANCE,
        kind=InsightKind.SUCCESS,
        title="Today is an exceptional day",
        body="Today's revenue is a significant share of your total earnings.",
        priority=3,
        meta={"rule_name": "STRONG_PERFORMANCE", "metric_key": "today_revenue"},
    )


def revenue_today_rule(metrics: MetricsSnapshot) -> Optional[Insight]:
    if metrics.today_revenue <= 0:
        return None
    return Insight(
        id=InsightId.REVENUE_TODAY,
        kind=InsightKind.SUCCESS,
        title="Sales are coming in today",
        body="You've made sales today. Keep the momentum going.",
        priority=4,
        meta={"rule_name": "REVENUE_TODAY", "metric_key": "today_revenue"},
    )


def no_best_seller_rule(metrics: MetricsSnapshot) -> Optional[Insight]:
    if metrics.total_revenue <= 0 or metrics.best_selling_product:
        return None
    return Insight(
        id=InsightId.NO_BEST_SELLER,
        kind=InsightKind.INFO,
        title="No clear top-selling product yet",
        body="Sales are spread out. Promoting one product could help you find a winner.",
        priority=5,
        meta={"rule_name": "NO_BEST_SELLER"},
    )


def zero_revenue_rule(metrics: MetricsSnapshot) -> Optional[Insight]:
    if metrics.total_revenue != 0:
        return None
    return Insight(
        id=InsightId.ZERO_REVENUE,
        kind=InsightKind.INFO,
        title="You're ready for your first sale",
        body=(
            "Everything is set up. Share your product links and start "
            "bringing your first customers onboard."
        ),
        priority=6,
        meta={"rule_name": "ZERO_REVENUE", "metric_key": "total_revenue"},
    )


DEFAULT_RULES: List[Rule] = [
    failed_payments_rule,
    high_refund_rate_rule,
    refunds_rule,
    strong_performance_rule,
    revenue_today_rule,
    no_best_seller_rule,
    zero_revenue_rule,
]


class RuleSet:
    """Ordered collection of insight rules."""

    def __init__(self, rules: Optional[List[Rule]] = None):
        self._rules: List[Rule] = list(DEFAULT_RULES if rules is None else rules)

    def register(self, rule: Rule) -> None:
        """Append a rule. It runs after every rule already registered."""
        self._rules.append(rule)

    @property
    def rules(self) -> List[Rule]:
        return list(self._rules)

    @decision_path("rule_set.evaluate")
    def evaluate(self, metrics: MetricsSnapshot) -> List[Insight]:
        candidates: List[Insight] = []
        for rule in self._rules:
            try:
                insight = rule(metrics)
            except IsolationViolation:
                raise
            except Exception:
                logger.exception(f"Insight rule {getattr(rule, '__name__', rule)!r} failed, skipping")
                continue
            if insight is not None:
                candidates.append(insight)
        return candidates
