"""Insight — a system-generated notification about business metrics."""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class InsightKind(str, Enum):
    WARNING = "warning"
    INFO = "info"
    SUCCESS = "success"


class InsightId(str, Enum):
    """
    Stable insight identifiers. Append-only: an id is never renamed or reused,
    because persisted cooldown state is keyed by it.
    """
    FAILED_PAYMENTS = "failed_payments"
    REFUNDS = "refunds"
    HIGH_REFUND_RATE = "high_refund_rate"
    REVENUE_TODAY = "revenue_today"
    STRONG_PERFORMANCE = "strong_performance"
    NO_BEST_SELLER = "no_best_seller"
    ZERO_REVENUE = "zero_revenue"


class InsightCategory(str, Enum):
    BILLING = "billing"
    REVENUE = "revenue"
    GROWTH = "growth"
    ONBOARDING = "onboarding"


class DecisionReason(str, Enum):
    """Why the cooldown evaluator decided to show or hide a candidate."""
    FIRST_TIME = "first_time"
    SNOOZED = "snoozed"
    FREQUENCY_CAPPED = "frequency_capped"
    SEVERITY_ESCALATED = "severity_escalated"
    COOLDOWN_ACTIVE = "cooldown_active"
    COOLDOWN_EXPIRED = "cooldown_expired"


class MetricsSnapshot(BaseModel):
    """
    Business metrics for one evaluation call. Supplied by the caller and
    never mutated. Accepts camelCase wire names or snake_case field names.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    today_revenue: float = Field(ge=0, alias="todayRevenue")
    total_revenue: float = Field(ge=0, alias="totalRevenue")
    best_selling_product: Optional[str] = Field(default=None, alias="bestSellingProduct")
    failed_payments_7d: float = Field(ge=0, alias="failedPayments7d")
    refunded_amount_7d: float = Field(ge=0, alias="refundedAmount7d")


class Insight(BaseModel):
    """The renderable notification. Identity is `id`."""

    id: InsightId
    kind: InsightKind
    title: str
    body: str
    priority: int                           # Lower = more urgent
    meta: Dict[str, Any] = {}


class EvaluatedInsight(Insight):
    """Insight plus the cooldown decision. Never leaves the pipeline."""

    decision_reason: DecisionReason

    def to_insight(self) -> Insight:
        return Insight(**self.model_dump(exclude={"decision_reason"}))
