"""
Insight Registry — append-only catalogue of insight ids.

Behavioral Contract:
- Ids are never renamed, removed, or reused
- A retired insight keeps its id; a changed meaning gets a new id
- Every id belongs to exactly one category
"""

from typing import Dict, List

from insight_kernel.models.insight import InsightCategory, InsightId

INSIGHT_IDS_BY_CATEGORY: Dict[InsightCategory, List[InsightId]] = {
    InsightCategory.BILLING: [
        InsightId.FAILED_PAYMENTS,
        InsightId.REFUNDS,
        InsightId.HIGH_REFUND_RATE,
    ],
    InsightCategory.REVENUE: [
        InsightId.REVENUE_TODAY,
        InsightId.STRONG_PERFORMANCE,
    ],
    InsightCategory.GROWTH: [
        InsightId.NO_BEST_SELLER,
    ],
    InsightCategory.ONBOARDING: [
        InsightId.ZERO_REVENUE,
    ],
}

_CATEGORY_BY_ID: Dict[InsightId, InsightCategory] = {
    insight_id: category
    for category, ids in INSIGHT_IDS_BY_CATEGORY.items()
    for insight_id in ids
}


def category_for(insight_id: InsightId) -> InsightCategory:
    return _CATEGORY_BY_ID[InsightId(insight_id)]


def all_insight_ids() -> List[InsightId]:
    return list(_CATEGORY_BY_ID)
