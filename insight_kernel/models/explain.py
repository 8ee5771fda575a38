"""Explanation — structured answer to "why am I seeing this insight?"."""

from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel

from insight_kernel.models.insight import InsightId, InsightKind


class Comparison(str, Enum):
    GTE = ">="
    GT = ">"
    LTE = "<="
    LT = "<"
    EQ = "=="
    EXISTS = "exists"


class WhyNowReason(str, Enum):
    FIRST_TIME = "first_time"
    COOLDOWN_EXPIRED = "cooldown_expired"
    RULE_STILL_TRUE = "rule_still_true"


class ExplainStatus(str, Enum):
    NEW = "new"
    ACTIVE = "active"
    DISMISSED = "dismissed"
    RESOLVED = "resolved"


class TriggerContext(BaseModel):
    """The metric, threshold and comparison a rule fires on."""
    metric_key: str
    threshold: float
    comparison: Comparison
    recommendation: Optional[str] = None


class ExplainedInsight(BaseModel):
    id: InsightId
    kind: InsightKind
    title: str


class ExplainTrigger(BaseModel):
    rule_id: InsightId
    metric_key: str
    metric_value: Union[float, str]         # "N/A" when the metric is absent
    threshold: float
    comparison: Comparison


class ExplainState(BaseModel):
    status: ExplainStatus
    first_seen_at: Optional[datetime] = None
    last_seen_at: Optional[datetime] = None
    dismissed_at: Optional[datetime] = None
    cooldown_until: Optional[datetime] = None


class WhyNow(BaseModel):
    reason: WhyNowReason
    explanation: str


class ExplainMeta(BaseModel):
    generated_at: datetime
    engine_version: str = "v1"


class InsightExplanation(BaseModel):
    insight: ExplainedInsight
    trigger: ExplainTrigger
    state: ExplainState
    why_now: WhyNow
    recommendation: Optional[str] = None
    meta: ExplainMeta
