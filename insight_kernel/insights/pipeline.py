"""
Insight Pipeline — the only sanctioned way to obtain renderable insights.

validate -> rules -> cooldown -> keep shown -> dedupe -> sort -> cap -> strip

Behavioral Contract:
- A run is a pure function of (metrics, persisted states, now, cap)
- Invalid metrics fail the whole batch closed: the result is empty
- Resolved insights are never returned
- Internal decision reasons never leave this module
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from insight_kernel.boundary import decision_path
from insight_kernel.insights.cooldown import evaluate_cooldown
from insight_kernel.insights.rules import RuleSet
from insight_kernel.insights.selection import (
    DEFAULT_MAX_PER_SESSION,
    apply_session_cap,
    dedupe_insights,
    sort_by_priority,
)
from insight_kernel.models.config import CooldownPolicy
from insight_kernel.models.cooldown import InsightStateRecord, InsightStatus
from insight_kernel.models.insight import EvaluatedInsight, Insight, MetricsSnapshot

logger = logging.getLogger(__name__)

MetricsInput = Union[MetricsSnapshot, Mapping[str, Any]]

_DEFAULT_RULE_SET = RuleSet()


def validate_metrics(metrics: MetricsInput) -> Optional[MetricsSnapshot]:
    """
    Validate once, before any rule runs. Returns None on invalid input.
    Snapshots are re-validated so a model built without validation
    cannot slip negative values through.
    """
    if isinstance(metrics, MetricsSnapshot):
        payload = metrics.model_dump()
    elif isinstance(metrics, Mapping):
        payload = dict(metrics)
    else:
        logger.warning(f"Rejecting metrics of type {type(metrics).__name__}")
        return None

    try:
        return MetricsSnapshot.model_validate(payload)
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        logger.warning(f"Invalid metrics, failing closed: {fields}")
        return None


@decision_path("evaluate_insights")
def evaluate_insights(
    metrics: MetricsInput,
    persisted_states: Sequence[InsightStateRecord],
    now: datetime,
    rule_set: Optional[RuleSet] = None,
    policy: Optional[CooldownPolicy] = None,
) -> List[EvaluatedInsight]:
    """Run rules and the cooldown evaluator; keep only candidates that show."""
    snapshot = validate_metrics(metrics)
    if snapshot is None:
        return []

    rule_set = rule_set or _DEFAULT_RULE_SET
    states: Dict[str, InsightStateRecord] = {
        state.insight_id: state for state in persisted_states
    }

    evaluated: List[EvaluatedInsight] = []
    for candidate in rule_set.evaluate(snapshot):
        state = states.get(candidate.id)
        if state is not None and state.status == InsightStatus.RESOLVED:
            logger.debug(f"Insight {candidate.id.value} is resolved, skipping")
            continue

        decision = evaluate_cooldown(candidate, state, now, policy)
        if not decision.should_show:
            logger.debug(f"Insight {candidate.id.value} hidden: {decision.reason.value}")
            continue

        evaluated.append(
            EvaluatedInsight(**candidate.model_dump(), decision_reason=decision.reason)
        )
    return evaluated


@decision_path("run")
def run(
    metrics: MetricsInput,
    persisted_states: Sequence[InsightStateRecord],
    now: datetime,
    max_per_session: int = DEFAULT_MAX_PER_SESSION,
    rule_set: Optional[RuleSet] = None,
    policy: Optional[CooldownPolicy] = None,
) -> List[Insight]:
    evaluated = evaluate_insights(metrics, persisted_states, now, rule_set, policy)
    ordered = sort_by_priority(dedupe_insights(evaluated))
    capped = apply_session_cap(ordered, max_per_session)
    return [insight.to_insight() for insight in capped]
