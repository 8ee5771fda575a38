"""
State Synchronizer — the only component that writes insight state.

Applies create / seen / resolve / dismiss / snooze transitions for insights
returned by the pipeline. Sequential read-modify-write: within one request it
is the sole writer for each (user_id, insight_id) key.

Behavioral Contract:
- New insight ids get an active record and a "created" audit event
- Resolved records are terminal and never shown again
- Every persisted active record is checked against auto-resolve rules on each
  sync, whether or not its rule fired this run
- Shown records get last_seen_at, shown counters and a tightened last_severity
- Audit writes never block or abort a transition
"""

import logging
from datetime import datetime
from typing import List, Optional, Sequence

from insight_kernel.insights.cooldown import (
    compute_dismiss_state,
    compute_shown_state,
    compute_snooze_state,
)
from insight_kernel.insights.resolve import resolve_insight
from insight_kernel.insights.selection import sort_by_priority
from insight_kernel.models.config import CooldownPolicy, EngineConfig
from insight_kernel.models.cooldown import AuditEvent, InsightStateRecord, InsightStatus
from insight_kernel.models.insight import Insight, InsightId, MetricsSnapshot
from insight_kernel.state.store import InsightAuditLog, InsightStateStore

logger = logging.getLogger(__name__)


class StateSynchronizer:

    def __init__(
        self,
        store: InsightStateStore,
        audit_log: Optional[InsightAuditLog] = None,
        policy: Optional[CooldownPolicy] = None,
    ):
        self.store = store
        self.audit_log = audit_log
        self.policy = policy or CooldownPolicy()

    @classmethod
    def from_config(cls, config: EngineConfig) -> "StateSynchronizer":
        """State store and audit log share the configured database."""
        return cls(
            InsightStateStore(config.state_db_path),
            InsightAuditLog(config.state_db_path),
            config.cooldown,
        )

    def _audit(
        self,
        user_id: str,
        insight_id: InsightId,
        event: AuditEvent,
        now: datetime,
        metadata: Optional[dict] = None,
    ) -> None:
        if self.audit_log is None:
            return
        self.audit_log.log_event(user_id, insight_id, event, now, metadata)

    def load_states(self, user_id: str) -> List[InsightStateRecord]:
        """Persisted states for `user_id`, ready to pass to the pipeline."""
        return self.store.list_for_user(user_id)

    def _auto_resolve(self, user_id: str, metrics: MetricsSnapshot, now: datetime) -> None:
        """Resolve every persisted active record whose condition has cleared."""
        for record in self.store.list_for_user(user_id):
            if record.status != InsightStatus.ACTIVE:
                continue
            decision = resolve_insight(record.insight_id, metrics)
            if not decision.should_resolve:
                continue
            self.store.upsert(
                record.model_copy(
                    update={
                        "status": InsightStatus.RESOLVED,
                        "resolved_at": now,
                        "resolution_context": {"reason": decision.reason},
                    }
                )
            )
            self._audit(user_id, record.insight_id, AuditEvent.RESOLVED, now, {"reason": decision.reason})
            logger.info(f"Auto-resolved insight {user_id}/{record.insight_id.value}: {decision.reason}")

    def sync(
        self,
        user_id: str,
        fresh_insights: Sequence[Insight],
        metrics: MetricsSnapshot,
        now: datetime,
    ) -> List[Insight]:
        """
        Persist transitions for a pipeline result and return the insights
        that remain visible, ordered by priority.
        """
        self._auto_resolve(user_id, metrics, now)
        visible: List[Insight] = []

        for insight in fresh_insights:
            record = self.store.get(user_id, insight.id)

            if record is None:
                created = InsightStateRecord(
                    user_id=user_id,
                    insight_id=insight.id,
                    status=InsightStatus.ACTIVE,
                    first_seen_at=now,
                    last_seen_at=now,
                    last_severity=insight.priority,
                )
                self.store.upsert(compute_shown_state(created, now))
                self._audit(user_id, insight.id, AuditEvent.CREATED, now, {"priority": insight.priority})
                logger.debug(f"Created insight state {user_id}/{insight.id.value}")
                visible.append(insight)
                continue

            if record.status == InsightStatus.RESOLVED:
                continue

            last_severity = (
                insight.priority
                if record.last_severity is None
                else min(record.last_severity, insight.priority)
            )
            seen = compute_shown_state(record, now).model_copy(
                update={
                    "status": InsightStatus.ACTIVE,
                    "last_seen_at": now,
                    "last_severity": last_severity,
                }
            )
            self.store.upsert(seen)
            self._audit(user_id, insight.id, AuditEvent.SEEN, now, {"priority": insight.priority})
            visible.append(insight)

        return sort_by_priority(visible)

    def dismiss(
        self,
        user_id: str,
        insight: Insight,
        now: datetime,
        feedback_reason: Optional[str] = None,
    ) -> InsightStateRecord:
        record = self.store.get(user_id, insight.id) or InsightStateRecord(
            user_id=user_id,
            insight_id=insight.id,
            first_seen_at=now,
            last_seen_at=now,
        )
        if record.status == InsightStatus.RESOLVED:
            raise ValueError(f"Insight {insight.id.value} is resolved and cannot be dismissed")

        dismissed = compute_dismiss_state(record, insight.priority, now, self.policy).model_copy(
            update={"status": InsightStatus.DISMISSED, "feedback_reason": feedback_reason}
        )
        self.store.upsert(dismissed)

        self._audit(
            user_id,
            insight.id,
            AuditEvent.DISMISSED,
            now,
            {"dismiss_count": dismissed.dismiss_count, "feedback_reason": feedback_reason},
        )
        if dismissed.dismiss_count > 1:
            self._audit(
                user_id,
                insight.id,
                AuditEvent.COOLDOWN_ESCALATED,
                now,
                {"cooldown_until": dismissed.cooldown_until.isoformat()},
            )
        logger.info(
            f"Dismissed insight {user_id}/{insight.id.value} "
            f"(count={dismissed.dismiss_count}, until={dismissed.cooldown_until.isoformat()})"
        )
        return dismissed

    def snooze(
        self,
        user_id: str,
        insight_id: InsightId,
        days: int,
        now: datetime,
    ) -> InsightStateRecord:
        insight_id = InsightId(insight_id)
        record = self.store.get(user_id, insight_id) or InsightStateRecord(
            user_id=user_id,
            insight_id=insight_id,
            first_seen_at=now,
            last_seen_at=now,
        )
        snoozed = compute_snooze_state(record, days, now, self.policy)
        self.store.upsert(snoozed)
        self._audit(user_id, insight_id, AuditEvent.SNOOZED, now, {"days": days})
        return snoozed
