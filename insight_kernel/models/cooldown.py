"""Cooldown state — the persisted per user×insight record."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel

from insight_kernel.models.insight import DecisionReason, InsightId


class InsightStatus(str, Enum):
    ACTIVE = "active"
    DISMISSED = "dismissed"
    RESOLVED = "resolved"       # Terminal


class AuditEvent(str, Enum):
    CREATED = "created"
    SEEN = "seen"
    DISMISSED = "dismissed"
    SNOOZED = "snoozed"
    RESOLVED = "resolved"
    COOLDOWN_ESCALATED = "cooldown_escalated"


class CooldownState(BaseModel):
    """
    Suppression state for one insight.

    `cooldown_until` is only replaced on dismissal. `last_severity` only
    tightens: it becomes min(previous, new priority).
    """

    dismissed_at: Optional[datetime] = None
    dismiss_count: int = 0
    cooldown_until: Optional[datetime] = None
    last_severity: Optional[int] = None
    snoozed_until: Optional[datetime] = None
    last_shown_at: Optional[datetime] = None
    shown_count_today: int = 0


class InsightStateRecord(CooldownState):
    """CooldownState plus lifecycle fields, keyed by (user_id, insight_id)."""

    user_id: str
    insight_id: InsightId
    status: InsightStatus = InsightStatus.ACTIVE
    first_seen_at: Optional[datetime] = None
    last_seen_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    resolution_context: Optional[Dict[str, Any]] = None
    feedback_reason: Optional[str] = None


class CooldownDecision(BaseModel):
    should_show: bool
    reason: DecisionReason


class ResolveDecision(BaseModel):
    should_resolve: bool
    reason: Optional[str] = None         # Machine-readable, stored in resolution_context


class AuditLogEntry(BaseModel):
    id: str
    user_id: str
    insight_id: InsightId
    event: AuditEvent
    metadata: Dict[str, Any] = {}
    created_at: datetime
