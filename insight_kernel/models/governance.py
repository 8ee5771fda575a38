"""Governance memory — diagnostic exposure ledger for CTAs."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from insight_kernel.boundary import DiagnosticModel
from insight_kernel.models.cta import CTAIntent, CTASurface


class LastAction(str, Enum):
    CLICKED = "clicked"
    DISMISSED = "dismissed"


class DismissReason(str, Enum):
    NOT_RELEVANT = "not_relevant"
    LATER = "later"
    ANNOYING = "annoying"


class RiskFlag(str, Enum):
    EXCESSIVE_EXPOSURE = "excessive_exposure"
    USER_FATIGUE = "user_fatigue"
    LOW_ENGAGEMENT = "low_engagement"
    HIGH_DISMISSAL_RATE = "high_dismissal_rate"
    IGNORED_DISMISSAL = "ignored_dismissal"     # Exposed again after a dismissal


class MemoryRecord(DiagnosticModel):
    """
    Exposure ledger entry per user×intent×surface. Updates return a new
    record; nothing mutates in place.
    """

    user_id: Optional[str] = None
    cta_version: str = "v1"
    intent: CTAIntent
    surface: CTASurface
    first_seen_at: datetime
    last_seen_at: datetime
    exposure_count: int = Field(default=1, ge=0)
    last_action: Optional[LastAction] = None
    dismissed: bool = False
    dismissed_at: Optional[datetime] = None
    dismiss_reason: Optional[DismissReason] = None
    experiment_id: Optional[str] = None
    a11y_contract_version: Optional[str] = None
    governance_version: str = "v1"


class GovernanceSnapshot(DiagnosticModel):
    """Audit-ready view of one memory record."""

    user_id: Optional[str] = None
    intent: CTAIntent
    surface: CTASurface
    exposure_count: int
    last_action: Optional[LastAction] = None
    dismissed: bool = False
    risk_flags: List[RiskFlag] = []
    needs_human_review: bool = False
    governance_version: str = "v1"
