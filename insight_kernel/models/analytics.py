"""Analytics — descriptive aggregates over governance memory records."""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import computed_field, model_validator

from insight_kernel.boundary import DiagnosticModel
from insight_kernel.models.cta import CTAIntent, CTASurface
from insight_kernel.models.governance import LastAction


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    FLAT = "flat"


class FatigueSeverity(str, Enum):
    NONE = "none"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class ComplianceFlagType(str, Enum):
    EXCESSIVE_EXPOSURE = "excessive_exposure"
    REPEATED_PRESSURE = "repeated_pressure"
    IGNORED_DISMISSAL = "ignored_dismissal"
    ACCESSIBILITY_RISK = "accessibility_risk"
    DARK_PATTERN_RISK = "dark_pattern_risk"


class ComplianceSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TimeWindow(DiagnosticModel):
    start: datetime
    end: datetime

    @model_validator(mode="after")
    def _check_order(self) -> "TimeWindow":
        if self.end < self.start:
            raise ValueError("time window end precedes start")
        return self

    @computed_field
    @property
    def duration_ms(self) -> int:
        return int((self.end - self.start).total_seconds() * 1000)


class ExposureStats(DiagnosticModel):
    total_exposures: int
    unique_users: int
    avg_exposures_per_user: float
    by_intent: Dict[CTAIntent, int]
    by_surface: Dict[CTASurface, int]
    time_window: TimeWindow


class IntentActionBreakdown(DiagnosticModel):
    clicks: int = 0
    dismissals: int = 0
    no_action: int = 0


class ActionStats(DiagnosticModel):
    total_clicks: int
    total_dismissals: int
    total_no_action: int
    click_rate: float
    dismissal_rate: float
    no_action_rate: float
    by_intent: Dict[CTAIntent, IntentActionBreakdown]
    time_window: TimeWindow


class DismissalStats(DiagnosticModel):
    total: int
    by_reason: Dict[str, int]
    percentage_by_reason: Dict[str, float]
    avg_exposures_before_dismissal: float
    time_window: TimeWindow


class TrendReport(DiagnosticModel):
    """Current window compared against a previous one. Descriptive only."""
    exposures: TrendDirection
    exposure_change: float
    click_rate: TrendDirection
    click_rate_change: float
    dismissal_rate: TrendDirection
    dismissal_rate_change: float
    current_window: TimeWindow
    previous_window: TimeWindow


class FatigueContext(DiagnosticModel):
    intent: CTAIntent
    surface: CTASurface
    last_seen_at: datetime


class FatigueSignal(DiagnosticModel):
    user_id: Optional[str] = None
    severity: FatigueSeverity
    exposure_count: int
    days_since_first_exposure: int
    has_interaction: bool
    dismissed_as_annoying: bool
    context: FatigueContext


class FatigueSummary(DiagnosticModel):
    total_users: int
    by_severity: Dict[FatigueSeverity, int]
    fatigued_count: int                 # Moderate or worse
    percentage_fatigued: float
    avg_exposure_count: float
    avg_days_active: float


class ComplianceEvidence(DiagnosticModel):
    exposure_count: int
    dismissal_count: int
    days_active: int
    last_action: Optional[LastAction] = None


class ComplianceFlag(DiagnosticModel):
    user_id: Optional[str] = None
    flags: List[ComplianceFlagType]
    severity: ComplianceSeverity
    evidence: ComplianceEvidence
    flagged_at: datetime


class ComplianceSummary(DiagnosticModel):
    total_flagged: int
    by_severity: Dict[ComplianceSeverity, int]
    by_flag: Dict[ComplianceFlagType, int]
    critical_count: int
    requires_immediate_review: bool


class AnalyticsSnapshot(DiagnosticModel):
    analytics_version: str = "v1"
    governance_version: str = "v1"
    snapshot_at: datetime
    exposure_stats: ExposureStats
    action_stats: ActionStats
    dismissal_stats: DismissalStats
    fatigue_signals: List[FatigueSignal] = []
    compliance_flags: List[ComplianceFlag] = []
