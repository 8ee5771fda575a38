"""Admin view — cross-layer diagnostic snapshot for human review."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from insight_kernel.boundary import DiagnosticModel
from insight_kernel.models.analytics import AnalyticsSnapshot
from insight_kernel.models.governance import GovernanceSnapshot
from insight_kernel.models.lifecycle import LifecycleSnapshot


class OverallConfidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNKNOWN = "unknown"


class ExportFormat(str, Enum):
    """Static, file-like formats only."""
    JSON = "json"
    CSV = "csv"
    PDF_METADATA = "pdf_metadata"


class AdminViewSnapshot(DiagnosticModel):
    snapshot_id: str
    computed_at: datetime
    admin_version: str = "v1"
    governance: Optional[GovernanceSnapshot] = None
    compliance: Optional[AnalyticsSnapshot] = None
    lifecycle: Optional[LifecycleSnapshot] = None
    overall_confidence: OverallConfidence
    warnings: List[str] = []
    missing_layers: List[str] = []


class AdminRiskSummary(DiagnosticModel):
    fatigue_level: str                  # FatigueSeverity value or "unknown"
    lifecycle_state: str                # LifecycleState value or "UNKNOWN"
    total_exposures: Optional[int] = None
    total_interactions: Optional[int] = None
    dismissed_as_annoying: bool = False
    summary: str
    confidence: OverallConfidence
    disclaimer: str = "DIAGNOSTIC ONLY - NOT A DECISION"


class ExportMetadata(DiagnosticModel):
    exported_at: datetime
    format: ExportFormat
    admin_version: str
    governance_version: str
    analytics_version: str
    lifecycle_version: str
    disclaimer: str
    retention_notice: str


class GovernanceState(DiagnosticModel):
    was_suppressed: bool = False
    suppression_reason: Optional[str] = None
    cooldown_active: bool = False


class ComplianceState(DiagnosticModel):
    fatigue_level: str = "unknown"
    exposure_count: int = 0
    interaction_count: int = 0


class LifecycleStateView(DiagnosticModel):
    state: str = "UNKNOWN"
    confidence: OverallConfidence = OverallConfidence.UNKNOWN


class CTAExplanationContext(DiagnosticModel):
    cta_intent: str
    subscription_status: str
    governance_state: GovernanceState
    compliance_state: ComplianceState
    lifecycle_state: LifecycleStateView
    explanation: str
    confidence: OverallConfidence
