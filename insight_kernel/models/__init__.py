"""Insight kernel data models."""

from insight_kernel.models.admin import (
    AdminRiskSummary,
    AdminViewSnapshot,
    CTAExplanationContext,
    ExportFormat,
    ExportMetadata,
    OverallConfidence,
)
from insight_kernel.models.analytics import (
    ActionStats,
    AnalyticsSnapshot,
    ComplianceFlag,
    ComplianceFlagType,
    ComplianceSeverity,
    DismissalStats,
    ExposureStats,
    FatigueSeverity,
    FatigueSignal,
    TimeWindow,
    TrendDirection,
)
from insight_kernel.models.config import CooldownPolicy, DiagnosticThresholds, EngineConfig
from insight_kernel.models.cooldown import (
    AuditEvent,
    CooldownDecision,
    CooldownState,
    InsightStateRecord,
    InsightStatus,
    ResolveDecision,
)
from insight_kernel.models.cta import (
    CapabilityResult,
    CTAAction,
    CTAActionKind,
    CTAContract,
    CTACopy,
    CTAIntent,
    CTASurface,
    NormalizedError,
    Subscription,
    SubscriptionStatus,
    SurfaceConfig,
)
from insight_kernel.models.explain import Comparison, InsightExplanation, TriggerContext, WhyNowReason
from insight_kernel.models.governance import (
    DismissReason,
    GovernanceSnapshot,
    LastAction,
    MemoryRecord,
    RiskFlag,
)
from insight_kernel.models.insight import (
    DecisionReason,
    EvaluatedInsight,
    Insight,
    InsightCategory,
    InsightId,
    InsightKind,
    MetricsSnapshot,
)
from insight_kernel.models.lifecycle import (
    ConfidenceLevel,
    LifecycleSignalInput,
    LifecycleSnapshot,
    LifecycleState,
    SignalBucket,
)

__all__ = [
    "ActionStats",
    "AdminRiskSummary",
    "AdminViewSnapshot",
    "AnalyticsSnapshot",
    "AuditEvent",
    "CapabilityResult",
    "Comparison",
    "ComplianceFlag",
    "ComplianceFlagType",
    "ComplianceSeverity",
    "ConfidenceLevel",
    "CooldownDecision",
    "CooldownPolicy",
    "CooldownState",
    "CTAAction",
    "CTAActionKind",
    "CTAContract",
    "CTACopy",
    "CTAExplanationContext",
    "CTAIntent",
    "CTASurface",
    "DecisionReason",
    "DiagnosticThresholds",
    "DismissalStats",
    "DismissReason",
    "EngineConfig",
    "EvaluatedInsight",
    "ExportFormat",
    "ExportMetadata",
    "ExposureStats",
    "FatigueSeverity",
    "FatigueSignal",
    "GovernanceSnapshot",
    "Insight",
    "InsightCategory",
    "InsightExplanation",
    "InsightId",
    "InsightKind",
    "InsightStateRecord",
    "InsightStatus",
    "LastAction",
    "LifecycleSignalInput",
    "LifecycleSnapshot",
    "LifecycleState",
    "MemoryRecord",
    "MetricsSnapshot",
    "NormalizedError",
    "OverallConfidence",
    "ResolveDecision",
    "RiskFlag",
    "SignalBucket",
    "Subscription",
    "SubscriptionStatus",
    "SurfaceConfig",
    "TimeWindow",
    "TrendDirection",
    "TriggerContext",
    "WhyNowReason",
]
