"""
Admin Composer — one cross-layer diagnostic view for human review.

Combines governance, analytics and lifecycle snapshots, grades how complete
the picture is, and explains it in plain language. It formats data that
other layers already computed; it never decides anything.
"""

import hashlib
import json
from datetime import datetime
from typing import List, Optional

from insight_kernel.boundary import diagnostic_entry
from insight_kernel.diagnostics.versioning import ADMIN_VERSION
from insight_kernel.models.admin import (
    AdminRiskSummary,
    AdminViewSnapshot,
    ComplianceState,
    CTAExplanationContext,
    GovernanceState,
    LifecycleStateView,
    OverallConfidence,
)
from insight_kernel.models.analytics import AnalyticsSnapshot, ComplianceSeverity
from insight_kernel.models.cta import CTAIntent, SubscriptionStatus
from insight_kernel.models.governance import GovernanceSnapshot
from insight_kernel.models.lifecycle import ConfidenceLevel, LifecycleSnapshot

DIAGNOSTIC_FOOTER = (
    "DIAGNOSTIC ONLY: This explanation is for human review and does not "
    "represent an automated decision."
)


def _snapshot_id(
    now: datetime,
    governance: Optional[GovernanceSnapshot],
    compliance: Optional[AnalyticsSnapshot],
    lifecycle: Optional[LifecycleSnapshot],
) -> str:
    """Content-addressed id: identical inputs always yield the same id."""
    payload = {
        "computed_at": now.isoformat(),
        "governance": governance.model_dump(mode="json") if governance else None,
        "compliance": compliance.model_dump(mode="json") if compliance else None,
        "lifecycle": lifecycle.model_dump(mode="json") if lifecycle else None,
    }
    digest = hashlib.sha256(json.dumps(payload, sort_keys=True, default=str).encode()).hexdigest()
    return f"admin_{digest[:16]}"


def calculate_overall_confidence(
    governance: Optional[GovernanceSnapshot],
    compliance: Optional[AnalyticsSnapshot],
    lifecycle: Optional[LifecycleSnapshot],
) -> OverallConfidence:
    available = sum(1 for layer in (governance, compliance, lifecycle) if layer is not None)
    if available == 3:
        if lifecycle.confidence == ConfidenceLevel.LOW:
            return OverallConfidence.MEDIUM
        return OverallConfidence.HIGH
    if available == 2:
        return OverallConfidence.MEDIUM
    if available == 1:
        return OverallConfidence.LOW
    return OverallConfidence.UNKNOWN


def detect_missing_layers(
    governance: Optional[GovernanceSnapshot],
    compliance: Optional[AnalyticsSnapshot],
    lifecycle: Optional[LifecycleSnapshot],
) -> List[str]:
    missing: List[str] = []
    if governance is None:
        missing.append("governance")
    if compliance is None:
        missing.append("compliance")
    if lifecycle is None:
        missing.append("lifecycle")
    return missing


def generate_warnings(
    governance: Optional[GovernanceSnapshot],
    compliance: Optional[AnalyticsSnapshot],
    lifecycle: Optional[LifecycleSnapshot],
) -> List[str]:
    warnings: List[str] = []
    if governance is None:
        warnings.append("Governance data unavailable - memory and audit context missing")
    if compliance is None:
        warnings.append("Compliance data unavailable - fatigue and analytics context missing")
    if lifecycle is None:
        warnings.append("Lifecycle data unavailable - user classification context missing")

    if lifecycle is not None and lifecycle.confidence == ConfidenceLevel.LOW:
        warnings.append(
            f"Lifecycle classification has low confidence "
            f"({len(lifecycle.signals_missing)} signals missing)"
        )

    if compliance is not None:
        critical = [
            flag for flag in compliance.compliance_flags
            if flag.severity == ComplianceSeverity.CRITICAL
        ]
        if critical:
            warnings.append(
                f"{len(critical)} critical compliance flag(s) detected - human review recommended"
            )
    return warnings


@diagnostic_entry("build_admin_snapshot")
def build_admin_snapshot(
    governance: Optional[GovernanceSnapshot],
    compliance: Optional[AnalyticsSnapshot],
    lifecycle: Optional[LifecycleSnapshot],
    now: datetime,
) -> AdminViewSnapshot:
    return AdminViewSnapshot(
        snapshot_id=_snapshot_id(now, governance, compliance, lifecycle),
        computed_at=now,
        admin_version=ADMIN_VERSION,
        governance=governance,
        compliance=compliance,
        lifecycle=lifecycle,
        overall_confidence=calculate_overall_confidence(governance, compliance, lifecycle),
        warnings=generate_warnings(governance, compliance, lifecycle),
        missing_layers=detect_missing_layers(governance, compliance, lifecycle),
    )


# ---------------------------------------------------------------------------
# Explanation
# ---------------------------------------------------------------------------

def _governance_state(snapshot: AdminViewSnapshot) -> GovernanceState:
    governance = snapshot.governance
    if governance is None or not governance.dismissed:
        return GovernanceState()
    return GovernanceState(was_suppressed=True, suppression_reason="dismissed_by_user")


def _compliance_state(snapshot: AdminViewSnapshot) -> ComplianceState:
    compliance = snapshot.compliance
    if compliance is None:
        return ComplianceState()
    fatigue = compliance.fatigue_signals[0] if compliance.fatigue_signals else None
    return ComplianceState(
        fatigue_level=fatigue.severity.value if fatigue else "unknown",
        exposure_count=compliance.exposure_stats.total_exposures,
        interaction_count=compliance.action_stats.total_clicks,
    )


def _lifecycle_state(snapshot: AdminViewSnapshot) -> LifecycleStateView:
    lifecycle = snapshot.lifecycle
    if lifecycle is None:
        return LifecycleStateView()
    return LifecycleStateView(
        state=lifecycle.state.value,
        confidence=OverallConfidence(lifecycle.confidence.value),
    )


def _explanation_text(
    cta_intent: str,
    subscription_status: str,
    governance: GovernanceState,
    compliance: ComplianceState,
    lifecycle: LifecycleStateView,
) -> str:
    parts = [
        f'CTA intent "{cta_intent}" was shown to a user with subscription status '
        f'"{subscription_status}".'
    ]
    if lifecycle.state != "UNKNOWN":
        parts.append(
            f'User is classified as "{lifecycle.state}" (confidence: {lifecycle.confidence.value}).'
        )
    else:
        parts.append("User lifecycle state is unknown due to missing data.")
    if compliance.exposure_count > 0:
        parts.append(
            f"User has seen CTAs {compliance.exposure_count} time(s) and interacted "
            f"{compliance.interaction_count} time(s)."
        )
    if compliance.fatigue_level != "unknown":
        parts.append(f"Fatigue level: {compliance.fatigue_level}.")
    if governance.was_suppressed:
        parts.append(f"Note: CTA was previously suppressed due to: {governance.suppression_reason}.")
    if governance.cooldown_active:
        parts.append("Cooldown period is active.")
    parts.append(DIAGNOSTIC_FOOTER)
    return " ".join(parts)


@diagnostic_entry("explain_why_cta_was_shown")
def explain_why_cta_was_shown(
    snapshot: AdminViewSnapshot,
    cta_intent: CTAIntent,
    subscription_status: SubscriptionStatus,
) -> CTAExplanationContext:
    intent = CTAIntent(cta_intent).value
    status = SubscriptionStatus(subscription_status).value
    governance = _governance_state(snapshot)
    compliance = _compliance_state(snapshot)
    lifecycle = _lifecycle_state(snapshot)

    return CTAExplanationContext(
        cta_intent=intent,
        subscription_status=status,
        governance_state=governance,
        compliance_state=compliance,
        lifecycle_state=lifecycle,
        explanation=_explanation_text(intent, status, governance, compliance, lifecycle),
        confidence=snapshot.overall_confidence,
    )


def get_explanation_summary(context: CTAExplanationContext) -> str:
    return (
        f"{context.cta_intent} shown to {context.subscription_status} user "
        f"({context.lifecycle_state.state})"
    )


@diagnostic_entry("build_risk_summary")
def build_risk_summary(snapshot: AdminViewSnapshot) -> AdminRiskSummary:
    compliance = _compliance_state(snapshot)
    lifecycle = _lifecycle_state(snapshot)
    annoying = bool(
        snapshot.compliance
        and any(s.dismissed_as_annoying for s in snapshot.compliance.fatigue_signals)
    )
    return AdminRiskSummary(
        fatigue_level=compliance.fatigue_level,
        lifecycle_state=lifecycle.state,
        total_exposures=compliance.exposure_count if snapshot.compliance else None,
        total_interactions=compliance.interaction_count if snapshot.compliance else None,
        dismissed_as_annoying=annoying,
        summary=(
            f"Lifecycle {lifecycle.state}, fatigue {compliance.fatigue_level}, "
            f"{len(snapshot.warnings)} warning(s)"
        ),
        confidence=snapshot.overall_confidence,
    )
