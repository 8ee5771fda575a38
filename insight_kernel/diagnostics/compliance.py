"""
CTA Compliance — flags exposure patterns that warrant human review.

Flag only. Nothing here resolves, mitigates, or suppresses anything.
"""

from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from insight_kernel.boundary import diagnostic_entry
from insight_kernel.models.analytics import (
    ComplianceEvidence,
    ComplianceFlag,
    ComplianceFlagType,
    ComplianceSeverity,
    ComplianceSummary,
)
from insight_kernel.models.config import DiagnosticThresholds
from insight_kernel.models.governance import DismissReason, LastAction, MemoryRecord

_DEFAULT_THRESHOLDS = DiagnosticThresholds()

SEVERITY_ORDER: Dict[ComplianceSeverity, int] = {
    ComplianceSeverity.LOW: 1,
    ComplianceSeverity.MEDIUM: 2,
    ComplianceSeverity.HIGH: 3,
    ComplianceSeverity.CRITICAL: 4,
}


def _detect_flags(
    record: MemoryRecord,
    now: datetime,
    thresholds: DiagnosticThresholds,
) -> List[ComplianceFlagType]:
    flags: List[ComplianceFlagType] = []
    age = now - record.first_seen_at

    if record.exposure_count > thresholds.compliance_excessive_exposure:
        flags.append(ComplianceFlagType.EXCESSIVE_EXPOSURE)

    if (
        record.exposure_count > thresholds.repeated_pressure_exposure
        and age < timedelta(days=thresholds.repeated_pressure_window_days)
    ):
        flags.append(ComplianceFlagType.REPEATED_PRESSURE)

    if (
        record.last_action == LastAction.DISMISSED
        and record.dismissed_at is not None
        and record.last_seen_at > record.dismissed_at
    ):
        flags.append(ComplianceFlagType.IGNORED_DISMISSAL)

    if not record.a11y_contract_version:
        flags.append(ComplianceFlagType.ACCESSIBILITY_RISK)

    if (
        record.dismiss_reason == DismissReason.ANNOYING
        and record.exposure_count > thresholds.dark_pattern_exposure
    ):
        flags.append(ComplianceFlagType.DARK_PATTERN_RISK)

    return flags


def calculate_compliance_severity(flags: Sequence[ComplianceFlagType]) -> ComplianceSeverity:
    if (
        ComplianceFlagType.DARK_PATTERN_RISK in flags
        or ComplianceFlagType.IGNORED_DISMISSAL in flags
    ):
        return ComplianceSeverity.CRITICAL
    if len(flags) >= 3 or ComplianceFlagType.REPEATED_PRESSURE in flags:
        return ComplianceSeverity.HIGH
    if len(flags) == 2:
        return ComplianceSeverity.MEDIUM
    return ComplianceSeverity.LOW


@diagnostic_entry("generate_compliance_flag")
def generate_compliance_flag(
    record: MemoryRecord,
    now: datetime,
    thresholds: Optional[DiagnosticThresholds] = None,
) -> Optional[ComplianceFlag]:
    """None when the record raises no compliance concern."""
    flags = _detect_flags(record, now, thresholds or _DEFAULT_THRESHOLDS)
    if not flags:
        return None

    return ComplianceFlag(
        user_id=record.user_id,
        flags=flags,
        severity=calculate_compliance_severity(flags),
        evidence=ComplianceEvidence(
            exposure_count=record.exposure_count,
            dismissal_count=1 if record.last_action == LastAction.DISMISSED else 0,
            days_active=(now - record.first_seen_at).days,
            last_action=record.last_action,
        ),
        flagged_at=now,
    )


@diagnostic_entry("generate_compliance_flags")
def generate_compliance_flags(
    records: Sequence[MemoryRecord],
    now: datetime,
    thresholds: Optional[DiagnosticThresholds] = None,
) -> List[ComplianceFlag]:
    flagged = (generate_compliance_flag(record, now, thresholds) for record in records)
    return [flag for flag in flagged if flag is not None]


def filter_by_severity(
    flags: Sequence[ComplianceFlag],
    min_severity: ComplianceSeverity,
) -> List[ComplianceFlag]:
    min_level = SEVERITY_ORDER[ComplianceSeverity(min_severity)]
    return [f for f in flags if SEVERITY_ORDER[f.severity] >= min_level]


@diagnostic_entry("get_compliance_summary")
def get_compliance_summary(flags: Sequence[ComplianceFlag]) -> ComplianceSummary:
    by_severity = {severity: 0 for severity in ComplianceSeverity}
    by_flag = {flag_type: 0 for flag_type in ComplianceFlagType}
    for f in flags:
        by_severity[f.severity] += 1
        for flag_type in f.flags:
            by_flag[flag_type] += 1

    critical_count = by_severity[ComplianceSeverity.CRITICAL]
    return ComplianceSummary(
        total_flagged=len(flags),
        by_severity=by_severity,
        by_flag=by_flag,
        critical_count=critical_count,
        requires_immediate_review=critical_count > 0,
    )
