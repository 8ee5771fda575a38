"""
CTA Fatigue — descriptive severity of repeated, unanswered exposure.

Fatigue is a signal for a human reader, never a trigger for suppression.
"""

from datetime import datetime
from typing import Dict, List, Sequence

from insight_kernel.boundary import diagnostic_entry
from insight_kernel.models.analytics import (
    FatigueContext,
    FatigueSeverity,
    FatigueSignal,
    FatigueSummary,
)
from insight_kernel.models.governance import DismissReason, MemoryRecord

SEVERITY_ORDER: Dict[FatigueSeverity, int] = {
    FatigueSeverity.NONE: 0,
    FatigueSeverity.LOW: 1,
    FatigueSeverity.MODERATE: 2,
    FatigueSeverity.HIGH: 3,
    FatigueSeverity.CRITICAL: 4,
}


def calculate_fatigue_severity(record: MemoryRecord) -> FatigueSeverity:
    if record.dismiss_reason == DismissReason.ANNOYING:
        return FatigueSeverity.CRITICAL
    if record.last_action is not None:
        return FatigueSeverity.NONE

    count = record.exposure_count
    if count < 3:
        return FatigueSeverity.NONE
    if count <= 5:
        return FatigueSeverity.LOW
    if count <= 10:
        return FatigueSeverity.MODERATE
    if count <= 20:
        return FatigueSeverity.HIGH
    return FatigueSeverity.CRITICAL


def days_since_first_exposure(record: MemoryRecord, now: datetime) -> int:
    return (now - record.first_seen_at).days


@diagnostic_entry("generate_fatigue_signal")
def generate_fatigue_signal(record: MemoryRecord, now: datetime) -> FatigueSignal:
    return FatigueSignal(
        user_id=record.user_id,
        severity=calculate_fatigue_severity(record),
        exposure_count=record.exposure_count,
        days_since_first_exposure=days_since_first_exposure(record, now),
        has_interaction=record.last_action is not None,
        dismissed_as_annoying=record.dismiss_reason == DismissReason.ANNOYING,
        context=FatigueContext(
            intent=record.intent,
            surface=record.surface,
            last_seen_at=record.last_seen_at,
        ),
    )


@diagnostic_entry("generate_fatigue_signals")
def generate_fatigue_signals(records: Sequence[MemoryRecord], now: datetime) -> List[FatigueSignal]:
    return [generate_fatigue_signal(record, now) for record in records]


def filter_by_severity(
    signals: Sequence[FatigueSignal],
    min_severity: FatigueSeverity,
) -> List[FatigueSignal]:
    min_level = SEVERITY_ORDER[FatigueSeverity(min_severity)]
    return [s for s in signals if SEVERITY_ORDER[s.severity] >= min_level]


def count_by_severity(signals: Sequence[FatigueSignal]) -> Dict[FatigueSeverity, int]:
    counts = {severity: 0 for severity in FatigueSeverity}
    for s in signals:
        counts[s.severity] += 1
    return counts


@diagnostic_entry("get_fatigue_summary")
def get_fatigue_summary(signals: Sequence[FatigueSignal]) -> FatigueSummary:
    total = len(signals)
    by_severity = count_by_severity(signals)
    fatigued = len(filter_by_severity(signals, FatigueSeverity.MODERATE))

    return FatigueSummary(
        total_users=total,
        by_severity=by_severity,
        fatigued_count=fatigued,
        percentage_fatigued=fatigued / total if total else 0.0,
        avg_exposure_count=sum(s.exposure_count for s in signals) / total if total else 0.0,
        avg_days_active=sum(s.days_since_first_exposure for s in signals) / total if total else 0.0,
    )
