"""
CTA Analytics — counts, rates and trends over governance memory records.

Factual aggregation only: no thresholds, no recommendations. A record
belongs to a window when its last_seen_at falls inside it (inclusive).
"""

from datetime import datetime
from typing import Dict, List, Optional, Sequence

from insight_kernel.boundary import diagnostic_entry
from insight_kernel.diagnostics.compliance import generate_compliance_flags
from insight_kernel.diagnostics.fatigue import generate_fatigue_signals
from insight_kernel.diagnostics.versioning import ANALYTICS_VERSION, GOVERNANCE_VERSION
from insight_kernel.models.analytics import (
    ActionStats,
    AnalyticsSnapshot,
    DismissalStats,
    ExposureStats,
    IntentActionBreakdown,
    TimeWindow,
    TrendDirection,
    TrendReport,
)
from insight_kernel.models.config import DiagnosticThresholds
from insight_kernel.models.cta import CTAIntent, CTASurface
from insight_kernel.models.governance import DismissReason, LastAction, MemoryRecord


def create_time_window(start: datetime, end: datetime) -> TimeWindow:
    return TimeWindow(start=start, end=end)


def is_within_time_window(record: MemoryRecord, window: TimeWindow) -> bool:
    return window.start <= record.last_seen_at <= window.end


def _in_window(records: Sequence[MemoryRecord], window: TimeWindow) -> List[MemoryRecord]:
    return [r for r in records if is_within_time_window(r, window)]


def _rate(part: int, total: int) -> float:
    return part / total if total > 0 else 0.0


def _unique_users(records: Sequence[MemoryRecord]) -> int:
    # Records without a user id each count as their own user
    keys = {
        r.user_id if r.user_id is not None else f"record:{i}"
        for i, r in enumerate(records)
    }
    return len(keys)


@diagnostic_entry("aggregate_exposure_stats")
def aggregate_exposure_stats(records: Sequence[MemoryRecord], window: TimeWindow) -> ExposureStats:
    window_records = _in_window(records, window)
    total_exposures = sum(r.exposure_count for r in window_records)
    unique_users = _unique_users(window_records)

    by_intent: Dict[CTAIntent, int] = {intent: 0 for intent in CTAIntent}
    by_surface: Dict[CTASurface, int] = {surface: 0 for surface in CTASurface}
    for r in window_records:
        by_intent[r.intent] += r.exposure_count
        by_surface[r.surface] += r.exposure_count

    return ExposureStats(
        total_exposures=total_exposures,
        unique_users=unique_users,
        avg_exposures_per_user=_rate(total_exposures, unique_users),
        by_intent=by_intent,
        by_surface=by_surface,
        time_window=window,
    )


@diagnostic_entry("aggregate_action_stats")
def aggregate_action_stats(records: Sequence[MemoryRecord], window: TimeWindow) -> ActionStats:
    window_records = _in_window(records, window)
    counts: Dict[CTAIntent, Dict[str, int]] = {
        intent: {"clicks": 0, "dismissals": 0, "no_action": 0} for intent in CTAIntent
    }

    for r in window_records:
        if r.last_action == LastAction.CLICKED:
            counts[r.intent]["clicks"] += 1
        elif r.last_action == LastAction.DISMISSED:
            counts[r.intent]["dismissals"] += 1
        else:
            counts[r.intent]["no_action"] += 1

    total_clicks = sum(c["clicks"] for c in counts.values())
    total_dismissals = sum(c["dismissals"] for c in counts.values())
    total_no_action = sum(c["no_action"] for c in counts.values())
    total = len(window_records)

    return ActionStats(
        total_clicks=total_clicks,
        total_dismissals=total_dismissals,
        total_no_action=total_no_action,
        click_rate=_rate(total_clicks, total),
        dismissal_rate=_rate(total_dismissals, total),
        no_action_rate=_rate(total_no_action, total),
        by_intent={intent: IntentActionBreakdown(**c) for intent, c in counts.items()},
        time_window=window,
    )


@diagnostic_entry("aggregate_dismissal_stats")
def aggregate_dismissal_stats(records: Sequence[MemoryRecord], window: TimeWindow) -> DismissalStats:
    dismissed = [
        r for r in _in_window(records, window) if r.last_action == LastAction.DISMISSED
    ]
    total = len(dismissed)

    by_reason: Dict[str, int] = {reason.value: 0 for reason in DismissReason}
    for r in dismissed:
        if r.dismiss_reason is not None:
            by_reason[r.dismiss_reason.value] += 1

    return DismissalStats(
        total=total,
        by_reason=by_reason,
        percentage_by_reason={reason: _rate(n, total) for reason, n in by_reason.items()},
        avg_exposures_before_dismissal=_rate(sum(r.exposure_count for r in dismissed), total),
        time_window=window,
    )


def calculate_trend(current: float, previous: float) -> TrendDirection:
    if current > previous:
        return TrendDirection.UP
    if current < previous:
        return TrendDirection.DOWN
    return TrendDirection.FLAT


def calculate_percentage_change(current: float, previous: float) -> float:
    """Fractional change. From a zero baseline any growth reads as 1.0."""
    if previous == 0:
        return 1.0 if current > 0 else 0.0
    return (current - previous) / previous


@diagnostic_entry("build_trend_report")
def build_trend_report(
    records: Sequence[MemoryRecord],
    current_window: TimeWindow,
    previous_window: TimeWindow,
) -> TrendReport:
    current_exposure = aggregate_exposure_stats(records, current_window)
    previous_exposure = aggregate_exposure_stats(records, previous_window)
    current_actions = aggregate_action_stats(records, current_window)
    previous_actions = aggregate_action_stats(records, previous_window)

    return TrendReport(
        exposures=calculate_trend(current_exposure.total_exposures, previous_exposure.total_exposures),
        exposure_change=calculate_percentage_change(
            current_exposure.total_exposures, previous_exposure.total_exposures
        ),
        click_rate=calculate_trend(current_actions.click_rate, previous_actions.click_rate),
        click_rate_change=calculate_percentage_change(
            current_actions.click_rate, previous_actions.click_rate
        ),
        dismissal_rate=calculate_trend(current_actions.dismissal_rate, previous_actions.dismissal_rate),
        dismissal_rate_change=calculate_percentage_change(
            current_actions.dismissal_rate, previous_actions.dismissal_rate
        ),
        current_window=current_window,
        previous_window=previous_window,
    )


@diagnostic_entry("build_analytics_snapshot")
def build_analytics_snapshot(
    records: Sequence[MemoryRecord],
    window: TimeWindow,
    now: datetime,
    thresholds: Optional[DiagnosticThresholds] = None,
) -> AnalyticsSnapshot:
    """Bundle every analytics view of `records` for one window."""
    window_records = _in_window(records, window)
    return AnalyticsSnapshot(
        analytics_version=ANALYTICS_VERSION,
        governance_version=GOVERNANCE_VERSION,
        snapshot_at=now,
        exposure_stats=aggregate_exposure_stats(records, window),
        action_stats=aggregate_action_stats(records, window),
        dismissal_stats=aggregate_dismissal_stats(records, window),
        fatigue_signals=generate_fatigue_signals(window_records, now),
        compliance_flags=generate_compliance_flags(window_records, now, thresholds),
    )
