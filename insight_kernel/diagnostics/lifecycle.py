"""
Lifecycle Classifier — one engagement state per user, with confidence.

Raw signals are bucketed first (low / medium / high / unknown, where unknown
means missing or invalid and is never the same as zero), then a fixed
priority chain picks exactly one state:

  CHURNED > DORMANT > AT_RISK > POWER_USER > ACTIVE > ACTIVATING > ONBOARDING > NEW_USER

Confidence reflects how many of the six normalized signals were unknown.
The classification is derived on demand and never authoritative.
"""

import math
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from typing_extensions import assert_never

from insight_kernel.boundary import diagnostic_entry
from insight_kernel.diagnostics.versioning import (
    ANALYTICS_VERSION,
    GOVERNANCE_VERSION,
    LIFECYCLE_VERSION,
)
from insight_kernel.models.analytics import FatigueSeverity
from insight_kernel.models.cta import SubscriptionStatus
from insight_kernel.models.lifecycle import (
    ConfidenceLevel,
    LifecycleSignalInput,
    LifecycleSnapshot,
    LifecycleState,
    SignalBucket,
    SignalUsed,
)

NORMALIZED_SIGNALS: List[str] = [
    "days_since_first_seen",
    "days_since_last_activity",
    "exposure_count",
    "interaction_count",
    "engagement_ratio",
    "fatigue_severity",
]


def _valid(value: Optional[float]) -> Optional[float]:
    """None for missing, NaN, or negative values."""
    if value is None or math.isnan(value) or value < 0:
        return None
    return value


def _bucket(value: Optional[float], low_max: float, medium_max: float) -> SignalBucket:
    value = _valid(value)
    if value is None:
        return SignalBucket.UNKNOWN
    if value <= low_max:
        return SignalBucket.LOW
    if value <= medium_max:
        return SignalBucket.MEDIUM
    return SignalBucket.HIGH


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def normalize_days_since_first_seen(days: Optional[float]) -> SignalBucket:
    return _bucket(days, 7, 30)


def normalize_days_since_last_activity(days: Optional[float]) -> SignalBucket:
    return _bucket(days, 3, 14)


def normalize_exposure_count(count: Optional[float]) -> SignalBucket:
    return _bucket(count, 5, 15)


def normalize_interaction_count(count: Optional[float]) -> SignalBucket:
    return _bucket(count, 2, 7)


def normalize_engagement_ratio(
    interactions: Optional[float],
    exposures: Optional[float],
) -> SignalBucket:
    interactions = _valid(interactions)
    exposures = _valid(exposures)
    if interactions is None or exposures is None or exposures == 0:
        return SignalBucket.UNKNOWN
    ratio = interactions / exposures
    if ratio < 0.2:
        return SignalBucket.LOW
    if ratio <= 0.5:
        return SignalBucket.MEDIUM
    return SignalBucket.HIGH


def normalize_fatigue_severity(severity: Optional[FatigueSeverity]) -> SignalBucket:
    if severity is None:
        return SignalBucket.UNKNOWN
    if severity in (FatigueSeverity.NONE, FatigueSeverity.LOW):
        return SignalBucket.LOW
    if severity == FatigueSeverity.MODERATE:
        return SignalBucket.MEDIUM
    return SignalBucket.HIGH


@diagnostic_entry("normalize_all_signals")
def normalize_all_signals(signals: LifecycleSignalInput) -> Dict[str, SignalBucket]:
    return {
        "days_since_first_seen": normalize_days_since_first_seen(signals.days_since_first_seen),
        "days_since_last_activity": normalize_days_since_last_activity(
            signals.days_since_last_activity
        ),
        "exposure_count": normalize_exposure_count(signals.total_exposures),
        "interaction_count": normalize_interaction_count(signals.total_interactions),
        "engagement_ratio": normalize_engagement_ratio(
            signals.total_interactions, signals.total_exposures
        ),
        "fatigue_severity": normalize_fatigue_severity(signals.fatigue_severity),
    }


def count_unknown_signals(normalized: Dict[str, SignalBucket]) -> int:
    return sum(1 for bucket in normalized.values() if bucket == SignalBucket.UNKNOWN)


def get_missing_signal_names(normalized: Dict[str, SignalBucket]) -> List[str]:
    return [name for name, bucket in normalized.items() if bucket == SignalBucket.UNKNOWN]


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

def _is_churned(signals: LifecycleSignalInput, last_activity: Optional[float]) -> bool:
    if signals.subscription_status in (SubscriptionStatus.CANCELLED, SubscriptionStatus.EXPIRED):
        return True
    return last_activity is not None and last_activity >= 30


def _is_dormant(last_activity: Optional[float]) -> bool:
    return last_activity is not None and 15 <= last_activity < 30


def _is_at_risk(
    signals: LifecycleSignalInput,
    normalized: Dict[str, SignalBucket],
    last_activity: Optional[float],
) -> bool:
    if normalized["fatigue_severity"] == SignalBucket.HIGH:
        return True
    if signals.dismissed_as_annoying is True:
        return True
    if signals.has_compliance_flags is True:
        return True
    return (
        last_activity is not None
        and 7 <= last_activity < 15
        and normalized["engagement_ratio"] == SignalBucket.LOW
    )


def _is_power_user(signals: LifecycleSignalInput, normalized: Dict[str, SignalBucket]) -> bool:
    return (
        normalized["engagement_ratio"] == SignalBucket.HIGH
        and signals.subscription_status in (SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIALING)
        and normalized["days_since_first_seen"] == SignalBucket.HIGH
        and normalized["days_since_last_activity"] == SignalBucket.LOW
    )


def _is_active(normalized: Dict[str, SignalBucket]) -> bool:
    return (
        normalized["days_since_last_activity"] == SignalBucket.LOW
        and normalized["engagement_ratio"] != SignalBucket.LOW
        and normalized["days_since_first_seen"] != SignalBucket.LOW
    )


def _is_activating(
    signals: LifecycleSignalInput,
    normalized: Dict[str, SignalBucket],
    last_activity: Optional[float],
) -> bool:
    if last_activity is not None and last_activity > 6:
        return False
    if _valid(signals.total_interactions) == 0:
        return False
    return normalized["days_since_first_seen"] == SignalBucket.MEDIUM


def _is_onboarding(normalized: Dict[str, SignalBucket], last_activity: Optional[float]) -> bool:
    if normalized["days_since_first_seen"] != SignalBucket.LOW:
        return False
    return last_activity is None or last_activity <= 7


@diagnostic_entry("resolve_lifecycle_state")
def resolve_lifecycle_state(signals: LifecycleSignalInput) -> LifecycleState:
    normalized = normalize_all_signals(signals)
    last_activity = _valid(signals.days_since_last_activity)

    if _is_churned(signals, last_activity):
        return LifecycleState.CHURNED
    if _is_dormant(last_activity):
        return LifecycleState.DORMANT
    if _is_at_risk(signals, normalized, last_activity):
        return LifecycleState.AT_RISK
    if _is_power_user(signals, normalized):
        return LifecycleState.POWER_USER
    if _is_active(normalized):
        return LifecycleState.ACTIVE
    if _is_activating(signals, normalized, last_activity):
        return LifecycleState.ACTIVATING
    if _is_onboarding(normalized, last_activity):
        return LifecycleState.ONBOARDING
    return LifecycleState.NEW_USER


def get_state_description(state: LifecycleState) -> str:
    if state is LifecycleState.NEW_USER:
        return "User just signed up, minimal activity"
    elif state is LifecycleState.ONBOARDING:
        return "User is learning the product (0-7 days)"
    elif state is LifecycleState.ACTIVATING:
        return "User is building habits (8-30 days)"
    elif state is LifecycleState.ACTIVE:
        return "User has regular usage patterns"
    elif state is LifecycleState.POWER_USER:
        return "User has high engagement and active subscription"
    elif state is LifecycleState.AT_RISK:
        return "User showing churn signals (fatigue, inactivity, complaints)"
    elif state is LifecycleState.DORMANT:
        return "User inactive for 15-29 days"
    elif state is LifecycleState.CHURNED:
        return "User has left (cancelled subscription or 30+ days inactive)"
    else:
        assert_never(state)


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------

def calculate_confidence(unknown_count: int) -> ConfidenceLevel:
    if unknown_count <= 1:
        return ConfidenceLevel.HIGH
    if unknown_count <= 3:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def _signals_used(
    signals: LifecycleSignalInput,
    normalized: Dict[str, SignalBucket],
) -> List[SignalUsed]:
    bucketed = [
        ("days_since_first_seen", signals.days_since_first_seen, "days_since_first_seen"),
        ("days_since_last_activity", signals.days_since_last_activity, "days_since_last_activity"),
        ("total_exposures", signals.total_exposures, "exposure_count"),
        ("total_interactions", signals.total_interactions, "interaction_count"),
    ]
    used: List[SignalUsed] = [
        SignalUsed(name=name, value=value, bucket=normalized[key])
        for name, value, key in bucketed
        if value is not None
    ]

    if signals.dismissal_count is not None:
        used.append(SignalUsed(name="dismissal_count", value=signals.dismissal_count))
    if signals.dismissed_as_annoying is not None:
        used.append(SignalUsed(name="dismissed_as_annoying", value=signals.dismissed_as_annoying))
    if signals.fatigue_severity is not None:
        used.append(
            SignalUsed(
                name="fatigue_severity",
                value=signals.fatigue_severity.value,
                bucket=normalized["fatigue_severity"],
            )
        )
    if signals.has_compliance_flags is not None:
        used.append(SignalUsed(name="has_compliance_flags", value=signals.has_compliance_flags))
    if signals.subscription_status is not None:
        used.append(SignalUsed(name="subscription_status", value=signals.subscription_status.value))
    if normalized["engagement_ratio"] != SignalBucket.UNKNOWN:
        used.append(
            SignalUsed(
                name="engagement_ratio",
                value="calculated",
                bucket=normalized["engagement_ratio"],
            )
        )
    return used


@diagnostic_entry("build_lifecycle_snapshot")
def build_lifecycle_snapshot(signals: LifecycleSignalInput, now: datetime) -> LifecycleSnapshot:
    normalized = normalize_all_signals(signals)
    state = resolve_lifecycle_state(signals)
    return LifecycleSnapshot(
        state=state,
        confidence=calculate_confidence(count_unknown_signals(normalized)),
        description=get_state_description(state),
        signals_used=_signals_used(signals, normalized),
        signals_missing=get_missing_signal_names(normalized),
        normalized_signals=normalized,
        computed_at=now,
        lifecycle_version=LIFECYCLE_VERSION,
        analytics_version=ANALYTICS_VERSION,
        governance_version=GOVERNANCE_VERSION,
    )


def get_snapshot_summary(snapshot: LifecycleSnapshot) -> str:
    return f"{snapshot.state.value} ({snapshot.confidence.value} confidence): {snapshot.description}"


def has_high_confidence(snapshot: LifecycleSnapshot) -> bool:
    return snapshot.confidence == ConfidenceLevel.HIGH


def is_snapshot_recent(snapshot: LifecycleSnapshot, now: datetime, max_age: timedelta) -> bool:
    return now - snapshot.computed_at <= max_age
