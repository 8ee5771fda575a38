"""Tests for signal normalization and lifecycle classification."""

from datetime import datetime, timedelta

import pytest

from insight_kernel.diagnostics.lifecycle import (
    build_lifecycle_snapshot,
    calculate_confidence,
    get_snapshot_summary,
    get_state_description,
    has_high_confidence,
    is_snapshot_recent,
    normalize_all_signals,
    normalize_days_since_first_seen,
    normalize_engagement_ratio,
    normalize_exposure_count,
    resolve_lifecycle_state,
)
from insight_kernel.models.analytics import FatigueSeverity
from insight_kernel.models.cta import SubscriptionStatus
from insight_kernel.models.lifecycle import (
    ConfidenceLevel,
    LifecycleSignalInput,
    LifecycleState,
    SignalBucket,
)

NOW = datetime(2025, 3, 10, 12, 0, 0)


def _make_signals(**overrides) -> LifecycleSignalInput:
    values = {
        "days_since_first_seen": 60,
        "days_since_last_activity": 1,
        "total_exposures": 10,
        "total_interactions": 8,
        "fatigue_severity": FatigueSeverity.NONE,
        "subscription_status": SubscriptionStatus.ACTIVE,
    }
    values.update(overrides)
    return LifecycleSignalInput(**values)


class TestNormalization:
    def test_unknown_is_not_zero(self):
        assert normalize_exposure_count(None) == SignalBucket.UNKNOWN
        assert normalize_exposure_count(0) == SignalBucket.LOW

    def test_invalid_values_are_unknown(self):
        assert normalize_days_since_first_seen(float("nan")) == SignalBucket.UNKNOWN
        assert normalize_days_since_first_seen(-1) == SignalBucket.UNKNOWN

    def test_bucket_edges(self):
        assert normalize_days_since_first_seen(7) == SignalBucket.LOW
        assert normalize_days_since_first_seen(8) == SignalBucket.MEDIUM
        assert normalize_days_since_first_seen(31) == SignalBucket.HIGH

    def test_engagement_ratio(self):
        assert normalize_engagement_ratio(1, 10) == SignalBucket.LOW
        assert normalize_engagement_ratio(5, 10) == SignalBucket.MEDIUM
        assert normalize_engagement_ratio(6, 10) == SignalBucket.HIGH
        assert normalize_engagement_ratio(1, 0) == SignalBucket.UNKNOWN
        assert normalize_engagement_ratio(None, 10) == SignalBucket.UNKNOWN

    def test_all_signals_present(self):
        normalized = normalize_all_signals(_make_signals())
        assert len(normalized) == 6
        assert SignalBucket.UNKNOWN not in normalized.values()


class TestResolveState:
    def test_no_signals_is_new_user(self):
        assert resolve_lifecycle_state(LifecycleSignalInput()) == LifecycleState.NEW_USER

    def test_cancelled_is_churned(self):
        signals = _make_signals(subscription_status=SubscriptionStatus.CANCELLED)
        assert resolve_lifecycle_state(signals) == LifecycleState.CHURNED

    def test_long_inactivity_is_churned(self):
        assert resolve_lifecycle_state(_make_signals(days_since_last_activity=30)) == LifecycleState.CHURNED

    def test_dormant(self):
        assert resolve_lifecycle_state(_make_signals(days_since_last_activity=20)) == LifecycleState.DORMANT

    def test_at_risk_from_low_engagement(self):
        signals = _make_signals(days_since_last_activity=10, total_interactions=1)
        assert resolve_lifecycle_state(signals) == LifecycleState.AT_RISK

    def test_at_risk_from_annoyance(self):
        assert resolve_lifecycle_state(_make_signals(dismissed_as_annoying=True)) == LifecycleState.AT_RISK

    def test_at_risk_from_high_fatigue(self):
        signals = _make_signals(fatigue_severity=FatigueSeverity.CRITICAL)
        assert resolve_lifecycle_state(signals) == LifecycleState.AT_RISK

    def test_power_user(self):
        assert resolve_lifecycle_state(_make_signals()) == LifecycleState.POWER_USER

    def test_active_without_paid_plan(self):
        signals = _make_signals(subscription_status=SubscriptionStatus.FREE)
        assert resolve_lifecycle_state(signals) == LifecycleState.ACTIVE

    def test_activating(self):
        signals = _make_signals(days_since_first_seen=15, days_since_last_activity=5, total_interactions=1)
        assert resolve_lifecycle_state(signals) == LifecycleState.ACTIVATING

    def test_no_interactions_is_not_activating(self):
        signals = _make_signals(days_since_first_seen=15, days_since_last_activity=5, total_interactions=0)
        assert resolve_lifecycle_state(signals) == LifecycleState.NEW_USER

    def test_onboarding(self):
        signals = LifecycleSignalInput(days_since_first_seen=3, days_since_last_activity=1)
        assert resolve_lifecycle_state(signals) == LifecycleState.ONBOARDING

    @pytest.mark.parametrize("state", list(LifecycleState))
    def test_every_state_has_description(self, state):
        assert get_state_description(state)


class TestSnapshot:
    def test_confidence_levels(self):
        assert calculate_confidence(0) == ConfidenceLevel.HIGH
        assert calculate_confidence(1) == ConfidenceLevel.HIGH
        assert calculate_confidence(3) == ConfidenceLevel.MEDIUM
        assert calculate_confidence(4) == ConfidenceLevel.LOW

    def test_full_snapshot(self):
        snapshot = build_lifecycle_snapshot(_make_signals(), NOW)
        assert snapshot.state == LifecycleState.POWER_USER
        assert has_high_confidence(snapshot)
        assert snapshot.signals_missing == []
        assert snapshot.computed_at == NOW
        names = [s.name for s in snapshot.signals_used]
        assert "engagement_ratio" in names
        assert "subscription_status" in names
        assert get_snapshot_summary(snapshot).startswith("POWER_USER (high confidence)")

    def test_sparse_snapshot_has_low_confidence(self):
        snapshot = build_lifecycle_snapshot(LifecycleSignalInput(), NOW)
        assert snapshot.confidence == ConfidenceLevel.LOW
        assert len(snapshot.signals_missing) == 6
        assert snapshot.signals_used == []

    def test_recency(self):
        snapshot = build_lifecycle_snapshot(_make_signals(), NOW)
        assert is_snapshot_recent(snapshot, NOW + timedelta(hours=1), timedelta(days=1))
        assert not is_snapshot_recent(snapshot, NOW + timedelta(days=2), timedelta(days=1))
