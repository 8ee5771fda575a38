"""Tests for CTA analytics, fatigue signals and compliance flags."""

from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError

from insight_kernel.diagnostics import compliance, fatigue
from insight_kernel.diagnostics.analytics import (
    aggregate_action_stats,
    aggregate_dismissal_stats,
    aggregate_exposure_stats,
    build_analytics_snapshot,
    build_trend_report,
    calculate_percentage_change,
    calculate_trend,
    create_time_window,
)
from insight_kernel.models.analytics import (
    ComplianceFlagType,
    ComplianceSeverity,
    FatigueSeverity,
    TrendDirection,
)
from insight_kernel.models.cta import CTAIntent, CTASurface
from insight_kernel.models.governance import DismissReason, LastAction, MemoryRecord

NOW = datetime(2025, 3, 10, 12, 0, 0)
WINDOW = create_time_window(NOW - timedelta(days=7), NOW)


def _make_record(**overrides) -> MemoryRecord:
    values = {
        "user_id": "user_1",
        "intent": CTAIntent.UPGRADE,
        "surface": CTASurface.DASHBOARD_BANNER,
        "first_seen_at": NOW - timedelta(days=3),
        "last_seen_at": NOW - timedelta(days=1),
        "exposure_count": 1,
        "a11y_contract_version": "v1",
    }
    values.update(overrides)
    return MemoryRecord(**values)


class TestTimeWindow:
    def test_duration(self):
        window = create_time_window(NOW - timedelta(seconds=2), NOW)
        assert window.duration_ms == 2000

    def test_end_before_start_is_rejected(self):
        with pytest.raises(ValidationError):
            create_time_window(NOW, NOW - timedelta(days=1))


class TestAggregation:
    def setup_method(self):
        self.records = [
            _make_record(user_id="a", exposure_count=4, last_action=LastAction.CLICKED),
            _make_record(
                user_id="a",
                intent=CTAIntent.PAY_NOW,
                surface=CTASurface.BILLING_ALERT,
                exposure_count=2,
                last_action=LastAction.DISMISSED,
                dismissed=True,
                dismiss_reason=DismissReason.LATER,
            ),
            _make_record(user_id="b", exposure_count=3),
            _make_record(user_id="c", exposure_count=9, last_seen_at=NOW - timedelta(days=30)),
        ]

    def test_exposure_stats(self):
        stats = aggregate_exposure_stats(self.records, WINDOW)
        assert stats.total_exposures == 9
        assert stats.unique_users == 2
        assert stats.avg_exposures_per_user == 4.5
        assert stats.by_intent[CTAIntent.UPGRADE] == 7
        assert stats.by_surface[CTASurface.BILLING_ALERT] == 2
        assert stats.by_intent[CTAIntent.FIX_LIMIT] == 0

    def test_action_stats(self):
        stats = aggregate_action_stats(self.records, WINDOW)
        assert stats.total_clicks == 1
        assert stats.total_dismissals == 1
        assert stats.total_no_action == 1
        assert stats.click_rate == pytest.approx(1 / 3)
        assert stats.by_intent[CTAIntent.PAY_NOW].dismissals == 1

    def test_dismissal_stats(self):
        stats = aggregate_dismissal_stats(self.records, WINDOW)
        assert stats.total == 1
        assert stats.by_reason["later"] == 1
        assert stats.percentage_by_reason["later"] == 1.0
        assert stats.avg_exposures_before_dismissal == 2

    def test_empty_window_has_zero_rates(self):
        stats = aggregate_action_stats([], WINDOW)
        assert stats.click_rate == 0.0
        assert aggregate_exposure_stats([], WINDOW).avg_exposures_per_user == 0.0

    def test_window_bounds_are_inclusive(self):
        edge = _make_record(last_seen_at=WINDOW.end)
        assert aggregate_exposure_stats([edge], WINDOW).total_exposures == 1

    def test_records_without_user_count_separately(self):
        records = [_make_record(user_id=None), _make_record(user_id=None)]
        assert aggregate_exposure_stats(records, WINDOW).unique_users == 2


class TestTrends:
    def test_direction(self):
        assert calculate_trend(2, 1) == TrendDirection.UP
        assert calculate_trend(1, 2) == TrendDirection.DOWN
        assert calculate_trend(1, 1) == TrendDirection.FLAT

    def test_percentage_change(self):
        assert calculate_percentage_change(15, 10) == 0.5
        assert calculate_percentage_change(5, 0) == 1.0
        assert calculate_percentage_change(0, 0) == 0.0

    def test_trend_report(self):
        previous = create_time_window(NOW - timedelta(days=14), NOW - timedelta(days=7, seconds=1))
        records = [
            _make_record(exposure_count=4),
            _make_record(exposure_count=2, last_seen_at=NOW - timedelta(days=10)),
        ]
        report = build_trend_report(records, WINDOW, previous)
        assert report.exposures == TrendDirection.UP
        assert report.exposure_change == 1.0


class TestFatigue:
    @pytest.mark.parametrize(
        "count,expected",
        [
            (2, FatigueSeverity.NONE),
            (3, FatigueSeverity.LOW),
            (6, FatigueSeverity.MODERATE),
            (15, FatigueSeverity.HIGH),
            (21, FatigueSeverity.CRITICAL),
        ],
    )
    def test_severity_by_exposure(self, count, expected):
        assert fatigue.calculate_fatigue_severity(_make_record(exposure_count=count)) == expected

    def test_interaction_clears_fatigue(self):
        record = _make_record(exposure_count=15, last_action=LastAction.CLICKED)
        assert fatigue.calculate_fatigue_severity(record) == FatigueSeverity.NONE

    def test_annoying_is_critical(self):
        record = _make_record(
            exposure_count=1,
            last_action=LastAction.DISMISSED,
            dismiss_reason=DismissReason.ANNOYING,
        )
        assert fatigue.calculate_fatigue_severity(record) == FatigueSeverity.CRITICAL

    def test_summary(self):
        signals = fatigue.generate_fatigue_signals(
            [_make_record(exposure_count=1), _make_record(exposure_count=8)], NOW
        )
        summary = fatigue.get_fatigue_summary(signals)
        assert summary.total_users == 2
        assert summary.fatigued_count == 1
        assert summary.percentage_fatigued == 0.5
        assert summary.avg_days_active == 3
        assert summary.by_severity[FatigueSeverity.MODERATE] == 1

    def test_empty_summary(self):
        summary = fatigue.get_fatigue_summary([])
        assert summary.total_users == 0
        assert summary.percentage_fatigued == 0.0


class TestCompliance:
    def test_clean_record_is_not_flagged(self):
        assert compliance.generate_compliance_flag(_make_record(), NOW) is None

    def test_missing_a11y_contract(self):
        flag = compliance.generate_compliance_flag(_make_record(a11y_contract_version=None), NOW)
        assert flag.flags == [ComplianceFlagType.ACCESSIBILITY_RISK]
        assert flag.severity == ComplianceSeverity.LOW

    def test_repeated_pressure_is_high(self):
        flag = compliance.generate_compliance_flag(_make_record(exposure_count=12), NOW)
        assert flag.flags == [ComplianceFlagType.REPEATED_PRESSURE]
        assert flag.severity == ComplianceSeverity.HIGH

    def test_old_heavy_exposure_is_excessive_only(self):
        record = _make_record(exposure_count=16, first_seen_at=NOW - timedelta(days=20))
        flag = compliance.generate_compliance_flag(record, NOW)
        assert flag.flags == [ComplianceFlagType.EXCESSIVE_EXPOSURE]

    def test_ignored_dismissal_is_critical(self):
        record = _make_record(
            last_action=LastAction.DISMISSED,
            dismissed=True,
            dismissed_at=NOW - timedelta(days=2),
        )
        flag = compliance.generate_compliance_flag(record, NOW)
        assert ComplianceFlagType.IGNORED_DISMISSAL in flag.flags
        assert flag.severity == ComplianceSeverity.CRITICAL
        assert flag.evidence.dismissal_count == 1

    def test_dark_pattern(self):
        record = _make_record(exposure_count=6, dismiss_reason=DismissReason.ANNOYING)
        flag = compliance.generate_compliance_flag(record, NOW)
        assert ComplianceFlagType.DARK_PATTERN_RISK in flag.flags
        assert flag.severity == ComplianceSeverity.CRITICAL

    def test_summary_and_filter(self):
        flags = compliance.generate_compliance_flags(
            [
                _make_record(),
                _make_record(a11y_contract_version=None),
                _make_record(exposure_count=6, dismiss_reason=DismissReason.ANNOYING),
            ],
            NOW,
        )
        assert len(flags) == 2
        summary = compliance.get_compliance_summary(flags)
        assert summary.critical_count == 1
        assert summary.requires_immediate_review
        assert summary.by_flag[ComplianceFlagType.ACCESSIBILITY_RISK] == 1
        assert len(compliance.filter_by_severity(flags, ComplianceSeverity.HIGH)) == 1


class TestSnapshot:
    def test_bundles_every_view(self):
        records = [_make_record(exposure_count=8, a11y_contract_version=None)]
        snapshot = build_analytics_snapshot(records, WINDOW, NOW)
        assert snapshot.analytics_version == "v1"
        assert snapshot.exposure_stats.total_exposures == 8
        assert len(snapshot.fatigue_signals) == 1
        assert len(snapshot.compliance_flags) == 1
        assert snapshot.snapshot_at == NOW
