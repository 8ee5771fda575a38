"""Tests for the one-way boundary between decision and diagnostic code."""

import ast
from datetime import datetime
from pathlib import Path

import pytest

from insight_kernel.boundary import (
    DiagnosticModel,
    IsolationViolation,
    current_decision_scope,
    decision_path,
    decision_scope,
    diagnostic_entry,
)
from insight_kernel.cta.contract import build_contract
from insight_kernel.cta.intent import resolve_intent
from insight_kernel.diagnostics.lifecycle import build_lifecycle_snapshot
from insight_kernel.diagnostics.memory import create_initial_memory
from insight_kernel.insights.pipeline import run
from insight_kernel.insights.rules import DEFAULT_RULES, RuleSet
from insight_kernel.models.cta import CTAIntent, CTASurface, Subscription, SubscriptionStatus
from insight_kernel.models.lifecycle import LifecycleSignalInput

NOW = datetime(2025, 3, 10, 12, 0, 0)
PACKAGE_ROOT = Path(__file__).resolve().parent.parent / "insight_kernel"

METRICS = {
    "todayRevenue": 0,
    "totalRevenue": 0,
    "bestSellingProduct": None,
    "failedPayments7d": 0,
    "refundedAmount7d": 0,
}


def _imported_modules(path: Path) -> set:
    tree = ast.parse(path.read_text())
    modules = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            modules.update(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module:
            modules.add(node.module)
    return modules


def _package_files(*subpackages: str):
    for sub in subpackages:
        yield from sorted((PACKAGE_ROOT / sub).glob("*.py"))


class TestDecorators:
    def test_scope_is_set_and_reset(self):
        seen = []

        @decision_path("sample")
        def sample():
            seen.append(current_decision_scope())

        assert current_decision_scope() is None
        sample()
        assert seen == ["sample"]
        assert current_decision_scope() is None

    def test_scope_reset_after_exception(self):
        @decision_path("boom")
        def boom():
            raise KeyError("x")

        with pytest.raises(KeyError):
            boom()
        assert current_decision_scope() is None

    def test_diagnostic_entry_outside_scope_runs(self):
        @diagnostic_entry("observe")
        def observe(value):
            return value * 2

        assert observe(2) == 4

    def test_diagnostic_entry_inside_scope_raises(self):
        @diagnostic_entry("observe")
        def observe():
            return True

        with decision_scope("resolve_intent"):
            with pytest.raises(IsolationViolation, match="observe"):
                observe()

    def test_decision_path_rejects_diagnostic_args(self):
        class Observation(DiagnosticModel):
            value: int = 0

        @decision_path("decide")
        def decide(*args, **kwargs):
            return True

        with pytest.raises(IsolationViolation):
            decide(Observation())
        with pytest.raises(IsolationViolation):
            decide(items=[Observation()])
        with pytest.raises(IsolationViolation):
            decide(items={"a": Observation()})
        with pytest.raises(IsolationViolation):
            decide(items={Observation()})
        with pytest.raises(IsolationViolation):
            decide(items=(p for p in [Observation()]))
        with pytest.raises(IsolationViolation):
            decide(nested=[{"inner": (Observation(),)}])
        assert decide(1, items=[2], labels={"a": "b"}, name="x") is True


class TestRealEntryPoints:
    def test_memory_update_inside_decision_scope_raises(self):
        with decision_scope("build_contract"):
            with pytest.raises(IsolationViolation):
                create_initial_memory(CTAIntent.UPGRADE, CTASurface.DASHBOARD_BANNER, NOW)

    def test_lifecycle_inside_decision_scope_raises(self):
        with decision_scope("run"):
            with pytest.raises(IsolationViolation):
                build_lifecycle_snapshot(LifecycleSignalInput(), NOW)

    def test_resolve_intent_rejects_memory_record(self):
        record = create_initial_memory(CTAIntent.UPGRADE, CTASurface.DASHBOARD_BANNER, NOW)
        sub = Subscription(status=SubscriptionStatus.FREE)
        with pytest.raises(IsolationViolation):
            resolve_intent(sub, record)

    def test_run_rejects_diagnostic_states(self):
        record = create_initial_memory(CTAIntent.UPGRADE, CTASurface.DASHBOARD_BANNER, NOW)
        with pytest.raises(IsolationViolation):
            run(METRICS, [record], NOW)

    def test_rule_reaching_diagnostics_aborts_run(self, caplog):
        def leaky_rule(metrics):
            create_initial_memory(CTAIntent.UPGRADE, CTASurface.DASHBOARD_BANNER, NOW)
            return None

        rule_set = RuleSet(DEFAULT_RULES + [leaky_rule])
        with pytest.raises(IsolationViolation):
            run(METRICS, [], NOW, rule_set=rule_set)
        assert "failed, skipping" not in caplog.text

    def test_decisions_unchanged_by_diagnostics(self):
        sub = Subscription(status=SubscriptionStatus.FREE)
        before = build_contract(resolve_intent(sub, False))
        record = create_initial_memory(CTAIntent.UPGRADE, CTASurface.DASHBOARD_BANNER, NOW)
        build_lifecycle_snapshot(LifecycleSignalInput(total_exposures=record.exposure_count), NOW)
        assert build_contract(resolve_intent(sub, False)) == before


class TestImportGraph:
    def test_decision_modules_never_import_diagnostics(self):
        for path in _package_files("insights", "cta", "state"):
            for module in _imported_modules(path):
                assert not module.startswith("insight_kernel.diagnostics"), path.name

    def test_diagnostics_never_import_decision_modules(self):
        forbidden = ("insight_kernel.insights", "insight_kernel.cta", "insight_kernel.state")
        for path in _package_files("diagnostics"):
            for module in _imported_modules(path):
                assert not module.startswith(forbidden), f"{path.name} imports {module}"
