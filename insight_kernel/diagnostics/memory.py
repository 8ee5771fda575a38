"""
Governance Memory — exposure ledger for CTAs, per user×intent×surface.

Observes what was shown and how the user reacted. Nothing here feeds back
into intent resolution or contract building.

Behavioral Contract:
- Updates are pure: each returns a new MemoryRecord
- Risk flags are descriptive; they never suppress or alter a CTA
- Every entry point refuses to run inside a decision path
"""

from datetime import datetime, timedelta
from typing import List, Optional

from insight_kernel.boundary import diagnostic_entry
from insight_kernel.diagnostics.versioning import GOVERNANCE_VERSION, is_governance_compatible
from insight_kernel.models.config import DiagnosticThresholds
from insight_kernel.models.cta import CTAIntent, CTASurface
from insight_kernel.models.governance import (
    DismissReason,
    GovernanceSnapshot,
    LastAction,
    MemoryRecord,
    RiskFlag,
)

_DEFAULT_THRESHOLDS = DiagnosticThresholds()

# Flags that put a snapshot in front of a human reviewer
_REVIEW_FLAGS = (
    RiskFlag.EXCESSIVE_EXPOSURE,
    RiskFlag.USER_FATIGUE,
    RiskFlag.HIGH_DISMISSAL_RATE,
    RiskFlag.IGNORED_DISMISSAL,
)


# ---------------------------------------------------------------------------
# Ledger updates
# ---------------------------------------------------------------------------

@diagnostic_entry("create_initial_memory")
def create_initial_memory(
    intent: CTAIntent,
    surface: CTASurface,
    now: datetime,
    user_id: Optional[str] = None,
    experiment_id: Optional[str] = None,
    a11y_contract_version: Optional[str] = None,
) -> MemoryRecord:
    return MemoryRecord(
        user_id=user_id,
        intent=intent,
        surface=surface,
        first_seen_at=now,
        last_seen_at=now,
        exposure_count=1,
        experiment_id=experiment_id,
        a11y_contract_version=a11y_contract_version,
        governance_version=GOVERNANCE_VERSION,
    )


@diagnostic_entry("record_exposure")
def record_exposure(record: MemoryRecord, now: datetime) -> MemoryRecord:
    return record.model_copy(
        update={"exposure_count": record.exposure_count + 1, "last_seen_at": now}
    )


@diagnostic_entry("record_action")
def record_action(record: MemoryRecord, action: LastAction, now: datetime) -> MemoryRecord:
    return record.model_copy(update={"last_action": LastAction(action), "last_seen_at": now})


@diagnostic_entry("record_dismissal")
def record_dismissal(
    record: MemoryRecord,
    reason: DismissReason,
    now: datetime,
) -> MemoryRecord:
    return record.model_copy(
        update={
            "last_action": LastAction.DISMISSED,
            "dismissed": True,
            "dismissed_at": now,
            "dismiss_reason": DismissReason(reason),
            "last_seen_at": now,
        }
    )


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def get_exposure_count(record: MemoryRecord) -> int:
    return record.exposure_count


def has_interacted(record: MemoryRecord) -> bool:
    return record.last_action is not None


def was_dismissed(record: MemoryRecord) -> bool:
    return record.dismissed


def time_since_first_exposure(record: MemoryRecord, now: datetime) -> timedelta:
    return now - record.first_seen_at


def time_since_last_exposure(record: MemoryRecord, now: datetime) -> timedelta:
    return now - record.last_seen_at


def is_memory_compatible(record: MemoryRecord) -> bool:
    return is_governance_compatible(record.governance_version)


# ---------------------------------------------------------------------------
# Audit
# ---------------------------------------------------------------------------

def has_excessive_exposure(record: MemoryRecord, threshold: int) -> bool:
    return record.exposure_count > threshold


def is_user_fatigued(record: MemoryRecord, threshold: int = 5) -> bool:
    return record.exposure_count >= threshold and record.last_action is None


def is_dismissed_as_annoying(record: MemoryRecord) -> bool:
    return record.dismiss_reason == DismissReason.ANNOYING


def has_ignored_dismissal(record: MemoryRecord) -> bool:
    return (
        record.dismissed
        and record.dismissed_at is not None
        and record.last_seen_at > record.dismissed_at
    )


@diagnostic_entry("generate_risk_flags")
def generate_risk_flags(
    record: MemoryRecord,
    thresholds: Optional[DiagnosticThresholds] = None,
) -> List[RiskFlag]:
    thresholds = thresholds or _DEFAULT_THRESHOLDS
    flags: List[RiskFlag] = []

    if has_excessive_exposure(record, thresholds.excessive_exposure):
        flags.append(RiskFlag.EXCESSIVE_EXPOSURE)
    if is_user_fatigued(record, thresholds.fatigue_exposure):
        flags.append(RiskFlag.USER_FATIGUE)
    if record.exposure_count >= thresholds.low_engagement_exposure and record.last_action is None:
        flags.append(RiskFlag.LOW_ENGAGEMENT)
    if is_dismissed_as_annoying(record):
        flags.append(RiskFlag.HIGH_DISMISSAL_RATE)
    if has_ignored_dismissal(record):
        flags.append(RiskFlag.IGNORED_DISMISSAL)

    return flags


def needs_human_review(snapshot: GovernanceSnapshot) -> bool:
    return any(flag in snapshot.risk_flags for flag in _REVIEW_FLAGS)


@diagnostic_entry("create_governance_snapshot")
def create_governance_snapshot(
    record: MemoryRecord,
    thresholds: Optional[DiagnosticThresholds] = None,
) -> GovernanceSnapshot:
    flags = generate_risk_flags(record, thresholds)
    return GovernanceSnapshot(
        user_id=record.user_id,
        intent=record.intent,
        surface=record.surface,
        exposure_count=record.exposure_count,
        last_action=record.last_action,
        dismissed=record.dismissed,
        risk_flags=flags,
        needs_human_review=any(flag in flags for flag in _REVIEW_FLAGS),
        governance_version=record.governance_version,
    )
