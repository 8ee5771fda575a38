"""
Cooldown Evaluator — show/hide decision for one candidate insight.

Checks run in a fixed order and the first match wins:
  1. never dismissed/snoozed -> show (first_time)
  2. snoozed_until > now    -> hide  (snoozed)
  3. shown today >= cap     -> hide  (frequency_capped)
  4. priority < last_sev    -> show  (severity_escalated, bypasses cooldown)
  5. cooldown_until > now   -> hide  (cooldown_active)
  6. otherwise              -> show  (cooldown_expired)

Every function takes `now` from the caller; nothing here reads the clock.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from insight_kernel.boundary import decision_path
from insight_kernel.models.config import CooldownPolicy
from insight_kernel.models.cooldown import CooldownDecision, CooldownState
from insight_kernel.models.insight import DecisionReason, Insight

COOLDOWN_LADDER_DAYS: List[int] = [1, 3, 7, 30]

_DEFAULT_POLICY = CooldownPolicy()


def as_utc(value: datetime) -> datetime:
    """Aware UTC datetime; naive values are taken to already be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _utc_date(value: datetime):
    return as_utc(value).date()


def _same_utc_day(a: datetime, b: datetime) -> bool:
    return _utc_date(a) == _utc_date(b)


def cooldown_days_for(dismiss_count: int, ladder: Optional[List[int]] = None) -> int:
    """Cooldown length after the `dismiss_count`-th dismissal (1-based)."""
    ladder = ladder or COOLDOWN_LADDER_DAYS
    index = min(max(dismiss_count - 1, 0), len(ladder) - 1)
    return ladder[index]


@decision_path("evaluate_cooldown")
def evaluate_cooldown(
    insight: Insight,
    state: Optional[CooldownState],
    now: datetime,
    policy: Optional[CooldownPolicy] = None,
) -> CooldownDecision:
    policy = policy or _DEFAULT_POLICY

    if state is None or (state.dismissed_at is None and state.snoozed_until is None):
        return CooldownDecision(should_show=True, reason=DecisionReason.FIRST_TIME)

    if state.snoozed_until and as_utc(state.snoozed_until) > as_utc(now):
        return CooldownDecision(should_show=False, reason=DecisionReason.SNOOZED)

    if (
        state.last_shown_at
        and _same_utc_day(state.last_shown_at, now)
        and state.shown_count_today >= policy.max_shows_per_day
    ):
        return CooldownDecision(should_show=False, reason=DecisionReason.FREQUENCY_CAPPED)

    if state.last_severity is not None and insight.priority < state.last_severity:
        return CooldownDecision(should_show=True, reason=DecisionReason.SEVERITY_ESCALATED)

    if state.cooldown_until and as_utc(state.cooldown_until) > as_utc(now):
        return CooldownDecision(should_show=False, reason=DecisionReason.COOLDOWN_ACTIVE)

    return CooldownDecision(should_show=True, reason=DecisionReason.COOLDOWN_EXPIRED)


def compute_dismiss_state(
    previous: Optional[CooldownState],
    priority: int,
    now: datetime,
    policy: Optional[CooldownPolicy] = None,
) -> CooldownState:
    """
    State after a dismissal. Only this transition replaces `cooldown_until`;
    snooze and shown counters carry over unchanged.
    """
    policy = policy or _DEFAULT_POLICY
    previous = previous or CooldownState()

    dismiss_count = previous.dismiss_count + 1
    cooldown_days = cooldown_days_for(dismiss_count, policy.ladder_days)
    last_severity = (
        priority if previous.last_severity is None else min(previous.last_severity, priority)
    )

    return previous.model_copy(
        update={
            "dismissed_at": now,
            "dismiss_count": dismiss_count,
            "cooldown_until": now + timedelta(days=cooldown_days),
            "last_severity": last_severity,
        }
    )


def compute_snooze_state(
    previous: Optional[CooldownState],
    snooze_days: int,
    now: datetime,
    policy: Optional[CooldownPolicy] = None,
) -> CooldownState:
    policy = policy or _DEFAULT_POLICY
    if snooze_days not in policy.snooze_options_days:
        raise ValueError(
            f"Unsupported snooze duration {snooze_days}d, expected one of {policy.snooze_options_days}"
        )
    previous = previous or CooldownState()
    return previous.model_copy(update={"snoozed_until": now + timedelta(days=snooze_days)})


def compute_shown_state(previous: Optional[CooldownState], now: datetime) -> CooldownState:
    """Advance the daily frequency counter after an insight is rendered."""
    previous = previous or CooldownState()
    if previous.last_shown_at and _same_utc_day(previous.last_shown_at, now):
        shown_count_today = previous.shown_count_today + 1
    else:
        shown_count_today = 1
    return previous.model_copy(
        update={"last_shown_at": now, "shown_count_today": shown_count_today}
    )
