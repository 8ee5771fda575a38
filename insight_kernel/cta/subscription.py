"""Subscription predicates used by CTA intent resolution."""

from datetime import datetime

from insight_kernel.insights.cooldown import as_utc
from insight_kernel.models.cta import Subscription, SubscriptionStatus


def needs_payment_attention(subscription: Subscription) -> bool:
    return subscription.status == SubscriptionStatus.PAST_DUE


def can_access_paid_features(subscription: Subscription) -> bool:
    return subscription.status in (SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIALING)


def is_read_only(subscription: Subscription) -> bool:
    return subscription.status in (
        SubscriptionStatus.EXPIRED,
        SubscriptionStatus.CANCELLED,
        SubscriptionStatus.PAST_DUE,
    )


def is_active(subscription: Subscription) -> bool:
    return subscription.status == SubscriptionStatus.ACTIVE


def is_trial(subscription: Subscription) -> bool:
    return subscription.status == SubscriptionStatus.TRIALING


def has_trial_expired(subscription: Subscription, now: datetime) -> bool:
    if subscription.trial_ends_at is None:
        return False
    return as_utc(subscription.trial_ends_at) < as_utc(now)


def has_period_ended(subscription: Subscription, now: datetime) -> bool:
    if subscription.current_period_end is None:
        return False
    return as_utc(subscription.current_period_end) < as_utc(now)
