"""
CTA Intent Resolver — the single next action we want the user to take.

Fixed priority chain, first match wins:
  1. payment attention required  -> PAY_NOW
  2. unknown error               -> CONTACT_SUPPORT
  3. usage limit reached         -> FIX_LIMIT
  4. feature locked              -> UPGRADE
  5. denied without paid access  -> UPGRADE
  6. otherwise                   -> NONE
"""

from typing import Optional, Union

from insight_kernel.boundary import decision_path
from insight_kernel.cta.subscription import can_access_paid_features, needs_payment_attention
from insight_kernel.models.cta import (
    CapabilityResult,
    CTAIntent,
    NormalizedError,
    Subscription,
)


def normalize_capability(
    capability_result: Optional[Union[bool, CapabilityResult, str]],
) -> Optional[CapabilityResult]:
    if capability_result is None:
        return None
    if isinstance(capability_result, bool):
        return CapabilityResult.GRANTED if capability_result else CapabilityResult.DENIED
    return CapabilityResult(capability_result)


@decision_path("resolve_intent")
def resolve_intent(
    subscription: Subscription,
    capability_result: Optional[Union[bool, CapabilityResult, str]] = None,
    error: Optional[NormalizedError] = None,
) -> CTAIntent:
    capability = normalize_capability(capability_result)
    error = NormalizedError(error) if error is not None else None

    if needs_payment_attention(subscription) or error == NormalizedError.PAYMENT_REQUIRED:
        return CTAIntent.PAY_NOW

    if error == NormalizedError.UNKNOWN:
        return CTAIntent.CONTACT_SUPPORT

    if capability == CapabilityResult.LIMIT_REACHED or error == NormalizedError.LIMIT_EXCEEDED:
        return CTAIntent.FIX_LIMIT

    if capability == CapabilityResult.FEATURE_LOCKED:
        return CTAIntent.UPGRADE

    if capability == CapabilityResult.DENIED and not can_access_paid_features(subscription):
        return CTAIntent.UPGRADE

    return CTAIntent.NONE
