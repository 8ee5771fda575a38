"""
CTA Contract Builder — intent in, complete rendering contract out.

Behavioral Contract:
- Every intent maps to exactly one copy pair and one action descriptor
- `visible` is derived from the intent and never set by callers
- Adding a CTAIntent member fails type checking until every branch handles it
"""

from typing import Dict, Optional

from typing_extensions import assert_never

from insight_kernel.boundary import decision_path
from insight_kernel.models.cta import (
    CTAAction,
    CTAActionKind,
    CTAContract,
    CTACopy,
    CTAIntent,
    CTASurface,
    SurfaceConfig,
)

SUPPORT_EMAIL = "support@example.com"
BILLING_ROUTE = "/billing"
UPGRADE_MODAL = "upgrade-modal"

SURFACE_CONFIGS: Dict[CTASurface, SurfaceConfig] = {
    CTASurface.DASHBOARD_BANNER: SurfaceConfig(
        surface=CTASurface.DASHBOARD_BANNER,
        display_priority=1,
        allows_helper=True,
        max_width="100%",
        analytics_context="dashboard",
    ),
    CTASurface.BILLING_ALERT: SurfaceConfig(
        surface=CTASurface.BILLING_ALERT,
        display_priority=2,
        allows_helper=True,
        max_width="600px",
        analytics_context="billing",
    ),
    CTASurface.PRODUCT_GATE: SurfaceConfig(
        surface=CTASurface.PRODUCT_GATE,
        display_priority=3,
        allows_helper=True,
        max_width="400px",
        analytics_context="product_gate",
    ),
    CTASurface.EMPTY_STATE: SurfaceConfig(
        surface=CTASurface.EMPTY_STATE,
        display_priority=4,
        allows_helper=False,
        max_width="300px",
        analytics_context="empty_state",
    ),
}


def resolve_copy(intent: CTAIntent) -> CTACopy:
    if intent is CTAIntent.NONE:
        return CTACopy(label_key="common.ok")
    elif intent is CTAIntent.UPGRADE:
        return CTACopy(label_key="cta.upgrade.label", helper_key="cta.upgrade.helper")
    elif intent is CTAIntent.PAY_NOW:
        return CTACopy(label_key="cta.pay_now.label", helper_key="cta.pay_now.helper")
    elif intent is CTAIntent.FIX_LIMIT:
        return CTACopy(label_key="cta.fix_limit.label", helper_key="cta.fix_limit.helper")
    elif intent is CTAIntent.CONTACT_SUPPORT:
        return CTACopy(
            label_key="cta.contact_support.label",
            helper_key="cta.contact_support.helper",
        )
    else:
        assert_never(intent)


def resolve_action(intent: CTAIntent) -> CTAAction:
    if intent is CTAIntent.NONE:
        return CTAAction(kind=CTAActionKind.NONE)
    elif intent is CTAIntent.UPGRADE:
        return CTAAction(
            kind=CTAActionKind.ROUTE,
            target=BILLING_ROUTE,
            metadata={"source": "cta_upgrade"},
        )
    elif intent is CTAIntent.PAY_NOW:
        return CTAAction(
            kind=CTAActionKind.ROUTE,
            target=BILLING_ROUTE,
            metadata={"source": "cta_pay_now", "action": "update_payment"},
        )
    elif intent is CTAIntent.FIX_LIMIT:
        return CTAAction(
            kind=CTAActionKind.MODAL,
            target=UPGRADE_MODAL,
            metadata={"source": "cta_fix_limit", "reason": "limit_exceeded"},
        )
    elif intent is CTAIntent.CONTACT_SUPPORT:
        return CTAAction(
            kind=CTAActionKind.EXTERNAL,
            target=f"mailto:{SUPPORT_EMAIL}",
            metadata={"source": "cta_contact_support"},
        )
    else:
        assert_never(intent)


@decision_path("build_contract")
def build_contract(intent: CTAIntent) -> CTAContract:
    intent = CTAIntent(intent)
    return CTAContract(
        intent=intent,
        copy_keys=resolve_copy(intent),
        action=resolve_action(intent),
    )


def surface_config(surface: CTASurface) -> SurfaceConfig:
    return SURFACE_CONFIGS[CTASurface(surface)]


@decision_path("build_surface_contract")
def build_surface_contract(intent: CTAIntent, surface: Optional[CTASurface] = None) -> CTAContract:
    """Contract adjusted for a surface that cannot render helper text."""
    contract = build_contract(intent)
    if surface is None or surface_config(surface).allows_helper:
        return contract
    return contract.model_copy(
        update={"copy_keys": CTACopy(label_key=contract.copy_keys.label_key)}
    )
