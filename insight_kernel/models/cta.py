"""Call-to-action models — subscription input, intent, and the rendered contract."""

from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, computed_field


class SubscriptionStatus(str, Enum):
    FREE = "free"
    TRIALING = "trialing"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class CapabilityResult(str, Enum):
    """Outcome of a capability check. Plain booleans map to GRANTED/DENIED."""
    GRANTED = "granted"
    DENIED = "denied"
    LIMIT_REACHED = "limit_reached"
    FEATURE_LOCKED = "feature_locked"


class NormalizedError(str, Enum):
    PAYMENT_REQUIRED = "payment_required"
    LIMIT_EXCEEDED = "limit_exceeded"
    UNKNOWN = "unknown"


class CTAIntent(str, Enum):
    """Declared in ascending priority; PAY_NOW outranks everything."""
    NONE = "NONE"
    UPGRADE = "UPGRADE"
    FIX_LIMIT = "FIX_LIMIT"
    CONTACT_SUPPORT = "CONTACT_SUPPORT"
    PAY_NOW = "PAY_NOW"


class CTAActionKind(str, Enum):
    ROUTE = "route"
    MODAL = "modal"
    EXTERNAL = "external"
    NONE = "none"


class CTASurface(str, Enum):
    DASHBOARD_BANNER = "dashboard_banner"
    BILLING_ALERT = "billing_alert"
    PRODUCT_GATE = "product_gate"
    EMPTY_STATE = "empty_state"


class Subscription(BaseModel):
    status: SubscriptionStatus
    started_at: Optional[datetime] = None
    trial_ends_at: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None


class CTACopy(BaseModel):
    """Translation keys only; string resolution happens in the presentation layer."""

    model_config = ConfigDict(frozen=True)

    label_key: str
    helper_key: Optional[str] = None


class CTAAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: CTAActionKind
    target: Optional[str] = None
    metadata: Dict[str, str] = {}


class CTAContract(BaseModel):
    """The single source of truth a presentation layer may consume."""

    model_config = ConfigDict(frozen=True)

    intent: CTAIntent
    copy_keys: CTACopy
    action: CTAAction

    @computed_field
    @property
    def visible(self) -> bool:
        return self.intent != CTAIntent.NONE


class SurfaceConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    surface: CTASurface
    display_priority: int               # 1 = most prominent
    allows_helper: bool
    max_width: Optional[str] = None
    analytics_context: str
