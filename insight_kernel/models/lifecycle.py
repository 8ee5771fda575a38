"""Lifecycle classification — derived, never authoritative."""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Union

from insight_kernel.boundary import DiagnosticModel
from insight_kernel.models.analytics import FatigueSeverity
from insight_kernel.models.cta import SubscriptionStatus


class LifecycleState(str, Enum):
    """Declared in resolution order; the first matching state wins."""
    CHURNED = "CHURNED"
    DORMANT = "DORMANT"
    AT_RISK = "AT_RISK"
    POWER_USER = "POWER_USER"
    ACTIVE = "ACTIVE"
    ACTIVATING = "ACTIVATING"
    ONBOARDING = "ONBOARDING"
    NEW_USER = "NEW_USER"


class ConfidenceLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SignalBucket(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    UNKNOWN = "unknown"         # Missing or invalid; distinct from zero


class LifecycleSignalInput(DiagnosticModel):
    """Raw signals. Every field is optional; absent means unknown."""
    days_since_first_seen: Optional[float] = None
    days_since_last_activity: Optional[float] = None
    total_exposures: Optional[float] = None
    total_interactions: Optional[float] = None
    dismissal_count: Optional[float] = None
    dismissed_as_annoying: Optional[bool] = None
    fatigue_severity: Optional[FatigueSeverity] = None
    has_compliance_flags: Optional[bool] = None
    subscription_status: Optional[SubscriptionStatus] = None


class SignalUsed(DiagnosticModel):
    name: str
    value: Union[float, bool, str]
    bucket: Optional[SignalBucket] = None


class LifecycleSnapshot(DiagnosticModel):
    state: LifecycleState
    confidence: ConfidenceLevel
    description: str
    signals_used: List[SignalUsed] = []
    signals_missing: List[str] = []
    normalized_signals: Dict[str, SignalBucket] = {}
    computed_at: datetime
    lifecycle_version: str = "v1"
    analytics_version: str = "v1"
    governance_version: str = "v1"
