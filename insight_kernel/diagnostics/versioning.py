"""Version tags for diagnostic artifacts and their compatibility matrix."""

from typing import Dict, List

GOVERNANCE_VERSION = "v1"
ANALYTICS_VERSION = "v1"
LIFECYCLE_VERSION = "v1"
ADMIN_VERSION = "v1"

COMPATIBLE_VERSIONS: Dict[str, List[str]] = {
    "governance": ["v1"],
    "analytics": ["v1"],
    "lifecycle": ["v1"],
}


def is_governance_compatible(version: str) -> bool:
    return version in COMPATIBLE_VERSIONS["governance"]


def is_analytics_compatible(version: str) -> bool:
    return version in COMPATIBLE_VERSIONS["analytics"]


def is_lifecycle_compatible(version: str) -> bool:
    return version in COMPATIBLE_VERSIONS["lifecycle"]


def validate_all_versions(
    governance_version: str,
    analytics_version: str,
    lifecycle_version: str,
) -> bool:
    return (
        is_governance_compatible(governance_version)
        and is_analytics_compatible(analytics_version)
        and is_lifecycle_compatible(lifecycle_version)
    )


def get_version_summary() -> dict:
    return {
        "admin": ADMIN_VERSION,
        "governance": GOVERNANCE_VERSION,
        "analytics": ANALYTICS_VERSION,
        "lifecycle": LIFECYCLE_VERSION,
        "compatible": {layer: list(versions) for layer, versions in COMPATIBLE_VERSIONS.items()},
    }
