"""
Admin Export — static, human-review exports of an admin snapshot.

Behavioral Contract:
- Only json, csv and pdf_metadata are accepted
- Live targets (api, webhook, stream, realtime) are rejected with UnsafeExportError
- Every export embeds the legal disclaimer and the retention notice
"""

import csv
import io
import json
from datetime import datetime
from typing import Any, Dict, Union

from insight_kernel.boundary import diagnostic_entry
from insight_kernel.diagnostics.versioning import ADMIN_VERSION
from insight_kernel.models.admin import AdminViewSnapshot, ExportFormat, ExportMetadata

LEGAL_DISCLAIMER = (
    "DIAGNOSTIC ONLY - NOT FOR AUTOMATED DECISIONS. "
    "This data is for human review and compliance purposes only. "
    "It CANNOT and MUST NOT be used to make automated decisions, "
    "suppress CTAs, optimize conversions, or affect user experience. "
    "All interpretations require human judgment and context."
)

RETENTION_NOTICE = (
    "This snapshot contains diagnostic data for compliance and audit purposes. "
    "Retention policies must comply with applicable data protection regulations (GDPR, CCPA, etc.). "
    "Consult legal counsel for retention requirements in your jurisdiction."
)

FORBIDDEN_TARGETS = ("api", "webhook", "stream", "realtime")


class UnsafeExportError(ValueError):
    """Raised for export targets or payloads that could feed automation."""


def assert_safe_export(export_format: Union[ExportFormat, str], includes_disclaimer: bool) -> ExportFormat:
    if not includes_disclaimer:
        raise UnsafeExportError("Export must include the diagnostic disclaimer")

    target = export_format.value if isinstance(export_format, ExportFormat) else str(export_format)
    if target.lower() in FORBIDDEN_TARGETS:
        raise UnsafeExportError(f"Live export target '{target}' is forbidden; use a static format")
    try:
        return ExportFormat(target)
    except ValueError:
        raise UnsafeExportError(
            f"Unsupported export format '{target}', expected one of "
            f"{[f.value for f in ExportFormat]}"
        ) from None


def assert_confidence_displayed(payload: Dict[str, Any]) -> None:
    if "confidence" not in payload and "overall_confidence" not in payload:
        raise UnsafeExportError("Diagnostic output must display its confidence level")


def build_export_metadata(
    export_format: ExportFormat,
    snapshot: AdminViewSnapshot,
    now: datetime,
) -> ExportMetadata:
    return ExportMetadata(
        exported_at=now,
        format=export_format,
        admin_version=ADMIN_VERSION,
        governance_version=(
            snapshot.governance.governance_version if snapshot.governance else "unknown"
        ),
        analytics_version=(
            snapshot.compliance.analytics_version if snapshot.compliance else "unknown"
        ),
        lifecycle_version=(
            snapshot.lifecycle.lifecycle_version if snapshot.lifecycle else "unknown"
        ),
        disclaimer=LEGAL_DISCLAIMER,
        retention_notice=RETENTION_NOTICE,
    )


@diagnostic_entry("export_to_json")
def export_to_json(snapshot: AdminViewSnapshot, now: datetime) -> str:
    export_format = assert_safe_export(ExportFormat.JSON, includes_disclaimer=True)
    snapshot_data = snapshot.model_dump(mode="json")
    assert_confidence_displayed(snapshot_data)
    payload = {
        "_metadata": build_export_metadata(export_format, snapshot, now).model_dump(mode="json"),
        "_disclaimer": LEGAL_DISCLAIMER,
        "snapshot": snapshot_data,
    }
    return json.dumps(payload, indent=2)


@diagnostic_entry("export_to_csv")
def export_to_csv(snapshot: AdminViewSnapshot, now: datetime) -> str:
    export_format = assert_safe_export(ExportFormat.CSV, includes_disclaimer=True)
    metadata = build_export_metadata(export_format, snapshot, now)
    confidence = snapshot.overall_confidence.value

    buffer = io.StringIO()
    buffer.write(f"# {LEGAL_DISCLAIMER}\n")
    buffer.write(f"# {RETENTION_NOTICE}\n")
    buffer.write(f"# Exported: {metadata.exported_at.isoformat()}\n")
    buffer.write(f"# Admin Version: {metadata.admin_version}\n")
    buffer.write("\n")

    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["Layer", "Field", "Value", "Confidence"])

    if snapshot.governance:
        governance = snapshot.governance
        writer.writerow(["Governance", "Intent", governance.intent.value, confidence])
        writer.writerow(["Governance", "Surface", governance.surface.value, confidence])
        writer.writerow(["Governance", "Exposure Count", governance.exposure_count, confidence])
        writer.writerow(
            ["Governance", "Risk Flags", ";".join(f.value for f in governance.risk_flags), confidence]
        )

    if snapshot.compliance:
        compliance = snapshot.compliance
        writer.writerow(
            ["Compliance", "Total Exposures", compliance.exposure_stats.total_exposures, confidence]
        )
        writer.writerow(["Compliance", "Total Clicks", compliance.action_stats.total_clicks, confidence])
        writer.writerow(["Compliance", "Click Rate", compliance.action_stats.click_rate, confidence])
        writer.writerow(
            ["Compliance", "Compliance Flags", len(compliance.compliance_flags), confidence]
        )

    if snapshot.lifecycle:
        lifecycle = snapshot.lifecycle
        lifecycle_confidence = lifecycle.confidence.value
        writer.writerow(["Lifecycle", "State", lifecycle.state.value, lifecycle_confidence])
        writer.writerow(["Lifecycle", "Signals Used", len(lifecycle.signals_used), lifecycle_confidence])
        writer.writerow(
            ["Lifecycle", "Signals Missing", len(lifecycle.signals_missing), lifecycle_confidence]
        )

    if snapshot.warnings:
        buffer.write("\n# Warnings\n")
        for warning in snapshot.warnings:
            writer.writerow(["Warning", "", warning, ""])

    return buffer.getvalue()


@diagnostic_entry("export_to_pdf_metadata")
def export_to_pdf_metadata(snapshot: AdminViewSnapshot, now: datetime) -> Dict[str, Any]:
    export_format = assert_safe_export(ExportFormat.PDF_METADATA, includes_disclaimer=True)
    metadata = build_export_metadata(export_format, snapshot, now)
    overall = snapshot.overall_confidence.value

    def _dump(layer):
        return layer.model_dump(mode="json") if layer is not None else None

    return {
        "metadata": metadata.model_dump(mode="json"),
        "disclaimer": LEGAL_DISCLAIMER,
        "retention_notice": RETENTION_NOTICE,
        "title": "CTA Admin Diagnostic Snapshot",
        "subtitle": f"Generated {now.isoformat()}",
        "confidence": overall,
        "sections": [
            {"title": "Governance", "data": _dump(snapshot.governance), "confidence": overall},
            {"title": "Compliance", "data": _dump(snapshot.compliance), "confidence": overall},
            {
                "title": "Lifecycle",
                "data": _dump(snapshot.lifecycle),
                "confidence": snapshot.lifecycle.confidence.value if snapshot.lifecycle else "unknown",
            },
            {"title": "Warnings", "data": list(snapshot.warnings), "confidence": overall},
        ],
    }


def export_snapshot(
    snapshot: AdminViewSnapshot,
    export_format: Union[ExportFormat, str],
    now: datetime,
) -> Union[str, Dict[str, Any]]:
    """Dispatch to a static exporter; live targets raise UnsafeExportError."""
    target = assert_safe_export(export_format, includes_disclaimer=True)
    if target is ExportFormat.JSON:
        return export_to_json(snapshot, now)
    if target is ExportFormat.CSV:
        return export_to_csv(snapshot, now)
    return export_to_pdf_metadata(snapshot, now)
