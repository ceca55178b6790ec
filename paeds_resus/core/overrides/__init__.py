"""
Clinician override governance: permissions, justification, audit and quality.
"""
from .audit import (
    OverrideAuditSummary,
    OverrideAuditTrail,
    OverrideSubmission,
    override_summary,
    summarise_records,
)
from .base import (
    ClinicianRole,
    OutcomeEntry,
    OverrideReason,
    OverrideRecord,
    OverrideSeverity,
    PatientOutcome,
)
from .permissions import (
    DEFAULT_PERMISSION,
    PERMISSIONS,
    SEVERITY_TIERS,
    OverrideAuthorization,
    OverridePermission,
    authorize_override,
    classify_severity,
    resolve_permission,
)
from .quality import DEFAULT_WEIGHTS, QualityScoreWeights, compute_quality_score
from .validation import validate_reason

__all__ = [
    "OverrideAuditSummary",
    "OverrideAuditTrail",
    "OverrideSubmission",
    "override_summary",
    "summarise_records",
    "ClinicianRole",
    "OutcomeEntry",
    "OverrideReason",
    "OverrideRecord",
    "OverrideSeverity",
    "PatientOutcome",
    "DEFAULT_PERMISSION",
    "PERMISSIONS",
    "SEVERITY_TIERS",
    "OverrideAuthorization",
    "OverridePermission",
    "authorize_override",
    "classify_severity",
    "resolve_permission",
    "DEFAULT_WEIGHTS",
    "QualityScoreWeights",
    "compute_quality_score",
    "validate_reason",
]
