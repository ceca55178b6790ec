"""
Override Accountability - Base Types

An override is a clinician deliberately departing from an engine's
recommended action. Records are immutable once written; later outcome
information is appended as separate OutcomeEntry records.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class OverrideReason(str, Enum):
    CLINICAL_JUDGMENT        = "clinical_judgment"
    PATIENT_SPECIFIC_FACTORS = "patient_specific_factors"
    RESOURCE_UNAVAILABLE     = "resource_unavailable"
    ALLERGY_CONTRAINDICATION = "allergy_contraindication"
    FAMILY_PREFERENCE        = "family_preference"
    FACILITY_PROTOCOL        = "facility_protocol"
    RESEARCH_PROTOCOL        = "research_protocol"
    OTHER                    = "other"


class OverrideSeverity(str, Enum):
    LOW      = "low"
    MEDIUM   = "medium"
    HIGH     = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    OverrideSeverity.LOW:      0,
    OverrideSeverity.MEDIUM:   1,
    OverrideSeverity.HIGH:     2,
    OverrideSeverity.CRITICAL: 3,
}


class ClinicianRole(str, Enum):
    SENIOR_DOCTOR = "senior_doctor"
    CONSULTANT    = "consultant"
    SPECIALIST    = "specialist"
    JUNIOR_DOCTOR = "junior_doctor"
    NURSE         = "nurse"


class PatientOutcome(str, Enum):
    IMPROVED     = "improved"
    STABLE       = "stable"
    DETERIORATED = "deteriorated"
    UNKNOWN      = "unknown"


@dataclass(frozen=True)
class OverrideRecord:
    id: str
    timestamp: datetime
    session_id: str

    # ── Who ───────────────────────────────────────────────────────────────
    clinician_id: str
    clinician_name: str
    clinician_role: str

    # ── What was overridden ───────────────────────────────────────────────
    engine_id: str
    engine_name: str
    action_id: str
    action_title: str
    recommended_action: str
    overridden_action: str

    # ── Why ───────────────────────────────────────────────────────────────
    reason: OverrideReason
    reason_details: str
    severity: OverrideSeverity

    # ── Patient context ───────────────────────────────────────────────────
    patient_age: Optional[float] = None
    patient_weight: Optional[float] = None
    clinical_context: str = ""

    outcome: Optional[PatientOutcome] = None
    follow_up_required: bool = False
    approval_required: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "session_id": self.session_id,
            "clinician_id": self.clinician_id,
            "clinician_name": self.clinician_name,
            "clinician_role": self.clinician_role,
            "engine_id": self.engine_id,
            "engine_name": self.engine_name,
            "action_id": self.action_id,
            "action_title": self.action_title,
            "recommended_action": self.recommended_action,
            "overridden_action": self.overridden_action,
            "reason": self.reason.value,
            "reason_details": self.reason_details,
            "severity": self.severity.value,
            "patient_age": self.patient_age,
            "patient_weight": self.patient_weight,
            "clinical_context": self.clinical_context,
            "outcome": self.outcome.value if self.outcome else None,
            "follow_up_required": self.follow_up_required,
            "approval_required": self.approval_required,
        }


@dataclass(frozen=True)
class OutcomeEntry:
    override_id: str
    outcome: PatientOutcome
    recorded_at: datetime
    notes: str = ""

    def to_dict(self) -> dict:
        return {
            "override_id": self.override_id,
            "outcome": self.outcome.value,
            "recorded_at": self.recorded_at.isoformat(),
            "notes": self.notes,
        }
