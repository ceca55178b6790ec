"""
Override Audit Trail

Session-scoped, append-only log of overrides and their outcomes, with
governance queries, statistics and exports.

Usage:
    trail = OverrideAuditTrail(session_id="resus-bay-2")
    submission = trail.submit(clinician_id="c1", clinician_name="Dr A",
                              clinician_role="consultant", engine_id="dka", ...)
    if submission.accepted:
        trail.record_outcome(submission.record.id, "improved")
"""
from __future__ import annotations

import csv
import io
import json
import logging
import uuid
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Union

from .base import (
    OutcomeEntry,
    OverrideReason,
    OverrideRecord,
    OverrideSeverity,
    PatientOutcome,
)
from .permissions import authorize_override, classify_severity
from .validation import validate_reason

logger = logging.getLogger(__name__)


@dataclass
class OverrideSubmission:
    """Result of submitting an override: the record if accepted, else the errors."""
    record: Optional[OverrideRecord]
    errors: List[str] = field(default_factory=list)
    severity: Optional[OverrideSeverity] = None
    requires_approval: bool = False

    @property
    def accepted(self) -> bool:
        return self.record is not None

    def to_dict(self) -> dict:
        return {
            "accepted": self.accepted,
            "record": self.record.to_dict() if self.record else None,
            "errors": list(self.errors),
            "severity": self.severity.value if self.severity else None,
            "requires_approval": self.requires_approval,
        }


@dataclass
class OverrideAuditSummary:
    total_overrides: int
    by_reason: Dict[str, int]
    by_severity: Dict[str, int]
    by_engine: Dict[str, int]
    by_clinician: Dict[str, int]
    by_outcome: Dict[str, int]
    outcome_improvement_rate: float   # % improved among tracked outcomes, unrounded

    def to_dict(self) -> dict:
        return {
            "total_overrides": self.total_overrides,
            "by_reason": dict(self.by_reason),
            "by_severity": dict(self.by_severity),
            "by_engine": dict(self.by_engine),
            "by_clinician": dict(self.by_clinician),
            "by_outcome": dict(self.by_outcome),
            "outcome_improvement_rate": round(self.outcome_improvement_rate, 1),
        }


def summarise_records(records: List[OverrideRecord], outcomes: Dict[str, PatientOutcome]) -> OverrideAuditSummary:
    """
    Aggregate counts over ``records``. ``outcomes`` maps override id to its
    effective outcome; overrides missing from it count as unknown.
    """
    effective = [outcomes.get(r.id, PatientOutcome.UNKNOWN) for r in records]
    by_outcome = Counter(o.value for o in effective)
    tracked = sum(by_outcome.get(o.value, 0) for o in
                  (PatientOutcome.IMPROVED, PatientOutcome.STABLE, PatientOutcome.DETERIORATED))
    improvement = by_outcome.get(PatientOutcome.IMPROVED.value, 0) / tracked * 100 if tracked else 0.0

    return OverrideAuditSummary(
        total_overrides=len(records),
        by_reason=dict(Counter(r.reason.value for r in records)),
        by_severity={s.value: sum(1 for r in records if r.severity == s) for s in OverrideSeverity},
        by_engine=dict(Counter(r.engine_id for r in records)),
        by_clinician=dict(Counter(r.clinician_id for r in records)),
        by_outcome={o.value: by_outcome.get(o.value, 0) for o in PatientOutcome},
        outcome_improvement_rate=float(improvement),
    )


class OverrideAuditTrail:
    """Append-only; nothing recorded here is ever edited or removed."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        self._records: List[OverrideRecord] = []
        self._outcomes: List[OutcomeEntry] = []

    # ---- writing ----

    def submit(
        self,
        *,
        clinician_id: str,
        clinician_name: str,
        clinician_role: str,
        engine_id: str,
        engine_name: str,
        action_id: str,
        action_title: str,
        recommended_action: str,
        overridden_action: str,
        reason: Union[OverrideReason, str],
        reason_details: str,
        patient_age: Optional[float] = None,
        patient_weight: Optional[float] = None,
        clinical_context: str = "",
        follow_up_required: bool = False,
        now: Optional[datetime] = None,
    ) -> OverrideSubmission:
        """
        Classify, authorise and validate an override; record it only if all
        checks pass. Every problem is reported together.
        """
        severity = classify_severity(engine_id, action_id)
        authorization = authorize_override(clinician_role, severity)

        errors: List[str] = []
        if not authorization.allowed:
            errors.append(authorization.reason)
        errors.extend(validate_reason(reason, reason_details, severity))

        if errors:
            logger.warning(
                f"OverrideAuditTrail [{self.session_id}]: rejected {severity.value} override of "
                f"{engine_id}/{action_id} by {clinician_id}: {'; '.join(errors)}"
            )
            return OverrideSubmission(None, errors, severity, authorization.requires_approval)

        record = OverrideRecord(
            id=str(uuid.uuid4()),
            timestamp=now or datetime.now(),
            session_id=self.session_id,
            clinician_id=clinician_id,
            clinician_name=clinician_name,
            clinician_role=authorization.permission.role,
            engine_id=engine_id,
            engine_name=engine_name,
            action_id=action_id,
            action_title=action_title,
            recommended_action=recommended_action,
            overridden_action=overridden_action,
            reason=OverrideReason(reason),
            reason_details=reason_details,
            severity=severity,
            patient_age=patient_age,
            patient_weight=patient_weight,
            clinical_context=clinical_context,
            follow_up_required=follow_up_required,
            approval_required=authorization.requires_approval,
        )
        self.append(record)
        return OverrideSubmission(record, [], severity, authorization.requires_approval)

    def append(self, record: OverrideRecord) -> None:
        self._records.append(record)
        logger.info(
            f"OverrideAuditTrail [{self.session_id}]: {record.severity.value} override of "
            f"{record.engine_id}/{record.action_id} by {record.clinician_name} ({record.reason.value})"
        )

    def record_outcome(
        self,
        override_id: str,
        outcome: Union[PatientOutcome, str],
        notes: str = "",
        now: Optional[datetime] = None,
    ) -> Optional[OutcomeEntry]:
        """Append an outcome for an existing override; None if the id is unknown."""
        if self.get(override_id) is None:
            logger.debug(f"OverrideAuditTrail [{self.session_id}]: outcome for unknown override {override_id!r}")
            return None
        entry = OutcomeEntry(override_id, PatientOutcome(outcome), now or datetime.now(), notes)
        self._outcomes.append(entry)
        return entry

    # ---- reading ----

    @property
    def records(self) -> List[OverrideRecord]:
        return list(self._records)

    @property
    def outcome_entries(self) -> List[OutcomeEntry]:
        return list(self._outcomes)

    def __len__(self) -> int:
        return len(self._records)

    def get(self, override_id: str) -> Optional[OverrideRecord]:
        for record in self._records:
            if record.id == override_id:
                return record
        return None

    def outcome_of(self, override_id: str) -> Optional[PatientOutcome]:
        """Latest appended outcome, else the outcome recorded with the override."""
        for entry in reversed(self._outcomes):
            if entry.override_id == override_id:
                return entry.outcome
        record = self.get(override_id)
        return record.outcome if record else None

    def effective_outcomes(self) -> Dict[str, PatientOutcome]:
        out = {}
        for record in self._records:
            outcome = self.outcome_of(record.id)
            if outcome is not None:
                out[record.id] = outcome
        return out

    def by_severity(self, severity: Union[OverrideSeverity, str]) -> List[OverrideRecord]:
        severity = OverrideSeverity(severity)
        return [r for r in self._records if r.severity == severity]

    def by_reason(self, reason: Union[OverrideReason, str]) -> List[OverrideRecord]:
        reason = OverrideReason(reason)
        return [r for r in self._records if r.reason == reason]

    def by_engine(self, engine_id: str) -> List[OverrideRecord]:
        return [r for r in self._records if r.engine_id == engine_id]

    def by_clinician(self, clinician_id: str) -> List[OverrideRecord]:
        return [r for r in self._records if r.clinician_id == clinician_id]

    def critical_overrides(self) -> List[OverrideRecord]:
        return self.by_severity(OverrideSeverity.CRITICAL)

    def summary(self) -> OverrideAuditSummary:
        return summarise_records(self._records, self.effective_outcomes())

    # ---- reports ----

    def audit_report(self, now: Optional[datetime] = None) -> str:
        summary = self.summary()
        lines = [
            "OVERRIDE AUDIT REPORT",
            f"Session ID: {self.session_id}",
            f"Generated: {(now or datetime.now()).isoformat()}",
            "",
            "SUMMARY STATISTICS",
            "==================",
            f"Total Overrides: {summary.total_overrides}",
        ]
        for severity in reversed(list(OverrideSeverity)):
            lines.append(f"- {severity.value.title()}: {summary.by_severity[severity.value]}")
        lines += ["", "OUTCOME TRACKING", "================"]
        for outcome in PatientOutcome:
            lines.append(f"{outcome.value.title()}: {summary.by_outcome[outcome.value]}")
        lines.append(f"Improvement Rate: {summary.outcome_improvement_rate:.0f}%")

        critical = self.critical_overrides()
        if critical:
            lines += ["", "CRITICAL OVERRIDES (REQUIRE REVIEW)", "==================================="]
            for idx, record in enumerate(critical, start=1):
                outcome = self.outcome_of(record.id)
                lines += [
                    "",
                    f"{idx}. {record.action_title}",
                    f"   Clinician: {record.clinician_name} ({record.clinician_role})",
                    f"   Time: {record.timestamp.isoformat()}",
                    f"   Reason: {record.reason.value}",
                    f"   Details: {record.reason_details}",
                    f"   Alternative: {record.overridden_action}",
                    f"   Outcome: {outcome.value if outcome else 'Pending'}",
                ]
        return "\n".join(lines) + "\n"

    def export_json(self, now: Optional[datetime] = None) -> str:
        return json.dumps(
            {
                "session_id": self.session_id,
                "export_date": (now or datetime.now()).isoformat(),
                "statistics": self.summary().to_dict(),
                "overrides": [r.to_dict() for r in self._records],
                "outcomes": [e.to_dict() for e in self._outcomes],
            },
            indent=2,
        )

    def export_csv(self) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(["ID", "Timestamp", "Clinician", "Role", "Engine", "Action", "Reason", "Severity", "Outcome"])
        for r in self._records:
            outcome = self.outcome_of(r.id)
            writer.writerow([
                r.id, r.timestamp.isoformat(), r.clinician_name, r.clinician_role,
                r.engine_name, r.action_title, r.reason.value, r.severity.value,
                outcome.value if outcome else "Pending",
            ])
        return buffer.getvalue()

    def handover_summary(self) -> str:
        return override_summary(self._records, self.effective_outcomes())


def override_summary(records: List[OverrideRecord], outcomes: Optional[Dict[str, PatientOutcome]] = None) -> str:
    """Short plain-text summary for clinical handover."""
    if not records:
        return "No clinical overrides recorded."

    outcomes = outcomes or {r.id: r.outcome for r in records if r.outcome}
    critical = [r for r in records if r.severity == OverrideSeverity.CRITICAL]
    improved = sum(1 for r in records if outcomes.get(r.id) == PatientOutcome.IMPROVED)

    lines = [
        "Clinical Overrides Summary:",
        f"- Total overrides: {len(records)}",
        f"- Critical overrides: {len(critical)}",
        f"- Improved outcomes: {improved}/{len(records)}",
    ]
    if critical:
        lines += ["", "Critical Overrides:"]
        lines += [f"- {r.action_title}: {r.reason_details}" for r in critical]
    return "\n".join(lines) + "\n"
