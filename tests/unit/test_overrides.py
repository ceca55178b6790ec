"""
Unit Tests for Override Governance

Tests for severity classification, role permissions, justification checks,
the audit trail and the quality score.
"""
import csv
import io
import json
from dataclasses import replace

import pytest

from paeds_resus.core.overrides import (
    DEFAULT_PERMISSION,
    OverrideAuditSummary,
    OverrideAuditTrail,
    OverrideReason,
    OverrideSeverity,
    PatientOutcome,
    QualityScoreWeights,
    authorize_override,
    classify_severity,
    compute_quality_score,
    override_summary,
    resolve_permission,
    summarise_records,
    validate_reason,
)


def _submit(trail, *, role="consultant", engine_id="septic-shock", action_id="sepsis-3-fluids",
            reason="clinical_judgment", details=None, clinician_id="c1", now=None):
    return trail.submit(
        clinician_id=clinician_id,
        clinician_name="Dr Okafor",
        clinician_role=role,
        engine_id=engine_id,
        engine_name="Septic Shock Engine",
        action_id=action_id,
        action_title="Administer Fluid Bolus",
        recommended_action="20 mL/kg Ringer's lactate",
        overridden_action="10 mL/kg with early inotropes",
        reason=reason,
        reason_details=details if details is not None else "Clinical signs of fluid overload with hepatomegaly and crackles on auscultation.",
        patient_age=2,
        patient_weight=12,
        now=now,
    )


def _summary(total=0, critical=0, high=0, improvement=0.0) -> OverrideAuditSummary:
    return OverrideAuditSummary(
        total_overrides=total,
        by_reason={},
        by_severity={"low": 0, "medium": 0, "high": high, "critical": critical},
        by_engine={},
        by_clinician={},
        by_outcome={},
        outcome_improvement_rate=improvement,
    )


class TestClassifySeverity:
    """Tests for severity tiers."""

    @pytest.mark.parametrize("engine_id,action_id,expected", [
        ("septic-shock", "anything", OverrideSeverity.CRITICAL),
        ("respiratory-failure", "resp-1-oxygen", OverrideSeverity.CRITICAL),
        ("dka", "dka-1-recognize", OverrideSeverity.HIGH),
        ("meningitis", "mening-1-recognize", OverrideSeverity.HIGH),
        ("cardiogenic-shock", "cardio-1-recognize", OverrideSeverity.MEDIUM),
        ("severe-malnutrition", "sam-1-recognize", OverrideSeverity.LOW),
        ("unknown-engine", "unknown-action", OverrideSeverity.LOW),
    ])
    def test_tiers(self, engine_id, action_id, expected):
        assert classify_severity(engine_id, action_id) == expected

    def test_action_id_alone_can_raise_tier(self):
        assert classify_severity("severe-malnutrition", "fluid-bolus") == OverrideSeverity.CRITICAL

    def test_higher_engine_tier_wins_over_action(self):
        assert classify_severity("septic-shock", "sepsis-4-antibiotics") == OverrideSeverity.CRITICAL


class TestPermissions:
    """Tests for role-based authorisation."""

    def test_consultant_may_override_critical_without_approval(self):
        auth = authorize_override("consultant", OverrideSeverity.CRITICAL)
        assert auth.allowed
        assert not auth.requires_approval

    def test_senior_doctor_capped_at_high(self):
        assert not authorize_override("senior_doctor", OverrideSeverity.CRITICAL).allowed
        high = authorize_override("senior_doctor", OverrideSeverity.HIGH)
        assert high.allowed
        assert high.requires_approval
        medium = authorize_override("senior_doctor", OverrideSeverity.MEDIUM)
        assert medium.allowed
        assert not medium.requires_approval

    @pytest.mark.parametrize("role", ["nurse", "junior_doctor"])
    def test_nurse_and_junior_cannot_override(self, role):
        auth = authorize_override(role, OverrideSeverity.LOW)
        assert not auth.allowed
        assert "may not override" in auth.reason

    def test_unknown_role_default_deny(self):
        assert resolve_permission("porter") is DEFAULT_PERMISSION
        assert not authorize_override("porter", OverrideSeverity.LOW).allowed

    def test_role_lookup_case_insensitive(self):
        assert resolve_permission(" Consultant ").role == "consultant"


class TestValidateReason:
    """Tests for justification checks."""

    def test_short_critical_justification_rejected(self):
        errors = validate_reason("clinical_judgment", "Patient looks better.", "critical")
        assert errors == ["High/critical overrides require detailed explanation (minimum 50 characters)"]

    def test_length_not_required_below_high(self):
        assert validate_reason("clinical_judgment", "short", "medium") == []

    def test_length_counts_stripped_text(self):
        padded = "x" * 40 + " " * 20
        assert validate_reason("clinical_judgment", padded, "high") != []

    def test_allergy_keyword_required(self, long_justification):
        errors = validate_reason("allergy_contraindication", long_justification, "high")
        assert errors == ["Allergy/contraindication reason must specify the allergy or contraindication"]

    def test_keyword_match_case_insensitive(self):
        assert validate_reason("resource_unavailable", "RESOURCE: no IO needle", "low") == []
        assert validate_reason("facility_protocol", "Local Protocol 7", "low") == []

    def test_multiple_errors_returned_together(self):
        errors = validate_reason("facility_protocol", "too short", "critical")
        assert len(errors) == 2

    def test_unknown_values_reported(self):
        errors = validate_reason("whim", "x" * 60, "catastrophic")
        assert "Unknown override reason 'whim'" in errors
        assert "Unknown override severity 'catastrophic'" in errors


class TestOverrideAuditTrail:
    """Tests for submission, outcomes and reports."""

    def test_accepted_submission_recorded(self, t0):
        trail = OverrideAuditTrail("s1")
        submission = _submit(trail, now=t0)
        assert submission.accepted
        assert submission.errors == []
        record = submission.record
        assert record.severity == OverrideSeverity.CRITICAL
        assert record.session_id == "s1"
        assert record.timestamp == t0
        assert record.clinician_role == "consultant"
        assert not record.approval_required
        assert len(trail) == 1
        assert trail.get(record.id) is record

    def test_short_justification_on_critical_rejected(self):
        trail = OverrideAuditTrail("s1")
        submission = _submit(trail, details="Patient looks fine.")
        assert not submission.accepted
        assert submission.severity == OverrideSeverity.CRITICAL
        assert any("minimum 50 characters" in e for e in submission.errors)
        assert len(trail) == 0

    def test_permission_and_validation_errors_combined(self):
        trail = OverrideAuditTrail("s1")
        submission = _submit(trail, role="nurse", details="short")
        assert len(submission.errors) == 2
        assert submission.to_dict()["record"] is None

    def test_senior_doctor_high_override_flags_approval(self):
        trail = OverrideAuditTrail("s1")
        submission = _submit(trail, role="senior_doctor", engine_id="dka", action_id="dka-3-insulin")
        assert submission.accepted
        assert submission.record.approval_required
        assert submission.requires_approval

    def test_outcomes_append_and_latest_wins(self, t0, later):
        trail = OverrideAuditTrail("s1")
        record = _submit(trail).record
        trail.record_outcome(record.id, "stable", now=t0)
        trail.record_outcome(record.id, PatientOutcome.IMPROVED, notes="perfusion better", now=later(600))
        assert trail.outcome_of(record.id) == PatientOutcome.IMPROVED
        assert len(trail.outcome_entries) == 2
        assert trail.records[0].outcome is None

    def test_outcome_for_unknown_override(self):
        assert OverrideAuditTrail("s1").record_outcome("missing", "improved") is None

    def test_queries(self):
        trail = OverrideAuditTrail("s1")
        _submit(trail, clinician_id="a")
        _submit(trail, clinician_id="b", engine_id="dka", action_id="dka-3-insulin")
        assert len(trail.critical_overrides()) == 1
        assert len(trail.by_severity("high")) == 1
        assert len(trail.by_engine("dka")) == 1
        assert len(trail.by_clinician("a")) == 1
        assert len(trail.by_reason(OverrideReason.CLINICAL_JUDGMENT)) == 2

    def test_summary_statistics(self):
        trail = OverrideAuditTrail("s1")
        ids = [_submit(trail).record.id for _ in range(4)]
        trail.record_outcome(ids[0], "improved")
        trail.record_outcome(ids[1], "improved")
        trail.record_outcome(ids[2], "deteriorated")
        summary = trail.summary()
        assert summary.total_overrides == 4
        assert summary.by_severity == {"low": 0, "medium": 0, "high": 0, "critical": 4}
        assert summary.by_outcome["unknown"] == 1
        assert summary.outcome_improvement_rate == pytest.approx(200 / 3)
        assert summary.to_dict()["outcome_improvement_rate"] == 66.7

    def test_improvement_rate_zero_when_nothing_tracked(self):
        trail = OverrideAuditTrail("s1")
        _submit(trail)
        assert trail.summary().outcome_improvement_rate == 0.0

    def test_audit_report_lists_critical_overrides(self, t0):
        trail = OverrideAuditTrail("s1")
        _submit(trail, now=t0)
        report = trail.audit_report(now=t0)
        assert report.startswith("OVERRIDE AUDIT REPORT")
        assert "CRITICAL OVERRIDES (REQUIRE REVIEW)" in report
        assert "1. Administer Fluid Bolus" in report
        assert "Outcome: Pending" in report
        assert "Improvement Rate: 0%" in report

    def test_csv_export(self):
        trail = OverrideAuditTrail("s1")
        record = _submit(trail).record
        rows = list(csv.reader(io.StringIO(trail.export_csv())))
        assert rows[0] == ["ID", "Timestamp", "Clinician", "Role", "Engine", "Action", "Reason", "Severity", "Outcome"]
        assert rows[1][0] == record.id
        assert rows[1][-1] == "Pending"
        assert trail.export_csv().startswith('"ID"')

    def test_json_export(self, t0):
        trail = OverrideAuditTrail("s1")
        record = _submit(trail).record
        trail.record_outcome(record.id, "stable")
        data = json.loads(trail.export_json(now=t0))
        assert data["session_id"] == "s1"
        assert data["export_date"] == t0.isoformat()
        assert data["statistics"]["total_overrides"] == 1
        assert data["overrides"][0]["id"] == record.id
        assert data["outcomes"][0]["outcome"] == "stable"


class TestOverrideSummary:
    """Tests for the handover text."""

    def test_empty(self):
        assert override_summary([]) == "No clinical overrides recorded."

    def test_counts_and_critical_list(self):
        trail = OverrideAuditTrail("s1")
        record = _submit(trail).record
        trail.record_outcome(record.id, "improved")
        text = trail.handover_summary()
        assert "- Total overrides: 1" in text
        assert "- Critical overrides: 1" in text
        assert "- Improved outcomes: 1/1" in text
        assert "Critical Overrides:" in text
        assert "- Administer Fluid Bolus:" in text


class TestQualityScore:
    """Tests for the weighted override quality heuristic."""

    def test_no_overrides_scores_full(self):
        assert compute_quality_score(_summary()) == 100.0

    def test_penalties(self):
        assert compute_quality_score(_summary(total=3, critical=2, high=1)) == 95.0

    def test_volume_penalty_beyond_threshold(self):
        assert compute_quality_score(_summary(total=60)) == pytest.approx(98.0)

    def test_volume_penalty_cap(self):
        weights = QualityScoreWeights(volume_penalty_cap=5.0)
        assert compute_quality_score(_summary(total=500), weights) == pytest.approx(95.0)

    def test_strong_bonus_only(self):
        assert compute_quality_score(_summary(total=10, critical=10, improvement=80)) == 90.0

    def test_modest_bonus(self):
        assert compute_quality_score(_summary(total=10, critical=10, improvement=60)) == 85.0
        assert compute_quality_score(_summary(total=10, critical=10, improvement=50)) == 80.0

    def test_never_below_zero(self):
        assert compute_quality_score(_summary(total=80, critical=80)) == 0.0

    def test_never_above_hundred(self):
        assert compute_quality_score(_summary(improvement=100)) == 100.0

    def _low_severity_records(self, count):
        trail = OverrideAuditTrail("s1")
        record = _submit(trail, engine_id="severe-malnutrition", action_id="sam-2-stabilization").record
        assert record.severity == OverrideSeverity.LOW
        return [replace(record, id=f"r{i}") for i in range(count)]

    def test_rate_just_over_strong_threshold_earns_strong_bonus(self):
        """88 of 125 improved is 70.4%, above the 70% line."""
        records = self._low_severity_records(125)
        outcomes = {r.id: PatientOutcome.IMPROVED if i < 88 else PatientOutcome.STABLE
                    for i, r in enumerate(records)}
        summary = summarise_records(records, outcomes)
        assert summary.outcome_improvement_rate == pytest.approx(70.4)
        assert compute_quality_score(summary) == pytest.approx(95.0)

    def test_rate_just_over_modest_threshold_earns_modest_bonus(self):
        """63 of 125 improved is 50.4%, above the 50% line."""
        records = self._low_severity_records(125)
        outcomes = {r.id: PatientOutcome.IMPROVED if i < 63 else PatientOutcome.STABLE
                    for i, r in enumerate(records)}
        summary = summarise_records(records, outcomes)
        assert summary.outcome_improvement_rate == pytest.approx(50.4)
        assert compute_quality_score(summary) == pytest.approx(90.0)
