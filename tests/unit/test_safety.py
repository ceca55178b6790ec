"""
Unit Tests for Safety Guardrails and Phase Validation
"""
import pytest

from paeds_resus.core.assessment import AssessmentSnapshot, Phase
from paeds_resus.core.safety import SAFETY_RULES, check_violation, validate_phase, violations_for


def snap(**values) -> AssessmentSnapshot:
    return AssessmentSnapshot.from_dict(values)


class TestCheckViolation:
    """Tests for hard stops between ABCDE phases."""

    def test_obstructed_airway_blocks_breathing(self):
        rule = check_violation("airway", "breathing", snap(airway_patency="obstructed"))
        assert rule is not None
        assert rule.id == "airway-not-secured"
        assert rule.target_phase == Phase.BREATHING
        assert "airway" in rule.required_intervention.lower()

    def test_patent_airway_allows_breathing(self):
        assert check_violation("airway", "breathing", snap(airway_patency="patent")) is None

    def test_missing_observation_never_blocks(self):
        for phase in ("breathing", "circulation", "disability", "exposure"):
            assert check_violation("airway", phase, AssessmentSnapshot()) is None

    def test_no_pulse_blocks_disability(self):
        rule = check_violation(Phase.CIRCULATION, Phase.DISABILITY, snap(pulse_present=False))
        assert rule.id == "no-pulse"
        assert "CPR" in rule.blocking_message

    def test_only_rules_for_target_phase_apply(self):
        """An obstructed airway does not block entry into exposure."""
        assert check_violation("disability", "exposure", snap(airway_patency="obstructed")) is None

    def test_first_rule_in_table_order_wins(self):
        assessment = snap(breathing_adequate=False, spo2=82)
        assert check_violation("breathing", "circulation", assessment).id == "breathing-inadequate"
        assert [r.id for r in violations_for("circulation", assessment)] == [
            "breathing-inadequate", "severe-hypoxaemia",
        ]

    def test_acknowledged_rule_is_skipped(self):
        assessment = snap(breathing_adequate=False, spo2=82)
        rule = check_violation("breathing", "circulation", assessment, acknowledged=["breathing-inadequate"])
        assert rule.id == "severe-hypoxaemia"
        assert check_violation(
            "breathing", "circulation", assessment,
            acknowledged=["breathing-inadequate", "severe-hypoxaemia"],
        ) is None

    @pytest.mark.parametrize("assessment,rule_id", [
        ({"capillary_refill": 4}, "shock-unresolved"),
        ({"skin_perfusion": "cold"}, "shock-unresolved"),
        ({"glucose": 50}, "hypoglycaemia"),
        ({"seizures": True}, "active-seizure"),
        ({"consciousness": "unresponsive"}, "airway-unprotected"),
    ])
    def test_rule_predicates(self, assessment, rule_id):
        rule = next(r for r in SAFETY_RULES if r.id == rule_id)
        assert check_violation("airway", rule.target_phase, snap(**assessment)).id == rule_id

    def test_unknown_phase_allows(self):
        assert check_violation("airway", "not-a-phase", snap(airway_patency="obstructed")) is None

    def test_rule_ids_unique(self):
        ids = [r.id for r in SAFETY_RULES]
        assert len(ids) == len(set(ids))


class TestValidatePhase:
    """Tests for per-phase completeness."""

    def test_empty_airway_lists_missing_fields(self):
        result = validate_phase("airway", AssessmentSnapshot())
        assert not result.is_complete
        assert not result.can_advance
        assert "Airway patency must be assessed" in result.errors
        assert "Responsiveness must be assessed (AVPU)" in result.errors

    def test_complete_and_clear_phase_can_advance(self):
        result = validate_phase(Phase.BREATHING, snap(breathing_adequate=True, respiratory_rate=30, spo2=97))
        assert result.is_complete
        assert result.critical_findings == []
        assert result.can_advance

    def test_complete_phase_with_critical_finding_cannot_advance(self):
        result = validate_phase("circulation", snap(
            pulse_present=False, heart_rate=0, systolic_bp=0,
            skin_perfusion="cold", capillary_refill=5,
        ))
        assert result.is_complete
        assert not result.can_advance
        assert result.critical_findings[0] == "NO PULSE DETECTED - START CPR IMMEDIATELY"
        assert len(result.critical_findings) == 3

    def test_rash_requires_rash_type(self):
        result = validate_phase("exposure", snap(temperature=37, rash=True))
        assert result.errors == ["Rash type must be described"]
        assert "Rash present" in result.critical_findings[0]

        described = validate_phase("exposure", snap(temperature=37, rash=True, rash_type="petechial"))
        assert described.errors == []

    def test_disability_findings(self):
        result = validate_phase("disability", snap(
            consciousness="pain", pupils="unequal", glucose=45, seizures=True,
        ))
        assert result.is_complete
        assert any("Abnormal pupils (unequal)" in f for f in result.critical_findings)
        assert any("Hypoglycaemia detected (45 mg/dL)" in f for f in result.critical_findings)
        assert any("Active seizure" in f for f in result.critical_findings)

    def test_unknown_phase(self):
        result = validate_phase("foo", AssessmentSnapshot())
        assert result.phase is None
        assert not result.is_complete
        assert result.to_dict()["phase"] is None
