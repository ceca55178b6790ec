"""
Phase Completeness Validation

For each ABCDE phase, which observations are still missing and which
critical findings remain unresolved. A phase can be advanced only when it is
complete and has no unresolved critical finding.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple, Union

from paeds_resus.core.assessment import (
    AirwayPatency,
    AssessmentSnapshot,
    Consciousness,
    Phase,
    Pupils,
    SkinPerfusion,
)

# (field, message when missing)
_REQUIRED: Dict[Phase, Tuple[Tuple[str, str], ...]] = {
    Phase.AIRWAY: (
        ("consciousness", "Responsiveness must be assessed (AVPU)"),
        ("airway_patency", "Airway patency must be assessed"),
    ),
    Phase.BREATHING: (
        ("breathing_adequate", "Breathing adequacy must be assessed"),
        ("respiratory_rate", "Respiratory rate must be recorded"),
        ("spo2", "SpO2 must be recorded"),
    ),
    Phase.CIRCULATION: (
        ("pulse_present", "Pulse presence must be assessed"),
        ("heart_rate", "Heart rate must be recorded"),
        ("systolic_bp", "Systolic BP must be recorded"),
        ("skin_perfusion", "Skin perfusion must be assessed"),
        ("capillary_refill", "Capillary refill must be assessed"),
    ),
    Phase.DISABILITY: (
        ("consciousness", "Consciousness level must be assessed (AVPU)"),
        ("pupils", "Pupil assessment must be completed"),
        ("glucose", "Blood glucose must be checked"),
        ("seizures", "Seizure activity must be assessed"),
    ),
    Phase.EXPOSURE: (
        ("temperature", "Temperature must be recorded"),
        ("rash", "Rash presence must be assessed"),
    ),
}


def _airway_findings(a: AssessmentSnapshot) -> List[str]:
    out = []
    if a.consciousness == Consciousness.UNRESPONSIVE:
        out.append("Child is unresponsive - airway protection required")
    if a.airway_patency == AirwayPatency.OBSTRUCTED:
        out.append("Airway is obstructed - immediate intervention required")
    if a.airway_patency == AirwayPatency.AT_RISK:
        out.append("Airway at risk - close monitoring and preparation for intervention")
    return out


def _breathing_findings(a: AssessmentSnapshot) -> List[str]:
    out = []
    if a.breathing_adequate is False:
        out.append("Breathing is inadequate - high-flow oxygen and airway assessment required")
    if a.spo2 is not None and a.spo2 < 90:
        out.append(f"SpO2 critically low ({a.spo2:g}%) - high-flow oxygen required")
    return out


def _circulation_findings(a: AssessmentSnapshot) -> List[str]:
    out = []
    if a.pulse_present is False:
        out.append("NO PULSE DETECTED - START CPR IMMEDIATELY")
    if a.skin_perfusion in (SkinPerfusion.COOL, SkinPerfusion.COLD):
        out.append("Cold/cool extremities indicate shock - fluid resuscitation required")
    if a.capillary_refill is not None and a.capillary_refill > 2:
        out.append(f"Prolonged capillary refill ({a.capillary_refill:g}s) - shock present")
    return out


def _disability_findings(a: AssessmentSnapshot) -> List[str]:
    out = []
    if a.consciousness == Consciousness.UNRESPONSIVE:
        out.append("Child is unresponsive - secure airway and assess for cause")
    if a.pupils in (Pupils.DILATED, Pupils.CONSTRICTED, Pupils.UNEQUAL, Pupils.FIXED):
        out.append(f"Abnormal pupils ({a.pupils.value}) - assess for head injury or neurological emergency")
    if a.glucose is not None and a.glucose < 70:
        out.append(f"Hypoglycaemia detected ({a.glucose:g} mg/dL) - give IV dextrose immediately")
    if a.seizures is True:
        out.append("Active seizure detected - give benzodiazepine and secure airway")
    return out


def _exposure_findings(a: AssessmentSnapshot) -> List[str]:
    out = []
    if a.temperature is not None and a.temperature > 38.5:
        out.append(f"High fever ({a.temperature:g}°C) - assess for sepsis")
    if a.temperature is not None and a.temperature < 36:
        out.append(f"Hypothermia ({a.temperature:g}°C) - assess for shock or environmental exposure")
    if a.rash is True:
        out.append("Rash present - assess for meningococcaemia or other serious infection")
    return out


_FINDINGS: Dict[Phase, Callable[[AssessmentSnapshot], List[str]]] = {
    Phase.AIRWAY:      _airway_findings,
    Phase.BREATHING:   _breathing_findings,
    Phase.CIRCULATION: _circulation_findings,
    Phase.DISABILITY:  _disability_findings,
    Phase.EXPOSURE:    _exposure_findings,
}


@dataclass
class PhaseValidationResult:
    phase: Optional[Phase]
    errors: List[str] = field(default_factory=list)
    critical_findings: List[str] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return self.phase is not None and not self.errors

    @property
    def can_advance(self) -> bool:
        return self.is_complete and not self.critical_findings

    def to_dict(self) -> dict:
        return {
            "phase": self.phase.value if self.phase else None,
            "is_complete": self.is_complete,
            "errors": list(self.errors),
            "critical_findings": list(self.critical_findings),
            "can_advance": self.can_advance,
        }


def validate_phase(phase: Union[Phase, str], assessment: AssessmentSnapshot) -> PhaseValidationResult:
    """Missing observations and unresolved critical findings for one phase."""
    try:
        phase = Phase(phase)
    except ValueError:
        return PhaseValidationResult(phase=None, errors=[f"Unknown phase {phase!r}"])

    errors = [message for name, message in _REQUIRED[phase] if assessment.get(name) is None]
    if phase == Phase.EXPOSURE and assessment.rash is True and assessment.rash_type is None:
        errors.append("Rash type must be described")

    return PhaseValidationResult(
        phase=phase,
        errors=errors,
        critical_findings=_FINDINGS[phase](assessment),
    )
