"""
Safety Guardrails

Hard-stop rules that block entry into an ABCDE phase until a life threat in
an earlier phase has been addressed. The table is evaluated in order and
the first violated rule for the target phase is returned.

Rules reuse the trigger condition nodes, so an unrecorded observation never
blocks progression.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple, Union

from paeds_resus.core.assessment import (
    AirwayPatency,
    AssessmentSnapshot,
    Consciousness,
    Phase,
    SkinPerfusion,
)
from paeds_resus.core.engines.conditions import (
    Condition,
    IsFalse,
    IsTrue,
    above,
    any_of,
    below,
    one_of,
)

logger = logging.getLogger(__name__)

HYPOXAEMIA_SPO2 = 90.0
HYPOGLYCAEMIA_MG_DL = 70.0
CRT_SHOCK_S = 2.0


@dataclass(frozen=True)
class SafetyRule:
    id: str
    target_phase: Phase
    condition: str
    blocking_message: str
    required_intervention: str
    predicate: Condition

    def violated_by(self, assessment: AssessmentSnapshot) -> bool:
        return self.predicate.evaluate(assessment)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "target_phase": self.target_phase.value,
            "condition": self.condition,
            "blocking_message": self.blocking_message,
            "required_intervention": self.required_intervention,
        }


SAFETY_RULES: Tuple[SafetyRule, ...] = (
    # ── Entering B ────────────────────────────────────────────────────────
    SafetyRule(
        id="airway-not-secured",
        target_phase=Phase.BREATHING,
        condition="Airway obstructed or at risk",
        blocking_message="Airway is not secured. Manage the airway before assessing breathing.",
        required_intervention="Open and secure the airway (positioning, suction, adjunct or advanced airway)",
        predicate=one_of("airway_patency", AirwayPatency.OBSTRUCTED, AirwayPatency.AT_RISK),
    ),
    SafetyRule(
        id="airway-unprotected",
        target_phase=Phase.BREATHING,
        condition="Child is unresponsive",
        blocking_message="Unresponsive child cannot protect their airway.",
        required_intervention="Airway protection: recovery position or airway adjunct, call for airway support",
        predicate=one_of("consciousness", Consciousness.UNRESPONSIVE),
    ),
    # ── Entering C ────────────────────────────────────────────────────────
    SafetyRule(
        id="breathing-inadequate",
        target_phase=Phase.CIRCULATION,
        condition="Breathing assessed as inadequate",
        blocking_message="Breathing is inadequate. Support ventilation before moving to circulation.",
        required_intervention="High-flow oxygen and bag-valve-mask ventilation",
        predicate=IsFalse("breathing_adequate"),
    ),
    SafetyRule(
        id="severe-hypoxaemia",
        target_phase=Phase.CIRCULATION,
        condition=f"SpO2 below {HYPOXAEMIA_SPO2:g}%",
        blocking_message="SpO2 is critically low.",
        required_intervention="High-flow oxygen via non-rebreather mask, escalate to ventilation if no response",
        predicate=below("spo2", HYPOXAEMIA_SPO2),
    ),
    # ── Entering D ────────────────────────────────────────────────────────
    SafetyRule(
        id="no-pulse",
        target_phase=Phase.DISABILITY,
        condition="No pulse detected",
        blocking_message="NO PULSE DETECTED. Start CPR immediately.",
        required_intervention="Start CPR and follow the cardiac arrest algorithm",
        predicate=IsFalse("pulse_present"),
    ),
    SafetyRule(
        id="shock-unresolved",
        target_phase=Phase.DISABILITY,
        condition=f"Capillary refill over {CRT_SHOCK_S:g} s or cool/cold extremities",
        blocking_message="Signs of shock are present.",
        required_intervention="IV/IO access and fluid resuscitation, reassess after each bolus",
        predicate=any_of(
            above("capillary_refill", CRT_SHOCK_S),
            one_of("skin_perfusion", SkinPerfusion.COOL, SkinPerfusion.COLD),
        ),
    ),
    # ── Entering E ────────────────────────────────────────────────────────
    SafetyRule(
        id="hypoglycaemia",
        target_phase=Phase.EXPOSURE,
        condition=f"Glucose below {HYPOGLYCAEMIA_MG_DL:g} mg/dL",
        blocking_message="Hypoglycaemia detected.",
        required_intervention="IV dextrose immediately, recheck glucose",
        predicate=below("glucose", HYPOGLYCAEMIA_MG_DL),
    ),
    SafetyRule(
        id="active-seizure",
        target_phase=Phase.EXPOSURE,
        condition="Active seizure",
        blocking_message="Child is actively seizing.",
        required_intervention="Benzodiazepine and airway protection",
        predicate=IsTrue("seizures"),
    ),
)


def _phase(value: Union[Phase, str]) -> Optional[Phase]:
    try:
        return Phase(value)
    except ValueError:
        return None


def violations_for(
    next_phase: Union[Phase, str],
    assessment: AssessmentSnapshot,
    acknowledged: Iterable[str] = (),
) -> List[SafetyRule]:
    """Every unacknowledged rule blocking entry into ``next_phase``, in table order."""
    target = _phase(next_phase)
    if target is None:
        return []
    skip = set(acknowledged)
    return [
        rule for rule in SAFETY_RULES
        if rule.target_phase == target and rule.id not in skip and rule.violated_by(assessment)
    ]


def check_violation(
    current_phase: Union[Phase, str],
    next_phase: Union[Phase, str],
    assessment: AssessmentSnapshot,
    acknowledged: Iterable[str] = (),
) -> Optional[SafetyRule]:
    """
    First rule that blocks moving from ``current_phase`` into ``next_phase``.

    Only rules whose target is ``next_phase`` are considered. Rules whose
    ids appear in ``acknowledged`` (remedial intervention confirmed) are
    skipped. Returns None when progression is allowed.
    """
    blocking = violations_for(next_phase, assessment, acknowledged)
    if not blocking:
        return None
    rule = blocking[0]
    logger.info(
        f"SafetyGuardrails: {_phase(current_phase) or current_phase} -> {next_phase} "
        f"blocked by {rule.id}"
    )
    return rule
