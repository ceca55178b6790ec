"""
Reassessment Router

After each intervention the clinician reports whether the child is better,
the same, worse, or could not be reassessed. The router turns that response
into the next directive. It is total: any response string and any
intervention count produce a decision.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Union

from paeds_resus.core.assessment import Phase

logger = logging.getLogger(__name__)


class ReassessmentResponse(str, Enum):
    BETTER = "better"
    SAME   = "same"
    WORSE  = "worse"
    UNABLE = "unable"


class EscalationType(str, Enum):
    CONTINUE  = "continue"
    ESCALATE  = "escalate"
    EMERGENCY = "emergency"
    REASSESS  = "reassess"


class EscalationUrgency(str, Enum):
    ROUTINE  = "routine"
    URGENT   = "urgent"
    CRITICAL = "critical"


# Interventions tried without change before immediate escalation
IMMEDIATE_ESCALATION_COUNT = 3


@dataclass
class EscalationDecision:
    type: EscalationType
    title: str
    guidance: str
    urgency: EscalationUrgency
    next_steps: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "title": self.title,
            "guidance": self.guidance,
            "urgency": self.urgency.value,
            "next_steps": list(self.next_steps),
        }


def _parse_response(response: Union[ReassessmentResponse, str]) -> ReassessmentResponse:
    try:
        return ReassessmentResponse(str(getattr(response, "value", response)).strip().lower())
    except ValueError:
        logger.warning(f"ReassessmentRouter: unrecognised response {response!r}, treating as unable")
        return ReassessmentResponse.UNABLE


def _phase_name(phase: Union[Phase, str]) -> str:
    return str(getattr(phase, "value", phase)).strip().lower() or "current"


def route(
    response: Union[ReassessmentResponse, str],
    phase: Union[Phase, str],
    intervention_count: int,
) -> EscalationDecision:
    """
    Map a reassessment response to the next directive.

    ``worse`` is always critical regardless of count. ``same`` escalates with
    the count: one intervention or fewer suggests an alternative, two calls
    for senior review, three or more for immediate escalation. Unknown
    responses fall back to the ``unable`` branch.
    """
    parsed = _parse_response(response)
    name = _phase_name(phase)

    if parsed is ReassessmentResponse.BETTER:
        decision = EscalationDecision(
            type=EscalationType.CONTINUE,
            title="IMPROVEMENT DETECTED - Continue current pathway",
            guidance=f"The {name} intervention is working. Continue and reassess regularly.",
            urgency=EscalationUrgency.ROUTINE,
            next_steps=[
                f"Continue current {name} management",
                "Reassess in 5 minutes",
                "Proceed to the next ABCDE step when stable",
            ],
        )

    elif parsed is ReassessmentResponse.WORSE:
        decision = EscalationDecision(
            type=EscalationType.EMERGENCY,
            title="DETERIORATION - EMERGENCY ESCALATION",
            guidance=f"The child is deteriorating despite {name} interventions. Call for help now.",
            urgency=EscalationUrgency.CRITICAL,
            next_steps=[
                "Call senior help / resuscitation team immediately",
                "Return to Airway and restart the ABCDE assessment",
                "Prepare for advanced airway and ICU care",
                "Check for a pulse; start CPR if absent",
            ],
        )

    elif parsed is ReassessmentResponse.SAME:
        if intervention_count >= IMMEDIATE_ESCALATION_COUNT:
            steps = [
                f"Immediate senior escalation: {intervention_count} {name} interventions without improvement",
                "Reconsider the diagnosis and look for alternative causes",
                "Prepare second-line therapy and critical care referral",
            ]
        elif intervention_count == 2:
            steps = [
                "Request senior review",
                f"Check the {name} interventions were delivered correctly",
                "Prepare the next escalation step",
            ]
        else:
            steps = [
                f"Try an alternative {name} intervention",
                "Reassess in 2-3 minutes",
            ]
        decision = EscalationDecision(
            type=EscalationType.ESCALATE,
            title="NO CHANGE - Escalate intervention",
            guidance=f"No improvement after {max(intervention_count, 0)} {name} intervention(s).",
            urgency=EscalationUrgency.URGENT,
            next_steps=steps,
        )

    else:
        decision = EscalationDecision(
            type=EscalationType.REASSESS,
            title="UNABLE TO ASSESS - Proceed with caution",
            guidance=f"The {name} response could not be assessed. Treat as unchanged until proven otherwise.",
            urgency=EscalationUrgency.URGENT,
            next_steps=[
                "Identify and remove barriers to assessment (movement, equipment, access)",
                "Increase monitoring frequency",
                "Reassess as soon as possible",
            ],
        )

    logger.debug(f"ReassessmentRouter: {parsed.value} in {name} (count={intervention_count}) -> {decision.type.value}")
    return decision
