"""
Adaptive escalation after reassessment.
"""
from .router import (
    EscalationDecision,
    EscalationType,
    EscalationUrgency,
    ReassessmentResponse,
    route,
)

__all__ = [
    "EscalationDecision",
    "EscalationType",
    "EscalationUrgency",
    "ReassessmentResponse",
    "route",
]
