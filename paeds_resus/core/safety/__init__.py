"""
Safety gating between ABCDE phases.
"""
from .guardrails import SAFETY_RULES, SafetyRule, check_violation, violations_for
from .phase_validation import PhaseValidationResult, validate_phase

__all__ = [
    "SAFETY_RULES",
    "SafetyRule",
    "check_violation",
    "violations_for",
    "PhaseValidationResult",
    "validate_phase",
]
