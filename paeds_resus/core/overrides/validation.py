"""
Override justification checks. Returns every problem found; never raises.
"""
from __future__ import annotations

from typing import List, Union

from paeds_resus.config import OVERRIDE_MIN_JUSTIFICATION_CHARS
from .base import OverrideReason, OverrideSeverity

# reason → (keyword the justification must mention, error message)
_KEYWORD_RULES = {
    OverrideReason.ALLERGY_CONTRAINDICATION: (
        "allergy", "Allergy/contraindication reason must specify the allergy or contraindication",
    ),
    OverrideReason.RESOURCE_UNAVAILABLE: (
        "resource", "Resource unavailable reason must specify which resource is unavailable",
    ),
    OverrideReason.FACILITY_PROTOCOL: (
        "protocol", "Facility protocol reason must reference the specific protocol",
    ),
}


def validate_reason(
    reason: Union[OverrideReason, str],
    details: str,
    severity: Union[OverrideSeverity, str],
    min_chars: int = OVERRIDE_MIN_JUSTIFICATION_CHARS,
) -> List[str]:
    errors: List[str] = []
    details = details or ""

    try:
        reason = OverrideReason(reason)
    except ValueError:
        errors.append(f"Unknown override reason '{reason}'")
        reason = None
    try:
        severity = OverrideSeverity(severity)
    except ValueError:
        errors.append(f"Unknown override severity '{severity}'")
        severity = None

    if severity in (OverrideSeverity.HIGH, OverrideSeverity.CRITICAL) and len(details.strip()) < min_chars:
        errors.append(f"High/critical overrides require detailed explanation (minimum {min_chars} characters)")

    rule = _KEYWORD_RULES.get(reason)
    if rule is not None:
        keyword, message = rule
        if keyword not in details.lower():
            errors.append(message)

    return errors
