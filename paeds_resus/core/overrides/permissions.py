"""
Override Permissions and Severity Classification

Both are plain data tables so they can be reviewed and extended without
touching control flow. Unknown roles fall back to a deny-all record and
unlisted engine/action ids classify as ``low``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Tuple, Union

from .base import ClinicianRole, OverrideSeverity

logger = logging.getLogger(__name__)

_ALL_TIERS = (OverrideSeverity.LOW, OverrideSeverity.MEDIUM, OverrideSeverity.HIGH, OverrideSeverity.CRITICAL)


@dataclass(frozen=True)
class OverridePermission:
    role: str
    can_override: bool
    max_severity: OverrideSeverity
    requires_approval: bool
    approval_required_for: FrozenSet[OverrideSeverity]

    def needs_approval(self, severity: OverrideSeverity) -> bool:
        return severity in self.approval_required_for

    def to_dict(self) -> dict:
        return {
            "role": self.role,
            "can_override": self.can_override,
            "max_severity": self.max_severity.value,
            "requires_approval": self.requires_approval,
            "approval_required": {s.value: s in self.approval_required_for for s in _ALL_TIERS},
        }


@dataclass(frozen=True)
class OverrideAuthorization:
    allowed: bool
    requires_approval: bool
    severity: OverrideSeverity
    permission: OverridePermission
    reason: str = ""

    def to_dict(self) -> dict:
        return {
            "allowed": self.allowed,
            "requires_approval": self.requires_approval,
            "severity": self.severity.value,
            "reason": self.reason,
            "permission": self.permission.to_dict(),
        }


# ── Role table ──────────────────────────────────────────────────────────────

DEFAULT_PERMISSION = OverridePermission(
    role="default",
    can_override=False,
    max_severity=OverrideSeverity.LOW,
    requires_approval=True,
    approval_required_for=frozenset(_ALL_TIERS),
)

PERMISSIONS: Dict[str, OverridePermission] = {
    ClinicianRole.SENIOR_DOCTOR.value: OverridePermission(
        role=ClinicianRole.SENIOR_DOCTOR.value,
        can_override=True,
        max_severity=OverrideSeverity.HIGH,
        requires_approval=True,
        approval_required_for=frozenset({OverrideSeverity.CRITICAL, OverrideSeverity.HIGH}),
    ),
    ClinicianRole.CONSULTANT.value: OverridePermission(
        role=ClinicianRole.CONSULTANT.value,
        can_override=True,
        max_severity=OverrideSeverity.CRITICAL,
        requires_approval=False,
        approval_required_for=frozenset(),
    ),
    ClinicianRole.SPECIALIST.value: OverridePermission(
        role=ClinicianRole.SPECIALIST.value,
        can_override=True,
        max_severity=OverrideSeverity.CRITICAL,
        requires_approval=False,
        approval_required_for=frozenset(),
    ),
    ClinicianRole.JUNIOR_DOCTOR.value: OverridePermission(
        role=ClinicianRole.JUNIOR_DOCTOR.value,
        can_override=False,
        max_severity=OverrideSeverity.LOW,
        requires_approval=True,
        approval_required_for=frozenset(_ALL_TIERS),
    ),
    ClinicianRole.NURSE.value: OverridePermission(
        role=ClinicianRole.NURSE.value,
        can_override=False,
        max_severity=OverrideSeverity.LOW,
        requires_approval=True,
        approval_required_for=frozenset(_ALL_TIERS),
    ),
}


def resolve_permission(role: Union[ClinicianRole, str]) -> OverridePermission:
    key = str(getattr(role, "value", role)).strip().lower()
    permission = PERMISSIONS.get(key)
    if permission is None:
        logger.warning(f"OverridePermissions: unknown role {role!r}, applying default-deny")
        return DEFAULT_PERMISSION
    return permission


def authorize_override(
    role: Union[ClinicianRole, str],
    severity: OverrideSeverity,
) -> OverrideAuthorization:
    """
    Whether ``role`` may override an action of ``severity``.

    Allowed only when the role can override at all and the severity does not
    exceed the role's maximum tier.
    """
    permission = resolve_permission(role)
    if not permission.can_override:
        return OverrideAuthorization(False, True, severity, permission,
                                     f"Role '{permission.role}' may not override recommendations")
    if severity.rank > permission.max_severity.rank:
        return OverrideAuthorization(False, True, severity, permission,
                                     f"Role '{permission.role}' may override up to "
                                     f"{permission.max_severity.value} severity only")
    return OverrideAuthorization(True, permission.needs_approval(severity), severity, permission)


# ── Severity membership lists ───────────────────────────────────────────────

@dataclass(frozen=True)
class SeverityTier:
    severity: OverrideSeverity
    engine_ids: FrozenSet[str]
    action_ids: FrozenSet[str]


# Highest tier first; the first tier listing either id wins.
SEVERITY_TIERS: Tuple[SeverityTier, ...] = (
    SeverityTier(
        OverrideSeverity.CRITICAL,
        engine_ids=frozenset({"septic-shock", "respiratory-failure", "anaphylaxis"}),
        action_ids=frozenset({
            "airway-intubation", "fluid-bolus", "epinephrine-iv",
            "resp-5-intubation", "sepsis-3-fluids", "hypo-3-fluid-bolus", "ana-2-epinephrine",
        }),
    ),
    SeverityTier(
        OverrideSeverity.HIGH,
        engine_ids=frozenset({"status-epilepticus", "dka", "meningitis"}),
        action_ids=frozenset({
            "seizure-management", "insulin-infusion", "antibiotics",
            "seizure-4-benzodiazepine", "dka-3-insulin", "sepsis-4-antibiotics", "mening-2-antibiotics",
        }),
    ),
    SeverityTier(
        OverrideSeverity.MEDIUM,
        engine_ids=frozenset({"cardiogenic-shock", "hypovolemic-shock"}),
        action_ids=frozenset(),
    ),
)


def classify_severity(engine_id: str, action_id: str) -> OverrideSeverity:
    for tier in SEVERITY_TIERS:
        if engine_id in tier.engine_ids or action_id in tier.action_ids:
            return tier.severity
    return OverrideSeverity.LOW
