"""
Emergency Engine - Base Types

An engine is a hand-authored protocol for one paediatric emergency: a
trigger over the assessment, an ordered list of actions and a monitoring
checklist. Definitions are immutable and weight-independent; doses are
derived for a given child only when an action is presented.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from paeds_resus.core.assessment import AssessmentSnapshot, Phase
from .conditions import Condition


class EngineSeverity(str, Enum):
    """
    CRITICAL – immediately life-threatening; always queued first
    URGENT   – needs treatment this encounter but can follow critical work
    """
    CRITICAL = "critical"
    URGENT   = "urgent"


class ActionUrgency(str, Enum):
    CRITICAL = "critical"
    URGENT   = "urgent"
    ROUTINE  = "routine"


# ── Dosing ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class DoseRange:
    low: float
    high: float
    unit: str
    capped: bool = False

    def to_dict(self) -> dict:
        return {"low": self.low, "high": self.high, "unit": self.unit, "capped": self.capped}


@dataclass(frozen=True)
class Dosing:
    """
    Weight-linear dose: ``per_kg × weight`` (optionally a range up to
    ``per_kg_upper × weight``), clamped to ``max_dose`` when one exists.
    ``unit`` is the unit of the computed dose, e.g. "mg" or "mL".
    """
    drug: str
    per_kg: float
    unit: str
    route: str
    per_kg_upper: Optional[float] = None
    max_dose: Optional[float] = None
    rate: str = ""               # e.g. "/min", "/hr", "/day" for infusions and feeds
    note: str = ""

    def compute(self, weight_kg: float) -> DoseRange:
        low = self.per_kg * weight_kg
        high = (self.per_kg_upper if self.per_kg_upper is not None else self.per_kg) * weight_kg
        capped = False
        if self.max_dose is not None:
            if high > self.max_dose:
                capped = True
            low = min(low, self.max_dose)
            high = min(high, self.max_dose)
        return DoseRange(round(low, 2), round(high, 2), f"{self.unit}{self.rate}", capped)

    def calculation(self) -> str:
        per_kg = f"{self.per_kg:g}"
        if self.per_kg_upper is not None:
            per_kg += f"-{self.per_kg_upper:g}"
        text = f"{self.drug} {per_kg} {self.unit}/kg{self.rate}"
        if self.max_dose is not None:
            text += f" (max {self.max_dose:g} {self.unit})"
        return text

    def describe(self, weight_kg: float) -> str:
        dose = self.compute(weight_kg)
        amount = f"{dose.low:g}" if dose.low == dose.high else f"{dose.low:g}-{dose.high:g}"
        text = f"{self.drug} {amount} {dose.unit} {self.route}"
        if dose.capped:
            text += " (capped at maximum)"
        return text

    def to_dict(self, weight_kg: Optional[float] = None) -> dict:
        out = {
            "drug": self.drug,
            "calculation": self.calculation(),
            "route": self.route,
        }
        if self.note:
            out["note"] = self.note
        if weight_kg is not None:
            out["dose"] = self.compute(weight_kg).to_dict()
            out["text"] = self.describe(weight_kg)
        return out


# ── Actions and engines ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class Action:
    id: str
    sequence: int
    title: str
    description: str
    rationale: str
    expected_outcome: str
    urgency: ActionUrgency
    phase: Phase
    timeframe: str
    dosing: Tuple[Dosing, ...] = ()
    prerequisites: Tuple[str, ...] = ()
    monitoring: Tuple[str, ...] = ()

    def to_dict(self, weight_kg: Optional[float] = None) -> dict:
        return {
            "id": self.id,
            "sequence": self.sequence,
            "title": self.title,
            "description": self.description,
            "rationale": self.rationale,
            "expected_outcome": self.expected_outcome,
            "urgency": self.urgency.value,
            "phase": self.phase.value,
            "timeframe": self.timeframe,
            "dosing": [d.to_dict(weight_kg) for d in self.dosing],
            "prerequisites": list(self.prerequisites),
            "monitoring": list(self.monitoring),
        }


@dataclass(frozen=True)
class EngineDefinition:
    id: str
    name: str
    description: str
    severity: EngineSeverity
    trigger: Condition
    actions: Tuple[Action, ...]
    monitoring: Tuple[str, ...] = ()
    contraindications: Tuple[str, ...] = ()

    def is_triggered(self, snapshot: AssessmentSnapshot) -> bool:
        return self.trigger.evaluate(snapshot)

    def trigger_findings(self, snapshot: AssessmentSnapshot) -> List[str]:
        return self.trigger.matched(snapshot)

    @property
    def action_ids(self) -> Tuple[str, ...]:
        return tuple(a.id for a in self.actions)

    def action_at(self, index: int) -> Optional[Action]:
        if 0 <= index < len(self.actions):
            return self.actions[index]
        return None

    def to_dict(self, weight_kg: Optional[float] = None) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "severity": self.severity.value,
            "trigger": self.trigger.describe(),
            "actions": [a.to_dict(weight_kg) for a in self.actions],
            "monitoring": list(self.monitoring),
            "contraindications": list(self.contraindications),
        }
