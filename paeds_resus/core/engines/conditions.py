"""
Trigger Conditions

Engine triggers are small trees of typed condition nodes rather than opaque
callables, so they can be evaluated, described and tested uniformly.

Evaluation is total: a leaf whose field was never recorded (or whose
threshold depends on an unknown age) is simply not satisfied.
"""
from __future__ import annotations

import operator
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from paeds_resus.core.assessment import AssessmentSnapshot


class Op(str, Enum):
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="


_OPS: Dict[Op, Callable[[float, float], bool]] = {
    Op.GT: operator.gt,
    Op.GE: operator.ge,
    Op.LT: operator.lt,
    Op.LE: operator.le,
}


# ── Thresholds ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Fixed:
    value: float

    def resolve(self, snapshot: AssessmentSnapshot) -> Optional[float]:
        return self.value

    def describe(self) -> str:
        return f"{self.value:g}"


@dataclass(frozen=True)
class AgeBanded:
    """
    Piecewise threshold by age in years.

    ``bands`` is a sequence of ``(upper_age_exclusive, threshold)`` pairs in
    ascending age order; ``default`` applies at or above the last bound.
    """
    bands: Tuple[Tuple[float, float], ...]
    default: float

    def resolve(self, snapshot: AssessmentSnapshot) -> Optional[float]:
        age = snapshot.age_in_years
        if age is None:
            return None
        for upper, threshold in self.bands:
            if age < upper:
                return threshold
        return self.default

    def describe(self) -> str:
        parts = [f"{t:g} (<{u:g}y)" for u, t in self.bands]
        parts.append(f"{self.default:g} otherwise")
        return ", ".join(parts)


@dataclass(frozen=True)
class AgeLinear:
    """``base + per_year × age``, e.g. the 90 + 2×age systolic floor."""
    base: float
    per_year: float

    def resolve(self, snapshot: AssessmentSnapshot) -> Optional[float]:
        age = snapshot.age_in_years
        if age is None:
            return None
        return self.base + self.per_year * age

    def describe(self) -> str:
        return f"{self.base:g} + {self.per_year:g}×age"


Threshold = Union[Fixed, AgeBanded, AgeLinear]


# ── Condition nodes ─────────────────────────────────────────────────────────

class Condition:
    """Base node. Subclasses implement ``evaluate`` and ``describe``."""

    def evaluate(self, snapshot: AssessmentSnapshot) -> bool:
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError

    def matched(self, snapshot: AssessmentSnapshot) -> List[str]:
        """Descriptions of the satisfied leaves (for activation evidence)."""
        return [self.describe()] if self.evaluate(snapshot) else []


@dataclass(frozen=True)
class Compare(Condition):
    field: str
    op: Op
    threshold: Threshold

    def evaluate(self, snapshot: AssessmentSnapshot) -> bool:
        value = snapshot.get(self.field)
        if value is None or isinstance(value, bool):
            return False
        limit = self.threshold.resolve(snapshot)
        if limit is None:
            return False
        return _OPS[self.op](float(value), limit)

    def describe(self) -> str:
        return f"{self.field} {self.op.value} {self.threshold.describe()}"


@dataclass(frozen=True)
class OneOf(Condition):
    field: str
    values: Tuple[Any, ...]

    def evaluate(self, snapshot: AssessmentSnapshot) -> bool:
        value = snapshot.get(self.field)
        return value is not None and value in self.values

    def describe(self) -> str:
        names = "/".join(getattr(v, "value", str(v)) for v in self.values)
        return f"{self.field} is {names}"


@dataclass(frozen=True)
class IsTrue(Condition):
    field: str

    def evaluate(self, snapshot: AssessmentSnapshot) -> bool:
        return snapshot.get(self.field) is True

    def describe(self) -> str:
        return self.field


@dataclass(frozen=True)
class IsFalse(Condition):
    """Explicitly recorded as absent; an unrecorded field does not match."""
    field: str

    def evaluate(self, snapshot: AssessmentSnapshot) -> bool:
        return snapshot.get(self.field) is False

    def describe(self) -> str:
        return f"no {self.field}"


@dataclass(frozen=True)
class WeightBelowExpected(Condition):
    """Actual weight under ``fraction`` of the APLS expected weight for age."""
    fraction: float

    def evaluate(self, snapshot: AssessmentSnapshot) -> bool:
        patient = snapshot.patient
        if patient is None or patient.weight_kg is None:
            return False
        return patient.weight_kg < self.fraction * patient.expected_weight_kg

    def describe(self) -> str:
        return f"weight < {self.fraction:.0%} of expected for age"


@dataclass(frozen=True)
class AllOf(Condition):
    conditions: Tuple[Condition, ...]
    label: str = ""

    def evaluate(self, snapshot: AssessmentSnapshot) -> bool:
        return all(c.evaluate(snapshot) for c in self.conditions)

    def describe(self) -> str:
        return self.label or " AND ".join(f"({c.describe()})" for c in self.conditions)

    def matched(self, snapshot: AssessmentSnapshot) -> List[str]:
        out: List[str] = []
        for c in self.conditions:
            out.extend(c.matched(snapshot))
        return out


@dataclass(frozen=True)
class AnyOf(Condition):
    conditions: Tuple[Condition, ...]
    label: str = ""

    def evaluate(self, snapshot: AssessmentSnapshot) -> bool:
        return any(c.evaluate(snapshot) for c in self.conditions)

    def describe(self) -> str:
        return self.label or " OR ".join(f"({c.describe()})" for c in self.conditions)

    def matched(self, snapshot: AssessmentSnapshot) -> List[str]:
        out: List[str] = []
        for c in self.conditions:
            out.extend(c.matched(snapshot))
        return out


@dataclass(frozen=True)
class AtLeast(Condition):
    """At least ``count`` of the child conditions hold."""
    count: int
    conditions: Tuple[Condition, ...]
    label: str = ""

    def satisfied_count(self, snapshot: AssessmentSnapshot) -> int:
        return sum(1 for c in self.conditions if c.evaluate(snapshot))

    def evaluate(self, snapshot: AssessmentSnapshot) -> bool:
        return self.satisfied_count(snapshot) >= self.count

    def describe(self) -> str:
        return self.label or f"at least {self.count} of: " + "; ".join(c.describe() for c in self.conditions)

    def matched(self, snapshot: AssessmentSnapshot) -> List[str]:
        out: List[str] = []
        for c in self.conditions:
            out.extend(c.matched(snapshot))
        return out


# ── Builders ────────────────────────────────────────────────────────────────

def above(field: str, threshold: Union[float, Threshold]) -> Compare:
    return Compare(field, Op.GT, _threshold(threshold))


def below(field: str, threshold: Union[float, Threshold]) -> Compare:
    return Compare(field, Op.LT, _threshold(threshold))


def any_of(*conditions: Condition, label: str = "") -> AnyOf:
    return AnyOf(tuple(conditions), label)


def all_of(*conditions: Condition, label: str = "") -> AllOf:
    return AllOf(tuple(conditions), label)


def at_least(count: int, *conditions: Condition, label: str = "") -> AtLeast:
    return AtLeast(count, tuple(conditions), label)


def one_of(field: str, *values: Any) -> OneOf:
    return OneOf(field, tuple(values))


def _threshold(value: Union[float, Threshold]) -> Threshold:
    if isinstance(value, (Fixed, AgeBanded, AgeLinear)):
        return value
    return Fixed(float(value))
