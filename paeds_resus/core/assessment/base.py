"""
Assessment Model - Base Types

An AssessmentSnapshot is the point-in-time ABCDE picture of a child that every
other component reads: trigger evaluation, safety gating and phase
validation. Every observation is optional; a field that was never recorded
is None and never counts as an abnormal finding.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, fields, asdict
from enum import Enum
from typing import Any, Dict, Optional, Type

logger = logging.getLogger(__name__)


# ── Enumerated observations ─────────────────────────────────────────────────

class AirwayPatency(str, Enum):
    PATENT     = "patent"
    AT_RISK    = "at_risk"
    OBSTRUCTED = "obstructed"


class WorkOfBreathing(str, Enum):
    NORMAL    = "normal"
    INCREASED = "increased"
    SEVERE    = "severe"


class BreathSounds(str, Enum):
    CLEAR     = "clear"
    DECREASED = "decreased"
    ABSENT    = "absent"


class PulseQuality(str, Enum):
    STRONG  = "strong"
    WEAK    = "weak"
    THREADY = "thready"
    ABSENT  = "absent"


class SkinColor(str, Enum):
    PINK     = "pink"
    PALE     = "pale"
    MOTTLED  = "mottled"
    CYANOTIC = "cyanotic"


class SkinPerfusion(str, Enum):
    WARM = "warm"
    COOL = "cool"
    COLD = "cold"


class Consciousness(str, Enum):
    """AVPU scale."""
    ALERT        = "alert"
    VERBAL       = "verbal"
    PAIN         = "pain"
    UNRESPONSIVE = "unresponsive"


class Pupils(str, Enum):
    NORMAL      = "normal"
    DILATED     = "dilated"
    CONSTRICTED = "constricted"
    UNEQUAL     = "unequal"
    FIXED       = "fixed"


class RashType(str, Enum):
    PETECHIAL      = "petechial"
    PURPURIC       = "purpuric"
    MACULOPAPULAR  = "maculopapular"
    URTICARIAL     = "urticarial"
    OTHER          = "other"


class Phase(str, Enum):
    """ABCDE primary-survey phases, in order."""
    AIRWAY      = "airway"
    BREATHING   = "breathing"
    CIRCULATION = "circulation"
    DISABILITY  = "disability"
    EXPOSURE    = "exposure"


# ── Demographics ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PatientProfile:
    """Weight and age of the child; drives age-scaled thresholds and dosing."""
    weight_kg: float
    age_years: int = 0
    age_months: int = 0

    @property
    def age_in_years(self) -> float:
        return self.age_years + self.age_months / 12

    @property
    def expected_weight_kg(self) -> float:
        """APLS weight-for-age estimate."""
        age = self.age_in_years
        if age < 1:
            return self.age_months / 2 + 4
        if age <= 10:
            return (age + 4) * 2
        return 3 * age + 7

    def to_dict(self) -> dict:
        return {
            "weight_kg": self.weight_kg,
            "age_years": self.age_years,
            "age_months": self.age_months,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PatientProfile":
        data = {_to_snake(k): v for k, v in data.items()}
        weight = data.get("weight_kg", data.get("weight"))
        if weight is None:
            raise ValueError("PatientProfile requires a weight")
        return cls(
            weight_kg=float(weight),
            age_years=int(data.get("age_years", data.get("age", 0)) or 0),
            age_months=int(data.get("age_months", 0) or 0),
        )


# ── Snapshot ────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AssessmentSnapshot:
    """
    Immutable ABCDE observations at a point in time.

    Units: temperature °C, capillary_refill seconds, glucose mg/dL,
    lactate mmol/L, urine_output mL/kg/h, systolic_bp mmHg.
    """
    # ── Vitals ────────────────────────────────────────────────────────────
    heart_rate: Optional[float] = None
    respiratory_rate: Optional[float] = None
    spo2: Optional[float] = None
    systolic_bp: Optional[float] = None
    temperature: Optional[float] = None
    capillary_refill: Optional[float] = None
    glucose: Optional[float] = None
    lactate: Optional[float] = None
    urine_output: Optional[float] = None

    # ── Airway / breathing ────────────────────────────────────────────────
    airway_patency: Optional[AirwayPatency] = None
    stridor: Optional[bool] = None
    breathing_adequate: Optional[bool] = None
    work_of_breathing: Optional[WorkOfBreathing] = None
    breath_sounds: Optional[BreathSounds] = None
    grunting: Optional[bool] = None
    retractions: Optional[bool] = None
    nasal_flare: Optional[bool] = None

    # ── Circulation ───────────────────────────────────────────────────────
    pulse_present: Optional[bool] = None
    pulse_quality: Optional[PulseQuality] = None
    skin_color: Optional[SkinColor] = None
    skin_perfusion: Optional[SkinPerfusion] = None

    # ── Disability ────────────────────────────────────────────────────────
    consciousness: Optional[Consciousness] = None
    pupils: Optional[Pupils] = None
    seizures: Optional[bool] = None

    # ── Exposure ──────────────────────────────────────────────────────────
    rash: Optional[bool] = None
    rash_type: Optional[RashType] = None

    # ── Clinician-flagged findings ────────────────────────────────────────
    fever: Optional[bool] = None
    hypothermia: Optional[bool] = None
    hypotension: Optional[bool] = None
    metabolic_acidosis: Optional[bool] = None
    volume_loss: Optional[bool] = None

    # ── Demographics ──────────────────────────────────────────────────────
    patient: Optional[PatientProfile] = None

    def get(self, name: str) -> Any:
        """Observation by field name, None when unrecorded or unknown."""
        return getattr(self, name, None)

    @property
    def age_in_years(self) -> Optional[float]:
        return self.patient.age_in_years if self.patient else None

    def recorded_fields(self) -> Dict[str, Any]:
        """Only the observations that were actually made."""
        return {
            f.name: self.get(f.name)
            for f in fields(self)
            if f.name != "patient" and self.get(f.name) is not None
        }

    def to_dict(self) -> dict:
        out: Dict[str, Any] = {}
        for name, value in self.recorded_fields().items():
            out[name] = value.value if isinstance(value, Enum) else value
        if self.patient is not None:
            out["patient"] = asdict(self.patient)
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AssessmentSnapshot":
        """
        Build a snapshot from a loosely keyed dict.

        Accepts camelCase or snake_case keys plus a few bedside aliases
        (``avpu``, ``spO2``, ``temp``). Unknown keys are ignored; enum and
        numeric values that cannot be parsed are dropped with a warning so
        the field reads as unrecorded.
        """
        known = {f.name: f for f in fields(cls)}
        kwargs: Dict[str, Any] = {}

        for raw_key, value in data.items():
            key = _ALIASES.get(raw_key, _to_snake(raw_key))
            if key not in known or value is None:
                continue
            if key == "patient":
                kwargs[key] = value if isinstance(value, PatientProfile) else PatientProfile.from_dict(value)
                continue
            enum_type = _ENUM_FIELDS.get(key)
            if enum_type is not None:
                parsed = _parse_enum(enum_type, value)
                if parsed is None:
                    logger.warning(f"AssessmentSnapshot: ignoring unrecognised {key}={value!r}")
                    continue
                value = parsed
            elif key in _NUMERIC_FIELDS:
                number = _parse_number(value)
                if number is None:
                    logger.warning(f"AssessmentSnapshot: ignoring non-numeric {key}={value!r}")
                    continue
                value = number
            kwargs[key] = value

        return cls(**kwargs)


# ── Parsing helpers ─────────────────────────────────────────────────────────

_ENUM_FIELDS: Dict[str, Type[Enum]] = {
    "airway_patency":    AirwayPatency,
    "work_of_breathing": WorkOfBreathing,
    "breath_sounds":     BreathSounds,
    "pulse_quality":     PulseQuality,
    "skin_color":        SkinColor,
    "skin_perfusion":    SkinPerfusion,
    "consciousness":     Consciousness,
    "pupils":            Pupils,
    "rash_type":         RashType,
}

_NUMERIC_FIELDS = frozenset({
    "heart_rate", "respiratory_rate", "spo2", "systolic_bp", "temperature",
    "capillary_refill", "glucose", "lactate", "urine_output",
})

_ALIASES = {
    "avpu":        "consciousness",
    "spO2":        "spo2",
    "SpO2":        "spo2",
    "temp":        "temperature",
    "crt":         "capillary_refill",
    "pupilSize":   "pupils",
    "nasalFlare":  "nasal_flare",
    "systolicBP":  "systolic_bp",
}

_CAMEL = re.compile(r"(?<!^)(?=[A-Z])")


def _to_snake(key: str) -> str:
    return _CAMEL.sub("_", key).lower()


def _parse_enum(enum_type: Type[Enum], value: Any) -> Optional[Enum]:
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(str(value).strip().lower().replace("-", "_"))
    except ValueError:
        return None


def _parse_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None
