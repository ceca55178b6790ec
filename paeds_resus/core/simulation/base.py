"""
Simulation Case Models

Cases are authored content stored as JSON and validated with pydantic on
load. All case models are frozen; a loaded case is never modified.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SimulationDifficulty(str, Enum):
    BEGINNER     = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED     = "advanced"
    EXPERT       = "expert"


class SimulationCategory(str, Enum):
    CARDIAC_ARREST      = "cardiac_arrest"
    RESPIRATORY_FAILURE = "respiratory_failure"
    ANAPHYLAXIS         = "anaphylaxis"
    SEPTIC_SHOCK        = "septic_shock"
    STATUS_EPILEPTICUS  = "status_epilepticus"
    TRAUMA              = "trauma"
    NEONATAL            = "neonatal"
    DKA                 = "dka"


CATEGORY_LABELS: Dict[SimulationCategory, str] = {
    SimulationCategory.CARDIAC_ARREST:      "Cardiac Arrest",
    SimulationCategory.RESPIRATORY_FAILURE: "Respiratory Failure",
    SimulationCategory.ANAPHYLAXIS:         "Anaphylaxis",
    SimulationCategory.SEPTIC_SHOCK:        "Septic Shock",
    SimulationCategory.STATUS_EPILEPTICUS:  "Status Epilepticus",
    SimulationCategory.TRAUMA:              "Trauma",
    SimulationCategory.NEONATAL:            "Neonatal",
    SimulationCategory.DKA:                 "DKA",
}


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class BloodPressure(_Frozen):
    systolic: float
    diastolic: float


class Vitals(_Frozen):
    """Full initial vitals, or a partial update when attached to an event."""
    heart_rate: Optional[float] = None
    respiratory_rate: Optional[float] = None
    blood_pressure: Optional[BloodPressure] = None
    oxygen_saturation: Optional[float] = None
    temperature: Optional[float] = None
    capillary_refill: Optional[float] = None
    consciousness: Optional[Literal["alert", "voice", "pain", "unresponsive"]] = None
    pupils: Optional[Literal["normal", "dilated", "constricted", "unequal"]] = None

    def merged(self, update: Optional["Vitals"]) -> "Vitals":
        """Vitals with every field set in ``update`` replacing the current value."""
        if update is None:
            return self
        return self.model_copy(update={name: value for name, value in update if value is not None})


class CasePatient(_Frozen):
    age_years: int = Field(ge=0)
    age_months: int = Field(default=0, ge=0, le=11)
    weight_kg: float = Field(gt=0)
    gender: Literal["male", "female"]
    chief_complaint: str
    history: str = ""
    allergies: List[str] = Field(default_factory=list)
    medications: List[str] = Field(default_factory=list)


class SimulationEvent(_Frozen):
    id: str
    time_offset: float = Field(ge=0, description="Seconds from case start")
    type: Literal["vital_change", "symptom", "deterioration", "improvement", "prompt", "critical"]
    description: str
    vitals: Optional[Vitals] = None
    expected_action: Optional[str] = None
    critical_window: Optional[float] = Field(default=None, gt=0, description="Seconds to respond")
    points: int = 0


class SimulationAction(_Frozen):
    id: str
    name: str
    category: Literal[
        "assessment", "airway", "breathing", "circulation",
        "medication", "procedure", "communication", "monitoring",
    ]
    points: int
    feedback: str
    time_bonus: Optional[int] = Field(default=None, ge=0)


class CaseTranslation(_Frozen):
    title: str
    description: str


class SimulationCase(_Frozen):
    id: str
    title: str
    category: SimulationCategory
    difficulty: SimulationDifficulty
    duration_minutes: float = Field(gt=0)
    description: str
    learning_objectives: List[str]
    patient_profile: CasePatient
    initial_vitals: Vitals
    events: List[SimulationEvent]
    correct_actions: List[SimulationAction] = Field(min_length=1)
    incorrect_actions: List[SimulationAction] = Field(default_factory=list)
    debriefing_points: List[str] = Field(default_factory=list)
    passing_score: float = Field(ge=0, le=100)
    translations: Dict[str, CaseTranslation] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_consistency(self) -> "SimulationCase":
        offsets = [e.time_offset for e in self.events]
        if offsets != sorted(offsets):
            raise ValueError("events must be ordered by time_offset")
        ids = [a.id for a in self.correct_actions + self.incorrect_actions]
        if len(ids) != len(set(ids)):
            raise ValueError("action ids must be unique across correct and incorrect actions")
        if any(a.points < 0 for a in self.correct_actions):
            raise ValueError("correct actions must carry non-negative points")
        if any(a.points > 0 for a in self.incorrect_actions):
            raise ValueError("incorrect actions must carry zero or negative points")
        return self

    @property
    def duration_seconds(self) -> float:
        return self.duration_minutes * 60

    @property
    def max_score(self) -> int:
        return sum(a.points + (a.time_bonus or 0) for a in self.correct_actions)

    def action(self, action_id: str) -> Optional[SimulationAction]:
        for a in self.correct_actions + self.incorrect_actions:
            if a.id == action_id:
                return a
        return None

    def localized(self, language: str) -> CaseTranslation:
        """Title/description in ``language``, falling back to the authored text."""
        return self.translations.get(language) or CaseTranslation(title=self.title, description=self.description)

    def overview(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category.value,
            "difficulty": self.difficulty.value,
            "duration_minutes": self.duration_minutes,
            "description": self.description,
            "passing_score": self.passing_score,
            "max_score": self.max_score,
        }


# ── Results ─────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PerformedAction:
    action_id: str
    timestamp: datetime


@dataclass
class ScoredAction:
    action_id: str
    name: str
    timestamp: datetime
    points_earned: int
    feedback: str
    correct: bool

    def to_dict(self) -> dict:
        return {
            "action_id": self.action_id,
            "name": self.name,
            "timestamp": self.timestamp.isoformat(),
            "points_earned": self.points_earned,
            "feedback": self.feedback,
            "correct": self.correct,
        }


@dataclass
class SimulationResult:
    case_id: str
    start_time: datetime
    end_time: datetime
    total_score: int
    max_score: int
    percentage: float
    passed: bool
    scored_actions: List[ScoredAction] = field(default_factory=list)
    missed_actions: List[str] = field(default_factory=list)
    critical_errors: List[str] = field(default_factory=list)
    time_to_first_action: float = 0.0       # seconds
    average_response_time: float = 0.0      # seconds
    feedback: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "case_id": self.case_id,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "total_score": self.total_score,
            "max_score": self.max_score,
            "percentage": round(self.percentage, 1),
            "passed": self.passed,
            "scored_actions": [a.to_dict() for a in self.scored_actions],
            "missed_actions": list(self.missed_actions),
            "critical_errors": list(self.critical_errors),
            "time_to_first_action": round(self.time_to_first_action, 1),
            "average_response_time": round(self.average_response_time, 1),
            "feedback": list(self.feedback),
        }
