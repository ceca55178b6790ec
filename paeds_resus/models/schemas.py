"""
API Schemas

Assessments arrive camelCase or snake_case; vitals must be numeric (a
value such as "fast" is a 422, not a silently ignored field). Enumerated
observations stay as strings and are parsed leniently by
``AssessmentSnapshot.from_dict``.
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from paeds_resus.core.assessment import AssessmentSnapshot


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    timestamp: datetime
    uptime_seconds: float
    engines_loaded: int = 0
    simulation_cases: int = 0


# ---- Assessments ----

class AssessmentInput(BaseModel):
    """ABCDE observations. Every field is optional; unknown keys are ignored."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    # Vitals
    heart_rate: Optional[float] = Field(None, ge=0, description="beats/min")
    respiratory_rate: Optional[float] = Field(None, ge=0, description="breaths/min")
    spo2: Optional[float] = Field(
        None, ge=0, le=100, validation_alias=AliasChoices("spo2", "spO2", "SpO2"),
    )
    systolic_bp: Optional[float] = Field(
        None, ge=0, validation_alias=AliasChoices("systolic_bp", "systolicBp", "systolicBP"),
        description="mmHg",
    )
    temperature: Optional[float] = Field(
        None, validation_alias=AliasChoices("temperature", "temp"), description="deg C",
    )
    capillary_refill: Optional[float] = Field(
        None, ge=0, validation_alias=AliasChoices("capillary_refill", "capillaryRefill", "crt"),
        description="seconds",
    )
    glucose: Optional[float] = Field(None, ge=0, description="mmol/L")
    lactate: Optional[float] = Field(None, ge=0, description="mmol/L")
    urine_output: Optional[float] = Field(None, ge=0, description="mL/kg/h")

    # Airway / breathing
    airway_patency: Optional[str] = None
    stridor: Optional[bool] = None
    breathing_adequate: Optional[bool] = None
    work_of_breathing: Optional[str] = None
    breath_sounds: Optional[str] = None
    grunting: Optional[bool] = None
    retractions: Optional[bool] = None
    nasal_flare: Optional[bool] = None

    # Circulation
    pulse_present: Optional[bool] = None
    pulse_quality: Optional[str] = None
    skin_color: Optional[str] = None
    skin_perfusion: Optional[str] = None

    # Disability
    consciousness: Optional[str] = Field(
        None, validation_alias=AliasChoices("consciousness", "avpu"),
    )
    pupils: Optional[str] = Field(
        None, validation_alias=AliasChoices("pupils", "pupilSize"),
    )
    seizures: Optional[bool] = None

    # Exposure
    rash: Optional[bool] = None
    rash_type: Optional[str] = None

    # Clinician-flagged findings
    fever: Optional[bool] = None
    hypothermia: Optional[bool] = None
    hypotension: Optional[bool] = None
    metabolic_acidosis: Optional[bool] = None
    volume_loss: Optional[bool] = None

    def to_snapshot(self) -> AssessmentSnapshot:
        return AssessmentSnapshot.from_dict(self.model_dump(exclude_none=True))


# ---- Sessions ----

class PatientInput(BaseModel):
    """Child demographics for a session."""
    weight_kg: float = Field(..., gt=0, le=200, description="Body weight in kg")
    age_years: int = Field(0, ge=0, le=18)
    age_months: int = Field(0, ge=0, le=11)


class SessionCreateRequest(BaseModel):
    patient: PatientInput
    session_id: Optional[str] = Field(None, description="Client-chosen id; generated when omitted")
    assessment: Optional[AssessmentInput] = Field(None, description="Optional first assessment")


class AssessmentRequest(BaseModel):
    assessment: AssessmentInput = Field(..., description="ABCDE observations")


class ReactivateRequest(BaseModel):
    assessment: Optional[AssessmentInput] = Field(
        None, description="Triggering observations; the latest assessment is used when omitted",
    )


# ---- Safety / reassessment ----

class SafetyCheckRequest(BaseModel):
    current_phase: str
    next_phase: str
    assessment: AssessmentInput = Field(default_factory=AssessmentInput)
    acknowledged: List[str] = Field(default_factory=list, description="Rule ids whose intervention is done")


class SafetyCheckResponse(BaseModel):
    blocked: bool
    rule: Optional[Dict[str, Any]] = None
    violations: List[Dict[str, Any]] = Field(default_factory=list)


class PhaseValidationRequest(BaseModel):
    phase: str
    assessment: AssessmentInput = Field(default_factory=AssessmentInput)


class ReassessmentRequest(BaseModel):
    response: str = Field(..., description="better | same | worse | unable")
    phase: str
    intervention_count: int = Field(1, ge=0)


class EscalationResponse(BaseModel):
    type: str
    title: str
    guidance: str
    urgency: str
    next_steps: List[str]


# ---- Overrides ----

class OverrideRequest(BaseModel):
    clinician_id: str
    clinician_name: str
    clinician_role: str
    engine_id: str
    action_id: str
    overridden_action: str = Field(..., description="What was done instead")
    reason: str
    reason_details: str = ""
    clinical_context: str = ""
    follow_up_required: bool = False


class OutcomeRequest(BaseModel):
    outcome: Literal["improved", "stable", "deteriorated", "unknown"]
    notes: str = ""


# ---- Simulation ----

class PerformedActionInput(BaseModel):
    action_id: str
    timestamp: datetime


class SimulationScoreRequest(BaseModel):
    start_time: datetime
    end_time: Optional[datetime] = None
    actions: List[PerformedActionInput] = Field(default_factory=list)
