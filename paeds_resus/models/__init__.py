"""
Pydantic request/response models for the HTTP API.
"""
from .schemas import (
    AssessmentInput,
    AssessmentRequest,
    EscalationResponse,
    HealthResponse,
    OutcomeRequest,
    OverrideRequest,
    PatientInput,
    PerformedActionInput,
    PhaseValidationRequest,
    ReactivateRequest,
    ReassessmentRequest,
    SafetyCheckRequest,
    SafetyCheckResponse,
    SessionCreateRequest,
    SimulationScoreRequest,
)

__all__ = [
    "AssessmentInput",
    "AssessmentRequest",
    "EscalationResponse",
    "HealthResponse",
    "OutcomeRequest",
    "OverrideRequest",
    "PatientInput",
    "PerformedActionInput",
    "PhaseValidationRequest",
    "ReactivateRequest",
    "ReassessmentRequest",
    "SafetyCheckRequest",
    "SafetyCheckResponse",
    "SessionCreateRequest",
    "SimulationScoreRequest",
]
