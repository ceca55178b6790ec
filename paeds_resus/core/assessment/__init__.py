"""
Assessment model: patient demographics and ABCDE snapshots.
"""
from .base import (
    AirwayPatency,
    AssessmentSnapshot,
    BreathSounds,
    Consciousness,
    PatientProfile,
    Phase,
    PulseQuality,
    Pupils,
    RashType,
    SkinColor,
    SkinPerfusion,
    WorkOfBreathing,
)

__all__ = [
    "AirwayPatency",
    "AssessmentSnapshot",
    "BreathSounds",
    "Consciousness",
    "PatientProfile",
    "Phase",
    "PulseQuality",
    "Pupils",
    "RashType",
    "SkinColor",
    "SkinPerfusion",
    "WorkOfBreathing",
]
