"""
Case simulation: authored cases, a session-scoped clock and end-of-run scoring.
"""
from .base import (
    CATEGORY_LABELS,
    BloodPressure,
    CasePatient,
    PerformedAction,
    ScoredAction,
    SimulationAction,
    SimulationCase,
    SimulationCategory,
    SimulationDifficulty,
    SimulationEvent,
    SimulationResult,
    Vitals,
)
from .clock import ClockState, SimulationClock
from .library import CaseLibrary, default_library, load_case
from .scorer import score_simulation

__all__ = [
    "CATEGORY_LABELS",
    "BloodPressure",
    "CasePatient",
    "PerformedAction",
    "ScoredAction",
    "SimulationAction",
    "SimulationCase",
    "SimulationCategory",
    "SimulationDifficulty",
    "SimulationEvent",
    "SimulationResult",
    "Vitals",
    "ClockState",
    "SimulationClock",
    "CaseLibrary",
    "default_library",
    "load_case",
    "score_simulation",
]
