"""
Pytest Configuration and Fixtures

Shared fixtures for the resuscitation decision engine tests.
"""
import pytest
from datetime import datetime, timedelta
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from paeds_resus.core.assessment import AssessmentSnapshot, PatientProfile
from paeds_resus.core.simulation import default_library


@pytest.fixture
def toddler() -> PatientProfile:
    """2-year-old at expected weight."""
    return PatientProfile(weight_kg=12, age_years=2)


@pytest.fixture
def septic_snapshot(toddler) -> AssessmentSnapshot:
    """Fever, age-scaled tachypnoea and tachycardia, prolonged CRT."""
    return AssessmentSnapshot(
        temperature=39,
        respiratory_rate=40,
        heart_rate=160,
        capillary_refill=3,
        patient=toddler,
    )


@pytest.fixture
def normal_snapshot(toddler) -> AssessmentSnapshot:
    """Well child with every vital inside normal limits."""
    return AssessmentSnapshot(
        temperature=37,
        respiratory_rate=28,
        heart_rate=110,
        capillary_refill=1.5,
        spo2=98,
        systolic_bp=100,
        patient=toddler,
    )


@pytest.fixture
def t0() -> datetime:
    return datetime(2026, 1, 1, 12, 0, 0)


@pytest.fixture
def later(t0):
    """Factory: ``later(seconds)`` returns t0 plus that many seconds."""
    return lambda seconds: t0 + timedelta(seconds=seconds)


@pytest.fixture
def case_library():
    return default_library()


@pytest.fixture
def long_justification() -> str:
    return "Patient has documented anaphylaxis to the first-line agent; alternative chosen after senior review."
