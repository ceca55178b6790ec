"""
Shared Recognition Criteria

Clinical building blocks reused by several engine triggers. Thresholds are
module-level constants so they can be reviewed without reading rule logic.
"""
from __future__ import annotations

from paeds_resus.core.assessment import (
    BreathSounds,
    Consciousness,
    RashType,
    SkinColor,
    WorkOfBreathing,
)
from .conditions import (
    AgeBanded,
    AgeLinear,
    IsTrue,
    any_of,
    above,
    below,
    one_of,
)

# ── Thresholds ──────────────────────────────────────────────────────────────
FEVER_TEMP_C        = 38.5
HYPOTHERMIA_TEMP_C  = 36.0
CRT_PROLONGED_S     = 2.0
LACTATE_HIGH        = 2.0     # mmol/L
SPO2_HYPOXAEMIA     = 90.0    # %
GLUCOSE_DKA         = 250.0   # mg/dL
OLIGURIA_ML_KG_HR   = 0.5
HEART_FAILURE_HR    = 150.0
MALNUTRITION_WEIGHT_FRACTION = 0.6

# Systolic floor: SBP below 90 + 2×age (years) counts as hypotension
SBP_FLOOR = AgeLinear(base=90, per_year=2)

# SIRS tachypnoea / tachycardia by age band: <1 y, <5 y, ≥5 y
SIRS_RR = AgeBanded(bands=((1, 40), (5, 35)), default=30)
SIRS_HR = AgeBanded(bands=((1, 160), (5, 150)), default=110)


# ── Building blocks ─────────────────────────────────────────────────────────
FEVER = any_of(IsTrue("fever"), above("temperature", FEVER_TEMP_C), label="fever")
HYPOTHERMIA = any_of(IsTrue("hypothermia"), below("temperature", HYPOTHERMIA_TEMP_C), label="hypothermia")
TEMPERATURE_ABNORMAL = any_of(
    above("temperature", FEVER_TEMP_C),
    below("temperature", HYPOTHERMIA_TEMP_C),
    label="temperature > 38.5 or < 36",
)

INCREASED_WORK_OF_BREATHING = one_of("work_of_breathing", WorkOfBreathing.INCREASED, WorkOfBreathing.SEVERE)
LOW_SYSTOLIC_FOR_AGE = below("systolic_bp", SBP_FLOOR)
PROLONGED_CRT = above("capillary_refill", CRT_PROLONGED_S)
POOR_SKIN_COLOUR = one_of("skin_color", SkinColor.MOTTLED, SkinColor.PALE)

# CRT, skin colour, lactate, low systolic for age
PERFUSION_ABNORMALITY = any_of(
    PROLONGED_CRT,
    POOR_SKIN_COLOUR,
    above("lactate", LACTATE_HIGH),
    LOW_SYSTOLIC_FOR_AGE,
    label="perfusion abnormality",
)

ALTERED_MENTAL_STATUS = one_of(
    "consciousness", Consciousness.VERBAL, Consciousness.PAIN, Consciousness.UNRESPONSIVE,
)

NON_BLANCHING_RASH = one_of("rash_type", RashType.PETECHIAL, RashType.PURPURIC)

INADEQUATE_BREATHING = any_of(
    one_of("breath_sounds", BreathSounds.DECREASED, BreathSounds.ABSENT),
    IsTrue("grunting"),
    IsTrue("retractions"),
    IsTrue("nasal_flare"),
    label="inadequate breathing",
)
