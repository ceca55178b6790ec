"""
Metabolic and Nutritional Engines

Diabetic ketoacidosis and severe acute malnutrition (WHO stabilisation and
rehabilitation phases).
"""
from __future__ import annotations

from paeds_resus.core.assessment import Phase
from .base import Action, ActionUrgency, Dosing, EngineDefinition, EngineSeverity
from .conditions import IsTrue, WeightBelowExpected, above, all_of
from .criteria import GLUCOSE_DKA, MALNUTRITION_WEIGHT_FRACTION

# ── DKA ─────────────────────────────────────────────────────────────────────

DKA = EngineDefinition(
    id="dka",
    name="DKA Engine",
    description="Recognition and management of diabetic ketoacidosis in paediatric patients",
    severity=EngineSeverity.CRITICAL,
    trigger=all_of(above("glucose", GLUCOSE_DKA), IsTrue("metabolic_acidosis")),
    actions=(
        Action(
            id="dka-1-recognize", sequence=1,
            title="Recognize DKA",
            description="Confirm glucose above 250 mg/dL, acidosis (pH <7.3, HCO3 <15) and ketosis",
            rationale="Early recognition shapes careful management that limits cerebral oedema risk.",
            expected_outcome="DKA confirmed and severity graded",
            urgency=ActionUrgency.CRITICAL, phase=Phase.DISABILITY, timeframe="Immediate",
            monitoring=("Glucose", "pH", "HCO3", "Ketones", "Osmolality"),
        ),
        Action(
            id="dka-2-fluids", sequence=2,
            title="Initiate Fluid Resuscitation",
            description="Ringer's lactate 10-20 mL/kg IV over 1 hour",
            rationale="Restores intravascular volume and dilutes glucose.",
            expected_outcome="Improved perfusion and urine output",
            urgency=ActionUrgency.CRITICAL, phase=Phase.CIRCULATION, timeframe="1 hour",
            dosing=(Dosing(drug="Ringer's lactate", per_kg=10, per_kg_upper=20, unit="mL", route="IV",
                           note="over 1 hour"),),
            monitoring=("Urine output", "Perfusion", "Glucose", "Osmolality"),
        ),
        Action(
            id="dka-3-insulin", sequence=3,
            title="Start Insulin Infusion",
            description="After initial fluid, insulin 0.1 units/kg/hr IV",
            rationale="Stops ketogenesis and lowers glucose gradually.",
            expected_outcome="Glucose falls 50-100 mg/dL per hour, acidosis improves",
            urgency=ActionUrgency.CRITICAL, phase=Phase.DISABILITY, timeframe="After initial fluid bolus",
            dosing=(Dosing(drug="Insulin", per_kg=0.1, unit="units", rate="/hr", route="IV infusion"),),
            prerequisites=("IV access", "Initial fluids given", "Glucose >250"),
            monitoring=("Glucose (target 50-100 mg/dL/hr decrease)", "pH", "HCO3", "Potassium"),
        ),
        Action(
            id="dka-4-electrolytes", sequence=4,
            title="Monitor and Correct Electrolytes",
            description="Frequent K+, Na+, Cl- and HCO3. Add potassium if K+ is below 5.5 mEq/L.",
            rationale="Insulin drives potassium into cells; hypokalaemia causes arrhythmia.",
            expected_outcome="Electrolytes normalised, rhythm stable",
            urgency=ActionUrgency.URGENT, phase=Phase.CIRCULATION, timeframe="Ongoing during treatment",
            monitoring=("Potassium (target 4-5 mEq/L)", "Sodium", "Chloride", "HCO3", "Cardiac rhythm"),
        ),
    ),
    monitoring=(
        "Glucose (target 50-100 mg/dL/hr decrease)",
        "pH (target >7.3)",
        "HCO3 (target >15 mEq/L)",
        "Potassium (target 4-5 mEq/L)",
        "Osmolality (target <320 mOsm/kg)",
        "Urine output (target 0.5-1 mL/kg/hr)",
        "Mental status (watch for cerebral oedema)",
        "Cardiac rhythm",
    ),
)


# ── Severe acute malnutrition ───────────────────────────────────────────────

SEVERE_MALNUTRITION = EngineDefinition(
    id="severe-malnutrition",
    name="Severe Malnutrition Engine",
    description="Recognition and management of severe acute malnutrition (SAM)",
    severity=EngineSeverity.URGENT,
    trigger=WeightBelowExpected(MALNUTRITION_WEIGHT_FRACTION),
    actions=(
        Action(
            id="sam-1-recognize", sequence=1,
            title="Recognize Severe Acute Malnutrition",
            description="Weight under 60% of expected, MUAC under 11.5 cm, or bilateral pitting oedema",
            rationale="SAM changes fluid, feeding and antibiotic management.",
            expected_outcome="SAM confirmed",
            urgency=ActionUrgency.URGENT, phase=Phase.EXPOSURE, timeframe="Immediate",
            monitoring=("Weight", "MUAC", "Oedema", "Vital signs"),
        ),
        Action(
            id="sam-2-stabilization", sequence=2,
            title="Stabilization Phase (First 24-48 hours)",
            description="Treat infection, correct electrolytes, feed 50-100 kcal/kg/day",
            rationale="Cautious feeding avoids refeeding syndrome.",
            expected_outcome="Stable vital signs and electrolytes",
            urgency=ActionUrgency.URGENT, phase=Phase.CIRCULATION, timeframe="24-48 hours",
            dosing=(Dosing(drug="Energy", per_kg=50, per_kg_upper=100, unit="kcal", rate="/day",
                           route="oral or NG tube", note="frequent small feeds"),),
            monitoring=("Vital signs", "Electrolytes", "Urine output", "Respiratory status"),
        ),
        Action(
            id="sam-3-micronutrients", sequence=3,
            title="Provide Micronutrient Supplementation",
            description="Vitamin A, zinc, folic acid; iron only once gaining weight",
            rationale="Micronutrient deficiency delays recovery.",
            expected_outcome="Supplements started",
            urgency=ActionUrgency.URGENT, phase=Phase.EXPOSURE, timeframe="Within 24 hours",
            monitoring=("Micronutrient levels (if available)", "Recovery progress"),
        ),
        Action(
            id="sam-4-rehabilitation", sequence=4,
            title="Rehabilitation Phase (After Stabilization)",
            description="Increase to 150-200 kcal/kg/day with therapeutic food",
            rationale="Catch-up growth needs high energy intake.",
            expected_outcome="Weight gain, oedema resolving",
            urgency=ActionUrgency.URGENT, phase=Phase.EXPOSURE, timeframe="Days 3-7 and beyond",
            dosing=(Dosing(drug="Energy", per_kg=150, per_kg_upper=200, unit="kcal", rate="/day",
                           route="oral or NG tube"),),
            monitoring=("Weight gain", "Oedema resolution", "Appetite", "Stool output"),
        ),
    ),
    monitoring=(
        "Weight (daily)",
        "MUAC (weekly)",
        "Oedema (daily)",
        "Vital signs (stable)",
        "Electrolytes (K+, Mg2+, PO4)",
        "Appetite (improving)",
        "Stool output (normal)",
        "Infection signs",
    ),
    contraindications=("Rapid refeeding in the stabilisation phase",),
)
