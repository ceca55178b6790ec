"""
Shock and Circulatory Emergency Engines

Septic, hypovolaemic, cardiogenic and anaphylactic shock. Recognition
follows the paediatric SIRS / perfusion criteria in ``criteria.py``;
management follows fluid-first resuscitation except in cardiogenic shock,
where boluses are limited.
"""
from __future__ import annotations

from paeds_resus.core.assessment import Phase, RashType, WorkOfBreathing
from .base import Action, ActionUrgency, Dosing, EngineDefinition, EngineSeverity
from .conditions import IsTrue, all_of, any_of, at_least, above, below, one_of
from .criteria import (
    FEVER,
    HEART_FAILURE_HR,
    HYPOTHERMIA,
    INCREASED_WORK_OF_BREATHING,
    LOW_SYSTOLIC_FOR_AGE,
    OLIGURIA_ML_KG_HR,
    PERFUSION_ABNORMALITY,
    POOR_SKIN_COLOUR,
    PROLONGED_CRT,
    SIRS_HR,
    SIRS_RR,
    TEMPERATURE_ABNORMAL,
)

_CRITICAL = ActionUrgency.CRITICAL
_URGENT = ActionUrgency.URGENT

RINGERS_BOLUS = Dosing(drug="Ringer's lactate", per_kg=20, unit="mL", route="IV or IO",
                       note="bolus over 15 min; reassess after each 10 mL/kg")


# ── Septic shock ────────────────────────────────────────────────────────────

SEPTIC_SHOCK = EngineDefinition(
    id="septic-shock",
    name="Septic Shock Engine",
    description="Recognition and management of septic shock in paediatric patients",
    severity=EngineSeverity.CRITICAL,
    trigger=all_of(
        any_of(FEVER, HYPOTHERMIA, label="fever or hypothermia"),
        at_least(
            2,
            above("respiratory_rate", SIRS_RR),
            above("heart_rate", SIRS_HR),
            TEMPERATURE_ABNORMAL,
            INCREASED_WORK_OF_BREATHING,
            label="2 or more SIRS criteria",
        ),
        PERFUSION_ABNORMALITY,
    ),
    actions=(
        Action(
            id="sepsis-1-recognize", sequence=1,
            title="Recognize Septic Shock",
            description="Confirm infection source, fever or hypothermia, SIRS criteria and a perfusion abnormality",
            rationale="Each hour of delay to treatment raises septic shock mortality.",
            expected_outcome="Septic shock confirmed, team alerted, management started",
            urgency=_CRITICAL, phase=Phase.CIRCULATION, timeframe="Immediate",
            monitoring=("Temperature", "Heart rate", "Respiratory rate", "Perfusion signs", "Lactate"),
        ),
        Action(
            id="sepsis-2-cultures", sequence=2,
            title="Obtain Blood Cultures",
            description="Draw blood cultures before antibiotics when this does not delay treatment",
            rationale="Cultures identify resistant organisms and allow later de-escalation.",
            expected_outcome="Blood cultures sent",
            urgency=_URGENT, phase=Phase.CIRCULATION, timeframe="5 minutes",
            monitoring=("Culture results (48-72 hours)",),
        ),
        Action(
            id="sepsis-3-fluids", sequence=3,
            title="Administer Fluid Bolus",
            description="Give Ringer's lactate 20 mL/kg over 15 minutes. Reassess perfusion after each 10 mL/kg.",
            rationale="Fluid restores circulating volume and is first-line in septic shock.",
            expected_outcome="CRT under 2 s, heart rate falling, blood pressure and urine output improving",
            urgency=_CRITICAL, phase=Phase.CIRCULATION, timeframe="15 minutes",
            dosing=(RINGERS_BOLUS,),
            monitoring=("Perfusion signs", "Heart rate", "Blood pressure", "Urine output", "Oedema/crackles"),
        ),
        Action(
            id="sepsis-4-antibiotics", sequence=4,
            title="Administer Broad-Spectrum Antibiotics",
            description="Give empiric antibiotics within 1 hour of recognition and adjust to cultures.",
            rationale="Early empiric cover reduces bacterial load before cultures return.",
            expected_outcome="Fever response and clinical improvement",
            urgency=_CRITICAL, phase=Phase.CIRCULATION, timeframe="Within 1 hour",
            monitoring=("Temperature", "Perfusion signs", "Culture results", "Antibiotic levels"),
        ),
        Action(
            id="sepsis-5-vasopressors", sequence=5,
            title="Consider Vasopressors if Hypotensive After Fluids",
            description="If SBP stays below 90 + 2×age after 60 mL/kg of fluid, start an epinephrine infusion",
            rationale="Vasopressors maintain perfusion pressure when fluid alone is insufficient.",
            expected_outcome="Blood pressure normalised, perfusion maintained",
            urgency=_CRITICAL, phase=Phase.CIRCULATION, timeframe="After fluid reassessment",
            dosing=(Dosing(drug="Epinephrine", per_kg=0.05, per_kg_upper=0.1, unit="mcg",
                           rate="/min", route="IV infusion"),),
            prerequisites=("IV access established", "Fluids given (60 mL/kg)", "Still hypotensive"),
            monitoring=("Blood pressure", "Perfusion", "Urine output", "Lactate clearance"),
        ),
    ),
    monitoring=(
        "Temperature (target normothermia)",
        "Heart rate (should decrease with treatment)",
        "Blood pressure (target age-appropriate)",
        "Capillary refill (target <2 sec)",
        "Urine output (target 0.5-1 mL/kg/hr)",
        "Lactate (target <2 mmol/L)",
        "Skin perfusion (target pink, warm)",
        "Mental status (target alert)",
    ),
)


# ── Anaphylaxis ─────────────────────────────────────────────────────────────

ANAPHYLAXIS = EngineDefinition(
    id="anaphylaxis",
    name="Anaphylaxis Engine",
    description="Recognition and management of anaphylaxis in paediatric patients",
    severity=EngineSeverity.CRITICAL,
    trigger=at_least(
        2,
        any_of(IsTrue("rash"), one_of("rash_type", RashType.URTICARIAL), label="skin involvement"),
        any_of(INCREASED_WORK_OF_BREATHING, IsTrue("stridor"), label="respiratory involvement"),
        any_of(IsTrue("hypotension"), LOW_SYSTOLIC_FOR_AGE, label="cardiovascular involvement"),
        label="2 or more organ systems involved",
    ),
    actions=(
        Action(
            id="ana-1-recognize", sequence=1,
            title="Recognize Anaphylaxis",
            description="Confirm acute onset with 2 or more systems: skin, respiratory, cardiovascular or GI",
            rationale="Early recognition of anaphylaxis is critical for survival.",
            expected_outcome="Anaphylaxis confirmed, team alerted",
            urgency=_CRITICAL, phase=Phase.CIRCULATION, timeframe="Immediate",
            monitoring=("Respiratory status", "Blood pressure", "Heart rate", "Skin signs"),
        ),
        Action(
            id="ana-2-epinephrine", sequence=2,
            title="Administer Epinephrine IM",
            description="Give epinephrine 0.01 mg/kg IM (1:1000) into the anterolateral thigh immediately",
            rationale="Epinephrine is the definitive treatment; the IM route absorbs rapidly.",
            expected_outcome="Symptoms resolve within 5-15 minutes",
            urgency=_CRITICAL, phase=Phase.CIRCULATION, timeframe="Immediate",
            dosing=(Dosing(drug="Epinephrine", per_kg=0.01, unit="mg", max_dose=0.5,
                           route="IM (anterolateral thigh)"),),
            monitoring=("Respiratory status", "Blood pressure", "Heart rate", "Skin signs"),
        ),
        Action(
            id="ana-3-oxygen", sequence=3,
            title="Apply Oxygen and Position",
            description="High-flow oxygen; lie supine with legs raised",
            rationale="Supports oxygenation and venous return.",
            expected_outcome="SpO2 above 94%, improved perfusion",
            urgency=_CRITICAL, phase=Phase.BREATHING, timeframe="Immediate",
            monitoring=("SpO2", "Respiratory effort", "Blood pressure"),
        ),
        Action(
            id="ana-4-iv-access", sequence=4,
            title="Establish IV Access and Give Fluids",
            description="Start IV and give Ringer's lactate 20 mL/kg over 15 minutes",
            rationale="Fluid supports perfusion in distributive shock.",
            expected_outcome="Blood pressure normalised",
            urgency=_CRITICAL, phase=Phase.CIRCULATION, timeframe="15 minutes",
            dosing=(RINGERS_BOLUS,),
            monitoring=("Blood pressure", "Heart rate", "Perfusion signs"),
        ),
        Action(
            id="ana-5-antihistamines", sequence=5,
            title="Administer Antihistamines and Steroids",
            description="Give diphenhydramine 1 mg/kg IV (max 50 mg) and methylprednisolone 1-2 mg/kg IV",
            rationale="Reduces the risk of a biphasic reaction.",
            expected_outcome="No recurrence of symptoms",
            urgency=_URGENT, phase=Phase.CIRCULATION, timeframe="After epinephrine and fluids",
            dosing=(
                Dosing(drug="Diphenhydramine", per_kg=1, unit="mg", max_dose=50, route="IV"),
                Dosing(drug="Methylprednisolone", per_kg=1, per_kg_upper=2, unit="mg", route="IV"),
            ),
            monitoring=("Symptoms", "Respiratory status"),
        ),
    ),
    monitoring=(
        "Respiratory status (stridor, wheeze)",
        "Blood pressure (target age-appropriate)",
        "Heart rate",
        "SpO2 (target >94%)",
        "Skin signs (urticaria, flushing)",
        "GI symptoms (vomiting, diarrhoea)",
        "Mental status",
        "Biphasic reaction (1-72 hours later)",
    ),
)


# ── Hypovolaemic shock ──────────────────────────────────────────────────────

HYPOVOLEMIC_SHOCK = EngineDefinition(
    id="hypovolemic-shock",
    name="Hypovolemic Shock Engine",
    description="Recognition and management of hypovolaemic shock (haemorrhage or dehydration)",
    severity=EngineSeverity.CRITICAL,
    trigger=all_of(
        PERFUSION_ABNORMALITY,
        any_of(IsTrue("volume_loss"), below("urine_output", OLIGURIA_ML_KG_HR), label="volume loss"),
    ),
    actions=(
        Action(
            id="hypo-1-hemorrhage-control", sequence=1,
            title="Control External Hemorrhage",
            description="Direct pressure with sterile gauze. Leave embedded objects in place.",
            rationale="Stopping ongoing loss comes before volume replacement.",
            expected_outcome="External bleeding controlled",
            urgency=_CRITICAL, phase=Phase.CIRCULATION, timeframe="Immediate",
            monitoring=("Bleeding status", "Vital signs"),
        ),
        Action(
            id="hypo-2-iv-access", sequence=2,
            title="Establish Large-Bore IV Access",
            description="Two large-bore cannulae, or IO if IV access fails",
            rationale="Rapid volume replacement needs wide-bore access.",
            expected_outcome="Two working access points",
            urgency=_CRITICAL, phase=Phase.CIRCULATION, timeframe="Immediate",
            monitoring=("IV patency", "Fluid flow rate"),
        ),
        Action(
            id="hypo-3-fluid-bolus", sequence=3,
            title="Administer Rapid Fluid Bolus",
            description="Give Ringer's lactate 20 mL/kg over 15 minutes. Reassess after each 10 mL/kg.",
            rationale="Restores circulating volume.",
            expected_outcome="Perfusion, heart rate and blood pressure improving",
            urgency=_CRITICAL, phase=Phase.CIRCULATION, timeframe="15 minutes",
            dosing=(RINGERS_BOLUS,),
            monitoring=("Perfusion signs", "Heart rate", "Blood pressure", "Urine output"),
        ),
        Action(
            id="hypo-4-type-cross", sequence=4,
            title="Type & Cross, Prepare for Transfusion",
            description="If haemorrhage is significant, send group and crossmatch and have O-negative ready",
            rationale="Blood replaces oxygen-carrying capacity that crystalloid cannot.",
            expected_outcome="Blood products available",
            urgency=_URGENT, phase=Phase.CIRCULATION, timeframe="Ongoing",
            monitoring=("Haemoglobin/haematocrit", "Continued bleeding"),
        ),
    ),
    monitoring=(
        "Bleeding status (controlled vs. ongoing)",
        "Heart rate (should decrease with fluids)",
        "Blood pressure (target age-appropriate)",
        "Capillary refill (target <2 sec)",
        "Urine output (target 0.5-1 mL/kg/hr)",
        "Skin perfusion (target pink, warm)",
        "Mental status (target alert)",
        "Haemoglobin/haematocrit",
    ),
)


# ── Cardiogenic shock ───────────────────────────────────────────────────────

CARDIOGENIC_SHOCK = EngineDefinition(
    id="cardiogenic-shock",
    name="Cardiogenic Shock Engine",
    description="Recognition and management of cardiogenic shock in paediatric patients",
    severity=EngineSeverity.CRITICAL,
    trigger=all_of(
        any_of(PROLONGED_CRT, POOR_SKIN_COLOUR, label="poor perfusion"),
        any_of(
            above("heart_rate", HEART_FAILURE_HR),
            one_of("work_of_breathing", WorkOfBreathing.SEVERE),
            IsTrue("retractions"),
            label="heart failure sign",
        ),
    ),
    actions=(
        Action(
            id="cardio-1-recognize", sequence=1,
            title="Recognize Cardiogenic Shock",
            description="Confirm tachycardia, respiratory distress, poor perfusion, possible murmur or gallop",
            rationale="Cardiogenic shock worsens with the large boluses used for other shock types.",
            expected_outcome="Cardiogenic shock identified, fluid strategy adjusted",
            urgency=_CRITICAL, phase=Phase.CIRCULATION, timeframe="Immediate",
            monitoring=("Heart rate", "Respiratory effort", "Perfusion signs", "Cardiac sounds"),
        ),
        Action(
            id="cardio-2-oxygen", sequence=2,
            title="Apply Oxygen and Position",
            description="High-flow oxygen, sit semi-upright to ease pulmonary oedema",
            rationale="Reduces work of breathing and myocardial oxygen demand.",
            expected_outcome="SpO2 above 94%",
            urgency=_CRITICAL, phase=Phase.BREATHING, timeframe="Immediate",
            monitoring=("SpO2", "Respiratory effort", "Crackles/oedema"),
        ),
        Action(
            id="cardio-3-iv-access", sequence=3,
            title="Establish IV Access",
            description="Place IV for medication; limit fluid boluses because of pulmonary oedema risk",
            rationale="Drug access is needed; volume is not the primary problem.",
            expected_outcome="IV access secured",
            urgency=_URGENT, phase=Phase.CIRCULATION, timeframe="Immediate",
            monitoring=("IV patency", "Fluid balance"),
        ),
        Action(
            id="cardio-4-inotropes", sequence=4,
            title="Start Inotropic Support",
            description="Start dobutamine 5-10 mcg/kg/min IV to improve contractility",
            rationale="Inotropes raise cardiac output.",
            expected_outcome="Perfusion and blood pressure improve",
            urgency=_CRITICAL, phase=Phase.CIRCULATION, timeframe="After IV access",
            dosing=(Dosing(drug="Dobutamine", per_kg=5, per_kg_upper=10, unit="mcg",
                           rate="/min", route="IV infusion"),),
            monitoring=("Heart rate", "Blood pressure", "Perfusion", "Urine output"),
        ),
        Action(
            id="cardio-5-diuretics", sequence=5,
            title="Consider Diuretics if Pulmonary Edema",
            description="If crackles or pulmonary oedema, give furosemide 1 mg/kg IV",
            rationale="Offloads fluid from the lungs.",
            expected_outcome="Improved oxygenation and work of breathing",
            urgency=_URGENT, phase=Phase.BREATHING, timeframe="After inotropes started",
            dosing=(Dosing(drug="Furosemide", per_kg=1, unit="mg", route="IV"),),
            prerequisites=("Inotropes started", "Pulmonary oedema present"),
            monitoring=("Urine output", "Crackles", "Respiratory effort"),
        ),
    ),
    monitoring=(
        "Heart rate (should decrease with treatment)",
        "Blood pressure (maintain age-appropriate)",
        "Perfusion signs (CRT, skin colour)",
        "Respiratory effort (should improve)",
        "SpO2 (target >94%)",
        "Urine output (target 0.5-1 mL/kg/hr)",
        "Cardiac sounds (murmur, gallop)",
        "Crackles/pulmonary oedema",
    ),
    contraindications=("Large-volume fluid boluses",),
)
