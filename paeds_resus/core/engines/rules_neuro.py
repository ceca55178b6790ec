"""
Neurological Emergency Engines

Status epilepticus and bacterial meningitis.
"""
from __future__ import annotations

from paeds_resus.core.assessment import Phase
from .base import Action, ActionUrgency, Dosing, EngineDefinition, EngineSeverity
from .conditions import IsTrue, all_of, any_of
from .criteria import ALTERED_MENTAL_STATUS, FEVER, NON_BLANCHING_RASH

_CRITICAL = ActionUrgency.CRITICAL
_URGENT = ActionUrgency.URGENT


# ── Status epilepticus ──────────────────────────────────────────────────────

STATUS_EPILEPTICUS = EngineDefinition(
    id="status-epilepticus",
    name="Status Epilepticus Engine",
    description="Recognition and management of status epilepticus in paediatric patients",
    severity=EngineSeverity.CRITICAL,
    trigger=IsTrue("seizures"),
    actions=(
        Action(
            id="seizure-1-safety", sequence=1,
            title="Ensure Scene Safety",
            description="Protect from injury and clear nearby objects; do not restrain",
            rationale="Prevents secondary injury.",
            expected_outcome="Child protected from injury",
            urgency=_CRITICAL, phase=Phase.DISABILITY, timeframe="Immediate",
            monitoring=("Seizure activity", "Injuries"),
        ),
        Action(
            id="seizure-2-position", sequence=2,
            title="Position on Side",
            description="Recovery position (left lateral) to protect the airway",
            rationale="Prevents aspiration of secretions or vomit.",
            expected_outcome="Airway protected",
            urgency=_CRITICAL, phase=Phase.AIRWAY, timeframe="Immediate",
            monitoring=("Airway patency", "Breathing"),
        ),
        Action(
            id="seizure-3-oxygen", sequence=3,
            title="Apply Oxygen",
            description="High-flow oxygen throughout the seizure",
            rationale="Seizures raise metabolic demand and cause hypoxaemia.",
            expected_outcome="SpO2 above 94%",
            urgency=_CRITICAL, phase=Phase.BREATHING, timeframe="Immediate",
            monitoring=("SpO2", "Respiratory effort"),
        ),
        Action(
            id="seizure-4-benzodiazepine", sequence=4,
            title="Administer First-Line Benzodiazepine",
            description="Diazepam 0.1-0.3 mg/kg IV/IO (max 10 mg) or lorazepam 0.05-0.1 mg/kg IV/IO (max 4 mg)",
            rationale="Benzodiazepines are first-line for seizure termination.",
            expected_outcome="Seizure stops within 2-5 minutes",
            urgency=_CRITICAL, phase=Phase.DISABILITY, timeframe="Within 5 minutes of seizure onset",
            dosing=(
                Dosing(drug="Diazepam", per_kg=0.1, per_kg_upper=0.3, unit="mg", max_dose=10, route="IV or IO"),
                Dosing(drug="Lorazepam", per_kg=0.05, per_kg_upper=0.1, unit="mg", max_dose=4, route="IV or IO"),
            ),
            prerequisites=("IV or IO access", "Airway patent", "Oxygen applied"),
            monitoring=("Seizure cessation", "Respiratory depression", "Blood pressure"),
        ),
        Action(
            id="seizure-5-anticonvulsant", sequence=5,
            title="Administer Second-Line Anticonvulsant",
            description="If seizing 5 minutes after the benzodiazepine: phenytoin 15-20 mg/kg or levetiracetam 20-30 mg/kg IV",
            rationale="Second-line agents for benzodiazepine-refractory seizures.",
            expected_outcome="Seizure stops",
            urgency=_CRITICAL, phase=Phase.DISABILITY, timeframe="5-10 minutes after first-line",
            dosing=(
                Dosing(drug="Phenytoin", per_kg=15, per_kg_upper=20, unit="mg", route="IV"),
                Dosing(drug="Levetiracetam", per_kg=20, per_kg_upper=30, unit="mg", route="IV"),
            ),
            prerequisites=("Benzodiazepine given", "Seizure continuing"),
            monitoring=("Seizure cessation", "Cardiac rhythm", "Blood pressure"),
        ),
        Action(
            id="seizure-6-intubation", sequence=6,
            title="Prepare for Intubation if Refractory",
            description="Seizure beyond 20 minutes: prepare for intubation and intensive care",
            rationale="Refractory status needs airway protection and anaesthesia.",
            expected_outcome="Secured airway, controlled ventilation",
            urgency=_CRITICAL, phase=Phase.AIRWAY, timeframe="20 minutes after onset",
            prerequisites=("Multiple anticonvulsants given", "Seizure continuing"),
            monitoring=("Airway", "Ventilation", "Seizure activity"),
        ),
    ),
    monitoring=(
        "Seizure activity (timing, duration, type)",
        "SpO2 (target >94%)",
        "Heart rate",
        "Blood pressure",
        "Respiratory effort",
        "Pupil size and reactivity",
        "Post-ictal state",
        "Blood glucose (check for hypoglycaemia)",
    ),
)


# ── Meningitis ──────────────────────────────────────────────────────────────

MENINGITIS = EngineDefinition(
    id="meningitis",
    name="Meningitis Engine",
    description="Recognition and management of bacterial meningitis in paediatric patients",
    severity=EngineSeverity.CRITICAL,
    trigger=all_of(
        FEVER,
        any_of(IsTrue("rash"), NON_BLANCHING_RASH, ALTERED_MENTAL_STATUS,
               label="rash or altered mental status"),
    ),
    actions=(
        Action(
            id="mening-1-recognize", sequence=1,
            title="Recognize Meningitis",
            description="Fever with neck stiffness, Kernig or Brudzinski signs, or altered mental status",
            rationale="Bacterial meningitis progresses over hours.",
            expected_outcome="Meningitis suspected, team alerted",
            urgency=_CRITICAL, phase=Phase.DISABILITY, timeframe="Immediate",
            monitoring=("Temperature", "Neck stiffness", "Mental status", "Rash"),
        ),
        Action(
            id="mening-2-antibiotics", sequence=2,
            title="Administer Empiric Antibiotics",
            description="Ceftriaxone 50-80 mg/kg IV (max 2 g) plus vancomycin 15-20 mg/kg IV immediately",
            rationale="Antibiotic delay worsens outcome.",
            expected_outcome="Antibiotics running within the hour",
            urgency=_CRITICAL, phase=Phase.CIRCULATION, timeframe="Within 1 hour of recognition",
            dosing=(
                Dosing(drug="Ceftriaxone", per_kg=50, per_kg_upper=80, unit="mg", max_dose=2000, route="IV"),
                Dosing(drug="Vancomycin", per_kg=15, per_kg_upper=20, unit="mg", route="IV"),
            ),
            monitoring=("Temperature", "Mental status", "Vital signs"),
        ),
        Action(
            id="mening-3-fluids", sequence=3,
            title="Fluid Management",
            description="Maintenance fluid only, no bolus unless shocked. Watch sodium for SIADH.",
            rationale="Over-hydration worsens cerebral oedema.",
            expected_outcome="Normal sodium, euvolaemia",
            urgency=_URGENT, phase=Phase.CIRCULATION, timeframe="Ongoing",
            monitoring=("Urine output", "Sodium level", "Fluid balance"),
        ),
        Action(
            id="mening-4-dexamethasone", sequence=4,
            title="Consider Dexamethasone",
            description="Dexamethasone 0.15 mg/kg IV (max 10 mg) with the first antibiotic dose",
            rationale="Reduces neurological sequelae in some organisms.",
            expected_outcome="Steroid given alongside antibiotics",
            urgency=_URGENT, phase=Phase.DISABILITY, timeframe="With first antibiotic",
            dosing=(Dosing(drug="Dexamethasone", per_kg=0.15, unit="mg", max_dose=10, route="IV"),),
            monitoring=("Mental status", "Neurological signs"),
        ),
        Action(
            id="mening-5-lp", sequence=5,
            title="Lumbar Puncture (After Antibiotics)",
            description="CSF analysis once safe; never delay antibiotics for the LP",
            rationale="Identifies the organism and its sensitivities.",
            expected_outcome="CSF sent",
            urgency=_URGENT, phase=Phase.DISABILITY, timeframe="After antibiotics started",
            prerequisites=("Antibiotics given", "No papilloedema"),
            monitoring=("CSF results", "Organism identification"),
        ),
    ),
    monitoring=(
        "Temperature (target normothermia)",
        "Mental status (should improve)",
        "Neck stiffness (should decrease)",
        "Rash (petechial/purpuric)",
        "Vital signs (stable)",
        "Sodium level (watch for hyponatraemia)",
        "Urine output (decreased in SIADH)",
        "CSF results (organism, antibiotic susceptibility)",
    ),
)
