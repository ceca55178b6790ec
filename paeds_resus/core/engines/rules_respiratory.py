"""
Respiratory Failure Engine

Triggered by any sign of inadequate breathing or hypoxaemia. Management
escalates from oxygen through positioning and bag-valve-mask ventilation to
intubation.
"""
from __future__ import annotations

from paeds_resus.core.assessment import Phase
from .base import Action, ActionUrgency, Dosing, EngineDefinition, EngineSeverity
from .conditions import any_of, below
from .criteria import INADEQUATE_BREATHING, SPO2_HYPOXAEMIA

RESPIRATORY_FAILURE = EngineDefinition(
    id="respiratory-failure",
    name="Respiratory Failure Engine",
    description="Recognition and management of respiratory failure in paediatric patients",
    severity=EngineSeverity.CRITICAL,
    trigger=any_of(INADEQUATE_BREATHING, below("spo2", SPO2_HYPOXAEMIA)),
    actions=(
        Action(
            id="resp-1-oxygen", sequence=1,
            title="Apply High-Flow Oxygen",
            description="Non-rebreather mask at 10-15 L/min, titrate to SpO2 above 94%",
            rationale="Hypoxaemia is immediately life-threatening.",
            expected_outcome="SpO2 above 94%",
            urgency=ActionUrgency.CRITICAL, phase=Phase.BREATHING, timeframe="Immediate",
            monitoring=("SpO2 (target >94%)", "Respiratory effort", "Colour"),
        ),
        Action(
            id="resp-2-position", sequence=2,
            title="Position for Optimal Breathing",
            description="Sniffing position; neutral head position for infants",
            rationale="Positioning maximises airway calibre.",
            expected_outcome="Improved air entry",
            urgency=ActionUrgency.URGENT, phase=Phase.BREATHING, timeframe="Immediate",
            monitoring=("Respiratory effort", "Air movement", "SpO2"),
        ),
        Action(
            id="resp-3-assess", sequence=3,
            title="Assess Breathing Adequacy",
            description="Check rate, work of breathing, air movement, breath sounds and chest rise",
            rationale="Decides whether ventilatory support is needed.",
            expected_outcome="Breathing classified as adequate or inadequate",
            urgency=ActionUrgency.URGENT, phase=Phase.BREATHING, timeframe="30 seconds",
            monitoring=(
                "Respiratory rate (normal: <1yr 30-40, 1-5yr 25-30, >5yr 20-25)",
                "Work of breathing",
                "Air movement (bilateral, equal)",
                "Breath sounds",
            ),
        ),
        Action(
            id="resp-4-bvm", sequence=4,
            title="Provide Bag-Valve-Mask Ventilation",
            description="Correctly sized mask with 100% oxygen at 20 breaths/min",
            rationale="Inadequate breathing needs assisted ventilation.",
            expected_outcome="Visible chest rise, SpO2 above 94%",
            urgency=ActionUrgency.CRITICAL, phase=Phase.BREATHING, timeframe="1-2 minutes",
            dosing=(Dosing(drug="Tidal volume", per_kg=6, per_kg_upper=8, unit="mL",
                           route="bag-valve-mask", note="per breath at 20/min"),),
            monitoring=("Chest rise", "SpO2", "Breath sounds", "Gastric distension"),
        ),
        Action(
            id="resp-5-intubation", sequence=5,
            title="Prepare for Intubation",
            description="If BVM is ineffective, prepare for intubation. ETT size (mm) = age/4 + 4.",
            rationale="A definitive airway allows controlled ventilation.",
            expected_outcome="Secured airway, SpO2 above 94%",
            urgency=ActionUrgency.CRITICAL, phase=Phase.BREATHING, timeframe="5-10 minutes",
            prerequisites=("BVM attempted", "Still inadequate ventilation", "Airway patent"),
            monitoring=("ETT position", "Breath sounds (bilateral)", "SpO2", "Chest rise", "Tube condensation"),
        ),
    ),
    monitoring=(
        "SpO2 (target >94%)",
        "Respiratory rate (age-appropriate)",
        "Work of breathing (should decrease)",
        "Breath sounds (bilateral, equal)",
        "Chest rise (adequate)",
        "Colour (target pink)",
        "Mental status (target alert)",
        "Capillary refill (target <2 sec)",
    ),
)
