"""
Emergency engine catalogue: definitions, trigger conditions and dosing.
"""
from .base import Action, ActionUrgency, DoseRange, Dosing, EngineDefinition, EngineSeverity
from .catalog import DEFAULT_CATALOG, SEVERITY_ORDER, EngineCatalog, applicable_engines
from .conditions import (
    AgeBanded,
    AgeLinear,
    AllOf,
    AnyOf,
    AtLeast,
    Compare,
    Condition,
    Fixed,
    IsFalse,
    IsTrue,
    OneOf,
    Op,
    WeightBelowExpected,
)

__all__ = [
    "Action",
    "ActionUrgency",
    "DoseRange",
    "Dosing",
    "EngineDefinition",
    "EngineSeverity",
    "DEFAULT_CATALOG",
    "SEVERITY_ORDER",
    "EngineCatalog",
    "applicable_engines",
    "AgeBanded",
    "AgeLinear",
    "AllOf",
    "AnyOf",
    "AtLeast",
    "Compare",
    "Condition",
    "Fixed",
    "IsFalse",
    "IsTrue",
    "OneOf",
    "Op",
    "WeightBelowExpected",
]
