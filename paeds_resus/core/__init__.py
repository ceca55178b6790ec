"""
Decision core: assessment model, engine catalogue, engine lifecycle, safety
gating, reassessment routing, override accountability and case simulation.
"""
from .session import ClinicalSession

__all__ = ["ClinicalSession"]
