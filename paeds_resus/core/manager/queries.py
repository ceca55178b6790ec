"""
Engine Manager - Read Models

Status projections, priority ordering and the handover summary. All
functions are read-only over EngineManagerState.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from paeds_resus.core.engines import (
    DEFAULT_CATALOG,
    SEVERITY_ORDER,
    Action,
    EngineCatalog,
    EngineSeverity,
)
from .state import EngineActivation, EngineManagerState


@dataclass
class EngineStatus:
    engine_id: str
    engine_name: str
    severity: EngineSeverity
    completed_count: int
    total_actions: int
    progress_percent: int
    current_action: Optional[Action]
    next_action: Optional[Action]
    is_complete: bool
    triggered_at: datetime

    def to_dict(self, weight_kg: Optional[float] = None) -> dict:
        return {
            "engine_id": self.engine_id,
            "engine_name": self.engine_name,
            "severity": self.severity.value,
            "completed_count": self.completed_count,
            "total_actions": self.total_actions,
            "progress_percent": self.progress_percent,
            "current_action": self.current_action.to_dict(weight_kg) if self.current_action else None,
            "next_action": self.next_action.to_dict(weight_kg) if self.next_action else None,
            "is_complete": self.is_complete,
            "triggered_at": self.triggered_at.isoformat(),
        }


def current_action(
    activation: EngineActivation,
    catalog: EngineCatalog = DEFAULT_CATALOG,
) -> Optional[Action]:
    return activation.definition(catalog).action_at(activation.current_action_index)


def next_action(
    activation: EngineActivation,
    catalog: EngineCatalog = DEFAULT_CATALOG,
) -> Optional[Action]:
    return activation.definition(catalog).action_at(activation.current_action_index + 1)


def engine_status(
    activation: EngineActivation,
    catalog: EngineCatalog = DEFAULT_CATALOG,
) -> EngineStatus:
    engine = activation.definition(catalog)
    total = len(engine.actions)
    done = len(activation.completed_action_ids)
    return EngineStatus(
        engine_id=engine.id,
        engine_name=engine.name,
        severity=engine.severity,
        completed_count=done,
        total_actions=total,
        progress_percent=round(done / total * 100) if total else 0,
        current_action=current_action(activation, catalog),
        next_action=next_action(activation, catalog),
        is_complete=done == total,
        triggered_at=activation.triggered_at,
    )


def priority_queue(
    state: EngineManagerState,
    catalog: EngineCatalog = DEFAULT_CATALOG,
) -> List[EngineActivation]:
    """Active engines, critical first, then earliest trigger first (stable)."""
    return sorted(
        state.active,
        key=lambda a: (SEVERITY_ORDER.get(a.definition(catalog).severity, 99), a.triggered_at),
    )


def all_statuses(
    state: EngineManagerState,
    catalog: EngineCatalog = DEFAULT_CATALOG,
) -> List[EngineStatus]:
    return [engine_status(a, catalog) for a in priority_queue(state, catalog)]


def critical_engines(
    state: EngineManagerState,
    catalog: EngineCatalog = DEFAULT_CATALOG,
) -> List[EngineActivation]:
    return [a for a in state.active if a.definition(catalog).severity == EngineSeverity.CRITICAL]


def has_critical_engines(
    state: EngineManagerState,
    catalog: EngineCatalog = DEFAULT_CATALOG,
) -> bool:
    return bool(critical_engines(state, catalog))


def is_engine_active(state: EngineManagerState, engine_id: str) -> bool:
    return state.find_active(engine_id) is not None


def elapsed_seconds(activation: EngineActivation, now: Optional[datetime] = None) -> int:
    """Whole seconds since the engine was triggered."""
    now = now if now is not None else datetime.now()
    return round((now - activation.triggered_at).total_seconds())


def engine_summary(
    state: EngineManagerState,
    catalog: EngineCatalog = DEFAULT_CATALOG,
) -> Dict:
    """
    Handover summary.

    Example output:
    {
        "active_engines": [{"name": "Septic Shock Engine", "severity": "critical",
                            "progress": "2/5 actions", "current_action": "Administer Fluid Bolus"}],
        "completed_engines": [{"name": "DKA Engine", "resolved_at": "...", "completed_actions": 4,
                               "total_actions": 4}],
        "total_assessments": 3
    }
    """
    active = []
    for activation in priority_queue(state, catalog):
        engine = activation.definition(catalog)
        action = current_action(activation, catalog)
        active.append({
            "name": engine.name,
            "severity": engine.severity.value,
            "progress": f"{len(activation.completed_action_ids)}/{len(engine.actions)} actions",
            "current_action": action.title if action else None,
        })

    completed = []
    for activation in state.completed:
        engine = activation.definition(catalog)
        completed.append({
            "name": engine.name,
            "resolved_at": activation.resolved_at.isoformat() if activation.resolved_at else None,
            "completed_actions": len(activation.completed_action_ids),
            "deactivated": activation.deactivated,
            "total_actions": len(engine.actions),
        })

    return {
        "active_engines": active,
        "completed_engines": completed,
        "total_assessments": len(state.history),
    }
