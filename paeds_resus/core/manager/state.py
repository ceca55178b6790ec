"""
Engine Manager - State Types

The manager's state is a plain immutable value. Transitions in
``transitions.py`` take a state and return a new one, so a session can keep
history, replay or persist it without the core owning any mutable store.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from paeds_resus.core.assessment import AssessmentSnapshot
from paeds_resus.core.engines import DEFAULT_CATALOG, EngineCatalog, EngineDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineActivation:
    """
    One triggered instance of an engine.

    ``current_action_index`` is a cursor that advances on every completion
    call and is clamped to the last action; ``completed_action_ids`` keeps
    completion order without duplicates.
    """
    engine_id: str
    triggered_at: datetime
    trigger_snapshot: Optional[AssessmentSnapshot] = None
    trigger_findings: Tuple[str, ...] = ()
    completed_action_ids: Tuple[str, ...] = ()
    current_action_index: int = 0
    resolved_at: Optional[datetime] = None
    deactivated: bool = False

    def definition(self, catalog: EngineCatalog = DEFAULT_CATALOG) -> EngineDefinition:
        engine = catalog.get(self.engine_id)
        if engine is None:
            raise KeyError(self.engine_id)
        return engine

    def with_changes(self, **changes: Any) -> "EngineActivation":
        return replace(self, **changes)


@dataclass(frozen=True)
class EngineManagerState:
    active: Tuple[EngineActivation, ...] = ()
    completed: Tuple[EngineActivation, ...] = ()
    history: Tuple[AssessmentSnapshot, ...] = ()

    def find_active(self, engine_id: str) -> Optional[EngineActivation]:
        for activation in self.active:
            if activation.engine_id == engine_id:
                return activation
        return None

    def find_completed(self, engine_id: str) -> Optional[EngineActivation]:
        for activation in self.completed:
            if activation.engine_id == engine_id:
                return activation
        return None


# ── Persistence ─────────────────────────────────────────────────────────────

def activation_to_dict(activation: EngineActivation) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "engineId": activation.engine_id,
        "triggeredAt": activation.triggered_at.isoformat(),
        "completedActionIds": list(activation.completed_action_ids),
        "currentActionIndex": activation.current_action_index,
    }
    if activation.resolved_at is not None:
        out["resolvedAt"] = activation.resolved_at.isoformat()
    if activation.deactivated:
        out["deactivated"] = True
    if activation.trigger_snapshot is not None:
        out["triggerSnapshot"] = activation.trigger_snapshot.to_dict()
    return out


def activation_from_dict(
    data: Dict[str, Any],
    catalog: EngineCatalog = DEFAULT_CATALOG,
) -> Optional[EngineActivation]:
    """
    Rebuild an activation against the static catalogue.

    Returns None for engine ids the catalogue no longer knows. Completed ids
    outside the definition are dropped; a missing cursor is derived from the
    number of completed actions.
    """
    engine = catalog.get(data.get("engineId", ""))
    if engine is None:
        logger.warning(f"EngineManager: dropping persisted activation for unknown engine {data.get('engineId')!r}")
        return None

    known = set(engine.action_ids)
    completed: List[str] = []
    for action_id in data.get("completedActionIds", []):
        if action_id in known and action_id not in completed:
            completed.append(action_id)

    last = len(engine.actions) - 1
    cursor = data.get("currentActionIndex")
    cursor = min(len(completed), last) if cursor is None else max(0, min(int(cursor), last))

    snapshot = data.get("triggerSnapshot")
    resolved = data.get("resolvedAt")
    return EngineActivation(
        engine_id=engine.id,
        triggered_at=datetime.fromisoformat(data["triggeredAt"]),
        trigger_snapshot=AssessmentSnapshot.from_dict(snapshot) if snapshot else None,
        completed_action_ids=tuple(completed),
        current_action_index=cursor,
        resolved_at=datetime.fromisoformat(resolved) if resolved else None,
        deactivated=bool(data.get("deactivated", False)),
    )


def state_to_dict(state: EngineManagerState) -> Dict[str, Any]:
    return {
        "active": [activation_to_dict(a) for a in state.active],
        "completed": [activation_to_dict(a) for a in state.completed],
        "assessmentCount": len(state.history),
    }


def state_from_dict(
    data: Dict[str, Any],
    catalog: EngineCatalog = DEFAULT_CATALOG,
) -> EngineManagerState:
    """Assessment history is not persisted; a restored state starts with none."""
    active = [activation_from_dict(a, catalog) for a in data.get("active", [])]
    completed = [activation_from_dict(a, catalog) for a in data.get("completed", [])]
    return EngineManagerState(
        active=tuple(a for a in active if a is not None),
        completed=tuple(a for a in completed if a is not None),
    )
