"""
Engine Manager

Stateful façade over the pure transitions, owned by one clinical session.

Usage:
    from paeds_resus.core.manager import EngineManager

    manager = EngineManager()
    manager.evaluate(snapshot)
    for status in manager.statuses():
        print(status.engine_name, status.progress_percent)
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from paeds_resus.core.assessment import AssessmentSnapshot
from paeds_resus.core.engines import DEFAULT_CATALOG, EngineCatalog
from . import queries, transitions
from .state import EngineActivation, EngineManagerState, state_from_dict, state_to_dict


class EngineManager:
    """Holds the current EngineManagerState and swaps it on every transition."""

    def __init__(
        self,
        state: Optional[EngineManagerState] = None,
        catalog: EngineCatalog = DEFAULT_CATALOG,
    ):
        self.state = state or EngineManagerState()
        self.catalog = catalog

    # ---- transitions ----

    def evaluate(self, snapshot: AssessmentSnapshot, now: Optional[datetime] = None) -> List[EngineActivation]:
        """Run triggers; returns only the activations created by this call."""
        before = len(self.state.active)
        self.state = transitions.evaluate(self.state, snapshot, now=now, catalog=self.catalog)
        return list(self.state.active[before:])

    def complete_action(self, engine_id: str, action_id: str, now: Optional[datetime] = None) -> None:
        self.state = transitions.complete_action(self.state, engine_id, action_id, now=now, catalog=self.catalog)

    def deactivate(self, engine_id: str, now: Optional[datetime] = None) -> None:
        self.state = transitions.deactivate(self.state, engine_id, now=now)

    def reactivate(self, engine_id: str, snapshot: AssessmentSnapshot, now: Optional[datetime] = None) -> None:
        self.state = transitions.reactivate(self.state, engine_id, snapshot, now=now, catalog=self.catalog)

    # ---- queries ----

    def status(self, engine_id: str) -> Optional[queries.EngineStatus]:
        activation = self.state.find_active(engine_id)
        return queries.engine_status(activation, self.catalog) if activation else None

    def statuses(self) -> List[queries.EngineStatus]:
        return queries.all_statuses(self.state, self.catalog)

    def priority_queue(self) -> List[EngineActivation]:
        return queries.priority_queue(self.state, self.catalog)

    def is_active(self, engine_id: str) -> bool:
        return queries.is_engine_active(self.state, engine_id)

    def has_critical(self) -> bool:
        return queries.has_critical_engines(self.state, self.catalog)

    def summary(self) -> Dict[str, Any]:
        return queries.engine_summary(self.state, self.catalog)

    # ---- persistence ----

    def export_state(self) -> Dict[str, Any]:
        return state_to_dict(self.state)

    @classmethod
    def restore(cls, data: Dict[str, Any], catalog: EngineCatalog = DEFAULT_CATALOG) -> "EngineManager":
        return cls(state_from_dict(data, catalog), catalog)
