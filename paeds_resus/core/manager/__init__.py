"""
Engine lifecycle: activation, action progress and resolution.
"""
from .manager import EngineManager
from .queries import (
    EngineStatus,
    all_statuses,
    critical_engines,
    current_action,
    elapsed_seconds,
    engine_status,
    engine_summary,
    has_critical_engines,
    is_engine_active,
    next_action,
    priority_queue,
)
from .state import (
    EngineActivation,
    EngineManagerState,
    activation_from_dict,
    activation_to_dict,
    state_from_dict,
    state_to_dict,
)
from .transitions import complete_action, deactivate, evaluate, reactivate

__all__ = [
    "EngineManager",
    "EngineStatus",
    "all_statuses",
    "critical_engines",
    "current_action",
    "elapsed_seconds",
    "engine_status",
    "engine_summary",
    "has_critical_engines",
    "is_engine_active",
    "next_action",
    "priority_queue",
    "EngineActivation",
    "EngineManagerState",
    "activation_from_dict",
    "activation_to_dict",
    "state_from_dict",
    "state_to_dict",
    "complete_action",
    "deactivate",
    "evaluate",
    "reactivate",
]
