"""
Engine Manager - Transitions

Pure functions over EngineManagerState. Each returns a new state; the input
is never modified. Unknown engine or action ids are no-ops, never errors.

Engines are not deactivated automatically when a later assessment no longer
satisfies their trigger. Resolution is always an explicit clinician step
(``complete_action`` on the last action, or ``deactivate``).
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from paeds_resus.core.assessment import AssessmentSnapshot
from paeds_resus.core.engines import DEFAULT_CATALOG, EngineCatalog
from .state import EngineActivation, EngineManagerState

logger = logging.getLogger(__name__)


def _now(now: Optional[datetime]) -> datetime:
    return now if now is not None else datetime.now()


def evaluate(
    state: EngineManagerState,
    snapshot: AssessmentSnapshot,
    now: Optional[datetime] = None,
    catalog: EngineCatalog = DEFAULT_CATALOG,
) -> EngineManagerState:
    """
    Activate every satisfied engine that is not already active and record
    the snapshot in history.

    Calling twice with the same snapshot activates nothing new the second
    time; the history still grows by one entry per call.
    """
    timestamp = _now(now)
    active_ids = {a.engine_id for a in state.active}
    new_activations = []

    for engine in catalog.applicable(snapshot):
        if engine.id in active_ids:
            logger.debug(f"EngineManager: {engine.id} already active, not re-triggered")
            continue
        new_activations.append(EngineActivation(
            engine_id=engine.id,
            triggered_at=timestamp,
            trigger_snapshot=snapshot,
            trigger_findings=tuple(engine.trigger_findings(snapshot)),
        ))
        logger.info(f"EngineManager: activated {engine.id} ({engine.severity.value})")

    return EngineManagerState(
        active=state.active + tuple(new_activations),
        completed=state.completed,
        history=state.history + (snapshot,),
    )


def complete_action(
    state: EngineManagerState,
    engine_id: str,
    action_id: str,
    now: Optional[datetime] = None,
    catalog: EngineCatalog = DEFAULT_CATALOG,
) -> EngineManagerState:
    """
    Mark an action done on an active engine.

    The cursor advances by one (clamped to the last action) on every call,
    including repeats. When every action is complete the activation moves
    to the completed collection.
    """
    activation = state.find_active(engine_id)
    engine = catalog.get(engine_id)
    if activation is None or engine is None:
        logger.debug(f"EngineManager: complete_action on inactive engine {engine_id!r} ignored")
        return state

    completed = activation.completed_action_ids
    if action_id in engine.action_ids and action_id not in completed:
        completed = completed + (action_id,)
    elif action_id not in engine.action_ids:
        logger.debug(f"EngineManager: {engine_id} has no action {action_id!r}")

    updated = activation.with_changes(
        completed_action_ids=completed,
        current_action_index=min(activation.current_action_index + 1, len(engine.actions) - 1),
    )

    others = tuple(a for a in state.active if a.engine_id != engine_id)
    if len(completed) == len(engine.actions):
        logger.info(f"EngineManager: {engine_id} complete ({len(completed)} actions)")
        return EngineManagerState(
            active=others,
            completed=state.completed + (updated.with_changes(resolved_at=_now(now)),),
            history=state.history,
        )

    return EngineManagerState(
        active=tuple(updated if a.engine_id == engine_id else a for a in state.active),
        completed=state.completed,
        history=state.history,
    )


def deactivate(
    state: EngineManagerState,
    engine_id: str,
    now: Optional[datetime] = None,
) -> EngineManagerState:
    """Move an active engine to completed without finishing its actions."""
    activation = state.find_active(engine_id)
    if activation is None:
        logger.debug(f"EngineManager: deactivate on inactive engine {engine_id!r} ignored")
        return state

    logger.info(
        f"EngineManager: deactivated {engine_id} with "
        f"{len(activation.completed_action_ids)} action(s) done"
    )
    return EngineManagerState(
        active=tuple(a for a in state.active if a.engine_id != engine_id),
        completed=state.completed + (activation.with_changes(resolved_at=_now(now), deactivated=True),),
        history=state.history,
    )


def reactivate(
    state: EngineManagerState,
    engine_id: str,
    snapshot: AssessmentSnapshot,
    now: Optional[datetime] = None,
    catalog: EngineCatalog = DEFAULT_CATALOG,
) -> EngineManagerState:
    """
    Restart a completed engine from its first action with a fresh trigger
    time. Engines that are already active, or were never completed, are
    left alone.
    """
    if state.find_active(engine_id) is not None or state.find_completed(engine_id) is None:
        logger.debug(f"EngineManager: reactivate {engine_id!r} ignored")
        return state

    engine = catalog.get(engine_id)
    findings = tuple(engine.trigger_findings(snapshot)) if engine else ()
    logger.info(f"EngineManager: reactivated {engine_id}")
    return EngineManagerState(
        active=state.active + (EngineActivation(
            engine_id=engine_id,
            triggered_at=_now(now),
            trigger_snapshot=snapshot,
            trigger_findings=findings,
        ),),
        completed=tuple(a for a in state.completed if a.engine_id != engine_id),
        history=state.history,
    )
