"""
Simulation Scorer

Pure reduction over a completed action log. Correct actions credit their
points (plus a time bonus when performed inside the bonus window); incorrect
actions deduct theirs. Only the first occurrence of an action id counts.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple, Union

import numpy as np

from paeds_resus.config import SIMULATION_TIME_BONUS_SECONDS
from .base import PerformedAction, ScoredAction, SimulationCase, SimulationResult

logger = logging.getLogger(__name__)

ActionLogEntry = Union[PerformedAction, Tuple[str, datetime], dict]


def _normalise(entry: ActionLogEntry) -> PerformedAction:
    if isinstance(entry, PerformedAction):
        return entry
    if isinstance(entry, dict):
        return PerformedAction(entry.get("action_id") or entry["actionId"], entry["timestamp"])
    action_id, timestamp = entry
    return PerformedAction(action_id, timestamp)


def score_simulation(
    case: SimulationCase,
    actions_performed: Iterable[ActionLogEntry],
    start_time: datetime,
    end_time: Optional[datetime] = None,
    time_bonus_seconds: float = SIMULATION_TIME_BONUS_SECONDS,
) -> SimulationResult:
    """
    Score a finished run of ``case``.

    Args:
        case:               The simulation case played.
        actions_performed:  ``PerformedAction`` entries, ``(action_id, timestamp)``
                            pairs or dicts with ``action_id``/``timestamp``.
        start_time:         When the run started; response times are measured from here.
        end_time:           When the run ended (defaults to now).
        time_bonus_seconds: Elapsed time under which a time bonus is awarded.

    Returns:
        SimulationResult. ``percentage`` is clamped to [0, 100] and is 0 when
        the case has no attainable score.
    """
    log = sorted((_normalise(e) for e in actions_performed), key=lambda a: a.timestamp)

    first_seen: Dict[str, PerformedAction] = {}
    for performed in log:
        first_seen.setdefault(performed.action_id, performed)

    total = 0
    scored: List[ScoredAction] = []
    missed: List[str] = []
    errors: List[str] = []

    for action in case.correct_actions:
        performed = first_seen.get(action.id)
        if performed is None:
            missed.append(action.name)
            continue
        elapsed = (performed.timestamp - start_time).total_seconds()
        points = action.points
        if action.time_bonus and elapsed < time_bonus_seconds:
            points += action.time_bonus
        total += points
        scored.append(ScoredAction(action.id, action.name, performed.timestamp, points, action.feedback, True))

    for action in case.incorrect_actions:
        performed = first_seen.get(action.id)
        if performed is None:
            continue
        total += action.points
        errors.append(action.name)
        scored.append(ScoredAction(action.id, action.name, performed.timestamp, action.points, action.feedback, False))

    unknown = [a for a in first_seen if case.action(a) is None]
    if unknown:
        logger.debug(f"score_simulation [{case.id}]: ignoring unknown action id(s) {unknown}")

    max_score = case.max_score
    total = max(0, total)
    percentage = float(np.clip(total / max_score * 100, 0.0, 100.0)) if max_score > 0 else 0.0
    passed = percentage >= case.passing_score

    response_times = np.array([(a.timestamp - start_time).total_seconds() for a in log], dtype=float)
    time_to_first = float(response_times.min()) if response_times.size else 0.0
    average = float(np.mean(response_times)) if response_times.size else 0.0

    scored.sort(key=lambda s: s.timestamp)
    feedback = [
        f"{'Passed' if passed else 'Not passed'}: {percentage:.0f}% (passing score {case.passing_score:.0f}%)"
    ]
    feedback += [s.feedback for s in scored]
    if missed:
        feedback.append(f"Missed {len(missed)} expected action(s): {', '.join(missed)}")

    logger.info(
        f"score_simulation [{case.id}]: {total}/{max_score} ({percentage:.1f}%) "
        f"{'PASS' if passed else 'FAIL'}, {len(errors)} critical error(s)"
    )

    return SimulationResult(
        case_id=case.id,
        start_time=start_time,
        end_time=end_time or datetime.now(),
        total_score=total,
        max_score=max_score,
        percentage=percentage,
        passed=passed,
        scored_actions=scored,
        missed_actions=missed,
        critical_errors=errors,
        time_to_first_action=time_to_first,
        average_response_time=average,
        feedback=feedback,
    )
