"""
Simulation Clock

Session-scoped clock for one simulation run. It owns no timer: the caller
drives it with ``tick(seconds)`` (typically once per second), and the clock
releases scripted events as their offsets are reached.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional

from .base import PerformedAction, SimulationCase, SimulationEvent, SimulationResult, Vitals
from .scorer import score_simulation

logger = logging.getLogger(__name__)


class ClockState(str, Enum):
    IDLE     = "idle"
    RUNNING  = "running"
    PAUSED   = "paused"
    FINISHED = "finished"


class SimulationClock:
    def __init__(self, case: SimulationCase):
        self.case = case
        self.state = ClockState.IDLE
        self.elapsed = 0.0
        self.start_time: Optional[datetime] = None
        self._released: List[SimulationEvent] = []
        self._actions: List[PerformedAction] = []
        self._result: Optional[SimulationResult] = None

    # ── Lifecycle ───────────────────────────────────────────────────────────

    def start(self, now: Optional[datetime] = None) -> List[SimulationEvent]:
        """Start the run; returns the events scheduled at offset 0."""
        if self.state != ClockState.IDLE:
            logger.debug(f"SimulationClock [{self.case.id}]: start ignored in state {self.state.value}")
            return []
        self.start_time = now or datetime.now()
        self.state = ClockState.RUNNING
        return self._release_due()

    def tick(self, seconds: float = 1.0) -> List[SimulationEvent]:
        """
        Advance simulated time and return newly released events.

        No-op unless running. Reaching the case duration finishes the run.
        """
        if self.state != ClockState.RUNNING:
            return []
        self.elapsed = min(self.elapsed + max(seconds, 0.0), self.case.duration_seconds)
        released = self._release_due()
        if self.elapsed >= self.case.duration_seconds:
            self.finish()
        return released

    def pause(self) -> None:
        if self.state == ClockState.RUNNING:
            self.state = ClockState.PAUSED

    def resume(self) -> None:
        if self.state == ClockState.PAUSED:
            self.state = ClockState.RUNNING

    def finish(self) -> SimulationResult:
        """End the run (idempotent) and score it."""
        if self._result is None:
            if self.start_time is None:
                self.start_time = datetime.now()
            self.state = ClockState.FINISHED
            self._result = score_simulation(
                self.case, self._actions, self.start_time, end_time=self.now,
            )
        return self._result

    # ── Player input ────────────────────────────────────────────────────────

    def perform(self, action_id: str) -> Optional[PerformedAction]:
        """Record an action at the current simulated time; ignored unless running."""
        if self.state != ClockState.RUNNING:
            logger.debug(f"SimulationClock [{self.case.id}]: action {action_id!r} ignored in state {self.state.value}")
            return None
        performed = PerformedAction(action_id, self.now)
        self._actions.append(performed)
        return performed

    # ── Views ───────────────────────────────────────────────────────────────

    @property
    def now(self) -> datetime:
        """Simulated wall-clock time: start time plus elapsed seconds."""
        return (self.start_time or datetime.now()) + timedelta(seconds=self.elapsed)

    @property
    def remaining(self) -> float:
        return max(self.case.duration_seconds - self.elapsed, 0.0)

    @property
    def released_events(self) -> List[SimulationEvent]:
        return list(self._released)

    @property
    def actions(self) -> List[PerformedAction]:
        return list(self._actions)

    @property
    def result(self) -> Optional[SimulationResult]:
        return self._result

    def current_vitals(self) -> Vitals:
        vitals = self.case.initial_vitals
        for event in self._released:
            vitals = vitals.merged(event.vitals)
        return vitals

    def pending_prompts(self) -> List[SimulationEvent]:
        """Released events with an expected action whose response window is still open."""
        return [
            e for e in self._released
            if e.expected_action and (e.critical_window is None or self.elapsed <= e.time_offset + e.critical_window)
        ]

    def _release_due(self) -> List[SimulationEvent]:
        due = [
            e for e in self.case.events[len(self._released):]
            if e.time_offset <= self.elapsed
        ]
        self._released.extend(due)
        for event in due:
            logger.info(f"SimulationClock [{self.case.id}] t={self.elapsed:.0f}s: {event.type} {event.id}")
        return due
