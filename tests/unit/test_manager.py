"""
Unit Tests for the Engine Manager

Tests for activation, action progress, resolution, priority and persistence.
"""
from paeds_resus.core.assessment import AssessmentSnapshot, PatientProfile
from paeds_resus.core.engines import DEFAULT_CATALOG
from paeds_resus.core.manager import (
    EngineManager,
    EngineManagerState,
    complete_action,
    deactivate,
    evaluate,
    priority_queue,
    reactivate,
    state_from_dict,
    state_to_dict,
)

SEPSIS_ACTIONS = DEFAULT_CATALOG.get("septic-shock").action_ids


def _check_completion_invariant(state):
    for activation in state.active + state.completed:
        engine = DEFAULT_CATALOG.get(activation.engine_id)
        assert set(activation.completed_action_ids) <= set(engine.action_ids)
        assert 0 <= activation.current_action_index <= len(engine.actions) - 1
    for activation in state.active:
        engine = DEFAULT_CATALOG.get(activation.engine_id)
        assert len(activation.completed_action_ids) < len(engine.actions)


class TestEvaluate:
    """Tests for trigger evaluation and activation."""

    def test_activates_triggered_engines(self, septic_snapshot, t0):
        state = evaluate(EngineManagerState(), septic_snapshot, now=t0)
        septic = state.find_active("septic-shock")
        assert septic is not None
        assert septic.triggered_at == t0
        assert septic.current_action_index == 0
        assert septic.completed_action_ids == ()
        assert septic.trigger_snapshot is septic_snapshot
        assert len(state.history) == 1

    def test_triggering_is_idempotent(self, septic_snapshot, t0, later):
        state = evaluate(EngineManagerState(), septic_snapshot, now=t0)
        state = evaluate(state, septic_snapshot, now=later(30))
        ids = [a.engine_id for a in state.active]
        assert len(ids) == len(set(ids))
        assert state.find_active("septic-shock").triggered_at == t0
        assert len(state.history) == 2

    def test_input_state_is_not_modified(self, septic_snapshot):
        empty = EngineManagerState()
        evaluate(empty, septic_snapshot)
        assert empty.active == ()
        assert empty.history == ()

    def test_no_auto_deactivation_when_trigger_clears(self, septic_snapshot, normal_snapshot):
        """Resolution is a clinician decision; a normal reassessment leaves engines active."""
        state = evaluate(EngineManagerState(), septic_snapshot)
        state = evaluate(state, normal_snapshot)
        assert state.find_active("septic-shock") is not None
        assert state.completed == ()


class TestCompleteAction:
    """Tests for action progress and the completion invariant."""

    def test_progress_advances_cursor(self, septic_snapshot):
        state = evaluate(EngineManagerState(), septic_snapshot)
        state = complete_action(state, "septic-shock", SEPSIS_ACTIONS[0])
        activation = state.find_active("septic-shock")
        assert activation.completed_action_ids == (SEPSIS_ACTIONS[0],)
        assert activation.current_action_index == 1

    def test_repeat_completion_is_idempotent(self, septic_snapshot):
        state = evaluate(EngineManagerState(), septic_snapshot)
        state = complete_action(state, "septic-shock", SEPSIS_ACTIONS[0])
        state = complete_action(state, "septic-shock", SEPSIS_ACTIONS[0])
        assert state.find_active("septic-shock").completed_action_ids == (SEPSIS_ACTIONS[0],)

    def test_unknown_action_not_recorded(self, septic_snapshot):
        state = evaluate(EngineManagerState(), septic_snapshot)
        state = complete_action(state, "septic-shock", "not-an-action")
        assert state.find_active("septic-shock").completed_action_ids == ()
        _check_completion_invariant(state)

    def test_inactive_engine_is_noop(self, septic_snapshot):
        state = evaluate(EngineManagerState(), septic_snapshot)
        assert complete_action(state, "dka", "dka-1-recognize") is state

    def test_all_actions_moves_to_completed(self, septic_snapshot, t0, later):
        state = evaluate(EngineManagerState(), septic_snapshot, now=t0)
        for i, action_id in enumerate(SEPSIS_ACTIONS):
            state = complete_action(state, "septic-shock", action_id, now=later(60 * (i + 1)))
            _check_completion_invariant(state)
        assert state.find_active("septic-shock") is None
        done = state.find_completed("septic-shock")
        assert done.completed_action_ids == SEPSIS_ACTIONS
        assert done.resolved_at == later(60 * len(SEPSIS_ACTIONS))
        assert not done.deactivated

    def test_out_of_order_completion_cursor_clamped(self, septic_snapshot):
        state = evaluate(EngineManagerState(), septic_snapshot)
        for _ in range(10):
            state = complete_action(state, "septic-shock", SEPSIS_ACTIONS[-1])
        activation = state.find_active("septic-shock")
        assert activation.current_action_index == len(SEPSIS_ACTIONS) - 1
        _check_completion_invariant(state)


class TestDeactivateReactivate:
    """Tests for explicit resolution and fresh courses."""

    def test_deactivate_keeps_partial_progress(self, septic_snapshot):
        state = evaluate(EngineManagerState(), septic_snapshot)
        state = complete_action(state, "septic-shock", SEPSIS_ACTIONS[0])
        state = deactivate(state, "septic-shock")
        done = state.find_completed("septic-shock")
        assert done.deactivated
        assert done.completed_action_ids == (SEPSIS_ACTIONS[0],)
        assert state.find_active("septic-shock") is None

    def test_reactivate_resets_progress(self, septic_snapshot, t0, later):
        state = evaluate(EngineManagerState(), septic_snapshot, now=t0)
        state = complete_action(state, "septic-shock", SEPSIS_ACTIONS[0])
        state = deactivate(state, "septic-shock")
        state = reactivate(state, "septic-shock", septic_snapshot, now=later(600))
        activation = state.find_active("septic-shock")
        assert activation.completed_action_ids == ()
        assert activation.current_action_index == 0
        assert activation.triggered_at == later(600)
        assert state.find_completed("septic-shock") is None

    def test_reactivate_requires_completed_course(self, septic_snapshot):
        state = evaluate(EngineManagerState(), septic_snapshot)
        assert reactivate(state, "septic-shock", septic_snapshot) is state
        assert reactivate(state, "dka", septic_snapshot) is state

    def test_retrigger_after_deactivation(self, septic_snapshot):
        """A deactivated engine can be activated again by a later assessment."""
        state = evaluate(EngineManagerState(), septic_snapshot)
        state = deactivate(state, "septic-shock")
        state = evaluate(state, septic_snapshot)
        assert state.find_active("septic-shock") is not None


class TestPriorityQueue:
    """Tests for presentation ordering."""

    def test_critical_before_urgent_then_by_trigger_time(self, t0, later):
        wasted = AssessmentSnapshot(patient=PatientProfile(weight_kg=9, age_years=4))
        state = evaluate(EngineManagerState(), wasted, now=t0)                              # urgent
        state = evaluate(state, AssessmentSnapshot(seizures=True), now=later(10))           # critical
        state = evaluate(state, AssessmentSnapshot(spo2=80), now=later(20))                 # critical

        queue = [a.engine_id for a in priority_queue(state)]
        assert queue == ["status-epilepticus", "respiratory-failure", "severe-malnutrition"]

    def test_queue_properties_hold(self, septic_snapshot, t0, later):
        state = evaluate(EngineManagerState(), AssessmentSnapshot(seizures=True), now=t0)
        state = evaluate(state, septic_snapshot, now=later(5))
        queue = priority_queue(state)
        ranks = [0 if a.definition(DEFAULT_CATALOG).severity.value == "critical" else 1 for a in queue]
        assert ranks == sorted(ranks)
        for a, b in zip(queue, queue[1:]):
            if a.definition(DEFAULT_CATALOG).severity == b.definition(DEFAULT_CATALOG).severity:
                assert a.triggered_at <= b.triggered_at


class TestEngineManagerFacade:
    """Tests for the stateful façade and persistence."""

    def test_evaluate_returns_new_activations_only(self, septic_snapshot):
        manager = EngineManager()
        first = manager.evaluate(septic_snapshot)
        second = manager.evaluate(septic_snapshot)
        assert "septic-shock" in [a.engine_id for a in first]
        assert second == []

    def test_status_progress(self, septic_snapshot):
        manager = EngineManager()
        manager.evaluate(septic_snapshot)
        manager.complete_action("septic-shock", SEPSIS_ACTIONS[0])
        status = manager.status("septic-shock")
        assert status.completed_count == 1
        assert status.total_actions == 5
        assert status.progress_percent == 20
        assert status.current_action.id == SEPSIS_ACTIONS[1]
        assert status.next_action.id == SEPSIS_ACTIONS[2]
        assert manager.has_critical()

    def test_summary(self, septic_snapshot):
        manager = EngineManager()
        manager.evaluate(septic_snapshot)
        manager.deactivate("cardiogenic-shock")
        summary = manager.summary()
        assert summary["total_assessments"] == 1
        assert summary["active_engines"][0]["progress"] == "0/5 actions"
        assert summary["completed_engines"][0]["deactivated"] is True

    def test_export_restore_round_trip(self, septic_snapshot, t0):
        manager = EngineManager()
        manager.evaluate(septic_snapshot, now=t0)
        manager.complete_action("septic-shock", SEPSIS_ACTIONS[0])
        data = manager.export_state()
        assert data["active"][0]["engineId"] == "septic-shock"
        assert data["active"][0]["completedActionIds"] == [SEPSIS_ACTIONS[0]]

        restored = EngineManager.restore(data)
        activation = restored.state.find_active("septic-shock")
        assert activation.triggered_at == t0
        assert activation.completed_action_ids == (SEPSIS_ACTIONS[0],)
        assert activation.current_action_index == 1

    def test_restore_tolerates_minimal_and_unknown_entries(self, t0):
        data = {
            "active": [
                {"engineId": "dka", "triggeredAt": t0.isoformat(),
                 "completedActionIds": ["dka-1-recognize", "bogus"]},
                {"engineId": "retired-engine", "triggeredAt": t0.isoformat(), "completedActionIds": []},
            ],
        }
        state = state_from_dict(data)
        assert [a.engine_id for a in state.active] == ["dka"]
        assert state.active[0].completed_action_ids == ("dka-1-recognize",)
        assert state.active[0].current_action_index == 1
        assert state_to_dict(state)["assessmentCount"] == 0
