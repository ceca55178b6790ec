"""
Integration Tests for the FastAPI Backend

Tests for sessions, engines, safety, reassessment, overrides and simulation.
Uses async httpx for ASGI app testing.
"""
import uuid

import pytest
import httpx

from paeds_resus.main import app

SEPTIC_ASSESSMENT = {
    "temperature": 39,
    "respiratoryRate": 40,
    "heartRate": 160,
    "capillaryRefill": 3,
}

LONG_DETAILS = "Clinical signs of fluid overload with hepatomegaly and crackles on auscultation."


@pytest.fixture
async def async_client():
    """Create async test client."""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client


@pytest.fixture
async def session_id(async_client):
    """A fresh session for a 12 kg two-year-old with septic shock triggered."""
    sid = f"test-{uuid.uuid4()}"
    response = await async_client.post("/api/v1/sessions", json={
        "session_id": sid,
        "patient": {"weight_kg": 12, "age_years": 2},
        "assessment": SEPTIC_ASSESSMENT,
    })
    assert response.status_code == 201
    return sid


@pytest.mark.asyncio
class TestHealthEndpoints:
    """Tests for health and reference endpoints."""

    async def test_health_endpoint(self, async_client):
        response = await async_client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["engines_loaded"] == 9
        assert data["simulation_cases"] == 5

    async def test_engine_catalogue_with_dosing(self, async_client):
        response = await async_client.get("/api/v1/engines", params={"weight_kg": 12})
        assert response.status_code == 200

        data = response.json()
        assert data["total"] == 9
        assert data["engines"][0]["id"] == "septic-shock"

    async def test_engine_catalogue_rejects_bad_weight(self, async_client):
        response = await async_client.get("/api/v1/engines", params={"weight_kg": 0})
        assert response.status_code == 422


@pytest.mark.asyncio
class TestSessionEndpoints:
    """Tests for the clinical session flow."""

    async def test_create_session_activates_engines(self, async_client, session_id):
        response = await async_client.get(f"/api/v1/sessions/{session_id}")
        assert response.status_code == 200

        data = response.json()
        engine_ids = [e["engine_id"] for e in data["active_engines"]]
        assert "septic-shock" in engine_ids
        assert data["has_critical_engines"] is True
        assert data["patient"]["weight_kg"] == 12

    async def test_duplicate_session_id(self, async_client, session_id):
        response = await async_client.post("/api/v1/sessions", json={
            "session_id": session_id,
            "patient": {"weight_kg": 12, "age_years": 2},
        })
        assert response.status_code == 409

    async def test_invalid_patient(self, async_client):
        response = await async_client.post("/api/v1/sessions", json={"patient": {"weight_kg": -1}})
        assert response.status_code == 422

    async def test_non_numeric_vital_is_rejected(self, async_client):
        response = await async_client.post("/api/v1/sessions", json={
            "patient": {"weight_kg": 12, "age_years": 2},
            "assessment": {"heartRate": "fast", "temperature": 39},
        })
        assert response.status_code == 422
        assert response.json()["detail"][0]["loc"][-1] == "heartRate"

    async def test_non_numeric_vital_rejected_on_assessment(self, async_client, session_id):
        response = await async_client.post(
            f"/api/v1/sessions/{session_id}/assessments",
            json={"assessment": {"respiratoryRate": "rapid"}},
        )
        assert response.status_code == 422

    async def test_bedside_aliases_accepted(self, async_client, session_id):
        response = await async_client.post(
            f"/api/v1/sessions/{session_id}/assessments",
            json={"assessment": {"avpu": "pain", "spO2": "88", "crt": 4}},
        )
        assert response.status_code == 200

    async def test_unknown_session(self, async_client):
        response = await async_client.get("/api/v1/sessions/does-not-exist")
        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "SESSION_NOT_FOUND"

    async def test_repeat_assessment_activates_nothing_new(self, async_client, session_id):
        response = await async_client.post(
            f"/api/v1/sessions/{session_id}/assessments",
            json={"assessment": SEPTIC_ASSESSMENT},
        )
        assert response.status_code == 200
        assert response.json()["activated"] == []

    async def test_new_assessment_reports_findings(self, async_client, session_id):
        response = await async_client.post(
            f"/api/v1/sessions/{session_id}/assessments",
            json={"assessment": {"seizures": True}},
        )
        data = response.json()
        assert data["activated"] == ["status-epilepticus"]
        assert data["trigger_findings"]["status-epilepticus"]

    async def test_complete_action_flow(self, async_client, session_id):
        base = f"/api/v1/sessions/{session_id}/engines/septic-shock"
        response = await async_client.post(f"{base}/actions/sepsis-1-recognize/complete")
        assert response.status_code == 200

        data = response.json()
        assert data["engine_complete"] is False
        assert data["status"]["completed_count"] == 1
        assert data["status"]["current_action"]["id"] == "sepsis-2-cultures"

    async def test_complete_unknown_action(self, async_client, session_id):
        response = await async_client.post(
            f"/api/v1/sessions/{session_id}/engines/septic-shock/actions/dka-3-insulin/complete"
        )
        assert response.status_code == 404

    async def test_complete_inactive_engine(self, async_client, session_id):
        response = await async_client.post(
            f"/api/v1/sessions/{session_id}/engines/dka/actions/dka-1-recognize/complete"
        )
        assert response.status_code == 404

    async def test_deactivate_and_reactivate(self, async_client, session_id):
        base = f"/api/v1/sessions/{session_id}/engines/septic-shock"

        response = await async_client.post(f"{base}/reactivate")
        assert response.status_code == 409

        response = await async_client.post(f"{base}/deactivate")
        assert response.status_code == 200
        completed = response.json()["summary"]["completed_engines"]
        assert completed[0]["name"] == "Septic Shock Engine"
        assert completed[0]["deactivated"] is True

        response = await async_client.post(f"{base}/deactivate")
        assert response.status_code == 404

        response = await async_client.post(f"{base}/reactivate", json={"assessment": SEPTIC_ASSESSMENT})
        assert response.status_code == 200
        assert "septic-shock" in [e["engine_id"] for e in response.json()["active"]]

    async def test_reactivate_never_completed(self, async_client, session_id):
        response = await async_client.post(f"/api/v1/sessions/{session_id}/engines/dka/reactivate")
        assert response.status_code == 404


@pytest.mark.asyncio
class TestSafetyEndpoints:
    """Tests for phase gating and reassessment routing."""

    async def test_obstructed_airway_blocks(self, async_client):
        response = await async_client.post("/api/v1/safety/check", json={
            "current_phase": "airway",
            "next_phase": "breathing",
            "assessment": {"airway_patency": "obstructed"},
        })
        assert response.status_code == 200

        data = response.json()
        assert data["blocked"] is True
        assert data["rule"]["id"] == "airway-not-secured"

    async def test_patent_airway_allows(self, async_client):
        response = await async_client.post("/api/v1/safety/check", json={
            "current_phase": "airway",
            "next_phase": "breathing",
            "assessment": {"airway_patency": "patent"},
        })
        data = response.json()
        assert data["blocked"] is False
        assert data["rule"] is None
        assert data["violations"] == []

    async def test_validate_phase(self, async_client):
        response = await async_client.post("/api/v1/safety/validate-phase", json={
            "phase": "exposure",
            "assessment": {"temperature": 37, "rash": True},
        })
        data = response.json()
        assert data["is_complete"] is False
        assert data["errors"] == ["Rash type must be described"]

    async def test_reassessment_route(self, async_client):
        response = await async_client.post("/api/v1/reassessment/route", json={
            "response": "worse",
            "phase": "circulation",
            "intervention_count": 2,
        })
        assert response.status_code == 200

        data = response.json()
        assert data["type"] == "emergency"
        assert data["urgency"] == "critical"


@pytest.mark.asyncio
class TestOverrideEndpoints:
    """Tests for override submission, outcomes and audit exports."""

    def _override(self, **changes):
        body = {
            "clinician_id": "c1",
            "clinician_name": "Dr Okafor",
            "clinician_role": "consultant",
            "engine_id": "septic-shock",
            "action_id": "sepsis-3-fluids",
            "overridden_action": "10 mL/kg with early inotropes",
            "reason": "clinical_judgment",
            "reason_details": LONG_DETAILS,
        }
        body.update(changes)
        return body

    async def test_short_justification_rejected(self, async_client, session_id):
        response = await async_client.post(
            f"/api/v1/sessions/{session_id}/overrides",
            json=self._override(reason_details="Patient looks fine."),
        )
        assert response.status_code == 422

        detail = response.json()["detail"]
        assert detail["error"] == "OVERRIDE_REJECTED"
        assert detail["details"]["severity"] == "critical"
        assert any("minimum 50 characters" in e for e in detail["details"]["errors"])

    async def test_nurse_rejected(self, async_client, session_id):
        response = await async_client.post(
            f"/api/v1/sessions/{session_id}/overrides",
            json=self._override(clinician_role="nurse"),
        )
        assert response.status_code == 422

    async def test_override_outcome_and_audit(self, async_client, session_id):
        base = f"/api/v1/sessions/{session_id}/overrides"
        response = await async_client.post(base, json=self._override())
        assert response.status_code == 201

        record = response.json()
        assert record["severity"] == "critical"
        assert record["action_title"]
        assert record["patient_weight"] == 12

        response = await async_client.post(f"{base}/{record['id']}/outcome", json={"outcome": "improved"})
        assert response.status_code == 200
        assert response.json()["outcome"] == "improved"

        response = await async_client.get(f"{base}/audit")
        data = response.json()
        assert data["statistics"]["total_overrides"] == 1
        assert data["statistics"]["outcome_improvement_rate"] == 100.0
        assert data["quality_score"] == 100.0
        assert "- Improved outcomes: 1/1" in data["handover_summary"]

        response = await async_client.get(f"{base}/audit", params={"format": "csv"})
        assert response.headers["content-type"].startswith("text/csv")
        assert record["id"] in response.text

        response = await async_client.get(f"{base}/audit", params={"format": "text"})
        assert "OVERRIDE AUDIT REPORT" in response.text

    async def test_outcome_for_unknown_override(self, async_client, session_id):
        response = await async_client.post(
            f"/api/v1/sessions/{session_id}/overrides/missing/outcome",
            json={"outcome": "stable"},
        )
        assert response.status_code == 404

    async def test_invalid_outcome_value(self, async_client, session_id):
        response = await async_client.post(
            f"/api/v1/sessions/{session_id}/overrides/missing/outcome",
            json={"outcome": "cured"},
        )
        assert response.status_code == 422

    async def test_invalid_audit_format(self, async_client, session_id):
        response = await async_client.get(
            f"/api/v1/sessions/{session_id}/overrides/audit", params={"format": "xml"},
        )
        assert response.status_code == 422


@pytest.mark.asyncio
class TestSimulationEndpoints:
    """Tests for the case library and scoring."""

    async def test_list_cases(self, async_client):
        response = await async_client.get("/api/v1/simulations/cases")
        assert response.status_code == 200

        data = response.json()
        assert data["total"] == 5
        assert any(c["category"] == "neonatal" for c in data["categories"])

    async def test_filter_cases(self, async_client):
        response = await async_client.get("/api/v1/simulations/cases", params={"difficulty": "advanced"})
        assert [c["id"] for c in response.json()["cases"]] == ["septic_shock_advanced"]

    async def test_filter_invalid_category(self, async_client):
        response = await async_client.get("/api/v1/simulations/cases", params={"category": "dermatology"})
        assert response.status_code == 422

    async def test_get_case(self, async_client):
        response = await async_client.get("/api/v1/simulations/cases/cardiac_arrest_beginner")
        assert response.status_code == 200
        assert len(response.json()["correct_actions"]) == 9

    async def test_unknown_case(self, async_client):
        response = await async_client.get("/api/v1/simulations/cases/nope")
        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "UNKNOWN_CASE"

    async def test_score_full_marks(self, async_client):
        actions = [
            {"action_id": f"a{i}", "timestamp": f"2026-01-01T12:00:{5 * i:02d}"}
            for i in range(1, 10)
        ]
        response = await async_client.post("/api/v1/simulations/cardiac_arrest_beginner/score", json={
            "start_time": "2026-01-01T12:00:00",
            "end_time": "2026-01-01T12:05:00",
            "actions": actions,
        })
        assert response.status_code == 200

        data = response.json()
        assert data["total_score"] == 115
        assert data["percentage"] == 100.0
        assert data["passed"] is True
