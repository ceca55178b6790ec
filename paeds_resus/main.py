"""
Paediatric Resuscitation Decision Engine - FastAPI Application

API endpoints for:
- Clinical sessions (assessments, engine activation and progress)
- Safety gating between ABCDE phases and phase validation
- Reassessment routing
- Override accountability (submission, outcomes, audit)
- Case simulation (library and scoring)
"""
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Query, Response
from fastapi.middleware.cors import CORSMiddleware

from paeds_resus import __version__
from paeds_resus.config import CORS_ORIGINS, LOG_FILE, LOG_LEVEL
from paeds_resus.core.assessment import PatientProfile
from paeds_resus.core.engines import DEFAULT_CATALOG
from paeds_resus.core.overrides import compute_quality_score
from paeds_resus.core.reassessment import route
from paeds_resus.core.safety import check_violation, validate_phase, violations_for
from paeds_resus.core.session import ClinicalSession
from paeds_resus.core.simulation import PerformedAction, default_library, score_simulation
from paeds_resus.models.schemas import (
    AssessmentRequest,
    EscalationResponse,
    HealthResponse,
    OutcomeRequest,
    OverrideRequest,
    PhaseValidationRequest,
    ReactivateRequest,
    ReassessmentRequest,
    SafetyCheckRequest,
    SafetyCheckResponse,
    SessionCreateRequest,
    SimulationScoreRequest,
)
from paeds_resus.utils.exceptions import (
    OverrideRejectedError,
    SessionNotFoundError,
    UnknownCaseError,
)
from paeds_resus.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


# ---- Application Lifespan ----

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and load the case library before serving."""
    setup_logging(LOG_LEVEL, LOG_FILE or None)
    library = default_library()
    logger.info(f"Engine catalogue: {len(DEFAULT_CATALOG)} engines; simulation library: {len(library)} cases")
    logger.info("API ready to accept requests")
    yield
    _sessions.clear()
    logger.info("Paediatric Resuscitation API shut down.")


# ---- FastAPI Application ----

app = FastAPI(
    title="Paediatric Resuscitation Decision Engine API",
    description="Rule-driven ABCDE decision support: emergency engines, safety gates, overrides and simulation",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---- In-memory storage (one authoritative owner per process) ----
_sessions: Dict[str, ClinicalSession] = {}
START_TIME = datetime.now()


# ---- Utility Functions ----

def _get_session(session_id: str) -> ClinicalSession:
    session = _sessions.get(session_id)
    if session is None:
        error = SessionNotFoundError(session_id)
        raise HTTPException(status_code=404, detail=error.to_dict())
    return session


def _get_case(case_id: str):
    try:
        return default_library().get(case_id)
    except UnknownCaseError as e:
        raise HTTPException(status_code=404, detail=e.to_dict())


def _engine_view(session: ClinicalSession) -> Dict[str, Any]:
    weight = session.patient.weight_kg
    return {
        "session_id": session.session_id,
        "active": [s.to_dict(weight) for s in session.manager.statuses()],
        "summary": session.manager.summary(),
    }


# ---- Health ----

@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Detailed health check."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.now(),
        uptime_seconds=(datetime.now() - START_TIME).total_seconds(),
        engines_loaded=len(DEFAULT_CATALOG),
        simulation_cases=len(default_library()),
    )


# ---- Reference ----

@app.get("/api/v1/engines", tags=["Reference"])
async def list_engines(weight_kg: Optional[float] = Query(None, gt=0, description="Compute doses for this weight")):
    """Engine catalogue, optionally with weight-scaled dosing."""
    return {
        "engines": [engine.to_dict(weight_kg) for engine in DEFAULT_CATALOG],
        "total": len(DEFAULT_CATALOG),
    }


# ---- Sessions ----

@app.post("/api/v1/sessions", status_code=201, tags=["Sessions"])
async def create_session(request: SessionCreateRequest):
    """Open a clinical session, optionally with a first assessment."""
    if request.session_id and request.session_id in _sessions:
        raise HTTPException(status_code=409, detail=f"Session '{request.session_id}' already exists")

    patient = PatientProfile(**request.patient.model_dump())
    session = ClinicalSession(patient, session_id=request.session_id)
    _sessions[session.session_id] = session
    logger.info(f"Session {session.session_id} opened ({patient.weight_kg} kg, {patient.age_in_years:.1f} y)")

    if request.assessment is not None:
        session.record_assessment(request.assessment.to_snapshot())
    return session.to_dict()


@app.get("/api/v1/sessions/{session_id}", tags=["Sessions"])
async def get_session(session_id: str):
    return _get_session(session_id).to_dict()


@app.post("/api/v1/sessions/{session_id}/assessments", tags=["Sessions"])
async def record_assessment(session_id: str, request: AssessmentRequest):
    """Record an assessment and activate any newly triggered engines."""
    session = _get_session(session_id)
    activated = session.record_assessment(request.assessment.to_snapshot())
    return {
        "session_id": session_id,
        "activated": [a.engine_id for a in activated],
        "trigger_findings": {a.engine_id: list(a.trigger_findings) for a in activated},
        **_engine_view(session),
    }


@app.get("/api/v1/sessions/{session_id}/engines", tags=["Engines"])
async def get_session_engines(session_id: str):
    """Active engines in priority order plus the handover summary."""
    return _engine_view(_get_session(session_id))


@app.post(
    "/api/v1/sessions/{session_id}/engines/{engine_id}/actions/{action_id}/complete",
    tags=["Engines"],
)
async def complete_action(session_id: str, engine_id: str, action_id: str):
    session = _get_session(session_id)
    activation = session.manager.state.find_active(engine_id)
    if activation is None:
        raise HTTPException(status_code=404, detail=f"Engine '{engine_id}' is not active")
    if action_id not in activation.definition(session.catalog).action_ids:
        raise HTTPException(status_code=404, detail=f"Action '{action_id}' does not belong to '{engine_id}'")

    session.complete_action(engine_id, action_id)
    status = session.manager.status(engine_id)
    return {
        "engine_id": engine_id,
        "action_id": action_id,
        "engine_complete": status is None,
        "status": status.to_dict(session.patient.weight_kg) if status else None,
        **_engine_view(session),
    }


@app.post("/api/v1/sessions/{session_id}/engines/{engine_id}/deactivate", tags=["Engines"])
async def deactivate_engine(session_id: str, engine_id: str):
    """Clinician declares the condition resolved; partial progress is kept."""
    session = _get_session(session_id)
    if not session.manager.is_active(engine_id):
        raise HTTPException(status_code=404, detail=f"Engine '{engine_id}' is not active")
    session.deactivate(engine_id)
    return _engine_view(session)


@app.post("/api/v1/sessions/{session_id}/engines/{engine_id}/reactivate", tags=["Engines"])
async def reactivate_engine(session_id: str, engine_id: str, request: Optional[ReactivateRequest] = None):
    """Start a fresh course of a previously completed or deactivated engine."""
    session = _get_session(session_id)
    if session.manager.is_active(engine_id):
        raise HTTPException(status_code=409, detail=f"Engine '{engine_id}' is already active")
    if session.manager.state.find_completed(engine_id) is None:
        raise HTTPException(status_code=404, detail=f"Engine '{engine_id}' has no completed course")

    snapshot = None
    if request is not None and request.assessment is not None:
        snapshot = request.assessment.to_snapshot()
    session.reactivate(engine_id, snapshot)
    return _engine_view(session)


# ---- Safety / reassessment ----

@app.post("/api/v1/safety/check", response_model=SafetyCheckResponse, tags=["Safety"])
async def safety_check(request: SafetyCheckRequest):
    """First rule blocking entry into the next phase, plus every blocking rule."""
    snapshot = request.assessment.to_snapshot()
    rule = check_violation(request.current_phase, request.next_phase, snapshot, request.acknowledged)
    return SafetyCheckResponse(
        blocked=rule is not None,
        rule=rule.to_dict() if rule else None,
        violations=[r.to_dict() for r in violations_for(request.next_phase, snapshot, request.acknowledged)],
    )


@app.post("/api/v1/safety/validate-phase", tags=["Safety"])
async def safety_validate_phase(request: PhaseValidationRequest):
    return validate_phase(request.phase, request.assessment.to_snapshot()).to_dict()


@app.post("/api/v1/reassessment/route", response_model=EscalationResponse, tags=["Reassessment"])
async def reassessment_route(request: ReassessmentRequest):
    return route(request.response, request.phase, request.intervention_count).to_dict()


# ---- Overrides ----

@app.post("/api/v1/sessions/{session_id}/overrides", status_code=201, tags=["Overrides"])
async def submit_override(session_id: str, request: OverrideRequest):
    """Record a clinician override; 422 with every validation error if rejected."""
    session = _get_session(session_id)
    try:
        record = session.override(**request.model_dump())
    except OverrideRejectedError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())
    return record.to_dict()


@app.post("/api/v1/sessions/{session_id}/overrides/{override_id}/outcome", tags=["Overrides"])
async def record_override_outcome(session_id: str, override_id: str, request: OutcomeRequest):
    session = _get_session(session_id)
    entry = session.audit.record_outcome(override_id, request.outcome, request.notes)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"Override '{override_id}' not found")
    return entry.to_dict()


@app.get("/api/v1/sessions/{session_id}/overrides/audit", tags=["Overrides"])
async def override_audit(
    session_id: str,
    fmt: str = Query("json", alias="format", pattern="^(json|csv|text)$"),
):
    """Audit trail as JSON (default), CSV or a plain-text report."""
    session = _get_session(session_id)
    audit = session.audit
    if fmt == "csv":
        return Response(content=audit.export_csv(), media_type="text/csv")
    if fmt == "text":
        return Response(content=audit.audit_report(), media_type="text/plain")

    summary = audit.summary()
    return {
        "session_id": session_id,
        "statistics": summary.to_dict(),
        "quality_score": compute_quality_score(summary),
        "overrides": [r.to_dict() for r in audit.records],
        "outcomes": [e.to_dict() for e in audit.outcome_entries],
        "handover_summary": audit.handover_summary(),
    }


# ---- Simulation ----

@app.get("/api/v1/simulations/cases", tags=["Simulation"])
async def list_cases(
    category: Optional[str] = Query(None),
    difficulty: Optional[str] = Query(None),
):
    library = default_library()
    cases = list(library)
    try:
        if category:
            cases = [c for c in cases if c in library.by_category(category)]
        if difficulty:
            cases = [c for c in cases if c in library.by_difficulty(difficulty)]
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {
        "cases": [c.overview() for c in cases],
        "categories": library.categories(),
        "total": len(cases),
    }


@app.get("/api/v1/simulations/cases/{case_id}", tags=["Simulation"])
async def get_case(case_id: str):
    return _get_case(case_id).model_dump(mode="json")


@app.post("/api/v1/simulations/{case_id}/score", tags=["Simulation"])
async def score_case(case_id: str, request: SimulationScoreRequest):
    case = _get_case(case_id)
    result = score_simulation(
        case,
        [PerformedAction(a.action_id, a.timestamp) for a in request.actions],
        request.start_time,
        end_time=request.end_time,
    )
    return result.to_dict()


# ---- Run with uvicorn ----
if __name__ == "__main__":
    import uvicorn
    setup_logging(LOG_LEVEL, LOG_FILE or None)
    uvicorn.run(app, host="0.0.0.0", port=8000)
