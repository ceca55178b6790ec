"""
Clinical Session

One resuscitation encounter: the patient, the engine manager state, the
override audit trail and the latest assessment. The HTTP layer keeps one
of these per session id.
"""
from __future__ import annotations

import dataclasses
import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from paeds_resus.utils.exceptions import OverrideRejectedError
from .assessment import AssessmentSnapshot, PatientProfile
from .engines import DEFAULT_CATALOG, EngineCatalog
from .manager import EngineActivation, EngineManager
from .overrides import OverrideAuditTrail, OverrideRecord, compute_quality_score

logger = logging.getLogger(__name__)


class ClinicalSession:
    def __init__(
        self,
        patient: PatientProfile,
        session_id: Optional[str] = None,
        catalog: EngineCatalog = DEFAULT_CATALOG,
        now: Optional[datetime] = None,
    ):
        self.session_id = session_id or str(uuid.uuid4())
        self.patient = patient
        self.created_at = now or datetime.now()
        self.catalog = catalog
        self.manager = EngineManager(catalog=catalog)
        self.audit = OverrideAuditTrail(self.session_id)
        self.latest_snapshot: Optional[AssessmentSnapshot] = None

    # ── Assessments ─────────────────────────────────────────────────────────

    def with_patient(self, snapshot: AssessmentSnapshot) -> AssessmentSnapshot:
        """Attach the session patient when the snapshot carries none."""
        if snapshot.patient is None:
            return dataclasses.replace(snapshot, patient=self.patient)
        return snapshot

    def record_assessment(
        self,
        snapshot: Union[AssessmentSnapshot, Dict[str, Any]],
        now: Optional[datetime] = None,
    ) -> List[EngineActivation]:
        if isinstance(snapshot, dict):
            snapshot = AssessmentSnapshot.from_dict(snapshot)
        snapshot = self.with_patient(snapshot)
        self.latest_snapshot = snapshot
        activated = self.manager.evaluate(snapshot, now=now)
        if activated:
            logger.info(
                f"ClinicalSession [{self.session_id}]: activated "
                + ", ".join(a.engine_id for a in activated)
            )
        return activated

    # ── Engine lifecycle ────────────────────────────────────────────────────

    def complete_action(self, engine_id: str, action_id: str, now: Optional[datetime] = None) -> None:
        self.manager.complete_action(engine_id, action_id, now=now)

    def deactivate(self, engine_id: str, now: Optional[datetime] = None) -> None:
        self.manager.deactivate(engine_id, now=now)

    def reactivate(
        self,
        engine_id: str,
        snapshot: Optional[AssessmentSnapshot] = None,
        now: Optional[datetime] = None,
    ) -> None:
        snapshot = self.with_patient(snapshot) if snapshot else self.latest_snapshot
        self.manager.reactivate(engine_id, snapshot or AssessmentSnapshot(patient=self.patient), now=now)

    # ── Overrides ───────────────────────────────────────────────────────────

    def override(
        self,
        *,
        clinician_id: str,
        clinician_name: str,
        clinician_role: str,
        engine_id: str,
        action_id: str,
        overridden_action: str,
        reason: str,
        reason_details: str,
        clinical_context: str = "",
        follow_up_required: bool = False,
        now: Optional[datetime] = None,
    ) -> OverrideRecord:
        """
        Record an override of a catalogue action for this patient.

        Raises:
            OverrideRejectedError: if the role may not override at this
                severity or the justification fails validation.
        """
        engine = self.catalog.get(engine_id)
        action = next((a for a in engine.actions if a.id == action_id), None) if engine else None

        submission = self.audit.submit(
            clinician_id=clinician_id,
            clinician_name=clinician_name,
            clinician_role=clinician_role,
            engine_id=engine_id,
            engine_name=engine.name if engine else engine_id,
            action_id=action_id,
            action_title=action.title if action else action_id,
            recommended_action=action.description if action else "",
            overridden_action=overridden_action,
            reason=reason,
            reason_details=reason_details,
            patient_age=self.patient.age_in_years,
            patient_weight=self.patient.weight_kg,
            clinical_context=clinical_context,
            follow_up_required=follow_up_required,
            now=now,
        )
        if not submission.accepted:
            raise OverrideRejectedError(
                "Override rejected",
                errors=submission.errors,
                details={"severity": submission.severity.value if submission.severity else None},
            )
        return submission.record

    def quality_score(self) -> float:
        return compute_quality_score(self.audit.summary())

    # ── Views ───────────────────────────────────────────────────────────────

    def to_dict(self) -> dict:
        weight = self.patient.weight_kg
        return {
            "session_id": self.session_id,
            "created_at": self.created_at.isoformat(),
            "patient": self.patient.to_dict(),
            "latest_assessment": self.latest_snapshot.to_dict() if self.latest_snapshot else None,
            "active_engines": [s.to_dict(weight) for s in self.manager.statuses()],
            "has_critical_engines": self.manager.has_critical(),
            "summary": self.manager.summary(),
            "override_count": len(self.audit),
        }
