"""
Engine Catalog

The fixed registry of emergency engines and the dispatcher that evaluates
an assessment against every trigger.

Usage:
    from paeds_resus.core.engines import DEFAULT_CATALOG

    for engine in DEFAULT_CATALOG.applicable(snapshot):
        print(engine.id, engine.severity.value)

Adding an engine:
    1. Define an EngineDefinition in the matching rules_<group>.py module.
    2. Append it to _ENGINES below (catalogue order is presentation order).
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from paeds_resus.core.assessment import AssessmentSnapshot
from paeds_resus.utils.exceptions import CatalogError
from .base import EngineDefinition, EngineSeverity
from .rules_metabolic import DKA, SEVERE_MALNUTRITION
from .rules_neuro import MENINGITIS, STATUS_EPILEPTICUS
from .rules_respiratory import RESPIRATORY_FAILURE
from .rules_shock import ANAPHYLAXIS, CARDIOGENIC_SHOCK, HYPOVOLEMIC_SHOCK, SEPTIC_SHOCK

logger = logging.getLogger(__name__)

# ── Registry ────────────────────────────────────────────────────────────────
_ENGINES: Tuple[EngineDefinition, ...] = (
    SEPTIC_SHOCK,
    RESPIRATORY_FAILURE,
    STATUS_EPILEPTICUS,
    DKA,
    ANAPHYLAXIS,
    HYPOVOLEMIC_SHOCK,
    CARDIOGENIC_SHOCK,
    SEVERE_MALNUTRITION,
    MENINGITIS,
)

# Severity sort order (lower = handled first)
SEVERITY_ORDER = {
    EngineSeverity.CRITICAL: 0,
    EngineSeverity.URGENT:   1,
}


class EngineCatalog:
    """
    Immutable, validated collection of engine definitions.

    Stateless apart from the definitions themselves, so a single instance
    is shared by every session.
    """

    def __init__(self, engines: Iterable[EngineDefinition]):
        self._engines: Tuple[EngineDefinition, ...] = tuple(engines)
        self._validate()
        self._by_id: Dict[str, EngineDefinition] = {e.id: e for e in self._engines}

    def _validate(self) -> None:
        seen = set()
        for engine in self._engines:
            if engine.id in seen:
                raise CatalogError(f"Duplicate engine id '{engine.id}'", engine_id=engine.id)
            seen.add(engine.id)

            if not engine.actions:
                raise CatalogError(f"Engine '{engine.id}' defines no actions", engine_id=engine.id)

            action_ids = [a.id for a in engine.actions]
            duplicates = sorted({a for a in action_ids if action_ids.count(a) > 1})
            if duplicates:
                raise CatalogError(
                    f"Engine '{engine.id}' repeats action ids",
                    engine_id=engine.id,
                    details={"action_ids": duplicates},
                )

            sequences = [a.sequence for a in engine.actions]
            if sequences != list(range(1, len(sequences) + 1)):
                raise CatalogError(
                    f"Engine '{engine.id}' action sequence must run 1..{len(sequences)}",
                    engine_id=engine.id,
                    details={"sequences": sequences},
                )

    # ---- lookup ----

    def get(self, engine_id: str) -> Optional[EngineDefinition]:
        return self._by_id.get(engine_id)

    def ids(self) -> List[str]:
        return [e.id for e in self._engines]

    def __iter__(self) -> Iterator[EngineDefinition]:
        return iter(self._engines)

    def __len__(self) -> int:
        return len(self._engines)

    def __contains__(self, engine_id: object) -> bool:
        return engine_id in self._by_id

    # ---- evaluation ----

    def applicable(self, snapshot: AssessmentSnapshot) -> List[EngineDefinition]:
        """
        Every engine whose trigger the snapshot satisfies, in catalogue order.

        Multiple engines may fire at once; none suppresses another.
        """
        triggered = [e for e in self._engines if e.is_triggered(snapshot)]
        if triggered:
            logger.info(
                f"EngineCatalog: {len(triggered)} engine(s) triggered: "
                + ", ".join(e.id for e in triggered)
            )
        else:
            logger.debug("EngineCatalog: no engines triggered")
        return triggered

    def summarise(self) -> List[dict]:
        """Compact listing for reference endpoints."""
        return [
            {
                "id": e.id,
                "name": e.name,
                "severity": e.severity.value,
                "action_count": len(e.actions),
                "trigger": e.trigger.describe(),
            }
            for e in self._engines
        ]


DEFAULT_CATALOG = EngineCatalog(_ENGINES)


def applicable_engines(
    snapshot: AssessmentSnapshot,
    catalog: Optional[EngineCatalog] = None,
) -> List[EngineDefinition]:
    """Module-level shortcut over ``DEFAULT_CATALOG.applicable``."""
    return (catalog or DEFAULT_CATALOG).applicable(snapshot)
