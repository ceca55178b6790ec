"""
Simulation Case Library

Loads every ``*.json`` case under the configured data directory once and
serves lookups by id, category and difficulty.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from pydantic import ValidationError

from paeds_resus.config import CASE_DATA_DIR
from paeds_resus.utils.exceptions import CaseLoadError, UnknownCaseError
from .base import CATEGORY_LABELS, SimulationCase, SimulationCategory, SimulationDifficulty

logger = logging.getLogger(__name__)


def load_case(path: Path) -> SimulationCase:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CaseLoadError(f"Cannot read case file: {exc}", source=str(path)) from exc
    try:
        return SimulationCase.model_validate_json(text)
    except ValidationError as exc:
        raise CaseLoadError(
            f"Invalid case file {path.name}: {exc.error_count()} validation error(s)",
            source=str(path),
            details={"errors": [f"{'.'.join(map(str, e['loc']))}: {e['msg']}" for e in exc.errors()]},
        ) from exc


class CaseLibrary:
    """Read-only collection of validated simulation cases, in load order."""

    def __init__(self, cases: List[SimulationCase]):
        self._cases: Dict[str, SimulationCase] = {}
        for case in cases:
            if case.id in self._cases:
                raise CaseLoadError(f"Duplicate simulation case id '{case.id}'", source=case.id)
            self._cases[case.id] = case

    @classmethod
    def from_directory(cls, directory: Union[str, Path] = CASE_DATA_DIR) -> "CaseLibrary":
        directory = Path(directory)
        if not directory.is_dir():
            raise CaseLoadError(f"Case directory does not exist: {directory}", source=str(directory))
        cases = [load_case(p) for p in sorted(directory.glob("*.json"))]
        logger.info(f"CaseLibrary: loaded {len(cases)} case(s) from {directory}")
        return cls(cases)

    def __len__(self) -> int:
        return len(self._cases)

    def __iter__(self) -> Iterator[SimulationCase]:
        return iter(self._cases.values())

    def __contains__(self, case_id: str) -> bool:
        return case_id in self._cases

    def ids(self) -> List[str]:
        return list(self._cases)

    def find(self, case_id: str) -> Optional[SimulationCase]:
        return self._cases.get(case_id)

    def get(self, case_id: str) -> SimulationCase:
        case = self._cases.get(case_id)
        if case is None:
            raise UnknownCaseError(case_id)
        return case

    def by_category(self, category: Union[SimulationCategory, str]) -> List[SimulationCase]:
        category = SimulationCategory(category)
        return [c for c in self._cases.values() if c.category == category]

    def by_difficulty(self, difficulty: Union[SimulationDifficulty, str]) -> List[SimulationCase]:
        difficulty = SimulationDifficulty(difficulty)
        return [c for c in self._cases.values() if c.difficulty == difficulty]

    def categories(self) -> List[dict]:
        """Categories that have at least one case, with a display label and count."""
        counts: Dict[SimulationCategory, int] = {}
        for case in self._cases.values():
            counts[case.category] = counts.get(case.category, 0) + 1
        return [
            {"category": cat.value, "label": CATEGORY_LABELS[cat], "count": n}
            for cat, n in counts.items()
        ]


@lru_cache(maxsize=1)
def default_library() -> CaseLibrary:
    """The bundled case library, loaded on first use."""
    return CaseLibrary.from_directory(CASE_DATA_DIR)
