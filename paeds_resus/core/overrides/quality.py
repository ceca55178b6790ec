"""
Override Quality Score

A weighted heuristic, not a statistical model. Coefficients come from
``paeds_resus.config`` and can be replaced per call.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from paeds_resus import config
from .audit import OverrideAuditSummary


@dataclass(frozen=True)
class QualityScoreWeights:
    base: float = config.QUALITY_BASE_SCORE
    volume_threshold: int = config.QUALITY_VOLUME_THRESHOLD
    volume_penalty_per_override: float = config.QUALITY_VOLUME_PENALTY_PER
    volume_penalty_cap: Optional[float] = config.QUALITY_VOLUME_PENALTY_CAP
    critical_penalty: float = config.QUALITY_CRITICAL_PENALTY
    high_penalty: float = config.QUALITY_HIGH_PENALTY
    strong_improvement_rate: float = config.QUALITY_STRONG_IMPROVEMENT_RATE
    strong_improvement_bonus: float = config.QUALITY_STRONG_IMPROVEMENT_BONUS
    modest_improvement_rate: float = config.QUALITY_MODEST_IMPROVEMENT_RATE
    modest_improvement_bonus: float = config.QUALITY_MODEST_IMPROVEMENT_BONUS


DEFAULT_WEIGHTS = QualityScoreWeights()


def compute_quality_score(
    summary: OverrideAuditSummary,
    weights: QualityScoreWeights = DEFAULT_WEIGHTS,
) -> float:
    """
    0-100 score; higher means fewer high-stakes overrides and better outcomes.

    Starts from ``base``, subtracts a per-override penalty beyond the volume
    threshold plus fixed penalties per critical and high override, and adds
    one improvement bonus (strong or modest, not both).
    """
    score = weights.base

    excess = summary.total_overrides - weights.volume_threshold
    if excess > 0:
        volume_penalty = excess * weights.volume_penalty_per_override
        if weights.volume_penalty_cap is not None:
            volume_penalty = min(volume_penalty, weights.volume_penalty_cap)
        score -= volume_penalty

    score -= summary.by_severity.get("critical", 0) * weights.critical_penalty
    score -= summary.by_severity.get("high", 0) * weights.high_penalty

    if summary.outcome_improvement_rate > weights.strong_improvement_rate:
        score += weights.strong_improvement_bonus
    elif summary.outcome_improvement_rate > weights.modest_improvement_rate:
        score += weights.modest_improvement_bonus

    return float(np.clip(score, 0.0, 100.0))
