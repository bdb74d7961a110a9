"""Conflict-risk scoring for individual cadets: additive rule-based points."""

import logging
from datetime import date
from typing import Iterable, List, Optional

import numpy as np

from cadet_analytics.config import AnalyticsSettings
from cadet_analytics.errors import BatchResult
from cadet_analytics.models import (
    AcademicStatus,
    ApplicableRisk,
    BehaviorTrend,
    Individual,
    NotApplicableRisk,
    RISK_LEVEL_COLORS,
    RiskAssessment,
    RiskLevel,
)

logger = logging.getLogger(__name__)

ACADEMIC_POINTS = {
    AcademicStatus.NOT_STARTED: 15,
    AcademicStatus.IN_PROGRESS: 0,
    AcademicStatus.COMPLETED: -10,
}


def age_adjustment(age: Optional[int]) -> int:
    """+10 under 16, -5 over 18, nothing otherwise or when age is unknown."""
    if age is None:
        return 0
    if age < 16:
        return 10
    if age > 18:
        return -5
    return 0


def tenure_adjustment(
    enrollment_date: Optional[date],
    today: date,
    new_enrollment_days: int = 30,
) -> int:
    """
    +10 for cadets enrolled fewer than new_enrollment_days ago.

    A missing enrollment date counts as enrolled today, so it earns no bonus.
    """
    if enrollment_date is None:
        return 0
    return 10 if (today - enrollment_date).days < new_enrollment_days else 0


def raw_risk_points(individual: Individual, today: date, new_enrollment_days: int = 30) -> int:
    """Unclamped point total; see score_individual."""
    base = (5 - individual.behavior_score) * 20
    return (
        base
        + age_adjustment(individual.age)
        + ACADEMIC_POINTS[individual.academic_status]
        + tenure_adjustment(individual.enrollment_date, today, new_enrollment_days)
    )


def risk_level(score: float) -> RiskLevel:
    """
    Categorize a risk score into Low/Moderate/High.

    Args:
        score: Risk score (0-100)

    Returns:
        RiskLevel band
    """
    if score >= 70:
        return RiskLevel.HIGH
    elif score >= 30:
        return RiskLevel.MODERATE
    else:
        return RiskLevel.LOW


def behavior_trend(behavior_score: int) -> BehaviorTrend:
    if behavior_score >= 4:
        return BehaviorTrend.POSITIVE
    if behavior_score <= 2:
        return BehaviorTrend.CONCERNING
    return BehaviorTrend.STABLE


def score_individual(
    individual: Individual,
    today: Optional[date] = None,
    settings: Optional[AnalyticsSettings] = None,
) -> RiskAssessment:
    """
    Compute the 0-100 conflict-risk estimate for one cadet.

    Points: (5 - behavior) * 20, +10 under 16 / -5 over 18, +15 not started /
    -10 completed academics, +10 enrolled under 30 days. The total is clamped
    to [0, 100]. Cadets with a behavior score above the scoring cutoff (3 by
    default) are not scored.

    Args:
        individual: Normalized cadet record
        today: Reference date for tenure (defaults to date.today())
        settings: Policy constants (defaults to AnalyticsSettings())

    Returns:
        ApplicableRisk with the score, or NotApplicableRisk
    """
    settings = settings or AnalyticsSettings()
    today = today or date.today()

    if individual.behavior_score > settings.scoring_behavior_max:
        return NotApplicableRisk(
            individual_id=individual.id,
            reason=f"behavior score {individual.behavior_score} is above "
                   f"{settings.scoring_behavior_max}; not scored",
        )

    points = raw_risk_points(individual, today, settings.new_enrollment_days)
    score = int(np.clip(points, 0, 100))
    logger.debug("Risk for %s: %d points -> %d", individual.id, points, score)

    level = risk_level(score)
    return ApplicableRisk(
        individual_id=individual.id,
        score=score,
        risk_level=level,
        behavior_trend=behavior_trend(individual.behavior_score),
        color=RISK_LEVEL_COLORS[level],
    )


def score_population(
    individuals: Iterable[Individual],
    today: Optional[date] = None,
    settings: Optional[AnalyticsSettings] = None,
) -> BatchResult[RiskAssessment]:
    """Score every cadet independently; one assessment per cadet, input order kept."""
    today = today or date.today()
    assessments = [score_individual(i, today, settings) for i in individuals]
    return BatchResult[RiskAssessment](results=assessments)


def high_risk_individuals(assessments: Iterable[RiskAssessment]) -> List[ApplicableRisk]:
    """Applicable assessments at the High level, highest score first."""
    flagged = [
        a for a in assessments
        if isinstance(a, ApplicableRisk) and a.risk_level == RiskLevel.HIGH
    ]
    return sorted(flagged, key=lambda a: (-a.score, a.individual_id))
