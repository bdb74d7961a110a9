"""Population-level intervention insights for the active cadet roster."""

import logging
from typing import Iterable, List, Optional

from cadet_analytics.config import AnalyticsSettings
from cadet_analytics.models import (
    AcademicStatus,
    CadetStatus,
    HighRiskAlert,
    Individual,
    Insight,
    InsightType,
)

logger = logging.getLogger(__name__)


def active_only(population: Iterable[Individual]) -> List[Individual]:
    return [i for i in population if i.status == CadetStatus.ACTIVE]


def peer_pairing_insight(population: List[Individual], settings: AnalyticsSettings) -> Optional[Insight]:
    struggling = sum(1 for i in population if i.behavior_score <= settings.high_risk_behavior_max)
    role_models = sum(1 for i in population if i.behavior_score >= 4)
    if not (struggling and role_models):
        return None
    return Insight(
        type=InsightType.PEER_PAIRING,
        title="Peer Pairing Opportunity",
        description=(
            f"{struggling} cadet(s) with behavior scores of {settings.high_risk_behavior_max} or lower "
            f"could be paired with {role_models} cadet(s) scoring 4 or higher."
        ),
        rationale="Social learning: positive role models reduce conflict among struggling peers.",
        counts={"lowBehavior": struggling, "highBehavior": role_models},
    )


def academic_intervention_insight(population: List[Individual], settings: AnalyticsSettings) -> Optional[Insight]:
    stalled = sum(
        1 for i in population
        if i.academic_status == AcademicStatus.NOT_STARTED
        and i.behavior_score <= settings.scoring_behavior_max
    )
    if not stalled:
        return None
    return Insight(
        type=InsightType.ACADEMIC_INTERVENTION,
        title="Academic Intervention Needed",
        description=(
            f"{stalled} cadet(s) have not started academic work and have behavior "
            f"scores of {settings.scoring_behavior_max} or lower."
        ),
        rationale="Academic engagement is a protective factor against behavioral conflict.",
        counts={"notStartedLowBehavior": stalled},
    )


def generate_insights(
    population: Iterable[Individual],
    settings: Optional[AnalyticsSettings] = None,
) -> List[Insight]:
    """
    Evaluate each insight rule over the active population.

    Rules fire independently, in order: peer pairing, then academic
    intervention. An empty list means no critical pattern was found. The
    high-risk alert is reported separately by high_risk_alert().
    """
    settings = settings or AnalyticsSettings()
    active = active_only(population)
    insights = []
    for rule in (peer_pairing_insight, academic_intervention_insight):
        insight = rule(active, settings)
        if insight is not None:
            insights.append(insight)
    logger.debug("Generated %d insight(s) for %d active cadets", len(insights), len(active))
    return insights


def high_risk_alert(
    population: Iterable[Individual],
    settings: Optional[AnalyticsSettings] = None,
) -> Optional[HighRiskAlert]:
    """Active cadets at or below the high-risk behavior score, capped at the display limit."""
    settings = settings or AnalyticsSettings()
    flagged = [
        i for i in active_only(population)
        if i.behavior_score <= settings.high_risk_behavior_max
    ]
    if not flagged:
        return None
    limit = settings.high_risk_display_limit
    return HighRiskAlert(
        individual_ids=[i.id for i in flagged[:limit]],
        total=len(flagged),
        more_count=max(0, len(flagged) - limit),
    )
