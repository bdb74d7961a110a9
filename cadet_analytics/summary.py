"""Dashboard headline counts for one snapshot."""

from typing import Dict, Iterable, Optional

from cadet_analytics.config import AnalyticsSettings
from cadet_analytics.models import AcademicStatus, CadetStatus, Individual, Snapshot


def hiset_completion_rate(cadets: Iterable[Individual]) -> int:
    """Percent of active and graduated cadets with completed academics, rounded."""
    counted = [c for c in cadets if c.status in (CadetStatus.ACTIVE, CadetStatus.GRADUATED)]
    if not counted:
        return 0
    completed = sum(1 for c in counted if c.academic_status == AcademicStatus.COMPLETED)
    return round(completed / len(counted) * 100)


def behavior_distribution(cadets: Iterable[Individual]) -> Dict[int, int]:
    """Active cadets per behavior score; every score 1-5 is present."""
    distribution = {score: 0 for score in range(1, 6)}
    for cadet in cadets:
        if cadet.status == CadetStatus.ACTIVE:
            distribution[cadet.behavior_score] += 1
    return distribution


def summarize_snapshot(
    snapshot: Snapshot,
    settings: Optional[AnalyticsSettings] = None,
) -> Dict[str, int]:
    """
    Headline counts for the dashboard.

    Args:
        snapshot: Normalized snapshot
        settings: Policy constants (defaults to AnalyticsSettings())

    Returns:
        Dict with totalCadets, hisetCompletionRate, highRiskCadets,
        lowStockItems, totalStaff and totalShifts
    """
    settings = settings or AnalyticsSettings()
    active = snapshot.active_cadets()
    return {
        "totalCadets": len(active),
        "hisetCompletionRate": hiset_completion_rate(snapshot.cadets),
        "highRiskCadets": sum(1 for c in active if c.behavior_score <= settings.high_risk_behavior_max),
        "lowStockItems": sum(1 for i in snapshot.inventory if i.quantity <= i.threshold),
        "totalStaff": len(snapshot.staff),
        "totalShifts": len(snapshot.schedule),
    }
