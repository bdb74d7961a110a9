"""Coverage of high-risk cadets by experienced staff."""

import logging
from collections import Counter
from typing import Iterable, List, Optional

from cadet_analytics.config import AnalyticsSettings
from cadet_analytics.models import (
    CoverageReport,
    Individual,
    ScheduleEntry,
    StaffMember,
    SupervisionGap,
    WorkloadRecord,
)

logger = logging.getLogger(__name__)

# Wake-up, midday and evening hours need at least two supervisors
CRITICAL_HOURS = (6, 7, 12, 18, 19)
MIN_SUPERVISORS = 2
SUPERVISION_TASK = "supervision"


def supervision_gaps(entries: Iterable[ScheduleEntry]) -> List[SupervisionGap]:
    """Critical hours with fewer than two supervision shifts starting in them."""
    per_hour = Counter(
        e.start_time.hour for e in entries if e.task_type == SUPERVISION_TASK
    )
    gaps = []
    for hour in CRITICAL_HOURS:
        count = per_hour.get(hour, 0)
        if count < MIN_SUPERVISORS:
            gaps.append(SupervisionGap(
                hour=hour,
                severity="medium" if count else "high",
                staff_needed=MIN_SUPERVISORS - count,
            ))
    return gaps


def coverage_from_counts(
    high_risk_count: int,
    experienced_staff_count: int,
    staff_count: int,
    individual_count: int,
    workload: Iterable[WorkloadRecord] = (),
    settings: Optional[AnalyticsSettings] = None,
) -> CoverageReport:
    """
    Coverage adequacy from aggregate counts.

    Args:
        high_risk_count: Cadets at or below the high-risk behavior score
        experienced_staff_count: Staff with at least the experienced years
        staff_count: All staff
        individual_count: All cadets
        workload: Workload records to average utilization over
        settings: Policy constants (defaults to AnalyticsSettings())

    Returns:
        CoverageReport; ratios and averages are 0 for empty populations
    """
    settings = settings or AnalyticsSettings()
    ratio = round(staff_count / individual_count, 2) if individual_count > 0 else 0.0
    adequate = experienced_staff_count >= high_risk_count

    utilization = [r.utilization_percent for r in workload]
    average = round(sum(utilization) / len(utilization), 1) if utilization else 0.0
    advisory = average > settings.utilization_advisory_above

    recommendations = []
    if not adequate:
        recommendations.append(
            f"Assign more experienced staff: {experienced_staff_count} experienced staff "
            f"for {high_risk_count} high-risk cadet(s)"
        )
    if advisory:
        recommendations.append(
            f"Average staff utilization is {average:g}%; consider hiring or redistributing shifts"
        )

    return CoverageReport(
        high_risk_count=high_risk_count,
        experienced_staff_count=experienced_staff_count,
        staff_count=staff_count,
        individual_count=individual_count,
        staff_to_individual_ratio=ratio,
        coverage_adequate=adequate,
        average_utilization=average,
        utilization_advisory=advisory,
        recommendations=recommendations,
    )


def analyze_coverage(
    cadets: Iterable[Individual],
    staff: Iterable[StaffMember],
    workload: Iterable[WorkloadRecord] = (),
    schedule: Iterable[ScheduleEntry] = (),
    settings: Optional[AnalyticsSettings] = None,
) -> CoverageReport:
    """Count the snapshot's cadets and staff, then assess coverage and supervision gaps."""
    settings = settings or AnalyticsSettings()
    cadets = list(cadets)
    staff = list(staff)

    high_risk = sum(1 for c in cadets if c.behavior_score <= settings.high_risk_behavior_max)
    experienced = sum(1 for s in staff if s.experience_years >= settings.experienced_staff_years)

    report = coverage_from_counts(
        high_risk, experienced, len(staff), len(cadets), workload, settings
    )
    gaps = supervision_gaps(schedule)
    if not report.coverage_adequate:
        logger.info("Coverage gap: %d experienced staff for %d high-risk cadets", experienced, high_risk)
    return report.model_copy(update={"supervision_gaps": gaps})
