"""Fallback intervention plans for each risk level."""

from typing import Optional

from cadet_analytics.models import ApplicableRisk, InterventionPlan, RiskAssessment, RiskLevel


def intervention_plan(level: RiskLevel) -> InterventionPlan:
    """Build the intervention plan tailored to a cadet's risk level."""
    if level == RiskLevel.HIGH:
        return _high_risk_plan()
    if level == RiskLevel.MODERATE:
        return _moderate_risk_plan()
    return _low_risk_plan()


def plan_for(assessment: RiskAssessment) -> Optional[InterventionPlan]:
    """Plan for a scored cadet; None when the cadet was not scored."""
    if not isinstance(assessment, ApplicableRisk):
        return None
    return intervention_plan(assessment.risk_level)


def _high_risk_plan() -> InterventionPlan:
    return InterventionPlan(
        risk_level=RiskLevel.HIGH,
        immediate_actions=["Notify senior staff", "Increase supervision", "Schedule counseling"],
        short_term_strategies=["Behavior modification plan", "Peer mentor assignment", "Family contact"],
        timeframe="immediate",
    )


def _moderate_risk_plan() -> InterventionPlan:
    return InterventionPlan(
        risk_level=RiskLevel.MODERATE,
        immediate_actions=["Document incident", "Schedule mentorship session"],
        short_term_strategies=["Monitor closely", "Adjust schedule if needed"],
        timeframe="days",
    )


def _low_risk_plan() -> InterventionPlan:
    return InterventionPlan(
        risk_level=RiskLevel.LOW,
        immediate_actions=["Continue monitoring", "Positive reinforcement"],
        short_term_strategies=["Peer leadership opportunities"],
        timeframe="weeks",
    )
