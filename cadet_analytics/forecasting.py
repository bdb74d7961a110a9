"""Inventory depletion forecasts and restock recommendations."""

import logging
import math
from typing import Iterable, List, Optional, Sequence

import numpy as np

from cadet_analytics.config import AnalyticsSettings
from cadet_analytics.errors import BatchResult
from cadet_analytics.models import (
    FORECAST_COLORS,
    Forecast,
    ForecastBucket,
    ForecastResult,
    InsufficientData,
    InventoryItem,
)

logger = logging.getLogger(__name__)

BUCKET_ORDER = {
    ForecastBucket.IMMEDIATE: 0,
    ForecastBucket.SOON: 1,
    ForecastBucket.STABLE: 2,
}


def days_until_empty(quantity: float, usage_rate: Optional[float]) -> Optional[float]:
    """Days of stock left at the given daily rate; None when nothing is being used."""
    if not usage_rate or usage_rate <= 0:
        return None
    return quantity / usage_rate


def confidence_score(
    usage_history: Sequence[float] = (),
    injected: Optional[float] = None,
    full_history_days: int = 30,
) -> int:
    """
    How much history backs the usage rate, 0-100.

    An upstream confidence, when supplied, is only clamped. Otherwise the
    score grows with the number of observed days (full credit at
    full_history_days) and shrinks with their coefficient of variation.

    Args:
        usage_history: Recent daily usage values
        injected: Confidence computed by the upstream usage model, if any
        full_history_days: Days of history that earn full coverage credit

    Returns:
        Integer confidence in [0, 100]
    """
    if injected is not None:
        return int(round(float(np.clip(injected, 0.0, 100.0))))

    history = np.asarray(usage_history, dtype=float)
    if history.size == 0:
        return 0

    coverage = min(history.size / float(full_history_days), 1.0)
    mean = history.mean()
    if mean > 0:
        cv = history.std() / mean
        consistency = 1.0 / (1.0 + cv)
    else:
        # Nothing used on any observed day: perfectly consistent
        consistency = 1.0

    return int(round(float(np.clip(100.0 * coverage * consistency, 0.0, 100.0))))


def stock_level_percent(quantity: float, threshold: float) -> float:
    """Stock against a full level of twice the threshold, capped at 100."""
    if threshold <= 0:
        return 100.0 if quantity > 0 else 0.0
    return round(min(quantity / (threshold * 2) * 100.0, 100.0), 1)


def projected_quantity(
    quantity: float,
    usage_rate: Optional[float],
    days: int = 30,
) -> Optional[float]:
    """Stock left after `days` more days of use, floored at 0."""
    if usage_rate is None:
        return None
    return round(max(0.0, quantity - usage_rate * days), 1)


def forecast_bucket(
    quantity: float,
    threshold: float,
    days_left: Optional[float],
    soon_days: int = 14,
) -> ForecastBucket:
    if quantity <= threshold:
        return ForecastBucket.IMMEDIATE
    if days_left is not None and days_left <= soon_days:
        return ForecastBucket.SOON
    return ForecastBucket.STABLE


def build_recommendations(
    bucket: ForecastBucket,
    quantity: float,
    threshold: float,
    days_left: Optional[float],
) -> List[str]:
    if bucket == ForecastBucket.IMMEDIATE:
        recommendations = ["Reorder now"]
        shortfall = math.ceil(threshold * 2 - quantity)
        if shortfall > 0:
            recommendations.append(f"Order at least {shortfall} units to restore stock above the threshold")
        return recommendations
    if bucket == ForecastBucket.SOON:
        within = max(1, int(days_left)) if days_left is not None else 1
        return [f"Schedule reorder within {within} days"]
    return []


def forecast_item(
    item: InventoryItem,
    settings: Optional[AnalyticsSettings] = None,
) -> Forecast:
    """
    Forecast depletion for one stock item.

    Items at or below their threshold are Immediate whatever their usage.
    Any other item without a usage rate yields InsufficientData rather than
    a guessed forecast.

    Args:
        item: Normalized inventory item; usage_rate is already trend-adjusted
        settings: Policy constants (defaults to AnalyticsSettings())

    Returns:
        ForecastResult or InsufficientData
    """
    settings = settings or AnalyticsSettings()
    below_threshold = item.quantity <= item.threshold

    if item.usage_rate is None and not below_threshold:
        logger.debug("No usage signal for inventory item %s", item.id)
        return InsufficientData(item_id=item.id, reason="no usage rate recorded")

    # The bucket is decided on the rounded, reported value
    days_left = days_until_empty(item.quantity, item.usage_rate)
    if days_left is not None:
        days_left = round(days_left, 1)
    bucket = forecast_bucket(item.quantity, item.threshold, days_left, settings.soon_days)

    return ForecastResult(
        item_id=item.id,
        days_until_empty=days_left,
        forecast_bucket=bucket,
        confidence_score=confidence_score(
            item.usage_history, item.confidence_score, settings.full_confidence_history_days
        ),
        stock_level_percent=stock_level_percent(item.quantity, item.threshold),
        projected_quantity=projected_quantity(item.quantity, item.usage_rate, settings.projection_days),
        color=FORECAST_COLORS[bucket],
        recommendations=build_recommendations(bucket, item.quantity, item.threshold, days_left),
    )


def forecast_inventory(
    items: Iterable[InventoryItem],
    settings: Optional[AnalyticsSettings] = None,
) -> BatchResult[Forecast]:
    """One Forecast per item, in input order."""
    settings = settings or AnalyticsSettings()
    return BatchResult[Forecast](results=[forecast_item(item, settings) for item in items])


def restock_plan(forecasts: Iterable[Forecast]) -> List[ForecastResult]:
    """Immediate then Soon forecasts, soonest to run out first within each bucket."""
    actionable = [
        f for f in forecasts
        if isinstance(f, ForecastResult) and f.forecast_bucket != ForecastBucket.STABLE
    ]
    return sorted(
        actionable,
        key=lambda f: (
            BUCKET_ORDER[f.forecast_bucket],
            f.days_until_empty is None,
            f.days_until_empty or 0.0,
            f.item_id,
        ),
    )
