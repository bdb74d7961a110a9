"""Cadet analytics: risk scores, insights, inventory forecasts and staffing metrics."""

__version__ = "1.0.0"
