"""
Expiry alerts derived from the contract collection.
"""

from .expiry import (
    DEFAULT_HORIZON_DAYS,
    AlertSummary,
    ExpiryAlert,
    alerts,
    days_remaining,
    summarize,
    upcoming,
)

__all__ = [
    "DEFAULT_HORIZON_DAYS",
    "AlertSummary",
    "ExpiryAlert",
    "alerts",
    "days_remaining",
    "summarize",
    "upcoming",
]
