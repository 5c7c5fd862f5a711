"""Background jobs."""

from .periodic import PeriodicJob

__all__ = ["PeriodicJob"]
