"""User activity log."""

from .models import Activity
from .service import ActivityService

__all__ = ["Activity", "ActivityService"]
