"""Feature catalog and release schedule."""

from goat.catalog.features import FeatureCatalog
from goat.catalog.schedule import TimeLeft, current_day, next_release_time, time_left

__all__ = ["FeatureCatalog", "TimeLeft", "current_day", "next_release_time", "time_left"]
