"""Dashboard statistics."""

from learnhub.stats.calculator import completion_rate, js_round, monthly_growth
from learnhub.stats.service import PlatformStatsService

__all__ = ["PlatformStatsService", "completion_rate", "js_round", "monthly_growth"]
