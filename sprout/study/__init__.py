"""Study analytics: statistics derived from attempt history."""

from sprout.study.statistics import (
    LearningStatistics,
    StatisticsAggregator,
    SubjectStatistics,
    current_streak,
    longest_streak,
    practice_dates,
    todays_attempts,
)

__all__ = [
    "LearningStatistics",
    "StatisticsAggregator",
    "SubjectStatistics",
    "current_streak",
    "longest_streak",
    "practice_dates",
    "todays_attempts",
]
