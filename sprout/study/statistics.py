"""
Statistics Aggregator for learner progress.

Derives summary numbers from full attempt history:
- attempted / mastered counts and mastery percentage
- average attempts to mastery
- turnarounds (mastered items answered wrong at least once)
- daily practice streaks (current and longest)
- the same figures per subject

Streak rules:
- a practice day is a calendar date with at least one attempt
- current streak: consecutive days ending today or yesterday, else 0
- longest streak: longest consecutive run anywhere in history
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, timedelta, tzinfo

from sprout.core.tracker import ProgressTracker

UNKNOWN_SUBJECT = "unknown"


@dataclass(frozen=True)
class SubjectStatistics:
    """Per-subject slice of LearningStatistics."""

    subject: str
    items_attempted: int
    items_mastered: int
    mastery_percentage: float
    average_accuracy: float  # 0-100 across all attempts
    turnaround_count: int
    current_streak: int
    longest_streak: int


@dataclass(frozen=True)
class LearningStatistics:
    """Learner-wide statistics."""

    total_attempted: int = 0
    total_mastered: int = 0
    mastery_percentage: float = 0.0
    average_attempts_to_mastery: float = 0.0
    subject_breakdown: list[SubjectStatistics] = field(default_factory=list)
    current_streak: int = 0
    longest_streak: int = 0
    turnaround_count: int = 0

    def for_subject(self, subject: str) -> LearningStatistics:
        """
        Rescope totals to one subject.

        Streaks and turnarounds stay learner-wide, matching how the practice
        screen shows them next to a single subject's progress.
        """
        breakdown = next((s for s in self.subject_breakdown if s.subject == subject), None)
        if breakdown is None:
            return replace(
                self,
                total_attempted=0,
                total_mastered=0,
                mastery_percentage=0.0,
                average_attempts_to_mastery=0.0,
                subject_breakdown=[],
            )
        return replace(
            self,
            total_attempted=breakdown.items_attempted,
            total_mastered=breakdown.items_mastered,
            mastery_percentage=breakdown.mastery_percentage,
            subject_breakdown=[breakdown],
        )


# =============================================================================
# Streak helpers
# =============================================================================


def attempt_date(timestamp_ms: int, tz: tzinfo = UTC) -> date:
    """Calendar date of an attempt timestamp in the given timezone."""
    return datetime.fromtimestamp(timestamp_ms / 1000, tz).date()


def practice_dates(trackers: Iterable[ProgressTracker], tz: tzinfo = UTC) -> set[date]:
    """Distinct calendar dates with at least one attempt."""
    return {attempt_date(a.timestamp, tz) for t in trackers for a in t.attempts}


def _runs(dates: Iterable[date]) -> list[tuple[date, int]]:
    """Consecutive-day runs as (last_date, length), oldest first."""
    runs: list[tuple[date, int]] = []
    for day in sorted(set(dates)):
        if runs and day - runs[-1][0] == timedelta(days=1):
            runs[-1] = (day, runs[-1][1] + 1)
        else:
            runs.append((day, 1))
    return runs


def current_streak(dates: Iterable[date], today: date) -> int:
    """Length of the run ending today or yesterday; 0 if the last practice is older."""
    runs = _runs(d for d in dates if d <= today)
    if not runs:
        return 0
    last_day, length = runs[-1]
    if today - last_day <= timedelta(days=1):
        return length
    return 0


def longest_streak(dates: Iterable[date]) -> int:
    runs = _runs(dates)
    return max((length for _, length in runs), default=0)


def todays_attempts(
    trackers: Iterable[ProgressTracker], today: date, tz: tzinfo = UTC
) -> int:
    """Number of attempts recorded on ``today``."""
    return sum(
        1 for t in trackers for a in t.attempts if attempt_date(a.timestamp, tz) == today
    )


# =============================================================================
# Aggregator
# =============================================================================


def _percentage(part: int, whole: int) -> float:
    return (part / whole) * 100 if whole > 0 else 0.0


class StatisticsAggregator:
    """
    Computes LearningStatistics over one learner's trackers.

    Only trackers with at least one attempt are counted.
    """

    def __init__(self, tz: tzinfo = UTC):
        """
        Initialize aggregator.

        Args:
            tz: Timezone used to bucket attempts into calendar dates
        """
        self.tz = tz

    def aggregate(
        self,
        trackers: Iterable[ProgressTracker],
        subjects: Mapping[str, str] | None = None,
        today: date | None = None,
    ) -> LearningStatistics:
        """
        Build statistics for one learner.

        Args:
            trackers: All of the learner's trackers
            subjects: item id -> subject, for the per-subject breakdown
            today: Reference date for the current streak (defaults to now in tz)

        Returns:
            LearningStatistics
        """
        subjects = subjects or {}
        today = today or datetime.now(self.tz).date()

        attempted = [t for t in trackers if t.attempt_count > 0]
        if not attempted:
            return LearningStatistics()

        mastered = [t for t in attempted if t.is_mastered]
        dates = practice_dates(attempted, self.tz)

        by_subject: dict[str, list[ProgressTracker]] = defaultdict(list)
        for tracker in attempted:
            by_subject[subjects.get(str(tracker.item_id), UNKNOWN_SUBJECT)].append(tracker)

        return LearningStatistics(
            total_attempted=len(attempted),
            total_mastered=len(mastered),
            mastery_percentage=_percentage(len(mastered), len(attempted)),
            average_attempts_to_mastery=self._average_attempts(mastered),
            subject_breakdown=[
                self._subject_statistics(name, group, today)
                for name, group in sorted(by_subject.items())
            ],
            current_streak=current_streak(dates, today),
            longest_streak=longest_streak(dates),
            turnaround_count=sum(1 for t in attempted if t.is_turnaround),
        )

    def _subject_statistics(
        self, subject: str, trackers: list[ProgressTracker], today: date
    ) -> SubjectStatistics:
        mastered = sum(1 for t in trackers if t.is_mastered)
        total_attempts = sum(t.attempt_count for t in trackers)
        correct_attempts = sum(t.correct_count for t in trackers)
        dates = practice_dates(trackers, self.tz)

        return SubjectStatistics(
            subject=subject,
            items_attempted=len(trackers),
            items_mastered=mastered,
            mastery_percentage=_percentage(mastered, len(trackers)),
            average_accuracy=_percentage(correct_attempts, total_attempts),
            turnaround_count=sum(1 for t in trackers if t.is_turnaround),
            current_streak=current_streak(dates, today),
            longest_streak=longest_streak(dates),
        )

    @staticmethod
    def _average_attempts(mastered: list[ProgressTracker]) -> float:
        if not mastered:
            return 0.0
        return sum(t.attempt_count for t in mastered) / len(mastered)
