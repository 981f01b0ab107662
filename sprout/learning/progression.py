"""
Level Progression Policy.

A subject/level is complete when it has at least one item and every item is
mastered. Moving the stored level counter is the caller's job; advance_level
only computes the capped next value.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from sprout.core.mastery import is_mastered
from sprout.core.tracker import ProgressTracker
from sprout.learning.candidates import CandidateItem

MIN_COMPLEXITY_LEVEL = 1
MAX_COMPLEXITY_LEVEL = 10


def items_at_level(
    candidates: Iterable[CandidateItem], subject: str, complexity_level: int
) -> list[CandidateItem]:
    return [
        item
        for item in candidates
        if item.subject == subject and item.complexity_level == complexity_level
    ]


def should_progress_level(
    items_at_current_level: Iterable[CandidateItem],
    trackers: Mapping[str, ProgressTracker],
) -> bool:
    """
    Check whether every item at the current level is mastered.

    Items without a tracker count as unmastered. An empty level never
    progresses.
    """
    items = list(items_at_current_level)
    if not items:
        return False
    return all(
        (tracker := trackers.get(item.id)) is not None and tracker.is_mastered
        for item in items
    )


def should_progress_level_by_progress(progress_values: Iterable[int]) -> bool:
    """Same rule over bare progress counters."""
    values = list(progress_values)
    return bool(values) and all(is_mastered(p) for p in values)


def advance_level(current_level: int) -> int:
    """Next complexity level, clamped to [MIN_COMPLEXITY_LEVEL, MAX_COMPLEXITY_LEVEL]."""
    return max(MIN_COMPLEXITY_LEVEL, min(current_level + 1, MAX_COMPLEXITY_LEVEL))
