"""
Session Categorizer.

Partitions the candidate pool for one subject at one complexity level into
four disjoint buckets:

- struggling: tracker exists, 0 < progress < threshold
- new: no tracker, or tracker with progress 0
- mastered: mastered and still in cooldown (never selected)
- revision: mastered with cooldown elapsed
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from loguru import logger

from sprout.core.mastery import ItemStatus
from sprout.core.tracker import ProgressTracker
from sprout.learning.candidates import CandidateItem, PrioritizedItem


@dataclass
class CategorizedPool:
    """Four buckets for one subject/level, plus the filtered pool size."""

    subject: str
    complexity_level: int
    struggling: list[PrioritizedItem] = field(default_factory=list)
    new: list[PrioritizedItem] = field(default_factory=list)
    mastered: list[PrioritizedItem] = field(default_factory=list)
    revision: list[PrioritizedItem] = field(default_factory=list)

    @property
    def total_available(self) -> int:
        return len(self.struggling) + len(self.new) + len(self.mastered) + len(self.revision)

    @property
    def is_empty(self) -> bool:
        return self.total_available == 0

    def counts(self) -> dict[str, int]:
        return {
            "struggling": len(self.struggling),
            "new": len(self.new),
            "mastered": len(self.mastered),
            "revision": len(self.revision),
        }


class SessionCategorizer:
    """Filters candidates to one subject/level and buckets them by tracker state."""

    def categorize(
        self,
        candidates: Iterable[CandidateItem],
        trackers: Mapping[str, ProgressTracker],
        subject: str,
        complexity_level: int,
        exclude_item_ids: Iterable[str] = (),
    ) -> CategorizedPool:
        """
        Build the four buckets.

        Args:
            candidates: Catalog items, any subject/level
            trackers: item id -> tracker; a missing entry means "new"
            subject: Subject to keep
            complexity_level: Level to keep
            exclude_item_ids: Items to leave out entirely

        Returns:
            CategorizedPool (all buckets empty when nothing matches)
        """
        excluded = set(exclude_item_ids)
        pool = CategorizedPool(subject=subject, complexity_level=complexity_level)

        for item in candidates:
            if item.subject != subject or item.complexity_level != complexity_level:
                continue
            if item.id in excluded:
                continue

            tracker = trackers.get(item.id)
            entry = PrioritizedItem.from_candidate(item, tracker)
            self._bucket_for(pool, tracker).append(entry)

        logger.debug(f"Categorized {subject} level {complexity_level}: {pool.counts()}")
        return pool

    @staticmethod
    def _bucket_for(pool: CategorizedPool, tracker: ProgressTracker | None) -> list[PrioritizedItem]:
        if tracker is None:
            return pool.new
        status = tracker.status
        if status is ItemStatus.MASTERED_COOLDOWN:
            return pool.mastered
        if status is ItemStatus.MASTERED_AVAILABLE:
            return pool.revision
        if status is ItemStatus.STRUGGLING:
            return pool.struggling
        return pool.new
