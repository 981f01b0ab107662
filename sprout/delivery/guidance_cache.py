"""Caller-owned bounded cache for parent guidance lines."""

from __future__ import annotations

from collections import OrderedDict
from threading import Lock

from sprout.core.guidance import ParentGuidance, derive_parent_guidance
from sprout.core.tracker import ProgressTracker

GuidanceKey = tuple[str, str, int, int, int, int, int | None, str | None]


class GuidanceCache:
    """
    LRU cache of ParentGuidance keyed by the tracker state the derivation reads.

    The key holds the counters (attempts, correct answers, reveals), the
    progress value and the last attempt's timestamp and outcome. A tracker
    rebuilt under the same ids with a different history therefore gets a
    different key. The tracker and the derivation know nothing about this cache.
    """

    def __init__(self, max_size: int = 256):
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self._cache: OrderedDict[GuidanceKey, ParentGuidance] = OrderedDict()
        self._max_size = max_size
        self._lock = Lock()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def key_for(tracker: ProgressTracker) -> GuidanceKey:
        last = tracker.last_attempt
        return (
            str(tracker.learner_id),
            str(tracker.item_id),
            tracker.attempt_count,
            tracker.correct_count,
            tracker.reveal_count,
            tracker.progress,
            last.timestamp if last else None,
            last.outcome.value if last else None,
        )

    def get_or_compute(self, tracker: ProgressTracker) -> ParentGuidance:
        key = self.key_for(tracker)
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                self._cache.move_to_end(key)
                self.hits += 1
                return cached

        guidance = derive_parent_guidance(tracker)
        with self._lock:
            self.misses += 1
            self._cache[key] = guidance
            self._cache.move_to_end(key)
            while len(self._cache) > self._max_size:
                self._cache.popitem(last=False)
        return guidance

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)
