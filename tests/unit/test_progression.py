"""Unit tests for the level progression policy."""

import pytest

from sprout.learning.progression import (
    MAX_COMPLEXITY_LEVEL,
    advance_level,
    items_at_level,
    should_progress_level,
    should_progress_level_by_progress,
)


class TestShouldProgressLevel:
    def test_all_mastered_progresses(self, make_items, make_tracker):
        items = make_items(3)
        trackers = {item.id: make_tracker(item.id, outcomes=[True, True]) for item in items}

        assert should_progress_level(items, trackers) is True

    def test_one_unmastered_blocks(self, make_items, make_tracker):
        items = make_items(3)
        trackers = {item.id: make_tracker(item.id, outcomes=[True, True]) for item in items}
        trackers["kn-002"] = make_tracker("kn-002", outcomes=[True, True, False])

        assert should_progress_level(items, trackers) is False

    def test_missing_tracker_counts_as_unmastered(self, make_items, make_tracker):
        items = make_items(2)
        trackers = {"kn-001": make_tracker("kn-001", outcomes=[True, True])}

        assert should_progress_level(items, trackers) is False

    def test_empty_level_never_progresses(self):
        assert should_progress_level([], {}) is False

    def test_cooldown_does_not_matter(self, make_items, make_tracker):
        items = make_items(1)
        tracker = make_tracker("kn-001", outcomes=[True, True])
        for _ in range(3):
            tracker.decrement_cooldown()

        assert should_progress_level(items, {"kn-001": tracker}) is True


class TestProgressValues:
    @pytest.mark.parametrize(
        "values, expected",
        [
            ([2, 3, 5], True),
            ([2, 1], False),
            ([0], False),
            ([], False),
        ],
    )
    def test_by_progress(self, values, expected):
        assert should_progress_level_by_progress(values) is expected


class TestAdvanceLevel:
    def test_increments(self):
        assert advance_level(1) == 2

    def test_capped_at_max(self):
        assert advance_level(MAX_COMPLEXITY_LEVEL) == MAX_COMPLEXITY_LEVEL == 10

    def test_never_below_one(self):
        assert advance_level(-5) == 1


def test_items_at_level(make_items):
    items = make_items(2) + make_items(3, level=2, prefix="kx")

    assert [i.id for i in items_at_level(items, "kannada", 2)] == ["kx-001", "kx-002", "kx-003"]
    assert items_at_level(items, "hindi", 1) == []
