"""
Unit tests for session composition.

Covers categorization, the priority fill under the size cap, session type,
the rationale text and the PracticeSessionService facade.
"""

import pytest

from sprout.core.identifiers import LearnerId
from sprout.learning import (
    CandidateItem,
    PracticeSessionService,
    PrioritizedItem,
    SessionAssembler,
    SessionCategorizer,
    SessionRequirements,
    SessionType,
    sort_by_priority,
)

BASE_TIMESTAMP = 1_700_000_000_000


def _mastered(make_tracker, item_id, cooldown_ticks=0):
    tracker = make_tracker(item_id, outcomes=[True, True])
    for _ in range(cooldown_ticks):
        tracker.decrement_cooldown()
    return tracker


@pytest.fixture
def mixed_pool(make_items, make_tracker):
    """14 items: 9 mastered in cooldown, 3 struggling, 2 untouched."""
    items = make_items(14)
    trackers = {}
    for item in items[:9]:
        trackers[item.id] = _mastered(make_tracker, item.id)
    for item in items[9:12]:
        trackers[item.id] = make_tracker(item.id, outcomes=[True])
    return items, trackers


class TestPriorityOrder:
    def test_lower_progress_first(self):
        items = [
            PrioritizedItem("b", 1, BASE_TIMESTAMP, "b"),
            PrioritizedItem("a", 0, BASE_TIMESTAMP, "a"),
        ]

        assert [i.id for i in sort_by_priority(items)] == ["a", "b"]

    def test_never_attempted_sorts_as_oldest(self):
        items = [
            PrioritizedItem("recent", 0, BASE_TIMESTAMP + 10, "x"),
            PrioritizedItem("old", 0, BASE_TIMESTAMP, "y"),
            PrioritizedItem("never", 0, None, "z"),
        ]

        assert [i.id for i in sort_by_priority(items)] == ["never", "old", "recent"]

    def test_display_text_breaks_ties(self):
        items = [
            PrioritizedItem("1", 0, None, "mane"),
            PrioritizedItem("2", 0, None, "amma"),
            PrioritizedItem("3", 0, None, "appa"),
        ]

        assert [i.display_text for i in sort_by_priority(items)] == ["amma", "appa", "mane"]

    def test_input_is_not_reordered(self):
        items = [PrioritizedItem("b", 1, None, "b"), PrioritizedItem("a", 0, None, "a")]

        sort_by_priority(items)

        assert [i.id for i in items] == ["b", "a"]


class TestCategorizer:
    def test_buckets(self, make_items, make_tracker):
        items = make_items(5)
        trackers = {
            "kn-001": make_tracker("kn-001", outcomes=[True]),
            "kn-002": _mastered(make_tracker, "kn-002"),
            "kn-003": _mastered(make_tracker, "kn-003", cooldown_ticks=3),
            "kn-004": make_tracker("kn-004", outcomes=[False]),
        }

        pool = SessionCategorizer().categorize(items, trackers, "kannada", 1)

        assert [i.id for i in pool.struggling] == ["kn-001"]
        assert [i.id for i in pool.mastered] == ["kn-002"]
        assert [i.id for i in pool.revision] == ["kn-003"]
        assert sorted(i.id for i in pool.new) == ["kn-004", "kn-005"]
        assert pool.total_available == 5

    def test_filters_subject_and_level(self, make_items):
        items = make_items(2) + make_items(2, level=2, prefix="kx") + make_items(
            2, subject="hindi", prefix="hi"
        )

        pool = SessionCategorizer().categorize(items, {}, "kannada", 1)

        assert pool.total_available == 2
        assert pool.counts() == {"struggling": 0, "new": 2, "mastered": 0, "revision": 0}

    def test_excluded_items_are_dropped(self, make_items):
        pool = SessionCategorizer().categorize(
            make_items(3), {}, "kannada", 1, exclude_item_ids={"kn-002"}
        )

        assert sorted(i.id for i in pool.new) == ["kn-001", "kn-003"]


class TestAssembler:
    def test_mixed_pool_selects_struggling_then_new(self, mixed_pool):
        items, trackers = mixed_pool
        pool = SessionCategorizer().categorize(items, trackers, "kannada", 1)

        composition = SessionAssembler().assemble(pool, max_session_size=12)

        assert composition.selected_ids == ["kn-010", "kn-011", "kn-012", "kn-013", "kn-014"]
        assert composition.session_type is SessionType.LEARNING
        assert composition.struggling_count == 3
        assert composition.new_count == 2
        assert not set(composition.selected_ids) & {item.id for item in items[:9]}

    def test_rationale_lists_counts(self, mixed_pool):
        items, trackers = mixed_pool
        pool = SessionCategorizer().categorize(items, trackers, "kannada", 1)

        composition = SessionAssembler().assemble(pool, max_session_size=12)

        assert composition.rationale == (
            "Selected 5 words for kannada (Level 1): 3 struggling words (need help), 2 new words"
        )

    def test_size_cap_is_respected(self, make_items, make_tracker):
        items = make_items(20)
        trackers = {item.id: make_tracker(item.id, outcomes=[True]) for item in items[:4]}
        pool = SessionCategorizer().categorize(items, trackers, "kannada", 1)

        composition = SessionAssembler().assemble(pool, max_session_size=6)

        assert len(composition.selected_ids) == 6
        assert composition.selected_ids[:4] == ["kn-001", "kn-002", "kn-003", "kn-004"]

    def test_non_positive_size_selects_nothing(self, make_items):
        pool = SessionCategorizer().categorize(make_items(3), {}, "kannada", 1)

        composition = SessionAssembler().assemble(pool, max_session_size=0)

        assert composition.selected_ids == []
        assert "leaves no room" in composition.rationale

    def test_cooldown_items_never_selected_even_with_revision(self, make_items, make_tracker):
        items = make_items(3)
        trackers = {item.id: _mastered(make_tracker, item.id) for item in items}
        pool = SessionCategorizer().categorize(items, trackers, "kannada", 1)

        composition = SessionAssembler().assemble(
            pool, max_session_size=12, include_revision_words=True
        )

        assert composition.selected_ids == []
        assert composition.rationale == (
            "No words available - all words at this level are mastered and in cooldown"
        )

    def test_revision_only_when_requested(self, make_items, make_tracker):
        items = make_items(2)
        trackers = {item.id: _mastered(make_tracker, item.id, cooldown_ticks=3) for item in items}
        pool = SessionCategorizer().categorize(items, trackers, "kannada", 1)

        without = SessionAssembler().assemble(pool, max_session_size=12)
        with_revision = SessionAssembler().assemble(
            pool, max_session_size=12, include_revision_words=True
        )

        assert without.selected_ids == []
        assert "2 ready for revision" in without.rationale
        assert with_revision.selected_ids == ["kn-001", "kn-002"]
        assert with_revision.session_type is SessionType.REVISION

    def test_mixed_session_type(self, make_items, make_tracker):
        items = make_items(3)
        trackers = {"kn-001": _mastered(make_tracker, "kn-001", cooldown_ticks=3)}
        pool = SessionCategorizer().categorize(items, trackers, "kannada", 1)

        composition = SessionAssembler().assemble(
            pool, max_session_size=12, include_revision_words=True
        )

        assert composition.selected_ids == ["kn-002", "kn-003", "kn-001"]
        assert composition.session_type is SessionType.MIXED
        assert composition.rationale.endswith("2 new words, 1 revision words")

    def test_repeated_calls_are_identical(self, mixed_pool):
        items, trackers = mixed_pool
        categorizer, assembler = SessionCategorizer(), SessionAssembler()

        results = [
            assembler.assemble(
                categorizer.categorize(items, trackers, "kannada", 1), max_session_size=4
            ).selected_ids
            for _ in range(5)
        ]

        assert all(r == results[0] for r in results)

    @pytest.mark.parametrize(
        "learning, revision, expected",
        [
            (3, 0, SessionType.LEARNING),
            (0, 0, SessionType.LEARNING),
            (0, 2, SessionType.REVISION),
            (1, 1, SessionType.MIXED),
        ],
    )
    def test_session_type_for(self, learning, revision, expected):
        assert SessionAssembler.session_type_for(learning, revision) is expected

    def test_planning_estimates(self, make_items):
        pool = SessionCategorizer().categorize(make_items(11), {}, "kannada", 1)

        composition = SessionAssembler().assemble(pool, max_session_size=12)

        assert composition.estimated_minutes == 17
        assert composition.recommended_break_after == 10


class TestPracticeSessionService:
    def test_empty_pool(self, make_items):
        requirements = SessionRequirements(subject="hindi", complexity_level=1)

        composition = PracticeSessionService().generate_session(make_items(3), {}, requirements)

        assert composition.is_empty
        assert composition.total_available == 0
        assert composition.session_type is SessionType.LEARNING
        assert composition.rationale == "No words available for hindi at complexity level 1"
        assert composition.events == []

    def test_event_emitted_for_learner(self, make_items):
        requirements = SessionRequirements(
            subject="kannada", complexity_level=1, learner_id=LearnerId("asha")
        )

        composition = PracticeSessionService().generate_session(make_items(3), {}, requirements)

        assert len(composition.events) == 1
        event = composition.events[0]
        assert event.item_count == 3
        assert event.session_type == "learning"
        assert event.to_json()["eventType"] == "practice-session-started"
        assert event.to_json()["learnerId"] == "asha"

    def test_no_event_without_learner(self, make_items):
        requirements = SessionRequirements(subject="kannada", complexity_level=1)

        composition = PracticeSessionService().generate_session(make_items(3), {}, requirements)

        assert composition.events == []

    def test_exclude_item_ids(self, make_items):
        requirements = SessionRequirements(
            subject="kannada", complexity_level=1, exclude_item_ids=frozenset({"kn-001"})
        )

        composition = PracticeSessionService().generate_session(make_items(3), {}, requirements)

        assert composition.selected_ids == ["kn-002", "kn-003"]

    def test_trackers_are_not_mutated(self, mixed_pool):
        items, trackers = mixed_pool
        before = {item_id: t.to_snapshot() for item_id, t in trackers.items()}

        PracticeSessionService().generate_session(
            items, trackers, SessionRequirements(subject="kannada", complexity_level=1)
        )

        assert {item_id: t.to_snapshot() for item_id, t in trackers.items()} == before

    def test_should_progress_to_next_level(self, make_items, make_tracker):
        items = make_items(2) + make_items(1, level=2, prefix="kx")
        trackers = {item.id: _mastered(make_tracker, item.id) for item in items[:2]}

        assert PracticeSessionService.should_progress_to_next_level(items, trackers, "kannada", 1)
        assert not PracticeSessionService.should_progress_to_next_level(
            items, trackers, "kannada", 2
        )


class TestCandidateItem:
    def test_blank_id_rejected(self):
        from sprout.core.errors import InvalidIdentifierError

        with pytest.raises(InvalidIdentifierError):
            CandidateItem(id="", subject="kannada", complexity_level=1)

    def test_display_text_falls_back_to_id(self):
        assert CandidateItem(id="kn-9", subject="kannada", complexity_level=1).display_text == "kn-9"
