"""
Session Assembler for practice sessions.

Builds one bounded practice session from categorized buckets.

Selection order, each step bounded by remaining capacity:
1. Struggling items (they need help first)
2. New items
3. Revision-ready items, only when revision was requested

Items still in cooldown are never selected; that withholding is what spaces
revision out across sessions.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum

from loguru import logger

from sprout.core.events import PracticeSessionStarted
from sprout.core.identifiers import LearnerId
from sprout.core.tracker import ProgressTracker
from sprout.learning.candidates import CandidateItem, PrioritizedItem, sort_by_priority
from sprout.learning.categorizer import CategorizedPool, SessionCategorizer
from sprout.learning.progression import items_at_level, should_progress_level

DEFAULT_SESSION_SIZE = 12

# Planning estimates shown alongside a session.
MINUTES_PER_ITEM = 1.5
BREAK_AFTER_ITEMS = 10


class SessionType(str, Enum):
    """Composition of a session."""

    LEARNING = "learning"
    REVISION = "revision"
    MIXED = "mixed"


@dataclass(frozen=True)
class SessionRequirements:
    """What the caller wants from the next session."""

    subject: str
    complexity_level: int
    max_session_size: int = DEFAULT_SESSION_SIZE
    include_revision_words: bool = False
    learner_id: LearnerId | None = None
    exclude_item_ids: frozenset[str] = frozenset()


@dataclass
class SessionComposition:
    """Result of one assembly pass."""

    selected_ids: list[str]
    session_type: SessionType
    rationale: str
    total_available: int
    struggling_count: int = 0
    new_count: int = 0
    revision_count: int = 0
    events: list[PracticeSessionStarted] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.selected_ids

    @property
    def estimated_minutes(self) -> int:
        return math.ceil(len(self.selected_ids) * MINUTES_PER_ITEM)

    @property
    def recommended_break_after(self) -> int | None:
        return BREAK_AFTER_ITEMS if len(self.selected_ids) > BREAK_AFTER_ITEMS else None


class SessionAssembler:
    """
    Applies the fixed priority order and size cap to a CategorizedPool.

    Pure: the same pool and arguments always give the same ordered ids.
    """

    def assemble(
        self,
        pool: CategorizedPool,
        max_session_size: int,
        include_revision_words: bool = False,
    ) -> SessionComposition:
        """
        Select and order items for one session.

        Args:
            pool: Buckets from SessionCategorizer
            max_session_size: Upper bound on selected ids; <= 0 selects nothing
            include_revision_words: Whether revision-ready items may fill space

        Returns:
            SessionComposition with ids, type and rationale
        """
        capacity = max(0, max_session_size)

        struggling = self._take(pool.struggling, capacity)
        new = self._take(pool.new, capacity - len(struggling))
        revision: list[PrioritizedItem] = []
        if include_revision_words:
            revision = self._take(pool.revision, capacity - len(struggling) - len(new))

        selected = struggling + new + revision
        session_type = self.session_type_for(
            learning_count=len(struggling) + len(new), revision_count=len(revision)
        )
        rationale = self._rationale(
            pool,
            struggling_count=len(struggling),
            new_count=len(new),
            revision_count=len(revision),
            max_session_size=max_session_size,
            include_revision_words=include_revision_words,
        )

        logger.debug(
            f"Assembled {session_type.value} session for {pool.subject} "
            f"level {pool.complexity_level}: {len(selected)}/{pool.total_available} items"
        )

        return SessionComposition(
            selected_ids=[item.id for item in selected],
            session_type=session_type,
            rationale=rationale,
            total_available=pool.total_available,
            struggling_count=len(struggling),
            new_count=len(new),
            revision_count=len(revision),
        )

    @staticmethod
    def session_type_for(learning_count: int, revision_count: int) -> SessionType:
        """learning without revision items, revision when only revision, else mixed."""
        if revision_count == 0:
            return SessionType.LEARNING
        if learning_count == 0:
            return SessionType.REVISION
        return SessionType.MIXED

    @staticmethod
    def _take(bucket: list[PrioritizedItem], remaining: int) -> list[PrioritizedItem]:
        if remaining <= 0:
            return []
        return sort_by_priority(bucket)[:remaining]

    @staticmethod
    def _rationale(
        pool: CategorizedPool,
        struggling_count: int,
        new_count: int,
        revision_count: int,
        max_session_size: int,
        include_revision_words: bool,
    ) -> str:
        subject = pool.subject
        level = pool.complexity_level

        if pool.is_empty:
            return f"No words available for {subject} at complexity level {level}"

        total = struggling_count + new_count + revision_count
        if total == 0:
            if max_session_size <= 0:
                return (
                    f"Selected 0 words for {subject} (Level {level}): "
                    f"session size {max_session_size} leaves no room"
                )
            if pool.revision and not include_revision_words:
                return (
                    "No words available - all words at this level are mastered; "
                    f"{len(pool.revision)} ready for revision"
                )
            return "No words available - all words at this level are mastered and in cooldown"

        parts = []
        if struggling_count > 0:
            parts.append(f"{struggling_count} struggling words (need help)")
        if new_count > 0:
            parts.append(f"{new_count} new words")
        if revision_count > 0:
            parts.append(f"{revision_count} revision words")

        return f"Selected {total} words for {subject} (Level {level}): " + ", ".join(parts)


class PracticeSessionService:
    """
    Facade: categorize a catalog pool and assemble the next session.

    The caller supplies a consistent snapshot of trackers; nothing here
    mutates them.
    """

    def __init__(
        self,
        categorizer: SessionCategorizer | None = None,
        assembler: SessionAssembler | None = None,
    ):
        self.categorizer = categorizer or SessionCategorizer()
        self.assembler = assembler or SessionAssembler()

    def generate_session(
        self,
        candidates: Iterable[CandidateItem],
        trackers: Mapping[str, ProgressTracker],
        requirements: SessionRequirements,
    ) -> SessionComposition:
        pool = self.categorizer.categorize(
            candidates,
            trackers,
            subject=requirements.subject,
            complexity_level=requirements.complexity_level,
            exclude_item_ids=requirements.exclude_item_ids,
        )
        composition = self.assembler.assemble(
            pool,
            max_session_size=requirements.max_session_size,
            include_revision_words=requirements.include_revision_words,
        )

        if requirements.learner_id is not None and not composition.is_empty:
            composition.events.append(
                PracticeSessionStarted(
                    learner_id=requirements.learner_id,
                    subject=requirements.subject,
                    complexity_level=requirements.complexity_level,
                    item_count=len(composition.selected_ids),
                    session_type=composition.session_type.value,
                )
            )

        logger.info(composition.rationale)
        return composition

    @staticmethod
    def should_progress_to_next_level(
        candidates: Iterable[CandidateItem],
        trackers: Mapping[str, ProgressTracker],
        subject: str,
        complexity_level: int,
    ) -> bool:
        """True when every catalog item at this subject/level is mastered."""
        return should_progress_level(
            items_at_level(candidates, subject, complexity_level), trackers
        )
