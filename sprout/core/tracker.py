"""
Progress Tracker: the per-item, per-learner mastery state machine.

The tracker owns one item's full learning history for one learner and is the
only place the progress counter, cooldown and mastery timestamp change.

State machine:
    unlearned (progress 0) -> struggling (0 < p < 2)
        -> mastered_cooldown (p >= 2, cooldown > 0)
        -> mastered_available (p >= 2, cooldown == 0)

Edges:
- correct: progress + 1, capped at MAX_PROGRESS
- wrong: progress - 1, floored at MIN_PROGRESS
- cooldown tick (once per session boundary): cooldown - 1 while > 0

Crossing the threshold upward sets cooldown to MASTERY_COOLDOWN_SESSIONS and
stamps mastery_achieved_at; crossing it downward clears both in the same call.
"""

from __future__ import annotations

import copy
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from loguru import logger
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from sprout.core.attempt import Attempt, Outcome
from sprout.core.errors import DomainValidationError, SnapshotError
from sprout.core.events import MasteryTransition
from sprout.core.identifiers import ItemId, LearnerId
from sprout.core.mastery import (
    MASTERY_COOLDOWN_SESSIONS,
    MAX_PROGRESS,
    MIN_PROGRESS,
    ItemStatus,
    clamp_progress,
    is_mastered,
)

if TYPE_CHECKING:
    from sprout.core.guidance import ParentGuidance


def timestamp_to_datetime(timestamp_ms: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime without float rounding."""
    seconds, millis = divmod(timestamp_ms, 1000)
    return datetime.fromtimestamp(seconds, UTC) + timedelta(milliseconds=millis)


class AttemptSnapshot(BaseModel):
    """Persisted shape of one attempt. Older exports stored the outcome as ``result``."""

    model_config = ConfigDict(extra="ignore")

    timestamp: int
    outcome: Outcome = Field(validation_alias=AliasChoices("outcome", "result"))


class TrackerSnapshot(BaseModel):
    """
    Persistence shape for a ProgressTracker.

    Field names are camelCase on the wire so snapshots stay compatible with the
    state container that owns them.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    item_id: str = Field(alias="itemId", min_length=1)
    learner_id: str = Field(alias="learnerId", min_length=1)
    progress: int = Field(ge=MIN_PROGRESS, le=MAX_PROGRESS)
    attempts: list[AttemptSnapshot] = Field(default_factory=list)
    cooldown_sessions_left: int = Field(alias="cooldownSessionsLeft", ge=0, default=0)
    mastery_achieved_at: datetime | None = Field(alias="masteryAchievedAt", default=None)
    reveal_count: int = Field(alias="revealCount", ge=0, default=0)


class ProgressTracker:
    """
    Aggregate root for one (item, learner) pair.

    Mutated only through record_attempt, record_reveal and decrement_cooldown.
    Each tracker has a single owner; use copy() before handing state to a
    second mutator.
    """

    def __init__(
        self,
        item_id: ItemId,
        learner_id: LearnerId,
        progress: int = 0,
        attempts: list[Attempt] | None = None,
        cooldown_sessions_left: int = 0,
        mastery_achieved_at: datetime | None = None,
        reveal_count: int = 0,
    ):
        if not MIN_PROGRESS <= progress <= MAX_PROGRESS:
            raise DomainValidationError(
                f"progress must be within [{MIN_PROGRESS}, {MAX_PROGRESS}], got {progress}"
            )
        if cooldown_sessions_left < 0:
            raise DomainValidationError("cooldown_sessions_left cannot be negative")
        if reveal_count < 0:
            raise DomainValidationError("reveal_count cannot be negative")

        self._item_id = item_id
        self._learner_id = learner_id
        self._progress = progress
        self._attempts: list[Attempt] = list(attempts or [])
        self._cooldown_sessions_left = cooldown_sessions_left
        self._mastery_achieved_at = mastery_achieved_at
        self._reveal_count = reveal_count

    @classmethod
    def create_new(cls, item_id: ItemId | str, learner_id: LearnerId | str) -> ProgressTracker:
        """Create an empty tracker on first contact with an item."""
        return cls(_as_item_id(item_id), _as_learner_id(learner_id))

    # =========================================================================
    # Commands
    # =========================================================================

    def record_attempt(self, correct: bool, timestamp: int) -> MasteryTransition | None:
        """
        Record an attempt and apply the saturating progress rule.

        Timestamps are taken as given; ordering is not validated so that
        histories can be replayed.

        Args:
            correct: Whether the learner answered correctly
            timestamp: Attempt time in epoch milliseconds

        Returns:
            MasteryTransition if mastered status flipped in this call, else None
        """
        self._attempts.append(Attempt.create(correct, timestamp))

        was_mastered = self.is_mastered
        delta = 1 if correct else -1
        self._progress = clamp_progress(self._progress + delta)
        now_mastered = self.is_mastered

        if not was_mastered and now_mastered:
            self._mastery_achieved_at = timestamp_to_datetime(timestamp)
            self._cooldown_sessions_left = MASTERY_COOLDOWN_SESSIONS
            logger.debug(
                f"Mastery achieved: item={self._item_id} learner={self._learner_id} "
                f"progress={self._progress}"
            )
            return MasteryTransition.mastery_achieved(
                self._item_id, self._learner_id, self._progress, timestamp
            )

        if was_mastered and not now_mastered:
            self._mastery_achieved_at = None
            self._cooldown_sessions_left = 0
            logger.debug(
                f"Mastery lost: item={self._item_id} learner={self._learner_id} "
                f"progress={self._progress}"
            )
            return MasteryTransition.mastery_lost(
                self._item_id, self._learner_id, self._progress, timestamp
            )

        return None

    def record_reveal(self) -> None:
        """Count an answer reveal. Does not touch progress."""
        self._reveal_count += 1

    def decrement_cooldown(self) -> None:
        """Consume one session boundary of cooldown. No-op at zero."""
        if self._cooldown_sessions_left > 0:
            self._cooldown_sessions_left -= 1

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def item_id(self) -> ItemId:
        return self._item_id

    @property
    def learner_id(self) -> LearnerId:
        return self._learner_id

    @property
    def progress(self) -> int:
        return self._progress

    @property
    def attempts(self) -> tuple[Attempt, ...]:
        return tuple(self._attempts)

    @property
    def attempt_count(self) -> int:
        return len(self._attempts)

    @property
    def correct_count(self) -> int:
        return sum(1 for a in self._attempts if a.is_correct)

    @property
    def accuracy(self) -> float:
        """Fraction of correct attempts (0 when never attempted)."""
        if not self._attempts:
            return 0.0
        return self.correct_count / len(self._attempts)

    @property
    def last_attempt(self) -> Attempt | None:
        return self._attempts[-1] if self._attempts else None

    @property
    def last_attempt_at(self) -> int | None:
        """Timestamp (ms) of the most recently recorded attempt."""
        last = self.last_attempt
        return last.timestamp if last else None

    @property
    def cooldown_sessions_left(self) -> int:
        return self._cooldown_sessions_left

    @property
    def mastery_achieved_at(self) -> datetime | None:
        return self._mastery_achieved_at

    @property
    def reveal_count(self) -> int:
        return self._reveal_count

    @property
    def is_mastered(self) -> bool:
        return is_mastered(self._progress)

    @property
    def is_in_cooldown(self) -> bool:
        return self.is_mastered and self._cooldown_sessions_left > 0

    @property
    def is_turnaround(self) -> bool:
        """Mastered now, and answered wrong at least once anywhere in history."""
        if not self.is_mastered:
            return False
        return any(not a.is_correct for a in self._attempts)

    @property
    def status(self) -> ItemStatus:
        return ItemStatus.from_state(self._progress, self._cooldown_sessions_left)

    def parent_guidance(self) -> ParentGuidance:
        """Coaching message for the current state. See sprout.core.guidance."""
        from sprout.core.guidance import derive_parent_guidance

        return derive_parent_guidance(self)

    def copy(self) -> ProgressTracker:
        """Independent copy for a second owner."""
        return copy.deepcopy(self)

    # =========================================================================
    # Persistence round-trip
    # =========================================================================

    def to_snapshot(self) -> dict[str, Any]:
        """Serialize to the JSON-compatible snapshot shape."""
        snapshot = TrackerSnapshot(
            item_id=str(self._item_id),
            learner_id=str(self._learner_id),
            progress=self._progress,
            attempts=[
                AttemptSnapshot(timestamp=a.timestamp, outcome=a.outcome) for a in self._attempts
            ],
            cooldown_sessions_left=self._cooldown_sessions_left,
            mastery_achieved_at=self._mastery_achieved_at,
            reveal_count=self._reveal_count,
        )
        return snapshot.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_snapshot(cls, data: dict[str, Any] | TrackerSnapshot) -> ProgressTracker:
        """
        Rehydrate from a snapshot produced by to_snapshot.

        Raises:
            SnapshotError: If the snapshot is malformed or out of range
            InvalidIdentifierError: If an identifier is blank
        """
        if isinstance(data, TrackerSnapshot):
            snapshot = data
        else:
            try:
                snapshot = TrackerSnapshot.model_validate(data)
            except ValidationError as e:
                raise SnapshotError(f"Invalid tracker snapshot: {e}") from e

        return cls(
            item_id=ItemId.from_string(snapshot.item_id),
            learner_id=LearnerId.from_string(snapshot.learner_id),
            progress=snapshot.progress,
            attempts=[Attempt(a.timestamp, a.outcome) for a in snapshot.attempts],
            cooldown_sessions_left=snapshot.cooldown_sessions_left,
            mastery_achieved_at=snapshot.mastery_achieved_at,
            reveal_count=snapshot.reveal_count,
        )

    def __repr__(self) -> str:
        return (
            f"ProgressTracker(item={self._item_id}, learner={self._learner_id}, "
            f"progress={self._progress}, cooldown={self._cooldown_sessions_left}, "
            f"attempts={len(self._attempts)})"
        )


def _as_item_id(value: ItemId | str) -> ItemId:
    return value if isinstance(value, ItemId) else ItemId.from_string(value)


def _as_learner_id(value: LearnerId | str) -> LearnerId:
    return value if isinstance(value, LearnerId) else LearnerId.from_string(value)
