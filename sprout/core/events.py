"""
Domain events emitted by the practice engine.

Events are plain data handed back to the caller; nothing inside the core
subscribes to them.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sprout.core.identifiers import ItemId, LearnerId


class TransitionKind(str, Enum):
    """Direction of a mastery flip."""

    MASTERY_ACHIEVED = "mastery-achieved"
    MASTERY_LOST = "mastery-lost"


@dataclass(frozen=True)
class MasteryTransition:
    """Emitted by ProgressTracker.record_attempt when mastered status flips."""

    kind: TransitionKind
    item_id: ItemId
    learner_id: LearnerId
    new_progress: int
    occurred_at: int  # attempt timestamp, epoch ms

    @classmethod
    def mastery_achieved(
        cls, item_id: ItemId, learner_id: LearnerId, progress: int, timestamp: int
    ) -> MasteryTransition:
        return cls(TransitionKind.MASTERY_ACHIEVED, item_id, learner_id, progress, timestamp)

    @classmethod
    def mastery_lost(
        cls, item_id: ItemId, learner_id: LearnerId, progress: int, timestamp: int
    ) -> MasteryTransition:
        return cls(TransitionKind.MASTERY_LOST, item_id, learner_id, progress, timestamp)

    @property
    def is_achieved(self) -> bool:
        return self.kind is TransitionKind.MASTERY_ACHIEVED

    def to_json(self) -> dict[str, Any]:
        return {
            "eventType": self.kind.value,
            "itemId": str(self.item_id),
            "learnerId": str(self.learner_id),
            "newProgress": self.new_progress,
            "occurredAt": self.occurred_at,
        }


@dataclass(frozen=True)
class PracticeSessionStarted:
    """Emitted when a non-empty practice session is composed for a learner."""

    learner_id: LearnerId
    subject: str
    complexity_level: int
    item_count: int
    session_type: str
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    event_type = "practice-session-started"

    def to_json(self) -> dict[str, Any]:
        return {
            "eventType": self.event_type,
            "sessionId": self.session_id,
            "occurredAt": self.occurred_at.isoformat(),
            "learnerId": str(self.learner_id),
            "subject": self.subject,
            "complexityLevel": self.complexity_level,
            "wordCount": self.item_count,
            "sessionType": self.session_type,
        }
