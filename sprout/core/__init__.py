"""
Core Module - per-item mastery state machine and shared value objects.

Components:
- mastery: threshold, cooldown length and ItemStatus (the mastery policy)
- attempt: Attempt value object
- tracker: ProgressTracker aggregate root and its snapshot shape
- events: MasteryTransition, PracticeSessionStarted
- guidance: parent and session guidance lines

Design Principle:
learning/ and study/ import mastery rules from here rather than
re-deriving them.
"""

from sprout.core.attempt import Attempt, Outcome
from sprout.core.errors import DomainValidationError, InvalidIdentifierError, SnapshotError
from sprout.core.events import MasteryTransition, PracticeSessionStarted, TransitionKind
from sprout.core.guidance import (
    GuidanceContext,
    ParentGuidance,
    SessionGuidance,
    Urgency,
    derive_parent_guidance,
)
from sprout.core.identifiers import ItemId, LearnerId
from sprout.core.mastery import (
    MASTERY_COOLDOWN_SESSIONS,
    MASTERY_THRESHOLD,
    MAX_PROGRESS,
    ItemStatus,
    is_mastered,
)
from sprout.core.tracker import ProgressTracker, TrackerSnapshot

__all__ = [
    # Mastery policy
    "MASTERY_THRESHOLD",
    "MASTERY_COOLDOWN_SESSIONS",
    "MAX_PROGRESS",
    "ItemStatus",
    "is_mastered",
    # Values
    "Attempt",
    "Outcome",
    "ItemId",
    "LearnerId",
    # Tracker
    "ProgressTracker",
    "TrackerSnapshot",
    # Events
    "MasteryTransition",
    "PracticeSessionStarted",
    "TransitionKind",
    # Guidance
    "GuidanceContext",
    "ParentGuidance",
    "SessionGuidance",
    "Urgency",
    "derive_parent_guidance",
    # Errors
    "DomainValidationError",
    "InvalidIdentifierError",
    "SnapshotError",
]
