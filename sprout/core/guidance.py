"""
Parent and session guidance.

Short canned coaching lines keyed by learning state. Both derivations are
pure functions of the data handed in: no timers, no hidden memory. Caching,
styling and localization belong to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from sprout.core.mastery import MASTERY_THRESHOLD

if TYPE_CHECKING:
    from sprout.core.tracker import ProgressTracker

# Accuracy below this after a wrong answer reads as "tricky", not a slip.
LOW_ACCURACY_RATE = 0.4

# Reveals before any attempt that mark an item as one to bring back later.
STRUGGLING_REVEAL_COUNT = 3


class Urgency(str, Enum):
    """Severity tag; the presentation layer maps it to styling."""

    SUCCESS = "success"
    WARNING = "warning"
    INFO = "info"


class GuidanceContext(str, Enum):
    """Which situation produced the guidance line."""

    INITIAL = "initial"
    FIRST_ATTEMPT_WRONG = "first-attempt-wrong"
    FIRST_SUCCESS = "first-success"
    CORRECT_PROGRESS = "correct-progress"
    MASTERED = "mastered"
    STRUGGLING = "struggling"
    NEEDS_PRACTICE = "needs-practice"
    RETRY_NEEDED = "retry-needed"


@dataclass(frozen=True)
class ParentGuidance:
    """Coaching line for the parent sitting next to the child."""

    message: str
    urgency: Urgency
    context: GuidanceContext


def derive_parent_guidance(tracker: ProgressTracker) -> ParentGuidance:
    """
    Classify a tracker's current state into a guidance line.

    The most recent attempt decides the branch; with no attempts the reveal
    count decides between "initial" and "struggling".

    Args:
        tracker: Tracker to classify

    Returns:
        ParentGuidance with message, urgency and context
    """
    total = tracker.attempt_count
    last = tracker.last_attempt
    progress = tracker.progress

    if last is not None and last.is_correct:
        if progress >= MASTERY_THRESHOLD:
            return ParentGuidance(
                "Great work — this one is mastered",
                Urgency.SUCCESS,
                GuidanceContext.MASTERED,
            )
        if total == 1:
            return ParentGuidance(
                "Nice start! One more time to lock it in",
                Urgency.SUCCESS,
                GuidanceContext.FIRST_SUCCESS,
            )
        if progress == 1:
            return ParentGuidance(
                "Two correct in a row! We'll mark it mastered soon",
                Urgency.SUCCESS,
                GuidanceContext.CORRECT_PROGRESS,
            )
        return ParentGuidance(
            "Good! One more correct will master this",
            Urgency.SUCCESS,
            GuidanceContext.CORRECT_PROGRESS,
        )

    if last is not None:
        if total == 1:
            return ParentGuidance(
                "Let's try this together — show them first",
                Urgency.INFO,
                GuidanceContext.FIRST_ATTEMPT_WRONG,
            )
        if tracker.accuracy < LOW_ACCURACY_RATE:
            return ParentGuidance(
                "This one's been tricky before — let's try again slowly",
                Urgency.WARNING,
                GuidanceContext.NEEDS_PRACTICE,
            )
        return ParentGuidance(
            "Not quite — give it another try",
            Urgency.INFO,
            GuidanceContext.RETRY_NEEDED,
        )

    if tracker.reveal_count >= STRUGGLING_REVEAL_COUNT:
        return ParentGuidance(
            "We'll bring this one back later for review",
            Urgency.INFO,
            GuidanceContext.STRUGGLING,
        )

    return ParentGuidance("Ready when you are", Urgency.INFO, GuidanceContext.INITIAL)


# =============================================================================
# Session-level guidance
# =============================================================================


class SessionGuidanceContext(str, Enum):
    SET_INTRODUCTION = "set-introduction"
    LEVEL_TRANSITION = "level-transition"
    COMPLETION = "completion"


@dataclass(frozen=True)
class SessionGuidanceResult:
    message: str
    urgency: Urgency
    context: SessionGuidanceContext


@dataclass(frozen=True)
class SessionGuidance:
    """
    Guidance for the practice set as a whole.

    Returns None when the data is inconsistent or when no set-level message
    applies, in which case the per-item parent guidance should be shown.
    """

    session_id: str
    current_question_index: int
    total_questions: int
    mastered_in_session: int
    all_questions_in_set_mastered: bool
    has_more_levels: bool
    subject: str
    is_first_question_ever: bool

    @classmethod
    def from_session_data(cls, **data) -> SessionGuidance:
        return cls(**data)

    def get_session_guidance(self) -> SessionGuidanceResult | None:
        if not self._is_valid():
            return None

        if self.current_question_index == 0 and self.is_first_question_ever:
            if self.total_questions == 1:
                text = "Master this question"
            else:
                text = f"cycle through {self.total_questions} questions until each is mastered"
            return SessionGuidanceResult(
                f"Practice Set: We'll {text}",
                Urgency.INFO,
                SessionGuidanceContext.SET_INTRODUCTION,
            )

        set_complete = (
            self.all_questions_in_set_mastered
            and self.mastered_in_session == self.total_questions
        )
        if set_complete and self.has_more_levels:
            return SessionGuidanceResult(
                "Great! All questions mastered. Ready for the next challenge?",
                Urgency.SUCCESS,
                SessionGuidanceContext.LEVEL_TRANSITION,
            )
        if set_complete:
            return SessionGuidanceResult(
                "Amazing! You've mastered everything. Check back for new questions!",
                Urgency.SUCCESS,
                SessionGuidanceContext.COMPLETION,
            )
        return None

    def _is_valid(self) -> bool:
        return (
            len(self.session_id) > 0
            and self.total_questions > 0
            and 0 <= self.current_question_index < self.total_questions
            and 0 <= self.mastered_in_session <= self.total_questions
            and len(self.subject) > 0
        )
