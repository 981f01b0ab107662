"""
Core Mastery Policy.

Single source of truth for what "mastered" means. The tracker, the session
categorizer and the level progression policy all import from here rather
than re-deriving the threshold.

Design:
- MASTERY_THRESHOLD: progress at or above which an item is mastered
- MAX_PROGRESS: saturation ceiling for the progress counter
- MASTERY_COOLDOWN_SESSIONS: session boundaries a newly mastered item is withheld
- ItemStatus: the four states of the per-item state machine
"""

from __future__ import annotations

from enum import Enum

MASTERY_THRESHOLD = 2
MIN_PROGRESS = 0
MAX_PROGRESS = 5
MASTERY_COOLDOWN_SESSIONS = 3


def is_mastered(progress: int) -> bool:
    """Check if a progress value counts as mastered."""
    return progress >= MASTERY_THRESHOLD


def clamp_progress(progress: int) -> int:
    """Saturate a progress value into [MIN_PROGRESS, MAX_PROGRESS]."""
    return max(MIN_PROGRESS, min(MAX_PROGRESS, progress))


class ItemStatus(str, Enum):
    """
    State of one item for one learner.

    unlearned -> struggling -> mastered_cooldown -> mastered_available
    """

    UNLEARNED = "unlearned"  # progress 0
    STRUGGLING = "struggling"  # 0 < progress < threshold
    MASTERED_COOLDOWN = "mastered_cooldown"  # mastered, cooldown > 0
    MASTERED_AVAILABLE = "mastered_available"  # mastered, cooldown elapsed

    @classmethod
    def from_state(cls, progress: int, cooldown_sessions_left: int) -> ItemStatus:
        """
        Classify a (progress, cooldown) pair.

        Args:
            progress: Progress counter 0-5
            cooldown_sessions_left: Remaining cooldown sessions

        Returns:
            Corresponding ItemStatus
        """
        if is_mastered(progress):
            if cooldown_sessions_left > 0:
                return cls.MASTERED_COOLDOWN
            return cls.MASTERED_AVAILABLE
        if progress > MIN_PROGRESS:
            return cls.STRUGGLING
        return cls.UNLEARNED

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.value.replace("_", " ").title()

    @property
    def emoji(self) -> str:
        """Status glyph for CLI display."""
        return {
            ItemStatus.UNLEARNED: "○",
            ItemStatus.STRUGGLING: "◑",
            ItemStatus.MASTERED_COOLDOWN: "◕",
            ItemStatus.MASTERED_AVAILABLE: "●",
        }[self]

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            ItemStatus.UNLEARNED: "dim",
            ItemStatus.STRUGGLING: "yellow",
            ItemStatus.MASTERED_COOLDOWN: "cyan",
            ItemStatus.MASTERED_AVAILABLE: "green",
        }[self]
