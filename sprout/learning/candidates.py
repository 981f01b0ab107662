"""
Candidate items and the sort value type used during session composition.

CandidateItem mirrors the content catalog record. PrioritizedItem is the
narrow view the categorizer and assembler sort on, so neither depends on
the richer catalog representation.
"""

from __future__ import annotations

from dataclasses import dataclass

from sprout.core.errors import DomainValidationError, InvalidIdentifierError
from sprout.core.tracker import ProgressTracker


@dataclass(frozen=True)
class CandidateItem:
    """A practice item offered by the content catalog. Read-only."""

    id: str
    subject: str
    complexity_level: int
    text: str = ""

    def __post_init__(self):
        if not self.id or not self.id.strip():
            raise InvalidIdentifierError("CandidateItem id cannot be empty")
        if not isinstance(self.complexity_level, int) or self.complexity_level < 1:
            raise DomainValidationError(
                f"complexity_level must be a positive integer, got {self.complexity_level!r}"
            )

    @property
    def display_text(self) -> str:
        return self.text or self.id


@dataclass(frozen=True)
class PrioritizedItem:
    """Sortable view of one candidate plus its tracker state."""

    id: str
    progress: int
    last_attempt_timestamp: int | None
    display_text: str

    @classmethod
    def from_candidate(
        cls, item: CandidateItem, tracker: ProgressTracker | None
    ) -> PrioritizedItem:
        if tracker is None:
            return cls(item.id, 0, None, item.display_text)
        return cls(item.id, tracker.progress, tracker.last_attempt_at, item.display_text)

    @property
    def sort_key(self) -> tuple[int, int, int, str, str]:
        """
        Ascending priority: lower progress, then least recently attempted
        (never-attempted first), then display text, then id.
        """
        if self.last_attempt_timestamp is None:
            recency = (0, 0)
        else:
            recency = (1, self.last_attempt_timestamp)
        return (self.progress, *recency, self.display_text, self.id)


def sort_by_priority(items: list[PrioritizedItem]) -> list[PrioritizedItem]:
    """Deterministic total order; the input list is not modified."""
    return sorted(items, key=lambda item: item.sort_key)
