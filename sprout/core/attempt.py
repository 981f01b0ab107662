"""Attempt value object: one practice outcome and when it happened."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Outcome(str, Enum):
    """Result of a single attempt."""

    CORRECT = "correct"
    WRONG = "wrong"


@dataclass(frozen=True)
class Attempt:
    """A single recorded attempt. Timestamp is epoch milliseconds."""

    timestamp: int
    outcome: Outcome

    @classmethod
    def create(cls, correct: bool, timestamp: int) -> Attempt:
        return cls(timestamp=timestamp, outcome=Outcome.CORRECT if correct else Outcome.WRONG)

    @property
    def is_correct(self) -> bool:
        return self.outcome is Outcome.CORRECT

