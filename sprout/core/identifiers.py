"""
Identifier value objects.

Wrapping raw strings keeps an item id from being passed where a learner id
is expected. Both reject empty or whitespace-only values.
"""

from __future__ import annotations

from dataclasses import dataclass

from sprout.core.errors import InvalidIdentifierError


@dataclass(frozen=True)
class _Identifier:
    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise InvalidIdentifierError(f"{type(self).__name__} cannot be empty")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ItemId(_Identifier):
    """Identifier of a practice item (word, letter, fact)."""

    @classmethod
    def from_string(cls, value: str) -> ItemId:
        return cls(value)


@dataclass(frozen=True)
class LearnerId(_Identifier):
    """Identifier of a learner profile."""

    @classmethod
    def from_string(cls, value: str) -> LearnerId:
        return cls(value)
