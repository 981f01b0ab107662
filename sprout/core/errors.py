"""Exceptions raised at value-object construction boundaries."""

from __future__ import annotations


class DomainValidationError(ValueError):
    """Raised when a value object is constructed with invalid data."""


class InvalidIdentifierError(DomainValidationError):
    """Raised when an item or learner identifier is empty."""


class SnapshotError(DomainValidationError):
    """Raised when a persisted tracker snapshot cannot be rehydrated."""
