"""Typed failures surfaced by the onboarding managers.

Callers catch by type: ValidationError and NotFoundError are final,
ConflictError needs the caller to resolve the clash, and PersistenceError
may be retried only for idempotent reads.
"""
from typing import Iterable, Optional


class OnboardingError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(OnboardingError):
    def __init__(self, message: str, fields: Optional[Iterable[str]] = None):
        super().__init__(message)
        self.fields = list(fields or [])


class NotFoundError(OnboardingError):
    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(OnboardingError):
    """Uniqueness violation reported by the store (e.g. duplicate merchant email)."""


class PersistenceError(OnboardingError):
    """The store failed to read or write."""
