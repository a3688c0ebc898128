"""Failure taxonomy for the ordering core.

Every core operation either returns its result or raises one of these.
The HTTP layer matches on ``kind`` to pick a status code.
"""
from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation_failure"
    NOT_FOUND = "not_found"
    INVALID_TRANSITION = "invalid_transition"
    ITEM_UNAVAILABLE = "item_unavailable"
    INSUFFICIENT_STOCK = "insufficient_stock"
    CONFLICT = "conflict"
    RESOURCE_UNAVAILABLE = "resource_unavailable"
    PERSISTENCE = "persistence_failure"


class CanteenError(Exception):
    kind = ErrorKind.PERSISTENCE
    retryable = False

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {"code": self.kind.value, "message": self.message, **self.details}


class ValidationFailure(CanteenError):
    """Malformed or missing input. Nothing was persisted."""
    kind = ErrorKind.VALIDATION


class NotFound(CanteenError):
    """Entity is absent or not owned by the requesting user."""
    kind = ErrorKind.NOT_FOUND


class InvalidTransition(CanteenError):
    """Order status does not allow the requested change."""
    kind = ErrorKind.INVALID_TRANSITION


class ItemUnavailable(CanteenError):
    kind = ErrorKind.ITEM_UNAVAILABLE

    def __init__(self, item_id):
        super().__init__(f"Item {item_id} not available", item_id=item_id)
        self.item_id = item_id


class InsufficientStock(CanteenError):
    kind = ErrorKind.INSUFFICIENT_STOCK

    def __init__(self, item_id, requested: int = None, available: int = None):
        super().__init__(
            f"Insufficient quantity for item {item_id}",
            item_id=item_id,
            requested=requested,
            available=available,
        )
        self.item_id = item_id


class ConflictFailure(CanteenError):
    """A concurrent transaction touched the same rows. Safe to retry."""
    kind = ErrorKind.CONFLICT
    retryable = True


class ResourceUnavailable(CanteenError):
    """No database connection could be checked out in time."""
    kind = ErrorKind.RESOURCE_UNAVAILABLE
    retryable = True


class PersistenceFailure(CanteenError):
    kind = ErrorKind.PERSISTENCE
