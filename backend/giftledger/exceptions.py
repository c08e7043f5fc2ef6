# Overview: Typed error taxonomy raised by the inventory and request services.

"""
Every engine failure is one of these classes and is raised synchronously.
Nothing is retried inside the engine; the caller decides.

http_status is consumed by the blueprint error handler so routes do not
have to map each error by hand.
"""
from __future__ import annotations


class GiftLedgerError(Exception):
    """Base class for engine errors."""

    code = "error"
    http_status = 400

    def __init__(self, message: str | None = None):
        super().__init__(message or self.code)
        self.message = message or self.code

    def to_dict(self) -> dict:
        return {"success": False, "error": self.code, "message": self.message}


class InvalidAmount(GiftLedgerError):
    """Non-positive quantity supplied (or negative absolute quantity)."""

    code = "invalid_amount"


class InsufficientBalance(GiftLedgerError):
    """Debit exceeds the holder's current quantity."""

    code = "insufficient_balance"

    def __init__(self, holder_id: int, gift_id: int, on_hand: int, requested: int):
        super().__init__(
            f"Insufficient balance for holder {holder_id}, gift {gift_id}. "
            f"On-hand: {on_hand}, requested: {requested}"
        )
        self.holder_id = holder_id
        self.gift_id = gift_id
        self.on_hand = on_hand
        self.requested = requested


class UnknownTarget(GiftLedgerError):
    """Transfer target is missing, inactive, or the same as the source."""

    code = "unknown_target"


class NotFound(GiftLedgerError):
    code = "not_found"
    http_status = 404


class AlreadyDecided(GiftLedgerError):
    """Request is no longer pending."""

    code = "already_decided"
    http_status = 409


class StorageError(GiftLedgerError, OSError):
    """Persisting the dataset failed. Reload before retrying."""

    code = "storage_error"
    http_status = 503


class ValidationError(GiftLedgerError):
    """400-level input problem."""

    code = "validation_error"


class ConflictError(GiftLedgerError):
    """409-level business rule conflict (e.g., duplicate gift code)."""

    code = "conflict"
    http_status = 409
