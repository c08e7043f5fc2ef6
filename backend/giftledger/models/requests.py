from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from ..time_utils import to_utc_z, parse_iso_datetime, utcnow


REQUEST_TYPE_INCREASE = "increase"
REQUEST_TYPE_TRANSFER = "transfer"
REQUEST_TYPES = (REQUEST_TYPE_INCREASE, REQUEST_TYPE_TRANSFER)

# Request status constants
REQUEST_STATUS_PENDING = "pending"
REQUEST_STATUS_APPROVED = "approved"
REQUEST_STATUS_REJECTED = "rejected"


@dataclass
class GiftRequest:
    """
    Proposal to increase or transfer a holder's inventory.

    LIFECYCLE:
    1. pending: submitted, awaiting a manager
    2. approved: ledger effect applied, approved_quantity set
    3. rejected: no inventory effect, rejection_reason set

    approved and rejected are terminal.
    """

    id: int
    requester_id: int
    gift_id: int
    request_type: str
    requested_quantity: int
    purpose: str | None = None
    target_holder_id: int | None = None
    status: str = REQUEST_STATUS_PENDING
    approver_id: int | None = None
    approved_quantity: int | None = None
    rejection_reason: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    decided_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == REQUEST_STATUS_PENDING

    def __repr__(self) -> str:
        return (
            f"<GiftRequest id={self.id} type={self.request_type} "
            f"status={self.status} requester_id={self.requester_id}>"
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "requester_id": self.requester_id,
            "gift_id": self.gift_id,
            "request_type": self.request_type,
            "requested_quantity": self.requested_quantity,
            "approved_quantity": self.approved_quantity,
            "target_holder_id": self.target_holder_id,
            "purpose": self.purpose,
            "status": self.status,
            "approver_id": self.approver_id,
            "rejection_reason": self.rejection_reason,
            "created_at": to_utc_z(self.created_at),
            "decided_at": to_utc_z(self.decided_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GiftRequest":
        return cls(
            id=data["id"],
            requester_id=data["requester_id"],
            gift_id=data["gift_id"],
            request_type=data["request_type"],
            requested_quantity=int(data["requested_quantity"]),
            purpose=data.get("purpose"),
            target_holder_id=data.get("target_holder_id"),
            status=data.get("status", REQUEST_STATUS_PENDING),
            approver_id=data.get("approver_id"),
            approved_quantity=data.get("approved_quantity"),
            rejection_reason=data.get("rejection_reason"),
            created_at=parse_iso_datetime(data.get("created_at")) or utcnow(),
            decided_at=parse_iso_datetime(data.get("decided_at")),
        )
