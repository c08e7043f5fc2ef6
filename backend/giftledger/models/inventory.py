from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from ..time_utils import to_utc_z, parse_iso_datetime, utcnow


# Ledger entry kinds
KIND_SEND = "send"
KIND_ADJUST = "adjust"
KIND_RECEIVE = "receive"
KIND_TRANSFER_OUT = "transfer-out"
KIND_DELETE_CLEANUP = "delete-cleanup"
LEDGER_KINDS = (KIND_SEND, KIND_ADJUST, KIND_RECEIVE, KIND_TRANSFER_OUT, KIND_DELETE_CLEANUP)


@dataclass
class InventoryRecord:
    """
    Current balance for one (holder, gift) pair.

    At most one record per pair. quantity always equals the sum of the
    pair's ledger entries and is never negative.
    """

    id: int
    holder_id: int
    gift_id: int
    quantity: int = 0
    last_updated: datetime = field(default_factory=utcnow)

    @property
    def key(self) -> tuple[int, int]:
        return (self.holder_id, self.gift_id)

    def __repr__(self) -> str:
        return (
            f"<InventoryRecord id={self.id} holder_id={self.holder_id} "
            f"gift_id={self.gift_id} quantity={self.quantity}>"
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "holder_id": self.holder_id,
            "gift_id": self.gift_id,
            "quantity": self.quantity,
            "last_updated": to_utc_z(self.last_updated),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "InventoryRecord":
        return cls(
            id=data["id"],
            holder_id=data["holder_id"],
            gift_id=data["gift_id"],
            quantity=int(data.get("quantity", 0)),
            last_updated=parse_iso_datetime(data.get("last_updated")) or utcnow(),
        )


@dataclass(frozen=True)
class LedgerEntry:
    """
    Append-only record of one balance change.

    quantity is signed: positive credits, negative debits. Entries are
    never updated or deleted; removals append a delete-cleanup entry.
    """

    id: int
    holder_id: int
    gift_id: int
    kind: str
    quantity: int
    reason: str | None
    actor_id: int | None
    counterparty_holder_id: int | None = None
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "holder_id": self.holder_id,
            "gift_id": self.gift_id,
            "kind": self.kind,
            "quantity": self.quantity,
            "counterparty_holder_id": self.counterparty_holder_id,
            "reason": self.reason,
            "actor_id": self.actor_id,
            "created_at": to_utc_z(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LedgerEntry":
        if data["kind"] not in LEDGER_KINDS:
            raise ValueError(f"unknown ledger kind {data['kind']!r}")
        return cls(
            id=data["id"],
            holder_id=data["holder_id"],
            gift_id=data["gift_id"],
            kind=data["kind"],
            quantity=int(data["quantity"]),
            reason=data.get("reason"),
            actor_id=data.get("actor_id"),
            counterparty_holder_id=data.get("counterparty_holder_id"),
            created_at=parse_iso_datetime(data.get("created_at")) or utcnow(),
        )
