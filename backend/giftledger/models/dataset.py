from __future__ import annotations

from dataclasses import dataclass, field

from .holders import Holder, Store
from .gifts import Gift
from .inventory import InventoryRecord, LedgerEntry
from .requests import GiftRequest


# Counter keys in next_ids; one per collection.
ID_COUNTERS = ("holders", "stores", "gifts", "inventory", "requests", "ledger")


@dataclass
class Dataset:
    """
    The whole persisted state: every collection plus the id counters.

    A Dataset is only mutated inside a store transaction, on a private copy.
    Published datasets are treated as read-only.
    """

    holders: list[Holder] = field(default_factory=list)
    stores: list[Store] = field(default_factory=list)
    gifts: list[Gift] = field(default_factory=list)
    inventory: list[InventoryRecord] = field(default_factory=list)
    requests: list[GiftRequest] = field(default_factory=list)
    ledger: list[LedgerEntry] = field(default_factory=list)
    next_ids: dict[str, int] = field(default_factory=lambda: {k: 1 for k in ID_COUNTERS})

    def next_id(self, collection: str) -> int:
        """Consume the next id for a collection. Ids are never reused."""
        if collection not in ID_COUNTERS:
            raise KeyError(f"unknown id counter {collection!r}")
        value = self.next_ids.get(collection, 1)
        self.next_ids[collection] = value + 1
        return value

    def holder(self, holder_id: int | None) -> Holder | None:
        return next((h for h in self.holders if h.id == holder_id), None)

    def holder_by_username(self, username: str) -> Holder | None:
        return next((h for h in self.holders if h.username == username), None)

    def store(self, store_id: int | None) -> Store | None:
        return next((s for s in self.stores if s.id == store_id), None)

    def gift(self, gift_id: int | None) -> Gift | None:
        return next((g for g in self.gifts if g.id == gift_id), None)

    def inventory_record(self, holder_id: int, gift_id: int) -> InventoryRecord | None:
        return next(
            (r for r in self.inventory if r.holder_id == holder_id and r.gift_id == gift_id),
            None,
        )

    def request(self, request_id: int) -> GiftRequest | None:
        return next((r for r in self.requests if r.id == request_id), None)

    def ledger_for(self, holder_id: int, gift_id: int) -> list[LedgerEntry]:
        return [e for e in self.ledger if e.holder_id == holder_id and e.gift_id == gift_id]

    def to_dict(self) -> dict:
        return {
            "holders": [h.to_dict(include_secret=True) for h in self.holders],
            "stores": [s.to_dict() for s in self.stores],
            "gifts": [g.to_dict() for g in self.gifts],
            "inventory": [r.to_dict() for r in self.inventory],
            "requests": [r.to_dict() for r in self.requests],
            "ledger": [e.to_dict() for e in self.ledger],
            "next_ids": dict(self.next_ids),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Dataset":
        dataset = cls(
            holders=[Holder.from_dict(d) for d in data.get("holders", [])],
            stores=[Store.from_dict(d) for d in data.get("stores", [])],
            gifts=[Gift.from_dict(d) for d in data.get("gifts", [])],
            inventory=[InventoryRecord.from_dict(d) for d in data.get("inventory", [])],
            requests=[GiftRequest.from_dict(d) for d in data.get("requests", [])],
            ledger=[LedgerEntry.from_dict(d) for d in data.get("ledger", [])],
        )
        stored = data.get("next_ids") or {}
        for collection in ID_COUNTERS:
            # a missing or stale counter must never hand out an id already in use
            used = max((row.id for row in getattr(dataset, collection)), default=0)
            dataset.next_ids[collection] = max(int(stored.get(collection, 1)), used + 1)
        return dataset
