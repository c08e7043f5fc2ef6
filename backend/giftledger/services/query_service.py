# Overview: Read-only projections joining inventory, requests and ledger with reference entities.

"""
Projections over the published dataset.

Nothing here mutates state or is stored back; enriched views are rebuilt on
every call. Visibility of holders, gifts and stores is decided by the three
is_visible_* predicates and nowhere else.
"""
from __future__ import annotations

from ..exceptions import ValidationError
from ..extensions import store
from ..models import Dataset, Gift, Holder, Store


def is_visible_holder(holder: Holder | None) -> bool:
    return holder is not None and holder.is_active


def is_visible_gift(gift: Gift | None) -> bool:
    return gift is not None and gift.is_active


def is_visible_store(store_row: Store | None) -> bool:
    return store_row is not None and store_row.is_active


def _holder_view(holder: Holder | None) -> dict | None:
    # to_dict() omits password_hash unless asked
    return holder.to_dict() if holder else None


def _gift_view(gift: Gift | None) -> dict | None:
    return gift.to_dict() if gift else None


def my_inventory(holder_id: int, data: Dataset | None = None) -> list[dict]:
    """A holder's own balances for visible gifts."""
    data = data or store.snapshot()
    rows = []
    for record in data.inventory:
        if record.holder_id != holder_id:
            continue
        gift = data.gift(record.gift_id)
        if not is_visible_gift(gift):
            continue
        rows.append({**record.to_dict(), "gift": _gift_view(gift)})
    return rows


def all_inventory(
    *,
    search: str | None = None,
    store_id: int | None = None,
    data: Dataset | None = None,
) -> list[dict]:
    """
    Manager view of every visible balance.

    search matches holder name, employee code, gift name or gift code,
    case-insensitively. store_id filters on the holder's store.
    """
    data = data or store.snapshot()
    needle = search.strip().lower() if search else None
    rows = []
    for record in data.inventory:
        holder = data.holder(record.holder_id)
        gift = data.gift(record.gift_id)
        if not (is_visible_holder(holder) and is_visible_gift(gift)):
            continue
        if store_id is not None and holder.store_id != store_id:
            continue
        if needle:
            haystack = (holder.full_name, holder.employee_code, gift.name, gift.code)
            if not any(needle in (value or "").lower() for value in haystack):
                continue
        store_row = data.store(holder.store_id)
        rows.append({
            **record.to_dict(),
            "holder": _holder_view(holder),
            "gift": _gift_view(gift),
            "store": store_row.to_dict() if store_row else None,
        })
    return rows


def my_requests(holder_id: int, data: Dataset | None = None) -> list[dict]:
    """A holder's requests, newest first."""
    data = data or store.snapshot()
    requests = [r for r in data.requests if r.requester_id == holder_id]
    requests.sort(key=lambda r: (r.created_at, r.id), reverse=True)
    return [
        {
            **r.to_dict(),
            "gift": _gift_view(data.gift(r.gift_id)),
            "target_holder": _holder_view(data.holder(r.target_holder_id)),
            "approver": _holder_view(data.holder(r.approver_id)),
        }
        for r in requests
    ]


def pending_requests(data: Dataset | None = None) -> list[dict]:
    """Pending requests, oldest first (approval queue order)."""
    data = data or store.snapshot()
    requests = [r for r in data.requests if r.is_pending]
    requests.sort(key=lambda r: (r.created_at, r.id))
    return [
        {
            **r.to_dict(),
            "requester": _holder_view(data.holder(r.requester_id)),
            "gift": _gift_view(data.gift(r.gift_id)),
            "target_holder": _holder_view(data.holder(r.target_holder_id)),
        }
        for r in requests
    ]


def ledger_history(holder_id: int, *, limit: int | None = None, data: Dataset | None = None) -> list[dict]:
    """A holder's ledger entries, newest first."""
    if limit is not None and limit <= 0:
        raise ValidationError("limit must be a positive integer")
    data = data or store.snapshot()
    entries = [e for e in data.ledger if e.holder_id == holder_id]
    entries.sort(key=lambda e: (e.created_at, e.id), reverse=True)
    if limit is not None:
        entries = entries[:limit]
    return [
        {
            **e.to_dict(),
            "gift": _gift_view(data.gift(e.gift_id)),
            "counterparty": _holder_view(data.holder(e.counterparty_holder_id)),
            "actor": _holder_view(data.holder(e.actor_id)),
        }
        for e in entries
    ]


def list_holders(data: Dataset | None = None) -> list[dict]:
    """Every holder, active or not, with their store."""
    data = data or store.snapshot()
    rows = []
    for holder in data.holders:
        store_row = data.store(holder.store_id)
        rows.append({**holder.to_dict(), "store": store_row.to_dict() if store_row else None})
    return rows


def list_gifts(*, include_inactive: bool = False, data: Dataset | None = None) -> list[dict]:
    data = data or store.snapshot()
    return [g.to_dict() for g in data.gifts if include_inactive or is_visible_gift(g)]


def list_stores(data: Dataset | None = None) -> list[dict]:
    data = data or store.snapshot()
    return [s.to_dict() for s in data.stores if is_visible_store(s)]
