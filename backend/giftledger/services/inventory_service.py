# Overview: Service-layer operations for gift inventory; every balance change appends a ledger entry.

# backend/giftledger/services/inventory_service.py
"""
Gift Ledger Inventory Invariants (authoritative)

Balance model:
- One InventoryRecord per (holder, gift). Created lazily on first credit.
- quantity == SUM(ledger.quantity) for the pair, always.
- quantity may never go negative.

Mutations:
- credit/debit/transfer/manual_adjust/remove_record each append ledger
  entries in the same store transaction as the balance change.
- transfer is one debit (transfer-out) and one credit (receive) whose entries
  name each other's holder as counterparty. Both land or neither does.
- manual_adjust records the signed delta as a single adjust entry, even
  when the delta is zero.
- remove_record appends a delete-cleanup entry of -quantity, then drops
  the record.

Ledger:
- Append-only. Entries are never updated or deleted.

Composition:
- The *_inner helpers take the working Dataset and never open a transaction
  themselves. The request service composes them inside its own transaction.
"""
from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from ..exceptions import InvalidAmount, InsufficientBalance, NotFound, UnknownTarget, ValidationError
from ..extensions import store
from ..logging_config import get_logger
from ..models import (
    Dataset,
    Gift,
    Holder,
    InventoryRecord,
    LedgerEntry,
    KIND_ADJUST,
    KIND_DELETE_CLEANUP,
    KIND_RECEIVE,
    KIND_SEND,
    KIND_TRANSFER_OUT,
)
from ..time_utils import utcnow


logger = get_logger(__name__)

CREDIT_KINDS = (KIND_RECEIVE, KIND_ADJUST)
DEBIT_KINDS = (KIND_SEND, KIND_ADJUST, KIND_TRANSFER_OUT)

DEFAULT_SEND_REASON = "Daily send-out"


def _require_positive(amount, field: str = "amount") -> int:
    # bool is an int subclass; True must not mean 1 here
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmount(f"{field} must be an integer")
    if amount <= 0:
        raise InvalidAmount(f"{field} must be positive")
    return amount


def require_holder(data: Dataset, holder_id: int) -> Holder:
    holder = data.holder(holder_id)
    if holder is None:
        raise NotFound(f"Holder {holder_id} not found")
    return holder


def require_gift(data: Dataset, gift_id: int) -> Gift:
    gift = data.gift(gift_id)
    if gift is None:
        raise NotFound(f"Gift {gift_id} not found")
    return gift


def quantity_on_hand(data: Dataset, holder_id: int, gift_id: int) -> int:
    record = data.inventory_record(holder_id, gift_id)
    return record.quantity if record else 0


def _append_entry(
    data: Dataset,
    *,
    holder_id: int,
    gift_id: int,
    kind: str,
    quantity: int,
    reason: str | None,
    actor_id: int | None,
    counterparty_holder_id: int | None = None,
    now: datetime,
) -> LedgerEntry:
    entry = LedgerEntry(
        id=data.next_id("ledger"),
        holder_id=holder_id,
        gift_id=gift_id,
        kind=kind,
        quantity=quantity,
        reason=reason,
        actor_id=actor_id,
        counterparty_holder_id=counterparty_holder_id,
        created_at=now,
    )
    data.ledger.append(entry)
    return entry


def _credit_inner(
    data: Dataset,
    *,
    holder_id: int,
    gift_id: int,
    amount: int,
    kind: str,
    reason: str | None,
    actor_id: int | None,
    counterparty_holder_id: int | None = None,
    now: datetime | None = None,
) -> InventoryRecord:
    """Core credit logic without locking or saving."""
    _require_positive(amount)
    if kind not in CREDIT_KINDS:
        raise ValidationError(f"{kind!r} is not a credit kind")
    require_holder(data, holder_id)
    require_gift(data, gift_id)
    now = now or utcnow()

    record = data.inventory_record(holder_id, gift_id)
    if record is None:
        record = InventoryRecord(
            id=data.next_id("inventory"),
            holder_id=holder_id,
            gift_id=gift_id,
            quantity=0,
            last_updated=now,
        )
        data.inventory.append(record)

    record.quantity += amount
    record.last_updated = now
    _append_entry(
        data,
        holder_id=holder_id,
        gift_id=gift_id,
        kind=kind,
        quantity=amount,
        reason=reason,
        actor_id=actor_id,
        counterparty_holder_id=counterparty_holder_id,
        now=now,
    )
    return record


def _debit_inner(
    data: Dataset,
    *,
    holder_id: int,
    gift_id: int,
    amount: int,
    kind: str,
    reason: str | None,
    actor_id: int | None,
    counterparty_holder_id: int | None = None,
    now: datetime | None = None,
) -> InventoryRecord:
    """
    Core debit logic without locking or saving.

    The balance check reads the same working dataset the mutation writes,
    so no other operation can slip in between.
    """
    _require_positive(amount)
    if kind not in DEBIT_KINDS:
        raise ValidationError(f"{kind!r} is not a debit kind")
    require_holder(data, holder_id)
    require_gift(data, gift_id)
    now = now or utcnow()

    record = data.inventory_record(holder_id, gift_id)
    on_hand = record.quantity if record else 0
    if record is None or on_hand < amount:
        raise InsufficientBalance(holder_id, gift_id, on_hand, amount)

    record.quantity -= amount
    record.last_updated = now
    _append_entry(
        data,
        holder_id=holder_id,
        gift_id=gift_id,
        kind=kind,
        quantity=-amount,
        reason=reason,
        actor_id=actor_id,
        counterparty_holder_id=counterparty_holder_id,
        now=now,
    )
    return record


def _transfer_inner(
    data: Dataset,
    *,
    from_holder_id: int,
    to_holder_id: int,
    gift_id: int,
    amount: int,
    reason: str | None,
    actor_id: int | None,
    receive_reason: str | None = None,
    now: datetime | None = None,
) -> tuple[InventoryRecord, InventoryRecord]:
    """Debit the source then credit the destination on the same working dataset."""
    _require_positive(amount)
    require_holder(data, from_holder_id)
    if from_holder_id == to_holder_id:
        raise UnknownTarget("Cannot transfer to the same holder")
    target = data.holder(to_holder_id)
    if target is None or not target.is_active:
        raise UnknownTarget(f"Target holder {to_holder_id} does not exist or is inactive")
    now = now or utcnow()

    source_record = _debit_inner(
        data,
        holder_id=from_holder_id,
        gift_id=gift_id,
        amount=amount,
        kind=KIND_TRANSFER_OUT,
        reason=reason,
        actor_id=actor_id,
        counterparty_holder_id=to_holder_id,
        now=now,
    )
    target_record = _credit_inner(
        data,
        holder_id=to_holder_id,
        gift_id=gift_id,
        amount=amount,
        kind=KIND_RECEIVE,
        reason=receive_reason or reason,
        actor_id=actor_id,
        counterparty_holder_id=from_holder_id,
        now=now,
    )
    return source_record, target_record


def _manual_adjust_inner(
    data: Dataset,
    *,
    holder_id: int,
    gift_id: int,
    new_quantity: int,
    reason: str | None,
    actor_id: int | None,
    now: datetime | None = None,
) -> InventoryRecord:
    if isinstance(new_quantity, bool) or not isinstance(new_quantity, int):
        raise InvalidAmount("quantity must be an integer")
    if new_quantity < 0:
        raise InvalidAmount("quantity cannot be negative")
    require_holder(data, holder_id)
    require_gift(data, gift_id)
    now = now or utcnow()

    record = data.inventory_record(holder_id, gift_id)
    if record is None:
        record = InventoryRecord(
            id=data.next_id("inventory"),
            holder_id=holder_id,
            gift_id=gift_id,
            quantity=0,
            last_updated=now,
        )
        data.inventory.append(record)

    delta = new_quantity - record.quantity
    record.quantity = new_quantity
    record.last_updated = now
    # zero deltas are recorded too: a manager confirming a count is an audit event
    _append_entry(
        data,
        holder_id=holder_id,
        gift_id=gift_id,
        kind=KIND_ADJUST,
        quantity=delta,
        reason=reason,
        actor_id=actor_id,
        now=now,
    )
    return record


def _remove_record_inner(
    data: Dataset,
    *,
    holder_id: int,
    gift_id: int,
    actor_id: int | None,
    reason: str | None = None,
    now: datetime | None = None,
) -> InventoryRecord:
    record = data.inventory_record(holder_id, gift_id)
    if record is None:
        raise NotFound(f"No inventory record for holder {holder_id}, gift {gift_id}")
    now = now or utcnow()

    _append_entry(
        data,
        holder_id=holder_id,
        gift_id=gift_id,
        kind=KIND_DELETE_CLEANUP,
        quantity=-record.quantity,
        reason=reason or "Inventory record removed",
        actor_id=actor_id,
        now=now,
    )
    data.inventory.remove(record)
    return record


def credit(
    holder_id: int,
    gift_id: int,
    amount: int,
    *,
    kind: str = KIND_RECEIVE,
    reason: str | None = None,
    actor_id: int | None = None,
    counterparty_holder_id: int | None = None,
) -> InventoryRecord:
    """Increase a holder's balance and append a positive ledger entry."""
    with store.transaction() as data:
        record = _credit_inner(
            data,
            holder_id=holder_id,
            gift_id=gift_id,
            amount=amount,
            kind=kind,
            reason=reason,
            actor_id=actor_id,
            counterparty_holder_id=counterparty_holder_id,
        )
    logger.info(
        "inventory credited",
        extra={"holder_id": holder_id, "gift_id": gift_id, "amount": amount, "kind": kind},
    )
    return replace(record)


def debit(
    holder_id: int,
    gift_id: int,
    amount: int,
    *,
    kind: str = KIND_SEND,
    reason: str | None = None,
    actor_id: int | None = None,
    counterparty_holder_id: int | None = None,
) -> InventoryRecord:
    """
    Decrease a holder's balance and append a negative ledger entry.

    Raises InsufficientBalance when the holder has fewer than amount units.
    """
    with store.transaction() as data:
        record = _debit_inner(
            data,
            holder_id=holder_id,
            gift_id=gift_id,
            amount=amount,
            kind=kind,
            reason=reason,
            actor_id=actor_id,
            counterparty_holder_id=counterparty_holder_id,
        )
    logger.info(
        "inventory debited",
        extra={"holder_id": holder_id, "gift_id": gift_id, "amount": amount, "kind": kind},
    )
    return replace(record)


def send_gift(
    holder_id: int,
    gift_id: int,
    amount: int,
    *,
    reason: str | None = None,
    actor_id: int | None = None,
) -> InventoryRecord:
    """A holder handing gifts out to customers."""
    return debit(
        holder_id,
        gift_id,
        amount,
        kind=KIND_SEND,
        reason=reason or DEFAULT_SEND_REASON,
        actor_id=actor_id if actor_id is not None else holder_id,
    )


def transfer(
    from_holder_id: int,
    to_holder_id: int,
    gift_id: int,
    amount: int,
    *,
    reason: str | None = None,
    actor_id: int | None = None,
) -> tuple[InventoryRecord, InventoryRecord]:
    """
    Move units between holders.

    Returns (source_record, target_record). Both balances change or neither.
    """
    with store.transaction() as data:
        source, target = _transfer_inner(
            data,
            from_holder_id=from_holder_id,
            to_holder_id=to_holder_id,
            gift_id=gift_id,
            amount=amount,
            reason=reason,
            actor_id=actor_id,
        )
    logger.info(
        "inventory transferred",
        extra={
            "from_holder_id": from_holder_id,
            "to_holder_id": to_holder_id,
            "gift_id": gift_id,
            "amount": amount,
        },
    )
    return replace(source), replace(target)


def manual_adjust(
    holder_id: int,
    gift_id: int,
    new_quantity: int,
    *,
    reason: str | None = None,
    actor_id: int | None = None,
) -> InventoryRecord:
    """Set an absolute balance; the signed delta goes to the ledger."""
    with store.transaction() as data:
        record = _manual_adjust_inner(
            data,
            holder_id=holder_id,
            gift_id=gift_id,
            new_quantity=new_quantity,
            reason=reason,
            actor_id=actor_id,
        )
    logger.info(
        "inventory adjusted",
        extra={"holder_id": holder_id, "gift_id": gift_id, "new_quantity": new_quantity},
    )
    return replace(record)


def remove_record(holder_id: int, gift_id: int, *, actor_id: int | None = None) -> InventoryRecord:
    """Delete a record regardless of balance. Returns the deleted snapshot."""
    with store.transaction() as data:
        record = _remove_record_inner(data, holder_id=holder_id, gift_id=gift_id, actor_id=actor_id)
    logger.info(
        "inventory record removed",
        extra={"holder_id": holder_id, "gift_id": gift_id, "prior_quantity": record.quantity},
    )
    return replace(record)


def reconcile(data: Dataset | None = None) -> list[dict]:
    """
    Compare every balance with its ledger sum.

    Returns one dict per mismatch; an empty list means the ledger and the
    balances agree. Pairs with a non-zero ledger sum but no record are
    reported too.
    """
    data = data or store.snapshot()
    sums: dict[tuple[int, int], int] = {}
    for entry in data.ledger:
        key = (entry.holder_id, entry.gift_id)
        sums[key] = sums.get(key, 0) + entry.quantity

    mismatches = []
    seen = set()
    for record in data.inventory:
        seen.add(record.key)
        ledger_sum = sums.get(record.key, 0)
        if record.quantity != ledger_sum or record.quantity < 0:
            mismatches.append({
                "holder_id": record.holder_id,
                "gift_id": record.gift_id,
                "quantity": record.quantity,
                "ledger_sum": ledger_sum,
            })
    for (holder_id, gift_id), ledger_sum in sums.items():
        if (holder_id, gift_id) not in seen and ledger_sum != 0:
            mismatches.append({
                "holder_id": holder_id,
                "gift_id": gift_id,
                "quantity": None,
                "ledger_sum": ledger_sum,
            })
    return mismatches
