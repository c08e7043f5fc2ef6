# Overview: Gift catalog administration and the cascade-delete entry point for gifts.

"""
Gift catalog.

Gift codes are unique and stable. Deactivation only hides a gift from
selection lists. Deletion cascades: inventory records for the gift are
removed with delete-cleanup ledger entries, and every request referencing
the gift is removed.
"""
from __future__ import annotations

from dataclasses import replace

from ..exceptions import ConflictError, NotFound, ValidationError
from ..extensions import store
from ..logging_config import get_logger
from ..models import Gift
from ..time_utils import utcnow
from .inventory_service import _remove_record_inner


logger = get_logger(__name__)


def create_gift(*, code: str, name: str, category: str | None = None, description: str | None = None) -> Gift:
    if not code or not name:
        raise ValidationError("code and name are required")

    with store.transaction() as data:
        if any(g.code == code for g in data.gifts):
            raise ConflictError(f"Gift code {code} already exists")
        gift = Gift(
            id=data.next_id("gifts"),
            code=code,
            name=name,
            category=category,
            description=description,
            created_at=utcnow(),
        )
        data.gifts.append(gift)

    logger.info("gift created", extra={"gift_id": gift.id, "gift_code": code})
    return replace(gift)


def update_gift(
    gift_id: int,
    *,
    name: str | None = None,
    category: str | None = None,
    description: str | None = None,
    is_active: bool | None = None,
) -> Gift:
    """Partial update. The code is stable and cannot be changed."""
    with store.transaction() as data:
        gift = data.gift(gift_id)
        if gift is None:
            raise NotFound(f"Gift {gift_id} not found")
        if name:
            gift.name = name
        if category is not None:
            gift.category = category
        if description is not None:
            gift.description = description
        if is_active is not None:
            gift.is_active = is_active

    logger.info("gift updated", extra={"gift_id": gift_id})
    return replace(gift)


def set_gift_active(gift_id: int, is_active: bool) -> Gift:
    return update_gift(gift_id, is_active=is_active)


def delete_gift(gift_id: int, *, actor_id: int | None = None) -> dict:
    """
    Delete a gift and everything that references it.

    Returns {"gift_id", "inventory_records", "requests", "ledger_entries"}
    where ledger_entries counts the cleanup entries appended.
    """
    with store.transaction() as data:
        gift = data.gift(gift_id)
        if gift is None:
            raise NotFound(f"Gift {gift_id} not found")

        now = utcnow()
        records = [r for r in data.inventory if r.gift_id == gift_id]
        for record in records:
            _remove_record_inner(
                data,
                holder_id=record.holder_id,
                gift_id=gift_id,
                actor_id=actor_id,
                reason=f"Gift {gift.code} deleted",
                now=now,
            )

        before = len(data.requests)
        data.requests = [r for r in data.requests if r.gift_id != gift_id]
        removed_requests = before - len(data.requests)
        data.gifts.remove(gift)

    summary = {
        "gift_id": gift_id,
        "inventory_records": len(records),
        "requests": removed_requests,
        "ledger_entries": len(records),
    }
    logger.info("gift deleted", extra=summary)
    return summary
