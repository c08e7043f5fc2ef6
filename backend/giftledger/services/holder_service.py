# Overview: Holder administration and the single cascade-delete entry point for holders.

"""
Holder administration.

Username and employee code are unique across holders.

CASCADE POLICY (delete_holder):
- every InventoryRecord of the holder is removed, each with a
  delete-cleanup ledger entry of -quantity
- every request the holder authored, or that targets the holder, is removed
- earlier ledger entries are kept; their holder_id no longer resolves
  (orphaned history, never rewritten)
"""
from __future__ import annotations

from dataclasses import replace

from ..exceptions import ConflictError, NotFound, ValidationError
from ..extensions import store
from ..logging_config import get_logger
from ..models import Dataset, Holder, ROLES, ROLE_EMPLOYEE
from ..time_utils import utcnow
from .auth_service import hash_password
from .inventory_service import _remove_record_inner


logger = get_logger(__name__)


def _check_unique(data: Dataset, *, username: str | None, employee_code: str | None, exclude_id: int | None = None) -> None:
    for other in data.holders:
        if other.id == exclude_id:
            continue
        if username and other.username == username:
            raise ConflictError("Username already exists")
        if employee_code and other.employee_code == employee_code:
            raise ConflictError("Employee code already exists")


def _check_store(data: Dataset, store_id: int | None) -> None:
    if store_id is not None and data.store(store_id) is None:
        raise NotFound(f"Store {store_id} not found")


def create_holder(
    *,
    username: str,
    password: str,
    full_name: str,
    employee_code: str,
    store_id: int | None = None,
    role: str = ROLE_EMPLOYEE,
    bcrypt_rounds: int = 12,
) -> Holder:
    if role not in ROLES:
        raise ValidationError(f"role must be one of {', '.join(ROLES)}")
    if not username or not full_name or not employee_code:
        raise ValidationError("username, full_name and employee_code are required")
    # hash outside the critical section; bcrypt is slow on purpose
    password_hash = hash_password(password, rounds=bcrypt_rounds)

    with store.transaction() as data:
        _check_unique(data, username=username, employee_code=employee_code)
        _check_store(data, store_id)
        now = utcnow()
        holder = Holder(
            id=data.next_id("holders"),
            username=username,
            full_name=full_name,
            employee_code=employee_code,
            store_id=store_id,
            role=role,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
        data.holders.append(holder)

    logger.info("holder created", extra={"holder_id": holder.id, "role": role})
    return replace(holder)


def update_holder(
    holder_id: int,
    *,
    username: str | None = None,
    password: str | None = None,
    full_name: str | None = None,
    employee_code: str | None = None,
    store_id: int | None = None,
    role: str | None = None,
    is_active: bool | None = None,
    bcrypt_rounds: int = 12,
) -> Holder:
    """Partial update; None leaves a field unchanged. Blank passwords are ignored."""
    if role is not None and role not in ROLES:
        raise ValidationError(f"role must be one of {', '.join(ROLES)}")
    password_hash = None
    if password and password.strip():
        password_hash = hash_password(password, rounds=bcrypt_rounds)

    with store.transaction() as data:
        holder = data.holder(holder_id)
        if holder is None:
            raise NotFound(f"Holder {holder_id} not found")
        _check_unique(data, username=username, employee_code=employee_code, exclude_id=holder_id)
        _check_store(data, store_id)

        if username:
            holder.username = username
        if full_name:
            holder.full_name = full_name
        if employee_code:
            holder.employee_code = employee_code
        if store_id is not None:
            holder.store_id = store_id
        if role:
            holder.role = role
        if is_active is not None:
            holder.is_active = is_active
        if password_hash:
            holder.password_hash = password_hash
        holder.updated_at = utcnow()

    logger.info("holder updated", extra={"holder_id": holder_id})
    return replace(holder)


def set_holder_active(holder_id: int, is_active: bool) -> Holder:
    with store.transaction() as data:
        holder = data.holder(holder_id)
        if holder is None:
            raise NotFound(f"Holder {holder_id} not found")
        holder.is_active = is_active
        holder.updated_at = utcnow()

    logger.info("holder status changed", extra={"holder_id": holder_id, "is_active": is_active})
    return replace(holder)


def delete_holder(holder_id: int, *, actor_id: int | None = None) -> dict:
    """
    Delete a holder and cascade per the policy above.

    Returns counts of removed dependents.
    """
    if actor_id is not None and actor_id == holder_id:
        raise ValidationError("Cannot delete your own account")

    with store.transaction() as data:
        holder = data.holder(holder_id)
        if holder is None:
            raise NotFound(f"Holder {holder_id} not found")

        now = utcnow()
        records = [r for r in data.inventory if r.holder_id == holder_id]
        for record in records:
            _remove_record_inner(
                data,
                holder_id=record.holder_id,
                gift_id=record.gift_id,
                actor_id=actor_id,
                reason=f"Holder {holder.username} deleted",
                now=now,
            )

        before = len(data.requests)
        data.requests = [
            r for r in data.requests
            if r.requester_id != holder_id and r.target_holder_id != holder_id
        ]
        removed_requests = before - len(data.requests)
        data.holders.remove(holder)

    summary = {
        "holder_id": holder_id,
        "inventory_records": len(records),
        "requests": removed_requests,
        "ledger_entries": len(records),
    }
    logger.info("holder deleted", extra=summary)
    return summary
