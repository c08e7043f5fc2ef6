# backend/giftledger/services/request_service.py
"""
Gift request lifecycle.

LIFECYCLE:
1. pending: submitted by a holder
2. approved: manager approved; ledger effect applied in the same transaction
3. rejected: manager rejected; no inventory effect

approved and rejected are terminal. A request leaves pending exactly once.

The balance check in submit() is advisory: the balance can change while the
request waits in the queue. approve() performs the authoritative debit; if
it fails, the whole approval rolls back and the request stays pending.
"""
from __future__ import annotations

from dataclasses import replace

from ..exceptions import AlreadyDecided, InsufficientBalance, NotFound, UnknownTarget, ValidationError
from ..extensions import store
from ..logging_config import get_logger
from ..models import (
    GiftRequest,
    KIND_RECEIVE,
    REQUEST_STATUS_APPROVED,
    REQUEST_STATUS_REJECTED,
    REQUEST_TYPE_INCREASE,
    REQUEST_TYPE_TRANSFER,
    REQUEST_TYPES,
)
from ..time_utils import utcnow
from .inventory_service import (
    _credit_inner,
    _require_positive,
    _transfer_inner,
    quantity_on_hand,
    require_gift,
    require_holder,
)


logger = get_logger(__name__)


def submit(
    requester_id: int,
    gift_id: int,
    request_type: str,
    requested_quantity: int,
    *,
    target_holder_id: int | None = None,
    purpose: str | None = None,
) -> GiftRequest:
    """
    Create a pending request.

    Raises:
        InvalidAmount: requested_quantity is not positive
        NotFound: requester or gift missing/inactive
        UnknownTarget: transfer target missing, inactive, or the requester
        InsufficientBalance: transfer exceeds the requester's current balance
        ValidationError: unknown type, or a target on an increase request
    """
    if request_type not in REQUEST_TYPES:
        raise ValidationError(f"request_type must be one of {', '.join(REQUEST_TYPES)}")
    _require_positive(requested_quantity, "requested_quantity")

    with store.transaction() as data:
        requester = require_holder(data, requester_id)
        if not requester.is_active:
            raise NotFound(f"Holder {requester_id} is inactive")
        gift = require_gift(data, gift_id)
        if not gift.is_active:
            raise NotFound(f"Gift {gift_id} is inactive")

        if request_type == REQUEST_TYPE_TRANSFER:
            if target_holder_id is None or target_holder_id == requester_id:
                raise UnknownTarget("Transfer requires a different target holder")
            target = data.holder(target_holder_id)
            if target is None or not target.is_active:
                raise UnknownTarget(f"Target holder {target_holder_id} does not exist or is inactive")

            on_hand = quantity_on_hand(data, requester_id, gift_id)
            if on_hand < requested_quantity:
                raise InsufficientBalance(requester_id, gift_id, on_hand, requested_quantity)
        elif target_holder_id is not None:
            raise ValidationError("target_holder_id only applies to transfer requests")

        gift_request = GiftRequest(
            id=data.next_id("requests"),
            requester_id=requester_id,
            gift_id=gift_id,
            request_type=request_type,
            requested_quantity=requested_quantity,
            target_holder_id=target_holder_id,
            purpose=purpose,
            created_at=utcnow(),
        )
        data.requests.append(gift_request)

    logger.info(
        "request submitted",
        extra={"request_id": gift_request.id, "request_type": request_type, "requester_id": requester_id},
    )
    return replace(gift_request)


def _reason(prefix: str, purpose: str | None) -> str:
    return f"{prefix}: {purpose}" if purpose else prefix


def _require_pending(data, request_id: int) -> GiftRequest:
    gift_request = data.request(request_id)
    if gift_request is None:
        raise NotFound(f"Request {request_id} not found")
    if not gift_request.is_pending:
        raise AlreadyDecided(f"Request {request_id} is already {gift_request.status}")
    return gift_request


def approve(request_id: int, approver_id: int, approved_quantity: int | None = None) -> GiftRequest:
    """
    Approve a pending request and apply its inventory effect.

    approved_quantity defaults to requested_quantity when missing or
    non-positive.

    - increase: credit the requester (kind=receive)
    - transfer: debit the requester, credit the target

    Raises NotFound/AlreadyDecided, and for transfers InsufficientBalance or
    UnknownTarget when the situation changed since submission. In every
    failure case the request remains pending and no ledger entry is written.
    """
    with store.transaction() as data:
        gift_request = _require_pending(data, request_id)
        require_holder(data, approver_id)

        if isinstance(approved_quantity, bool) or not isinstance(approved_quantity, int) or approved_quantity <= 0:
            final_quantity = gift_request.requested_quantity
        else:
            final_quantity = approved_quantity
        now = utcnow()
        purpose = gift_request.purpose

        if gift_request.request_type == REQUEST_TYPE_INCREASE:
            _credit_inner(
                data,
                holder_id=gift_request.requester_id,
                gift_id=gift_request.gift_id,
                amount=final_quantity,
                kind=KIND_RECEIVE,
                reason=_reason(f"Increase request #{gift_request.id} approved", purpose),
                actor_id=approver_id,
                now=now,
            )
        else:
            _transfer_inner(
                data,
                from_holder_id=gift_request.requester_id,
                to_holder_id=gift_request.target_holder_id,
                gift_id=gift_request.gift_id,
                amount=final_quantity,
                reason=_reason(f"Transfer request #{gift_request.id} approved", purpose),
                receive_reason=_reason(f"Received via transfer request #{gift_request.id}", purpose),
                actor_id=approver_id,
                now=now,
            )

        gift_request.status = REQUEST_STATUS_APPROVED
        gift_request.approver_id = approver_id
        gift_request.approved_quantity = final_quantity
        gift_request.decided_at = now

    logger.info(
        "request approved",
        extra={"request_id": request_id, "approver_id": approver_id, "approved_quantity": final_quantity},
    )
    return replace(gift_request)


def reject(request_id: int, approver_id: int, reason: str | None = None) -> GiftRequest:
    """Reject a pending request. No inventory effect."""
    with store.transaction() as data:
        gift_request = _require_pending(data, request_id)
        require_holder(data, approver_id)

        gift_request.status = REQUEST_STATUS_REJECTED
        gift_request.approver_id = approver_id
        gift_request.rejection_reason = reason
        gift_request.decided_at = utcnow()

    logger.info("request rejected", extra={"request_id": request_id, "approver_id": approver_id})
    return replace(gift_request)


def get_request(request_id: int) -> GiftRequest:
    gift_request = store.snapshot().request(request_id)
    if gift_request is None:
        raise NotFound(f"Request {request_id} not found")
    return replace(gift_request)
