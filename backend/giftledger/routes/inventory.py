# backend/giftledger/routes/inventory.py
"""
Inventory routes.

All routes require authentication.
- Own inventory and send-out: any holder
- All inventory, manual adjust, record removal, direct transfer: manager
"""
from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth, require_role
from ..models import ROLE_MANAGER
from ..services import inventory_service, query_service
from ..validation import INT, STR, PayloadPolicy, validate_payload


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")

SEND_POLICY = PayloadPolicy(
    fields={"gift_id": INT, "quantity": INT, "reason": STR},
    required={"gift_id", "quantity"},
)

ADJUST_POLICY = PayloadPolicy(
    fields={"quantity": INT, "reason": STR},
    required={"quantity"},
)

TRANSFER_POLICY = PayloadPolicy(
    fields={"from_holder_id": INT, "to_holder_id": INT, "gift_id": INT, "quantity": INT, "reason": STR},
    required={"from_holder_id", "to_holder_id", "gift_id", "quantity"},
)


@inventory_bp.get("/my")
@require_auth
def my_inventory_route():
    return jsonify(query_service.my_inventory(g.current_user.id))


@inventory_bp.get("/all")
@require_auth
@require_role(ROLE_MANAGER)
def all_inventory_route():
    """Query params: search (holder/gift name or code), store_id."""
    store_id = request.args.get("store_id", type=int)
    return jsonify(query_service.all_inventory(search=request.args.get("search"), store_id=store_id))


@inventory_bp.post("/send")
@require_auth
def send_route():
    """Hand gifts out from the caller's own inventory."""
    payload = validate_payload(request.get_json(silent=True), SEND_POLICY)
    record = inventory_service.send_gift(
        g.current_user.id,
        payload["gift_id"],
        payload["quantity"],
        reason=payload.get("reason"),
        actor_id=g.current_user.id,
    )
    return jsonify({"success": True, "inventory": record.to_dict()})


@inventory_bp.put("/<int:holder_id>/<int:gift_id>")
@require_auth
@require_role(ROLE_MANAGER)
def adjust_route(holder_id: int, gift_id: int):
    """Set an absolute quantity; the delta is written to the ledger."""
    payload = validate_payload(request.get_json(silent=True), ADJUST_POLICY)
    record = inventory_service.manual_adjust(
        holder_id,
        gift_id,
        payload["quantity"],
        reason=payload.get("reason"),
        actor_id=g.current_user.id,
    )
    return jsonify({"success": True, "inventory": record.to_dict()})


@inventory_bp.delete("/<int:holder_id>/<int:gift_id>")
@require_auth
@require_role(ROLE_MANAGER)
def remove_route(holder_id: int, gift_id: int):
    record = inventory_service.remove_record(holder_id, gift_id, actor_id=g.current_user.id)
    return jsonify({"success": True, "removed": record.to_dict()})


@inventory_bp.post("/transfer")
@require_auth
@require_role(ROLE_MANAGER)
def transfer_route():
    payload = validate_payload(request.get_json(silent=True), TRANSFER_POLICY)
    source, target = inventory_service.transfer(
        payload["from_holder_id"],
        payload["to_holder_id"],
        payload["gift_id"],
        payload["quantity"],
        reason=payload.get("reason"),
        actor_id=g.current_user.id,
    )
    return jsonify({"success": True, "source": source.to_dict(), "target": target.to_dict()})
