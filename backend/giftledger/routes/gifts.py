# backend/giftledger/routes/gifts.py
"""
Gift catalog and store list routes.

Listing is open to any authenticated holder; catalog changes are manager-only.
"""
from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth, require_role
from ..models import ROLE_MANAGER
from ..services import gift_service, query_service
from ..validation import BOOL, STR, PayloadPolicy, validate_payload


gifts_bp = Blueprint("gifts", __name__, url_prefix="/api")

CREATE_POLICY = PayloadPolicy(
    fields={"code": STR, "name": STR, "category": STR, "description": STR},
    required={"code", "name"},
)

UPDATE_POLICY = PayloadPolicy(
    fields={"name": STR, "category": STR, "description": STR, "is_active": BOOL},
)

STATUS_POLICY = PayloadPolicy(fields={"is_active": BOOL}, required={"is_active"})


@gifts_bp.get("/gifts")
@require_auth
def list_gifts_route():
    """Active gifts. Managers may pass ?include_inactive=1."""
    include_inactive = g.current_user.is_manager and request.args.get("include_inactive") in ("1", "true")
    return jsonify(query_service.list_gifts(include_inactive=include_inactive))


@gifts_bp.post("/gifts")
@require_auth
@require_role(ROLE_MANAGER)
def create_gift_route():
    payload = validate_payload(request.get_json(silent=True), CREATE_POLICY)
    gift = gift_service.create_gift(**payload)
    return jsonify({"success": True, "gift": gift.to_dict()}), 201


@gifts_bp.put("/gifts/<int:gift_id>")
@require_auth
@require_role(ROLE_MANAGER)
def update_gift_route(gift_id: int):
    payload = validate_payload(request.get_json(silent=True), UPDATE_POLICY)
    gift = gift_service.update_gift(gift_id, **payload)
    return jsonify({"success": True, "gift": gift.to_dict()})


@gifts_bp.patch("/gifts/<int:gift_id>/status")
@require_auth
@require_role(ROLE_MANAGER)
def set_gift_status_route(gift_id: int):
    """Deactivated gifts disappear from selection lists; their history stays."""
    payload = validate_payload(request.get_json(silent=True), STATUS_POLICY)
    gift = gift_service.set_gift_active(gift_id, payload["is_active"])
    return jsonify({"success": True, "gift": gift.to_dict()})


@gifts_bp.delete("/gifts/<int:gift_id>")
@require_auth
@require_role(ROLE_MANAGER)
def delete_gift_route(gift_id: int):
    """Cascade delete; the response reports how many dependents were removed."""
    summary = gift_service.delete_gift(gift_id, actor_id=g.current_user.id)
    return jsonify({"success": True, "removed": summary})


@gifts_bp.get("/stores")
@require_auth
def list_stores_route():
    return jsonify(query_service.list_stores())
