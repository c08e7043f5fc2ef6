# backend/giftledger/routes/requests.py
"""
Gift request routes.

Holders submit and list their own requests; managers see the pending queue
and approve or reject.
"""
from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth, require_role
from ..exceptions import NotFound
from ..models import ROLE_MANAGER
from ..services import query_service, request_service
from ..validation import INT, STR, PayloadPolicy, validate_payload


requests_bp = Blueprint("requests", __name__, url_prefix="/api/requests")

SUBMIT_POLICY = PayloadPolicy(
    fields={
        "gift_id": INT,
        "request_type": STR,
        "requested_quantity": INT,
        "target_holder_id": INT,
        "purpose": STR,
    },
    required={"gift_id", "request_type", "requested_quantity"},
)

APPROVE_POLICY = PayloadPolicy(fields={"approved_quantity": INT})

REJECT_POLICY = PayloadPolicy(fields={"reason": STR})


@requests_bp.post("")
@require_auth
def submit_route():
    payload = validate_payload(request.get_json(silent=True), SUBMIT_POLICY)
    gift_request = request_service.submit(
        g.current_user.id,
        payload["gift_id"],
        payload["request_type"],
        payload["requested_quantity"],
        target_holder_id=payload.get("target_holder_id"),
        purpose=payload.get("purpose"),
    )
    return jsonify({"success": True, "request": gift_request.to_dict()}), 201


@requests_bp.get("/my")
@require_auth
def my_requests_route():
    return jsonify(query_service.my_requests(g.current_user.id))


@requests_bp.get("/pending")
@require_auth
@require_role(ROLE_MANAGER)
def pending_requests_route():
    return jsonify(query_service.pending_requests())


@requests_bp.get("/<int:request_id>")
@require_auth
def get_request_route(request_id: int):
    gift_request = request_service.get_request(request_id)
    if not g.current_user.is_manager and gift_request.requester_id != g.current_user.id:
        raise NotFound(f"Request {request_id} not found")
    return jsonify(gift_request.to_dict())


@requests_bp.put("/<int:request_id>/approve")
@require_auth
@require_role(ROLE_MANAGER)
def approve_route(request_id: int):
    """
    Body (optional): {"approved_quantity": int}

    Returns 400 with error=insufficient_balance when a transfer can no
    longer be covered; the request stays pending in that case.
    """
    payload = validate_payload(request.get_json(silent=True), APPROVE_POLICY)
    gift_request = request_service.approve(
        request_id,
        g.current_user.id,
        approved_quantity=payload.get("approved_quantity"),
    )
    return jsonify({"success": True, "request": gift_request.to_dict()})


@requests_bp.put("/<int:request_id>/reject")
@require_auth
@require_role(ROLE_MANAGER)
def reject_route(request_id: int):
    payload = validate_payload(request.get_json(silent=True), REJECT_POLICY)
    gift_request = request_service.reject(request_id, g.current_user.id, payload.get("reason"))
    return jsonify({"success": True, "request": gift_request.to_dict()})
