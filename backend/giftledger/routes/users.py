# backend/giftledger/routes/users.py
"""
Holder administration routes (manager only).

Deleting a holder cascades per holder_service.delete_holder. Deactivating
or deleting a holder revokes their sessions.
"""
from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth, require_role
from ..exceptions import ValidationError
from ..extensions import sessions
from ..models import ROLE_MANAGER
from ..services import holder_service, query_service
from ..validation import BOOL, INT, STR, PayloadPolicy, validate_payload


users_bp = Blueprint("users", __name__, url_prefix="/api/users")

_HOLDER_FIELDS = {
    "username": STR,
    "password": STR,
    "full_name": STR,
    "employee_code": STR,
    "store_id": INT,
    "role": STR,
}

CREATE_POLICY = PayloadPolicy(
    fields=_HOLDER_FIELDS,
    required={"username", "password", "full_name", "employee_code"},
)

UPDATE_POLICY = PayloadPolicy(fields={**_HOLDER_FIELDS, "is_active": BOOL})

STATUS_POLICY = PayloadPolicy(fields={"is_active": BOOL}, required={"is_active"})


@users_bp.get("")
@require_auth
@require_role(ROLE_MANAGER)
def list_users_route():
    return jsonify(query_service.list_holders())


@users_bp.post("")
@require_auth
@require_role(ROLE_MANAGER)
def create_user_route():
    payload = validate_payload(request.get_json(silent=True), CREATE_POLICY)
    holder = holder_service.create_holder(
        bcrypt_rounds=current_app.config["BCRYPT_ROUNDS"],
        **payload,
    )
    return jsonify({"success": True, "user": holder.to_dict()}), 201


@users_bp.put("/<int:holder_id>")
@require_auth
@require_role(ROLE_MANAGER)
def update_user_route(holder_id: int):
    payload = validate_payload(request.get_json(silent=True), UPDATE_POLICY)
    if holder_id == g.current_user.id and payload.get("is_active") is False:
        raise ValidationError("Cannot deactivate your own account")
    holder = holder_service.update_holder(
        holder_id,
        bcrypt_rounds=current_app.config["BCRYPT_ROUNDS"],
        **payload,
    )
    if not holder.is_active:
        sessions.revoke_holder_sessions(holder_id)
    return jsonify({"success": True, "user": holder.to_dict()})


@users_bp.patch("/<int:holder_id>/status")
@require_auth
@require_role(ROLE_MANAGER)
def set_user_status_route(holder_id: int):
    payload = validate_payload(request.get_json(silent=True), STATUS_POLICY)
    if holder_id == g.current_user.id:
        raise ValidationError("Cannot change your own account status")
    holder = holder_service.set_holder_active(holder_id, payload["is_active"])
    if not holder.is_active:
        sessions.revoke_holder_sessions(holder_id)
    return jsonify({"success": True, "user": holder.to_dict()})


@users_bp.delete("/<int:holder_id>")
@require_auth
@require_role(ROLE_MANAGER)
def delete_user_route(holder_id: int):
    summary = holder_service.delete_holder(holder_id, actor_id=g.current_user.id)
    sessions.revoke_holder_sessions(holder_id)
    return jsonify({"success": True, "removed": summary})
