# Overview: Flask API routes for login, token verification and logout.

from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth
from ..extensions import sessions, store
from ..logging_config import get_logger
from ..services import auth_service
from ..validation import PayloadPolicy, STR, validate_payload


logger = get_logger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")

LOGIN_POLICY = PayloadPolicy(fields={"username": STR, "password": STR}, required={"username", "password"})


@auth_bp.post("/login")
def login_route():
    """
    Authenticate a holder and create a session token.

    The token must be sent as "Authorization: Bearer <token>" afterwards.
    """
    payload = validate_payload(request.get_json(silent=True), LOGIN_POLICY)

    holder = auth_service.authenticate(store.snapshot(), payload["username"], payload["password"])
    if holder is None:
        logger.warning("login failed", extra={"username": payload["username"]})
        return jsonify({"success": False, "error": "Invalid username or password"}), 401

    token = sessions.create_session(holder.id)
    logger.info("login succeeded", extra={"holder_id": holder.id})
    return jsonify({"success": True, "token": token, "user": holder.to_dict()})


@auth_bp.get("/verify")
@require_auth
def verify_route():
    return jsonify({"success": True, "user": g.current_user.to_dict()})


@auth_bp.post("/logout")
@require_auth
def logout_route():
    sessions.revoke_session(g.token)
    return jsonify({"success": True})
