# Overview: Request and role decorators for API routes.

from functools import wraps

from flask import g, jsonify, request

from .extensions import sessions, store
from .logging_config import LogContext


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def require_auth(f):
    """
    Require a live session.

    Sets g.current_user (the Holder) and g.token. Returns 401 when the
    token is missing, expired, or belongs to a deleted or deactivated holder.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _bearer_token()
        if not token:
            return jsonify({"success": False, "error": "Authentication required"}), 401

        session = sessions.validate_session(token)
        if session is None:
            return jsonify({"success": False, "error": "Invalid or expired token"}), 401

        holder = store.snapshot().holder(session.holder_id)
        if holder is None or not holder.is_active:
            sessions.revoke_session(token)
            return jsonify({"success": False, "error": "Account is not active"}), 401

        g.current_user = holder
        g.token = token
        with LogContext.bind(actor_id=holder.id, request_path=request.path):
            return f(*args, **kwargs)

    return decorated_function


def require_role(*roles: str):
    """Require the authenticated holder to have one of the given roles."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not hasattr(g, "current_user"):
                return jsonify({"success": False, "error": "Authentication required"}), 401
            if g.current_user.role not in roles:
                return jsonify({
                    "success": False,
                    "error": "Permission denied",
                    "required_roles": list(roles),
                }), 403
            return f(*args, **kwargs)

        return decorated_function
    return decorator
