# Overview: Flask API route for a holder's own ledger history.

from flask import Blueprint, g, jsonify, request

from ..decorators import require_auth
from ..services import query_service


transactions_bp = Blueprint("transactions", __name__, url_prefix="/api/transactions")


@transactions_bp.get("/my")
@require_auth
def my_transactions_route():
    """Newest first. Optional ?limit=N."""
    limit = request.args.get("limit", type=int)
    return jsonify(query_service.ledger_history(g.current_user.id, limit=limit))
