# backend/giftledger/routes/system.py
"""
System health endpoint.

Reports whether the dataset is readable and whether balances agree with
the ledger.
"""
import time

from flask import Blueprint, jsonify

from ..exceptions import StorageError
from ..extensions import store
from ..services import inventory_service
from ..time_utils import utcnow, to_utc_z


system_bp = Blueprint("system", __name__)


@system_bp.get("/api/health")
def health_route():
    start_time = time.time()
    try:
        data = store.snapshot()
    except StorageError as e:
        return jsonify({"status": "unhealthy", "error": str(e), "timestamp": to_utc_z(utcnow())}), 503

    mismatches = inventory_service.reconcile(data)
    return jsonify({
        "status": "healthy" if not mismatches else "degraded",
        "timestamp": to_utc_z(utcnow()),
        "latency_ms": round((time.time() - start_time) * 1000, 2),
        "details": {
            "holders": len(data.holders),
            "gifts": len(data.gifts),
            "inventory_records": len(data.inventory),
            "pending_requests": sum(1 for r in data.requests if r.is_pending),
            "ledger_entries": len(data.ledger),
            "ledger_mismatches": len(mismatches),
        },
    })
