# backend/pos_engine/routes/system.py
"""System health endpoint."""

import time
from flask import Blueprint, current_app, jsonify
from ..extensions import db
from ..models import Product, HeldTransaction, PosTransaction
from ..services import terminal_service
from pos_engine.time_utils import utcnow, to_utc_z

system_bp = Blueprint("system", __name__, url_prefix="/api/system")


def check_database_health() -> dict:
    """
    Check database connectivity and basic operations.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        product_count = db.session.query(Product).count()
        held_count = db.session.query(HeldTransaction).count()
        transaction_count = db.session.query(PosTransaction).count()

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "products": product_count,
                "held_transactions": held_count,
                "transactions": transaction_count,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


@system_bp.get("/health")
def health():
    database = check_database_health()
    healthy = database["status"] == "healthy"
    return jsonify({
        "status": "healthy" if healthy else "unhealthy",
        "checked_at": to_utc_z(utcnow()),
        "database": database,
        "active_terminals": len(terminal_service.active_terminals()),
    }), 200 if healthy else 503
