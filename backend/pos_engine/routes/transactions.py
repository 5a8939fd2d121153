# Overview: Flask API routes for committed POS transactions and receipts.

from flask import Blueprint, request, jsonify, current_app

from ..errors import PosError, ValidationError
from ..services import receipt_service, transaction_service
from pos_engine.time_utils import parse_iso_datetime


transactions_bp = Blueprint("transactions", __name__, url_prefix="/api/pos/transactions")


@transactions_bp.get("")
@transactions_bp.get("/")
def list_transactions_route():
    """
    Transaction history, newest first.

    Query params:
    - customer_id: one customer's purchase history
    - since: ISO-8601 lower bound on created_at
    - limit: default 50, max 500
    """
    try:
        since_raw = request.args.get("since")
        try:
            since = parse_iso_datetime(since_raw)
        except ValueError:
            raise ValidationError("since must be an ISO-8601 datetime", details={"since": since_raw})

        transactions = transaction_service.list_transactions(
            customer_id=request.args.get("customer_id", type=int),
            since=since,
            limit=request.args.get("limit", default=50, type=int),
        )
        return jsonify({
            "items": [t.to_dict(include_lines=False) for t in transactions],
            "count": len(transactions),
        }), 200

    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to list transactions")
        return jsonify({"error": "Internal server error"}), 500


@transactions_bp.get("/<int:transaction_id>")
def get_transaction_route(transaction_id: int):
    try:
        txn = transaction_service.get_transaction(transaction_id)
        return jsonify({"transaction": txn.to_dict()}), 200

    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to load transaction")
        return jsonify({"error": "Internal server error"}), 500


@transactions_bp.get("/<int:transaction_id>/receipt")
def get_receipt_route(transaction_id: int):
    """Receipt text for reprint; printing itself happens on the client."""
    try:
        txn = transaction_service.get_transaction(transaction_id)
        lines = receipt_service.format_receipt(txn)
        return jsonify({
            "transaction_number": txn.transaction_number,
            "lines": lines,
            "text": "\n".join(lines),
        }), 200

    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to render receipt")
        return jsonify({"error": "Internal server error"}), 500
