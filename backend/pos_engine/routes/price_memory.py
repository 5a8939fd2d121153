# Overview: Flask API routes for customer price memory.

from flask import Blueprint, request, jsonify, current_app

from ..errors import PosError
from ..services import catalog_service, pricing_service


price_memory_bp = Blueprint("price_memory", __name__, url_prefix="/api/pos/price-memory")


@price_memory_bp.get("/<int:customer_id>")
def get_price_memory_route(customer_id: int):
    try:
        catalog_service.get_customer(customer_id)
        entries = pricing_service.get_price_memory(customer_id)
        return jsonify({
            "customer_id": customer_id,
            "items": [e.to_dict() for e in entries],
            "count": len(entries),
        }), 200

    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to load price memory")
        return jsonify({"error": "Internal server error"}), 500


@price_memory_bp.put("/<int:customer_id>/<int:product_id>")
def set_price_memory_route(customer_id: int, product_id: int):
    """
    Set a customer's special price for a product.

    Request body:
    {
        "price_cents": 850,
        "terminal_id": "front-1"  (optional, for the audit trail)
    }
    """
    try:
        data = request.get_json() or {}
        entry = pricing_service.set_remembered_price(
            customer_id,
            product_id,
            data.get("price_cents"),
            terminal_id=data.get("terminal_id"),
        )
        return jsonify({"entry": entry.to_dict()}), 200

    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to set price memory")
        return jsonify({"error": "Internal server error"}), 500


@price_memory_bp.delete("/<int:customer_id>")
@price_memory_bp.delete("/<int:customer_id>/<int:product_id>")
def clear_price_memory_route(customer_id: int, product_id: int | None = None):
    try:
        removed = pricing_service.clear_price_memory(customer_id, product_id)
        return jsonify({"removed": removed}), 200

    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to clear price memory")
        return jsonify({"error": "Internal server error"}), 500
