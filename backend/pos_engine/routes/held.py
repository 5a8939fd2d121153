# Overview: Flask API routes for held (suspended) transactions.

from flask import Blueprint, request, jsonify, current_app

from ..errors import PosError, ValidationError
from ..services import hold_service, terminal_service


held_bp = Blueprint("held", __name__, url_prefix="/api/pos/held-transactions")


@held_bp.get("")
@held_bp.get("/")
def list_held_route():
    """Held transactions that have not been recalled, newest first."""
    try:
        held = hold_service.list_held()
        return jsonify({"items": [h.to_dict() for h in held], "count": len(held)}), 200

    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to list held transactions")
        return jsonify({"error": "Internal server error"}), 500


@held_bp.get("/<int:held_id>")
def get_held_route(held_id: int):
    """One held transaction with its item snapshot, without recalling it."""
    try:
        held = hold_service.get_held(held_id)
        return jsonify({"held_transaction": held.to_dict()}), 200

    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to load held transaction")
        return jsonify({"error": "Internal server error"}), 500


@held_bp.post("/<int:held_id>/recall")
def recall_held_route(held_id: int):
    """
    Recall a held transaction into a terminal's cart.

    The terminal's current cart is replaced. A held transaction can be
    recalled once; a second (or concurrent) recall gets 404.

    Request body:
    {
        "terminal_id": "front-1"
    }
    """
    try:
        data = request.get_json() or {}
        terminal_id = data.get("terminal_id")
        if not terminal_id:
            raise ValidationError("terminal_id required")

        # Unknown ids must not register a cart for the terminal
        hold_service.get_held(held_id)
        cart = terminal_service.get_cart(terminal_id)
        snapshot = hold_service.recall_held(held_id, cart)

        current_app.logger.info("Terminal %s recalled held transaction %s", terminal_id, held_id)
        return jsonify({"held_transaction": snapshot, "cart": cart.to_dict()}), 200

    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to recall held transaction")
        return jsonify({"error": "Internal server error"}), 500
