# Overview: Flask API routes for a terminal's live cart, checkout and hold.

# backend/pos_engine/routes/terminals.py
"""
Terminal Cart API Routes

DESIGN:
- Every terminal owns one live cart, registered on the first write
  (add item, attach customer); reads and edits of an unregistered
  terminal see an empty cart and register nothing
- Cart responses always carry freshly recomputed totals
- Checkout and hold consume the cart; on failure it is left untouched

ERRORS: {"error", "kind", "details"} with VALIDATION_ERROR (400),
NOT_FOUND (404) or POLICY_VIOLATION (409).
"""

from flask import Blueprint, request, jsonify, current_app

from ..errors import NotFoundError, PosError, ValidationError
from ..services import (
    catalog_service,
    hold_service,
    terminal_service,
    transaction_service,
)
from ..services.transaction_service import PaymentDetail


terminals_bp = Blueprint("terminals", __name__, url_prefix="/api/pos/terminals")


def _resolve_product(data: dict):
    """Find the product named by product_id, barcode or a free-text query."""
    quantity = data.get("quantity")
    if data.get("product_id") is not None:
        return catalog_service.get_product(data["product_id"]), quantity
    if data.get("barcode"):
        return catalog_service.lookup_product(data["barcode"]), quantity
    if data.get("query"):
        parsed_quantity, term = catalog_service.parse_quantity_query(data["query"])
        try:
            product = catalog_service.lookup_product(term)
        except NotFoundError:
            matches = catalog_service.search_products(term, limit=1)
            if not matches:
                raise
            product = matches[0]
        return product, quantity if quantity is not None else parsed_quantity
    raise ValidationError("product_id, barcode or query required")


# =============================================================================
# CART
# =============================================================================

@terminals_bp.get("/<terminal_id>/cart")
def get_cart_route(terminal_id: str):
    try:
        cart = terminal_service.view_cart(terminal_id)
        return jsonify({"cart": cart.to_dict()}), 200

    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to load cart")
        return jsonify({"error": "Internal server error"}), 500


@terminals_bp.put("/<terminal_id>/cart/customer")
def attach_customer_route(terminal_id: str):
    """
    Attach (or detach with null) the customer for the active transaction.

    Request body:
    {
        "customer_id": 12  (null for walk-in)
    }
    """
    try:
        data = request.get_json() or {}
        cart = terminal_service.attach_customer(terminal_id, data.get("customer_id"))
        return jsonify({"cart": cart.to_dict()}), 200

    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to attach customer")
        return jsonify({"error": "Internal server error"}), 500


@terminals_bp.post("/<terminal_id>/cart/items")
def add_item_route(terminal_id: str):
    """
    Add a product to the cart (merges into an existing line).

    Request body (one of product_id / barcode / query):
    {
        "product_id": 7,
        "barcode": "012345678905",
        "query": "5*cola",
        "quantity": 1
    }

    Returns the line, the cart, and price_memory_applied so the register
    can show the "remembered price" notice.
    """
    try:
        data = request.get_json() or {}
        product, quantity = _resolve_product(data)
        quantity = 1 if quantity is None else quantity
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError("Quantity must be an integer of at least 1", details={"quantity": quantity})

        cart = terminal_service.get_cart(terminal_id)
        line = cart.add_item(product, quantity)

        return jsonify({
            "line": line.to_dict(),
            "price_memory_applied": line.memory_applied,
            "cart": cart.to_dict(),
        }), 201

    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to add cart item")
        return jsonify({"error": "Internal server error"}), 500


@terminals_bp.patch("/<terminal_id>/cart/items/<int:line_id>")
def update_item_route(terminal_id: str, line_id: int):
    """
    Change a line's quantity and/or unit price.

    Request body:
    {
        "quantity": 3,            (0 or less removes the line)
        "unit_price_cents": 850   (manual price override, >= 0)
    }
    """
    try:
        data = request.get_json() or {}
        if "quantity" not in data and "unit_price_cents" not in data:
            raise ValidationError("quantity or unit_price_cents required")
        quantity = data.get("quantity")
        if "quantity" in data and (isinstance(quantity, bool) or not isinstance(quantity, int)):
            raise ValidationError("quantity must be an integer", details={"quantity": quantity})

        cart = terminal_service.view_cart(terminal_id)
        with cart.lock:
            # Validate the price first so a rejected price leaves quantity alone too
            if "unit_price_cents" in data:
                cart.set_unit_price(line_id, data["unit_price_cents"])
            if "quantity" in data:
                line = cart.set_quantity(line_id, quantity)
            else:
                line = cart.get_line(line_id)

        return jsonify({
            "line": line.to_dict() if line else None,
            "cart": cart.to_dict(),
        }), 200

    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update cart item")
        return jsonify({"error": "Internal server error"}), 500


@terminals_bp.delete("/<terminal_id>/cart/items/<int:line_id>")
def remove_item_route(terminal_id: str, line_id: int):
    try:
        cart = terminal_service.view_cart(terminal_id)
        cart.remove_item(line_id)
        return jsonify({"cart": cart.to_dict()}), 200

    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to remove cart item")
        return jsonify({"error": "Internal server error"}), 500


@terminals_bp.delete("/<terminal_id>/cart")
def clear_cart_route(terminal_id: str):
    try:
        cart = terminal_service.view_cart(terminal_id)
        cart.clear()
        return jsonify({"cart": cart.to_dict()}), 200

    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to clear cart")
        return jsonify({"error": "Internal server error"}), 500


# =============================================================================
# CHECKOUT / HOLD
# =============================================================================

@terminals_bp.post("/<terminal_id>/checkout")
def checkout_route(terminal_id: str):
    """
    Commit the terminal's cart as a transaction.

    Request body:
    {
        "payment_method": "cash",      (cash, card, check, account_credit)
        "cash_received_cents": 5000,   (cash only)
        "check_number": "1042",        (check only)
        "notes": "..."                 (optional)
    }

    Returns:
        201: Transaction created, cart cleared
        400: Empty cart or invalid payment detail
        409: Insufficient account credit (details.shortfall_cents)
    """
    try:
        data = request.get_json() or {}
        payment_method = data.get("payment_method")
        if not payment_method:
            raise ValidationError("payment_method required")

        cart = terminal_service.view_cart(terminal_id)
        txn = transaction_service.commit_cart(
            cart,
            payment_method,
            PaymentDetail.from_dict(data),
            notes=data.get("notes"),
        )

        current_app.logger.info("Terminal %s committed %s", terminal_id, txn.transaction_number)
        return jsonify({"transaction": txn.to_dict(), "cart": cart.to_dict()}), 201

    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to commit transaction")
        return jsonify({"error": "Internal server error"}), 500


@terminals_bp.post("/<terminal_id>/hold")
def hold_route(terminal_id: str):
    """
    Park the terminal's cart under a name and clear it.

    Request body:
    {
        "name": "Lunch break",
        "notes": "..."  (optional)
    }
    """
    try:
        data = request.get_json() or {}
        cart = terminal_service.view_cart(terminal_id)
        held = hold_service.hold_cart(data.get("name"), cart, notes=data.get("notes"))

        current_app.logger.info("Terminal %s held transaction %s", terminal_id, held.id)
        return jsonify({"held_transaction_id": held.id, "held_transaction": held.to_dict()}), 201

    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to hold transaction")
        return jsonify({"error": "Internal server error"}), 500
