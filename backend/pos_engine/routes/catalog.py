# Overview: Flask API routes for product lookup and search at the register.

from flask import Blueprint, request, jsonify, current_app

from ..errors import PosError
from ..services import catalog_service


catalog_bp = Blueprint("catalog", __name__, url_prefix="/api/pos/products")


@catalog_bp.get("/lookup")
def lookup_product_route():
    """
    Scan lookup by barcode (UPC, then SKU).

    Query params:
    - barcode: scanned code (required)
    """
    barcode = request.args.get("barcode")
    if not barcode:
        return jsonify({"error": "barcode required", "kind": "VALIDATION_ERROR", "details": {}}), 400

    try:
        product = catalog_service.lookup_product(barcode)
        return jsonify({"product": product.to_dict()}), 200

    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to look up product")
        return jsonify({"error": "Internal server error"}), 500


@catalog_bp.get("/search")
def search_products_route():
    """
    Search products by name/SKU/UPC.

    The register's "N*term" convention is honoured here: "5*cola" searches
    for "cola" and echoes quantity=5 for the add-to-cart call that follows.
    """
    try:
        quantity, term = catalog_service.parse_quantity_query(request.args.get("q", ""))
        limit = request.args.get("limit", type=int) or current_app.config["POS_SEARCH_LIMIT"]
        products = catalog_service.search_products(term, limit=limit)
        return jsonify({
            "query": term,
            "quantity": quantity,
            "items": [p.to_dict() for p in products],
            "count": len(products),
        }), 200

    except PosError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to search products")
        return jsonify({"error": "Internal server error"}), 500
