# backend/pos_engine/services/catalog_service.py
"""
Catalog adapter.

The product catalog and customer accounts are owned elsewhere; the POS
engine reads them through these functions only.
"""
from __future__ import annotations

import re

from sqlalchemy import func, or_

from ..extensions import db
from ..errors import NotFoundError
from ..models import Product, Customer

# "5*cola" -> quantity 5, term "cola"
QUANTITY_PREFIX_RE = re.compile(r"^\s*(\d+)\s*\*\s*(.+?)\s*$")


def lookup_product(barcode: str) -> Product:
    """Scan lookup: UPC first, then SKU. Inactive products are not sellable."""
    code = (barcode or "").strip()
    if not code:
        raise NotFoundError("Product not found", details={"barcode": barcode})

    product = (
        db.session.query(Product)
        .filter(Product.upc_code == code, Product.is_active.is_(True))
        .first()
    )
    if product is None:
        product = (
            db.session.query(Product)
            .filter(Product.sku == code, Product.is_active.is_(True))
            .first()
        )
    if product is None:
        raise NotFoundError("Product not found", details={"barcode": code})
    return product


def search_products(query: str, limit: int = 25) -> list[Product]:
    term = (query or "").strip()
    if not term:
        return []

    pattern = f"%{term.lower()}%"
    return (
        db.session.query(Product)
        .filter(Product.is_active.is_(True))
        .filter(
            or_(
                func.lower(Product.name).like(pattern),
                func.lower(Product.sku).like(pattern),
                Product.upc_code == term,
            )
        )
        .order_by(Product.name.asc(), Product.id.asc())
        .limit(limit)
        .all()
    )


def get_product(product_id: int) -> Product:
    product = db.session.get(Product, product_id)
    if product is None or not product.is_active:
        raise NotFoundError("Product not found", details={"product_id": product_id})
    return product


def get_customer(customer_id: int) -> Customer:
    customer = db.session.get(Customer, customer_id)
    if customer is None or not customer.is_active:
        raise NotFoundError("Customer not found", details={"customer_id": customer_id})
    return customer


def parse_quantity_query(raw: str) -> tuple[int, str]:
    """
    Split the register's "N*term" quantity multiplier from a search string.

    "5*cola" -> (5, "cola"); "cola" -> (1, "cola"). A zero multiplier is not
    a multiplier, so "0*cola" is searched literally.
    """
    text = (raw or "").strip()
    match = QUANTITY_PREFIX_RE.match(text)
    if match:
        quantity = int(match.group(1))
        if quantity > 0:
            return quantity, match.group(2)
    return 1, text
