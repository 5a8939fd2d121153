# Overview: Price resolution and the per-customer price memory store.

"""
Pricing Service

PRICE RESOLUTION (first add of a product to a cart):
1. Walk-in: base price.
2. Tier price: scan from the customer's tier down to tier 2; the first
   defined tier price wins, otherwise the base price.
3. Price memory: a remembered price for (customer, product) replaces the
   tier result entirely.

Resolution is a pure read. The caller surfaces the "price memory applied"
notice from PriceResolution.memory_applied.

PRICE MEMORY STORE:
Keyed by (customer_id, product_id), one row per pair. Written by checkout
(inside the checkout's DB transaction) and by manual entry; read here.
Checkout also counts purchases per pair (purchase_count, last_purchased_at);
manual entry leaves the counters alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..extensions import db
from ..errors import ValidationError
from ..models import PriceMemoryEntry
from pos_engine.time_utils import utcnow
from .audit_service import append_audit_event
from .catalog_service import get_customer, get_product
from .concurrency import run_with_retry

logger = logging.getLogger(__name__)

SOURCE_TRANSACTION = "transaction"
SOURCE_MANUAL = "manual"


@dataclass(frozen=True)
class PriceResolution:
    unit_price_cents: int
    tier_price_cents: int
    base_price_cents: int
    memory_applied: bool = False


def resolve_tier_price(product, tier: int | None) -> int:
    """Best defined tier price at or below `tier`, falling back to base."""
    if tier:
        for level in range(min(int(tier), 5), 1, -1):
            price = product.tier_price_cents(level)
            if price is not None:
                return price
    return product.price_cents


def resolve_price(product, customer) -> PriceResolution:
    """
    Unit price for a product being added to a cart for `customer`.

    `customer` is anything with `id` and `tier` (ORM row or cart snapshot),
    or None for a walk-in.
    """
    base = product.price_cents
    if customer is None:
        return PriceResolution(unit_price_cents=base, tier_price_cents=base, base_price_cents=base)

    tier_price = resolve_tier_price(product, customer.tier)

    entry = get_memory_entry(customer.id, product.id)
    if entry is not None and entry.remembered_price_cents is not None:
        return PriceResolution(
            unit_price_cents=entry.remembered_price_cents,
            tier_price_cents=tier_price,
            base_price_cents=base,
            memory_applied=True,
        )

    return PriceResolution(unit_price_cents=tier_price, tier_price_cents=tier_price, base_price_cents=base)


# =============================================================================
# PRICE MEMORY STORE
# =============================================================================

def get_memory_entry(customer_id: int, product_id: int) -> PriceMemoryEntry | None:
    return (
        db.session.query(PriceMemoryEntry)
        .filter_by(customer_id=customer_id, product_id=product_id)
        .first()
    )


def get_price_memory(customer_id: int) -> list[PriceMemoryEntry]:
    return (
        db.session.query(PriceMemoryEntry)
        .filter_by(customer_id=customer_id)
        .order_by(PriceMemoryEntry.product_id.asc())
        .all()
    )


def _upsert_entry(customer_id: int, product_id: int) -> PriceMemoryEntry:
    entry = get_memory_entry(customer_id, product_id)
    if entry is None:
        entry = PriceMemoryEntry(customer_id=customer_id, product_id=product_id)
        db.session.add(entry)
    return entry


def record_transaction_prices(customer_id: int, transaction_id: int, lines) -> int:
    """
    Write back the prices charged on a committed transaction.

    Called inside the checkout transaction; does not commit. One write per
    distinct product: remembered price is the unit price when the line was
    overridden (a memory-priced line counts as overridden), otherwise cleared;
    last charged price is always refreshed and the purchase counter bumped.

    Returns the number of entries written.
    """
    by_product = {}
    for line in lines:
        by_product[line.product_id] = line

    now = utcnow()
    for product_id, line in by_product.items():
        entry = _upsert_entry(customer_id, product_id)
        entry.remembered_price_cents = line.unit_price_cents if line.has_price_override else None
        entry.last_charged_price_cents = line.unit_price_cents
        entry.source = SOURCE_TRANSACTION
        entry.last_transaction_id = transaction_id
        entry.purchase_count = (entry.purchase_count or 0) + 1
        entry.last_purchased_at = now

    db.session.flush()
    return len(by_product)


def set_remembered_price(
    customer_id: int,
    product_id: int,
    price_cents: int,
    terminal_id: str | None = None,
) -> PriceMemoryEntry:
    """Manually set a customer's special price for a product."""
    if price_cents is None or isinstance(price_cents, bool) or not isinstance(price_cents, int):
        raise ValidationError("price_cents must be an integer")
    if price_cents < 0:
        raise ValidationError("Price cannot be negative", details={"price_cents": price_cents})

    def _op():
        get_customer(customer_id)
        get_product(product_id)

        entry = _upsert_entry(customer_id, product_id)
        entry.remembered_price_cents = price_cents
        entry.source = SOURCE_MANUAL
        db.session.flush()

        append_audit_event(
            action="price_memory.set",
            entity_type="price_memory",
            entity_id=f"{customer_id}-{product_id}",
            terminal_id=terminal_id,
            payload={"price_cents": price_cents},
        )
        db.session.commit()
        return entry

    entry = run_with_retry(_op)
    logger.info("Price memory set for customer %s product %s", customer_id, product_id)
    return entry


def clear_price_memory(customer_id: int, product_id: int | None = None, terminal_id: str | None = None) -> int:
    """Delete one entry, or every entry for the customer. Returns rows removed."""
    def _op():
        get_customer(customer_id)

        query = db.session.query(PriceMemoryEntry).filter_by(customer_id=customer_id)
        if product_id is not None:
            query = query.filter_by(product_id=product_id)
        removed = query.delete(synchronize_session=False)

        if removed:
            append_audit_event(
                action="price_memory.cleared",
                entity_type="price_memory",
                entity_id=f"{customer_id}-{product_id}" if product_id is not None else str(customer_id),
                terminal_id=terminal_id,
                payload={"removed": removed},
            )
        db.session.commit()
        return removed

    return run_with_retry(_op)
