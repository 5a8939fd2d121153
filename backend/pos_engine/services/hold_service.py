# Overview: Hold/recall of carts; the persisted suspend/resume state machine.

"""
Hold / Recall

STATE MACHINE (per held record):
    Held --recall--> Recalled (terminal; the row is deleted)

- hold: snapshot the live cart into a held_transactions row, then clear
  the live cart. Requires a non-empty name and a non-empty cart.
- recall: compare-and-remove. The row is deleted with a guarded DELETE and
  only the caller whose DELETE removed it gets the snapshot; a concurrent
  or repeated recall sees NotFound. The destination cart is cleared before
  the snapshot is copied in.

The live cart is only touched after the DB commit succeeds, so a failed
hold or recall leaves the cart exactly as it was.
"""

from __future__ import annotations

import logging

from ..extensions import db
from ..errors import ConcurrencyConflict, NotFoundError, ValidationError
from ..models import HeldTransaction
from .audit_service import append_audit_event
from .cart_service import Cart, CustomerSnapshot
from .catalog_service import get_customer, get_product
from .concurrency import run_with_retry

logger = logging.getLogger(__name__)


def hold_cart(name: str, cart: Cart, notes: str | None = None) -> HeldTransaction:
    """Park the cart under `name` and clear it. Returns the held record."""
    label = (name or "").strip()
    if not label:
        raise ValidationError("Hold name is required")

    with cart.lock:
        if cart.is_empty:
            raise ValidationError("Cannot hold an empty cart")

        items = cart.snapshot_lines()
        totals = cart.recalculate()
        customer_id = cart.customer_id

        def _op():
            held = HeldTransaction(
                name=label,
                terminal_id=cart.terminal_id,
                customer_id=customer_id,
                items=items,
                subtotal_cents=totals.subtotal_cents,
                tax_cents=totals.tax_cents,
                total_cents=totals.total_cents,
                notes=notes,
            )
            db.session.add(held)
            db.session.flush()

            append_audit_event(
                action="hold.created",
                entity_type="held_transaction",
                entity_id=held.id,
                terminal_id=cart.terminal_id,
                note=f"Held transaction {label}",
                payload={"item_count": len(items), "total_cents": totals.total_cents},
            )
            db.session.commit()
            return held

        held = run_with_retry(_op)
        cart.clear()

    logger.info("Held transaction %s (%s) from terminal %s", held.id, label, cart.terminal_id)
    return held


def recall_held(held_id: int, cart: Cart) -> dict:
    """
    Restore a held record into `cart` and delete the record.

    Returns the snapshot as it was held. Raises NotFoundError when the record
    does not exist or was already recalled (including by a concurrent caller),
    or when a product/customer in the snapshot no longer exists; in every
    failure case the record and the cart are left untouched.
    """
    with cart.lock:
        def _op():
            held = db.session.get(HeldTransaction, held_id)
            if held is None:
                raise NotFoundError("Held transaction not found", details={"held_transaction_id": held_id})

            snapshot = held.to_dict()
            for item in snapshot["items"]:
                get_product(item["product_id"])
            customer = None
            if held.customer_id is not None:
                customer = CustomerSnapshot.from_model(get_customer(held.customer_id))

            removed = (
                db.session.query(HeldTransaction)
                .filter_by(id=held_id)
                .delete(synchronize_session=False)
            )
            if removed != 1:
                raise ConcurrencyConflict(
                    "Held transaction not found",
                    details={"held_transaction_id": held_id},
                )

            append_audit_event(
                action="hold.recalled",
                entity_type="held_transaction",
                entity_id=held_id,
                terminal_id=cart.terminal_id,
                note=f"Recalled held transaction {snapshot['name']}",
            )
            db.session.commit()
            return snapshot, customer

        snapshot, customer = run_with_retry(_op)
        cart.load(snapshot["items"], customer)

    logger.info("Recalled held transaction %s into terminal %s", held_id, cart.terminal_id)
    return snapshot


def list_held() -> list[HeldTransaction]:
    """Currently held (not yet recalled) records, newest first."""
    return (
        db.session.query(HeldTransaction)
        .order_by(HeldTransaction.created_at.desc(), HeldTransaction.id.desc())
        .all()
    )


def get_held(held_id: int) -> HeldTransaction:
    held = db.session.get(HeldTransaction, held_id)
    if held is None:
        raise NotFoundError("Held transaction not found", details={"held_transaction_id": held_id})
    return held
