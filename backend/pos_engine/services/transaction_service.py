# Overview: Checkout; turns a live cart into a committed POS transaction.

"""
Transaction Processor

commit(cart, payment_method, payment_detail):

PRECONDITIONS
- cart is not empty (ValidationError)
- payment detail matches the method: cash -> cash_received_cents,
  check -> check_number, card/account_credit -> nothing (ValidationError)
- account_credit needs a customer and total <= available credit
  (PolicyViolation carrying the shortfall)
- cash is advisory: cash received below the total still commits; the
  recorded change is max(0, cash - total)

EFFECT (one DB transaction)
- transaction row + line rows, numbered from an atomic sequence
- price memory write-back, one per distinct product, customer sales only
- audit event
The live cart is cleared only after the DB commit succeeds; on any failure
the session is rolled back and the cart is left exactly as it was.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from flask import current_app

from ..extensions import db
from ..errors import NotFoundError, PolicyViolation, ValidationError
from ..models import PosTransaction, PosTransactionLine
from .audit_service import append_audit_event
from .cart_service import Cart
from .catalog_service import get_customer
from .concurrency import run_with_retry
from .pricing_service import record_transaction_prices
from .sequence_service import format_transaction_number, next_sequence_number
from .tax_service import format_rate_bps

logger = logging.getLogger(__name__)


# =============================================================================
# PAYMENT METHODS (CONSTANTS)
# =============================================================================

PAYMENT_CASH = "cash"
PAYMENT_CARD = "card"
PAYMENT_CHECK = "check"
PAYMENT_ACCOUNT_CREDIT = "account_credit"

VALID_PAYMENT_METHODS = [
    PAYMENT_CASH,
    PAYMENT_CARD,
    PAYMENT_CHECK,
    PAYMENT_ACCOUNT_CREDIT,
]

TRANSACTION_SEQUENCE = "pos_transaction"


@dataclass(frozen=True)
class PaymentDetail:
    """Tender detail; which field is allowed depends on the payment method."""
    cash_received_cents: int | None = None
    check_number: str | None = None

    @classmethod
    def from_dict(cls, data: dict | None) -> "PaymentDetail":
        data = data or {}
        return cls(
            cash_received_cents=data.get("cash_received_cents"),
            check_number=data.get("check_number"),
        )


def change_due_cents(cash_received_cents: int, total_cents: int) -> int:
    return max(0, cash_received_cents - total_cents)


def _validate_payment(payment_method: str, detail: PaymentDetail) -> None:
    if payment_method not in VALID_PAYMENT_METHODS:
        raise ValidationError(
            f"Invalid payment method: {payment_method}. Must be one of {VALID_PAYMENT_METHODS}",
            details={"payment_method": payment_method},
        )

    cash = detail.cash_received_cents
    check_number = (detail.check_number or "").strip() or None

    if payment_method == PAYMENT_CASH:
        if cash is None or isinstance(cash, bool) or not isinstance(cash, int):
            raise ValidationError("cash_received_cents is required for cash payments")
        if cash < 0:
            raise ValidationError("cash_received_cents cannot be negative", details={"cash_received_cents": cash})
        if check_number:
            raise ValidationError("check_number is only valid for check payments")
        return

    if cash is not None:
        raise ValidationError("cash_received_cents is only valid for cash payments")

    if payment_method == PAYMENT_CHECK:
        if not check_number:
            raise ValidationError("Check number is required for check payments")
    elif check_number:
        raise ValidationError("check_number is only valid for check payments")


def commit_cart(
    cart: Cart,
    payment_method: str,
    payment_detail: PaymentDetail | None = None,
    notes: str | None = None,
) -> PosTransaction:
    """Validate, persist and clear the cart. See module docstring."""
    detail = payment_detail or PaymentDetail()

    with cart.lock:
        if cart.is_empty:
            raise ValidationError("Cannot commit an empty cart")

        _validate_payment(payment_method, detail)

        totals = cart.recalculate()
        customer = cart.customer

        if payment_method == PAYMENT_ACCOUNT_CREDIT:
            if customer is None:
                raise ValidationError("Account credit requires a customer")
            # Credit is read fresh; the cart's customer snapshot may predate the balance
            available = get_customer(customer.id).available_credit_cents
            if totals.total_cents > available:
                raise PolicyViolation(
                    "Insufficient account credit",
                    details={
                        "total_cents": totals.total_cents,
                        "available_credit_cents": available,
                        "shortfall_cents": totals.total_cents - available,
                    },
                )

        lines = list(cart.lines)
        prefix = current_app.config.get("POS_TRANSACTION_PREFIX", "TXN")

        cash_received = None
        change = None
        if payment_method == PAYMENT_CASH:
            cash_received = detail.cash_received_cents
            change = change_due_cents(cash_received, totals.total_cents)

        def _op():
            number = next_sequence_number(TRANSACTION_SEQUENCE)

            txn = PosTransaction(
                transaction_number=format_transaction_number(prefix, number),
                terminal_id=cart.terminal_id,
                customer_id=customer.id if customer else None,
                subtotal_cents=totals.subtotal_cents,
                tax_cents=totals.tax_cents,
                total_cents=totals.total_cents,
                tax_rate_bps=format_rate_bps(totals.tax_rate_bps),
                payment_method=payment_method,
                cash_received_cents=cash_received,
                change_cents=change,
                check_number=(detail.check_number or "").strip() or None,
                notes=notes,
            )
            db.session.add(txn)
            db.session.flush()  # Get transaction ID

            for position, line in enumerate(lines, start=1):
                db.session.add(PosTransactionLine(
                    transaction_id=txn.id,
                    position=position,
                    product_id=line.product_id,
                    name=line.name,
                    quantity=line.quantity,
                    unit_price_cents=line.unit_price_cents,
                    original_price_cents=line.original_price_cents,
                    base_price_cents=line.base_price_cents,
                    has_price_override=line.has_price_override,
                    line_total_cents=line.line_total_cents,
                ))

            written = 0
            if customer is not None:
                written = record_transaction_prices(customer.id, txn.id, lines)

            append_audit_event(
                action="transaction.committed",
                entity_type="pos_transaction",
                entity_id=txn.id,
                terminal_id=cart.terminal_id,
                note=f"Processed transaction {txn.transaction_number}",
                payload={
                    "total_cents": totals.total_cents,
                    "payment_method": payment_method,
                    "price_memory_written": written,
                },
            )

            db.session.commit()
            return txn, written

        txn, written = run_with_retry(_op)
        cart.clear()

    logger.info(
        "Committed %s total=%s method=%s memory_writes=%s",
        txn.transaction_number, txn.total_cents, payment_method, written,
    )
    return txn


def get_transaction(transaction_id: int) -> PosTransaction:
    txn = db.session.get(PosTransaction, transaction_id)
    if txn is None:
        raise NotFoundError("Transaction not found", details={"transaction_id": transaction_id})
    return txn


def list_transactions(
    customer_id: int | None = None,
    since: datetime | None = None,
    limit: int = 50,
) -> list[PosTransaction]:
    """Newest first; customer_id narrows to one customer's purchase history."""
    query = db.session.query(PosTransaction)
    if customer_id is not None:
        query = query.filter(PosTransaction.customer_id == customer_id)
    if since is not None:
        query = query.filter(PosTransaction.created_at >= since)
    return (
        query.order_by(PosTransaction.id.desc())
        .limit(max(1, min(limit, 500)))
        .all()
    )
