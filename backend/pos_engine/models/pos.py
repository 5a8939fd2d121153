from __future__ import annotations

from ..extensions import db
from pos_engine.time_utils import to_utc_z


class PriceMemoryEntry(db.Model):
    """
    Per-customer, per-product price memory.

    WHY: Wholesale customers expect the price they were last given.
    A non-null remembered_price_cents overrides tier pricing the next time
    the product is added to a cart for this customer.

    WRITES: Transaction commit (source=transaction) or manual entry
    (source=manual). One row per (customer, product); later writes overwrite.
    """
    __tablename__ = "price_memory"
    __table_args__ = (
        db.UniqueConstraint("customer_id", "product_id", name="uq_price_memory_customer_product"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    remembered_price_cents = db.Column(db.Integer, nullable=True)
    last_charged_price_cents = db.Column(db.Integer, nullable=True)

    source = db.Column(db.String(16), nullable=False, default="transaction")  # transaction, manual
    last_transaction_id = db.Column(db.Integer, db.ForeignKey("pos_transactions.id"), nullable=True)

    # Purchase history (checkout only; manual entry does not count as a purchase)
    purchase_count = db.Column(db.Integer, nullable=False, default=0)
    last_purchased_at = db.Column(db.DateTime(timezone=True), nullable=True)

    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
    version_id = db.Column(db.Integer, nullable=False, default=1)

    product = db.relationship("Product")
    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "customer_id": self.customer_id,
            "product_id": self.product_id,
            "product_name": self.product.name if self.product else None,
            "remembered_price_cents": self.remembered_price_cents,
            "last_charged_price_cents": self.last_charged_price_cents,
            "source": self.source,
            "last_transaction_id": self.last_transaction_id,
            "purchase_count": self.purchase_count,
            "last_purchased_at": to_utc_z(self.last_purchased_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class PosTransaction(db.Model):
    """
    Committed POS sale.

    IMMUTABLE: Rows are written once by the checkout and never updated.
    id is the monotonic sequence; transaction_number is the printed form.
    """
    __tablename__ = "pos_transactions"
    __table_args__ = (
        db.UniqueConstraint("transaction_number", name="uq_pos_transactions_number"),
        db.Index("ix_pos_transactions_customer_created", "customer_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    transaction_number = db.Column(db.String(32), nullable=False)
    terminal_id = db.Column(db.String(64), nullable=True, index=True)

    # NULL = walk-in
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=True)

    subtotal_cents = db.Column(db.Integer, nullable=False)
    tax_cents = db.Column(db.Integer, nullable=False, default=0)
    total_cents = db.Column(db.Integer, nullable=False)
    # Effective rate applied, in basis points (may be fractional, e.g. "218.75")
    tax_rate_bps = db.Column(db.String(16), nullable=False)

    payment_method = db.Column(db.String(32), nullable=False)  # cash, card, check, account_credit
    cash_received_cents = db.Column(db.Integer, nullable=True)
    change_cents = db.Column(db.Integer, nullable=True)
    check_number = db.Column(db.String(64), nullable=True)

    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    customer = db.relationship("Customer")
    lines = db.relationship(
        "PosTransactionLine",
        backref="transaction",
        order_by="PosTransactionLine.position",
        lazy=True,
    )

    def to_dict(self, include_lines: bool = True) -> dict:
        data = {
            "id": self.id,
            "transaction_number": self.transaction_number,
            "terminal_id": self.terminal_id,
            "customer_id": self.customer_id,
            "subtotal_cents": self.subtotal_cents,
            "tax_cents": self.tax_cents,
            "total_cents": self.total_cents,
            "tax_rate_bps": self.tax_rate_bps,
            "payment_method": self.payment_method,
            "cash_received_cents": self.cash_received_cents,
            "change_cents": self.change_cents,
            "check_number": self.check_number,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
        }
        if include_lines:
            data["lines"] = [line.to_dict() for line in self.lines]
        return data


class PosTransactionLine(db.Model):
    """Finalized line item on a committed POS transaction."""
    __tablename__ = "pos_transaction_lines"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    transaction_id = db.Column(db.Integer, db.ForeignKey("pos_transactions.id"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    name = db.Column(db.String(255), nullable=False)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    original_price_cents = db.Column(db.Integer, nullable=False)
    base_price_cents = db.Column(db.Integer, nullable=False)
    has_price_override = db.Column(db.Boolean, nullable=False, default=False)
    line_total_cents = db.Column(db.Integer, nullable=False)

    def to_dict(self) -> dict:
        return {
            "position": self.position,
            "product_id": self.product_id,
            "name": self.name,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "original_price_cents": self.original_price_cents,
            "base_price_cents": self.base_price_cents,
            "has_price_override": self.has_price_override,
            "line_total_cents": self.line_total_cents,
        }


class HeldTransaction(db.Model):
    """
    Suspended cart.

    LIFECYCLE: Held -> Recalled. Recall deletes the row, so a held record
    can be recalled at most once; there is no un-recall or re-hold.
    items holds the line snapshot as JSON.
    """
    __tablename__ = "held_transactions"
    __table_args__ = (
        db.Index("ix_held_transactions_created", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    terminal_id = db.Column(db.String(64), nullable=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=True)

    items = db.Column(db.JSON, nullable=False)
    subtotal_cents = db.Column(db.Integer, nullable=False)
    tax_cents = db.Column(db.Integer, nullable=False, default=0)
    total_cents = db.Column(db.Integer, nullable=False)

    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "terminal_id": self.terminal_id,
            "customer_id": self.customer_id,
            "items": self.items,
            "item_count": len(self.items or []),
            "subtotal_cents": self.subtotal_cents,
            "tax_cents": self.tax_cents,
            "total_cents": self.total_cents,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
        }


class TransactionSequence(db.Model):
    """
    Atomic named sequences.

    WHY: Prevent race conditions when generating transaction numbers.
    """
    __tablename__ = "transaction_sequences"
    __table_args__ = (
        db.UniqueConstraint("name", name="uq_transaction_sequences_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(32), nullable=False)
    next_number = db.Column(db.Integer, nullable=False, default=1)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())


class PosAuditEvent(db.Model):
    """
    Append-only POS audit trail.

    IMMUTABLE: Records are never updated or deleted. Written inside the same
    DB transaction as the event they record.
    """
    __tablename__ = "pos_audit_events"
    __table_args__ = (
        db.Index("ix_pos_audit_events_entity", "entity_type", "entity_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    action = db.Column(db.String(64), nullable=False, index=True)  # transaction.committed, hold.created, ...
    entity_type = db.Column(db.String(64), nullable=False)
    entity_id = db.Column(db.String(64), nullable=False)
    terminal_id = db.Column(db.String(64), nullable=True)
    note = db.Column(db.String(255), nullable=True)
    payload = db.Column(db.JSON, nullable=True)
    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "terminal_id": self.terminal_id,
            "note": self.note,
            "payload": self.payload,
            "occurred_at": to_utc_z(self.occurred_at),
        }
