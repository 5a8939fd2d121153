# Overview: In-memory cart aggregate for the active transaction on a terminal.

"""
Cart

One Cart per terminal session. The cart owns its line items and derived
totals; every mutator recomputes subtotal/tax/total before returning, so a
caller never sees a total that lags behind an edit.

LINE ITEMS:
- one line per product (adding the same product again bumps quantity)
- price resolved once, when the line is created
- original_price_cents is the catalog/tier price at add time and never changes
- has_price_override = priced from price memory, or unit price differs
  from original price
- line total = quantity * unit price, always derived

LOCKING: Mutations hold the cart's RLock. Checkout and hold take the same
lock for their whole duration so no edit interleaves with them.
"""

from __future__ import annotations

import copy
import threading
from dataclasses import dataclass, field
from decimal import Decimal

from ..errors import NotFoundError, ValidationError
from . import pricing_service, tax_service


@dataclass(frozen=True)
class CustomerSnapshot:
    """The parts of a customer the cart's pricing and tax rules read."""
    id: int
    tier: int
    tax_exemptions: tuple[str, ...] = ()
    available_credit_cents: int = 0
    username: str | None = None

    @classmethod
    def from_model(cls, customer) -> "CustomerSnapshot":
        return cls(
            id=customer.id,
            tier=customer.tier,
            tax_exemptions=tuple(customer.tax_exemptions or ()),
            available_credit_cents=customer.available_credit_cents,
            username=customer.username,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "tier": self.tier,
            "tax_exemptions": list(self.tax_exemptions),
            "available_credit_cents": self.available_credit_cents,
        }


@dataclass
class LineItem:
    line_id: int
    product_id: int
    name: str
    quantity: int
    unit_price_cents: int
    original_price_cents: int
    base_price_cents: int
    sku: str | None = None
    memory_applied: bool = False

    @property
    def has_price_override(self) -> bool:
        # A remembered price is a customer special even when it equals the tier price
        return self.memory_applied or self.unit_price_cents != self.original_price_cents

    @property
    def line_total_cents(self) -> int:
        return self.quantity * self.unit_price_cents

    def to_dict(self) -> dict:
        return {
            "line_id": self.line_id,
            "product_id": self.product_id,
            "sku": self.sku,
            "name": self.name,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "original_price_cents": self.original_price_cents,
            "base_price_cents": self.base_price_cents,
            "has_price_override": self.has_price_override,
            "memory_applied": self.memory_applied,
            "line_total_cents": self.line_total_cents,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LineItem":
        return cls(
            line_id=int(data["line_id"]),
            product_id=int(data["product_id"]),
            name=data["name"],
            quantity=int(data["quantity"]),
            unit_price_cents=int(data["unit_price_cents"]),
            original_price_cents=int(data["original_price_cents"]),
            base_price_cents=int(data["base_price_cents"]),
            sku=data.get("sku"),
            memory_applied=bool(data.get("memory_applied", False)),
        )


@dataclass(frozen=True)
class CartTotals:
    subtotal_cents: int = 0
    tax_cents: int = 0
    total_cents: int = 0
    tax_rate_bps: Decimal = Decimal(0)

    def to_dict(self) -> dict:
        return {
            "subtotal_cents": self.subtotal_cents,
            "tax_cents": self.tax_cents,
            "total_cents": self.total_cents,
            "tax_rate_bps": tax_service.format_rate_bps(self.tax_rate_bps),
        }


def _require_int(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer", details={name: value})
    return value


@dataclass
class Cart:
    tax_rate_bps: int
    terminal_id: str | None = None
    lines: list[LineItem] = field(default_factory=list)
    customer: CustomerSnapshot | None = None
    totals: CartTotals = field(default_factory=CartTotals)
    _next_line_id: int = field(default=1, repr=False)
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    def __post_init__(self):
        self._recalculate()

    # -------------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------------

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def customer_id(self) -> int | None:
        return self.customer.id if self.customer else None

    def _recalculate(self) -> CartTotals:
        subtotal = sum(line.line_total_cents for line in self.lines)
        rate = tax_service.effective_rate_bps(self.customer, self.tax_rate_bps)
        tax = tax_service.compute_tax_cents(subtotal, self.customer, self.tax_rate_bps)
        self.totals = CartTotals(
            subtotal_cents=subtotal,
            tax_cents=tax,
            total_cents=subtotal + tax,
            tax_rate_bps=rate,
        )
        return self.totals

    def recalculate(self) -> CartTotals:
        """Recompute totals from scratch (idempotent)."""
        with self.lock:
            return self._recalculate()

    def get_line(self, line_id: int) -> LineItem:
        for line in self.lines:
            if line.line_id == line_id:
                return line
        raise NotFoundError("Cart line not found", details={"line_id": line_id})

    def find_line_for_product(self, product_id: int) -> LineItem | None:
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def attach_customer(self, customer: CustomerSnapshot | None) -> None:
        """
        Set or detach the customer.

        Existing lines keep the prices they were added at; tax follows the
        new customer immediately.
        """
        with self.lock:
            self.customer = customer
            self._recalculate()

    def add_item(self, product, quantity: int = 1, resolver=None) -> LineItem:
        """
        Add `quantity` of `product`, merging into the product's existing line.

        A new line resolves its unit price through `resolver`
        (pricing_service.resolve_price by default); a merged line keeps its price.
        """
        quantity = _require_int(quantity, "quantity")
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1", details={"quantity": quantity})

        resolver = resolver or pricing_service.resolve_price
        with self.lock:
            existing = self.find_line_for_product(product.id)
            if existing is not None:
                existing.quantity += quantity
                self._recalculate()
                return existing

            resolution = resolver(product, self.customer)
            line = LineItem(
                line_id=self._next_line_id,
                product_id=product.id,
                sku=getattr(product, "sku", None),
                name=product.name,
                quantity=quantity,
                unit_price_cents=resolution.unit_price_cents,
                original_price_cents=resolution.tier_price_cents,
                base_price_cents=resolution.base_price_cents,
                memory_applied=resolution.memory_applied,
            )
            self._next_line_id += 1
            self.lines.append(line)
            self._recalculate()
            return line

    def set_quantity(self, line_id: int, quantity: int) -> LineItem | None:
        """Set a line's quantity; zero or less removes the line (returns None)."""
        quantity = _require_int(quantity, "quantity")
        with self.lock:
            line = self.get_line(line_id)
            if quantity <= 0:
                self._remove(line)
                return None
            line.quantity = quantity
            self._recalculate()
            return line

    def set_unit_price(self, line_id: int, price_cents: int) -> LineItem:
        """
        Manually override a line's unit price.

        Negative prices are rejected and the line keeps its current price.
        original_price_cents is never touched. A manual price replaces any
        remembered price, so the line is no longer memory-priced.
        """
        price_cents = _require_int(price_cents, "unit_price_cents")
        with self.lock:
            line = self.get_line(line_id)
            if price_cents < 0:
                raise ValidationError("Price cannot be negative", details={"unit_price_cents": price_cents})
            line.unit_price_cents = price_cents
            line.memory_applied = False
            self._recalculate()
            return line

    def remove_item(self, line_id: int) -> None:
        with self.lock:
            self._remove(self.get_line(line_id))

    def _remove(self, line: LineItem) -> None:
        self.lines.remove(line)
        self._recalculate()

    def clear(self) -> None:
        """Empty the cart and detach the customer."""
        with self.lock:
            self.lines = []
            self.customer = None
            self._next_line_id = 1
            self._recalculate()

    # -------------------------------------------------------------------------
    # Snapshots (hold/recall)
    # -------------------------------------------------------------------------

    def snapshot_lines(self) -> list[dict]:
        """Deep copy of the lines; later cart edits never reach the copy."""
        with self.lock:
            return copy.deepcopy([line.to_dict() for line in self.lines])

    def load(self, lines: list[dict], customer: CustomerSnapshot | None) -> None:
        """Replace the cart's contents with a snapshot; the cart is cleared first."""
        with self.lock:
            self.clear()
            restored = [LineItem.from_dict(data) for data in lines]
            self.lines = restored
            self.customer = customer
            self._next_line_id = max((line.line_id for line in restored), default=0) + 1
            self._recalculate()

    def to_dict(self) -> dict:
        with self.lock:
            return {
                "terminal_id": self.terminal_id,
                "customer": self.customer.to_dict() if self.customer else None,
                "lines": [line.to_dict() for line in self.lines],
                "item_count": self.item_count,
                **self.totals.to_dict(),
            }
