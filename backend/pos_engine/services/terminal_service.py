# Overview: Registry of live carts, one per terminal session.

"""
Terminal Sessions

Live carts are process-local and keyed by terminal id. A terminal gets a
registered cart the first time something is written to it (add item,
attach customer, recall); reads never register one. A registered cart
survives until the process restarts.
Held carts are the only cart state that is persisted.
"""

from __future__ import annotations

import threading

from flask import current_app

from .cart_service import Cart, CustomerSnapshot
from .catalog_service import get_customer

_carts: dict[str, Cart] = {}
_registry_lock = threading.Lock()


def get_cart(terminal_id: str, tax_rate_bps: int | None = None) -> Cart:
    """Return the terminal's live cart, creating an empty one on first use."""
    with _registry_lock:
        cart = _carts.get(terminal_id)
        if cart is None:
            if tax_rate_bps is None:
                tax_rate_bps = current_app.config["POS_TAX_RATE_BPS"]
            cart = Cart(tax_rate_bps=tax_rate_bps, terminal_id=terminal_id)
            _carts[terminal_id] = cart
        return cart


def find_cart(terminal_id: str) -> Cart | None:
    """The terminal's registered cart, or None if it has never been written to."""
    with _registry_lock:
        return _carts.get(terminal_id)


def view_cart(terminal_id: str) -> Cart:
    """
    The registered cart, or a throwaway empty one that is NOT registered.

    For reads and for operations that only ever act on existing contents
    (edit or remove a line, clear, checkout, hold).
    """
    cart = find_cart(terminal_id)
    if cart is None:
        cart = Cart(tax_rate_bps=current_app.config["POS_TAX_RATE_BPS"], terminal_id=terminal_id)
    return cart


def active_terminals() -> list[str]:
    with _registry_lock:
        return sorted(_carts)


def reset_terminals() -> None:
    """Forget every live cart (tests and process shutdown)."""
    with _registry_lock:
        _carts.clear()


def attach_customer(terminal_id: str, customer_id: int | None) -> Cart:
    """
    Attach a customer by id to the terminal's cart (None detaches back to walk-in).

    The customer is resolved first, so an unknown id registers nothing.
    """
    if customer_id is None:
        cart = view_cart(terminal_id)
        cart.attach_customer(None)
        return cart

    customer = CustomerSnapshot.from_model(get_customer(customer_id))
    cart = get_cart(terminal_id)
    cart.attach_customer(customer)
    return cart
