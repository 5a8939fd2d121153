# Overview: Tier-based tax exemption policy.

"""
Tax Policy

effective rate = base rate * (1 - exemption fraction for the customer's tier)

- Walk-in (no customer): full base rate
- taxExemptions contains "all": 0, whatever the tier
- Tier schedule is fixed: 1 -> 0%, 2 -> 50%, 3 -> 75%, 4 and 5 -> 100%

Rates are basis points as Decimal so partially exempt tiers keep their
fraction (875 bps at tier 3 is 218.75 bps). Tax is rounded half-up to
whole cents once, from the full subtotal; it is never patched incrementally.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from ..models.catalog import TAX_EXEMPT_ALL, MIN_TIER, MAX_TIER

EXEMPTION_FRACTIONS: dict[int, Decimal] = {
    1: Decimal("0"),
    2: Decimal("0.50"),
    3: Decimal("0.75"),
    4: Decimal("1"),
    5: Decimal("1"),
}

BPS_PER_UNIT = Decimal(10000)


def exemption_fraction(tier: int) -> Decimal:
    """Fraction of the base rate waived for `tier` (clamped to 1..5)."""
    tier = min(max(int(tier), MIN_TIER), MAX_TIER)
    return EXEMPTION_FRACTIONS[tier]


def is_fully_exempt(customer) -> bool:
    return bool(customer is not None and TAX_EXEMPT_ALL in (customer.tax_exemptions or ()))


def effective_rate_bps(customer, base_rate_bps: int | Decimal) -> Decimal:
    base = Decimal(base_rate_bps)
    if customer is None:
        return base
    if is_fully_exempt(customer):
        return Decimal(0)
    return base * (1 - exemption_fraction(customer.tier))


def compute_tax_cents(subtotal_cents: int, customer, base_rate_bps: int | Decimal) -> int:
    rate = effective_rate_bps(customer, base_rate_bps)
    tax = Decimal(subtotal_cents) * rate / BPS_PER_UNIT
    return int(tax.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def format_rate_bps(rate: Decimal) -> str:
    """Canonical text form for storage: "875", "437.5", "0"."""
    text = format(rate.normalize(), "f")
    return text if text != "-0" else "0"
