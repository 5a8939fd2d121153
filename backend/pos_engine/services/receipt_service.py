# Overview: Plain-text receipt rendering for committed transactions.

from __future__ import annotations

from flask import current_app

from ..models import PosTransaction
from pos_engine.time_utils import to_utc_z

RECEIPT_WIDTH = 40


def format_cents(cents: int | None) -> str:
    if cents is None:
        return "$0.00"
    sign = "-" if cents < 0 else ""
    cents = abs(cents)
    return f"{sign}${cents // 100:,}.{cents % 100:02d}"


def _row(label: str, value: str) -> str:
    gap = max(1, RECEIPT_WIDTH - len(label) - len(value))
    return f"{label}{' ' * gap}{value}"


def format_receipt(txn: PosTransaction) -> list[str]:
    """Render a committed transaction as fixed-width receipt lines."""
    config = current_app.config
    lines = [
        config.get("POS_BUSINESS_NAME", "").center(RECEIPT_WIDTH).rstrip(),
    ]
    header = config.get("POS_RECEIPT_HEADER")
    if header:
        lines.append(header.center(RECEIPT_WIDTH).rstrip())
    lines.append("-" * RECEIPT_WIDTH)
    lines.append(f"Transaction {txn.transaction_number}")
    lines.append(to_utc_z(txn.created_at) or "")
    if txn.customer is not None:
        lines.append(f"Customer: {txn.customer.company or txn.customer.username}")
    lines.append("-" * RECEIPT_WIDTH)

    for item in txn.lines:
        lines.append(item.name[:RECEIPT_WIDTH])
        detail = f"  {item.quantity} x {format_cents(item.unit_price_cents)}"
        if item.has_price_override:
            detail += " *"
        lines.append(_row(detail, format_cents(item.line_total_cents)))

    lines.append("-" * RECEIPT_WIDTH)
    lines.append(_row("Subtotal", format_cents(txn.subtotal_cents)))
    lines.append(_row("Tax", format_cents(txn.tax_cents)))
    lines.append(_row("TOTAL", format_cents(txn.total_cents)))

    if txn.payment_method == "cash":
        lines.append(_row("Cash", format_cents(txn.cash_received_cents)))
        lines.append(_row("Change", format_cents(txn.change_cents)))
    elif txn.payment_method == "check":
        lines.append(_row("Check", f"#{txn.check_number}"))
    else:
        lines.append(_row("Paid by", txn.payment_method.replace("_", " ").title()))

    if any(item.has_price_override for item in txn.lines):
        lines.append("* special price")

    footer = config.get("POS_RECEIPT_FOOTER")
    if footer:
        lines.append("")
        lines.append(footer.center(RECEIPT_WIDTH).rstrip())
    return lines
