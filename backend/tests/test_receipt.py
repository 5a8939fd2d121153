# Overview: Pytest coverage for plain-text receipt rendering.

from pos_engine.services import receipt_service, transaction_service
from pos_engine.services.cart_service import CustomerSnapshot
from pos_engine.services.receipt_service import _row, format_cents
from pos_engine.services.transaction_service import PaymentDetail


def test_format_cents():
    assert format_cents(0) == "$0.00"
    assert format_cents(5) == "$0.05"
    assert format_cents(123456) == "$1,234.56"
    assert format_cents(-5) == "-$0.05"
    assert format_cents(None) == "$0.00"


def test_cash_receipt(cart, make_product):
    cart.add_item(make_product(price_cents=1000, name="Widget"), 3)
    txn = transaction_service.commit_cart(cart, "cash", PaymentDetail(cash_received_cents=5000))

    lines = receipt_service.format_receipt(txn)

    assert lines[0] == "Test Wholesale".center(40).rstrip()
    assert f"Transaction {txn.transaction_number}" in lines
    assert "Widget" in lines
    assert _row("  3 x $10.00", "$30.00") in lines
    assert _row("Subtotal", "$30.00") in lines
    assert _row("Tax", "$2.63") in lines
    assert _row("TOTAL", "$32.63") in lines
    assert _row("Cash", "$50.00") in lines
    assert _row("Change", "$17.37") in lines
    assert "* special price" not in lines
    assert lines[-1] == "See you soon".center(40).rstrip()
    assert all(len(line) <= 40 for line in lines)


def test_override_and_customer_marked(cart, make_product, make_customer):
    customer = make_customer(tier=4)
    cart.attach_customer(CustomerSnapshot.from_model(customer))
    line = cart.add_item(make_product(price_cents=1000, name="Widget"))
    cart.set_unit_price(line.line_id, 800)
    txn = transaction_service.commit_cart(cart, "check", PaymentDetail(check_number="1042"))

    lines = receipt_service.format_receipt(txn)

    assert f"Customer: {customer.company}" in lines
    assert _row("  1 x $8.00 *", "$8.00") in lines
    assert _row("Check", "#1042") in lines
    assert "* special price" in lines


def test_other_methods_name_the_tender(cart, make_product):
    cart.add_item(make_product())
    txn = transaction_service.commit_cart(cart, "card")
    assert _row("Paid by", "Card") in receipt_service.format_receipt(txn)
