# Overview: Pytest coverage for hold/recall of carts.

import pytest

from pos_engine.errors import NotFoundError, ValidationError
from pos_engine.models import HeldTransaction, PosAuditEvent, Product
from pos_engine.services import hold_service
from pos_engine.services.audit_service import list_audit_events
from pos_engine.services.cart_service import Cart, CustomerSnapshot


def _two_item_cart(cart, make_product, make_customer, tier=2):
    customer = CustomerSnapshot.from_model(make_customer(tier=tier))
    cart.attach_customer(customer)
    cart.add_item(make_product(price_cents=1000, name="Cola"), 2)
    cart.add_item(make_product(price_cents=450, name="Chips"), 3)
    return customer


class TestHold:
    def test_hold_persists_snapshot_and_clears_cart(self, db_session, cart, make_product, make_customer):
        customer = _two_item_cart(cart, make_product, make_customer)
        totals = cart.totals

        held = hold_service.hold_cart("Lunch break", cart, notes="back at 1")

        assert cart.is_empty
        assert cart.customer is None
        assert held.name == "Lunch break"
        assert held.customer_id == customer.id
        assert held.terminal_id == "T1"
        assert held.subtotal_cents == totals.subtotal_cents
        assert held.total_cents == totals.total_cents
        assert len(held.items) == 2
        assert db_session.query(PosAuditEvent).filter_by(action="hold.created").count() == 1

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_hold_requires_name(self, db_session, cart, make_product, name):
        cart.add_item(make_product())
        with pytest.raises(ValidationError):
            hold_service.hold_cart(name, cart)
        assert not cart.is_empty
        assert db_session.query(HeldTransaction).count() == 0

    def test_hold_rejects_empty_cart(self, db_session, cart):
        with pytest.raises(ValidationError):
            hold_service.hold_cart("Empty", cart)
        assert db_session.query(HeldTransaction).count() == 0

    def test_list_returns_only_held_records(self, cart, make_product):
        cart.add_item(make_product())
        first_id = hold_service.hold_cart("first", cart).id
        cart.add_item(make_product())
        second = hold_service.hold_cart("second", cart)

        hold_service.recall_held(first_id, Cart(tax_rate_bps=875))

        assert [h.id for h in hold_service.list_held()] == [second.id]


class TestRecall:
    def test_scenario_e_round_trip(self, cart, make_product, make_customer):
        """Hold a 2-item cart, recall it: items, subtotal and customer match."""
        customer = _two_item_cart(cart, make_product, make_customer)
        before_lines = [line.to_dict() for line in cart.lines]
        before_totals = cart.totals
        before_count = cart.item_count

        held_id = hold_service.hold_cart("Lunch break", cart).id
        assert cart.is_empty

        snapshot = hold_service.recall_held(held_id, cart)

        assert snapshot["name"] == "Lunch break"
        assert [line.to_dict() for line in cart.lines] == before_lines
        assert cart.item_count == before_count
        assert cart.totals == before_totals
        assert cart.customer == customer

        events = list_audit_events(entity_type="held_transaction", entity_id=held_id)
        assert [e.action for e in events] == ["hold.created", "hold.recalled"]

    def test_second_recall_is_not_found(self, db_session, cart, make_product):
        cart.add_item(make_product())
        held_id = hold_service.hold_cart("once", cart).id

        hold_service.recall_held(held_id, cart)
        other = Cart(tax_rate_bps=875)
        with pytest.raises(NotFoundError):
            hold_service.recall_held(held_id, other)

        assert other.is_empty
        assert db_session.query(HeldTransaction).count() == 0

    def test_recall_unknown_id(self, cart):
        with pytest.raises(NotFoundError):
            hold_service.recall_held(424242, cart)

    def test_recall_replaces_destination_cart(self, cart, make_product):
        cart.add_item(make_product(name="held item"))
        held = hold_service.hold_cart("parked", cart)

        cart.add_item(make_product(name="new sale"), 5)
        hold_service.recall_held(held.id, cart)

        assert [line.name for line in cart.lines] == ["held item"]

    def test_recall_with_missing_product_changes_nothing(self, db_session, cart, make_product):
        product = make_product(name="discontinued")
        cart.add_item(product)
        held = hold_service.hold_cart("parked", cart)

        db_session.get(Product, product.id).is_active = False
        db_session.commit()

        cart.add_item(make_product(name="in progress"))
        with pytest.raises(NotFoundError):
            hold_service.recall_held(held.id, cart)

        assert db_session.query(HeldTransaction).count() == 1
        assert [line.name for line in cart.lines] == ["in progress"]

    def test_snapshot_unaffected_by_later_cart_edits(self, db_session, cart, make_product):
        line = cart.add_item(make_product(price_cents=1000), 2)
        items = cart.snapshot_lines()
        held = hold_service.hold_cart("snap", cart)

        line.quantity = 99

        db_session.expire_all()
        assert hold_service.get_held(held.id).items == items
