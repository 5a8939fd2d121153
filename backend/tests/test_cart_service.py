# Overview: Pytest coverage for the in-memory cart aggregate.

import pytest

from pos_engine.errors import NotFoundError, ValidationError
from pos_engine.services import pricing_service
from pos_engine.services.cart_service import Cart, CustomerSnapshot


class TestAddItem:
    def test_scenario_a_walk_in_totals(self, cart, make_product):
        """3 x $10.00, no customer, 8.75% -> $30.00 + $2.63 = $32.63."""
        product = make_product(price_cents=1000)
        cart.add_item(product, 3)

        assert cart.totals.subtotal_cents == 3000
        assert cart.totals.tax_cents == 263
        assert cart.totals.total_cents == 3263

    def test_scenario_b_tier_four_is_tax_exempt(self, cart, make_product, make_customer):
        product = make_product(price_cents=1000)
        cart.attach_customer(CustomerSnapshot.from_model(make_customer(tier=4)))
        cart.add_item(product, 3)

        assert cart.totals.subtotal_cents == 3000
        assert cart.totals.tax_cents == 0
        assert cart.totals.total_cents == 3000

    def test_scenario_c_price_memory_applied(self, cart, make_product, make_customer):
        product = make_product(price_cents=1000, level3=950)
        customer = make_customer(tier=3)
        pricing_service.set_remembered_price(customer.id, product.id, 850)

        cart.attach_customer(CustomerSnapshot.from_model(customer))
        line = cart.add_item(product)

        assert line.unit_price_cents == 850
        assert line.original_price_cents == 950
        assert line.has_price_override is True
        assert line.memory_applied is True

    def test_remembered_price_equal_to_tier_price_is_still_override(self, cart, make_product, make_customer):
        product = make_product(price_cents=1000, level2=850)
        customer = make_customer(tier=2)
        pricing_service.set_remembered_price(customer.id, product.id, 850)

        cart.attach_customer(CustomerSnapshot.from_model(customer))
        line = cart.add_item(product)

        assert line.unit_price_cents == 850
        assert line.original_price_cents == 850
        assert line.memory_applied is True
        assert line.has_price_override is True
        assert line.to_dict()["has_price_override"] is True

    def test_same_product_merges_into_one_line(self, cart, make_product):
        product = make_product(price_cents=500)
        first = cart.add_item(product, 2)
        second = cart.add_item(product, 3)

        assert first is second
        assert len(cart.lines) == 1
        assert cart.lines[0].quantity == 5
        assert cart.totals.subtotal_cents == 2500

    def test_merged_line_keeps_its_price(self, cart, make_product):
        product = make_product(price_cents=500)
        line = cart.add_item(product)
        cart.set_unit_price(line.line_id, 400)
        cart.add_item(product)

        assert line.unit_price_cents == 400
        assert line.quantity == 2

    def test_insertion_order_is_stable(self, cart, make_product):
        products = [make_product(name=n) for n in ("b", "a", "c")]
        for product in products:
            cart.add_item(product)
        assert [line.name for line in cart.lines] == ["b", "a", "c"]

    @pytest.mark.parametrize("quantity", [0, -1, "2", 1.5, True])
    def test_rejects_bad_quantity(self, cart, make_product, quantity):
        product = make_product()
        with pytest.raises(ValidationError):
            cart.add_item(product, quantity)
        assert cart.is_empty

    def test_custom_resolver(self, cart, make_product):
        product = make_product(price_cents=1000)
        resolver = lambda p, c: pricing_service.PriceResolution(  # noqa: E731
            unit_price_cents=1, tier_price_cents=1000, base_price_cents=1000,
        )
        line = cart.add_item(product, resolver=resolver)
        assert line.unit_price_cents == 1
        assert line.has_price_override is True


class TestMutations:
    def test_set_quantity_recomputes(self, cart, make_product):
        line = cart.add_item(make_product(price_cents=1000))
        cart.set_quantity(line.line_id, 4)
        assert cart.totals.subtotal_cents == 4000
        assert cart.totals.tax_cents == 350

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_set_quantity_non_positive_removes_line(self, cart, make_product, quantity):
        line = cart.add_item(make_product())
        assert cart.set_quantity(line.line_id, quantity) is None
        assert cart.is_empty
        assert cart.totals.total_cents == 0

    def test_set_unit_price_marks_override(self, cart, make_product):
        line = cart.add_item(make_product(price_cents=1000))
        cart.set_unit_price(line.line_id, 750)

        assert line.unit_price_cents == 750
        assert line.original_price_cents == 1000
        assert line.has_price_override is True
        assert cart.totals.subtotal_cents == 750

    def test_price_back_to_original_clears_override(self, cart, make_product):
        line = cart.add_item(make_product(price_cents=1000))
        cart.set_unit_price(line.line_id, 750)
        cart.set_unit_price(line.line_id, 1000)
        assert line.has_price_override is False

    def test_manual_price_replaces_remembered_price(self, cart, make_product, make_customer):
        product = make_product(price_cents=1000, level2=900)
        customer = make_customer(tier=2)
        pricing_service.set_remembered_price(customer.id, product.id, 800)
        cart.attach_customer(CustomerSnapshot.from_model(customer))
        line = cart.add_item(product)

        cart.set_unit_price(line.line_id, 900)

        assert line.memory_applied is False
        assert line.has_price_override is False

    def test_negative_price_is_rejected_and_price_kept(self, cart, make_product):
        line = cart.add_item(make_product(price_cents=1000))
        before = cart.totals

        with pytest.raises(ValidationError):
            cart.set_unit_price(line.line_id, -1)

        assert line.unit_price_cents == 1000
        assert cart.totals == before

    def test_zero_price_is_allowed(self, cart, make_product):
        line = cart.add_item(make_product(price_cents=1000))
        cart.set_unit_price(line.line_id, 0)
        assert cart.totals.total_cents == 0

    def test_unknown_line_raises_not_found(self, cart):
        with pytest.raises(NotFoundError):
            cart.set_quantity(99, 1)
        with pytest.raises(NotFoundError):
            cart.remove_item(99)

    def test_remove_item(self, cart, make_product):
        keep = cart.add_item(make_product(price_cents=100))
        drop = cart.add_item(make_product(price_cents=200))
        cart.remove_item(drop.line_id)
        assert [line.line_id for line in cart.lines] == [keep.line_id]
        assert cart.totals.subtotal_cents == 100

    def test_attach_customer_recomputes_tax_but_keeps_prices(self, cart, make_product, make_customer):
        line = cart.add_item(make_product(price_cents=1000, level4=800))
        cart.attach_customer(CustomerSnapshot.from_model(make_customer(tier=4)))

        assert line.unit_price_cents == 1000
        assert cart.totals.tax_cents == 0

    def test_clear_resets_everything(self, cart, make_product, make_customer):
        cart.attach_customer(CustomerSnapshot.from_model(make_customer()))
        cart.add_item(make_product())
        cart.clear()

        assert cart.is_empty
        assert cart.customer is None
        assert cart.totals.total_cents == 0
        assert cart.add_item(make_product()).line_id == 1

    def test_recalculate_is_idempotent(self, cart, make_product, make_customer):
        cart.attach_customer(CustomerSnapshot.from_model(make_customer(tier=3)))
        cart.add_item(make_product(price_cents=1234), 7)
        assert cart.recalculate() == cart.recalculate()


class TestSnapshots:
    def test_snapshot_is_deep_copy(self, cart, make_product):
        line = cart.add_item(make_product(price_cents=1000), 2)
        items = cart.snapshot_lines()

        cart.set_quantity(line.line_id, 9)
        cart.set_unit_price(line.line_id, 1)

        assert items[0]["quantity"] == 2
        assert items[0]["unit_price_cents"] == 1000

    def test_load_restores_lines_and_customer(self, make_product, make_customer):
        source = Cart(tax_rate_bps=875)
        customer = CustomerSnapshot.from_model(make_customer(tier=2))
        source.attach_customer(customer)
        source.add_item(make_product(price_cents=1000), 2)
        source.add_item(make_product(price_cents=250), 4)

        target = Cart(tax_rate_bps=875)
        target.add_item(make_product(price_cents=5))
        target.load(source.snapshot_lines(), customer)

        assert [line.to_dict() for line in target.lines] == [line.to_dict() for line in source.lines]
        assert target.customer == customer
        assert target.totals == source.totals
        assert target.add_item(make_product()).line_id == 3

    def test_to_dict_carries_totals(self, cart, make_product):
        cart.add_item(make_product(price_cents=1000), 3)
        data = cart.to_dict()

        assert data["item_count"] == 3
        assert data["subtotal_cents"] == 3000
        assert data["tax_rate_bps"] == "875"
        assert data["customer"] is None
        assert data["lines"][0]["line_total_cents"] == 3000
