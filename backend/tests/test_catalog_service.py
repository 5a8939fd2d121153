# Overview: Pytest coverage for catalog lookup, search and the quantity prefix.

import pytest

from pos_engine.errors import NotFoundError
from pos_engine.services import catalog_service


class TestParseQuantityQuery:
    @pytest.mark.parametrize("raw,expected", [
        ("5*cola", (5, "cola")),
        (" 12 * paper towels ", (12, "paper towels")),
        ("cola", (1, "cola")),
        ("0*cola", (1, "0*cola")),
        ("*cola", (1, "*cola")),
        ("5*", (1, "5*")),
        ("", (1, "")),
        (None, (1, "")),
    ])
    def test_parse(self, raw, expected):
        assert catalog_service.parse_quantity_query(raw) == expected


class TestLookup:
    def test_lookup_by_upc_then_sku(self, make_product):
        by_upc = make_product(sku="ABC", upc_code="012345678905")
        by_sku = make_product(sku="012")

        assert catalog_service.lookup_product("012345678905").id == by_upc.id
        assert catalog_service.lookup_product(" 012 ").id == by_sku.id

    def test_unknown_barcode(self, db_session):
        with pytest.raises(NotFoundError) as exc_info:
            catalog_service.lookup_product("nope")
        assert exc_info.value.kind == "NOT_FOUND"

    def test_inactive_product_not_sellable(self, db_session, make_product):
        product = make_product(sku="OLD")
        product.is_active = False
        db_session.commit()

        with pytest.raises(NotFoundError):
            catalog_service.lookup_product("OLD")
        with pytest.raises(NotFoundError):
            catalog_service.get_product(product.id)


class TestSearch:
    def test_search_name_and_sku_case_insensitive(self, make_product):
        make_product(name="Diet Cola", sku="BEV-1")
        make_product(name="Cola Classic", sku="BEV-2")
        make_product(name="Chips", sku="SNK-1")

        names = [p.name for p in catalog_service.search_products("COLA")]
        assert names == ["Cola Classic", "Diet Cola"]
        assert [p.sku for p in catalog_service.search_products("snk")] == ["SNK-1"]

    def test_search_limit_and_blank(self, make_product):
        for i in range(5):
            make_product(name=f"Item {i}")
        assert len(catalog_service.search_products("item", limit=2)) == 2
        assert catalog_service.search_products("   ") == []


class TestCustomers:
    def test_get_customer(self, make_customer):
        customer = make_customer(tier=3, credit_limit_cents=5000, credit_balance_cents=7000)
        found = catalog_service.get_customer(customer.id)
        assert found.tier == 3
        assert found.available_credit_cents == 0

    def test_unknown_customer(self, db_session):
        with pytest.raises(NotFoundError):
            catalog_service.get_customer(31337)
