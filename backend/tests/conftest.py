"""
Pytest fixtures for POS engine backend tests.

Provides test database setup, catalog factories, and test client.
"""

import pytest
from pos_engine import create_app
from pos_engine.extensions import db
from pos_engine.models import Product, Customer
from pos_engine.services import terminal_service
from pos_engine.services.cart_service import Cart


BASE_TAX_RATE_BPS = 875


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'POS_TAX_RATE_BPS': BASE_TAX_RATE_BPS,
        'POS_BUSINESS_NAME': 'Test Wholesale',
        'POS_RECEIPT_HEADER': '',
        'POS_RECEIPT_FOOTER': 'See you soon',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database and terminal registry for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        terminal_service.reset_terminals()

        yield db.session

        # Cleanup after test
        db.session.rollback()
        terminal_service.reset_terminals()


@pytest.fixture(scope='function')
def make_product(db_session):
    """Factory: create an active product. Tier prices are keyword args level2..level5."""
    counter = {"n": 0}

    def _make(price_cents=1000, name=None, sku=None, upc_code=None, **tiers):
        counter["n"] += 1
        product = Product(
            sku=sku or f"SKU-{counter['n']:03d}",
            upc_code=upc_code,
            name=name or f"Product {counter['n']}",
            price_cents=price_cents,
            level2_price_cents=tiers.get("level2"),
            level3_price_cents=tiers.get("level3"),
            level4_price_cents=tiers.get("level4"),
            level5_price_cents=tiers.get("level5"),
        )
        db_session.add(product)
        db_session.commit()
        return product

    return _make


@pytest.fixture(scope='function')
def make_customer(db_session):
    """Factory: create an active customer."""
    counter = {"n": 0}

    def _make(tier=1, tax_exemptions=None, credit_limit_cents=0, credit_balance_cents=0, username=None):
        counter["n"] += 1
        customer = Customer(
            username=username or f"customer{counter['n']}",
            company=f"Company {counter['n']}",
            tier=tier,
            tax_exemptions=tax_exemptions or [],
            credit_limit_cents=credit_limit_cents,
            credit_balance_cents=credit_balance_cents,
        )
        db_session.add(customer)
        db_session.commit()
        return customer

    return _make


@pytest.fixture(scope='function')
def cart(db_session):
    """Empty cart on the default base tax rate."""
    return Cart(tax_rate_bps=BASE_TAX_RATE_BPS, terminal_id="T1")
