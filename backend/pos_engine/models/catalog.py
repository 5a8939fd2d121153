from __future__ import annotations

from ..extensions import db
from pos_engine.time_utils import to_utc_z


# Customer tiers run 1 (list price) to 5 (best price)
MIN_TIER = 1
MAX_TIER = 5

TAX_EXEMPT_ALL = "all"


class Product(db.Model):
    """
    Catalog product as seen by the POS engine.

    READ-ONLY: The catalog admin owns these rows; the engine only reads them.

    PRICING:
    - price_cents is the base (tier 1 / walk-in) price
    - level2..level5_price_cents are optional tier prices; a missing tier
      falls back to the next lower defined tier, ultimately to price_cents
    """
    __tablename__ = "products"
    __table_args__ = (
        db.UniqueConstraint("sku", name="uq_products_sku"),
        db.UniqueConstraint("upc_code", name="uq_products_upc"),
        db.Index("ix_products_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sku = db.Column(db.String(64), nullable=False)
    upc_code = db.Column(db.String(64), nullable=True)
    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(64), nullable=True)

    # Authoritative storage in cents (frontend may only format for display)
    price_cents = db.Column(db.Integer, nullable=False)
    level2_price_cents = db.Column(db.Integer, nullable=True)
    level3_price_cents = db.Column(db.Integer, nullable=True)
    level4_price_cents = db.Column(db.Integer, nullable=True)
    level5_price_cents = db.Column(db.Integer, nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Product id={self.id} sku={self.sku!r} name={self.name!r}>"

    def tier_price_cents(self, tier: int) -> int | None:
        """Price defined exactly at `tier` (2-5), or None."""
        if tier < 2 or tier > MAX_TIER:
            return None
        return getattr(self, f"level{tier}_price_cents")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sku": self.sku,
            "upc_code": self.upc_code,
            "name": self.name,
            "category": self.category,
            "price_cents": self.price_cents,
            "level2_price_cents": self.level2_price_cents,
            "level3_price_cents": self.level3_price_cents,
            "level4_price_cents": self.level4_price_cents,
            "level5_price_cents": self.level5_price_cents,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }


class Customer(db.Model):
    """
    Wholesale customer account.

    READ-ONLY: Customer CRUD lives outside the POS engine.

    tax_exemptions is a list of category tags; the tag "all" makes the
    customer fully tax exempt regardless of tier.
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.UniqueConstraint("username", name="uq_customers_username"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(128), nullable=False)
    company = db.Column(db.String(255), nullable=True)

    tier = db.Column(db.Integer, nullable=False, default=MIN_TIER)
    tax_exemptions = db.Column(db.JSON, nullable=True)

    # Credit line summary (all amounts in cents)
    credit_limit_cents = db.Column(db.Integer, nullable=False, default=0)
    credit_balance_cents = db.Column(db.Integer, nullable=False, default=0)

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Customer id={self.id} username={self.username!r} tier={self.tier}>"

    @property
    def available_credit_cents(self) -> int:
        return max(0, (self.credit_limit_cents or 0) - (self.credit_balance_cents or 0))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "company": self.company,
            "tier": self.tier,
            "tax_exemptions": list(self.tax_exemptions or []),
            "credit_limit_cents": self.credit_limit_cents,
            "credit_balance_cents": self.credit_balance_cents,
            "available_credit_cents": self.available_credit_cents,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }
