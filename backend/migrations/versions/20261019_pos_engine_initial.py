"""POS engine initial schema

Revision ID: 20261019_pos_initial
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_pos_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("sku", sa.String(length=64), nullable=False),
        sa.Column("upc_code", sa.String(length=64), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=64), nullable=True),
        sa.Column("price_cents", sa.Integer(), nullable=False),
        sa.Column("level2_price_cents", sa.Integer(), nullable=True),
        sa.Column("level3_price_cents", sa.Integer(), nullable=True),
        sa.Column("level4_price_cents", sa.Integer(), nullable=True),
        sa.Column("level5_price_cents", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("sku", name="uq_products_sku"),
        sa.UniqueConstraint("upc_code", name="uq_products_upc"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_products_name", "products", ["name"], unique=False)

    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(length=128), nullable=False),
        sa.Column("company", sa.String(length=255), nullable=True),
        sa.Column("tier", sa.Integer(), nullable=False),
        sa.Column("tax_exemptions", sa.JSON(), nullable=True),
        sa.Column("credit_limit_cents", sa.Integer(), nullable=False),
        sa.Column("credit_balance_cents", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("username", name="uq_customers_username"),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "pos_transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("transaction_number", sa.String(length=32), nullable=False),
        sa.Column("terminal_id", sa.String(length=64), nullable=True),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customers.id"), nullable=True),
        sa.Column("subtotal_cents", sa.Integer(), nullable=False),
        sa.Column("tax_cents", sa.Integer(), nullable=False),
        sa.Column("total_cents", sa.Integer(), nullable=False),
        sa.Column("tax_rate_bps", sa.String(length=16), nullable=False),
        sa.Column("payment_method", sa.String(length=32), nullable=False),
        sa.Column("cash_received_cents", sa.Integer(), nullable=True),
        sa.Column("change_cents", sa.Integer(), nullable=True),
        sa.Column("check_number", sa.String(length=64), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("transaction_number", name="uq_pos_transactions_number"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_pos_transactions_terminal_id", "pos_transactions", ["terminal_id"], unique=False)
    op.create_index("ix_pos_transactions_created_at", "pos_transactions", ["created_at"], unique=False)
    op.create_index("ix_pos_transactions_customer_created", "pos_transactions", ["customer_id", "created_at"], unique=False)

    op.create_table(
        "pos_transaction_lines",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("transaction_id", sa.Integer(), sa.ForeignKey("pos_transactions.id"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price_cents", sa.Integer(), nullable=False),
        sa.Column("original_price_cents", sa.Integer(), nullable=False),
        sa.Column("base_price_cents", sa.Integer(), nullable=False),
        sa.Column("has_price_override", sa.Boolean(), nullable=False),
        sa.Column("line_total_cents", sa.Integer(), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_pos_transaction_lines_transaction_id", "pos_transaction_lines", ["transaction_id"], unique=False)

    op.create_table(
        "price_memory",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customers.id"), nullable=False),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("remembered_price_cents", sa.Integer(), nullable=True),
        sa.Column("last_charged_price_cents", sa.Integer(), nullable=True),
        sa.Column("source", sa.String(length=16), nullable=False),
        sa.Column("last_transaction_id", sa.Integer(), sa.ForeignKey("pos_transactions.id"), nullable=True),
        sa.Column("purchase_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("last_purchased_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("version_id", sa.Integer(), nullable=False),
        sa.UniqueConstraint("customer_id", "product_id", name="uq_price_memory_customer_product"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_price_memory_customer_id", "price_memory", ["customer_id"], unique=False)
    op.create_index("ix_price_memory_product_id", "price_memory", ["product_id"], unique=False)

    op.create_table(
        "held_transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("terminal_id", sa.String(length=64), nullable=True),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customers.id"), nullable=True),
        sa.Column("items", sa.JSON(), nullable=False),
        sa.Column("subtotal_cents", sa.Integer(), nullable=False),
        sa.Column("tax_cents", sa.Integer(), nullable=False),
        sa.Column("total_cents", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_held_transactions_created", "held_transactions", ["created_at"], unique=False)

    op.create_table(
        "transaction_sequences",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=32), nullable=False),
        sa.Column("next_number", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("name", name="uq_transaction_sequences_name"),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "pos_audit_events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("action", sa.String(length=64), nullable=False),
        sa.Column("entity_type", sa.String(length=64), nullable=False),
        sa.Column("entity_id", sa.String(length=64), nullable=False),
        sa.Column("terminal_id", sa.String(length=64), nullable=True),
        sa.Column("note", sa.String(length=255), nullable=True),
        sa.Column("payload", sa.JSON(), nullable=True),
        sa.Column("occurred_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_pos_audit_events_action", "pos_audit_events", ["action"], unique=False)
    op.create_index("ix_pos_audit_events_occurred_at", "pos_audit_events", ["occurred_at"], unique=False)
    op.create_index("ix_pos_audit_events_entity", "pos_audit_events", ["entity_type", "entity_id"], unique=False)


def downgrade():
    op.drop_table("pos_audit_events")
    op.drop_table("transaction_sequences")
    op.drop_table("held_transactions")
    op.drop_table("price_memory")
    op.drop_table("pos_transaction_lines")
    op.drop_table("pos_transactions")
    op.drop_table("customers")
    op.drop_table("products")
