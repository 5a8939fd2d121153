# Overview: Flask CLI command groups for bootstrap, demo data, and POS maintenance.

# backend/pos_engine/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# POS:
# - python -m flask pos seed-demo
#   Demo products with tier prices and one customer per tier (idempotent).
# - python -m flask pos held
#   List held transactions.
# - python -m flask pos clear-memory --customer-id 3 [--product-id 7]
#   Clear remembered prices for a customer.

import click
from flask.cli import with_appcontext

from .errors import NotFoundError
from .extensions import db
from .models import Product, Customer
from .services import hold_service, pricing_service


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database schema ready.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask pos seed-demo' for demo data.")


@click.group('pos')
def pos_group():
    """Point-of-sale data and maintenance commands."""


DEMO_PRODUCTS = [
    # sku, upc, name, category, base, level2, level3, level4, level5
    ("COLA-24", "049000000443", "Coca-Cola Bottles (20oz, 24ct)", "beverages", 3200, 3000, None, 2800, None),
    ("PAPER-125", "716165177227", "1.25 Rolling Paper (24 booklets)", "accessories", 4355, 4100, 3950, None, None),
    ("CHIPS-CS", "028400090896", "Potato Chips Case (50ct)", "snacks", 2499, None, None, None, 2199),
    ("WATER-35", "012000001291", "Spring Water (16.9oz, 35ct)", "beverages", 899, 850, 825, 800, 775),
]


@pos_group.command('seed-demo')
@with_appcontext
def seed_demo():
    """Create demo products and one customer per tier (idempotent)."""
    created = 0
    for sku, upc, name, category, base, l2, l3, l4, l5 in DEMO_PRODUCTS:
        if db.session.query(Product).filter_by(sku=sku).first():
            continue
        db.session.add(Product(
            sku=sku,
            upc_code=upc,
            name=name,
            category=category,
            price_cents=base,
            level2_price_cents=l2,
            level3_price_cents=l3,
            level4_price_cents=l4,
            level5_price_cents=l5,
        ))
        created += 1

    for tier in range(1, 6):
        username = f"tier{tier}_customer"
        if db.session.query(Customer).filter_by(username=username).first():
            continue
        db.session.add(Customer(
            username=username,
            company=f"Tier {tier} Wholesale",
            tier=tier,
            tax_exemptions=[],
            credit_limit_cents=100000 * tier,
        ))
        created += 1

    db.session.commit()
    click.echo(f"PASS Seeded {created} demo rows.")


@pos_group.command('held')
@with_appcontext
def list_held_cli():
    """List held transactions, newest first."""
    held = hold_service.list_held()
    if not held:
        click.echo("No held transactions.")
        return

    click.echo(f"{'ID':<6} {'Name':<24} {'Terminal':<12} {'Items':>5} {'Total':>10}  Created")
    click.echo("-" * 80)
    for h in held:
        click.echo(
            f"{h.id:<6} {h.name[:24]:<24} {(h.terminal_id or '-'):<12} "
            f"{len(h.items or []):>5} {h.total_cents / 100:>10.2f}  {h.created_at}"
        )


@pos_group.command('clear-memory')
@click.option('--customer-id', type=int, required=True, help='Customer ID')
@click.option('--product-id', type=int, help='Only this product (default: all products)')
@with_appcontext
def clear_memory_cli(customer_id, product_id):
    """Clear remembered prices for a customer."""
    try:
        removed = pricing_service.clear_price_memory(customer_id, product_id)
    except NotFoundError as e:
        click.echo(f"FAIL Error: {e.message}")
        return
    click.echo(f"PASS Removed {removed} price memory entr{'y' if removed == 1 else 'ies'}.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(pos_group)
