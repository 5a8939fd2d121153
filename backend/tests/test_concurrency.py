# Overview: Threaded concurrency tests for recall exclusivity and transaction numbering.

"""
Concurrency tests for the POS engine.

These run against a temp-file SQLite database (not :memory:) so each thread
gets its own connection and real database locking applies.

Run with:
    python -m pytest tests/test_concurrency.py
"""
import os
import tempfile
import threading
import unittest

from pos_engine import create_app
from pos_engine.errors import NotFoundError
from pos_engine.extensions import db
from pos_engine.models import HeldTransaction, Product, PosTransaction
from pos_engine.services import catalog_service, hold_service, transaction_service
from pos_engine.services.cart_service import Cart


class ConcurrencyTests(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        db_path = os.path.join(self.tmpdir.name, "concurrency.db")
        self.app = create_app({
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path}",
        })

        with self.app.app_context():
            db.drop_all()
            db.create_all()

            product = Product(sku="CONCUR-1", name="Concurrent Product", price_cents=1000)
            db.session.add(product)
            db.session.commit()
            self.product_id = product.id

            cart = Cart(tax_rate_bps=875, terminal_id="HOLDER")
            cart.add_item(product, 2)
            self.held_id = hold_service.hold_cart("Race me", cart).id

    def tearDown(self):
        with self.app.app_context():
            db.session.remove()
            db.drop_all()
            db.session.remove()
            db.engine.dispose()
        self.tmpdir.cleanup()

    def test_double_recall_only_one_wins(self):
        results = []
        errors = []
        lock = threading.Lock()
        barrier = threading.Barrier(2)

        def worker(terminal_id):
            with self.app.app_context():
                cart = Cart(tax_rate_bps=875, terminal_id=terminal_id)
                try:
                    barrier.wait()
                    hold_service.recall_held(self.held_id, cart)
                    with lock:
                        results.append(("recalled", cart))
                except NotFoundError:
                    with lock:
                        results.append(("not_found", cart))
                except Exception as exc:
                    with lock:
                        errors.append(exc)
                finally:
                    db.session.remove()

        threads = [threading.Thread(target=worker, args=(f"T{i}",)) for i in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertFalse(errors)
        self.assertEqual(sorted(outcome for outcome, _ in results), ["not_found", "recalled"])

        for outcome, cart in results:
            if outcome == "recalled":
                self.assertEqual(cart.item_count, 2)
            else:
                self.assertTrue(cart.is_empty)

        with self.app.app_context():
            self.assertEqual(db.session.query(HeldTransaction).count(), 0)

    def test_transaction_numbers_unique_under_concurrency(self):
        created = []
        errors = []
        lock = threading.Lock()

        def worker(terminal_id):
            with self.app.app_context():
                try:
                    cart = Cart(tax_rate_bps=875, terminal_id=terminal_id)
                    cart.add_item(catalog_service.get_product(self.product_id))
                    txn = transaction_service.commit_cart(cart, "card")
                    with lock:
                        created.append(txn.transaction_number)
                except Exception as exc:
                    with lock:
                        errors.append(exc)
                finally:
                    db.session.remove()

        threads = [threading.Thread(target=worker, args=(f"T{i}",)) for i in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertFalse(errors)
        self.assertEqual(len(created), 5)
        self.assertEqual(len(created), len(set(created)))

        with self.app.app_context():
            self.assertEqual(db.session.query(PosTransaction).count(), 5)


if __name__ == "__main__":
    unittest.main(verbosity=2)
