import time
import unittest
from decimal import Decimal

from storefront.db import (
    AccessLogRecord,
    DuplicateRecordError,
    InMemoryStoreClient,
    NewUser,
    ProductRecord,
    SqlStoreClient,
)


def product(product_id="mjtech-1", **fields):
    values = {
        "id": product_id,
        "title": "Cabo USB-C",
        "price": Decimal("29.90"),
        "link": "https://mjtech.net.br/cabo",
    }
    values.update(fields)
    return ProductRecord(**values)


def new_user(username="editor1", email="editor1@mjtech.com.br"):
    return NewUser(
        username=username,
        email=email,
        password_hash="$2b$04$notarealhash",
        full_name="Editor Um",
    )


class StoreClientContract:
    """Behaviour shared by every StoreClient implementation."""

    def make_store(self):
        raise NotImplementedError

    def setUp(self):
        self.store = self.make_store()

    def test_product_crud(self):
        self.store.insert_product(product())
        fetched = self.store.get_product("mjtech-1")
        self.assertEqual(fetched.title, "Cabo USB-C")
        self.assertEqual(fetched.price, Decimal("29.90"))
        self.assertEqual(fetched.available_quantity, 10)

        updated = self.store.update_product(
            "mjtech-1", {"price": Decimal("19.90"), "sold_quantity": 2}
        )
        self.assertEqual(updated.price, Decimal("19.90"))
        self.assertEqual(updated.sold_quantity, 2)

        self.assertTrue(self.store.delete_product("mjtech-1"))
        self.assertIsNone(self.store.get_product("mjtech-1"))
        self.assertFalse(self.store.delete_product("mjtech-1"))

    def test_duplicate_product_id(self):
        self.store.insert_product(product())
        with self.assertRaises(DuplicateRecordError):
            self.store.insert_product(product(title="Outro"))

    def test_update_rejects_unknown_fields(self):
        self.store.insert_product(product())
        with self.assertRaises(ValueError):
            self.store.update_product("mjtech-1", {"created_at": 0})
        self.assertIsNone(self.store.update_product("missing", {"title": "x"}))

    def test_active_listing_and_toggle(self):
        now = time.time()
        self.store.insert_product(product("old", created_at=now - 10))
        self.store.insert_product(product("new", created_at=now))
        self.store.insert_product(product("hidden", is_active=False, created_at=now - 5))

        self.assertEqual([p.id for p in self.store.list_active_products()], ["new", "old"])
        self.assertEqual(len(self.store.list_products()), 3)

        toggled = self.store.toggle_product("hidden")
        self.assertTrue(toggled.is_active)
        self.assertEqual(len(self.store.list_active_products()), 3)
        self.assertIsNone(self.store.toggle_product("missing"))

    def test_product_stats(self):
        self.store.insert_product(product("a", price=Decimal("10.00"), sold_quantity=3))
        self.store.insert_product(
            product("b", price=Decimal("5.00"), sold_quantity=2, is_active=False)
        )
        stats = self.store.product_stats()
        self.assertEqual(stats["total"], 2)
        self.assertEqual(stats["active"], 1)
        self.assertEqual(stats["inactive"], 1)
        self.assertEqual(stats["total_sold"], 5)
        self.assertAlmostEqual(float(stats["total_revenue"]), 40.0)

    def test_empty_stats(self):
        stats = self.store.product_stats()
        self.assertEqual(stats["total"], 0)
        self.assertEqual(float(stats["total_revenue"]), 0.0)

    def test_users(self):
        created = self.store.create_user(
            new_user(), audit=AccessLogRecord(action="user_created", success=True)
        )
        self.assertEqual(created.role, "editor")
        self.assertTrue(created.is_active)
        self.assertEqual(self.store.find_user_by_login("editor1@mjtech.com.br").id, created.id)
        self.assertIsNone(self.store.find_user_by_login("someone"))
        self.assertEqual(self.store.count_users(), 1)
        self.assertEqual(self.store.list_access_logs()[0].action, "user_created")

        with self.assertRaises(DuplicateRecordError):
            self.store.create_user(new_user(email="other@mjtech.com.br"))

        updated = self.store.update_user(
            created.id, {"failed_attempts": 3, "locked_until": 123.0}
        )
        self.assertEqual(updated.failed_attempts, 3)
        self.assertEqual(updated.locked_until, 123.0)
        with self.assertRaises(ValueError):
            self.store.update_user(created.id, {"username": "renamed"})
        self.assertIsNone(self.store.update_user(999, {"full_name": "x"}))

    def test_record_login_failure_counts_then_locks(self):
        user = self.store.create_user(new_user())
        now = time.time()

        def audit(record):
            return AccessLogRecord(
                action="login_failed",
                success=False,
                user_id=record.id,
                details=f"failed attempt {record.failed_attempts}",
            )

        for expected in (1, 2):
            updated = self.store.record_login_failure(
                user.id, max_attempts=3, lockout_seconds=900, now=now, audit=audit
            )
            self.assertEqual(updated.failed_attempts, expected)
            self.assertIsNone(updated.locked_until)

        locked = self.store.record_login_failure(
            user.id, max_attempts=3, lockout_seconds=900, now=now, audit=audit
        )
        self.assertEqual(locked.failed_attempts, 3)
        self.assertEqual(locked.locked_until, now + 900)
        self.assertEqual(self.store.list_access_logs(1)[0].details, "failed attempt 3")

        # While locked nothing is counted.
        self.assertIsNone(
            self.store.record_login_failure(
                user.id, max_attempts=3, lockout_seconds=900, now=now + 1
            )
        )
        self.assertEqual(self.store.get_user(user.id).failed_attempts, 3)
        self.assertEqual(len(self.store.list_access_logs()), 3)

    def test_record_login_failure_after_lock_expires(self):
        user = self.store.create_user(new_user())
        now = time.time()
        self.store.update_user(user.id, {"failed_attempts": 5, "locked_until": now - 1})

        updated = self.store.record_login_failure(
            user.id, max_attempts=5, lockout_seconds=900, now=now
        )
        self.assertEqual(updated.failed_attempts, 1)
        self.assertIsNone(updated.locked_until)
        self.assertIsNone(
            self.store.record_login_failure(
                999, max_attempts=5, lockout_seconds=900, now=now
            )
        )

    def test_duplicate_email_on_update(self):
        first = self.store.create_user(new_user())
        self.store.create_user(new_user("editor2", "editor2@mjtech.com.br"))
        with self.assertRaises(DuplicateRecordError):
            self.store.update_user(first.id, {"email": "editor2@mjtech.com.br"})

    def test_access_logs_newest_first(self):
        for action in ("login_failed", "login_success", "logout"):
            self.store.log_access(AccessLogRecord(action=action, success=True))
        logs = self.store.list_access_logs(limit=2)
        self.assertEqual([entry.action for entry in logs], ["logout", "login_success"])

    def test_settings(self):
        self.store.set_settings({"store_name": "MJ TECH"}, {"store_name": "Nome da loja"})
        self.store.set_settings({"store_name": "MJ TECH Campinas"})
        self.assertEqual(self.store.get_setting("store_name"), "MJ TECH Campinas")
        self.assertIsNone(self.store.get_setting("missing"))
        self.assertEqual(self.store.list_settings(), {"store_name": "MJ TECH Campinas"})

    def test_seed_is_idempotent(self):
        admin = NewUser(
            username="admin_mjtech",
            email="admin@mjtech.com.br",
            password_hash="$2b$04$notarealhash",
            full_name="Administrador",
            role="admin",
        )
        settings = [("store_name", "MJ TECH", "Nome da loja")]
        self.assertTrue(self.store.seed(admin, settings, [product()]))
        self.assertFalse(self.store.seed(admin, settings, [product("mjtech-2")]))
        self.assertEqual(self.store.count_users(), 1)
        self.assertEqual([p.id for p in self.store.list_products()], ["mjtech-1"])
        self.assertEqual(self.store.get_setting("store_name"), "MJ TECH")
        self.assertTrue(self.store.ping())


class InMemoryStoreClientTests(StoreClientContract, unittest.TestCase):
    def make_store(self):
        return InMemoryStoreClient()

    def test_reset(self):
        self.store.insert_product(product())
        self.store.reset()
        self.assertEqual(self.store.list_products(), [])

    def test_returns_copies(self):
        self.store.insert_product(product())
        fetched = self.store.get_product("mjtech-1")
        fetched.title = "changed"
        self.assertEqual(self.store.get_product("mjtech-1").title, "Cabo USB-C")


class SqlStoreClientTests(StoreClientContract, unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the SQL client logic.
    """

    def make_store(self):
        return SqlStoreClient("sqlite+pysqlite:///:memory:")

    def test_requires_url(self):
        with self.assertRaises(ValueError):
            SqlStoreClient("")


if __name__ == "__main__":
    unittest.main()
