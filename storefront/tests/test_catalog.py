import unittest
from decimal import Decimal
from unittest.mock import MagicMock

from storefront.cache import ProductCache
from storefront.catalog import CatalogService, build_product, clean_changes
from storefront.config import Settings
from storefront.db import InMemoryStoreClient
from storefront.errors import Conflict, NotFound, ValidationFailed
from storefront.seed import seed_defaults


class BuildProductTests(unittest.TestCase):
    def test_defaults(self):
        product = build_product(
            {"title": " Cabo ", "price": "29,90", "link": "https://mjtech.net.br/cabo"}
        )
        self.assertTrue(product.id.startswith("mjtech-"))
        self.assertEqual(product.title, "Cabo")
        self.assertEqual(product.price, Decimal("29.90"))
        self.assertEqual(product.condition, "Novo")
        self.assertEqual(product.category, "TECNOLOGIA")
        self.assertEqual(product.available_quantity, 10)
        self.assertEqual(product.sold_quantity, 0)
        self.assertIsNone(product.discount)
        self.assertTrue(product.is_active)

    def test_explicit_discount_wins(self):
        product = build_product(
            {
                "title": "Cabo",
                "price": 10,
                "old_price": 20,
                "discount": "PROMO",
                "link": "https://x",
            }
        )
        self.assertEqual(product.discount, "PROMO")

    def test_rejects_bad_values(self):
        base = {"title": "Cabo", "price": 10, "link": "https://x"}
        for changes in (
            {"price": -1},
            {"price": "1e30"},
            {"price": 100000000},
            {"price": "dez"},
            {"title": "   "},
            {"old_price": 0},
            {"available_quantity": -1},
            {"condition": "Seminovo"},
        ):
            with self.subTest(changes=changes):
                with self.assertRaises(ValidationFailed):
                    build_product(dict(base, **changes))


class CleanChangesTests(unittest.TestCase):
    def setUp(self):
        self.current = build_product(
            {"title": "Cabo", "price": 80, "old_price": 100, "link": "https://x"}
        )

    def test_price_change_recomputes_discount(self):
        self.assertEqual(self.current.discount, "20% OFF")
        cleaned = clean_changes(self.current, {"price": 50})
        self.assertEqual(cleaned["discount"], "50% OFF")

    def test_clearing_old_price_drops_discount(self):
        cleaned = clean_changes(self.current, {"old_price": None})
        self.assertIsNone(cleaned["old_price"])
        self.assertIsNone(cleaned["discount"])

    def test_null_required_field(self):
        with self.assertRaises(ValidationFailed):
            clean_changes(self.current, {"link": None})


class CatalogServiceTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryStoreClient()
        self.cache = ProductCache(ttl_seconds=60)
        self.catalog = CatalogService(self.store, self.cache)

    def test_writes_invalidate_cache(self):
        self.assertEqual(self.catalog.public_listing(), ([], "database"))
        self.assertEqual(self.catalog.public_listing()[1], "cache")

        created = self.catalog.create_product(
            {"id": "mjtech-cabo", "title": "Cabo", "price": 10, "link": "https://x"}
        )
        products, source = self.catalog.public_listing()
        self.assertEqual(source, "database")
        self.assertEqual(products[0]["id"], created.id)

        self.catalog.toggle_product(created.id)
        products, source = self.catalog.public_listing()
        self.assertEqual((products, source), ([], "database"))

    def test_unexpected_source_error_serves_fallback(self):
        broken = MagicMock()
        broken.list_active_products.side_effect = RuntimeError("corrupt row")
        catalog = CatalogService(broken, self.cache)

        products, source = catalog.public_listing()
        self.assertEqual(source, "fallback")
        self.assertEqual(len(products), 4)

    def test_errors(self):
        with self.assertRaises(NotFound):
            self.catalog.get_product("missing")
        with self.assertRaises(NotFound):
            self.catalog.toggle_product("missing")
        with self.assertRaises(NotFound):
            self.catalog.delete_product("missing")
        with self.assertRaises(NotFound):
            self.catalog.update_product("missing", {"title": "x"})

        payload = {"id": "mjtech-cabo", "title": "Cabo", "price": 10, "link": "https://x"}
        self.catalog.create_product(payload)
        with self.assertRaises(Conflict):
            self.catalog.create_product(payload)
        with self.assertRaises(ValidationFailed):
            self.catalog.update_product("mjtech-cabo", {})


class SeedTests(unittest.TestCase):
    def test_seed_defaults_once(self):
        settings = Settings(bcrypt_rounds=4, use_in_memory_backends=True)
        store = InMemoryStoreClient()
        self.assertTrue(seed_defaults(store, settings))
        self.assertFalse(seed_defaults(store, settings))

        admin = store.find_user_by_login(settings.admin_username)
        self.assertEqual(admin.role, "admin")
        self.assertEqual(store.get_setting("store_name"), settings.store_name)
        self.assertEqual([p.id for p in store.list_products()], ["mjtech-001"])
        self.assertEqual(store.list_active_products()[0].condition, "Serviço")


if __name__ == "__main__":
    unittest.main()
