import unittest
from unittest.mock import MagicMock

import requests

from storefront.cache import ProductCache
from storefront.catalog import CatalogService
from storefront.db import InMemoryStoreClient
from storefront.marketplace import (
    PLACEHOLDER_IMAGE,
    MarketplaceClient,
    MarketplaceError,
    map_item,
)

ITEM = {
    "id": "MLB123",
    "title": "Película de vidro iPhone 13",
    "price": 30,
    "original_price": 60,
    "thumbnail": "http://http2.mlstatic.com/D_123-I.jpg",
    "permalink": "https://produto.mercadolivre.com.br/MLB-123",
    "condition": "new",
    "available_quantity": 5,
    "sold_quantity": 42,
    "shipping": {"free_shipping": True},
    "domain_id": "MLB-SCREEN_PROTECTORS",
}


def json_response(payload, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


def token_response():
    return json_response({"access_token": "APP_USR-token", "expires_in": 21600})


def make_client(session, **overrides):
    values = {
        "client_id": "client",
        "client_secret": "secret",
        "seller_id": "1234",
        "session": session,
    }
    values.update(overrides)
    return MarketplaceClient(**values)


class MapItemTests(unittest.TestCase):
    def test_maps_search_result(self):
        product = map_item(ITEM)
        self.assertEqual(product["id"], "MLB123")
        self.assertEqual(product["price"], "R$ 30,00")
        self.assertEqual(product["oldPrice"], "R$ 60,00")
        self.assertEqual(product["discount"], "50% OFF")
        self.assertEqual(product["image"], "https://http2.mlstatic.com/D_123-O.jpg")
        self.assertEqual(product["condition"], "Novo")
        self.assertTrue(product["free_shipping"])
        self.assertEqual(product["category"], "SCREEN_PROTECTORS")

    def test_first_picture_wins_over_thumbnail(self):
        item = dict(ITEM, pictures=[{"url": "https://img/first.jpg"}, {"url": "https://img/2.jpg"}])
        self.assertEqual(map_item(item)["image"], "https://img/first.jpg")

    def test_defaults_for_sparse_items(self):
        product = map_item({"id": 7, "condition": "used"})
        self.assertEqual(product["id"], "7")
        self.assertEqual(product["title"], "Produto MJ TECH")
        self.assertEqual(product["image"], PLACEHOLDER_IMAGE)
        self.assertEqual(product["price"], "R$ 0,00")
        self.assertIsNone(product["oldPrice"])
        self.assertIsNone(product["discount"])
        self.assertEqual(product["condition"], "Usado")
        self.assertEqual(product["category"], "TECNOLOGIA")
        self.assertFalse(product["free_shipping"])


class MarketplaceClientTests(unittest.TestCase):
    def test_fetch_products_sorted_by_stock(self):
        session = MagicMock()
        session.post.return_value = token_response()
        session.get.return_value = json_response(
            {"results": [dict(ITEM, id="A", available_quantity=1), dict(ITEM, id="B")]}
        )
        client = make_client(session)

        products = client.fetch_products()
        self.assertEqual([p["id"] for p in products], ["B", "A"])
        self.assertTrue(client.token_valid())
        _, kwargs = session.get.call_args
        self.assertEqual(kwargs["params"]["seller_id"], "1234")
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer APP_USR-token")

    def test_token_is_reused(self):
        session = MagicMock()
        session.post.return_value = token_response()
        session.get.return_value = json_response({"results": []})
        client = make_client(session)

        client.fetch_products()
        client.fetch_products()
        self.assertEqual(session.post.call_count, 1)

    def test_reauthenticates_once_on_401(self):
        session = MagicMock()
        session.post.return_value = token_response()
        session.get.side_effect = [
            json_response({}, status_code=401),
            json_response({"results": [ITEM]}),
        ]
        client = make_client(session)

        products = client.fetch_products()
        self.assertEqual(len(products), 1)
        self.assertEqual(session.post.call_count, 2)

    def test_search_by_nickname(self):
        session = MagicMock()
        session.post.return_value = token_response()
        session.get.return_value = json_response({"results": []})
        client = make_client(session, seller_id=None, nickname="MJ-TECH")

        client.fetch_products()
        _, kwargs = session.get.call_args
        self.assertEqual(kwargs["params"]["nickname"], "MJ-TECH")
        self.assertNotIn("seller_id", kwargs["params"])

    def test_failures_raise_marketplace_error(self):
        session = MagicMock()
        session.post.return_value = token_response()
        session.get.side_effect = requests.Timeout("read timed out")
        with self.assertRaises(MarketplaceError):
            make_client(session).fetch_products()

        session = MagicMock()
        session.post.return_value = token_response()
        failing = json_response({})
        failing.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
        session.get.return_value = failing
        with self.assertRaises(MarketplaceError):
            make_client(session).fetch_products()

    def test_mixed_quantity_types_are_coerced(self):
        session = MagicMock()
        session.post.return_value = token_response()
        session.get.return_value = json_response(
            {
                "results": [
                    dict(ITEM, id="A", available_quantity=3),
                    dict(ITEM, id="B", available_quantity="5", sold_quantity="7"),
                ]
            }
        )
        products = make_client(session).fetch_products()
        self.assertEqual([p["id"] for p in products], ["B", "A"])
        self.assertEqual(products[0]["available_quantity"], 5)
        self.assertEqual(products[0]["sold_quantity"], 7)

    def test_unparseable_item_raises_marketplace_error(self):
        session = MagicMock()
        session.post.return_value = token_response()
        session.get.return_value = json_response(
            {"results": [dict(ITEM, available_quantity="lots")]}
        )
        with self.assertRaises(MarketplaceError):
            make_client(session).fetch_products()

    def test_missing_configuration(self):
        with self.assertRaises(MarketplaceError):
            make_client(MagicMock(), client_secret=None).authenticate()
        with self.assertRaises(MarketplaceError):
            make_client(MagicMock(), seller_id=None).fetch_products()

    def test_failed_authentication_clears_token(self):
        session = MagicMock()
        session.post.side_effect = requests.ConnectionError("refused")
        client = make_client(session)
        with self.assertRaises(MarketplaceError):
            client.authenticate()
        self.assertIsNone(client.access_token)
        self.assertFalse(client.status()["connected"])


class MarketplaceCatalogTests(unittest.TestCase):
    def setUp(self):
        self.session = MagicMock()
        self.session.post.return_value = token_response()
        self.catalog = CatalogService(
            InMemoryStoreClient(),
            ProductCache(ttl_seconds=60),
            source="marketplace",
            marketplace=make_client(self.session),
        )

    def test_live_then_cached(self):
        self.session.get.return_value = json_response({"results": [ITEM]})
        products, source = self.catalog.public_listing()
        self.assertEqual(source, "api")
        self.assertEqual(products[0]["id"], "MLB123")

        _, source = self.catalog.public_listing()
        self.assertEqual(source, "cache")
        self.assertEqual(self.session.get.call_count, 1)

        _, source = self.catalog.refresh()
        self.assertEqual(source, "api")

    def test_upstream_failure_serves_fallback(self):
        self.session.get.side_effect = requests.Timeout("read timed out")
        products, source = self.catalog.public_listing()
        self.assertEqual(source, "fallback")
        self.assertEqual(len(products), 4)
        self.assertTrue(all(p["id"].startswith("mlb-fallback-") for p in products))

        # Not cached: the next call tries the marketplace again.
        self.session.get.side_effect = None
        self.session.get.return_value = json_response({"results": [ITEM]})
        _, source = self.catalog.public_listing()
        self.assertEqual(source, "api")

    def test_bad_payload_serves_fallback(self):
        self.session.get.return_value = json_response(
            {"results": [ITEM, dict(ITEM, id="MLB9", available_quantity="lots")]}
        )
        products, source = self.catalog.public_listing()
        self.assertEqual(source, "fallback")
        self.assertEqual(len(products), 4)

    def test_requires_client(self):
        with self.assertRaises(ValueError):
            CatalogService(InMemoryStoreClient(), ProductCache(), source="marketplace")


if __name__ == "__main__":
    unittest.main()
