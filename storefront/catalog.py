"""
Product catalog: validation of admin writes and the public read path.
"""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal
from typing import Mapping, Optional

from storefront.cache import ProductCache
from storefront.db import (
    DuplicateRecordError,
    ProductCondition,
    ProductRecord,
    StoreClient,
)
from storefront.errors import Conflict, NotFound, ValidationFailed
from storefront.fallback import fallback_products
from storefront.marketplace import PLACEHOLDER_IMAGE, MarketplaceClient
from storefront.pricing import compute_discount, format_price, to_decimal, truncate_text

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "TECNOLOGIA"
DEFAULT_AVAILABLE_QUANTITY = 10
CONDITIONS = {c.value for c in ProductCondition}
NULLABLE_FIELDS = frozenset({"description", "image_url", "old_price", "discount", "category"})
# Prices are stored as NUMERIC(10, 2).
MAX_PRICE = Decimal("100000000")


def generate_product_id() -> str:
    return f"mjtech-{uuid.uuid4().hex[:12]}"


def _parse_price(value, label: str, *, required: bool) -> Optional[Decimal]:
    if value is None or value == "":
        if required:
            raise ValidationFailed(f"{label} is required")
        return None
    try:
        amount = to_decimal(value)
    except ValueError as exc:
        raise ValidationFailed(f"{label} must be a number") from exc
    if amount <= 0:
        raise ValidationFailed(f"{label} must be greater than zero")
    if amount >= MAX_PRICE:
        raise ValidationFailed(f"{label} must be less than {MAX_PRICE}")
    return amount


def _require_text(value: Optional[str], label: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationFailed(f"{label} is required")
    return text


def _check_condition(value: str) -> str:
    if value not in CONDITIONS:
        raise ValidationFailed(
            f"condition must be one of: {', '.join(sorted(CONDITIONS))}"
        )
    return value


def _check_quantity(value: int, label: str) -> int:
    if value < 0:
        raise ValidationFailed(f"{label} cannot be negative")
    return value


def build_product(payload: Mapping[str, object]) -> ProductRecord:
    """
    Validate a creation payload and fill in defaults.

    Required: ``title``, ``price`` (positive) and ``link``. The discount label
    is derived from ``old_price`` unless given explicitly.
    """
    missing = [
        name for name in ("title", "price", "link") if payload.get(name) in (None, "")
    ]
    if missing:
        raise ValidationFailed(f"Missing required fields: {', '.join(missing)}")

    title = _require_text(payload.get("title"), "title")
    link = _require_text(payload.get("link"), "link")
    price = _parse_price(payload.get("price"), "price", required=True)
    old_price = _parse_price(payload.get("old_price"), "old_price", required=False)
    discount = (payload.get("discount") or "").strip() or compute_discount(
        price, old_price
    )
    available = payload.get("available_quantity")
    sold = payload.get("sold_quantity")

    return ProductRecord(
        id=(payload.get("id") or "").strip() or generate_product_id(),
        title=title,
        description=(payload.get("description") or "").strip() or None,
        image_url=(payload.get("image_url") or "").strip() or None,
        price=price,
        old_price=old_price,
        discount=discount,
        link=link,
        condition=_check_condition(payload.get("condition") or ProductCondition.NEW.value),
        available_quantity=_check_quantity(
            DEFAULT_AVAILABLE_QUANTITY if available is None else available,
            "available_quantity",
        ),
        sold_quantity=_check_quantity(0 if sold is None else sold, "sold_quantity"),
        free_shipping=bool(payload.get("free_shipping") or False),
        category=(payload.get("category") or "").strip() or DEFAULT_CATEGORY,
        is_active=payload.get("is_active") is not False,
    )


def clean_changes(current: ProductRecord, changes: Mapping[str, object]) -> dict:
    """
    Validate a partial update. Re-derives the discount when either price
    changes and no explicit discount was sent.
    """
    cleaned: dict = {}
    for key, value in changes.items():
        if value is None and key not in NULLABLE_FIELDS:
            raise ValidationFailed(f"{key} cannot be null")
        if key in ("title", "link"):
            cleaned[key] = _require_text(value, key)
        elif key == "price":
            cleaned[key] = _parse_price(value, "price", required=True)
        elif key == "old_price":
            cleaned[key] = _parse_price(value, "old_price", required=False)
        elif key == "condition":
            cleaned[key] = _check_condition(value)
        elif key in ("available_quantity", "sold_quantity"):
            cleaned[key] = _check_quantity(value, key)
        elif key in ("description", "image_url", "discount"):
            cleaned[key] = (value or "").strip() or None
        elif key == "category":
            cleaned[key] = (value or "").strip() or DEFAULT_CATEGORY
        else:
            cleaned[key] = value

    if ("price" in cleaned or "old_price" in cleaned) and "discount" not in cleaned:
        cleaned["discount"] = compute_discount(
            cleaned.get("price", current.price),
            cleaned.get("old_price", current.old_price),
        )
    return cleaned


def to_public_product(product: ProductRecord) -> dict:
    return {
        "id": product.id,
        "title": product.title,
        "description": product.description or truncate_text(product.title, 100),
        "image": product.image_url or PLACEHOLDER_IMAGE,
        "price": format_price(product.price),
        "oldPrice": format_price(product.old_price) if product.old_price else None,
        "discount": product.discount,
        "link": product.link,
        "condition": product.condition,
        "available_quantity": product.available_quantity,
        "sold_quantity": product.sold_quantity,
        "free_shipping": product.free_shipping,
        "category": product.category,
    }


class CatalogService:
    """Public listing through the cache plus cache-invalidating admin writes."""

    def __init__(
        self,
        store: StoreClient,
        cache: ProductCache,
        *,
        source: str = "database",
        marketplace: Optional[MarketplaceClient] = None,
    ):
        if source == "marketplace" and marketplace is None:
            raise ValueError("A marketplace client is required for the marketplace source")
        self.store = store
        self.cache = cache
        self.source = source
        self.marketplace = marketplace

    @property
    def cache_key(self) -> str:
        return f"products:{self.source}"

    @property
    def live_source(self) -> str:
        return "api" if self.source == "marketplace" else "database"

    def _load(self) -> list[dict]:
        if self.source == "marketplace":
            return self.marketplace.fetch_products()
        return [to_public_product(p) for p in self.store.list_active_products()]

    def public_listing(self) -> tuple[list[dict], str]:
        """
        Return ``(products, source)`` where source is one of ``cache``,
        ``api``, ``database`` or ``fallback``. Never raises for upstream or
        store failures or bad upstream data; fallback data is not cached.
        """
        cached = self.cache.get(self.cache_key)
        if cached is not None:
            return cached, "cache"
        try:
            products = self._load()
        except Exception:
            logger.exception("Product source %s failed; serving fallback", self.source)
            return fallback_products(), "fallback"
        self.cache.set(self.cache_key, products)
        return products, self.live_source

    def refresh(self) -> tuple[list[dict], str]:
        self.cache.invalidate(self.cache_key)
        return self.public_listing()

    def invalidate(self) -> None:
        self.cache.invalidate()

    def get_product(self, product_id: str) -> ProductRecord:
        product = self.store.get_product(product_id)
        if not product:
            raise NotFound("Product not found")
        return product

    def create_product(self, payload: Mapping[str, object]) -> ProductRecord:
        product = build_product(payload)
        try:
            created = self.store.insert_product(product)
        except DuplicateRecordError as exc:
            raise Conflict(str(exc)) from exc
        self.invalidate()
        return created

    def update_product(
        self, product_id: str, changes: Mapping[str, object]
    ) -> ProductRecord:
        current = self.get_product(product_id)
        if not changes:
            raise ValidationFailed("No fields to update")
        try:
            updated = self.store.update_product(product_id, clean_changes(current, changes))
        except ValueError as exc:
            raise ValidationFailed(str(exc)) from exc
        if not updated:
            raise NotFound("Product not found")
        self.invalidate()
        return updated

    def toggle_product(self, product_id: str) -> ProductRecord:
        product = self.store.toggle_product(product_id)
        if not product:
            raise NotFound("Product not found")
        self.invalidate()
        return product

    def delete_product(self, product_id: str) -> None:
        if not self.store.delete_product(product_id):
            raise NotFound("Product not found")
        self.invalidate()

    def stats(self) -> dict:
        stats = self.store.product_stats()
        stats["total_revenue"] = float(stats["total_revenue"])
        return stats
