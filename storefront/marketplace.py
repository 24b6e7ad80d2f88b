"""
Client for the Mercado Livre public marketplace API.

The client owns its access token and refreshes it when it expires. Every
failure surfaces as ``MarketplaceError`` so callers can degrade to cached or
canned data.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Optional

import requests

from storefront.pricing import compute_discount, format_price, truncate_text

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10  # seconds
PLACEHOLDER_IMAGE = "https://via.placeholder.com/300x300/1a1a2e/4a90e2?text=MJ+TECH"
DEFAULT_CATEGORY = "TECNOLOGIA"
# Refresh slightly before the advertised expiry.
TOKEN_EXPIRY_MARGIN = 60


class MarketplaceError(Exception):
    """Raised when the marketplace cannot be reached or answers with an error."""


def _best_image(item: dict) -> str:
    image_url = item.get("thumbnail")
    if image_url:
        image_url = image_url.replace("-I.jpg", "-O.jpg").replace("http://", "https://")
    pictures = item.get("pictures") or []
    if pictures and pictures[0].get("url"):
        image_url = pictures[0]["url"]
    if not image_url or "placeholder" in image_url:
        image_url = PLACEHOLDER_IMAGE
    return image_url


def map_item(item: dict) -> dict:
    """
    Map a marketplace search result onto the public product shape.

    Args:
        item (dict): One entry of the search ``results`` array.

    Returns:
        dict: The product with formatted prices.
    """
    price = item.get("price") or 0
    original_price = item.get("original_price")
    domain_id = item.get("domain_id")
    return {
        "id": str(item.get("id") or ""),
        "title": item.get("title") or "Produto MJ TECH",
        "description": truncate_text(item.get("title"), 100),
        "image": _best_image(item),
        "price": format_price(price),
        "oldPrice": format_price(original_price) if original_price else None,
        "discount": compute_discount(price, original_price) if original_price else None,
        "link": item.get("permalink"),
        "condition": "Novo" if item.get("condition") == "new" else "Usado",
        "available_quantity": int(item.get("available_quantity") or 0),
        "sold_quantity": int(item.get("sold_quantity") or 0),
        "free_shipping": bool((item.get("shipping") or {}).get("free_shipping")),
        "category": domain_id.replace("MLB-", "") if domain_id else DEFAULT_CATEGORY,
    }


@dataclass
class MarketplaceClient:
    client_id: Optional[str]
    client_secret: Optional[str]
    seller_id: Optional[str] = None
    nickname: Optional[str] = None
    site_id: str = "MLB"
    api_base: str = "https://api.mercadolibre.com"
    timeout: float = REQUEST_TIMEOUT
    limit: int = 12
    session: Optional[requests.Session] = None
    access_token: Optional[str] = field(default=None, init=False)
    token_expires_at: Optional[float] = field(default=None, init=False)

    def __post_init__(self):
        if self.session is None:
            self.session = requests.Session()

    def token_valid(self) -> bool:
        return bool(
            self.access_token
            and self.token_expires_at
            and time.time() < self.token_expires_at
        )

    def authenticate(self) -> str:
        """
        Obtain a fresh client-credentials token.

        Raises:
            MarketplaceError: if credentials are missing or the request fails.
        """
        if not self.client_id or not self.client_secret:
            raise MarketplaceError("Marketplace credentials are not configured")
        try:
            response = self.session.post(
                f"{self.api_base}/oauth/token",
                params={
                    "grant_type": "client_credentials",
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                },
                headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Accept": "application/json",
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
            token = payload["access_token"]
            expires_in = float(payload.get("expires_in", 0))
        except (requests.RequestException, KeyError, TypeError, ValueError) as exc:
            self.access_token = None
            self.token_expires_at = None
            raise MarketplaceError(f"Marketplace authentication failed: {exc}") from exc

        self.access_token = token
        self.token_expires_at = time.time() + max(expires_in - TOKEN_EXPIRY_MARGIN, 0)
        logger.info("Marketplace token refreshed (expires in %ss)", int(expires_in))
        return token

    def _ensure_token(self) -> str:
        if self.token_valid():
            return self.access_token
        return self.authenticate()

    def _search_params(self) -> dict:
        params = {"limit": self.limit, "sort": "recent", "status": "active"}
        if self.seller_id:
            params["seller_id"] = self.seller_id
        elif self.nickname:
            params["nickname"] = self.nickname
        else:
            raise MarketplaceError("No seller id or nickname configured")
        return params

    def _search(self, token: str, params: dict) -> requests.Response:
        try:
            return self.session.get(
                f"{self.api_base}/sites/{self.site_id}/search",
                params=params,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Accept": "application/json",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise MarketplaceError(f"Marketplace request failed: {exc}") from exc

    def fetch_products(self) -> list[dict]:
        """
        Fetch the seller's active listings, newest first from the API and then
        ordered by available quantity.

        Returns:
            list[dict]: Products in the public shape.

        Raises:
            MarketplaceError: on any network, auth or payload failure.
        """
        params = self._search_params()
        response = self._search(self._ensure_token(), params)
        if response.status_code in (401, 403):
            logger.info("Marketplace rejected token (%s); re-authenticating", response.status_code)
            response = self._search(self.authenticate(), params)

        try:
            response.raise_for_status()
            results = response.json().get("results") or []
            products = [map_item(item) for item in results]
            products.sort(key=lambda p: p["available_quantity"], reverse=True)
        except (requests.RequestException, AttributeError, TypeError, ValueError) as exc:
            raise MarketplaceError(f"Marketplace search failed: {exc}") from exc

        logger.info("Fetched %d products from the marketplace", len(products))
        return products

    def status(self) -> dict:
        return {
            "enabled": True,
            "connected": self.token_valid(),
            "seller_id": self.seller_id,
            "nickname": self.nickname,
            "token_expires_at": self.token_expires_at,
        }
