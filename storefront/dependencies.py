"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from storefront.auth import AuthService, ClientInfo
from storefront.cache import ProductCache
from storefront.catalog import CatalogService
from storefront.config import Settings, get_settings
from storefront.db import AdminUserRecord, InMemoryStoreClient, SqlStoreClient, StoreClient, UserRole
from storefront.errors import AuthenticationFailed, Forbidden
from storefront.marketplace import MarketplaceClient

_store_client: StoreClient | None = None
_product_cache: ProductCache | None = None
_marketplace_client: MarketplaceClient | None = None

bearer_scheme = HTTPBearer(auto_error=False)


def get_store_client() -> StoreClient:
    """
    Return a singleton store so in-memory state persists across requests.
    """
    global _store_client
    if _store_client:
        return _store_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        _store_client = InMemoryStoreClient()
    else:
        _store_client = SqlStoreClient(settings.database_url)
    return _store_client


def get_product_cache() -> ProductCache:
    global _product_cache
    if _product_cache:
        return _product_cache
    _product_cache = ProductCache(ttl_seconds=get_settings().cache_ttl_seconds)
    return _product_cache


def get_marketplace_client() -> Optional[MarketplaceClient]:
    """
    Return the marketplace client when the catalog is sourced from it. The
    client keeps its own token state, so it is shared across requests.
    """
    global _marketplace_client
    settings = get_settings()
    if settings.catalog_source != "marketplace":
        return None
    if _marketplace_client:
        return _marketplace_client
    _marketplace_client = MarketplaceClient(
        client_id=settings.ml_client_id,
        client_secret=settings.ml_client_secret,
        seller_id=settings.ml_seller_id,
        nickname=settings.ml_nickname,
        site_id=settings.ml_site_id,
        api_base=settings.ml_api_base,
        timeout=settings.ml_timeout_seconds,
        limit=settings.ml_result_limit,
    )
    return _marketplace_client


def get_catalog_service(
    store: StoreClient = Depends(get_store_client),
    cache: ProductCache = Depends(get_product_cache),
    marketplace: Optional[MarketplaceClient] = Depends(get_marketplace_client),
) -> CatalogService:
    return CatalogService(
        store,
        cache,
        source="marketplace" if marketplace else "database",
        marketplace=marketplace,
    )


def get_auth_service(
    store: StoreClient = Depends(get_store_client),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(store, settings)


def get_client_info(request: Request) -> ClientInfo:
    return ClientInfo(
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> AdminUserRecord:
    if credentials is None or not credentials.credentials:
        raise AuthenticationFailed("Access token required")
    return auth.authenticate(credentials.credentials)


def require_admin(user: AdminUserRecord = Depends(get_current_user)) -> AdminUserRecord:
    if user.role != UserRole.ADMIN.value:
        raise Forbidden("Administrator role required")
    return user
