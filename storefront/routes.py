"""
Public HTTP routes: product listing, store metadata and health.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError

from storefront import __version__
from storefront.cache import ProductCache
from storefront.catalog import CatalogService
from storefront.config import Settings, get_settings
from storefront.db import StoreClient, to_iso
from storefront.dependencies import (
    get_catalog_service,
    get_product_cache,
    get_store_client,
)
from storefront.schemas import ProductsResponse, RefreshResponse

logger = logging.getLogger(__name__)

router = APIRouter()
index_router = APIRouter()

STARTED_AT = time.time()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _store_settings(store: StoreClient, settings: Settings) -> dict:
    """Settings-table values over config defaults; config alone if the store is down."""
    values = {
        "store_name": settings.store_name,
        "store_whatsapp": settings.store_whatsapp,
        "store_email": settings.store_email,
        "store_website": settings.store_website,
        "store_message": "Loja especializada em tecnologia e reparos",
    }
    try:
        values.update({k: v for k, v in store.list_settings().items() if v})
    except SQLAlchemyError:
        logger.exception("Could not read store settings; using defaults")
    return values


@router.get("/products", response_model=ProductsResponse)
def list_products(
    catalog: CatalogService = Depends(get_catalog_service),
    settings: Settings = Depends(get_settings),
):
    """
    Active products, newest first. Always answers 200; ``source`` tells
    whether the data is live, cached or the canned fallback.
    """
    products, source = catalog.public_listing()
    return ProductsResponse(
        store=settings.store_name,
        count=len(products),
        products=products,
        timestamp=_now(),
        source=source,
    )


@router.get("/refresh", response_model=RefreshResponse)
def refresh_products(catalog: CatalogService = Depends(get_catalog_service)):
    products, source = catalog.refresh()
    return RefreshResponse(
        message="Products refreshed",
        count=len(products),
        source=source,
        timestamp=_now(),
    )


@router.get("/store")
def store_info(
    store: StoreClient = Depends(get_store_client),
    settings: Settings = Depends(get_settings),
):
    values = _store_settings(store, settings)
    return {
        "success": True,
        "store": {
            "id": settings.ml_seller_id,
            "nickname": values["store_name"],
            "permalink": settings.store_permalink,
            "country": "BR",
            "message": values["store_message"],
            "contact": {
                "whatsapp": values["store_whatsapp"],
                "email": values["store_email"],
                "website": values["store_website"],
            },
        },
        "timestamp": _now(),
    }


@router.get("/health")
def health(
    catalog: CatalogService = Depends(get_catalog_service),
    cache: ProductCache = Depends(get_product_cache),
):
    try:
        database_ok = catalog.store.ping()
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        database_ok = False

    if catalog.marketplace:
        marketplace = catalog.marketplace.status()
        marketplace["token_expires_at"] = to_iso(marketplace["token_expires_at"])
    else:
        marketplace = {"enabled": False}

    return {
        "success": True,
        "service": "MJ TECH Store API",
        "status": "operational" if database_ok else "degraded",
        "version": __version__,
        "timestamp": _now(),
        "uptime": round(time.time() - STARTED_AT, 3),
        "catalog_source": catalog.source,
        "database": {
            "connected": database_ok,
            "backend": catalog.store.__class__.__name__,
        },
        "marketplace": marketplace,
        "cache": cache.stats(),
    }


@index_router.get("/")
def index(settings: Settings = Depends(get_settings)):
    prefix = settings.api_prefix
    return {
        "success": True,
        "service": "MJ TECH Store API",
        "version": __version__,
        "endpoints": {
            "products": f"{prefix}/products",
            "health": f"{prefix}/health",
            "store": f"{prefix}/store",
            "refresh": f"{prefix}/refresh",
            "login": f"{prefix}/auth/login",
            "admin": f"{prefix}/admin/products",
        },
    }
