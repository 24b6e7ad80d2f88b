"""
Default data for a fresh store: the admin account, store settings and a
sample product.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from storefront.config import Settings
from storefront.db import NewUser, ProductCondition, ProductRecord, StoreClient, UserRole
from storefront.security import hash_password

logger = logging.getLogger(__name__)

# Keys an administrator may edit through /api/admin/settings.
STORE_SETTING_KEYS = (
    "store_name",
    "store_whatsapp",
    "store_email",
    "store_website",
    "store_message",
)


def default_settings(settings: Settings) -> list[tuple[str, str, str]]:
    return [
        ("store_name", settings.store_name, "Nome da loja"),
        ("store_whatsapp", settings.store_whatsapp, "Link do WhatsApp"),
        ("store_email", settings.store_email, "E-mail de contato"),
        ("store_website", settings.store_website, "Site da loja"),
        (
            "store_message",
            "Loja especializada em tecnologia e reparos",
            "Mensagem da loja",
        ),
    ]


def sample_products(settings: Settings) -> list[ProductRecord]:
    return [
        ProductRecord(
            id="mjtech-001",
            title="Reparo de Celular - MJ TECH",
            description="Conserto profissional de smartphones com garantia e peças de qualidade",
            image_url="https://images.unsplash.com/photo-1563013544-824ae1b704d3?ixlib=rb-4.0.3&auto=format&fit=crop&w=300&q=80",
            price=Decimal("99.90"),
            old_price=Decimal("149.90"),
            discount="33% OFF",
            link=f"{settings.store_whatsapp}?text=Olá! Gostaria de informações sobre reparo de celular",
            condition=ProductCondition.SERVICE.value,
            available_quantity=999,
            sold_quantity=150,
            free_shipping=False,
            category="SERVIÇOS",
        )
    ]


def seed_defaults(store: StoreClient, settings: Settings, *, with_products: bool = True) -> bool:
    """
    Create the admin account, default settings and sample products unless the
    admin account already exists. Returns True when anything was written.
    """
    admin = NewUser(
        username=settings.admin_username,
        email=settings.admin_email,
        password_hash=hash_password(settings.admin_password, settings.bcrypt_rounds),
        full_name=settings.admin_full_name,
        role=UserRole.ADMIN.value,
    )
    seeded = store.seed(
        admin,
        default_settings(settings),
        sample_products(settings) if with_products else [],
    )
    if seeded:
        logger.info("Seeded admin account %s", settings.admin_username)
    else:
        logger.info("Store already initialised; skipping seed")
    return seeded
