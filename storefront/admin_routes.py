"""
Bearer-authenticated admin routes. Products are open to admins and editors;
users, settings and access logs are admin only.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from storefront.auth import AuthService, ClientInfo
from storefront.catalog import CatalogService
from storefront.db import AdminUserRecord, StoreClient
from storefront.dependencies import (
    get_auth_service,
    get_catalog_service,
    get_client_info,
    get_current_user,
    get_store_client,
    require_admin,
)
from storefront.errors import ValidationFailed
from storefront.schemas import (
    AccessLogResponse,
    AdminProductListResponse,
    AdminProductResponse,
    MessageResponse,
    ProductCreatePayload,
    ProductStatsResponse,
    ProductUpdatePayload,
    SettingsPayload,
    SettingsResponse,
    UserCreatePayload,
    UserListResponse,
    UserResponse,
    UserUpdatePayload,
)
from storefront.seed import STORE_SETTING_KEYS

router = APIRouter(prefix="/admin", dependencies=[Depends(get_current_user)])


@router.get("/products", response_model=AdminProductListResponse)
def list_products(catalog: CatalogService = Depends(get_catalog_service)):
    products = catalog.store.list_products()
    return AdminProductListResponse(
        count=len(products), products=[p.as_dict() for p in products]
    )


@router.post("/products", response_model=AdminProductResponse)
def create_product(
    payload: ProductCreatePayload,
    catalog: CatalogService = Depends(get_catalog_service),
):
    product = catalog.create_product(payload.model_dump(exclude_unset=True))
    return AdminProductResponse(message="Product created", product=product.as_dict())


@router.get("/products/{product_id}", response_model=AdminProductResponse)
def get_product(product_id: str, catalog: CatalogService = Depends(get_catalog_service)):
    return AdminProductResponse(product=catalog.get_product(product_id).as_dict())


@router.put("/products/{product_id}", response_model=AdminProductResponse)
def update_product(
    product_id: str,
    payload: ProductUpdatePayload,
    catalog: CatalogService = Depends(get_catalog_service),
):
    product = catalog.update_product(product_id, payload.model_dump(exclude_unset=True))
    return AdminProductResponse(message="Product updated", product=product.as_dict())


@router.api_route(
    "/products/{product_id}/toggle",
    methods=["PUT", "PATCH"],
    response_model=AdminProductResponse,
)
def toggle_product(product_id: str, catalog: CatalogService = Depends(get_catalog_service)):
    product = catalog.toggle_product(product_id)
    state = "activated" if product.is_active else "deactivated"
    return AdminProductResponse(message=f"Product {state}", product=product.as_dict())


@router.delete("/products/{product_id}", response_model=MessageResponse)
def delete_product(product_id: str, catalog: CatalogService = Depends(get_catalog_service)):
    catalog.delete_product(product_id)
    return MessageResponse(message="Product deleted")


@router.get("/stats", response_model=ProductStatsResponse)
def product_stats(catalog: CatalogService = Depends(get_catalog_service)):
    return ProductStatsResponse(**catalog.stats())


@router.get("/users", response_model=UserListResponse)
def list_users(
    _: AdminUserRecord = Depends(require_admin),
    store: StoreClient = Depends(get_store_client),
):
    users = store.list_users()
    return UserListResponse(count=len(users), users=[u.as_dict() for u in users])


@router.post("/users", response_model=UserResponse, status_code=201)
def create_user(
    payload: UserCreatePayload,
    admin: AdminUserRecord = Depends(require_admin),
    auth: AuthService = Depends(get_auth_service),
    client: ClientInfo = Depends(get_client_info),
):
    user = auth.create_user(
        username=payload.username,
        email=payload.email,
        password=payload.password,
        full_name=payload.full_name,
        role=payload.role,
        created_by=admin,
        client=client,
    )
    return UserResponse(user=user.as_dict())


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    payload: UserUpdatePayload,
    admin: AdminUserRecord = Depends(require_admin),
    auth: AuthService = Depends(get_auth_service),
    client: ClientInfo = Depends(get_client_info),
):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    user = auth.update_user(user_id, changes, updated_by=admin, client=client)
    return UserResponse(user=user.as_dict())


@router.get("/settings", response_model=SettingsResponse)
def get_settings_values(
    _: AdminUserRecord = Depends(require_admin),
    store: StoreClient = Depends(get_store_client),
):
    return SettingsResponse(settings=store.list_settings())


@router.put("/settings", response_model=SettingsResponse)
def update_settings_values(
    payload: SettingsPayload,
    _: AdminUserRecord = Depends(require_admin),
    store: StoreClient = Depends(get_store_client),
):
    unknown = sorted(set(payload.settings) - set(STORE_SETTING_KEYS))
    if unknown:
        raise ValidationFailed(f"Unknown settings: {', '.join(unknown)}")
    if not payload.settings:
        raise ValidationFailed("No settings to update")
    store.set_settings(payload.settings)
    return SettingsResponse(settings=store.list_settings())


@router.get("/logs", response_model=AccessLogResponse)
def access_logs(
    limit: int = Query(100, ge=1, le=500),
    _: AdminUserRecord = Depends(require_admin),
    store: StoreClient = Depends(get_store_client),
):
    logs = store.list_access_logs(limit=limit)
    return AccessLogResponse(count=len(logs), logs=[entry.as_dict() for entry in logs])
