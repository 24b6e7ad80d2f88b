"""
Pydantic schemas for the storefront API.
"""

from __future__ import annotations

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field

Price = Union[float, str]
Condition = Literal["Novo", "Usado", "Serviço"]
Role = Literal["admin", "editor"]


class PublicProduct(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    image: Optional[str] = None
    price: str
    oldPrice: Optional[str] = None
    discount: Optional[str] = None
    link: Optional[str] = None
    condition: Optional[str] = None
    available_quantity: int = 0
    sold_quantity: int = 0
    free_shipping: bool = False
    category: Optional[str] = None


class ProductsResponse(BaseModel):
    success: bool = True
    store: str
    count: int
    products: List[PublicProduct]
    timestamp: str
    source: Literal["api", "database", "cache", "fallback"]


class RefreshResponse(BaseModel):
    success: bool = True
    message: str
    count: int
    source: str
    timestamp: str


class AdminProduct(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    image: Optional[str] = None
    price: float
    oldPrice: Optional[float] = None
    discount: Optional[str] = None
    link: str
    condition: str
    available_quantity: int
    sold_quantity: int
    free_shipping: bool
    category: Optional[str] = None
    active: bool
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class AdminProductResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    product: AdminProduct


class AdminProductListResponse(BaseModel):
    success: bool = True
    count: int
    products: List[AdminProduct]


class _ProductFields(BaseModel):
    # Accept both the panel's field names (image, oldPrice, active) and ours.
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    title: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="image")
    price: Optional[Price] = None
    old_price: Optional[Price] = Field(default=None, alias="oldPrice")
    discount: Optional[str] = Field(default=None, max_length=20)
    link: Optional[str] = None
    condition: Optional[Condition] = None
    available_quantity: Optional[int] = None
    sold_quantity: Optional[int] = None
    free_shipping: Optional[bool] = None
    category: Optional[str] = Field(default=None, max_length=50)
    is_active: Optional[bool] = Field(default=None, alias="active")


class ProductCreatePayload(_ProductFields):
    id: Optional[str] = Field(default=None, max_length=50)


class ProductUpdatePayload(_ProductFields):
    pass


class ProductStatsResponse(BaseModel):
    success: bool = True
    total: int
    active: int
    inactive: int
    total_sold: int
    total_revenue: float


class LoginRequest(BaseModel):
    username: str
    password: str
    remember: bool = False


class UserProfile(BaseModel):
    id: int
    username: str
    email: str
    full_name: str
    role: str
    is_active: bool
    last_login: Optional[str] = None
    created_at: Optional[str] = None


class LoginResponse(BaseModel):
    success: bool = True
    token: str
    expires_in: int
    user: UserProfile


class VerifyResponse(BaseModel):
    success: bool = True
    valid: bool = True
    user: UserProfile


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str


class UserCreatePayload(BaseModel):
    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    email: EmailStr
    password: str
    full_name: str = Field(..., min_length=1, max_length=100)
    role: Role = "editor"


class UserUpdatePayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: Optional[EmailStr] = None
    full_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    role: Optional[Role] = None
    is_active: Optional[bool] = None


class UserResponse(BaseModel):
    success: bool = True
    user: UserProfile


class UserListResponse(BaseModel):
    success: bool = True
    count: int
    users: List[UserProfile]


class SettingsPayload(BaseModel):
    settings: Dict[str, str]


class SettingsResponse(BaseModel):
    success: bool = True
    settings: Dict[str, str]


class AccessLogEntry(BaseModel):
    id: Optional[int] = None
    user_id: Optional[int] = None
    username: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    action: str
    success: bool
    details: Optional[str] = None
    created_at: Optional[str] = None


class AccessLogResponse(BaseModel):
    success: bool = True
    count: int
    logs: List[AccessLogEntry]
