# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, EmailStr
from typing import List, Dict
from decimal import Decimal
from datetime import datetime


class ProductIn(BaseModel):
    """Schema dla tworzenia produktu (admin)."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    image: str | None = None
    category: str = Field(..., min_length=1, max_length=100)
    featured: bool = False
    stock: int = Field(..., ge=0)


class ProductUpdate(BaseModel):
    """Schema dla częściowej aktualizacji produktu (admin)."""

    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, min_length=1)
    price: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    image: str | None = None
    category: str | None = Field(None, min_length=1, max_length=100)
    featured: bool | None = None
    stock: int | None = Field(None, ge=0)


class ProductOut(BaseModel):
    id: str
    name: str
    description: str
    price: Decimal
    image: str | None = None
    category: str
    featured: bool
    stock: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class ProductListOut(BaseModel):
    products: List[ProductOut]
    pagination: Pagination


class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: str = Field(..., min_length=1)
    quantity: int = Field(1, gt=0, description="Ilość produktu (musi być > 0)")


class QuantityIn(BaseModel):
    """Schema dla zmiany ilości, poniżej 1 odrzucane już tutaj."""

    quantity: int = Field(..., ge=1)


class CartLineOut(BaseModel):
    product: ProductOut
    quantity: int
    line_total: Decimal


class CartOut(BaseModel):
    """Schema dla koszyka (response)."""

    session_id: str
    items: List[CartLineOut]
    subtotal: Decimal
    shipping: Decimal
    total: Decimal


class ShippingInfo(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    address: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field("", max_length=100)
    zip_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field(..., min_length=1, max_length=100)


class OrderCreate(ShippingInfo):
    """Schema dla checkoutu bez płatności online."""

    payment_method: str = Field("cash_on_delivery", min_length=1, max_length=50)


class OrderItemOut(BaseModel):
    product_id: str
    name: str
    quantity: int
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Schema dla zamówienia (response)."""

    id: str
    user_id: str | None = None
    session_id: str | None = None
    status: str
    items: List[OrderItemOut]
    subtotal: Decimal
    shipping: Decimal
    total: Decimal
    payment_id: str | None = None
    payment_method: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderListOut(BaseModel):
    orders: List[OrderOut]
    pagination: Pagination


class OrderStatusIn(BaseModel):
    status: str


class PaymentIntentIn(BaseModel):
    shipping: ShippingInfo | None = None


class PaymentIntentOut(BaseModel):
    client_secret: str = Field(..., serialization_alias="clientSecret")


class WebhookAck(BaseModel):
    received: bool = True
    order_id: str | None = None
    duplicate: bool = False


class UserCreate(BaseModel):
    """Schema dla rejestracji użytkownika."""

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)


class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserRead(BaseModel):
    """Schema dla użytkownika (response)."""

    id: str
    name: str
    email: str
    role: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DashboardCounts(BaseModel):
    products: int
    orders: int
    users: int


class DashboardRevenue(BaseModel):
    total: Decimal
    by_category: Dict[str, Decimal]


class DashboardOut(BaseModel):
    counts: DashboardCounts
    recent_orders: List[OrderOut]
    low_stock_products: List[ProductOut]
    revenue: DashboardRevenue


class SeedOut(BaseModel):
    success: bool = True
    message: str
    created: int = 0
