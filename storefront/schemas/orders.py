# storefront/schemas/orders.py
from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

Number = Union[int, float]


class Coordinates(BaseModel):
    latitude: float = 0.0
    longitude: float = 0.0


class SelectedAttribute(BaseModel):
    model_config = ConfigDict(extra="allow")

    nama_id: Optional[str] = None


class CartItem(BaseModel):
    productId: int
    productName: str
    basePrice: Number = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    category: Optional[str] = None
    selectedAttributes: List[SelectedAttribute] = Field(default_factory=list)


class Customer(BaseModel):
    recipientName: str
    phoneNumber: str
    deliveryMode: Literal["pickup", "delivery"] = "pickup"
    address: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    notes: Optional[str] = None
    orderDate: Optional[date] = None
    email: Optional[str] = None

    @field_validator("orderDate", mode="before")
    @classmethod
    def _blank_date(cls, v):
        return None if v == "" else v


class OrderSummary(BaseModel):
    totalAmount: Number = Field(..., ge=0)
    deliveryFee: Number = 0
    paymentMethod: Optional[str] = None


class OrderCreate(BaseModel):
    """Order as the storefront checkout submits it."""
    order: OrderSummary
    customer: Customer
    items: List[CartItem] = Field(..., min_length=1)
    user_id: int = 1


class OrderStatusUpdate(BaseModel):
    status: Optional[str] = None


class RateItem(BaseModel):
    name: str
    description: str = ""
    value: Number = Field(0, ge=0)
    length: Number = 10
    width: Number = 10
    height: Number = 5
    weight: Number = Field(..., gt=0)
    quantity: int = Field(..., ge=1)


class RateQuoteRequest(BaseModel):
    """Courier price check for a delivery checkout; origin defaults to the store."""
    origin_latitude: Optional[float] = None
    origin_longitude: Optional[float] = None
    destination_latitude: float
    destination_longitude: float
    couriers: str = "gojek,grab"
    items: List[RateItem] = Field(..., min_length=1)


class KasirItem(BaseModel):
    product_id: int = Field(..., validation_alias=AliasChoices("product_id", "id"))
    jumlah: int = Field(..., ge=1, validation_alias=AliasChoices("jumlah", "quantity"))
    harga_beli: Number = Field(..., ge=0, validation_alias=AliasChoices("harga_beli", "price"))
    note: Optional[str] = None


class KasirOrderCreate(BaseModel):
    """In-store sale from the cashier screen. No courier data."""
    model_config = ConfigDict(str_strip_whitespace=True)

    customerName: str = Field(..., min_length=1)
    customerPhone: str = Field(..., min_length=1)
    items: List[KasirItem] = Field(..., min_length=1)
    total_harga: Number = Field(..., gt=0)
    provider_pembayaran: Optional[str] = None
    waktu_ambil: Optional[date] = None
    catatan: Optional[str] = None
    voucher_id: Optional[int] = None

    @field_validator("waktu_ambil", mode="before")
    @classmethod
    def _date_part(cls, v):
        if v == "":
            return None
        if isinstance(v, str) and "T" in v:
            return v.split("T")[0]
        return v
