# storefront/services/orders.py
"""
Reshape storefront order payloads into what the backend order API expects.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from storefront.core.config import Settings, settings as default_settings
from storefront.schemas.orders import CartItem, KasirOrderCreate, OrderCreate, RateQuoteRequest
from storefront.services.backend_client import unwrap_data

# Parcel dimensions the courier quote requires; bread is light and small
PARCEL = {"height": 10, "length": 10, "width": 10, "weight": 50}

PICKUP_ADDRESS = "AMBIL DI TOKO"
DEFAULT_CUSTOMER_EMAIL = "customer@example.com"


def _item_note(item: CartItem) -> str:
    names = [a.nama_id for a in item.selectedAttributes if a.nama_id]
    return ", ".join(names) or "-"


def _backend_item(item: CartItem) -> Dict[str, Any]:
    category = item.category or None
    return {
        "id": int(item.productId),
        "name": item.productName,
        "description": category or "Roti",
        "category": category or "food",
        "value": item.basePrice,
        "quantity": item.quantity,
        **PARCEL,
        "jumlah": item.quantity,
        "harga_beli": item.basePrice,
        "note": _item_note(item),
    }


def to_backend_order(
    payload: OrderCreate,
    *,
    today: Optional[date] = None,
    cfg: Optional[Settings] = None,
) -> Dict[str, Any]:
    cfg = cfg or default_settings
    customer = payload.customer
    order = payload.order
    is_pickup = customer.deliveryMode == "pickup"

    origin = {"latitude": cfg.STORE_LATITUDE, "longitude": cfg.STORE_LONGITUDE}
    if is_pickup or customer.coordinates is None:
        destination = dict(origin) if is_pickup else {"latitude": 0.0, "longitude": 0.0}
    else:
        destination = {
            "latitude": customer.coordinates.latitude,
            "longitude": customer.coordinates.longitude,
        }

    items: List[Dict[str, Any]] = [_backend_item(i) for i in payload.items]

    return {
        "waktu_ambil": (customer.orderDate or today or date.today()).isoformat(),
        "mode_pengiriman": customer.deliveryMode,
        "catatan": customer.notes or "...",
        "courier_company": "pickup" if is_pickup else "gojek",
        "shipping_cost": order.deliveryFee or 0,
        "diskon_id": None,
        "user_id": payload.user_id,
        "provider_pembayaran": order.paymentMethod or "cash",
        "items": items,
        "total_harga": order.totalAmount,

        "origin_contact_name": cfg.STORE_NAME,
        "origin_contact_phone": cfg.STORE_PHONE,
        "origin_contact_email": cfg.STORE_EMAIL,
        "origin_address": cfg.STORE_ADDRESS,
        "origin_coordinate": origin,
        "origin_note": "",

        "destination_contact_name": customer.recipientName,
        "destination_contact_phone": customer.phoneNumber,
        "destination_contact_email": customer.email or DEFAULT_CUSTOMER_EMAIL,
        "destination_address": PICKUP_ADDRESS if is_pickup else (customer.address or ""),
        "destination_coordinate": destination,
        "destination_note": "",

        "order_note": "",
    }


def to_rate_request(payload: RateQuoteRequest, cfg: Optional[Settings] = None) -> Dict[str, Any]:
    cfg = cfg or default_settings
    body = payload.model_dump()
    if body["origin_latitude"] is None or body["origin_longitude"] is None:
        body["origin_latitude"] = cfg.STORE_LATITUDE
        body["origin_longitude"] = cfg.STORE_LONGITUDE
    return body


def to_kasir_order(payload: KasirOrderCreate, *, today: Optional[date] = None) -> Dict[str, Any]:
    """
    Cashier sale -> backend `POST /orders/kasir` body.
    The backend marks these paid and completed itself.
    """
    return {
        "waktu_ambil": (payload.waktu_ambil or today or date.today()).isoformat(),
        "destination_contact_name": payload.customerName,
        "destination_contact_phone": payload.customerPhone,
        "items": [
            {"id": i.product_id, "jumlah": i.jumlah, "harga_beli": i.harga_beli, "note": i.note or None}
            for i in payload.items
        ],
        "total_harga": payload.total_harga,
        "voucher_id": payload.voucher_id or None,
        "provider_pembayaran": payload.provider_pembayaran or "cash",
        "catatan": payload.catatan or "",
    }


def kasir_order_result(result: Any) -> Dict[str, Any]:
    created = unwrap_data(result)
    created = created if isinstance(created, dict) else {}
    message = result.get("message") if isinstance(result, dict) else None
    return {
        "success": True,
        "message": message or "Order created successfully",
        "data": {
            "id": created.get("id"),
            "user_id": created.get("user_id"),
            "status": "paid",
            "production_status": "completed",
        },
    }
