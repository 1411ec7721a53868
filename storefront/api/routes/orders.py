# storefront/api/routes/orders.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse

from storefront.api.auth import require_admin_key
from storefront.core.errors import StoreClosedError
from storefront.core.logging import get_logger
from storefront.schemas.orders import KasirOrderCreate, OrderCreate, OrderStatusUpdate, RateQuoteRequest
from storefront.services.backend_client import BackendClient, get_backend
from storefront.services.orders import kasir_order_result, to_backend_order, to_kasir_order, to_rate_request
from storefront.services.store_status import StoreStatusMonitor, get_monitor

logger = get_logger(__name__)
router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("")
async def create_order(
    payload: OrderCreate,
    request: Request,
    backend: BackendClient = Depends(get_backend),
    monitor: StoreStatusMonitor = Depends(get_monitor),
):
    """
    Submit a storefront checkout to the backend.
    Same-day orders are refused while the store is not accepting orders;
    orders for a later pickup/delivery date always go through.
    """
    store = monitor.evaluate()
    today = store.evaluated_at.date()
    order_date = payload.customer.orderDate

    if not store.accepting_orders and (order_date is None or order_date <= today):
        raise StoreClosedError(store.next_open_label, store.reason)

    body = to_backend_order(payload, today=today, cfg=request.app.state.settings)
    logger.info(
        "order_submitted",
        items=len(body["items"]),
        mode=body["mode_pengiriman"],
        total=body["total_harga"],
        pickup_date=body["waktu_ambil"],
    )
    return await backend.post("/orders", json=body)


@router.get("")
async def list_orders(relation: Optional[str] = None, backend: BackendClient = Depends(get_backend)):
    params = {"relation": relation} if relation else None
    data = await backend.get("/orders", params=params)
    return JSONResponse(data, headers={"Cache-Control": "no-store, must-revalidate"})


@router.put("/{order_id}/status", dependencies=[Depends(require_admin_key)])
async def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    backend: BackendClient = Depends(get_backend),
):
    if not payload.status:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Status is required")

    logger.info("order_status_update", order_id=order_id, status=payload.status)
    return await backend.put(f"/orders/{order_id}/status", json={"status": payload.status})


@router.post("/rates")
async def shipping_rates(
    payload: RateQuoteRequest,
    request: Request,
    backend: BackendClient = Depends(get_backend),
):
    """Courier price quote for a delivery checkout (fills deliveryFee)."""
    body = to_rate_request(payload, cfg=request.app.state.settings)
    logger.info("shipping_rates_requested", couriers=body["couriers"], items=len(body["items"]))
    return await backend.post("/orders/rates/coordinates", json=body)


@router.post("/kasir", dependencies=[Depends(require_admin_key)])
async def create_kasir_order(
    payload: KasirOrderCreate,
    backend: BackendClient = Depends(get_backend),
    monitor: StoreStatusMonitor = Depends(get_monitor),
):
    body = to_kasir_order(payload, today=monitor.now().date())
    logger.info("kasir_order_submitted", items=len(body["items"]), total=body["total_harga"])
    result = await backend.post("/orders/kasir", json=body)
    return kasir_order_result(result)
