# storefront/api/routes/catalog.py
"""Pass-through routes for products, vouchers and back-office statistics."""
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, status

from storefront.api.auth import require_admin_key
from storefront.services.backend_client import BackendClient, get_backend

router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/products")
async def list_products(backend: BackendClient = Depends(get_backend)):
    return await backend.get("/products")


@router.get("/vouchers")
async def list_vouchers(backend: BackendClient = Depends(get_backend)):
    return await backend.get("/voucher")


@router.post(
    "/vouchers",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin_key)],
)
async def create_voucher(
    payload: Dict[str, Any] = Body(...),
    backend: BackendClient = Depends(get_backend),
):
    return await backend.post("/voucher", json=payload)


@router.get("/dashboard/stats", dependencies=[Depends(require_admin_key)])
async def dashboard_stats(backend: BackendClient = Depends(get_backend)):
    return await backend.get("/dashboard/stats")
