# storefront/api/routes/store.py
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from storefront.api.auth import require_admin_key
from storefront.core.logging import get_logger
from storefront.schemas.store import (
    ClosureIn,
    ClosureOut,
    ClosureUpdateOut,
    ConfigUpdate,
    StoreStatusOut,
)
from storefront.services.backend_client import BackendClient, get_backend, unwrap_data
from storefront.services.store_config import closure_to_local, fetch_store_config, normalize_config
from storefront.services.store_status import StoreStatusMonitor, get_monitor

logger = get_logger(__name__)
router = APIRouter(prefix="/api", tags=["store"])


@router.get("/store/status", response_model=StoreStatusOut)
async def store_status(monitor: StoreStatusMonitor = Depends(get_monitor)):
    """Is the store open right now, may customers order, and when does it reopen."""
    return monitor.evaluate().to_dict()


@router.get("/store/closure", response_model=ClosureOut)
async def get_store_closure(monitor: StoreStatusMonitor = Depends(get_monitor)):
    override = monitor.local_override
    if override is None:
        return ClosureOut()
    return closure_to_local(override)


@router.put(
    "/store/closure",
    response_model=ClosureUpdateOut,
    dependencies=[Depends(require_admin_key)],
)
async def update_store_closure(payload: ClosureIn, monitor: StoreStatusMonitor = Depends(get_monitor)):
    override = payload.to_override()
    status = monitor.set_local_closure(override)
    return {"closure": closure_to_local(override), "status": status.to_dict()}


@router.get("/config")
async def get_config(
    backend: BackendClient = Depends(get_backend),
    monitor: StoreStatusMonitor = Depends(get_monitor),
) -> Dict[str, Any]:
    config = await fetch_store_config(backend)
    monitor.apply_config(config)
    return normalize_config(config)


@router.put("/config", dependencies=[Depends(require_admin_key)])
async def update_config(
    payload: ConfigUpdate,
    backend: BackendClient = Depends(get_backend),
    monitor: StoreStatusMonitor = Depends(get_monitor),
) -> Dict[str, Any]:
    body = payload.model_dump(exclude_none=True)
    logger.info("config_update", is_tutup=body["is_tutup"], has_hours="operating_hours" in body)

    result = unwrap_data(await backend.put("/config", json=body))

    # The backend may echo only part of the config; keep what we already know
    config = {**monitor.snapshot.config, **body}
    if isinstance(result, dict):
        config.update(result)

    monitor.apply_config(config)
    return normalize_config(config)
