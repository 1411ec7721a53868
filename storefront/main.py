# storefront/main.py
from __future__ import annotations

# Load .env early so settings and os.getenv see it
from dotenv import load_dotenv
load_dotenv()

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.core.config import Settings, settings
from storefront.core.errors import BackendError, StoreClosedError, backend_error_handler, store_closed_handler
from storefront.core.logging import LoggingMiddleware, get_logger, setup_logging
from storefront.services.backend_client import BackendClient
from storefront.services.local_state import LocalStateStore
from storefront.services.store_status import StoreStatusMonitor

from storefront.api.routes.catalog import router as catalog_router
from storefront.api.routes.orders import router as orders_router
from storefront.api.routes.store import router as store_router

logger = get_logger(__name__)


def create_app(
    cfg: Optional[Settings] = None,
    backend: Optional[BackendClient] = None,
    run_monitor: bool = True,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastAPI:
    cfg = cfg or settings
    setup_logging(debug=cfg.is_development, max_log_length=cfg.MAX_LOG_LENGTH, level=cfg.LOG_LEVEL)

    backend = backend or BackendClient(cfg.BACKEND_URL, timeout=cfg.BACKEND_TIMEOUT)
    monitor = StoreStatusMonitor(
        backend,
        LocalStateStore(cfg.LOCAL_STATE_PATH),
        timezone=cfg.STORE_TIMEZONE,
        language=cfg.STORE_LANGUAGE,
        interval=cfg.STATUS_REFRESH_SECONDS,
        clock=clock,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("startup", backend=cfg.BACKEND_URL, timezone=cfg.STORE_TIMEZONE)
        if run_monitor:
            monitor.start()
        yield
        logger.info("shutdown")
        await monitor.stop()
        await backend.aclose()

    app = FastAPI(
        title="Merpati Storefront",
        description="Storefront and back-office API for the bakery",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.backend = backend
    app.state.monitor = monitor

    app.middleware("http")(LoggingMiddleware(
        log_requests=cfg.LOG_REQUESTS,
        log_responses=cfg.LOG_RESPONSES,
        slow_threshold=cfg.SLOW_REQUEST_THRESHOLD,
    ))
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BackendError, backend_error_handler)
    app.add_exception_handler(StoreClosedError, store_closed_handler)

    @app.get("/healthz", include_in_schema=False)
    async def healthz():
        return {"ok": True}

    app.include_router(store_router)
    app.include_router(orders_router)
    app.include_router(catalog_router)
    return app


app = create_app()
