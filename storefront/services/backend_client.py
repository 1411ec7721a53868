# storefront/services/backend_client.py
"""
Thin async client for the external bakery backend.
Every storefront route goes through here so error mapping lives in one place.
"""
from __future__ import annotations

from typing import Any, Optional

import httpx
from fastapi import Request

from storefront.core.errors import BackendError
from storefront.core.logging import get_logger

logger = get_logger(__name__)


def unwrap_data(payload: Any) -> Any:
    """Backend wraps most results as {"message": ..., "data": {...}}."""
    if isinstance(payload, dict) and payload.get("data"):
        return payload["data"]
    return payload


def _decode(resp: httpx.Response) -> Any:
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return resp.text


class BackendClient:
    def __init__(self, base_url: str, timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def request(self, method: str, path: str, *, json: Any = None,
                      params: Optional[dict] = None) -> Any:
        try:
            resp = await self._client.request(method, path, json=json, params=params)
        except httpx.RequestError as e:
            logger.warning("backend_unreachable", method=method, path=path, error=str(e))
            raise BackendError(502, "Could not reach the backend service") from e

        data = _decode(resp)
        if resp.is_error:
            message = data.get("message") if isinstance(data, dict) else None
            logger.warning("backend_error", method=method, path=path, status_code=resp.status_code)
            raise BackendError(
                resp.status_code,
                message or f"Backend responded with status: {resp.status_code}",
                payload=data,
            )
        return data

    async def get(self, path: str, **kwargs) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()


def get_backend(request: Request) -> BackendClient:
    """FastAPI dependency: the application-wide backend client."""
    return request.app.state.backend
