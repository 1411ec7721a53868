# storefront/api/auth.py
import secrets

from fastapi import Header, HTTPException, Request, status

from storefront.core.errors import ErrorSeverity, log_error


def require_admin_key(request: Request, x_api_key: str = Header(default="")) -> bool:
    """Back-office routes need the X-API-Key header to match ADMIN_API_KEY."""
    expected = request.app.state.settings.ADMIN_API_KEY or ""
    if not expected or not secrets.compare_digest(x_api_key, expected):
        log_error(
            PermissionError("API key validation failed"),
            {"endpoint": request.url.path, "has_key": bool(x_api_key)},
            ErrorSeverity.HIGH,
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
        )
    return True
