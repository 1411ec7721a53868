# storefront/core/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Read env from .env; ignore unknown keys so extra lines don't crash startup
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # --- External backend ---
    BACKEND_URL: str = "http://127.0.0.1:5000"
    BACKEND_TIMEOUT: float = 10.0

    # --- Store ---
    STORE_NAME: str = "Merpati Solo Bakery"
    STORE_TIMEZONE: str = "Asia/Jakarta"
    STORE_LANGUAGE: str = "en"  # "en" or "id"
    STATUS_REFRESH_SECONDS: float = 60.0
    LOCAL_STATE_PATH: str = "storefront_state.json"

    # Origin used for delivery quotes
    STORE_PHONE: str = "081234567890"
    STORE_EMAIL: str = "admin@merpatisolo.com"
    STORE_ADDRESS: str = "Jalan Merpati 123, Solo, 57133"
    STORE_LATITUDE: float = -7.566139
    STORE_LONGITUDE: float = 110.82303

    # --- Security ---
    ADMIN_API_KEY: str | None = None

    # --- Monitoring & Logging ---
    APP_ENV: str = "production"
    LOG_LEVEL: str = "INFO"
    LOG_REQUESTS: bool = False
    LOG_RESPONSES: bool = False
    MAX_LOG_LENGTH: int = 200
    SLOW_REQUEST_THRESHOLD: float = 2.0

    ALLOWED_CORS_ORIGINS: str = "*"  # comma-separated list, e.g. "http://localhost:3000,https://your.app"

    @property
    def allowed_origins_list(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_CORS_ORIGINS.split(",") if o.strip()]

    @property
    def is_development(self) -> bool:
        return self.APP_ENV.lower() in ("development", "dev", "local")


# Singleton
settings = Settings()
