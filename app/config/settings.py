import json
from decimal import Decimal
from typing import Any

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _parse_str_list(value: Any) -> Any:
    """Parse a list setting from .env (JSON array or comma-separated string)."""
    if isinstance(value, str):
        value = value.strip()
        if value.startswith("[") and value.endswith("]"):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return [str(item).strip() for item in parsed if item]
            except json.JSONDecodeError:
                pass
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


class Settings(BaseSettings):
    """
    Application configuration loaded from environment variables and .env.
    """

    # API Configuration
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Storefront Orders API"
    PROJECT_DESCRIPTION: str = "Order lifecycle, payments and discount pricing for the storefront"
    VERSION: str = "0.1.0"

    # PostgreSQL Database Settings
    DB_HOST: str = Field("localhost", description="PostgreSQL host")
    DB_PORT: int = Field(5432, description="PostgreSQL port")
    DB_NAME: str = Field("storefront", description="Database name")
    DB_USER: str = Field("storefront", description="PostgreSQL user")
    DB_PASSWORD: str | None = Field(None, description="PostgreSQL password")
    DB_ECHO: bool = Field(False, description="Log SQL queries (debug only)")

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(20, description="Connection pool size")
    DB_MAX_OVERFLOW: int = Field(30, description="Maximum pool overflow")
    DB_POOL_RECYCLE: int = Field(3600, description="Recycle connections every X seconds")
    DB_POOL_TIMEOUT: int = Field(30, description="Timeout to obtain a pooled connection")

    # Redis Settings
    REDIS_HOST: str = Field("localhost", description="Redis host")
    REDIS_PORT: int = Field(6379, description="Redis port")
    REDIS_DB: int = Field(0, description="Redis database")
    REDIS_PASSWORD: str | None = Field(None, description="Redis password")

    # Payment gateway (MyFatoorah)
    PAYMENT_GATEWAY_BASE_URL: str = Field(
        "https://apitest.myfatoorah.com", description="Gateway API base URL (test or live portal)"
    )
    PAYMENT_GATEWAY_API_KEY: str | None = Field(None, description="Gateway bearer token")
    PAYMENT_GATEWAY_TIMEOUT: float = Field(20.0, description="Timeout for gateway requests in seconds")
    PAYMENT_CALLBACK_URL: str = Field(
        "http://localhost:3000/payment/success", description="Where the gateway sends the customer after paying"
    )
    PAYMENT_ERROR_URL: str = Field(
        "http://localhost:3000/payment/failed", description="Where the gateway sends the customer on failure"
    )
    PAYMENT_LANGUAGE: str = Field("en", description="Language of the hosted payment page (en or ar)")

    # Idempotency (Redis)
    PAYMENT_LOCK_TTL_MS: int = Field(5 * 60 * 1000, description="Verification lock TTL in milliseconds")
    PAYMENT_RECEIPT_TTL_MS: int = Field(24 * 60 * 60 * 1000, description="Completed verification TTL in milliseconds")

    # Store Settings
    DEFAULT_CURRENCY: str = Field("KWD", description="ISO currency used for prices and orders")
    DEFAULT_SHIPPING_COST: Decimal = Field(Decimal("0"), description="Shipping cost used until an admin sets one")
    ORDERS_ENABLED_DEFAULT: bool = Field(True, description="Whether orders are accepted before any admin change")
    ORDERS_CLOSED_DEFAULT_MESSAGE: str = Field(
        "We are not accepting new orders right now. Please check back soon.",
        description="Message shown when orders are closed without a custom message",
    )
    CASH_ON_DELIVERY_METHODS: list[str] = Field(
        default=["cod"], description="Payment method codes settled on delivery (orders start pending)"
    )
    ORDER_NUMBER_PREFIX: str = Field("ORD", description="Prefix for generated order numbers")
    TRACKING_REFERENCE_PREFIXES: list[str] = Field(
        default=["TRK-", "INV-", "PAY-"],
        description="Prefixes that identify payment or shipment references mistaken for order numbers",
    )

    # Admin authentication
    ADMIN_API_TOKEN: str | None = Field(None, description="Bearer token required by /admin endpoints")

    # CORS
    CORS_ORIGINS: list[str] = Field(default=["http://localhost:3000"], description="Allowed CORS origins")

    # Application Settings
    DEBUG: bool = Field(False, description="Debug mode")
    ENVIRONMENT: str = Field("production", description="Runtime environment")

    # Sentry Configuration
    SENTRY_DSN: str | None = Field(default=None, description="Sentry DSN for error tracking")

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("CASH_ON_DELIVERY_METHODS", "TRACKING_REFERENCE_PREFIXES", "CORS_ORIGINS", mode="before")
    @classmethod
    def parse_list(cls, value):
        return _parse_str_list(value)

    @field_validator("DEFAULT_CURRENCY")
    @classmethod
    def validate_currency(cls, v):
        if len(v) != 3:
            raise ValueError("DEFAULT_CURRENCY must be a 3-letter ISO code")
        return v.upper()

    @field_validator("DEFAULT_SHIPPING_COST")
    @classmethod
    def validate_shipping_cost(cls, v):
        if v < 0:
            raise ValueError("DEFAULT_SHIPPING_COST cannot be negative")
        return v

    @field_validator("PAYMENT_GATEWAY_TIMEOUT")
    @classmethod
    def validate_gateway_timeout(cls, v):
        if v <= 0:
            raise ValueError("PAYMENT_GATEWAY_TIMEOUT must be positive")
        if v > 120:
            raise ValueError("PAYMENT_GATEWAY_TIMEOUT should not exceed 120 seconds")
        return v

    @field_validator("DB_POOL_SIZE")
    @classmethod
    def validate_pool_size(cls, v):
        if v < 1:
            raise ValueError("DB_POOL_SIZE must be at least 1")
        if v > 100:
            raise ValueError("DB_POOL_SIZE should not exceed 100")
        return v

    @field_validator("DB_MAX_OVERFLOW")
    @classmethod
    def validate_max_overflow(cls, v):
        if v < 0:
            raise ValueError("DB_MAX_OVERFLOW must be 0 or greater")
        if v > 200:
            raise ValueError("DB_MAX_OVERFLOW should not exceed 200")
        return v

    @computed_field
    @property
    def database_url(self) -> str:
        """Sync PostgreSQL URL (used by Alembic)"""
        if self.DB_PASSWORD:
            return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        return f"postgresql://{self.DB_USER}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @computed_field
    @property
    def redis_url(self) -> str:
        """Redis connection URL"""
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    @computed_field
    @property
    def is_development(self) -> bool:
        """Whether the app runs in a development environment"""
        return self.DEBUG or self.ENVIRONMENT.lower() in ["development", "dev", "local"]


# Settings singleton
_settings_instance = None


def get_settings() -> Settings:
    """
    Return a cached Settings instance.
    Avoids loading environment variables more than once.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
