"""Storefront client configuration"""

from decimal import Decimal
from pathlib import Path
from typing import Optional
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    model_config = SettingsConfigDict(
        env_prefix="BATCHCART_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Batch Storefront"
    debug: bool = False

    # Remote storefront
    api_base_url: str = "http://localhost:8000/api"
    health_url: Optional[str] = None
    request_timeout: float = 30.0

    # Cart persistence
    cart_store_path: str = str(Path.home() / ".batchcart" / "cart.json")
    cart_storage_key: str = "batchcart:cart"

    # Cart behaviour
    notification_delay: float = 2.0
    min_order_setting_name: str = "min_order_value"
    default_min_order_value: Decimal = Decimal("0")
    currency_symbol: str = "₹"

    # Keep-alive pinger
    keep_alive_interval: float = 60.0

    # Admin credentials (optional, for administrative sessions)
    admin_username: Optional[str] = None
    admin_password: Optional[str] = None

    def get_health_url(self) -> str:
        """Health endpoint lives beside the API root, not under it"""
        if self.health_url:
            return self.health_url

        base = self.api_base_url.rstrip("/")
        if base.endswith("/api"):
            base = base[: -len("/api")]
        return f"{base}/health"

    @property
    def admin_configured(self) -> bool:
        """Check if admin credentials are configured"""
        return all([self.admin_username, self.admin_password])


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
