import os
import logging
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator


logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = str(Path(__file__).resolve().parent.parent / "data" / "products.json")


class Settings(BaseSettings):
    # --- APP BASICS ---
    app_name: str = "Toy Storefront"
    environment: str = "development"
    allowed_hosts: str = "*"

    # --- CART STORAGE ---
    # "memory" keeps carts in-process, "redis" persists them across restarts
    cart_storage: str = "memory"
    redis_url: str = "redis://localhost:6379/0"
    cart_storage_key: str = "cart"
    cart_ttl: int = 1209600  # 14 days
    cart_cookie_name: str = "cart_session"

    # --- STOREFRONT ---
    currency_symbol: str = "€"
    catalog_path: str = DEFAULT_CATALOG_PATH

    # --- ANALYTICS ---
    analytics_channels: List[str] = ["log"]
    analytics_webhook_url: Optional[str] = None
    analytics_timeout: float = 2.0

    contact_rate_limit: str = "5/minute"


    @field_validator("cart_storage")
    @classmethod
    def known_backend(cls, v: str) -> str:
        v = v.lower()
        if v not in ("memory", "redis"):
            raise ValueError("cart_storage must be 'memory' or 'redis'")
        return v

    def __init__(self, **values):
        super().__init__(**values)

        # Inside Docker Compose the Redis host is the service name
        is_docker = os.path.exists("/.dockerenv")

        if is_docker:
            logger.info("Local Docker detected. Routing Redis traffic to the 'redis' service.")
            self.redis_url = self.redis_url.replace("localhost", "redis").replace("127.0.0.1", "redis")


    model_config = SettingsConfigDict(
        # System environment variables always override the .env files.
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="allow",
        case_sensitive=False
    )

settings = Settings()
