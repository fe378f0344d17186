"""
Configuration for the storefront cache server.
"""

import logging
import sys
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Storefront configuration loaded from environment variables.

    Environment variables:
        STORE_URL: Base URL of the WordPress/WooCommerce store.
        CONSUMER_KEY / CONSUMER_SECRET: WooCommerce REST API credentials.
        SESSION_TOKEN: Optional JWT sent as a bearer token.
        CACHE_MAX_AGE: Seconds before cached data is considered stale. Default: 300
        HTTP_TIMEOUT: Request timeout in seconds. Default: 30
        PROMO_CATEGORY_SLUG: Category shown as featured products. Default: daily-deals
        PRODUCTS_PER_PAGE: Page size for product listings. Default: 20
        LOG_LEVEL: Logging level name. Default: INFO
    """

    store_url: str = Field(
        default="http://localhost",
        alias="STORE_URL",
        description="Base URL of the store (without /wp-json)",
    )

    consumer_key: str = Field(default="", alias="CONSUMER_KEY")
    consumer_secret: str = Field(default="", alias="CONSUMER_SECRET")

    session_token: Optional[str] = Field(
        default=None,
        alias="SESSION_TOKEN",
        description="JWT for customer-scoped requests",
    )

    cache_max_age: float = Field(
        default=300.0,  # 5 minutes
        alias="CACHE_MAX_AGE",
        description="Cache staleness window in seconds",
    )

    http_timeout: float = Field(default=30.0, alias="HTTP_TIMEOUT")

    promo_category_slug: str = Field(
        default="daily-deals",
        alias="PROMO_CATEGORY_SLUG",
        description="Category slug used for the featured products section",
    )

    products_per_page: int = Field(default=20, alias="PRODUCTS_PER_PAGE")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @property
    def api_base_url(self) -> str:
        """WooCommerce REST API root for this store."""
        return f"{self.store_url.rstrip('/')}/wp-json/wc/v3/"


# Global settings instance
settings = Settings()


def configure_logging(level: str = "INFO") -> None:
    """Send log records to stderr; stdout is reserved for the MCP stdio transport."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
