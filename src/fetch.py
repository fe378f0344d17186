"""HTTP client for the WooCommerce REST API."""

import logging
from typing import Any, Optional

import httpx

from config import Settings

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """A request to the store API failed."""


class CommerceClient:
    """Async client for the store's /wp-json/wc/v3/ endpoints."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        headers = {"User-Agent": "shop-cache/1.0"}
        auth = None
        # A customer session replaces the store's API key pair
        if settings.session_token:
            headers["Authorization"] = f"Bearer {settings.session_token}"
        else:
            auth = httpx.BasicAuth(settings.consumer_key, settings.consumer_secret)

        self.store_url = settings.store_url.rstrip("/")
        self.http_client = httpx.AsyncClient(
            base_url=settings.api_base_url,
            auth=auth,
            timeout=settings.http_timeout,
            follow_redirects=True,
            headers=headers,
            transport=transport,
        )

    async def _get(self, endpoint: str, params: Optional[dict[str, Any]] = None) -> Any:
        """GET an endpoint and return the decoded JSON body."""
        try:
            response = await self.http_client.get(endpoint, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.warning("HTTP %s from %s", e.response.status_code, endpoint)
            raise FetchError(f"HTTP error {e.response.status_code} fetching {endpoint}") from e
        except httpx.TimeoutException as e:
            logger.warning("Timeout fetching %s", endpoint)
            raise FetchError(f"Timeout fetching {endpoint}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Error fetching %s: %s", endpoint, e)
            raise FetchError(f"Error fetching {endpoint}: {str(e)}") from e

    # Products

    async def get_products(self, params: Optional[dict[str, Any]] = None) -> list[dict]:
        return await self._get("products", params)

    async def get_product(self, product_id: int) -> dict:
        return await self._get(f"products/{product_id}")

    # Categories

    async def get_categories(self, params: Optional[dict[str, Any]] = None) -> list[dict]:
        return await self._get("products/categories", {"per_page": 100, **(params or {})})

    async def aclose(self) -> None:
        await self.http_client.aclose()
