"""
Stale-while-revalidate access to storefront data.

A ``CachedResource`` pairs one cache key with the coroutine that produces its
value. ``current()`` answers immediately from the cache; ``fetch()`` asks the
cache whether the entry is stale and only then runs the loader and stores the
result. The cache itself never learns how the data was produced.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from pydantic import ValidationError

from cache import KeyedCache
from fetch import CommerceClient, FetchError
from keys import WISHLIST_KEY, categories_key, featured_key, product_key, products_key
from models import Category, FeaturedProducts, Product
from parsers import transform_categories, transform_product, transform_products
from wishlist import WishlistService

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Network failures plus payloads that do not have the expected shape
LOADER_ERRORS = (FetchError, ValidationError, KeyError, TypeError, AttributeError, ValueError)


@dataclass
class ResourceState:
    """What a screen needs to render one resource."""

    data: Any
    loading: bool = False
    error: Optional[str] = None


class CachedResource(Generic[T]):
    """One cache key plus the loader that refreshes it."""

    def __init__(
        self,
        cache: KeyedCache,
        key: str,
        loader: Callable[[], Awaitable[Optional[T]]],
        placeholder: Any,
        max_age: Optional[float] = None,
        select: Optional[Callable[[T], Any]] = None,
        label: str = "data",
    ):
        self.cache = cache
        self.key = key
        self.loader = loader
        self.placeholder = placeholder
        self.max_age = max_age
        self.select = select or (lambda value: value)
        self.label = label
        self.state = ResourceState(data=self.current())

    def current(self) -> Any:
        """Cached data (possibly stale), or the placeholder when nothing is cached."""
        entry = self.cache.get_entry(self.key)
        if entry is None:
            return self.placeholder
        return self.select(entry.value)

    async def fetch(self, force: bool = False) -> Any:
        """
        Return fresh data, running the loader only when needed.

        A loader returning None means there was nothing to store; the cache and
        the current data are left as they are. Fetch errors and malformed payloads
        are recorded on ``state.error`` and never reach the cache.
        """
        if not force and not self.cache.is_stale(self.key, self.max_age):
            entry = self.cache.get_entry(self.key)
            if entry is not None:
                logger.debug("cache hit %r", self.key)
                self.state.data = self.select(entry.value)
                return self.state.data

        self.state.loading = True
        self.state.error = None
        try:
            value = await self.loader()
        except LOADER_ERRORS as e:
            logger.warning("Failed to fetch %s for %r: %s", self.label, self.key, e)
            self.state.error = str(e) or f"Failed to fetch {self.label}"
            return self.state.data
        finally:
            self.state.loading = False

        if value is not None:
            self.cache.set(self.key, value)
            self.state.data = self.select(value)
        return self.state.data

    async def refetch(self) -> Any:
        return await self.fetch(force=True)

    def invalidate(self) -> None:
        self.cache.invalidate(self.key)


class Storefront:
    """Builds cached resources over one client, one cache and one wishlist."""

    def __init__(
        self,
        client: CommerceClient,
        cache: KeyedCache,
        per_page: int = 20,
        promo_category_slug: str = "daily-deals",
        max_age: Optional[float] = None,
    ):
        self.client = client
        self.cache = cache
        self.per_page = per_page
        self.promo_category_slug = promo_category_slug
        self.max_age = max_age
        self.wishlist = WishlistService(client, cache)

    def products(self, params: Optional[dict[str, Any]] = None) -> CachedResource[list[Product]]:
        """Product listing; the key covers the caller's params, not the page defaults."""
        query = {"per_page": self.per_page, "page": 1, **(params or {})}

        async def load() -> list[Product]:
            return transform_products(await self.client.get_products(query), self.client.store_url)

        return CachedResource(
            self.cache, products_key(params), load, [], self.max_age, label="products"
        )

    def product(self, product_id: int) -> CachedResource[Product]:
        async def load() -> Product:
            raw = await self.client.get_product(product_id)
            return transform_product(raw, self.client.store_url)

        return CachedResource(
            self.cache, product_key(product_id), load, None, self.max_age, label="product"
        )

    def categories(self, params: Optional[dict[str, Any]] = None) -> CachedResource[list[Category]]:
        async def load() -> list[Category]:
            raw = await self.client.get_categories(params)
            return transform_categories(raw, self.client.store_url)

        return CachedResource(
            self.cache, categories_key(params), load, [], self.max_age, label="categories"
        )

    def wishlist_items(self) -> CachedResource[list[dict]]:
        """Wishlist resource: caches the full items, exposes product ids."""
        return CachedResource(
            self.cache,
            WISHLIST_KEY,
            self.wishlist.items,
            [],
            self.max_age,
            select=lambda items: [item["id"] for item in items],
            label="wishlist",
        )

    def featured(self, category_slug: Optional[str] = None) -> CachedResource[FeaturedProducts]:
        """Up to four products of the promo category, or of the first category as a fallback."""
        slug = category_slug or self.promo_category_slug

        async def load() -> Optional[FeaturedProducts]:
            categories = await self.client.get_categories({"slug": slug})
            if not categories:
                categories = await self.client.get_categories({"per_page": 1})
            if not categories:
                return None

            category = categories[0]
            raw = await self.client.get_products({"category": category["id"], "per_page": 4})
            return FeaturedProducts(
                category_id=category["id"],
                products=transform_products(raw, self.client.store_url),
            )

        return CachedResource(
            self.cache,
            featured_key(slug),
            load,
            FeaturedProducts(),
            self.max_age,
            label="featured products",
        )
