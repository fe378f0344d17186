#!/usr/bin/env python3
"""
shop-cache: storefront catalog MCP server

Serves products, categories, featured products and the wishlist of a
WooCommerce store. Every read goes through one in-memory KeyedCache that is
created here and handed to everything that needs it.

Environment variables:
    STORE_URL, CONSUMER_KEY, CONSUMER_SECRET: Store API access
    CACHE_MAX_AGE: Seconds before cached data is refetched (default: 300)
    PROMO_CATEGORY_SLUG: Category used for featured products (default: daily-deals)
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from mcp.server.fastmcp import FastMCP
from mcp.shared.exceptions import McpError
from mcp.types import ErrorData

from cache import KeyedCache
from config import Settings, configure_logging, settings as default_settings
from fetch import CommerceClient, FetchError
from models import Category, FeaturedProducts, Product
from resources import CachedResource, Storefront

logger = logging.getLogger(__name__)

INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

INSTRUCTIONS = """Storefront MCP Server - Browse a WooCommerce catalog.

Tools:
- list_products(category?, page?, refresh?) → Product listing
- get_product(product_id) → Product details with description
- list_categories(refresh?) → All product categories
- get_featured(slug?, refresh?) → Featured products of the promo category
- get_wishlist() / add_to_wishlist(product_id) / remove_from_wishlist(product_id)
- cache_status() → Cached keys with age and staleness
- invalidate_cache(key?) → Drop one cached key, or everything"""


# --- Formatting ---


def format_price(price: float, currency: str = "₦") -> str:
    return f"{currency}{price:.2f}"


def format_products(products: list[Product], title: str = "Products") -> str:
    lines = [f"# {title}", ""]
    if not products:
        lines.append("No products found.")
    for p in products:
        price = format_price(p.price)
        if p.original_price > p.price:
            price += f" (was {format_price(p.original_price)})"
        lines.append(f"- [{p.id}] {p.title} - {price} ({p.category})")
        if p.summary:
            lines.append(f"  {p.summary.splitlines()[0]}")
    return "\n".join(lines)


def format_product(product: Product) -> str:
    lines = [f"# {product.title}", "", f"Price: {format_price(product.price)}"]
    if product.original_price > product.price:
        lines.append(f"Regular price: {format_price(product.original_price)}")
    lines.append(f"Category: {product.category}")
    if product.rating:
        lines.append(f"Rating: {product.rating.rate:.1f} ({product.rating.count} reviews)")
    if product.image:
        lines.append(f"Image: {product.image}")
    if product.description:
        lines.extend(["", product.description])
    return "\n".join(lines)


def format_categories(categories: list[Category]) -> str:
    lines = ["# Categories", ""]
    if not categories:
        lines.append("No categories found.")
    for c in categories:
        lines.append(f"- [{c.category_id}] {c.name}")
    return "\n".join(lines)


def _fail(code: int, message: str) -> McpError:
    return McpError(ErrorData(code=code, message=message))


async def _load(resource: CachedResource, refresh: bool = False):
    """Fetch a resource, turning a failure with nothing cached into an MCP error."""
    data = await resource.fetch(force=refresh)
    if resource.state.error and resource.cache.get_entry(resource.key) is None:
        raise _fail(INTERNAL_ERROR, resource.state.error)
    return data


# --- Tools ---


class ShopTools:
    """MCP tool handlers bound to one storefront."""

    def __init__(self, storefront: Storefront):
        self.storefront = storefront
        self.cache = storefront.cache

    async def list_products(
        self, category: Optional[int] = None, page: int = 1, refresh: bool = False
    ) -> str:
        """
        List products, optionally filtered by category id.

        Args:
            category: Category id from list_categories()
            page: Page number, starting at 1
            refresh: Bypass the cache and refetch

        Returns:
            Markdown list of products with ids in [brackets].
        """
        if page < 1:
            raise _fail(INVALID_PARAMS, f"Invalid page {page}; pages start at 1")

        params: dict = {"page": page}
        if category is not None:
            params["category"] = category

        products = await _load(self.storefront.products(params), refresh)
        return format_products(products)

    async def get_product(self, product_id: int) -> str:
        """
        Get the details of one product.

        Args:
            product_id: Product id from list_products()

        Returns:
            Markdown product details.
        """
        if product_id <= 0:
            raise _fail(INVALID_PARAMS, f"Invalid product id {product_id}")

        product = await _load(self.storefront.product(product_id))
        return format_product(product)

    async def list_categories(self, refresh: bool = False) -> str:
        """
        List all product categories.

        Args:
            refresh: Bypass the cache and refetch

        Returns:
            Markdown list of categories with ids in [brackets].
        """
        categories = await _load(self.storefront.categories(), refresh)
        return format_categories(categories)

    async def get_featured(self, slug: Optional[str] = None, refresh: bool = False) -> str:
        """
        Get featured products of the promotional category.

        Args:
            slug: Category slug (defaults to the configured promo category)
            refresh: Bypass the cache and refetch

        Returns:
            Markdown list of up to four products.
        """
        featured: FeaturedProducts = await _load(self.storefront.featured(slug), refresh)
        if featured.category_id is None:
            return "# Featured\n\nNo featured category available."
        return format_products(featured.products, title=f"Featured (category {featured.category_id})")

    async def get_wishlist(self) -> str:
        """
        List the product ids on the wishlist.

        Returns:
            Markdown list of wishlist product ids.
        """
        ids = await _load(self.storefront.wishlist_items())
        if not ids:
            return "# Wishlist\n\nThe wishlist is empty."
        return "\n".join(["# Wishlist", ""] + [f"- [{product_id}]" for product_id in ids])

    async def add_to_wishlist(self, product_id: int) -> str:
        """
        Add a product to the wishlist.

        Args:
            product_id: Product id from list_products()
        """
        try:
            items = await self.storefront.wishlist.add(product_id)
        except FetchError as e:
            raise _fail(INTERNAL_ERROR, f"Failed to add product {product_id}: {str(e)}")
        return f"Product {product_id} is on the wishlist ({len(items)} items)."

    async def remove_from_wishlist(self, product_id: int) -> str:
        """
        Remove a product from the wishlist.

        Args:
            product_id: Product id on the wishlist
        """
        items = await self.storefront.wishlist.remove(product_id)
        return f"Product {product_id} removed from the wishlist ({len(items)} items)."

    async def cache_status(self) -> str:
        """
        Show what is cached and whether each entry is stale.

        Returns:
            Markdown list of cache keys with their age in seconds.
        """
        keys = sorted(self.cache.keys())
        lines = ["# Cache", "", f"{len(keys)} entr{'y' if len(keys) == 1 else 'ies'}"]
        for key in keys:
            age = self.cache.age(key)
            if age is None:
                continue
            flag = "stale" if self.cache.is_stale(key) else "fresh"
            lines.append(f"- `{key}`: {age:.0f}s old, {flag}")
        return "\n".join(lines)

    async def invalidate_cache(self, key: Optional[str] = None) -> str:
        """
        Drop cached data so the next read refetches it.

        Args:
            key: Cache key from cache_status(); omit to clear everything
        """
        if key is None:
            self.cache.invalidate_all()
            return "Cache cleared."
        self.cache.invalidate(key)
        return f"Invalidated `{key}`."


def client_lifespan(client: CommerceClient):
    """Server lifespan that closes the store client on shutdown."""

    @asynccontextmanager
    async def lifespan(server: FastMCP) -> AsyncIterator[dict]:
        try:
            yield {}
        finally:
            await client.aclose()
            logger.info("Closed store client")

    return lifespan


def create_server(
    settings: Settings,
    cache: Optional[KeyedCache] = None,
    client: Optional[CommerceClient] = None,
) -> FastMCP:
    """Compose the cache, API client and tools into an MCP server."""
    cache = cache or KeyedCache(default_max_age=settings.cache_max_age)
    client = client or CommerceClient(settings)
    storefront = Storefront(
        client,
        cache,
        per_page=settings.products_per_page,
        promo_category_slug=settings.promo_category_slug,
    )
    tools = ShopTools(storefront)

    mcp = FastMCP("shop-cache", instructions=INSTRUCTIONS, lifespan=client_lifespan(client))
    for handler in (
        tools.list_products,
        tools.get_product,
        tools.list_categories,
        tools.get_featured,
        tools.get_wishlist,
        tools.add_to_wishlist,
        tools.remove_from_wishlist,
        tools.cache_status,
        tools.invalidate_cache,
    ):
        mcp.tool()(handler)

    logger.info("shop-cache ready for %s (cache max age %ss)", settings.store_url, cache.default_max_age)
    return mcp


def main() -> None:
    configure_logging(default_settings.log_level)
    create_server(default_settings).run()


if __name__ == "__main__":
    main()
