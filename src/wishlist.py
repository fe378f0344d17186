"""Customer wishlist kept in process memory."""

import logging
import threading

from cache import KeyedCache
from fetch import CommerceClient
from keys import WISHLIST_KEY

logger = logging.getLogger(__name__)


class WishlistService:
    """
    Wishlist of raw product payloads.

    Every mutation invalidates the cached wishlist so the next read through
    the cache reports stale and refetches.
    """

    def __init__(self, client: CommerceClient, cache: KeyedCache):
        self.client = client
        self.cache = cache
        self._items: list[dict] = []
        self._lock = threading.Lock()

    async def items(self) -> list[dict]:
        with self._lock:
            return list(self._items)

    async def add(self, product_id: int) -> list[dict]:
        """Add a product by id; adding one already on the list changes nothing."""
        with self._lock:
            if any(item.get("id") == product_id for item in self._items):
                return list(self._items)

        product = await self.client.get_product(product_id)

        with self._lock:
            if not any(item.get("id") == product_id for item in self._items):
                self._items.append(product)
            items = list(self._items)

        logger.info("Added product %s to wishlist", product_id)
        self.cache.invalidate(WISHLIST_KEY)
        return items

    async def remove(self, product_id: int) -> list[dict]:
        with self._lock:
            self._items = [item for item in self._items if item.get("id") != product_id]
            items = list(self._items)

        logger.info("Removed product %s from wishlist", product_id)
        self.cache.invalidate(WISHLIST_KEY)
        return items
