"""Cache key builders for storefront resources."""

import json
from typing import Any, Optional

WISHLIST_KEY = "wishlist"


def _canonical(params: Optional[dict[str, Any]]) -> str:
    # Sorted so that equal requests share a key regardless of argument order
    return json.dumps(params or {}, sort_keys=True, separators=(",", ":"), default=str)


def products_key(params: Optional[dict[str, Any]] = None) -> str:
    return f"products-{_canonical(params)}"


def categories_key(params: Optional[dict[str, Any]] = None) -> str:
    return f"categories-{_canonical(params)}"


def featured_key(category_slug: str) -> str:
    return f"featured-{category_slug}"


def product_key(product_id: int) -> str:
    return f"product-{product_id}"
