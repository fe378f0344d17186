"""Transform WooCommerce REST payloads into app models."""

from typing import Any, Optional

from models import Category, Product, ProductCategory, Rating
from parsers.content import decode_entities, description_to_markdown, strip_html


def _to_float(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def absolute_image_url(url: str, store_url: Optional[str]) -> str:
    """Prefix relative image paths with the store URL."""
    if not url or url.startswith("http") or not store_url:
        return url or ""
    return f"{store_url.rstrip('/')}/{url.lstrip('/')}"


def _first_image(raw: dict) -> str:
    images = raw.get("images")
    if images:
        first = images[0]
        if isinstance(first, dict):
            return first.get("src") or ""
        return str(first)

    image = raw.get("image")
    if isinstance(image, str):
        return image
    if isinstance(image, dict):
        return image.get("src") or image.get("url") or ""
    return ""


def transform_product(raw: dict, store_url: Optional[str] = None) -> Product:
    """Transform a single WooCommerce product."""
    raw_categories = raw.get("categories")
    categories = None
    if isinstance(raw_categories, list):
        categories = [
            ProductCategory(
                id=cat.get("id"),
                name=decode_entities(cat.get("name") or ""),
                slug=cat.get("slug") or "",
            )
            for cat in raw_categories
        ]

    category = "General"
    category_id = None
    if raw_categories:
        first = raw_categories[0]
        category = decode_entities(first.get("name") or first.get("slug") or "General")
        category_id = first.get("id")

    rating = None
    if raw.get("average_rating"):
        rating = Rating(
            rate=_to_float(raw["average_rating"]),
            count=raw.get("rating_count") or 0,
        )

    return Product(
        id=raw["id"],
        title=decode_entities(raw.get("name") or raw.get("title") or "Untitled Product"),
        image=absolute_image_url(_first_image(raw), store_url),
        price=_to_float(raw.get("price")),
        original_price=_to_float(raw.get("regular_price") or raw.get("price")),
        description=description_to_markdown(
            raw.get("description") or raw.get("short_description") or ""
        ),
        summary=strip_html(raw.get("short_description") or ""),
        category=category,
        category_id=category_id,
        categories=categories,
        rating=rating,
    )


def transform_products(raw: Any, store_url: Optional[str] = None) -> list[Product]:
    """Transform a list of WooCommerce products; anything else yields []."""
    if not isinstance(raw, list):
        return []
    return [transform_product(item, store_url) for item in raw]


def transform_category(raw: dict, store_url: Optional[str] = None) -> Category:
    """Transform a single WooCommerce category."""
    return Category(
        category_id=raw.get("id") or raw.get("category_id"),
        name=decode_entities(raw.get("name") or "Uncategorized"),
        image=absolute_image_url(_first_image(raw), store_url) or None,
    )


def transform_categories(raw: Any, store_url: Optional[str] = None) -> list[Category]:
    """Transform a list of WooCommerce categories; anything else yields []."""
    if not isinstance(raw, list):
        return []
    return [transform_category(item, store_url) for item in raw]
