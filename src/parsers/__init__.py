"""Parsers for WooCommerce payloads and the HTML they embed."""

from parsers.catalog import (
    absolute_image_url,
    transform_categories,
    transform_category,
    transform_product,
    transform_products,
)
from parsers.content import decode_entities, description_to_markdown, strip_html

__all__ = [
    # Catalog transforms
    "transform_product",
    "transform_products",
    "transform_category",
    "transform_categories",
    "absolute_image_url",
    # HTML content
    "decode_entities",
    "strip_html",
    "description_to_markdown",
]
