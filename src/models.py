"""
Data models for the storefront cache server.
"""

from typing import Optional

from pydantic import BaseModel, Field


# --- Catalog Models ---

class ProductCategory(BaseModel):
    """A category reference attached to a product."""
    id: int
    name: str
    slug: str = ""


class Rating(BaseModel):
    """Average customer rating of a product."""
    rate: float
    count: int = 0


class Product(BaseModel):
    """A product in the shape the app renders."""
    id: int
    title: str
    image: str = Field(default="", description="Absolute URL of the first product image")
    price: float = 0.0
    original_price: float = Field(default=0.0, description="Regular price before any sale")
    description: str = ""
    summary: str = Field(default="", description="Plain-text short description")
    category: str = Field(default="General", description="Name of the first category")
    category_id: Optional[int] = None
    categories: Optional[list[ProductCategory]] = None
    rating: Optional[Rating] = None


class Category(BaseModel):
    """A product category."""
    category_id: int
    name: str
    image: Optional[str] = None


class FeaturedProducts(BaseModel):
    """Products of the promotional category shown on the home screen."""
    category_id: Optional[int] = None
    products: list[Product] = Field(default_factory=list)
