"""SQLAlchemy models for the product catalog."""

from catalog.models.product import MAX_PRICE, MAX_STOCK, Photo, Product

__all__ = [
    "MAX_PRICE",
    "MAX_STOCK",
    "Photo",
    "Product",
]
