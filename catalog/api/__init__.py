"""FastAPI routes for the product catalog."""

from catalog.api.products import router as products_router

__all__ = ["products_router"]
