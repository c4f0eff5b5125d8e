"""Business logic services for the product catalog."""

from catalog.services.media import (
    MediaStoreClient,
    MediaStoreError,
    UploadedImage,
)
from catalog.services.products import ProductService, parse_product_id
from catalog.services.query import (
    Pagination,
    ProductFilters,
    ProductQuery,
    SortDirection,
    build_product_query,
)
from catalog.services.store import ProductStore

__all__ = [
    "MediaStoreClient",
    "MediaStoreError",
    "Pagination",
    "ProductFilters",
    "ProductQuery",
    "ProductService",
    "ProductStore",
    "SortDirection",
    "UploadedImage",
    "build_product_query",
    "parse_product_id",
]
