"""Product service: catalog CRUD, cached reads and search.

Reads go through the read-through cache; every mutation invalidates the
cached views it makes stale. Image uploads and removals go to the media store.
No failure is retried and nothing is compensated: if persisting a product
fails after its photo was uploaded, the uploaded photo stays in the media store.
"""

import asyncio
import logging
import math
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

from catalog.cache import (
    ADMIN_PRODUCTS_KEY,
    CATEGORIES_KEY,
    HIGH_PRICE_KEY,
    LATEST_PRODUCTS_KEY,
    ProductCache,
    invalidate_product_cache,
    product_key,
)
from catalog.config import settings
from catalog.errors import ConflictError, NotFoundError, ValidationError
from catalog.models import MAX_PRICE, MAX_STOCK
from catalog.schemas import ProductOut, ProductUpdate, SearchResult
from catalog.services.media import MediaStoreClient, UploadedImage
from catalog.services.query import build_product_query
from catalog.services.store import ProductStore

logger = logging.getLogger(__name__)

LATEST_PRODUCTS_LIMIT = 5


def parse_product_id(product_id: str | uuid.UUID) -> uuid.UUID:
    """Validate a product identifier.

    Raises:
        ValidationError: If the identifier is not a UUID.
    """
    if isinstance(product_id, uuid.UUID):
        return product_id
    try:
        return uuid.UUID(str(product_id))
    except ValueError as e:
        raise ValidationError("Invalid product id") from e


class ProductService:
    """Orchestrates the product store, the cache and the media store."""

    def __init__(
        self,
        store: ProductStore,
        cache: ProductCache,
        media: MediaStoreClient,
        folder: str | None = None,
        page_size: int | None = None,
    ) -> None:
        self.store = store
        self.cache = cache
        self.media = media
        self.folder = folder or settings.cloudinary_folder
        self.page_size = page_size or settings.product_per_page

    async def _cached(self, key: str, load: Callable[[], Awaitable[Any]]) -> Any:
        if self.cache.has(key):
            return self.cache.get(key)
        value = await load()
        self.cache.set(key, value)
        return value

    async def create_product(
        self,
        name: str | None,
        price: float | None,
        stock: int | None,
        category: str | None,
        photo: UploadedImage | None,
    ) -> ProductOut:
        """Create a product and upload its photo.

        Raises:
            ValidationError: If the photo or any field is missing, or a number is
                negative, not finite or too large for its column.
            ConflictError: If a product with the same name exists.
            MediaStoreError: If the photo upload fails.
        """
        if photo is None:
            raise ValidationError("Please enter photo")
        if not name or price is None or stock is None or not category:
            raise ValidationError("Please enter all fields")
        if not math.isfinite(price):
            raise ValidationError("Price must be a number")
        if price < 0 or stock < 0:
            raise ValidationError("Price and stock must not be negative")
        if price > MAX_PRICE or stock > MAX_STOCK:
            raise ValidationError("Price or stock is too large")

        name = name.strip().lower()
        if await self.store.find_one_by_name(name) is not None:
            raise ConflictError("Please enter a unique name for the new product")

        uploaded = await self.media.upload(photo.content, self.folder, photo.content_type)
        product = await self.store.create(
            name=name,
            price=price,
            stock=stock,
            category=category.strip().lower(),
            photo=uploaded,
        )
        invalidate_product_cache(self.cache)

        logger.info("Created product %s (%s)", product.id, product.name)
        return ProductOut.model_validate(product)

    async def get_latest_products(self) -> list[ProductOut]:
        """The most recently created products, newest first."""

        async def load() -> list[ProductOut]:
            products = await self.store.list_newest(limit=LATEST_PRODUCTS_LIMIT)
            return [ProductOut.model_validate(p) for p in products]

        return await self._cached(LATEST_PRODUCTS_KEY, load)

    async def get_highest_price(self) -> float | None:
        """Highest product price in the catalog, None if the catalog is empty."""
        return await self._cached(HIGH_PRICE_KEY, self.store.highest_price)

    async def get_categories(self) -> list[str]:
        return await self._cached(CATEGORIES_KEY, self.store.distinct_categories)

    async def get_admin_products(self) -> list[ProductOut]:
        """Every product, newest first."""

        async def load() -> list[ProductOut]:
            products = await self.store.list_newest()
            return [ProductOut.model_validate(p) for p in products]

        return await self._cached(ADMIN_PRODUCTS_KEY, load)

    async def get_product(self, product_id: str | uuid.UUID) -> ProductOut:
        """Fetch a single product.

        Raises:
            ValidationError: If the id is malformed.
            NotFoundError: If no product has this id.
        """
        pid = parse_product_id(product_id)
        key = product_key(pid)
        if self.cache.has(key):
            return self.cache.get(key)

        product = await self.store.find_by_id(pid)
        if product is None:
            raise NotFoundError("Product not found")

        result = ProductOut.model_validate(product)
        self.cache.set(key, result)
        return result

    async def delete_product(self, product_id: str | uuid.UUID) -> None:
        """Delete a product and its hosted photo.

        Raises:
            ValidationError: If the id is malformed.
            NotFoundError: If no product has this id.
            MediaStoreError: If the photo removal fails.
        """
        pid = parse_product_id(product_id)
        product = await self.store.find_by_id_and_delete(pid)
        if product is None:
            raise NotFoundError("Product not found")

        await self.media.remove(product.photo_public_id)
        invalidate_product_cache(self.cache, pid)

        logger.info("Deleted product %s (%s)", pid, product.name)

    async def update_product(
        self,
        product_id: str | uuid.UUID,
        changes: ProductUpdate,
        photo: UploadedImage | None = None,
    ) -> ProductOut:
        """Apply a partial update, optionally replacing the photo.

        Only fields the caller explicitly provided are written. A new photo
        removes the old hosted image before uploading the replacement.

        Raises:
            ValidationError: If the id is malformed or nothing was provided.
            NotFoundError: If no product has this id.
            ConflictError: If the new name is taken.
            MediaStoreError: If the photo removal or upload fails.
        """
        pid = parse_product_id(product_id)
        fields = changes.provided_fields()
        if not fields and photo is None:
            raise ValidationError("Please enter something first")

        product = await self.store.find_by_id(pid)
        if product is None:
            raise NotFoundError("Product not found")

        for field in ("name", "category"):
            if field in fields:
                fields[field] = fields[field].strip().lower()

        # Checked before the photo is replaced
        if "name" in fields:
            existing = await self.store.find_one_by_name(fields["name"])
            if existing is not None and existing.id != pid:
                raise ConflictError("Another product already uses this name")

        for field, value in fields.items():
            setattr(product, field, value)

        if photo is not None:
            await self.media.remove(product.photo_public_id)
            product.photo = await self.media.upload(
                photo.content, self.folder, photo.content_type
            )

        product = await self.store.save(product)
        invalidate_product_cache(self.cache, pid)

        logger.info("Updated product %s fields=%s photo=%s", pid, sorted(fields), photo is not None)
        return ProductOut.model_validate(product)

    async def search_products(
        self,
        search: str | None = None,
        price: Any = None,
        category: str | None = None,
        sort: str | None = None,
        page: Any = None,
    ) -> SearchResult:
        """One page of products matching the filters, plus the page count.

        The page query and the count query run concurrently. Pages past the
        last one come back empty.
        """
        query = build_product_query(
            search=search,
            price=price,
            category=category,
            sort=sort,
            page=page,
            page_size=self.page_size,
        )
        products, total = await asyncio.gather(
            self.store.search(query),
            self.store.count(query.filters),
        )
        return SearchResult(
            total_pages=query.pagination.total_pages(total),
            filtered_products=[ProductOut.model_validate(p) for p in products],
        )
