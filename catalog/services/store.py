"""Async SQLAlchemy store for catalog products.

Each call opens its own session from the session factory, so independent
calls (such as the page query and the count query of a search) can run
concurrently.
"""

import logging
import uuid
from typing import Any

from sqlalchemy import Select, desc, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog.database import async_session_factory
from catalog.errors import ConflictError
from catalog.models import Product
from catalog.services.query import ProductFilters, ProductQuery

logger = logging.getLogger(__name__)

# Largest OFFSET PostgreSQL accepts (BIGINT)
MAX_OFFSET = 2**63 - 1


def build_search_statement(query: ProductQuery) -> Select[tuple[Product]]:
    """SELECT for one page of products matching the query filters."""
    statement = select(Product).where(*query.filters.conditions())
    order_by = query.filters.order_by()
    if order_by:
        statement = statement.order_by(*order_by)
    return statement.offset(query.pagination.offset).limit(query.pagination.limit)


def build_count_statement(filters: ProductFilters) -> Select[tuple[int]]:
    """SELECT COUNT(*) over the same filters, ignoring pagination."""
    return select(func.count()).select_from(Product).where(*filters.conditions())


class ProductStore:
    """Data access for the products table."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ) -> None:
        self._session_factory = session_factory or async_session_factory

    async def find_one_by_name(self, name: str) -> Product | None:
        async with self._session_factory() as session:
            result = await session.execute(select(Product).where(Product.name == name))
            return result.scalar_one_or_none()

    async def find_by_id(self, product_id: uuid.UUID) -> Product | None:
        async with self._session_factory() as session:
            return await session.get(Product, product_id)

    async def list_newest(self, limit: int | None = None) -> list[Product]:
        """Products ordered by creation time, newest first."""
        statement = select(Product).order_by(desc(Product.created_at))
        if limit is not None:
            statement = statement.limit(limit)
        async with self._session_factory() as session:
            result = await session.execute(statement)
            return list(result.scalars().all())

    async def highest_price(self) -> float | None:
        """Price of the most expensive product, or None for an empty catalog."""
        statement = select(Product.price).order_by(desc(Product.price)).limit(1)
        async with self._session_factory() as session:
            result = await session.execute(statement)
            return result.scalar_one_or_none()

    async def distinct_categories(self) -> list[str]:
        statement = select(Product.category).distinct().order_by(Product.category)
        async with self._session_factory() as session:
            result = await session.execute(statement)
            return list(result.scalars().all())

    async def search(self, query: ProductQuery) -> list[Product]:
        """One page of matching products; pages past any possible row are empty."""
        if query.pagination.offset > MAX_OFFSET:
            return []
        async with self._session_factory() as session:
            result = await session.execute(build_search_statement(query))
            return list(result.scalars().all())

    async def count(self, filters: ProductFilters) -> int:
        async with self._session_factory() as session:
            result = await session.execute(build_count_statement(filters))
            return int(result.scalar_one())

    async def create(self, **fields: Any) -> Product:
        """Insert a new product.

        Raises:
            ConflictError: If the unique name index rejects the insert.
        """
        product = Product(**fields)
        async with self._session_factory() as session:
            session.add(product)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                logger.warning("Rejected product insert for name %r: %s", product.name, e)
                raise ConflictError("Please enter a unique name for the new product") from e
            await session.refresh(product)
        return product

    async def save(self, product: Product) -> Product:
        """Persist changes made to a product loaded by another session.

        Raises:
            ConflictError: If the new name collides with another product.
        """
        async with self._session_factory() as session:
            merged = await session.merge(product)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                logger.warning("Rejected update for product %s: %s", product.id, e)
                raise ConflictError("Another product already uses this name") from e
            await session.refresh(merged)
        return merged

    async def find_by_id_and_delete(self, product_id: uuid.UUID) -> Product | None:
        """Delete a product and return it, or None if it did not exist."""
        async with self._session_factory() as session:
            product = await session.get(Product, product_id)
            if product is None:
                return None
            await session.delete(product)
            await session.commit()
        return product
